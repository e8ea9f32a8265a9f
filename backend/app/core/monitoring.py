import sentry_sdk

from app.core.config import settings


def configure_error_monitoring() -> None:
    if not settings.sentry_dsn:
        return
    # Shift figures are wage data; keep request bodies out of events.
    sentry_sdk.init(
        dsn=settings.sentry_dsn,
        environment=settings.env,
        traces_sample_rate=0.2,
        send_default_pii=False,
        max_request_body_size="never",
    )
