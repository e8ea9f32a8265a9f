from shiftbook.storage import DataStore

from app.core.config import settings


def get_store() -> DataStore:
    # Loaded per request so every computation works on its own snapshot.
    return DataStore(settings.store_path)
