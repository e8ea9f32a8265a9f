from datetime import date
from decimal import Decimal

from shiftbook.storage import DataStore
from tipout.models import Employee, Role, RoleConfig, Shift, TipoutType


def seed(store: DataStore, effective_from: date = date(2024, 1, 1)) -> None:
    """Populate a small restaurant: servers pay bar and host tipouts, bartenders and hosts receive."""
    store.add_role(Role(id="server", name="Server", base_pay_rate=Decimal("2.13")))
    store.add_role(Role(id="bartender", name="Bartender", base_pay_rate=Decimal("5.00")))
    store.add_role(Role(id="host", name="Host", base_pay_rate=Decimal("12.00")))

    configs = [
        RoleConfig("server-bar", "server", TipoutType.BAR, Decimal("0.05"), effective_from, tip_pool_group="floor"),
        RoleConfig("server-host", "server", TipoutType.HOST, Decimal("0.03"), effective_from),
        RoleConfig(
            "bartender-bar",
            "bartender",
            TipoutType.BAR,
            Decimal("0"),
            effective_from,
            receives_tipout=True,
            pays_tipout=False,
            base_pay_rate=Decimal("5.00"),
        ),
        RoleConfig(
            "host-host",
            "host",
            TipoutType.HOST,
            Decimal("0"),
            effective_from,
            receives_tipout=True,
            pays_tipout=False,
            distribution_group="hosts",
        ),
    ]
    for config in configs:
        store.put_config(config)

    for employee_id, name in (("e1", "Ada"), ("e2", "Grace"), ("e3", "Linus"), ("e4", "Barbara")):
        store.add_employee(Employee(id=employee_id, name=name))

    day = date(2024, 3, 5)
    store.add_shift(Shift("s1", day, "e1", "server", Decimal("6"), Decimal("40"), Decimal("200"), Decimal("600")))
    store.add_shift(Shift("s2", day, "e2", "server", Decimal("4"), Decimal("20"), Decimal("100"), Decimal("400")))
    store.add_shift(Shift("s3", day, "e3", "bartender", Decimal("8"), Decimal("60"), Decimal("150"), Decimal("0")))
    store.add_shift(Shift("s4", day, "e4", "host", Decimal("5"), Decimal("0"), Decimal("0"), Decimal("0")))
    store.save()
