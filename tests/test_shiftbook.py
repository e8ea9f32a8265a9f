from datetime import date
from decimal import Decimal

import pytest

from shiftbook import cli
from shiftbook.csv_io import export_shifts, import_shifts
from shiftbook.role_configs import current_configs, current_rates, end_config, supersede_config, tip_pool_groups
from shiftbook.storage import DataStore
from tipout.errors import TipoutInputError
from tipout.models import Employee, Role, RoleConfig, Shift, TipoutType
from tipout.resolver import find_overlaps


def build_store(path) -> DataStore:
    store = DataStore(path)
    store.add_role(Role("server", "Server", base_pay_rate=Decimal("2.13")))
    store.add_employee(Employee("e1", "Ada"))
    store.put_config(RoleConfig("bar-1", "server", TipoutType.BAR, "0.05", date(2024, 1, 1), tip_pool_group="floor"))
    store.add_shift(Shift("s1", date(2024, 3, 5), "e1", "server", "6", "40", "200.50", "600"))
    store.save()
    return store


def test_store_round_trips_decimals_and_dates(tmp_path):
    path = tmp_path / "store.json"
    build_store(path)

    loaded = DataStore(path)

    assert loaded.shifts["s1"].credit_tips == Decimal("200.50")
    assert loaded.shifts["s1"].date == date(2024, 3, 5)
    config = loaded.role_configs["bar-1"]
    assert config.tipout_type == TipoutType.BAR
    assert config.percentage_rate == Decimal("0.05")
    assert config.effective_to is None
    assert loaded.roles["server"].base_pay_rate == Decimal("2.13")


def test_store_rejects_shift_for_unknown_employee(tmp_path):
    store = build_store(tmp_path / "store.json")

    with pytest.raises(KeyError):
        store.add_shift(Shift("s2", date(2024, 3, 5), "nobody", "server", "4"))


def test_supersede_closes_old_rule_the_day_before(tmp_path):
    store = build_store(tmp_path / "store.json")

    new = supersede_config(
        store, "server", TipoutType.BAR, as_of=date(2024, 4, 1), percentage_rate=Decimal("0.06"), config_id="bar-2"
    )

    reloaded = DataStore(tmp_path / "store.json")
    assert reloaded.role_configs["bar-1"].effective_to == date(2024, 3, 31)
    assert reloaded.role_configs["bar-2"].effective_from == date(2024, 4, 1)
    assert new.is_open
    assert [c.id for c in current_configs(reloaded, "server")] == ["bar-2"]


def test_supersede_on_start_day_replaces_unused_rule(tmp_path):
    store = build_store(tmp_path / "store.json")

    supersede_config(store, "server", TipoutType.BAR, as_of=date(2024, 1, 1), percentage_rate=Decimal("0.04"))

    bar = [c for c in store.configs_for("server") if c.tipout_type == TipoutType.BAR]
    assert len(bar) == 1
    assert bar[0].percentage_rate == Decimal("0.04")


def test_end_config_stops_rule(tmp_path):
    store = build_store(tmp_path / "store.json")

    ended = end_config(store, "server", TipoutType.BAR, as_of=date(2024, 6, 1))

    assert [c.effective_to for c in ended] == [date(2024, 5, 31)]
    assert current_configs(store, "server") == []


def test_rule_helpers_reject_unknown_role(tmp_path):
    store = build_store(tmp_path / "store.json")

    with pytest.raises(KeyError):
        current_configs(store, "ghost")
    with pytest.raises(KeyError):
        supersede_config(store, "ghost", TipoutType.BAR, as_of=date(2024, 1, 1), percentage_rate=Decimal("0.01"))


def test_current_rates_and_pool_groups(tmp_path):
    store = build_store(tmp_path / "store.json")

    rates = current_rates(store, ["server"], date(2024, 3, 5))

    assert rates == {"Server": {"bar": Decimal("0.05"), "host": Decimal("0"), "sa": Decimal("0")}}
    assert tip_pool_groups(store) == ["floor"]


def test_csv_export_then_import(tmp_path):
    store = build_store(tmp_path / "store.json")
    path = tmp_path / "shifts.csv"

    export_shifts(path, store.find_shifts())
    shifts = import_shifts(path)

    assert shifts == store.find_shifts()


def test_cli_records_shift_and_lists_log(tmp_path, capsys, monkeypatch):
    path = tmp_path / "store.json"
    build_store(path)
    monkeypatch.setattr(cli, "DEFAULT_DATA_PATH", path)

    cli.main(["add-shift", "e1", "server", "2024-03-06", "5", "--credit", "120", "--id", "s2"])
    cli.main(["list-shifts", "--employee", "e1"])

    lines = capsys.readouterr().out.strip().splitlines()
    assert lines[0] == "Created shift s2 for 5 hours on 2024-03-06"
    assert lines[1] == "Shifts"
    assert "Ada" in lines[3]
    assert lines[-1] == "Total hours: 11.00"


def test_cli_set_config_uses_store_flag(tmp_path, capsys):
    path = tmp_path / "store.json"
    build_store(path)

    cli.main(["--store", str(path), "set-config", "server", "host", "0.03", "--as-of", "2024-02-01"])

    out = capsys.readouterr().out
    assert "host at 0.03 from 2024-02-01" in out
    assert [c.tipout_type for c in current_configs(DataStore(path), "server")] == [TipoutType.HOST, TipoutType.BAR]


def test_cli_import_reports_count(tmp_path, capsys):
    path = tmp_path / "store.json"
    store = build_store(path)
    csv_path = tmp_path / "shifts.csv"
    export_shifts(csv_path, [Shift("s9", date(2024, 3, 7), "e1", "server", "3")])

    cli.main(["--store", str(path), "import-shifts", str(csv_path)])

    assert capsys.readouterr().out.strip() == f"Imported 1 shifts from {csv_path}"
    assert "s9" in DataStore(path).shifts
    assert "s9" not in store.shifts


def test_cli_rejects_shift_for_unknown_role(tmp_path, capsys):
    path = tmp_path / "store.json"
    build_store(path)

    with pytest.raises(SystemExit):
        cli.main(["--store", str(path), "add-shift", "e1", "sommelier", "2024-03-06", "5"])

    assert "Role sommelier not found" in capsys.readouterr().err


def test_backdated_rule_fills_gap_before_scheduled_rule(tmp_path):
    store = build_store(tmp_path / "store.json")
    supersede_config(
        store, "server", TipoutType.BAR, as_of=date(2024, 4, 1), percentage_rate=Decimal("0.06"), config_id="bar-2"
    )

    new = supersede_config(
        store, "server", TipoutType.BAR, as_of=date(2024, 2, 1), percentage_rate=Decimal("0.04"), config_id="bar-3"
    )

    assert store.role_configs["bar-1"].effective_to == date(2024, 1, 31)
    assert store.role_configs["bar-2"].effective_from == date(2024, 4, 1)
    assert store.role_configs["bar-2"].is_open
    assert (new.effective_from, new.effective_to) == (date(2024, 2, 1), date(2024, 3, 31))
    assert find_overlaps("server", store.configs_for("server")) == []


def test_end_config_leaves_scheduled_rule(tmp_path):
    store = build_store(tmp_path / "store.json")
    supersede_config(
        store, "server", TipoutType.BAR, as_of=date(2024, 4, 1), percentage_rate=Decimal("0.06"), config_id="bar-2"
    )

    ended = end_config(store, "server", TipoutType.BAR, as_of=date(2024, 2, 1))

    assert [(c.id, c.effective_to) for c in ended] == [("bar-1", date(2024, 1, 31))]
    assert "bar-2" in store.role_configs


def test_cli_rejects_non_numeric_hours(tmp_path, capsys):
    path = tmp_path / "store.json"
    build_store(path)

    with pytest.raises(SystemExit):
        cli.main(["--store", str(path), "add-shift", "e1", "server", "2024-03-06", "abc"])

    assert "'abc' is not a number" in capsys.readouterr().err
    assert len(DataStore(path).shifts) == 1


def test_import_rejects_non_numeric_cell(tmp_path):
    path = tmp_path / "shifts.csv"
    path.write_text("id,date,employee_id,role_id,hours,cash_tips,credit_tips,liquor_sales\ns1,2024-03-05,e1,server,6,lots,0,0\n")

    with pytest.raises(TipoutInputError, match="'lots' is not a number"):
        import_shifts(path)
