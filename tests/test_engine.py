from datetime import date
from decimal import Decimal

import pytest

from tipout.engine import TipoutEngine
from tipout.errors import MissingRoleError, TipoutInputError
from tipout.models import Employee, Role, RoleConfig, Shift, TipoutType

DAY = date(2024, 3, 5)


def build_engine(*configs: RoleConfig, employees=None) -> TipoutEngine:
    roles = {
        "server": Role("server", "Server", base_pay_rate=Decimal("2.13")),
        "bartender": Role("bartender", "Bartender", base_pay_rate=Decimal("5.00")),
        "host": Role("host", "Host", base_pay_rate=Decimal("12.00")),
    }
    history = {role_id: [] for role_id in roles}
    for config in configs:
        history[config.role_id].append(config)
    return TipoutEngine(roles, history, employees)


def server_pays(tipout_type=TipoutType.BAR, rate="0.05", **kwargs) -> RoleConfig:
    return RoleConfig(f"server-{tipout_type}", "server", tipout_type, rate, date(2024, 1, 1), **kwargs)


def receives(role_id, tipout_type, **kwargs) -> RoleConfig:
    return RoleConfig(
        f"{role_id}-{tipout_type}",
        role_id,
        tipout_type,
        "0",
        date(2024, 1, 1),
        receives_tipout=True,
        pays_tipout=False,
        **kwargs,
    )


def shift(shift_id, employee_id, role_id, hours, cash="0", credit="0", liquor="0", day=DAY) -> Shift:
    return Shift(shift_id, day, employee_id, role_id, hours, cash, credit, liquor)


def test_bar_tipout_moves_from_server_to_bartender():
    engine = build_engine(server_pays(), receives("bartender", TipoutType.BAR))
    shifts = [
        shift("s1", "e1", "server", "6", credit="200", liquor="1000"),
        shift("s2", "e2", "bartender", "8"),
    ]

    report = engine.compute(shifts, DAY, DAY)

    assert report.summary_for("e1", "server").total_bar_tipout == Decimal("-50.00")
    assert report.summary_for("e2", "bartender").total_bar_tipout == Decimal("50.00")
    assert report.summary.total_bar_tipout_paid == Decimal("50.00")
    assert report.orphaned_pools == []


def test_receivers_share_by_hours():
    engine = build_engine(server_pays(), receives("bartender", TipoutType.BAR))
    shifts = [
        shift("s1", "e1", "server", "6", liquor="320"),
        shift("s2", "e2", "bartender", "4"),
        shift("s3", "e3", "bartender", "12"),
    ]

    report = engine.compute(shifts)

    assert report.summary_for("e2", "bartender").total_bar_tipout == Decimal("4.00")
    assert report.summary_for("e3", "bartender").total_bar_tipout == Decimal("12.00")


def test_leftover_cent_goes_to_smallest_employee_id_on_tie():
    engine = build_engine(server_pays(), receives("bartender", TipoutType.BAR))
    shifts = [
        shift("s1", "e1", "server", "6", liquor="200"),
        shift("s2", "b3", "bartender", "5"),
        shift("s3", "b1", "bartender", "5"),
        shift("s4", "b2", "bartender", "5"),
    ]

    report = engine.compute(shifts)

    assert report.summary_for("b1", "bartender").total_bar_tipout == Decimal("3.34")
    assert report.summary_for("b2", "bartender").total_bar_tipout == Decimal("3.33")
    assert report.summary_for("b3", "bartender").total_bar_tipout == Decimal("3.33")


def test_deltas_conserve_money_per_day():
    engine = build_engine(
        server_pays(),
        server_pays(TipoutType.HOST, rate="0.03"),
        receives("bartender", TipoutType.BAR),
        receives("host", TipoutType.HOST),
    )
    shifts = [
        shift("s1", "e1", "server", "6", credit="187.45", liquor="613.27"),
        shift("s2", "e2", "server", "3.5", credit="99.99", liquor="77.10"),
        shift("s3", "e3", "bartender", "7"),
        shift("s4", "e4", "bartender", "3"),
        shift("s5", "e5", "host", "5"),
        shift("s6", "e1", "server", "4", credit="50", liquor="120", day=date(2024, 3, 6)),
        shift("s7", "e3", "bartender", "2", day=date(2024, 3, 6)),
    ]

    report = engine.compute(shifts)

    assert [(o.date, o.tipout_type, o.amount) for o in report.orphaned_pools] == [
        (date(2024, 3, 6), TipoutType.HOST, Decimal("1.50"))
    ]
    orphaned = {(o.date, o.tipout_type, o.group) for o in report.orphaned_pools}
    for day in (DAY, date(2024, 3, 6)):
        undistributed = sum(o.amount for o in report.orphaned_pools if o.date == day)
        assert sum(d.amount for d in report.deltas if d.date == day) == -undistributed
    for pool in report.pools:
        if pool.key in orphaned:
            continue
        received = sum(
            d.amount
            for d in report.deltas
            if d.amount > 0 and (d.date, d.tipout_type, d.group) == pool.key
        )
        assert received == pool.total


def test_compute_is_repeatable():
    engine = build_engine(server_pays(), receives("bartender", TipoutType.BAR))
    shifts = [
        shift("s1", "e1", "server", "6", liquor="333.33"),
        shift("s2", "e2", "bartender", "3"),
        shift("s3", "e3", "bartender", "3"),
    ]

    first = engine.compute(shifts)
    second = engine.compute(list(reversed(shifts)))

    assert first.summaries == second.summaries
    assert first.deltas == second.deltas


def test_zero_hour_receivers_split_evenly():
    engine = build_engine(server_pays(), receives("bartender", TipoutType.BAR))
    shifts = [
        shift("s1", "e1", "server", "6", liquor="200"),
        shift("s2", "e2", "bartender", "0"),
        shift("s3", "e3", "bartender", "0"),
    ]

    report = engine.compute(shifts)

    assert report.summary_for("e2", "bartender").total_bar_tipout == Decimal("5.00")
    assert report.summary_for("e3", "bartender").total_bar_tipout == Decimal("5.00")
    assert report.summary_for("e2", "bartender").cash_tips_per_hour == Decimal("0")


def test_pool_without_receivers_is_orphaned():
    engine = build_engine(server_pays(TipoutType.HOST, rate="0.03"), receives("host", TipoutType.HOST))
    shifts = [shift("s1", "e1", "server", "6", credit="200")]

    report = engine.compute(shifts)

    assert len(report.orphaned_pools) == 1
    orphan = report.orphaned_pools[0]
    assert orphan.tipout_type == TipoutType.HOST
    assert orphan.amount == Decimal("6.00")
    assert report.summary.orphaned_total == Decimal("6.00")
    assert all(d.amount < 0 for d in report.deltas)


def test_distribution_groups_keep_pools_apart():
    engine = build_engine(
        server_pays(distribution_group="patio"),
        receives("bartender", TipoutType.BAR, distribution_group="patio"),
        RoleConfig(
            "host-bar", "host", TipoutType.BAR, "0", date(2024, 1, 1),
            receives_tipout=True, pays_tipout=False, distribution_group="lobby",
        ),
    )
    shifts = [
        shift("s1", "e1", "server", "6", liquor="200"),
        shift("s2", "e2", "bartender", "4"),
        shift("s3", "e3", "host", "4"),
    ]

    report = engine.compute(shifts)

    assert report.summary_for("e2", "bartender").total_bar_tipout == Decimal("10.00")
    assert report.summary_for("e3", "host").total_bar_tipout == Decimal("0.00")


def test_ungrouped_payers_fall_back_to_every_receiver():
    engine = build_engine(
        server_pays(TipoutType.HOST, rate="0.03"),
        receives("host", TipoutType.HOST, distribution_group="hosts"),
    )
    shifts = [
        shift("s1", "e1", "server", "6", credit="300"),
        shift("s2", "e2", "host", "5"),
    ]

    report = engine.compute(shifts)

    assert report.summary_for("e2", "host").total_host_tipout == Decimal("9.00")
    assert report.orphaned_pools == []


def test_tip_pool_shares_tips_but_not_tipouts():
    engine = build_engine(server_pays(tip_pool_group="floor"), receives("bartender", TipoutType.BAR))
    shifts = [
        shift("s1", "e1", "server", "6", cash="40", credit="200", liquor="600"),
        shift("s2", "e2", "server", "4", cash="20", credit="100", liquor="400"),
        shift("s3", "e3", "bartender", "8"),
    ]

    report = engine.compute(shifts)
    ada = report.summary_for("e1", "server")
    grace = report.summary_for("e2", "server")

    assert ada.total_cash_tips == Decimal("36.00")
    assert ada.total_credit_tips == Decimal("180.00")
    assert ada.total_gross_credit_tips == Decimal("200.00")
    assert ada.total_bar_tipout == Decimal("-30.00")
    assert ada.tip_pool_group == "floor"
    assert grace.total_cash_tips == Decimal("24.00")
    assert grace.total_bar_tipout == Decimal("-20.00")
    assert grace.total_payroll_tips == Decimal("100.00")


def test_payroll_tips_can_go_negative():
    engine = build_engine(server_pays(), receives("bartender", TipoutType.BAR))
    shifts = [
        shift("s1", "e1", "server", "5", liquor="1000"),
        shift("s2", "e2", "bartender", "5"),
    ]

    report = engine.compute(shifts)
    row = report.summary_for("e1", "server")

    assert row.total_payroll_tips == Decimal("-50.00")
    assert row.payroll_total == Decimal("-39.35")


def test_payroll_total_uses_base_pay_and_names():
    engine = build_engine(
        server_pays(),
        receives("bartender", TipoutType.BAR),
        employees={"e1": Employee("e1", "Ada"), "e2": Employee("e2", "Linus")},
    )
    shifts = [
        shift("s1", "e1", "server", "6", cash="40", credit="200", liquor="600"),
        shift("s2", "e2", "bartender", "8", cash="60", credit="150"),
    ]

    report = engine.compute(shifts)

    assert [row.employee_name for row in report.summaries] == ["Ada", "Linus"]
    linus = report.summary_for("e2", "bartender")
    assert linus.total_payroll_tips == Decimal("180.00")
    assert linus.payroll_total == Decimal("220.00")
    assert linus.credit_tips_per_hour == Decimal("22.50")
    assert report.presence[DAY].has_bar is True
    assert report.presence[DAY].has_host is False


def test_overall_splits_bar_and_server_rates():
    engine = build_engine(server_pays(), receives("bartender", TipoutType.BAR))
    shifts = [
        shift("s1", "e1", "server", "5", cash="50", credit="100", liquor="200"),
        shift("s2", "e2", "bartender", "10", cash="30", credit="40"),
    ]

    summary = engine.compute(shifts).summary

    assert summary.total_shifts == 2
    assert summary.server_cash_tips_per_hour == Decimal("10.00")
    assert summary.server_credit_tips_per_hour == Decimal("18.00")
    assert summary.bar_credit_tips_per_hour == Decimal("5.00")
    assert summary.bar_tips_per_hour == Decimal("8.00")


def test_rule_change_mid_report_applies_per_shift_date():
    engine = build_engine(
        RoleConfig("old", "server", TipoutType.BAR, "0.05", date(2024, 1, 1), date(2024, 3, 31)),
        RoleConfig("new", "server", TipoutType.BAR, "0.06", date(2024, 4, 1)),
        receives("bartender", TipoutType.BAR),
    )
    march, april = date(2024, 3, 31), date(2024, 4, 1)
    shifts = [
        shift("s1", "e1", "server", "5", liquor="100", day=march),
        shift("s2", "e1", "server", "5", liquor="100", day=april),
        shift("s3", "e2", "bartender", "5", day=march),
        shift("s4", "e2", "bartender", "5", day=april),
    ]

    report = engine.compute(shifts, march, april)

    assert report.summary_for("e1", "server").total_bar_tipout == Decimal("-11.00")
    assert report.overlaps == []


def test_overlapping_configs_are_reported():
    engine = build_engine(
        RoleConfig("a", "server", TipoutType.BAR, "0.05", date(2024, 1, 1)),
        RoleConfig("b", "server", TipoutType.BAR, "0.06", date(2024, 2, 1)),
        receives("bartender", TipoutType.BAR),
    )

    report = engine.compute([shift("s1", "e1", "server", "5", liquor="100")])

    assert len(report.overlaps) == 1
    assert report.summary_for("e1", "server").total_bar_tipout == Decimal("-6.00")


def test_unknown_role_is_rejected():
    engine = build_engine()

    with pytest.raises(MissingRoleError) as excinfo:
        engine.compute([shift("s1", "e1", "sommelier", "5")])

    assert excinfo.value.role_id == "sommelier"


def test_inverted_range_is_rejected():
    engine = build_engine()

    with pytest.raises(TipoutInputError):
        engine.compute([], date(2024, 3, 6), date(2024, 3, 5))


def test_duplicate_shift_ids_are_rejected():
    engine = build_engine()

    with pytest.raises(TipoutInputError):
        engine.compute([shift("s1", "e1", "server", "5"), shift("s1", "e2", "server", "5")])


def test_negative_amounts_are_rejected():
    with pytest.raises(TipoutInputError):
        shift("s1", "e1", "server", "-1")


def test_empty_input_gives_empty_report():
    report = build_engine(server_pays()).compute([], DAY, DAY)

    assert report.summaries == []
    assert report.deltas == []
    assert report.summary.total_shifts == 0


def test_tip_pool_carries_host_tipout_by_hours():
    engine = build_engine(
        server_pays(TipoutType.HOST, rate="0.03", tip_pool_group="floor"),
        receives("host", TipoutType.HOST),
    )
    shifts = [
        shift("s1", "e1", "server", "6", credit="200"),
        shift("s2", "e2", "server", "4", credit="100"),
        shift("s3", "e3", "host", "5"),
    ]

    report = engine.compute(shifts)

    assert report.summary_for("e1", "server").total_host_tipout == Decimal("-5.40")
    assert report.summary_for("e2", "server").total_host_tipout == Decimal("-3.60")
    assert report.summary_for("e1", "server").total_payroll_tips == Decimal("174.60")
    assert report.summary_for("e2", "server").total_payroll_tips == Decimal("116.40")
    assert report.summary_for("e3", "host").total_host_tipout == Decimal("9.00")
    assert report.summary.total_host_tipout_paid == Decimal("9.00")


def test_zero_hour_tip_pool_keeps_own_host_tipout():
    engine = build_engine(
        server_pays(TipoutType.HOST, rate="0.03", tip_pool_group="floor"),
        receives("host", TipoutType.HOST),
    )
    shifts = [
        shift("s1", "e1", "server", "0", credit="200"),
        shift("s2", "e2", "server", "0", credit="100"),
        shift("s3", "e3", "host", "5"),
    ]

    report = engine.compute(shifts)

    assert report.summary_for("e1", "server").total_host_tipout == Decimal("-6.00")
    assert report.summary_for("e2", "server").total_host_tipout == Decimal("-3.00")


@pytest.mark.parametrize("value", ["abc", "NaN", "Infinity", ""])
def test_non_numeric_amounts_are_rejected(value):
    with pytest.raises(TipoutInputError, match="is not a"):
        shift("s1", "e1", "server", value)


def test_non_numeric_rate_is_rejected():
    with pytest.raises(TipoutInputError, match="is not a number"):
        RoleConfig("A", "server", TipoutType.BAR, "five percent", date(2024, 1, 1))
