from __future__ import annotations

from datetime import date, timedelta

from src.hr_performance_system.hr_performance_system.charges.escalation import (
    ChargeEscalationEngine,
    load_active_rule,
    select_multiplier,
)
from src.hr_performance_system.hr_performance_system.charges.model import (
    ChargeRecord,
    EscalationRule,
    EscalationTier,
)
from src.hr_performance_system.hr_performance_system.core.enums import ChargeType, ViolationType
from tests.fakes import FakeChargesRepo

TODAY = date(2025, 3, 20)

TIERS = (
    EscalationTier(occurrence_count=1, multiplier=1.0),
    EscalationTier(occurrence_count=3, multiplier=1.5),
    EscalationTier(occurrence_count=5, multiplier=2.0),
)


def _rule(violation_type=ViolationType.LATE_ARRIVAL, *, tiers=TIERS, lookback=30, active=True):
    return EscalationRule(
        rule_id="r1",
        rule_name="Repeat lateness",
        violation_type=violation_type,
        lookback_period_days=lookback,
        tiers=tuple(tiers),
        is_active=active,
    )


def _prior(n, charge_type=ChargeType.LATE_ARRIVAL, *, employee_id="emp-1", days_ago=1):
    return [
        ChargeRecord(
            employee_id=employee_id,
            charge_type=charge_type,
            charge_amount=1000.0,
            charge_date=TODAY - timedelta(days=days_ago + i),
        )
        for i in range(n)
    ]


class BrokenChargesRepo(FakeChargesRepo):
    def count_since(self, *, employee_id, charge_types, since):
        raise ConnectionError("store unavailable")


class BrokenRulesRepo:
    def get_active(self, violation_type):
        raise ConnectionError("store unavailable")


def test_fourth_occurrence_uses_three_occurrence_tier():
    engine = ChargeEscalationEngine(FakeChargesRepo(_prior(3)))

    multiplier = engine.multiplier_for(
        employee_id="emp-1",
        violation_type=ViolationType.LATE_ARRIVAL,
        rule=_rule(),
        today=TODAY,
    )

    assert multiplier == 1.5


def test_first_occurrence_uses_base_multiplier():
    engine = ChargeEscalationEngine(FakeChargesRepo())

    assert engine.multiplier_for(
        employee_id="emp-1", violation_type=ViolationType.LATE_ARRIVAL, rule=_rule(), today=TODAY
    ) == 1.0


def test_no_rule_means_multiplier_one():
    engine = ChargeEscalationEngine(FakeChargesRepo(_prior(10)))

    assert engine.multiplier_for(
        employee_id="emp-1", violation_type=ViolationType.LATE_ARRIVAL, rule=None, today=TODAY
    ) == 1.0


def test_inactive_or_mismatched_rule_is_ignored():
    engine = ChargeEscalationEngine(FakeChargesRepo(_prior(10)))

    inactive = engine.multiplier_for(
        employee_id="emp-1", violation_type=ViolationType.LATE_ARRIVAL, rule=_rule(active=False), today=TODAY
    )
    mismatched = engine.multiplier_for(
        employee_id="emp-1", violation_type=ViolationType.LATE_ARRIVAL, rule=_rule(ViolationType.ABSENCE), today=TODAY
    )

    assert inactive == 1.0
    assert mismatched == 1.0


def test_counting_failure_falls_back_to_multiplier_one():
    engine = ChargeEscalationEngine(BrokenChargesRepo())

    assert engine.multiplier_for(
        employee_id="emp-1", violation_type=ViolationType.LATE_ARRIVAL, rule=_rule(), today=TODAY
    ) == 1.0


def test_rule_lookup_failure_counts_as_no_rule():
    assert load_active_rule(BrokenRulesRepo(), ViolationType.ABSENCE) is None


def test_zero_lookback_disables_escalation_instead_of_defaulting():
    charges = FakeChargesRepo(_prior(10))
    engine = ChargeEscalationEngine(charges)

    multiplier = engine.multiplier_for(
        employee_id="emp-1", violation_type=ViolationType.LATE_ARRIVAL, rule=_rule(lookback=0), today=TODAY
    )

    assert multiplier == 1.0
    assert charges.count_calls == []


def test_only_charges_inside_lookback_window_count():
    charges = FakeChargesRepo(_prior(2, days_ago=1) + _prior(5, days_ago=40))
    engine = ChargeEscalationEngine(charges)

    count = engine.occurrence_count(
        employee_id="emp-1", violation_type=ViolationType.LATE_ARRIVAL, rule=_rule(lookback=30), today=TODAY
    )

    assert count == 3
    assert charges.count_calls[0][2] == TODAY - timedelta(days=30)


def test_other_employees_and_types_do_not_count():
    charges = FakeChargesRepo(
        _prior(4, employee_id="emp-2") + _prior(4, ChargeType.ABSENCE)
    )
    engine = ChargeEscalationEngine(charges)

    assert engine.multiplier_for(
        employee_id="emp-1", violation_type=ViolationType.LATE_ARRIVAL, rule=_rule(), today=TODAY
    ) == 1.0


def test_early_closures_count_toward_early_departure_rule():
    charges = FakeChargesRepo(_prior(1, ChargeType.EARLY_CLOSURE) + _prior(1, ChargeType.EARLY_DEPARTURE, days_ago=5))
    engine = ChargeEscalationEngine(charges)

    multiplier = engine.multiplier_for(
        employee_id="emp-1",
        violation_type=ViolationType.EARLY_DEPARTURE,
        rule=_rule(ViolationType.EARLY_DEPARTURE),
        today=TODAY,
    )

    assert multiplier == 1.5


def test_tier_selection_does_not_depend_on_storage_order():
    shuffled = (TIERS[2], TIERS[0], TIERS[1])

    for count, expected in [(1, 1.0), (2, 1.0), (3, 1.5), (4, 1.5), (5, 2.0), (12, 2.0)]:
        assert select_multiplier(TIERS, count) == expected
        assert select_multiplier(shuffled, count) == expected


def test_count_below_every_threshold_uses_base_multiplier():
    assert select_multiplier((EscalationTier(occurrence_count=3, multiplier=1.5),), 2) == 1.0
    assert select_multiplier((), 7) == 1.0


def test_build_charge_applies_multiplier_to_base_amount():
    engine = ChargeEscalationEngine(FakeChargesRepo(_prior(4)))

    charge = engine.build_charge(
        employee_id="emp-1",
        charge_type=ChargeType.LATE_ARRIVAL,
        base_amount=2000,
        rule=_rule(),
        charge_date=TODAY,
        attendance_log_id="log-7",
    )

    assert charge.charge_amount == 4000.0
    assert charge.escalation_multiplier == 2.0
    assert charge.is_escalated is True
    assert charge.attendance_log_id == "log-7"


def test_build_charge_skips_zero_amounts():
    engine = ChargeEscalationEngine(FakeChargesRepo())

    assert engine.build_charge(
        employee_id="emp-1",
        charge_type=ChargeType.ABSENCE,
        base_amount=0,
        rule=None,
        charge_date=TODAY,
    ) is None
