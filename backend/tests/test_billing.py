# Overview: Pytest coverage for pure time accounting.

from decimal import Decimal
from types import SimpleNamespace

from playtab.services.billing import (
    effective_seconds,
    time_charge_cents,
    round_cents,
    reference_end,
    open_interval_seconds,
    format_cents,
)
from conftest import at


class TestEffectiveSeconds:

    def test_subtracts_paused_time(self):
        assert effective_seconds(at(0), at(4500), 300) == 4200

    def test_floors_at_zero_when_paused_exceeds_gross(self):
        assert effective_seconds(at(0), at(100), 500) == 0

    def test_end_before_start_is_zero(self):
        assert effective_seconds(at(100), at(0), 0) == 0

    def test_missing_paused_total_counts_as_zero(self):
        assert effective_seconds(at(0), at(60), None) == 60


class TestTimeCharge:

    def test_group_rate_example_rounds_at_display(self):
        # 70 minutes at $16/hr
        charge = time_charge_cents(4200, 1600)
        assert charge > Decimal("1866") and charge < Decimal("1867")
        assert round_cents(charge) == 1867
        assert format_cents(charge) == "$18.67"

    def test_charge_stays_unrounded(self):
        assert time_charge_cents(1, 1000) == Decimal(1000) / Decimal(3600)

    def test_zero_rate_is_free(self):
        assert time_charge_cents(3600, 0) == 0

    def test_round_half_up(self):
        assert round_cents(Decimal("0.5")) == 1
        assert round_cents(Decimal("2.49")) == 2


class TestReferenceEnd:

    def test_active_uses_now(self):
        session = SimpleNamespace(status="active", paused_at=None, closed_at=None)
        assert reference_end(session, at(50)) == at(50)

    def test_paused_freezes_at_paused_at(self):
        session = SimpleNamespace(status="paused", paused_at=at(30), closed_at=None)
        assert reference_end(session, at(500)) == at(30)

    def test_closed_uses_closed_at(self):
        session = SimpleNamespace(status="closed", paused_at=None, closed_at=at(40))
        assert reference_end(session, at(500)) == at(40)

    def test_paused_clock_does_not_advance(self):
        session = SimpleNamespace(
            status="paused", started_at=at(0), paused_at=at(600), closed_at=None, total_paused_seconds=0
        )
        assert open_interval_seconds(session, at(700)) == open_interval_seconds(session, at(9000)) == 600


def test_format_cents():
    assert format_cents(0) == "$0.00"
    assert format_cents(700) == "$7.00"
    assert format_cents(-125) == "-$1.25"
