# Overview: Pytest coverage for moving a session between stations.

import pytest

from playtab.services.checkout_service import close_session
from playtab.services.session_service import (
    SessionConflictError,
    SessionNotFoundError,
    SessionValidationError,
    start_session,
    pause_session,
    resume_session,
)
from playtab.services.station_service import StationNotFoundError
from playtab.services.tab_service import add_item
from playtab.services.transfer_service import transfer_session
from conftest import at, make_station


class TestTransfer:

    def test_transfer_then_close_bills_each_station(self, db_session, org_a, station_a, station_b):
        session = start_session(org_id=org_a.id, station_id=station_a.id, pricing_tier="solo", now=at(0))

        moved = transfer_session(
            org_id=org_a.id, session_id=session.id, destination_station_id=station_b.id, now=at(1800)
        )
        assert moved.station_id == station_b.id
        assert moved.started_at == at(1800)
        assert moved.total_paused_seconds == 0
        assert moved.rate_hourly_snapshot_cents == 1200

        closed = close_session(org_id=org_a.id, session_id=session.id, now=at(2700))

        first, second = closed.segments
        assert (first.sequence, first.station_id, first.effective_seconds, first.time_amount_cents) == (
            1, station_a.id, 1800, 400
        )
        assert (second.sequence, second.station_id, second.effective_seconds, second.time_amount_cents) == (
            2, station_b.id, 900, 300
        )
        assert first.station_name_snapshot == "Table A"
        assert closed.total_amount_cents == 700

    def test_source_station_is_free_after_transfer(self, db_session, org_a, station_a, station_b):
        session = start_session(org_id=org_a.id, station_id=station_a.id, pricing_tier="solo", now=at(0))
        transfer_session(
            org_id=org_a.id, session_id=session.id, destination_station_id=station_b.id, now=at(60)
        )

        fresh = start_session(org_id=org_a.id, station_id=station_a.id, pricing_tier="solo", now=at(120))
        assert fresh.id != session.id

    def test_paused_session_stays_paused(self, db_session, org_a, station_a, station_b):
        session = start_session(org_id=org_a.id, station_id=station_a.id, pricing_tier="solo", now=at(0))
        pause_session(org_id=org_a.id, session_id=session.id, now=at(1800))

        moved = transfer_session(
            org_id=org_a.id, session_id=session.id, destination_station_id=station_b.id, now=at(2400)
        )
        assert moved.status == "paused"
        assert moved.paused_at == at(2400)
        # Segment ends when the clock stopped, not at the transfer
        assert moved.segments[0].ended_at == at(1800)
        assert moved.segments[0].effective_seconds == 1800

        resume_session(org_id=org_a.id, session_id=session.id, now=at(3000))
        closed = close_session(org_id=org_a.id, session_id=session.id, now=at(3900))
        assert closed.segments[1].effective_seconds == 900
        assert closed.total_amount_cents == 700

    def test_pause_before_transfer_is_not_double_counted(self, db_session, org_a, station_a, station_b):
        session = start_session(org_id=org_a.id, station_id=station_a.id, pricing_tier="solo", now=at(0))
        pause_session(org_id=org_a.id, session_id=session.id, now=at(600))
        resume_session(org_id=org_a.id, session_id=session.id, now=at(900))

        moved = transfer_session(
            org_id=org_a.id, session_id=session.id, destination_station_id=station_b.id, now=at(2100)
        )
        assert moved.segments[0].paused_seconds == 300
        assert moved.segments[0].effective_seconds == 1800
        assert moved.total_paused_seconds == 0

    def test_tiers_for_each_side(self, db_session, org_a, station_a, station_b):
        session = start_session(org_id=org_a.id, station_id=station_a.id, pricing_tier="solo", now=at(0))
        moved = transfer_session(
            org_id=org_a.id,
            session_id=session.id,
            destination_station_id=station_b.id,
            ending_tier="group",
            next_tier="solo",
            now=at(3600),
        )
        assert moved.segments[0].pricing_tier == "group"
        assert moved.segments[0].time_amount_cents == 1200
        assert moved.pricing_tier == "solo"
        assert moved.rate_hourly_snapshot_cents == 1200

    def test_next_tier_defaults_to_ending_tier(self, db_session, org_a, station_a, station_b):
        session = start_session(org_id=org_a.id, station_id=station_a.id, pricing_tier="solo", now=at(0))
        moved = transfer_session(
            org_id=org_a.id, session_id=session.id, destination_station_id=station_b.id,
            ending_tier="group", now=at(60),
        )
        assert moved.pricing_tier == "group"
        assert moved.rate_hourly_snapshot_cents == 1800

    def test_tab_follows_session(self, db_session, org_a, station_a, station_b, chips):
        session = start_session(org_id=org_a.id, station_id=station_a.id, pricing_tier="solo", now=at(0))
        add_item(org_id=org_a.id, session_id=session.id, menu_item_id=chips.id, qty=2, now=at(10))

        moved = transfer_session(
            org_id=org_a.id, session_id=session.id, destination_station_id=station_b.id, now=at(60)
        )
        assert [item.qty for item in moved.items] == [2]

    def test_round_trip_segments_partition_lifetime(self, db_session, org_a, station_a, station_b):
        station_c = make_station(db_session, org_a, "Table C", solo=1000, group=1500)
        session = start_session(org_id=org_a.id, station_id=station_a.id, pricing_tier="solo", now=at(0))
        pause_session(org_id=org_a.id, session_id=session.id, now=at(300))
        resume_session(org_id=org_a.id, session_id=session.id, now=at(400))

        for destination, when in ((station_b, 1000), (station_c, 2000), (station_a, 2600)):
            transfer_session(
                org_id=org_a.id, session_id=session.id, destination_station_id=destination.id, now=at(when)
            )
        closed = close_session(org_id=org_a.id, session_id=session.id, now=at(3600))

        segments = closed.segments
        assert [s.sequence for s in segments] == [1, 2, 3, 4]
        assert [s.station_id for s in segments] == [station_a.id, station_b.id, station_c.id, station_a.id]
        assert [s.effective_seconds for s in segments] == [900, 1000, 600, 1000]
        assert sum(s.effective_seconds for s in segments) == 3600 - 100
        for previous, current in zip(segments, segments[1:]):
            assert current.started_at == previous.ended_at


class TestTransferPreconditions:

    def test_occupied_destination_conflicts(self, db_session, org_a, station_a, station_b):
        session = start_session(org_id=org_a.id, station_id=station_a.id, pricing_tier="solo", now=at(0))
        start_session(org_id=org_a.id, station_id=station_b.id, pricing_tier="solo", now=at(0))

        with pytest.raises(SessionConflictError):
            transfer_session(
                org_id=org_a.id, session_id=session.id, destination_station_id=station_b.id, now=at(60)
            )

        db_session.refresh(session)
        assert session.station_id == station_a.id
        assert session.segments == []

    def test_same_station_rejected(self, db_session, org_a, station_a):
        session = start_session(org_id=org_a.id, station_id=station_a.id, pricing_tier="solo", now=at(0))
        with pytest.raises(SessionValidationError):
            transfer_session(
                org_id=org_a.id, session_id=session.id, destination_station_id=station_a.id, now=at(60)
            )

    def test_disabled_destination_rejected(self, db_session, org_a, station_a):
        disabled = make_station(db_session, org_a, "Closed Table", enabled=False)
        session = start_session(org_id=org_a.id, station_id=station_a.id, pricing_tier="solo", now=at(0))
        with pytest.raises(SessionValidationError):
            transfer_session(
                org_id=org_a.id, session_id=session.id, destination_station_id=disabled.id, now=at(60)
            )

    def test_closed_session_rejected(self, db_session, org_a, station_a, station_b):
        session = start_session(org_id=org_a.id, station_id=station_a.id, pricing_tier="solo", now=at(0))
        close_session(org_id=org_a.id, session_id=session.id, now=at(60))
        with pytest.raises(SessionValidationError):
            transfer_session(
                org_id=org_a.id, session_id=session.id, destination_station_id=station_b.id, now=at(120)
            )

    def test_unknown_destination(self, db_session, org_a, station_a):
        session = start_session(org_id=org_a.id, station_id=station_a.id, pricing_tier="solo", now=at(0))
        with pytest.raises(StationNotFoundError, match="Destination"):
            transfer_session(
                org_id=org_a.id, session_id=session.id, destination_station_id=99999, now=at(60)
            )

    def test_unknown_session(self, db_session, org_a, station_b):
        with pytest.raises(SessionNotFoundError):
            transfer_session(
                org_id=org_a.id, session_id=99999, destination_station_id=station_b.id, now=at(60)
            )
