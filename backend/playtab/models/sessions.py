from __future__ import annotations

from ..extensions import db
from playtab.time_utils import to_utc_z


SESSION_STATUSES = ("active", "paused", "closed")


class PlaySession(db.Model):
    """
    A customer's timed use of one or more stations.

    LIFECYCLE:
    - active: clock running on the current station
    - paused: clock stopped, paused_at set
    - closed: terminal, total_amount_cents set from the segment ledger

    The row only tracks the CURRENT open interval: started_at,
    paused_at and total_paused_seconds all describe the interval on
    station_id. Earlier intervals (one per station left by a transfer)
    are frozen in session_time_segments.

    INVARIANT: at most one non-closed session per station, enforced by
    the partial unique index below.
    """
    __tablename__ = "play_sessions"
    __table_args__ = (
        db.Index(
            "uq_play_sessions_station_open",
            "station_id",
            unique=True,
            sqlite_where=db.text("status != 'closed'"),
            postgresql_where=db.text("status != 'closed'"),
        ),
        db.Index("ix_play_sessions_org_status", "org_id", "status"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    org_id = db.Column(db.Integer, db.ForeignKey("organizations.id"), nullable=False, index=True)
    station_id = db.Column(db.Integer, db.ForeignKey("stations.id"), nullable=False, index=True)

    status = db.Column(db.String(16), nullable=False, default="active")

    # First interval start; never reset (history display)
    opened_at = db.Column(db.DateTime(timezone=True), nullable=False)
    # Current open interval
    started_at = db.Column(db.DateTime(timezone=True), nullable=False)
    paused_at = db.Column(db.DateTime(timezone=True), nullable=True)
    total_paused_seconds = db.Column(db.Integer, nullable=False, default=0)

    pricing_tier = db.Column(db.String(16), nullable=False, default="solo")  # solo, group
    rate_hourly_snapshot_cents = db.Column(db.Integer, nullable=False, default=0)

    closed_at = db.Column(db.DateTime(timezone=True), nullable=True)
    total_amount_cents = db.Column(db.Integer, nullable=True)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())
    updated_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now(), onupdate=db.func.now())
    version_id = db.Column(db.Integer, nullable=False, default=1)

    station = db.relationship("Station", backref=db.backref("play_sessions", lazy=True))

    __mapper_args__ = {"version_id_col": version_id}

    @property
    def is_closed(self) -> bool:
        return self.status == "closed"

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "org_id": self.org_id,
            "station_id": self.station_id,
            "status": self.status,
            "opened_at": to_utc_z(self.opened_at),
            "started_at": to_utc_z(self.started_at),
            "paused_at": to_utc_z(self.paused_at) if self.paused_at else None,
            "total_paused_seconds": self.total_paused_seconds,
            "pricing_tier": self.pricing_tier,
            "rate_hourly_snapshot_cents": self.rate_hourly_snapshot_cents,
            "closed_at": to_utc_z(self.closed_at) if self.closed_at else None,
            "total_amount_cents": self.total_amount_cents,
            "version_id": self.version_id,
        }


class SessionTimeSegment(db.Model):
    """
    Frozen interval of a session on one station.

    Written by a transfer (for the station being left) and by close (for
    the final station). Carries both rate snapshots so the pricing tier
    can be corrected at checkout without consulting the station again.

    IMMUTABLE except rate_hourly_applied_cents / time_amount_cents /
    pricing_tier, which checkout may recompute from the stored snapshots.
    """
    __tablename__ = "session_time_segments"
    __table_args__ = (
        db.UniqueConstraint("session_id", "sequence", name="uq_session_segments_sequence"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    session_id = db.Column(db.Integer, db.ForeignKey("play_sessions.id"), nullable=False, index=True)
    sequence = db.Column(db.Integer, nullable=False)

    station_id = db.Column(db.Integer, db.ForeignKey("stations.id"), nullable=False, index=True)
    station_name_snapshot = db.Column(db.String(120), nullable=False)
    station_type_snapshot = db.Column(db.String(32), nullable=False)

    started_at = db.Column(db.DateTime(timezone=True), nullable=False)
    ended_at = db.Column(db.DateTime(timezone=True), nullable=False)
    paused_seconds = db.Column(db.Integer, nullable=False, default=0)
    effective_seconds = db.Column(db.Integer, nullable=False)

    pricing_tier = db.Column(db.String(16), nullable=False)
    rate_solo_hourly_cents = db.Column(db.Integer, nullable=False)
    rate_group_hourly_cents = db.Column(db.Integer, nullable=False)
    rate_hourly_applied_cents = db.Column(db.Integer, nullable=False)
    time_amount_cents = db.Column(db.Integer, nullable=False)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())
    updated_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now(), onupdate=db.func.now())

    session = db.relationship(
        "PlaySession",
        backref=db.backref("segments", lazy=True, order_by="SessionTimeSegment.sequence"),
    )

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "session_id": self.session_id,
            "sequence": self.sequence,
            "station_id": self.station_id,
            "station_name": self.station_name_snapshot,
            "station_type": self.station_type_snapshot,
            "started_at": to_utc_z(self.started_at),
            "ended_at": to_utc_z(self.ended_at),
            "paused_seconds": self.paused_seconds,
            "effective_seconds": self.effective_seconds,
            "pricing_tier": self.pricing_tier,
            "rate_solo_hourly_cents": self.rate_solo_hourly_cents,
            "rate_group_hourly_cents": self.rate_group_hourly_cents,
            "rate_hourly_applied_cents": self.rate_hourly_applied_cents,
            "time_amount_cents": self.time_amount_cents,
        }


class SessionItem(db.Model):
    """
    One add event on a session's tab.

    Append-only on add: a second add of the same menu item is a new row,
    never a merge. Name and price are snapshotted so later menu edits do
    not change an open tab.
    """
    __tablename__ = "session_items"
    __table_args__ = (
        db.Index("ix_session_items_session_menu", "session_id", "menu_item_id"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    session_id = db.Column(db.Integer, db.ForeignKey("play_sessions.id"), nullable=False, index=True)
    menu_item_id = db.Column(db.Integer, db.ForeignKey("menu_items.id"), nullable=True, index=True)

    name_snapshot = db.Column(db.String(255), nullable=False)
    price_cents_snapshot = db.Column(db.Integer, nullable=False)
    qty = db.Column(db.Integer, nullable=False)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False)

    session = db.relationship(
        "PlaySession",
        backref=db.backref("items", lazy=True, order_by="SessionItem.id"),
    )

    @property
    def line_total_cents(self) -> int:
        return self.price_cents_snapshot * self.qty

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "session_id": self.session_id,
            "menu_item_id": self.menu_item_id,
            "name": self.name_snapshot,
            "price_cents": self.price_cents_snapshot,
            "qty": self.qty,
            "line_total_cents": self.line_total_cents,
            "created_at": to_utc_z(self.created_at),
        }
