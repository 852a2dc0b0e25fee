# Overview: Flask CLI command groups for venue bootstrap and session inspection.

# backend/playtab/cli.py
# Commands Legend (run from the backend directory):
# Prereqs:
# - Activate your virtualenv.
# - Set FLASK_APP to wsgi.py (PowerShell: $env:FLASK_APP="wsgi.py").
# - Use: python -m flask <group> <command> [options]
#
# Venue bootstrap:
# - python -m flask venue init [--name "Main Hall"] [--code "MAIN"]
#   Idempotent: creates the organization if the code is not taken yet.
# - python -m flask venue list
#   List organizations with their loyalty settings.
# - python -m flask venue seed-demo --org-id 1
#   Add demo stations (pool, gaming, foosball) and menu items.
# - python -m flask venue reset-db --yes
#   DEV/TEST only: drop and recreate all tables (deletes all data).
#
# Session inspection:
# - python -m flask sessions list-open [--org-id 1]
#   List active and paused sessions with their running time charge.
# - python -m flask sessions history --org-id 1 [--limit 20]
#   List recently closed sessions with totals.

import click
from flask.cli import with_appcontext

from .extensions import db
from .models import Organization, Station, MenuItem
from .services import reporting_service, session_service, tenant_service
from .services.billing import format_cents
from .validation import ServiceError


# =============================================================================
# VENUE
# =============================================================================

@click.group('venue')
def venue_group():
    """Venue (organization) bootstrap commands."""


@venue_group.command('init')
@click.option('--name', default='Default Venue', help='Organization name')
@click.option('--code', default='DEFAULT', help='Organization code')
@with_appcontext
def init_venue(name, code):
    """Create the venue organization if it does not exist yet."""
    org = db.session.query(Organization).filter_by(code=code).first()
    if org:
        click.echo(f"PASS Using existing organization: {org.name} (ID: {org.id})")
        return

    org = tenant_service.create_organization(name, code)
    click.echo(f"PASS Created organization: {org.name} (ID: {org.id}, Code: {org.code})")


@venue_group.command('list')
@with_appcontext
def list_venues():
    """List all organizations."""
    orgs = db.session.query(Organization).order_by(Organization.id).all()

    if not orgs:
        click.echo("No organizations found.")
        return

    click.echo("\n" + "="*80)
    click.echo(f"{'ID':<5} {'Name':<30} {'Code':<15} {'Active':<8} {'Stations':<10} {'Discount'}")
    click.echo("="*80)

    for org in orgs:
        station_count = db.session.query(Station).filter_by(org_id=org.id).count()
        active_str = "Yes" if org.is_active else "No"
        discount = f"{org.discount_rate_bps / 100:g}% after {org.discount_threshold_seconds / 3600:g}h"

        click.echo(f"{org.id:<5} {org.name:<30} {org.code or '-':<15} {active_str:<8} {station_count:<10} {discount}")

    click.echo("="*80 + "\n")


DEMO_STATIONS = (
    # name, type, solo cents/hour, group cents/hour
    ("Pool 1", "pool", 1000, 1600),
    ("Pool 2", "pool", 1000, 1600),
    ("Console 1", "gaming", 800, 800),
    ("Console 2", "gaming", 800, 800),
    ("Foosball", "foosball", 600, 600),
)

DEMO_MENU = (
    # name, category, price cents, stock
    ("Cola", "drinks", 250, 48),
    ("Water", "drinks", 150, 48),
    ("Chips", "snacks", 300, 24),
    ("Candy Bar", "snacks", 200, 36),
)


@venue_group.command('seed-demo')
@click.option('--org-id', type=int, required=True, help='Organization ID')
@with_appcontext
def seed_demo(org_id):
    """Add demo stations and menu items (skips names that already exist)."""
    try:
        tenant_service.validate_org_active(org_id)
    except ServiceError as e:
        click.echo(f"FAIL {e}")
        return

    added_stations = 0
    for sort_order, (name, station_type, solo, group) in enumerate(DEMO_STATIONS):
        if db.session.query(Station).filter_by(org_id=org_id, name=name).first():
            continue
        db.session.add(Station(
            org_id=org_id,
            name=name,
            station_type=station_type,
            rate_solo_hourly_cents=solo,
            rate_group_hourly_cents=group,
            is_enabled=True,
            sort_order=sort_order,
        ))
        added_stations += 1

    added_items = 0
    for name, category, price, stock in DEMO_MENU:
        if db.session.query(MenuItem).filter_by(org_id=org_id, name=name).first():
            continue
        db.session.add(MenuItem(
            org_id=org_id,
            name=name,
            category=category,
            price_cents=price,
            stock_qty=stock,
            is_active=True,
        ))
        added_items += 1

    db.session.commit()
    click.echo(f"PASS Seeded {added_stations} stations and {added_items} menu items for org {org_id}")


@venue_group.command('reset-db')
@click.option('--yes', is_flag=True, help='Confirm destructive reset')
@with_appcontext
def reset_db(yes):
    """DEV/TEST only: drop and recreate all tables."""
    if not yes:
        click.echo("FAIL Refusing to reset without --yes")
        return

    db.drop_all()
    db.create_all()
    click.echo("PASS Database reset complete")


# =============================================================================
# SESSIONS
# =============================================================================

@click.group('sessions')
def sessions_group():
    """Play session inspection commands."""


@sessions_group.command('list-open')
@click.option('--org-id', type=int, help='Filter by organization ID')
@with_appcontext
def list_open(org_id):
    """List active and paused sessions."""
    sessions = session_service.list_open_sessions(org_id)

    if not sessions:
        click.echo("No open sessions.")
        return

    click.echo("\n" + "="*80)
    click.echo(f"{'ID':<6} {'Org':<5} {'Station':<20} {'Status':<8} {'Tier':<6} {'Minutes':<9} {'Charge'}")
    click.echo("="*80)

    for session in sessions:
        summary = reporting_service.session_summary(session)
        station_name = session.station.name if session.station else "-"
        minutes = summary["effective_seconds"] // 60

        click.echo(
            f"{session.id:<6} {session.org_id:<5} {station_name:<20} {session.status:<8} "
            f"{session.pricing_tier:<6} {minutes:<9} {format_cents(summary['time_charge_cents'])}"
        )

    click.echo("="*80 + "\n")


@sessions_group.command('history')
@click.option('--org-id', type=int, required=True, help='Organization ID')
@click.option('--limit', type=int, default=20, help='Max rows')
@with_appcontext
def history(org_id, limit):
    """List recently closed sessions."""
    rows = reporting_service.list_history(org_id, limit=limit)

    if not rows:
        click.echo("No closed sessions.")
        return

    for row in rows:
        click.echo(
            f"#{row['id']} {row['station_name'] or '-'} closed {row['closed_at']} "
            f"time {format_cents(row['time_charge_cents'])} "
            f"items {format_cents(row['items_subtotal_cents'])} "
            f"total {format_cents(row['grand_total_cents'])}"
        )


def register_commands(app):
    """Register all CLI commands with Flask app."""
    app.cli.add_command(venue_group)
    app.cli.add_command(sessions_group)
