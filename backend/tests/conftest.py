"""
Pytest fixtures for playtab backend tests.

Provides test database setup, tenant fixtures, a station floor and a menu,
plus a fixed clock origin so time accounting is deterministic.
"""

from datetime import datetime, timedelta

import pytest
from playtab import create_app
from playtab.extensions import db
from playtab.models import Organization, Station, MenuItem


T0 = datetime(2026, 3, 14, 18, 0, 0)


def at(seconds: int) -> datetime:
    """Instant `seconds` after the test clock origin."""
    return T0 + timedelta(seconds=seconds)


@pytest.fixture(scope='session')
def app():
    """Create application for testing."""
    app = create_app({
        'TESTING': True,
        'SQLALCHEMY_DATABASE_URI': 'sqlite:///:memory:',
        'SQLALCHEMY_TRACK_MODIFICATIONS': False,
        'DEFAULT_DISCOUNT_THRESHOLD_HOURS': 20,
        'DEFAULT_DISCOUNT_RATE_BPS': 2000,
    })

    with app.app_context():
        db.create_all()
        yield app
        db.drop_all()


@pytest.fixture(scope='function')
def client(app):
    """Create test client."""
    return app.test_client()


@pytest.fixture(scope='function')
def db_session(app):
    """Create fresh database for each test."""
    with app.app_context():
        # Clear all data but keep schema
        meta = db.metadata
        for table in reversed(meta.sorted_tables):
            db.session.execute(table.delete())
        db.session.commit()

        yield db.session

        # Cleanup after test
        db.session.rollback()


@pytest.fixture(scope='function')
def org_a(db_session):
    """Create Organization A (first tenant)."""
    org = Organization(name="Org A - Corner Pocket", code="POCKET", is_active=True)
    db_session.add(org)
    db_session.commit()
    return org


@pytest.fixture(scope='function')
def org_b(db_session):
    """Create Organization B (second tenant)."""
    org = Organization(name="Org B - Break Room", code="BREAK", is_active=True)
    db_session.add(org)
    db_session.commit()
    return org


def make_station(db_session, org, name, *, station_type="pool", solo=1000, group=1600, enabled=True, sort_order=0):
    station = Station(
        org_id=org.id,
        name=name,
        station_type=station_type,
        rate_solo_hourly_cents=solo,
        rate_group_hourly_cents=group,
        is_enabled=enabled,
        sort_order=sort_order,
    )
    db_session.add(station)
    db_session.commit()
    return station


def make_menu_item(db_session, org, name, *, price_cents=500, stock_qty=10, active=True):
    item = MenuItem(
        org_id=org.id,
        name=name,
        category="snacks",
        price_cents=price_cents,
        stock_qty=stock_qty,
        is_active=active,
    )
    db_session.add(item)
    db_session.commit()
    return item


@pytest.fixture(scope='function')
def pool_table(db_session, org_a):
    """Pool table in Org A: $10/hr solo, $16/hr group."""
    return make_station(db_session, org_a, "Pool 1", solo=1000, group=1600, sort_order=0)


@pytest.fixture(scope='function')
def station_a(db_session, org_a):
    """Pool table in Org A: $8/hr solo."""
    return make_station(db_session, org_a, "Table A", solo=800, group=1200, sort_order=1)


@pytest.fixture(scope='function')
def station_b(db_session, org_a):
    """Pool table in Org A: $12/hr solo."""
    return make_station(db_session, org_a, "Table B", solo=1200, group=1800, sort_order=2)


@pytest.fixture(scope='function')
def foreign_station(db_session, org_b):
    """Station belonging to Org B."""
    return make_station(db_session, org_b, "Console 1", station_type="gaming", solo=900, group=900)


@pytest.fixture(scope='function')
def chips(db_session, org_a):
    """Menu item in Org A: $5.00, 10 in stock."""
    return make_menu_item(db_session, org_a, "Chips", price_cents=500, stock_qty=10)


def org_headers(org) -> dict:
    """Helper to create tenant context headers."""
    return {'X-Org-Id': str(org.id)}
