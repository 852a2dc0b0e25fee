# Overview: Pytest coverage for loyalty time banking and discount redemption.

import threading

import pytest

from playtab import create_app
from playtab.extensions import db
from playtab.models import Customer, Organization
from playtab.services import customer_service, discount_service, settings_service
from playtab.services.customer_service import CustomerConflictError, CustomerValidationError
from playtab.services.discount_service import DiscountConflictError
from playtab.validation import ValidationError


PHONE = "(555) 123-4567"
HOURS_20 = 20 * 3600


class TestPhoneNormalization:

    def test_separators_and_country_code(self):
        assert customer_service.normalize_phone_number("(555) 123-4567") == "5551234567"
        assert customer_service.normalize_phone_number("1-555-123-4567") == "5551234567"
        assert customer_service.normalize_phone_number("") == ""

    def test_blank_phone_rejected(self, db_session, org_a):
        with pytest.raises(CustomerValidationError):
            discount_service.add_seconds(org_id=org_a.id, phone_number="--", seconds_played=60)


class TestCheckEligible:

    def test_unknown_customer_is_zero_balance_and_not_created(self, db_session, org_a):
        assert discount_service.check_eligible(org_id=org_a.id, phone_number=PHONE, seconds_to_add=HOURS_20)
        assert not discount_service.check_eligible(org_id=org_a.id, phone_number=PHONE, seconds_to_add=60)
        assert db_session.query(Customer).count() == 0

    def test_threshold_boundary(self, db_session, org_a):
        discount_service.add_seconds(org_id=org_a.id, phone_number=PHONE, seconds_played=50000)

        assert discount_service.check_eligible(org_id=org_a.id, phone_number=PHONE, seconds_to_add=22000)
        assert not discount_service.check_eligible(org_id=org_a.id, phone_number=PHONE, seconds_to_add=21999)

    def test_negative_seconds_rejected(self, db_session, org_a):
        with pytest.raises(ValidationError):
            discount_service.check_eligible(org_id=org_a.id, phone_number=PHONE, seconds_to_add=-1)


class TestAddSeconds:

    def test_creates_customer_lazily_and_sets_flag(self, db_session, org_a):
        customer = discount_service.add_seconds(org_id=org_a.id, phone_number=PHONE, seconds_played=HOURS_20 - 1)
        assert customer.phone_number == "5551234567"
        assert customer.total_seconds == HOURS_20 - 1
        assert customer.is_discount_available is False

        customer = discount_service.add_seconds(org_id=org_a.id, phone_number="555.123.4567", seconds_played=1)
        assert customer.total_seconds == HOURS_20
        assert customer.is_discount_available is True
        assert db_session.query(Customer).count() == 1


class TestApplyDiscount:

    def test_redeem_subtracts_threshold(self, db_session, org_a):
        discount_service.add_seconds(org_id=org_a.id, phone_number=PHONE, seconds_played=50000)

        customer, rate_bps = discount_service.apply_discount(
            org_id=org_a.id, phone_number=PHONE, seconds_to_add=30000
        )
        assert rate_bps == 2000
        assert customer.total_seconds == 50000 + 30000 - HOURS_20
        assert customer.is_discount_available is False

    def test_remainder_can_keep_flag(self, db_session, org_a):
        discount_service.add_seconds(org_id=org_a.id, phone_number=PHONE, seconds_played=100000)

        customer, _ = discount_service.apply_discount(org_id=org_a.id, phone_number=PHONE, seconds_to_add=50000)
        assert customer.total_seconds == 150000 - HOURS_20
        assert customer.is_discount_available is True

    def test_second_redemption_of_same_balance_conflicts(self, db_session, org_a):
        discount_service.add_seconds(org_id=org_a.id, phone_number=PHONE, seconds_played=HOURS_20)

        customer, _ = discount_service.apply_discount(org_id=org_a.id, phone_number=PHONE, seconds_to_add=0)
        assert customer.total_seconds == 0

        with pytest.raises(DiscountConflictError):
            discount_service.apply_discount(org_id=org_a.id, phone_number=PHONE, seconds_to_add=0)

        db_session.refresh(customer)
        assert customer.total_seconds == 0
        assert customer.is_discount_available is False

    def test_ineligible_leaves_no_customer_behind(self, db_session, org_a):
        with pytest.raises(DiscountConflictError):
            discount_service.apply_discount(org_id=org_a.id, phone_number=PHONE, seconds_to_add=60)
        assert db_session.query(Customer).count() == 0

    def test_concurrent_redemptions_only_one_wins(self, tmp_path):
        """Two checkouts redeeming the same balance at once: one applies, one conflicts."""
        race_app = create_app({
            'TESTING': True,
            'SQLALCHEMY_DATABASE_URI': f"sqlite:///{tmp_path / 'race.sqlite3'}",
            'SQLALCHEMY_ENGINE_OPTIONS': {'connect_args': {'timeout': 15}},
        })
        with race_app.app_context():
            db.create_all()
            org = Organization(name="Race Hall", code="RACE", is_active=True)
            db.session.add(org)
            db.session.commit()
            org_id = org.id
            discount_service.add_seconds(org_id=org_id, phone_number=PHONE, seconds_played=HOURS_20)

        barrier = threading.Barrier(2)
        outcomes = []

        def redeem():
            with race_app.app_context():
                try:
                    barrier.wait(timeout=10)
                    discount_service.apply_discount(org_id=org_id, phone_number=PHONE, seconds_to_add=0)
                    outcomes.append("ok")
                except DiscountConflictError:
                    outcomes.append("conflict")
                except Exception as exc:
                    outcomes.append(repr(exc))
                finally:
                    db.session.remove()

        workers = [threading.Thread(target=redeem) for _ in range(2)]
        for worker in workers:
            worker.start()
        for worker in workers:
            worker.join(timeout=30)

        assert sorted(outcomes) == ["conflict", "ok"]

        with race_app.app_context():
            customer = customer_service.find_customer_by_phone(org_id, PHONE)
            assert customer.total_seconds == 0
            assert customer.is_discount_available is False
            db.session.remove()
            db.drop_all()

    def test_uses_org_settings(self, db_session, org_a):
        settings_service.update_discount_settings(org_id=org_a.id, threshold_hours=1, discount_rate=0.5)
        discount_service.add_seconds(org_id=org_a.id, phone_number=PHONE, seconds_played=3000)

        customer, rate_bps = discount_service.apply_discount(org_id=org_a.id, phone_number=PHONE, seconds_to_add=600)
        assert rate_bps == 5000
        assert customer.total_seconds == 0


class TestDiscountSettings:

    def test_defaults(self, db_session, org_a):
        settings = settings_service.get_discount_settings(org_a.id)
        assert settings.threshold_seconds == HOURS_20
        assert settings.threshold_hours == 20
        assert settings.rate == 0.2

    @pytest.mark.parametrize("hours,rate", [(0, 0.2), (-1, 0.2), (float("inf"), 0.2), (10, 1.5), (10, -0.1), ("x", 0.2)])
    def test_invalid_values_rejected(self, db_session, org_a, hours, rate):
        with pytest.raises(ValidationError):
            settings_service.update_discount_settings(org_id=org_a.id, threshold_hours=hours, discount_rate=rate)

    def test_update_stores_seconds_and_basis_points(self, db_session, org_a):
        settings = settings_service.update_discount_settings(org_id=org_a.id, threshold_hours=1.5, discount_rate=0.25)
        assert settings.threshold_seconds == 5400
        assert settings.rate_bps == 2500


class TestCustomerRecords:

    def test_duplicate_phone_conflicts(self, db_session, org_a):
        customer_service.create_customer(org_id=org_a.id, phone_number=PHONE, first_name="Sam")
        with pytest.raises(CustomerConflictError):
            customer_service.create_customer(org_id=org_a.id, phone_number="555-123-4567")

    def test_same_phone_in_two_orgs(self, db_session, org_a, org_b):
        a = customer_service.create_customer(org_id=org_a.id, phone_number=PHONE)
        b = customer_service.create_customer(org_id=org_b.id, phone_number=PHONE)
        assert a.id != b.id

    def test_update_and_delete(self, db_session, org_a):
        customer = customer_service.create_customer(org_id=org_a.id, phone_number=PHONE)
        updated = customer_service.update_customer(
            org_id=org_a.id, customer_id=customer.id, patch={"first_name": "Robin", "phone_number": "555 999 0000"}
        )
        assert updated.first_name == "Robin"
        assert updated.phone_number == "5559990000"

        customer_service.delete_customer(org_id=org_a.id, customer_id=customer.id)
        assert customer_service.list_customers(org_a.id) == []
