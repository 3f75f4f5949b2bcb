"""Shared fixtures: one provider company with a vehicle and a driver, one renter company."""

from __future__ import annotations

from decimal import Decimal

import pytest

from apps.bookings.models import Booking
from apps.listings.models import DriverListing, ListingStatus, VehicleListing
from apps.users.models import Company, User


@pytest.fixture
def provider_company(db) -> Company:
    return Company.objects.create(name="Nordlys Transport AS", organization_number="911111111")


@pytest.fixture
def renter_company(db) -> Company:
    return Company.objects.create(name="Bergen Bygg AS", organization_number="922222222")


@pytest.fixture
def provider_admin(provider_company) -> User:
    return User.objects.create_user(
        email="admin@nordlys.no",
        password="ProviderPass123",
        role=User.RoleChoices.COMPANY_ADMIN,
        company=provider_company,
    )


@pytest.fixture
def renter_user(renter_company) -> User:
    return User.objects.create_user(
        email="planner@bergenbygg.no",
        password="RenterPass123",
        role=User.RoleChoices.COMPANY_USER,
        company=renter_company,
    )


@pytest.fixture
def vehicle(provider_company) -> VehicleListing:
    return VehicleListing.objects.create(
        company=provider_company,
        title="Volvo FH16 tipper",
        registration_number="EL 12345",
        daily_rate=Decimal("2500.00"),
        currency="NOK",
        status=ListingStatus.ACTIVE,
    )


@pytest.fixture
def driver(provider_company) -> DriverListing:
    return DriverListing.objects.create(
        company=provider_company,
        name="Kari Nordmann",
        license_class="CE",
        daily_rate=Decimal("1800.00"),
        currency="NOK",
        status=ListingStatus.ACTIVE,
    )


@pytest.fixture
def make_booking(renter_company, provider_company, renter_user):
    """Insert a booking directly, bypassing admission."""

    def _make(start, end, *, vehicle=None, driver=None, status=Booking.Status.ACCEPTED) -> Booking:
        return Booking.objects.create(
            renter_company=renter_company,
            provider_company=provider_company,
            vehicle_listing=vehicle,
            driver_listing=driver,
            requested_by=renter_user,
            start_date=start,
            end_date=end,
            status=status,
            duration_days=(end - start).days,
        )

    return _make
