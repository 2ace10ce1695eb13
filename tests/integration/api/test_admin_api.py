"""
Integration tests for the Admin API.
"""

import uuid
from datetime import datetime, timedelta
from decimal import Decimal

import pytest
from asgiref.sync import async_to_sync
from django.urls import reverse
from django.utils import timezone
from rest_framework import status

from core.domain.value_objects import LicenseStatus
from licenses.application.dto.report_dto import LICENSE_EXPORT_HEADERS
from licenses.domain.subscription import add_years


@pytest.fixture
def create_license(license_factory):
    """Synchronous wrapper around the license factory."""
    return async_to_sync(license_factory.create)


@pytest.mark.django_db
@pytest.mark.integration
class TestAdminAuthentication:
    """Integration tests for admin login and token checks."""

    def test_requires_token(self, api_client):
        """Test admin endpoints refuse anonymous requests."""
        response = api_client.get(reverse("admin_api:admin-list-licenses"))

        assert response.status_code == status.HTTP_401_UNAUTHORIZED
        assert response.json()["error"]["code"] == "NOT_AUTHENTICATED"

    def test_rejects_garbage_token(self, api_client):
        """Test a malformed bearer token is refused."""
        api_client.credentials(HTTP_AUTHORIZATION="Bearer not-a-token")

        response = api_client.get(reverse("admin_api:admin-list-licenses"))

        assert response.status_code == status.HTTP_401_UNAUTHORIZED

    def test_login(self, api_client, admin_user):
        """Test staff credentials are exchanged for a usable token."""
        response = api_client.post(
            reverse("admin_api:admin-login"),
            {"username": "admin", "password": "password"},
            format="json",
        )

        assert response.status_code == status.HTTP_200_OK
        data = response.json()
        assert data["tokenType"] == "Bearer"
        assert data["username"] == "admin"
        assert data["expiresIn"] > 0

        api_client.credentials(HTTP_AUTHORIZATION=f"Bearer {data['token']}")
        listed = api_client.get(reverse("admin_api:admin-list-licenses"))
        assert listed.status_code == status.HTTP_200_OK

    def test_login_wrong_password(self, api_client, admin_user):
        """Test bad credentials are answered with 401."""
        response = api_client.post(
            reverse("admin_api:admin-login"),
            {"username": "admin", "password": "wrong"},
            format="json",
        )

        assert response.status_code == status.HTTP_401_UNAUTHORIZED
        assert response.json()["error"]["code"] == "INVALID_CREDENTIALS"

    def test_login_non_staff(self, api_client, django_user_model):
        """Test accounts without staff rights cannot log in."""
        django_user_model.objects.create_user(username="clerk", password="secret-pass")

        response = api_client.post(
            reverse("admin_api:admin-login"),
            {"username": "clerk", "password": "secret-pass"},
            format="json",
        )

        assert response.status_code == status.HTTP_401_UNAUTHORIZED


@pytest.mark.django_db
@pytest.mark.integration
class TestAdminLicenseAPI:
    """Integration tests for license administration."""

    def test_list_licenses(self, admin_api_client, create_license):
        """Test listing licenses with pagination and filters."""
        create_license()
        create_license()
        trial = create_license(is_free_trial=True)

        response = admin_api_client.get(
            reverse("admin_api:admin-list-licenses"), {"pageSize": 2}
        )
        trials = admin_api_client.get(
            reverse("admin_api:admin-list-licenses"), {"isFreeTrial": "true"}
        )

        assert response.status_code == status.HTTP_200_OK
        data = response.json()
        assert len(data["items"]) == 2
        assert data["pagination"]["totalItems"] == 3
        assert [item["id"] for item in trials.json()["items"]] == [str(trial.id)]

    def test_list_licenses_bad_sort(self, admin_api_client):
        """Test unknown sort fields are invalid input."""
        response = admin_api_client.get(
            reverse("admin_api:admin-list-licenses"), {"sortBy": "password"}
        )

        assert response.status_code == status.HTTP_400_BAD_REQUEST

    def test_get_license(self, admin_api_client, create_license):
        """Test the detail view includes subscriptions."""
        license = create_license()

        response = admin_api_client.get(
            reverse("admin_api:admin-get-license", kwargs={"license_id": license.id})
        )

        assert response.status_code == status.HTTP_200_OK
        data = response.json()
        assert data["licenseKey"] == license.key
        assert len(data["subscriptions"]) == 1

    def test_get_unknown_license(self, admin_api_client):
        """Test unknown license IDs are not found."""
        response = admin_api_client.get(
            reverse("admin_api:admin-get-license", kwargs={"license_id": uuid.uuid4()})
        )

        assert response.status_code == status.HTTP_404_NOT_FOUND
        assert response.json()["error"]["code"] == "LICENSE_NOT_FOUND"

    def test_revoke_and_reinstate(self, admin_api_client, create_license):
        """Test revoking a license and bringing it back."""
        license = create_license()
        kwargs = {"license_id": license.id}

        revoked = admin_api_client.post(reverse("admin_api:revoke-license", kwargs=kwargs))
        reinstated = admin_api_client.post(reverse("admin_api:reinstate-license", kwargs=kwargs))

        assert revoked.status_code == status.HTTP_200_OK
        assert revoked.json()["status"] == "revoked"
        assert reinstated.json()["status"] == "active"

    def test_suspend_revoked_conflicts(self, admin_api_client, create_license):
        """Test a revoked license cannot be suspended."""
        license = create_license(status=LicenseStatus.REVOKED)

        response = admin_api_client.post(
            reverse("admin_api:suspend-license", kwargs={"license_id": license.id})
        )

        assert response.status_code == status.HTTP_409_CONFLICT
        assert response.json()["error"]["code"] == "INVALID_LICENSE_STATUS"

    def test_suspended_license_fails_validation(self, admin_api_client, api_client, create_license):
        """Test suspending takes effect on the next validation."""
        license = create_license()
        admin_api_client.post(
            reverse("admin_api:suspend-license", kwargs={"license_id": license.id})
        )

        response = api_client.post(
            reverse("license_api:validate-license"), {"licenseKey": license.key}, format="json"
        )

        assert response.status_code == status.HTTP_403_FORBIDDEN
        assert response.json()["error"]["details"]["status"] == "suspended"

    def test_increase_user_limit(self, admin_api_client, create_license):
        """Test raising the user limit."""
        license = create_license(user_limit=2)

        response = admin_api_client.post(
            reverse("admin_api:increase-user-limit", kwargs={"license_id": license.id}),
            {"additionalUsers": 3},
            format="json",
        )

        assert response.status_code == status.HTTP_200_OK
        assert response.json()["userLimit"] == 5

    def test_increase_user_limit_requires_positive(self, admin_api_client, create_license):
        """Test zero additional users is invalid input."""
        license = create_license()

        response = admin_api_client.post(
            reverse("admin_api:increase-user-limit", kwargs={"license_id": license.id}),
            {"additionalUsers": 0},
            format="json",
        )

        assert response.status_code == status.HTTP_400_BAD_REQUEST

    def test_renew(self, admin_api_client, create_license):
        """Test renewing extends the current subscription by exactly one year."""
        license = create_license(days_left=10)

        response = admin_api_client.post(
            reverse("admin_api:renew-subscription", kwargs={"license_id": license.id}),
            {},
            format="json",
        )

        assert response.status_code == status.HTTP_200_OK
        data = response.json()
        expected_end = add_years(license.end_date)
        assert len(data["subscriptions"]) == 1
        assert datetime.fromisoformat(data["endDate"]) == expected_end
        assert datetime.fromisoformat(data["subscriptions"][0]["endDate"]) == expected_end
        assert data["subscriptions"][0]["status"] == "active"


@pytest.mark.django_db
@pytest.mark.integration
class TestAdminActivationAPI:
    """Integration tests for activation administration."""

    def _activate(self, api_client, license, hardware_id):
        response = api_client.post(
            reverse("license_api:activate-license"),
            {"licenseKey": license.key, "hardwareId": hardware_id},
            format="json",
        )
        assert response.status_code == status.HTTP_200_OK

    def test_list_and_deactivate(self, admin_api_client, api_client, create_license):
        """Test listing a license's activations and deactivating one."""
        license = create_license()
        self._activate(api_client, license, "HW-1")

        listed = admin_api_client.get(
            reverse("admin_api:admin-list-activations"), {"licenseId": str(license.id)}
        )
        activation = listed.json()["items"][0]
        response = admin_api_client.post(
            reverse(
                "admin_api:deactivate-activation", kwargs={"activation_id": activation["id"]}
            )
        )

        assert activation["hardwareId"] == "HW-1"
        assert response.status_code == status.HTTP_200_OK
        assert response.json()["isActive"] is False

    def test_reset_activations(self, admin_api_client, api_client, create_license):
        """Test resetting deactivates every machine of the license."""
        license = create_license()
        self._activate(api_client, license, "HW-1")
        self._activate(api_client, license, "HW-2")

        response = admin_api_client.post(
            reverse("admin_api:reactivate-license", kwargs={"license_id": license.id})
        )

        assert response.status_code == status.HTTP_200_OK
        assert response.json()["deactivated"] == 2
        still_active = admin_api_client.get(
            reverse("admin_api:admin-list-activations"),
            {"licenseId": str(license.id), "isActive": "true"},
        )
        assert still_active.json()["items"] == []


@pytest.mark.django_db
@pytest.mark.integration
class TestAdminPaymentAPI:
    """Integration tests for payments and revenue statistics."""

    def test_record_and_list_payments(self, admin_api_client, create_license):
        """Test recording payments and reading them back."""
        license = create_license(is_free_trial=True, days_left=5)
        url = reverse("admin_api:admin-payments")

        created = admin_api_client.post(
            url,
            {"licenseId": str(license.id), "amount": "350.00", "paymentType": "initial"},
            format="json",
        )
        listed = admin_api_client.get(url, {"licenseId": str(license.id)})

        assert created.status_code == status.HTTP_201_CREATED
        assert created.json()["paymentType"] == "initial"
        assert [p["id"] for p in listed.json()["items"]] == [created.json()["id"]]

        detail = admin_api_client.get(
            reverse("admin_api:admin-get-license", kwargs={"license_id": license.id})
        )
        assert detail.json()["isFreeTrial"] is False

    def test_user_payment_needs_initial(self, admin_api_client, create_license):
        """Test a user payment before the initial one is rejected."""
        license = create_license()

        response = admin_api_client.post(
            reverse("admin_api:admin-payments"),
            {
                "licenseId": str(license.id),
                "amount": "25.00",
                "paymentType": "user",
                "additionalUsers": 1,
            },
            format="json",
        )

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.json()["error"]["code"] == "PAYMENT_REJECTED"

    def test_statistics(self, admin_api_client, create_license):
        """Test revenue statistics."""
        license = create_license()
        url = reverse("admin_api:admin-payments")
        for payment_type, amount in (("initial", "350.00"), ("annual", "50.00")):
            admin_api_client.post(
                url,
                {"licenseId": str(license.id), "amount": amount, "paymentType": payment_type},
                format="json",
            )

        response = admin_api_client.get(reverse("admin_api:payment-statistics"))

        assert response.status_code == status.HTTP_200_OK
        data = response.json()
        assert data["totalPayments"] == 2
        assert Decimal(data["totalAmount"]) == Decimal("400")
        assert data["annualSubscriptionPayments"] == 1


@pytest.mark.django_db
@pytest.mark.integration
class TestAdminJobsAPI:
    """Integration tests for the expiry sweep endpoint."""

    def test_update_expired_licenses(self, admin_api_client, create_license):
        """Test the sweep through the API, dry run first."""
        create_license(days_left=-3)
        url = reverse("admin_api:update-expired-licenses")

        dry = admin_api_client.post(url, {"dryRun": True}, format="json")
        real = admin_api_client.post(url, {}, format="json")
        again = admin_api_client.post(url, {}, format="json")

        assert dry.json()["updated"] == 1
        assert real.status_code == status.HTTP_200_OK
        assert real.json()["updated"] == 1
        assert again.json()["updated"] == 0


@pytest.mark.django_db
@pytest.mark.integration
class TestAdminLicenseUpdateAPI:
    """Integration tests for editing licenses."""

    def _url(self, license_id):
        return reverse("admin_api:admin-get-license", kwargs={"license_id": license_id})

    def test_update_details(self, admin_api_client, create_license):
        """Test customer and location fields are edited and others kept."""
        license = create_license()

        response = admin_api_client.put(
            self._url(license.id),
            {"customerName": "Harbour Bistro", "locationAddress": "9 Quay Road"},
            format="json",
        )

        assert response.status_code == status.HTTP_200_OK
        data = response.json()
        assert data["customerName"] == "Harbour Bistro"
        assert data["locationAddress"] == "9 Quay Road"
        assert data["locationName"] == "Main Street"
        assert data["licenseKey"] == license.key
        detail = admin_api_client.get(self._url(license.id)).json()
        assert detail["customerName"] == "Harbour Bistro"

    def test_annual_price_applies_to_subscription(self, admin_api_client, create_license):
        """Test a new annual price is carried to the current subscription."""
        license = create_license()

        response = admin_api_client.patch(
            self._url(license.id), {"annualPrice": "80.00"}, format="json"
        )

        data = response.json()
        assert response.status_code == status.HTTP_200_OK
        assert Decimal(data["annualPrice"]) == Decimal("80.00")
        assert Decimal(data["subscriptions"][0]["annualFee"]) == Decimal("80.00")

    def test_end_date_reopens_expired_license(
        self, admin_api_client, api_client, create_license
    ):
        """Test moving the end date of an expired license makes it usable again."""
        license = create_license(days_left=-3, status=LicenseStatus.EXPIRED)
        new_end = (timezone.now() + timedelta(days=60)).replace(microsecond=0)

        response = admin_api_client.put(
            self._url(license.id), {"endDate": new_end.isoformat()}, format="json"
        )

        data = response.json()
        assert response.status_code == status.HTTP_200_OK
        assert data["status"] == "active"
        assert datetime.fromisoformat(data["endDate"]) == new_end
        assert datetime.fromisoformat(data["subscriptions"][0]["endDate"]) == new_end
        assert data["subscriptions"][0]["status"] == "active"

        validated = api_client.post(
            reverse("license_api:validate-license"), {"licenseKey": license.key}, format="json"
        )
        assert validated.status_code == status.HTTP_200_OK
        assert validated.json()["daysRemaining"] == 60

    def test_end_before_start(self, admin_api_client, create_license):
        """Test an end date before the start date is invalid input."""
        license = create_license()

        response = admin_api_client.put(
            self._url(license.id),
            {"endDate": (license.start_date - timedelta(days=1)).isoformat()},
            format="json",
        )

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.json()["error"]["code"] == "INVALID_INPUT"

    def test_empty_update(self, admin_api_client, create_license):
        """Test an update without fields is rejected."""
        license = create_license()

        response = admin_api_client.put(self._url(license.id), {}, format="json")

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.json()["error"]["code"] == "INVALID_INPUT"

    def test_negative_price(self, admin_api_client, create_license):
        """Test prices cannot be negative."""
        license = create_license()

        response = admin_api_client.put(
            self._url(license.id), {"pricePerUser": "-1.00"}, format="json"
        )

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert "pricePerUser" in response.json()["error"]["details"]

    def test_update_unknown_license(self, admin_api_client):
        """Test editing an unknown license is not found."""
        response = admin_api_client.put(
            self._url(uuid.uuid4()), {"customerName": "Nobody"}, format="json"
        )

        assert response.status_code == status.HTTP_404_NOT_FOUND
        assert response.json()["error"]["code"] == "LICENSE_NOT_FOUND"


@pytest.mark.django_db
@pytest.mark.integration
class TestAdminLookupAPI:
    """Integration tests for subscription and activation lookups."""

    def test_get_subscription(self, admin_api_client, create_license):
        """Test reading one subscription by ID."""
        license = create_license()
        detail = admin_api_client.get(
            reverse("admin_api:admin-get-license", kwargs={"license_id": license.id})
        ).json()
        subscription_id = detail["subscriptions"][0]["id"]

        response = admin_api_client.get(
            reverse("admin_api:admin-get-subscription", kwargs={"subscription_id": subscription_id})
        )

        assert response.status_code == status.HTTP_200_OK
        assert response.json()["licenseId"] == str(license.id)

    def test_get_unknown_subscription(self, admin_api_client):
        """Test unknown subscription IDs are not found."""
        response = admin_api_client.get(
            reverse("admin_api:admin-get-subscription", kwargs={"subscription_id": uuid.uuid4()})
        )

        assert response.status_code == status.HTTP_404_NOT_FOUND
        assert response.json()["error"]["code"] == "SUBSCRIPTION_NOT_FOUND"

    def test_license_activations_and_detail(self, admin_api_client, api_client, create_license):
        """Test listing a license's activations and reading one back."""
        license = create_license()
        for hardware_id in ("HW-1", "HW-2"):
            api_client.post(
                reverse("license_api:activate-license"),
                {"licenseKey": license.key, "hardwareId": hardware_id},
                format="json",
            )

        listed = admin_api_client.get(
            reverse("admin_api:admin-license-activations", kwargs={"license_id": license.id})
        )
        activation_id = listed.json()[0]["id"]
        detail = admin_api_client.get(
            reverse("admin_api:admin-get-activation", kwargs={"activation_id": activation_id})
        )

        assert listed.status_code == status.HTTP_200_OK
        assert sorted(a["hardwareId"] for a in listed.json()) == ["HW-1", "HW-2"]
        assert detail.status_code == status.HTTP_200_OK
        assert detail.json()["licenseId"] == str(license.id)

    def test_unknown_activation(self, admin_api_client):
        """Test unknown activation IDs are not found."""
        response = admin_api_client.get(
            reverse("admin_api:admin-get-activation", kwargs={"activation_id": uuid.uuid4()})
        )

        assert response.status_code == status.HTTP_404_NOT_FOUND
        assert response.json()["error"]["code"] == "ACTIVATION_NOT_FOUND"

    def test_activations_of_unknown_license(self, admin_api_client):
        """Test listing activations of an unknown license is not found."""
        response = admin_api_client.get(
            reverse("admin_api:admin-license-activations", kwargs={"license_id": uuid.uuid4()})
        )

        assert response.status_code == status.HTTP_404_NOT_FOUND
        assert response.json()["error"]["code"] == "LICENSE_NOT_FOUND"


@pytest.mark.django_db
@pytest.mark.integration
class TestAdminReportsAPI:
    """Integration tests for the dashboard, revenue report and export."""

    def _pay(self, client, license, amount, payment_type, payment_date=None):
        body = {"licenseId": str(license.id), "amount": amount, "paymentType": payment_type}
        if payment_date:
            body["paymentDate"] = payment_date
        response = client.post(reverse("admin_api:admin-payments"), body, format="json")
        assert response.status_code == status.HTTP_201_CREATED

    def test_dashboard_stats(self, admin_api_client, create_license):
        """Test the dashboard counts licenses, subscriptions and revenue."""
        paid = create_license(days_left=10)
        create_license(days_left=200)
        create_license(days_left=5, is_free_trial=True)
        create_license(days_left=300, status=LicenseStatus.REVOKED)
        self._pay(admin_api_client, paid, "350.00", "initial")

        response = admin_api_client.get(reverse("admin_api:dashboard-stats"))

        assert response.status_code == status.HTTP_200_OK
        data = response.json()
        assert data["licenses"] == {
            "total": 4,
            "active": 3,
            "expired": 0,
            "revoked": 1,
            "suspended": 0,
            "freeTrial": 1,
            "expiringSoon": 2,
        }
        assert data["subscriptions"]["total"] == 4
        assert data["subscriptions"]["expiringSoon"] == 2
        assert Decimal(data["revenue"]["total"]) == Decimal("350")
        assert Decimal(data["revenue"]["monthly"]) == Decimal("350")
        assert Decimal(data["revenue"]["byType"]["initial"]) == Decimal("350")
        assert data["activations"] == {"total": 0, "active": 0, "inactive": 0}
        assert data["recentActivity"] == {"licenses": 4, "activations": 0, "payments": 1}

    def test_revenue_report(self, admin_api_client, create_license):
        """Test revenue grouped by month with the month-over-month trend."""
        license = create_license()
        self._pay(admin_api_client, license, "50.00", "annual", "2025-01-15T10:00:00Z")
        self._pay(admin_api_client, license, "350.00", "initial", "2025-02-10T10:00:00Z")
        self._pay(admin_api_client, license, "50.00", "annual", "2025-02-20T10:00:00Z")

        response = admin_api_client.get(
            reverse("admin_api:revenue-report"),
            {"startDate": "2025-01-01T00:00:00Z", "endDate": "2025-02-28T00:00:00Z"},
        )

        assert response.status_code == status.HTTP_200_OK
        data = response.json()
        periods = data["revenueByPeriod"]
        assert [p["period"] for p in periods] == ["2025-01", "2025-02"]
        assert Decimal(periods[1]["amount"]) == Decimal("400")
        assert Decimal(periods[1]["initialPayments"]) == Decimal("350")
        assert Decimal(periods[1]["subscriptionPayments"]) == Decimal("50")
        assert Decimal(data["summary"]["totalRevenue"]) == Decimal("450")
        assert data["summary"]["totalCount"] == 3
        assert Decimal(data["summary"]["trend"]) == Decimal("700.00")

    def test_revenue_report_bad_range(self, admin_api_client):
        """Test a start date after the end date is invalid input."""
        response = admin_api_client.get(
            reverse("admin_api:revenue-report"),
            {"startDate": "2025-03-01T00:00:00Z", "endDate": "2025-02-01T00:00:00Z"},
        )

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.json()["error"]["code"] == "INVALID_INPUT"

    def test_export_licenses(self, admin_api_client, create_license):
        """Test the CSV export carries a header row and one row per license."""
        create_license()
        revoked = create_license(status=LicenseStatus.REVOKED)

        response = admin_api_client.get(reverse("admin_api:export-licenses"))
        filtered = admin_api_client.get(
            reverse("admin_api:export-licenses"), {"status": "revoked"}
        )

        assert response.status_code == status.HTTP_200_OK
        assert response["Content-Type"].startswith("text/csv")
        assert response["Content-Disposition"].startswith('attachment; filename="licenses_export_')
        lines = response.content.decode().splitlines()
        assert lines[0] == ",".join(LICENSE_EXPORT_HEADERS)
        assert len(lines) == 3
        filtered_lines = filtered.content.decode().splitlines()
        assert len(filtered_lines) == 2
        assert revoked.key in filtered_lines[1]
