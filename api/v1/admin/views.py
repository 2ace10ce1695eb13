"""
Admin API views.

These endpoints are used by administrators to:
- Log in and obtain a bearer token
- Browse licenses, activations, subscriptions and payments
- Edit licenses and change their status, user limits and subscriptions
- Read dashboard statistics, revenue reports and the license CSV export
- Record payments
- Run the expiry sweep on demand
"""

import uuid

from asgiref.sync import async_to_sync, sync_to_async
from django.conf import settings
from django.contrib.auth import authenticate
from django.http import HttpResponse
from django.utils import timezone
from drf_spectacular.utils import OpenApiParameter, extend_schema
from rest_framework import status
from rest_framework.request import Request
from rest_framework.response import Response
from rest_framework.views import APIView

from activations.application.commands.activate_license import (
    DeactivateActivationCommand,
    ResetActivationsCommand,
)
from activations.application.handlers.deactivate_activation_handler import (
    DeactivateActivationHandler,
    ResetActivationsHandler,
)
from activations.application.handlers.list_activations_handler import (
    GetActivationHandler,
    ListActivationsHandler,
    ListLicenseActivationsHandler,
)
from activations.application.queries.list_activations import (
    GetActivationQuery,
    ListActivationsQuery,
    ListLicenseActivationsQuery,
)
from activations.infrastructure.repositories.django_activation_repository import (
    DjangoActivationRepository,
)
from api.authentication import AdminTokenAuthentication
from api.exceptions import error_body, invalid_input_response
from api.permissions import IsAdminToken
from api.v1.admin.serializers import (
    ActivationListQuerySerializer,
    ActivationSerializer,
    AdminLoginRequestSerializer,
    AdminLoginResponseSerializer,
    DashboardStatsSerializer,
    ExpirySweepRequestSerializer,
    ExpirySweepResultSerializer,
    IncreaseUserLimitRequestSerializer,
    LicenseDetailSerializer,
    LicenseExportQuerySerializer,
    LicenseListQuerySerializer,
    LicenseSerializer,
    PaymentListQuerySerializer,
    PaymentSerializer,
    PaymentStatisticsQuerySerializer,
    PaymentStatisticsSerializer,
    RecordPaymentRequestSerializer,
    RenewSubscriptionRequestSerializer,
    RevenueReportQuerySerializer,
    RevenueReportSerializer,
    SeatCountSerializer,
    SubscriptionListQuerySerializer,
    SubscriptionSerializer,
    UpdateLicenseRequestSerializer,
)
from core.domain.value_objects import PaymentType
from core.infrastructure.tokens import AdminTokenService
from core.instrumentation import Status, StatusCode, get_tracer
from licenses.application.commands.change_license_status import (
    ChangeLicenseStatusCommand,
    LicenseStatusAction,
)
from licenses.application.commands.renew_subscription import RenewSubscriptionCommand
from licenses.application.commands.update_license import UpdateLicenseCommand
from licenses.application.commands.user_count import IncreaseUserLimitCommand
from licenses.application.handlers.expiry_sweep_handler import ExpirySweepJob
from licenses.application.handlers.license_lifecycle_handlers import (
    ChangeLicenseStatusHandler,
    RenewSubscriptionHandler,
    UpdateLicenseHandler,
)
from licenses.application.handlers.list_licenses_handler import (
    GetLicenseDetailHandler,
    GetSubscriptionHandler,
    ListLicensesHandler,
    ListSubscriptionsHandler,
)
from licenses.application.handlers.report_handlers import (
    DashboardStatsHandler,
    ExportLicensesHandler,
    RevenueReportHandler,
)
from licenses.application.handlers.user_count_handlers import IncreaseUserLimitHandler
from licenses.application.queries.list_licenses import (
    GetLicenseDetailQuery,
    GetSubscriptionQuery,
    ListLicensesQuery,
    ListSubscriptionsQuery,
)
from licenses.application.queries.reports import ExportLicensesQuery, RevenueReportQuery
from licenses.domain.services import SeatLedger
from licenses.infrastructure.repositories.django_license_repository import DjangoLicenseRepository
from licenses.infrastructure.repositories.django_subscription_repository import (
    DjangoSubscriptionRepository,
)
from payments.application.commands.record_payment import RecordPaymentCommand
from payments.application.handlers.list_payments_handler import (
    ListPaymentsHandler,
    PaymentStatisticsHandler,
)
from payments.application.handlers.record_payment_handler import RecordPaymentHandler
from payments.application.queries.list_payments import ListPaymentsQuery, PaymentStatisticsQuery
from payments.infrastructure.repositories.django_payment_repository import DjangoPaymentRepository

# Initialize repositories (in production, use DI container)
_license_repo = DjangoLicenseRepository()
_subscription_repo = DjangoSubscriptionRepository()
_activation_repo = DjangoActivationRepository()
_payment_repo = DjangoPaymentRepository()

tracer = get_tracer(__name__)

AUTH_RESPONSES = {
    401: {"description": "Unauthorized - Missing or invalid admin token"},
    429: {"description": "Too Many Requests"},
}


def _page_response(page) -> Response:
    return Response(
        {"items": [item.to_dict() for item in page.items], "pagination": page.pagination()},
        status=status.HTTP_200_OK,
    )


def _page_parameters(sort_fields: str, default_sort: str):
    return [
        OpenApiParameter(name="page", type=int, description="1-based page number (default 1)"),
        OpenApiParameter(name="pageSize", type=int, description="Items per page, 1-100 (default 20)"),
        OpenApiParameter(
            name="sortBy", type=str, description=f"One of {sort_fields} (default {default_sort})"
        ),
        OpenApiParameter(name="sortOrder", type=str, enum=["asc", "desc"], description="Default desc"),
    ]


class AdminAPIView(APIView):
    """Base view for endpoints that require an admin token."""

    authentication_classes = [AdminTokenAuthentication]
    permission_classes = [IsAdminToken]

    @staticmethod
    def actor(request: Request) -> str:
        return request.user.username


class AdminLoginView(APIView):
    """View for admin login."""

    @extend_schema(
        operation_id="admin_login",
        summary="Admin Login",
        description="Exchange staff credentials for a bearer token used by the admin API.",
        tags=["Admin API"],
        request=AdminLoginRequestSerializer,
        responses={
            200: AdminLoginResponseSerializer,
            400: {"description": "Bad Request"},
            401: {"description": "Invalid credentials"},
            429: {"description": "Too Many Requests"},
        },
    )
    def post(self, request: Request) -> Response:
        """Log in an administrator."""
        return async_to_sync(self._handle_login)(request)

    async def _handle_login(self, request: Request) -> Response:
        """Async handler for admin login."""
        with tracer.start_as_current_span("admin_login") as span:
            span.set_attribute("operation", "admin_login")

            serializer = AdminLoginRequestSerializer(data=request.data)
            if not serializer.is_valid():
                span.set_attribute("error", "validation_failed")
                span.set_status(Status(StatusCode.ERROR, "Validation failed"))
                return invalid_input_response(serializer.errors)

            user = await sync_to_async(authenticate)(
                request._request,
                username=serializer.validated_data["username"],
                password=serializer.validated_data["password"],
            )
            if user is None or not user.is_active or not user.is_staff:
                span.set_status(Status(StatusCode.ERROR, "Invalid credentials"))
                return Response(
                    error_body("INVALID_CREDENTIALS", "Invalid username or password"),
                    status=status.HTTP_401_UNAUTHORIZED,
                )

            token = AdminTokenService().issue(user.get_username())
            span.set_status(Status(StatusCode.OK))
            return Response(
                {
                    "token": token,
                    "tokenType": "Bearer",
                    "expiresIn": settings.ADMIN_TOKEN_TTL_HOURS * 3600,
                    "username": user.get_username(),
                },
                status=status.HTTP_200_OK,
            )


class LicenseListView(AdminAPIView):
    """View for listing licenses."""

    @extend_schema(
        operation_id="admin_list_licenses",
        summary="List Licenses",
        description="Paginated license listing, filterable by status, search text and trial flag.",
        tags=["Admin API"],
        parameters=_page_parameters(
            "id, licenseKey, customerName, customerPhone, status, purchaseDate, "
            "createdAt, updatedAt",
            "createdAt",
        )
        + [
            OpenApiParameter(
                name="status", type=str, enum=["active", "expired", "revoked", "suspended"]
            ),
            OpenApiParameter(
                name="search", type=str, description="Matches key, customer name, phone or location"
            ),
            OpenApiParameter(name="isFreeTrial", type=bool),
        ],
        responses={200: LicenseSerializer(many=True), **AUTH_RESPONSES},
    )
    def get(self, request: Request) -> Response:
        """List licenses."""
        return async_to_sync(self._handle_list_licenses)(request)

    async def _handle_list_licenses(self, request: Request) -> Response:
        """Async handler for list licenses."""
        with tracer.start_as_current_span("admin_list_licenses") as span:
            span.set_attribute("operation", "admin_list_licenses")

            serializer = LicenseListQuerySerializer(data=request.query_params)
            if not serializer.is_valid():
                span.set_status(Status(StatusCode.ERROR, "Validation failed"))
                return invalid_input_response(serializer.errors)

            params = serializer.validated_data
            query = ListLicensesQuery(
                page=params.get("page"),
                page_size=params.get("pageSize"),
                sort_by=params.get("sortBy"),
                sort_order=params.get("sortOrder"),
                status=params.get("status"),
                search=params.get("search") or None,
                is_free_trial=params.get("isFreeTrial"),
            )
            page = await ListLicensesHandler(license_repository=_license_repo).handle(query)

            span.set_attribute("licenses.count", len(page.items))
            span.set_status(Status(StatusCode.OK))
            return _page_response(page)


class LicenseDetailView(AdminAPIView):
    """View for one license with its subscriptions."""

    @extend_schema(
        operation_id="admin_get_license",
        summary="Get License",
        description="License detail including its subscription history.",
        tags=["Admin API"],
        responses={
            200: LicenseDetailSerializer,
            404: {"description": "License not found"},
            **AUTH_RESPONSES,
        },
    )
    def get(self, request: Request, license_id: uuid.UUID) -> Response:
        """Get a license."""
        return async_to_sync(self._handle_get_license)(request, license_id)

    async def _handle_get_license(self, request: Request, license_id: uuid.UUID) -> Response:
        """Async handler for get license."""
        with tracer.start_as_current_span("admin_get_license") as span:
            span.set_attribute("operation", "admin_get_license")
            span.set_attribute("license.id", str(license_id))

            handler = GetLicenseDetailHandler(
                license_repository=_license_repo,
                subscription_repository=_subscription_repo,
            )
            result = await handler.handle(GetLicenseDetailQuery(license_id=license_id))

            span.set_status(Status(StatusCode.OK))
            return Response(result.to_dict(include_subscriptions=True), status=status.HTTP_200_OK)

    @extend_schema(
        operation_id="update_license",
        summary="Update License",
        description=(
            "Edit customer, location, price and date fields. Omitted fields are "
            "unchanged. A new annual price or end date is applied to the current "
            "subscription too."
        ),
        tags=["Admin API"],
        request=UpdateLicenseRequestSerializer,
        responses={
            200: LicenseDetailSerializer,
            400: {"description": "Bad Request or inconsistent dates"},
            404: {"description": "License not found"},
            **AUTH_RESPONSES,
        },
    )
    def put(self, request: Request, license_id: uuid.UUID) -> Response:
        """Update a license."""
        return async_to_sync(self._handle_update_license)(request, license_id)

    @extend_schema(operation_id="patch_license", exclude=True)
    def patch(self, request: Request, license_id: uuid.UUID) -> Response:
        """Update a license; same semantics as PUT."""
        return async_to_sync(self._handle_update_license)(request, license_id)

    async def _handle_update_license(self, request: Request, license_id: uuid.UUID) -> Response:
        """Async handler for update license."""
        with tracer.start_as_current_span("update_license") as span:
            span.set_attribute("operation", "update_license")
            span.set_attribute("license.id", str(license_id))

            serializer = UpdateLicenseRequestSerializer(data=request.data)
            if not serializer.is_valid():
                span.set_status(Status(StatusCode.ERROR, "Validation failed"))
                return invalid_input_response(serializer.errors)

            data = serializer.validated_data
            handler = UpdateLicenseHandler(
                license_repository=_license_repo,
                subscription_repository=_subscription_repo,
            )
            command = UpdateLicenseCommand(
                license_id=license_id,
                customer_name=data.get("customerName"),
                customer_phone=data.get("customerPhone"),
                location_name=data.get("locationName"),
                location_address=data.get("locationAddress"),
                initial_price=data.get("initialPrice"),
                annual_price=data.get("annualPrice"),
                price_per_user=data.get("pricePerUser"),
                start_date=data.get("startDate"),
                end_date=data.get("endDate"),
                actor=self.actor(request),
            )
            result = await handler.handle(command)

            span.set_attribute("license.fields", sorted(command.changes()))
            span.set_status(Status(StatusCode.OK))
            return Response(result.to_dict(include_subscriptions=True), status=status.HTTP_200_OK)


class LicenseActivationsView(AdminAPIView):
    """View for every activation of one license."""

    @extend_schema(
        operation_id="admin_license_activations",
        summary="List License Activations",
        description="All activations of one license, newest first.",
        tags=["Admin API"],
        responses={
            200: ActivationSerializer(many=True),
            404: {"description": "License not found"},
            **AUTH_RESPONSES,
        },
    )
    def get(self, request: Request, license_id: uuid.UUID) -> Response:
        """List a license's activations."""
        return async_to_sync(self._handle_license_activations)(request, license_id)

    async def _handle_license_activations(
        self, request: Request, license_id: uuid.UUID
    ) -> Response:
        """Async handler for license activations."""
        with tracer.start_as_current_span("admin_license_activations") as span:
            span.set_attribute("operation", "admin_license_activations")
            span.set_attribute("license.id", str(license_id))

            handler = ListLicenseActivationsHandler(
                license_repository=_license_repo,
                activation_repository=_activation_repo,
            )
            result = await handler.handle(ListLicenseActivationsQuery(license_id=license_id))

            span.set_attribute("activations.count", len(result))
            span.set_status(Status(StatusCode.OK))
            return Response([item.to_dict() for item in result], status=status.HTTP_200_OK)


class ChangeLicenseStatusView(AdminAPIView):
    """Base view for license status transitions."""

    status_action: LicenseStatusAction = None

    def post(self, request: Request, license_id: uuid.UUID) -> Response:
        """Apply the status transition."""
        return async_to_sync(self._handle_change_status)(request, license_id)

    async def _handle_change_status(self, request: Request, license_id: uuid.UUID) -> Response:
        """Async handler for status transitions."""
        span_name = f"{self.status_action.value}_license"
        with tracer.start_as_current_span(span_name) as span:
            span.set_attribute("operation", span_name)
            span.set_attribute("license.id", str(license_id))

            handler = ChangeLicenseStatusHandler(license_repository=_license_repo)
            command = ChangeLicenseStatusCommand(
                license_id=license_id,
                action=self.status_action,
                actor=self.actor(request),
            )
            result = await handler.handle(command)

            span.set_attribute("license.status", result.status)
            span.set_status(Status(StatusCode.OK))
            return Response(result.to_dict(), status=status.HTTP_200_OK)


STATUS_CHANGE_RESPONSES = {
    200: LicenseSerializer,
    404: {"description": "License not found"},
    409: {"description": "Transition not allowed from the current status"},
    **AUTH_RESPONSES,
}


class RevokeLicenseView(ChangeLicenseStatusView):
    """View for revoking licenses."""

    status_action = LicenseStatusAction.REVOKE

    @extend_schema(
        operation_id="revoke_license",
        summary="Revoke License",
        description="Permanently withdraw a license. Allowed from any status.",
        tags=["Admin API"],
        request=None,
        responses=STATUS_CHANGE_RESPONSES,
    )
    def post(self, request: Request, license_id: uuid.UUID) -> Response:
        return super().post(request, license_id)


class SuspendLicenseView(ChangeLicenseStatusView):
    """View for suspending licenses."""

    status_action = LicenseStatusAction.SUSPEND

    @extend_schema(
        operation_id="suspend_license",
        summary="Suspend License",
        description="Temporarily disable an active or expired license.",
        tags=["Admin API"],
        request=None,
        responses=STATUS_CHANGE_RESPONSES,
    )
    def post(self, request: Request, license_id: uuid.UUID) -> Response:
        return super().post(request, license_id)


class ReinstateLicenseView(ChangeLicenseStatusView):
    """View for reinstating licenses."""

    status_action = LicenseStatusAction.REINSTATE

    @extend_schema(
        operation_id="reinstate_license",
        summary="Reinstate License",
        description="Bring a revoked or suspended license back to active.",
        tags=["Admin API"],
        request=None,
        responses=STATUS_CHANGE_RESPONSES,
    )
    def post(self, request: Request, license_id: uuid.UUID) -> Response:
        return super().post(request, license_id)


class ReactivateLicenseView(AdminAPIView):
    """View for resetting every activation of a license."""

    @extend_schema(
        operation_id="reactivate_license",
        summary="Reset Activations",
        description=(
            "Deactivate every machine bound to the license so it can be activated "
            "afresh, for example after hardware replacement."
        ),
        tags=["Admin API"],
        request=None,
        responses={
            200: {"description": "Activations reset"},
            404: {"description": "License not found"},
            **AUTH_RESPONSES,
        },
    )
    def post(self, request: Request, license_id: uuid.UUID) -> Response:
        """Reset activations of a license."""
        return async_to_sync(self._handle_reactivate)(request, license_id)

    async def _handle_reactivate(self, request: Request, license_id: uuid.UUID) -> Response:
        """Async handler for reset activations."""
        with tracer.start_as_current_span("reactivate_license") as span:
            span.set_attribute("operation", "reactivate_license")
            span.set_attribute("license.id", str(license_id))

            handler = ResetActivationsHandler(
                license_repository=_license_repo,
                activation_repository=_activation_repo,
            )
            result = await handler.handle(
                ResetActivationsCommand(license_id=license_id, actor=self.actor(request))
            )

            span.set_attribute("activations.deactivated", result["deactivated"])
            span.set_status(Status(StatusCode.OK))
            return Response(result, status=status.HTTP_200_OK)


class IncreaseUserLimitView(AdminAPIView):
    """View for adding user seats to a license."""

    @extend_schema(
        operation_id="increase_user_limit",
        summary="Increase User Limit",
        description="Add user seats to a license.",
        tags=["Admin API"],
        request=IncreaseUserLimitRequestSerializer,
        responses={
            200: SeatCountSerializer,
            400: {"description": "Bad Request"},
            404: {"description": "License not found"},
            **AUTH_RESPONSES,
        },
    )
    def post(self, request: Request, license_id: uuid.UUID) -> Response:
        """Increase the user limit."""
        return async_to_sync(self._handle_increase_user_limit)(request, license_id)

    async def _handle_increase_user_limit(self, request: Request, license_id: uuid.UUID) -> Response:
        """Async handler for increase user limit."""
        with tracer.start_as_current_span("increase_user_limit") as span:
            span.set_attribute("operation", "increase_user_limit")
            span.set_attribute("license.id", str(license_id))

            serializer = IncreaseUserLimitRequestSerializer(data=request.data)
            if not serializer.is_valid():
                span.set_status(Status(StatusCode.ERROR, "Validation failed"))
                return invalid_input_response(serializer.errors)

            additional_users = serializer.validated_data["additionalUsers"]
            span.set_attribute("additional_users", additional_users)

            handler = IncreaseUserLimitHandler(
                license_repository=_license_repo,
                seat_ledger=SeatLedger(_license_repo, _subscription_repo),
            )
            result = await handler.handle(
                IncreaseUserLimitCommand(license_id=license_id, additional_users=additional_users)
            )

            span.set_status(Status(StatusCode.OK))
            return Response(result.to_dict(), status=status.HTTP_200_OK)


class RenewSubscriptionView(AdminAPIView):
    """View for renewing the subscription of a license."""

    @extend_schema(
        operation_id="renew_subscription",
        summary="Renew Subscription",
        description=(
            "Extend the subscription by one year from its end date, or from now when "
            "extendFromNow is set. An expired license becomes active again."
        ),
        tags=["Admin API"],
        request=RenewSubscriptionRequestSerializer,
        responses={
            200: LicenseDetailSerializer,
            400: {"description": "Bad Request"},
            404: {"description": "License not found"},
            **AUTH_RESPONSES,
        },
    )
    def post(self, request: Request, license_id: uuid.UUID) -> Response:
        """Renew a subscription."""
        return async_to_sync(self._handle_renew)(request, license_id)

    async def _handle_renew(self, request: Request, license_id: uuid.UUID) -> Response:
        """Async handler for renew subscription."""
        with tracer.start_as_current_span("renew_subscription") as span:
            span.set_attribute("operation", "renew_subscription")
            span.set_attribute("license.id", str(license_id))

            serializer = RenewSubscriptionRequestSerializer(data=request.data)
            if not serializer.is_valid():
                span.set_status(Status(StatusCode.ERROR, "Validation failed"))
                return invalid_input_response(serializer.errors)

            extend_from_now = serializer.validated_data["extendFromNow"]
            span.set_attribute("extend_from_now", extend_from_now)

            handler = RenewSubscriptionHandler(
                license_repository=_license_repo,
                subscription_repository=_subscription_repo,
            )
            result = await handler.handle(
                RenewSubscriptionCommand(license_id=license_id, extend_from_now=extend_from_now)
            )

            span.set_status(Status(StatusCode.OK))
            return Response(result.to_dict(include_subscriptions=True), status=status.HTTP_200_OK)


class ActivationListView(AdminAPIView):
    """View for listing activations."""

    @extend_schema(
        operation_id="admin_list_activations",
        summary="List Activations",
        description="Paginated activation listing, filterable by license and active flag.",
        tags=["Admin API"],
        parameters=_page_parameters(
            "id, hardwareId, machineName, activatedAt, lastValidation, isActive", "activatedAt"
        )
        + [
            OpenApiParameter(name="licenseId", type=uuid.UUID),
            OpenApiParameter(name="isActive", type=bool),
        ],
        responses={200: ActivationSerializer(many=True), **AUTH_RESPONSES},
    )
    def get(self, request: Request) -> Response:
        """List activations."""
        return async_to_sync(self._handle_list_activations)(request)

    async def _handle_list_activations(self, request: Request) -> Response:
        """Async handler for list activations."""
        with tracer.start_as_current_span("admin_list_activations") as span:
            span.set_attribute("operation", "admin_list_activations")

            serializer = ActivationListQuerySerializer(data=request.query_params)
            if not serializer.is_valid():
                span.set_status(Status(StatusCode.ERROR, "Validation failed"))
                return invalid_input_response(serializer.errors)

            params = serializer.validated_data
            query = ListActivationsQuery(
                page=params.get("page"),
                page_size=params.get("pageSize"),
                sort_by=params.get("sortBy"),
                sort_order=params.get("sortOrder"),
                license_id=params.get("licenseId"),
                is_active=params.get("isActive"),
            )
            page = await ListActivationsHandler(activation_repository=_activation_repo).handle(query)

            span.set_attribute("activations.count", len(page.items))
            span.set_status(Status(StatusCode.OK))
            return _page_response(page)


class ActivationDetailView(AdminAPIView):
    """View for one activation."""

    @extend_schema(
        operation_id="admin_get_activation",
        summary="Get Activation",
        tags=["Admin API"],
        responses={
            200: ActivationSerializer,
            404: {"description": "Activation not found"},
            **AUTH_RESPONSES,
        },
    )
    def get(self, request: Request, activation_id: uuid.UUID) -> Response:
        """Get an activation."""
        return async_to_sync(self._handle_get_activation)(request, activation_id)

    async def _handle_get_activation(self, request: Request, activation_id: uuid.UUID) -> Response:
        """Async handler for get activation."""
        with tracer.start_as_current_span("admin_get_activation") as span:
            span.set_attribute("operation", "admin_get_activation")
            span.set_attribute("activation.id", str(activation_id))

            handler = GetActivationHandler(activation_repository=_activation_repo)
            result = await handler.handle(GetActivationQuery(activation_id=activation_id))

            span.set_status(Status(StatusCode.OK))
            return Response(result.to_dict(), status=status.HTTP_200_OK)


class DeactivateActivationView(AdminAPIView):
    """View for deactivating one activation."""

    @extend_schema(
        operation_id="deactivate_activation",
        summary="Deactivate Activation",
        description="Release one machine from its license. Deactivating twice is a no-op.",
        tags=["Admin API"],
        request=None,
        responses={
            200: ActivationSerializer,
            404: {"description": "Activation not found"},
            **AUTH_RESPONSES,
        },
    )
    def post(self, request: Request, activation_id: uuid.UUID) -> Response:
        """Deactivate an activation."""
        return async_to_sync(self._handle_deactivate)(request, activation_id)

    async def _handle_deactivate(self, request: Request, activation_id: uuid.UUID) -> Response:
        """Async handler for deactivate activation."""
        with tracer.start_as_current_span("deactivate_activation") as span:
            span.set_attribute("operation", "deactivate_activation")
            span.set_attribute("activation.id", str(activation_id))

            handler = DeactivateActivationHandler(activation_repository=_activation_repo)
            result = await handler.handle(
                DeactivateActivationCommand(activation_id=activation_id, actor=self.actor(request))
            )

            span.set_status(Status(StatusCode.OK))
            return Response(result.to_dict(), status=status.HTTP_200_OK)


class SubscriptionListView(AdminAPIView):
    """View for listing subscriptions."""

    @extend_schema(
        operation_id="admin_list_subscriptions",
        summary="List Subscriptions",
        description=(
            "Paginated subscription listing. expiringSoon keeps subscriptions ending "
            "within 30 days; expired keeps those already ended."
        ),
        tags=["Admin API"],
        parameters=_page_parameters(
            "id, startDate, endDate, status, annualFee, createdAt", "endDate"
        )
        + [
            OpenApiParameter(name="licenseId", type=uuid.UUID),
            OpenApiParameter(name="status", type=str, enum=["active", "expired", "grace_period"]),
            OpenApiParameter(name="expiringSoon", type=bool),
            OpenApiParameter(name="expired", type=bool),
        ],
        responses={200: SubscriptionSerializer(many=True), **AUTH_RESPONSES},
    )
    def get(self, request: Request) -> Response:
        """List subscriptions."""
        return async_to_sync(self._handle_list_subscriptions)(request)

    async def _handle_list_subscriptions(self, request: Request) -> Response:
        """Async handler for list subscriptions."""
        with tracer.start_as_current_span("admin_list_subscriptions") as span:
            span.set_attribute("operation", "admin_list_subscriptions")

            serializer = SubscriptionListQuerySerializer(data=request.query_params)
            if not serializer.is_valid():
                span.set_status(Status(StatusCode.ERROR, "Validation failed"))
                return invalid_input_response(serializer.errors)

            params = serializer.validated_data
            query = ListSubscriptionsQuery(
                page=params.get("page"),
                page_size=params.get("pageSize"),
                sort_by=params.get("sortBy"),
                sort_order=params.get("sortOrder"),
                license_id=params.get("licenseId"),
                status=params.get("status"),
                expiring_soon=params["expiringSoon"],
                expired=params["expired"],
            )
            handler = ListSubscriptionsHandler(subscription_repository=_subscription_repo)
            page = await handler.handle(query)

            span.set_attribute("subscriptions.count", len(page.items))
            span.set_status(Status(StatusCode.OK))
            return _page_response(page)


class SubscriptionDetailView(AdminAPIView):
    """View for one subscription."""

    @extend_schema(
        operation_id="admin_get_subscription",
        summary="Get Subscription",
        tags=["Admin API"],
        responses={
            200: SubscriptionSerializer,
            404: {"description": "Subscription not found"},
            **AUTH_RESPONSES,
        },
    )
    def get(self, request: Request, subscription_id: uuid.UUID) -> Response:
        """Get a subscription."""
        return async_to_sync(self._handle_get_subscription)(request, subscription_id)

    async def _handle_get_subscription(
        self, request: Request, subscription_id: uuid.UUID
    ) -> Response:
        """Async handler for get subscription."""
        with tracer.start_as_current_span("admin_get_subscription") as span:
            span.set_attribute("operation", "admin_get_subscription")
            span.set_attribute("subscription.id", str(subscription_id))

            handler = GetSubscriptionHandler(subscription_repository=_subscription_repo)
            result = await handler.handle(GetSubscriptionQuery(subscription_id=subscription_id))

            span.set_status(Status(StatusCode.OK))
            return Response(result.to_dict(), status=status.HTTP_200_OK)


class PaymentListView(AdminAPIView):
    """View for listing and recording payments."""

    @extend_schema(
        operation_id="admin_list_payments",
        summary="List Payments",
        description="Paginated payment listing, filterable by license, type and date range.",
        tags=["Admin API"],
        parameters=_page_parameters("id, amount, paymentDate, createdAt", "paymentDate")
        + [
            OpenApiParameter(name="licenseId", type=uuid.UUID),
            OpenApiParameter(name="paymentType", type=str, enum=["initial", "annual", "user"]),
            OpenApiParameter(name="startDate", type=str, description="ISO 8601 date-time"),
            OpenApiParameter(
                name="endDate", type=str, description="ISO 8601 date-time; the whole day is included"
            ),
        ],
        responses={200: PaymentSerializer(many=True), **AUTH_RESPONSES},
    )
    def get(self, request: Request) -> Response:
        """List payments."""
        return async_to_sync(self._handle_list_payments)(request)

    async def _handle_list_payments(self, request: Request) -> Response:
        """Async handler for list payments."""
        with tracer.start_as_current_span("admin_list_payments") as span:
            span.set_attribute("operation", "admin_list_payments")

            serializer = PaymentListQuerySerializer(data=request.query_params)
            if not serializer.is_valid():
                span.set_status(Status(StatusCode.ERROR, "Validation failed"))
                return invalid_input_response(serializer.errors)

            params = serializer.validated_data
            query = ListPaymentsQuery(
                page=params.get("page"),
                page_size=params.get("pageSize"),
                sort_by=params.get("sortBy"),
                sort_order=params.get("sortOrder"),
                license_id=params.get("licenseId"),
                payment_type=params.get("paymentType"),
                start_date=params.get("startDate"),
                end_date=params.get("endDate"),
            )
            page = await ListPaymentsHandler(payment_repository=_payment_repo).handle(query)

            span.set_attribute("payments.count", len(page.items))
            span.set_status(Status(StatusCode.OK))
            return _page_response(page)

    @extend_schema(
        operation_id="record_payment",
        summary="Record Payment",
        description=(
            "Record a payment. Any payment converts a free trial to paid; annual "
            "payments renew the subscription; user payments may add user seats."
        ),
        tags=["Admin API"],
        request=RecordPaymentRequestSerializer,
        responses={
            201: PaymentSerializer,
            400: {"description": "Bad Request or payment rule violated"},
            404: {"description": "License not found"},
            **AUTH_RESPONSES,
        },
    )
    def post(self, request: Request) -> Response:
        """Record a payment."""
        return async_to_sync(self._handle_record_payment)(request)

    async def _handle_record_payment(self, request: Request) -> Response:
        """Async handler for record payment."""
        with tracer.start_as_current_span("record_payment") as span:
            span.set_attribute("operation", "record_payment")

            serializer = RecordPaymentRequestSerializer(data=request.data)
            if not serializer.is_valid():
                span.set_status(Status(StatusCode.ERROR, "Validation failed"))
                return invalid_input_response(serializer.errors)

            data = serializer.validated_data
            span.set_attribute("license.id", str(data["licenseId"]))
            span.set_attribute("payment_type", data["paymentType"])

            handler = RecordPaymentHandler(
                license_repository=_license_repo,
                subscription_repository=_subscription_repo,
                payment_repository=_payment_repo,
            )
            command = RecordPaymentCommand(
                license_id=data["licenseId"],
                amount=data["amount"],
                payment_type=PaymentType(data["paymentType"]),
                payment_date=data.get("paymentDate"),
                additional_users=data.get("additionalUsers"),
                actor=self.actor(request),
            )
            result = await handler.handle(command)

            span.set_attribute("payment.id", str(result.id))
            span.set_status(Status(StatusCode.OK))
            return Response(result.to_dict(), status=status.HTTP_201_CREATED)


class PaymentStatisticsView(AdminAPIView):
    """View for revenue statistics."""

    @extend_schema(
        operation_id="payment_statistics",
        summary="Payment Statistics",
        description="Totals and averages of payments, split into annual and one-off payments.",
        tags=["Admin API"],
        parameters=[
            OpenApiParameter(name="licenseId", type=uuid.UUID),
            OpenApiParameter(name="startDate", type=str, description="ISO 8601 date-time"),
            OpenApiParameter(name="endDate", type=str, description="ISO 8601 date-time"),
        ],
        responses={200: PaymentStatisticsSerializer, **AUTH_RESPONSES},
    )
    def get(self, request: Request) -> Response:
        """Get payment statistics."""
        return async_to_sync(self._handle_statistics)(request)

    async def _handle_statistics(self, request: Request) -> Response:
        """Async handler for payment statistics."""
        with tracer.start_as_current_span("payment_statistics") as span:
            span.set_attribute("operation", "payment_statistics")

            serializer = PaymentStatisticsQuerySerializer(data=request.query_params)
            if not serializer.is_valid():
                span.set_status(Status(StatusCode.ERROR, "Validation failed"))
                return invalid_input_response(serializer.errors)

            params = serializer.validated_data
            query = PaymentStatisticsQuery(
                license_id=params.get("licenseId"),
                start_date=params.get("startDate"),
                end_date=params.get("endDate"),
            )
            result = await PaymentStatisticsHandler(payment_repository=_payment_repo).handle(query)

            span.set_status(Status(StatusCode.OK))
            return Response(result.to_dict(), status=status.HTTP_200_OK)


class DashboardStatsView(AdminAPIView):
    """View for the admin dashboard statistics."""

    @extend_schema(
        operation_id="dashboard_stats",
        summary="Dashboard Statistics",
        description=(
            "License, subscription and activation counts with revenue totals. "
            "Expiring soon means ending within 30 days; recent activity covers "
            "the last seven days."
        ),
        tags=["Admin API"],
        responses={200: DashboardStatsSerializer, **AUTH_RESPONSES},
    )
    def get(self, request: Request) -> Response:
        """Get dashboard statistics."""
        return async_to_sync(self._handle_stats)(request)

    async def _handle_stats(self, request: Request) -> Response:
        """Async handler for dashboard statistics."""
        with tracer.start_as_current_span("dashboard_stats") as span:
            span.set_attribute("operation", "dashboard_stats")

            handler = DashboardStatsHandler(
                license_repository=_license_repo,
                subscription_repository=_subscription_repo,
                activation_repository=_activation_repo,
                payment_repository=_payment_repo,
            )
            result = await handler.handle()

            span.set_attribute("licenses.total", result.licenses.total)
            span.set_status(Status(StatusCode.OK))
            return Response(result.to_dict(), status=status.HTTP_200_OK)


class RevenueReportView(AdminAPIView):
    """View for the monthly revenue report."""

    @extend_schema(
        operation_id="revenue_report",
        summary="Revenue Report",
        description=(
            "Revenue grouped by calendar month with a month-over-month trend. "
            "Defaults to the last twelve months."
        ),
        tags=["Admin API"],
        parameters=[
            OpenApiParameter(name="startDate", type=str, description="ISO 8601 date-time"),
            OpenApiParameter(
                name="endDate", type=str, description="ISO 8601 date-time; the whole day is included"
            ),
        ],
        responses={200: RevenueReportSerializer, **AUTH_RESPONSES},
    )
    def get(self, request: Request) -> Response:
        """Get the revenue report."""
        return async_to_sync(self._handle_revenue_report)(request)

    async def _handle_revenue_report(self, request: Request) -> Response:
        """Async handler for the revenue report."""
        with tracer.start_as_current_span("revenue_report") as span:
            span.set_attribute("operation", "revenue_report")

            serializer = RevenueReportQuerySerializer(data=request.query_params)
            if not serializer.is_valid():
                span.set_status(Status(StatusCode.ERROR, "Validation failed"))
                return invalid_input_response(serializer.errors)

            params = serializer.validated_data
            query = RevenueReportQuery(
                start_date=params.get("startDate"),
                end_date=params.get("endDate"),
            )
            result = await RevenueReportHandler(payment_repository=_payment_repo).handle(query)

            span.set_attribute("periods.count", len(result.periods))
            span.set_status(Status(StatusCode.OK))
            return Response(result.to_dict(), status=status.HTTP_200_OK)


class LicenseExportView(AdminAPIView):
    """View for the license CSV export."""

    @extend_schema(
        operation_id="export_licenses",
        summary="Export Licenses",
        description="All licenses matching the listing filters as a CSV attachment.",
        tags=["Admin API"],
        parameters=[
            OpenApiParameter(name="status", type=str, enum=["active", "expired", "revoked", "suspended"]),
            OpenApiParameter(name="search", type=str),
            OpenApiParameter(name="isFreeTrial", type=bool),
            OpenApiParameter(name="sortBy", type=str),
            OpenApiParameter(name="sortOrder", type=str, enum=["asc", "desc"]),
        ],
        responses={200: {"type": "string", "format": "binary"}, **AUTH_RESPONSES},
    )
    def get(self, request: Request) -> Response:
        """Export licenses as CSV."""
        return async_to_sync(self._handle_export)(request)

    async def _handle_export(self, request: Request):
        """Async handler for the license export."""
        with tracer.start_as_current_span("export_licenses") as span:
            span.set_attribute("operation", "export_licenses")

            serializer = LicenseExportQuerySerializer(data=request.query_params)
            if not serializer.is_valid():
                span.set_status(Status(StatusCode.ERROR, "Validation failed"))
                return invalid_input_response(serializer.errors)

            params = serializer.validated_data
            query = ExportLicensesQuery(
                sort_by=params.get("sortBy"),
                sort_order=params.get("sortOrder"),
                status=params.get("status"),
                search=params.get("search") or None,
                is_free_trial=params.get("isFreeTrial"),
            )
            result = await ExportLicensesHandler(license_repository=_license_repo).handle(query)

            filename = f"licenses_export_{timezone.localdate().isoformat()}.csv"
            response = HttpResponse(result.to_csv(), content_type="text/csv")
            response["Content-Disposition"] = f'attachment; filename="{filename}"'

            span.set_attribute("licenses.count", len(result.licenses))
            span.set_status(Status(StatusCode.OK))
            return response


class UpdateExpiredLicensesView(AdminAPIView):
    """View for running the expiry sweep on demand."""

    @extend_schema(
        operation_id="update_expired_licenses",
        summary="Update Expired Licenses",
        description=(
            "Run the expiry sweep now. Only one sweep runs at a time; a concurrent "
            "request is answered with 409."
        ),
        tags=["Admin API"],
        request=ExpirySweepRequestSerializer,
        responses={
            200: ExpirySweepResultSerializer,
            409: {"description": "A sweep is already running"},
            **AUTH_RESPONSES,
        },
    )
    def post(self, request: Request) -> Response:
        """Run the expiry sweep."""
        return async_to_sync(self._handle_sweep)(request)

    async def _handle_sweep(self, request: Request) -> Response:
        """Async handler for the expiry sweep."""
        with tracer.start_as_current_span("update_expired_licenses") as span:
            span.set_attribute("operation", "update_expired_licenses")

            serializer = ExpirySweepRequestSerializer(data=request.data)
            if not serializer.is_valid():
                span.set_status(Status(StatusCode.ERROR, "Validation failed"))
                return invalid_input_response(serializer.errors)

            job = ExpirySweepJob(
                license_repository=_license_repo,
                subscription_repository=_subscription_repo,
            )
            result = await job.run(dry_run=serializer.validated_data["dryRun"])

            span.set_attribute("licenses.expired", result.updated)
            span.set_status(Status(StatusCode.OK))
            return Response(result.to_dict(), status=status.HTTP_200_OK)
