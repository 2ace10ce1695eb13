"""
License API views.

These endpoints are used by POS installations to:
- Generate a license
- Activate and validate a license on a machine
- Read the license status
- Keep the per-license user counter in step with the POS
"""

from datetime import datetime, timezone

from asgiref.sync import async_to_sync
from drf_spectacular.utils import extend_schema
from rest_framework import status
from rest_framework.request import Request
from rest_framework.response import Response
from rest_framework.views import APIView

from activations.application.commands.activate_license import (
    ActivateLicenseCommand,
    ValidateLicenseCommand,
)
from activations.application.handlers.activate_license_handler import (
    ActivateLicenseHandler,
    ValidateLicenseHandler,
)
from activations.infrastructure.repositories.django_activation_repository import (
    DjangoActivationRepository,
)
from activations.infrastructure.token_issuer import JwtActivationTokenIssuer
from api.exceptions import invalid_input_response
from api.v1.license.serializers import (
    ActivateLicenseRequestSerializer,
    ActivateLicenseResponseSerializer,
    GenerateLicenseRequestSerializer,
    GenerateLicenseResponseSerializer,
    LicenseStatusSerializer,
    SeatCountResponseSerializer,
    SyncUserCountRequestSerializer,
    UserCountRequestSerializer,
    UserCreationCheckResponseSerializer,
    ValidateLicenseRequestSerializer,
)
from core.domain.exceptions import InvalidInputError, ValidationFailedError
from core.instrumentation import Status, StatusCode, get_tracer
from licenses.application.commands.generate_license import GenerateLicenseCommand
from licenses.application.commands.user_count import UserCountCommand, UserCountOperation
from licenses.application.handlers.generate_license_handler import GenerateLicenseHandler
from licenses.application.handlers.get_license_status_handler import GetLicenseStatusHandler
from licenses.application.handlers.user_count_handlers import UserCountHandler
from licenses.application.queries.get_license_status import GetLicenseStatusQuery
from licenses.domain.license_key import parse_license_key
from licenses.domain.services import SeatLedger
from licenses.infrastructure.repositories.django_license_repository import DjangoLicenseRepository
from licenses.infrastructure.repositories.django_subscription_repository import (
    DjangoSubscriptionRepository,
)
from payments.infrastructure.repositories.django_payment_repository import DjangoPaymentRepository

# Initialize repositories (in production, use DI container)
_license_repo = DjangoLicenseRepository()
_subscription_repo = DjangoSubscriptionRepository()
_activation_repo = DjangoActivationRepository()
_payment_repo = DjangoPaymentRepository()
_token_issuer = JwtActivationTokenIssuer()

tracer = get_tracer(__name__)

ERROR_RESPONSES = {
    400: {"description": "Bad Request - invalid input or license key"},
    403: {"description": "Forbidden - license not usable or limit reached"},
    404: {"description": "License not found"},
    429: {"description": "Too Many Requests"},
}


def _blank_to_none(value):
    return value or None


def _from_epoch_millis(value):
    if value is None:
        return None
    try:
        return datetime.fromtimestamp(value / 1000, tz=timezone.utc)
    except (OverflowError, OSError, ValueError) as exc:
        raise InvalidInputError("currentTime is out of range") from exc


class GenerateLicenseView(APIView):
    """View for generating licenses."""

    @extend_schema(
        operation_id="generate_license",
        summary="Generate License",
        description=(
            "Create a new license with its first subscription. Paid licenses also "
            "record the initial payment. A phone number and location may hold one "
            "license only."
        ),
        tags=["License API"],
        request=GenerateLicenseRequestSerializer,
        responses={
            201: GenerateLicenseResponseSerializer,
            400: {"description": "Bad Request"},
            409: {"description": "License already exists for this phone and location"},
            429: {"description": "Too Many Requests"},
        },
    )
    def post(self, request: Request) -> Response:
        """Generate a license."""
        return async_to_sync(self._handle_generate_license)(request)

    async def _handle_generate_license(self, request: Request) -> Response:
        """Async handler for generate license."""
        with tracer.start_as_current_span("generate_license") as span:
            span.set_attribute("operation", "generate_license")

            serializer = GenerateLicenseRequestSerializer(data=request.data)
            if not serializer.is_valid():
                span.set_attribute("error", "validation_failed")
                span.set_status(Status(StatusCode.ERROR, "Validation failed"))
                return invalid_input_response(serializer.errors)

            data = serializer.validated_data
            span.set_attribute("is_free_trial", data["isFreeTrial"])

            handler = GenerateLicenseHandler(
                license_repository=_license_repo,
                subscription_repository=_subscription_repo,
                payment_repository=_payment_repo,
            )
            command = GenerateLicenseCommand(
                customer_name=_blank_to_none(data.get("customerName")),
                customer_phone=_blank_to_none(data.get("customerPhone")),
                location_name=_blank_to_none(data.get("locationName")),
                location_address=_blank_to_none(data.get("locationAddress")),
                initial_price=data.get("initialPrice"),
                annual_price=data.get("annualPrice"),
                price_per_user=data.get("pricePerUser"),
                is_free_trial=data["isFreeTrial"],
                start_date=data.get("startDate"),
                end_date=data.get("endDate"),
            )

            result = await handler.handle(command)

            span.set_attribute("license.id", str(result.id))
            span.set_status(Status(StatusCode.OK))
            license = result.to_dict()
            return Response(
                {
                    "licenseKey": license["licenseKey"],
                    "licenseId": license["id"],
                    "status": license["status"],
                    "isFreeTrial": license["isFreeTrial"],
                    "freeTrialEndDate": license["freeTrialEndDate"],
                    "expiresAt": license["endDate"],
                },
                status=status.HTTP_201_CREATED,
            )


class ActivateLicenseView(APIView):
    """View for activating a license on a machine."""

    @extend_schema(
        operation_id="activate_license",
        summary="Activate License",
        description=(
            "Bind a license to a machine and return a signed activation token. "
            "Activating an already active machine again refreshes it and keeps its data."
        ),
        tags=["License API"],
        request=ActivateLicenseRequestSerializer,
        responses={200: ActivateLicenseResponseSerializer, **ERROR_RESPONSES},
    )
    def post(self, request: Request) -> Response:
        """Activate a license."""
        return async_to_sync(self._handle_activate_license)(request)

    async def _handle_activate_license(self, request: Request) -> Response:
        """Async handler for activate license."""
        with tracer.start_as_current_span("activate_license") as span:
            span.set_attribute("operation", "activate_license")

            serializer = ActivateLicenseRequestSerializer(data=request.data)
            if not serializer.is_valid():
                span.set_attribute("error", "validation_failed")
                span.set_status(Status(StatusCode.ERROR, "Validation failed"))
                return invalid_input_response(serializer.errors)

            data = serializer.validated_data
            license_key = parse_license_key(data["licenseKey"])
            span.set_attribute("hardware_id", data["hardwareId"])

            handler = ActivateLicenseHandler(
                license_repository=_license_repo,
                subscription_repository=_subscription_repo,
                activation_repository=_activation_repo,
                token_issuer=_token_issuer,
            )
            command = ActivateLicenseCommand(
                license_key=license_key,
                hardware_id=data["hardwareId"],
                machine_name=_blank_to_none(data.get("machineName")),
            )

            result = await handler.handle(command)

            span.set_attribute("reactivating_active", result.is_reactivating_active)
            span.set_status(Status(StatusCode.OK))
            return Response(result.to_dict(), status=status.HTTP_200_OK)


class ValidateLicenseView(APIView):
    """View for validating a license."""

    @extend_schema(
        operation_id="validate_license",
        summary="Validate License",
        description=(
            "Periodic check-in of a POS client. Returns the effective status of the "
            "license; an unusable license is answered with 403 and the status in the "
            "error details."
        ),
        tags=["License API"],
        request=ValidateLicenseRequestSerializer,
        responses={200: LicenseStatusSerializer, **ERROR_RESPONSES},
    )
    def post(self, request: Request) -> Response:
        """Validate a license."""
        return async_to_sync(self._handle_validate_license)(request)

    async def _handle_validate_license(self, request: Request) -> Response:
        """Async handler for validate license."""
        with tracer.start_as_current_span("validate_license") as span:
            span.set_attribute("operation", "validate_license")

            serializer = ValidateLicenseRequestSerializer(data=request.data)
            if not serializer.is_valid():
                span.set_attribute("error", "validation_failed")
                span.set_status(Status(StatusCode.ERROR, "Validation failed"))
                return invalid_input_response(serializer.errors)

            data = serializer.validated_data
            handler = ValidateLicenseHandler(
                license_repository=_license_repo,
                subscription_repository=_subscription_repo,
                activation_repository=_activation_repo,
                token_issuer=_token_issuer,
            )
            command = ValidateLicenseCommand(
                license_key=parse_license_key(data["licenseKey"]),
                hardware_id=_blank_to_none(data.get("hardwareId")),
                current_time=_from_epoch_millis(data.get("currentTime")),
                location_address=_blank_to_none(data.get("locationAddress")),
            )

            result = await handler.handle(command)

            span.set_attribute("license.status", result.status.value)
            if not result.valid:
                span.set_status(Status(StatusCode.ERROR, result.message))
                raise ValidationFailedError(result.message, details=result.to_dict())

            span.set_status(Status(StatusCode.OK))
            return Response(result.to_dict(), status=status.HTTP_200_OK)


class LicenseStatusView(APIView):
    """View for reading the status of a license by key."""

    @extend_schema(
        operation_id="license_status",
        summary="License Status",
        description=(
            "Effective status of a license. Unknown keys are answered with status "
            "not_found rather than an error."
        ),
        tags=["License API"],
        responses={
            200: LicenseStatusSerializer,
            400: {"description": "Bad Request - invalid license key"},
            429: {"description": "Too Many Requests"},
        },
    )
    def get(self, request: Request, license_key: str) -> Response:
        """Get license status."""
        return async_to_sync(self._handle_license_status)(request, license_key)

    async def _handle_license_status(self, request: Request, license_key: str) -> Response:
        """Async handler for license status."""
        with tracer.start_as_current_span("license_status") as span:
            span.set_attribute("operation", "license_status")

            handler = GetLicenseStatusHandler(
                license_repository=_license_repo,
                subscription_repository=_subscription_repo,
            )
            result = await handler.handle(GetLicenseStatusQuery(parse_license_key(license_key)))

            span.set_attribute("license.status", result["status"])
            span.set_status(Status(StatusCode.OK))
            return Response(result, status=status.HTTP_200_OK)


class UserCountView(APIView):
    """Base view for the seat counter endpoints."""

    operation: UserCountOperation = None
    request_serializer = UserCountRequestSerializer

    def post(self, request: Request) -> Response:
        """Apply the seat counter operation."""
        return async_to_sync(self._handle_user_count)(request)

    async def _handle_user_count(self, request: Request) -> Response:
        """Async handler for seat counter operations."""
        span_name = f"{self.operation.value}_user_count"
        with tracer.start_as_current_span(span_name) as span:
            span.set_attribute("operation", span_name)

            serializer = self.request_serializer(data=request.data)
            if not serializer.is_valid():
                span.set_attribute("error", "validation_failed")
                span.set_status(Status(StatusCode.ERROR, "Validation failed"))
                return invalid_input_response(serializer.errors)

            data = serializer.validated_data
            handler = UserCountHandler(
                license_repository=_license_repo,
                activation_repository=_activation_repo,
                seat_ledger=SeatLedger(_license_repo, _subscription_repo),
            )
            command = UserCountCommand(
                license_key=parse_license_key(data["licenseKey"]),
                operation=self.operation,
                hardware_id=_blank_to_none(data.get("hardwareId")),
                actual_user_count=data.get("actualUserCount"),
            )

            result = await handler.handle(command)

            if self.operation == UserCountOperation.CHECK and not result["canCreate"]:
                span.set_status(Status(StatusCode.ERROR, result["message"]))
                raise ValidationFailedError(
                    result["message"], code="USER_CREATION_NOT_ALLOWED", details=result
                )

            span.set_attribute("user_count", result["userCount"])
            span.set_status(Status(StatusCode.OK))
            return Response(result, status=status.HTTP_200_OK)


class CheckUserCreationView(UserCountView):
    """View for checking whether the POS may create another user."""

    operation = UserCountOperation.CHECK

    @extend_schema(
        operation_id="check_user_creation",
        summary="Check User Creation",
        description="Whether the license is usable and has a free user seat.",
        tags=["License API"],
        request=UserCountRequestSerializer,
        responses={200: UserCreationCheckResponseSerializer, **ERROR_RESPONSES},
    )
    def post(self, request: Request) -> Response:
        return super().post(request)


class IncrementUserCountView(UserCountView):
    """View for taking one user seat."""

    operation = UserCountOperation.INCREMENT

    @extend_schema(
        operation_id="increment_user_count",
        summary="Increment User Count",
        description="Take one user seat; rejected with 403 when the license is at its limit.",
        tags=["License API"],
        request=UserCountRequestSerializer,
        responses={200: SeatCountResponseSerializer, **ERROR_RESPONSES},
    )
    def post(self, request: Request) -> Response:
        return super().post(request)


class DecrementUserCountView(UserCountView):
    """View for releasing one user seat."""

    operation = UserCountOperation.DECREMENT

    @extend_schema(
        operation_id="decrement_user_count",
        summary="Decrement User Count",
        description="Release one user seat. The count never goes below zero.",
        tags=["License API"],
        request=UserCountRequestSerializer,
        responses={200: SeatCountResponseSerializer, **ERROR_RESPONSES},
    )
    def post(self, request: Request) -> Response:
        return super().post(request)


class SyncUserCountView(UserCountView):
    """View for overwriting the user count with the POS's own count."""

    operation = UserCountOperation.SYNC
    request_serializer = SyncUserCountRequestSerializer

    @extend_schema(
        operation_id="sync_user_count",
        summary="Sync User Count",
        description=(
            "Set the user count to the number of users the POS actually has, "
            "clamped to the license limit. Repeating the call changes nothing."
        ),
        tags=["License API"],
        request=SyncUserCountRequestSerializer,
        responses={200: SeatCountResponseSerializer, **ERROR_RESPONSES},
    )
    def post(self, request: Request) -> Response:
        return super().post(request)
