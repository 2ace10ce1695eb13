"""
Serializers for the public License API.

Request bodies use camelCase field names, as sent by the POS clients.
"""

from rest_framework import serializers

# 9999-12-31T23:59:59.999Z
MAX_EPOCH_MILLIS = 253402300799999


class GenerateLicenseRequestSerializer(serializers.Serializer):
    """Serializer for generate license request."""

    customerName = serializers.CharField(required=False, allow_blank=True, max_length=255)
    customerPhone = serializers.CharField(required=False, allow_blank=True, max_length=32)
    locationName = serializers.CharField(required=False, allow_blank=True, max_length=255)
    locationAddress = serializers.CharField(required=False, allow_blank=True, max_length=500)
    initialPrice = serializers.DecimalField(
        max_digits=10, decimal_places=2, required=False, allow_null=True, min_value=0
    )
    annualPrice = serializers.DecimalField(
        max_digits=10, decimal_places=2, required=False, allow_null=True, min_value=0
    )
    pricePerUser = serializers.DecimalField(
        max_digits=10, decimal_places=2, required=False, allow_null=True, min_value=0
    )
    isFreeTrial = serializers.BooleanField(required=False, default=False)
    startDate = serializers.DateTimeField(required=False, allow_null=True)
    endDate = serializers.DateTimeField(required=False, allow_null=True)


class GenerateLicenseResponseSerializer(serializers.Serializer):
    """Serializer for generate license response."""

    licenseKey = serializers.CharField()
    licenseId = serializers.UUIDField()
    status = serializers.CharField()
    isFreeTrial = serializers.BooleanField()
    freeTrialEndDate = serializers.DateTimeField(allow_null=True)
    expiresAt = serializers.DateTimeField()


class ActivateLicenseRequestSerializer(serializers.Serializer):
    """Serializer for activate license request."""

    licenseKey = serializers.CharField(max_length=64)
    hardwareId = serializers.CharField(max_length=255)
    machineName = serializers.CharField(
        required=False, allow_blank=True, allow_null=True, max_length=255
    )


class ActivateLicenseResponseSerializer(serializers.Serializer):
    """Serializer for activate license response."""

    success = serializers.BooleanField()
    message = serializers.CharField()
    expiresAt = serializers.DateTimeField(allow_null=True)
    gracePeriodEnd = serializers.DateTimeField(allow_null=True)
    token = serializers.CharField()
    locationId = serializers.UUIDField()
    locationName = serializers.CharField(allow_null=True)
    locationAddress = serializers.CharField(allow_null=True)
    customerName = serializers.CharField(allow_null=True)
    customerPhone = serializers.CharField(allow_null=True)
    isReactivatingActive = serializers.BooleanField()


class ValidateLicenseRequestSerializer(serializers.Serializer):
    """Serializer for validate license request."""

    licenseKey = serializers.CharField(max_length=64)
    hardwareId = serializers.CharField(
        required=False, allow_blank=True, allow_null=True, max_length=255
    )
    currentTime = serializers.IntegerField(
        required=False,
        allow_null=True,
        min_value=0,
        max_value=MAX_EPOCH_MILLIS,
        help_text="Client clock in epoch millis",
    )
    locationAddress = serializers.CharField(
        required=False, allow_blank=True, allow_null=True, max_length=500
    )


class LicenseStatusSerializer(serializers.Serializer):
    """Serializer for license status payloads."""

    valid = serializers.BooleanField()
    status = serializers.CharField()
    message = serializers.CharField()
    expiresAt = serializers.DateTimeField(allow_null=True)
    gracePeriodEnd = serializers.DateTimeField(allow_null=True)
    daysRemaining = serializers.IntegerField()


class UserCountRequestSerializer(serializers.Serializer):
    """Serializer for seat counter requests; hardwareId is informational."""

    licenseKey = serializers.CharField(max_length=64)
    hardwareId = serializers.CharField(
        required=False, allow_blank=True, allow_null=True, max_length=255
    )


class SyncUserCountRequestSerializer(UserCountRequestSerializer):
    """Serializer for sync user count request."""

    actualUserCount = serializers.IntegerField(min_value=0)


class SeatCountResponseSerializer(serializers.Serializer):
    """Serializer for seat counter responses."""

    success = serializers.BooleanField()
    userCount = serializers.IntegerField()
    userLimit = serializers.IntegerField()
    message = serializers.CharField()


class UserCreationCheckResponseSerializer(serializers.Serializer):
    """Serializer for check user creation response."""

    canCreate = serializers.BooleanField()
    userCount = serializers.IntegerField()
    userLimit = serializers.IntegerField()
    message = serializers.CharField()
