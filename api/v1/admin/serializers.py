"""
Serializers for the Admin API.

Query string and body field names are camelCase.
"""

from rest_framework import serializers

from core.domain.value_objects import LicenseStatus, PaymentType, SubscriptionStatus


class AdminLoginRequestSerializer(serializers.Serializer):
    """Serializer for admin login request."""

    username = serializers.CharField(max_length=150)
    password = serializers.CharField(max_length=128, trim_whitespace=False)


class AdminLoginResponseSerializer(serializers.Serializer):
    """Serializer for admin login response."""

    token = serializers.CharField()
    tokenType = serializers.CharField()
    expiresIn = serializers.IntegerField(help_text="Token lifetime in seconds")
    username = serializers.CharField()


class PageQuerySerializer(serializers.Serializer):
    """Paging and sorting parameters shared by every listing."""

    page = serializers.IntegerField(required=False)
    pageSize = serializers.IntegerField(required=False)
    sortBy = serializers.CharField(required=False)
    sortOrder = serializers.CharField(required=False)


class LicenseListQuerySerializer(PageQuerySerializer):
    """Serializer for license listing filters."""

    status = serializers.ChoiceField(
        choices=[s.value for s in LicenseStatus], required=False
    )
    search = serializers.CharField(required=False, allow_blank=True, max_length=255)
    isFreeTrial = serializers.BooleanField(required=False, allow_null=True, default=None)


class ActivationListQuerySerializer(PageQuerySerializer):
    """Serializer for activation listing filters."""

    licenseId = serializers.UUIDField(required=False)
    isActive = serializers.BooleanField(required=False, allow_null=True, default=None)


class SubscriptionListQuerySerializer(PageQuerySerializer):
    """Serializer for subscription listing filters."""

    licenseId = serializers.UUIDField(required=False)
    status = serializers.ChoiceField(
        choices=[s.value for s in SubscriptionStatus], required=False
    )
    expiringSoon = serializers.BooleanField(required=False, default=False)
    expired = serializers.BooleanField(required=False, default=False)


class PaymentListQuerySerializer(PageQuerySerializer):
    """Serializer for payment listing filters."""

    licenseId = serializers.UUIDField(required=False)
    paymentType = serializers.ChoiceField(choices=[t.value for t in PaymentType], required=False)
    startDate = serializers.DateTimeField(required=False)
    endDate = serializers.DateTimeField(required=False)


class PaymentStatisticsQuerySerializer(serializers.Serializer):
    """Serializer for payment statistics filters."""

    licenseId = serializers.UUIDField(required=False)
    startDate = serializers.DateTimeField(required=False)
    endDate = serializers.DateTimeField(required=False)


class RevenueReportQuerySerializer(serializers.Serializer):
    """Serializer for revenue report filters."""

    startDate = serializers.DateTimeField(required=False)
    endDate = serializers.DateTimeField(required=False)


class LicenseExportQuerySerializer(serializers.Serializer):
    """Serializer for license export filters."""

    sortBy = serializers.CharField(required=False)
    sortOrder = serializers.CharField(required=False)
    status = serializers.ChoiceField(
        choices=[s.value for s in LicenseStatus], required=False
    )
    search = serializers.CharField(required=False, allow_blank=True, max_length=255)
    isFreeTrial = serializers.BooleanField(required=False, allow_null=True, default=None)


class RecordPaymentRequestSerializer(serializers.Serializer):
    """Serializer for record payment request."""

    licenseId = serializers.UUIDField()
    amount = serializers.DecimalField(max_digits=10, decimal_places=2)
    paymentType = serializers.ChoiceField(choices=[t.value for t in PaymentType])
    paymentDate = serializers.DateTimeField(required=False, allow_null=True)
    additionalUsers = serializers.IntegerField(required=False, allow_null=True, min_value=1)

    def validate(self, attrs):
        """additionalUsers only makes sense on user payments."""
        if attrs.get("additionalUsers") and attrs["paymentType"] != PaymentType.USER.value:
            raise serializers.ValidationError(
                {"additionalUsers": "Only allowed for payments of type 'user'"}
            )
        return attrs


class UpdateLicenseRequestSerializer(serializers.Serializer):
    """Serializer for update license request; omitted fields are left unchanged."""

    customerName = serializers.CharField(required=False, max_length=255)
    customerPhone = serializers.CharField(required=False, max_length=32)
    locationName = serializers.CharField(required=False, max_length=255)
    locationAddress = serializers.CharField(required=False, max_length=500)
    initialPrice = serializers.DecimalField(
        max_digits=10, decimal_places=2, min_value=0, required=False
    )
    annualPrice = serializers.DecimalField(
        max_digits=10, decimal_places=2, min_value=0, required=False
    )
    pricePerUser = serializers.DecimalField(
        max_digits=10, decimal_places=2, min_value=0, required=False
    )
    startDate = serializers.DateTimeField(required=False)
    endDate = serializers.DateTimeField(required=False)

    def validate(self, attrs):
        """At least one field has to be edited."""
        if not attrs:
            raise serializers.ValidationError("At least one field is required")
        return attrs


class IncreaseUserLimitRequestSerializer(serializers.Serializer):
    """Serializer for increase user limit request."""

    additionalUsers = serializers.IntegerField(min_value=1)


class RenewSubscriptionRequestSerializer(serializers.Serializer):
    """Serializer for renew subscription request."""

    extendFromNow = serializers.BooleanField(required=False, default=False)


class ExpirySweepRequestSerializer(serializers.Serializer):
    """Serializer for the expiry sweep trigger."""

    dryRun = serializers.BooleanField(required=False, default=False)


class SubscriptionSerializer(serializers.Serializer):
    """Serializer for SubscriptionDTO payloads."""

    id = serializers.UUIDField()
    licenseId = serializers.UUIDField()
    startDate = serializers.DateTimeField()
    endDate = serializers.DateTimeField()
    annualFee = serializers.DecimalField(max_digits=10, decimal_places=2)
    status = serializers.CharField()
    gracePeriodEnd = serializers.DateTimeField(allow_null=True)


class LicenseSerializer(serializers.Serializer):
    """Serializer for LicenseDTO payloads."""

    id = serializers.UUIDField()
    licenseKey = serializers.CharField()
    status = serializers.CharField()
    customerName = serializers.CharField(allow_null=True)
    customerPhone = serializers.CharField(allow_null=True)
    locationName = serializers.CharField(allow_null=True)
    locationAddress = serializers.CharField(allow_null=True)
    purchaseDate = serializers.DateTimeField()
    initialPrice = serializers.DecimalField(max_digits=10, decimal_places=2)
    annualPrice = serializers.DecimalField(max_digits=10, decimal_places=2)
    pricePerUser = serializers.DecimalField(max_digits=10, decimal_places=2)
    isFreeTrial = serializers.BooleanField()
    freeTrialEndDate = serializers.DateTimeField(allow_null=True)
    startDate = serializers.DateTimeField()
    endDate = serializers.DateTimeField()
    userCount = serializers.IntegerField()
    userLimit = serializers.IntegerField()
    createdAt = serializers.DateTimeField()
    updatedAt = serializers.DateTimeField()


class LicenseDetailSerializer(LicenseSerializer):
    """Serializer for license detail payloads."""

    subscriptions = SubscriptionSerializer(many=True)


class ActivationSerializer(serializers.Serializer):
    """Serializer for ActivationDTO payloads."""

    id = serializers.UUIDField()
    licenseId = serializers.UUIDField()
    hardwareId = serializers.CharField()
    machineName = serializers.CharField(allow_null=True)
    activatedAt = serializers.DateTimeField()
    lastValidation = serializers.DateTimeField(allow_null=True)
    isActive = serializers.BooleanField()


class PaymentSerializer(serializers.Serializer):
    """Serializer for PaymentDTO payloads."""

    id = serializers.UUIDField()
    licenseId = serializers.UUIDField()
    amount = serializers.DecimalField(max_digits=10, decimal_places=2)
    paymentType = serializers.CharField()
    isAnnualSubscription = serializers.BooleanField()
    additionalUsers = serializers.IntegerField(allow_null=True)
    paymentDate = serializers.DateTimeField()
    createdAt = serializers.DateTimeField()


class PaymentStatisticsSerializer(serializers.Serializer):
    """Serializer for payment statistics."""

    totalPayments = serializers.IntegerField()
    totalAmount = serializers.DecimalField(max_digits=12, decimal_places=2)
    averageAmount = serializers.DecimalField(max_digits=12, decimal_places=2)
    annualSubscriptionPayments = serializers.IntegerField()
    oneOffPayments = serializers.IntegerField()
    totalAnnualAmount = serializers.DecimalField(max_digits=12, decimal_places=2)
    totalOneOffAmount = serializers.DecimalField(max_digits=12, decimal_places=2)


class SeatCountSerializer(serializers.Serializer):
    """Serializer for seat counter results."""

    success = serializers.BooleanField()
    userCount = serializers.IntegerField()
    userLimit = serializers.IntegerField()
    message = serializers.CharField()


class ExpirySweepResultSerializer(serializers.Serializer):
    """Serializer for the expiry sweep result."""

    updated = serializers.IntegerField()
    gracePeriod = serializers.IntegerField()
    message = serializers.CharField()


class LicenseCountsSerializer(serializers.Serializer):
    total = serializers.IntegerField()
    active = serializers.IntegerField()
    expired = serializers.IntegerField()
    revoked = serializers.IntegerField()
    suspended = serializers.IntegerField()
    freeTrial = serializers.IntegerField()
    expiringSoon = serializers.IntegerField()


class RevenueByTypeSerializer(serializers.Serializer):
    initial = serializers.DecimalField(max_digits=12, decimal_places=2)
    subscription = serializers.DecimalField(max_digits=12, decimal_places=2)


class RevenueTotalsSerializer(serializers.Serializer):
    total = serializers.DecimalField(max_digits=12, decimal_places=2)
    monthly = serializers.DecimalField(max_digits=12, decimal_places=2)
    annual = serializers.DecimalField(max_digits=12, decimal_places=2)
    byType = RevenueByTypeSerializer()


class ActivationCountsSerializer(serializers.Serializer):
    total = serializers.IntegerField()
    active = serializers.IntegerField()
    inactive = serializers.IntegerField()


class SubscriptionCountsSerializer(serializers.Serializer):
    total = serializers.IntegerField()
    active = serializers.IntegerField()
    expired = serializers.IntegerField()
    gracePeriod = serializers.IntegerField()
    expiringSoon = serializers.IntegerField()


class RecentActivitySerializer(serializers.Serializer):
    licenses = serializers.IntegerField()
    activations = serializers.IntegerField()
    payments = serializers.IntegerField()


class DashboardStatsSerializer(serializers.Serializer):
    """Serializer for the admin dashboard statistics."""

    licenses = LicenseCountsSerializer()
    revenue = RevenueTotalsSerializer()
    activations = ActivationCountsSerializer()
    subscriptions = SubscriptionCountsSerializer()
    recentActivity = RecentActivitySerializer(help_text="Counts over the last seven days")


class RevenuePeriodSerializer(serializers.Serializer):
    period = serializers.CharField(help_text="Month as YYYY-MM")
    amount = serializers.DecimalField(max_digits=12, decimal_places=2)
    count = serializers.IntegerField()
    initialPayments = serializers.DecimalField(max_digits=12, decimal_places=2)
    subscriptionPayments = serializers.DecimalField(max_digits=12, decimal_places=2)


class RevenueSummarySerializer(serializers.Serializer):
    totalRevenue = serializers.DecimalField(max_digits=12, decimal_places=2)
    totalCount = serializers.IntegerField()
    periodCount = serializers.IntegerField()
    trend = serializers.DecimalField(
        max_digits=8,
        decimal_places=2,
        allow_null=True,
        help_text="Percent change of the last month against the previous one",
    )


class RevenueReportSerializer(serializers.Serializer):
    """Serializer for the monthly revenue report."""

    revenueByPeriod = RevenuePeriodSerializer(many=True)
    summary = RevenueSummarySerializer()
