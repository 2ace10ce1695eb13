"""
Unit tests for core value objects.
"""
import pytest

from core.domain.value_objects import (
    EffectiveStatus,
    HardwareId,
    LicenseStatus,
    PaymentType,
    SubscriptionStatus,
)


class TestHardwareId:
    """Tests for HardwareId value object."""

    def test_valid_hardware_id(self):
        """Test valid hardware identifier creation."""
        hardware_id = HardwareId("MB-1234-ABCD")
        assert str(hardware_id) == "MB-1234-ABCD"
        assert hardware_id.value == "MB-1234-ABCD"

    def test_empty_hardware_id(self):
        """Test empty hardware identifier is rejected."""
        with pytest.raises(ValueError, match="cannot be empty"):
            HardwareId("   ")

    def test_hardware_id_too_long(self):
        """Test overlong hardware identifier is rejected."""
        with pytest.raises(ValueError, match="too long"):
            HardwareId("x" * (HardwareId.MAX_LENGTH + 1))

    def test_equality_by_value(self):
        """Test hardware identifiers compare by value."""
        assert HardwareId("abc") == HardwareId("abc")
        assert HardwareId("abc") != HardwareId("abd")
        assert len({HardwareId("abc"), HardwareId("abc")}) == 1


class TestStatuses:
    """Tests for the status enums."""

    def test_usable_statuses(self):
        """Only active and grace period grant usage rights."""
        usable = {status for status in EffectiveStatus if status.is_usable}
        assert usable == {EffectiveStatus.ACTIVE, EffectiveStatus.GRACE_PERIOD}

    def test_string_values(self):
        """Statuses render as their stored value."""
        assert str(LicenseStatus.SUSPENDED) == "suspended"
        assert str(SubscriptionStatus.GRACE_PERIOD) == "grace_period"
        assert str(PaymentType.USER) == "user"
