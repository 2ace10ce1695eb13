"""
Unit tests for the license key format.
"""

import pytest

from core.domain.exceptions import InvalidLicenseKeyError
from licenses.domain.license_key import (
    calculate_checksum,
    generate_license_key,
    is_valid_license_key,
    normalize_license_key,
    parse_license_key,
)

KNOWN_KEY = "AAAA-AAAA-AAAA-AAAA-00SW"


class TestLicenseKey:
    """Tests for license key generation and parsing."""

    def test_generated_keys_are_valid(self):
        """Test generated keys pass format and checksum checks."""
        for _ in range(50):
            key = generate_license_key()
            assert len(key) == 24
            assert is_valid_license_key(key)

    def test_generated_keys_differ(self):
        """Test generation is random."""
        assert len({generate_license_key() for _ in range(20)}) == 20

    def test_checksum(self):
        """Test checksum is the base36 character sum modulo 10000."""
        assert calculate_checksum("A" * 16) == "00SW"
        assert is_valid_license_key(KNOWN_KEY)

    def test_normalize(self):
        """Test whitespace is stripped and letters uppercased."""
        assert normalize_license_key("  aaaa-aaaa-aaaa-aaaa-00sw \n") == KNOWN_KEY
        assert normalize_license_key("") == ""
        assert normalize_license_key(None) == ""

    def test_parse_accepts_lowercase(self):
        """Test parsing returns the canonical form."""
        assert parse_license_key("aaaa-aaaa-aaaa-aaaa-00sw") == KNOWN_KEY

    def test_parse_rejects_bad_format(self):
        """Test malformed keys are rejected."""
        with pytest.raises(InvalidLicenseKeyError, match="format"):
            parse_license_key("AAAA-AAAA-AAAA")

    def test_parse_rejects_bad_checksum(self):
        """Test a wrong checksum group is rejected."""
        with pytest.raises(InvalidLicenseKeyError, match="checksum"):
            parse_license_key("AAAA-AAAA-AAAA-AAAB-00SW")
