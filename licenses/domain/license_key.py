"""
License key format.

Keys look like ``XXXX-XXXX-XXXX-XXXX-CCCC``: sixteen base36 data
characters in four groups followed by a four character checksum group.
Keys are accepted case-insensitively with stray whitespace and are
stored and compared in canonical uppercase form.
"""

import re
import secrets

from core.domain.exceptions import InvalidLicenseKeyError

BASE36_ALPHABET = "0123456789ABCDEFGHIJKLMNOPQRSTUVWXYZ"
DATA_LENGTH = 16
GROUP_SIZE = 4
LICENSE_KEY_PATTERN = re.compile(r"^[A-Z0-9]{4}-[A-Z0-9]{4}-[A-Z0-9]{4}-[A-Z0-9]{4}-[A-Z0-9]{4}$")


def _to_base36(number: int) -> str:
    if number == 0:
        return "0"
    digits = []
    while number > 0:
        number, remainder = divmod(number, 36)
        digits.append(BASE36_ALPHABET[remainder])
    return "".join(reversed(digits))


def normalize_license_key(raw_key: str) -> str:
    """Strip all whitespace and uppercase."""
    if not raw_key or not isinstance(raw_key, str):
        return ""
    return re.sub(r"\s+", "", raw_key).upper()


def calculate_checksum(data: str) -> str:
    """
    Checksum of the data characters.

    The sum of character codes modulo 10000, written in base36 and
    zero-padded to four characters.
    """
    total = sum(ord(char) for char in data)
    return _to_base36(total % 10000).zfill(GROUP_SIZE)


def is_well_formed(key: str) -> bool:
    """True if the key matches the five-group pattern."""
    return bool(key) and bool(LICENSE_KEY_PATTERN.match(key))


def has_valid_checksum(key: str) -> bool:
    """True if the last group is the checksum of the first four."""
    parts = key.split("-")
    if len(parts) != 5:
        return False
    return parts[4] == calculate_checksum("".join(parts[:4]))


def is_valid_license_key(key: str) -> bool:
    """Format and checksum check on an already normalized key."""
    return is_well_formed(key) and has_valid_checksum(key)


def parse_license_key(raw_key: str) -> str:
    """
    Normalize a client supplied key and check its format and checksum.

    Raises:
        InvalidLicenseKeyError: If the key is malformed or the checksum fails
    """
    key = normalize_license_key(raw_key)
    if not is_well_formed(key):
        raise InvalidLicenseKeyError("License key format is invalid")
    if not has_valid_checksum(key):
        raise InvalidLicenseKeyError("License key checksum is invalid")
    return key


def generate_license_key() -> str:
    """
    Generate a random license key with checksum.

    Returns:
        Key in ``XXXX-XXXX-XXXX-XXXX-CCCC`` form
    """
    number = int.from_bytes(secrets.token_bytes(16), "big")
    data = _to_base36(number)[-DATA_LENGTH:].rjust(DATA_LENGTH, "0")
    groups = [data[i:i + GROUP_SIZE] for i in range(0, DATA_LENGTH, GROUP_SIZE)]
    return "-".join(groups + [calculate_checksum(data)])
