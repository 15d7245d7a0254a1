"""Ethereum address format checks."""
from __future__ import annotations

from eth_utils import is_checksum_address, is_hex_address


def is_valid_address(value: object) -> bool:
    """Check 0x-prefixed 40-hex-digit format; mixed case must be a valid checksum.

    Examples:
        all-lowercase or all-uppercase hex → True
        EIP-55 checksummed → True
        mixed case with a wrong checksum → False
    """
    if not isinstance(value, str) or not value.startswith("0x"):
        return False
    if not is_hex_address(value):
        return False
    body = value[2:]
    if body.islower() or body.isupper() or body.isdigit():
        return True
    return is_checksum_address(value)
