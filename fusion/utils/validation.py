"""
Input Validation - Sanitization of values handed in by the substrate.

Provides validation for external inputs to prevent:
- Integer overflows of packed fields
- Invalid address / signature formats
- Malformed auction schedules
"""

from typing import Any, Optional, Sequence, Tuple

# =============================================================================
# Constants
# =============================================================================

ADDRESS_SIZE = 20
SIGNATURE_SIZE = 65
MAX_POINTS = 255

MAX_UINT16 = 2**16 - 1
MAX_UINT24 = 2**24 - 1
MAX_UINT32 = 2**32 - 1
MAX_UINT256 = 2**256 - 1


# =============================================================================
# Validation Functions
# =============================================================================


def validate_bytes(
    data: Any,
    name: str,
    expected_length: Optional[int] = None,
    max_length: Optional[int] = None,
) -> Tuple[bool, str]:
    """
    Validate bytes input.

    Args:
        data: Data to validate
        name: Field name for error messages
        expected_length: Exact expected length
        max_length: Maximum allowed length

    Returns:
        (is_valid, error_message)
    """
    if not isinstance(data, (bytes, bytearray)):
        return False, f"{name} must be bytes, got {type(data).__name__}"

    if expected_length is not None and len(data) != expected_length:
        return False, f"{name} must be {expected_length} bytes, got {len(data)}"

    if max_length is not None and len(data) > max_length:
        return False, f"{name} exceeds max length {max_length}, got {len(data)}"

    return True, ""


def validate_address(address: Any, name: str = "address") -> Tuple[bool, str]:
    """Validate a 20-byte address."""
    return validate_bytes(address, name, expected_length=ADDRESS_SIZE)


def validate_signature(signature: Any) -> Tuple[bool, str]:
    """Validate a 65-byte recoverable signature."""
    return validate_bytes(signature, "signature", expected_length=SIGNATURE_SIZE)


def validate_integer(
    value: Any,
    name: str,
    min_val: int = 0,
    max_val: int = MAX_UINT256,
) -> Tuple[bool, str]:
    """
    Validate integer within bounds.

    Args:
        value: Value to validate
        name: Field name for errors
        min_val: Minimum allowed value
        max_val: Maximum allowed value

    Returns:
        (is_valid, error_message)
    """
    # bool is an int subclass but never a meaningful amount
    if not isinstance(value, int) or isinstance(value, bool):
        return False, f"{name} must be int, got {type(value).__name__}"

    if value < min_val:
        return False, f"{name} must be >= {min_val}, got {value}"

    if value > max_val:
        return False, f"{name} must be <= {max_val}, got {value}"

    return True, ""


def validate_uint(value: Any, name: str, bits: int = 256) -> Tuple[bool, str]:
    """Validate an unsigned integer that must fit in `bits` bits."""
    return validate_integer(value, name, 0, 2**bits - 1)


def validate_amount(amount: Any, name: str = "amount") -> Tuple[bool, str]:
    """Validate a strictly positive token amount."""
    return validate_integer(amount, name, 1, MAX_UINT256)


def validate_token_id(token_id: Any) -> Tuple[bool, str]:
    """Validate a uint256 token id."""
    return validate_uint(token_id, "token_id")


def validate_points(points: Any) -> Tuple[bool, str]:
    """
    Validate an auction decay schedule.

    Points are (elapsed_seconds, rate_bump) pairs with strictly
    increasing elapsed times, the first one after the implicit
    (0, initial_rate_bump) anchor.

    Returns:
        (is_valid, error_message)
    """
    if not isinstance(points, (list, tuple)):
        return False, f"points must be list/tuple, got {type(points).__name__}"

    if len(points) > MAX_POINTS:
        return False, f"points exceeds max length {MAX_POINTS}, got {len(points)}"

    previous = 0
    for i, point in enumerate(points):
        if not isinstance(point, (list, tuple)) or len(point) != 2:
            return False, f"point {i} must be an (elapsed, rate_bump) pair"

        elapsed, rate_bump = point
        valid, err = validate_integer(elapsed, f"point {i} elapsed", 0, MAX_UINT32)
        if not valid:
            return False, err
        valid, err = validate_integer(rate_bump, f"point {i} rate_bump", 0, MAX_UINT24)
        if not valid:
            return False, err

        if elapsed <= previous:
            return False, f"point {i} elapsed {elapsed} must be > {previous}"
        previous = elapsed

    return True, ""


def validate_hex_string(value: Any, name: str, expected_bytes: Optional[int] = None) -> Tuple[bool, str]:
    """
    Validate a hex string (with or without 0x prefix).

    Args:
        value: Value to validate
        name: Field name
        expected_bytes: Expected byte length when decoded

    Returns:
        (is_valid, error_message)
    """
    if not isinstance(value, str):
        return False, f"{name} must be str, got {type(value).__name__}"

    hex_str = value[2:] if value.startswith(("0x", "0X")) else value

    if len(hex_str) % 2 != 0:
        return False, f"{name} has odd length, invalid hex"

    try:
        bytes.fromhex(hex_str)
    except ValueError:
        return False, f"{name} contains invalid hex characters"

    if expected_bytes is not None:
        actual_bytes = len(hex_str) // 2
        if actual_bytes != expected_bytes:
            return False, f"{name} must be {expected_bytes} bytes, got {actual_bytes}"

    return True, ""


def require(result: Tuple[bool, str]) -> None:
    """Raise ValueError for a failed (is_valid, error_message) check."""
    valid, err = result
    if not valid:
        raise ValueError(err)


# =============================================================================
# Module Exports
# =============================================================================

__all__ = [
    "validate_bytes",
    "validate_address",
    "validate_signature",
    "validate_integer",
    "validate_uint",
    "validate_amount",
    "validate_token_id",
    "validate_points",
    "validate_hex_string",
    "require",
    "ADDRESS_SIZE",
    "SIGNATURE_SIZE",
    "MAX_UINT16",
    "MAX_UINT24",
    "MAX_UINT32",
    "MAX_UINT256",
]
