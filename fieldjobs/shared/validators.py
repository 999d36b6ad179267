"""Shared validation utilities"""

from typing import Optional

VALID_PRIORITIES = ("low", "medium", "high", "urgent")


def validate_latitude(value: Optional[float]) -> Optional[float]:
    """
    Validate a latitude in decimal degrees.

    Raises:
        ValueError: If the value is outside -90..90
    """
    if value is None:
        return value
    if not -90 <= value <= 90:
        raise ValueError("Latitude must be between -90 and 90")
    return value


def validate_longitude(value: Optional[float]) -> Optional[float]:
    """
    Validate a longitude in decimal degrees.

    Raises:
        ValueError: If the value is outside -180..180
    """
    if value is None:
        return value
    if not -180 <= value <= 180:
        raise ValueError("Longitude must be between -180 and 180")
    return value


def validate_hour(value: int) -> int:
    if not 0 <= value <= 23:
        raise ValueError("Hour must be between 0 and 23")
    return value


def validate_priority(value: Optional[str]) -> Optional[str]:
    if value is None:
        return value
    value = value.strip().lower()
    if value not in VALID_PRIORITIES:
        raise ValueError(f"priority must be one of: {', '.join(VALID_PRIORITIES)}")
    return value


def validate_positive(value: Optional[int], field_name: str) -> Optional[int]:
    if value is not None and value <= 0:
        raise ValueError(f"{field_name} must be greater than 0")
    return value
