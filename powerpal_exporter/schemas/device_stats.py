"""Powerpal device API schemas."""

from pydantic import BaseModel, ConfigDict, Field

# The API reports counters and timestamps as 64-bit integers
INT64_MIN = -(2**63)
INT64_MAX = 2**63 - 1


class DeviceStats(BaseModel):
    """Summary of a Powerpal device as returned by ``/api/v1/device/<id>``.

    Validation is strict: every field must be present with its JSON type,
    so a partially valid document is rejected as a whole. Integers outside
    the int64 range and non-finite costs are rejected too.
    """

    model_config = ConfigDict(strict=True, frozen=True, extra="ignore")

    serial_number: str = Field(..., description="Device serial number")
    total_meter_reading_count: int = Field(
        ..., ge=INT64_MIN, le=INT64_MAX, description="Readings recorded by the device"
    )
    total_watt_hours: int = Field(
        ..., ge=INT64_MIN, le=INT64_MAX, description="Energy recorded by the device"
    )
    total_cost: float = Field(..., allow_inf_nan=False, description="Cost recorded by the device")
    first_reading_timestamp: int = Field(
        ..., ge=INT64_MIN, le=INT64_MAX, description="Epoch seconds of the first reading"
    )
    last_reading_timestamp: int = Field(
        ..., ge=INT64_MIN, le=INT64_MAX, description="Epoch seconds of the last reading"
    )
    last_reading_watt_hours: int = Field(
        ..., ge=INT64_MIN, le=INT64_MAX, description="Energy of the last reading"
    )
    last_reading_cost: float = Field(..., allow_inf_nan=False, description="Cost of the last reading")
    available_days: int = Field(
        ..., ge=INT64_MIN, le=INT64_MAX, description="Days of data held for the device"
    )
