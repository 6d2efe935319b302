"""Request shapes for the attendance endpoints.

Each JSON body is converted once, at the HTTP boundary, into one of the frozen
dataclasses below; services only ever see these typed values. Malformed input
raises ``ValidationError`` with a client-facing message.
"""

from __future__ import annotations

import base64
import binascii
import io
from dataclasses import dataclass
from datetime import date, datetime, tzinfo
from typing import Any, Optional

from PIL import Image, UnidentifiedImageError

from ..common.validators import (
    optional_str,
    parse_bool,
    parse_date,
    parse_datetime,
    parse_enum,
    parse_int,
    parse_number,
)
from ..core.constants import DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE
from ..core.enums import AttendanceStatus
from ..core.exceptions import ValidationError
from .model import DeviceInfo, GeoLocation

MAX_SELFIE_BYTES = 5 * 1024 * 1024


def _body(data: Any) -> dict:
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValidationError("Request body must be a JSON object")
    return data


def parse_location(value: Any, field_name: str, *, required: bool = False) -> Optional[GeoLocation]:
    if value is None or value == {}:
        if required:
            raise ValidationError(f'"{field_name}" is required')
        return None
    if not isinstance(value, dict):
        raise ValidationError(f'"{field_name}" must be an object')

    latitude = parse_number(value.get("latitude"), f"{field_name}.latitude")
    longitude = parse_number(value.get("longitude"), f"{field_name}.longitude")
    accuracy = parse_number(value.get("accuracy"), f"{field_name}.accuracy", minimum=0)
    address = optional_str(value.get("address"), f"{field_name}.address")

    if latitude is not None and not -90 <= latitude <= 90:
        raise ValidationError(f'"{field_name}.latitude" must be between -90 and 90')
    if longitude is not None and not -180 <= longitude <= 180:
        raise ValidationError(f'"{field_name}.longitude" must be between -180 and 180')
    if required and (latitude is None or longitude is None):
        raise ValidationError(f'"{field_name}" must include latitude and longitude')

    return GeoLocation(latitude=latitude, longitude=longitude, address=address, accuracy=accuracy)


def parse_device_info(value: Any) -> Optional[DeviceInfo]:
    if value is None:
        return None
    if not isinstance(value, dict):
        raise ValidationError('"deviceInfo" must be an object')
    return DeviceInfo(
        device_type=optional_str(value.get("deviceType"), "deviceInfo.deviceType"),
        os=optional_str(value.get("os"), "deviceInfo.os"),
        browser=optional_str(value.get("browser"), "deviceInfo.browser"),
        user_agent=optional_str(value.get("userAgent"), "deviceInfo.userAgent", max_len=1000),
    )


def parse_selfie(value: Any, field_name: str, *, required: bool = False) -> Optional[str]:
    """Accept a base64 image (optionally as a data URL) and check it decodes as an image.

    The original string is returned for storage.
    """
    if value is None or value == "":
        if required:
            raise ValidationError(f'"{field_name}" is required')
        return None
    if not isinstance(value, str):
        raise ValidationError(f'"{field_name}" must be a base64 encoded image')

    payload = value
    if payload.startswith("data:"):
        header, _, payload = payload.partition(",")
        if not header.startswith("data:image/") or ";base64" not in header:
            raise ValidationError(f'"{field_name}" must be a base64 encoded image')

    try:
        raw = base64.b64decode(payload, validate=True)
    except (binascii.Error, ValueError):
        raise ValidationError(f'"{field_name}" must be a base64 encoded image')

    if len(raw) > MAX_SELFIE_BYTES:
        raise ValidationError(f'"{field_name}" exceeds the {MAX_SELFIE_BYTES // (1024 * 1024)}MB limit')

    try:
        with Image.open(io.BytesIO(raw)) as img:
            img.verify()
    except (UnidentifiedImageError, OSError, SyntaxError):
        raise ValidationError(f'"{field_name}" is not a valid image')

    return value


@dataclass(frozen=True)
class MarkAttendanceInput:
    employee_id: int
    work_date: date
    status: AttendanceStatus
    check_in: Optional[datetime] = None
    check_out: Optional[datetime] = None
    notes: Optional[str] = None
    shift_id: Optional[int] = None
    is_remote: bool = False
    manual_overtime_hours: Optional[float] = None
    check_in_selfie: Optional[str] = None
    check_out_selfie: Optional[str] = None
    check_in_location: Optional[GeoLocation] = None
    check_out_location: Optional[GeoLocation] = None
    device_info: Optional[DeviceInfo] = None

    @classmethod
    def from_json(cls, data: Any, *, tz: Optional[tzinfo] = None) -> "MarkAttendanceInput":
        data = _body(data)

        employee_id = parse_int(data.get("employeeId"), "employeeId", minimum=1)
        if employee_id is None:
            raise ValidationError('"employeeId" is required')
        work_date = parse_date(data.get("date"), "date")
        if work_date is None:
            raise ValidationError('"date" is required')
        status = parse_enum(data.get("status"), AttendanceStatus, "status")
        if status is None:
            raise ValidationError('"status" is required')

        # "location" is the older single-location field; it stands in for the check-in location.
        check_in_location = parse_location(data.get("checkInLocation"), "checkInLocation")
        if check_in_location is None:
            check_in_location = parse_location(data.get("location"), "location")

        return cls(
            employee_id=employee_id,
            work_date=work_date,
            status=status,
            check_in=parse_datetime(data.get("checkIn"), "checkIn", tz=tz),
            check_out=parse_datetime(data.get("checkOut"), "checkOut", tz=tz),
            notes=optional_str(data.get("notes"), "notes"),
            shift_id=parse_int(data.get("shiftId"), "shiftId", minimum=1),
            is_remote=parse_bool(data.get("isRemote"), "isRemote"),
            manual_overtime_hours=parse_number(data.get("overtimeHours"), "overtimeHours", minimum=0),
            check_in_selfie=parse_selfie(data.get("checkInSelfie"), "checkInSelfie"),
            check_out_selfie=parse_selfie(data.get("checkOutSelfie"), "checkOutSelfie"),
            check_in_location=check_in_location,
            check_out_location=parse_location(data.get("checkOutLocation"), "checkOutLocation"),
            device_info=parse_device_info(data.get("deviceInfo")),
        )


@dataclass(frozen=True)
class UpdateAttendanceInput:
    """HR overwrite; ``None`` leaves the stored value untouched."""

    check_in: Optional[datetime] = None
    check_out: Optional[datetime] = None
    status: Optional[AttendanceStatus] = None
    notes: Optional[str] = None
    shift_id: Optional[int] = None
    is_remote: Optional[bool] = None

    @classmethod
    def from_json(cls, data: Any, *, tz: Optional[tzinfo] = None) -> "UpdateAttendanceInput":
        data = _body(data)
        is_remote = data.get("isRemote")
        return cls(
            check_in=parse_datetime(data.get("checkIn"), "checkIn", tz=tz),
            check_out=parse_datetime(data.get("checkOut"), "checkOut", tz=tz),
            status=parse_enum(data.get("status"), AttendanceStatus, "status"),
            notes=optional_str(data.get("notes"), "notes"),
            shift_id=parse_int(data.get("shiftId"), "shiftId", minimum=1),
            is_remote=None if is_remote is None else parse_bool(is_remote, "isRemote"),
        )

    @property
    def is_empty(self) -> bool:
        return all(
            v is None
            for v in (self.check_in, self.check_out, self.status, self.notes, self.shift_id, self.is_remote)
        )


@dataclass(frozen=True)
class SelfCheckInInput:
    check_in_selfie: str
    check_in_location: GeoLocation
    notes: Optional[str] = None
    is_remote: bool = False
    shift_id: Optional[int] = None
    device_info: Optional[DeviceInfo] = None

    @classmethod
    def from_json(cls, data: Any) -> "SelfCheckInInput":
        data = _body(data)
        return cls(
            check_in_selfie=parse_selfie(data.get("checkInSelfie"), "checkInSelfie", required=True),
            check_in_location=parse_location(data.get("checkInLocation"), "checkInLocation", required=True),
            notes=optional_str(data.get("notes"), "notes") or None,
            is_remote=parse_bool(data.get("isRemote"), "isRemote"),
            shift_id=parse_int(data.get("shiftId"), "shiftId", minimum=1),
            device_info=parse_device_info(data.get("deviceInfo")),
        )


@dataclass(frozen=True)
class SelfCheckOutInput:
    check_out_selfie: str
    check_out_location: GeoLocation
    notes: Optional[str] = None

    @classmethod
    def from_json(cls, data: Any) -> "SelfCheckOutInput":
        data = _body(data)
        return cls(
            check_out_selfie=parse_selfie(data.get("checkOutSelfie"), "checkOutSelfie", required=True),
            check_out_location=parse_location(data.get("checkOutLocation"), "checkOutLocation", required=True),
            notes=optional_str(data.get("notes"), "notes") or None,
        )


@dataclass(frozen=True)
class AttendanceQuery:
    page: int = 1
    limit: int = DEFAULT_PAGE_SIZE
    employee_id: Optional[int] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    status: Optional[AttendanceStatus] = None

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit

    @classmethod
    def from_args(cls, args) -> "AttendanceQuery":
        page = parse_int(args.get("page"), "page", minimum=1) or 1
        limit = parse_int(args.get("limit"), "limit", minimum=1) or DEFAULT_PAGE_SIZE
        start = parse_date(args.get("startDate"), "startDate")
        end = parse_date(args.get("endDate"), "endDate")
        # A date range only applies when both ends are given.
        if start is None or end is None:
            start = end = None
        elif end < start:
            raise ValidationError('"endDate" must be on or after "startDate"')

        return cls(
            page=page,
            limit=min(limit, MAX_PAGE_SIZE),
            employee_id=parse_int(args.get("employeeId"), "employeeId", minimum=1),
            start_date=start,
            end_date=end,
            status=parse_enum(args.get("status"), AttendanceStatus, "status"),
        )
