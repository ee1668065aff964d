"""
Data Transfer Objects (DTOs) and validation schemas.

Requests parse the camelCase JSON of the request layer and validate it;
responses turn domain entities into JSON-ready dicts. Money leaves as a
string with exactly two decimals, timestamps as ISO 8601 with the tenant's
offset, minutes as plain integers.
"""

import re
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import Any, Dict, List, Mapping, Optional
from zoneinfo import ZoneInfo

from shopqueue.core.exceptions import ValidationError
from shopqueue.domain.entities import (
    AppointmentPatch,
    AppointmentStatus,
    PaymentMethod,
    QueueStatus,
    TransactionStatus,
    to_money,
)
from shopqueue.utils.time_window import attach_timezone


def parse_datetime(value: Any, field_name: str) -> datetime:
    """Parse an ISO 8601 string (a trailing ``Z`` is accepted)."""
    if isinstance(value, datetime):
        return value
    if not isinstance(value, str) or not value.strip():
        raise ValidationError(f"{field_name} must be an ISO 8601 timestamp")
    text = value.strip()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    try:
        return datetime.fromisoformat(text)
    except ValueError as e:
        raise ValidationError(f"{field_name} must be an ISO 8601 timestamp") from e


_INTEGER_TEXT = re.compile(r"[+-]?[0-9]+")


def _int_field(data: Mapping[str, Any], key: str, required: bool = True) -> Optional[int]:
    """Read an integer field.

    Accepts JSON integers, integral numbers such as ``2.0`` and strings of
    digits such as ``"4"``. Fractions, booleans and anything else are
    rejected instead of being truncated.
    """
    value = data.get(key)
    if value is None:
        if required:
            raise ValidationError(f"{key} is required")
        return None
    if isinstance(value, bool):
        raise ValidationError(f"{key} must be an integer")
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        if not value.is_integer():
            raise ValidationError(f"{key} must be an integer")
        return int(value)
    if isinstance(value, str) and _INTEGER_TEXT.fullmatch(value.strip()):
        return int(value.strip())
    raise ValidationError(f"{key} must be an integer")


def _format_time(moment: Optional[datetime], tz: ZoneInfo) -> Optional[str]:
    return attach_timezone(moment, tz).isoformat() if moment else None


def _format_money(amount: Decimal) -> str:
    return f"{to_money(amount):.2f}"


# ===========================
# Queue
# ===========================


@dataclass
class QueueAdmitRequest:
    """DTO for walk-in admission requests."""

    customer_id: int
    service_id: int
    barber: Optional[str] = None

    @classmethod
    def from_json(cls, data: Mapping[str, Any]) -> "QueueAdmitRequest":
        return cls(
            customer_id=_int_field(data, "customerId"),
            service_id=_int_field(data, "serviceId"),
            barber=data.get("barber"),
        )

    def validate(self) -> None:
        """Validate the request data."""
        if self.customer_id <= 0:
            raise ValidationError("Valid customerId is required")
        if self.service_id <= 0:
            raise ValidationError("Valid serviceId is required")
        if self.barber is not None and not isinstance(self.barber, str):
            raise ValidationError("barber must be a string")


@dataclass
class QueuePositionRequest:
    position: int

    @classmethod
    def from_json(cls, data: Mapping[str, Any]) -> "QueuePositionRequest":
        return cls(position=_int_field(data, "position"))

    def validate(self) -> None:
        # Range [1, N] is checked against the live line by QueueService.reposition
        pass


@dataclass
class QueueStatusRequest:
    status: str

    @classmethod
    def from_json(cls, data: Mapping[str, Any]) -> "QueueStatusRequest":
        return cls(status=data.get("status") or "")

    def validate(self) -> None:
        if self.status not in QueueStatus.ALL:
            raise ValidationError(f"Invalid queue status: {self.status!r}")


@dataclass
class QueueEntryResponse:
    """DTO for queue entry API responses."""

    id: int
    customer_id: int
    service_id: int
    barber: Optional[str]
    position: int
    status: str
    estimated_wait_time: Optional[int]
    joined_at: Optional[str]

    @classmethod
    def from_domain(cls, entry, tz: ZoneInfo) -> "QueueEntryResponse":
        """Create response from domain entity."""
        return cls(
            id=entry.id,
            customer_id=entry.customer_id,
            service_id=entry.service_id,
            barber=entry.barber,
            position=entry.position,
            status=entry.status,
            estimated_wait_time=entry.estimated_wait_time,
            joined_at=_format_time(entry.joined_at, tz),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "customerId": self.customer_id,
            "serviceId": self.service_id,
            "barber": self.barber,
            "position": self.position,
            "status": self.status,
            "estimatedWaitTime": self.estimated_wait_time,
            "joinedAt": self.joined_at,
        }


# ===========================
# Appointments
# ===========================


@dataclass
class AppointmentCreateRequest:
    """DTO for appointment creation requests."""

    customer_id: int
    service_id: int
    start_time: datetime
    barber: Optional[str] = None
    notes: Optional[str] = None

    @classmethod
    def from_json(cls, data: Mapping[str, Any]) -> "AppointmentCreateRequest":
        if data.get("endTime") is not None:
            raise ValidationError("endTime is derived from the service duration")
        return cls(
            customer_id=_int_field(data, "customerId"),
            service_id=_int_field(data, "serviceId"),
            start_time=parse_datetime(data.get("startTime"), "startTime"),
            barber=data.get("barber"),
            notes=data.get("notes"),
        )

    def validate(self) -> None:
        """Validate the request data."""
        if self.customer_id <= 0:
            raise ValidationError("Valid customerId is required")
        if self.service_id <= 0:
            raise ValidationError("Valid serviceId is required")
        if not isinstance(self.start_time, datetime):
            raise ValidationError("startTime is required")


@dataclass
class AppointmentUpdateRequest:
    """DTO for partial appointment updates.

    ``end_time`` exists only so a client trying to set it gets a clear
    error: the end is always recomputed from the service duration.
    """

    customer_id: Optional[int] = None
    service_id: Optional[int] = None
    start_time: Optional[datetime] = None
    end_time: Optional[datetime] = None
    barber: Optional[str] = None
    notes: Optional[str] = None
    status: Optional[str] = None

    @classmethod
    def from_json(cls, data: Mapping[str, Any]) -> "AppointmentUpdateRequest":
        start = data.get("startTime")
        end = data.get("endTime")
        return cls(
            customer_id=_int_field(data, "customerId", required=False),
            service_id=_int_field(data, "serviceId", required=False),
            start_time=parse_datetime(start, "startTime") if start is not None else None,
            end_time=parse_datetime(end, "endTime") if end is not None else None,
            barber=data.get("barber"),
            notes=data.get("notes"),
            status=data.get("status"),
        )

    def validate(self) -> None:
        """Validate the request data."""
        if self.end_time is not None:
            raise ValidationError(
                "endTime cannot be set; it follows startTime and the service duration"
            )
        if self.customer_id is not None and self.customer_id <= 0:
            raise ValidationError("Valid customerId is required")
        if self.service_id is not None and self.service_id <= 0:
            raise ValidationError("Valid serviceId is required")
        if self.status is not None and self.status not in AppointmentStatus.ALL:
            raise ValidationError(f"Invalid appointment status: {self.status!r}")

    def to_patch(self) -> AppointmentPatch:
        return AppointmentPatch(
            customer_id=self.customer_id,
            service_id=self.service_id,
            start_time=self.start_time,
            end_time=self.end_time,
            barber=self.barber,
            notes=self.notes,
            status=self.status,
        )


@dataclass
class AppointmentStatusRequest:
    status: str

    @classmethod
    def from_json(cls, data: Mapping[str, Any]) -> "AppointmentStatusRequest":
        return cls(status=data.get("status") or "")

    def validate(self) -> None:
        if self.status not in AppointmentStatus.ALL:
            raise ValidationError(f"Invalid appointment status: {self.status!r}")


@dataclass
class AppointmentResponse:
    """DTO for appointment API responses."""

    id: int
    customer_id: int
    service_id: int
    barber: Optional[str]
    start_time: str
    end_time: str
    status: str
    notes: Optional[str]

    @classmethod
    def from_domain(cls, appointment, tz: ZoneInfo) -> "AppointmentResponse":
        """Create response from domain entity."""
        return cls(
            id=appointment.id,
            customer_id=appointment.customer_id,
            service_id=appointment.service_id,
            barber=appointment.barber,
            start_time=_format_time(appointment.start_time, tz),
            end_time=_format_time(appointment.end_time, tz),
            status=appointment.status,
            notes=appointment.notes,
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "customerId": self.customer_id,
            "serviceId": self.service_id,
            "barber": self.barber,
            "startTime": self.start_time,
            "endTime": self.end_time,
            "status": self.status,
            "notes": self.notes,
        }


# ===========================
# Transactions
# ===========================


@dataclass
class TransactionCreateRequest:
    total: Decimal
    payment_method: str
    status: str = TransactionStatus.COMPLETED
    customer_id: Optional[int] = None
    appointment_id: Optional[int] = None

    @classmethod
    def from_json(cls, data: Mapping[str, Any]) -> "TransactionCreateRequest":
        if data.get("total") is None:
            raise ValidationError("total is required")
        return cls(
            total=to_money(data["total"]),
            payment_method=data.get("paymentMethod") or "",
            status=data.get("status") or TransactionStatus.COMPLETED,
            customer_id=_int_field(data, "customerId", required=False),
            appointment_id=_int_field(data, "appointmentId", required=False),
        )

    def validate(self) -> None:
        if self.total <= 0:
            raise ValidationError("total must be positive")
        if self.payment_method not in PaymentMethod.ALL:
            raise ValidationError(f"Invalid payment method: {self.payment_method!r}")
        if self.status not in TransactionStatus.ALL:
            raise ValidationError(f"Invalid transaction status: {self.status!r}")


@dataclass
class TransactionResponse:
    id: int
    total: str
    payment_method: str
    status: str
    customer_id: Optional[int]
    appointment_id: Optional[int]
    created_at: Optional[str]

    @classmethod
    def from_domain(cls, transaction, tz: ZoneInfo) -> "TransactionResponse":
        return cls(
            id=transaction.id,
            total=_format_money(transaction.total),
            payment_method=transaction.payment_method,
            status=transaction.status,
            customer_id=transaction.customer_id,
            appointment_id=transaction.appointment_id,
            created_at=_format_time(transaction.created_at, tz),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "total": self.total,
            "paymentMethod": self.payment_method,
            "status": self.status,
            "customerId": self.customer_id,
            "appointmentId": self.appointment_id,
            "createdAt": self.created_at,
        }


# ===========================
# Aggregates
# ===========================


@dataclass
class DashboardStatsResponse:
    today_queue_count: int
    today_appointment_count: int
    average_wait_time: int
    today_revenue: str
    window_start: str
    window_end: str

    @classmethod
    def from_domain(cls, stats) -> "DashboardStatsResponse":
        tz = ZoneInfo(stats.window.timezone)
        return cls(
            today_queue_count=stats.today_queue_count,
            today_appointment_count=stats.today_appointment_count,
            average_wait_time=stats.average_wait_time,
            today_revenue=_format_money(stats.today_revenue),
            window_start=_format_time(stats.window.start, tz),
            window_end=_format_time(stats.window.end, tz),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "todayQueueCount": self.today_queue_count,
            "todayAppointmentCount": self.today_appointment_count,
            "averageWaitTime": self.average_wait_time,
            "todayRevenue": self.today_revenue,
            "window": {"start": self.window_start, "end": self.window_end},
        }


def analytics_summary_to_dict(summary: Mapping[str, Any]) -> Dict[str, Any]:
    """Serialise ``AnalyticsService.summary()`` output."""
    weekly = summary["weekly_revenue"]
    services: List[Dict[str, Any]] = [
        {"serviceId": s.id, "name": s.name, "count": count}
        for s, count in summary["popular_services"]
    ]
    return {
        "weeklyRevenue": {
            "thisWeek": _format_money(weekly["this_week"]),
            "lastWeek": _format_money(weekly["last_week"]),
            "change": float(weekly["change"]),
        },
        "customerRetention": float(summary["customer_retention"]),
        "popularServices": services,
        "peakHours": [{"hour": h, "count": c} for h, c in summary["peak_hours"]],
    }
