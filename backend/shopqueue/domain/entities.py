"""
Domain entities - pure business representation, no framework dependencies.

Entities validate their own invariants in ``__post_init__``. Status state
machines live here so every layer checks transitions the same way.
"""

from dataclasses import dataclass
from datetime import datetime, timedelta
from decimal import ROUND_HALF_UP, Decimal
from typing import Dict, FrozenSet, Optional

from shopqueue.core.exceptions import InvalidTransitionError, ValidationError

CENTS = Decimal("0.01")


def to_money(value) -> Decimal:
    """Quantize a currency amount to exactly two fractional digits."""
    try:
        amount = value if isinstance(value, Decimal) else Decimal(str(value))
    except Exception as e:
        raise ValidationError(f"Invalid currency amount: {value!r}") from e
    if not amount.is_finite():
        raise ValidationError(f"Invalid currency amount: {value!r}")
    return amount.quantize(CENTS, rounding=ROUND_HALF_UP)


class QueueStatus:
    WAITING = "waiting"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"

    ALL: FrozenSet[str] = frozenset({WAITING, IN_PROGRESS, COMPLETED})
    # Entries in these states make up the dense position window
    ACTIVE: FrozenSet[str] = frozenset({WAITING, IN_PROGRESS})
    TRANSITIONS: Dict[str, str] = {WAITING: IN_PROGRESS, IN_PROGRESS: COMPLETED}

    @classmethod
    def next_status(cls, current: str) -> str:
        """Return the single legal successor of ``current``."""
        nxt = cls.TRANSITIONS.get(current)
        if nxt is None:
            raise InvalidTransitionError("queue entry", current, "any later status")
        return nxt

    @classmethod
    def check_transition(cls, current: str, requested: str) -> None:
        if cls.TRANSITIONS.get(current) != requested:
            raise InvalidTransitionError("queue entry", current, requested)


class AppointmentStatus:
    SCHEDULED = "scheduled"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    CANCELLED = "cancelled"

    ALL: FrozenSet[str] = frozenset({SCHEDULED, IN_PROGRESS, COMPLETED, CANCELLED})
    TERMINAL: FrozenSet[str] = frozenset({COMPLETED, CANCELLED})
    TRANSITIONS: Dict[str, FrozenSet[str]] = {
        SCHEDULED: frozenset({IN_PROGRESS, CANCELLED}),
        IN_PROGRESS: frozenset({COMPLETED, CANCELLED}),
    }

    @classmethod
    def check_transition(cls, current: str, requested: str) -> None:
        if requested not in cls.TRANSITIONS.get(current, frozenset()):
            raise InvalidTransitionError("appointment", current, requested)


class PaymentMethod:
    CASH = "cash"
    CARD = "card"
    DIGITAL = "digital"

    ALL: FrozenSet[str] = frozenset({CASH, CARD, DIGITAL})


class TransactionStatus:
    PENDING = "pending"
    COMPLETED = "completed"
    REFUNDED = "refunded"

    ALL: FrozenSet[str] = frozenset({PENDING, COMPLETED, REFUNDED})


@dataclass
class Tenant:
    """A shop. ``timezone`` is an IANA name; None means server time."""

    id: str = ""
    business_name: Optional[str] = None
    timezone: Optional[str] = None
    created_at: Optional[datetime] = None

    def __post_init__(self):
        if not self.id:
            raise ValidationError("Tenant id is required")


@dataclass
class Customer:
    id: Optional[int] = None
    tenant_id: str = ""
    name: str = ""
    email: Optional[str] = None
    phone: Optional[str] = None
    notes: Optional[str] = None
    preferred_barber: Optional[str] = None
    visit_count: int = 0
    created_at: Optional[datetime] = None

    def __post_init__(self):
        if not self.tenant_id:
            raise ValidationError("Customer must belong to a tenant")
        if not self.name or not self.name.strip():
            raise ValidationError("Customer name is required")
        if self.email and "@" not in self.email:
            raise ValidationError("Invalid email format")
        if self.visit_count < 0:
            raise ValidationError("Visit count cannot be negative")


@dataclass
class Service:
    """A bookable service. Duration is in minutes, price in currency units."""

    id: Optional[int] = None
    tenant_id: str = ""
    name: str = ""
    price: Decimal = Decimal("0.00")
    duration: int = 0
    description: Optional[str] = None
    is_active: bool = True
    created_at: Optional[datetime] = None

    def __post_init__(self):
        if not self.tenant_id:
            raise ValidationError("Service must belong to a tenant")
        if not self.name or not self.name.strip():
            raise ValidationError("Service name is required")
        self.price = to_money(self.price)
        if self.price <= 0:
            raise ValidationError("Price must be positive")
        if isinstance(self.duration, bool) or not isinstance(self.duration, int):
            raise ValidationError("Duration must be a whole number of minutes")
        if self.duration <= 0:
            raise ValidationError("Duration must be positive")

    def end_time_for(self, start_time: datetime) -> datetime:
        return start_time + timedelta(minutes=self.duration)


@dataclass
class Appointment:
    id: Optional[int] = None
    tenant_id: str = ""
    customer_id: int = 0
    service_id: int = 0
    start_time: Optional[datetime] = None
    end_time: Optional[datetime] = None
    barber: Optional[str] = None
    status: str = AppointmentStatus.SCHEDULED
    notes: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    def __post_init__(self):
        if not self.tenant_id:
            raise ValidationError("Appointment must belong to a tenant")
        if self.customer_id <= 0:
            raise ValidationError("Valid customer_id is required")
        if self.service_id <= 0:
            raise ValidationError("Valid service_id is required")
        if self.start_time is None or self.end_time is None:
            raise ValidationError("Start and end time are required")
        if self.end_time <= self.start_time:
            raise ValidationError("End time must be after start time")
        if self.status not in AppointmentStatus.ALL:
            raise ValidationError(f"Invalid appointment status: {self.status}")

    @property
    def duration_minutes(self) -> int:
        return int((self.end_time - self.start_time).total_seconds() // 60)


@dataclass(frozen=True)
class AppointmentPatch:
    """Partial update of an appointment; ``None`` leaves a field as is.

    ``end_time`` is accepted only to be refused: the end always follows the
    start time and the service duration.
    """

    customer_id: Optional[int] = None
    service_id: Optional[int] = None
    start_time: Optional[datetime] = None
    end_time: Optional[datetime] = None
    barber: Optional[str] = None
    notes: Optional[str] = None
    status: Optional[str] = None

    def __post_init__(self):
        if self.end_time is not None:
            raise ValidationError(
                "endTime cannot be set; it follows startTime and the service duration"
            )
        if self.customer_id is not None and self.customer_id <= 0:
            raise ValidationError("Valid customer_id is required")
        if self.service_id is not None and self.service_id <= 0:
            raise ValidationError("Valid service_id is required")
        if self.status is not None and self.status not in AppointmentStatus.ALL:
            raise ValidationError(f"Invalid appointment status: {self.status}")


@dataclass
class QueueEntry:
    id: Optional[int] = None
    tenant_id: str = ""
    customer_id: int = 0
    service_id: int = 0
    position: int = 0
    barber: Optional[str] = None
    status: str = QueueStatus.WAITING
    estimated_wait_time: Optional[int] = None
    joined_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    def __post_init__(self):
        if not self.tenant_id:
            raise ValidationError("Queue entry must belong to a tenant")
        if self.position <= 0:
            raise ValidationError("Position must be a positive integer")
        if self.status not in QueueStatus.ALL:
            raise ValidationError(f"Invalid queue status: {self.status}")
        if self.estimated_wait_time is not None and self.estimated_wait_time < 0:
            raise ValidationError("Estimated wait time cannot be negative")

    @property
    def is_active(self) -> bool:
        return self.status in QueueStatus.ACTIVE


@dataclass
class Transaction:
    id: Optional[int] = None
    tenant_id: str = ""
    total: Decimal = Decimal("0.00")
    payment_method: str = PaymentMethod.CASH
    status: str = TransactionStatus.COMPLETED
    customer_id: Optional[int] = None
    appointment_id: Optional[int] = None
    created_at: Optional[datetime] = None

    def __post_init__(self):
        if not self.tenant_id:
            raise ValidationError("Transaction must belong to a tenant")
        self.total = to_money(self.total)
        if self.total <= 0:
            raise ValidationError("Total must be positive")
        if self.payment_method not in PaymentMethod.ALL:
            raise ValidationError(f"Invalid payment method: {self.payment_method}")
        if self.status not in TransactionStatus.ALL:
            raise ValidationError(f"Invalid transaction status: {self.status}")


@dataclass(frozen=True)
class DayWindow:
    """Half-open ``[start, end)`` local wall-clock interval for one day."""

    start: datetime
    end: datetime
    timezone: str

    def contains(self, moment: Optional[datetime]) -> bool:
        return moment is not None and self.start <= moment < self.end


@dataclass
class DashboardStats:
    """One consistent snapshot of a tenant's figures for today."""

    today_queue_count: int
    today_appointment_count: int
    average_wait_time: int
    today_revenue: Decimal
    window: DayWindow
