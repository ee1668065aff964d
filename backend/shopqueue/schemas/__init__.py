"""
Schemas package - Data Transfer Objects and validation.

This package contains DTOs that define the API contracts of the request
layer: camelCase JSON in, camelCase JSON out.
"""

from .dtos import (
    AppointmentCreateRequest,
    AppointmentResponse,
    AppointmentStatusRequest,
    AppointmentUpdateRequest,
    DashboardStatsResponse,
    QueueAdmitRequest,
    QueueEntryResponse,
    QueuePositionRequest,
    QueueStatusRequest,
    TransactionCreateRequest,
    TransactionResponse,
)

__all__ = [
    # Queue DTOs
    "QueueAdmitRequest",
    "QueuePositionRequest",
    "QueueStatusRequest",
    "QueueEntryResponse",
    # Appointment DTOs
    "AppointmentCreateRequest",
    "AppointmentUpdateRequest",
    "AppointmentStatusRequest",
    "AppointmentResponse",
    # Transaction / aggregate DTOs
    "TransactionCreateRequest",
    "TransactionResponse",
    "DashboardStatsResponse",
]
