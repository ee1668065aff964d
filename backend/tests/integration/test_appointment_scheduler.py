"""
Integration tests for AppointmentService against a real store.
"""

from datetime import datetime, timezone

import pytest

from shopqueue.core.exceptions import (
    InvalidTransitionError,
    NotFoundError,
    ValidationError,
)
from shopqueue.domain.entities import AppointmentPatch
from shopqueue.repositories import (
    AppointmentRepository,
    ServiceRepository,
    TransactionRepository,
)
from tests.conftest import OTHER_TENANT_ID, TENANT_ID, seed_tenant


@pytest.fixture
def booked(appointment_service, haircut, customers):
    return appointment_service.book(
        TENANT_ID, customers[0].id, haircut.id, datetime(2024, 1, 1, 9, 0)
    )


class TestBooking:
    def test_haircut_at_nine_ends_half_past(self, booked):
        assert booked.start_time == datetime(2024, 1, 1, 9, 0)
        assert booked.end_time == datetime(2024, 1, 1, 9, 30)
        assert booked.status == "scheduled"

    def test_booking_is_persisted(self, db_session, booked):
        stored = AppointmentRepository(db_session).get_by_id(TENANT_ID, booked.id)
        assert stored == booked

    def test_deactivated_service_cannot_be_booked(
        self, appointment_service, db_session, haircut, customers
    ):
        ServiceRepository(db_session).deactivate(TENANT_ID, haircut.id)

        with pytest.raises(ValidationError):
            appointment_service.book(
                TENANT_ID, customers[0].id, haircut.id, datetime(2024, 1, 1, 9, 0)
            )

    def test_overlapping_bookings_are_allowed(
        self, appointment_service, booked, haircut, customers
    ):
        second = appointment_service.book(
            TENANT_ID, customers[1].id, haircut.id, datetime(2024, 1, 1, 9, 15)
        )
        assert second.id != booked.id

    def test_start_in_tenant_timezone(self, db_session, appointment_service):
        data = seed_tenant(db_session, tenant_id="tenant-ny", timezone_name="America/New_York")

        created = appointment_service.book(
            "tenant-ny",
            data["customers"][0].id,
            data["haircut"].id,
            datetime(2024, 7, 1, 13, 0, tzinfo=timezone.utc),
        )

        assert created.start_time == datetime(2024, 7, 1, 9, 0)
        assert created.end_time == datetime(2024, 7, 1, 9, 30)


class TestReschedule:
    def test_new_start_moves_end(self, appointment_service, booked):
        updated = appointment_service.reschedule(
            TENANT_ID, booked.id, AppointmentPatch(start_time=datetime(2024, 1, 1, 14, 0))
        )
        assert updated.end_time == datetime(2024, 1, 1, 14, 30)

    def test_service_change_recomputes_end(self, appointment_service, booked, shave):
        updated = appointment_service.reschedule(
            TENANT_ID, booked.id, AppointmentPatch(service_id=shave.id)
        )
        assert updated.service_id == shave.id
        assert updated.end_time == datetime(2024, 1, 1, 9, 15)

    def test_end_time_patch_rejected_and_record_unchanged(
        self, appointment_service, db_session, booked
    ):
        with pytest.raises(ValidationError):
            appointment_service.reschedule(
                TENANT_ID,
                booked.id,
                AppointmentPatch(end_time=datetime(2024, 1, 1, 11, 0)),
            )
        stored = AppointmentRepository(db_session).get_by_id(TENANT_ID, booked.id)
        assert stored.end_time == datetime(2024, 1, 1, 9, 30)

    def test_existing_inactive_service_keeps_working(
        self, appointment_service, db_session, booked, haircut
    ):
        ServiceRepository(db_session).deactivate(TENANT_ID, haircut.id)

        updated = appointment_service.reschedule(
            TENANT_ID, booked.id, AppointmentPatch(start_time=datetime(2024, 1, 2, 9, 0))
        )
        assert updated.end_time == datetime(2024, 1, 2, 9, 30)

    def test_other_tenant_cannot_reschedule(
        self, appointment_service, other_tenant_data, booked
    ):
        with pytest.raises(NotFoundError):
            appointment_service.reschedule(
                OTHER_TENANT_ID, booked.id, AppointmentPatch(notes="mine now")
            )


class TestStatus:
    def test_full_lifecycle(self, appointment_service, booked):
        appointment_service.transition(TENANT_ID, booked.id, "in_progress")
        done = appointment_service.transition(TENANT_ID, booked.id, "completed")
        assert done.status == "completed"

    def test_cancel_from_scheduled(self, appointment_service, booked):
        assert appointment_service.transition(TENANT_ID, booked.id, "cancelled").status == "cancelled"

    def test_terminal_states_are_final(self, appointment_service, db_session, booked):
        appointment_service.transition(TENANT_ID, booked.id, "cancelled")

        with pytest.raises(InvalidTransitionError):
            appointment_service.transition(TENANT_ID, booked.id, "scheduled")
        stored = AppointmentRepository(db_session).get_by_id(TENANT_ID, booked.id)
        assert stored.status == "cancelled"

    def test_cannot_skip_in_progress(self, appointment_service, booked):
        with pytest.raises(InvalidTransitionError):
            appointment_service.transition(TENANT_ID, booked.id, "completed")


class TestQueriesAndRemoval:
    def test_todays_appointments_in_start_order(
        self, appointment_service, booked, haircut, customers
    ):
        early = appointment_service.book(
            TENANT_ID, customers[1].id, haircut.id, datetime(2024, 1, 1, 8, 0)
        )
        appointment_service.book(
            TENANT_ID, customers[2].id, haircut.id, datetime(2024, 1, 2, 0, 0)
        )

        today = appointment_service.todays_appointments(TENANT_ID)

        assert [a.id for a in today] == [early.id, booked.id]

    def test_list_is_latest_first(self, appointment_service, booked, haircut, customers):
        later = appointment_service.book(
            TENANT_ID, customers[1].id, haircut.id, datetime(2024, 1, 5, 9, 0)
        )
        assert [a.id for a in appointment_service.list_appointments(TENANT_ID)] == [
            later.id,
            booked.id,
        ]

    def test_delete_keeps_transaction_row(
        self, appointment_service, transaction_service, db_session, booked
    ):
        payment = transaction_service.record(
            TENANT_ID, total="25.00", payment_method="card", appointment_id=booked.id
        )

        removed = appointment_service.remove(TENANT_ID, booked.id)

        assert removed.id == booked.id
        assert AppointmentRepository(db_session).get_by_id(TENANT_ID, booked.id) is None
        remaining = TransactionRepository(db_session).list_by_tenant(TENANT_ID)
        assert [t.id for t in remaining] == [payment.id]
        assert remaining[0].appointment_id is None

    def test_delete_unknown(self, appointment_service, tenant_data):
        with pytest.raises(NotFoundError):
            appointment_service.remove(TENANT_ID, 999)
