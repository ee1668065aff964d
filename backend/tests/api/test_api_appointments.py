"""
API tests for appointment and transaction endpoints.
"""

import pytest


@pytest.fixture
def seed(app):
    return app.config["SEED"]


@pytest.fixture
def booking(client, tenant_headers, seed):
    response = client.post(
        "/api/appointments",
        json={
            "customerId": seed["customers"][0].id,
            "serviceId": seed["haircut"].id,
            "startTime": "2024-01-01T09:00:00",
        },
        headers=tenant_headers,
    )
    assert response.status_code == 201, response.get_data(as_text=True)
    return response.get_json()["data"]


class TestAppointmentEndpoints:
    def test_book_derives_end_time(self, booking):
        assert booking["startTime"] == "2024-01-01T09:00:00+00:00"
        assert booking["endTime"] == "2024-01-01T09:30:00+00:00"
        assert booking["status"] == "scheduled"

    def test_book_with_end_time_rejected(self, client, tenant_headers, seed, response_helper):
        response = client.post(
            "/api/appointments",
            json={
                "customerId": seed["customers"][0].id,
                "serviceId": seed["haircut"].id,
                "startTime": "2024-01-01T09:00:00",
                "endTime": "2024-01-01T12:00:00",
            },
            headers=tenant_headers,
        )
        response_helper.assert_error(response, 400, "validation_error")

    def test_reschedule(self, client, tenant_headers, booking, response_helper):
        response = client.put(
            f"/api/appointments/{booking['id']}",
            json={"startTime": "2024-01-01T15:00:00Z"},
            headers=tenant_headers,
        )

        body = response_helper.assert_json_response(response)
        assert body["data"]["endTime"] == "2024-01-01T15:30:00+00:00"

    def test_patch_end_time_rejected(self, client, tenant_headers, booking, response_helper):
        response = client.put(
            f"/api/appointments/{booking['id']}",
            json={"endTime": "2024-01-01T15:00:00"},
            headers=tenant_headers,
        )
        response_helper.assert_error(response, 400, "validation_error")

    def test_status_flow(self, client, tenant_headers, booking, response_helper):
        url = f"/api/appointments/{booking['id']}/status"

        started = client.put(url, json={"status": "in_progress"}, headers=tenant_headers)
        assert response_helper.assert_json_response(started)["data"]["status"] == "in_progress"

        back = client.put(url, json={"status": "scheduled"}, headers=tenant_headers)
        response_helper.assert_error(back, 409, "invalid_transition")

    def test_today_and_list(self, client, tenant_headers, booking, response_helper):
        today = response_helper.assert_json_response(
            client.get("/api/appointments/today", headers=tenant_headers)
        )
        listing = response_helper.assert_json_response(
            client.get("/api/appointments", headers=tenant_headers)
        )
        assert [a["id"] for a in today["data"]] == [booking["id"]]
        assert [a["id"] for a in listing["data"]] == [booking["id"]]

    def test_delete(self, client, tenant_headers, booking, response_helper):
        response = client.delete(f"/api/appointments/{booking['id']}", headers=tenant_headers)
        response_helper.assert_json_response(response)

        again = client.delete(f"/api/appointments/{booking['id']}", headers=tenant_headers)
        response_helper.assert_error(again, 404, "not_found")


class TestTransactionEndpoints:
    def test_record_and_list(self, client, tenant_headers, response_helper):
        created = client.post(
            "/api/transactions",
            json={"total": "35", "paymentMethod": "card"},
            headers=tenant_headers,
        )
        body = response_helper.assert_json_response(created, 201)
        assert body["data"]["total"] == "35.00"
        assert body["data"]["status"] == "completed"

        today = client.get("/api/transactions/today", headers=tenant_headers).get_json()
        assert [t["id"] for t in today["data"]] == [body["data"]["id"]]

    def test_invalid_payment_method(self, client, tenant_headers, response_helper):
        response = client.post(
            "/api/transactions",
            json={"total": "10", "paymentMethod": "iou"},
            headers=tenant_headers,
        )
        response_helper.assert_error(response, 400, "validation_error")
