"""
API tests for dashboard, analytics and health endpoints.
"""


def _pay(client, headers, total, status):
    response = client.post(
        "/api/transactions",
        json={"total": total, "paymentMethod": "cash", "status": status},
        headers=headers,
    )
    assert response.status_code == 201, response.get_data(as_text=True)


class TestDashboard:
    def test_revenue_includes_pending(self, client, tenant_headers, response_helper):
        _pay(client, tenant_headers, "20.00", "pending")
        _pay(client, tenant_headers, "35.00", "completed")

        body = response_helper.assert_json_response(
            client.get("/api/dashboard/stats", headers=tenant_headers)
        )

        assert body["data"]["todayRevenue"] == "55.00"
        assert body["data"]["todayQueueCount"] == 0
        assert body["data"]["averageWaitTime"] == 0
        assert body["data"]["window"] == {
            "start": "2024-01-01T00:00:00+00:00",
            "end": "2024-01-02T00:00:00+00:00",
        }

    def test_requires_tenant_header(self, client, response_helper):
        response_helper.assert_error(client.get("/api/dashboard/stats"), 401)

    def test_unknown_tenant(self, client, response_helper):
        response = client.get("/api/dashboard/stats", headers={"X-Tenant-ID": "nobody"})
        response_helper.assert_error(response, 404, "tenant_not_found")

    def test_analytics_summary(self, client, tenant_headers, response_helper):
        _pay(client, tenant_headers, "25.00", "completed")

        body = response_helper.assert_json_response(
            client.get("/api/analytics/summary", headers=tenant_headers)
        )

        assert body["data"]["weeklyRevenue"]["thisWeek"] == "25.00"
        assert body["data"]["customerRetention"] == 33.3
        assert {s["name"] for s in body["data"]["popularServices"]} == {"Haircut", "Shave"}


class TestHealth:
    def test_health_needs_no_tenant(self, client):
        response = client.get("/health")
        assert response.status_code == 200
        assert response.get_json() == {"status": "healthy", "database": "connected"}

    def test_unknown_route_uses_envelope(self, client, response_helper):
        body = response_helper.assert_error(client.get("/api/nowhere"), 404)
        assert body["message"] == "Resource not found"
