"""Integration tests for the uniform error envelope."""

import pytest

pytestmark = pytest.mark.integration


def _assert_error_envelope(body):
    assert body["success"] is False
    assert isinstance(body["message"], str)
    assert body["message"]
    assert body["data"] is None


class TestErrorEnvelope:
    def test_auth_error_has_envelope(self, api_client):
        response = api_client.get("/api/v1/orders/my-orders/")

        assert response.status_code == 401
        _assert_error_envelope(response.json())

    def test_validation_error_lists_field_errors(self, customer_client):
        response = customer_client.post("/api/v1/orders/", {}, format="json")

        assert response.status_code == 400
        body = response.json()
        _assert_error_envelope(body)
        assert body["message"] == "Validation failed."
        assert "items" in body["errors"]

    def test_malformed_json_has_envelope(self, customer_client):
        response = customer_client.post(
            "/api/v1/orders/", data="{", content_type="application/json"
        )

        assert response.status_code == 400
        _assert_error_envelope(response.json())

    def test_domain_error_has_envelope(self, customer_client):
        response = customer_client.get("/api/v1/users/")

        assert response.status_code == 403
        body = response.json()
        _assert_error_envelope(body)
        assert "errors" not in body

    def test_method_not_allowed_has_envelope(self, customer_client):
        response = customer_client.delete("/api/v1/orders/my-orders/")

        assert response.status_code == 405
        _assert_error_envelope(response.json())
