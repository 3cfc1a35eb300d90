import logging
import uuid

import pytest

pytestmark = pytest.mark.integration


class TestCorrelationIdMiddleware:
    def test_returns_provided_request_id(self, client):
        custom_id = "my-custom-request-id-123"
        response = client.get("/health", HTTP_X_REQUEST_ID=custom_id)
        assert response["X-Request-ID"] == custom_id

    def test_generates_uuid_when_no_request_id(self, client):
        response = client.get("/health")
        request_id = response["X-Request-ID"]
        parsed = uuid.UUID(request_id, version=4)
        assert str(parsed) == request_id

    def test_api_responses_carry_request_id(self, api_client_with_correlation):
        client, cid = api_client_with_correlation
        response = client.get("/api/v1/products/")
        assert response["X-Request-ID"] == cid

    def test_correlation_id_in_logs(self, client, caplog):
        custom_id = "log-test-correlation-456"
        with caplog.at_level(logging.INFO):
            client.get("/health", HTTP_X_REQUEST_ID=custom_id)
        found = any(custom_id in record.getMessage() for record in caplog.records)
        assert found, (
            f"correlation_id '{custom_id}' not found in log records: "
            f"{[r.getMessage() for r in caplog.records]}"
        )


class TestRequestIdValidation:
    @pytest.mark.parametrize("raw", ["", "has spaces", "x" * 129, "new\nline"])
    def test_malformed_ids_are_replaced(self, raw):
        from modules.core.middleware import resolve_correlation_id

        resolved = resolve_correlation_id(raw)
        assert resolved != raw
        uuid.UUID(resolved, version=4)

    def test_well_formed_id_is_kept(self):
        from modules.core.middleware import resolve_correlation_id

        assert resolve_correlation_id("req-01.abc:42") == "req-01.abc:42"

    def test_context_reset_after_request(self, client):
        from modules.core.middleware import get_correlation_id

        client.get("/health", HTTP_X_REQUEST_ID="scoped-id")
        assert get_correlation_id() == ""
