from dlv_api.middleware.request_logging import sanitize_body


def test_home_endpoint(client):
    response = client.get("/")

    assert response.status_code == 200
    payload = response.json()
    assert payload["success"] is True
    assert payload["message"] == "DLV Burundi API Server"
    assert payload["status"] == "running"
    assert payload["endpoints"]["auth"] == "/api/auth"


def test_unknown_route_uses_error_shape(client):
    response = client.get("/api/does-not-exist")

    assert response.status_code == 404
    payload = response.json()
    assert payload["success"] is False
    assert payload["error"] == "ROUTE_NOT_FOUND"
    assert payload["message"] == "Route /api/does-not-exist not found"


def test_security_headers_present(client):
    response = client.get("/")

    assert response.headers["X-Content-Type-Options"] == "nosniff"
    assert response.headers["X-Frame-Options"] == "DENY"
    assert "Strict-Transport-Security" not in response.headers


def test_sanitize_body_masks_secrets():
    assert sanitize_body(b'{"transactionId": "txn_1", "otp": "123456"}') == {"transactionId": "txn_1", "otp": "***"}
    assert sanitize_body(b"not json") is None
    assert sanitize_body(b"[1, 2]") is None
