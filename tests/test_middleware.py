"""
Tests for the bearer-token dependency guarding protected routes.
"""


def test_missing_token_returns_401(client):
    response = client.get("/api/team")

    assert response.status_code == 401
    assert response.json() == {"success": False, "message": "Access token required"}


def test_non_bearer_scheme_returns_401(client):
    response = client.get("/api/team", headers={"Authorization": "Basic dXNlcjpwYXNz"})

    assert response.status_code == 401


def test_invalid_token_returns_403(client, bearer):
    response = client.get("/api/team", headers=bearer("forged-token"))

    assert response.status_code == 403
    assert response.json()["message"] == "Invalid or expired token"


def test_token_without_profile_returns_403(client, backend, signup, bearer):
    token, user = signup()
    backend.db.tables["users"] = []

    response = client.get("/api/complaints/mine", headers=bearer(token))

    assert response.status_code == 403
    assert response.json()["message"] == "User data not found"


def test_provider_failure_returns_500(client, backend, signup, bearer):
    token, _ = signup()
    backend.auth.fail_get_user = Exception("connection reset by peer")

    response = client.get("/api/team", headers=bearer(token))

    assert response.status_code == 500


def test_profile_lookup_failure_returns_500(client, backend, signup, bearer):
    token, _ = signup()
    backend.db.fail("users", "select")

    response = client.get("/api/team", headers=bearer(token))

    assert response.status_code == 500


def test_token_is_revalidated_on_every_request(client, backend, signup, bearer):
    token, _ = signup()
    assert client.get("/api/complaints/mine", headers=bearer(token)).status_code == 200

    backend.auth.tokens.pop(token)

    assert client.get("/api/complaints/mine", headers=bearer(token)).status_code == 403


def test_security_headers_present(client):
    response = client.get("/health")

    assert response.status_code == 200
    assert response.headers["X-Content-Type-Options"] == "nosniff"
    assert response.headers["X-Frame-Options"] == "DENY"


def test_rejected_api_key_is_server_error_not_bad_token(client, backend, signup, bearer, auth_api_error):
    token, _ = signup()
    backend.auth.fail_get_user = auth_api_error("Invalid API key", 401)

    response = client.get("/api/team", headers=bearer(token))

    assert response.status_code == 500


def test_expired_token_status_returns_403(client, backend, signup, bearer, auth_api_error):
    token, _ = signup()
    backend.auth.fail_get_user = auth_api_error("token is expired", 401, "bad_jwt")

    response = client.get("/api/team", headers=bearer(token))

    assert response.status_code == 403
    assert response.json()["message"] == "Invalid or expired token"
