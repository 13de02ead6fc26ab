from dailyreport.core.config import SESSION_COOKIE_NAME, AppConfig

from conftest import MANAGER_PASSWORD, SALES_PASSWORD, build_client, login


def test_login_issues_session_cookie(client, sales_store):
    res = login(client, "S001", SALES_PASSWORD)
    assert res.status_code == 200, res.text

    body = res.json()
    assert body["status"] == "success"
    user = body["data"]["user"]
    assert user["sales_code"] == "S001"
    assert user["sales_name"] == "Hanako Sato"
    assert user["is_manager"] is False
    assert user["manager"]["sales_name"] == "Taro Yamada"
    assert "password_hash" not in user
    assert body["data"]["session_id"] == sales_store.find_by_code("S001").id

    assert SESSION_COOKIE_NAME in res.cookies
    set_cookie = res.headers["set-cookie"].lower()
    assert "httponly" in set_cookie
    assert "samesite=lax" in set_cookie
    assert "max-age=1800" in set_cookie
    assert "secure" not in set_cookie


def test_login_requires_both_fields(client):
    res = client.post("/api/auth/login", json={})
    assert res.status_code == 400
    error = res.json()["error"]
    assert error["code"] == "VALIDATION_ERROR"
    assert [d["field"] for d in error["details"]] == ["sales_code", "password"]

    res = client.post("/api/auth/login", json={"sales_code": "S001"})
    assert res.status_code == 400
    assert [d["field"] for d in res.json()["error"]["details"]] == ["password"]


def test_login_without_body_is_validation_error(client):
    res = client.post("/api/auth/login")
    assert res.status_code == 400
    assert res.json()["error"]["code"] == "VALIDATION_ERROR"


def test_wrong_password_and_unknown_code_look_the_same(client):
    wrong = login(client, "S001", "Wrong123!pass")
    unknown = login(client, "NOBODY", SALES_PASSWORD)

    assert wrong.status_code == unknown.status_code == 401
    assert wrong.json() == unknown.json()
    assert wrong.json()["error"]["code"] == "AUTH_INVALID_CREDENTIALS"
    assert SESSION_COOKIE_NAME not in wrong.cookies


def test_sixth_attempt_is_rate_limited_even_with_correct_password(client):
    for _ in range(5):
        assert login(client, "S001", "Wrong123!pass").status_code == 401

    res = login(client, "S001", SALES_PASSWORD)
    assert res.status_code == 429
    error = res.json()["error"]
    assert error["code"] == "RATE_LIMIT_EXCEEDED"
    assert "300 seconds" in error["message"]
    assert res.headers["retry-after"] == "300"


def test_rate_limit_lifts_after_block(client, clock):
    for _ in range(5):
        login(client, "S001", "Wrong123!pass")
    assert login(client, "S001", SALES_PASSWORD).status_code == 429

    clock.advance(300)
    assert login(client, "S001", SALES_PASSWORD).status_code == 200


def test_successful_login_resets_attempts(client):
    for _ in range(4):
        login(client, "S001", "Wrong123!pass")
    assert login(client, "S001", SALES_PASSWORD).status_code == 200

    for _ in range(4):
        assert login(client, "S001", "Wrong123!pass").status_code == 401


def test_trusted_proxy_keys_limits_per_client(tmp_path, sales_store, clock):
    config = AppConfig(environment="test", data_dir=tmp_path, trust_proxy=True, log_level="WARNING")
    client = build_client(config, sales_store, clock)
    attacker = {"X-Forwarded-For": "203.0.113.9, 10.0.0.7"}
    for _ in range(5):
        login(client, "S001", "Wrong123!pass", headers=attacker)
    assert login(client, "S001", SALES_PASSWORD, headers=attacker).status_code == 429

    res = login(client, "S001", SALES_PASSWORD, headers={"X-Forwarded-For": "203.0.113.9, 10.0.0.8"})
    assert res.status_code == 200


def test_logout_without_session(client):
    res = client.post("/api/auth/logout")
    assert res.status_code == 200
    assert res.json()["status"] == "success"


def test_logout_ends_session(client):
    login(client, "S001", SALES_PASSWORD)
    assert client.get("/api/auth/session").status_code == 200

    assert client.post("/api/auth/logout").status_code == 200
    res = client.get("/api/auth/session")
    assert res.status_code == 401
    assert res.json()["error"]["code"] == "AUTH_SESSION_EXPIRED"


def test_session_check_returns_user(client):
    login(client, "MGR001", MANAGER_PASSWORD)
    res = client.get("/api/auth/session")
    assert res.status_code == 200, res.text
    data = res.json()["data"]
    assert data["user"]["sales_code"] == "MGR001"
    assert data["user"]["is_manager"] is True
    assert data["session_expires_at"].endswith("Z")


def test_session_check_without_cookie(client):
    res = client.get("/api/auth/session")
    assert res.status_code == 401
    assert res.json() == {
        "status": "error",
        "error": {"code": "AUTH_SESSION_EXPIRED", "message": "Session is invalid or has expired"},
    }


def test_expired_session_is_rejected(client, clock):
    login(client, "S001", SALES_PASSWORD)
    clock.advance(1801)
    res = client.get("/api/auth/session")
    assert res.status_code == 401
    assert res.json()["error"]["code"] == "AUTH_SESSION_EXPIRED"


def test_session_check_slides_expiry(client, clock):
    login(client, "S001", SALES_PASSWORD)
    clock.advance(1000)
    assert client.get("/api/auth/session").status_code == 200
    clock.advance(1000)
    # 2000s after login, alive only because the previous check refreshed it
    assert client.get("/api/auth/session").status_code == 200


def test_tampered_cookie_degrades_to_unauthenticated(client):
    client.cookies.set(SESSION_COOKIE_NAME, "tampered-value")
    res = client.get("/api/auth/session")
    assert res.status_code == 401


def test_production_cookie_is_secure(tmp_path, sales_store, clock):
    config = AppConfig(
        environment="production",
        session_secret="p" * 40,
        data_dir=tmp_path,
        log_level="WARNING",
    )
    client = build_client(config, sales_store, clock)
    res = login(client, "S001", SALES_PASSWORD)
    assert res.status_code == 200
    assert "secure" in res.headers["set-cookie"].lower()
