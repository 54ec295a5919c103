"""Route-level tests for registration, login and availability checks."""

from __future__ import annotations


def _register(client, **overrides):
    payload = {
        "username": "bob",
        "password": "secret123",
        "confirmPassword": "secret123",
    }
    payload.update(overrides)
    return client.post("/api/auth/register", json=payload)


def test_register_returns_created(client):
    response = _register(client, email="bob@example.com", displayName="Bobby")

    assert response.status_code == 201
    body = response.get_json()
    assert body["success"] is True
    assert body["message"] == "註冊成功"
    assert body["username"] == "bob"
    assert body["token"] is None


def test_register_validation_errors_are_grouped_by_field(client):
    response = _register(
        client, username="", password="123", confirmPassword="456", email="not-an-email"
    )

    assert response.status_code == 400
    body = response.get_json()
    assert body["success"] is False
    assert body["message"] == "輸入資料驗證失敗"
    assert body["errors"]["username"] == ["帳號不能為空"]
    assert body["errors"]["password"] == ["密碼長度至少需要6個字元"]
    assert body["errors"]["confirmPassword"] == ["密碼與確認密碼不符"]
    assert body["errors"]["email"] == ["請輸入有效的電子信箱"]


def test_register_duplicate_username(client):
    _register(client)

    response = _register(client)

    assert response.status_code == 400
    assert response.get_json()["message"] == "此帳號已存在"


def test_register_rejects_non_object_body(client):
    response = client.post("/api/auth/register", json=["bob"])

    assert response.status_code == 400
    assert "username" in response.get_json()["errors"]


def test_login_returns_token_and_expiry(client, registered_user):
    response = client.post(
        "/api/auth/login", json={"username": "alice", "password": registered_user["password"]}
    )

    assert response.status_code == 200
    body = response.get_json()
    assert body["success"] is True
    assert body["message"] == "登入成功"
    assert body["userId"] == registered_user["id"]
    assert body["username"] == "alice"
    assert body["token"].count(".") == 2
    assert body["expiresAt"]


def test_login_wrong_password(client, registered_user):
    response = client.post("/api/auth/login", json={"username": "alice", "password": "wrong-pass"})

    assert response.status_code == 400
    body = response.get_json()
    assert body == {
        "success": False,
        "message": "帳號或密碼錯誤",
        "token": None,
        "userId": None,
        "username": None,
        "expiresAt": None,
    }


def test_login_requires_credentials(client):
    response = client.post("/api/auth/login", json={})

    assert response.status_code == 400
    assert set(response.get_json()["errors"]) == {"username", "password"}


def test_check_username(client, registered_user):
    taken = client.get("/api/auth/check-username/alice")
    free = client.get("/api/auth/check-username/zoe")

    assert taken.get_json() == {"available": False}
    assert free.get_json() == {"available": True}
