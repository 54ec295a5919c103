"""Route-level tests for the profile endpoints."""

from __future__ import annotations

from datetime import datetime, timezone


def test_get_profile(client, auth_headers, registered_user):
    response = client.get("/api/user/profile", headers=auth_headers)

    assert response.status_code == 200
    body = response.get_json()
    assert body["id"] == registered_user["id"]
    assert body["username"] == "alice"
    assert body["displayName"] == "Alice"
    assert body["email"] == "alice@example.com"
    assert body["createdDate"]
    assert body["lastLoginDate"]


def test_profile_requires_token(client):
    assert client.get("/api/user/profile").status_code == 401
    assert client.put("/api/user/profile", json={"displayName": "Nope"}).status_code == 401


def test_update_profile(client, auth_headers):
    response = client.put(
        "/api/user/profile",
        json={"displayName": "Alice W", "email": "alice.w@example.com"},
        headers=auth_headers,
    )

    assert response.status_code == 200
    body = response.get_json()
    assert body["success"] is True
    assert body["message"] == "個人資料更新成功"
    assert body["user"]["displayName"] == "Alice W"
    assert body["user"]["email"] == "alice.w@example.com"


def test_update_profile_validation(client, auth_headers):
    response = client.put(
        "/api/user/profile",
        json={"displayName": "A", "email": "bad-email"},
        headers=auth_headers,
    )

    assert response.status_code == 400
    errors = response.get_json()["errors"]
    assert errors["displayName"] == ["顯示名稱至少需要2個字元"]
    assert errors["email"] == ["請輸入有效的電子郵件地址"]


def test_update_profile_email_taken(client, auth_headers):
    client.post(
        "/api/auth/register",
        json={
            "username": "bob",
            "password": "secret123",
            "confirmPassword": "secret123",
            "email": "bob@example.com",
        },
    )

    response = client.put(
        "/api/user/profile",
        json={"displayName": "Alice", "email": "bob@example.com"},
        headers=auth_headers,
    )

    assert response.status_code == 400
    assert response.get_json()["message"] == "此電子郵件已被使用"


def test_change_password_then_login(client, auth_headers):
    wrong = client.put(
        "/api/user/change-password",
        json={"currentPassword": "wrong-one", "newPassword": "newpass1", "confirmPassword": "newpass1"},
        headers=auth_headers,
    )
    assert wrong.status_code == 400
    assert wrong.get_json()["message"] == "目前密碼不正確"

    changed = client.put(
        "/api/user/change-password",
        json={"currentPassword": "secret123", "newPassword": "newpass1", "confirmPassword": "newpass1"},
        headers=auth_headers,
    )
    assert changed.status_code == 200
    assert changed.get_json()["message"] == "密碼變更成功"

    old = client.post("/api/auth/login", json={"username": "alice", "password": "secret123"})
    new = client.post("/api/auth/login", json={"username": "alice", "password": "newpass1"})
    assert old.status_code == 400
    assert new.status_code == 200


def test_change_password_validation(client, auth_headers):
    response = client.put(
        "/api/user/change-password",
        json={"currentPassword": "", "newPassword": "123"},
        headers=auth_headers,
    )

    assert response.status_code == 400
    errors = response.get_json()["errors"]
    assert errors["currentPassword"] == ["目前密碼不能為空"]
    assert errors["newPassword"] == ["新密碼至少需要6個字元"]
    assert errors["confirmPassword"] == ["確認密碼不能為空"]


def test_statistics(client, auth_headers):
    today = datetime.now(timezone.utc)
    client.post(
        "/api/expense/budget",
        json={"amount": 500, "year": today.year, "month": today.month},
        headers=auth_headers,
    )
    client.post("/api/expense/cash", json={"amount": 120, "description": "咖啡"}, headers=auth_headers)
    client.post(
        "/api/expense/credit-card", json={"amount": 80, "description": "書"}, headers=auth_headers
    )

    response = client.get("/api/user/statistics", headers=auth_headers)

    assert response.status_code == 200
    body = response.get_json()
    assert body["totalExpenseRecords"] == 2
    assert body["totalBudgets"] == 1
    assert body["totalCashExpenses"] == 120
    assert body["totalCreditCardExpenses"] == 80
    assert body["averageMonthlyExpense"] == 200
    assert body["registrationDate"]


def test_deleted_user_token_gets_not_found(client, auth_headers, app_session_factory, registered_user):
    from budget_assistant.models import User

    with app_session_factory() as session:
        session.delete(session.get(User, registered_user["id"]))

    response = client.get("/api/user/profile", headers=auth_headers)

    assert response.status_code == 404
    assert response.get_json() == {"success": False, "message": "找不到使用者"}


def test_availability_checks(client, registered_user):
    assert client.get("/api/user/check-username/alice").get_json() == {"available": False}
    assert client.get("/api/user/check-email/alice@example.com").get_json() == {"available": False}
    assert client.get("/api/user/check-email/new@example.com").get_json() == {"available": True}
