"""Integration tests for the /auth endpoints."""

import asyncio

from bson import ObjectId

from errors import StoreUnavailableError

EMAIL = "a@x.com"
PASSWORD = "secret1"


def _register(client, email=EMAIL, password=PASSWORD, **extra):
    return client.post("/auth/register", json={"email": email, "password": password, **extra})


class TestRegister:
    def test_success(self, client, notifier):
        resp = _register(client, name="Alice")
        assert resp.status_code == 200
        assert resp.json() == {"message": "OTP sent to email!"}
        assert notifier.sent[0][:2] == (EMAIL, "Alice")

    def test_missing_email(self, client):
        resp = client.post("/auth/register", json={"password": PASSWORD})
        assert resp.status_code == 400
        assert resp.json()["code"] == "validation_error"

    def test_weak_password(self, client):
        resp = _register(client, password="short")
        assert resp.status_code == 400
        body = resp.json()
        assert body["field"] == "password"
        assert isinstance(body["details"], list)

    def test_duplicate(self, client):
        _register(client)
        resp = _register(client)
        assert resp.status_code == 400
        assert resp.json()["code"] == "conflict"
        assert resp.json()["message"] == "Email already registered!"

    def test_notifier_failure_leaves_nothing_behind(self, client, notifier):
        notifier.result = False
        resp = _register(client)
        assert resp.status_code == 500
        assert resp.json()["code"] == "notifier_error"

        notifier.result = True
        assert _register(client).status_code == 200

    def test_malformed_json_body(self, client):
        resp = client.post(
            "/auth/register",
            content=b"{not json",
            headers={"Content-Type": "application/json"},
        )
        assert resp.status_code == 400
        assert resp.json()["code"] == "validation_error"


class TestVerifyOtp:
    def test_verify_then_already_verified(self, client, notifier):
        _register(client)
        otp = notifier.code_for(EMAIL)

        first = client.post("/auth/verify-otp", json={"email": EMAIL, "otp": otp})
        assert first.status_code == 200
        assert first.json() == {"message": "Email verified successfully!"}

        again = client.post("/auth/verify-otp", json={"email": EMAIL, "otp": otp})
        assert again.status_code == 200
        assert again.json() == {"message": "User already verified!"}

    def test_wrong_code(self, client, notifier):
        _register(client)
        wrong = "111111" if notifier.code_for(EMAIL) != "111111" else "222222"
        resp = client.post("/auth/verify-otp", json={"email": EMAIL, "otp": wrong})
        assert resp.status_code == 400
        assert resp.json()["message"] == "Invalid OTP!"

    def test_unknown_user(self, client):
        resp = client.post("/auth/verify-otp", json={"email": "no@x.com", "otp": "123456"})
        assert resp.status_code == 404
        assert resp.json()["message"] == "User not found!"

    def test_missing_otp(self, client):
        resp = client.post("/auth/verify-otp", json={"email": EMAIL})
        assert resp.status_code == 400


class TestLogin:
    def test_unverified(self, client):
        _register(client)
        resp = client.post("/auth/login", json={"email": EMAIL, "password": PASSWORD})
        assert resp.status_code == 401
        assert resp.json()["message"] == "Email not verified"

    def test_success_shape(self, client, signup):
        signup()
        resp = client.post("/auth/login", json={"email": EMAIL, "password": PASSWORD})
        body = resp.json()
        assert set(body) == {"token", "accountId"}
        assert body["accountId"]

    def test_wrong_password_and_unknown_email_identical(self, client, signup):
        signup()
        wrong = client.post("/auth/login", json={"email": EMAIL, "password": "nope123"})
        unknown = client.post("/auth/login", json={"email": "z@x.com", "password": PASSWORD})
        assert wrong.status_code == unknown.status_code == 401
        assert wrong.json() == unknown.json()
        assert wrong.json()["message"] == "Invalid credentials"


class TestMeAndDelete:
    def test_me(self, client, signup):
        headers = signup(name="Alice")
        resp = client.get("/auth/me", headers=headers)
        assert resp.status_code == 200
        body = resp.json()
        assert body["email"] == EMAIL
        assert body["name"] == "Alice"
        assert body["verified"] is True
        assert "passwordHash" not in body
        assert "otpHash" not in body

    def test_me_without_token(self, client):
        resp = client.get("/auth/me")
        assert resp.status_code == 401
        assert resp.json()["code"] == "authentication_error"

    def test_me_with_garbage_token(self, client):
        resp = client.get("/auth/me", headers={"Authorization": "Bearer garbage"})
        assert resp.status_code == 401
        assert resp.json()["code"] == "invalid_token"

    def test_delete_account(self, client, signup):
        headers = signup()
        resp = client.delete("/auth", headers=headers)
        assert resp.status_code == 200
        assert resp.json() == {"message": "User account deleted successfully"}

        # Token still verifies but the account is gone
        assert client.get("/auth/me", headers=headers).status_code == 404
        assert client.delete("/auth", headers=headers).status_code == 404

    def test_delete_cascades_diagnosis_history(self, client, signup, diagnosis_store):
        headers = signup()
        client.post("/diagnosis", json={"symptoms": "fever"}, headers=headers)
        account_id = client.get("/auth/me", headers=headers).json()["id"]

        assert len(asyncio.run(diagnosis_store.find_by_user(ObjectId(account_id)))) == 1
        client.delete("/auth", headers=headers)

        assert asyncio.run(diagnosis_store.find_by_user(ObjectId(account_id))) == []

    def test_failed_cascade_keeps_account(self, client, signup, diagnosis_store, mocker):
        headers = signup()
        client.post("/diagnosis", json={"symptoms": "fever"}, headers=headers)
        mocker.patch.object(
            diagnosis_store,
            "delete_by_user",
            side_effect=StoreUnavailableError("Diagnosis store unavailable"),
        )

        assert client.delete("/auth", headers=headers).status_code == 500

        # The owner can still reach their account and reports, and retry
        assert client.get("/auth/me", headers=headers).status_code == 200
        assert len(client.get("/diagnosis/history", headers=headers).json()) == 1

        mocker.stopall()
        assert client.delete("/auth", headers=headers).status_code == 200
        assert client.get("/auth/me", headers=headers).status_code == 404

    def test_email_reusable_after_delete(self, client, signup):
        headers = signup()
        client.delete("/auth", headers=headers)
        assert _register(client).status_code == 200
