import base64
import io

from fastapi.testclient import TestClient
from openpyxl import load_workbook

from tests.conftest import make_settings
from pawnshop.core.auth_dependencies import get_current_user
from pawnshop.core.security import decode_token
from pawnshop.main import create_app


def create_customer(client, **overrides):
    payload = {"firstName": "Asha", "lastName": "Rao", "phone": "555-123-4567"}
    payload.update(overrides)
    resp = client.post("/customers", json=payload)
    assert resp.status_code == 201
    return resp.json()["customer"]


def create_loan(client, customer_id, principal=650, interest_rate=0.15):
    resp = client.post("/loans", json={
        "customerId": customer_id,
        "itemDescription": "Gold ring",
        "principal": principal,
        "interestRate": interest_rate,
    })
    assert resp.status_code == 201
    return resp.json()


def test_health(client):
    resp = client.get("/health")
    assert resp.status_code == 200
    assert resp.json()["status"] == "healthy"
    assert resp.headers["X-Content-Type-Options"] == "nosniff"


def test_protected_routes_require_token(client):
    for path in ("/customers", "/loans", "/reports/monthly"):
        resp = client.get(path)
        assert resp.status_code == 401
        assert "message" in resp.json()


def test_invalid_token_is_rejected(client):
    resp = client.get("/loans", headers={"Authorization": "Bearer not-a-token"})
    assert resp.status_code == 401
    assert resp.json()["message"] == "Could not validate credentials"


def test_register_then_use_token(client):
    resp = client.post("/auth/register", json={
        "email": "clerk@example.com",
        "password": "s3cret-pass",
        "firstName": "Kiran",
        "lastName": "Das",
    })
    assert resp.status_code == 201
    body = resp.json()
    assert body["message"] == "Account created successfully"
    assert body["user"]["firstName"] == "Kiran"
    assert "passwordHash" not in body["user"]

    headers = {"Authorization": f"Bearer {body['token']}"}
    me = client.get("/auth/me", headers=headers)
    assert me.status_code == 200
    assert me.json()["user"]["email"] == "clerk@example.com"

    assert client.get("/customers", headers=headers).json() == {"customers": []}


def test_duplicate_registration_returns_conflict(client):
    payload = {"email": "clerk@example.com", "password": "s3cret-pass", "firstName": "K", "lastName": "D"}
    assert client.post("/auth/register", json=payload).status_code == 201

    resp = client.post("/auth/register", json=payload)
    assert resp.status_code == 409
    assert resp.json()["message"] == "Account already exists for this email"


def test_login_failure_message(client):
    resp = client.post("/auth/login", json={"email": "nobody@example.com", "password": "whatever"})
    assert resp.status_code == 401
    assert resp.json() == {"message": "Invalid email or password"}


def test_otp_round_trip(client):
    client.post("/auth/register", json={
        "email": "clerk@example.com", "password": "s3cret-pass", "firstName": "K", "lastName": "D",
    })

    otp = client.post("/auth/otp/request", json={"email": "clerk@example.com"}).json()["otp"]
    resp = client.post("/auth/otp/verify", json={"email": "clerk@example.com", "otp": otp})
    assert resp.status_code == 200
    assert resp.json()["message"] == "OTP verified successfully"

    again = client.post("/auth/otp/verify", json={"email": "clerk@example.com", "otp": otp})
    assert again.status_code == 401


def test_validation_errors_are_flattened(authed_client):
    resp = authed_client.post("/customers", json={"firstName": "", "lastName": "Rao", "phone": "12"})

    assert resp.status_code == 422
    body = resp.json()
    assert body["message"] == "Validation failed"
    assert set(body["issues"]) == {"firstName", "phone"}


def test_loan_lifecycle(authed_client):
    customer = create_customer(authed_client)
    created = create_loan(authed_client, customer["id"])
    assert created["message"] == "Loan created"
    loan = created["loan"]
    assert loan["totalPayable"] == 747.5
    assert loan["status"] == "ACTIVE"
    assert loan["customer"]["firstName"] == "Asha"

    resp = authed_client.post("/repayments", json={"loanId": loan["id"], "amount": 747.5, "method": "cash"})
    assert resp.status_code == 201
    body = resp.json()
    assert body["message"] == "Repayment recorded"
    assert body["repayment"]["amount"] == 747.5
    assert body["loan"]["status"] == "REDEEMED"
    assert body["loan"]["outstandingBalance"] == 0

    fetched = authed_client.get(f"/loans/{loan['id']}").json()["loan"]
    assert fetched["status"] == "REDEEMED"

    repayments = authed_client.get(f"/repayments/{loan['id']}").json()["repayments"]
    assert len(repayments) == 1


def test_zero_repayment_is_rejected(authed_client):
    customer = create_customer(authed_client)
    loan = create_loan(authed_client, customer["id"])["loan"]

    resp = authed_client.post("/repayments", json={"loanId": loan["id"], "amount": 0})

    assert resp.status_code == 422
    assert "amount" in resp.json()["issues"]


def test_unknown_loan_is_not_found(authed_client):
    assert authed_client.get("/loans/missing").status_code == 404

    resp = authed_client.post("/repayments", json={"loanId": "missing", "amount": 10})
    assert resp.status_code == 404
    assert resp.json()["message"] == "Loan not found"


def test_status_override_and_sync(authed_client):
    customer = create_customer(authed_client)
    loan = create_loan(authed_client, customer["id"])["loan"]

    patched = authed_client.patch(f"/loans/{loan['id']}", json={"status": "DEFAULTED"})
    assert patched.status_code == 200
    assert patched.json()["loan"]["status"] == "DEFAULTED"

    synced = authed_client.put("/loans/status")
    assert synced.status_code == 200
    assert [item["status"] for item in synced.json()["loans"]] == ["DEFAULTED"]


def test_delete_customer_with_active_loan_conflicts(authed_client):
    customer = create_customer(authed_client)
    create_loan(authed_client, customer["id"])

    resp = authed_client.delete(f"/customers/{customer['id']}")
    assert resp.status_code == 409


def test_update_customer(authed_client):
    customer = create_customer(authed_client)

    resp = authed_client.put(f"/customers/{customer['id']}", json={"email": "asha@example.com"})

    assert resp.status_code == 200
    assert resp.json()["customer"]["email"] == "asha@example.com"
    assert resp.json()["customer"]["lastName"] == "Rao"


def test_reports(authed_client):
    customer = create_customer(authed_client)
    create_loan(authed_client, customer["id"])

    monthly = authed_client.get("/reports/monthly").json()["report"]
    assert monthly["totalLoans"] == 1
    assert monthly["activeLoans"] == 1

    rows = authed_client.get("/reports", params={"type": "daily"}).json()["reports"]
    assert rows[0]["name"] == "Asha Rao"
    assert rows[0]["total_amount"] == 747.5

    bad = authed_client.get("/reports", params={"type": "weekly"})
    assert bad.status_code == 422
    assert "type" in bad.json()["issues"]


def test_export_returns_base64_workbook(authed_client):
    customer = create_customer(authed_client)
    create_loan(authed_client, customer["id"])

    resp = authed_client.get("/reports/export", params={"type": "monthly"})

    assert resp.status_code == 200
    assert resp.headers["content-disposition"] == "attachment; filename=report-monthly.xlsx"
    assert resp.headers["content-type"].startswith(
        "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"
    )
    workbook = load_workbook(io.BytesIO(base64.b64decode(resp.content)))
    assert workbook.active.max_row == 2


def test_dev_reset_clears_in_memory_data(authed_client):
    create_customer(authed_client)

    assert authed_client.post("/dev/reset").status_code == 200
    assert authed_client.get("/customers").json() == {"customers": []}


def test_dev_reset_refused_for_external_store():
    app = create_app(make_settings())
    app.state.settings = make_settings(USE_IN_MEMORY_DB=False)

    resp = TestClient(app).post("/dev/reset")

    assert resp.status_code == 403


def test_unexpected_errors_hide_details(authed_client, app, monkeypatch):
    async def broken():
        raise RuntimeError("database password is hunter2")

    monkeypatch.setattr(app.state.repositories.customers, "list", broken)

    resp = TestClient(app, raise_server_exceptions=False).get("/customers")

    assert resp.status_code == 500
    assert resp.json() == {"message": "Unexpected error"}


def test_unexpected_errors_keep_cors_headers(authed_client, app, monkeypatch):
    async def broken():
        raise RuntimeError("store unavailable")

    monkeypatch.setattr(app.state.repositories.loans, "list", broken)

    resp = authed_client.get("/loans", headers={"Origin": "http://example.com"})

    assert resp.status_code == 500
    assert resp.json() == {"message": "Unexpected error"}
    assert resp.headers["access-control-allow-origin"] == "*"
    assert resp.headers["X-Content-Type-Options"] == "nosniff"


def test_tokens_are_signed_with_the_app_settings():
    custom = make_settings(JWT_SECRET_KEY="shop-specific-secret")
    client = TestClient(create_app(custom))

    token = client.post("/auth/register", json={
        "email": "clerk@example.com", "password": "s3cret-pass", "firstName": "K", "lastName": "D",
    }).json()["token"]

    assert decode_token(token, custom)["email"] == "clerk@example.com"
    assert decode_token(token, make_settings(JWT_SECRET_KEY="another-secret")) is None
    me = client.get("/auth/me", headers={"Authorization": f"Bearer {token}"})
    assert me.status_code == 200


def test_status_override_requires_admin(app):
    app.dependency_overrides[get_current_user] = lambda: {"id": "clerk-1", "email": "clerk@example.com", "role": "clerk"}
    client = TestClient(app)
    customer = create_customer(client)
    loan = create_loan(client, customer["id"])["loan"]

    resp = client.patch(f"/loans/{loan['id']}", json={"status": "DEFAULTED"})

    assert resp.status_code == 403
    assert resp.json() == {"message": "Forbidden: Insufficient permissions"}
    app.dependency_overrides = {}
