from datetime import datetime, timedelta

from fastapi.testclient import TestClient

from app.main import app
from app.models.profile import Profile, ProjectAverage
from app.models.project import Project, ProjectCategory
from app.models.user import AccountType, User
from app.services import auth_service, directory
from app.utils.auth import decode_token, verify_password
from conftest import TEST_PASSWORD, make_user

SIGNUP = {
    "firstName": "Ravi",
    "lastName": "Menon",
    "email": "ravi@example.com",
    "password": "Abcdef1!",
}


def _account(db_session, email):
    db_session.expire_all()
    return db_session.query(User).filter(User.email == email).first()


def _add_portfolio(db_session, user):
    profile = Profile(
        user_id=user.id,
        profile_pic_url="http://testserver/media/profile_pictures/p.jpg",
        preferred_work_locations=["Pune"],
    )
    profile.project_averages = [
        ProjectAverage(project_type="Villa", avg_area="2000", avg_value="5000000", specializations=[]),
    ]
    db_session.add(profile)
    db_session.add(Project(
        owner_id=user.id,
        name="Lake House",
        location="Pune",
        area=1800,
        job_cost=2500000,
        project_type=ProjectCategory.RESIDENTIAL,
        images=["http://img/1.jpg", "http://img/2.jpg"],
    ))
    db_session.commit()


# ─── Signup / verification ────────────────────────────────────────────────────

def test_signup_creates_unverified_account_and_emails_code(client, db_session, outbox):
    r = client.post("/api/auth/signup", json=SIGNUP)
    assert r.status_code == 201
    assert r.json()["message"] == "User created. Please verify your email."

    account = _account(db_session, "ravi@example.com")
    assert account is not None
    assert account.is_verified is False
    assert account.user_type == AccountType.STANDARD
    assert len(account.otp) == 6
    remaining = account.otp_expiry - datetime.utcnow()
    assert timedelta(minutes=9) < remaining <= timedelta(minutes=10)
    assert verify_password("Abcdef1!", account.password_hash)

    [mail] = outbox.to("ravi@example.com")
    assert mail["subject"] == "Verify your email"
    assert account.otp in mail["body"]


def test_signup_again_while_unverified_overwrites(client, db_session):
    client.post("/api/auth/signup", json=SIGNUP)

    r = client.post("/api/auth/signup", json={**SIGNUP, "firstName": "Ravindra", "password": "Xyz123$a"})
    assert r.status_code == 201

    db_session.expire_all()
    accounts = db_session.query(User).filter(User.email == "ravi@example.com").all()
    assert len(accounts) == 1
    assert accounts[0].first_name == "Ravindra"
    assert verify_password("Xyz123$a", accounts[0].password_hash)
    assert accounts[0].otp is not None
    assert accounts[0].is_verified is False


def test_signup_rejects_verified_email(client, user):
    r = client.post("/api/auth/signup", json={**SIGNUP, "email": user.email})
    assert r.status_code == 400
    assert r.json()["message"] == "Email already registered"


def test_signup_rejects_weak_password(client, db_session):
    r = client.post("/api/auth/signup", json={**SIGNUP, "password": "abcdef"})
    assert r.status_code == 400
    assert "Password must be at least 6 characters" in r.json()["message"]
    assert _account(db_session, "ravi@example.com") is None


def test_signup_missing_fields(client):
    r = client.post("/api/auth/signup", json={"email": "ravi@example.com", "password": "Abcdef1!"})
    assert r.status_code == 400
    body = r.json()
    assert body["code"] == "validation_error"
    assert body["message"].startswith("Missing required fields")
    assert {e["field"] for e in body["errors"]} == {"firstName", "lastName"}


def test_verify_otp(client, db_session):
    client.post("/api/auth/signup", json=SIGNUP)
    otp = _account(db_session, "ravi@example.com").otp
    wrong = "100000" if otp != "100000" else "100001"

    r = client.post("/api/auth/verify-otp", json={"email": "ravi@example.com", "otp": wrong})
    assert r.status_code == 400
    assert r.json()["message"] == "Invalid or expired OTP"
    assert _account(db_session, "ravi@example.com").is_verified is False

    r = client.post("/api/auth/verify-otp", json={"email": "ravi@example.com", "otp": otp})
    assert r.status_code == 200
    body = r.json()
    assert body["message"] == "Email verified successfully"

    account = _account(db_session, "ravi@example.com")
    assert decode_token(body["token"])["sub"] == str(account.id)
    assert account.is_verified is True
    assert account.otp is None and account.otp_expiry is None

    # the code cannot be used twice
    r = client.post("/api/auth/verify-otp", json={"email": "ravi@example.com", "otp": otp})
    assert r.status_code == 400


def test_verify_expired_otp(client, db_session):
    client.post("/api/auth/signup", json=SIGNUP)
    account = _account(db_session, "ravi@example.com")
    account.otp_expiry = datetime.utcnow() - timedelta(seconds=1)
    db_session.commit()

    r = client.post("/api/auth/verify-otp", json={"email": "ravi@example.com", "otp": account.otp})
    assert r.status_code == 400


def test_verify_unknown_email(client):
    r = client.post("/api/auth/verify-otp", json={"email": "nobody@example.com", "otp": "123456"})
    assert r.status_code == 404
    assert r.json()["message"] == "User not found"


# ─── Login ────────────────────────────────────────────────────────────────────

def test_login_requires_verification(client):
    client.post("/api/auth/signup", json=SIGNUP)
    r = client.post("/api/auth/login", json={"email": "ravi@example.com", "password": "Abcdef1!"})
    assert r.status_code == 400
    assert r.json()["message"] == "Please verify your email first"


def test_login(client, user):
    r = client.post("/api/auth/login", json={"email": user.email, "password": TEST_PASSWORD})
    assert r.status_code == 200
    body = r.json()
    assert set(body) == {"token"}
    assert decode_token(body["token"])["sub"] == str(user.id)


def test_login_wrong_password(client, user):
    r = client.post("/api/auth/login", json={"email": user.email, "password": "Wrong1!x"})
    assert r.status_code == 400
    assert r.json()["message"] == "Invalid password"


def test_login_unknown_email(client):
    r = client.post("/api/auth/login", json={"email": "ghost@example.com", "password": "Abcdef1!"})
    assert r.status_code == 404


# ─── Password reset ───────────────────────────────────────────────────────────

def test_forgot_and_reset_password(client, db_session, user, outbox):
    r = client.post("/api/auth/forgot-password", json={"email": user.email})
    assert r.status_code == 200
    assert r.json()["message"] == "Password reset OTP sent to email"

    otp = _account(db_session, user.email).otp
    [mail] = outbox.to(user.email)
    assert mail["subject"] == "Reset Password"
    assert otp in mail["body"]

    r = client.post("/api/auth/reset-password", json={
        "email": user.email, "otp": otp, "newPassword": "weak",
    })
    assert r.status_code == 400

    r = client.post("/api/auth/reset-password", json={
        "email": user.email, "otp": otp, "newPassword": "N3w$ecret",
    })
    assert r.status_code == 200
    assert r.json()["message"] == "Password reset successfully"

    account = _account(db_session, user.email)
    assert account.otp is None
    assert verify_password("N3w$ecret", account.password_hash)

    r = client.post("/api/auth/login", json={"email": user.email, "password": "N3w$ecret"})
    assert r.status_code == 200


def test_reset_password_with_wrong_code(client, user):
    client.post("/api/auth/forgot-password", json={"email": user.email})
    r = client.post("/api/auth/reset-password", json={
        "email": user.email, "otp": "000000", "newPassword": "N3w$ecret",
    })
    assert r.status_code == 400
    assert r.json()["message"] == "Invalid or expired OTP"


# ─── Account deletion ─────────────────────────────────────────────────────────

def test_delete_account_removes_everything(client, db_session):
    owner = make_user(db_session, "owner@example.com", user_type=AccountType.PRO)
    _add_portfolio(db_session, owner)

    r = client.request("DELETE", "/api/auth/delete-account", json={
        "email": "owner@example.com", "password": TEST_PASSWORD,
    })
    assert r.status_code == 200
    assert r.json()["message"] == "Account deleted successfully"

    db_session.expire_all()
    assert db_session.query(User).count() == 0
    assert db_session.query(Profile).count() == 0
    assert db_session.query(ProjectAverage).count() == 0
    assert db_session.query(Project).count() == 0


def test_delete_account_wrong_password(client, user, db_session):
    r = client.request("DELETE", "/api/auth/delete-account", json={
        "email": user.email, "password": "Wrong1!x",
    })
    assert r.status_code == 400
    assert _account(db_session, user.email) is not None


def test_delete_account_is_all_or_nothing(database, db_session, outbox, monkeypatch):
    owner = make_user(db_session, "owner@example.com", user_type=AccountType.PRO)
    _add_portfolio(db_session, owner)

    def fail(*args, **kwargs):
        raise RuntimeError("connection lost")

    monkeypatch.setattr(directory, "delete_projects", fail)

    client = TestClient(app, raise_server_exceptions=False)
    r = client.request("DELETE", "/api/auth/delete-account", json={
        "email": "owner@example.com", "password": TEST_PASSWORD,
    })
    assert r.status_code == 500
    assert r.json() == {"message": "Internal server error", "code": "internal_error"}

    db_session.expire_all()
    assert db_session.query(User).count() == 1
    assert db_session.query(Profile).count() == 1
    # deleted before the failure, restored by the rollback
    assert db_session.query(ProjectAverage).count() == 1
    assert db_session.query(Project).count() == 1


def test_delete_google_account_with_any_password_is_refused(client, db_session, google):
    google.payloads["g-token"] = {"email": "nia@example.com", "given_name": "Nia"}
    assert client.post("/api/auth/google-auth", json={"idToken": "g-token"}).status_code == 201

    for password in ("Abcdef1!", ""):
        r = client.request("DELETE", "/api/auth/delete-account", json={
            "email": "nia@example.com", "password": password,
        })
        assert r.status_code == 400
        assert r.json()["message"] == "Invalid password"

    assert _account(db_session, "nia@example.com") is not None


# ─── Logout ───────────────────────────────────────────────────────────────────

def test_logout(client):
    r = client.post("/api/auth/logout", json={"token": "anything"})
    assert r.status_code == 200
    assert r.json()["message"] == "Logged out successfully"

    r = client.post("/api/auth/logout", json={})
    assert r.status_code == 400
    assert r.json()["message"] == "Token is required for logout"


# ─── Google sign-in ───────────────────────────────────────────────────────────

def test_google_sign_in_creates_verified_account(client, db_session, google):
    google.payloads["new-token"] = {
        "email": "nia@example.com", "given_name": "Nia", "family_name": "Okafor",
    }
    r = client.post("/api/auth/google-auth", json={"idToken": "new-token"})
    assert r.status_code == 201
    body = r.json()
    assert body["isNewUser"] is True
    assert body["message"] == "Account created successfully"
    assert body["user"]["firstName"] == "Nia"
    assert body["user"]["isVerified"] is True
    assert "passwordHash" not in body["user"]

    account = _account(db_session, "nia@example.com")
    assert decode_token(body["token"])["sub"] == str(account.id)
    assert account.password_hash == ""


def test_google_sign_in_existing_account(client, user, google):
    google.payloads["known-token"] = {"email": user.email, "name": "Asha Rao"}
    r = client.post("/api/auth/google-auth", json={"idToken": "known-token"})
    assert r.status_code == 200
    body = r.json()
    assert body["isNewUser"] is False
    assert body["message"] == "Login successful"
    assert body["user"]["id"] == str(user.id)


def test_google_name_falls_back_to_email(client, google):
    google.payloads["bare"] = {"email": "solo@example.com"}
    r = client.post("/api/auth/google-auth", json={"idToken": "bare"})
    assert r.status_code == 201
    assert r.json()["user"]["firstName"] == "solo"


def test_google_invalid_token(client):
    r = client.post("/api/auth/google-auth", json={"idToken": "forged"})
    assert r.status_code == 400
    assert r.json()["message"] == "Invalid Google token"


def test_signup_hashes_password_off_the_event_loop(client, monkeypatch):
    offloaded = []

    async def record(func, *args, **kwargs):
        offloaded.append(func.__name__)
        return func(*args, **kwargs)

    monkeypatch.setattr(auth_service, "run_in_threadpool", record)

    r = client.post("/api/auth/signup", json=SIGNUP)
    assert r.status_code == 201
    assert offloaded == ["get_password_hash"]
