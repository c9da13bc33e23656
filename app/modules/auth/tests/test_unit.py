import pytest

from app import db
from app.modules.auth.context import AuthContext, AuthenticationRequired
from app.modules.auth.models import User
from app.modules.auth.repositories import UserRepository
from app.modules.auth.services import AuthenticationService
from app.modules.conftest import create_user, login, logout
from app.modules.profile.models import UserType
from app.modules.profile.repositories import UserProfileRepository


@pytest.fixture(scope="module")
def test_client(test_client):
    """
    Extends the test_client fixture to add additional specific data for module testing.
    """
    with test_client.application.app_context():
        user = User(email="user1@yopmail.com", password="test1234")
        db.session.add(user)
        db.session.commit()

    yield test_client


def test_login_success(test_client):
    response = login(test_client, "test@example.com", "test1234")

    assert response.status_code == 200, "Login was unsuccessful"
    assert response.get_json()["email"] == "test@example.com"
    assert test_client.get("/me").status_code == 200

    logout(test_client)


def test_login_unsuccessful_bad_email(test_client):
    response = login(test_client, "bademail@example.com", "test1234")

    assert response.status_code == 401
    assert test_client.get("/me").status_code == 401


def test_login_unsuccessful_bad_password(test_client):
    response = login(test_client, "test@example.com", "basspassword")

    assert response.status_code == 401


def test_login_requires_a_valid_form(test_client):
    response = test_client.post("/login", json={"email": "not-an-email"})

    assert response.status_code == 400
    assert set(response.get_json()["errors"]) == {"email", "password"}


def test_signup_user_no_display_name(test_client):
    response = test_client.post("/signup", json=dict(email="test@example.com", password="test1234"))

    assert response.status_code == 400
    assert "display_name" in response.get_json()["errors"]


def test_signup_user_unsuccessful(test_client):
    email = "test@example.com"
    response = test_client.post(
        "/signup", json=dict(display_name="Test", email=email, password="test1234")
    )

    assert response.status_code == 409
    assert f"Email {email} in use" in response.get_json()["message"]


def test_signup_user_successful(test_client):
    response = test_client.post(
        "/signup",
        json=dict(display_name="Foo Studio", email="foo@example.com", password="foo1234", user_type="company"),
    )

    assert response.status_code == 201
    body = response.get_json()
    assert body["display_name"] == "Foo Studio"
    assert body["user_type"] == "company"
    assert test_client.get("/me").get_json()["email"] == "foo@example.com"

    logout(test_client)


def test_service_create_with_profile_success(clean_database):
    data = {
        "display_name": "Pixel Forge",
        "email": "service_test@example.com",
        "password": "test1234",
    }

    user = AuthenticationService().create_with_profile(**data)

    assert UserRepository().count() == 1
    assert UserProfileRepository().count() == 1
    assert user.profile.user_type == UserType.DEVELOPER
    assert user.display_name == "Pixel Forge"


@pytest.mark.parametrize("missing", ["display_name", "email", "password"])
def test_service_create_with_profile_fail_missing_field(clean_database, missing):
    data = {"display_name": "Pixel Forge", "email": "test@example.com", "password": "1234"}
    data[missing] = ""

    with pytest.raises(ValueError):
        AuthenticationService().create_with_profile(**data)

    assert UserRepository().count() == 0
    assert UserProfileRepository().count() == 0


def test_display_name_falls_back_to_email(clean_database):
    user = User(email="quiet.player@example.com", password="secret")

    assert user.display_name == "quiet.player"
    assert user.check_password("secret")
    assert not user.check_password("guess")


def test_auth_context(clean_database):
    user = AuthenticationService().create_with_profile(
        display_name="Northwind Publishing", email="northwind@example.com", password="1234", user_type="company"
    )

    auth = AuthContext.from_user(user)

    assert auth.is_authenticated
    assert auth.require_user() == user.id
    assert auth.user_type == "company"
    assert not AuthContext.anonymous().is_authenticated
    with pytest.raises(AuthenticationRequired):
        AuthContext.anonymous().require_user()


def test_email_lookup_ignores_case_and_spaces(test_client, clean_database):
    create_user("mixed.case@example.com")
    repository = UserRepository()

    assert repository.get_by_email(" MIXED.Case@example.com ").email == "mixed.case@example.com"
    assert repository.get_by_email("") is None
    assert not AuthenticationService().is_email_available("Mixed.Case@Example.com")

    response = login(test_client, "Mixed.Case@Example.com", "test1234")
    assert response.status_code == 200
    assert response.get_json()["email"] == "mixed.case@example.com"
    logout(test_client)


def test_unsafe_requests_need_csrf_token(test_client, clean_database, monkeypatch):
    create_user("guarded@example.com")
    monkeypatch.setitem(test_client.application.config, "WTF_CSRF_ENABLED", True)

    response = login(test_client, "guarded@example.com", "test1234")
    assert response.status_code == 400
    assert "CSRF" in response.get_json()["message"]
    assert test_client.delete("/games/1").status_code == 400

    token = test_client.get("/csrf-token").get_json()["csrf_token"]
    response = test_client.post(
        "/login",
        json=dict(email="guarded@example.com", password="test1234"),
        headers={"X-CSRFToken": token},
    )
    assert response.status_code == 200
    assert test_client.post("/logout", headers={"X-CSRFToken": token}).status_code == 200
