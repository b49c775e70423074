from datetime import datetime, timedelta

from sqlmodel import select

from conftest import API, auth, token_for
from core.security import create_refresh_token
from models.models import Membership, NextMembership, User


def _signup(client, email="new@example.com", password="password123"):
    return client.post(f"{API}/users/signup", json={"email": email, "password": password, "name": "New"})


def test_signup_creates_inactive_user_with_free_membership(client, session):
    response = _signup(client)
    assert response.status_code == 201
    body = response.json()
    assert body["user"]["is_active"] is False
    assert body["user"]["membership"]["status"] == "FREE"
    assert body["user"]["membership"]["ends_at"] is None
    assert "password_hash" not in body["user"]
    assert body["access_token"] and body["refresh_token"]
    assert body["email_sent"] is True

    assert _signup(client).status_code == 409


def test_signin_rules(client, session):
    _signup(client)
    url = f"{API}/users/signin"

    assert client.post(url, json={"email": "nobody@example.com", "password": "password123"}).status_code == 404
    assert client.post(url, json={"email": "new@example.com", "password": "wrong-pass"}).status_code == 401
    assert client.post(url, json={"email": "new@example.com", "password": "password123"}).status_code == 403


def test_activation_consumes_token(client, session):
    _signup(client)
    user = session.exec(select(User).where(User.email == "new@example.com")).one()
    token = token_for(session, user)

    response = client.patch(f"{API}/users/activate/{token}")
    assert response.status_code == 200
    assert response.json()["message"] == "User activated successfully"
    assert client.patch(f"{API}/users/activate/{token}").status_code == 404

    response = client.post(f"{API}/users/signin", json={"email": "new@example.com", "password": "password123"})
    assert response.status_code == 200
    assert response.json()["user"]["is_active"] is True


def test_request_activation_for_unknown_email(client):
    response = client.post(f"{API}/users/request-activation", json={"email": "ghost@example.com"})
    assert response.status_code == 404


def test_password_reset_checks_email(client, session, make_user):
    alice = make_user("alice@example.com")
    make_user("bob@example.com")
    client.post(f"{API}/users/request-password-reset", json={"email": alice.email})
    token = token_for(session, alice)
    url = f"{API}/users/update-password/{token}"

    response = client.patch(url, json={"email": "bob@example.com", "new_password": "brand-new-pass"})
    assert response.status_code == 400
    assert response.json()["detail"] == "Token does not match the email"

    response = client.patch(url, json={"email": alice.email, "new_password": "brand-new-pass"})
    assert response.status_code == 200
    response = client.post(f"{API}/users/signin", json={"email": alice.email, "password": "brand-new-pass"})
    assert response.status_code == 200


def test_email_case_is_ignored(client, session):
    assert _signup(client, email="Carol.Smith@Example.com").json()["user"]["email"] == "carol.smith@example.com"
    assert _signup(client, email="carol.smith@example.com").status_code == 409

    user = session.exec(select(User).where(User.email == "carol.smith@example.com")).one()
    client.post(f"{API}/users/request-password-reset", json={"email": "CAROL.SMITH@example.com"})
    token = token_for(session, user)

    url = f"{API}/users/update-password/{token}"
    response = client.patch(url, json={"email": "Carol.Smith@example.com", "new_password": "brand-new-pass"})
    assert response.status_code == 200

    user.is_active = True
    session.add(user)
    session.commit()
    response = client.post(f"{API}/users/signin", json={"email": "carol.SMITH@example.com", "password": "brand-new-pass"})
    assert response.status_code == 200


def test_deactivate_via_token(client, session, make_user):
    user = make_user("quit@example.com")
    assert client.post(f"{API}/users/request-deactivation", headers=auth(user)).status_code == 200
    token = token_for(session, user)

    assert client.patch(f"{API}/users/deactivate/{token}").status_code == 200
    assert client.get(f"{API}/users", headers=auth(user)).status_code == 403


def test_delete_account_cascades(client, session, make_user, make_project):
    user = make_user("bye@example.com")
    make_project(user)
    client.post(f"{API}/users/request-deletion", headers=auth(user))
    token = token_for(session, user)
    user_id = user.id

    response = client.post(f"{API}/users/delete/{token}")
    assert response.status_code == 200
    assert response.json()["message"] == "User deleted successfully"

    session.expire_all()
    assert session.get(User, user_id) is None
    assert session.exec(select(Membership).where(Membership.user_id == user_id)).all() == []


def test_get_current_user_requires_auth(client, make_user):
    user = make_user("me@example.com")
    assert client.get(f"{API}/users").status_code == 401
    response = client.get(f"{API}/users", headers=auth(user))
    assert response.status_code == 200
    assert response.json()["email"] == "me@example.com"


def test_refresh_endpoint(client, make_user):
    user = make_user("refresh@example.com")
    response = client.post(f"{API}/auth/refresh", json={"r": create_refresh_token(user)})
    assert response.status_code == 200
    assert response.json()["a"]

    access = auth(user)["Authorization"].split()[1]
    assert client.post(f"{API}/auth/refresh", json={"r": access}).status_code == 401

    # Refresh tokens are not accepted as bearer credentials
    headers = {"Authorization": f"Bearer {create_refresh_token(user)}"}
    assert client.get(f"{API}/users", headers=headers).status_code == 401


def test_update_settings(client, make_user):
    user = make_user("prefs@example.com")
    response = client.patch(
        f"{API}/users/update-settings", json={"settings": {"theme": "dark"}}, headers=auth(user)
    )
    assert response.status_code == 200
    assert response.json()["settings"] == {"theme": "dark"}

    bad = client.patch(f"{API}/users/update-settings", json={"settings": "dark"}, headers=auth(user))
    assert bad.status_code == 400


def test_membership_endpoints(client, session, make_user):
    user = make_user("tier@example.com")

    response = client.patch(
        f"{API}/users/update-membership", json={"membership_status": "TEAM", "expiry": "MONTH"}, headers=auth(user)
    )
    assert response.status_code == 200
    assert response.json()["user"]["membership"]["status"] == "TEAM"

    response = client.patch(
        f"{API}/users/update-membership", json={"membership_status": "TEAM", "expiry": "DECADE"}, headers=auth(user)
    )
    assert response.status_code == 400
    assert response.json()["detail"] == "Invalid membership status or expiry parameter"

    past = (datetime.utcnow() - timedelta(seconds=1)).isoformat()
    response = client.patch(
        f"{API}/users/update-next-membership",
        json={"membership_status": "ENTERPRISE", "starts_at": past, "expiry": "YEAR"},
        headers=auth(user),
    )
    assert response.status_code == 400
    assert response.json()["detail"] == "startsAt must be a future date"

    future = (datetime.utcnow() + timedelta(days=2)).isoformat()
    response = client.patch(
        f"{API}/users/update-next-membership",
        json={"membership_status": "ENTERPRISE", "starts_at": future, "expiry": "YEAR"},
        headers=auth(user),
    )
    assert response.status_code == 200
    assert response.json()["next_membership"]["status"] == "ENTERPRISE"

    response = client.get(f"{API}/users/verify-membership", headers=auth(user))
    assert response.json()["message"] == "No membership update needed"

    # Make the scheduled change due
    pending = session.exec(select(NextMembership).where(NextMembership.user_id == user.id)).one()
    pending.starts_at = datetime.utcnow() - timedelta(minutes=1)
    session.add(pending)
    session.commit()

    response = client.get(f"{API}/users/verify-membership", headers=auth(user))
    assert response.json()["message"] == "Membership updated successfully"
    assert response.json()["user"]["membership"]["status"] == "ENTERPRISE"
    assert response.json()["user"]["next_membership"] is None


def test_mfa_flow(client, make_user):
    user = make_user("mfa@example.com")
    other = make_user("other@example.com")

    assert client.post(f"{API}/mfa/email-token", headers=auth(user)).json()["email_sent"] is True

    token = client.post(f"{API}/mfa/get-token", headers=auth(user)).json()["token"]
    assert client.post(f"{API}/mfa/verify/{token}", headers=auth(other)).status_code == 403
    assert client.post(f"{API}/mfa/verify/{token}", headers=auth(user)).status_code == 200
    assert client.post(f"{API}/mfa/verify/{token}", headers=auth(user)).status_code == 404
