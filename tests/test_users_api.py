from datetime import datetime, timedelta, timezone

from storefront.application.services.auth_service import create_activation_token, verify_password
from storefront.infrastructure.repositories.user_repository import MongoUserRepository

from conftest import TEST_PASSWORD, auth_headers, png_data_uri


def signup(client, email="a@x.com", password="p1", name="Ana"):
    return client.post(
        "/user/create-user",
        json={"name": name, "email": email, "password": password, "avatar": png_data_uri()},
    )


# --- Signup & activation ---

def test_signup_creates_pending_account_and_emails_link(client, repo, mailer, image_host):
    r = signup(client)

    assert r.status_code == 201
    assert r.json() == {
        "success": True,
        "message": "Please check your email: a@x.com to activate your account!",
    }
    user = repo.get_by_email("a@x.com")
    assert user is not None
    assert user.active is False
    assert user.avatar.public_id == image_host.uploads[0]["public_id"]
    assert mailer.sent[0]["email"] == "a@x.com"
    assert mailer.sent[0]["subject"] == "Activate your account"
    assert "http://localhost:3000/activation/" in mailer.sent[0]["message"]


def test_signup_with_existing_email_is_rejected(client, mongo_db):
    assert signup(client).status_code == 201

    r = signup(client, name="Someone else")

    assert r.status_code == 400
    assert r.json()["error"]["code"] == "DuplicateUserException"
    assert mongo_db["users"].count_documents({"email": "a@x.com"}) == 1


def test_signup_losing_unique_index_race_discards_avatar(client, mongo_db, image_host, monkeypatch):
    assert signup(client).status_code == 201
    # Both signups pass the email lookup; only the unique index catches the second one
    monkeypatch.setattr(MongoUserRepository, "get_by_email", lambda self, email: None)

    r = signup(client, name="Someone else")

    assert r.status_code == 400
    assert r.json()["error"]["code"] == "DuplicateUserException"
    assert mongo_db["users"].count_documents({"email": "a@x.com"}) == 1
    assert image_host.destroyed == [image_host.uploads[1]["public_id"]]


def test_signup_with_missing_fields_uses_error_envelope(client, repo):
    r = client.post("/user/create-user", json={"email": "a@x.com", "avatar": png_data_uri()})

    assert r.status_code == 400
    body = r.json()
    assert body["success"] is False
    assert body["error"]["code"] == "ValidationException"
    fields = {e["field"] for e in body["error"]["details"]["errors"]}
    assert fields == {"name", "password"}
    assert repo.get_by_email("a@x.com") is None


def test_signup_survives_mail_failure(client, repo, mailer):
    mailer.fail = True

    r = signup(client)

    assert r.status_code == 201
    assert repo.get_by_email("a@x.com").active is False


def test_signup_aborts_when_avatar_upload_fails(client, repo, image_host):
    image_host.fail_uploads = True

    r = signup(client)

    assert r.status_code == 502
    assert r.json()["error"]["message"] == "Image upload failed"
    assert repo.get_by_email("a@x.com") is None


def test_signup_requires_avatar(client, repo):
    r = client.post(
        "/user/create-user",
        json={"name": "Ana", "email": "a@x.com", "password": "p1", "avatar": ""},
    )
    assert r.status_code == 400
    assert repo.get_by_email("a@x.com") is None


def test_activation_activates_and_starts_session(client, repo, mailer):
    signup(client)
    token = mailer.last_activation_token()

    r = client.post("/user/activation", json={"activation_token": token})

    assert r.status_code == 201
    body = r.json()
    assert body["user"]["email"] == "a@x.com"
    assert body["user"]["active"] is True
    assert repo.get_by_email("a@x.com").active is True
    assert "token=" in r.headers["set-cookie"]

    # The cookie just issued authenticates the next request
    me = client.get("/user/getuser")
    assert me.status_code == 200
    assert me.json()["user"]["email"] == "a@x.com"


def test_expired_activation_token_is_rejected(client, make_user):
    user = make_user(active=False)
    token = create_activation_token(user.id, expires_delta=timedelta(minutes=-1))

    r = client.post("/user/activation", json={"activation_token": token})

    assert r.status_code == 400
    assert r.json()["error"]["code"] == "InvalidTokenException"


def test_activation_for_missing_user_is_invalid_token(client):
    token = create_activation_token("65a0c0ffee0000000000abcd")

    r = client.post("/user/activation", json={"activation_token": token})

    assert r.status_code == 400
    assert r.json()["error"]["message"] == "Invalid token"


def test_resend_activation_sends_new_link(client, mailer):
    mailer.fail = True
    signup(client)
    mailer.fail = False

    r = client.post("/user/resend-activation", json={"email": "a@x.com"})

    assert r.status_code == 200
    assert len(mailer.sent) == 1
    assert client.post(
        "/user/activation", json={"activation_token": mailer.last_activation_token()}
    ).status_code == 201


def test_resend_activation_rejects_active_and_unknown_accounts(client, make_user):
    make_user(email="on@x.com", active=True)

    assert client.post("/user/resend-activation", json={"email": "on@x.com"}).status_code == 400
    assert client.post("/user/resend-activation", json={"email": "nobody@x.com"}).status_code == 404


def test_resend_activation_reports_mail_failure(client, make_user, mailer):
    make_user(email="off@x.com", active=False)
    mailer.fail = True

    r = client.post("/user/resend-activation", json={"email": "off@x.com"})

    assert r.status_code == 502


# --- Login & logout ---

def test_login_sets_cookie_and_hides_password(client, make_user):
    make_user(email="buyer@example.com")

    r = client.post("/user/login-user", json={"email": "buyer@example.com", "password": TEST_PASSWORD})

    assert r.status_code == 201
    body = r.json()
    assert body["success"] is True
    assert body["token"]
    assert set(body["user"]) >= {"_id", "name", "email", "role", "avatar", "addresses", "active"}
    assert not any("password" in key.lower() for key in body["user"])
    cookie = r.headers["set-cookie"].lower()
    assert "token=" in cookie
    assert "httponly" in cookie
    assert "secure" in cookie
    assert "samesite=none" in cookie


def test_login_does_not_reveal_which_credential_was_wrong(client, make_user):
    make_user(email="buyer@example.com")

    wrong_password = client.post("/user/login-user", json={"email": "buyer@example.com", "password": "nope"})
    unknown_email = client.post("/user/login-user", json={"email": "ghost@example.com", "password": "nope"})

    assert wrong_password.status_code == unknown_email.status_code == 400
    assert wrong_password.json()["error"]["message"] == unknown_email.json()["error"]["message"]
    assert wrong_password.json()["error"]["code"] == "InvalidCredentialsException"


def test_login_requires_both_fields(client):
    r = client.post("/user/login-user", json={"email": "buyer@example.com"})

    assert r.status_code == 400
    assert r.json()["error"]["code"] == "ValidationException"


def test_logout_clears_cookie(client):
    r = client.get("/user/logout")

    assert r.status_code == 201
    assert r.json()["message"] == "Log out successful!"
    cookie = r.headers["set-cookie"].lower()
    assert cookie.startswith("token=")
    assert "max-age=0" in cookie


def test_getuser_requires_session(client):
    r = client.get("/user/getuser")

    assert r.status_code == 401
    assert r.json()["error"]["message"] == "Please login to continue"


def test_getuser_rejects_tampered_cookie(client):
    r = client.get("/user/getuser", headers={"Cookie": "token=forged"})

    assert r.status_code == 401


def test_session_of_deleted_user_is_rejected(client, make_user, repo):
    user = make_user()
    repo.delete(user.id)

    assert client.get("/user/getuser", headers=auth_headers(user)).status_code == 401


# --- Profile ---

def test_update_user_info_requires_password(client, make_user, repo):
    user = make_user()

    r = client.put(
        "/user/update-user-info",
        headers=auth_headers(user),
        json={"email": user.email, "password": "wrong", "name": "Changed", "phoneNumber": "555"},
    )

    assert r.status_code == 400
    assert repo.get_by_id(user.id).name == "Buyer"


def test_update_user_info(client, make_user, repo):
    user = make_user()

    r = client.put(
        "/user/update-user-info",
        headers=auth_headers(user),
        json={"email": "new@example.com", "password": TEST_PASSWORD, "name": "Changed", "phoneNumber": "555"},
    )

    assert r.status_code == 201
    assert r.json()["user"]["phoneNumber"] == "555"
    stored = repo.get_by_id(user.id)
    assert (stored.name, stored.email, stored.phone_number) == ("Changed", "new@example.com", "555")


def test_update_user_info_accepts_numeric_phone_number(client, make_user, repo):
    user = make_user()

    r = client.put(
        "/user/update-user-info",
        headers=auth_headers(user),
        json={"email": user.email, "password": TEST_PASSWORD, "name": "B", "phoneNumber": 5551234},
    )

    assert r.status_code == 201
    assert r.json()["user"]["phoneNumber"] == "5551234"
    assert repo.get_by_id(user.id).phone_number == "5551234"


def test_update_user_info_rejects_taken_email(client, make_user):
    user = make_user()
    make_user(email="taken@example.com")

    r = client.put(
        "/user/update-user-info",
        headers=auth_headers(user),
        json={"email": "taken@example.com", "password": TEST_PASSWORD, "name": "Buyer"},
    )

    assert r.status_code == 400
    assert r.json()["error"]["code"] == "DuplicateUserException"


def test_update_avatar_replaces_remote_image(client, make_user, image_host, repo):
    user = make_user()

    r = client.put("/user/update-avatar", headers=auth_headers(user), json={"avatar": png_data_uri()})

    assert r.status_code == 200
    assert image_host.destroyed == [f"avatars/{user.email}"]
    assert r.json()["user"]["avatar"]["url"] == "https://images.test/avatars/img1.png"
    assert repo.get_by_id(user.id).avatar.public_id == "avatars/img1"


def test_update_avatar_requires_image(client, make_user, image_host):
    user = make_user()

    r = client.put("/user/update-avatar", headers=auth_headers(user), json={"avatar": ""})

    assert r.status_code == 400
    assert r.json()["error"]["message"] == "Avatar not provided"
    assert image_host.destroyed == []


# --- Password ---

def test_change_password(client, make_user, repo):
    user = make_user()

    r = client.put(
        "/user/update-user-password",
        headers=auth_headers(user),
        json={"oldPassword": TEST_PASSWORD, "newPassword": "fresh-pass", "confirmPassword": "fresh-pass"},
    )

    assert r.status_code == 200
    assert r.json()["message"] == "Password updated successfully!"
    assert verify_password("fresh-pass", repo.get_by_id(user.id).password_hash)


def test_change_password_mismatch_keeps_stored_credential(client, make_user, repo):
    user = make_user()
    before = repo.get_by_id(user.id).password_hash

    r = client.put(
        "/user/update-user-password",
        headers=auth_headers(user),
        json={"oldPassword": TEST_PASSWORD, "newPassword": "one", "confirmPassword": "two"},
    )

    assert r.status_code == 400
    assert r.json()["error"]["code"] == "PasswordMismatchException"
    assert repo.get_by_id(user.id).password_hash == before


def test_change_password_wrong_old_password(client, make_user, repo):
    user = make_user()

    r = client.put(
        "/user/update-user-password",
        headers=auth_headers(user),
        json={"oldPassword": "nope", "newPassword": "one", "confirmPassword": "one"},
    )

    assert r.status_code == 400
    assert r.json()["error"]["message"] == "Old password is incorrect!"
    assert verify_password(TEST_PASSWORD, repo.get_by_id(user.id).password_hash)


# --- Public info ---

def test_user_info_is_public(client, make_user):
    user = make_user()

    r = client.get(f"/user/user-info/{user.id}")

    assert r.status_code == 201
    assert r.json()["user"]["_id"] == user.id


def test_user_info_unknown_or_malformed_id(client):
    assert client.get("/user/user-info/65a0c0ffee0000000000abcd").status_code == 404
    assert client.get("/user/user-info/not-an-id").status_code == 404


# --- Admin ---

def test_admin_listing_requires_admin_role(client, make_user):
    user = make_user()

    r = client.get("/user/admin-all-users", headers=auth_headers(user))

    assert r.status_code == 403


def test_admin_listing_newest_first(client, make_user):
    base = datetime(2024, 1, 1, tzinfo=timezone.utc)
    admin = make_user(email="admin@x.com", role="admin", created_at=base)
    make_user(email="old@x.com", created_at=base + timedelta(days=1))
    make_user(email="new@x.com", created_at=base + timedelta(days=2))

    r = client.get("/user/admin-all-users", headers=auth_headers(admin))

    assert r.status_code == 201
    assert [u["email"] for u in r.json()["users"]] == ["new@x.com", "old@x.com", "admin@x.com"]


def test_admin_deletes_user_and_avatar(client, make_user, repo, image_host):
    admin = make_user(email="admin@x.com", role="admin")
    victim = make_user(email="victim@x.com")

    r = client.delete(f"/user/delete-user/{victim.id}", headers=auth_headers(admin))

    assert r.status_code == 201
    assert r.json()["message"] == "User deleted successfully!"
    assert repo.get_by_id(victim.id) is None
    assert image_host.destroyed == ["avatars/victim@x.com"]


def test_admin_delete_survives_image_host_failure(client, make_user, repo, image_host):
    admin = make_user(email="admin@x.com", role="admin")
    victim = make_user(email="victim@x.com")
    image_host.fail_destroy = True

    r = client.delete(f"/user/delete-user/{victim.id}", headers=auth_headers(admin))

    assert r.status_code == 201
    assert repo.get_by_id(victim.id) is None


def test_admin_delete_unknown_user(client, make_user):
    admin = make_user(email="admin@x.com", role="admin")

    r = client.delete("/user/delete-user/65a0c0ffee0000000000abcd", headers=auth_headers(admin))

    assert r.status_code == 404
    assert r.json()["error"]["message"] == "User is not available with this id"


def test_non_admin_cannot_delete(client, make_user, repo):
    user = make_user()
    other = make_user(email="other@x.com")

    r = client.delete(f"/user/delete-user/{other.id}", headers=auth_headers(user))

    assert r.status_code == 403
    assert repo.get_by_id(other.id) is not None
