from myumc.utils.role_permissions import ROLE_ADMINISTRATOR


def _register(client, email="mercy@example.com", password="hallelujah-1", headers=None, **extra):
    payload = {"email": email, "password": password, "first_name": "Mercy", "last_name": "Chikwanha", **extra}
    return client.post("/api/auth/register", json=payload, headers=headers or {})


def test_register_login_and_me(client):
    r = _register(client)
    assert r.status_code == 201, r.text
    assert r.json()["access_token"]

    r = client.post("/api/auth/login", json={"email": "mercy@example.com", "password": "wrong-password"})
    assert r.status_code == 401
    assert r.json()["detail"] == "Invalid password"

    r = client.post("/api/auth/login", json={"email": "MERCY@example.com", "password": "hallelujah-1"})
    assert r.status_code == 200, r.text
    token = r.json()["access_token"]

    r = client.get("/api/auth/me", headers={"Authorization": f"Bearer {token}"})
    assert r.status_code == 200
    body = r.json()
    assert body["email"] == "mercy@example.com"
    assert body["user_type"] == "Member"


def test_duplicate_registration_rejected(client):
    assert _register(client).status_code == 201
    r = _register(client)
    assert r.status_code == 400
    assert r.json()["detail"] == "Email already registered"


def test_elevated_roles_cannot_self_register(client):
    r = _register(client, user_type=ROLE_ADMINISTRATOR)
    assert r.status_code == 403


def test_platform_admin_can_create_leader(client, user_factory, auth_headers):
    admin = user_factory(role=ROLE_ADMINISTRATOR)
    r = _register(client, email="leader@example.com", user_type="ChurchLeader", headers=auth_headers(admin))
    assert r.status_code == 201, r.text


def test_me_requires_authentication(client):
    assert client.get("/api/auth/me").status_code == 401
    r = client.get("/api/auth/me", headers={"Authorization": "Bearer not-a-jwt"})
    assert r.status_code == 401
    assert r.json()["detail"] == "Invalid or expired token"


def test_refresh_and_logout(client):
    session = _register(client).json()
    r = client.post("/api/auth/refresh", json={"refresh_token": session["refresh_token"]})
    assert r.status_code == 200
    rotated = r.json()

    headers = {"Authorization": f"Bearer {rotated['access_token']}"}
    assert client.post("/api/auth/logout", headers=headers).status_code == 204
    r = client.post("/api/auth/refresh", json={"refresh_token": rotated["refresh_token"]})
    assert r.status_code == 401


def test_update_profile(client, user_factory, auth_headers):
    user = user_factory()
    r = client.put("/api/auth/me", json={"first_name": "Tatenda", "phone_number": "+263772000000"}, headers=auth_headers(user))
    assert r.status_code == 200
    assert r.json()["first_name"] == "Tatenda"
    assert r.json()["phone_number"] == "+263772000000"


def test_code_flows_rejected_by_local_provider(client):
    r = client.post("/api/auth/forgot-password", json={"email": "mercy@example.com"})
    assert r.status_code == 400
    r = client.post("/api/auth/confirm", json={"email": "mercy@example.com", "confirmation_code": "123456"})
    assert r.status_code == 400
