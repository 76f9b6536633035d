import io

PASSWORD = "secret123"  # matches the fixture users


def test_register_forces_plain_user_role(client):
    resp = client.post("/api/auth/register", json={
        "name": "New Hire", "email": "hire@example.com", "password": "pw", "role": "Admin"})

    assert resp.status_code == 201
    assert resp.get_json()["role"] == "User"
    # registration also signs the caller in
    assert client.get("/api/auth/me").get_json()["email"] == "hire@example.com"


def test_register_duplicate_email(client, world):
    resp = client.post("/api/auth/register", json={"name": "Tom", "email": "TOM@example.com", "password": "pw"})
    assert resp.status_code == 400
    assert resp.get_json()["message"] == "User already exists"


def test_register_requires_fields(client):
    assert client.post("/api/auth/register", json={"email": "a@example.com"}).status_code == 400


def test_login_and_logout(client, world):
    resp = client.post("/api/auth/login", json={"email": "tom@example.com", "password": PASSWORD})

    assert resp.status_code == 200
    assert resp.get_json()["role"] == "Technician"
    assert resp.get_json()["team"]["name"] == "Mechanics"
    assert client.get("/api/auth/me").status_code == 200

    assert client.post("/api/auth/logout").status_code == 200
    assert client.get("/api/auth/me").status_code == 401


def test_login_with_wrong_password(client, world):
    resp = client.post("/api/auth/login", json={"email": "tom@example.com", "password": "nope"})
    assert resp.status_code == 401
    assert resp.get_json()["message"] == "Invalid email or password"


def test_profile_update(app, world, login_as):
    client = login_as(world.emma)
    resp = client.put("/api/auth/profile", json={"name": "Emma Stone", "password": "newpass"})

    assert resp.status_code == 200
    assert resp.get_json()["name"] == "Emma Stone"

    fresh = app.test_client()
    login = fresh.post("/api/auth/login", json={"email": "emma@example.com", "password": "newpass"})
    assert login.status_code == 200


def test_profile_email_clash(app, world, login_as):
    resp = login_as(world.emma).put("/api/auth/profile", json={"email": "tom@example.com"})
    assert resp.status_code == 400


def test_profile_avatar_upload(app, world, login_as):
    resp = login_as(world.emma).put(
        "/api/auth/profile",
        data={"avatar": (io.BytesIO(b"GIF89a"), "me.gif")},
        content_type="multipart/form-data",
    )
    assert resp.status_code == 200
    assert resp.get_json()["avatar"].endswith("me.gif")


def test_non_string_credentials_rejected(client, world):
    assert client.post("/api/auth/register", json={"name": ["x"], "email": "a@example.com",
                                                    "password": "pw"}).status_code == 400
    assert client.post("/api/auth/register", json={"name": "A", "email": "a@example.com",
                                                    "password": 123456}).status_code == 400
    assert client.post("/api/auth/login", json={"email": 7, "password": PASSWORD}).status_code == 400
