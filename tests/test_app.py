def test_index(client):
    resp = client.get("/")
    assert resp.status_code == 200
    assert "message" in resp.get_json()


def test_unknown_route_is_json_404(client):
    resp = client.get("/api/nope")
    assert resp.status_code == 404
    assert "message" in resp.get_json()


def test_stack_only_outside_production(app, world, login_as):
    client = login_as(world.manager)
    assert client.get("/api/requests/999").get_json()["stack"]

    app.config["APP_ENV"] = "production"
    assert client.get("/api/requests/999").get_json()["stack"] is None


def test_unexpected_error_message_hidden_in_production(app, client):
    def boom():
        raise RuntimeError("no such table: secret_sql")

    app.add_url_rule("/boom", "boom", boom)

    resp = client.get("/boom")
    assert resp.status_code == 500
    assert "secret_sql" in resp.get_json()["message"]

    app.config["APP_ENV"] = "production"
    resp = client.get("/boom")
    assert resp.status_code == 500
    assert resp.get_json() == {"message": "Internal server error", "stack": None}
