from app import create_app


def test_home_lists_plugins():
    app = create_app("TestingConfig")
    client = app.test_client()
    response = client.get("/")
    assert response.status_code == 200
    payload = response.get_json()
    assert payload["success"] is True
    titles = [item["title"] for item in payload["data"]["plugins"]]
    assert "Vector Space" in titles
    assert payload["data"]["site"]["title"] == "Vector Space"
    assert response.headers.get("Content-Security-Policy")
    assert response.headers.get("X-Request-ID")


def test_unknown_route_uses_json_envelope():
    app = create_app("TestingConfig")
    response = app.test_client().get("/missing")
    assert response.status_code == 404
    payload = response.get_json()
    assert payload["success"] is False
    assert payload["error"]["code"] == "http.404"
