def test_health_db(client):
    r = client.get("/health/db")
    assert r.status_code == 200
    assert r.json()["ok"] is True


def test_health_catalog(client):
    r = client.get("/health/catalog")
    assert r.status_code == 200
    assert r.json()["count"] >= 1


def test_health_migrations_basic(client):
    r = client.get("/health/migrations")
    assert r.status_code == 200
    b = r.json()
    assert "code_heads" in b and isinstance(b["code_heads"], list)
    assert "db_version" in b
