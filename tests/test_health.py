from fastapi.testclient import TestClient

from app import create_app
from config import Settings, settings


def test_ready():
    with TestClient(create_app()) as client:
        resp = client.get("/ready")

    assert resp.status_code == 200
    assert resp.json()["service"] == "letterbox-api"
    assert resp.headers["X-Frame-Options"] == "DENY"


def test_health_reports_cache_size_and_warnings(monkeypatch):
    monkeypatch.setattr(settings, "label_cache_ttl", 0)

    with TestClient(create_app()) as client:
        body = client.get("/health").json()

    assert body["status"] == "degraded"
    assert body["label_cache_entries"] == 0
    assert any("LABEL_CACHE_TTL" in w for w in body["config_warnings"])


def test_settings_from_env(monkeypatch):
    monkeypatch.setenv("LABEL_CACHE_TTL", "60")
    monkeypatch.setenv("MESSAGES_MAX_RESULTS", "900")
    monkeypatch.setenv("NEWSLETTER_LABEL_NAME", "Reading")

    s = Settings()

    assert s.label_cache_ttl == 60
    assert s.newsletter_label_name == "Reading"
    assert s.validate() == ["MESSAGES_MAX_RESULTS=900 is outside Gmail's 1-500 range"]


def test_default_label_cache_ttl_is_one_week(monkeypatch):
    monkeypatch.delenv("LABEL_CACHE_TTL", raising=False)

    assert Settings().label_cache_ttl == 60 * 60 * 24 * 7
