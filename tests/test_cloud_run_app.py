from __future__ import annotations

from legi_monitor.cloud_run_app import create_app


def _app(fake_settings, daily_result=None, hourly_result=None):
    calls: list[tuple] = []

    def daily(settings=None):
        calls.append(("daily",))
        return daily_result or {"status": "no_change"}

    def hourly(history, settings=None):
        calls.append(("hourly", history))
        return hourly_result or {"status": "recorded", "notify": False}

    app = create_app(history="shared-history", settings=fake_settings, daily=daily, hourly=hourly)
    return app.test_client(), calls


def test_health_check(fake_settings) -> None:
    client, _ = _app(fake_settings)

    response = client.get("/health")

    assert response.status_code == 200
    assert response.get_json() == {"status": "healthy"}


def test_daily_trigger_runs_report(fake_settings) -> None:
    client, calls = _app(fake_settings)

    response = client.post("/daily")

    assert response.status_code == 200
    assert response.get_json()["status"] == "success"
    assert calls == [("daily",)]


def test_hourly_trigger_uses_shared_history(fake_settings) -> None:
    client, calls = _app(fake_settings)

    response = client.get("/hourly")

    assert response.status_code == 200
    assert response.get_json()["result"]["status"] == "recorded"
    assert calls == [("hourly", "shared-history")]


def test_aborted_tick_returns_500(fake_settings) -> None:
    client, _ = _app(fake_settings, daily_result={"status": "aborted", "error": "timeout"})

    response = client.post("/daily")

    assert response.status_code == 500
    assert response.get_json()["status"] == "error"


def test_history_is_built_once_at_startup(monkeypatch, fake_settings) -> None:
    built: list[object] = []

    def fake_build_history(settings):
        built.append(object())
        return built[-1]

    seen: list = []

    def hourly(history, settings=None):
        seen.append(history)
        return {"status": "recorded", "notify": False}

    monkeypatch.setattr("legi_monitor.cloud_run_app.build_history", fake_build_history)
    client = create_app(settings=fake_settings, hourly=hourly).test_client()

    assert len(built) == 1
    client.get("/hourly")
    client.get("/hourly")

    assert len(built) == 1
    assert seen == [built[0], built[0]]
