from __future__ import annotations

from legi_monitor.comparator.version_tracker import History
from legi_monitor.scheduler import build_scheduler, run_job


def test_build_scheduler_registers_daily_and_hourly_jobs(fake_settings, tmp_path) -> None:
    history = History(str(tmp_path / "observed_logs.json"))

    scheduler = build_scheduler(history, fake_settings)

    jobs = {job.id: job for job in scheduler.get_jobs()}
    assert set(jobs) == {"daily_report", "hourly_probe"}
    assert str(jobs["daily_report"].trigger.timezone) == "Europe/Paris"
    assert "hour='22'" in str(jobs["daily_report"].trigger)
    assert jobs["hourly_probe"].args[2] is history


def test_run_job_logs_exceptions_instead_of_raising() -> None:
    def failing():
        raise RuntimeError("boom")

    assert run_job("failing job", failing) is None


def test_run_job_returns_job_result() -> None:
    assert run_job("ok job", lambda value: {"status": value}, "recorded") == {"status": "recorded"}
