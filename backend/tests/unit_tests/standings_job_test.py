from typing import Any

import pytest

from quiniela.logic.standings import job as job_logic


@pytest.mark.asyncio
async def test_run_refresh_standings_job_uses_configured_windows(
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    calls: dict[str, Any] = {}

    async def fake_refresh(older_than_hours: int, provider: Any = None) -> int:
        calls["older_than_hours"] = older_than_hours
        return 3

    async def fake_cleanup(older_than_days: int) -> int:
        calls["older_than_days"] = older_than_days
        return 1

    monkeypatch.setattr(job_logic, "refresh_stale_standings", fake_refresh)
    monkeypatch.setattr(job_logic, "cleanup_old_standings", fake_cleanup)

    result = await job_logic.run_refresh_standings_job()

    assert result.success is True
    assert (result.refreshed, result.deleted) == (3, 1)
    assert result.timestamp != ""
    assert calls == {
        "older_than_hours": job_logic.config.standings_refresh_older_than_hours,
        "older_than_days": job_logic.config.standings_cleanup_older_than_days,
    }


@pytest.mark.asyncio
async def test_run_refresh_standings_job_accepts_explicit_windows(
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    calls: dict[str, Any] = {}

    async def fake_refresh(older_than_hours: int, provider: Any = None) -> int:
        calls["older_than_hours"] = older_than_hours
        return 0

    async def fake_cleanup(older_than_days: int) -> int:
        calls["older_than_days"] = older_than_days
        return 0

    monkeypatch.setattr(job_logic, "refresh_stale_standings", fake_refresh)
    monkeypatch.setattr(job_logic, "cleanup_old_standings", fake_cleanup)

    await job_logic.run_refresh_standings_job(older_than_hours=6, cleanup_older_than_days=30)

    assert calls == {"older_than_hours": 6, "older_than_days": 30}
