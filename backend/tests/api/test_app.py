"""Tests for the application factory, its lifespan and background jobs."""

import logging
from datetime import timedelta
from types import SimpleNamespace

import pytest
from apscheduler.triggers.interval import IntervalTrigger
from fastapi.testclient import TestClient

from api import scheduler as scheduler_module
from api.app import create_app
from api.scheduler import TOKEN_CLEANUP_JOB_ID, create_scheduler, with_error_logging
from shared.exceptions import ConfigurationError


class TestLifespan:
    def test_startup_refuses_missing_secret(self, monkeypatch):
        monkeypatch.setenv("JWT_SECRET", "")

        with pytest.raises(ConfigurationError):
            with TestClient(create_app()):
                pass

    def test_startup_refuses_short_secret(self, monkeypatch):
        monkeypatch.setenv("JWT_SECRET", "too-short")

        with pytest.raises(ConfigurationError):
            with TestClient(create_app()):
                pass

    def test_starts_and_serves(self, monkeypatch):
        monkeypatch.setenv("JWT_SECRET", "x" * 40)

        with TestClient(create_app()) as client:
            response = client.get("/api/health")

        assert response.status_code == 200

    def test_docs_hidden_unless_debug(self):
        client = TestClient(create_app())
        assert client.get("/api/docs").status_code == 404


class TestScheduler:
    def test_cleanup_job_registered(self, settings_factory):
        scheduler = create_scheduler(settings_factory(token_cleanup_interval_minutes=30))

        job = scheduler.get_job(TOKEN_CLEANUP_JOB_ID)

        assert job is not None
        assert isinstance(job.trigger, IntervalTrigger)
        assert job.trigger.interval == timedelta(minutes=30)
        assert job.max_instances == 1

    @pytest.mark.asyncio
    async def test_cleanup_job_purges_expired_tokens(self, monkeypatch, token_service, token_repo, clock):
        await token_service.generate_refresh_token("user-1")
        clock.advance(timedelta(days=8))
        await token_service.generate_refresh_token("user-1")
        monkeypatch.setattr(scheduler_module, "get_container", lambda: SimpleNamespace(tokens=token_service))

        removed = await scheduler_module.cleanup_expired_refresh_tokens()

        assert removed == 1
        assert len(token_repo.for_user("user-1")) == 1

    @pytest.mark.asyncio
    async def test_with_error_logging_reraises(self, caplog):
        @with_error_logging("unit")
        async def failing():
            raise RuntimeError("sweep failed")

        with caplog.at_level(logging.ERROR, logger="api.scheduler"):
            with pytest.raises(RuntimeError):
                await failing()

        assert "Scheduled job failed (unit)" in caplog.text

    @pytest.mark.asyncio
    async def test_with_error_logging_passes_result(self):
        @with_error_logging("unit")
        async def succeeding():
            return 3

        assert await succeeding() == 3
