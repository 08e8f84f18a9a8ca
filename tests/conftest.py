"""Shared pytest fixtures."""

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from messagemind.app import App
from messagemind.config import Config
from messagemind.web.server import create_fastapi_app


class FakeResetJob:
    """Stands in for DailyResetJob and counts lifecycle calls."""

    def __init__(self) -> None:
        self.start_calls = 0
        self.stop_calls = 0

    def start(self) -> None:
        self.start_calls += 1

    def stop(self) -> None:
        self.stop_calls += 1


class RecordingWebhookHandler:
    """Webhook handler that keeps every payload it receives."""

    def __init__(self) -> None:
        self.calls: list[tuple[bytes, str | None]] = []

    async def __call__(self, payload: bytes, signature: str | None) -> None:
        self.calls.append((payload, signature))


def make_config(**overrides) -> Config:
    values = {"environment": "development", "port": 3000}
    values.update(overrides)
    return Config(_env_file=None, **values)


@pytest.fixture
def config():
    return make_config()


@pytest.fixture
def config_factory():
    """Build a Config with overrides, ignoring any local .env file."""
    return make_config


@pytest.fixture
def reset_jobs():
    """List of fake reset jobs created by the app, in creation order."""
    return []


@pytest.fixture
def webhook_handler():
    return RecordingWebhookHandler()


@pytest.fixture
def app_instance(config, reset_jobs, webhook_handler):
    def factory(_: Config) -> FakeResetJob:
        job = FakeResetJob()
        reset_jobs.append(job)
        return job

    return App(config, webhook_handler=webhook_handler, reset_job_factory=factory)


@pytest.fixture
def fastapi_app(app_instance, config) -> FastAPI:
    return create_fastapi_app(app_instance, config)


@pytest.fixture
def client(fastapi_app):
    return TestClient(fastapi_app)
