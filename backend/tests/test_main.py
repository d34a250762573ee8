from __future__ import annotations

import socket

import pytest

from wordoftheday import main as main_module
from wordoftheday.config import load_settings
from wordoftheday.core.errors import ConfigError
from wordoftheday.core.scheduler import JOB_ID
from wordoftheday.main import build_application


@pytest.fixture
def settings(monkeypatch):
    monkeypatch.setenv("DB_URL", "sqlite://")
    monkeypatch.setenv("SERVER_PORT", "0")
    return load_settings(search_paths=())


def test_build_application(settings):
    app = build_application(settings)
    try:
        assert app.grpc_port > 0
        assert app.scheduler is None
        assert app.service.list_words() == []
    finally:
        app.stop()


def test_build_application_with_mail(settings):
    settings.smtp.enabled = True
    settings.smtp.schedule = "0 9 * * *"
    settings.smtp.host = "smtp.example.com"
    settings.smtp.from_address = "words@example.com"
    settings.smtp.to_addresses = ["a@example.com"]

    app = build_application(settings)
    try:
        assert app.scheduler is not None
        assert app.scheduler.get_job(JOB_ID) is not None
    finally:
        app.stop()


def test_invalid_schedule_is_fatal(settings):
    settings.smtp.enabled = True
    settings.smtp.schedule = "every morning"
    settings.smtp.host = "smtp.example.com"
    settings.smtp.from_address = "words@example.com"
    settings.smtp.to_addresses = ["a@example.com"]

    with pytest.raises(ConfigError):
        build_application(settings)


def test_missing_database_password_is_fatal(monkeypatch):
    monkeypatch.setattr(main_module, "configure_logging", lambda level="INFO": None)

    with pytest.raises(SystemExit) as excinfo:
        main_module.main([])

    assert excinfo.value.code == 1


def test_build_application_with_http_proxy(settings):
    settings.http_proxy.enabled = True
    settings.http_proxy.port = 0

    app = build_application(settings)
    try:
        assert app.gateway is not None
        assert app.gateway.started
    finally:
        app.stop()
    assert app.gateway.should_exit


def test_http_proxy_bind_failure_is_fatal(settings, monkeypatch):
    sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
    sock.bind(("0.0.0.0", 0))
    sock.listen(1)
    monkeypatch.setenv("HTTP_PROXY_ENABLED", "true")
    monkeypatch.setenv("HTTP_PROXY_PORT", str(sock.getsockname()[1]))
    monkeypatch.setattr(main_module, "configure_logging", lambda level="INFO": None)
    try:
        with pytest.raises(SystemExit) as excinfo:
            main_module.main([])
    finally:
        sock.close()

    assert excinfo.value.code == 1


def test_unknown_log_level_is_fatal(settings, monkeypatch):
    monkeypatch.setenv("LOG_LEVEL", "verbose")
    monkeypatch.setattr(main_module, "configure_logging", lambda level="INFO": None)

    with pytest.raises(SystemExit) as excinfo:
        main_module.main([])

    assert excinfo.value.code == 1
