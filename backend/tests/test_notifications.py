from __future__ import annotations

import smtplib

import pytest

import wordoftheday.core.notifications as notifications_module
from wordoftheday.config import SMTPSettings
from wordoftheday.core.errors import ConfigError, NotifierError
from wordoftheday.core.notifications import SMTPNotifier


class FakeSMTP:
    instances = []

    def __init__(self, host, port, timeout=None):
        self.host = host
        self.port = port
        self.timeout = timeout
        self.started_tls = False
        self.logged_in = None
        self.sent = []
        self.extensions = {"starttls"}
        FakeSMTP.instances.append(self)

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        return False

    def ehlo(self):
        return 250, b"ok"

    def has_extn(self, name):
        return name.lower() in self.extensions

    def starttls(self, context=None):
        self.started_tls = True

    def login(self, user, password):
        self.logged_in = (user, password)

    def send_message(self, msg, from_addr=None, to_addrs=None):
        self.sent.append((msg, from_addr, to_addrs))


@pytest.fixture
def fake_smtp(monkeypatch):
    FakeSMTP.instances = []
    monkeypatch.setattr(notifications_module.smtplib, "SMTP", FakeSMTP)
    return FakeSMTP


@pytest.fixture
def smtp_settings():
    return SMTPSettings(
        enabled=True,
        schedule="0 9 * * *",
        host="smtp.example.com",
        port=587,
        password="app-password",
        from_address="words@example.com",
        to_addresses=["a@example.com", "b@example.com"],
    )


def test_render_escapes_html(smtp_settings):
    html = SMTPNotifier(smtp_settings).render({"word": "<b>bold</b>", "definition": "x & y"})

    assert "&lt;b&gt;bold&lt;/b&gt;" in html
    assert "x &amp; y" in html


def test_build_message(smtp_settings):
    msg = SMTPNotifier(smtp_settings).build_message(
        "My Word Of The Day", {"word": "aurora", "definition": "a natural light display"}
    )

    assert msg["Subject"] == "My Word Of The Day"
    assert msg["From"] == "words@example.com"
    assert msg["To"] == "a@example.com, b@example.com"
    assert msg.get_content_type() == "text/html"
    assert "aurora" in msg.get_content()
    assert "a natural light display" in msg.get_content()


def test_send_rendered(fake_smtp, smtp_settings):
    SMTPNotifier(smtp_settings).send_rendered("My Word Of The Day", {"word": "aurora", "definition": ""})

    [smtp] = fake_smtp.instances
    assert (smtp.host, smtp.port) == ("smtp.example.com", 587)
    assert smtp.started_tls
    # username falls back to the from address
    assert smtp.logged_in == ("words@example.com", "app-password")

    [(msg, from_addr, to_addrs)] = smtp.sent
    assert from_addr == "words@example.com"
    assert to_addrs == ["a@example.com", "b@example.com"]
    assert msg["Subject"] == "My Word Of The Day"


def test_send_rendered_without_password_skips_login(fake_smtp, smtp_settings):
    smtp_settings.password = ""
    SMTPNotifier(smtp_settings).send_rendered("subject", {"word": "aurora"})

    assert fake_smtp.instances[0].logged_in is None


def test_smtp_failure_raises_notifier_error(monkeypatch, smtp_settings):
    class BrokenSMTP(FakeSMTP):
        def send_message(self, msg, from_addr=None, to_addrs=None):
            raise smtplib.SMTPRecipientsRefused({})

    monkeypatch.setattr(notifications_module.smtplib, "SMTP", BrokenSMTP)

    with pytest.raises(NotifierError, match="^unable to send mail"):
        SMTPNotifier(smtp_settings).send_rendered("subject", {"word": "aurora"})


def test_connection_failure_raises_notifier_error(monkeypatch, smtp_settings):
    def refuse(*args, **kwargs):
        raise ConnectionRefusedError("connection refused")

    monkeypatch.setattr(notifications_module.smtplib, "SMTP", refuse)

    with pytest.raises(NotifierError, match="connection refused"):
        SMTPNotifier(smtp_settings).send_rendered("subject", {"word": "aurora"})


def test_custom_template(tmp_path, smtp_settings):
    template = tmp_path / "custom.html"
    template.write_text("<p>{{ word }} means {{ definition }}</p>", encoding="utf-8")
    smtp_settings.template = str(template)

    html = SMTPNotifier(smtp_settings).render({"word": "aurora", "definition": "light"})
    assert html == "<p>aurora means light</p>"


def test_missing_template(tmp_path, smtp_settings):
    smtp_settings.template = str(tmp_path / "missing.html")

    with pytest.raises(ConfigError):
        SMTPNotifier(smtp_settings)


@pytest.mark.parametrize(
    "field, value",
    [("host", ""), ("from_address", ""), ("to_addresses", [])],
)
def test_required_settings(smtp_settings, field, value):
    setattr(smtp_settings, field, value)

    with pytest.raises(ConfigError):
        SMTPNotifier(smtp_settings)
