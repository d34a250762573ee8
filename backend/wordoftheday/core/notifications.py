from __future__ import annotations

import logging
import smtplib
import ssl
from email.message import EmailMessage
from pathlib import Path
from typing import Any, Mapping, Optional, Protocol

from jinja2 import Environment, FileSystemLoader, TemplateError, select_autoescape

from ..config import SMTPSettings
from .errors import ConfigError, NotifierError

logger = logging.getLogger(__name__)

TEMPLATES_DIR = Path(__file__).resolve().parent.parent / "templates"
DEFAULT_TEMPLATE = "word_of_the_day.html"


class Notifier(Protocol):
    def send_rendered(self, subject: str, data: Mapping[str, Any]) -> None: ...


def _load_template(template_path: Optional[str]):
    if template_path:
        path = Path(template_path)
        directory, name = path.parent, path.name
    else:
        directory, name = TEMPLATES_DIR, DEFAULT_TEMPLATE

    env = Environment(
        loader=FileSystemLoader(str(directory)),
        autoescape=select_autoescape(["html", "htm", "xml"]),
    )
    try:
        return env.get_template(name)
    except TemplateError as exc:
        raise ConfigError(f"unable to load template {name}", exc) from exc


class SMTPNotifier:
    """
    Renders the HTML template and sends it to every configured recipient.
    """

    def __init__(self, settings: SMTPSettings):
        if not settings.host:
            raise ConfigError("smtp host not defined")
        if not settings.port:
            raise ConfigError("smtp port not defined")
        if not settings.from_address:
            raise ConfigError("smtp from address not defined")
        if not settings.to_addresses:
            raise ConfigError("smtp to addresses not defined")

        self.host = settings.host
        self.port = settings.port
        # login defaults to the sending address, as most providers expect
        self.username = settings.username or settings.from_address
        self.password = settings.password
        self.from_address = settings.from_address
        self.to_addresses = list(settings.to_addresses)
        self.timeout = settings.timeout_sec

        self.template = _load_template(settings.template)

    def render(self, data: Mapping[str, Any]) -> str:
        try:
            return self.template.render(**data)
        except TemplateError as exc:
            raise NotifierError("error executing template", exc) from exc

    def build_message(self, subject: str, data: Mapping[str, Any]) -> EmailMessage:
        msg = EmailMessage()
        msg["Subject"] = subject
        msg["From"] = self.from_address
        msg["To"] = ", ".join(self.to_addresses)
        msg.set_content(self.render(data), subtype="html", charset="utf-8")
        return msg

    def send_rendered(self, subject: str, data: Mapping[str, Any]) -> None:
        msg = self.build_message(subject, data)

        try:
            with smtplib.SMTP(self.host, self.port, timeout=self.timeout) as smtp:
                smtp.ehlo()
                if smtp.has_extn("starttls"):
                    smtp.starttls(context=ssl.create_default_context())
                    smtp.ehlo()
                if self.password:
                    smtp.login(self.username, self.password)
                smtp.send_message(msg, from_addr=self.from_address, to_addrs=self.to_addresses)
        except (smtplib.SMTPException, OSError) as exc:
            raise NotifierError("unable to send mail", exc) from exc

        logger.info("Mail sent subject=%r recipients=%d", subject, len(self.to_addresses))
