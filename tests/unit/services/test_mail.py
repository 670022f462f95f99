"""Unit tests for services/mail.py"""

import pytest

from kindlepdf.services import mail
from kindlepdf.services.mail import BODY_TEXT, SmtpMailer, build_message, smtp_port


class FakeSMTP:
    """Stands in for smtplib.SMTP / SMTP_SSL and records the session."""
    instances: list = []

    def __init__(self, host, port, timeout=None, starttls_offered=True):
        self.host, self.port = host, port
        self.calls = []
        self.starttls_offered = starttls_offered
        self.messages = []
        FakeSMTP.instances.append(self)

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        self.calls.append("quit")
        return False

    def ehlo(self):
        self.calls.append("ehlo")

    def has_extn(self, name):
        return self.starttls_offered and name == "starttls"

    def starttls(self):
        self.calls.append("starttls")

    def login(self, user, password):
        self.calls.append(("login", user, password))

    def send_message(self, msg):
        self.messages.append(msg)


@pytest.fixture(autouse=True)
def fake_smtp(monkeypatch):
    FakeSMTP.instances = []
    monkeypatch.setattr(mail.smtplib, "SMTP", FakeSMTP)
    monkeypatch.setattr(mail.smtplib, "SMTP_SSL", lambda host, port, timeout=None: FakeSMTP(host, port, timeout, False))
    return FakeSMTP


def test_build_message_headers_and_attachment(settings):
    msg = build_message(settings, b"%PDF data", "My Note.pdf")
    assert msg["From"] == "me@example.com"
    assert msg["To"] == "me@kindle.com"
    assert msg["Subject"] == "My Note"
    attachments = list(msg.iter_attachments())
    assert len(attachments) == 1
    assert attachments[0].get_content_type() == "application/pdf"
    assert attachments[0].get_filename() == "My Note.pdf"
    assert attachments[0].get_content() == b"%PDF data"
    assert msg.get_body(("plain",)).get_content().strip() == BODY_TEXT


def test_build_message_author_display_name(settings):
    msg = build_message(settings.model_copy(update={"author": "Ada Lovelace"}), b"x", "n.pdf")
    assert msg["From"] == "Ada Lovelace <me@example.com>"


def test_smtp_port_invalid(settings):
    with pytest.raises(ValueError, match="Invalid SMTP port"):
        smtp_port(settings.model_copy(update={"smtp_port": "smtp"}))


def test_send_starttls_port(settings):
    SmtpMailer(settings).send(b"%PDF", "n.pdf")

    smtp = FakeSMTP.instances[0]
    assert (smtp.host, smtp.port) == ("smtp.example.com", 587)
    assert smtp.calls == ["ehlo", "starttls", "ehlo", ("login", "me@example.com", "secret"), "quit"]
    assert smtp.messages[0]["Subject"] == "n"


def test_send_implicit_tls_port(settings):
    SmtpMailer(settings.model_copy(update={"smtp_port": "465"})).send(b"%PDF", "n.pdf")

    smtp = FakeSMTP.instances[0]
    assert smtp.port == 465
    assert "starttls" not in smtp.calls
    assert ("login", "me@example.com", "secret") in smtp.calls
    assert len(smtp.messages) == 1


def test_send_without_starttls_offer(settings, monkeypatch):
    monkeypatch.setattr(mail.smtplib, "SMTP", lambda host, port, timeout=None: FakeSMTP(host, port, timeout, False))
    SmtpMailer(settings.model_copy(update={"smtp_port": "25"})).send(b"%PDF", "n.pdf")
    assert "starttls" not in FakeSMTP.instances[0].calls


def test_send_login_failure_propagates(settings, monkeypatch):
    import smtplib

    def refuse(self, user, password):
        raise smtplib.SMTPAuthenticationError(535, b"bad credentials")

    monkeypatch.setattr(FakeSMTP, "login", refuse)
    with pytest.raises(smtplib.SMTPAuthenticationError):
        SmtpMailer(settings).send(b"%PDF", "n.pdf")
