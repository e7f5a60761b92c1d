"""Shared test fixtures for the umbrella_mailer test suite."""

from __future__ import annotations

from pathlib import Path
from typing import Any

import pytest

from umbrella_mailer.config import MailerConfig
from umbrella_mailer.mailer import InMemoryMailer
from umbrella_mailer.message import BaseMessage


class StubMessage(BaseMessage):
    """Message double that keeps fluent values in plain ``_<field>`` attributes."""

    def __init__(self) -> None:
        super().__init__()
        self.id: str | None = None
        self.encoding: str | None = None
        self._charset: str | None = None
        self._from: Any = None
        self._to: Any = None
        self._cc: Any = None
        self._bcc: Any = None
        self._reply_to: Any = None
        self._subject: str | None = None
        self._text_body: str | None = None
        self._html_body: str | None = None

    def set_charset(self, charset):
        self._charset = charset
        return self

    def set_from(self, from_):
        self._from = from_
        return self

    def set_to(self, to):
        self._to = to
        return self

    def set_cc(self, cc):
        self._cc = cc
        return self

    def set_bcc(self, bcc):
        self._bcc = bcc
        return self

    def set_reply_to(self, reply_to):
        self._reply_to = reply_to
        return self

    def set_subject(self, subject):
        self._subject = subject
        return self

    def set_text_body(self, text):
        self._text_body = text
        return self

    def set_html_body(self, html):
        self._html_body = html
        return self

    def attach(self, path, *, file_name=None, content_type=None):
        return self

    def attach_content(self, content, *, file_name, content_type=None):
        return self

    def embed(self, path, *, file_name=None, content_type=None):
        return ""

    def embed_content(self, content, *, file_name, content_type=None):
        return ""

    def to_string(self) -> str:
        return type(self).__name__


def write_view(directory: Path, name: str, content: str) -> Path:
    """Write a view template ``<name>.j2`` under *directory*."""
    path = directory / f"{name}.j2"
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8")
    return path


@pytest.fixture
def view_path(tmp_path: Path) -> Path:
    path = tmp_path / "mail"
    path.mkdir()
    return path


@pytest.fixture
def mailer_config(view_path: Path) -> MailerConfig:
    return MailerConfig(
        view_path=str(view_path),
        html_layout=None,
        text_layout=None,
        file_transport_path=str(view_path.parent / "runtime"),
    )


@pytest.fixture
def mailer(mailer_config: MailerConfig) -> InMemoryMailer:
    return InMemoryMailer(mailer_config, message_class=StubMessage)


@pytest.fixture
def mime_mailer(mailer_config: MailerConfig) -> InMemoryMailer:
    return InMemoryMailer(mailer_config)
