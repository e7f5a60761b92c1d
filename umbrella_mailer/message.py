"""BaseMessage — the fluent message interface every message class implements."""

from __future__ import annotations

import abc
from enum import Enum
from pathlib import Path
from typing import TYPE_CHECKING, Any

from .exceptions import InvalidConfigurationError

if TYPE_CHECKING:
    from .mailer import BaseMailer


class MessageField(str, Enum):
    """Message fields that are assigned through fluent setters."""

    CHARSET = "charset"
    FROM = "from"
    TO = "to"
    CC = "cc"
    BCC = "bcc"
    REPLY_TO = "reply_to"
    SUBJECT = "subject"
    TEXT_BODY = "text_body"
    HTML_BODY = "html_body"

    @property
    def setter(self) -> str:
        """Name of the fluent setter method, e.g. ``set_text_body``."""
        return f"set_{self.value}"

    @property
    def config_key(self) -> str:
        """Attribute name on :class:`~umbrella_mailer.config.MessageConfig`."""
        return "from_" if self is MessageField.FROM else self.value


class BaseMessage(abc.ABC):
    """Abstract email message with a fluent builder API.

    Every setter stores its value and returns the message itself so calls
    can be chained::

        message.set_from("noreply@example.com").set_to("user@example.com")

    Address setters accept a single address, an iterable of addresses or a
    mapping of ``address -> display name``.  Setters do not validate;
    malformed addresses are the transport's problem.
    """

    def __init__(self) -> None:
        self.mailer: BaseMailer | None = None

    @abc.abstractmethod
    def set_charset(self, charset: str) -> BaseMessage: ...

    @abc.abstractmethod
    def set_from(self, from_: Any) -> BaseMessage: ...

    @abc.abstractmethod
    def set_to(self, to: Any) -> BaseMessage: ...

    @abc.abstractmethod
    def set_cc(self, cc: Any) -> BaseMessage: ...

    @abc.abstractmethod
    def set_bcc(self, bcc: Any) -> BaseMessage: ...

    @abc.abstractmethod
    def set_reply_to(self, reply_to: Any) -> BaseMessage: ...

    @abc.abstractmethod
    def set_subject(self, subject: str) -> BaseMessage: ...

    @abc.abstractmethod
    def set_text_body(self, text: str) -> BaseMessage: ...

    @abc.abstractmethod
    def set_html_body(self, html: str) -> BaseMessage: ...

    @abc.abstractmethod
    def attach(
        self,
        path: str | Path,
        *,
        file_name: str | None = None,
        content_type: str | None = None,
    ) -> BaseMessage:
        """Attach the file at *path* to the message."""

    @abc.abstractmethod
    def attach_content(
        self,
        content: bytes | str,
        *,
        file_name: str,
        content_type: str | None = None,
    ) -> BaseMessage:
        """Attach in-memory *content* as a file named *file_name*."""

    @abc.abstractmethod
    def embed(
        self,
        path: str | Path,
        *,
        file_name: str | None = None,
        content_type: str | None = None,
    ) -> str:
        """Embed the file at *path* inline and return its content ID.

        The ID is meant for ``cid:`` references in the HTML body.
        """

    @abc.abstractmethod
    def embed_content(
        self,
        content: bytes | str,
        *,
        file_name: str,
        content_type: str | None = None,
    ) -> str:
        """Embed in-memory *content* inline and return its content ID."""

    @abc.abstractmethod
    def to_string(self) -> str:
        """Serialize the message (e.g. as full MIME text)."""

    def set(self, field: MessageField | str, value: Any) -> BaseMessage:
        """Assign *field* through its fluent setter."""
        return getattr(self, MessageField(field).setter)(value)

    def send(self, mailer: BaseMailer | None = None) -> bool:
        """Send this message with *mailer*, or with the mailer that composed it."""
        mailer = mailer or self.mailer
        if mailer is None:
            raise InvalidConfigurationError(
                f"{type(self).__name__} has no mailer; pass one or create it via compose()"
            )
        return mailer.send(self)

    def __str__(self) -> str:
        return self.to_string()
