"""MIME-backed message implementation.

Builds an :class:`email.message.EmailMessage` on demand from the values
collected through the fluent setters, so the same message can be
serialized repeatedly after further changes.
"""

from __future__ import annotations

import codecs
import email.policy
import email.utils
import mimetypes
import uuid
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from email.message import EmailMessage
from pathlib import Path
from typing import Any

from .exceptions import InvalidConfigurationError
from .message import BaseMessage


@dataclass
class Attachment:
    """A file attached to, or embedded in, a message."""

    file_name: str
    content_type: str
    payload: bytes
    content_id: str | None = None

    @property
    def inline(self) -> bool:
        return self.content_id is not None


def _guess_content_type(file_name: str, content_type: str | None) -> str:
    if content_type:
        return content_type
    guessed, _ = mimetypes.guess_type(file_name)
    return guessed or "application/octet-stream"


def format_addresses(value: Any) -> str:
    """Render an address spec as a header value.

    Accepts ``"a@x.com"``, ``["a@x.com", "b@x.com"]`` or
    ``{"a@x.com": "Alice"}``.
    """
    if value is None:
        return ""
    if isinstance(value, str):
        return value
    if isinstance(value, Mapping):
        pairs = [(name or "", addr) for addr, name in value.items()]
    elif isinstance(value, Iterable):
        pairs = [("", addr) for addr in value]
    else:
        return str(value)
    return ", ".join(email.utils.formataddr(pair) for pair in pairs)


class MimeMessage(BaseMessage):
    """Message that serializes to RFC 5322 text via the stdlib ``email`` package.

    ``message_id`` and ``headers`` are plain properties: they can be set
    directly, including through a mailer's message config.
    """

    def __init__(self) -> None:
        super().__init__()
        self.message_id: str | None = None
        self.headers: dict[str, str] = {}
        self._charset = "utf-8"
        self._from: Any = None
        self._to: Any = None
        self._cc: Any = None
        self._bcc: Any = None
        self._reply_to: Any = None
        self._subject: str | None = None
        self._text_body: str | None = None
        self._html_body: str | None = None
        self._attachments: list[Attachment] = []

    # ------------------------------------------------------------------
    # Fluent setters
    # ------------------------------------------------------------------

    def set_charset(self, charset: str) -> MimeMessage:
        self._charset = charset
        return self

    def set_from(self, from_: Any) -> MimeMessage:
        self._from = from_
        return self

    def set_to(self, to: Any) -> MimeMessage:
        self._to = to
        return self

    def set_cc(self, cc: Any) -> MimeMessage:
        self._cc = cc
        return self

    def set_bcc(self, bcc: Any) -> MimeMessage:
        self._bcc = bcc
        return self

    def set_reply_to(self, reply_to: Any) -> MimeMessage:
        self._reply_to = reply_to
        return self

    def set_subject(self, subject: str) -> MimeMessage:
        self._subject = subject
        return self

    def set_text_body(self, text: str) -> MimeMessage:
        self._text_body = text
        return self

    def set_html_body(self, html: str) -> MimeMessage:
        self._html_body = html
        return self

    # ------------------------------------------------------------------
    # Read access
    # ------------------------------------------------------------------

    @property
    def charset(self) -> str:
        return self._charset

    @property
    def from_(self) -> Any:
        return self._from

    @property
    def to(self) -> Any:
        return self._to

    @property
    def cc(self) -> Any:
        return self._cc

    @property
    def bcc(self) -> Any:
        return self._bcc

    @property
    def reply_to(self) -> Any:
        return self._reply_to

    @property
    def subject(self) -> str | None:
        return self._subject

    @property
    def text_body(self) -> str | None:
        return self._text_body

    @property
    def html_body(self) -> str | None:
        return self._html_body

    @property
    def attachments(self) -> list[Attachment]:
        return list(self._attachments)

    # ------------------------------------------------------------------
    # Attachments
    # ------------------------------------------------------------------

    def attach(
        self,
        path: str | Path,
        *,
        file_name: str | None = None,
        content_type: str | None = None,
    ) -> MimeMessage:
        path = Path(path)
        return self.attach_content(
            path.read_bytes(),
            file_name=file_name or path.name,
            content_type=content_type,
        )

    def attach_content(
        self,
        content: bytes | str,
        *,
        file_name: str,
        content_type: str | None = None,
    ) -> MimeMessage:
        self._attachments.append(self._make_attachment(content, file_name, content_type))
        return self

    def embed(
        self,
        path: str | Path,
        *,
        file_name: str | None = None,
        content_type: str | None = None,
    ) -> str:
        path = Path(path)
        return self.embed_content(
            path.read_bytes(),
            file_name=file_name or path.name,
            content_type=content_type,
        )

    def embed_content(
        self,
        content: bytes | str,
        *,
        file_name: str,
        content_type: str | None = None,
    ) -> str:
        content_id = f"{uuid.uuid4().hex}@umbrella-mailer"
        self._attachments.append(
            self._make_attachment(content, file_name, content_type, content_id=content_id)
        )
        return content_id

    def _make_attachment(
        self,
        content: bytes | str,
        file_name: str,
        content_type: str | None,
        *,
        content_id: str | None = None,
    ) -> Attachment:
        payload = content.encode(self._codec()) if isinstance(content, str) else content
        return Attachment(
            file_name=file_name,
            content_type=_guess_content_type(file_name, content_type),
            payload=payload,
            content_id=content_id,
        )

    # ------------------------------------------------------------------
    # Serialization
    # ------------------------------------------------------------------

    def _codec(self) -> str:
        try:
            codecs.lookup(self._charset)
        except LookupError as exc:
            raise InvalidConfigurationError(f"Unknown charset {self._charset!r}") from exc
        return self._charset

    def build(self) -> EmailMessage:
        """Assemble an :class:`EmailMessage` from the current field values.

        Raises :class:`InvalidConfigurationError` if the charset is unknown.
        """
        charset = self._codec()
        msg = EmailMessage(policy=email.policy.default)

        for header, value in (
            ("From", self._from),
            ("To", self._to),
            ("Cc", self._cc),
            ("Bcc", self._bcc),
            ("Reply-To", self._reply_to),
        ):
            rendered = format_addresses(value)
            if rendered:
                msg[header] = rendered
        if self._subject is not None:
            msg["Subject"] = self._subject
        if self.message_id:
            msg["Message-ID"] = self.message_id
        for name, value in self.headers.items():
            msg[name] = value

        if self._text_body is not None:
            msg.set_content(self._text_body, charset=charset)
            if self._html_body is not None:
                msg.add_alternative(self._html_body, subtype="html", charset=charset)
        elif self._html_body is not None:
            msg.set_content(self._html_body, subtype="html", charset=charset)

        html_part = msg.get_body(preferencelist=("html",)) if self._html_body is not None else None
        # related parts must be added before the root turns multipart/mixed
        ordered = sorted(self._attachments, key=lambda a: not a.inline)
        for attachment in ordered:
            maintype, _, subtype = attachment.content_type.partition("/")
            if attachment.inline and html_part is not None:
                html_part.add_related(
                    attachment.payload,
                    maintype=maintype,
                    subtype=subtype,
                    disposition="inline",
                    cid=f"<{attachment.content_id}>",
                    filename=attachment.file_name,
                )
            elif attachment.inline:
                msg.add_attachment(
                    attachment.payload,
                    maintype=maintype,
                    subtype=subtype,
                    disposition="inline",
                    cid=f"<{attachment.content_id}>",
                    filename=attachment.file_name,
                )
            else:
                msg.add_attachment(
                    attachment.payload,
                    maintype=maintype,
                    subtype=subtype,
                    filename=attachment.file_name,
                )

        return msg

    def to_string(self) -> str:
        return self.build().as_string()
