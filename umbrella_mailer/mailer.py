"""BaseMailer — composes messages from views and hands them to a transport."""

from __future__ import annotations

import abc
import random
import re
import time
from collections.abc import Callable, Iterable, Mapping
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Any

import structlog
from markupsafe import Markup
from pydantic import ValidationError

from .config import MailerConfig, MessageConfig, ViewConfig
from .exceptions import InvalidConfigurationError
from .logging import message_log_context
from .message import BaseMessage, MessageField
from .mime import MimeMessage
from .view import View

logger = structlog.get_logger()

_BODY_RE = re.compile(r"<body[^>]*>(.*?)</body>", re.IGNORECASE | re.DOTALL)

# set by compose itself, never from message config
_RESERVED_PROPERTIES = frozenset({"mailer"})


@dataclass
class BodyContent:
    """Literal message bodies passed to :meth:`BaseMailer.compose`.

    Unlike view names these are assigned as-is, without rendering.
    """

    html: str | None = None
    text: str | None = None


def html_to_text(html: str) -> str:
    """Plain-text fallback for an HTML body: the ``<body>`` content without tags.

    Tags are stripped line by line so the text keeps the line structure
    of the HTML source.
    """
    match = _BODY_RE.search(html)
    if match:
        html = match.group(1)
    lines = [Markup(line).striptags() for line in html.splitlines()]
    return "\n".join(lines).strip("\n")


class BaseMailer(abc.ABC):
    """Base class for mailers.

    Subclasses implement :meth:`_send_message` (the actual transport).
    Composition is shared::

        mailer = InMemoryMailer(MailerConfig(view_path="templates/mail"))
        message = mailer.compose("welcome", {"user": user})
        message.set_to(user.email).send()

    ``message_class`` is any zero-argument callable returning a
    :class:`BaseMessage`, usually the message class itself.
    ``view_factory`` builds the view from a :class:`ViewConfig`, both for
    the lazily created default view and for config mappings assigned to
    :attr:`view`.
    """

    def __init__(
        self,
        config: MailerConfig | None = None,
        *,
        message_class: Callable[[], BaseMessage] = MimeMessage,
        view: View | Mapping[str, Any] | None = None,
        view_factory: Callable[[ViewConfig], View] = View.from_config,
    ) -> None:
        self.config = config if config is not None else MailerConfig()
        self.message_class = message_class
        self.view_factory = view_factory
        self.file_transport_callback: Callable[[BaseMailer, BaseMessage], str] | None = None
        self._view: View | None = None
        if view is not None:
            self.view = view

    # ------------------------------------------------------------------
    # Configuration accessors
    # ------------------------------------------------------------------

    @property
    def view_path(self) -> str:
        return self.config.view_path

    @view_path.setter
    def view_path(self, value: str | Path) -> None:
        self.config.view_path = str(value)

    @property
    def html_layout(self) -> str | None:
        return self.config.html_layout

    @html_layout.setter
    def html_layout(self, value: str | None) -> None:
        self.config.html_layout = value or None

    @property
    def text_layout(self) -> str | None:
        return self.config.text_layout

    @text_layout.setter
    def text_layout(self, value: str | None) -> None:
        self.config.text_layout = value or None

    @property
    def message_config(self) -> MessageConfig:
        return self.config.message

    @message_config.setter
    def message_config(self, value: MessageConfig | Mapping[str, Any]) -> None:
        if not isinstance(value, MessageConfig):
            try:
                value = MessageConfig.model_validate(dict(value))
            except ValidationError as exc:
                raise InvalidConfigurationError(f"Invalid message config: {exc}") from exc
        self.config.message = value

    @property
    def view(self) -> View:
        """The view used to render templates, created on first access."""
        if self._view is None:
            self._view = self.view_factory(self.config.view)
        return self._view

    @view.setter
    def view(self, value: View | Mapping[str, Any]) -> None:
        if isinstance(value, View):
            self._view = value
            return
        try:
            config = ViewConfig(**dict(value))
        except (TypeError, ValueError) as exc:
            raise InvalidConfigurationError(f"Invalid view config: {exc}") from exc
        self._view = self.view_factory(config)

    # ------------------------------------------------------------------
    # Composition
    # ------------------------------------------------------------------

    def compose(
        self,
        view: str | Mapping[str, str] | BodyContent | None = None,
        params: Mapping[str, Any] | None = None,
    ) -> BaseMessage:
        """Create a message, optionally with bodies rendered from views.

        *view* is either the name of the HTML view, a mapping with ``html``
        and/or ``text`` view names, or :class:`BodyContent` with literal
        bodies.  For a view name or content without text, the text body is
        derived from the HTML by stripping tags; a mapping without a
        ``text`` key leaves the text body as configured.  Views receive *params* plus ``message``.
        """
        message = self._create_message()
        # a mapping names each body explicitly; a missing key leaves it untouched
        derive_text = not isinstance(view, Mapping)

        if isinstance(view, BodyContent):
            html, text = view.html, view.text
        else:
            if isinstance(view, Mapping):
                html_view = view.get("html")
                text_view = view.get("text")
            else:
                html_view, text_view = view, None

            render_params = {"message": message, **(params or {})}
            html = (
                self.render(html_view, render_params, self.html_layout)
                if html_view is not None
                else None
            )
            text = (
                self.render(text_view, render_params, self.text_layout)
                if text_view is not None
                else None
            )

        if html is not None:
            message.set_html_body(html)
            if text is None and derive_text:
                text = html_to_text(html)
        if text is not None:
            message.set_text_body(text)

        logger.debug(
            "message_composed",
            message_class=type(message).__name__,
            view=view if isinstance(view, str) else None,
        )
        return message

    def _create_message(self) -> BaseMessage:
        message = self.message_class()
        message.mailer = self
        config = self.message_config

        for field in MessageField:
            value = getattr(config, field.config_key)
            if value is not None:
                message.set(field, value)

        for name, value in config.properties.items():
            if (
                name.startswith("_")
                or name in _RESERVED_PROPERTIES
                or not hasattr(message, name)
                or callable(getattr(message, name))
            ):
                raise InvalidConfigurationError(
                    f"{type(message).__name__} has no property {name!r}"
                )
            try:
                setattr(message, name, value)
            except AttributeError as exc:
                raise InvalidConfigurationError(
                    f"{type(message).__name__}.{name} is read-only"
                ) from exc

        return message

    def render(
        self,
        view: str,
        params: Mapping[str, Any] | None = None,
        layout: str | None = None,
    ) -> str:
        """Render *view* under ``view_path``, wrapped in *layout* if given.

        The layout receives the rendered view as ``content`` (marked safe
        for autoescaping) and the composed ``message`` when present.
        """
        params = params or {}
        output = self.view.render(view, params, search_path=self.view_path)
        if not layout:
            return output

        layout_params: dict[str, Any] = {"content": Markup(output)}
        if "message" in params:
            layout_params["message"] = params["message"]
        return self.view.render(layout, layout_params, search_path=self.view_path)

    # ------------------------------------------------------------------
    # Sending
    # ------------------------------------------------------------------

    def send(self, message: BaseMessage) -> bool:
        """Send *message*; returns whether it was handed off successfully.

        With ``use_file_transport`` enabled the message is written to an
        ``.eml`` file instead of reaching :meth:`_send_message`.
        """
        with message_log_context(message):
            if not self.before_send(message):
                logger.info("message_send_skipped")
                return False

            if self.config.use_file_transport:
                ok = self._save_message(message)
            else:
                ok = self._send_message(message)

            self.after_send(message, ok)
        return ok

    def send_multiple(self, messages: Iterable[BaseMessage]) -> int:
        """Send each message in turn; returns how many were sent."""
        return sum(1 for message in messages if self.send(message))

    def before_send(self, message: BaseMessage) -> bool:
        """Hook run before sending.  Return *False* to skip the message."""
        return True

    def after_send(self, message: BaseMessage, ok: bool) -> None:
        """Hook run after each send attempt."""
        logger.info("message_sent", ok=ok)

    @abc.abstractmethod
    def _send_message(self, message: BaseMessage) -> bool:
        """Deliver *message* through the concrete transport."""

    # ------------------------------------------------------------------
    # File transport
    # ------------------------------------------------------------------

    def _save_message(self, message: BaseMessage) -> bool:
        path = Path(self.config.file_transport_path)
        path.mkdir(parents=True, exist_ok=True)

        if self.file_transport_callback is not None:
            file_name = self.file_transport_callback(self, message)
        else:
            file_name = self.generate_message_file_name()

        target = path / file_name
        target.write_text(message.to_string(), encoding="utf-8")
        logger.info("message_saved", path=str(target))
        return True

    def generate_message_file_name(self) -> str:
        """File name such as ``20250601-120000-0421-5812.eml``."""
        now = time.time()
        stamp = datetime.fromtimestamp(now).strftime("%Y%m%d-%H%M%S")
        fraction = int((now - int(now)) * 10000)
        return f"{stamp}-{fraction:04d}-{random.randint(0, 9999):04d}.eml"


class InMemoryMailer(BaseMailer):
    """Mailer that keeps sent messages in a list instead of delivering them.

    Useful for tests and previews.
    """

    def __init__(
        self,
        config: MailerConfig | None = None,
        *,
        message_class: Callable[[], BaseMessage] = MimeMessage,
        view: View | Mapping[str, Any] | None = None,
        view_factory: Callable[[ViewConfig], View] = View.from_config,
    ) -> None:
        super().__init__(
            config,
            message_class=message_class,
            view=view,
            view_factory=view_factory,
        )
        self.sent_messages: list[BaseMessage] = []

    def _send_message(self, message: BaseMessage) -> bool:
        self.sent_messages.append(message)
        return True
