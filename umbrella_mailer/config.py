"""Mailer configuration loaded from environment variables.

Uses pydantic-settings so every field can be overridden via env vars.
Message defaults are a plain pydantic model; they are usually supplied
in code or as a JSON document in ``MAILER_MESSAGE``.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic_settings import BaseSettings

AddressSpec = str | list[str] | dict[str, str]


class MessageConfig(BaseModel):
    """Default field values applied to every composed message.

    The declared fields are set through the message's fluent setters.
    Any extra key is treated as a message property and written directly
    onto the message object (e.g. ``message_id``).
    """

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    charset: str | None = Field(default=None, description="Message character set")
    from_: AddressSpec | None = Field(
        default=None,
        alias="from",
        description="Sender address(es)",
    )
    to: AddressSpec | None = Field(default=None, description="Recipient address(es)")
    cc: AddressSpec | None = Field(default=None, description="Carbon copy address(es)")
    bcc: AddressSpec | None = Field(default=None, description="Blind carbon copy address(es)")
    reply_to: AddressSpec | None = Field(default=None, description="Reply-To address(es)")
    subject: str | None = Field(default=None, description="Subject line")
    text_body: str | None = Field(default=None, description="Plain-text body")
    html_body: str | None = Field(default=None, description="HTML body")

    @property
    def properties(self) -> dict[str, Any]:
        """Extra keys that target message properties rather than setters."""
        return dict(self.model_extra or {})


class ViewConfig(BaseSettings):
    """Template renderer settings."""

    model_config = {"env_prefix": "MAILER_VIEW_"}

    default_extension: str = Field(
        default="j2",
        description="File extension appended to view names that have none",
    )
    autoescape: bool = Field(
        default=False,
        description="Enable Jinja2 HTML autoescaping for rendered variables",
    )
    strict_undefined: bool = Field(
        default=False,
        description="Fail rendering when a template references an undefined variable",
    )
    params: dict[str, Any] = Field(
        default_factory=dict,
        description="Parameters shared by all views, exposed as view.params",
    )


class MailerConfig(BaseSettings):
    """Root configuration for a mailer instance.

    The nested view config is populated from its own env-var prefix.
    """

    model_config = {"env_prefix": "MAILER_"}

    view_path: str = Field(
        default="mail",
        description="Directory that view and layout names are resolved against",
    )
    html_layout: str | None = Field(
        default="layouts/html",
        description="Layout wrapping HTML views (empty to disable)",
    )
    text_layout: str | None = Field(
        default="layouts/text",
        description="Layout wrapping plain-text views (empty to disable)",
    )
    use_file_transport: bool = Field(
        default=False,
        description="Write messages to .eml files instead of sending them",
    )
    file_transport_path: str = Field(
        default="runtime/mail",
        description="Directory for .eml files written by the file transport",
    )

    message: MessageConfig = Field(default_factory=MessageConfig)
    view: ViewConfig = Field(default_factory=ViewConfig)

    @field_validator("html_layout", "text_layout", mode="before")
    @classmethod
    def _disable_layout(cls, value: Any) -> Any:
        if value is False or value == "":
            return None
        return value
