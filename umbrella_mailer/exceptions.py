"""Exception hierarchy for the mailer package."""

from __future__ import annotations


class MailerError(Exception):
    """Base class for every error raised by umbrella_mailer."""


class ViewNotFoundError(MailerError, LookupError):
    """A view or layout template could not be resolved to a file."""

    def __init__(self, name: str, search_path: str | None = None) -> None:
        self.name = name
        self.search_path = search_path
        where = f" under {search_path!r}" if search_path else ""
        super().__init__(f"View {name!r} not found{where}")


class InvalidConfigurationError(MailerError, ValueError):
    """Configuration that cannot produce a working view, message or mailer."""
