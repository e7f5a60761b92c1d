"""Umbrella Mailer — compose email messages from Jinja2 views.

Public API re-exported here for convenience::

    from umbrella_mailer import InMemoryMailer, MailerConfig, MimeMessage
"""

from .config import MailerConfig, MessageConfig, ViewConfig
from .exceptions import InvalidConfigurationError, MailerError, ViewNotFoundError
from .logging import setup_logging
from .mailer import BaseMailer, BodyContent, InMemoryMailer, html_to_text
from .message import BaseMessage, MessageField
from .mime import Attachment, MimeMessage
from .view import View

__all__ = [
    "Attachment",
    "BaseMailer",
    "BaseMessage",
    "BodyContent",
    "InMemoryMailer",
    "InvalidConfigurationError",
    "MailerConfig",
    "MailerError",
    "MessageConfig",
    "MessageField",
    "MimeMessage",
    "View",
    "ViewConfig",
    "ViewNotFoundError",
    "html_to_text",
    "setup_logging",
]
