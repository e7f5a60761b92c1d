"""Entry point for the mailer package.

Usage::

    python -m umbrella_mailer preview welcome --text welcome-text \
        --view-path templates/mail --param name=Ada
"""

from __future__ import annotations

import argparse
import sys

from .config import MailerConfig
from .exceptions import MailerError
from .logging import setup_logging
from .mailer import InMemoryMailer


def _parse_param(raw: str) -> tuple[str, str]:
    key, sep, value = raw.partition("=")
    if not sep or not key:
        raise argparse.ArgumentTypeError(f"expected KEY=VALUE, got {raw!r}")
    return key, value


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="python -m umbrella_mailer")
    commands = parser.add_subparsers(dest="command", required=True)

    preview = commands.add_parser("preview", help="Compose a message and print its MIME text")
    preview.add_argument("html", help="HTML view name")
    preview.add_argument("--text", help="Plain-text view name (default: derived from HTML)")
    preview.add_argument("--view-path", help="Directory containing the views")
    preview.add_argument(
        "--param",
        "-p",
        action="append",
        type=_parse_param,
        default=[],
        metavar="KEY=VALUE",
        help="Template parameter (repeatable)",
    )
    preview.add_argument("--no-layout", action="store_true", help="Render without layouts")
    preview.add_argument("--log-level", default="WARNING")
    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    setup_logging(json=False, level=args.log_level)

    config = MailerConfig()
    if args.view_path:
        config.view_path = args.view_path
    if args.no_layout:
        config.html_layout = None
        config.text_layout = None

    mailer = InMemoryMailer(config)
    view = {"html": args.html, "text": args.text} if args.text else args.html
    try:
        message = mailer.compose(view, dict(args.param))
    except MailerError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 1

    print(message.to_string())
    return 0


if __name__ == "__main__":
    sys.exit(main())
