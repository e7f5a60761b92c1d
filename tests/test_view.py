"""Tests for umbrella_mailer.view."""

from __future__ import annotations

from pathlib import Path

import jinja2
import pytest

from tests.conftest import write_view

from umbrella_mailer.config import ViewConfig
from umbrella_mailer.exceptions import MailerError, ViewNotFoundError
from umbrella_mailer.view import View


class TestResolve:
    def test_appends_default_extension(self):
        assert View().resolve("layouts/html") == "layouts/html.j2"

    def test_keeps_existing_suffix(self):
        assert View().resolve("welcome.txt") == "welcome.txt"

    def test_custom_extension(self):
        assert View(default_extension=".jinja").resolve("welcome") == "welcome.jinja"


class TestRender:
    def test_params_become_variables(self, view_path: Path):
        write_view(view_path, "greeting", "Hello {{ name }}!")
        assert View().render("greeting", {"name": "Ada"}, search_path=view_path) == "Hello Ada!"

    def test_nested_view_name(self, view_path: Path):
        write_view(view_path, "layouts/text", "layout")
        assert View().render("layouts/text", search_path=view_path) == "layout"

    def test_shared_params(self, view_path: Path):
        write_view(view_path, "footer", "{{ view.params.site }}")
        view = View(params={"site": "Umbrella"})
        assert view.render("footer", search_path=view_path) == "Umbrella"

    def test_trailing_newline_kept(self, view_path: Path):
        write_view(view_path, "lines", "line\n")
        assert View().render("lines", search_path=view_path) == "line\n"

    def test_absolute_name(self, tmp_path: Path):
        write_view(tmp_path, "standalone", "absolute")
        view = View()
        assert view.render(str(tmp_path / "standalone"), search_path="/nonexistent") == "absolute"

    def test_render_file(self, tmp_path: Path):
        path = write_view(tmp_path, "file", "{{ a }}+{{ b }}")
        assert View().render_file(path, {"a": 1, "b": 2}) == "1+2"

    def test_undefined_renders_empty(self, view_path: Path):
        write_view(view_path, "loose", "[{{ missing }}]")
        assert View().render("loose", search_path=view_path) == "[]"

    def test_strict_undefined(self, view_path: Path):
        write_view(view_path, "strict", "{{ missing }}")
        with pytest.raises(jinja2.UndefinedError):
            View(strict_undefined=True).render("strict", search_path=view_path)

    def test_autoescape(self, view_path: Path):
        write_view(view_path, "escaped", "{{ html }}")
        view = View(autoescape=True)
        assert view.render("escaped", {"html": "<b>"}, search_path=view_path) == "&lt;b&gt;"

    def test_option_change_applies_to_next_render(self, view_path: Path):
        write_view(view_path, "escaped", "{{ html }}")
        view = View()
        assert view.render("escaped", {"html": "<b>"}, search_path=view_path) == "<b>"

        view.autoescape = True
        assert view.render("escaped", {"html": "<b>"}, search_path=view_path) == "&lt;b&gt;"

    def test_include(self, view_path: Path):
        write_view(view_path, "partials/sig", "-- Umbrella")
        write_view(view_path, "body", "Hi\n{% include 'partials/sig.j2' %}")
        assert View().render("body", search_path=view_path) == "Hi\n-- Umbrella"


class TestNotFound:
    def test_missing_view(self, view_path: Path):
        with pytest.raises(ViewNotFoundError) as excinfo:
            View().render("missing", search_path=view_path)
        assert excinfo.value.name == "missing.j2"
        assert excinfo.value.search_path == str(view_path)

    def test_missing_search_path(self, tmp_path: Path):
        with pytest.raises(ViewNotFoundError):
            View().render("anything", search_path=tmp_path / "does-not-exist")

    def test_missing_include(self, view_path: Path):
        write_view(view_path, "broken", "{% include 'nope.j2' %}")
        with pytest.raises(ViewNotFoundError) as excinfo:
            View().render("broken", search_path=view_path)
        assert excinfo.value.name == "nope.j2"

    def test_error_hierarchy(self, view_path: Path):
        with pytest.raises(LookupError):
            View().render("missing", search_path=view_path)
        with pytest.raises(MailerError):
            View().render("missing", search_path=view_path)


class TestFromConfig:
    def test_from_config(self):
        config = ViewConfig(
            default_extension="html",
            autoescape=True,
            strict_undefined=True,
            params={"k": "v"},
        )
        view = View.from_config(config)
        assert view.default_extension == "html"
        assert view.autoescape is True
        assert view.strict_undefined is True
        assert view.params == {"k": "v"}

    def test_params_are_copied(self):
        params = {"k": "v"}
        view = View(params)
        view.params["k"] = "changed"
        assert params == {"k": "v"}
