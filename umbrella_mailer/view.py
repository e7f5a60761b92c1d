"""View — resolves view names to Jinja2 templates and renders them."""

from __future__ import annotations

from collections.abc import Mapping
from pathlib import Path, PurePosixPath
from typing import Any

import jinja2
import structlog

from .config import ViewConfig
from .exceptions import ViewNotFoundError

logger = structlog.get_logger()


class View:
    """Template renderer used by mailers.

    View names are paths relative to a search directory, e.g.
    ``"layouts/html"``.  A name without a suffix gets ``default_extension``
    appended.  Parameters passed to :meth:`render` become template
    variables; ``params`` is shared by every render and is reachable from
    templates as ``view.params``.

    Jinja2 environments are cached per search directory and render
    options, so changing ``autoescape`` or ``strict_undefined`` later takes
    effect on the next render.
    """

    def __init__(
        self,
        params: Mapping[str, Any] | None = None,
        *,
        default_extension: str = "j2",
        autoescape: bool = False,
        strict_undefined: bool = False,
    ) -> None:
        self.params: dict[str, Any] = dict(params or {})
        self.default_extension = default_extension.lstrip(".")
        self.autoescape = autoescape
        self.strict_undefined = strict_undefined
        self._environments: dict[tuple[str, bool, bool], jinja2.Environment] = {}

    @classmethod
    def from_config(cls, config: ViewConfig) -> View:
        return cls(
            config.params,
            default_extension=config.default_extension,
            autoescape=config.autoescape,
            strict_undefined=config.strict_undefined,
        )

    def resolve(self, name: str) -> str:
        """Return the template file name for view *name*."""
        if PurePosixPath(name).suffix:
            return name
        return f"{name}.{self.default_extension}"

    def render(
        self,
        name: str,
        params: Mapping[str, Any] | None = None,
        *,
        search_path: str | Path,
    ) -> str:
        """Render view *name* found under *search_path*.

        Raises :class:`ViewNotFoundError` if no matching file exists.
        """
        if Path(name).is_absolute():
            return self.render_file(self.resolve(name), params)
        return self._render(str(search_path), self.resolve(name), params)

    def render_file(self, path: str | Path, params: Mapping[str, Any] | None = None) -> str:
        """Render the template file at *path*."""
        path = Path(path)
        return self._render(str(path.parent), path.name, params)

    def _render(
        self,
        search_path: str,
        template_name: str,
        params: Mapping[str, Any] | None,
    ) -> str:
        env = self._environment(search_path)
        context = {"view": self, **(params or {})}
        try:
            output = env.get_template(template_name).render(context)
        except jinja2.TemplateNotFound as exc:
            raise ViewNotFoundError(exc.name or template_name, search_path) from exc

        logger.debug(
            "view_rendered",
            template=template_name,
            search_path=search_path,
            length=len(output),
        )
        return output

    def _environment(self, search_path: str) -> jinja2.Environment:
        key = (search_path, self.autoescape, self.strict_undefined)
        env = self._environments.get(key)
        if env is None:
            env = jinja2.Environment(
                loader=jinja2.FileSystemLoader(search_path),
                autoescape=self.autoescape,
                undefined=jinja2.StrictUndefined if self.strict_undefined else jinja2.Undefined,
                keep_trailing_newline=True,
            )
            self._environments[key] = env
        return env
