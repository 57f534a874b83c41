"""Templating utilities for the rendered book pages.

Handles template file loading, placeholder extraction and context-driven
rendering. Placeholders are tokens of the form ``{name}``; CSS rules in
the template (``{ margin: 0 }``) are left alone because they contain
spaces. Substitution is single-pass, so braces inside injected chapter
HTML are never re-expanded.
"""

from __future__ import annotations

import re
from pathlib import Path

from py4envchem.exceptions import ConfigurationError

_PLACEHOLDER = re.compile(r"\{([a-zA-Z0-9_]+)\}")

REQUIRED_PLACEHOLDERS: frozenset[str] = frozenset({"page_title", "content"})


def load_template(path: Path) -> str:
    """Read the contents of a template file as a string.

    Raises
    ------
    FileNotFoundError
        If the file does not exist.
    """
    with path.open("r", encoding="utf-8") as fh:
        return fh.read()


def extract_placeholders_from_template(content: str) -> list[str]:
    """Return a sorted list of unique placeholders found in the template.

    Examples
    --------
    >>> extract_placeholders_from_template("<title>{page_title}</title>{content}")
    ['content', 'page_title']
    """
    return sorted(set(_PLACEHOLDER.findall(content)))


def render_template(template_content: str, context: dict[str, str]) -> str:
    """Replace ``{name}`` placeholders with values from ``context``.

    Placeholders without a value render as an empty string.

    Examples
    --------
    >>> render_template("<h1>{title}</h1>{missing}", {"title": "Ozone"})
    '<h1>Ozone</h1>'
    """

    def replace_func(match: re.Match[str]) -> str:
        return context.get(match.group(1), "")

    return _PLACEHOLDER.sub(replace_func, template_content)


def load_template_and_placeholders(path: Path) -> tuple[str, list[str]]:
    """Load a page template and check it has the placeholders the builder fills.

    Raises
    ------
    ConfigurationError
        If ``{page_title}`` or ``{content}`` is missing from the template.
    """
    content = load_template(path)
    placeholders = extract_placeholders_from_template(content)
    missing = sorted(REQUIRED_PLACEHOLDERS.difference(placeholders))
    if missing:
        raise ConfigurationError(
            f"Page template {path.name} lacks placeholder(s): {', '.join(missing)}",
            context={"path": str(path)},
        )
    return content, placeholders
