"""YAML front matter extraction.

A document may start with a YAML block fenced by ``---`` lines::

    ---
    vct: https://registry.example.com/pid
    background_color: "#12107c"
    display:
      de-DE:
        name: Personalausweis
    formats:
      mddl:
        doctype: eu.europa.ec.eudi.pid.1
    ---

    # Person Identification Data

Absent front matter is not an error. Malformed front matter degrades to
"no metadata" as well, but emits a ``FrontMatterWarning`` so authoring
mistakes are not silently lost.
"""

import re
import warnings
from dataclasses import dataclass, field
from typing import Any

import yaml

from mtcvctm.model import DisplayLocalization

# Opening fence on the first line, closing fence on a line of its own
_OPENING_FENCE = re.compile(r"\A---[ \t]*\r?\n")
_CLOSING_FENCE = re.compile(r"^---[ \t]*(?:\r?\n|\Z)", re.MULTILINE)


class FrontMatterWarning(UserWarning):
    """Front matter was present but could not be used."""


class YamlLoader(yaml.SafeLoader):
    """SafeLoader that only reads ``true``/``false`` as booleans.

    PyYAML follows YAML 1.1, where ``no``, ``on``, ``off`` and ``yes`` are
    booleans too. Those are valid locale codes and format keys, so they stay
    strings here, as under YAML 1.2.
    """


_BOOL_TAG = "tag:yaml.org,2002:bool"
YamlLoader.yaml_implicit_resolvers = {
    first: [(tag, regexp) for tag, regexp in resolvers if tag != _BOOL_TAG]
    for first, resolvers in yaml.SafeLoader.yaml_implicit_resolvers.items()
}
YamlLoader.add_implicit_resolver(
    _BOOL_TAG, re.compile(r"^(?:true|True|TRUE|false|False|FALSE)$"), list("tTfF")
)


def load_yaml(text: str) -> Any:
    """Parse one YAML document with :class:`YamlLoader`."""
    return yaml.load(text, Loader=YamlLoader)


@dataclass
class FrontMatter:
    """Result of front matter extraction.

    Attributes:
        metadata: Top-level keys whose values are strings.
        display: Locale -> localized credential name/description.
        formats: Format name -> override mapping (``formats`` key, verbatim).
        body: Markdown following the front matter block.
        has_front_matter: Whether a usable block was found.
    """

    metadata: dict[str, str] = field(default_factory=dict)
    display: dict[str, DisplayLocalization] = field(default_factory=dict)
    formats: dict[str, dict[str, Any]] = field(default_factory=dict)
    body: str = ""
    has_front_matter: bool = False


def split_front_matter(content: str) -> tuple[str | None, str]:
    """Split ``content`` into the raw YAML block and the remaining body.

    Returns ``(None, content)`` when there is no complete fenced block.
    """
    opening = _OPENING_FENCE.match(content)
    if not opening:
        return None, content

    closing = _CLOSING_FENCE.search(content, opening.end())
    if not closing:
        warnings.warn(
            "front matter opening '---' has no closing fence; ignoring it",
            FrontMatterWarning,
            stacklevel=3,
        )
        return None, content

    return content[opening.end() : closing.start()], content[closing.end() :]


def extract_front_matter(content: str | bytes) -> FrontMatter:
    """Extract flat metadata, display localizations and format overrides.

    Args:
        content: Full markdown document.

    Returns:
        FrontMatter; all maps are empty when the document has no usable block.
    """
    if isinstance(content, bytes):
        content = content.decode("utf-8")

    block, body = split_front_matter(content)
    if block is None:
        return FrontMatter(body=content)

    try:
        data = load_yaml(block)
    except yaml.YAMLError as e:
        warnings.warn(
            f"front matter is not valid YAML, ignoring it: {e}",
            FrontMatterWarning,
            stacklevel=2,
        )
        return FrontMatter(body=body)

    if data is None:
        data = {}
    elif not isinstance(data, dict):
        warnings.warn(
            f"front matter must be a mapping, got {type(data).__name__}",
            FrontMatterWarning,
            stacklevel=2,
        )
        return FrontMatter(body=body)

    return FrontMatter(
        metadata=_flat_metadata(data),
        display=_display_localizations(data.get("display")),
        formats=_format_overrides(data.get("formats")),
        body=body,
        has_front_matter=True,
    )


def _flat_metadata(data: dict) -> dict[str, str]:
    # Only string values; nested structures and other scalars are dropped
    return {str(k): v for k, v in data.items() if isinstance(v, str)}


def _display_localizations(value: Any) -> dict[str, DisplayLocalization]:
    if value is None:
        return {}
    if not isinstance(value, dict):
        warnings.warn(
            "front matter 'display' must map locales to {name, description}",
            FrontMatterWarning,
            stacklevel=3,
        )
        return {}

    result: dict[str, DisplayLocalization] = {}
    for locale, entry in value.items():
        if not isinstance(entry, dict):
            warnings.warn(
                f"front matter display entry for {locale!r} is not a mapping",
                FrontMatterWarning,
                stacklevel=3,
            )
            continue
        result[str(locale)] = DisplayLocalization(
            name=_as_text(entry.get("name")),
            description=_as_text(entry.get("description")),
        )
    return result


def _format_overrides(value: Any) -> dict[str, dict[str, Any]]:
    if not isinstance(value, dict):
        return {}
    return {str(k): v for k, v in value.items() if isinstance(v, dict)}


def _as_text(value: Any) -> str:
    if value is None:
        return ""
    return str(value)
