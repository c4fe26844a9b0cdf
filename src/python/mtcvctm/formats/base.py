"""Generator interface and helpers shared by every output format.

Identifiers and claim names follow the same precedence in all formats:

1. an explicit, format-specific field on the credential model
2. the format's override block (front matter ``formats.<name>.*``)
3. a default derived from universal fields (base URL, id, name)

``resolve_precedence`` implements that order once; generators only supply
the three candidates.
"""

import json
import types
import typing
from abc import ABC, abstractmethod
from dataclasses import fields, is_dataclass
from typing import Any, Callable, TypeVar

from mtcvctm.config import Config
from mtcvctm.integrity import build_asset_url, calculate_integrity, data_uri
from mtcvctm.model import ClaimDefinition, ParsedCredential

T = TypeVar("T")
D = TypeVar("D", bound="JsonDocument")


class GenerationError(Exception):
    """A format could not be generated for a credential."""

    def __init__(self, format_name: str, message: str):
        self.format_name = format_name
        super().__init__(f"{format_name}: {message}")


class ValidationError(GenerationError):
    """A generated document is missing something its format requires."""

    pass


# ---------------------------------------------------------------------------
# Precedence
# ---------------------------------------------------------------------------


def resolve_precedence(explicit: T | None, override: T | None, derive: Callable[[], T]) -> T:
    """Return the first non-empty of ``explicit``, ``override``, ``derive()``."""
    if explicit:
        return explicit
    if override:
        return override
    return derive()


def override_str(parsed: ParsedCredential, format_name: str, key: str) -> str:
    """String override ``formats.<format_name>.<key>``, or ``""``."""
    value = parsed.overrides_for(format_name).get(key)
    return value.strip() if isinstance(value, str) else ""


def override_list(parsed: ParsedCredential, format_name: str, key: str) -> list[str]:
    """List-of-strings override; a single string counts as a one-item list."""
    value = parsed.overrides_for(format_name).get(key)
    if isinstance(value, str):
        value = [value]
    if not isinstance(value, list):
        return []
    return [v for v in value if isinstance(v, str) and v]


def override_int(parsed: ParsedCredential, format_name: str, key: str) -> int | None:
    value = parsed.overrides_for(format_name).get(key)
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(value)
    return None


def resolve_claim_name(
    claim: ClaimDefinition, parsed: ParsedCredential, format_name: str
) -> str:
    """Emitted key for ``claim`` in ``format_name``.

    Per-claim mapping first, then the credential's bulk mapping table, then
    the claim's own name.
    """
    bulk = parsed.claim_mappings.get(format_name, {})
    return resolve_precedence(
        claim.format_mappings.get(format_name),
        bulk.get(claim.name),
        lambda: claim.name,
    )


def reverse_domain(base_url: str) -> str:
    """``https://registry.example.org/`` -> ``org.example.registry``."""
    host = base_url.strip()
    for scheme in ("https://", "http://"):
        if host.startswith(scheme):
            host = host[len(scheme) :]
            break
    host = host.rstrip("/")
    return ".".join(reversed(host.split(".")))


# ---------------------------------------------------------------------------
# Assets
# ---------------------------------------------------------------------------


def asset_reference(
    format_name: str,
    path: str,
    absolute_path: str,
    parsed: ParsedCredential,
    config: Config,
) -> tuple[str, str]:
    """Return ``(uri, integrity)`` for a local or remote asset.

    Inline mode embeds local files as data URIs (read errors are fatal for
    the format). With a base URL the asset is referenced by URL plus an
    integrity hash when the file can be read. Otherwise the path is used
    as written.

    Raises:
        GenerationError: If an asset to be inlined cannot be read.
    """
    if not path:
        return "", ""

    local = not path.startswith("http")
    absolute_path = absolute_path or path

    if parsed.inline_images and local:
        try:
            return data_uri(absolute_path), ""
        except OSError as e:
            raise GenerationError(format_name, f"failed to inline {path}: {e}") from e

    if config.base_url and local:
        try:
            integrity = calculate_integrity(absolute_path)
        except OSError:
            integrity = ""
        return build_asset_url(config.base_url, path), integrity

    return path, ""


# ---------------------------------------------------------------------------
# JSON documents
# ---------------------------------------------------------------------------


def json_field(key: str, *, always: bool = False) -> dict:
    """Field metadata: the JSON key, and whether to emit empty values."""
    return {"json": key, "always": always}


def _is_empty(value: Any) -> bool:
    if value is None or value is False:
        return True
    return isinstance(value, (str, list, dict)) and not value


def _encode(value: Any) -> Any:
    if is_dataclass(value):
        return value.to_dict()
    if isinstance(value, list):
        return [_encode(v) for v in value]
    if isinstance(value, dict):
        return {k: _encode(v) for k, v in value.items()}
    return value


def _decode(tp: Any, value: Any) -> Any:
    if value is None:
        return None
    origin = typing.get_origin(tp)
    if origin in (typing.Union, types.UnionType):
        args = [a for a in typing.get_args(tp) if a is not type(None)]
        return _decode(args[0], value)
    if origin is list:
        (item_type,) = typing.get_args(tp)
        return [_decode(item_type, v) for v in value]
    if origin is dict:
        _, value_type = typing.get_args(tp)
        return {k: _decode(value_type, v) for k, v in value.items()}
    if isinstance(tp, type) and is_dataclass(tp):
        return tp.from_dict(value)
    return value


class JsonDocument:
    """Dataclass mixin mapping fields to JSON keys.

    Empty values are omitted unless the field is marked ``always``; the JSON
    key defaults to the field name.
    """

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {}
        for f in fields(self):
            value = getattr(self, f.name)
            if _is_empty(value) and not f.metadata.get("always"):
                continue
            out[f.metadata.get("json", f.name)] = _encode(value)
        return out

    @classmethod
    def from_dict(cls: type[D], data: dict[str, Any]) -> D:
        hints = typing.get_type_hints(cls)
        kwargs = {}
        for f in fields(cls):
            key = f.metadata.get("json", f.name)
            if key in data:
                kwargs[f.name] = _decode(hints[f.name], data[key])
        return cls(**kwargs)

    def validate(self) -> None:
        """Raise ValidationError if required content is missing."""

    def to_json(self) -> str:
        return json.dumps(self.to_dict(), indent=2, ensure_ascii=False) + "\n"

    @classmethod
    def from_json(cls: type[D], text: str | bytes) -> D:
        return cls.from_dict(json.loads(text))


# ---------------------------------------------------------------------------
# Generator interface
# ---------------------------------------------------------------------------


class Generator(ABC):
    """Turns a ParsedCredential into one format's JSON document."""

    name: str = ""
    description: str = ""
    file_extension: str = ""

    @abstractmethod
    def derive_identifier(self, parsed: ParsedCredential, config: Config) -> str:
        """The format's primary identifier for ``parsed`` (may be empty)."""

    @abstractmethod
    def build(self, parsed: ParsedCredential, config: Config) -> JsonDocument:
        """Build the typed document.

        Raises:
            GenerationError: If a required identifier cannot be resolved or
                an asset cannot be read.
        """

    def generate(self, parsed: ParsedCredential, config: Config) -> bytes:
        """Build, validate and serialize the document.

        Raises:
            GenerationError: As raised by ``build`` or ``validate``.
        """
        document = self.build(parsed, config)
        document.validate()
        return document.to_json().encode("utf-8")

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.name!r}>"
