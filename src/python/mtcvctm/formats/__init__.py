"""Output format generators.

Usage:
    from mtcvctm.formats import default_registry

    registry = default_registry()
    for name in registry.resolve("vctm,w3c"):
        data = registry.get(name).generate(credential, config)
"""

from mtcvctm.formats.base import (
    GenerationError,
    Generator,
    JsonDocument,
    ValidationError,
    resolve_precedence,
)
from mtcvctm.formats.mddl import MddlGenerator, MdocConfiguration
from mtcvctm.formats.registry import (
    ALL_FORMATS,
    FormatError,
    FormatRegistry,
    NoFormatsError,
    UnknownFormatError,
)
from mtcvctm.formats.vctm import TypeMetadata, VctmGenerator
from mtcvctm.formats.w3c import CredentialSchemaDocument, W3CGenerator


def default_registry() -> FormatRegistry:
    """A registry holding the built-in generators."""
    return FormatRegistry([VctmGenerator(), MddlGenerator(), W3CGenerator()])


__all__ = [
    "ALL_FORMATS",
    "CredentialSchemaDocument",
    "FormatError",
    "FormatRegistry",
    "GenerationError",
    "Generator",
    "JsonDocument",
    "MddlGenerator",
    "MdocConfiguration",
    "NoFormatsError",
    "TypeMetadata",
    "UnknownFormatError",
    "ValidationError",
    "VctmGenerator",
    "W3CGenerator",
    "default_registry",
    "resolve_precedence",
]
