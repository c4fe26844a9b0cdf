"""Data model shared by the markdown parser, the model builder and the generators.

Two layers:
- ``ParsedMarkdown`` / ``ClaimDef`` describe what was found in one markdown
  document (walker + front matter output).
- ``ParsedCredential`` / ``ClaimDefinition`` are the format-agnostic model
  every format generator consumes.
"""

from dataclasses import dataclass, field
from typing import Any

# Value-type tags accepted in claim declarations
VALUE_TYPES = (
    "string",
    "number",
    "integer",
    "boolean",
    "date",
    "datetime",
    "image",
    "object",
    "array",
)

DEFAULT_VALUE_TYPE = "string"


@dataclass(frozen=True)
class ImageRef:
    """An image referenced from the markdown body.

    Attributes:
        path: Destination as written in the markdown.
        alt_text: Alt text of the image.
        absolute_path: Path resolved against the document directory
            (unchanged for absolute paths and http(s) URLs).
    """

    path: str
    alt_text: str = ""
    absolute_path: str = ""

    @property
    def is_svg(self) -> bool:
        return self.path.lower().endswith(".svg")

    @property
    def is_remote(self) -> bool:
        return self.path.startswith("http")


@dataclass(frozen=True)
class DisplayLocalization:
    """Localized credential name and description."""

    name: str = ""
    description: str = ""


@dataclass(frozen=True)
class ClaimLocalization:
    """Localized claim label and description."""

    label: str = ""
    description: str = ""


@dataclass
class ClaimDef:
    """A claim declaration recovered from one list item."""

    name: str
    display_name: str = ""
    type: str = DEFAULT_VALUE_TYPE
    description: str = ""
    mandatory: bool = False
    sd: str = ""
    svg_id: str = ""
    localizations: dict[str, ClaimLocalization] = field(default_factory=dict)

    @property
    def path(self) -> list[str]:
        return self.name.split(".")


@dataclass(frozen=True)
class ParsedMarkdown:
    """Everything extracted from one markdown document.

    Built once per document and not modified afterwards.
    """

    title: str = ""
    description: str = ""
    sections: dict[str, str] = field(default_factory=dict)
    images: tuple[ImageRef, ...] = ()
    claims: dict[str, ClaimDef] = field(default_factory=dict)
    metadata: dict[str, str] = field(default_factory=dict)
    display_localizations: dict[str, DisplayLocalization] = field(
        default_factory=dict
    )
    format_overrides: dict[str, dict[str, Any]] = field(default_factory=dict)


@dataclass
class ClaimDefinition:
    """Format-agnostic claim as seen by the generators.

    Attributes:
        name: Dotted claim identifier.
        path: ``name`` split on ``.``.
        format_mappings: Format name -> emitted claim name for that format.
    """

    name: str
    path: list[str] = field(default_factory=list)
    display_name: str = ""
    type: str = DEFAULT_VALUE_TYPE
    description: str = ""
    mandatory: bool = False
    sd: str = ""
    svg_id: str = ""
    localizations: dict[str, ClaimLocalization] = field(default_factory=dict)
    format_mappings: dict[str, str] = field(default_factory=dict)

    def __post_init__(self) -> None:
        if not self.type:
            self.type = DEFAULT_VALUE_TYPE
        if not self.path:
            self.path = self.name.split(".")

    @property
    def label(self) -> str:
        """Default-locale label: the display name, else the claim name."""
        return self.display_name or self.name


@dataclass
class ParsedCredential:
    """Format-agnostic credential metadata.

    Owned by a single conversion; generators read it and never mutate it.
    """

    id: str = ""
    name: str = ""
    description: str = ""

    # Format-specific identifiers (explicit values; generators derive the rest)
    vct: str = ""
    doctype: str = ""
    namespace: str = ""
    w3c_types: list[str] = field(default_factory=list)
    w3c_context: list[str] = field(default_factory=list)

    # Display
    background_color: str = ""
    text_color: str = ""
    logo_path: str = ""
    logo_alt_text: str = ""
    logo_abs_path: str = ""

    # SVG template
    svg_template_path: str = ""
    svg_template_uri: str = ""
    svg_template_integrity: str = ""

    # Source document
    source_path: str = ""
    source_dir: str = ""

    inline_images: bool = False

    localizations: dict[str, DisplayLocalization] = field(default_factory=dict)
    claims: list[ClaimDefinition] = field(default_factory=list)
    images: list[ImageRef] = field(default_factory=list)

    # formats.<name>.* from front matter, lifted verbatim
    format_overrides: dict[str, dict[str, Any]] = field(default_factory=dict)
    # format name -> {claim name -> emitted name}
    claim_mappings: dict[str, dict[str, str]] = field(default_factory=dict)
    metadata: dict[str, Any] = field(default_factory=dict)

    def overrides_for(self, format_name: str) -> dict[str, Any]:
        """Return the override block for ``format_name`` (empty if absent)."""
        block = self.format_overrides.get(format_name)
        return block if isinstance(block, dict) else {}

    @property
    def svg_images(self) -> list[ImageRef]:
        return [img for img in self.images if img.is_svg]

    @property
    def raster_images(self) -> list[ImageRef]:
        return [img for img in self.images if not img.is_svg]
