"""SD-JWT VC Type Metadata (draft-ietf-oauth-sd-jwt-vc).

Produces ``<name>.vctm.json``::

    {
      "vct": "https://registry.example.com/pid",
      "name": "Person Identification Data",
      "display": [{"locale": "en-US", "name": "...", "rendering": {...}}],
      "claims": [{"path": ["given_name"], "display": [...], "sd": "always"}]
    }
"""

from dataclasses import dataclass, field

from mtcvctm.config import Config
from mtcvctm.formats.base import (
    Generator,
    JsonDocument,
    ValidationError,
    asset_reference,
    json_field,
    override_str,
    resolve_claim_name,
    resolve_precedence,
)
from mtcvctm.model import ParsedCredential
from mtcvctm.parser import resolve_path

FORMAT_NAME = "vctm"

# Metadata keys copied to the top level verbatim
PASSTHROUGH_KEYS = {
    "extends": "extends",
    "extends#integrity": "extends_integrity",
    "schema_uri": "schema_uri",
    "schema_uri#integrity": "schema_uri_integrity",
}


# ---------------------------------------------------------------------------
# Document model
# ---------------------------------------------------------------------------


@dataclass
class Logo(JsonDocument):
    uri: str = ""
    uri_integrity: str = field(default="", metadata=json_field("uri#integrity"))
    alt_text: str = ""


@dataclass
class BackgroundImage(JsonDocument):
    uri: str = ""
    uri_integrity: str = field(default="", metadata=json_field("uri#integrity"))


@dataclass
class SimpleRendering(JsonDocument):
    logo: Logo | None = None
    background_image: BackgroundImage | None = None
    background_color: str = ""
    text_color: str = ""


@dataclass
class SVGTemplate(JsonDocument):
    uri: str = ""
    uri_integrity: str = field(default="", metadata=json_field("uri#integrity"))
    properties: dict[str, str] = field(default_factory=dict)


@dataclass
class Rendering(JsonDocument):
    simple: SimpleRendering | None = None
    svg_templates: list[SVGTemplate] = field(default_factory=list)


@dataclass
class DisplayProperties(JsonDocument):
    locale: str = field(default="", metadata=json_field("locale", always=True))
    name: str = ""
    description: str = ""
    rendering: Rendering | None = None


@dataclass
class ClaimDisplay(JsonDocument):
    locale: str = field(default="", metadata=json_field("locale", always=True))
    label: str = ""
    description: str = ""


@dataclass
class ClaimMetadata(JsonDocument):
    path: list[str] = field(default_factory=list)
    display: list[ClaimDisplay] = field(default_factory=list)
    mandatory: bool = False
    sd: str = ""
    svg_id: str = ""


@dataclass
class TypeMetadata(JsonDocument):
    """A Type Metadata document."""

    vct: str = field(default="", metadata=json_field("vct", always=True))
    name: str = ""
    description: str = ""
    extends: str = ""
    extends_integrity: str = field(default="", metadata=json_field("extends#integrity"))
    schema_uri: str = ""
    schema_uri_integrity: str = field(
        default="", metadata=json_field("schema_uri#integrity")
    )
    display: list[DisplayProperties] = field(default_factory=list)
    claims: list[ClaimMetadata] = field(default_factory=list)

    def validate(self) -> None:
        if not self.vct:
            raise ValidationError(FORMAT_NAME, "vct field is required")


# ---------------------------------------------------------------------------
# Generator
# ---------------------------------------------------------------------------


class VctmGenerator(Generator):
    name = FORMAT_NAME
    description = "SD-JWT VC Type Metadata (draft-ietf-oauth-sd-jwt-vc)"
    file_extension = "vctm.json"

    def derive_identifier(self, parsed: ParsedCredential, config: Config) -> str:
        return resolve_precedence(
            parsed.vct,
            override_str(parsed, self.name, "vct"),
            lambda: self._default_vct(parsed, config),
        )

    def _default_vct(self, parsed: ParsedCredential, config: Config) -> str:
        if config.vct:
            return config.vct
        if config.base_url and parsed.id:
            return f"{config.base_url.rstrip('/')}/{parsed.id}"
        return parsed.id

    def build(self, parsed: ParsedCredential, config: Config) -> TypeMetadata:
        doc = TypeMetadata(
            vct=self.derive_identifier(parsed, config),
            name=parsed.name,
            description=parsed.description,
        )

        for key, attr in PASSTHROUGH_KEYS.items():
            value = parsed.metadata.get(key)
            if isinstance(value, str) and value.strip():
                setattr(doc, attr, value.strip())

        doc.display = self._build_display(parsed, config)
        doc.claims = self._build_claims(parsed, config)
        return doc

    def _build_display(
        self, parsed: ParsedCredential, config: Config
    ) -> list[DisplayProperties]:
        if not parsed.name and not parsed.description:
            return []

        default = DisplayProperties(
            locale=config.display_language,
            name=parsed.name,
            description=parsed.description,
            rendering=self._build_rendering(parsed, config),
        )
        displays = [default]
        for locale, loc in parsed.localizations.items():
            if locale == config.display_language:
                continue
            displays.append(
                DisplayProperties(locale=locale, name=loc.name, description=loc.description)
            )
        return displays

    def _build_rendering(
        self, parsed: ParsedCredential, config: Config
    ) -> Rendering | None:
        background_image = parsed.metadata.get("background_image")
        has_simple = bool(
            parsed.images
            or parsed.logo_path
            or parsed.background_color
            or parsed.text_color
            or background_image
        )

        rendering = Rendering()
        if has_simple:
            simple = SimpleRendering(
                logo=self._build_logo(parsed, config),
                background_color=parsed.background_color,
                text_color=parsed.text_color,
            )
            if isinstance(background_image, str) and background_image.strip():
                simple.background_image = BackgroundImage(
                    uri=background_image.strip().strip('"')
                )
            if simple.to_dict():
                rendering.simple = simple

        rendering.svg_templates = self._build_svg_templates(parsed, config)

        if rendering.simple is None and not rendering.svg_templates:
            return None
        return rendering

    def _build_logo(self, parsed: ParsedCredential, config: Config) -> Logo | None:
        if not parsed.logo_path:
            return None
        uri, integrity = asset_reference(
            self.name, parsed.logo_path, parsed.logo_abs_path, parsed, config
        )
        return Logo(uri=uri, uri_integrity=integrity, alt_text=parsed.logo_alt_text)

    def _build_svg_templates(
        self, parsed: ParsedCredential, config: Config
    ) -> list[SVGTemplate]:
        templates = []

        if parsed.svg_template_uri or parsed.svg_template_path:
            templates.append(self._front_matter_template(parsed, config))

        for image in parsed.svg_images:
            uri, integrity = asset_reference(
                self.name, image.path, image.absolute_path, parsed, config
            )
            templates.append(SVGTemplate(uri=uri, uri_integrity=integrity))

        properties = parsed.overrides_for(self.name).get("svg_template_properties")
        if isinstance(properties, dict) and templates:
            templates[0].properties = {str(k): str(v) for k, v in properties.items()}

        return templates

    def _front_matter_template(
        self, parsed: ParsedCredential, config: Config
    ) -> SVGTemplate:
        if parsed.svg_template_uri:
            return SVGTemplate(
                uri=parsed.svg_template_uri,
                uri_integrity=parsed.svg_template_integrity,
            )

        path = parsed.svg_template_path
        absolute = resolve_path(parsed.source_dir, path)

        uri, integrity = asset_reference(self.name, path, absolute, parsed, config)
        return SVGTemplate(
            uri=uri, uri_integrity=parsed.svg_template_integrity or integrity
        )

    def _build_claims(
        self, parsed: ParsedCredential, config: Config
    ) -> list[ClaimMetadata]:
        entries = []
        for claim in parsed.claims:
            emitted = resolve_claim_name(claim, parsed, self.name)
            entry = ClaimMetadata(
                path=emitted.split(".") if emitted != claim.name else list(claim.path),
                mandatory=claim.mandatory,
                sd=claim.sd,
                svg_id=claim.svg_id,
            )

            if claim.description or claim.display_name:
                entry.display.append(
                    ClaimDisplay(
                        locale=config.display_language,
                        label=claim.label,
                        description=claim.description,
                    )
                )
            for locale, loc in claim.localizations.items():
                if locale == config.display_language:
                    continue
                entry.display.append(
                    ClaimDisplay(
                        locale=locale,
                        label=loc.label or claim.display_name,
                        description=loc.description,
                    )
                )
            entries.append(entry)
        return entries

