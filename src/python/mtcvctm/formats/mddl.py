"""mso_mdoc credential configuration (ISO 18013-5 / OpenID4VCI).

The doctype defaults to the reverse-domain form of the base URL followed by
``.credentials.<id>``; all claims are grouped under a single namespace which
defaults to the doctype.
"""

from dataclasses import dataclass, field

from mtcvctm.config import Config
from mtcvctm.formats.base import (
    GenerationError,
    Generator,
    JsonDocument,
    ValidationError,
    asset_reference,
    json_field,
    override_int,
    override_str,
    resolve_claim_name,
    resolve_precedence,
    reverse_domain,
)
from mtcvctm.model import ParsedCredential

FORMAT_NAME = "mddl"
MSO_MDOC = "mso_mdoc"

# Claim value type -> CDDL type; "" means the structure is described elsewhere
CDDL_TYPES = {
    "string": "tstr",
    "number": "int",
    "integer": "uint",
    "boolean": "bool",
    "bool": "bool",
    "date": "full-date",
    "datetime": "tdate",
    "image": "bstr",
    "object": "",
    "array": "",
}


def map_type_to_cddl(value_type: str) -> str:
    return CDDL_TYPES.get(value_type.lower(), "tstr")


@dataclass
class Logo(JsonDocument):
    uri: str = ""
    alt_text: str = ""


@dataclass
class DisplayProperties(JsonDocument):
    locale: str = field(default="", metadata=json_field("locale", always=True))
    name: str = field(default="", metadata=json_field("name", always=True))
    description: str = ""
    logo: Logo | None = None
    background_color: str = ""
    text_color: str = ""


@dataclass
class ClaimDisplay(JsonDocument):
    locale: str = field(default="", metadata=json_field("locale", always=True))
    name: str = field(default="", metadata=json_field("name", always=True))


@dataclass
class ClaimMetadata(JsonDocument):
    display: list[ClaimDisplay] = field(default_factory=list)
    mandatory: bool = False
    value_type: str = ""


@dataclass
class MdocConfiguration(JsonDocument):
    """An mso_mdoc credential configuration."""

    format: str = field(default=MSO_MDOC, metadata=json_field("format", always=True))
    doctype: str = field(default="", metadata=json_field("doctype", always=True))
    display: list[DisplayProperties] = field(default_factory=list)
    claims: dict[str, dict[str, ClaimMetadata]] = field(default_factory=dict)
    order: int | None = None

    def validate(self) -> None:
        if not self.doctype:
            raise ValidationError(FORMAT_NAME, "doctype is required")
        if self.format != MSO_MDOC:
            raise ValidationError(FORMAT_NAME, f"format must be {MSO_MDOC!r}")


class MddlGenerator(Generator):
    name = FORMAT_NAME
    description = "mso_mdoc credential configuration (ISO 18013-5 / OpenID4VCI)"
    file_extension = "mdoc.json"

    def derive_identifier(self, parsed: ParsedCredential, config: Config) -> str:
        return resolve_precedence(
            parsed.doctype,
            override_str(parsed, self.name, "doctype"),
            lambda: self._default_doctype(parsed, config),
        )

    def _default_doctype(self, parsed: ParsedCredential, config: Config) -> str:
        if not config.base_url or not parsed.id:
            return ""
        return f"{reverse_domain(config.base_url)}.credentials.{parsed.id}"

    def derive_namespace(self, parsed: ParsedCredential, config: Config) -> str:
        return resolve_precedence(
            parsed.namespace,
            override_str(parsed, self.name, "namespace"),
            lambda: self.derive_identifier(parsed, config),
        )

    def build(self, parsed: ParsedCredential, config: Config) -> MdocConfiguration:
        doctype = self.derive_identifier(parsed, config)
        if not doctype:
            raise GenerationError(
                self.name,
                "doctype is required (set doctype in front matter or provide base_url)",
            )

        doc = MdocConfiguration(
            doctype=doctype,
            order=override_int(parsed, self.name, "order"),
        )
        doc.display = self._build_display(parsed, config)

        if parsed.claims:
            namespace = self.derive_namespace(parsed, config)
            doc.claims = {namespace: self._build_claims(parsed, config)}
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
            background_color=parsed.background_color,
            text_color=parsed.text_color,
        )
        if parsed.logo_path:
            uri, _ = asset_reference(
                self.name, parsed.logo_path, parsed.logo_abs_path, parsed, config
            )
            default.logo = Logo(uri=uri, alt_text=parsed.logo_alt_text)

        displays = [default]
        for locale, loc in parsed.localizations.items():
            if locale == config.display_language:
                continue
            displays.append(
                DisplayProperties(locale=locale, name=loc.name, description=loc.description)
            )
        return displays

    def _build_claims(
        self, parsed: ParsedCredential, config: Config
    ) -> dict[str, ClaimMetadata]:
        claims: dict[str, ClaimMetadata] = {}
        for claim in parsed.claims:
            meta = ClaimMetadata(
                mandatory=claim.mandatory,
                value_type=map_type_to_cddl(claim.type),
            )
            meta.display.append(ClaimDisplay(locale=config.display_language, name=claim.label))
            for locale, loc in claim.localizations.items():
                if locale == config.display_language:
                    continue
                meta.display.append(
                    ClaimDisplay(locale=locale, name=loc.label or claim.label)
                )
            claims[resolve_claim_name(claim, parsed, self.name)] = meta
        return claims
