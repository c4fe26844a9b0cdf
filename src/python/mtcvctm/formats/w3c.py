"""W3C Verifiable Credential Data Model schema.

Produces ``<name>.vc.json``: the credential ``type`` and ``@context`` arrays
plus a JSON Schema for ``credentialSubject``.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field

from mtcvctm.config import Config
from mtcvctm.formats.base import (
    Generator,
    JsonDocument,
    ValidationError,
    json_field,
    override_list,
    resolve_claim_name,
    resolve_precedence,
)
from mtcvctm.model import ParsedCredential

FORMAT_NAME = "w3c"
BASE_TYPE = "VerifiableCredential"
BASE_CONTEXT = "https://www.w3.org/2018/credentials/v1"


def pascal_case(text: str, separators: str = r"[\s\-]+") -> str:
    """``"Person Identification-data"`` -> ``"PersonIdentificationData"``."""
    return "".join(w[:1].upper() + w[1:] for w in re.split(separators, text) if w)


def ensure_base_type(types: list[str]) -> list[str]:
    """Put ``VerifiableCredential`` first, without duplicating it."""
    return [BASE_TYPE] + [t for t in types if t != BASE_TYPE]


# ---------------------------------------------------------------------------
# Document model
# ---------------------------------------------------------------------------


@dataclass
class SchemaProperty(JsonDocument):
    type: str = field(default="string", metadata=json_field("type", always=True))
    title: str = ""
    description: str = ""
    format: str = ""
    content_encoding: str = field(default="", metadata=json_field("contentEncoding"))
    items: SchemaProperty | None = None
    properties: dict[str, SchemaProperty] = field(default_factory=dict)
    required: list[str] = field(default_factory=list)


@dataclass
class CredentialSubjectSchema(JsonDocument):
    type: str = field(default="object", metadata=json_field("type", always=True))
    properties: dict[str, SchemaProperty] = field(default_factory=dict)
    required: list[str] = field(default_factory=list)


@dataclass
class CredentialSchema(JsonDocument):
    type: str = field(default="JsonSchema", metadata=json_field("type", always=True))
    properties: dict[str, CredentialSubjectSchema] = field(default_factory=dict)


@dataclass
class Display(JsonDocument):
    background_color: str = field(default="", metadata=json_field("backgroundColor"))
    text_color: str = field(default="", metadata=json_field("textColor"))


@dataclass
class CredentialSchemaDocument(JsonDocument):
    """A W3C VC type/context declaration with its subject schema."""

    type: list[str] = field(default_factory=list, metadata=json_field("type", always=True))
    context: list[str] = field(
        default_factory=list, metadata=json_field("@context", always=True)
    )
    name: str = ""
    description: str = ""
    display: Display | None = None
    credential_schema: CredentialSchema | None = field(
        default=None, metadata=json_field("credentialSchema")
    )

    def validate(self) -> None:
        if not self.type or self.type[0] != BASE_TYPE:
            raise ValidationError(FORMAT_NAME, f"type must start with {BASE_TYPE}")
        if not self.context:
            raise ValidationError(FORMAT_NAME, "@context is required")


# Claim value type -> JSON Schema property
def map_type_to_json_schema(value_type: str) -> SchemaProperty:
    value_type = value_type.lower()
    if value_type in ("number", "integer", "object"):
        return SchemaProperty(type=value_type)
    if value_type in ("boolean", "bool"):
        return SchemaProperty(type="boolean")
    if value_type == "date":
        return SchemaProperty(type="string", format="date")
    if value_type == "datetime":
        return SchemaProperty(type="string", format="date-time")
    if value_type == "image":
        return SchemaProperty(type="string", content_encoding="base64")
    if value_type == "array":
        return SchemaProperty(type="array", items=SchemaProperty(type="string"))
    return SchemaProperty(type="string")


# ---------------------------------------------------------------------------
# Generator
# ---------------------------------------------------------------------------


class W3CGenerator(Generator):
    name = FORMAT_NAME
    description = "W3C Verifiable Credential Data Model 2.0 schema"
    file_extension = "vc.json"

    def derive_identifier(self, parsed: ParsedCredential, config: Config) -> str:
        """The specific credential type (the last entry of ``type``)."""
        types = self.derive_types(parsed, config)
        return types[-1] if len(types) > 1 else ""

    def derive_types(self, parsed: ParsedCredential, config: Config) -> list[str]:
        types = resolve_precedence(
            parsed.w3c_types,
            override_list(parsed, self.name, "type"),
            lambda: self._default_types(parsed),
        )
        return ensure_base_type(types)

    def _default_types(self, parsed: ParsedCredential) -> list[str]:
        if parsed.name:
            return [pascal_case(parsed.name)]
        if parsed.id:
            return [pascal_case(parsed.id, r"[\s\-_]+")]
        return []

    def derive_context(self, parsed: ParsedCredential, config: Config) -> list[str]:
        return resolve_precedence(
            parsed.w3c_context,
            override_list(parsed, self.name, "context"),
            lambda: self._default_context(parsed, config),
        )

    def _default_context(self, parsed: ParsedCredential, config: Config) -> list[str]:
        contexts = [BASE_CONTEXT]
        if config.base_url and parsed.id:
            contexts.append(f"{config.base_url.rstrip('/')}/contexts/{parsed.id}/v1")
        return contexts

    def build(
        self, parsed: ParsedCredential, config: Config
    ) -> CredentialSchemaDocument:
        doc = CredentialSchemaDocument(
            type=self.derive_types(parsed, config),
            context=list(self.derive_context(parsed, config)),
            name=parsed.name,
            description=parsed.description,
        )

        if parsed.background_color or parsed.text_color:
            doc.display = Display(
                background_color=parsed.background_color,
                text_color=parsed.text_color,
            )

        if parsed.claims:
            doc.credential_schema = CredentialSchema(
                properties={"credentialSubject": self._build_subject(parsed)}
            )
        return doc

    def _build_subject(self, parsed: ParsedCredential) -> CredentialSubjectSchema:
        subject = CredentialSubjectSchema()
        for claim in parsed.claims:
            emitted = resolve_claim_name(claim, parsed, self.name)
            prop = map_type_to_json_schema(claim.type)
            prop.title = claim.label
            prop.description = claim.description
            subject.properties[emitted] = prop
            if claim.mandatory and emitted not in subject.required:
                subject.required.append(emitted)
        return subject
