"""Tests for the W3C VC schema generator."""

import json

import pytest

from mtcvctm.formats import CredentialSchemaDocument, ValidationError, W3CGenerator
from mtcvctm.formats.w3c import map_type_to_json_schema, pascal_case
from mtcvctm.model import ClaimDefinition, ParsedCredential


def _generate(cred, config):
    return json.loads(W3CGenerator().generate(cred, config))


class TestTypes:
    def test_derived_from_name(self, config):
        cred = ParsedCredential(id="pid", name="Person Identification Data")
        assert _generate(cred, config)["type"] == [
            "VerifiableCredential",
            "PersonIdentificationData",
        ]

    def test_hyphens_removed(self, config):
        cred = ParsedCredential(name="Proof-of-age credential")
        assert W3CGenerator().derive_types(cred, config) == [
            "VerifiableCredential",
            "ProofOfAgeCredential",
        ]

    def test_derived_from_id(self, config):
        cred = ParsedCredential(id="student_id")
        assert W3CGenerator().derive_types(cred, config) == ["VerifiableCredential", "StudentId"]

    def test_override_list(self, pid_credential, config):
        assert _generate(pid_credential, config)["type"] == [
            "VerifiableCredential",
            "PersonIdentificationCredential",
        ]

    def test_override_string(self, config):
        cred = ParsedCredential(name="X", format_overrides={"w3c": {"type": "DiplomaCredential"}})
        assert W3CGenerator().derive_types(cred, config) == [
            "VerifiableCredential",
            "DiplomaCredential",
        ]

    def test_explicit_types_get_base_type_first(self, config):
        cred = ParsedCredential(w3c_types=["EmployeeCredential", "VerifiableCredential"])
        assert W3CGenerator().derive_types(cred, config) == [
            "VerifiableCredential",
            "EmployeeCredential",
        ]

    def test_identifier_is_specific_type(self, pid_credential, config):
        assert W3CGenerator().derive_identifier(pid_credential, config) == (
            "PersonIdentificationCredential"
        )

    def test_identifier_empty_without_name_or_id(self, config):
        assert W3CGenerator().derive_identifier(ParsedCredential(), config) == ""


class TestContext:
    def test_default(self, pid_credential, config):
        assert _generate(pid_credential, config)["@context"] == [
            "https://www.w3.org/2018/credentials/v1"
        ]

    def test_with_base_url(self, url_config):
        cred = ParsedCredential(id="pid", name="PID")
        assert _generate(cred, url_config)["@context"] == [
            "https://www.w3.org/2018/credentials/v1",
            "https://registry.example.com/contexts/pid/v1",
        ]

    def test_override(self, config):
        cred = ParsedCredential(
            name="X",
            format_overrides={"w3c": {"context": ["https://www.w3.org/ns/credentials/v2"]}},
        )
        assert _generate(cred, config)["@context"] == ["https://www.w3.org/ns/credentials/v2"]

    def test_explicit(self, config):
        cred = ParsedCredential(name="X", w3c_context=["https://example.com/ctx"])
        assert _generate(cred, config)["@context"] == ["https://example.com/ctx"]


class TestSchema:
    def test_subject_schema(self, pid_credential, config):
        doc = _generate(pid_credential, config)
        subject = doc["credentialSchema"]["properties"]["credentialSubject"]
        assert doc["credentialSchema"]["type"] == "JsonSchema"
        assert subject["type"] == "object"
        assert list(subject["properties"]) == [
            "givenName",
            "family_name",
            "birth_date",
            "address.street",
        ]
        assert subject["properties"]["givenName"] == {
            "type": "string",
            "title": "Given Name",
            "description": "Current first name",
        }
        assert subject["properties"]["birth_date"]["format"] == "date"
        assert subject["required"] == ["givenName", "family_name"]

    def test_display_colors(self, pid_credential, config):
        assert _generate(pid_credential, config)["display"] == {
            "backgroundColor": "#12107c",
            "textColor": "#FFFFFF",
        }

    def test_no_claims_no_schema(self, config):
        doc = _generate(ParsedCredential(name="Empty"), config)
        assert "credentialSchema" not in doc
        assert "display" not in doc

    def test_per_claim_mapping_beats_bulk(self, config):
        claim = ClaimDefinition(name="email", format_mappings={"w3c": "emailAddress"})
        cred = ParsedCredential(
            name="X",
            claims=[claim],
            claim_mappings={"w3c": {"email": "mail"}},
        )
        properties = _generate(cred, config)["credentialSchema"]["properties"]
        assert list(properties["credentialSubject"]["properties"]) == ["emailAddress"]

    def test_round_trip(self, pid_credential, config):
        document = W3CGenerator().build(pid_credential, config)
        assert CredentialSchemaDocument.from_json(document.to_json()) == document


class TestValidation:
    def test_base_type_required_first(self):
        doc = CredentialSchemaDocument(type=["Other"], context=["https://x"])
        with pytest.raises(ValidationError, match="VerifiableCredential"):
            doc.validate()

    def test_context_required(self):
        doc = CredentialSchemaDocument(type=["VerifiableCredential"])
        with pytest.raises(ValidationError, match="@context"):
            doc.validate()


class TestJsonSchemaTypes:
    @pytest.mark.parametrize(
        "value_type, expected",
        [
            ("string", {"type": "string"}),
            ("number", {"type": "number"}),
            ("integer", {"type": "integer"}),
            ("bool", {"type": "boolean"}),
            ("date", {"type": "string", "format": "date"}),
            ("datetime", {"type": "string", "format": "date-time"}),
            ("image", {"type": "string", "contentEncoding": "base64"}),
            ("object", {"type": "object"}),
            ("array", {"type": "array", "items": {"type": "string"}}),
            ("unknown", {"type": "string"}),
        ],
    )
    def test_mapping(self, value_type, expected):
        assert map_type_to_json_schema(value_type).to_dict() == expected


class TestPascalCase:
    @pytest.mark.parametrize(
        "text, expected",
        [
            ("Person Identification Data", "PersonIdentificationData"),
            ("mobile driving licence", "MobileDrivingLicence"),
            ("EU-PID", "EUPID"),
            ("  spaced   out ", "SpacedOut"),
        ],
    )
    def test_words(self, text, expected):
        assert pascal_case(text) == expected
