"""Tests for YAML front matter extraction."""

import warnings

import pytest

from mtcvctm.frontmatter import FrontMatterWarning, extract_front_matter, split_front_matter

DOCUMENT = """---
vct: https://example.com/pid
background_color: "#12107c"
version: 3
display:
  de-DE:
    name: Personalausweis
    description: Ausweisdaten
  sv:
    name: Personbevis
formats:
  mddl:
    doctype: eu.europa.ec.eudi.pid.1
  broken: not-a-mapping
---

# Title
"""


class TestExtractFrontMatter:
    def test_flat_metadata_keeps_strings_only(self):
        fm = extract_front_matter(DOCUMENT)
        assert fm.has_front_matter is True
        assert fm.metadata["vct"] == "https://example.com/pid"
        assert fm.metadata["background_color"] == "#12107c"
        assert "version" not in fm.metadata
        assert "display" not in fm.metadata

    def test_display_localizations(self):
        fm = extract_front_matter(DOCUMENT)
        assert set(fm.display) == {"de-DE", "sv"}
        assert fm.display["de-DE"].name == "Personalausweis"
        assert fm.display["de-DE"].description == "Ausweisdaten"
        assert fm.display["sv"].description == ""

    def test_format_overrides_keep_mappings_only(self):
        fm = extract_front_matter(DOCUMENT)
        assert fm.formats == {"mddl": {"doctype": "eu.europa.ec.eudi.pid.1"}}

    def test_body_follows_closing_fence(self):
        fm = extract_front_matter(DOCUMENT)
        assert fm.body.lstrip().startswith("# Title")
        assert "vct:" not in fm.body

    def test_bytes_input(self):
        fm = extract_front_matter(DOCUMENT.encode("utf-8"))
        assert fm.metadata["vct"] == "https://example.com/pid"


class TestLenientCases:
    def test_no_front_matter_is_silent(self):
        content = "# Title\n\nText\n"
        with warnings.catch_warnings():
            warnings.simplefilter("error")
            fm = extract_front_matter(content)
        assert fm.has_front_matter is False
        assert fm.metadata == {}
        assert fm.display == {}
        assert fm.body == content

    def test_missing_closing_fence_warns(self):
        content = "---\nvct: x\n\n# Title\n"
        with pytest.warns(FrontMatterWarning, match="closing fence"):
            fm = extract_front_matter(content)
        assert fm.metadata == {}
        assert fm.body == content

    def test_invalid_yaml_warns(self):
        content = "---\nvct: [unclosed\n---\n# Title\n"
        with pytest.warns(FrontMatterWarning, match="not valid YAML"):
            fm = extract_front_matter(content)
        assert fm.metadata == {}
        assert fm.has_front_matter is False
        assert fm.body == "# Title\n"

    def test_non_mapping_warns(self):
        with pytest.warns(FrontMatterWarning, match="mapping"):
            fm = extract_front_matter("---\n- a\n- b\n---\nBody\n")
        assert fm.metadata == {}

    def test_display_entry_not_mapping_warns(self):
        content = "---\ndisplay:\n  de: Personalausweis\n  sv:\n    name: Personbevis\n---\n"
        with pytest.warns(FrontMatterWarning, match="'de'"):
            fm = extract_front_matter(content)
        assert set(fm.display) == {"sv"}

    def test_empty_block(self):
        fm = extract_front_matter("---\n---\nBody\n")
        assert fm.has_front_matter is True
        assert fm.metadata == {}
        assert fm.body == "Body\n"

    def test_fence_must_start_document(self):
        content = "Intro\n---\nvct: x\n---\n"
        block, body = split_front_matter(content)
        assert block is None
        assert body == content


class TestYamlScalars:
    def test_locale_keys_that_look_like_booleans(self):
        content = (
            "---\n"
            "display:\n"
            "  no:\n"
            "    name: Personbevis NO\n"
            "  on:\n"
            "    name: X\n"
            "---\n"
            "# PID\n"
        )
        fm = extract_front_matter(content)
        assert set(fm.display) == {"no", "on"}
        assert fm.display["no"].name == "Personbevis NO"

    def test_format_keys_and_values_stay_strings(self):
        fm = extract_front_matter("---\nstatus: yes\nformats:\n  off:\n    order: 1\n---\n")
        assert fm.metadata["status"] == "yes"
        assert fm.formats == {"off": {"order": 1}}

    def test_true_and_false_are_booleans(self):
        fm = extract_front_matter("---\nformats:\n  mddl:\n    enabled: true\n    legacy: False\n---\n")
        assert fm.formats["mddl"] == {"enabled": True, "legacy": False}
