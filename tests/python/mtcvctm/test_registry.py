"""Tests for the format registry and the shared precedence helpers."""

import pytest

from mtcvctm.formats import (
    FormatError,
    FormatRegistry,
    NoFormatsError,
    UnknownFormatError,
    VctmGenerator,
    W3CGenerator,
    default_registry,
    resolve_precedence,
)
from mtcvctm.formats.base import override_int, override_list, override_str, reverse_domain
from mtcvctm.model import ParsedCredential


class TestFormatRegistry:
    def test_default_registry(self):
        registry = default_registry()
        assert registry.names() == ["mddl", "vctm", "w3c"]
        assert len(registry) == 3
        assert "vctm" in registry
        assert "pdf" not in registry

    def test_resolve_all_sorted_once(self, registry):
        assert registry.resolve("all") == ["mddl", "vctm", "w3c"]
        assert registry.resolve(" ALL ") == ["mddl", "vctm", "w3c"]

    def test_resolve_keeps_request_order(self, registry):
        assert registry.resolve("w3c, vctm") == ["w3c", "vctm"]

    def test_resolve_drops_duplicates_and_blanks(self, registry):
        assert registry.resolve("vctm,,vctm, mddl,") == ["vctm", "mddl"]

    def test_unknown_format_lists_available(self, registry):
        with pytest.raises(UnknownFormatError) as exc_info:
            registry.resolve("vctm,pdf")
        err = exc_info.value
        assert err.name == "pdf"
        assert err.available == ["mddl", "vctm", "w3c"]
        assert "mddl, vctm, w3c" in str(err)

    @pytest.mark.parametrize("requested", ["", "   ", ",", None])
    def test_empty_request(self, registry, requested):
        with pytest.raises(NoFormatsError):
            registry.resolve(requested)

    def test_duplicate_registration(self):
        registry = FormatRegistry([VctmGenerator()])
        with pytest.raises(FormatError, match="already registered"):
            registry.register(VctmGenerator())

    def test_override_registration(self):
        registry = FormatRegistry([VctmGenerator()])
        replacement = VctmGenerator()
        registry.register(replacement, override=True)
        assert registry.get("vctm") is replacement

    def test_registries_are_independent(self):
        first = FormatRegistry([W3CGenerator()])
        second = FormatRegistry()
        assert first.names() == ["w3c"]
        assert second.names() == []

    def test_iteration_sorted(self, registry):
        assert [g.name for g in registry] == ["mddl", "vctm", "w3c"]

    def test_every_generator_describes_itself(self, registry):
        for generator in registry:
            assert generator.description
            assert generator.file_extension.endswith("json")


class TestPrecedence:
    def test_explicit_wins(self):
        assert resolve_precedence("a", "b", lambda: "c") == "a"

    def test_override_second(self):
        assert resolve_precedence("", "b", lambda: "c") == "b"

    def test_derived_last(self):
        assert resolve_precedence("", "", lambda: "c") == "c"

    def test_derive_not_called_when_not_needed(self):
        def boom():
            raise AssertionError("should not derive")

        assert resolve_precedence(["x"], None, boom) == ["x"]


class TestOverrideHelpers:
    def _cred(self, **overrides):
        return ParsedCredential(format_overrides={"fmt": overrides})

    def test_override_str(self):
        assert override_str(self._cred(key=" v "), "fmt", "key") == "v"
        assert override_str(self._cred(key=3), "fmt", "key") == ""
        assert override_str(self._cred(), "other", "key") == ""

    def test_override_list(self):
        assert override_list(self._cred(key="one"), "fmt", "key") == ["one"]
        assert override_list(self._cred(key=["a", 1, "b"]), "fmt", "key") == ["a", "b"]
        assert override_list(self._cred(key={"a": 1}), "fmt", "key") == []

    def test_override_int(self):
        assert override_int(self._cred(order=4), "fmt", "order") == 4
        assert override_int(self._cred(order=True), "fmt", "order") is None
        assert override_int(self._cred(order="4"), "fmt", "order") is None


class TestReverseDomain:
    @pytest.mark.parametrize(
        "base_url, expected",
        [
            ("https://registry.siros.org", "org.siros.registry"),
            ("http://a.b.c/", "c.b.a"),
            ("example.com", "com.example"),
        ],
    )
    def test_reverse(self, base_url, expected):
        assert reverse_domain(base_url) == expected
