"""Claim declaration and locale override mini-grammars.

Claim declarations are single list items::

    `NAME` ["DISPLAY"] [(TYPE)] [:] DESCRIPTION

for example::

    `given_name` "Given Name" (string): Current first name [mandatory, sd=always]

Locale overrides are list items nested one level below a claim::

    LOCALE: ["LABEL"] [- ]DESCRIPTION

for example::

    de-DE: "Vorname" - Aktueller Vorname

Both grammars are filters, not validators: text that does not have the
right shape yields no result and is otherwise ignored.

Flags recognized inside ``[...]`` groups of a claim description:
``mandatory``, ``sd=<policy>`` and ``svg_id=<id>``. A legacy ``(mandatory)``
marker is also accepted.
"""

from dataclasses import dataclass

from mtcvctm.model import DEFAULT_VALUE_TYPE, ClaimDef, ClaimLocalization

BACKTICK = "`"
QUOTE = '"'

_MANDATORY = "mandatory"
_LEGACY_MANDATORY = "(mandatory)"
_SD_PREFIX = "sd="
_SVG_ID_PREFIX = "svg_id="


# ---------------------------------------------------------------------------
# Tagged results
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Claim:
    claim: ClaimDef


@dataclass(frozen=True)
class LocaleOverride:
    locale: str
    localization: ClaimLocalization


class _NoMatch:
    def __repr__(self) -> str:
        return "NO_MATCH"

    def __bool__(self) -> bool:
        return False


NO_MATCH = _NoMatch()

ParseResult = Claim | LocaleOverride | _NoMatch


# ---------------------------------------------------------------------------
# Scanner
# ---------------------------------------------------------------------------


class _Scanner:
    """Cursor over a single line of text."""

    def __init__(self, text: str) -> None:
        self.text = text
        self.pos = 0

    @property
    def done(self) -> bool:
        return self.pos >= len(self.text)

    def peek(self) -> str:
        return self.text[self.pos] if not self.done else ""

    def accept(self, char: str) -> bool:
        if self.peek() == char:
            self.pos += 1
            return True
        return False

    def skip_space(self) -> None:
        while not self.done and self.text[self.pos].isspace():
            self.pos += 1

    def delimited(self, opening: str, closing: str) -> str | None:
        """Read ``opening ... closing`` with non-empty content.

        Leaves the cursor untouched and returns None when the group is
        missing, unterminated or empty.
        """
        if self.peek() != opening:
            return None
        end = self.text.find(closing, self.pos + 1)
        if end <= self.pos + 1:
            return None
        content = self.text[self.pos + 1 : end]
        self.pos = end + 1
        return content

    def letters(self, minimum: int, maximum: int) -> str | None:
        start = self.pos
        while (
            not self.done
            and self.pos - start < maximum
            and self.text[self.pos].isascii()
            and self.text[self.pos].isalpha()
        ):
            self.pos += 1
        if self.pos - start < minimum:
            self.pos = start
            return None
        return self.text[start : self.pos]

    def rest(self) -> str:
        remainder = self.text[self.pos :]
        self.pos = len(self.text)
        return remainder


# ---------------------------------------------------------------------------
# Claim grammar
# ---------------------------------------------------------------------------


def parse_claim(text: str) -> ClaimDef | None:
    """Parse a claim declaration.

    Args:
        text: Flattened text of a list item, code spans kept in backticks.

    Returns:
        The ClaimDef, or None when the text is not a claim declaration.
    """
    scanner = _Scanner(text.strip())

    name = scanner.delimited(BACKTICK, BACKTICK)
    if name is None:
        return None

    scanner.skip_space()
    display_name = scanner.delimited(QUOTE, QUOTE) or ""

    scanner.skip_space()
    value_type = scanner.delimited("(", ")") or ""

    legacy_mandatory = False
    if value_type.strip().lower() == _MANDATORY:
        legacy_mandatory = True
        value_type = ""

    scanner.skip_space()
    scanner.accept(":")
    scanner.skip_space()

    claim = ClaimDef(
        name=name,
        display_name=display_name,
        type=value_type.strip().lower() or DEFAULT_VALUE_TYPE,
        mandatory=legacy_mandatory,
    )
    claim.description = _apply_flags(claim, scanner.rest())
    return claim


def _apply_flags(claim: ClaimDef, description: str) -> str:
    """Record bracketed and legacy flags on ``claim``; return the cleaned text."""
    groups, description = _strip_bracket_groups(description)

    for group in groups:
        for flag in group.split(","):
            flag = flag.strip()
            lowered = flag.lower()
            if lowered == _MANDATORY:
                claim.mandatory = True
            elif lowered.startswith(_SD_PREFIX):
                claim.sd = lowered[len(_SD_PREFIX) :].strip()
            elif lowered.startswith(_SVG_ID_PREFIX):
                claim.svg_id = flag[len(_SVG_ID_PREFIX) :].strip()

    lowered = description.lower()
    while _LEGACY_MANDATORY in lowered:
        start = lowered.index(_LEGACY_MANDATORY)
        end = start + len(_LEGACY_MANDATORY)
        description = description[:start] + " " + description[end:]
        lowered = description.lower()
        claim.mandatory = True

    return " ".join(description.split())


def _strip_bracket_groups(text: str) -> tuple[list[str], str]:
    """Remove every ``[...]`` group with non-empty content from ``text``."""
    groups: list[str] = []
    kept: list[str] = []
    scanner = _Scanner(text)

    while not scanner.done:
        if scanner.peek() == "[":
            group = scanner.delimited("[", "]")
            if group is not None:
                groups.append(group)
                kept.append(" ")
                continue
        kept.append(scanner.peek())
        scanner.pos += 1

    return groups, "".join(kept)


def format_claim(claim: ClaimDef) -> str:
    """Render ``claim`` back into canonical declaration syntax."""
    parts = [f"{BACKTICK}{claim.name}{BACKTICK}"]
    if claim.display_name:
        parts.append(f"{QUOTE}{claim.display_name}{QUOTE}")
    parts.append(f"({claim.type or DEFAULT_VALUE_TYPE}):")

    line = " ".join(parts)
    if claim.description:
        line += f" {claim.description}"

    flags = []
    if claim.mandatory:
        flags.append(_MANDATORY)
    if claim.sd:
        flags.append(f"{_SD_PREFIX}{claim.sd}")
    if claim.svg_id:
        flags.append(f"{_SVG_ID_PREFIX}{claim.svg_id}")
    if flags:
        line += f" [{', '.join(flags)}]"
    return line


# ---------------------------------------------------------------------------
# Locale override grammar
# ---------------------------------------------------------------------------


def _scan_locale(scanner: _Scanner) -> str | None:
    start = scanner.pos
    language = scanner.letters(2, 3)
    if language is None:
        return None

    if scanner.peek() == "-":
        scanner.pos += 1
        if scanner.letters(2, 4) is None:
            scanner.pos = start
            return None

    return scanner.text[start : scanner.pos]


def is_locale(tag: str) -> bool:
    """Whether ``tag`` has the ``ll[l][-Xxxx]`` shape of a locale code."""
    scanner = _Scanner(tag)
    return _scan_locale(scanner) is not None and scanner.done


def parse_localization(text: str) -> tuple[str, ClaimLocalization] | None:
    """Parse a locale override line such as ``en-US: "Label" - Description``.

    Returns:
        ``(locale, ClaimLocalization)`` or None when the text does not match.
    """
    scanner = _Scanner(text.strip())

    locale = _scan_locale(scanner)
    if locale is None or not scanner.accept(":"):
        return None

    scanner.skip_space()
    label = scanner.delimited(QUOTE, QUOTE) or ""

    scanner.skip_space()
    if scanner.accept("-"):
        scanner.skip_space()

    return locale, ClaimLocalization(label=label, description=scanner.rest().strip())


# ---------------------------------------------------------------------------
# Combined entry point
# ---------------------------------------------------------------------------


def parse_line(text: str, *, nested: bool = False) -> ParseResult:
    """Classify one list item.

    Top-level items can only be claims; items nested below a claim can only
    be locale overrides.
    """
    if nested:
        parsed = parse_localization(text)
        if parsed is None:
            return NO_MATCH
        return LocaleOverride(*parsed)

    claim = parse_claim(text)
    if claim is None:
        return NO_MATCH
    return Claim(claim)
