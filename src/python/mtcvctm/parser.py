"""Markdown structure walker.

Reads a credential markdown document and extracts:
- the title (first level-1 heading)
- the description (first paragraph after the title)
- named sections (paragraph text under each further heading)
- image references, resolved against the document directory
- claim declarations with nested locale overrides (list items)

List items are handed to the claim grammar in ``mtcvctm.claims``; the
generic walk never descends into lists.
"""

import os
from pathlib import Path

from markdown_it import MarkdownIt
from markdown_it.tree import SyntaxTreeNode

from mtcvctm.claims import Claim, LocaleOverride, parse_line
from mtcvctm.frontmatter import extract_front_matter
from mtcvctm.model import ClaimDef, ImageRef, ParsedMarkdown

# Pseudo-section that collects text between the title and the next heading
TITLE_SECTION = "_title"

_LIST_TYPES = ("bullet_list", "ordered_list")
_BREAK_TYPES = ("softbreak", "hardbreak")


class ParseError(Exception):
    """Raised when a markdown document cannot be read or walked."""

    def __init__(self, message: str, path: str | None = None):
        self.path = path
        if path:
            message = f"{path}: {message}"
        super().__init__(message)


def parse_file(path: str | Path) -> ParsedMarkdown:
    """Read and parse a markdown file.

    Raises:
        ParseError: If the file cannot be read or the walk fails.
    """
    path = Path(path)
    try:
        content = path.read_bytes()
    except OSError as e:
        raise ParseError(f"failed to read file: {e}", str(path)) from e
    return parse_content(content, str(path))


def parse_content(content: str | bytes, base_path: str = "") -> ParsedMarkdown:
    """Parse markdown content.

    Args:
        content: Full document including optional front matter.
        base_path: Path of the document; relative image paths are resolved
            against its directory.

    Returns:
        ParsedMarkdown for the document.

    Raises:
        ParseError: If the content is not UTF-8 or the walk fails.
    """
    if isinstance(content, bytes):
        try:
            content = content.decode("utf-8")
        except UnicodeDecodeError as e:
            raise ParseError(f"document is not valid UTF-8: {e}", base_path) from e

    front_matter = extract_front_matter(content)
    walker = _StructureWalker(os.path.dirname(base_path))

    try:
        tree = SyntaxTreeNode(MarkdownIt("commonmark").parse(front_matter.body))
        walker.walk(tree)
    except ParseError:
        raise
    except Exception as e:
        raise ParseError(f"failed to walk markdown tree: {e}", base_path) from e

    return ParsedMarkdown(
        title=walker.title,
        description=walker.description,
        sections=walker.sections,
        images=tuple(walker.images),
        claims=walker.claims,
        metadata=front_matter.metadata,
        display_localizations=front_matter.display,
        format_overrides=front_matter.formats,
    )


class _StructureWalker:
    """Single pre-order pass over the syntax tree."""

    def __init__(self, base_dir: str) -> None:
        self.base_dir = base_dir
        self.title = ""
        self.description = ""
        self.sections: dict[str, str] = {}
        self.images: list[ImageRef] = []
        self.claims: dict[str, ClaimDef] = {}

        self._section = ""
        self._buffer: list[str] = []

    def walk(self, root: SyntaxTreeNode) -> None:
        self._visit(root)
        self._flush()

    def _visit(self, node: SyntaxTreeNode) -> None:
        if node.type == "heading":
            self._enter_heading(node)
        elif node.type == "paragraph":
            self._enter_paragraph(node)
        elif node.type == "image":
            self._enter_image(node)
        elif node.type in _LIST_TYPES:
            self._enter_list(node)
            return

        for child in node.children:
            self._visit(child)

    def _flush(self) -> None:
        if self._section:
            self.sections[self._section] = "\n\n".join(self._buffer).strip()
        self._buffer = []

    def _enter_heading(self, node: SyntaxTreeNode) -> None:
        self._flush()
        text = extract_text(node)
        if node.tag == "h1" and not self.title:
            self.title = text
            self._section = TITLE_SECTION
        else:
            self._section = text

    def _enter_paragraph(self, node: SyntaxTreeNode) -> None:
        text = extract_text(node)
        if self._section == TITLE_SECTION and not self.description:
            self.description = text
        else:
            self._buffer.append(text)

    def _enter_image(self, node: SyntaxTreeNode) -> None:
        src = str(node.attrs.get("src", ""))
        self.images.append(
            ImageRef(
                path=src,
                alt_text=extract_text(node),
                absolute_path=resolve_path(self.base_dir, src),
            )
        )

    def _enter_list(self, node: SyntaxTreeNode) -> None:
        for item in node.children:
            if item.type != "list_item":
                continue
            parsed = parse_line(_item_text(item))
            if not isinstance(parsed, Claim):
                continue
            claim = parsed.claim

            for child in item.children:
                if child.type not in _LIST_TYPES:
                    continue
                for nested in child.children:
                    override = parse_line(_item_text(nested), nested=True)
                    if isinstance(override, LocaleOverride):
                        claim.localizations[override.locale] = override.localization

            self.claims[claim.name] = claim


def _item_text(item: SyntaxTreeNode) -> str:
    """Text of the first paragraph of a list item."""
    for child in item.children:
        if child.type == "paragraph":
            return extract_text(child)
    return ""


def extract_text(node: SyntaxTreeNode) -> str:
    """Concatenate the text runs below ``node``.

    Code spans keep their backticks so claim names survive; line breaks
    collapse to a single space.
    """
    return _collect_text(node).strip()


def _collect_text(node: SyntaxTreeNode) -> str:
    parts = []
    for child in node.children:
        if child.type == "text":
            parts.append(child.content)
        elif child.type == "code_inline":
            parts.append(f"`{child.content}`")
        elif child.type in _BREAK_TYPES:
            parts.append(" ")
        else:
            parts.append(_collect_text(child))
    return "".join(parts)


def resolve_path(base_dir: str, path: str) -> str:
    """Resolve a relative, non-URL ``path`` against ``base_dir``."""
    if not path or os.path.isabs(path) or path.startswith("http"):
        return path
    return os.path.abspath(os.path.join(base_dir, path))
