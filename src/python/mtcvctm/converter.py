"""Build the format-agnostic credential model and run the generators.

    parsed = parse_to_credential("credentials/pid.md", config)
    outputs, errors = generate(parsed, ["vctm", "mddl"], config, registry)
"""

import os
from pathlib import Path

from mtcvctm.config import Config
from mtcvctm.formats.base import GenerationError
from mtcvctm.formats.registry import FormatRegistry
from mtcvctm.model import ClaimDefinition, ParsedCredential, ParsedMarkdown
from mtcvctm.parser import parse_content, parse_file

# Front matter key -> ParsedCredential attribute; values are quote-stripped
_ROUTED_KEYS = {
    "id": "id",
    "vct": "vct",
    "doctype": "doctype",
    "namespace": "namespace",
    "background_color": "background_color",
    "text_color": "text_color",
    "logo": "logo_path",
    "svg_template": "svg_template_path",
    "svg_template_uri": "svg_template_uri",
    "svg_template_integrity": "svg_template_integrity",
}


def to_credential(
    parsed: ParsedMarkdown, config: Config, source_path: str = ""
) -> ParsedCredential:
    """Convert walker output into a ParsedCredential.

    Args:
        parsed: Output of ``mtcvctm.parser.parse_file``/``parse_content``.
        config: Conversion settings (input file, inline mode).
        source_path: Path of the markdown document; defaults to
            ``config.input_file``.

    Returns:
        The credential model. No validation happens here; generators reject
        what they cannot use.
    """
    source_path = source_path or config.input_file
    cred = ParsedCredential(
        name=parsed.title,
        description=parsed.description,
        inline_images=config.inline,
        localizations=dict(parsed.display_localizations),
        images=list(parsed.images),
    )

    if source_path:
        cred.source_path = source_path
        cred.source_dir = os.path.dirname(source_path)
        cred.id = Path(source_path).stem

    for key, value in parsed.metadata.items():
        cred.metadata[key] = value
        attr = _ROUTED_KEYS.get(key)
        if attr:
            setattr(cred, attr, value.strip().strip('"'))

    for name, claim in parsed.claims.items():
        cred.claims.append(
            ClaimDefinition(
                name=name,
                path=name.split("."),
                display_name=claim.display_name,
                type=claim.type,
                description=claim.description,
                mandatory=claim.mandatory,
                sd=claim.sd,
                svg_id=claim.svg_id,
                localizations=dict(claim.localizations),
            )
        )

    if not cred.logo_path:
        for image in cred.raster_images:
            cred.logo_path = image.path
            cred.logo_alt_text = image.alt_text
            cred.logo_abs_path = image.absolute_path
            break

    if cred.logo_path and not cred.logo_abs_path and cred.source_dir:
        if cred.logo_path.startswith("http") or os.path.isabs(cred.logo_path):
            cred.logo_abs_path = cred.logo_path
        else:
            cred.logo_abs_path = os.path.join(cred.source_dir, cred.logo_path)

    for format_name, overrides in parsed.format_overrides.items():
        cred.format_overrides[format_name] = dict(overrides)
        mapping = overrides.get("claims")
        if isinstance(mapping, dict):
            cred.claim_mappings[format_name] = {
                str(k): str(v) for k, v in mapping.items() if v is not None
            }

    return cred


def parse_to_credential(path: str | Path, config: Config) -> ParsedCredential:
    """Parse a markdown file into a ParsedCredential.

    Raises:
        ParseError: If the file cannot be read or parsed.
    """
    return to_credential(parse_file(path), config, str(path))


def parse_content_to_credential(
    content: str | bytes, base_path: str, config: Config
) -> ParsedCredential:
    """Parse in-memory markdown as if it were the file at ``base_path``."""
    return to_credential(parse_content(content, base_path), config, base_path)


def generate(
    cred: ParsedCredential,
    format_names: list[str],
    config: Config,
    registry: FormatRegistry,
) -> tuple[dict[str, bytes], dict[str, GenerationError]]:
    """Run each named generator over ``cred``.

    A failing format does not stop the others.

    Returns:
        ``(outputs, errors)``: serialized documents and generation errors,
        both keyed by format name.
    """
    outputs: dict[str, bytes] = {}
    errors: dict[str, GenerationError] = {}

    for name in format_names:
        generator = registry.get(name)
        if generator is None:
            continue
        try:
            outputs[name] = generator.generate(cred, config)
        except GenerationError as e:
            errors[name] = e

    return outputs, errors


def output_file_name(base_name: str, format_name: str, registry: FormatRegistry) -> str:
    """``<base_name>.<extension>`` for the format."""
    return registry.output_file_name(base_name, format_name)
