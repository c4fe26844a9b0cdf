"""Command-line interface.

Usage:
    mtcvctm generate credentials/pid.md --base-url https://registry.example.com
    mtcvctm generate pid.md --format all --output-dir dist/
    mtcvctm batch --input credentials/ --output dist/ --format vctm,w3c
    mtcvctm formats
"""

import argparse
import os
import sys
from pathlib import Path

from mtcvctm import __version__
from mtcvctm.batch import find_markdown_files, process_file, write_registry
from mtcvctm.config import DEFAULT_LANGUAGE, Config, ConfigError, default_config, load_from_file
from mtcvctm.converter import generate, output_file_name, parse_to_credential
from mtcvctm.formats import ALL_FORMATS, FormatError, FormatRegistry, default_registry
from mtcvctm.parser import ParseError


def cmd_generate(args: argparse.Namespace, registry: FormatRegistry) -> int:
    config = default_config()
    if args.config:
        config.merge(load_from_file(args.config))

    config.merge(
        Config(
            input_file=args.input,
            output_file=args.output or "",
            output_dir=args.output_dir or "",
            base_url=args.base_url or "",
            vct=args.vct or "",
            language=args.language or "",
            inline_images=False if args.no_inline_images else None,
            formats=args.format or "",
        )
    )
    config.validate()

    format_names = registry.resolve(config.formats)
    cred = parse_to_credential(config.input_file, config)
    outputs, errors = generate(cred, format_names, config, registry)

    out_dir = Path(config.output_dir or os.path.dirname(config.input_file))
    for format_name in format_names:
        if format_name not in outputs:
            continue
        if len(format_names) == 1 and config.output_file:
            output_path = Path(config.output_file)
        else:
            output_path = out_dir / output_file_name(config.input_stem, format_name, registry)

        output_path.parent.mkdir(parents=True, exist_ok=True)
        output_path.write_bytes(outputs[format_name])
        print(f"Generated {format_name}: {output_path}")

    for error in errors.values():
        print(f"Error: {error}", file=sys.stderr)
    return 1 if errors else 0


def cmd_batch(args: argparse.Namespace, registry: FormatRegistry) -> int:
    format_names = registry.resolve(args.format)

    md_files = find_markdown_files(args.input)
    if not md_files:
        print("No markdown files found")
        return 0

    config = Config(
        base_url=args.base_url or "",
        language=args.language,
        inline_images=not args.no_inline_images,
        formats=args.format,
    )

    entries = []
    failures = 0
    for md_file in md_files:
        print(f"Processing: {md_file}")
        try:
            result = process_file(md_file, args.input, args.output, format_names, config, registry)
        except (ParseError, OSError) as e:
            print(f"Error: {md_file}: {e}", file=sys.stderr)
            failures += 1
            continue

        for format_name, path in result.written.items():
            print(f"  -> Generated {format_name}: {path}")
        for image in result.copied_images:
            print(f"     Copied image: {image}")
        for error in result.errors.values():
            print(f"Error: {md_file}: {error}", file=sys.stderr)

        if not result.ok:
            failures += 1
        if result.entry is not None:
            entries.append(result.entry)

    registry_path = write_registry(args.output, entries)
    print(f"\nGenerated registry with {len(entries)} credential(s)")
    print(f"Registry: {registry_path}")

    return 1 if failures else 0


def cmd_formats(args: argparse.Namespace, registry: FormatRegistry) -> int:
    print("Available formats:")
    for generator in registry:
        print(f"  {generator.name:<6} {generator.description} (*.{generator.file_extension})")
    print(f"  {ALL_FORMATS:<6} Generate every format")
    return 0


def cmd_version(args: argparse.Namespace, registry: FormatRegistry) -> int:
    print(f"mtcvctm {__version__}")
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="mtcvctm",
        description="Generate credential metadata (SD-JWT VC, mso_mdoc, W3C VC) from markdown",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  mtcvctm generate credential.md
  mtcvctm generate credential.md --format all --base-url https://registry.example.com
  mtcvctm batch --input ./credentials --output ./dist --format vctm,mddl
        """,
    )
    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # generate
    gen = subparsers.add_parser(
        "generate",
        help="Generate metadata for one markdown file",
        description="Convert one credential markdown file into the requested formats.",
    )
    gen.add_argument("input", help="Input markdown file")
    gen.add_argument("--output", "-o", help="Output file (single format only)")
    gen.add_argument("--output-dir", help="Output directory (default: input directory)")
    gen.add_argument("--base-url", help="Base URL for image and identifier URLs")
    gen.add_argument("--vct", help="Explicit VCT identifier")
    gen.add_argument("--language", help=f"Default display locale (default: {DEFAULT_LANGUAGE})")
    gen.add_argument("--config", "-c", help="YAML configuration file")
    gen.add_argument(
        "--no-inline-images",
        action="store_true",
        help="Reference images by URL instead of embedding data URIs",
    )
    gen.add_argument(
        "--format",
        "-f",
        help="Output format(s): comma-separated names or 'all' (default: vctm)",
    )

    # batch
    batch = subparsers.add_parser(
        "batch",
        help="Convert a directory of markdown files and write a registry",
        description=(
            "Convert every markdown file below a directory and write "
            ".well-known/vctm-registry.json."
        ),
    )
    batch.add_argument("--input", "-i", default=".", help="Input directory")
    batch.add_argument("--output", "-o", default=".", help="Output directory")
    batch.add_argument("--base-url", help="Base URL for image and identifier URLs")
    batch.add_argument("--language", default=DEFAULT_LANGUAGE, help="Default display locale")
    batch.add_argument(
        "--no-inline-images",
        action="store_true",
        help="Reference images by URL instead of embedding data URIs",
    )
    batch.add_argument(
        "--format", "-f", default="vctm", help="Output format(s): comma-separated names or 'all'"
    )

    subparsers.add_parser("formats", help="List available output formats")
    subparsers.add_parser("version", help="Print the version")

    return parser


COMMANDS = {
    "generate": cmd_generate,
    "batch": cmd_batch,
    "formats": cmd_formats,
    "version": cmd_version,
}


def main(argv: list[str] | None = None) -> int:
    """CLI entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        return 0

    registry = default_registry()
    try:
        return COMMANDS[args.command](args, registry)
    except (ConfigError, FormatError, ParseError, OSError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
