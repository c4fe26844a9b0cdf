"""Batch conversion of a directory of credential markdown files.

Each document is written in every requested format under the output
directory, mirroring its path relative to the input directory. Local images
are copied to the output directory at the path written in the markdown, which
is where asset URLs built from the base URL point. A manifest of all
converted credentials is written to ``.well-known/vctm-registry.json``.
"""

import json
import os
import shutil
from dataclasses import asdict, dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from mtcvctm.config import Config
from mtcvctm.converter import generate, parse_to_credential
from mtcvctm.formats.base import GenerationError
from mtcvctm.formats.registry import FormatRegistry
from mtcvctm.formats.vctm import FORMAT_NAME as VCTM_FORMAT

MARKDOWN_EXTENSIONS = (".md", ".markdown")
SKIPPED_DIRS = ("node_modules", "vendor")

REGISTRY_VERSION = "1.0"
REGISTRY_PATH = os.path.join(".well-known", "vctm-registry.json")


# ---------------------------------------------------------------------------
# Registry manifest
# ---------------------------------------------------------------------------


@dataclass
class RepositoryInfo:
    url: str = ""
    owner: str = ""
    name: str = ""
    branch: str = ""
    commit: str = ""

    @classmethod
    def from_environment(cls, environ: dict[str, str] | None = None) -> "RepositoryInfo":
        """Read ``GITHUB_REPOSITORY``, ``GITHUB_REF_NAME`` and ``GITHUB_SHA``."""
        environ = os.environ if environ is None else environ
        info = cls(
            branch=environ.get("GITHUB_REF_NAME", ""),
            commit=environ.get("GITHUB_SHA", ""),
        )
        repo = environ.get("GITHUB_REPOSITORY", "")
        if repo:
            info.url = f"https://github.com/{repo}"
            owner, _, name = repo.partition("/")
            if name:
                info.owner, info.name = owner, name
        return info


@dataclass
class CredentialEntry:
    vct: str
    name: str
    source_file: str
    vctm_file: str
    last_modified: str


@dataclass
class RegistryManifest:
    version: str = REGISTRY_VERSION
    generated: str = ""
    repository: RepositoryInfo = field(default_factory=RepositoryInfo)
    credentials: list[CredentialEntry] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)

    def to_json(self) -> str:
        return json.dumps(self.to_dict(), indent=2, ensure_ascii=False) + "\n"


def utc_timestamp(moment: datetime | None = None) -> str:
    """RFC 3339 UTC timestamp with second precision."""
    moment = moment or datetime.now(timezone.utc)
    return moment.astimezone(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")


def file_last_modified(path: str | Path) -> str:
    """Modification time of ``path`` as an RFC 3339 UTC timestamp."""
    mtime = os.path.getmtime(path)
    return utc_timestamp(datetime.fromtimestamp(mtime, timezone.utc))


def write_registry(
    output_dir: str | Path,
    entries: list[CredentialEntry],
    environ: dict[str, str] | None = None,
) -> Path:
    """Write ``.well-known/vctm-registry.json`` under ``output_dir``.

    Returns:
        Path of the written manifest.
    """
    manifest = RegistryManifest(
        generated=utc_timestamp(),
        repository=RepositoryInfo.from_environment(environ),
        credentials=list(entries),
    )
    path = Path(output_dir) / REGISTRY_PATH
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(manifest.to_json(), encoding="utf-8")
    return path


# ---------------------------------------------------------------------------
# Documents
# ---------------------------------------------------------------------------


def find_markdown_files(directory: str | Path) -> list[str]:
    """Markdown files below ``directory``, sorted.

    Hidden directories, ``node_modules`` and ``vendor`` are not entered;
    files starting with ``_`` (templates) are skipped.
    """
    found = []
    for root, dirs, files in os.walk(directory):
        dirs[:] = [d for d in dirs if not d.startswith(".") and d not in SKIPPED_DIRS]
        for name in files:
            if name.startswith("_"):
                continue
            if name.lower().endswith(MARKDOWN_EXTENSIONS):
                found.append(os.path.join(root, name))
    return sorted(found)


@dataclass
class BatchResult:
    """Outcome of converting one markdown file."""

    source_file: str
    written: dict[str, str] = field(default_factory=dict)
    errors: dict[str, GenerationError] = field(default_factory=dict)
    copied_images: list[str] = field(default_factory=list)
    entry: CredentialEntry | None = None

    @property
    def ok(self) -> bool:
        return not self.errors


def process_file(
    md_file: str,
    input_dir: str | Path,
    output_dir: str | Path,
    format_names: list[str],
    config: Config,
    registry: FormatRegistry,
) -> BatchResult:
    """Convert one document and write its outputs.

    Args:
        md_file: Markdown file inside ``input_dir``.
        input_dir: Root of the scanned tree; output paths mirror the path
            of ``md_file`` relative to it.
        output_dir: Destination root.
        format_names: Resolved format names.
        config: Settings shared by the batch; ``input_file`` is set per file.
        registry: Generators to use.

    Raises:
        ParseError: If the document cannot be parsed.
        OSError: If an output file cannot be written.
    """
    file_config = Config(**asdict(config))
    file_config.input_file = md_file

    rel_path = os.path.relpath(md_file, input_dir)
    base_name = os.path.splitext(rel_path)[0]
    result = BatchResult(source_file=rel_path)

    cred = parse_to_credential(md_file, file_config)
    outputs, result.errors = generate(cred, format_names, file_config, registry)

    for format_name, data in outputs.items():
        output_path = Path(output_dir) / registry.output_file_name(base_name, format_name)
        output_path.parent.mkdir(parents=True, exist_ok=True)
        output_path.write_bytes(data)
        result.written[format_name] = str(output_path)

    for image in cred.images:
        if image.is_remote or os.path.isabs(image.path) or not image.absolute_path:
            continue
        destination = Path(output_dir) / image.path
        # Output tree is the input tree
        if destination.exists() and os.path.samefile(image.absolute_path, destination):
            continue
        destination.parent.mkdir(parents=True, exist_ok=True)
        shutil.copyfile(image.absolute_path, destination)
        result.copied_images.append(image.path)

    vctm = registry.get(VCTM_FORMAT)
    result.entry = CredentialEntry(
        vct=vctm.derive_identifier(cred, file_config) if vctm else "",
        name=cred.name,
        source_file=rel_path,
        vctm_file=f"{base_name}.vctm",
        last_modified=file_last_modified(md_file),
    )
    return result
