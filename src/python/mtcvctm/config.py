"""Conversion settings.

Settings come from defaults, an optional YAML config file and command-line
flags, merged in that order::

    input: credentials/pid.md
    base_url: https://registry.example.com
    language: en-US
    formats: vctm,mddl
"""

import os
from dataclasses import dataclass, fields
from pathlib import Path

import yaml

from mtcvctm.frontmatter import load_yaml

DEFAULT_LANGUAGE = "en-US"
DEFAULT_FORMATS = "vctm"

# YAML key -> Config attribute
_FILE_KEYS = {
    "input": "input_file",
    "output": "output_file",
    "output_dir": "output_dir",
    "base_url": "base_url",
    "vct": "vct",
    "language": "language",
    "inline_images": "inline_images",
    "formats": "formats",
}


class ConfigError(ValueError):
    """Invalid or unreadable configuration."""

    pass


@dataclass
class Config:
    """Settings for converting one markdown document.

    Fields left empty are unset, so that merging can tell "unset" from
    "disabled". Unset ``language`` reads as ``en-US`` through
    ``display_language`` and unset ``inline_images`` reads as enabled through
    ``inline``.
    """

    input_file: str = ""
    output_file: str = ""
    output_dir: str = ""
    base_url: str = ""
    vct: str = ""
    language: str = ""
    inline_images: bool | None = None
    formats: str = ""

    @property
    def inline(self) -> bool:
        return self.inline_images is not False

    @property
    def display_language(self) -> str:
        return self.language or DEFAULT_LANGUAGE

    @property
    def input_stem(self) -> str:
        return Path(self.input_file).stem if self.input_file else ""

    def merge(self, other: "Config") -> None:
        """Overlay the non-empty values of ``other`` onto this config."""
        for f in fields(self):
            value = getattr(other, f.name)
            if value is None or value == "":
                continue
            setattr(self, f.name, value)

    def validate(self) -> None:
        """Check that the input file is set and exists.

        Raises:
            ConfigError: If validation fails.
        """
        if not self.input_file:
            raise ConfigError("config: input file is required")
        if not os.path.exists(self.input_file):
            raise ConfigError(f"config: input file does not exist: {self.input_file}")

    def get_output_file(self) -> str:
        """Explicit output path, else ``<input dir>/<stem>.vctm``."""
        if self.output_file:
            return self.output_file
        return os.path.join(os.path.dirname(self.input_file), f"{self.input_stem}.vctm")

    def get_vct(self) -> str:
        """Explicit vct, else ``<base_url>/<input stem>`` when a base URL is set."""
        if self.vct:
            return self.vct
        if self.base_url:
            return f"{self.base_url.rstrip('/')}/{self.input_stem}"
        return ""

    def to_dict(self) -> dict:
        data = {}
        for key, attr in _FILE_KEYS.items():
            value = getattr(self, attr)
            if value is not None and value != "":
                data[key] = value
        return data

    def save(self, path: str | Path) -> None:
        """Write the config as YAML."""
        try:
            Path(path).write_text(yaml.safe_dump(self.to_dict(), sort_keys=False))
        except OSError as e:
            raise ConfigError(f"config: failed to write file {path}: {e}") from e


def default_config() -> Config:
    return Config(language=DEFAULT_LANGUAGE, inline_images=True, formats=DEFAULT_FORMATS)


def load_from_file(path: str | Path) -> Config:
    """Load a YAML config file on top of the defaults.

    Raises:
        ConfigError: If the file cannot be read or is not a YAML mapping.
    """
    try:
        text = Path(path).read_text(encoding="utf-8")
    except OSError as e:
        raise ConfigError(f"config: failed to read file {path}: {e}") from e

    try:
        data = load_yaml(text)
    except yaml.YAMLError as e:
        raise ConfigError(f"config: failed to parse YAML in {path}: {e}") from e

    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise ConfigError(f"config: {path} must contain a YAML mapping")

    loaded = Config()
    for key, attr in _FILE_KEYS.items():
        if key not in data or data[key] is None:
            continue
        value = data[key]
        if attr == "inline_images":
            if not isinstance(value, bool):
                raise ConfigError(f"config: 'inline_images' must be a boolean in {path}")
        else:
            value = str(value)
        setattr(loaded, attr, value)

    config = default_config()
    config.merge(loaded)
    return config
