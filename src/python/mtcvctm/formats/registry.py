"""Name-keyed registry of format generators.

A registry is built once at startup (see ``mtcvctm.formats.default_registry``)
and handed to the conversion pipeline; lookups may come from several threads.
"""

import threading
from typing import Iterator

from mtcvctm.formats.base import Generator

ALL_FORMATS = "all"


class FormatError(ValueError):
    """A requested format list could not be resolved."""

    pass


class UnknownFormatError(FormatError):
    """A requested format name is not registered."""

    def __init__(self, name: str, available: list[str]):
        self.name = name
        self.available = available
        super().__init__(f"unknown format: {name} (available: {', '.join(available)})")


class NoFormatsError(FormatError):
    """The format request was empty."""

    def __init__(self) -> None:
        super().__init__("no formats resolved: specify one or more formats or 'all'")


class FormatRegistry:
    """Registry of generators keyed by ``Generator.name``."""

    def __init__(self, generators: list[Generator] | None = None) -> None:
        self._lock = threading.Lock()
        self._generators: dict[str, Generator] = {}
        for generator in generators or []:
            self.register(generator)

    def register(self, generator: Generator, *, override: bool = False) -> None:
        """Add a generator.

        Raises:
            FormatError: If the name is taken and ``override`` is not set.
        """
        if not generator.name:
            raise FormatError(f"{generator!r} has no format name")
        with self._lock:
            if generator.name in self._generators and not override:
                raise FormatError(
                    f"format '{generator.name}' is already registered. "
                    f"Use override=True to replace."
                )
            self._generators[generator.name] = generator

    def get(self, name: str) -> Generator | None:
        with self._lock:
            return self._generators.get(name)

    def names(self) -> list[str]:
        """Registered format names, sorted."""
        with self._lock:
            return sorted(self._generators)

    def generators(self) -> list[Generator]:
        with self._lock:
            return [self._generators[name] for name in sorted(self._generators)]

    def resolve(self, requested: str) -> list[str]:
        """Resolve ``"all"`` or a comma-separated list of format names.

        Returns:
            Format names in request order without duplicates (``"all"``
            yields every registered name, sorted).

        Raises:
            UnknownFormatError: If a name is not registered.
            NoFormatsError: If nothing was requested.
        """
        requested = (requested or "").strip()
        if requested.lower() == ALL_FORMATS:
            return self.names()

        resolved: list[str] = []
        for part in requested.split(","):
            name = part.strip()
            if not name:
                continue
            if self.get(name) is None:
                raise UnknownFormatError(name, self.names())
            if name not in resolved:
                resolved.append(name)

        if not resolved:
            raise NoFormatsError()
        return resolved

    def output_file_name(self, base_name: str, format_name: str) -> str:
        """``<base_name>.<extension>`` for the format (its name if unknown)."""
        generator = self.get(format_name)
        extension = generator.file_extension if generator else format_name
        return f"{base_name}.{extension}"

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and self.get(name) is not None

    def __iter__(self) -> Iterator[Generator]:
        return iter(self.generators())

    def __len__(self) -> int:
        with self._lock:
            return len(self._generators)
