"""Reader for the simple INI files that describe tester tasks."""

from __future__ import annotations

import re
import sys
from collections.abc import Callable, Iterable

_SECTION_RX = re.compile(r"\[([a-zA-Z0-9._]+)\]\s*(?:;.*)?")
_VALUE_RX = re.compile(r"([a-zA-Z0-9._]+)\s*=\s*([a-zA-Z0-9._/]+)\s*(?:;.*)?")
_STRING_VALUE_RX = re.compile(r'([a-zA-Z0-9._]+)\s*=\s*"([^"]+)"\s*(?:;.*)?')


class ConfigError(RuntimeError):
    """Raised for a missing file or an inconsistent configuration."""


class ConfigMap:
    """Sections of key/value pairs read from an INI file."""

    def __init__(self) -> None:
        self._data: dict[str, dict[str, str]] = {}
        self._section = ""

    def _new_section(self, match: re.Match) -> None:
        name = match.group(1)
        if name in self._data:
            raise ConfigError(f"section {name} already defined")
        self._section = name
        self._data[name] = {}

    def _add_key_value_pair(self, match: re.Match) -> None:
        if not self._section:
            raise ConfigError("key value pair outside section")
        key, value = match.group(1), match.group(2)
        values = self._data[self._section]
        if key in values:
            raise ConfigError(f"key {key} already defined")
        values[key] = value

    def _handlers(self) -> list[tuple[re.Pattern, Callable[[re.Match], None]]]:
        return [
            (_SECTION_RX, self._new_section),
            (_VALUE_RX, self._add_key_value_pair),
            (_STRING_VALUE_RX, self._add_key_value_pair),
        ]

    def read_ini(self, filename: str) -> None:
        """Read and parse the INI file ``filename``."""
        try:
            with open(filename, encoding="utf-8") as stream:
                self.parse_lines(stream)
        except OSError as exc:
            raise ConfigError(f"Config file {filename} not found") from exc

    def parse_lines(self, lines: Iterable[str]) -> None:
        """Parse INI lines; lines that match nothing are reported and skipped."""
        self._section = ""
        handlers = self._handlers()
        for line_count, raw in enumerate(lines, start=1):
            line = raw[:-1] if raw.endswith("\n") else raw
            if not line or line.startswith(";"):
                continue
            for pattern, handler in handlers:
                match = pattern.fullmatch(line)
                if match:
                    handler(match)
                    break
            else:
                print(
                    f"Could not parse line {line_count} of configuration file (skipped)",
                    file=sys.stderr,
                )

    def get(self, section: str, key: str) -> str:
        """Return the value of ``key`` in ``section``, or "" if either is absent."""
        return self._data.get(section, {}).get(key, "")

    def has_group(self, section: str) -> bool:
        """Return True if ``section`` was defined."""
        return section in self._data