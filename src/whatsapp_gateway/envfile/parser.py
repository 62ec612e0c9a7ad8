"""Strict reader for ``KEY=value`` environment files.

Format
------
* one ``KEY=value`` assignment per line;
* lines starting with ``#`` are comments, blank lines are ignored;
* keys match ``[A-Za-z_][A-Za-z0-9_]*`` with nothing between the key and ``=``;
* the value is everything after the first ``=``, surrounding whitespace
  stripped. There are no quoting or escaping rules: quotes stay literal.
"""

from __future__ import annotations

import re
from collections.abc import Iterable, Iterator
from dataclasses import dataclass
from enum import Enum
from pathlib import Path

_KEY_RE = re.compile(r"[A-Za-z_][A-Za-z0-9_]*")


class EnvFileError(Exception):
    """Raised when an env file cannot be read or parsed."""

    def __init__(self, message: str, line_no: int | None = None) -> None:
        super().__init__(message)
        self.line_no = line_no


class MalformedLineError(EnvFileError):
    """A non-comment, non-blank line that is not a ``KEY=value`` assignment."""


class DuplicateKeyError(EnvFileError):
    """A key assigned more than once in the same file."""

    def __init__(self, key: str, line_no: int, first_line: int) -> None:
        super().__init__(
            f"line {line_no}: duplicate key {key} (first defined on line {first_line})",
            line_no,
        )
        self.key = key
        self.first_line = first_line


class LineKind(str, Enum):
    BLANK = "blank"
    COMMENT = "comment"
    ENTRY = "entry"
    MALFORMED = "malformed"


@dataclass(frozen=True)
class EnvLine:
    """One physical line of an env file, classified."""

    line_no: int
    raw: str
    kind: LineKind
    key: str | None = None
    value: str | None = None


@dataclass(frozen=True)
class EnvEntry:
    key: str
    value: str
    line_no: int


def scan_lines(text: str) -> Iterator[EnvLine]:
    """Classify every line of *text*. Never raises."""
    for line_no, raw in enumerate(text.splitlines(), start=1):
        stripped = raw.strip()
        if not stripped:
            yield EnvLine(line_no, raw, LineKind.BLANK)
            continue
        if stripped.startswith("#"):
            yield EnvLine(line_no, raw, LineKind.COMMENT)
            continue

        key, sep, value = stripped.partition("=")
        if not sep or not _KEY_RE.fullmatch(key):
            yield EnvLine(line_no, raw, LineKind.MALFORMED)
            continue
        yield EnvLine(line_no, raw, LineKind.ENTRY, key=key, value=value.strip())


def parse_env(text: str) -> list[EnvEntry]:
    """Parse *text* into entries, in file order.

    Raises ``MalformedLineError`` or ``DuplicateKeyError`` on the first
    offending line.
    """
    entries: list[EnvEntry] = []
    first_seen: dict[str, int] = {}

    for line in scan_lines(text):
        if line.kind is LineKind.MALFORMED:
            raise MalformedLineError(
                f"line {line.line_no}: expected KEY=value, got {line.raw.strip()!r}",
                line.line_no,
            )
        if line.kind is not LineKind.ENTRY:
            continue
        if line.key in first_seen:
            raise DuplicateKeyError(line.key, line.line_no, first_seen[line.key])
        first_seen[line.key] = line.line_no
        entries.append(EnvEntry(key=line.key, value=line.value, line_no=line.line_no))

    return entries


def read_text(path: str | Path) -> str:
    path = Path(path)
    try:
        # utf-8-sig drops a leading BOM left by some editors
        return path.read_text(encoding="utf-8-sig")
    except FileNotFoundError as exc:
        raise EnvFileError(f"env file not found: {path}") from exc
    except UnicodeDecodeError as exc:
        raise EnvFileError(f"env file {path} is not valid UTF-8: {exc.reason}") from exc
    except OSError as exc:
        raise EnvFileError(f"cannot read env file {path}: {exc.strerror or exc}") from exc


def read_env_file(path: str | Path) -> list[EnvEntry]:
    """Read and strictly parse the env file at *path*."""
    return parse_env(read_text(path))


def render_env(entries: Iterable[EnvEntry]) -> str:
    """Serialise entries back to ``KEY=value`` lines."""
    return "".join(f"{entry.key}={entry.value}\n" for entry in entries)
