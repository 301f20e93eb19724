"""Process-wide cache of parsed source files.

Each file is read and parsed at most once per cache. Parsed trees are never
mutated after insertion, so callers share them without further locking.
"""

from __future__ import annotations

import ast
import linecache
import logging
import os
import textwrap
import threading
from dataclasses import dataclass, field
from importlib.util import decode_source
from pathlib import Path
from typing import TYPE_CHECKING

from contract.errors import ParseError, SourceReadError
from frontend.base import PythonFrontEnd

if TYPE_CHECKING:
    from collections.abc import MutableMapping

    from frontend.base import LanguageFrontEnd

logger = logging.getLogger(__name__)


def _line_starts(data: bytes) -> tuple[int, ...]:
    starts = [0]
    index = data.find(b"\n")
    while index != -1:
        starts.append(index + 1)
        index = data.find(b"\n", index + 1)
    return tuple(starts)


@dataclass(frozen=True)
class SourceFile:
    """A parsed source file plus a byte-offset index over its lines.

    ``ast`` reports columns as UTF-8 byte offsets, so node text is sliced from
    the encoded source rather than the decoded string.
    """

    filename: str
    tree: ast.Module
    data: bytes
    line_starts: tuple[int, ...] = field(repr=False)

    @classmethod
    def from_text(cls, filename: str, text: str, tree: ast.Module) -> SourceFile:
        data = text.encode("utf-8")
        return cls(filename=filename, tree=tree, data=data, line_starts=_line_starts(data))

    @property
    def basename(self) -> str:
        return os.path.basename(self.filename)

    def offset(self, line: int, col: int) -> int:
        """Absolute byte offset of a 1-based line and 0-based byte column."""
        if line < 1 or line > len(self.line_starts):
            msg = f"line {line} out of range for {self.filename}"
            raise ValueError(msg)
        return self.line_starts[line - 1] + col

    def segment(self, node: ast.AST | None) -> str:
        """Return the literal source text of ``node``.

        Continuation lines of a multi-line node are dedented relative to the
        node's first line. ``None`` yields an empty string.
        """
        if node is None:
            return ""
        end_line = getattr(node, "end_lineno", None)
        end_col = getattr(node, "end_col_offset", None)
        if end_line is None or end_col is None:
            return ""

        start = self.offset(node.lineno, node.col_offset)
        end = self.offset(end_line, end_col)
        text = self.data[start:end].decode("utf-8", errors="replace")
        if "\n" not in text:
            return text

        prefix = self.data[self.line_starts[node.lineno - 1] : start]
        padding = " " * len(prefix.decode("utf-8", errors="replace"))
        return textwrap.dedent(padding + text).lstrip(" ")


def _read_source(filename: str) -> str:
    try:
        return decode_source(Path(filename).read_bytes())
    except OSError as exc:
        # Code compiled from interactive cells or exec() only lives in linecache.
        lines = linecache.getlines(filename)
        if lines:
            return "".join(lines)
        msg = f"cannot read source file {filename}: {exc}"
        raise SourceReadError(msg, filename) from exc
    except (SyntaxError, UnicodeDecodeError) as exc:
        msg = f"cannot decode source file {filename}: {exc}"
        raise ParseError(msg, filename) from exc


def _cache_key(filename: str) -> str:
    # Pseudo-filenames such as "<stdin>" are linecache keys, not paths.
    if filename.startswith("<") and filename.endswith(">"):
        return filename
    return os.path.abspath(filename)


class SourceCache:
    """Filename-keyed cache of :class:`SourceFile` objects.

    Storage and lock are injectable so tests can observe and share them. The
    lock is held for the whole lookup-or-insert, which guarantees a single
    parse per filename even when several threads miss at once.
    """

    def __init__(
        self,
        frontend: LanguageFrontEnd | None = None,
        storage: MutableMapping[str, SourceFile] | None = None,
        lock: threading.Lock | None = None,
    ) -> None:
        self._frontend = frontend or PythonFrontEnd()
        self._storage: MutableMapping[str, SourceFile] = (
            {} if storage is None else storage
        )
        self._lock = lock or threading.Lock()

    @property
    def frontend(self) -> LanguageFrontEnd:
        return self._frontend

    def parse(self, filename: str) -> SourceFile:
        """Return the parsed file, reading and parsing it on first access.

        Raises:
            SourceReadError: If the file cannot be read.
            ParseError: If the file is not syntactically valid.
        """
        key = _cache_key(filename)
        with self._lock:
            cached = self._storage.get(key)
            if cached is not None:
                logger.debug("source cache hit for %s", key)
                return cached

            logger.debug("source cache miss for %s", key)
            text = _read_source(key)
            try:
                tree = self._frontend.parse(text, key)
            except (SyntaxError, ValueError) as exc:
                msg = f"cannot parse source file {key}: {exc}"
                raise ParseError(msg, key) from exc

            source = SourceFile.from_text(key, text, tree)
            self._storage[key] = source
            return source

    def clear(self) -> None:
        with self._lock:
            self._storage.clear()

    def __contains__(self, filename: object) -> bool:
        if not isinstance(filename, str):
            return False
        with self._lock:
            return _cache_key(filename) in self._storage

    def __len__(self) -> int:
        with self._lock:
            return len(self._storage)


__all__ = ["SourceCache", "SourceFile"]
