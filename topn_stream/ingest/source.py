"""Line-oriented record source: ``<key><whitespace><int64>`` per line."""

from __future__ import annotations

import logging
import re
import sys
from contextlib import contextmanager
from pathlib import Path
from typing import IO, Iterable, Iterator, Optional, Union

from ..core.errors import ParseError
from ..core.records import INT64_MAX, INT64_MIN, Record

logger = logging.getLogger(__name__)

_INT_RE = re.compile(r"^[+-]?\d+$")


def parse_line(line: str, line_no: int = 0, require_url: bool = True) -> Record:
    tokens = line.split()
    if len(tokens) < 2:
        raise ParseError("expected '<key> <value>'", line_no=line_no, line=line)
    key, raw = tokens[0], tokens[1]
    if require_url and "http" not in key.lower():
        raise ParseError(f"key is not a URL: {key!r}", line_no=line_no, line=line)
    if not _INT_RE.match(raw):
        raise ParseError(f"value is not an integer: {raw!r}", line_no=line_no, line=line)
    value = int(raw)
    if not INT64_MIN <= value <= INT64_MAX:
        raise ParseError(f"value out of 64-bit range: {raw}", line_no=line_no, line=line)
    if len(tokens) > 2:
        logger.warning("extra_columns line=%s ignored=%s", line_no, " ".join(tokens[2:]))
    return Record(key=key, value=value)


class RecordSource:
    """Lazily parses records from an iterable of text lines or UTF-8 encoded byte lines.

    Iterating stops at end of input; the first malformed line raises
    :class:`ParseError` and ends the stream. Each line is consumed once.
    """

    def __init__(self, lines: Iterable[Union[str, bytes]], require_url: bool = True, name: str = "<lines>") -> None:
        self._lines = lines
        self.require_url = require_url
        self.name = name
        self.lines_read = 0
        self.records_read = 0
        self.blank_lines = 0
        self._started = False

    def __iter__(self) -> Iterator[Record]:
        if self._started:
            raise RuntimeError(f"record source {self.name} can only be iterated once")
        self._started = True
        return self._records()

    def _records(self) -> Iterator[Record]:
        lines = iter(self._lines)
        while True:
            try:
                line = next(lines)
            except StopIteration:
                return
            except UnicodeDecodeError as exc:
                raise ParseError(f"invalid UTF-8: {exc.reason}", line_no=self.lines_read + 1) from exc
            self.lines_read += 1
            if isinstance(line, bytes):
                try:
                    line = line.decode("utf-8")
                except UnicodeDecodeError as exc:
                    raise ParseError(f"invalid UTF-8: {exc.reason}", line_no=self.lines_read) from exc
            if not line.strip():
                self.blank_lines += 1
                continue
            record = parse_line(line, self.lines_read, self.require_url)
            self.records_read += 1
            yield record


@contextmanager
def open_source(path: str | Path, require_url: bool = True) -> Iterator[RecordSource]:
    """Open ``path`` (``"-"`` for stdin) as a :class:`RecordSource`."""
    if str(path) == "-":
        yield RecordSource(getattr(sys.stdin, "buffer", sys.stdin), require_url=require_url, name="<stdin>")
        return
    fh: Optional[IO[bytes]] = None
    try:
        fh = Path(path).open("rb")
        yield RecordSource(fh, require_url=require_url, name=str(path))
    finally:
        if fh is not None:
            fh.close()


__all__ = ["parse_line", "RecordSource", "open_source"]
