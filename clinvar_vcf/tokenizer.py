"""
Pull-based XML event stream over a binary reader.

Wraps the expat parser underlying xml.etree.ElementTree, feeding it fixed-size
chunks so arbitrarily large documents are never held in memory, and reports
the byte offset of every event for diagnostics.
"""

import dataclasses
import logging
from collections import deque
from enum import StrEnum
from typing import IO
from xml.parsers import expat

from clinvar_vcf.errors import StreamDecodeError

_logger = logging.getLogger("clinvar_vcf")

DEFAULT_CHUNK_SIZE = 1024 * 1024

# Wrapper element fed to a restarted parser so that sibling entries following
# a resync point form a single well-formed document
_RESYNC_ROOT = "_resync"
_RESYNC_OPEN = f"<{_RESYNC_ROOT}>".encode("utf-8")

_TAG_NAME_TERMINATORS = {b" ", b"\t", b"\r", b"\n", b">", b"/"}


class XmlEventType(StrEnum):
    START = "start"
    END = "end"
    TEXT = "text"
    EOF = "eof"


@dataclasses.dataclass(frozen=True)
class XmlEvent:
    type: XmlEventType
    name: str | None = None
    attrs: dict[str, str] = dataclasses.field(default_factory=dict)
    text: str | None = None
    offset: int = 0


def _find_start_tag(data: bytes, marker: bytes) -> int:
    """
    Index of the first `marker` (e.g. b"<VariationArchive") in `data` that is
    followed by a character ending a tag name. -1 if there is none yet.
    """
    idx = data.find(marker)
    while idx != -1:
        end = idx + len(marker)
        if end >= len(data):
            return -1
        if data[end : end + 1] in _TAG_NAME_TERMINATORS:
            return idx
        idx = data.find(marker, idx + 1)
    return -1


class XmlEventStream:
    """
    Iterator of XmlEvent objects read from `reader` (a binary file object).

    Yields START, END and TEXT events in document order followed by exactly one
    EOF event. Malformed input raises StreamDecodeError carrying the byte offset
    of the problem; the stream can then be restarted at a later element with
    `resync`.
    """

    def __init__(self, reader: IO[bytes], chunk_size: int = DEFAULT_CHUNK_SIZE):
        if chunk_size <= 0:
            raise ValueError(f"chunk_size must be positive: {chunk_size}")
        self.reader = reader
        self.chunk_size = chunk_size
        self.offset = 0
        self._events: deque[XmlEvent] = deque()
        self._error: StreamDecodeError | None = None
        self._input_exhausted = False
        self._eof_emitted = False
        self._bytes_read = 0
        # Most recent chunk of raw input and its absolute position
        self._chunk = b""
        self._chunk_start = 0
        self._resync_tag: str | None = None
        self._start_parser(origin=0, synthetic_root=False)

    @property
    def bytes_read(self) -> int:
        return self._bytes_read

    def __iter__(self):
        return self

    def __next__(self) -> XmlEvent:
        self._fill()
        if self._events:
            event = self._events.popleft()
            self.offset = event.offset
            return event
        if self._error is not None:
            raise self._error
        if not self._eof_emitted:
            self._eof_emitted = True
            self.offset = self._bytes_read
            return XmlEvent(XmlEventType.EOF, offset=self._bytes_read)
        raise StopIteration

    def resync(self, tag: str) -> bool:
        """
        Discards input following the last syntax error up to the next start tag
        named `tag`, and resumes parsing from there.

        Returns False when the rest of the input holds no such tag, in which
        case the stream only has its EOF event left.
        """
        if self._error is not None:
            offset = self._error.offset
        else:
            offset = self._bytes_read
        self._error = None
        self._events.clear()
        self._resync_tag = tag
        return self._resync_from(offset, tag)

    def _start_parser(self, origin: int, synthetic_root: bool):
        parser = expat.ParserCreate("utf-8" if synthetic_root else None)
        parser.buffer_text = True
        parser.StartElementHandler = self._on_start
        parser.EndElementHandler = self._on_end
        parser.CharacterDataHandler = self._on_text
        self._parser = parser
        # Absolute input offset corresponding to byte 0 of what this parser is fed
        self._origin = origin
        self._synthetic_root = synthetic_root
        self._depth = 0
        self._parser_done = False
        if synthetic_root:
            self._parse(_RESYNC_OPEN, final=False)

    def _position(self) -> int:
        return self._origin + self._parser.CurrentByteIndex

    def _on_start(self, name: str, attrs: dict[str, str]):
        self._depth += 1
        if self._synthetic_root and self._depth == 1:
            return
        self._events.append(
            XmlEvent(
                XmlEventType.START, name=name, attrs=attrs, offset=self._position()
            )
        )

    def _on_end(self, name: str):
        self._depth -= 1
        if self._synthetic_root and self._depth == 0:
            return
        self._events.append(
            XmlEvent(XmlEventType.END, name=name, offset=self._position())
        )

    def _on_text(self, data: str):
        if self._depth == 0:
            return
        self._events.append(
            XmlEvent(XmlEventType.TEXT, text=data, offset=self._position())
        )

    def _parse(self, data: bytes, final: bool):
        if self._parser_done:
            return
        try:
            self._parser.Parse(data, final)
        except expat.ExpatError as e:
            # expat parsers cannot continue after an error
            self._parser_done = True
            offset = self._origin + max(self._parser.ErrorByteIndex, 0)
            if final and self._depth > 0:
                # Truncated input. Consumers see EOF while elements are still open.
                _logger.debug(
                    "Input ends inside an open element at byte offset %d: %s",
                    offset,
                    expat.ErrorString(e.code),
                )
                return
            if self._synthetic_root and self._depth <= 1 and self._resync_tag:
                # Outside any element of a resynced stream, e.g. the closing tag of
                # the original root element. Continue at the next entry, if any.
                _logger.debug(
                    "Discarding content outside <%s> at byte offset %d: %s",
                    self._resync_tag,
                    offset,
                    expat.ErrorString(e.code),
                )
                self._resync_from(offset, self._resync_tag)
                return
            self._error = StreamDecodeError(
                f"XML syntax error: {expat.ErrorString(e.code)}", offset
            )

    def _read_chunk(self) -> bytes:
        chunk = self.reader.read(self.chunk_size)
        self._bytes_read += len(chunk)
        return chunk

    def _fill(self):
        while not self._events and self._error is None and not self._input_exhausted:
            chunk_start = self._bytes_read
            chunk = self._read_chunk()
            if chunk:
                self._chunk = chunk
                self._chunk_start = chunk_start
                self._parse(chunk, final=False)
            else:
                self._input_exhausted = True
                self._parse(b"", final=True)

    def _resync_from(self, offset: int, tag: str) -> bool:
        marker = f"<{tag}".encode("utf-8")
        if offset >= self._chunk_start:
            data = self._chunk[offset - self._chunk_start :]
            data_start = offset
        else:
            data = self._chunk
            data_start = self._chunk_start

        idx = _find_start_tag(data, marker)
        while idx == -1:
            chunk = self._read_chunk() if not self._input_exhausted else b""
            if not chunk:
                _logger.debug("No further <%s> after byte offset %d", tag, offset)
                self._input_exhausted = True
                self._chunk = b""
                self._chunk_start = self._bytes_read
                return False
            # Keep enough of the tail to match a marker split across chunks
            drop = max(0, len(data) - len(marker))
            data_start += drop
            data = data[drop:] + chunk
            idx = _find_start_tag(data, marker)

        resume_at = data_start + idx
        _logger.debug("Resuming at <%s> at byte offset %d", tag, resume_at)
        self._chunk = data[idx:]
        self._chunk_start = resume_at
        self._start_parser(origin=resume_at - len(_RESYNC_OPEN), synthetic_root=True)
        parser = self._parser
        self._parse(self._chunk, final=False)
        # The rest of the input is already in hand, so finish this parser unless
        # it was itself replaced by a further resync
        if self._input_exhausted and self._error is None and self._parser is parser:
            self._parse(b"", final=True)
        return True
