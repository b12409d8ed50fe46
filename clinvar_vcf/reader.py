"""
Module for iterating over ClinVar Variation XML files and constructing
VariationArchive models from each top-level VariationArchive element.
"""

import logging
from typing import IO, Any, Callable, Iterator, Tuple
from xml.parsers.expat import ExpatError
from xml.sax.saxutils import escape, quoteattr

import xmltodict

from clinvar_vcf.errors import (
    ClinvarVcfError,
    DecodeError,
    ExtractionError,
    StreamDecodeError,
)
from clinvar_vcf.model.variation_archive import VariationArchive
from clinvar_vcf.tokenizer import (
    DEFAULT_CHUNK_SIZE,
    XmlEvent,
    XmlEventStream,
    XmlEventType,
)

_logger = logging.getLogger("clinvar_vcf")

RELEASE_TAG = "ClinVarVariationRelease"
VARIATION_ARCHIVE_TAG = "VariationArchive"


def _serialize_start(event: XmlEvent) -> str:
    attrs = "".join(f" {k}={quoteattr(v)}" for k, v in event.attrs.items())
    return f"<{event.name}{attrs}>"


def extract_record(events: Iterator[XmlEvent], start: XmlEvent) -> bytes:
    """
    Re-serializes the element opened by `start` from `events`, which must be
    positioned just after `start`. Returns the complete element as UTF-8 bytes.

    Elements nested inside it may share its tag name, so a counter of open
    same-named elements decides which end tag closes it.
    """
    tag_name = start.name
    parts = [_serialize_start(start)]
    depth = 0
    for event in events:
        match event.type:
            case XmlEventType.START:
                parts.append(_serialize_start(event))
                if event.name == tag_name:
                    depth += 1
            case XmlEventType.END:
                parts.append(f"</{event.name}>")
                if event.name == tag_name:
                    if depth == 0:
                        return "".join(parts).encode("utf-8")
                    depth -= 1
            case XmlEventType.TEXT:
                parts.append(escape(event.text))
            case XmlEventType.EOF:
                raise ExtractionError(
                    f"Unexpected end of input inside <{tag_name}>"
                    f" started at byte offset {start.offset}",
                    event.offset,
                )
    raise ExtractionError(
        f"Event stream ended inside <{tag_name}> started at byte offset {start.offset}"
    )


def _handle_text_nodes(path, key, value) -> Tuple[Any, Any]:
    """
    Takes a path, key, value, returns a tuple of new (key, value)

    If the value looks like an XML text node, put it in a key "$".

    Used as a postprocessor for xmltodict.parse.
    """
    if isinstance(value, str) and not key.startswith("@"):
        if key == "#text":
            return ("$", value)
        else:
            return (key, {"$": value})
    return (key, value)


def _parse_xml_document(doc_str: str | bytes):
    """
    Reads an XML document from a string.
    """
    return xmltodict.parse(doc_str, postprocessor=_handle_text_nodes)


def decode_variation_archive(
    buf: str | bytes, offset: int | None = None
) -> VariationArchive:
    """
    Parses one serialized VariationArchive element into a VariationArchive.
    Raises DecodeError tagged with `offset` if it cannot be parsed or does not
    have the expected structure.
    """
    try:
        elem_d = _parse_xml_document(buf)
    except ExpatError as e:
        raise DecodeError(f"Malformed {VARIATION_ARCHIVE_TAG}: {e}", offset) from e
    if not isinstance(elem_d, dict) or len(elem_d.keys()) != 1:
        raise DecodeError(f"Expected a single root element, got: {elem_d}", offset)
    tag, contents = list(elem_d.items())[0]
    if tag != VARIATION_ARCHIVE_TAG:
        raise DecodeError(f"Expected {VARIATION_ARCHIVE_TAG}, got {tag}", offset)
    if not isinstance(contents, dict):
        raise DecodeError(f"{VARIATION_ARCHIVE_TAG} has no attributes", offset)
    try:
        return VariationArchive.from_xml(contents)
    except DecodeError as e:
        raise DecodeError(e.message, offset) from e


def read_variation_archives(
    events: XmlEventStream,
    ignore_errors: bool = False,
    on_error: Callable[[ClinvarVcfError], None] | None = None,
    logger: logging.Logger = _logger,
) -> Iterator[Tuple[int, VariationArchive]]:
    """
    Generator of (byte offset, VariationArchive) for every VariationArchive
    element in `events`, in document order. Everything outside of those elements
    is discarded.

    Stream, extraction and decode errors are logged and raised. If `ignore_errors`
    is True they are logged, passed to `on_error`, and reading continues with the
    next VariationArchive instead.
    """
    while True:
        try:
            event = next(events, None)
            if event is None or event.type == XmlEventType.EOF:
                return
            if event.type != XmlEventType.START:
                continue
            if event.name == RELEASE_TAG:
                logger.info(
                    f"Parsing release date: {event.attrs.get('ReleaseDate')}"
                )
                continue
            if event.name != VARIATION_ARCHIVE_TAG:
                continue
            start = event
            buf = extract_record(events, start)
            archive = decode_variation_archive(buf, start.offset)
        except (StreamDecodeError, DecodeError) as e:
            logger.error(f"Error at position {e.offset}: {e.message}")
            if not ignore_errors:
                raise
            if on_error is not None:
                on_error(e)
            if isinstance(e, ExtractionError):
                # Input ended inside the entry
                continue
            if isinstance(e, StreamDecodeError) and not events.resync(
                VARIATION_ARCHIVE_TAG
            ):
                logger.warning(
                    f"No {VARIATION_ARCHIVE_TAG} found after position {e.offset}"
                )
            continue
        yield start.offset, archive


def read_clinvar_vcv_xml(
    reader: IO[bytes],
    ignore_errors: bool = False,
    chunk_size: int = DEFAULT_CHUNK_SIZE,
) -> Iterator[VariationArchive]:
    """
    Generator function that reads a ClinVar Variation XML file and outputs
    VariationArchive objects. Accepts `reader` as a readable binary file object.
    """
    events = XmlEventStream(reader, chunk_size=chunk_size)
    for _, archive in read_variation_archives(events, ignore_errors=ignore_errors):
        yield archive
