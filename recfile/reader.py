"""
Recfile Reader - Hand-written parser for .rec files.

Reading is one forward pass over a single buffered stream:
  - Logical lines: comment lines dropped, '+' continuation lines joined
  - Records: logical lines up to a blank line, each split on ": "
  - Descriptors: same discipline for '%' lines, validated per property
  - Record sets: a peek-driven state loop decides between descriptor,
    record, and "this '%' belongs to the next record set"

Nothing is consumed before the lookahead has decided who owns it.
"""

from __future__ import annotations

import io
import logging
import re
from enum import Enum
from pathlib import Path

from recfile.database import Database, Descriptor, Field, Property, Record, RecordSet
from recfile.errors import FormatError
from recfile.properties import validate_property
from recfile.spec import (
    COMMENT_PREFIX,
    FIELD_NAME_PATTERN,
    FIELD_SEPARATOR,
    LINE_DELIMITER,
    LINE_WRAP_PREFIX,
    REC_PROPERTY,
    SPECIAL_FIELD_PREFIX,
)

log = logging.getLogger("recfile.reader")

_FIELD_NAME = re.compile(FIELD_NAME_PATTERN)


class _State(Enum):
    AWAITING_DESCRIPTOR_OR_RECORD = "awaiting"
    IN_RECORD_SET = "in_record_set"
    DONE = "done"


class LineStream:
    """Raw lines from a buffered binary handle, with one character of lookahead."""

    def __init__(self, handle: io.BufferedReader) -> None:
        self._handle = handle
        self.line_number = 0  # raw lines consumed so far

    def peek(self) -> str:
        """Next character without consuming it. Empty string at end of input."""
        # Markers are ASCII, so decoding a lone first byte is safe for comparisons.
        return self._handle.peek(1)[:1].decode("latin-1")

    def skip_line(self) -> None:
        """Consume one raw line without decoding it."""
        if self._handle.readline():
            self.line_number += 1

    def read_line(self) -> str:
        """Consume one raw line, newline included. Empty string at end of input."""
        raw = self._handle.readline()
        if not raw:
            return ""
        self.line_number += 1
        try:
            return raw.decode("utf-8")
        except UnicodeDecodeError as ex:
            raise FormatError(f"invalid UTF-8 ({ex.reason})", self.line_number) from ex


class RecReader:
    """
    Recfile reader.

    Usage:
        # From a file (the handle is closed on every exit path)
        db = RecReader.read("books.rec")

        # From memory
        db = RecReader.parse(b"%rec: Book\\n\\nTitle: Foo\\n")

    On a FormatError, `error.database` holds the record sets assembled
    before the failure.
    """

    def __init__(self, handle: io.BufferedReader) -> None:
        self._stream = LineStream(handle)
        self.database = Database()

    @classmethod
    def read(cls, path: str | Path) -> Database:
        """Fully parse a .rec file into a Database."""
        with open(path, "rb") as handle:
            database = cls(handle).read_database()
        log.debug("loaded %d record set(s) from %s", len(database.record_sets), path)
        return database

    @classmethod
    def parse(cls, data: bytes | str) -> Database:
        """Parse recfile text held in memory."""
        if isinstance(data, str):
            data = data.encode("utf-8")
        return cls(io.BufferedReader(io.BytesIO(data))).read_database()

    def read_database(self) -> Database:
        """Read record sets until end of input."""
        try:
            while self._stream.peek():
                record_set = RecordSet()
                try:
                    self._read_record_set(record_set)
                finally:
                    # Blank or comment-only regions yield empty default sets; drop them.
                    if record_set.records or not record_set.descriptor.is_default:
                        self.database.record_sets.append(record_set)
        except FormatError as ex:
            ex.database = self.database
            raise
        return self.database

    # -------------------------------------------------------------------------
    # Record sets
    # -------------------------------------------------------------------------

    def _read_record_set(self, record_set: RecordSet) -> None:
        stream = self._stream
        state = _State.AWAITING_DESCRIPTOR_OR_RECORD

        while state is not _State.DONE:
            marker = stream.peek()

            if not marker:
                state = _State.DONE

            elif marker == COMMENT_PREFIX:
                stream.skip_line()

            elif marker == SPECIAL_FIELD_PREFIX:
                if state is _State.IN_RECORD_SET:
                    # Descriptor of the next record set; leave it unread.
                    state = _State.DONE
                else:
                    record_set.descriptor = self._read_descriptor()
                    state = _State.IN_RECORD_SET

            else:
                record = Record()
                try:
                    self._read_record(record)
                finally:
                    if record.fields:
                        record_set.records.append(record)
                if record_set.records:
                    state = _State.IN_RECORD_SET

    # -------------------------------------------------------------------------
    # Descriptors and records
    # -------------------------------------------------------------------------

    def _read_descriptor(self) -> Descriptor:
        descriptor = Descriptor()
        has_type = False

        line = self._logical_line()
        while line:
            name, value = self._split(line, "property")
            if name.startswith(SPECIAL_FIELD_PREFIX):
                name = name[len(SPECIAL_FIELD_PREFIX):]
            prop = Property(name=name, value=value)

            try:
                validate_property(prop)
            except FormatError as ex:
                ex.line = self._stream.line_number
                raise

            if prop.name == REC_PROPERTY:
                if has_type:
                    raise FormatError("multiple record types", self._stream.line_number)
                descriptor.type = prop.value
                has_type = True
            else:
                descriptor.special_fields.append(prop)

            line = self._logical_line()

        if not has_type:
            raise FormatError("missing record type", self._stream.line_number)
        return descriptor

    def _read_record(self, record: Record) -> None:
        """Append fields to `record` up to the next blank line or end of input."""
        line = self._logical_line()
        while line:
            name, value = self._split(line, "field")
            if not _FIELD_NAME.fullmatch(name):
                raise FormatError(f"invalid field name {name!r}", self._stream.line_number)
            record.fields.append(Field(name=name, value=value))
            line = self._logical_line()

    def _split(self, line: str, kind: str) -> tuple[str, str]:
        parts = line.split(FIELD_SEPARATOR)
        if len(parts) != 2:
            raise FormatError(f"invalid {kind} {line!r}", self._stream.line_number)
        return parts[0], parts[1]

    # -------------------------------------------------------------------------
    # Logical lines
    # -------------------------------------------------------------------------

    def _logical_line(self) -> str | None:
        """
        Next logical line, "" for a blank line, or None at end of input.

        Leading comment lines are skipped and one newline is stripped. Then
        the following raw lines are inspected without consuming them: comment
        lines are discarded and '+' lines are appended (marker and newline
        removed) until some other line comes up.
        """
        stream = self._stream

        while stream.peek() == COMMENT_PREFIX:
            stream.skip_line()
        raw = stream.read_line()
        if not raw:
            return None
        line = raw.replace(LINE_DELIMITER, "", 1)

        while True:
            marker = stream.peek()
            if marker == COMMENT_PREFIX:
                stream.skip_line()
            elif marker == LINE_WRAP_PREFIX:
                if not line:
                    raise FormatError("invalid line wrap marker", stream.line_number + 1)
                wrapped = stream.read_line()
                line += wrapped.replace(LINE_WRAP_PREFIX, "", 1).replace(LINE_DELIMITER, "", 1)
            else:
                return line


def load(path: str | Path) -> Database:
    """Load a .rec file. Shortcut for RecReader.read()."""
    return RecReader.read(path)
