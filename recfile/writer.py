"""
Recfile Writer - Serializes a Database back to .rec text.

Output per record set:
    %rec: <Type>                 <- only for typed sets
    %<name>: <value>             <- one line per special property
                                 <- blank line after the descriptor block
    <name>: <value>              <- one line per field
                                 <- blank line between records (not after the last)

Untyped sets get no descriptor block and no separator, so consecutive
untyped sets run together.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path

from recfile.database import Database, RecordSet
from recfile.errors import FormatError
from recfile.spec import FIELD_SEPARATOR, LINE_DELIMITER, REC_PROPERTY, SPECIAL_FIELD_PREFIX

log = logging.getLogger("recfile.writer")


def _line(name: str, value: str) -> str:
    return f"{name}{FIELD_SEPARATOR}{value}{LINE_DELIMITER}"


class RecWriter:
    """Writes Database objects to the recfile text format."""

    @staticmethod
    def render_record_set(record_set: RecordSet) -> str:
        """
        Render one record set.

        Raises FormatError before producing anything if the set is untyped
        but carries special properties.
        """
        descriptor = record_set.descriptor
        if descriptor.is_default and descriptor.special_fields:
            raise FormatError("invalid record set descriptor")

        parts: list[str] = []
        if not descriptor.is_default:
            parts.append(_line(SPECIAL_FIELD_PREFIX + REC_PROPERTY, descriptor.type))
            for prop in descriptor.special_fields:
                parts.append(_line(SPECIAL_FIELD_PREFIX + prop.name, prop.value))
            parts.append(LINE_DELIMITER)

        last = len(record_set.records) - 1
        for i, record in enumerate(record_set.records):
            for f in record.fields:
                parts.append(_line(f.name, f.value))
            if i != last:
                parts.append(LINE_DELIMITER)

        return "".join(parts)

    @classmethod
    def serialize(cls, database: Database) -> bytes:
        """Serialize a whole Database to bytes."""
        return "".join(cls.render_record_set(rs) for rs in database.record_sets).encode("utf-8")

    @classmethod
    def write(cls, database: Database, path: str | Path) -> None:
        """
        Write a Database to `path`.

        The file is opened read-write and created if missing, but NOT
        truncated: bytes past the end of the new content stay in place.
        Record sets are written one at a time, so a FormatError leaves the
        earlier sets on disk.
        """
        fd = os.open(path, os.O_RDWR | os.O_CREAT, 0o644)
        with os.fdopen(fd, "r+b") as target:
            for record_set in database.record_sets:
                target.write(cls.render_record_set(record_set).encode("utf-8"))
        log.debug("saved %d record set(s) to %s", len(database.record_sets), path)


def save(database: Database, path: str | Path) -> None:
    """Shortcut for RecWriter.write()."""
    RecWriter.write(database, path)
