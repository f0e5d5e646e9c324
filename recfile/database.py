"""
Recfile data model.

A Database is an ordered list of RecordSets. Each RecordSet has one
Descriptor (type name + special properties) and an ordered list of Records,
each an ordered list of Fields. Nothing here reorders or deduplicates.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

from recfile.spec import DEFAULT_RECORD_TYPE


@dataclass
class Field:
    """A single "name: value" line."""
    name: str
    value: str


@dataclass
class Property(Field):
    """A descriptor line. `name` excludes the leading '%'."""


@dataclass
class Descriptor:
    type: str = DEFAULT_RECORD_TYPE
    special_fields: list[Property] = field(default_factory=list)

    @property
    def is_default(self) -> bool:
        return self.type == DEFAULT_RECORD_TYPE

    def get_properties(self, name: str) -> list[Property]:
        """All properties with the given name, in file order."""
        return [p for p in self.special_fields if p.name == name]


@dataclass
class Record:
    fields: list[Field] = field(default_factory=list)

    def get(self, name: str, default: str | None = None) -> str | None:
        """Value of the first field called `name`."""
        for f in self.fields:
            if f.name == name:
                return f.value
        return default

    def get_all(self, name: str) -> list[str]:
        return [f.value for f in self.fields if f.name == name]

    def add_field(self, name: str, value: str) -> Field:
        f = Field(name=name, value=value)
        self.fields.append(f)
        return f


@dataclass
class RecordSet:
    descriptor: Descriptor = field(default_factory=Descriptor)
    records: list[Record] = field(default_factory=list)

    @property
    def type(self) -> str:
        return self.descriptor.type


@dataclass
class Database:
    record_sets: list[RecordSet] = field(default_factory=list)

    @property
    def types(self) -> list[str]:
        return [rs.descriptor.type for rs in self.record_sets]

    def get_record_set(self, record_type: str) -> RecordSet | None:
        """First record set of the given type ("" for the default set)."""
        for rs in self.record_sets:
            if rs.descriptor.type == record_type:
                return rs
        return None

    def save(self, path: str | Path) -> None:
        """Write this database to `path` (created if missing, never truncated)."""
        from recfile.writer import RecWriter
        RecWriter.write(self, path)
