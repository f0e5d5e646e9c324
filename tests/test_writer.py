"""
Writer Tests - Serialization layout, save semantics, round trips.
"""

import tempfile
from pathlib import Path

import pytest

from recfile import FormatError, RecReader, RecWriter, load, save
from recfile.database import Database, Descriptor, Field, Property, Record, RecordSet


def _record(**fields):
    return Record(fields=[Field(name, value) for name, value in fields.items()])


@pytest.fixture
def rec_path():
    with tempfile.NamedTemporaryFile(suffix=".rec", delete=False) as f:
        path = f.name
    yield path
    Path(path).unlink()


@pytest.fixture
def books():
    return Database(record_sets=[
        RecordSet(
            descriptor=Descriptor(type="Book", special_fields=[Property("mandatory", "Title")]),
            records=[_record(Title="Foo", Author="Bar"), _record(Title="Baz")],
        ),
    ])


BOOKS_TEXT = b"%rec: Book\n%mandatory: Title\n\nTitle: Foo\nAuthor: Bar\n\nTitle: Baz\n"


# =============================================================================
# Layout
# =============================================================================

class TestSerialize:

    def test_typed_set(self, books):
        assert RecWriter.serialize(books) == BOOKS_TEXT

    def test_typed_set_without_records(self):
        db = Database(record_sets=[RecordSet(descriptor=Descriptor(type="Empty"))])
        assert RecWriter.serialize(db) == b"%rec: Empty\n\n"

    def test_untyped_set_has_no_descriptor_block(self):
        db = Database(record_sets=[RecordSet(records=[_record(a="1"), _record(b="2")])])
        assert RecWriter.serialize(db) == b"a: 1\n\nb: 2\n"

    def test_consecutive_untyped_sets_run_together(self):
        db = Database(record_sets=[
            RecordSet(records=[_record(a="1")]),
            RecordSet(records=[_record(b="2")]),
        ])
        assert RecWriter.serialize(db) == b"a: 1\nb: 2\n"

    def test_typed_set_follows_last_record_directly(self):
        db = Database(record_sets=[
            RecordSet(records=[_record(a="1")]),
            RecordSet(descriptor=Descriptor(type="X"), records=[_record(b="2")]),
        ])
        assert RecWriter.serialize(db) == b"a: 1\n%rec: X\n\nb: 2\n"

    def test_untyped_set_with_properties_rejected(self):
        db = Database(record_sets=[
            RecordSet(descriptor=Descriptor(special_fields=[Property("mandatory", "a")])),
        ])
        with pytest.raises(FormatError, match="invalid record set descriptor"):
            RecWriter.serialize(db)

    def test_render_record_set(self, books):
        text = RecWriter.render_record_set(books.record_sets[0])
        assert text.encode("utf-8") == BOOKS_TEXT

    def test_utf8_values(self):
        db = Database(record_sets=[RecordSet(records=[_record(Title="Cien años de soledad")])])
        assert RecWriter.serialize(db) == "Title: Cien años de soledad\n".encode("utf-8")


# =============================================================================
# Saving to disk
# =============================================================================

class TestSave:

    def test_save_method(self, books, rec_path):
        books.save(rec_path)
        assert Path(rec_path).read_bytes() == BOOKS_TEXT

    def test_save_function_creates_file(self, books, tmp_path):
        path = tmp_path / "new.rec"
        save(books, path)
        assert path.read_bytes() == BOOKS_TEXT

    def test_save_does_not_truncate(self, books, rec_path):
        Path(rec_path).write_bytes(b"x" * 200)
        books.save(rec_path)

        raw = Path(rec_path).read_bytes()
        assert len(raw) == 200
        assert raw.startswith(BOOKS_TEXT)
        assert raw[len(BOOKS_TEXT):] == b"x" * (200 - len(BOOKS_TEXT))

    def test_invalid_set_leaves_earlier_sets_written(self, books, rec_path):
        books.record_sets.append(RecordSet(
            descriptor=Descriptor(special_fields=[Property("mandatory", "a")]),
            records=[_record(a="1")],
        ))
        books.record_sets.append(RecordSet(descriptor=Descriptor(type="Never")))

        with pytest.raises(FormatError, match="invalid record set descriptor"):
            books.save(rec_path)

        assert Path(rec_path).read_bytes() == BOOKS_TEXT

    def test_save_does_not_mutate(self, books, rec_path):
        before = repr(books)
        books.save(rec_path)
        assert repr(books) == before


# =============================================================================
# Round trips
# =============================================================================

class TestRoundTrip:

    def test_parse_then_serialize(self):
        assert RecWriter.serialize(RecReader.parse(BOOKS_TEXT)) == BOOKS_TEXT

    def test_save_then_load(self, books, rec_path):
        books.save(rec_path)
        assert load(rec_path) == books

    def test_empty_typed_sets_then_records(self, rec_path):
        db = Database(record_sets=[
            RecordSet(descriptor=Descriptor(type="A", special_fields=[Property("doc", "first")])),
            RecordSet(
                descriptor=Descriptor(type="B", special_fields=[Property("key", "id"), Property("doc", "x")]),
                records=[_record(id="1", name="one"), _record(id="2", name="two")],
            ),
        ])
        db.save(rec_path)
        assert load(rec_path) == db

    def test_untyped_records(self, rec_path):
        db = Database(record_sets=[RecordSet(records=[_record(a="1", b="2"), _record(a="3")])])
        db.save(rec_path)
        assert load(rec_path) == db

    def test_loaded_file_edit_and_save(self, tmp_path):
        db = RecReader.parse(BOOKS_TEXT)
        db.get_record_set("Book").records.append(_record(Title="Qux", Year="1999"))

        path = tmp_path / "edited.rec"
        db.save(path)

        reloaded = load(path)
        assert [r.get("Title") for r in reloaded.record_sets[0].records] == ["Foo", "Baz", "Qux"]
        assert reloaded.record_sets[0].records[2].get("Year") == "1999"
