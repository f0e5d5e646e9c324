"""
recfile - Read and write GNU recutils style plain-text databases.

    from recfile import load

    db = load("library.rec")
    books = db.get_record_set("Book")
    db.save("library.rec")
"""

from recfile.database import Database, Descriptor, Field, Property, Record, RecordSet
from recfile.errors import FormatError, RecfileError
from recfile.reader import RecReader, load
from recfile.writer import RecWriter, save

__version__ = "0.1.0"

__all__ = [
    "Database",
    "Descriptor",
    "Field",
    "FormatError",
    "Property",
    "RecReader",
    "RecWriter",
    "Record",
    "RecordSet",
    "RecfileError",
    "load",
    "save",
]
