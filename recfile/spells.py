"""
Recfile Spells - Aliased API with Harry Potter spell names.

    accio()      → Summon a record set from a .rec file by type
    fidelius()   → Encrypt confidential fields (only the Secret Keeper can read them)
    revelio()    → Decrypt confidential fields
    geminio()    → Merge several databases into one (the Doubling Charm)

Usage:
    from recfile.spells import accio, fidelius, revelio, geminio

    books = accio("library.rec", "Book")
    fidelius(db, "password")
    revelio(db, "password")
    merged = geminio("a.rec", "b.rec")
"""

from __future__ import annotations

import copy
from pathlib import Path
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from recfile.database import Database, RecordSet


# =============================================================================
# accio - Summon a record set from a .rec file
# =============================================================================

def accio(path: str | Path, record_type: str) -> RecordSet | None:
    """
    Summon the first record set of the given type ("" for untyped records).

        books = accio("library.rec", "Book")
    """
    from recfile.reader import RecReader

    return RecReader.read(path).get_record_set(record_type)


# =============================================================================
# fidelius - Encrypt confidential fields (the Fidelius Charm)
# =============================================================================

def fidelius(db: Database, password: str) -> int:
    """
    Cast the Fidelius Charm: hide every %confidential field value.

        fidelius(db, "my-secret")
        db.save("hidden.rec")
    """
    from recfile.security import encrypt_confidential
    return encrypt_confidential(db, password)


# =============================================================================
# revelio - Decrypt confidential fields
# =============================================================================

def revelio(db: Database, password: str) -> int:
    """
    Cast Revelio: reveal the hidden field values.

        db = load("hidden.rec")
        revelio(db, "my-secret")
    """
    from recfile.security import decrypt_confidential
    return decrypt_confidential(db, password)


# =============================================================================
# geminio - Merge multiple databases into one (Doubling Charm)
# =============================================================================

def geminio(*sources: Database | str | Path) -> Database:
    """
    Cast Geminio: merge multiple recfiles into one database.

        merged = geminio("part1.rec", "part2.rec")
        merged = geminio(db1, db2, db3)
        merged.save("combined.rec")

    Record sets of the same type are concatenated in source order and keep
    the descriptor of their first occurrence. New types are appended. The
    sources are left untouched.
    """
    from recfile.database import Database
    from recfile.reader import RecReader

    if len(sources) < 2:
        raise ValueError("Geminio requires at least 2 sources to merge")

    merged = Database()
    for src in sources:
        db = src if isinstance(src, Database) else RecReader.read(src)
        for record_set in db.record_sets:
            target = merged.get_record_set(record_set.descriptor.type)
            if target is None:
                merged.record_sets.append(copy.deepcopy(record_set))
            else:
                target.records.extend(copy.deepcopy(record_set.records))

    return merged
