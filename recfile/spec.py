"""
Recfile Format Specification
============================

Layout:
    # comment                    <- Comment line (discarded, '#' must be column 0)
    %rec: Book                   <- Record set descriptor: type declaration
    %mandatory: Title            <- Record set descriptor: special properties
                                 <- Blank line ends the descriptor
    Title: GNU Emacs Manual      <- Record: one "name: value" field per line
    Author: Richard M. Stallman
    +and others                  <- Continuation: joined onto the previous line
                                 <- Blank line ends the record
    Title: ...                   <- Next record of the same set
    %rec: Magazine               <- Next '%' block opens a new record set

Design Decisions:
    - A file is a sequence of record sets, each with at most one descriptor
    - Record sets without a '%rec:' line are "default" (untyped) sets
    - Field separator is exactly ": " (colon + one space)
    - Field order inside a record is significant and preserved
    - All UTF-8, line terminator is '\\n'
"""

from types import MappingProxyType

LINE_DELIMITER = "\n"
COMMENT_PREFIX = "#"
LINE_WRAP_PREFIX = "+"
FIELD_SEPARATOR = ": "
SPECIAL_FIELD_PREFIX = "%"

# Sentinel type of a record set that has no '%rec:' line
DEFAULT_RECORD_TYPE = ""

# Name grammars from the GNU recutils manual
FIELD_NAME_PATTERN = r"[a-zA-Z%][a-zA-Z0-9_]*"
TYPE_NAME_PATTERN = r"[a-zA-Z][a-zA-Z0-9_]*"
INTEGER_PATTERN = r"[+-]?[0-9]+"

REC_PROPERTY = "rec"
CONFIDENTIAL_PROPERTY = "confidential"

# Known descriptor properties (users can declare custom '%' fields too)
KNOWN_PROPERTIES = MappingProxyType({
    "rec": "Record set type name, optionally followed by a source URL",
    "mandatory": "Fields that every record must contain",
    "allowed": "Fields that records may contain",
    "prohibit": "Fields that records must not contain",
    "unique": "Fields that may appear at most once per record",
    "key": "Primary key field",
    "doc": "Free-form documentation for the record set",
    "typedef": "Named type declaration",
    "type": "Field type declaration",
    "auto": "Auto-generated fields",
    "sort": "Default sort fields",
    "size": "Record count constraint",
    "constraint": "Record selection expression that must hold",
    "confidential": "Fields whose values are stored encrypted",
})

RELATIONAL_OPERATORS = frozenset({"<", "<=", ">", ">="})

# Prefix of confidential field values stored in encrypted form
ENCRYPTED_PREFIX = "encrypted-"

# File extension
EXTENSION = ".rec"
