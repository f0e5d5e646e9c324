"""
Descriptor property validation.

Each known property has one syntax rule over the whitespace-split value.
Unknown property names are accepted as-is: recutils lets users declare
their own '%' fields.
"""

from __future__ import annotations

import re
from types import MappingProxyType
from typing import Callable, Mapping
from urllib.parse import urlsplit

from recfile.database import Property
from recfile.errors import FormatError
from recfile.spec import INTEGER_PATTERN, RELATIONAL_OPERATORS, TYPE_NAME_PATTERN

Rule = Callable[[str, list[str]], None]

_TYPE_NAME = re.compile(TYPE_NAME_PATTERN)
_INTEGER = re.compile(INTEGER_PATTERN)


def _no_rule(name: str, tokens: list[str]) -> None:
    pass


def _at_least_one(name: str, tokens: list[str]) -> None:
    if not tokens:
        raise FormatError(f"%{name}: no property value found")


def _rec(name: str, tokens: list[str]) -> None:
    _at_least_one(name, tokens)
    if len(tokens) == 2:
        try:
            urlsplit(tokens[1])
        except ValueError as ex:
            raise FormatError(f"%{name}: invalid record source URL {tokens[1]!r}") from ex


def _key(name: str, tokens: list[str]) -> None:
    if len(tokens) != 1:
        raise FormatError(f"%{name}: expected exactly one field name, got {len(tokens)}")


def _typedef(name: str, tokens: list[str]) -> None:
    if len(tokens) < 2:
        raise FormatError(f"%{name}: missing type name and/or type description")
    if not _TYPE_NAME.fullmatch(tokens[0]):
        raise FormatError(f"%{name}: invalid type name {tokens[0]!r}")


def _type(name: str, tokens: list[str]) -> None:
    if len(tokens) < 2:
        raise FormatError(f"%{name}: missing field list, type name, or type description")


def _size(name: str, tokens: list[str]) -> None:
    _at_least_one(name, tokens)
    if len(tokens) > 2:
        raise FormatError(f"%{name}: too many arguments")
    if not _INTEGER.fullmatch(tokens[-1]):
        raise FormatError(f"%{name}: invalid record count {tokens[-1]!r}")
    # Rejects the four relational operators, not everything else.
    if len(tokens) == 2 and tokens[0] in RELATIONAL_OPERATORS:
        raise FormatError(f"%{name}: invalid relational operator {tokens[0]!r}")


RULES: Mapping[str, Rule] = MappingProxyType({
    "rec": _rec,
    "mandatory": _at_least_one,
    "allowed": _at_least_one,
    "prohibit": _at_least_one,
    "unique": _at_least_one,
    "key": _key,
    "doc": _no_rule,
    "typedef": _typedef,
    "type": _type,
    "auto": _at_least_one,
    "sort": _at_least_one,
    "size": _size,
    "constraint": _at_least_one,
    "confidential": _no_rule,
})


def validate_property(prop: Property) -> None:
    """Raise FormatError if a known property's value breaks its syntax rule."""
    rule = RULES.get(prop.name)
    if rule is not None:
        rule(prop.name, prop.value.split())
