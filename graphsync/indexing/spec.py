"""Index specification model and parser.

Format (comma separated, whitespace between tokens tolerated):

    index_name:Label(prop1,prop2),other_index:OtherLabel(prop)

Entries that do not match the grammar are skipped. Declaring the same label
twice is fatal.
"""
from __future__ import annotations

import re
from dataclasses import dataclass
from types import MappingProxyType
from typing import Iterable, Mapping

from graphsync.indexing.errors import SpecParseError

_INDEX_SPEC_RE = re.compile(
    r"(?P<index_name>[a-z][a-z_-]*)\s*:\s*(?P<label>[A-Za-z0-9]+)\s*\((?P<props>[^)]+)\)"
)
_PROP_RE = re.compile(r"[A-Za-z0-9_]+")


@dataclass(frozen=True)
class IndexDefinition:
    """One index fed by a label, with the properties copied into each document."""

    index_name: str
    properties: tuple[str, ...]

    def __post_init__(self) -> None:
        # Set semantics, first-seen order kept for stable document field order.
        object.__setattr__(self, "properties", tuple(dict.fromkeys(self.properties)))

    def __str__(self) -> str:
        return f"IndexDefinition {self.index_name}: ({','.join(self.properties)})"


IndexSpecMapping = Mapping[str, tuple[IndexDefinition, ...]]

EMPTY_MAPPING: IndexSpecMapping = MappingProxyType({})


def parse_index_spec(spec: str | None) -> IndexSpecMapping:
    """Parse an index specification into a read-only label -> definitions mapping.

    Raises:
        SpecParseError: if a label is declared more than once.
    """
    if not spec:
        return EMPTY_MAPPING

    mapping: dict[str, tuple[IndexDefinition, ...]] = {}
    for match in _INDEX_SPEC_RE.finditer(spec):
        label = match.group("label")
        if label in mapping:
            raise SpecParseError(match.group(0))

        props = _PROP_RE.findall(match.group("props"))
        mapping[label] = (IndexDefinition(index_name=match.group("index_name"), properties=tuple(props)),)

    return MappingProxyType(mapping)


def indexed_labels(mapping: IndexSpecMapping, labels: Iterable[str]) -> list[str]:
    """Return the given labels that have at least one index definition, in input order."""
    return [label for label in labels if label in mapping]
