"""
Composite keys and keyed indexes.

Surrogate IDs differ between environments, so entities are matched on a
natural key built from one or more of their string attributes.
"""
from dataclasses import dataclass, field
from typing import Any, Callable, Iterable, Optional, Sequence

from core.formatting import format_value
from core.models import Attribute

# Reserved delimiter. Assumed never to appear inside a key attribute value.
KEY_SEPARATOR = "|"


def build_key(
    entity: Any,
    attributes: Sequence[Attribute],
    required: Optional[Sequence[Attribute]] = None
) -> str:
    """
    Build the composite key of an entity.

    Args:
        entity: Any entity exposing the given attributes
        attributes: Key-forming attributes, in key order
        required: Attributes that must be non-empty (defaults to all of them)

    Returns:
        The canonical attribute strings joined by KEY_SEPARATOR, or ""
        when a required attribute is null or empty. An incomplete key
        cannot be trusted to identify the same item in two environments.
    """
    if required is None:
        required = attributes

    for attribute in required:
        if format_value(attribute.read(entity)) == "":
            return ""

    return KEY_SEPARATOR.join(format_value(a.read(entity)) for a in attributes)


@dataclass
class KeyedIndex:
    """
    Mapping from composite key to entity.

    Built first-occurrence-wins: later entities with a key already seen
    are discarded and only counted.
    """
    entries: dict[str, Any] = field(default_factory=dict)
    duplicate_count: int = 0
    rejected_count: int = 0

    def __contains__(self, key: str) -> bool:
        return key in self.entries

    def __getitem__(self, key: str) -> Any:
        return self.entries[key]

    def __len__(self) -> int:
        return len(self.entries)

    def keys(self):
        return self.entries.keys()


def build_index(entities: Iterable[Any], key_fn: Callable[[Any], str]) -> KeyedIndex:
    """
    Index entities by composite key in source order.

    Entities with an empty key are dropped. On collision the first
    entity wins and later ones are discarded.
    """
    index = KeyedIndex()

    for entity in entities:
        key = key_fn(entity)
        if not key:
            index.rejected_count += 1
            continue
        if key in index.entries:
            index.duplicate_count += 1
            continue
        index.entries[key] = entity

    return index
