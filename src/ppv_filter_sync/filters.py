"""
Filter model module.

This module holds the filter entity, its codec to and from the untyped
payloads stored in the settings document, and the keyed filter collection.
"""

import json
import logging
from dataclasses import dataclass
from typing import Any, Dict, Iterator, Optional, Tuple

from .utils import SanitizedLogger


# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(levelname)s - %(message)s'
)
logger = SanitizedLogger(logging.getLogger(__name__))


# Name marking a filter as generated by the sync routine
AUTOMATED_FILTER_NAME = "Automated"

# Match field for filters on the playlist category
GROUP_TITLE_FILTER_TYPE = "group-title"

STRING_FIELDS = ('type', 'name', 'filter')
BOOLEAN_FIELDS = ('active', 'case_sensitive')


class DecodeError(ValueError):
    """Raised when a stored payload is not a valid filter encoding."""


@dataclass(frozen=True)
class FilterEntity:
    """
    A single inclusion/exclusion rule.

    The ``name`` doubles as the provenance tag: filters named
    ``AUTOMATED_FILTER_NAME`` were generated by the sync routine, every other
    name belongs to a filter the user created.
    """

    type: str
    name: str
    filter: str
    active: bool = True
    case_sensitive: bool = False

    @property
    def is_automated(self) -> bool:
        return self.name == AUTOMATED_FILTER_NAME


def decode_filter(payload: Any) -> FilterEntity:
    """
    Decode a stored payload into a FilterEntity.

    Args:
        payload: Mapping with the filter fields, or JSON text encoding one

    Returns:
        FilterEntity: Decoded filter

    Raises:
        DecodeError: If the payload is missing a field or a field has the wrong type
    """
    if isinstance(payload, (str, bytes)):
        try:
            payload = json.loads(payload)
        except ValueError as e:
            raise DecodeError(f"Filter payload is not valid JSON: {e}") from e

    if not isinstance(payload, dict):
        raise DecodeError(f"Filter payload must be an object, got {type(payload).__name__}")

    for field in STRING_FIELDS:
        if not isinstance(payload.get(field), str):
            raise DecodeError(f"Filter field '{field}' must be a string")

    # bool only: 0/1 from a hand-edited file is not a valid flag
    for field in BOOLEAN_FIELDS:
        if not isinstance(payload.get(field), bool):
            raise DecodeError(f"Filter field '{field}' must be a boolean")

    return FilterEntity(
        type=payload['type'],
        name=payload['name'],
        filter=payload['filter'],
        active=payload['active'],
        case_sensitive=payload['case_sensitive'],
    )


def encode_filter(entity: FilterEntity) -> Dict[str, Any]:
    """Encode a FilterEntity into the payload stored in the settings document."""
    return {
        'type': entity.type,
        'name': entity.name,
        'filter': entity.filter,
        'active': entity.active,
        'case_sensitive': entity.case_sensitive,
    }


def build_automated_filter(category: str, case_sensitive: bool = False) -> FilterEntity:
    """Build the automated group-title filter for a category."""
    return FilterEntity(
        type=GROUP_TITLE_FILTER_TYPE,
        name=AUTOMATED_FILTER_NAME,
        filter=category,
        active=True,
        case_sensitive=case_sensitive,
    )


class FilterCollection:
    """
    Keyed set of stored filter payloads.

    Payloads are kept untyped, exactly as loaded, and decoded on read. New
    entries get keys from a counter that only moves forward, so a key freed by
    ``remove`` is never handed out again by this collection.
    """

    def __init__(self, entries: Optional[Dict[int, Any]] = None):
        self._entries: Dict[int, Any] = {}
        self._next_key = 0
        for key, payload in (entries or {}).items():
            self.put(key, payload)

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: int) -> bool:
        return key in self._entries

    def __iter__(self) -> Iterator[int]:
        return iter(self._entries)

    def items(self) -> Iterator[Tuple[int, Any]]:
        return iter(list(self._entries.items()))

    def get(self, key: int) -> Any:
        """Return the raw payload stored under key."""
        return self._entries[key]

    def get_filter(self, key: int) -> FilterEntity:
        """Return the decoded filter stored under key."""
        return decode_filter(self._entries[key])

    def put(self, key: int, payload: Any) -> None:
        """Store a payload under an explicit key, e.g. while loading settings."""
        if not isinstance(key, int) or isinstance(key, bool):
            raise TypeError(f"Filter key must be an integer, got {key!r}")
        self._entries[key] = payload
        self._next_key = max(self._next_key, key + 1)

    def add(self, entity: FilterEntity) -> int:
        """
        Insert a filter under a fresh key.

        Args:
            entity (FilterEntity): Filter to insert

        Returns:
            int: The key assigned to the new entry
        """
        key = self._next_key
        self._entries[key] = encode_filter(entity)
        self._next_key += 1
        return key

    def remove(self, key: int) -> Any:
        """Remove and return the payload stored under key."""
        return self._entries.pop(key)

    def filters(self) -> Iterator[Tuple[int, FilterEntity]]:
        """Yield (key, filter) for every entry that decodes."""
        for key, payload in self.items():
            try:
                yield key, decode_filter(payload)
            except DecodeError:
                continue

    def to_dict(self) -> Dict[int, Any]:
        return dict(self._entries)


def remove_automated_filters(collection: FilterCollection) -> FilterCollection:
    """
    Remove every automated filter from the collection in place.

    Entries that cannot be decoded are left where they are: cleanup never
    deletes what it cannot classify.

    Args:
        collection (FilterCollection): Collection to clean

    Returns:
        FilterCollection: The same collection, without automated entries
    """
    removed = 0
    for key, payload in collection.items():
        try:
            entity = decode_filter(payload)
        except DecodeError as e:
            logger.warning(f"Skipping undecodable filter entry {key}: {e}")
            continue

        if entity.is_automated:
            collection.remove(key)
            removed += 1
            logger.debug(f"Removed automated filter {key}: {entity.filter}")

    logger.info(f"Removed {removed} automated filters, {len(collection)} entries remain")
    return collection
