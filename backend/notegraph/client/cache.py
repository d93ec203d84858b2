"""
NoteGraph — Normalized Client Cache
=====================================

What:  Client-side store keyed by entity type + id, plus root query entries
       that hold references into it.
Why:   One write of a Note (e.g. after updateNote) is visible to every cached
       query that references it, with no refetch.
How:   Responses are normalized on write: every object with __typename and id
       becomes an entity "Note:<id>" and is replaced by {"__ref": "Note:<id>"}.
       Reads resolve references back into plain dicts.

Layout:
    entities:  {"Note:1f0c…": {"__typename": "Note", "id": "1f0c…", "title": …}}
    root:      {'notes({})':              RootEntry(value=[{"__ref": …}, …], seq=4),
                'notes({"search":"sql"})': RootEntry(value=[…], seq=7),
                'note({"id":"1f0c…"})':   RootEntry(value={"__ref": …}, seq=5)}

Ordering of concurrent responses:
    Every query request takes a sequence number when it starts
    (next_sequence). write_query ignores a response older than the one that
    last wrote the same entry, so a slow response can never replace a newer
    result (last-write-wins by request start). Cache patches made by mutations
    (modify, evict) take a sequence number too, so a query that was already
    in flight when a note was created or deleted cannot undo the patch.

Lifecycle:
    One instance per NotesClient, passed by reference; reset() on shutdown.
"""

import itertools
import json
import logging
from dataclasses import dataclass
from typing import Any, Callable, Dict, Iterator, Optional

logger = logging.getLogger(__name__)

REF_KEY = "__ref"

# Returned by read_query when nothing is cached for the key
MISSING = object()


@dataclass
class RootEntry:
    field: str
    args: Dict[str, Any]
    value: Any
    seq: int = 0


def is_ref(value: Any) -> bool:
    return isinstance(value, dict) and REF_KEY in value and len(value) == 1


class NormalizedCache:
    """In-memory normalized cache for GraphQL results."""

    def __init__(self) -> None:
        self._entities: Dict[str, Dict[str, Any]] = {}
        self._root: Dict[str, RootEntry] = {}
        self._sequence = itertools.count(1)

    # ── Keys ──────────────────────────────────────────────────────────────

    @staticmethod
    def identify(typename: str, entity_id: Any) -> str:
        return f"{typename}:{entity_id}"

    @staticmethod
    def canonical_args(args: Optional[Dict[str, Any]]) -> Dict[str, Any]:
        """Arguments with None dropped: notes() and notes(search=None) share an entry."""
        return {k: v for k, v in (args or {}).items() if v is not None}

    @classmethod
    def root_key(cls, field_name: str, args: Optional[Dict[str, Any]] = None) -> str:
        canonical = json.dumps(cls.canonical_args(args), sort_keys=True, separators=(",", ":"))
        return f"{field_name}({canonical})"

    def next_sequence(self) -> int:
        return next(self._sequence)

    # ── Entities ──────────────────────────────────────────────────────────

    def write_entity(self, data: Dict[str, Any]) -> Dict[str, str]:
        """
        Merge an object into its entity and return a reference to it.

        Fields absent from `data` keep their cached values, so a partial
        result (updateNote has no createdAt) does not erase anything.
        """
        key = self.identify(data["__typename"], data["id"])
        entity = self._entities.setdefault(key, {})
        for name, value in data.items():
            entity[name] = self.normalize(value)
        return {REF_KEY: key}

    def read_entity(self, typename: str, entity_id: Any) -> Optional[Dict[str, Any]]:
        return self.resolve({REF_KEY: self.identify(typename, entity_id)})

    def read_field(self, ref: Dict[str, str], name: str) -> Any:
        """One field of a referenced entity, without copying the rest."""
        entity = self._entities.get(ref[REF_KEY])
        return entity.get(name) if entity is not None else None

    # ── Normalization ─────────────────────────────────────────────────────

    def normalize(self, value: Any) -> Any:
        if isinstance(value, list):
            return [self.normalize(item) for item in value]
        if isinstance(value, dict):
            if "__typename" in value and "id" in value:
                return self.write_entity(value)
            return {k: self.normalize(v) for k, v in value.items()}
        return value

    def resolve(self, value: Any) -> Any:
        """Turn references back into plain dicts; dangling refs drop out."""
        if is_ref(value):
            entity = self._entities.get(value[REF_KEY])
            return self.resolve(entity) if entity is not None else None
        if isinstance(value, list):
            return [
                self.resolve(item) for item in value
                if not (is_ref(item) and item[REF_KEY] not in self._entities)
            ]
        if isinstance(value, dict):
            return {k: self.resolve(v) for k, v in value.items()}
        return value

    # ── Root queries ──────────────────────────────────────────────────────

    def write_query(
        self,
        field_name: str,
        args: Optional[Dict[str, Any]],
        value: Any,
        seq: Optional[int] = None,
    ) -> bool:
        """
        Store a query result. Returns False if it was dropped as stale.

        Args:
            seq: Sequence taken when the request started; None means "now".
        """
        key = self.root_key(field_name, args)
        seq = seq if seq is not None else self.next_sequence()
        existing = self._root.get(key)
        if existing is not None and existing.seq > seq:
            logger.debug("Dropping stale result for %s (seq %d < %d)", key, seq, existing.seq)
            return False
        self._root[key] = RootEntry(
            field=field_name,
            args=self.canonical_args(args),
            value=self.normalize(value),
            seq=seq,
        )
        return True

    def read_query(self, field_name: str, args: Optional[Dict[str, Any]] = None) -> Any:
        entry = self._root.get(self.root_key(field_name, args))
        if entry is None:
            return MISSING
        return self.resolve(entry.value)

    def has_query(self, field_name: str, args: Optional[Dict[str, Any]] = None) -> bool:
        return self.root_key(field_name, args) in self._root

    def entries(self, field_name: str) -> Iterator[RootEntry]:
        return (entry for entry in self._root.values() if entry.field == field_name)

    def modify(
        self,
        field_name: str,
        updater: Callable[[Any, Dict[str, Any]], Any],
    ) -> int:
        """
        Rewrite every cached entry of `field_name`.

        `updater(value, args)` receives the normalized value (references, not
        dicts) and the entry's arguments, and returns the new value. Returns
        how many entries changed.

        A changed entry takes a fresh sequence number, so a query response
        that started before this write cannot replace it.
        """
        changed = 0
        for entry in self.entries(field_name):
            new_value = updater(entry.value, entry.args)
            if new_value is not entry.value:
                entry.value = new_value
                entry.seq = self.next_sequence()
                changed += 1
        return changed

    # ── Removal ───────────────────────────────────────────────────────────

    def evict(self, typename: str, entity_id: Any) -> bool:
        """
        Drop an entity and every reference to it from root entries.

        List entries lose the reference; single-object entries become None.
        Entries that change take a fresh sequence number, as in modify().
        """
        key = self.identify(typename, entity_id)
        ref = {REF_KEY: key}
        removed = self._entities.pop(key, None) is not None
        for entry in self._root.values():
            if isinstance(entry.value, list) and ref in entry.value:
                entry.value = [item for item in entry.value if item != ref]
                entry.seq = self.next_sequence()
            elif entry.value == ref:
                entry.value = None
                entry.seq = self.next_sequence()
        return removed

    def reset(self) -> None:
        self._entities.clear()
        self._root.clear()

    def __len__(self) -> int:
        return len(self._entities)
