"""
In-memory stand-in for the small part of the Firestore client the ledger
services use: collection/document refs, where(==, >=, <=, ...), stream().
"""

import itertools
from typing import Any, Dict, List, Optional, Tuple

_OPS = {
    "==": lambda a, b: a == b,
    "!=": lambda a, b: a != b,
    ">=": lambda a, b: a is not None and a >= b,
    "<=": lambda a, b: a is not None and a <= b,
    ">": lambda a, b: a is not None and a > b,
    "<": lambda a, b: a is not None and a < b,
}


class FakeSnapshot:
    def __init__(self, doc_id: str, data: Optional[Dict[str, Any]]):
        self.id = doc_id
        self._data = data

    @property
    def exists(self) -> bool:
        return self._data is not None

    def to_dict(self) -> Optional[Dict[str, Any]]:
        return dict(self._data) if self._data is not None else None


class FakeDocumentRef:
    def __init__(self, store: Dict[str, Dict[str, Any]], doc_id: str):
        self._store = store
        self.id = doc_id

    def set(self, data: Dict[str, Any]) -> None:
        self._store[self.id] = dict(data)

    def get(self) -> FakeSnapshot:
        return FakeSnapshot(self.id, self._store.get(self.id))

    def update(self, changes: Dict[str, Any]) -> None:
        if self.id not in self._store:
            raise KeyError(f"No document to update: {self.id}")
        self._store[self.id].update(changes)

    def delete(self) -> None:
        self._store.pop(self.id, None)


class FakeQuery:
    def __init__(self, store: Dict[str, Dict[str, Any]], filters: Tuple = (), limit: Optional[int] = None):
        self._store = store
        self._filters = filters
        self._limit = limit

    def where(self, field_path: str, op_string: str, value: Any) -> "FakeQuery":
        return FakeQuery(self._store, self._filters + ((field_path, _OPS[op_string], value),), self._limit)

    def limit(self, count: int) -> "FakeQuery":
        return FakeQuery(self._store, self._filters, count)

    def stream(self) -> List[FakeSnapshot]:
        matches = [
            FakeSnapshot(doc_id, data)
            for doc_id, data in self._store.items()
            if all(op(data.get(field), value) for field, op, value in self._filters)
        ]
        return matches[: self._limit] if self._limit is not None else matches


class FakeCollection(FakeQuery):
    _ids = itertools.count(1)

    def __init__(self, name: str, store: Dict[str, Dict[str, Any]]):
        super().__init__(store)
        self.name = name

    def document(self, doc_id: Optional[str] = None) -> FakeDocumentRef:
        return FakeDocumentRef(self._store, doc_id or f"{self.name}-{next(self._ids)}")


class FakeFirestore:
    def __init__(self):
        self._collections: Dict[str, Dict[str, Dict[str, Any]]] = {}

    def collection(self, name: str) -> FakeCollection:
        return FakeCollection(name, self._collections.setdefault(name, {}))

    def collections(self) -> List[FakeCollection]:
        return [self.collection(name) for name in self._collections]


class BrokenFirestore:
    """Every call fails, like a client with revoked credentials."""

    def collections(self):
        raise ConnectionError("firestore unreachable")

    def collection(self, name: str):
        raise ConnectionError("firestore unreachable")


class FakeClock:
    """Millisecond clock the tests move by hand."""

    def __init__(self, start_ms: float = 0.0):
        self.now_ms = start_ms

    def __call__(self) -> float:
        return self.now_ms

    def advance(self, ms: float) -> None:
        self.now_ms += ms
