"""Common utilities for tests."""

import unittest.mock
from typing import Any, Iterator, Optional

from mockfirestore import CollectionReference, Query
from mockfirestore.document import DocumentReference


class MockArrayUnion:
    def __init__(self, values: list[Any]) -> None:
        self.values = values

    def __iter__(self) -> Iterator[Any]:
        return iter(self.values)

    def __len__(self) -> int:
        return len(self.values)


class MockFieldFilter:
    def __init__(self, field_path: str, op_string: str, value: Any) -> None:
        self.field_path = field_path
        self.op_string = op_string
        self.value = value


def patch_mockfirestore() -> None:
    """Apply monkeypatches to mockfirestore to support FieldFilter and sentinels."""

    def collection_where(
        self: Any,
        field_path: Optional[str] = None,
        op_string: Optional[str] = None,
        value: Any = None,
        filter: Any = None,
    ) -> Any:  # noqa: E501
        if filter:
            return self._where(filter.field_path, filter.op_string, filter.value)
        return self._where(field_path, op_string, value)

    if not hasattr(CollectionReference, "_where"):
        CollectionReference._where = CollectionReference.where
        CollectionReference.where = collection_where

    def query_where(
        self: Any,
        field_path: Optional[str] = None,
        op_string: Optional[str] = None,
        value: Any = None,
        filter: Any = None,
    ) -> Any:
        if filter:
            return self._where(filter.field_path, filter.op_string, filter.value)
        return self._where(field_path, op_string, value)

    if not hasattr(Query, "_where"):
        Query._where = Query.where
        Query.where = query_where

    # Transactional reads pass transaction= to DocumentReference.get
    if not hasattr(DocumentReference, "_orig_get"):
        DocumentReference._orig_get = DocumentReference.get

        def doc_ref_get(self: Any, transaction: Any = None) -> Any:
            return self._orig_get()

        DocumentReference.get = doc_ref_get

    if not hasattr(DocumentReference, "_orig_update"):
        DocumentReference._orig_update = DocumentReference.update

        def patched_update(self: Any, data: dict[str, Any]) -> Any:
            current_data = self.get().to_dict() or {}
            new_data = {}
            for k, v in data.items():
                if isinstance(v, MockArrayUnion):
                    existing = current_data.get(k, [])
                    if not isinstance(existing, list):
                        existing = []
                    # Firestore does a set union
                    merged = list(existing)
                    for item in v.values:
                        if item not in merged:
                            merged.append(item)
                    new_data[k] = merged
                else:
                    new_data[k] = v
            return self._orig_update(new_data)

        DocumentReference.update = patched_update


class MockBatch:
    def __init__(self, db: Any) -> None:
        self.db = db
        self.updates: list[tuple[Any, Any]] = []
        self.commit = unittest.mock.MagicMock(side_effect=self._real_commit)

    def update(self, ref: Any, data: Any) -> None:
        self.updates.append((ref, data))

    def _real_commit(self) -> None:
        for ref, data in self.updates:
            ref.update(data)


class MockTransaction:
    """Applies transactional writes immediately; tests run single-threaded."""

    def __init__(self) -> None:
        self.updates: list[tuple[Any, Any]] = []

    def update(self, ref: Any, data: Any) -> None:
        self.updates.append((ref, data))
        ref.update(data)


def make_mock_firestore_module(db: Any) -> unittest.mock.MagicMock:
    """Build a stand-in for firebase_admin.firestore backed by ``db``."""
    module = unittest.mock.MagicMock()
    module.client.return_value = db
    module.FieldFilter = MockFieldFilter
    module.ArrayUnion = MockArrayUnion
    module.SERVER_TIMESTAMP = "SERVER_TIMESTAMP"
    module.transactional = lambda func: func
    return module


def attach_write_mocks(db: Any) -> list[MockBatch]:
    """Give ``db`` batch() and transaction() that work with mockfirestore.

    Returns the list every created batch is appended to.
    """
    batches: list[MockBatch] = []

    def new_batch() -> MockBatch:
        batch = MockBatch(db)
        batches.append(batch)
        return batch

    db.batch = unittest.mock.MagicMock(side_effect=new_batch)
    db.transaction = unittest.mock.MagicMock(side_effect=MockTransaction)
    return batches
