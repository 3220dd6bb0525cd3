"""Failures raised by the record service and its store adapter."""

from __future__ import annotations


class StoreError(RuntimeError):
    """The persistence layer is unreachable or rejected an operation.

    Wraps lower-level client exceptions; the original is kept as
    ``__cause__`` for logging and never shown to API callers.
    """


class RecordNotFoundError(LookupError):
    """An update or delete matched no animal record."""

    def __init__(self, record_id: str) -> None:
        super().__init__(f"Animal record (ID: {record_id}) not found")
        self.record_id = record_id
