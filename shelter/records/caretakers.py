"""Caretaker identity resolution performed when an animal record is created."""

from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass

from shelter.data.schemas import CaretakerRef
from shelter.records.criteria import SearchCriteria, TextMatch
from shelter.store.adapter import AnimalStore

logger = logging.getLogger(__name__)


def normalize_email(email: str) -> str:
    """Matching key for caretaker emails: stripped and lower-cased."""
    return email.strip().lower()


@dataclass(frozen=True)
class Resolution:
    """Outcome of resolving one caretaker.

    ``rename_pending`` is set when the caretaker was previously known under
    another name; the rename is applied only after the new record is stored.
    """

    caretaker: CaretakerRef
    email_key: str
    rename_pending: bool = False


class CaretakerResolver:
    """Decide which caretaker identity a newly created record belongs to.

    Existing animal records are searched first for a caretaker with the
    same email (case-insensitive), so identities assigned outside creation
    are reused. The caretaker registry, keyed by normalized email, then
    settles the identifier with one atomic create-if-absent, so concurrent
    creations for the same new email agree on one identifier.

    When an existing caretaker is resubmitted under a different name, the
    newest name wins everywhere: the registry and every record of that
    caretaker are renamed once the new record is stored. The identifier
    itself never changes.

    Args:
        store: Store adapter owning the caretaker registry.
    """

    def __init__(self, store: AnimalStore) -> None:
        self.store = store

    async def _find_in_records(self, email: str) -> dict | None:
        """Caretaker of any stored record whose email matches, if one exists."""
        criteria = SearchCriteria(
            (TextMatch("current_caretaker.email", email.strip(), exact=True),)
        )
        hits = await self.store.find(criteria, limit=1)
        if not hits:
            return None
        _, document = hits[0]
        return document["current_caretaker"]

    async def resolve(self, email: str, name: str) -> Resolution:
        """Decide the caretaker reference to embed in a new record.

        Args:
            email: Caretaker email as submitted.
            name: Caretaker display name as submitted.

        Returns:
            Resolution carrying a CaretakerRef with the existing or newly
            minted identifier and the submitted name and email.

        Raises:
            StoreError: If the records or the registry cannot be read or
                written.
        """
        key = normalize_email(email)
        existing = await self._find_in_records(email)
        candidate = {
            "caretaker_id": existing["id"] if existing else uuid.uuid4().hex,
            "caretaker_name": name,
            "email": email,
        }
        registered, created = await self.store.find_or_create_caretaker(key, candidate)
        caretaker_id = registered["caretaker_id"]

        if not created:
            previous_name = registered.get("caretaker_name")
        elif existing:
            previous_name = existing.get("caretaker_name")
        else:
            previous_name = None

        if previous_name is None:
            logger.info("Registered new caretaker %s", caretaker_id)
        else:
            logger.info("Reusing caretaker %s", caretaker_id)

        return Resolution(
            caretaker=CaretakerRef(id=caretaker_id, caretaker_name=name, email=email),
            email_key=key,
            rename_pending=previous_name is not None and previous_name != name,
        )

    async def apply_rename(self, resolution: Resolution) -> None:
        """Propagate the resolved name to the registry and existing records."""
        if not resolution.rename_pending:
            return
        caretaker = resolution.caretaker
        updated = await self.store.rename_caretaker(
            resolution.email_key, caretaker.id, caretaker.caretaker_name
        )
        logger.info("Renamed caretaker %s on %d record(s)", caretaker.id, updated)
