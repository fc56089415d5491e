"""
Base class for ledger services whose documents belong to one user.

Every document carries user_id and created_at. A document owned by someone
else is reported exactly like a missing one.
"""

from datetime import datetime, timezone
from typing import Any, Dict, List, Optional
import logging

from fintrack.config.firebase import get_db
from fintrack.core.exceptions import RecordNotFoundError
from fintrack.utils.firestore_helpers import doc_to_dict, where_filter

logger = logging.getLogger(__name__)


class UserScopedService:
    """CRUD plumbing over one Firestore collection, filtered by user_id."""

    collection_name: str = ""

    def __init__(self, db=None):
        self.db = db if db is not None else get_db()

    @property
    def collection(self):
        return self.db.collection(self.collection_name)

    def _query_for_user(self, user_id: str):
        return where_filter(self.collection, "user_id", "==", user_id)

    def _list(self, query) -> List[Dict[str, Any]]:
        return [doc_to_dict(doc) for doc in query.stream()]

    def _get_owned(self, user_id: str, record_id: str) -> Dict[str, Any]:
        """
        Fetch a document owned by user_id.

        Raises:
            RecordNotFoundError: missing, or owned by another user
        """
        data = doc_to_dict(self.collection.document(record_id).get())
        if data is None or data.get("user_id") != user_id:
            raise RecordNotFoundError(self.collection_name, record_id)
        return data

    def _create(self, user_id: str, fields: Dict[str, Any]) -> Dict[str, Any]:
        doc_ref = self.collection.document()
        record = {
            **fields,
            "user_id": user_id,
            "created_at": datetime.now(timezone.utc),
        }
        doc_ref.set(record)
        logger.info(f"✅ {self.collection_name} created: {doc_ref.id}")
        return {**record, "id": doc_ref.id}

    def _update(self, user_id: str, record_id: str, changes: Dict[str, Any]) -> Dict[str, Any]:
        current = self._get_owned(user_id, record_id)
        # user_id and created_at are never client-editable
        changes = {k: v for k, v in changes.items() if k not in ("user_id", "created_at", "id")}
        if changes:
            self.collection.document(record_id).update(changes)
            logger.info(f"{self.collection_name} updated: {record_id}")
        return {**current, **changes}

    def _delete(self, user_id: str, record_id: str) -> None:
        self._get_owned(user_id, record_id)
        self.collection.document(record_id).delete()
        logger.info(f"{self.collection_name} deleted: {record_id}")

    @staticmethod
    def _created_key(record: Dict[str, Any]) -> Optional[datetime]:
        return record.get("created_at") or datetime.min.replace(tzinfo=timezone.utc)
