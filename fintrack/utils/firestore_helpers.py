"""
Firestore query helpers shared by the ledger services.
"""

from typing import Any, Dict, Optional


def where_filter(query, field_path: str, op_string: str, value):
    """
    Apply one where clause.

    Positional arguments work across firebase_admin versions; the keyword
    FieldFilter form only exists in newer google-cloud-firestore releases.

    Usage:
        query = where_filter(collection, "user_id", "==", user_id)
        query = where_filter(query, "occurred_at", ">=", "2025-08-01")
    """
    return query.where(field_path, op_string, value)


def doc_to_dict(doc) -> Optional[Dict[str, Any]]:
    """Snapshot -> plain dict with its document id, or None if it does not exist."""
    if not doc.exists:
        return None
    data = doc.to_dict() or {}
    data["id"] = doc.id
    return data
