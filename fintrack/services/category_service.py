"""
Category Service - user-owned spending/income categories in Firestore.
"""

from typing import Dict, List, Optional

from fintrack.models.category import CategoryCreate, CategoryUpdate
from fintrack.services.user_scoped import UserScopedService


class CategoryService(UserScopedService):
    """
    Service for category management.
    """

    collection_name = "categories"

    def list_categories(self, user_id: str) -> List[Dict]:
        """All categories of a user, newest first."""
        categories = self._list(self._query_for_user(user_id))
        return sorted(categories, key=self._created_key, reverse=True)

    def get_category(self, user_id: str, category_id: str) -> Dict:
        return self._get_owned(user_id, category_id)

    def create_category(self, user_id: str, data: CategoryCreate) -> Dict:
        return self._create(user_id, data.model_dump())

    def update_category(self, user_id: str, category_id: str, data: CategoryUpdate) -> Dict:
        return self._update(user_id, category_id, data.model_dump(exclude_unset=True))

    def delete_category(self, user_id: str, category_id: str) -> None:
        self._delete(user_id, category_id)

    def names_by_id(self, user_id: str) -> Dict[str, str]:
        """category id -> name, used to label reports and budgets."""
        return {c["id"]: c.get("name", "") for c in self._list(self._query_for_user(user_id))}

    def find_by_name(self, user_id: str, name: str) -> Optional[Dict]:
        """Case-insensitive lookup, used to map AI category names to ids."""
        wanted = name.strip().lower()
        for category in self._list(self._query_for_user(user_id)):
            if str(category.get("name", "")).strip().lower() == wanted:
                return category
        return None
