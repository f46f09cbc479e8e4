"""
repositories/user_repo.py
--------------------------
Typed access to the demo schema's stored functions. Each method uses
the mapping mode that matches the function's return style.
"""

from typing import Optional

from models.user import User, UserProfile, UserSummary
from repositories.function_repo import FunctionRepository
from utils.logger import get_logger

logger = get_logger(__name__)

SUMMARY_FIELDS = ("user_id", "name", "order_count", "total_spent")


class UserRepository:
    """Repository for the get_users_by_status / get_user_summary / get_user_profile functions."""

    def __init__(self, functions: Optional[FunctionRepository] = None):
        self.functions = functions or FunctionRepository()

    def get_users_by_status(self, status: str) -> list[User]:
        """
        Fetch users with the given status (RETURNS TABLE, dict rows).

        Returns:
            List of User objects ordered by id.
        """
        rows = self.functions.call_table("get_users_by_status", [status])
        return [User.from_dict(r) for r in rows]

    def get_user_summary(self, user_id: int) -> Optional[UserSummary]:
        """
        Fetch the composite ``user_summary`` for a user.

        A composite-returning SQL function yields one all-NULL row for an
        unknown user, which maps to None here.
        """
        record = self.functions.call_composite(
            "get_user_summary", [user_id], fields=SUMMARY_FIELDS, typename="UserSummaryRecord"
        )
        if record is None or all(v is None for v in record):
            logger.info(f"No summary for user {user_id}")
            return None
        return UserSummary.from_record(record)

    def get_user_profile(self, user_id: int) -> Optional[UserProfile]:
        """Fetch a user's profile and orders as one server-built JSON document."""
        doc = self.functions.call_json("get_user_profile", [user_id])
        if doc is None:
            logger.info(f"No profile for user {user_id}")
            return None
        return UserProfile.from_json(doc)
