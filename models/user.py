"""
models/user.py
--------------
Domain models built from the results of the demo stored functions.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Optional

from dateutil.parser import isoparse


def parse_timestamp(value: Optional[str]) -> Optional[datetime]:
    """Parse an ISO timestamp from json_build_object (fraction digits vary)."""
    return isoparse(value) if value else None


@dataclass
class User:
    """
    A row of ``get_users_by_status``.

    Attributes:
        id: Database primary key.
        name: Display name.
        email: Unique e-mail address.
        created_at: Timestamp when the user was created.
    """
    id: int
    name: str
    email: str
    created_at: Optional[datetime] = None

    @classmethod
    def from_dict(cls, row: dict) -> "User":
        return cls(
            id=row["id"],
            name=row["name"],
            email=row["email"],
            created_at=row.get("created_at"),
        )


@dataclass
class UserSummary:
    """
    The ``user_summary`` composite type returned by ``get_user_summary``.

    Attributes:
        user_id: The summarized user.
        name: User's display name.
        order_count: Number of orders placed.
        total_spent: Sum of all order amounts.
    """
    user_id: int
    name: str
    order_count: int
    total_spent: float

    @classmethod
    def from_record(cls, record: Any) -> "UserSummary":
        """Build from a named tuple with the composite's field names."""
        return cls(
            user_id=record.user_id,
            name=record.name,
            order_count=int(record.order_count or 0),
            total_spent=float(record.total_spent or 0),
        )

    def __str__(self) -> str:
        return f"{self.name} (#{self.user_id}): {self.order_count} orders, {self.total_spent:.2f} total"


@dataclass
class Order:
    id: int
    amount: float
    created_at: Optional[datetime] = None

    @classmethod
    def from_json(cls, doc: dict) -> "Order":
        return cls(
            id=doc["id"],
            amount=float(doc["amount"]),
            created_at=parse_timestamp(doc.get("created_at")),
        )


@dataclass
class UserProfile:
    """A user and their orders, decoded from ``get_user_profile``'s JSON."""
    user: User
    status: str
    orders: list[Order] = field(default_factory=list)

    @classmethod
    def from_json(cls, doc: dict) -> "UserProfile":
        user = User(
            id=doc["id"],
            name=doc["name"],
            email=doc["email"],
            created_at=parse_timestamp(doc.get("created_at")),
        )
        return cls(
            user=user,
            status=doc.get("status", "active"),
            orders=[Order.from_json(o) for o in doc.get("orders") or []],
        )

    @property
    def total_spent(self) -> float:
        return sum(o.amount for o in self.orders)
