from __future__ import annotations

from enum import Enum


class Role(str, Enum):
    """Roles known to the session gate."""

    ADMIN = "admin"
    STUDENT = "student"


class PaymentMethod(str, Enum):
    CASH = "cash"
    BANK = "bank"
    CARD = "card"
    ONLINE = "online"
