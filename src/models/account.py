from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Optional


class Plan(str, Enum):
    """Тарифные планы"""
    FREE = "free"
    PRO = "pro"
    PREMIUM = "premium"


class Role(str, Enum):
    USER = "user"
    ADMIN = "admin"


@dataclass
class Subscription:
    """Подписка пользователя и месячное использование"""
    plan: Plan = Plan.FREE
    quota: int = 10  # максимум изображений в месяц
    used: int = 0
    expires_at: Optional[datetime] = None
    reset_at: Optional[datetime] = None


@dataclass
class Account:
    """Пользователь с точки зрения квот"""
    user_id: Any
    role: Role = Role.USER
    subscription: Subscription = field(default_factory=Subscription)

    @property
    def is_admin(self) -> bool:
        return self.role == Role.ADMIN
