"""Проверка квот и подписок перед постановкой задач в очередь"""

from datetime import datetime, timedelta
from typing import Optional
from loguru import logger

from src.exceptions import QuotaExceededError, SubscriptionExpiredError
from src.models.account import Account, Plan, Subscription
from src.models.config import QuotaConfig


class QuotaGate:
    """Месячные квоты по тарифным планам"""

    def __init__(self, config: Optional[QuotaConfig] = None):
        """
        Args:
            config: Конфигурация квот (из config.quota)
        """
        self.config = config or QuotaConfig()
        self.reset_period = timedelta(days=self.config.reset_period_days)

    def new_subscription(self, plan: Plan = Plan.FREE, now: Optional[datetime] = None) -> Subscription:
        """Подписка с квотой плана и датой следующего сброса"""
        now = now or datetime.now()
        return Subscription(
            plan=plan,
            quota=self.config.quota_for(plan.value),
            reset_at=now + self.reset_period
        )

    def check(self, account: Account, requested: int = 1, now: Optional[datetime] = None) -> None:
        """
        Проверка, может ли пользователь поставить requested задач

        Если дата сброса прошла, использование обнуляется.

        Raises:
            SubscriptionExpiredError: Подписка истекла
            QuotaExceededError: Квоты не хватает на requested задач
        """
        if account.is_admin:
            return

        now = now or datetime.now()
        subscription = account.subscription

        if subscription.expires_at and now > subscription.expires_at:
            logger.info(f"Subscription of user {account.user_id} expired at {subscription.expires_at}")
            raise SubscriptionExpiredError()

        if subscription.reset_at and now > subscription.reset_at:
            subscription.used = 0
            subscription.reset_at = now + self.reset_period
            logger.info(f"Quota of user {account.user_id} reset, next reset at {subscription.reset_at}")

        if subscription.used + requested > subscription.quota:
            logger.info(
                f"Quota exceeded for user {account.user_id}: "
                f"{subscription.used}/{subscription.quota}, requested {requested}"
            )
            raise QuotaExceededError(
                used=subscription.used,
                limit=subscription.quota,
                plan=subscription.plan.value,
                requested=requested
            )

    def increment(self, account: Account, amount: int = 1) -> None:
        """Учесть использование (администраторы не учитываются)"""
        if account.is_admin or amount <= 0:
            return
        account.subscription.used += amount
        logger.debug(
            f"Quota usage of user {account.user_id}: "
            f"{account.subscription.used}/{account.subscription.quota}"
        )

    def release(self, account: Account, amount: int) -> None:
        """Вернуть ранее списанную квоту (не ниже нуля)"""
        if account.is_admin or amount <= 0:
            return
        account.subscription.used = max(account.subscription.used - amount, 0)
        logger.debug(
            f"Quota of user {account.user_id} released by {amount}: "
            f"{account.subscription.used}/{account.subscription.quota}"
        )

    def remaining(self, account: Account) -> Optional[int]:
        """Остаток квоты (None = без ограничений)"""
        if account.is_admin:
            return None
        return max(account.subscription.quota - account.subscription.used, 0)
