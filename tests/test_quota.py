"""
Тесты для QuotaGate (квоты и подписки)
"""
import pytest
from datetime import datetime, timedelta
from src.exceptions import QuotaExceededError, SubscriptionExpiredError
from src.models.account import Account, Plan, Role, Subscription
from src.models.config import PlanConfig, QuotaConfig
from src.quota.gate import QuotaGate


NOW = datetime(2026, 10, 19, 12, 0, 0)


def test_new_subscription_uses_plan_quota():
    """Тест квоты новой подписки из конфигурации"""
    gate = QuotaGate(QuotaConfig(reset_period_days=30, plans={"pro": PlanConfig(quota=250)}))

    subscription = gate.new_subscription(Plan.PRO, now=NOW)

    assert subscription.quota == 250
    assert subscription.used == 0
    assert subscription.reset_at == NOW + timedelta(days=30)


def test_unknown_plan_falls_back_to_free():
    """Тест квоты плана без настроек"""
    config = QuotaConfig(plans={"free": PlanConfig(quota=5)})

    assert config.quota_for("premium") == 5


def test_check_within_quota():
    """Тест проверки в пределах квоты"""
    gate = QuotaGate()
    account = Account(user_id=1, subscription=Subscription(quota=10, used=7))

    gate.check(account, requested=3, now=NOW)


def test_check_exceeded():
    """Тест превышения квоты"""
    gate = QuotaGate()
    account = Account(user_id=1, subscription=Subscription(quota=10, used=9))

    with pytest.raises(QuotaExceededError) as exc_info:
        gate.check(account, requested=2, now=NOW)

    assert exc_info.value.to_dict() == {"used": 9, "limit": 10, "plan": "free"}


def test_check_expired_subscription():
    """Тест истёкшей подписки"""
    gate = QuotaGate()
    account = Account(
        user_id=1,
        subscription=Subscription(plan=Plan.PRO, quota=100, expires_at=NOW - timedelta(days=1))
    )

    with pytest.raises(SubscriptionExpiredError):
        gate.check(account, now=NOW)


def test_check_resets_usage_after_reset_date():
    """Тест сброса использования после даты сброса"""
    gate = QuotaGate(QuotaConfig(reset_period_days=30))
    account = Account(
        user_id=1,
        subscription=Subscription(quota=10, used=10, reset_at=NOW - timedelta(hours=1))
    )

    gate.check(account, requested=4, now=NOW)

    assert account.subscription.used == 0
    assert account.subscription.reset_at == NOW + timedelta(days=30)


def test_admin_is_unlimited():
    """Тест: администратор без ограничений"""
    gate = QuotaGate()
    account = Account(
        user_id=1,
        role=Role.ADMIN,
        subscription=Subscription(quota=1, used=1, expires_at=NOW - timedelta(days=1))
    )

    gate.check(account, requested=100, now=NOW)
    gate.increment(account, 5)

    assert account.subscription.used == 1
    assert gate.remaining(account) is None


def test_increment_and_remaining():
    """Тест учёта использования"""
    gate = QuotaGate()
    account = Account(user_id=1, subscription=Subscription(quota=10, used=2))

    gate.increment(account, 3)
    gate.increment(account, 0)

    assert account.subscription.used == 5
    assert gate.remaining(account) == 5


def test_release_returns_quota():
    """Тест возврата списанной квоты"""
    gate = QuotaGate()
    account = Account(user_id=1, subscription=Subscription(quota=10, used=4))
    admin = Account(user_id=2, role=Role.ADMIN, subscription=Subscription(quota=10, used=1))

    gate.release(account, 3)
    assert account.subscription.used == 1

    gate.release(account, 5)
    assert account.subscription.used == 0

    gate.release(admin, 1)
    assert admin.subscription.used == 1
