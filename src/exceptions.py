"""Исключения сервиса массовой обработки"""


class QueueError(Exception):
    """Базовая ошибка очереди задач"""


class ProcessorNotRegisteredError(QueueError):
    """Для пользователя не зарегистрирован обработчик задач"""

    def __init__(self, user_id):
        self.user_id = user_id
        super().__init__(f"No processor registered for user {user_id}")


class QuotaError(Exception):
    """Базовая ошибка проверки квоты"""


class QuotaExceededError(QuotaError):
    """Месячная квота исчерпана"""

    def __init__(self, used: int, limit: int, plan: str, requested: int = 1):
        self.used = used
        self.limit = limit
        self.plan = plan
        self.requested = requested
        super().__init__(
            f"Monthly quota exceeded ({used}/{limit}, requested {requested}). "
            f"Upgrade to continue."
        )

    def to_dict(self) -> dict:
        return {"used": self.used, "limit": self.limit, "plan": self.plan}


class SubscriptionExpiredError(QuotaError):
    """Срок подписки истёк"""

    def __init__(self):
        super().__init__("Subscription expired. Please renew your subscription.")


class RemoveBgError(Exception):
    """Ошибка внешнего сервиса удаления фона"""

    def __init__(self, status: int, message: str):
        self.status = status
        super().__init__(message or f"Background removal failed with status {status}")
