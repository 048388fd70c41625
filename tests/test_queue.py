"""
Тесты для QueueStore (хранилище очередей пользователей)
"""
import pytest
from src.queue.store import QueueStore
from src.models.task import BulkTask, QueueStatus, ResultStatus, TaskResult


def make_tasks(*resources):
    return [BulkTask(resource=r) for r in resources]


async def echo(task):
    return task.resource


def test_add_creates_queue():
    """Тест создания очереди при первом добавлении"""
    store = QueueStore()

    store.add_to_queue("u1", make_tasks("a", "b"), echo)

    snapshot = store.get_queue_status("u1")
    assert snapshot is not None
    assert [t.resource for t in snapshot.tasks] == ["a", "b"]
    assert snapshot.status == QueueStatus.IDLE
    assert snapshot.current_index == 0
    assert snapshot.results == []
    assert store.get_processor("u1") is echo


def test_add_twice_concatenates_and_resets():
    """Тест: A затем B дают A ++ B со сброшенным состоянием прохода"""
    store = QueueStore()
    store.add_to_queue("u1", make_tasks("a", "b"), echo)

    queue = store.get_queue("u1")
    queue.status = QueueStatus.COMPLETED
    queue.current_index = 1
    queue.results = [TaskResult(task=queue.tasks[0], status=ResultStatus.SUCCESS, result="a")]

    store.add_to_queue("u1", make_tasks("c"))

    snapshot = store.get_queue_status("u1")
    assert [t.resource for t in snapshot.tasks] == ["a", "b", "c"]
    assert snapshot.status == QueueStatus.IDLE
    assert snapshot.current_index == 0
    assert snapshot.results == []
    # Обработчик без нового значения сохраняется
    assert store.get_processor("u1") is echo


def test_add_replaces_processor():
    """Тест замены обработчика"""
    store = QueueStore()

    async def other(task):
        return None

    store.add_to_queue("u1", make_tasks("a"), echo)
    store.add_to_queue("u1", make_tasks("b"), other)

    assert store.get_processor("u1") is other


def test_status_missing_queue():
    """Тест статуса несуществующей очереди"""
    store = QueueStore()

    assert store.get_queue_status("nobody") is None


def test_snapshot_is_detached():
    """Тест: изменение снимка не меняет очередь"""
    store = QueueStore()
    store.add_to_queue("u1", make_tasks("a"), echo)

    snapshot = store.get_queue_status("u1")
    snapshot.tasks.append(BulkTask(resource="x"))

    assert len(store.get_queue_status("u1").tasks) == 1


def test_pause_and_resume():
    """Тест паузы и возобновления"""
    store = QueueStore()
    store.add_to_queue("u1", make_tasks("a", "b"), echo)

    assert store.pause_queue("u1") is True
    snapshot = store.get_queue_status("u1")
    assert snapshot.status == QueueStatus.PAUSED
    assert len(snapshot.tasks) == 2
    assert not store.get_queue("u1").resumed.is_set()

    assert store.resume_queue("u1") is True
    assert store.get_queue_status("u1").status == QueueStatus.RUNNING
    assert store.get_queue("u1").resumed.is_set()


def test_control_on_missing_queue():
    """Тест управления несуществующей очередью"""
    store = QueueStore()

    assert store.pause_queue("nobody") is False
    assert store.resume_queue("nobody") is False
    assert store.cancel_queue("nobody") is False
    assert store.clear_queue("nobody") is False


@pytest.mark.parametrize("status", [QueueStatus.IDLE, QueueStatus.COMPLETED])
def test_resume_requires_pause(status):
    """Тест: возобновить можно только очередь на паузе"""
    store = QueueStore()
    store.add_to_queue("u1", make_tasks("a"), echo)
    store.get_queue("u1").status = status

    assert store.resume_queue("u1") is False
    assert store.get_queue_status("u1").status == status


def test_cancel_clears_tasks():
    """Тест отмены очереди"""
    store = QueueStore()
    store.add_to_queue("u1", make_tasks("a", "b", "c"), echo)
    store.get_queue("u1").current_index = 2
    store.pause_queue("u1")

    assert store.cancel_queue("u1") is True

    snapshot = store.get_queue_status("u1")
    assert snapshot.status == QueueStatus.CANCELLED
    assert snapshot.tasks == []
    assert snapshot.current_index == 0
    # Ожидающий на паузе проход должен проснуться
    assert store.get_queue("u1").resumed.is_set()


def test_clear_removes_queue_and_processor():
    """Тест полного удаления очереди"""
    store = QueueStore()
    store.add_to_queue("u1", make_tasks("a"), echo)

    assert store.clear_queue("u1") is True
    assert store.get_queue_status("u1") is None
    assert store.get_processor("u1") is None
    assert not store.has_queue("u1")
    assert len(store) == 0


def test_queues_are_independent():
    """Тест независимости очередей разных пользователей"""
    store = QueueStore()
    store.add_to_queue("u1", make_tasks("a"), echo)
    store.add_to_queue("u2", make_tasks("b", "c"), echo)

    store.cancel_queue("u1")

    assert store.get_queue_status("u1").status == QueueStatus.CANCELLED
    assert store.get_queue_status("u2").status == QueueStatus.IDLE
    assert len(store.get_queue_status("u2").tasks) == 2
    assert sorted(store.user_ids()) == ["u1", "u2"]


def test_separate_stores_are_isolated():
    """Тест изоляции экземпляров хранилища"""
    first = QueueStore()
    second = QueueStore()

    first.add_to_queue("u1", make_tasks("a"), echo)

    assert second.get_queue_status("u1") is None
