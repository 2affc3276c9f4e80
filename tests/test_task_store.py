# tests/test_task_store.py

from __future__ import annotations

from pocket_todo.tasks.task_models import TEXT_MAX_LEN, Priority, Task
from pocket_todo.tasks.task_store import TaskStore

from .fakes import FakeClock, FakePersistence, SequentialIds


def test_add_prepends_and_persists(store: TaskStore, persistence: FakePersistence) -> None:
    a = store.add("Buy milk", "high", "2099-01-01")
    b = store.add("Buy bread")

    assert a is not None and b is not None
    assert [t.text for t in store.tasks] == ["Buy bread", "Buy milk"]
    assert a.priority is Priority.HIGH
    assert a.due == "2099-01-01"
    assert a.done is False
    assert b.priority is Priority.MEDIUM
    assert b.due is None

    saved = persistence.data["tasks_test"]
    assert [r["id"] for r in saved] == [b.id, a.id]
    assert set(saved[0]) == {"id", "text", "done", "priority", "due", "createdAt"}


def test_add_with_empty_text_is_a_noop(store: TaskStore, persistence: FakePersistence) -> None:
    assert store.add("") is None
    assert store.add("   \t ") is None
    assert store.count_tasks() == 0
    assert persistence.saves == []


def test_add_count_matches_non_empty_calls(store: TaskStore) -> None:
    inputs = ["a", "", "b", "  ", "c", "\n", "d"]
    for text in inputs:
        store.add(text)
    assert store.count_tasks() == sum(1 for t in inputs if t.strip())
    assert len({t.id for t in store.tasks}) == store.count_tasks()


def test_add_trims_truncates_and_coerces(store: TaskStore) -> None:
    task = store.add("  " + "x" * (TEXT_MAX_LEN + 20) + "  ", "urgent", "")
    assert task is not None
    assert task.text == "x" * TEXT_MAX_LEN
    assert task.priority is Priority.MEDIUM
    assert task.due is None


def test_created_at_increases_when_clock_stalls(store: TaskStore, clock: FakeClock) -> None:
    first = store.add("one")
    second = store.add("two")
    clock.advance(5000)
    third = store.add("three")

    assert first is not None and second is not None and third is not None
    assert first.created_at == clock.now - 5000
    assert second.created_at == first.created_at + 1
    assert third.created_at == clock.now


def test_toggle_is_its_own_inverse(store: TaskStore) -> None:
    task = store.add("flip me")
    assert task is not None

    once = store.toggle(task.id)
    assert once is not None and once.done is True
    twice = store.toggle(task.id)
    assert twice is not None and twice.done is False
    assert store.tasks == (task,)


def test_toggle_unknown_id_leaves_collection_unchanged(store: TaskStore) -> None:
    store.add("a")
    store.add("b")
    before = store.tasks

    assert store.toggle("nope") is None
    assert store.tasks == before


def test_update_replaces_text_and_empty_cancels(store: TaskStore) -> None:
    task = store.add("old text")
    assert task is not None

    updated = store.update(task.id, "  new text  ")
    assert updated is not None
    assert updated.text == "new text"
    assert updated.created_at == task.created_at

    assert store.update(task.id, "   ") is None
    assert store.get_task(task.id) == updated
    assert store.count_tasks() == 1

    assert store.update("missing", "whatever") is None


def test_remove(store: TaskStore, persistence: FakePersistence) -> None:
    a = store.add("a")
    b = store.add("b")
    assert a is not None and b is not None

    assert store.remove(a.id) is True
    assert store.remove(a.id) is False
    assert store.tasks == (b,)
    assert [r["id"] for r in persistence.data["tasks_test"]] == [b.id]


def test_clear_completed_and_clear_all(store: TaskStore, persistence: FakePersistence) -> None:
    a = store.add("a")
    store.add("b")
    c = store.add("c")
    assert a is not None and c is not None
    store.toggle(a.id)
    store.toggle(c.id)

    assert store.clear_completed() == 2
    assert [t.text for t in store.tasks] == ["b"]
    assert store.clear_completed() == 0

    assert store.clear_all() == 1
    assert store.tasks == ()
    assert persistence.data["tasks_test"] == []


def test_replace_all_swaps_collection(store: TaskStore, persistence: FakePersistence) -> None:
    store.add("old")
    fresh = [
        Task(id="x1", text="one", done=True, priority=Priority.LOW, due=None, created_at=5),
        Task(id="x2", text="two", done=False, priority=Priority.HIGH, due="2030-02-03", created_at=6),
    ]
    store.replace_all(fresh)

    assert list(store.tasks) == fresh
    assert [r["id"] for r in persistence.data["tasks_test"]] == ["x1", "x2"]


def test_write_failure_keeps_in_memory_state(store: TaskStore, persistence: FakePersistence) -> None:
    persistence.fail_writes = True

    task = store.add("still here")
    assert task is not None
    assert store.toggle(task.id) is not None
    assert store.count_tasks() == 1
    assert "tasks_test" not in persistence.data


def test_load_hydrates_and_sanitizes() -> None:
    persistence = FakePersistence(
        data={
            "k": [
                {"id": "a", "text": "kept", "done": True, "priority": "low", "due": "2030-01-01", "createdAt": 10},
                {"id": "b", "text": "bad prio", "priority": "bogus", "createdAt": 20},
            ]
        }
    )
    store = TaskStore(persistence, key="k", clock=FakeClock(), id_factory=SequentialIds())
    store.load()

    assert [t.id for t in store.tasks] == ["a", "b"]
    assert store.tasks[0].done is True
    assert store.tasks[0].due == "2030-01-01"
    assert store.tasks[1].priority is Priority.MEDIUM
    assert persistence.saves == []


def test_load_missing_corrupt_or_wrong_shape_means_empty() -> None:
    missing = TaskStore(FakePersistence(), key="k")
    missing.load()
    assert missing.tasks == ()

    unreadable = TaskStore(FakePersistence(fail_reads=True), key="k")
    unreadable.load()
    assert unreadable.tasks == ()

    wrong_shape = TaskStore(FakePersistence(data={"k": {"not": "a list"}}), key="k")
    wrong_shape.load()
    assert wrong_shape.tasks == ()


def test_find_by_prefix_requires_unique_match(store: TaskStore) -> None:
    store.replace_all(
        [
            Task(id="abc1", text="one", done=False, priority=Priority.LOW, due=None, created_at=1),
            Task(id="abc2", text="two", done=False, priority=Priority.LOW, due=None, created_at=2),
            Task(id="xyz", text="three", done=False, priority=Priority.LOW, due=None, created_at=3),
        ]
    )
    assert store.find_by_prefix("abc") is None
    assert store.find_by_prefix("abc2") is not None
    assert store.find_by_prefix("x") is not None
    assert store.find_by_prefix("") is None
