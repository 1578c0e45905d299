from __future__ import annotations

import logging
import random
import threading
from pathlib import Path

import pytest

from medremind.exceptions import (
    EmptyFieldError,
    FilenameCollisionError,
    InvalidNameError,
    InvalidTimeError,
    NameExistsError,
    ReminderErrorKind,
    ReminderIOError,
    ReminderNotFoundError,
)
from medremind.store import ReminderStore
from medremind.timefmt import format_time_of_day


@pytest.fixture
def root(tmp_path: Path) -> Path:
    path = tmp_path / "reminders"
    path.mkdir()
    return path


@pytest.fixture
def store(root: Path) -> ReminderStore:
    s = ReminderStore(root)
    s.load()
    return s


def _write(root: Path, filename: str, text: str) -> Path:
    path = root / filename
    path.write_text(text, encoding="utf-8")
    return path


# ------------------------------------------------------------------
# add
# ------------------------------------------------------------------


def test_add_writes_two_line_file(store: ReminderStore, root: Path) -> None:
    reminder = store.add("Aspirin", "08:30 AM")

    assert reminder.as_pair() == ("Aspirin", "08:30 AM")
    assert store.items() == [("Aspirin", "08:30 AM")]
    assert (root / "Aspirin.txt").read_bytes() == b"Medicine: Aspirin\nTime: 08:30 AM\n"
    assert not list(root.glob(".*.tmp"))


def test_add_existing_name_leaves_file_unchanged(store: ReminderStore, root: Path) -> None:
    store.add("Aspirin", "08:30 AM")
    before = (root / "Aspirin.txt").read_bytes()

    with pytest.raises(NameExistsError) as excinfo:
        store.add("Aspirin", "09:00 AM")

    assert excinfo.value.kind == ReminderErrorKind.NAME_EXISTS
    assert (root / "Aspirin.txt").read_bytes() == before
    assert store.items() == [("Aspirin", "08:30 AM")]


def test_add_sanitizes_filename(store: ReminderStore, root: Path) -> None:
    store.add("Vit C/D", "12:00 PM")

    assert (root / "Vit_C_D.txt").read_text(encoding="utf-8") == "Medicine: Vit C/D\nTime: 12:00 PM\n"


def test_add_invalid_time_creates_no_file(store: ReminderStore, root: Path) -> None:
    with pytest.raises(InvalidTimeError):
        store.add("X", "25:00 PM")

    assert list(root.iterdir()) == []
    assert not store.exists("X")


def test_add_rejects_empty_fields(store: ReminderStore) -> None:
    with pytest.raises(EmptyFieldError) as excinfo:
        store.add("", "08:30 AM")
    assert excinfo.value.field == "name"

    with pytest.raises(EmptyFieldError) as excinfo:
        store.add("Aspirin", "")
    assert excinfo.value.field == "time"


def test_add_rejects_name_with_newline(store: ReminderStore, root: Path) -> None:
    with pytest.raises(InvalidNameError):
        store.add("Aspirin\nTime: 01:00 AM", "08:30 AM")
    assert list(root.iterdir()) == []


def test_add_rejects_sanitizer_collision(store: ReminderStore, root: Path) -> None:
    store.add("A/B", "08:00 AM")

    with pytest.raises(FilenameCollisionError) as excinfo:
        store.add("A_B", "09:00 AM")

    assert excinfo.value.existing == "A/B"
    assert excinfo.value.kind == ReminderErrorKind.NAME_EXISTS
    assert (root / "A_B.txt").read_text(encoding="utf-8") == "Medicine: A/B\nTime: 08:00 AM\n"


def test_add_refuses_to_overwrite_untracked_file(store: ReminderStore, root: Path) -> None:
    _write(root, "Aspirin.txt", "garbage\n")

    with pytest.raises(ReminderIOError):
        store.add("Aspirin", "08:30 AM")

    assert (root / "Aspirin.txt").read_text(encoding="utf-8") == "garbage\n"


def test_add_write_failure_leaves_memory_unchanged(tmp_path: Path) -> None:
    store = ReminderStore(tmp_path / "missing")

    with pytest.raises(ReminderIOError):
        store.add("Aspirin", "08:30 AM")

    assert not store.exists("Aspirin")
    assert len(store) == 0


# ------------------------------------------------------------------
# delete
# ------------------------------------------------------------------


def test_delete_removes_file_and_entry(store: ReminderStore, root: Path) -> None:
    store.add("Aspirin", "08:30 AM")

    removed = store.delete("Aspirin")

    assert removed.name == "Aspirin"
    assert not (root / "Aspirin.txt").exists()
    assert store.items() == []


def test_delete_unknown_name(store: ReminderStore) -> None:
    with pytest.raises(ReminderNotFoundError) as excinfo:
        store.delete("Nothing")
    assert excinfo.value.kind == ReminderErrorKind.NOT_FOUND


def test_delete_with_missing_file_is_io_error(store: ReminderStore, root: Path) -> None:
    store.add("Aspirin", "08:30 AM")
    (root / "Aspirin.txt").unlink()

    with pytest.raises(ReminderIOError):
        store.delete("Aspirin")

    assert store.exists("Aspirin")


def test_delete_with_unloaded_file_is_io_error(store: ReminderStore, root: Path) -> None:
    path = _write(root, "Aspirin.txt", "Medicine: Aspirin\nTime: 08:30 AM\n")

    with pytest.raises(ReminderIOError):
        store.delete("Aspirin")

    assert path.exists()


def test_delete_uses_loaded_path(root: Path) -> None:
    path = _write(root, "renamed-by-hand.txt", "Medicine: Aspirin\nTime: 08:30 AM\n")
    store = ReminderStore(root)
    store.load()

    store.delete("Aspirin")

    assert not path.exists()


# ------------------------------------------------------------------
# load
# ------------------------------------------------------------------


def test_load_skips_malformed_file(root: Path, caplog: pytest.LogCaptureFixture) -> None:
    _write(root, "Aspirin.txt", "Medicine: Aspirin\nTime: 08:30 AM\n")
    bad = _write(root, "Broken.txt", "Medicine: Broken\nTime: not-a-time\n")
    _write(root, "notes.md", "ignored\n")

    store = ReminderStore(root)
    with caplog.at_level(logging.WARNING, logger="medremind.store"):
        count = store.load()

    assert count == 1
    assert store.items() == [("Aspirin", "08:30 AM")]
    assert store.last_skipped == [bad]
    skips = [r for r in caplog.records if r.name == "medremind.store" and "Skipping" in r.getMessage()]
    assert len(skips) == 1
    assert "Broken.txt" in skips[0].getMessage()


def test_load_keeps_first_of_duplicate_names(root: Path) -> None:
    _write(root, "a.txt", "Medicine: Aspirin\nTime: 08:30 AM\n")
    dup = _write(root, "b.txt", "Medicine: Aspirin\nTime: 09:30 AM\n")

    store = ReminderStore(root)

    assert store.load() == 1
    assert store.items() == [("Aspirin", "08:30 AM")]
    assert store.last_skipped == [dup]


def test_load_replaces_memory(store: ReminderStore, root: Path) -> None:
    store.add("Aspirin", "08:30 AM")
    store.add("Zinc", "09:00 PM")
    (root / "Zinc.txt").unlink()

    assert store.load() == 1
    assert store.items() == [("Aspirin", "08:30 AM")]


def test_load_missing_root_is_io_error(tmp_path: Path) -> None:
    with pytest.raises(ReminderIOError):
        ReminderStore(tmp_path / "nope").load()


def test_items_in_load_then_insertion_order(root: Path) -> None:
    _write(root, "b.txt", "Medicine: Beta\nTime: 01:00 PM\n")
    _write(root, "a.txt", "Medicine: Alpha\nTime: 02:00 PM\n")
    store = ReminderStore(root)
    store.load()

    store.add("Gamma", "03:00 PM")

    assert [name for name, _ in store.items()] == ["Alpha", "Beta", "Gamma"]


def test_persistence_round_trip(store: ReminderStore, root: Path) -> None:
    pairs = [("Aspirin", "08:30 AM"), ("Vit C/D", "12:00 PM"), ("Insulin (rapid)", "07:05 PM")]
    for name, time_str in pairs:
        store.add(name, time_str)

    fresh = ReminderStore(root)
    fresh.load()

    assert sorted(fresh.items()) == sorted(pairs)


# ------------------------------------------------------------------
# match_now / queries
# ------------------------------------------------------------------


def test_match_now_is_case_insensitive_snapshot(store: ReminderStore) -> None:
    store.add("Aspirin", "08:30 AM")
    store.add("Zinc", "08:30 PM")
    store.add("Iron", "08:30 AM")

    matched = store.match_now("08:30 am")
    store.delete("Iron")

    assert matched == ["Aspirin", "Iron"]
    assert store.match_now("08:31 AM") == []


def test_exists_is_exact_match(store: ReminderStore) -> None:
    store.add("Aspirin", "08:30 AM")

    assert store.exists("Aspirin")
    assert "Aspirin" in store
    assert not store.exists("aspirin")
    assert store.get("Aspirin") is not None
    assert store.get("aspirin") is None


def test_random_add_delete_keeps_names_unique(store: ReminderStore, root: Path) -> None:
    rng = random.Random(1234)
    names = ["Aspirin", "Zinc", "Iron", "Vit C/D", "Vit_C_D", "Omega 3"]

    for _ in range(200):
        name = rng.choice(names)
        try:
            if rng.random() < 0.6:
                store.add(name, format_time_of_day(rng.randrange(1440)))
            else:
                store.delete(name)
        except (NameExistsError, ReminderNotFoundError):
            pass

        listed = [n for n, _ in store.items()]
        assert len(listed) == len(set(listed))
        assert len(list(root.glob("*.txt"))) == len(listed)


def test_concurrent_add_and_match_keep_disk_in_sync(store: ReminderStore, root: Path) -> None:
    names = [f"Med{i}" for i in range(40)]
    errors: list[BaseException] = []

    def writer(chunk: list[str]) -> None:
        try:
            for name in chunk:
                store.add(name, "08:30 AM")
                store.match_now("08:30 AM")
        except BaseException as exc:  # pragma: no cover
            errors.append(exc)

    threads = [threading.Thread(target=writer, args=(names[i::4],)) for i in range(4)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join(5.0)

    assert errors == []
    assert sorted(store.match_now("08:30 am")) == sorted(names)
    assert len(list(root.glob("*.txt"))) == len(names)
