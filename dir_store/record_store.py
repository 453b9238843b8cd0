"""An ordered collection of Records persisted as one JSON array file."""

from __future__ import annotations

import asyncio
import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Generic, Iterable, Iterator, TypeVar

from pydantic import ValidationError

from .atomic_io import atomic_write_bytes
from .errors import DecodeError, DirStoreError, EncodeError, WriteError
from .log import store_log
from .record import Record

T = TypeVar("T", bound=Record)

Subscriber = Callable[[list], None]


@dataclass
class RecordStore(Generic[T]):
    """Ordered collection of records persisted to ``storage_path``.

    The whole collection is read and written at once.  Every mutation
    re-serializes the full in-memory list and atomically replaces the file,
    unless ``preview`` is set, in which case nothing ever touches the disk.

    Record containers live under ``parent`` (the storage file's folder when
    omitted).  Deleting a record also destroys its container.

    A store has a single logical owner: mutations are synchronous and must
    not race each other.  Subscribers get a snapshot after every successful
    mutation and after every load.
    """

    storage_path: Path
    record_class: type[T] = field(default=Record)
    parent: Path | None = None
    preview: bool = False
    _records: list[T] = field(default_factory=list, init=False, repr=False)
    _loaded: bool = field(default=False, init=False, repr=False)
    _subscribers: list[Subscriber] = field(default_factory=list, init=False, repr=False)

    def __post_init__(self):
        self.storage_path = Path(self.storage_path)
        self.parent = Path(self.parent) if self.parent is not None else self.storage_path.parent

    # -- Persistence --

    def load(self) -> list[T]:
        """Read all records from disk into memory."""
        records = self._read_records()
        self._apply(records)
        return list(records)

    async def load_async(self) -> list[T]:
        """Like ``load`` but the file is read and decoded on a worker thread.

        The result is applied on the awaiting caller's event loop.
        """
        records = await asyncio.to_thread(self._read_records)
        self._apply(records)
        return list(records)

    def save(self) -> None:
        """Persist all in-memory records to disk."""
        if self.preview:
            return
        payload = self._encode()
        try:
            self.storage_path.parent.mkdir(parents=True, exist_ok=True)
            atomic_write_bytes(self.storage_path, payload)
        except OSError as exc:
            raise WriteError(f"Cannot write {self.storage_path}: {exc}") from exc
        store_log(f"Saved {len(self._records)} records to {self.storage_path}")

    # -- Mutations --

    def append(self, item: T) -> None:
        """Add ``item`` at the end unless an equal record is already present."""
        self._ensure_loaded()
        if item in self._records:
            return
        previous = list(self._records)
        self._records.append(self._adopt(item))
        self._commit(previous)

    def extend(self, items: Iterable[T]) -> None:
        """Add all ``items`` at the end, in order, without dedup."""
        self._ensure_loaded()
        added = [self._adopt(item) for item in items]
        previous = list(self._records)
        self._records.extend(added)
        self._commit(previous)

    def delete(self, item: T) -> bool:
        """Remove ``item`` and its container. Returns True if it was present."""
        self._ensure_loaded()
        try:
            index = self._records.index(item)
        except ValueError:
            return False
        self.delete_at(index)
        return True

    def delete_at(self, index: int) -> T:
        """Remove the record at ``index`` and its container.

        In preview mode the container is left on disk.
        """
        self._ensure_loaded()
        previous = list(self._records)
        item = self._records.pop(index)
        if not self.preview:
            try:
                item.will_discard()
            except DirStoreError:
                self._records = previous
                raise
        store_log(f"Deleted record {item.id} from {self.storage_path}")
        self._commit(previous)
        return item

    def move(self, from_indices: Iterable[int], to: int) -> None:
        """Move the records at ``from_indices`` so they sit before offset ``to``.

        ``to`` is an offset into the list as it was before the move; the
        moved records keep their relative order.
        """
        self._ensure_loaded()
        size = len(self._records)
        indices = sorted(set(from_indices))
        if any(i < 0 or i >= size for i in indices):
            raise IndexError(f"Move source out of range: {indices}")
        if not 0 <= to <= size:
            raise IndexError(f"Move destination out of range: {to}")
        previous = list(self._records)
        selected = set(indices)
        moving = [self._records[i] for i in indices]
        remaining = [r for i, r in enumerate(self._records) if i not in selected]
        offset = to - sum(1 for i in indices if i < to)
        remaining[offset:offset] = moving
        self._records = remaining
        self._commit(previous)

    # -- Observation --

    def subscribe(self, callback: Subscriber) -> Callable[[], None]:
        """Call ``callback(snapshot)`` after each change. Returns an unsubscribe function."""
        self._subscribers.append(callback)

        def unsubscribe() -> None:
            if callback in self._subscribers:
                self._subscribers.remove(callback)

        return unsubscribe

    # -- Collection access --

    def get(self, uid) -> T | None:
        """Look up a record by id."""
        self._ensure_loaded()
        for r in self._records:
            if r.id == uid:
                return r
        return None

    @property
    def records(self) -> list[T]:
        self._ensure_loaded()
        return list(self._records)

    @property
    def count(self) -> int:
        return len(self)

    @property
    def is_empty(self) -> bool:
        return len(self) == 0

    def __iter__(self) -> Iterator[T]:
        self._ensure_loaded()
        return iter(list(self._records))

    def __len__(self) -> int:
        self._ensure_loaded()
        return len(self._records)

    def __getitem__(self, index: int) -> T:
        self._ensure_loaded()
        return self._records[index]

    # -- Internals --

    def _read_records(self) -> list[T]:
        try:
            raw = self.storage_path.read_bytes()
        except FileNotFoundError:
            return []
        except OSError as exc:
            raise DecodeError(f"Cannot read {self.storage_path}: {exc}") from exc
        if not raw.strip():
            return []
        try:
            data = json.loads(raw)
        except (json.JSONDecodeError, UnicodeDecodeError) as exc:
            raise DecodeError(f"Malformed store file {self.storage_path}: {exc}") from exc
        if not isinstance(data, list):
            raise DecodeError(
                f"Store file {self.storage_path} holds {type(data).__name__}, expected a list"
            )
        records: list[T] = []
        for entry in data:
            try:
                record = self.record_class.model_validate(entry)
            except ValidationError as exc:
                raise DecodeError(f"Invalid record in {self.storage_path}: {exc}") from exc
            records.append(self._bind(record))
        return records

    def _encode(self) -> bytes:
        try:
            payload = [r.model_dump(mode="json") for r in self._records]
            return json.dumps(payload, indent=2, ensure_ascii=False).encode("utf-8")
        except (TypeError, ValueError) as exc:
            raise EncodeError(f"Cannot encode records for {self.storage_path}: {exc}") from exc

    def _apply(self, records: list[T]) -> None:
        self._records = records
        self._loaded = True
        store_log(f"Loaded {len(records)} records from {self.storage_path}")
        self._notify()

    def _commit(self, previous: list[T]) -> None:
        try:
            self.save()
        except DirStoreError:
            self._records = previous
            raise
        self._notify()

    def _notify(self) -> None:
        snapshot = list(self._records)
        for callback in list(self._subscribers):
            callback(list(snapshot))

    def _bind(self, record: T) -> T:
        return record.bind(self.parent)

    def _adopt(self, item: T) -> T:
        if not isinstance(item, self.record_class):
            raise TypeError(
                f"{type(self).__name__} holds {self.record_class.__name__}, got {type(item).__name__}"
            )
        if item.parent is None:
            self._bind(item)
        return item

    def _ensure_loaded(self) -> None:
        if not self._loaded:
            self.load()


@dataclass
class SortedRecordStore(RecordStore[T]):
    """A RecordStore whose ``insert`` keeps records in ``record_class`` order.

    The order comes from ``__lt__`` (for Records: newest first).  Sorting is
    stable, so records that compare equal keep their insertion order.
    """

    def __post_init__(self):
        super().__post_init__()
        if getattr(self.record_class, "__lt__", None) is object.__lt__:
            raise TypeError(f"{self.record_class.__name__} does not define an order")

    def insert(self, item: T) -> None:
        """Add ``item`` and re-sort the collection."""
        self.insert_many([item])

    def insert_many(self, items: Iterable[T]) -> None:
        """Add all ``items`` and re-sort the collection."""
        self._ensure_loaded()
        previous = list(self._records)
        added = [self._adopt(item) for item in items]
        self._records = sorted(self._records + added)
        self._commit(previous)
