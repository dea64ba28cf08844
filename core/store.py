from __future__ import annotations

from collections.abc import Sequence
from contextlib import contextmanager
from typing import Callable, Generic, Iterable, Iterator, Optional, TypeVar

from core.events import (
    BILL_ITEMS,
    FILTERED_MEDICINES,
    MEDICINES,
    PRESCRIPTIONS,
    SUPPLIERS,
    ChangeBus,
    ChangeSet,
)
from core.models import BillItem, Medicine, Prescription, Supplier

T = TypeVar("T")


class ObservableList(Sequence, Generic[T]):
    """
    Ordered container that reports every structural change by name.
    Membership tests and removal go by identity, not equality.
    """

    def __init__(self, name: str, on_change: Callable[[str], None]) -> None:
        self.name = name
        self._items: list[T] = []
        self._on_change = on_change

    def __getitem__(self, index):
        return self._items[index]

    def __len__(self) -> int:
        return len(self._items)

    def __iter__(self) -> Iterator[T]:
        return iter(list(self._items))

    def __contains__(self, item) -> bool:
        return any(x is item for x in self._items)

    def __repr__(self) -> str:
        return f"ObservableList({self.name!r}, {self._items!r})"

    def append(self, item: T) -> None:
        self._items.append(item)
        self._on_change(self.name)

    def remove(self, item: T) -> bool:
        for i, x in enumerate(self._items):
            if x is item:
                del self._items[i]
                self._on_change(self.name)
                return True
        return False

    def clear(self) -> None:
        if not self._items:
            return
        self._items.clear()
        self._on_change(self.name)

    def replace_all(self, items: Iterable[T]) -> None:
        self._items = list(items)
        self._on_change(self.name)

    def snapshot(self) -> tuple[T, ...]:
        return tuple(self._items)


class Store:
    def __init__(self, bus: ChangeBus) -> None:
        self.bus = bus
        self._changeset: Optional[ChangeSet] = None

        self.medicines: ObservableList[Medicine] = ObservableList(MEDICINES, self.touch)
        self.filtered_medicines: ObservableList[Medicine] = ObservableList(FILTERED_MEDICINES, self.touch)
        self.bill_items: ObservableList[BillItem] = ObservableList(BILL_ITEMS, self.touch)
        self.suppliers: ObservableList[Supplier] = ObservableList(SUPPLIERS, self.touch)
        self.prescriptions: ObservableList[Prescription] = ObservableList(PRESCRIPTIONS, self.touch)

    def touch(self, *names: str) -> None:
        if self._changeset is not None:
            self._changeset.add(*names)
        else:
            self.bus.publish(names[0] if names else "touch", names)

    @contextmanager
    def change(self, action: str):
        """
        Group every change made inside the block into one published event.
        Nested blocks fold into the outermost one.
        """
        if self._changeset is not None:
            yield self._changeset
            return

        cs = ChangeSet(self.bus, action)
        self._changeset = cs
        try:
            yield cs
        finally:
            self._changeset = None
        cs.publish()

    def find_by_batch(self, batch_number: str) -> Optional[Medicine]:
        return next((m for m in self.medicines if m.same_batch(batch_number)), None)

    def clear_all(self) -> None:
        for coll in (self.medicines, self.filtered_medicines, self.bill_items, self.suppliers, self.prescriptions):
            coll.clear()
