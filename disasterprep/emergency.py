from __future__ import annotations

import logging
import time
from collections import deque
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

from .clock import Scheduler, TimerHandle

_logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class Contact:
    name: str
    phone: str
    category: str

    def is_valid(self) -> bool:
        return self.name.strip() != "" and self.phone.strip() != ""

    def to_dict(self) -> dict[str, Any]:
        return {"name": self.name, "phone": self.phone, "type": self.category}

    @classmethod
    def from_dict(cls, data: object) -> "Contact | None":
        if not isinstance(data, dict):
            return None
        contact = cls(
            name=str(data.get("name", "")).strip(),
            phone=str(data.get("phone", "")).strip(),
            category=str(data.get("type", data.get("category", ""))).strip(),
        )
        return contact if contact.is_valid() else None


class ContactDirectory:
    """Ordered quick-contact list.

    Edits that make no sense are ignored. Only contacts that would survive a
    save and reload (Contact.is_valid) are accepted.
    """

    def __init__(self, contacts: list[Contact] | tuple[Contact, ...] = ()) -> None:
        self._contacts: list[Contact] = list(contacts)

    def contacts(self) -> list[Contact]:
        return list(self._contacts)

    def __len__(self) -> int:
        return len(self._contacts)

    def add(self, contact: Contact) -> bool:
        if not contact.is_valid():
            return False
        self._contacts.append(contact)
        return True

    def remove(self, index: int) -> bool:
        if not (0 <= index < len(self._contacts)):
            return False
        del self._contacts[index]
        return True

    def update(self, index: int, contact: Contact) -> bool:
        if not (0 <= index < len(self._contacts)):
            return False
        if not contact.is_valid():
            return False
        self._contacts[index] = contact
        return True

    def to_list(self) -> list[dict[str, Any]]:
        return [c.to_dict() for c in self._contacts]

    @classmethod
    def from_list(cls, data: object, *, fallback: tuple[Contact, ...]) -> "ContactDirectory":
        if not isinstance(data, list):
            return cls(fallback)
        loaded = [c for c in (Contact.from_dict(item) for item in data) if c is not None]
        # An explicitly emptied directory stays empty; only garbage falls back.
        if data and not loaded:
            return cls(fallback)
        return cls(loaded)


PANIC_LOG_LIMIT = 50


def _wall_time_label() -> str:
    return time.strftime("%H:%M:%S", time.localtime())


class PanicButton:
    """Local mock of the campus panic button.

    Pressing it lights the "broadcast sent" banner for reset_after_s seconds and
    appends a timestamped line to an in-memory log that keeps the latest
    PANIC_LOG_LIMIT entries. Nothing leaves the device.
    """

    def __init__(
        self,
        scheduler: Scheduler,
        *,
        reset_after_s: float = 2.0,
        time_label: Callable[[], str] = _wall_time_label,
    ) -> None:
        if reset_after_s <= 0.0:
            raise ValueError("reset_after_s must be > 0")
        self._scheduler = scheduler
        self._reset_after_s = float(reset_after_s)
        self._time_label = time_label
        self._pressed = False
        self._log: deque[str] = deque(maxlen=PANIC_LOG_LIMIT)
        self._reset_handle: TimerHandle | None = None

    @property
    def pressed(self) -> bool:
        return self._pressed

    def log(self) -> list[str]:
        return list(self._log)

    def press(self) -> None:
        if self._reset_handle is not None:
            self._reset_handle.cancel()
        self._pressed = True
        self._log.append(f"Panic button pressed at {self._time_label()}")
        self._reset_handle = self._scheduler.call_later(self._reset_after_s, self._reset)
        _logger.info("panic button pressed (local mock, no broadcast)")

    def _reset(self) -> None:
        self._pressed = False
        self._reset_handle = None
