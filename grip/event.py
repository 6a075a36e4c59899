"""A tiny publish/subscribe primitive used to announce state changes."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Callable, Generic, TypeVar

__all__ = [
    "Event",
    "CallbackError",
]


class CallbackError(Exception):
    """Raised when one of an event's listeners failed."""


T = TypeVar("T")


@dataclass
class Event(Generic[T]):
    """An emittable event.

    Store an event on the object that owns the state it describes, `+=` listeners
    onto it, and call it with data to notify every listener in the order they were
    added. Removing a listener is done with `-=`.
    """

    name: str

    _listeners: list[Callable[[T], object]] = field(default_factory=list)

    def __bool__(self) -> bool:
        """Returns whether this event has any listeners."""

        return len(self._listeners) > 0

    def __iadd__(self, callback: Callable[[T], object]) -> Event[T]:
        if not callable(callback):
            raise ValueError(f"Invalid type for callback: {callback}")

        self._listeners.append(callback)

        return self

    def __isub__(self, callback: Callable[[T], object]) -> Event[T]:
        self._listeners.remove(callback)

        return self

    def __call__(self, data: T) -> int:
        """Emits the event to all listeners.

        Args:
            data: The content of the event.

        Returns:
            The amount of listeners that were notified.
        """

        for callback in self._listeners:
            try:
                callback(data)

            except Exception as exc:
                raise CallbackError(
                    f"Error executing {self.name!r} callback {callback!r}."
                ) from exc

        return len(self._listeners)
