"""The drag loop: feeding input events into a shape."""

from __future__ import annotations

import logging
from enum import Enum
from typing import Iterable

from .event import Event
from .input import (
    FocusEvent,
    InputEvent,
    KeyEvent,
    MouseEvent,
    MouseKind,
    PasteEvent,
    ResizeEvent,
)
from .pointer import PointerTracker
from .shape import Shape
from .terminal import Terminal

__all__ = [
    "Controller",
    "LoopState",
]

logger = logging.getLogger(__name__)


class LoopState(Enum):
    """The states a `Controller` can be in."""

    RUNNING = "running"
    TERMINATED = "terminated"


class Controller:
    """Owns a shape & a pointer tracker, and moves the first using the second.

    The controller doesn't touch terminal modes at all. Run it inside of
    `Terminal.interactive` so that the terminal gets restored however the loop
    ends:

        with terminal.interactive(), terminal.events() as events:
            Controller(terminal, shape).run(events)
    """

    def __init__(
        self,
        terminal: Terminal,
        shape: Shape,
        tracker: PointerTracker | None = None,
    ) -> None:
        self.terminal = terminal
        self.shape = shape
        self.tracker = tracker or PointerTracker()
        self.state = LoopState.RUNNING

        self.on_move: Event[tuple[int, int]] = Event("shape moved")

    def start(self) -> None:
        """Draws the initial frame."""

        self.state = LoopState.RUNNING
        self.redraw()

    def redraw(self) -> None:
        """Clears the screen and draws the shape again."""

        self.terminal.clear()
        self.shape.render(self.terminal)
        self.terminal.flush()

    def handle(self, event: InputEvent) -> LoopState:
        """Processes a single event.

        Returns:
            The state the loop is in after the event.

        Raises:
            TypeError: The event is not one of the known input events.
        """

        if self.state is LoopState.TERMINATED:
            return self.state

        if isinstance(event, MouseEvent):
            self._handle_mouse(event)

        elif isinstance(event, (KeyEvent, FocusEvent)):
            logger.info("Terminating on %r.", event)
            self.state = LoopState.TERMINATED

        elif isinstance(event, ResizeEvent):
            logger.info("Terminal resized to %dx%d.", event.width, event.height)
            self.terminal.on_resize((event.width, event.height))

        elif isinstance(event, PasteEvent):
            logger.debug("Ignoring paste of %d characters.", len(event.text))

        else:
            raise TypeError(f"Unknown input event {event!r}.")

        return self.state

    def _handle_mouse(self, event: MouseEvent) -> None:
        if event.kind is MouseKind.MOVE:
            return

        dx, dy = self.tracker.observe(event.column, event.row, event.kind)

        if not self.shape.contains(event.column, event.row):
            return

        previous = self.shape.position

        self.shape.translate(dx, dy)
        self.redraw()

        if self.shape.position != previous:
            logger.debug("Moved shape from %r to %r.", previous, self.shape.position)
            self.on_move(self.shape.position)

    def run(self, events: Iterable[InputEvent]) -> LoopState:
        """Draws the shape, then handles events until a terminating one arrives.

        The loop also ends when `events` runs out.
        """

        self.start()
        logger.info("Started with %r.", self.shape)

        for event in events:
            if self.handle(event) is LoopState.TERMINATED:
                break

        else:
            logger.info("Input ended.")
            self.state = LoopState.TERMINATED

        return self.state
