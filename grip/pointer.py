"""Turning successive pointer reports into movement deltas."""

from __future__ import annotations

from .input import MouseKind

__all__ = ["PointerTracker"]


class PointerTracker:
    """Remembers where the pointer was last seen.

    By default every observed coordinate becomes the baseline for the next delta,
    drag or not. That means a drag directly following a hover or a click somewhere
    else jumps by however far the pointer travelled in between.

    With `anchored` set, deltas are only ever taken between drag samples: a press
    starts a drag, every drag moves the anchor, and anything else (release,
    scroll, plain motion) drops it.
    """

    def __init__(self, x: int = 0, y: int = 0, anchored: bool = False) -> None:
        self.last_position = (x, y)
        self.anchored = anchored
        self.anchor: tuple[int, int] | None = None

    def __repr__(self) -> str:
        return (
            f"PointerTracker(last_position={self.last_position!r},"
            + f" anchor={self.anchor!r})"
        )

    def observe(self, x: int, y: int, kind: MouseKind) -> tuple[int, int]:
        """Records a pointer coordinate.

        Args:
            x: The column the pointer was reported at.
            y: The row the pointer was reported at.
            kind: What the pointer was doing.

        Returns:
            The (dx, dy) the pointer travelled, which is always (0, 0) unless `kind`
            is `MouseKind.DRAG`.
        """

        delta = (0, 0)

        if self.anchored:
            if kind is MouseKind.DRAG:
                if self.anchor is not None:
                    delta = (x - self.anchor[0], y - self.anchor[1])

                self.anchor = (x, y)

            elif kind is MouseKind.PRESS:
                self.anchor = (x, y)

            else:
                self.anchor = None

        elif kind is MouseKind.DRAG:
            delta = (x - self.last_position[0], y - self.last_position[1])

        self.last_position = (x, y)

        return delta
