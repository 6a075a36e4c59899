"""The Shape class, a solid block of glyphs that can be moved around the screen."""

from __future__ import annotations

from typing import TYPE_CHECKING

from .core import TerminalError

if TYPE_CHECKING:
    from .terminal import Terminal

__all__ = [
    "DEFAULT_GLYPH",
    "MAX_COORDINATE",
    "DrawError",
    "Shape",
]

DEFAULT_GLYPH = "█"

# Terminal coordinates are reported as 16-bit unsigned integers.
MAX_COORDINATE = 65535


class DrawError(TerminalError):
    """Raised when a shape could not be drawn to the terminal."""


def _clamp(value: int) -> int:
    return max(0, min(MAX_COORDINATE, value))


def _validate(name: str, value: object) -> int:
    """Ensures `value` is an integer within the terminal's coordinate space."""

    if isinstance(value, bool) or not isinstance(value, int):
        raise ValueError(f"{name} must be an integer, not {value!r}.")

    if not 0 <= value <= MAX_COORDINATE:
        raise ValueError(f"{name} must be within 0..{MAX_COORDINATE}, got {value}.")

    return value


class Shape:
    """A rectangle of filled cells.

    The set of cells is derived from the size and position, and is rebuilt from
    scratch every time the shape moves. Note that the block spans `width + 1`
    columns (both horizontal ends are included) and `height` rows.

    Nothing is checked against the terminal's actual dimensions; cells outside of
    the screen are simply never seen.
    """

    def __init__(
        self, width: int, height: int, x: int, y: int, glyph: str = DEFAULT_GLYPH
    ) -> None:
        self._size = (_validate("width", width), _validate("height", height))
        self.glyph = glyph

        self.cells: dict[tuple[int, int], str] = {}
        self.position = (x, y)

    def __repr__(self) -> str:
        width, height = self._size
        x, y = self.position

        return f"Shape(width={width}, height={height}, x={x}, y={y})"

    @property
    def size(self) -> tuple[int, int]:
        """Returns the (width, height) of the shape. This never changes."""

        return self._size

    @property
    def position(self) -> tuple[int, int]:
        """Sets/gets the top-left corner of the shape.

        Setting it rebuilds the cells.
        """

        return self._position

    @position.setter
    def position(self, new: tuple[int, int]) -> None:
        x, y = new
        self._position = (_validate("x", x), _validate("y", y))

        self.recompute()

    @property
    def bounds(self) -> tuple[int, int, int, int]:
        """Returns the (left, top, right, bottom) edges of the shape."""

        x, y = self.position
        width, height = self._size

        return x, y, x + width, y + height

    def contains(self, column: int, row: int) -> bool:
        """Determines whether a point is strictly inside the shape.

        Points on any of the four edges are considered outside.
        """

        left, top, right, bottom = self.bounds

        return left < column < right and top < row < bottom

    def recompute(self) -> None:
        """Rebuilds the cell mapping from the current size & position."""

        x, y = self.position
        width, height = self._size

        self.cells = {
            (cell_x, cell_y): self.glyph
            for cell_x in range(x, x + width + 1)
            for cell_y in range(y, y + height)
        }

    def render(self, terminal: Terminal) -> None:
        """Writes every cell to the terminal, then parks the cursor at the origin.

        The output isn't flushed, so the caller can batch it with other writes.

        Raises:
            DrawError: One of the writes failed. No further cells are written.
        """

        try:
            for cursor, glyph in self.cells.items():
                terminal.write(glyph, cursor=cursor)

            terminal.move_cursor((0, 0))

        except TerminalError as exc:
            raise DrawError(f"Could not draw {self!r}.") from exc

    def translate(self, dx: int, dy: int) -> None:
        """Moves the shape by the given offset.

        Coordinates saturate at the edges of the coordinate space instead of
        wrapping around.
        """

        x, y = self._position
        self._position = (_clamp(x + dx), _clamp(y + dy))

        self.recompute()
