from __future__ import annotations

import logging
import sys
from argparse import ArgumentParser, ArgumentTypeError

from . import Controller, KeyEvent, PointerTracker, Shape, terminal
from .__about__ import __version__
from .core import TerminalError
from .log import configure_logging
from .shape import MAX_COORDINATE

logger = logging.getLogger("grip")


def _coordinate(value: str) -> int:
    try:
        number = int(value)

    except ValueError:
        raise ArgumentTypeError(f"{value!r} is not an integer") from None

    if not 0 <= number <= MAX_COORDINATE:
        raise ArgumentTypeError(f"{number} is not within 0..{MAX_COORDINATE}")

    return number


def run_drag(width: int, height: int, x: int, y: int, legacy_deltas: bool) -> None:
    shape = Shape(width, height, x, y)
    tracker = PointerTracker(anchored=not legacy_deltas)
    controller = Controller(terminal, shape, tracker)

    with terminal.interactive(), terminal.events() as events:
        controller.run(events)

    logger.info("Finished with %r.", shape)


def run_events() -> None:
    with terminal.interactive(alt_buffer=False), terminal.events() as events:
        terminal.write("Waiting for input, ctrl-c to quit...\r\n", flush=True)

        for event in events:
            if isinstance(event, KeyEvent) and event.key == "ctrl-c":
                break

            terminal.write(f"{event!r}\r\n", flush=True)


def run_size() -> None:
    print(" x ".join(map(str, terminal.size)))


def main(argv: list[str] | None = None) -> None:
    """The main entrypoint."""

    parser = ArgumentParser("grip", description="Drag a block around the terminal.")
    parser.add_argument("-v", "--version", action="version", version=__version__)
    parser.add_argument("--log-file", help="Append logs to this file.")
    parser.add_argument("--log-level", help="The minimum level to log (INFO).")

    subs = parser.add_subparsers(dest="command")

    drag_command = subs.add_parser("drag", help="Run the draggable block (default).")
    drag_command.set_defaults(func=run_drag)
    drag_command.add_argument("--width", type=_coordinate, default=20)
    drag_command.add_argument("--height", type=_coordinate, default=10)
    drag_command.add_argument("--x", type=_coordinate, default=10)
    drag_command.add_argument("--y", type=_coordinate, default=5)
    drag_command.add_argument(
        "--legacy-deltas",
        action="store_true",
        help="Measure drags from the last pointer report, not the last drag.",
    )

    subs.add_parser("events", help="Print decoded input events.").set_defaults(
        func=run_events
    )
    subs.add_parser("size", help="Print the terminal's size.").set_defaults(
        func=run_size
    )

    argv = sys.argv[1:] if argv is None else argv
    args = parser.parse_args(argv)

    if args.command is None:
        args = parser.parse_args([*argv, "drag"])

    try:
        configure_logging(args.log_file, args.log_level)

    except ValueError as exc:
        parser.error(str(exc))

    command = args.func

    opts = vars(args)
    for key in ("func", "command", "log_file", "log_level"):
        del opts[key]

    try:
        command(**opts)

    except TerminalError as exc:
        logger.exception("Terminal failure.")
        print(f"grip: {exc}", file=sys.stderr)
        sys.exit(1)

    except KeyboardInterrupt:
        sys.exit(130)


if __name__ == "__main__":
    main()
