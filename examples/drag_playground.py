from grip import Controller, PointerTracker, Shape, terminal


def main() -> None:
    shape = Shape(12, 6, 4, 3)
    controller = Controller(terminal, shape, PointerTracker(anchored=True))

    def _show_position(position: tuple[int, int]) -> None:
        terminal.write(f" Block at: {position!r} ", cursor=(0, 0), flush=True)

    controller.on_move += _show_position

    with terminal.interactive(), terminal.events() as events:
        controller.run(events)


if __name__ == "__main__":
    main()
