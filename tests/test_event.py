import pytest

from grip.event import CallbackError, Event


def test_event_emit():
    received = []

    def _callback(data: tuple[int, int]) -> None:
        received.append(data)

    test = Event("Test 1")
    test += _callback

    assert test((1, 2)) == 1
    assert received == [(1, 2)]


def test_event_remove():
    def _callback(data: str) -> None:
        raise AssertionError("removed callbacks should not run")

    test = Event("Test 2")
    test += _callback
    assert test

    test -= _callback
    assert not test
    assert test("whatever") == 0


def test_event_bad_callback():
    test = Event("Test 3")

    with pytest.raises(ValueError):
        test += "this won't work"


def test_event_callback_error():
    def _bad_callback(data: str):
        1 / 0

    test = Event("Test 4")

    test += _bad_callback

    with pytest.raises(CallbackError):
        test("whatever")
