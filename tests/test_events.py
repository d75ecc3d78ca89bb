"""Tests for the EventEmitter used for settlement notifications."""

import pytest

from pipeline import EventEmitter


class TestEventEmitter:
    def test_on_listener_fires_every_emit(self):
        calls = []
        emitter = EventEmitter().on("tick", calls.append)
        emitter.emit("tick", 1)
        emitter.emit("tick", 2)
        assert calls == [1, 2]

    def test_once_listener_fires_once(self):
        calls = []
        emitter = EventEmitter().once("tick", calls.append)
        assert emitter.emit("tick", 1) is True
        assert emitter.emit("tick", 2) is False
        assert calls == [1]
        assert emitter.listener_count("tick") == 0

    def test_off_removes_once_and_on(self):
        calls = []
        emitter = EventEmitter()
        emitter.on("a", calls.append).once("b", calls.append)
        emitter.off("a", calls.append).off("b", calls.append)
        emitter.emit("a", 1)
        emitter.emit("b", 2)
        assert calls == []

    def test_off_unknown_listener_is_noop(self):
        emitter = EventEmitter()
        emitter.off("missing", print)
        assert emitter.listener_count("missing") == 0

    def test_listeners_called_in_registration_order(self):
        order = []
        emitter = EventEmitter()
        emitter.on("go", lambda: order.append("first"))
        emitter.once("go", lambda: order.append("second"))
        emitter.on("go", lambda: order.append("third"))
        emitter.emit("go")
        assert order == ["first", "second", "third"]

    def test_listener_added_during_emit_waits_for_next_emit(self):
        calls = []
        emitter = EventEmitter()

        def add_more():
            calls.append("outer")
            emitter.on("go", lambda: calls.append("inner"))

        emitter.once("go", add_more)
        emitter.emit("go")
        assert calls == ["outer"]
        emitter.emit("go")
        assert calls == ["outer", "inner"]

    def test_listener_errors_propagate(self):
        def explode():
            raise ValueError("listener failed")

        emitter = EventEmitter().on("go", explode)
        with pytest.raises(ValueError, match="listener failed"):
            emitter.emit("go")

    def test_remove_all_listeners(self):
        emitter = EventEmitter()
        emitter.on("a", print).on("b", print)
        emitter.remove_all_listeners("a")
        assert emitter.listener_count("a") == 0
        assert emitter.listener_count("b") == 1
        emitter.remove_all_listeners()
        assert emitter.listener_count("b") == 0

    def test_off_matches_bound_methods_by_equality(self):
        calls = []
        emitter = EventEmitter().on("a", calls.append)
        emitter.off("a", calls.append)
        assert emitter.listener_count("a") == 0

    def test_once_firing_keeps_persistent_registration_of_same_listener(self):
        calls = []

        def record(value):
            calls.append(value)

        emitter = EventEmitter().on("t", record).once("t", record)
        emitter.emit("t", 1)
        emitter.emit("t", 2)
        emitter.emit("t", 3)

        assert calls == [1, 1, 2, 3]
        assert emitter.listener_count("t") == 1
