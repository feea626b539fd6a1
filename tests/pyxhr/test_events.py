"""Tests for ordered, isolated event dispatch."""

import logging

import pytest

from PyXHR.events import EventDispatcher, EventName, EventSlot, XHREvent


class _Owner:
    onload = EventSlot(EventName.LOAD)

    def __init__(self):
        self._events = EventDispatcher(self)


class TestEventDispatcher:
    def setup_method(self):
        self.owner = _Owner()
        self.dispatcher = self.owner._events
        self.calls = []

    def _recorder(self, label):
        def _handler(event):
            self.calls.append((label, event.type, event.detail))

        return _handler

    def test_slot_fires_before_listeners_in_registration_order(self):
        self.dispatcher.add_listener("load", self._recorder("first"))
        self.dispatcher.add_listener(EventName.LOAD, self._recorder("second"))
        self.owner.onload = self._recorder("slot")

        self.dispatcher.dispatch("load", detail="payload")

        assert [label for label, _, _ in self.calls] == ["slot", "first", "second"]
        assert all(kind is EventName.LOAD for _, kind, _ in self.calls)
        assert all(detail == "payload" for _, _, detail in self.calls)

    def test_handler_receives_owner_as_target(self):
        seen = []
        self.dispatcher.add_listener("error", seen.append)

        self.dispatcher.dispatch("error", detail=ValueError("x"))

        assert isinstance(seen[0], XHREvent)
        assert seen[0].target is self.owner
        assert isinstance(seen[0].detail, ValueError)

    def test_duplicate_listeners_fire_and_are_removed_together(self):
        handler = self._recorder("dup")
        self.dispatcher.add_listener("abort", handler)
        self.dispatcher.add_listener("abort", handler)

        self.dispatcher.dispatch("abort")
        assert len(self.calls) == 2

        self.dispatcher.remove_listener("abort", handler)
        self.dispatcher.dispatch("abort")
        assert len(self.calls) == 2
        assert self.dispatcher.listeners("abort") == []

    def test_listener_added_during_dispatch_waits_for_next_round(self):
        late = self._recorder("late")

        def _adder(event):
            self.dispatcher.add_listener("timeout", late)

        self.dispatcher.add_listener("timeout", _adder)

        self.dispatcher.dispatch("timeout")
        assert self.calls == []

        self.dispatcher.dispatch("timeout")
        assert [label for label, _, _ in self.calls] == ["late"]

    def test_raising_handler_is_logged_and_skipped(self, caplog):
        def _boom(event):
            raise RuntimeError("handler failure")

        self.dispatcher.add_listener("loadend", _boom)
        self.dispatcher.add_listener("loadend", self._recorder("after"))

        with caplog.at_level(logging.ERROR, logger="PyXHR.events"):
            self.dispatcher.dispatch("loadend")

        assert [label for label, _, _ in self.calls] == ["after"]
        assert any(record.message == "Event handler raised" for record in caplog.records)
        assert any(record.exc_info for record in caplog.records)

    def test_unknown_event_rejected(self):
        with pytest.raises(ValueError):
            self.dispatcher.add_listener("progress", self._recorder("x"))
        with pytest.raises(ValueError):
            self.dispatcher.dispatch("progress")

    def test_slot_requires_callable(self):
        with pytest.raises(TypeError):
            self.owner.onload = "not callable"

        self.owner.onload = None
        assert self.owner.onload is None
