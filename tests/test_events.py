"""Tests for EventTarget and from_event."""

from rivulet import Cancellation, EventTarget, from_event


class TestEventTarget:
    def test_dispatch_to_listeners(self):
        target = EventTarget()
        log = []
        target.add_listener("category-selected", log.append)
        target.dispatch("category-selected", {"name": "animals"})
        target.dispatch("other", "ignored")
        assert log == [{"name": "animals"}]

    def test_cancel_removes_listener(self):
        target = EventTarget()
        log = []
        token = target.add_listener("ping", log.append)
        token.cancel()
        target.dispatch("ping", 1)
        assert log == []
        assert target.listener_count("ping") == 0

    def test_cancelled_token_registers_nothing(self):
        target = EventTarget()
        target.add_listener("ping", lambda d: None, Cancellation.expired())
        assert target.listener_count("ping") == 0


class TestFromEvent:
    def test_follows_events_while_active(self):
        target = EventTarget()
        selected = from_event(target, "category-selected")
        log = []
        token = selected.subscribe(log.append)
        assert target.listener_count("category-selected") == 1
        target.dispatch("category-selected", "animals")
        target.dispatch("category-selected", "colours")
        token.cancel()
        target.dispatch("category-selected", "food")
        assert log == ["animals", "colours"]
        assert target.listener_count("category-selected") == 0

    def test_initial_value(self):
        target = EventTarget()
        page = from_event(target, "navigate", initial="#")
        assert page.get() == "#"
        assert target.listener_count("navigate") == 0

    def test_filtered_navigation(self):
        target = EventTarget()
        page = from_event(target, "navigate", initial="")
        opened = []
        page.filter(lambda value: value == "#search").subscribe(opened.append)
        target.dispatch("navigate", "#about")
        target.dispatch("navigate", "#search")
        assert opened == ["#search"]
