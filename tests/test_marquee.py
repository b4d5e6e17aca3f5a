"""Integration tests for the Marquee controller and the unit selector.

WHY: The controller owns the ordering rules that keep the tracker away
from removed items: stop before clear, rebuild, restart. Switching units
and closing the window are where stale-reference bugs would show up.

HOW: Wires a real Marquee to FakeSurface, ManualFrameClock, and
ScriptedSpeechService, then drives it the way a host would.

RULES:
- Geometry is assigned after each rebuild, as a real layout pass would
"""

import pytest

from vocab_marquee.core.marquee import Marquee
from vocab_marquee.core.selector import UnitSelector
from vocab_marquee.core.session import MarqueeSession
from vocab_marquee.core.stream import ItemState
from vocab_marquee.core.units import Unit


@pytest.fixture
def marquee(sample_units, surface, clock, speech):
    return Marquee(sample_units, surface, clock, speech)


def _layout(surface, items, spacing=50.0):
    surface.set_centers(items, [i * spacing + 25 for i in range(len(items))])


class TestStart:

    def test_start_builds_and_mounts(self, marquee, surface):
        marquee.start(1)
        labels = [item.label for item in surface.mounted]
        assert labels == ["Introvert", "Extrovert", "Humble"] * 2
        assert marquee.session.current_unit_id == 1
        assert marquee.tracker.is_running

    def test_tracking_begins_after_layout(self, marquee, surface, clock):
        marquee.start(1)
        _layout(surface, marquee.items)
        clock.step()
        active = [i for i in marquee.items if i.state == ItemState.ACTIVE]
        # Centers 75 and 125 tie around the anchor at 100; the earlier wins
        assert active == [marquee.items[1]]
        assert active[0].label == "Extrovert"

    def test_unknown_unit(self, marquee):
        with pytest.raises(KeyError):
            marquee.start(42)


class TestRebuildIsolation:
    """Switching units discards the old items entirely."""

    def test_switch_discards_old_items(self, marquee, surface, clock):
        marquee.start(1)
        old_items = marquee.items
        _layout(surface, old_items)
        clock.step()

        assert marquee.load_unit(2) is True

        assert surface.clear_count == 2  # initial build + switch
        assert [i.label for i in marquee.items] == ["Algorithm", "Database"] * 2
        for item in old_items:
            assert item not in marquee.stream
        assert len(clock.pending) == 1

    def test_tracker_only_sees_new_items(self, marquee, surface, clock):
        marquee.start(1)
        old_items = marquee.items
        marquee.load_unit(2)
        old_states = [i.state for i in old_items]

        _layout(surface, marquee.items)
        clock.step(3)

        assert [i.state for i in old_items] == old_states
        assert any(i.state == ItemState.ACTIVE for i in marquee.items)

    def test_reselecting_current_unit_does_not_rebuild(self, marquee, surface):
        marquee.start(1)
        items = marquee.items
        assert marquee.load_unit(1) is False
        assert surface.clear_count == 1
        assert marquee.items == items

    def test_switch_cancels_speech(self, marquee, speech):
        marquee.start(1)
        marquee.activate(marquee.items[0])
        marquee.load_unit(2)
        assert speech.cancel_count == 1
        assert marquee.pronouncer.current is None
        assert all(i.state != ItemState.SPEAKING for i in marquee.items)

    def test_late_outcome_for_old_unit_is_harmless(self, marquee, speech):
        marquee.start(1)
        utterance_id = marquee.activate(marquee.items[0])
        marquee.load_unit(2)
        marquee.activate(marquee.items[1])
        marquee.poll_speech()
        assert marquee.items[1].state == ItemState.SPEAKING
        assert utterance_id not in speech.outstanding

    def test_empty_unit(self, surface, clock, speech):
        units = [Unit(id=1, title="Empty", words=())]
        marquee = Marquee(units, surface, clock, speech)
        marquee.start(1)
        clock.step(2)
        assert marquee.items == []
        assert surface.mounted == []


class TestInput:

    def test_click_activates(self, marquee, speech):
        marquee.start(2)
        marquee.activate(marquee.items[1])
        assert speech.spoken_texts == ["Database"]

    def test_key_activates(self, marquee, speech):
        marquee.start(2)
        assert marquee.handle_key(marquee.items[0], "Return") is True
        assert speech.spoken_texts == ["Algorithm"]

    def test_stale_item_is_ignored(self, marquee, speech):
        marquee.start(1)
        stale = marquee.items[0]
        marquee.load_unit(2)
        assert marquee.activate(stale) is None
        assert marquee.handle_key(stale, "space") is False
        assert speech.requests == []

    def test_hover_pauses_tracking(self, marquee, surface, clock):
        marquee.start(1)
        _layout(surface, marquee.items)
        clock.step()
        before = [i.state for i in marquee.items]

        marquee.hover_enter()
        surface.set_centers(marquee.items, [500, 400, 300, 200, 100, 0])
        clock.step(4)
        assert [i.state for i in marquee.items] == before

        marquee.hover_leave()
        clock.step()
        assert marquee.items[4].state == ItemState.ACTIVE

    def test_speaking_survives_tracking(self, marquee, surface, clock, speech):
        marquee.start(2)
        _layout(surface, marquee.items)
        target = marquee.items[1]
        marquee.activate(target)
        clock.step(3)
        assert target.state == ItemState.SPEAKING

        speech.complete(speech.requests[0][0])
        marquee.poll_speech()
        clock.step()
        assert target.state == ItemState.ACTIVE

    def test_speed_change(self, marquee, surface):
        assert marquee.on_speed_change(55) == pytest.approx(35.0)
        assert surface.durations[-1] == "35s"


class TestTeardown:

    def test_teardown_stops_everything(self, marquee, speech, clock):
        marquee.start(1)
        marquee.activate(marquee.items[2])
        marquee.teardown()

        assert clock.pending == {}
        assert not marquee.tracker.is_running
        assert speech.shutdown_count == 1
        assert not speech.is_speaking
        assert marquee.session.current_unit_id is None
        assert all(i.state != ItemState.SPEAKING for i in marquee.items)

    def test_teardown_is_idempotent(self, marquee, speech):
        marquee.start(1)
        marquee.teardown()
        marquee.teardown()
        assert speech.shutdown_count == 1


class TestUnitSelector:

    def test_options_sorted_with_labels(self):
        units = [Unit(3, "C"), Unit(1, "A"), Unit(2, "B")]
        selector = UnitSelector(units, MarqueeSession(), lambda unit: None)
        assert selector.options() == [
            (1, "Unit 1: A"), (2, "Unit 2: B"), (3, "Unit 3: C"),
        ]
        assert selector.index_of(3) == 2

    def test_select_calls_hook_once(self, sample_units):
        calls = []
        session = MarqueeSession()
        selector = UnitSelector(sample_units, session, calls.append)

        assert selector.select(2) is True
        assert selector.select(2) is False
        assert [u.id for u in calls] == [2]
        assert session.current_unit_id == 2

    def test_unknown_id(self, sample_units):
        selector = UnitSelector(sample_units, MarqueeSession(), lambda unit: None)
        with pytest.raises(KeyError):
            selector.select(9)
        with pytest.raises(KeyError):
            selector.index_of(9)
