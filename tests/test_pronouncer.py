"""Unit tests for the Pronouncer.

WHY: Rapid clicking is the normal way learners use the marquee. Two
words marked speaking at once, a late "cancelled" callback wiping the
new word's highlight, or a synthesis error escaping into the UI would
all be visible bugs.

HOW: ScriptedSpeechService records every request and only emits
outcomes when the test calls complete() / fail(); the Pronouncer reads
its items from a real WordStream.

RULES:
- Outcomes are applied only by poll(), mirroring the UI-thread drain
"""

import logging

import pytest

from vocab_marquee.core.pronouncer import Pronouncer, build_speech_request
from vocab_marquee.core.stream import ItemState, WordStream
from vocab_marquee.speech.base import SpeechOutcome, Voice


@pytest.fixture
def stream():
    s = WordStream()
    s.build(["Algorithm", "Database", "Cloud"])
    return s


@pytest.fixture
def pronouncer(speech, surface, stream):
    return Pronouncer(speech, surface, items=lambda: stream.items)


def _speaking(stream):
    return [item for item in stream.items if item.state == ItemState.SPEAKING]


class TestActivate:
    """activate() marks the item and issues one request."""

    def test_marks_speaking_and_requests(self, pronouncer, speech, stream):
        item = stream.items[1]
        utterance_id = pronouncer.activate(item)

        assert item.state == ItemState.SPEAKING
        assert speech.spoken_texts == ["Database"]
        assert pronouncer.current.utterance_id == utterance_id
        assert pronouncer.current.item is item

    def test_request_parameters(self, pronouncer, speech, stream):
        pronouncer.activate(stream.items[0])
        _, request = speech.requests[0]
        assert request.locale == "en-US"
        assert request.rate == pytest.approx(0.9)
        assert request.pitch == 1.0
        assert request.volume == 1.0
        assert request.voice is None  # no voices reported yet

    def test_voice_is_chosen_once_voices_load(self, pronouncer, speech, stream):
        pronouncer.activate(stream.items[0])
        assert speech.requests[-1][1].voice is None

        us = Voice(id="v-us", name="Samantha", locale="en-US")
        speech.set_voices([Voice(id="v-fr", name="Amelie", locale="fr-FR"), us])
        pronouncer.activate(stream.items[1])
        assert speech.requests[-1][1].voice == us


class TestInterruption:
    """A new activation cancels and resets the previous one."""

    def test_database_interrupts_algorithm(self, pronouncer, speech, stream):
        algorithm, database = stream.items[0], stream.items[1]
        pronouncer.activate(algorithm)
        speech.requests.clear()

        pronouncer.activate(database)

        assert algorithm.state == ItemState.IDLE
        assert database.state == ItemState.SPEAKING
        assert speech.cancel_count == 1
        assert speech.spoken_texts == ["Database"]

    def test_late_cancel_report_does_not_clear_new_item(self, pronouncer, speech, stream):
        algorithm, database = stream.items[0], stream.items[1]
        pronouncer.activate(algorithm)
        new_id = pronouncer.activate(database)

        results = pronouncer.poll()  # delivers the cancelled outcome for Algorithm

        assert [r.outcome for r in results] == [SpeechOutcome.FAILED]
        assert database.state == ItemState.SPEAKING
        assert pronouncer.current.utterance_id == new_id

    def test_reactivating_same_item(self, pronouncer, speech, stream):
        item = stream.items[2]
        pronouncer.activate(item)
        pronouncer.activate(item)
        pronouncer.poll()
        assert item.state == ItemState.SPEAKING
        assert len(speech.requests) == 2

    def test_at_most_one_speaking_after_many_activations(self, pronouncer, speech, stream):
        order = [0, 3, 1, 1, 5, 2, 4, 0]
        for step, index in enumerate(order):
            pronouncer.activate(stream.items[index])
            if step % 3 == 0:
                pronouncer.poll()
            assert len(_speaking(stream)) == 1
        pronouncer.poll()
        assert _speaking(stream) == [stream.items[0]]

    def test_duplicate_copy_is_a_separate_item(self, pronouncer, stream):
        first, second = stream.items[0], stream.items[3]
        assert first.label == second.label
        pronouncer.activate(first)
        pronouncer.activate(second)
        assert first.state == ItemState.IDLE
        assert second.state == ItemState.SPEAKING


class TestOutcomes:
    """Completion and failure both reset the item and the slot."""

    def test_completion_clears_speaking(self, pronouncer, speech, stream):
        item = stream.items[0]
        utterance_id = pronouncer.activate(item)
        speech.complete(utterance_id)
        pronouncer.poll()
        assert item.state == ItemState.IDLE
        assert pronouncer.current is None

    def test_failure_is_absorbed_and_logged(self, pronouncer, speech, stream, caplog):
        item = stream.items[1]
        utterance_id = pronouncer.activate(item)
        speech.fail(utterance_id, "voice unavailable")

        with caplog.at_level(logging.WARNING, logger="vocab_marquee.core.pronouncer"):
            pronouncer.poll()

        assert item.state == ItemState.IDLE
        assert pronouncer.current is None
        assert "voice unavailable" in caplog.text

    def test_poll_without_results_is_noop(self, pronouncer, stream):
        assert pronouncer.poll() == []

    def test_repaints_on_every_transition(self, pronouncer, speech, surface, stream):
        item = stream.items[0]
        utterance_id = pronouncer.activate(item)
        speech.complete(utterance_id)
        pronouncer.poll()
        assert surface.updates == [item, item]


class TestKeyboard:
    """Enter and Space behave exactly like a click."""

    @pytest.mark.parametrize("key", ["Return", "Enter", "KP_Enter", "space", " "])
    def test_activation_keys(self, pronouncer, speech, stream, key):
        assert pronouncer.handle_key(stream.items[0], key) is True
        assert speech.spoken_texts == ["Algorithm"]
        assert stream.items[0].state == ItemState.SPEAKING

    @pytest.mark.parametrize("key", ["a", "Tab", "Escape"])
    def test_other_keys_ignored(self, pronouncer, speech, stream, key):
        assert pronouncer.handle_key(stream.items[0], key) is False
        assert speech.requests == []


class TestCancel:

    def test_cancel_resets_everything(self, pronouncer, speech, stream):
        item = stream.items[0]
        pronouncer.activate(item)
        pronouncer.cancel()
        assert item.state == ItemState.IDLE
        assert pronouncer.current is None
        assert speech.cancel_count == 1
        assert not speech.is_speaking

    def test_cancel_when_idle_does_not_touch_service(self, pronouncer, speech):
        pronouncer.cancel()
        assert speech.cancel_count == 0


class TestBuildSpeechRequest:

    def test_falls_back_to_any_english_voice(self):
        gb = Voice(id="gb", name="Daniel", locale="en-GB")
        request = build_speech_request("Cloud", [Voice("de", "Anna", "de-DE"), gb])
        assert request.voice == gb
        assert request.text == "Cloud"
