"""Tests for the conversation controller."""

import asyncio
import random

from portfolio_assistant import AsyncioScheduler, ConversationController
from portfolio_assistant.config import DEFAULT_FALLBACK_TEXT
from portfolio_assistant.suggestions import FALLBACK_SUGGESTIONS
from portfolio_assistant.tone import PRESETS
from portfolio_assistant.types import RevealState, Role

MISS = "salary expectations"


class TestTurn:
    def test_exact_match_is_wrapped_and_revealed(self, scheduler, tools_document):
        controller = ConversationController({}, scheduler=scheduler, rng=random.Random(1))
        controller.load(tools_document)

        result = controller.submit("what tools do you use?")
        assert result.matched
        intro, body, closing = result.reply.text.split("\n\n")
        assert body == "Figma and Notion."
        assert intro in PRESETS["warm"].intros
        assert closing.startswith(tuple(PRESETS["warm"].closings))

        assert result.reply.reveal_state is RevealState.REVEALING
        assert result.reply.visible_text == result.reply.text[:3]
        scheduler.advance(10.0)
        assert result.reply.reveal_state is RevealState.COMPLETE
        assert result.reply.visible_text == result.reply.text
        controller.dispose()

    def test_user_message_is_immediately_complete(self, controller):
        result = controller.submit("  What tools do you use?  ")
        assert result.user_message.role is Role.USER
        assert result.user_message.text == "What tools do you use?"
        assert result.user_message.visible_text == "What tools do you use?"
        assert result.user_message.reveal_state is RevealState.COMPLETE

    def test_source_line_follows_answer(self, controller):
        result = controller.submit("Show me your best mobile project")
        roles = [m.role for m in controller.messages]
        assert roles == [Role.USER, Role.ASSISTANT, Role.ASSISTANT]
        source = controller.messages[2]
        assert source is result.source_message
        assert source.text == "Source: Case study: Mobile Checkout"
        assert source.reveal_state is RevealState.COMPLETE

    def test_no_source_line_without_source(self, controller):
        controller.submit("Show me your dashboard work")
        assert len(controller.messages) == 2

    def test_short_answer_not_wrapped(self, controller):
        result = controller.submit("Are you available?")
        assert result.reply.text == "Yes."
        assert result.reply.reveal_state is RevealState.COMPLETE
        assert result.reply.visible_text == "Yes."

    def test_miss_uses_fallback(self, controller, scheduler):
        result = controller.submit(MISS)
        assert not result.matched
        assert result.reply.text == DEFAULT_FALLBACK_TEXT
        assert controller.suggestion_feed() == list(FALLBACK_SUGGESTIONS)
        scheduler.advance(10.0)
        assert result.reply.visible_text == DEFAULT_FALLBACK_TEXT

    def test_custom_fallback_text(self, scheduler, faq_document):
        controller = ConversationController(
            {"conversation": {"fallback_text": "Not in my notes."}}, scheduler=scheduler
        )
        controller.load(faq_document)
        assert controller.submit(MISS).reply.text == "Not in my notes."

    def test_empty_input_ignored(self, controller):
        assert controller.submit("   ") is None
        assert controller.messages == []

    def test_empty_knowledge_base_falls_back(self, scheduler):
        controller = ConversationController({}, scheduler=scheduler)
        assert controller.load(None) == 0
        result = controller.submit("What tools do you use?")
        assert result.entry is None
        assert result.reply.text == DEFAULT_FALLBACK_TEXT

    def test_missing_file_falls_back(self, scheduler, tmp_path):
        controller = ConversationController({}, scheduler=scheduler)
        assert controller.load_path(str(tmp_path / "missing.json")) == 0
        assert not controller.submit("What tools do you use?").matched


class TestSuggestions:
    def test_starter_set_before_first_turn(self, controller):
        assert "Which tools do you use?" in controller.suggestion_feed()

    def test_derived_from_matched_question(self, controller):
        controller.submit("Show me your best mobile project")
        assert controller.suggestion_feed()[0] == "Show me a mobile project"

    def test_chip_behaves_like_typing(self, scheduler, faq_document):
        typed = ConversationController({}, scheduler=scheduler, rng=random.Random(3))
        picked = ConversationController({}, scheduler=scheduler, rng=random.Random(3))
        typed.load(faq_document)
        picked.load(faq_document)

        a = typed.submit("Which tools do you use?")
        b = picked.select_suggestion("Which tools do you use?")
        assert a.entry == b.entry
        assert a.reply.text == b.reply.text
        assert [m.text for m in typed.messages] == [m.text for m in picked.messages]

    def test_suggestions_not_in_transcript(self, controller):
        controller.submit("Show me your best mobile project")
        texts = [m.text for m in controller.messages]
        assert all(label not in texts for label in controller.suggestion_feed())


class TestTranscript:
    def test_append_order(self, controller):
        controller.submit(MISS)
        controller.submit("Are you available?")
        texts = [m.text for m in controller.messages]
        assert texts == [MISS, DEFAULT_FALLBACK_TEXT, "Are you available?", "Yes."]

    def test_ids_unique(self, controller):
        controller.submit("Show me your best mobile project")
        controller.submit(MISS)
        ids = [m.id for m in controller.messages]
        assert len(ids) == len(set(ids))

    def test_feed_shape(self, controller):
        controller.submit("Are you available?")
        feed = controller.message_feed()
        assert feed[0] == {
            "id": controller.messages[0].id,
            "role": "user",
            "text": "Are you available?",
            "revealState": "complete",
        }
        assert feed[1]["role"] == "assistant"

    def test_messages_is_a_copy(self, controller):
        controller.submit(MISS)
        controller.messages.clear()
        assert len(controller.messages) == 2


class TestRevealCoordination:
    def test_new_submission_fast_forwards_previous(self, controller):
        first = controller.submit(MISS)
        assert first.reply.reveal_state is RevealState.REVEALING
        controller.submit("Are you available?")
        assert first.reply.reveal_state is RevealState.COMPLETE
        assert first.reply.visible_text == DEFAULT_FALLBACK_TEXT

    def test_concurrent_reveals_when_configured(self, scheduler, faq_document):
        controller = ConversationController({"reveal": {"fast_forward_on_submit": False}}, scheduler=scheduler)
        controller.load(faq_document)
        first = controller.submit(MISS)
        second = controller.submit(MISS)
        assert first.reply.reveal_state is RevealState.REVEALING
        assert second.reply.reveal_state is RevealState.REVEALING
        assert scheduler.active_tasks == 2

    def test_fast_forward_by_id(self, controller):
        result = controller.submit(MISS)
        assert controller.fast_forward(result.reply.id)
        assert result.reply.visible_text == DEFAULT_FALLBACK_TEXT
        assert not controller.fast_forward(result.reply.id)

    def test_instant_config(self, scheduler, faq_document):
        controller = ConversationController({"reveal": {"instant": True}}, scheduler=scheduler)
        controller.load(faq_document)
        result = controller.submit(MISS)
        assert result.reply.reveal_state is RevealState.COMPLETE
        assert scheduler.active_tasks == 0

    def test_dispose_tears_down_timers(self, controller, scheduler):
        controller.submit(MISS)
        assert scheduler.active_tasks == 1
        controller.dispose()
        assert scheduler.active_tasks == 0

    def test_default_scheduler_runs_on_event_loop(self, faq_document):
        async def scenario():
            controller = ConversationController({"reveal": {"chars_per_second": 3000, "frame_ms": 5}})
            controller.load(faq_document)
            done = asyncio.Event()

            def on_change(c):
                if c.messages[-1].reveal_state is RevealState.COMPLETE:
                    done.set()

            controller.subscribe(on_change)
            result = controller.submit(MISS)
            assert result.reply.reveal_state is RevealState.REVEALING
            await asyncio.wait_for(done.wait(), timeout=5)
            return controller, result

        controller, result = asyncio.run(scenario())
        assert isinstance(controller.revealer.scheduler, AsyncioScheduler)
        assert result.reply.reveal_state is RevealState.COMPLETE
        assert result.reply.visible_text == DEFAULT_FALLBACK_TEXT
        assert controller.revealer.active_count == 0


class TestListeners:
    def test_notified_on_each_change(self, controller, scheduler):
        snapshots = []
        controller.subscribe(lambda c: snapshots.append(c.message_feed()))
        controller.submit(MISS)
        scheduler.advance(10.0)
        assert snapshots[0][1]["revealState"] == "pending"
        assert snapshots[-1][1]["revealState"] == "complete"
        assert snapshots[-1][1]["text"] == DEFAULT_FALLBACK_TEXT
        assert len(snapshots) > 3

    def test_dispose_drops_listeners(self, controller):
        calls = []
        controller.subscribe(lambda c: calls.append(1))
        controller.dispose()
        controller.submit(MISS)
        assert calls == []
