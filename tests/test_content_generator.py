"""Tests for generator output parsing, prompts and providers."""
from types import SimpleNamespace
from unittest.mock import MagicMock, patch

import pytest
from openai import APITimeoutError

from momentum.errors import ContentGenerationError, GenerationParseError
from momentum.services.content_generator import (
    LocalStubContentGenerator,
    OpenAIContentGenerator,
    build_daily_tasks_prompt,
    build_feedback_prompt,
    extract_json_span,
    get_content_generator,
    parse_daily_tasks,
    parse_roadmap_steps,
)


class TestExtractJsonSpan:
    """Pulling JSON out of free-form completions."""

    def test_fenced_array(self):
        raw = 'Sure!\n```json\n[{"title": "A"}]\n```\nGood luck.'
        assert extract_json_span(raw) == '[{"title": "A"}]'

    def test_prose_brackets_before_payload_are_skipped(self):
        raw = 'Step [1] matters. Here you go: [{"title": "A"}, {"title": "B"}]'
        assert extract_json_span(raw) == '[{"title": "A"}, {"title": "B"}]'

    def test_array_preferred_over_object(self):
        raw = '{"note": "x"} then [{"title": "A"}]'
        assert extract_json_span(raw) == '[{"title": "A"}]'

    def test_object_fallback(self):
        assert extract_json_span('Result: {"title": "Only"} done') == '{"title": "Only"}'

    def test_nothing_found(self):
        assert extract_json_span("I cannot help with that.") is None
        assert extract_json_span("") is None

    def test_empty_array_in_prose_does_not_hide_payload(self):
        raw = 'Start from an empty list [] and fill it: [{"title": "A"}]'
        assert extract_json_span(raw) == '[{"title": "A"}]'
        assert [t.title for t in parse_daily_tasks(raw)] == ["A"]

    def test_empty_array_is_last_resort(self):
        assert extract_json_span("Nothing to add today: []") == "[]"

    def test_truncated_payload(self):
        assert extract_json_span('[{"title": ') is None


class TestParseRoadmapSteps:
    """Roadmap parsing."""

    def test_sorted_by_order(self):
        raw = '[{"step_order": 2, "title": "Second"}, {"step_order": 1, "title": "First"}]'
        steps = parse_roadmap_steps(raw)
        assert [(s.order, s.title) for s in steps] == [(1, "First"), (2, "Second")]

    def test_order_key_alias_and_missing_order(self):
        raw = '[{"order": 3, "title": "C"}, {"title": "Unnumbered"}]'
        steps = parse_roadmap_steps(raw)
        assert [s.title for s in steps] == ["Unnumbered", "C"]

    def test_ties_keep_list_position(self):
        raw = '[{"step_order": 1, "title": "X"}, {"step_order": 1, "title": "Y"}]'
        assert [s.title for s in parse_roadmap_steps(raw)] == ["X", "Y"]

    def test_blank_titles_skipped(self):
        raw = '[{"step_order": 1, "title": "  "}, {"step_order": 2, "title": "Real"}]'
        assert [s.title for s in parse_roadmap_steps(raw)] == ["Real"]

    def test_single_object_is_one_step(self):
        assert [s.title for s in parse_roadmap_steps('{"step_order": 1, "title": "Solo"}')] == ["Solo"]

    def test_invalid_order(self):
        with pytest.raises(GenerationParseError):
            parse_roadmap_steps('[{"step_order": "soon", "title": "A"}]')

    def test_unparseable_keeps_raw_text(self):
        with pytest.raises(GenerationParseError) as exc_info:
            parse_roadmap_steps("no json here")
        assert exc_info.value.raw_text == "no json here"


class TestParseDailyTasks:
    """Daily task parsing."""

    def test_titles(self):
        raw = 'Here:\n[{"title": "Read"}, {"title": "Write"}]'
        assert [t.title for t in parse_daily_tasks(raw)] == ["Read", "Write"]

    def test_empty_array_is_zero_tasks(self):
        assert parse_daily_tasks("[]") == []

    def test_unparseable(self):
        with pytest.raises(GenerationParseError):
            parse_daily_tasks("Do some reading today.")


class TestPrompts:
    """Prompt construction."""

    def test_daily_prompt_mentions_focus_and_history(self):
        prior = [SimpleNamespace(title="Read", status="completed")]
        prompt = build_daily_tasks_prompt("Learn Spanish", "Vocabulary", prior)

        assert "Vocabulary" in prompt
        assert "Learn Spanish" in prompt
        assert "- Read (completed)" in prompt

    def test_daily_prompt_first_day(self):
        assert "first day" in build_daily_tasks_prompt("Goal", "Step", [])

    def test_feedback_prompt_counts(self):
        prompt = build_feedback_prompt("Goal", [{"status": "completed", "count": 2}, {"status": "missed", "count": 1}])
        assert "completed 2 tasks, missed 1 tasks" in prompt
        assert "0 unfinished" in prompt


class TestOpenAIContentGenerator:
    """OpenAI provider with a mocked client."""

    def _generator(self, content):
        generator = OpenAIContentGenerator(api_key="sk-test", model="gpt-4o-mini", temperature=0.7, timeout=5)
        completion = SimpleNamespace(choices=[SimpleNamespace(message=SimpleNamespace(content=content))])
        generator.client = MagicMock()
        generator.client.chat.completions.create.return_value = completion
        return generator

    def test_roadmap(self):
        generator = self._generator('```json\n[{"step_order": 1, "title": "Start"}]\n```')
        steps = generator.generate_roadmap("Goal")

        assert [s.title for s in steps] == ["Start"]
        kwargs = generator.client.chat.completions.create.call_args.kwargs
        assert kwargs["model"] == "gpt-4o-mini"
        assert kwargs["messages"][-1]["role"] == "user"

    def test_feedback_is_stripped(self):
        assert self._generator("  Well done!  \n").generate_feedback("Goal", []) == "Well done!"

    def test_timeout_becomes_generation_error(self):
        generator = self._generator("")
        generator.client.chat.completions.create.side_effect = APITimeoutError(request=MagicMock())

        with pytest.raises(ContentGenerationError):
            generator.generate_daily_tasks("Goal", "Step", [])


class TestLocalStub:
    """Deterministic offline provider."""

    def test_roadmap_is_deterministic(self):
        stub = LocalStubContentGenerator()
        first = stub.generate_roadmap("Learn Spanish")
        second = stub.generate_roadmap("Learn Spanish")

        assert first == second
        assert [s.order for s in first] == [1, 2, 3, 4]

    def test_tasks_follow_focus_step(self):
        tasks = LocalStubContentGenerator(tasks_per_day=2).generate_daily_tasks("Goal", "Vocabulary", [])
        assert [t.title for t in tasks] == ["Task 1: Vocabulary", "Task 2: Vocabulary"]

    def test_feedback_counts(self):
        feedback = LocalStubContentGenerator().generate_feedback(
            "Goal", [{"status": "completed", "count": 1}, {"status": "pending", "count": 2}]
        )
        assert feedback.startswith("You completed 1 of 3 tasks today.")


class TestProviderSelection:
    """get_content_generator honours settings."""

    def test_local_stub(self):
        with patch("momentum.services.content_generator.settings") as mock_settings:
            mock_settings.CONTENT_GENERATOR_PROVIDER = "local_stub"
            assert isinstance(get_content_generator(), LocalStubContentGenerator)

    def test_openai_requires_key(self):
        with patch("momentum.services.content_generator.settings") as mock_settings:
            mock_settings.CONTENT_GENERATOR_PROVIDER = "openai"
            mock_settings.OPENAI_API_KEY = None
            with pytest.raises(ValueError, match="OPENAI_API_KEY"):
                get_content_generator()

    def test_openai(self):
        with patch("momentum.services.content_generator.settings") as mock_settings:
            mock_settings.CONTENT_GENERATOR_PROVIDER = "openai"
            mock_settings.OPENAI_API_KEY = "sk-test"
            mock_settings.OPENAI_CHAT_MODEL = "gpt-4o-mini"
            mock_settings.OPENAI_CHAT_TEMPERATURE = 0.2
            mock_settings.CONTENT_GENERATOR_TIMEOUT = 10.0
            generator = get_content_generator()

        assert isinstance(generator, OpenAIContentGenerator)
        assert generator.temperature == 0.2
