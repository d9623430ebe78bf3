"""Content generator service with pluggable providers."""
import hashlib
import json
import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Protocol, Sequence

from openai import OpenAI, OpenAIError

from momentum.errors import ContentGenerationError, GenerationParseError
from momentum.settings import settings

logger = logging.getLogger(__name__)

_decoder = json.JSONDecoder()

SYSTEM_PROMPT = "You are a supportive, practical productivity coach."


@dataclass
class GeneratedStep:
    """Roadmap step proposed by the generator."""
    order: int
    title: str


@dataclass
class GeneratedTask:
    """Daily task proposed by the generator."""
    title: str


class ContentGenerator(Protocol):
    """Protocol for content generators."""

    def generate_roadmap(self, goal_description: str) -> List[GeneratedStep]:
        """Ordered roadmap steps for a goal."""
        ...

    def generate_daily_tasks(
        self,
        goal_description: str,
        current_step_title: str,
        prior_day_tasks: Sequence[Any]
    ) -> List[GeneratedTask]:
        """Three to four concrete tasks for today's focus step."""
        ...

    def generate_feedback(self, goal_description: str, summary: List[Dict[str, Any]]) -> str:
        """Short coaching feedback for a finished day."""
        ...


def _is_payload(value: Any, allow_empty: bool) -> bool:
    if isinstance(value, dict):
        return True
    if not isinstance(value, list) or not all(isinstance(item, dict) for item in value):
        return False
    return allow_empty or bool(value)


def _first_well_formed(raw_text: str, opener: str, allow_empty: bool = False) -> Optional[str]:
    start = raw_text.find(opener)
    while start != -1:
        try:
            value, end = _decoder.raw_decode(raw_text, start)
        except json.JSONDecodeError:
            value, end = None, None
        if end is not None and _is_payload(value, allow_empty):
            return raw_text[start:end]
        start = raw_text.find(opener, start + 1)
    return None


def extract_json_span(raw_text: str) -> Optional[str]:
    """
    Pull the JSON payload out of a free-form completion.

    Returns the first well-formed non-empty array of objects, falling back
    to the first well-formed object, then to the first empty array ("[]"
    is a valid zero-item answer, but never outranks a real payload).
    Markdown fences and explanatory prose around the payload are ignored.
    Returns None when none of these is present.
    """
    if not raw_text:
        return None

    return (
        _first_well_formed(raw_text, "[")
        or _first_well_formed(raw_text, "{")
        or _first_well_formed(raw_text, "[", allow_empty=True)
    )


def _load_items(raw_text: str, what: str) -> List[Dict[str, Any]]:
    span = extract_json_span(raw_text)
    if span is None:
        raise GenerationParseError(f"No well-formed JSON found in generated {what}", raw_text=raw_text)

    data = json.loads(span)
    # A lone object is a one-item list
    if isinstance(data, dict):
        data = [data]
    return data


def parse_roadmap_steps(raw_text: str) -> List[GeneratedStep]:
    """
    Parse generator output into roadmap steps sorted by their order.

    Accepts either "step_order" or "order" as the order key; items without
    an order keep their position in the list.

    Raises:
        GenerationParseError: If no well-formed JSON can be extracted
    """
    items = _load_items(raw_text, "roadmap")

    steps = []
    for position, item in enumerate(items, start=1):
        title = str(item.get("title") or "").strip()
        if not title:
            continue
        order = item.get("step_order", item.get("order", position))
        try:
            order = int(order)
        except (TypeError, ValueError):
            raise GenerationParseError(f"Invalid step order {order!r}", raw_text=raw_text)
        steps.append(GeneratedStep(order=order, title=title))

    # sorted() is stable, ties keep list position
    return sorted(steps, key=lambda s: s.order)


def parse_daily_tasks(raw_text: str) -> List[GeneratedTask]:
    """
    Parse generator output into task titles.

    An empty array is a valid answer (zero tasks).

    Raises:
        GenerationParseError: If no well-formed JSON can be extracted
    """
    items = _load_items(raw_text, "daily tasks")
    tasks = []
    for item in items:
        title = str(item.get("title") or "").strip()
        if title:
            tasks.append(GeneratedTask(title=title))
    return tasks


def summarize_counts(summary: List[Dict[str, Any]]) -> Dict[str, int]:
    """Collapse a status summary into completed/missed/pending counts."""
    counts = {"completed": 0, "missed": 0, "pending": 0}
    for entry in summary:
        if entry.get("status") in counts:
            counts[entry["status"]] = int(entry.get("count", 0))
    return counts


def _describe_prior_day(prior_day_tasks: Sequence[Any]) -> str:
    if not prior_day_tasks:
        return "This is the first day, there is no task history yet."

    lines = []
    for task in prior_day_tasks:
        lines.append(f"- {task.title} ({task.status})")
    return "Yesterday's tasks:\n" + "\n".join(lines)


def build_roadmap_prompt(goal_description: str) -> str:
    """Prompt asking for 3-5 ordered roadmap steps as a JSON array."""
    return f"""Create a roadmap for this goal: "{goal_description}".
Give 3 to 5 realistic main steps.
ANSWER ONLY WITH A JSON ARRAY like this, without any introduction or closing text:
[{{"step_order": 1, "title": "Step 1 title"}}, {{"step_order": 2, "title": "Step 2 title"}}]"""


def build_daily_tasks_prompt(
    goal_description: str,
    current_step_title: str,
    prior_day_tasks: Sequence[Any]
) -> str:
    """Prompt asking for 3-4 tasks focused on the current roadmap step."""
    return f"""Create 3-4 tasks for TODAY.
The user's big goal: "{goal_description}".
TODAY'S MAIN FOCUS is the roadmap step: "{current_step_title}".
Context from yesterday: {_describe_prior_day(prior_day_tasks)}

Based on today's main focus, give very specific, doable tasks.
ANSWER ONLY WITH A JSON ARRAY like this, without extra text:
[{{"title": "Specific task 1"}}, {{"title": "Specific task 2"}}]"""


def build_feedback_prompt(goal_description: str, summary: List[Dict[str, Any]]) -> str:
    """Prompt asking for 2-3 sentences of coaching feedback, no JSON."""
    counts = summarize_counts(summary)
    narrative = (
        f"The user completed {counts['completed']} tasks, missed {counts['missed']} tasks, "
        f"and still has {counts['pending']} unfinished tasks."
    )
    return f"""The user's big goal is: "{goal_description}".
Here is a summary of their performance today: "{narrative}".
Give short feedback (2-3 sentences) that is positive and constructive. If tasks were completed, praise their progress towards the big goal. If nothing was completed, encourage them without judgement to try again tomorrow.
ANSWER AS A COACH, NOT AS AN ASSISTANT. DO NOT USE JSON."""


class OpenAIContentGenerator:
    """OpenAI chat completion generator."""

    def __init__(self, api_key: str, model: str, temperature: float, timeout: float):
        """Initialize OpenAI client."""
        self.client = OpenAI(api_key=api_key, timeout=timeout, max_retries=1)
        self.model = model
        self.temperature = temperature

    def _complete(self, prompt: str) -> str:
        try:
            completion = self.client.chat.completions.create(
                model=self.model,
                temperature=self.temperature,
                messages=[
                    {"role": "system", "content": SYSTEM_PROMPT},
                    {"role": "user", "content": prompt}
                ]
            )
        except OpenAIError as e:
            raise ContentGenerationError(f"Content generator request failed: {e}") from e

        if not completion.choices:
            return ""
        return completion.choices[0].message.content or ""

    def generate_roadmap(self, goal_description: str) -> List[GeneratedStep]:
        logger.info("Requesting roadmap from content generator")
        raw_text = self._complete(build_roadmap_prompt(goal_description))
        logger.debug(f"Raw roadmap response: {raw_text}")
        return parse_roadmap_steps(raw_text)

    def generate_daily_tasks(
        self,
        goal_description: str,
        current_step_title: str,
        prior_day_tasks: Sequence[Any]
    ) -> List[GeneratedTask]:
        logger.info("Requesting daily tasks from content generator")
        raw_text = self._complete(
            build_daily_tasks_prompt(goal_description, current_step_title, prior_day_tasks)
        )
        logger.debug(f"Raw daily tasks response: {raw_text}")
        return parse_daily_tasks(raw_text)

    def generate_feedback(self, goal_description: str, summary: List[Dict[str, Any]]) -> str:
        logger.info("Requesting review feedback from content generator")
        return self._complete(build_feedback_prompt(goal_description, summary)).strip()


class LocalStubContentGenerator:
    """
    Deterministic offline generator for development and tests.

    The same goal always yields the same roadmap; no external API calls.
    """

    def __init__(self, step_count: int = 4, tasks_per_day: int = 3):
        self.step_count = step_count
        self.tasks_per_day = tasks_per_day

    def generate_roadmap(self, goal_description: str) -> List[GeneratedStep]:
        digest = hashlib.sha256(goal_description.encode()).hexdigest()[:6]
        return [
            GeneratedStep(order=i, title=f"Milestone {i} towards {goal_description} [{digest}]")
            for i in range(1, self.step_count + 1)
        ]

    def generate_daily_tasks(
        self,
        goal_description: str,
        current_step_title: str,
        prior_day_tasks: Sequence[Any]
    ) -> List[GeneratedTask]:
        return [
            GeneratedTask(title=f"Task {i}: {current_step_title}")
            for i in range(1, self.tasks_per_day + 1)
        ]

    def generate_feedback(self, goal_description: str, summary: List[Dict[str, Any]]) -> str:
        counts = summarize_counts(summary)
        return (
            f"You completed {counts['completed']} of "
            f"{sum(counts.values())} tasks today. Keep working towards {goal_description}."
        )


def get_content_generator() -> ContentGenerator:
    """Return the configured content generator (FastAPI dependency)."""
    if settings.CONTENT_GENERATOR_PROVIDER == "openai":
        if not settings.OPENAI_API_KEY:
            raise ValueError(
                "OPENAI_API_KEY is required when CONTENT_GENERATOR_PROVIDER=openai"
            )
        return OpenAIContentGenerator(
            api_key=settings.OPENAI_API_KEY,
            model=settings.OPENAI_CHAT_MODEL,
            temperature=settings.OPENAI_CHAT_TEMPERATURE,
            timeout=settings.CONTENT_GENERATOR_TIMEOUT,
        )
    elif settings.CONTENT_GENERATOR_PROVIDER == "local_stub":
        return LocalStubContentGenerator()
    else:
        raise ValueError(f"Unknown content generator provider: {settings.CONTENT_GENERATOR_PROVIDER}")
