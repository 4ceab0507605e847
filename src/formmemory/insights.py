"""
Insight synthesis from ranked memories.

Produces the short "Memory insights: ..." text handed to the form-generation
agent, the list of successful example forms, and a local fallback enhancement
for when the agent is unreachable.
"""

from collections.abc import Sequence

from .config import DEFAULT_FORMMEMORY_SUCCESS_THRESHOLD
from .models import Insight, InsightStats, MemoryRecord, SearchResult
from .scoring import max_score

INSIGHT_PREFIX = "Memory insights: "
POPULAR_FIELD_TYPES = 3
MAX_EXAMPLES = 3

# (trigger keywords, advice); checked independently, in order
KEYWORD_ADVICE = (
    (("feedback", "survey"), "Consider including rating scales and open-ended comment fields"),
    (("application", "job"), "Include file upload for resume/documents and structured experience fields"),
    (("registration", "event"), "Add date/time fields and contact information collection"),
)

GENERIC_ADVICE = (
    "To build better memory patterns, consider including specific field types, "
    "validation requirements, and user experience details."
)


def _round_half_up(value: float) -> int:
    # halves round up; round(4.5) would give 4
    return int(value + 0.5) if value >= 0 else -int(-value + 0.5)


def average_relevance(records: Sequence[MemoryRecord], keywords: Sequence[str]) -> float:
    """Mean relevance as a percentage of the best attainable score."""
    if not records:
        return 0.0
    ceiling = max_score(keywords)
    mean = sum(r.relevance_score for r in records) / len(records)
    return round(100.0 * mean / ceiling, 1)


def synthesize(
    scored: SearchResult,
    keywords: Sequence[str],
    success_threshold: float = DEFAULT_FORMMEMORY_SUCCESS_THRESHOLD,
) -> Insight:
    """
    Summarize ranked memories into insight lines and statistics.

    Args:
        scored: Ranked search result
        keywords: Keywords extracted from the prompt
        success_threshold: Success score at which a past form counts as successful

    Returns:
        Insight whose ``summary_lines`` may be empty (no enhancement available)
    """
    successful = [r for r in scored.records if r.is_successful(success_threshold)]
    lines: list[str] = []

    if successful:
        field_counts = [(r.analytics.generated_field_count or 0) for r in successful]
        avg_fields = _round_half_up(sum(field_counts) / len(successful))
        lines.append(f"Similar successful forms averaged {avg_fields} fields")

        field_types = [
            field_type
            for r in successful
            for field_type in (r.analytics.generated_field_types or [])
        ]
        popular = list(dict.fromkeys(field_types))[:POPULAR_FIELD_TYPES]
        if popular:
            lines.append(f"Popular field types for similar forms: {', '.join(popular)}")

    keyword_set = set(keywords)
    for triggers, advice in KEYWORD_ADVICE:
        if keyword_set.intersection(triggers):
            lines.append(advice)

    return Insight(
        summary_lines=tuple(lines),
        stats=InsightStats(
            total_similar=len(scored.records),
            successful_count=len(successful),
            avg_relevance=average_relevance(scored.records, keywords),
        ),
    )


def format_insight(insight: Insight) -> str:
    """Render an insight as a single sentence list, or "" if it has no lines."""
    lines = [line for line in insight.summary_lines if line]
    if not lines:
        return ""
    return f"{INSIGHT_PREFIX}{'. '.join(lines)}."


def format_successful_examples(
    records: Sequence[MemoryRecord],
    limit: int = MAX_EXAMPLES,
    success_threshold: float = DEFAULT_FORMMEMORY_SUCCESS_THRESHOLD,
) -> str:
    """
    Describe the best past forms for the generation agent.

    Each example reads ``"<prompt>" (<n> fields: <types>, score: <s>/10)``;
    examples are separated by "; ".

    Args:
        records: Ranked records
        limit: Maximum examples to include (default: 3)
        success_threshold: Success score needed to be an example

    Returns:
        Formatted examples, or "" if no record qualifies
    """
    examples = []
    for record in records:
        if not record.is_successful(success_threshold):
            continue
        analytics = record.analytics
        prompt = record.metadata.original_prompt or record.text
        types = ", ".join(analytics.generated_field_types or []) or "various"
        score = f"{analytics.success_score:g}"
        examples.append(f'"{prompt}" ({analytics.generated_field_count or 0} fields: {types}, score: {score}/10)')
        if len(examples) >= limit:
            break
    return "; ".join(examples)


def enhance_prompt_fallback(prompt: str, memory_context: str, successful_examples: str) -> str:
    """
    Enhance a prompt locally from memory material.

    Used when the generation agent cannot be reached. Context and examples are
    appended only when they carry more than ten characters.
    """
    enhanced = prompt.strip()

    if memory_context and len(memory_context) > 10:
        enhanced += f". Based on your previous successful forms: {memory_context}"

    if successful_examples and len(successful_examples) > 10:
        enhanced += f". Consider these successful patterns: {successful_examples}"

    if not memory_context and not successful_examples:
        enhanced += f". {GENERIC_ADVICE}"

    return enhanced
