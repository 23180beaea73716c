"""
Section extraction from free-text model replies.

A section is the text after its ``**Label:**`` marker up to the next known
marker (or the end of the reply). A missing marker yields "" for that
section, never an error.
"""

from __future__ import annotations

import re
from collections.abc import Sequence

from historian.enrichment.types import EnrichmentResult
from historian.llm.prompts import (
    CHRONOLOGICAL_EVENTS,
    HISTORICAL_ANALYSIS,
    KEY_LEARNING_POINTS,
    NARRATIVE_STORY,
    ORGANIZED_FACTS,
    REWRITTEN_DESCRIPTION,
)

EVENT_LABELS = (REWRITTEN_DESCRIPTION, HISTORICAL_ANALYSIS)
LEARNING_LABELS = (ORGANIZED_FACTS, NARRATIVE_STORY, KEY_LEARNING_POINTS, CHRONOLOGICAL_EVENTS)


def _marker(label: str) -> re.Pattern[str]:
    # Bold is optional; models drop the asterisks often enough
    return re.compile(rf"\*{{0,2}}{re.escape(label)}:\*{{0,2}}", re.IGNORECASE)


def extract_sections(text: str, labels: Sequence[str]) -> dict[str, str]:
    """
    Split a reply into the named sections.

    Returns:
        Mapping of every label to its stripped text ("" when absent)
    """
    found: dict[str, re.Match[str]] = {}
    for label in labels:
        match = _marker(label).search(text)
        if match:
            found[label] = match

    sections: dict[str, str] = {}
    for label in labels:
        match = found.get(label)
        if match is None:
            sections[label] = ""
            continue
        later_starts = [m.start() for m in found.values() if m.start() > match.start()]
        end = min(later_starts) if later_starts else len(text)
        sections[label] = text[match.end():end].strip()
    return sections


def parse_event_reply(text: str) -> EnrichmentResult:
    sections = extract_sections(text, EVENT_LABELS)
    return EnrichmentResult.success(
        narrative_text=sections[HISTORICAL_ANALYSIS],
        rewritten_text=sections[REWRITTEN_DESCRIPTION],
    )


def parse_learning_reply(text: str) -> EnrichmentResult:
    sections = extract_sections(text, LEARNING_LABELS)
    return EnrichmentResult.success(
        narrative_text=sections[NARRATIVE_STORY],
        rewritten_text=sections[ORGANIZED_FACTS],
        key_points_text=sections[KEY_LEARNING_POINTS],
        chronological_events_text=sections[CHRONOLOGICAL_EVENTS],
    )
