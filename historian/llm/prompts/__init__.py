"""
Prompt templates for record enrichment.

Each template asks the model for a fixed set of sections, each introduced by
a ``**Label:**`` marker; historian.enrichment.parser extracts them by those
labels, so marker text here and there must stay in sync.
"""

from __future__ import annotations

REWRITTEN_DESCRIPTION = "Rewritten Description"
HISTORICAL_ANALYSIS = "Historical Analysis"

ORGANIZED_FACTS = "Organized Facts"
NARRATIVE_STORY = "Narrative Story"
KEY_LEARNING_POINTS = "Key Learning Points"
CHRONOLOGICAL_EVENTS = "Chronological Events"

HIGHLIGHT_SPAN = '<span style="background-color: #e6f8ef; padding: 2px 4px; border-radius: 3px;">keyword</span>'

EVENT_SUMMARY_PROMPT = """Analyze this historical event and provide two outputs:

Event: {title}
Year: {year} {era}
Original Description: {description}

**OUTPUT 1: Rewritten Description (2 lines)**
Rewrite the original description in a more historically accurate and engaging way. Make it:
- Factually correct with verified historical details
- Approximately 2 lines long
- Include real numbers and specific details when relevant

**OUTPUT 2: Comprehensive Historical Analysis (4-6 sentences)**
Cover the historical context, key dates, places and people, 2-3 related events
before or after, the impact on later developments, and why the event is still studied.

**CRITICAL REQUIREMENTS**:
- Use ONLY real, verified numbers and statistics; do not estimate
- Prefer precise figures ("15,000 soldiers", not "thousands of soldiers")

**IMPORTANT**: Highlight important keywords, dates, names, locations and figures in the
analysis using HTML span tags in this format: {highlight}

**FORMAT YOUR RESPONSE AS:**
**""" + REWRITTEN_DESCRIPTION + """:**
[Your 2-line rewritten description here]

**""" + HISTORICAL_ANALYSIS + """:**
[Your 4-6 sentence analysis with highlighted keywords]
"""

HISTORY_LEARNING_PROMPT = """You are helping a student review notes from a history class.

Topic: {title}
Period: {year_range}
Student Notes:
{facts}

Produce four outputs from these notes. Correct any factual mistakes you find, and use
ONLY real, verified dates and figures.

1. Organized Facts: the notes rewritten as a clean, corrected bullet list.
2. Narrative Story: a short engaging narrative (1-2 paragraphs) connecting the facts.
3. Key Learning Points: 3-5 bullet points a student should remember.
4. Chronological Events: the events from the notes as a dated list in time order.

Highlight important names, dates and places in the narrative using HTML span tags in
this format: {highlight}

**FORMAT YOUR RESPONSE AS:**
**""" + ORGANIZED_FACTS + """:**
[bullet list]

**""" + NARRATIVE_STORY + """:**
[narrative]

**""" + KEY_LEARNING_POINTS + """:**
[bullet list]

**""" + CHRONOLOGICAL_EVENTS + """:**
[dated list]
"""


def build_event_summary_prompt(title: str, description: str, year: int | str, era: str) -> str:
    return EVENT_SUMMARY_PROMPT.format(
        title=title,
        description=description,
        year=year,
        era=era,
        highlight=HIGHLIGHT_SPAN,
    )


def build_history_learning_prompt(title: str, facts: str, year_range: str) -> str:
    return HISTORY_LEARNING_PROMPT.format(
        title=title,
        facts=facts,
        year_range=year_range,
        highlight=HIGHLIGHT_SPAN,
    )
