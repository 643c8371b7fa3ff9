"""Prompt templates for LLM theme extraction.

Single user-role message. ``{texts}`` is replaced by numbered signal
contents, one ``[n] <content>`` entry per signal.
"""

from __future__ import annotations

from typing import Sequence

from ...schemas.signal_schema import Signal

THEME_EXTRACTION_PROMPT = """Extract key themes from these developer discussions.

Discussions:
{texts}

Identify:
1. Pain points (problems, frustrations, blockers)
2. Desires (wishes, needs, requests)
3. Feature requests (specific asks)
4. Workflow patterns (how they work)
5. Comparisons (vs other tools)

Respond with ONLY a JSON array (no markdown):
[
  {
    "theme": "string",
    "keywords": ["string"],
    "category": "pain|desire|feature|workflow|comparison",
    "examples": ["string"]
  }
]

DO NOT OUTPUT ANYTHING OTHER THAN VALID JSON ARRAY."""


def format_signal_texts(signals: Sequence[Signal]) -> str:
    return "\n\n".join(f"[{i}] {signal.content}" for i, signal in enumerate(signals, 1))


def build_theme_extraction_prompt(signals: Sequence[Signal]) -> str:
    """Fill the extraction template with one batch of signals."""
    # str.replace, not str.format: the template contains literal JSON braces
    return THEME_EXTRACTION_PROMPT.replace("{texts}", format_signal_texts(signals))
