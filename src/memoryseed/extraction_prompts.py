"""
Extraction prompt for MemorySeed's LLM-assisted mode.

The model reads a batch of conversation transcripts and answers with a
JSON array of facts about the user.
"""

import json
from typing import Iterable

from memoryseed.constants import CONFIDENCE_LEVELS, MEMORY_CATEGORIES
from memoryseed.memory_types import ParsedConversation


# Output format the response parser validates against
OUTPUT_SCHEMA = [
    {
        "text": "A concise statement about the user (e.g. \"Prefers TypeScript over JavaScript\")",
        "category": " | ".join(MEMORY_CATEGORIES),
        "confidence": " | ".join(CONFIDENCE_LEVELS),
    }
]

EXTRACTION_INSTRUCTIONS = f"""Analyze these ChatGPT conversations and extract facts about the user that should be remembered. Focus on their preferences, technical profile, projects, identity, and recurring interests.

For each fact, output a JSON array of objects with these fields:
- "text": a concise statement about the user (e.g., "Prefers TypeScript over JavaScript")
- "category": one of {", ".join(f'"{c}"' for c in MEMORY_CATEGORIES)}
- "confidence": one of {", ".join(f'"{c}"' for c in CONFIDENCE_LEVELS)}

Only extract facts stated or strongly implied by the USER (not the assistant). Be concise. Deduplicate. Output only the JSON array, nothing else.

Schema:
{json.dumps(OUTPUT_SCHEMA, indent=2)}"""


def format_transcript(conversation: ParsedConversation) -> str:
    """Render one conversation as a labeled transcript."""
    lines = [f"[{m.role}]: {m.text}" for m in conversation.messages]
    return f'--- Conversation: "{conversation.title}" ---\n' + "\n".join(lines)


def build_extraction_prompt(conversations: Iterable[ParsedConversation]) -> str:
    """Build the full prompt for one batch of conversations."""
    transcripts = "\n\n".join(format_transcript(c) for c in conversations)
    return f"{EXTRACTION_INSTRUCTIONS}\n\n{transcripts}"
