"""
Pytest configuration and fixtures for MemorySeed tests.
"""

import sys
from pathlib import Path

import pytest

sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from memoryseed.memory_types import MemoryCandidate, ParsedConversation, ParsedMessage


def make_conversation(user_messages, conv_id="conv-1", title="Test Chat", created_at=1700000000):
    """Conversation whose messages are all user-authored."""
    return ParsedConversation(
        id=conv_id,
        title=title,
        model="gpt-4",
        created_at=created_at,
        gizmo_id=None,
        messages=tuple(
            ParsedMessage(role="user", text=text, timestamp=created_at + 10)
            for text in user_messages
        ),
    )


def make_conversation_with_roles(messages, conv_id="conv-1", title="Test Chat", created_at=1700000000):
    """Conversation from (role, text) pairs."""
    return ParsedConversation(
        id=conv_id,
        title=title,
        model="gpt-4",
        created_at=created_at,
        gizmo_id=None,
        messages=tuple(
            ParsedMessage(role=role, text=text, timestamp=created_at + 10)
            for role, text in messages
        ),
    )


def make_candidate(text, confidence="medium", candidate_id="c", category="preference"):
    return MemoryCandidate(
        id=candidate_id,
        text=text,
        category=category,
        confidence=confidence,
        source_title="Test Chat",
        source_timestamp=1700000000,
    )


@pytest.fixture
def isolated_cwd(tmp_path, monkeypatch):
    """Run with an empty working directory so no real config is picked up."""
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("HOME", str(tmp_path))
    monkeypatch.delenv("ANTHROPIC_API_KEY", raising=False)
    return tmp_path
