"""
Pattern-based memory extraction for MemorySeed.

Each extractor owns an ordered rule list of (trigger phrase, confidence).
The first rule that matches a user message wins; the enclosing sentence
becomes the candidate text.
"""

import itertools
import logging
import re
from typing import Iterable, Iterator, List, Optional, Sequence, Tuple

from memoryseed.constants import ID_PREFIXES, MIN_SENTENCE_WORDS
from memoryseed.memory_types import MemoryCandidate, ParsedConversation
from memoryseed.sentence_locator import is_noise_sentence, locate_sentence

logger = logging.getLogger(__name__)

# ==================== Rule Tables ====================

# Imperative/absolute phrasing first: it outranks hedged phrasing
PREFERENCE_RULES = [
    (r"\bI prefer\b", "high"),
    (r"\bI always\b", "high"),
    (r"\bplease always\b", "high"),
    (r"\bdon['’]?t ever\b", "high"),
    (r"\bnever use\b", "high"),
    (r"\bmy style is\b", "high"),
    (r"\bI want you to\b", "high"),
    (r"\bI like\b", "medium"),
    (r"\bI tend to\b", "medium"),
    (r"\bI usually\b", "medium"),
]

PROJECT_RULES = [
    (r"\bI['’]m building\b", "high"),
    (r"\bI['’]m working on\b", "high"),
    (r"\bmy project\b", "high"),
    (r"\bthe goal is\b", "high"),
    (r"\bmy company\b", "high"),
    (r"\bmy team\b", "high"),
    (r"\bwe['’]re building\b", "high"),
    (r"\bour product\b", "high"),
]

IDENTITY_RULES = [
    (r"\bI['’]m a\b", "high"),
    (r"\bmy role is\b", "high"),
    (r"\bI work at\b", "high"),
    (r"\bI work as\b", "high"),
    (r"\bmy background is\b", "high"),
    (r"\bmy experience is\b", "high"),
    (r"\bI have \d+ years\b", "high"),
    (r"\bI['’]ve been a\b", "high"),
]


class PatternExtractor:
    """
    Ordered-rule extractor for one memory category.

    At most one candidate per message: once a rule matches, the message is
    done, even if the located sentence is then rejected as noise.
    """

    def __init__(
        self,
        category: str,
        rules: Sequence[Tuple[str, str]],
        id_prefix: Optional[str] = None,
        min_words: int = MIN_SENTENCE_WORDS,
    ):
        self.category = category
        self.id_prefix = id_prefix or ID_PREFIXES[category]
        self.rules = tuple(
            (re.compile(pattern, re.IGNORECASE), confidence)
            for pattern, confidence in rules
        )
        self.min_words = min_words

    def match(self, text: str) -> Optional[Tuple[str, str]]:
        """Return (sentence, confidence) for the first matching rule, or None."""
        for regex, confidence in self.rules:
            found = regex.search(text)
            if found is None:
                continue
            sentence = locate_sentence(text, found.start())
            if is_noise_sentence(sentence, self.min_words):
                return None
            return sentence, confidence
        return None

    def extract(
        self,
        conversations: Iterable[ParsedConversation],
        counter: Optional[Iterator[int]] = None,
    ) -> List[MemoryCandidate]:
        """
        Scan every user message of every conversation.

        Args:
            conversations: Parsed conversations to scan
            counter: ID sequence to draw from; a fresh one per call by default

        Returns:
            Candidates in conversation/message order
        """
        if counter is None:
            counter = itertools.count()

        candidates = []
        for conversation in conversations:
            for message in conversation.user_messages:
                matched = self.match(message.text)
                if matched is None:
                    continue
                sentence, confidence = matched
                candidates.append(MemoryCandidate(
                    id=f"{self.id_prefix}-{next(counter)}",
                    text=sentence,
                    category=self.category,
                    confidence=confidence,
                    source_title=conversation.title,
                    source_timestamp=conversation.created_at,
                ))

        logger.debug("%s extractor produced %d candidates", self.category, len(candidates))
        return candidates


PREFERENCE_EXTRACTOR = PatternExtractor("preference", PREFERENCE_RULES)
PROJECT_EXTRACTOR = PatternExtractor("project", PROJECT_RULES)
IDENTITY_EXTRACTOR = PatternExtractor("identity", IDENTITY_RULES)


def extract_preferences(conversations: Iterable[ParsedConversation]) -> List[MemoryCandidate]:
    return PREFERENCE_EXTRACTOR.extract(conversations)


def extract_projects(conversations: Iterable[ParsedConversation]) -> List[MemoryCandidate]:
    return PROJECT_EXTRACTOR.extract(conversations)


def extract_identity(conversations: Iterable[ParsedConversation]) -> List[MemoryCandidate]:
    return IDENTITY_EXTRACTOR.extract(conversations)
