"""
Recurring theme detection for MemorySeed.

Surfaces topics that no single sentence states outright: bigrams and
trigrams that keep coming back across many conversations.
"""

import logging
import re
from typing import Dict, Iterable, List, Sequence, Tuple

from memoryseed.constants import (
    ID_PREFIXES,
    MULTIPLE_SOURCES,
    THEME_HIGH_CONFIDENCE_CONVERSATIONS,
    THEME_MIN_CONVERSATIONS,
)
from memoryseed.memory_types import MemoryCandidate, ParsedConversation

logger = logging.getLogger(__name__)

STOP_WORDS = frozenset({
    "the", "and", "for", "are", "but", "not", "you", "all", "can", "had",
    "her", "was", "one", "our", "out", "has", "have", "been", "some", "them",
    "than", "its", "over", "also", "that", "with", "this", "from", "they",
    "will", "would", "there", "their", "what", "about", "which", "when",
    "make", "like", "time", "just", "know", "take", "come", "could", "more",
    "into", "year", "your", "good", "give", "most", "only", "tell", "very",
    "even", "back", "here", "then", "does", "how", "each", "she", "him",
    "his", "get", "may", "said", "who", "use", "way", "many", "these",
    "after", "other", "well", "much", "before", "being", "because", "where",
    "between", "should", "same", "still", "such", "while", "every", "both",
    "need", "want", "help", "please", "thanks", "thank", "sure", "yes",
    "okay", "right", "think", "see", "new", "now", "let", "try", "thing",
    "something", "anything", "nothing", "using", "going", "doing", "don",
    "didn", "doesn", "isn", "wasn", "aren", "won", "wouldn", "couldn",
    "shouldn", "able", "really", "actually", "might", "look", "around",
})

NON_ALPHANUMERIC = re.compile(r'[^a-z0-9\s]')


def tokenize(text: str) -> List[str]:
    """Lowercase, strip punctuation, drop short tokens and stop words."""
    cleaned = NON_ALPHANUMERIC.sub(' ', text.lower())
    return [w for w in cleaned.split() if len(w) > 2 and w not in STOP_WORDS]


def _all_stop_words(words: Tuple[str, ...]) -> bool:
    return all(w in STOP_WORDS for w in words)


def extract_ngrams(words: Sequence[str]) -> List[str]:
    """Bigrams then trigrams, skipping n-grams made only of stop words."""
    ngrams = []
    for size in (2, 3):
        for i in range(len(words) - size + 1):
            gram = tuple(words[i:i + size])
            if not _all_stop_words(gram):
                ngrams.append(' '.join(gram))
    return ngrams


def conversation_tokens(conversation: ParsedConversation) -> List[str]:
    """Title tokens followed by the tokens of every user message."""
    words = tokenize(conversation.title)
    for message in conversation.user_messages:
        words.extend(tokenize(message.text))
    return words


def count_ngrams(conversations: Iterable[ParsedConversation]) -> Dict[str, int]:
    """Number of distinct conversations containing each n-gram."""
    counts: Dict[str, int] = {}
    for conversation in conversations:
        seen = dict.fromkeys(extract_ngrams(conversation_tokens(conversation)))
        for ngram in seen:
            counts[ngram] = counts.get(ngram, 0) + 1
    return counts


def extract_themes(
    conversations: Iterable[ParsedConversation],
    min_conversations: int = THEME_MIN_CONVERSATIONS,
    high_confidence_at: int = THEME_HIGH_CONFIDENCE_CONVERSATIONS,
) -> List[MemoryCandidate]:
    """
    Promote n-grams seen in enough conversations to theme candidates.

    Args:
        conversations: Parsed conversations to scan
        min_conversations: Distinct conversations an n-gram needs to be kept
        high_confidence_at: Conversation count from which confidence is high

    Returns:
        Candidates sorted by conversation count, most frequent first
    """
    themes = [
        (ngram, count)
        for ngram, count in count_ngrams(conversations).items()
        if count >= min_conversations
    ]
    themes.sort(key=lambda item: item[1], reverse=True)

    prefix = ID_PREFIXES["theme"]
    candidates = []
    for index, (ngram, count) in enumerate(themes):
        candidates.append(MemoryCandidate(
            id=f"{prefix}-{index}",
            text=f'Recurring interest: "{ngram}" (appeared in {count} conversations)',
            category="theme",
            confidence="high" if count >= high_confidence_at else "medium",
            source_title=MULTIPLE_SOURCES,
            source_timestamp=None,
        ))

    logger.debug("theme extractor produced %d candidates", len(candidates))
    return candidates
