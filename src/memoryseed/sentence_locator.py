"""
Sentence utilities shared by the pattern extractors.

Locates the sentence around a regex match and filters out sentences too
short or too interrogative to be a stated fact.
"""

import re

from memoryseed.constants import MIN_SENTENCE_WORDS

SENTENCE_TERMINATORS = frozenset(".!?\n")

# "Do I ...", "Should we ...", "Can you ..." open a question even without a "?"
INTERROGATIVE_OPENER = re.compile(
    r'^(?:do|does|did|am|is|are|was|were|can|could|should|would|will|shall|'
    r'have|has|may|might)\s+(?:i|you|we|my|our|it|they)\b',
    re.IGNORECASE,
)


def locate_sentence(text: str, match_index: int) -> str:
    """
    Return the trimmed sentence of ``text`` that contains ``match_index``.

    The sentence starts after the nearest terminator before the match and
    ends at (and includes) the nearest terminator from the match onward.
    Missing terminators fall back to the text boundaries.
    """
    if not text:
        return ""

    match_index = max(0, min(match_index, len(text)))

    start = 0
    for i in range(match_index - 1, -1, -1):
        if text[i] in SENTENCE_TERMINATORS:
            start = i + 1
            break

    end = len(text)
    for i in range(match_index, len(text)):
        if text[i] in SENTENCE_TERMINATORS:
            end = i + 1
            break

    return text[start:end].strip()


def word_count(sentence: str) -> int:
    return len(sentence.split())


def is_question(sentence: str) -> bool:
    """Check if a sentence asks something rather than states it."""
    sentence = sentence.strip()
    if sentence.endswith('?'):
        return True
    return bool(INTERROGATIVE_OPENER.match(sentence))


def is_noise_sentence(sentence: str, min_words: int = MIN_SENTENCE_WORDS) -> bool:
    """Empty, too short, or a question: not worth remembering."""
    if not sentence:
        return True
    if word_count(sentence) < min_words:
        return True
    return is_question(sentence)
