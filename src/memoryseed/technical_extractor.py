"""
Technical profile extraction for MemorySeed.

Two independent passes over the same conversations:
1. Explicit stack descriptions ("I use", "my stack is", ...)
2. Technology keyword frequency, counted once per conversation
"""

import itertools
import logging
import re
from typing import Dict, List, Sequence

from memoryseed.constants import ID_PREFIXES, MULTIPLE_SOURCES, TECH_MIN_CONVERSATIONS
from memoryseed.memory_types import MemoryCandidate, ParsedConversation
from memoryseed.pattern_extractors import PatternExtractor

logger = logging.getLogger(__name__)

STACK_RULES = [
    (r"\bmy stack is\b", "high"),
    (r"\bI use\b", "high"),
    (r"\bI['’]m using\b", "high"),
    (r"\bwe use\b", "high"),
    (r"\bI build with\b", "high"),
    (r"\bI develop with\b", "high"),
    (r"\bI work with\b", "high"),
]

TECH_KEYWORDS = (
    # Languages
    "JavaScript", "TypeScript", "Python", "Java", "Kotlin", "Swift",
    "Rust", "Go", "Ruby", "PHP", "C++", "C#", "Scala", "Elixir",
    "Haskell", "Lua", "Perl", "R", "Dart", "Zig",
    # Frontend frameworks/libraries
    "React", "Vue", "Angular", "Svelte", "Next.js", "Nuxt",
    "Tailwind", "Bootstrap",
    # Backend frameworks
    "Node.js", "Express", "Django", "Flask", "FastAPI", "Spring",
    "Rails", "Laravel", "NestJS",
    # Databases
    "PostgreSQL", "MySQL", "MongoDB", "Redis", "SQLite", "DynamoDB",
    "Supabase", "Firebase",
    # DevOps / Cloud
    "Docker", "Kubernetes", "AWS", "Azure", "GCP", "Terraform",
    "Ansible", "Jenkins", "GitHub Actions", "Vercel", "Netlify",
    # Other tools
    "GraphQL", "REST", "gRPC", "Webpack", "Vite", "ESLint",
    "Prettier", "Jest", "Vitest", "Cypress",
)


def _keyword_regex(keyword: str) -> "re.Pattern[str]":
    # Lookarounds instead of \b so "C++" and "C#" keep their symbols and
    # "Java" does not fire inside "JavaScript"
    return re.compile(
        r'(?<![A-Za-z0-9_])' + re.escape(keyword) + r'(?![A-Za-z0-9_])',
        re.IGNORECASE,
    )


TECH_REGEXES = tuple((keyword, _keyword_regex(keyword)) for keyword in TECH_KEYWORDS)

STACK_EXTRACTOR = PatternExtractor("technical", STACK_RULES)


def count_tech_mentions(conversations: Sequence[ParsedConversation]) -> Dict[str, int]:
    """
    Count, per keyword, the number of distinct conversations mentioning it.

    Only user messages count. Insertion order follows first mention.
    """
    frequency: Dict[str, int] = {}

    for conversation in conversations:
        mentioned: Dict[str, None] = {}
        for message in conversation.user_messages:
            for keyword, regex in TECH_REGEXES:
                if keyword not in mentioned and regex.search(message.text):
                    mentioned[keyword] = None

        for keyword in mentioned:
            frequency[keyword] = frequency.get(keyword, 0) + 1

    return frequency


def extract_technical(
    conversations: Sequence[ParsedConversation],
    min_conversations: int = TECH_MIN_CONVERSATIONS,
) -> List[MemoryCandidate]:
    """
    Extract technical profile candidates.

    Args:
        conversations: Parsed conversations to scan
        min_conversations: Distinct conversations a keyword needs to be promoted

    Returns:
        Stack-description candidates followed by frequency candidates
    """
    counter = itertools.count()
    candidates = STACK_EXTRACTOR.extract(conversations, counter=counter)

    prefix = ID_PREFIXES["technical"]
    for keyword, count in count_tech_mentions(conversations).items():
        if count < min_conversations:
            continue
        candidates.append(MemoryCandidate(
            id=f"{prefix}-{next(counter)}",
            text=f"Frequently uses {keyword} (mentioned in {count} conversations)",
            category="technical",
            confidence="high",
            source_title=MULTIPLE_SOURCES,
            source_timestamp=None,
        ))

    logger.debug("technical extractor produced %d candidates", len(candidates))
    return candidates
