"""
Extraction pipeline for MemorySeed.

Heuristic mode runs the five extractors over the same conversations and
concatenates their results. MemoryExtractor picks heuristic or API mode
from configuration and optionally deduplicates the outcome.
"""

import logging
import os
from typing import Any, List, Optional, Sequence

from memoryseed.api_extractor import ApiExtractor, ProgressCallback
from memoryseed.constants import (
    API_BATCH_SIZE,
    CLAUDE_DEFAULT_MODEL,
    CLAUDE_MAX_TOKENS,
    CLAUDE_TIMEOUT,
    DEDUP_SIMILARITY_THRESHOLD,
    EXTRACTION_BACKENDS,
    EXTRACTION_DEFAULT_BACKEND,
    TECH_MIN_CONVERSATIONS,
    THEME_HIGH_CONFIDENCE_CONVERSATIONS,
    THEME_MIN_CONVERSATIONS,
)
from memoryseed.deduplicator import dedup
from memoryseed.memory_types import MemoryCandidate, ParsedConversation
from memoryseed.pattern_extractors import extract_identity, extract_preferences, extract_projects
from memoryseed.technical_extractor import extract_technical
from memoryseed.theme_extractor import extract_themes

logger = logging.getLogger(__name__)


def extract_all_memories(
    conversations: Sequence[ParsedConversation],
    tech_min_conversations: int = TECH_MIN_CONVERSATIONS,
    theme_min_conversations: int = THEME_MIN_CONVERSATIONS,
    theme_high_confidence: int = THEME_HIGH_CONFIDENCE_CONVERSATIONS,
) -> List[MemoryCandidate]:
    """
    Run all five heuristic extractors and return the combined candidates.

    Order is fixed: preference, technical, project, identity, theme. No
    deduplication happens here.
    """
    conversations = list(conversations)
    candidates = [
        *extract_preferences(conversations),
        *extract_technical(conversations, min_conversations=tech_min_conversations),
        *extract_projects(conversations),
        *extract_identity(conversations),
        *extract_themes(
            conversations,
            min_conversations=theme_min_conversations,
            high_confidence_at=theme_high_confidence,
        ),
    ]
    logger.info("Heuristic extraction produced %d candidates from %d conversations",
                len(candidates), len(conversations))
    return candidates


class MemoryExtractor:
    """
    Extract memory candidates from parsed conversations.

    Backends (configurable via extraction.backend):
    - "auto": Claude API when an API key is available, heuristics otherwise (default)
    - "api": Claude API only; fails without a key
    - "heuristic": Pattern and frequency extractors only (no network)

    The two modes never mix within a run: an API failure is raised, not
    papered over with heuristic results.
    """

    BACKENDS = set(EXTRACTION_BACKENDS)

    def __init__(self, config=None, api_key: Optional[str] = None, transport=None):
        self.config = config or {}
        self.transport = transport
        self._api_key = api_key

        self.backend = self._get_config("extraction.backend", EXTRACTION_DEFAULT_BACKEND)
        if self.backend not in self.BACKENDS:
            logger.warning("Unknown extraction backend %r, using %r", self.backend, EXTRACTION_DEFAULT_BACKEND)
            self.backend = EXTRACTION_DEFAULT_BACKEND

    def _get_config(self, key_path: str, default: Any = None) -> Any:
        """Get config value with dot notation, from a dict or a ConfigManager."""
        if hasattr(self.config, "config"):
            return self.config.get(key_path, default)

        value: Any = self.config
        for key in key_path.split("."):
            if isinstance(value, dict) and key in value:
                value = value[key]
            else:
                return default
        return default if value is None else value

    @property
    def api_key(self) -> Optional[str]:
        """Explicit key, then extraction.api_key, then ANTHROPIC_API_KEY."""
        return (
            self._api_key
            or self._get_config("extraction.api_key")
            or os.environ.get("ANTHROPIC_API_KEY")
        )

    def resolve_backend(self) -> str:
        """The concrete mode for this run: "api" or "heuristic"."""
        if self.backend == "auto":
            return "api" if self.api_key else "heuristic"
        return self.backend

    def extract(
        self,
        conversations: Sequence[ParsedConversation],
        on_progress: Optional[ProgressCallback] = None,
        deduplicate: Optional[bool] = None,
    ) -> List[MemoryCandidate]:
        """
        Extract candidates with the configured backend.

        Args:
            conversations: Parsed conversations
            on_progress: Batch progress callback (API mode only)
            deduplicate: Override dedup.enabled for this call

        Returns:
            Candidates, deduplicated when enabled

        Raises:
            ValueError: backend "api" without an API key
            ApiError, NetworkError: from the API mode
        """
        backend = self.resolve_backend()

        if backend == "api":
            candidates = self._api_extraction(conversations, on_progress)
        else:
            candidates = extract_all_memories(
                conversations,
                tech_min_conversations=self._get_config(
                    "thresholds.tech_min_conversations", TECH_MIN_CONVERSATIONS),
                theme_min_conversations=self._get_config(
                    "thresholds.theme_min_conversations", THEME_MIN_CONVERSATIONS),
                theme_high_confidence=self._get_config(
                    "thresholds.theme_high_confidence", THEME_HIGH_CONFIDENCE_CONVERSATIONS),
            )

        if deduplicate is None:
            deduplicate = self._get_config("dedup.enabled", True)
        if deduplicate:
            threshold = self._get_config("dedup.similarity_threshold", DEDUP_SIMILARITY_THRESHOLD)
            candidates = dedup(candidates, threshold=threshold)

        return candidates

    def _api_extraction(
        self,
        conversations: Sequence[ParsedConversation],
        on_progress: Optional[ProgressCallback],
    ) -> List[MemoryCandidate]:
        api_key = self.api_key
        if not api_key:
            raise ValueError("API extraction requires an API key (extraction.api_key or ANTHROPIC_API_KEY)")

        extractor = ApiExtractor(
            api_key,
            transport=self.transport,
            model=self._get_config("extraction.model", CLAUDE_DEFAULT_MODEL),
            max_tokens=self._get_config("extraction.max_tokens", CLAUDE_MAX_TOKENS),
            batch_size=self._get_config("extraction.batch_size", API_BATCH_SIZE),
            timeout=self._get_config("extraction.timeout", CLAUDE_TIMEOUT),
        )
        return extractor.extract(conversations, on_progress)
