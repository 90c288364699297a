"""
Claude-powered memory extraction for MemorySeed.

Sends conversations to the Anthropic Messages API in fixed-size batches and
turns the JSON the model answers with into memory candidates. This mode
replaces the heuristic pipeline for a run; it never falls back to it.
"""

import itertools
import json
import logging
import re
from typing import Any, Callable, Dict, Iterator, List, Optional, Sequence

import anthropic

from memoryseed.constants import (
    API_BATCH_SIZE,
    CLAUDE_DEFAULT_MODEL,
    CLAUDE_MAX_TOKENS,
    CLAUDE_TIMEOUT,
    CONFIDENCE_LEVELS,
    ID_PREFIXES,
    MEMORY_CATEGORIES,
)
from memoryseed.extraction_prompts import build_extraction_prompt
from memoryseed.memory_types import MemoryCandidate, ParsedConversation

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[int, int], None]

CODE_FENCE = re.compile(r'```(?:json)?\s*\n?([\s\S]*?)\n?```')


class ApiError(Exception):
    """The API answered with a non-success status."""

    def __init__(self, status: int, body: str):
        self.status = status
        self.body = body
        super().__init__(f"Claude API error ({status}): {body}")


class NetworkError(Exception):
    """The request never got an HTTP answer."""


class AnthropicTransport:
    """
    Sends Messages API requests through the official SDK.

    SDK retries are disabled: retry policy belongs to the caller.
    """

    def __init__(self, api_key: str, timeout: float = CLAUDE_TIMEOUT):
        self.client = anthropic.Anthropic(api_key=api_key, timeout=timeout, max_retries=0)

    def send(self, request: Dict[str, Any]) -> Dict[str, Any]:
        try:
            response = self.client.messages.create(**request)
        except anthropic.APIStatusError as e:
            raise ApiError(e.status_code, e.response.text) from e
        except anthropic.APIConnectionError as e:
            raise NetworkError(str(e)) from e
        return response.model_dump()


def split_batches(
    conversations: Sequence[ParsedConversation],
    batch_size: int = API_BATCH_SIZE,
) -> List[Sequence[ParsedConversation]]:
    """Fixed-size batches; the last one may be smaller."""
    if batch_size < 1:
        raise ValueError(f"batch_size must be positive, got {batch_size}")
    return [
        conversations[i:i + batch_size]
        for i in range(0, len(conversations), batch_size)
    ]


def batch_attribution(batch: Sequence[ParsedConversation], batch_number: int):
    """Source title and timestamp for the candidates of one batch."""
    if len(batch) == 1:
        return batch[0].title, batch[0].created_at
    return f"batch {batch_number} ({len(batch)} conversations)", batch[0].created_at


def response_text(body: Dict[str, Any]) -> str:
    """Text of the first content block, or empty if it is not a text block."""
    content = body.get("content") or []
    if not content or not isinstance(content[0], dict):
        return ""
    if content[0].get("type") != "text":
        return ""
    return content[0].get("text") or ""


def _strip_code_fence(text: str) -> str:
    cleaned = text.strip()
    fenced = CODE_FENCE.search(cleaned)
    if fenced:
        cleaned = fenced.group(1).strip()
    return cleaned


def _is_valid_entry(entry: Any) -> bool:
    return (
        isinstance(entry, dict)
        and isinstance(entry.get("text"), str)
        and bool(entry["text"].strip())
        and entry.get("category") in MEMORY_CATEGORIES
        and entry.get("confidence") in CONFIDENCE_LEVELS
    )


def parse_api_response(
    raw_text: str,
    source_title: str,
    source_timestamp: Optional[int],
    id_counter: Optional[Iterator[int]] = None,
) -> List[MemoryCandidate]:
    """
    Parse the model's JSON answer into candidates.

    Malformed output means "no facts found": invalid JSON or a non-array
    yields an empty list, and invalid elements are dropped one by one.

    Args:
        raw_text: Model output, optionally wrapped in a markdown code fence
        source_title: Title recorded on every candidate
        source_timestamp: Timestamp recorded on every candidate
        id_counter: ID sequence shared across the batches of one run

    Returns:
        List of pending candidates
    """
    if id_counter is None:
        id_counter = itertools.count()

    try:
        parsed = json.loads(_strip_code_fence(raw_text or ""))
    except json.JSONDecodeError as e:
        logger.debug("Unparseable API response for %s: %s", source_title, e)
        return []

    if not isinstance(parsed, list):
        logger.debug("API response for %s is not a JSON array", source_title)
        return []

    prefix = ID_PREFIXES["api"]
    candidates = []
    for entry in parsed:
        if not _is_valid_entry(entry):
            logger.debug("Dropping invalid API entry: %r", entry)
            continue
        candidates.append(MemoryCandidate(
            id=f"{prefix}-{next(id_counter)}",
            text=entry["text"].strip(),
            category=entry["category"],
            confidence=entry["confidence"],
            source_title=source_title,
            source_timestamp=source_timestamp,
        ))

    return candidates


class ApiExtractor:
    """
    Extract memories using Claude.

    Batches run strictly one after another. Any failed request aborts the
    whole run: the caller gets every batch's candidates or an exception,
    never a partial list.
    """

    def __init__(
        self,
        api_key: str,
        transport=None,
        model: str = CLAUDE_DEFAULT_MODEL,
        max_tokens: int = CLAUDE_MAX_TOKENS,
        batch_size: int = API_BATCH_SIZE,
        timeout: float = CLAUDE_TIMEOUT,
    ):
        self.api_key = api_key
        self.model = model
        self.max_tokens = max_tokens
        self.batch_size = batch_size
        self.timeout = timeout
        self._transport = transport

    @property
    def transport(self):
        """Get the transport, creating the SDK client if needed."""
        if self._transport is None:
            self._transport = AnthropicTransport(self.api_key, timeout=self.timeout)
        return self._transport

    def build_request(self, batch: Sequence[ParsedConversation]) -> Dict[str, Any]:
        return {
            "model": self.model,
            "max_tokens": self.max_tokens,
            "messages": [
                {"role": "user", "content": build_extraction_prompt(batch)}
            ],
        }

    def extract(
        self,
        conversations: Sequence[ParsedConversation],
        on_progress: Optional[ProgressCallback] = None,
    ) -> List[MemoryCandidate]:
        """
        Extract memories from all conversations.

        Args:
            conversations: Parsed conversations
            on_progress: Called with (batch_number, total_batches) before each request

        Returns:
            Candidates of all batches, in batch order

        Raises:
            ApiError: The API answered with a non-success status
            NetworkError: The transport failed
        """
        if not conversations:
            return []

        batches = split_batches(list(conversations), self.batch_size)
        id_counter = itertools.count()
        collected: List[MemoryCandidate] = []

        for index, batch in enumerate(batches):
            batch_number = index + 1
            if on_progress is not None:
                on_progress(batch_number, len(batches))

            logger.info("Sending batch %d/%d (%d conversations)", batch_number, len(batches), len(batch))
            body = self.transport.send(self.build_request(batch))

            title, timestamp = batch_attribution(batch, batch_number)
            collected.extend(parse_api_response(response_text(body), title, timestamp, id_counter))

        logger.info("API extraction produced %d candidates", len(collected))
        return collected


def extract_with_api(
    conversations: Sequence[ParsedConversation],
    api_key: str,
    on_progress: Optional[ProgressCallback] = None,
    transport=None,
    model: str = CLAUDE_DEFAULT_MODEL,
    max_tokens: int = CLAUDE_MAX_TOKENS,
    batch_size: int = API_BATCH_SIZE,
) -> List[MemoryCandidate]:
    """Convenience wrapper around ApiExtractor."""
    extractor = ApiExtractor(
        api_key,
        transport=transport,
        model=model,
        max_tokens=max_tokens,
        batch_size=batch_size,
    )
    return extractor.extract(conversations, on_progress)
