"""
Candidate storage for MemorySeed

Candidates are handed to the review UI as a JSON file; conversations come
in as a JSON file written by the export parser.
"""

import json
import logging
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional

from memoryseed.constants import CONFIDENCE_LEVELS, MEMORY_CATEGORIES
from memoryseed.memory_types import MemoryCandidate, ParsedConversation

logger = logging.getLogger(__name__)

STORE_VERSION = "0.1.0"


def load_conversations(path) -> List[ParsedConversation]:
    """
    Load parsed conversations from JSON.

    Accepts either a bare list of conversations or an object with a
    "conversations" key.
    """
    with open(path, 'r') as f:
        data = json.load(f)

    if isinstance(data, dict):
        data = data.get('conversations', [])
    if not isinstance(data, list):
        raise ValueError(f"Expected a list of conversations in {path}")

    return [ParsedConversation.from_dict(item) for item in data if isinstance(item, dict)]


class CandidateStore:
    """
    Persists a candidate list as JSON for the review step
    """

    def __init__(self, store_path: str = ".memoryseed/candidates.json"):
        self.store_path = Path(store_path)

    def load(self) -> Dict:
        """Load the stored candidate file"""
        if not self.store_path.exists():
            return self.create_empty()

        try:
            with open(self.store_path, 'r') as f:
                return json.load(f)
        except json.JSONDecodeError:
            logger.warning("Corrupted candidate file %s, creating backup and starting fresh", self.store_path)
            self._backup_corrupted()
            return self.create_empty()

    def create_empty(self) -> Dict:
        """Create empty candidate structure"""
        now = datetime.now().isoformat()
        return {
            "created_at": now,
            "last_updated": now,
            "version": STORE_VERSION,
            "source": None,
            "candidates": []
        }

    def save(self, candidates: Iterable[MemoryCandidate], source: Optional[str] = None):
        """Replace the stored candidates"""
        data = self.load()
        data['last_updated'] = datetime.now().isoformat()
        data['source'] = source
        data['candidates'] = [c.to_dict() for c in candidates]

        self.store_path.parent.mkdir(parents=True, exist_ok=True)
        with open(self.store_path, 'w') as f:
            json.dump(data, f, indent=2)

    def get_candidates(self, category: Optional[str] = None) -> List[MemoryCandidate]:
        """Stored candidates, optionally limited to one category"""
        candidates = [MemoryCandidate.from_dict(c) for c in self.load().get('candidates', [])]
        if category:
            candidates = [c for c in candidates if c.category == category]
        return candidates

    def get_stats(self) -> Dict[str, Any]:
        """Counts per category and confidence tier"""
        candidates = self.get_candidates()

        stats = {
            "total_candidates": len(candidates),
            "categories": {},
        }

        for category in MEMORY_CATEGORIES:
            in_category = [c for c in candidates if c.category == category]
            stats['categories'][category] = {
                "count": len(in_category),
                "by_confidence": {
                    level: sum(1 for c in in_category if c.confidence == level)
                    for level in CONFIDENCE_LEVELS
                },
            }

        return stats

    def _backup_corrupted(self):
        """Backup corrupted candidate file"""
        if self.store_path.exists():
            backup_path = self.store_path.parent / f"candidates.corrupted.{datetime.now().strftime('%Y%m%d_%H%M%S')}.bak"
            self.store_path.rename(backup_path)
            logger.warning("Corrupted file backed up to: %s", backup_path)
