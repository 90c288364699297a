"""
Fuzzy deduplication of memory candidates.

Near-duplicates are detected with a longest-common-subsequence ratio and
grouped with union-find; each group keeps its most confident member.

Pairwise comparison is O(n^2) in the number of candidates; each pair is a
bit-parallel LCS from rapidfuzz. That is fine for the tens to low hundreds
of candidates a run produces; very large candidate lists are not a
supported workload.
"""

import logging
from typing import Dict, List, Sequence

from rapidfuzz.distance import LCSseq

from memoryseed.constants import CONFIDENCE_RANK, DEDUP_SIMILARITY_THRESHOLD
from memoryseed.memory_types import MemoryCandidate

logger = logging.getLogger(__name__)


def lcs_length(a: str, b: str) -> int:
    """Length of the longest common subsequence."""
    return LCSseq.similarity(a, b)


def lcs_similarity(a: str, b: str) -> float:
    """2*LCS / (len(a)+len(b)); two empty strings are identical."""
    if not a and not b:
        return 1.0
    if not a or not b:
        return 0.0
    return 2 * lcs_length(a, b) / (len(a) + len(b))


def normalize(text: str) -> str:
    return text.lower().strip()


class _DisjointSet:
    """Union-find whose roots are always the smallest index in the set."""

    def __init__(self, size: int):
        self.parent = list(range(size))

    def find(self, i: int) -> int:
        while self.parent[i] != i:
            self.parent[i] = self.parent[self.parent[i]]
            i = self.parent[i]
        return i

    def union(self, i: int, j: int):
        root_i, root_j = self.find(i), self.find(j)
        if root_i == root_j:
            return
        if root_i < root_j:
            self.parent[root_j] = root_i
        else:
            self.parent[root_i] = root_j


def dedup(
    candidates: Sequence[MemoryCandidate],
    threshold: float = DEDUP_SIMILARITY_THRESHOLD,
) -> List[MemoryCandidate]:
    """
    Collapse near-duplicate candidates.

    Clustering is transitive: if A~B and B~C, all three end up together even
    when A and C alone fall below the threshold. Within a cluster the highest
    confidence wins, ties go to the earliest candidate. Clusters are emitted
    in the order of their first member. Survivors are the input objects.

    Args:
        candidates: Candidates in extraction order
        threshold: Minimum similarity for two candidates to be merged

    Returns:
        One candidate per cluster
    """
    n = len(candidates)
    if n == 0:
        return []

    normalized = [normalize(c.text) for c in candidates]
    clusters = _DisjointSet(n)

    for i in range(n):
        for j in range(i + 1, n):
            if clusters.find(i) == clusters.find(j):
                continue
            if lcs_similarity(normalized[i], normalized[j]) >= threshold:
                clusters.union(i, j)

    best: Dict[int, MemoryCandidate] = {}
    for i, candidate in enumerate(candidates):
        root = clusters.find(i)
        current = best.get(root)
        if current is None or CONFIDENCE_RANK[candidate.confidence] > CONFIDENCE_RANK[current.confidence]:
            best[root] = candidate

    survivors = [best[root] for root in sorted(best)]
    logger.debug("dedup kept %d of %d candidates", len(survivors), n)
    return survivors
