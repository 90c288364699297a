"""
Central constants for MemorySeed.

Update model versions, thresholds and static vocabularies here.
"""

# Claude model defaults
CLAUDE_DEFAULT_MODEL = "claude-haiku-4-5-20251001"
CLAUDE_MAX_TOKENS = 4096
CLAUDE_TIMEOUT = 60

# Memory categories and confidence tiers
MEMORY_CATEGORIES = ("preference", "technical", "project", "identity", "theme")
CONFIDENCE_LEVELS = ("high", "medium", "low")
CONFIDENCE_RANK = {"low": 0, "medium": 1, "high": 2}

# Candidates always start pending; approval belongs to the review UI
STATUS_PENDING = "pending"

# Frequency candidates summarize the whole corpus
MULTIPLE_SOURCES = "multiple"

# Extraction backends
EXTRACTION_BACKENDS = ("auto", "heuristic", "api")
EXTRACTION_DEFAULT_BACKEND = "auto"

# API batching
API_BATCH_SIZE = 5

# Tunable thresholds (values kept for compatibility with existing exports)
TECH_MIN_CONVERSATIONS = 3
THEME_MIN_CONVERSATIONS = 3
THEME_HIGH_CONFIDENCE_CONVERSATIONS = 5
DEDUP_SIMILARITY_THRESHOLD = 0.8

# Sentence noise filter
MIN_SENTENCE_WORDS = 5

# ID prefixes per extractor
ID_PREFIXES = {
    "preference": "pref",
    "technical": "tech",
    "project": "proj",
    "identity": "id",
    "theme": "theme",
    "api": "api",
}
