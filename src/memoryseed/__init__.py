"""
MemorySeed: reviewable long-term memory candidates from exported chat history.
"""

__version__ = "0.1.0"
