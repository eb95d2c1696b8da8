"""modules/memory: learned-preference store and response cache."""

from modules.memory.long_term_memory import LongTermMemory
from modules.memory.response_cache import ResponseCache, build_cache

__all__ = [
    "LongTermMemory",
    "ResponseCache",
    "build_cache",
]
