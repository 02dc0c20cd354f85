from huluhulu_ai.cache.style_cache import DEFAULT_STYLES, CacheEntry, StyleCache

__all__ = [
    "CacheEntry",
    "StyleCache",
    "DEFAULT_STYLES",
]
