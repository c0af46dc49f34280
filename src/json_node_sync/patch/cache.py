"""ParseTreeCache: LRU cache of scanned documents keyed by their text.

A field-set save scans the document once per key, and the tree store scans
the committed text again to rebuild nodes.  Many of those scans are of text
that was already scanned (unchanged documents, repeated saves of the same
value).  The cache serves them from memory.  LRU eviction occurs silently when
``max_size`` is exceeded.

Cached trees are shared between callers and must be treated as read-only.

Each ``ParseTreeCache`` instance maintains its own ``LRUCache``; there is no
class-level shared state.

Example::

    from json_node_sync.patch.cache import ParseTreeCache

    cache = ParseTreeCache(max_size=16)
    root = cache.get('{"a": 1}')        # scanned
    again = cache.get('{"a": 1}')       # served from memory
    assert root is again
"""

from __future__ import annotations

from cachetools import LRUCache

from json_node_sync.patch.scanner import ParseNode, parse_tree

__all__ = ["ParseTreeCache"]


class ParseTreeCache:
    """LRU-backed memo of ``parse_tree`` results.

    Only successful scans are stored.  A document that fails to scan raises
    ``DocumentSyntaxError`` on every lookup.

    Args:
        max_size: Maximum number of documents to hold.  Defaults to 64.
    """

    def __init__(self, max_size: int = 64) -> None:
        if max_size < 1:
            msg = f"max_size must be >= 1, got {max_size}"
            raise ValueError(msg)
        self._cache: LRUCache[str, ParseNode | None] = LRUCache(maxsize=max_size)
        self._hits = 0
        self._misses = 0

    # ------------------------------------------------------------------
    # Properties
    # ------------------------------------------------------------------

    @property
    def max_size(self) -> int:
        """The maximum number of documents this cache can hold."""
        return int(self._cache.maxsize)

    @property
    def curr_size(self) -> int:
        """The current number of documents stored in the cache."""
        return int(self._cache.currsize)

    @property
    def hits(self) -> int:
        return self._hits

    @property
    def misses(self) -> int:
        return self._misses

    # ------------------------------------------------------------------
    # Lookup
    # ------------------------------------------------------------------

    def get(self, text: str) -> ParseNode | None:
        """Return the parse tree of ``text``, scanning it on a miss.

        Raises:
            DocumentSyntaxError: ``text`` is not well-formed.
        """
        if text in self._cache:
            self._hits += 1
            return self._cache[text]
        self._misses += 1
        root = parse_tree(text)
        self._cache[text] = root
        return root

    def clear(self) -> None:
        """Drop every cached document and reset the counters."""
        self._cache.clear()
        self._hits = 0
        self._misses = 0
