"""StructuredTextPatcher: path-addressed, formatting-preserving document edits.

Operates on raw document text rather than on decoded data, so every region of
the document that is not edited keeps its original bytes, comments included.

The patcher is path-agnostic: it applies whatever edit it is given.  Keeping
edits restricted to a node's primitive fields is the caller's responsibility.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping, Sequence
from typing import Any

from json_node_sync.config import FormattingOptions
from json_node_sync.patch.cache import ParseTreeCache
from json_node_sync.patch.edits import DELETE, apply_edits, compute_edits

__all__ = ["StructuredTextPatcher"]

logger = logging.getLogger(__name__)


class StructuredTextPatcher:
    """Set and delete values in JSON text at a path.

    Every operation returns new text; the input text is never modified, so a
    failure part-way through a compound operation leaves nothing half-applied.

    Example::

        patcher = StructuredTextPatcher()
        patcher.set_at_path('{"a": 1}', ["a"], 2)         # '{"a": 2}'
        patcher.delete_at_path('{"a": 1, "b": 2}', ["b"])  # '{"a": 1}'
    """

    def __init__(
        self,
        options: FormattingOptions | None = None,
        cache: ParseTreeCache | None = None,
    ) -> None:
        """Initialise the patcher.

        Args:
            options: Layout of inserted text.  Defaults to
                ``FormattingOptions()`` (two spaces, ``"\\n"``).
            cache:   Parse-tree cache shared across calls.  A private
                ``ParseTreeCache()`` is created when None.
        """
        self._options = options if options is not None else FormattingOptions()
        self._cache = cache if cache is not None else ParseTreeCache()

    @property
    def options(self) -> FormattingOptions:
        return self._options

    @property
    def cache(self) -> ParseTreeCache:
        return self._cache

    # ------------------------------------------------------------------
    # Primitive operations
    # ------------------------------------------------------------------

    def set_at_path(self, text: str, path: Sequence[str | int], value: Any) -> str:
        """Return ``text`` with the value at ``path`` set to ``value``.

        A missing object key is inserted; an array index equal to the array
        length appends.

        Raises:
            PatchResolutionError: ``path`` does not resolve.
            DocumentSyntaxError: ``text`` is not well-formed.
        """
        return self._apply(text, path, value)

    def delete_at_path(self, text: str, path: Sequence[str | int]) -> str:
        """Return ``text`` without the member at ``path``.

        Deleting an object key that does not exist returns ``text`` unchanged.

        Raises:
            PatchResolutionError: ``path`` is the root, or does not resolve.
            DocumentSyntaxError: ``text`` is not well-formed.
        """
        return self._apply(text, path, DELETE)

    # ------------------------------------------------------------------
    # Node-level operations
    # ------------------------------------------------------------------

    def apply_at_path(
        self, text: str, path: Sequence[str | int], new_value: Any
    ) -> str:
        """Replace the whole value located at ``path`` with ``new_value``."""
        return self.set_at_path(text, path, new_value)

    def apply_field_set(
        self,
        text: str,
        path: Sequence[str | int],
        editable_keys: Iterable[str],
        field_map: Mapping[str, Any],
    ) -> str:
        """Make the object at ``path`` agree with ``field_map`` on a key set.

        The key set is the union of ``editable_keys`` and the keys of
        ``field_map``, in that order, without duplicates.  Keys present in
        ``field_map`` are set at ``path + [key]``; the others are deleted.
        Each edit is computed against the text produced by the previous one.

        Args:
            text:          Current document text.
            path:          Location of the object being edited.
            editable_keys: Keys the node currently exposes for editing.
            field_map:     The user's edited object.

        Returns:
            The fully patched text.  Nothing is returned on failure, so callers
            never observe a partial result.

        Raises:
            PatchResolutionError: ``path`` (or a member below it) does not
                resolve.
            DocumentSyntaxError: ``text`` is not well-formed.
        """
        base = tuple(path)
        keys = list(dict.fromkeys([*editable_keys, *field_map.keys()]))
        current = text
        for key in keys:
            if key in field_map:
                logger.debug("set %r at %r", key, base)
                current = self.set_at_path(current, (*base, key), field_map[key])
            else:
                logger.debug("delete %r at %r", key, base)
                current = self.delete_at_path(current, (*base, key))
        return self._finalize(current)

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _apply(self, text: str, path: Sequence[str | int], value: Any) -> str:
        root = self._cache.get(text)
        edits = compute_edits(text, path, value, self._options, root=root)
        if not edits:
            return text
        return self._finalize(apply_edits(text, edits))

    def _finalize(self, text: str) -> str:
        eol = self._options.eol
        if self._options.insert_final_newline and text and not text.endswith(eol):
            return text + eol
        return text
