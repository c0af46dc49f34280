"""Integrations subpackage for json-node-sync.

Contains integration adapters for external frameworks:
- pytest plugin (auto-discovered via pytest11 entry point), providing the
  ``assert_value_at_path``, ``assert_no_value_at_path`` and
  ``node_sync_workspace`` fixtures
"""

from __future__ import annotations

__all__: list[str] = []
