"""Rows subpackage: conversion between a node's rows and editable JSON text.

Re-exports the public API for the rows module:
- project / render_preview: rows -> plain JSON text (read-only form)
- editable_text: rows -> editor seed text
- render_path_label: path -> ``$["a"][0]`` style label
- parse_edit: edited text -> ParsedEdit (value + inferred rows)
- infer_row_type / rows_from_value: the shared type inference rules
"""

from json_node_sync.rows.parser import (
    ParsedEdit,
    infer_row_type,
    parse_edit,
    rows_from_value,
)
from json_node_sync.rows.projector import (
    ROOT_LABEL,
    editable_text,
    project,
    render_path_label,
    render_preview,
)

__all__ = [
    "ROOT_LABEL",
    "ParsedEdit",
    "editable_text",
    "infer_row_type",
    "parse_edit",
    "project",
    "render_path_label",
    "render_preview",
    "rows_from_value",
]
