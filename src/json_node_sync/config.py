"""FormattingOptions: how inserted JSON text is laid out in the document.

FormattingOptions is a frozen (immutable) dataclass holding the layout
parameters used whenever the patcher has to serialize a value into the
document: indentation unit, line terminator and whether a trailing newline
is maintained.  Existing document text is never re-indented.
"""

from __future__ import annotations

from dataclasses import dataclass

__all__ = ["FormattingOptions"]

_VALID_EOLS = ("\n", "\r\n", "\r")


@dataclass(frozen=True, slots=True)
class FormattingOptions:
    """Immutable layout configuration for inserted text.

    Attributes:
        insert_spaces: Indent with spaces when True, with tabs when False.
        tab_size: Width of one indentation level in spaces (>= 1).  Ignored
            when ``insert_spaces`` is False.
        eol: Line terminator used for new lines.  One of ``"\\n"``,
            ``"\\r\\n"`` or ``"\\r"``.
        insert_final_newline: When True, a patched document always ends
            with ``eol``.  Default False (trailing text is left as found).
    """

    insert_spaces: bool = True
    tab_size: int = 2
    eol: str = "\n"
    insert_final_newline: bool = False

    def __post_init__(self) -> None:
        if isinstance(self.tab_size, bool) or not isinstance(self.tab_size, int):
            msg = f"tab_size must be an int, got {type(self.tab_size).__name__}"
            raise ValueError(msg)
        if self.tab_size < 1:
            msg = f"tab_size must be >= 1, got {self.tab_size}"
            raise ValueError(msg)
        if self.eol not in _VALID_EOLS:
            msg = f"eol must be one of {_VALID_EOLS!r}, got {self.eol!r}"
            raise ValueError(msg)

    @property
    def indent_unit(self) -> str:
        """One level of indentation as text."""
        return " " * self.tab_size if self.insert_spaces else "\t"
