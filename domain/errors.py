from __future__ import annotations


class ConfigurationError(ValueError):
    """Raised when a diagram description or style layer is malformed."""


class TypesetError(RuntimeError):
    """Raised when the typesetting engine cannot produce a glyph."""

    def __init__(self, markup: str, content_format: str, reason: str) -> None:
        super().__init__(f"Cannot typeset {content_format} markup {markup!r}: {reason}")
        self.markup = markup
        self.content_format = content_format
        self.reason = reason


class AxisStateError(RuntimeError):
    """Raised when axis rendering steps run out of order."""


class StyleResolutionWarning(UserWarning):
    """Emitted when a block type is missing from the style table."""
