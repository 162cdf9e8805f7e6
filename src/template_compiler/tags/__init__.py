"""Built-in tags and blocks."""

from __future__ import annotations

from .comment import Comment
from .comment import comment_block

__all__ = ["Comment", "comment_block"]
