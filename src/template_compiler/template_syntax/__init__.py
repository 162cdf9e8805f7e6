"""
Parsing side of the compiler: token classification, expression parsing,
block matching and the reference lexer.
"""

from __future__ import annotations
