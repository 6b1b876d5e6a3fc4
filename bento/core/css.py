"""Self-contained CSS minifier.

A fixed sequence of text rewrites: strip comments, collapse whitespace,
drop whitespace around ``{ } : ; ,``, squeeze repeated semicolons and
drop the last semicolon of each block. The output is a fixed point of
the function, so ``minify_css(minify_css(x)) == minify_css(x)``.

Strings are not tokenised; whitespace and comment markers inside quoted
values are rewritten like any other text.
"""

from __future__ import annotations

import re

_COMMENT_RE = re.compile(r"/\*.*?\*/", re.DOTALL)
_WHITESPACE_RE = re.compile(r"\s+")
_SEPARATOR_RE = re.compile(r"\s*([{}:;,])\s*")
_REPEATED_SEMICOLON_RE = re.compile(r";{2,}")
_TRAILING_SEMICOLON_RE = re.compile(r";}")


def strip_comments(css: str) -> str:
    # Repeat until stable: removing one comment can expose another ("//**/*x*/").
    while True:
        stripped = _COMMENT_RE.sub("", css)
        if stripped == css:
            return stripped
        css = stripped


def minify_css(css: str) -> str:
    """Return the minified form of *css*."""
    css = strip_comments(css)
    css = _WHITESPACE_RE.sub(" ", css)
    css = _SEPARATOR_RE.sub(r"\1", css)
    css = _REPEATED_SEMICOLON_RE.sub(";", css)
    css = _TRAILING_SEMICOLON_RE.sub("}", css)
    return css.strip()
