"""Bento CLI — Typer-based command-line interface.

Provides the ``bento`` command with ``build``, ``watch`` and ``init``
subcommands. All output uses Rich for formatted terminal display.
"""
