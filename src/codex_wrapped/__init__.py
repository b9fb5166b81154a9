"""Codex CLI year in review, built from local session logs."""

__version__ = "1.0.8"
