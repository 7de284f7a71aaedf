from __future__ import annotations


class PivotError(Exception):
    """Base class for all domain/service errors."""


# -------------------------
# Generic / infrastructure
# -------------------------

class ConfigError(PivotError):
    """Environment configuration is missing or malformed."""


class ProviderError(PivotError):
    """An external lexical provider failed (network, HTTP status or payload)."""


# -------------------------
# Game / session errors
# -------------------------

class GameNotActive(PivotError):
    """No puzzle is loaded for the session."""


class SubmissionInProgress(PivotError):
    """Another submission for the same session has not finished yet."""
