# src/dealmatch/domain/errors.py
from __future__ import annotations


class EngineError(Exception):
    """Base class for the few conditions the engine refuses to degrade on."""


class InvalidInput(EngineError, ValueError):
    """A record is missing something the requested operation cannot do without."""


class MissingCollaborator(EngineError):
    """A required lookup collection (e.g. the buyer population) was not supplied."""
