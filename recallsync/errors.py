"""recallsync error hierarchy.

All project exceptions inherit from RecallError, enabling:
- ``except RecallError`` at the CLI boundary
- Fine-grained catches deeper in the stack (``except SessionNotFoundError``)

Hierarchy:
    RecallError
    ├── ConfigError
    ├── SourceStoreError
    │   └── SessionNotFoundError
    ├── ScopeError
    └── ArtifactError
        └── ArtifactNotFoundError
"""

from __future__ import annotations


class RecallError(Exception):
    """Base class for all recallsync errors."""


class ConfigError(RecallError):
    """Invalid or unreadable configuration file."""


class SourceStoreError(RecallError):
    """The external session store is missing or unreadable."""


class SessionNotFoundError(SourceStoreError):
    """A specific session was requested but the store has no such row."""


class ScopeError(RecallError):
    """No project could be resolved for the requested diff scope."""


class ArtifactError(RecallError):
    """A persisted JSON artifact could not be decoded."""


class ArtifactNotFoundError(ArtifactError):
    """A required JSON artifact does not exist."""


__all__ = [
    "RecallError",
    "ConfigError",
    "SourceStoreError",
    "SessionNotFoundError",
    "ScopeError",
    "ArtifactError",
    "ArtifactNotFoundError",
]
