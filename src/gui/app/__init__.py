"""Application layer: bootstrap of the launch-gating context."""

from .bootstrap import (  # noqa: F401
    AppContext,
    LoggingEngagementPrompt,
    LoggingRemoteSurface,
    create_app,
    default_signal_source,
)

__all__ = [
    "AppContext",
    "create_app",
    "default_signal_source",
    "LoggingEngagementPrompt",
    "LoggingRemoteSurface",
]
