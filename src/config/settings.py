"""Global configuration and constants for launch gating and prompt scheduling."""

from __future__ import annotations

import os
from typing import Final

DEFAULT_USER_AGENT: Final = "LaunchGate/1.0 (+https://example.invalid/launchgate)"
SIGNAL_URL: Final = os.environ.get("LAUNCHGATE_SIGNAL_URL", "").strip()
SIGNAL_TIMEOUT_S: Final = float(os.environ.get("LAUNCHGATE_SIGNAL_TIMEOUT", "10"))
SIGNAL_RETRIES: Final = 1
DEFAULT_BACKOFF_FACTOR: Final = 0.5
DATA_DIR: Final = os.environ.get("LAUNCHGATE_DATA_DIR", "data")

# Persistence namespace; one per app sharing this package
DEFAULT_NAMESPACE: Final = "default"

# Prompt policy defaults, apps usually pass their own
DEFAULT_MIN_LAUNCHES: Final = 3
DEFAULT_MIN_INTERVAL_HOURS: Final = 24
