"""
CONSTANTS
---------
Single source of truth for behavior-defining values in the counter service.

Rules:
- If changing a value changes runtime behavior, it belongs here.
- No magic numbers elsewhere in the codebase.
- Other modules MUST import from this file.
"""

from __future__ import annotations

from typing import Final

# =============================================================================
# Counter
# =============================================================================

COUNTER_INITIAL_VALUE_DEFAULT: Final[int] = 0
COUNTER_STEP: Final[int] = 1

# Sequence number of the first applied mutation; 0 means "nothing applied yet"
MUTATION_SEQ_START: Final[int] = 1

# =============================================================================
# Dispatch
# =============================================================================

# Task ids are assigned in submission order for tracing only
TASK_ID_START: Final[int] = 1

# None = one concurrent unit per requested operation, no bound
DISPATCH_MAX_IN_FLIGHT_DEFAULT: Final[int | None] = None

# =============================================================================
# Demo
# =============================================================================

DEMO_ACTOR_BATCH_SIZE: Final[int] = 5
DEMO_INCREMENT_BURST: Final[int] = 3

# Simulated per-task work after the counter call (ms, inclusive)
DEMO_JITTER_MIN_MS: Final[int] = 100
DEMO_JITTER_MAX_MS: Final[int] = 500

# =============================================================================
# HTTP
# =============================================================================

HTTP_HOST_DEFAULT: Final[str] = "0.0.0.0"
HTTP_PORT_DEFAULT: Final[int] = 8000

# Upper bound on operations accepted by a single POST /dispatch
HTTP_DISPATCH_MAX_OPERATIONS: Final[int] = 10_000

# =============================================================================
# Observability
# =============================================================================

METRIC_DISPATCH_ALL_LATENCY: Final[str] = "dispatch_all_latency"
