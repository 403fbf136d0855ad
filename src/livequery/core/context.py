"""
Execution envelope passed to the engine as context_value.

Instrumented resolvers need the caller's real context plus a per-execution
identifier collector. Both travel in an explicit envelope that is matched
once at the top of every instrumented resolver; the user context itself is
never modified.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Optional

Collector = Callable[[str, Any], None]


class ExecutionMode(str, Enum):
    """How instrumented resolvers should treat an execution."""
    OBSERVED = "observed"
    PASSTHROUGH = "passthrough"


@dataclass(frozen=True)
class ExecutionEnvelope:
    """
    Context wrapper for one execution.

    Contains:
    - mode: OBSERVED executions report identity fields to the collector
    - user_context: The context the caller registered with
    - collector: Receives (type_name, id_value) pairs
    - side_table: Scratch space scoped to this execution only
    """
    mode: ExecutionMode
    user_context: Any = None
    collector: Optional[Collector] = None
    side_table: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def observed(cls, user_context: Any, collector: Collector) -> "ExecutionEnvelope":
        """Create envelope for an observed execution."""
        return cls(mode=ExecutionMode.OBSERVED, user_context=user_context, collector=collector)

    @classmethod
    def passthrough(cls, user_context: Any) -> "ExecutionEnvelope":
        """Create envelope that only carries the user context."""
        return cls(mode=ExecutionMode.PASSTHROUGH, user_context=user_context)


def resolve_envelope(context: Any) -> tuple[Any, Optional[Collector]]:
    """
    Unwrap an execution context.

    Returns:
        (user_context, collector); collector is None unless the execution is observed.
        Contexts that are not envelopes are returned as-is.
    """
    match context:
        case ExecutionEnvelope(mode=ExecutionMode.OBSERVED, user_context=user_context, collector=collector):
            return user_context, collector
        case ExecutionEnvelope(user_context=user_context):
            return user_context, None
        case _:
            return context, None
