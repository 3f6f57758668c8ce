"""Opt-in progress events for the inference engine.

The engine is silent unless the caller passes an observer. Use
``logging_observer()`` to route events to the ``logging`` module.
"""

import logging
from typing import Any, Callable, Literal, Optional

from pydantic import BaseModel, Field

Stage = Literal["block", "skip", "trade", "fallback", "dedupe", "summary"]


class InferenceEvent(BaseModel):
    """Something the engine did while parsing."""

    stage: Stage = Field(..., description="Pipeline stage that emitted the event")
    message: str = Field(..., description="Human-readable description")
    block_index: Optional[int] = Field(default=None, description="Text block being processed")
    details: dict[str, Any] = Field(default_factory=dict, description="Stage-specific data")

    model_config = {"frozen": True}


Observer = Callable[[InferenceEvent], None]


def emit(
    observer: Optional[Observer],
    stage: Stage,
    message: str,
    block_index: Optional[int] = None,
    **details: Any,
) -> None:
    """Send an event to the observer, if there is one."""
    if observer is None:
        return
    observer(InferenceEvent(stage=stage, message=message, block_index=block_index, details=details))


def logging_observer(
    logger: Optional[logging.Logger] = None,
    level: int = logging.DEBUG,
) -> Observer:
    """Create an observer that logs every event.

    Args:
        logger: Target logger (default ``tradeautopsy.inference``).
        level: Log level used for all events.

    Returns:
        Observer callable for ``infer_trades``.
    """
    target = logger or logging.getLogger("tradeautopsy.inference")

    def observe(event: InferenceEvent) -> None:
        if event.block_index is None:
            target.log(level, "[%s] %s", event.stage, event.message)
        else:
            target.log(level, "[%s] block %d: %s", event.stage, event.block_index, event.message)

    return observe
