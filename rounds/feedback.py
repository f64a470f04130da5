"""Round feedback generation through the bound feedback model."""
from __future__ import annotations

import json
import logging
from typing import Any, Dict

from pydantic import BaseModel, ValidationError

from config import FEEDBACK_KEY, AppConfig, bind_model, get_model, resolve_route
from llm_gateway import LlmGatewayError, call

logger = logging.getLogger(__name__)

FEEDBACK_TARGET = "rounds.round_feedback"


class RoundFeedback(BaseModel):
    feedback: str


def fallback_feedback(round_name: str, performance: Dict[str, Any]) -> str:
    """Plain summary used when no model answers."""

    lines = [f"## {round_name} Summary"]
    for key, value in performance.items():
        if isinstance(value, list):
            value = ", ".join(str(item) for item in value) or "-"
        lines.append(f"- **{key}**: {value}")
    return "\n".join(lines)


def generate_round_feedback(round_name: str, performance: Dict[str, Any]) -> str:
    """Ask the feedback model for markdown feedback on a finished round.

    Falls back to :func:`fallback_feedback` when no model is bound, the
    gateway fails or the reply does not validate, so a round can always be
    submitted.
    """

    try:
        model = get_model(FEEDBACK_KEY)
    except KeyError:
        return fallback_feedback(round_name, performance)

    try:
        raw = model(round_name=round_name, performance=performance)
        result = raw if isinstance(raw, RoundFeedback) else RoundFeedback.model_validate(raw)
    except (LlmGatewayError, ValidationError) as exc:
        logger.warning("Round feedback generation failed for %s: %s", round_name, exc)
        return fallback_feedback(round_name, performance)
    return result.feedback.strip() or fallback_feedback(round_name, performance)


def bind_gateway_feedback(cfg: AppConfig) -> None:
    """Bind the feedback model to the gateway route configured for round feedback."""

    route = resolve_route(cfg, FEEDBACK_TARGET)

    def _feedback(*, round_name: str, performance: Dict[str, Any]) -> RoundFeedback:
        task = (
            f"Review the candidate's {round_name} round.\n"
            f"Performance data: {json.dumps(performance)}\n"
            "Write markdown with the sections '## What You Did' and '## What Is Expected' "
            "as short bullet points."
        )
        return call(task, RoundFeedback, cfg=route)

    bind_model(FEEDBACK_KEY, _feedback)


__all__ = ["FEEDBACK_TARGET", "RoundFeedback", "bind_gateway_feedback", "fallback_feedback", "generate_round_feedback"]
