"""Textual decision context handed to the image-generation step.

The builder accumulates titled sections in the order they are added. Each
section is a list of ``- key: value`` lines; empty values are dropped. The
rendered string is a wire contract: the downstream renderer looks for the
camelCase keys verbatim, in particular ``itemsToRemove: ["..."]``.
"""

from __future__ import annotations

import json
import logging
from dataclasses import asdict, is_dataclass
from typing import Any, Dict, List, Optional, Sequence

from models.compatibility import CompatibilityCheck
from models.decision import DecisionResult, RequestClassification
from models.outfit import OutfitState

logger = logging.getLogger(__name__)


def _json_default(value: Any) -> Any:
    if is_dataclass(value):
        return asdict(value)
    return str(value)


def _render_scalar(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def _to_json(value: Any) -> str:
    return json.dumps(value, separators=(",", ":"), ensure_ascii=False, default=_json_default)


def format_object(values: Dict[str, Any]) -> str:
    """Render ``values`` as ``- key: value`` lines, skipping empty entries."""

    lines: List[str] = []
    for key, value in values.items():
        if value is None or value == "":
            continue
        if isinstance(value, (list, tuple)):
            if not value:
                continue
            rendered = ", ".join(v if isinstance(v, str) else _to_json(v) for v in value)
            lines.append(f"- {key}: {rendered}")
        elif isinstance(value, dict) or is_dataclass(value):
            lines.append(f"- {key}: {_to_json(value)}")
        else:
            lines.append(f"- {key}: {_render_scalar(value)}")
    return "\n".join(lines)


def _quoted_list(names: Sequence[str]) -> str:
    return "[" + ", ".join(f'"{name}"' for name in names) + "]"


class DecisionContextBuilder:
    """Collects the classification, state, decision and checks for one turn."""

    def __init__(self) -> None:
        self.sections: List[str] = []

    def add_section(self, title: str, content: str) -> None:
        if not content:
            return
        self.sections.append(f"{title}:\n{content}".strip())

    def add_classification(self, classification: RequestClassification, user_message: str) -> None:
        entities = classification.extracted_entities
        self.add_section(
            "Request Classification",
            format_object(
                {
                    "userMessage": user_message,
                    "requestType": classification.type,
                    "confidence": classification.confidence,
                    "intent": classification.intent,
                    "garments": [garment.name for garment in entities.garments],
                    "colors": entities.colors,
                    "styleDescriptors": entities.style_descriptors,
                    "layeringKeywords": classification.layering_keywords,
                    "removalKeywords": classification.removal_keywords,
                }
            ),
        )

    def add_outfit_state(self, state: OutfitState, label: str = "Current Outfit State") -> None:
        self.add_section(
            label,
            format_object(
                {
                    "state": state.type,
                    "layerCount": state.layer_count,
                    "isComplete": state.is_complete,
                    "missingZones": state.missing_zones,
                    "items": [f"{item.name} ({item.category or item.zone})" for item in state.items],
                }
            ),
        )

    def add_decision(self, decision: DecisionResult) -> None:
        values: Dict[str, Any] = {
            "action": decision.action,
            "reasoning": decision.reasoning,
            "itemsToAdd": [item.name for item in decision.items_to_add],
            "shouldRegenerateFromScratch": decision.should_regenerate_from_scratch,
            "suggestions": [suggestion.title for suggestion in decision.suggestions],
        }
        removed = [item.name for item in decision.items_to_remove]
        if removed:
            # Kept as a string so it is not re-joined like an ordinary list.
            values["itemsToRemove"] = _quoted_list(removed)
            values["replacementOperation"] = True
            values["replacementInstruction"] = (
                f"REMOVE these items completely: {', '.join(removed)}. "
                "They should NOT be visible in the final try-on image."
            )

        before = len(self.sections)
        self.add_section("Decision Result", format_object(values))
        if removed and len(self.sections) > before:
            self.sections[-1] += f"\nitemsToRemove: {_quoted_list(removed)}"

    def add_compatibility(self, checks: Sequence[CompatibilityCheck]) -> None:
        if not checks:
            return
        lines = []
        for check in checks:
            issues = "; ".join(f"{issue.type}: {issue.message}" for issue in check.issues)
            status = "passed" if check.passed else "needs attention"
            lines.append(f"- {check.check_type}: {status}" + (f" ({issues})" if issues else ""))
        self.add_section("Compatibility Checks", "\n".join(lines))

    def add_clarification(self, question: str, options: Sequence[str]) -> None:
        self.add_section("Clarification Requested", f"{question}\nOptions: {', '.join(options)}")

    def build(self) -> str:
        return "\n\n".join(self.sections).rstrip()

    def __str__(self) -> str:
        return self.build()


def build_decision_context(
    classification: RequestClassification,
    user_message: str,
    state: OutfitState,
    decision: Optional[DecisionResult] = None,
    checks: Sequence[CompatibilityCheck] = (),
) -> str:
    """One-shot helper producing the full context string."""

    builder = DecisionContextBuilder()
    builder.add_classification(classification, user_message)
    builder.add_outfit_state(state)
    if decision is not None:
        builder.add_decision(decision)
    builder.add_compatibility(checks)
    if decision is not None and decision.clarification_question is not None:
        question = decision.clarification_question
        builder.add_clarification(question.question, [option.label for option in question.options])
    logger.debug("built decision context with %d sections", len(builder.sections))
    return str(builder)


__all__ = ["DecisionContextBuilder", "build_decision_context", "format_object"]
