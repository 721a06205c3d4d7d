"""Text context handed to the image compositing collaborator."""

from __future__ import annotations

from typing import List, Optional, Sequence

from logic.compatibility import CompatibilityCheck
from models.classification import RequestClassification
from models.decision import DecisionResult
from models.outfit_state import OutfitState


class DecisionContextBuilder:
    """Collects the turn's reasoning into labelled sections."""

    def __init__(self) -> None:
        self._sections: List[str] = []

    def add_classification(self, classification: RequestClassification) -> "DecisionContextBuilder":
        entities = classification.entities
        lines = [
            "## Request",
            f"type: {classification.type.value} (confidence {classification.confidence:.2f})",
        ]
        if classification.intent:
            lines.append(f"intent: {classification.intent}")
        if entities.garments:
            lines.append(f"garments: {', '.join(entities.garments)}")
        if entities.colors:
            lines.append(f"colors: {', '.join(entities.colors)}")
        if entities.style_descriptors:
            lines.append(f"style: {', '.join(entities.style_descriptors)}")
        self._sections.append("\n".join(lines))
        return self

    def add_state(self, state: OutfitState) -> "DecisionContextBuilder":
        lines = ["## Current outfit", f"state: {state.type.value}, layers: {state.layer_count}"]
        for zone, items in state.zones.items():
            ordered = " -> ".join(item.name for item in items)
            lines.append(f"{zone.value}: {ordered}")
        if state.missing_zones:
            lines.append(f"missing: {', '.join(zone.value for zone in state.missing_zones)}")
        self._sections.append("\n".join(lines))
        return self

    def add_decision(self, decision: DecisionResult) -> "DecisionContextBuilder":
        lines = ["## Decision", f"action: {decision.action.value}"]
        if decision.items_to_add:
            lines.append(f"add: {', '.join(item.name for item in decision.items_to_add)}")
        if decision.items_to_remove:
            lines.append(f"remove: {', '.join(item.name for item in decision.items_to_remove)}")
        lines.append(f"regenerate from scratch: {'yes' if decision.should_regenerate_from_scratch else 'no'}")
        if decision.reasoning:
            lines.append(f"why: {decision.reasoning}")
        self._sections.append("\n".join(lines))
        return self

    def add_compatibility(self, checks: Sequence[CompatibilityCheck]) -> "DecisionContextBuilder":
        if not checks:
            return self
        lines = ["## Compatibility"]
        for check in checks:
            status = "ok" if check.passed else "warn"
            lines.append(f"{check.check}: {status} - {check.message}")
        self._sections.append("\n".join(lines))
        return self

    def build(self) -> str:
        return "\n\n".join(self._sections)


def build_decision_context(
    classification: RequestClassification,
    state: OutfitState,
    decision: DecisionResult,
    compatibility: Optional[Sequence[CompatibilityCheck]] = None,
) -> str:
    return (
        DecisionContextBuilder()
        .add_classification(classification)
        .add_state(state)
        .add_decision(decision)
        .add_compatibility(compatibility or [])
        .build()
    )


__all__ = ["DecisionContextBuilder", "build_decision_context"]
