"""Stylist agent running one conversational turn through the outfit engine."""
from __future__ import annotations

import logging
import random
import re
from dataclasses import dataclass, field
from typing import List, Optional, Sequence

from logic.compatibility_suite import run_compatibility_checks, summarize_checks
from logic.decision_context import DecisionContextBuilder
from logic.decision_engine import make_decision
from logic.edge_cases import detect_edge_case, detect_impossible_combination, handle_edge_case
from logic.responses import (
    generate_clarification_response,
    generate_nothing_to_redo_response,
    generate_nothing_to_undo_response,
    generate_redo_response,
    generate_removal_response,
    generate_response,
    generate_suggestion_response,
    generate_undo_response,
)
from memory.preference_tracker import PreferenceTracker
from memory.session_store import InMemorySessionStore, SessionState, SessionStore
from models.clarification import ClarificationContext, EdgeCaseResolution
from models.compatibility import CompatibilityCheck
from models.decision import ClarificationQuestion, DecisionResult, RequestClassification
from models.outfit import OutfitState, describe_outfit
from models.outfit_item import OutfitItem, item_names
from stylist_app.logging_config import get_logger, log_event, operation_context

logger = get_logger(__name__)

UNDO_PATTERN = re.compile(r"^(undo|go back|previous|revert)$")
REDO_PATTERN = re.compile(r"^(redo|go forward|next|restore)$")


def detect_history_command(message: str) -> Optional[str]:
    """Return ``"undo"`` or ``"redo"`` when the whole message is a history command."""

    lowered = (message or "").strip().lower()
    if UNDO_PATTERN.match(lowered):
        return "undo"
    if REDO_PATTERN.match(lowered):
        return "redo"
    return None


@dataclass
class TurnRequest:
    conversation_id: str
    message: str
    classification: RequestClassification
    new_items: List[OutfitItem] = field(default_factory=list)
    original_photo_outfit: Optional[List[OutfitItem]] = None
    image_ref: Optional[str] = None
    message_id: Optional[str] = None
    user_id: Optional[str] = None


@dataclass
class TurnResult:
    decision: DecisionResult
    outfit_state: OutfitState
    compatibility_checks: List[CompatibilityCheck]
    response_text: str
    needs_clarification: bool
    clarification: Optional[ClarificationContext]
    decision_context: str
    final_items: List[OutfitItem]


@dataclass
class HistoryResult:
    success: bool
    message: str
    items: List[OutfitItem] = field(default_factory=list)


def apply_decision(current: Sequence[OutfitItem], decision: DecisionResult) -> List[OutfitItem]:
    """Current items minus removals (matched by name) plus additions."""

    removed = {item.name for item in decision.items_to_remove}
    kept = [item for item in current if item.name not in removed]
    return kept + list(decision.items_to_add)


class StylistAgent:
    """Wires the edge-case resolver, decision engine, checkers and templates.

    Sessions come from the injected store. Turns on the same conversation must
    be serialised by the caller.
    """

    def __init__(
        self,
        store: SessionStore | None = None,
        preference_tracker: PreferenceTracker | None = None,
        rng: random.Random | None = None,
        track_preferences: bool = True,
    ) -> None:
        self.store = store or InMemorySessionStore()
        self.preference_tracker = preference_tracker
        self.rng = rng or random.Random()
        self.track_preferences = track_preferences

    # -- history ---------------------------------------------------------

    def undo(self, conversation_id: str) -> HistoryResult:
        session = self.store.get_or_create(conversation_id)
        snapshot = session.undo()
        self.store.save(session)
        if snapshot is None:
            return HistoryResult(success=False, message=generate_nothing_to_undo_response())
        log_event(logger, logging.INFO, "history_undo", conversation_id=conversation_id, cursor=session.cursor)
        return HistoryResult(success=True, message=generate_undo_response(), items=list(snapshot.items))

    def redo(self, conversation_id: str) -> HistoryResult:
        session = self.store.get_or_create(conversation_id)
        snapshot = session.redo()
        self.store.save(session)
        if snapshot is None:
            return HistoryResult(success=False, message=generate_nothing_to_redo_response())
        log_event(logger, logging.INFO, "history_redo", conversation_id=conversation_id, cursor=session.cursor)
        return HistoryResult(success=True, message=generate_redo_response(), items=list(snapshot.items))

    # -- turns -----------------------------------------------------------

    def process_turn(self, request: TurnRequest) -> TurnResult:
        with operation_context("stylist.process_turn", conversation_id=request.conversation_id) as correlation_id:
            log_event(
                logger,
                logging.INFO,
                "turn_started",
                correlation_id=correlation_id,
                conversation_id=request.conversation_id,
                request_type=request.classification.type,
                new_items=len(request.new_items),
            )

            command = detect_history_command(request.message)
            if command:
                return self._history_turn(request, command)

            session = self.store.get_or_create(request.conversation_id)
            current = session.current_outfit()
            current_state = describe_outfit(current)

            builder = DecisionContextBuilder()
            builder.add_classification(request.classification, request.message)
            builder.add_outfit_state(current_state)

            scenario = detect_impossible_combination(request.new_items, request.message) or detect_edge_case(
                request.message, current, request.new_items
            )
            if scenario is not None:
                resolution = handle_edge_case(scenario)
                log_event(
                    logger,
                    logging.INFO,
                    "edge_case_detected",
                    conversation_id=request.conversation_id,
                    edge_case=scenario.type,
                    action=resolution.action,
                )
                if resolution.options:
                    return self._clarification_turn(request, session, current_state, builder, resolution)

            decision = make_decision(
                request.classification, current, request.new_items, request.original_photo_outfit
            )
            builder.add_decision(decision)
            log_event(
                logger,
                logging.INFO,
                "decision_made",
                conversation_id=request.conversation_id,
                action=decision.action,
                reasoning=decision.reasoning,
                items_to_add=item_names(decision.items_to_add),
                items_to_remove=item_names(decision.items_to_remove),
            )

            checks: List[CompatibilityCheck] = []
            final_items = list(current)
            if decision.action == "execute":
                final_items = apply_decision(current, decision)
                checks = run_compatibility_checks(final_items)
                builder.add_compatibility(checks)
                log_event(
                    logger,
                    logging.INFO,
                    "compatibility_checked",
                    conversation_id=request.conversation_id,
                    results=summarize_checks(checks),
                )

            clarification: Optional[ClarificationContext] = None
            question = decision.clarification_question
            if question is not None:
                builder.add_clarification(question.question, [option.label for option in question.options])

            final_state = describe_outfit(final_items)
            response_text = self._respond(request, decision, final_state, checks)

            changed = decision.action == "execute" and (decision.items_to_add or decision.items_to_remove)
            if changed:
                snapshot = session.push_snapshot(final_items, image_ref=request.image_ref, message_id=request.message_id)
                session.clear_pending_clarification()
                log_event(
                    logger,
                    logging.INFO,
                    "snapshot_pushed",
                    conversation_id=request.conversation_id,
                    snapshot_id=snapshot.id,
                    outfit_state=snapshot.outfit_state,
                    cursor=session.cursor,
                )
                self._track(request, final_items)

            needs_clarification = decision.action in ("clarify", "suggest")
            if needs_clarification and question is not None:
                clarification = ClarificationContext(
                    question=question.question,
                    original_message=request.message,
                    conversation_id=request.conversation_id,
                    type=question.context.type,
                    options=list(question.options),
                )
                session.set_pending_clarification(clarification)

            self.store.save(session)
            result = TurnResult(
                decision=decision,
                outfit_state=final_state,
                compatibility_checks=checks,
                response_text=response_text,
                needs_clarification=needs_clarification,
                clarification=clarification,
                decision_context=str(builder),
                final_items=final_items,
            )
            log_event(
                logger,
                logging.INFO,
                "turn_completed",
                conversation_id=request.conversation_id,
                action=decision.action,
                outfit_state=final_state.type,
                needs_clarification=needs_clarification,
            )
            return result

    def _history_turn(self, request: TurnRequest, command: str) -> TurnResult:
        outcome = self.undo(request.conversation_id) if command == "undo" else self.redo(request.conversation_id)
        session = self.store.get_or_create(request.conversation_id)
        items = session.current_outfit()
        decision = DecisionResult(
            action="execute",
            reasoning=f"{command.capitalize()} {'applied' if outcome.success else 'not available'}",
            should_regenerate_from_scratch=outcome.success,
        )
        builder = DecisionContextBuilder()
        builder.add_classification(request.classification, request.message)
        builder.add_outfit_state(describe_outfit(items))
        builder.add_decision(decision)
        return TurnResult(
            decision=decision,
            outfit_state=describe_outfit(items),
            compatibility_checks=[],
            response_text=outcome.message,
            needs_clarification=False,
            clarification=None,
            decision_context=str(builder),
            final_items=items,
        )

    def _clarification_turn(
        self,
        request: TurnRequest,
        session: SessionState,
        current_state: OutfitState,
        builder: DecisionContextBuilder,
        resolution: EdgeCaseResolution,
    ) -> TurnResult:
        options = list(resolution.options or [])
        clarification = ClarificationContext(
            question=resolution.response,
            original_message=request.message,
            conversation_id=request.conversation_id,
            type="conflict" if resolution.action == "error" else "ambiguous",
            options=options,
        )
        session.set_pending_clarification(clarification)
        self.store.save(session)
        builder.add_clarification(resolution.response, [option.label for option in options])
        decision = DecisionResult(
            action="clarify",
            reasoning=resolution.response,
            clarification_question=ClarificationQuestion(
                question=resolution.response, options=options, context=clarification
            ),
        )
        log_event(
            logger,
            logging.INFO,
            "turn_completed",
            conversation_id=request.conversation_id,
            action="clarify",
            outfit_state=current_state.type,
            needs_clarification=True,
        )
        return TurnResult(
            decision=decision,
            outfit_state=current_state,
            compatibility_checks=[],
            response_text=resolution.response,
            needs_clarification=True,
            clarification=clarification,
            decision_context=str(builder),
            final_items=list(current_state.items),
        )

    def _respond(
        self,
        request: TurnRequest,
        decision: DecisionResult,
        final_state: OutfitState,
        checks: Sequence[CompatibilityCheck],
    ) -> str:
        if decision.clarification_question is not None:
            return decision.clarification_question.question

        if decision.action == "suggest" and decision.suggestions:
            suggestion = decision.suggestions[0]
            names = ", ".join(item.name for item in suggestion.items or [])
            if request.classification.type == "type_d_style_mood":
                style = ", ".join(request.classification.extracted_entities.style_descriptors) or "fresh"
                return generate_suggestion_response(
                    "style", {"style": style, "items": names or "a few new pieces"}
                )
            confirm = generate_clarification_response("suggest", {"item": names or suggestion.title})
            return f"{suggestion.description}.\n\n{confirm}"

        if decision.action == "execute" and decision.items_to_remove and not decision.items_to_add:
            return generate_removal_response(decision.items_to_remove, final_state.items)

        return generate_response(
            request.classification.type, final_state, decision.items_to_add, checks, rng=self.rng
        )

    def _track(self, request: TurnRequest, final_items: Sequence[OutfitItem]) -> None:
        if not (self.track_preferences and self.preference_tracker and request.user_id):
            return
        outcome = self.preference_tracker.track_outfit_interaction(request.user_id, final_items, "accepted")
        if not outcome.ok:
            log_event(
                logger,
                logging.WARNING,
                "preference_tracking_failed",
                conversation_id=request.conversation_id,
                error=outcome.error,
            )


__all__ = [
    "HistoryResult",
    "StylistAgent",
    "TurnRequest",
    "TurnResult",
    "apply_decision",
    "detect_history_command",
]
