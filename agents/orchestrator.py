"""Turn orchestrator: runs one styling turn end to end."""

from __future__ import annotations

import contextvars
import dataclasses
import logging
import random
from concurrent.futures import Future, ThreadPoolExecutor
from concurrent.futures import TimeoutError as FutureTimeoutError
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional, Tuple, TypeVar

from agents.outfit_state_agent import OutfitStateAnalyzer
from agents.request_classifier import RequestClassifierAgent, keyword_entities
from logic.clarification_resolver import resolve_clarification
from logic.compatibility import CompatibilityCheck, check_compatibility
from logic.decision_context import build_decision_context
from logic.decision_engine import make_decision
from logic.outfit_merge import merge_outfit
from logic.responses import (
    FALLBACK_MESSAGE,
    generate_response,
    is_redo_command,
    is_undo_command,
    redo_message,
    undo_message,
)
from memory.session_context import SessionContext
from memory.session_store import InMemorySessionStore, SessionStore
from memory.user_profile import Interaction, StylePreferenceTracker
from models.classification import (
    RequestClassification,
    RequestType,
    fallback_classification,
    parse_request_type,
)
from models.decision import ClarificationContext, ClarificationKind, DecisionAction, DecisionResult
from models.garment import GarmentItem, contains_item
from models.outfit_state import OutfitState, compute_outfit_state, degraded_state
from stylist_app.config import StylistConfig
from stylist_app.logging_config import get_logger, log_event, operation_context

LOGGER = get_logger(__name__)
T = TypeVar("T")

RECENT_TURNS_KEEP = 10


@dataclass
class TurnRequest:
    """Everything the caller knows about one user message."""

    conversation_id: str
    message: str
    current_items: List[GarmentItem] = field(default_factory=list)
    candidate_items: List[GarmentItem] = field(default_factory=list)
    baseline_items: Optional[List[GarmentItem]] = None
    turn_sequence: Optional[int] = None
    user_id: Optional[str] = None
    history: Optional[List[Dict[str, str]]] = None


@dataclass(frozen=True)
class TurnResult:
    """Outcome of one turn, ready for the renderer and the chat surface."""

    conversation_id: str
    turn_sequence: int
    decision: DecisionResult
    response_text: str
    outfit_state: OutfitState
    final_items: List[GarmentItem]
    classification: RequestClassification
    compatibility: List[CompatibilityCheck] = field(default_factory=list)
    decision_context: str = ""
    answered_clarification: Optional[ClarificationContext] = None
    stale: bool = False
    error: Optional[str] = None

    @property
    def clarification(self) -> Optional[ClarificationContext]:
        return self.decision.clarification

    @property
    def items_to_apply(self) -> List[GarmentItem]:
        return list(self.final_items)

    def to_dict(self) -> Dict[str, Any]:
        if self.error:
            status = "error"
        elif self.stale:
            status = "stale"
        else:
            status = "ok"
        return {
            "status": status,
            "conversation_id": self.conversation_id,
            "turn_sequence": self.turn_sequence,
            "action": self.decision.action.value,
            "response_text": self.response_text,
            "decision": self.decision.to_dict(),
            "outfit_state": self.outfit_state.to_dict(),
            "items_to_apply": [item.to_dict() for item in self.items_to_apply],
            "should_regenerate_from_scratch": self.decision.should_regenerate_from_scratch,
            "clarification": self.clarification.to_dict() if self.clarification else None,
            "compatibility": [check.to_dict() for check in self.compatibility],
            "follow_up_query": self.decision.follow_up_query,
            "decision_context": self.decision_context,
        }


def _diff_decision(current: List[GarmentItem], target: List[GarmentItem], reasoning: str) -> DecisionResult:
    removed = [item for item in current if not contains_item(target, item)]
    added = [item for item in target if not contains_item(current, item)]
    return DecisionResult(
        action=DecisionAction.EXECUTE,
        items_to_add=added,
        items_to_remove=removed,
        should_regenerate_from_scratch=bool(removed),
        reasoning=reasoning,
    )


class StylistOrchestrator:
    """Coordinates classifier, state analyzer, decision engine and session.

    The classifier and the state analyzer run in parallel on a thread pool,
    each bounded by its own timeout. A timed-out or failed call is replaced by
    its documented default so the turn always produces a usable answer.
    """

    def __init__(
        self,
        config: StylistConfig | None = None,
        classifier: RequestClassifierAgent | None = None,
        state_analyzer: OutfitStateAnalyzer | None = None,
        session_store: SessionStore | None = None,
        preference_tracker: StylePreferenceTracker | None = None,
        max_workers: int = 4,
    ) -> None:
        self.config = config or StylistConfig()
        self.classifier = classifier or RequestClassifierAgent()
        self.state_analyzer = state_analyzer or OutfitStateAnalyzer()
        self.session_store = session_store or InMemorySessionStore()
        self.preference_tracker = preference_tracker
        self._executor = ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix="stylist")

    def close(self) -> None:
        self._executor.shutdown(wait=False)

    # ------------------------------------------------------------------ turns

    def process_turn(self, request: TurnRequest) -> TurnResult:
        """Run the full pipeline for one message."""

        with operation_context("orchestrator:process_turn", conversation_id=request.conversation_id):
            log_event(
                LOGGER,
                logging.INFO,
                "turn_started",
                conversation_id=request.conversation_id,
                current_count=len(request.current_items),
                candidate_count=len(request.candidate_items),
                user_id=request.user_id,
            )

            # While a question is waiting, loose words like "next" are answers.
            explicit_only = self._has_pending_question(request.conversation_id)
            if is_undo_command(request.message, explicit_only):
                return self.undo(request.conversation_id, request.turn_sequence)
            if is_redo_command(request.message, explicit_only):
                return self.redo(request.conversation_id, request.turn_sequence)

            lock = self.session_store.lock_for(request.conversation_id)
            with lock:
                session = self.session_store.get_or_create(request.conversation_id, request.user_id)
                sequence = session.begin_turn(request.turn_sequence)
                pending = session.pending_clarification
                history = request.history or list(session.metadata.get("recent_turns", []))
                baseline = request.baseline_items
                if baseline is None and session.history:
                    baseline = list(session.history[0].items)
                self.session_store.save(session)

            try:
                result = self._run_pipeline(request, sequence, pending, history, baseline)
            except Exception as exc:  # noqa: BLE001 - the user must never see a raw error
                log_event(
                    LOGGER,
                    logging.ERROR,
                    "turn_failed",
                    conversation_id=request.conversation_id,
                    turn_sequence=sequence,
                    exc_info=True,
                )
                return self._fallback_result(request, sequence, error=type(exc).__name__)

            with lock:
                session = self.session_store.require(request.conversation_id)
                if not session.is_current_turn(sequence):
                    log_event(
                        LOGGER,
                        logging.WARNING,
                        "turn_stale",
                        conversation_id=request.conversation_id,
                        turn_sequence=sequence,
                        latest_turn=session.latest_turn,
                    )
                    return dataclasses.replace(result, stale=True)
                self._commit(session, request, result)
                self.session_store.save(session)

            log_event(
                LOGGER,
                logging.INFO,
                "turn_completed",
                conversation_id=request.conversation_id,
                turn_sequence=sequence,
                action=result.decision.action.value,
                request_type=result.classification.type.value,
                regenerate=result.decision.should_regenerate_from_scratch,
            )
            return result

    def undo(self, conversation_id: str, turn_sequence: Optional[int] = None) -> TurnResult:
        return self._step_history(conversation_id, turn_sequence, forward=False)

    def redo(self, conversation_id: str, turn_sequence: Optional[int] = None) -> TurnResult:
        return self._step_history(conversation_id, turn_sequence, forward=True)

    # -------------------------------------------------------------- internals

    def _has_pending_question(self, conversation_id: str) -> bool:
        with self.session_store.lock_for(conversation_id):
            session = self.session_store.get(conversation_id)
        return session is not None and session.pending_clarification is not None

    def _step_history(self, conversation_id: str, turn_sequence: Optional[int], forward: bool) -> TurnResult:
        command = "redo" if forward else "undo"
        with self.session_store.lock_for(conversation_id):
            session = self.session_store.get_or_create(conversation_id)
            sequence = session.begin_turn(turn_sequence)
            before = session.current_items()
            snapshot = session.redo() if forward else session.undo()
            if snapshot is not None:
                session.clear_pending_clarification()
            self.session_store.save(session)

        after = list(snapshot.items) if snapshot else before
        decision = _diff_decision(before, after, reasoning=f"{command} to a saved outfit")
        state = compute_outfit_state(after)
        text = redo_message(snapshot is not None) if forward else undo_message(snapshot is not None)
        log_event(
            LOGGER,
            logging.INFO,
            f"turn_{command}",
            conversation_id=conversation_id,
            turn_sequence=sequence,
            applied=snapshot is not None,
        )
        return TurnResult(
            conversation_id=conversation_id,
            turn_sequence=sequence,
            decision=decision,
            response_text=text,
            outfit_state=state,
            final_items=after,
            classification=RequestClassification(
                type=RequestType.SINGLE_ITEM, confidence=1.0, message=command, intent=command
            ),
        )

    def _run_pipeline(
        self,
        request: TurnRequest,
        sequence: int,
        pending: Optional[ClarificationContext],
        history: List[Dict[str, str]],
        baseline: Optional[List[GarmentItem]] = None,
    ) -> TurnResult:
        current = list(request.current_items)
        candidates = list(request.candidate_items)

        if pending is not None:
            decision = resolve_clarification(pending, request.message, current, candidates)
            if decision is not None:
                classification = RequestClassification(
                    type=parse_request_type(pending.request_type) or RequestType.SINGLE_ITEM,
                    confidence=1.0,
                    message=pending.original_message,
                    intent="clarification_answer",
                )
                state = compute_outfit_state(current)
                return self._finish(request, sequence, classification, state, decision, answered=pending)
            log_event(
                LOGGER,
                logging.INFO,
                "clarification_superseded",
                conversation_id=request.conversation_id,
                turn_sequence=sequence,
            )

        classification, state = self._analyze(request.message, current, history)
        decision = make_decision(classification, state, candidates, baseline)
        return self._finish(request, sequence, classification, state, decision)

    def _analyze(
        self, message: str, current: List[GarmentItem], history: List[Dict[str, str]]
    ) -> Tuple[RequestClassification, OutfitState]:
        classify_future = self._submit(self.classifier.classify, message, history)
        state_future = self._submit(self.state_analyzer.analyze, current)
        classification = self._await(
            classify_future,
            self.config.classifier_timeout_s,
            lambda: fallback_classification(message, keyword_entities(message), reason="classifier_timeout"),
            "classifier",
        )
        state = self._await(state_future, self.config.state_timeout_s, degraded_state, "state_analyzer")
        return classification, state

    def _submit(self, func: Callable[..., T], *args: Any) -> "Future[T]":
        context = contextvars.copy_context()
        return self._executor.submit(context.run, func, *args)

    def _await(self, future: "Future[T]", timeout: float, default: Callable[[], T], call: str) -> T:
        try:
            return future.result(timeout=timeout)
        except FutureTimeoutError:
            future.cancel()
            log_event(LOGGER, logging.WARNING, "backend_call_timed_out", call=call, timeout_s=timeout)
        except Exception:  # noqa: BLE001 - ports degrade to their defaults
            log_event(LOGGER, logging.ERROR, "backend_call_crashed", call=call, exc_info=True)
        return default()

    def _rng(self, sequence: int) -> Optional[random.Random]:
        if self.config.response_seed is None:
            return None
        return random.Random(self.config.response_seed + sequence)

    def _finish(
        self,
        request: TurnRequest,
        sequence: int,
        classification: RequestClassification,
        state: OutfitState,
        decision: DecisionResult,
        answered: Optional[ClarificationContext] = None,
    ) -> TurnResult:
        current = list(request.current_items)
        merge = merge_outfit(current, decision)

        if decision.action == DecisionAction.EXECUTE:
            if merge.evicted:
                decision = dataclasses.replace(
                    decision,
                    items_to_remove=list(decision.items_to_remove) + merge.evicted,
                    should_regenerate_from_scratch=True,
                )
            final_items = merge.items
            checks = check_compatibility(final_items)
            changed_items = merge.added
        elif decision.action == DecisionAction.SUGGEST:
            final_items = current
            checks = check_compatibility(merge.items)
            changed_items = list(decision.items_to_add)
        else:
            final_items = current
            checks = []
            changed_items = []

        final_state = compute_outfit_state(final_items)
        text = generate_response(
            classification.type,
            final_state,
            changed_items,
            checks,
            action=decision.action,
            decision=decision,
            rng=self._rng(sequence),
        )
        return TurnResult(
            conversation_id=request.conversation_id,
            turn_sequence=sequence,
            decision=decision,
            response_text=text,
            outfit_state=final_state,
            final_items=final_items,
            classification=classification,
            compatibility=checks,
            decision_context=build_decision_context(classification, state, decision, checks),
            answered_clarification=answered,
        )

    def _fallback_result(self, request: TurnRequest, sequence: int, error: str) -> TurnResult:
        current = list(request.current_items)
        return TurnResult(
            conversation_id=request.conversation_id,
            turn_sequence=sequence,
            decision=DecisionResult(action=DecisionAction.EXECUTE, reasoning="pipeline failed"),
            response_text=FALLBACK_MESSAGE,
            outfit_state=compute_outfit_state(current),
            final_items=current,
            classification=fallback_classification(request.message, reason="pipeline_failed"),
            error=error,
        )

    def _commit(self, session: SessionContext, request: TurnRequest, result: TurnResult) -> None:
        decision = result.decision
        recent = list(session.metadata.get("recent_turns", []))
        recent.append({"role": "user", "content": request.message})
        session.metadata["recent_turns"] = recent[-RECENT_TURNS_KEEP:]

        if decision.action == DecisionAction.EXECUTE:
            changed = bool(decision.items_to_add or decision.items_to_remove)
            if changed:
                if not session.history:
                    session.push_snapshot(request.current_items, note="starting outfit")
                session.push_snapshot(result.final_items, note=request.message)
            session.clear_pending_clarification()
            self._track_preferences(session, request, result, changed)
        elif decision.clarification is not None:
            session.set_pending_clarification(decision.clarification)

    def _track_preferences(
        self, session: SessionContext, request: TurnRequest, result: TurnResult, changed: bool
    ) -> None:
        user_id = request.user_id or session.user_id
        if self.preference_tracker is None or not user_id:
            return
        answered = result.answered_clarification
        if answered is not None and answered.kind == ClarificationKind.CONFIRMATION:
            if changed:
                self.preference_tracker.track_interaction(user_id, answered.pending_items, Interaction.ACCEPTED)
            else:
                self.preference_tracker.track_interaction(user_id, answered.pending_items, Interaction.REJECTED)
            return
        if changed and result.decision.items_to_add:
            self.preference_tracker.track_interaction(
                user_id, result.decision.items_to_add, Interaction.MODIFIED
            )


__all__ = ["TurnRequest", "TurnResult", "StylistOrchestrator"]
