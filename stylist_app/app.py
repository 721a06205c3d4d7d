"""Outfit stylist app bootstrap."""

from __future__ import annotations

import logging
from typing import Any, Dict, Iterable, List, Optional

from pydantic import ValidationError

from agents.orchestrator import StylistOrchestrator, TurnRequest, TurnResult
from agents.outfit_state_agent import STATE_ROLE, OutfitStateAnalyzer
from agents.request_classifier import CLASSIFIER_ROLE, RequestClassifierAgent
from logic.safety import system_instruction
from logic.validation import GarmentPayload, TurnRequestPayload, TurnResponsePayload, validation_failure
from memory.session_store import InMemorySessionStore, JSONSessionStore, SessionStore
from memory.user_profile import StylePreferenceTracker
from stylist_app.config import StylistConfig
from stylist_app.logging_config import configure_logging, get_logger, log_event, operation_context
from tools.gemini_client import GeminiJSONClient, JSONBackend

LOGGER = get_logger(__name__)


def _items(payloads: Optional[Iterable[GarmentPayload]]) -> List:
    return [payload.to_item() for payload in payloads or []]


class OutfitStylistApp:
    """Wires together config, backends, stores and the orchestrator."""

    def __init__(
        self,
        config: StylistConfig | None = None,
        classifier_backend: JSONBackend | None = None,
        state_backend: JSONBackend | None = None,
        session_store: SessionStore | None = None,
    ) -> None:
        self.config = config or StylistConfig.from_env()
        configure_logging()

        self.classifier_backend = classifier_backend or self._build_backend(CLASSIFIER_ROLE)
        self.state_backend = state_backend or self._build_backend(STATE_ROLE)
        self.session_store = session_store or self._build_session_store()
        self.preference_tracker = (
            StylePreferenceTracker(self.config.preferences_dir) if self.config.preferences_dir else None
        )
        self.orchestrator = StylistOrchestrator(
            config=self.config,
            classifier=RequestClassifierAgent(backend=self.classifier_backend),
            state_analyzer=OutfitStateAnalyzer(
                backend=self.state_backend,
                enrichment_enabled=self.config.state_enrichment_enabled,
            ),
            session_store=self.session_store,
            preference_tracker=self.preference_tracker,
        )

    def _build_backend(self, role_hint: str) -> Optional[JSONBackend]:
        if not self.config.api_key:
            log_event(LOGGER, logging.INFO, "backend_not_configured", role=role_hint.split(".")[0])
            return None
        return GeminiJSONClient(
            api_key=self.config.api_key,
            model=self.config.model,
            system_instruction=system_instruction(role_hint),
            max_retries=self.config.llm_max_retries,
            backoff_s=self.config.llm_backoff_s,
        )

    def _build_session_store(self) -> SessionStore:
        if self.config.session_store_backend.lower() == "json":
            return JSONSessionStore(self.config.session_store_path or "data/sessions")
        return InMemorySessionStore()

    def handle_turn(self, conversation_id: str, payload: Dict[str, Any]) -> Dict[str, Any]:
        """Validate a raw turn payload, run it and validate the response."""

        with operation_context("app:handle_turn", conversation_id=conversation_id) as correlation_id:
            try:
                request_payload = TurnRequestPayload.model_validate(payload)
            except ValidationError as exc:
                log_event(
                    LOGGER,
                    logging.WARNING,
                    "app_request_invalid",
                    conversation_id=conversation_id,
                    details=str(exc),
                    correlation_id=correlation_id,
                )
                return validation_failure("Invalid turn payload", exc)

            request = TurnRequest(
                conversation_id=conversation_id,
                message=request_payload.message,
                current_items=_items(request_payload.current_items),
                candidate_items=_items(request_payload.candidate_items),
                baseline_items=(
                    _items(request_payload.baseline_items) if request_payload.baseline_items is not None else None
                ),
                turn_sequence=request_payload.turn_sequence,
                user_id=request_payload.user_id,
            )
            return self._respond(self.orchestrator.process_turn(request), correlation_id)

    def undo(self, conversation_id: str) -> Dict[str, Any]:
        with operation_context("app:undo", conversation_id=conversation_id) as correlation_id:
            return self._respond(self.orchestrator.undo(conversation_id), correlation_id)

    def redo(self, conversation_id: str) -> Dict[str, Any]:
        with operation_context("app:redo", conversation_id=conversation_id) as correlation_id:
            return self._respond(self.orchestrator.redo(conversation_id), correlation_id)

    def export_session(self, conversation_id: str) -> Dict[str, Any]:
        return self.session_store.require(conversation_id).export()

    def _respond(self, result: TurnResult, correlation_id: str) -> Dict[str, Any]:
        response = result.to_dict()
        try:
            TurnResponsePayload.model_validate(response)
        except ValidationError as exc:
            log_event(
                LOGGER,
                logging.WARNING,
                "app_response_invalid",
                details=str(exc),
                correlation_id=correlation_id,
            )
            return validation_failure("Turn response failed schema checks", exc)
        return response

    def close(self) -> None:
        self.orchestrator.close()


__all__ = ["OutfitStylistApp"]
