"""Stylist app bootstrap."""

from __future__ import annotations

import logging
import random
from typing import Any, Dict, List, Optional, Sequence

from agents.stylist_agent import HistoryResult, StylistAgent, TurnRequest, TurnResult
from memory.preference_tracker import PreferenceTracker, ProfileStore
from memory.session_store import InMemorySessionStore, SessionStore
from models.outfit_item import OutfitItem
from stylist_app.config import StylistConfig
from stylist_app.logging_config import configure_logging, get_logger, log_event, operation_context
from tools.request_classifier import GeminiRequestClassifier, RequestClassifier, StaticRequestClassifier

LOGGER = get_logger(__name__)


class StylistApp:
    """Wires together config, logging, session store, classifier and the agent."""

    def __init__(
        self,
        config: StylistConfig | None = None,
        session_store: SessionStore | None = None,
        classifier: RequestClassifier | None = None,
        profile_store: ProfileStore | None = None,
    ) -> None:
        self.config = config or StylistConfig.from_env()
        configure_logging(self.config.log_level)

        self.session_store = session_store or InMemorySessionStore()
        self.preference_tracker = PreferenceTracker(store=profile_store)
        self.classifier = classifier or self._build_classifier()
        self.agent = StylistAgent(
            store=self.session_store,
            preference_tracker=self.preference_tracker,
            rng=random.Random(self.config.follow_up_seed),
            track_preferences=self.config.track_preferences,
        )

    def _build_classifier(self) -> RequestClassifier:
        if not self.config.api_key:
            log_event(LOGGER, logging.INFO, "classifier_offline", model=self.config.model)
            return StaticRequestClassifier()
        return GeminiRequestClassifier(
            model_name=self.config.model,
            api_key=self.config.api_key,
            max_retries=self.config.classifier_max_retries,
            base_delay=self.config.classifier_base_delay,
        )

    def handle_message(
        self,
        *,
        conversation_id: str,
        message: str,
        new_items: Sequence[OutfitItem] = (),
        original_photo_outfit: Optional[List[OutfitItem]] = None,
        image_ref: str | None = None,
        message_id: str | None = None,
        user_id: str | None = None,
    ) -> TurnResult:
        """Classify a raw user message and run it through the agent."""

        with operation_context("app:handle_message", conversation_id=conversation_id):
            classification = self.classifier.classify(message)
            return self.agent.process_turn(
                TurnRequest(
                    conversation_id=conversation_id,
                    message=message,
                    classification=classification,
                    new_items=list(new_items),
                    original_photo_outfit=original_photo_outfit,
                    image_ref=image_ref,
                    message_id=message_id,
                    user_id=user_id,
                )
            )

    def process_turn(self, request: TurnRequest) -> TurnResult:
        return self.agent.process_turn(request)

    def undo(self, conversation_id: str) -> HistoryResult:
        return self.agent.undo(conversation_id)

    def redo(self, conversation_id: str) -> HistoryResult:
        return self.agent.redo(conversation_id)

    def export_conversation(self, conversation_id: str) -> Optional[Dict[str, Any]]:
        session = self.session_store.get(conversation_id)
        return session.export() if session else None

    def end_conversation(self, conversation_id: str) -> bool:
        return self.session_store.delete(conversation_id)


__all__ = ["StylistApp"]
