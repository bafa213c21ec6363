# englishpath/services.py
from __future__ import annotations

import logging
from dataclasses import dataclass

from flask import current_app

from .auth import AuthClient
from .feedback import FeedbackClient
from .store import DocumentStore
from .tts import SpeechSynthesizer

log = logging.getLogger(__name__)

EXTENSION_KEY = "englishpath"


@dataclass
class Services:
    """Collaborator clients built once per app and handed to components."""

    store: DocumentStore
    auth: AuthClient
    feedback: FeedbackClient
    speech: SpeechSynthesizer

    @classmethod
    def from_config(cls, config, db) -> "Services":
        return cls(
            store=DocumentStore(db, config["APP_NAMESPACE"]),
            auth=AuthClient(config["JWT_SECRET"], session_days=config.get("SESSION_TOKEN_DAYS", 7)),
            feedback=FeedbackClient(
                config["GEMINI_API_URL"],
                api_key=config.get("GEMINI_API_KEY", ""),
                timeout=config.get("FEEDBACK_TIMEOUT", 20),
            ),
            speech=SpeechSynthesizer(
                provider=config.get("TTS_PROVIDER", "gtts"),
                lang=config.get("TTS_LANG", "en"),
                voice=config.get("TTS_VOICE", "en-US-JennyNeural"),
                azure_key=config.get("AZURE_SPEECH_KEY"),
                azure_region=config.get("AZURE_SPEECH_REGION"),
                azure_endpoint=config.get("AZURE_SPEECH_ENDPOINT"),
            ),
        )

    def close(self) -> None:
        self.store.close()
        self.feedback.close()
        self.speech.close()
        log.info("Services closed")


def get_services() -> Services:
    return current_app.extensions[EXTENSION_KEY]
