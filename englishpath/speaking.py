# englishpath/speaking.py
from __future__ import annotations

from dataclasses import dataclass

from .content import PLACEHOLDER_TRANSCRIPTION, SPEAKING_PROMPT
from .feedback import FeedbackClient, FeedbackResult, build_prompt
from .panel import Panel
from .store import DocumentStore, SPEAKING_RESULTS
from .tts import MediaError

MAX_AUDIO_BYTES = 10 * 1024 * 1024


@dataclass(frozen=True)
class SpeakingAttempt:
    transcribed_text: str
    feedback: FeedbackResult
    saved: bool

    def to_dict(self) -> dict:
        return {
            "transcribed_text": self.transcribed_text,
            "feedback": self.feedback.text,
            "ok": self.feedback.ok,
            "saved": self.saved,
        }


class SpeakingPanel(Panel):
    """
    Record an answer to the prompt and get feedback on it.

    Transcription is a fixed stand-in text; the feedback request uses that
    text no matter what audio was captured.
    """

    name = "speaking"

    def __init__(self, store: DocumentStore, uid: str, display_name: str = "",
                 feedback: FeedbackClient | None = None, prompt: str = SPEAKING_PROMPT):
        super().__init__(store, uid, display_name)
        self.feedback_client = feedback
        self.prompt = prompt
        self.is_recording = False
        self.is_processing = False
        self.audio: bytes | None = None
        self.transcribed_text: str | None = None
        self.last_attempt: SpeakingAttempt | None = None

    @property
    def is_busy(self) -> bool:
        return self.is_recording or self.is_processing

    def start_recording(self) -> None:
        if self.is_busy:
            raise MediaError("a recording is already in progress")
        self.audio = None
        self.transcribed_text = None
        self.is_recording = True

    def stop_recording(self, blob: bytes | None) -> str:
        """Take the captured audio and return its transcription."""
        self.is_recording = False
        if not blob:
            raise MediaError("no audio was captured; check your microphone")
        if len(blob) > MAX_AUDIO_BYTES:
            raise MediaError("recording is too long")
        self.audio = bytes(blob)
        self.transcribed_text = PLACEHOLDER_TRANSCRIPTION
        return self.transcribed_text

    def request_feedback(self) -> SpeakingAttempt:
        if self.transcribed_text is None:
            raise MediaError("record an answer first")
        if self.feedback_client is None:
            raise RuntimeError("no feedback client configured")
        if self.is_processing:
            raise MediaError("feedback is already being prepared")

        self.is_processing = True
        try:
            result = self.feedback_client.get_feedback(build_prompt(self.transcribed_text, self.prompt))
        finally:
            self.is_processing = False

        doc_id = None
        if result.ok:
            doc_id = self._record(SPEAKING_RESULTS, {
                "transcribedText": self.transcribed_text,
                "feedback": result.text,
            })
        self.last_attempt = SpeakingAttempt(
            transcribed_text=self.transcribed_text, feedback=result, saved=doc_id is not None,
        )
        return self.last_attempt

    def submit(self, blob: bytes | None) -> SpeakingAttempt:
        """One full turn: capture -> transcription -> feedback."""
        self.start_recording()
        self.stop_recording(blob)
        return self.request_feedback()

    def close(self) -> None:
        self.is_recording = False
        self.audio = None
        super().close()
