# englishpath/dictation.py
from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence

from .answers import is_match
from .content import DICTATION_SENTENCES
from .panel import Panel
from .store import DocumentStore, DICTATION_RESULTS
from .tts import MediaError, SpeechSynthesizer


@dataclass(frozen=True)
class DictationCheck:
    sentence: str
    user_answer: str
    is_correct: bool
    saved: bool

    @property
    def message(self) -> str:
        if self.is_correct:
            return "Correct! Well done."
        return f'Not quite. The correct sentence is: "{self.sentence}"'

    def to_dict(self) -> dict:
        return {
            "sentence": self.sentence,
            "user_answer": self.user_answer,
            "is_correct": self.is_correct,
            "saved": self.saved,
            "message": self.message,
        }


class DictationPanel(Panel):
    """Listen to a sentence, type it, check it."""

    name = "dictation"

    def __init__(self, store: DocumentStore, uid: str, display_name: str = "",
                 speech: SpeechSynthesizer | None = None,
                 sentences: Sequence[str] = DICTATION_SENTENCES, index: int = 0):
        super().__init__(store, uid, display_name)
        if not sentences:
            raise ValueError("dictation needs at least one sentence")
        self.speech = speech
        self.sentences = list(sentences)
        self.index = index % len(self.sentences)
        self.is_playing = False
        self.last_check: DictationCheck | None = None

    @property
    def current(self) -> str:
        return self.sentences[self.index]

    def next(self) -> str:
        self.index = (self.index + 1) % len(self.sentences)
        self.last_check = None
        return self.current

    def play(self) -> bytes:
        if self.speech is None:
            raise MediaError("speech playback is not available")
        if self.is_playing:
            raise MediaError("already playing")
        self.is_playing = True
        try:
            return self.speech.synthesize(self.current)
        finally:
            self.is_playing = False

    def check(self, answer: str) -> DictationCheck:
        answer = answer or ""
        correct = is_match(self.current, answer)
        doc_id = self._record(DICTATION_RESULTS, {
            "sentence": self.current,
            "userAnswer": answer,
            "isCorrect": correct,
        })
        self.last_check = DictationCheck(
            sentence=self.current, user_answer=answer, is_correct=correct, saved=doc_id is not None,
        )
        return self.last_check

    def close(self) -> None:
        # drop any playback still marked in flight
        self.is_playing = False
        super().close()
