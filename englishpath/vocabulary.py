# englishpath/vocabulary.py
from __future__ import annotations

from typing import Sequence

from .content import VOCABULARY, VocabularyEntry
from .panel import Panel
from .store import DocumentStore
from .tts import MediaError, SpeechSynthesizer


class VocabularyPanel(Panel):
    name = "vocabulary"

    def __init__(self, store: DocumentStore, uid: str, display_name: str = "",
                 speech: SpeechSynthesizer | None = None,
                 entries: Sequence[VocabularyEntry] = VOCABULARY):
        super().__init__(store, uid, display_name)
        self.speech = speech
        self.entries = list(entries)
        self.is_playing = False

    def search(self, query: str | None = None) -> list[VocabularyEntry]:
        q = (query or "").strip().lower()
        if not q:
            return list(self.entries)
        return [e for e in self.entries if q in e.word.lower() or q in e.definition.lower()]

    def lookup(self, word: str) -> VocabularyEntry | None:
        w = (word or "").strip().lower()
        for e in self.entries:
            if e.word.lower() == w:
                return e
        return None

    def speak(self, word: str) -> bytes:
        entry = self.lookup(word)
        if entry is None:
            raise KeyError(word)
        if self.speech is None:
            raise MediaError("speech playback is not available")
        self.is_playing = True
        try:
            return self.speech.synthesize(entry.word)
        finally:
            self.is_playing = False

    def close(self) -> None:
        self.is_playing = False
        super().close()
