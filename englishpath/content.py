# englishpath/content.py
# Static curriculum. List order is the lesson sequence; ids are what the
# progress record stores, so renaming or reordering ids moves learners.
from __future__ import annotations

from dataclasses import dataclass, asdict


@dataclass(frozen=True)
class Lesson:
    id: str
    title: str
    description: str

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass(frozen=True)
class VocabularyEntry:
    word: str
    definition: str
    example: str

    def to_dict(self) -> dict:
        return asdict(self)


# ── Lessons ────────────────────────────────────────────────────────────────
LESSONS = [
    Lesson("lesson-1", "Greetings & Introductions",
           "Say hello, introduce yourself and ask someone's name."),
    Lesson("lesson-2", "Daily Routines",
           "Talk about what you do every day using the present simple."),
    Lesson("lesson-3", "Food & Ordering",
           "Order a meal at a restaurant and talk about the food you like."),
    Lesson("lesson-4", "Travel & Directions",
           "Ask for and give directions, buy a ticket, check into a hotel."),
    Lesson("lesson-5", "Work & Study",
           "Describe your job or studies and make plans with colleagues."),
]

# ── Vocabulary ─────────────────────────────────────────────────────────────
VOCABULARY = [
    VocabularyEntry("abundant", "Existing in large quantities; more than enough.",
                    "Fresh fruit is abundant in the summer market."),
    VocabularyEntry("benevolent", "Kind and generous; wanting to help others.",
                    "The benevolent neighbour offered to carry our bags."),
    VocabularyEntry("candid", "Honest and direct, even when the truth is uncomfortable.",
                    "She gave a candid answer about her mistakes."),
    VocabularyEntry("diligent", "Showing care and steady effort in one's work.",
                    "A diligent student reviews her notes every evening."),
    VocabularyEntry("eloquent", "Fluent and persuasive in speaking or writing.",
                    "His eloquent speech moved the whole audience."),
    VocabularyEntry("frugal", "Careful not to waste money or resources.",
                    "They lived a frugal life and saved for a house."),
    VocabularyEntry("gregarious", "Fond of company; sociable.",
                    "Gregarious people enjoy meeting new friends at parties."),
    VocabularyEntry("hesitant", "Slow to act or speak because of doubt.",
                    "He was hesitant to raise his hand in class."),
    VocabularyEntry("meticulous", "Paying very close attention to detail.",
                    "The meticulous editor checked every comma."),
    VocabularyEntry("resilient", "Able to recover quickly from difficulties.",
                    "Children are often more resilient than adults expect."),
]

# ── Dictation ──────────────────────────────────────────────────────────────
DICTATION_SENTENCES = [
    "The quick brown fox jumps over the lazy dog.",
    "She sells seashells by the seashore.",
    "I would like a cup of coffee, please.",
    "Could you tell me where the train station is?",
    "We are going to the park this afternoon.",
    "My brother works at a hospital in the city.",
]

# ── Speaking ───────────────────────────────────────────────────────────────
SPEAKING_PROMPT = "Describe your favourite hobby and explain why you enjoy it."

# Stand-in for speech-to-text; feedback is requested on this text whatever was recorded.
PLACEHOLDER_TRANSCRIPTION = (
    "My favourite hobby is reading books because it helps me relax and learn new words."
)
