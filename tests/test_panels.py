import pytest

from englishpath.content import DICTATION_SENTENCES, LESSONS, PLACEHOLDER_TRANSCRIPTION
from englishpath.dictation import DictationPanel
from englishpath.feedback import FeedbackClient, SOFT_FAILURE_MESSAGE
from englishpath.lessons import LessonsPanel
from englishpath.speaking import SpeakingPanel
from englishpath.store import (
    StoreError, DICTATION_RESULTS, PROGRESS, PROGRESS_DOC, SPEAKING_RESULTS,
)
from englishpath.tts import MediaError
from englishpath.vocabulary import VocabularyPanel

from conftest import FakeHttp, FakeResponse, FakeSpeech


@pytest.fixture
def failing_store(store, monkeypatch):
    def fail(*args, **kwargs):
        raise StoreError("write failed")

    monkeypatch.setattr(store, "add", fail)
    monkeypatch.setattr(store, "set", fail)
    return store


# ---------------------------
# Lessons
# ---------------------------

def test_lessons_panel_follows_progress_record(store):
    changes = []
    with LessonsPanel(store, "u1", "Jane", on_change=changes.append) as panel:
        assert panel.mounted
        assert panel.progress.next_index == 0

        assert panel.complete(LESSONS[1].id)
        assert panel.progress.next_index == 2

        # a write from elsewhere replaces local state wholesale
        store.set("u1", PROGRESS, PROGRESS_DOC, {"lastCompletedLessonId": LESSONS[0].id}, merge=True)
        assert panel.progress.next_index == 1

    assert [c.next_index for c in changes] == [0, 2, 1]
    assert not panel.mounted
    assert store.subscriber_count("u1", PROGRESS, PROGRESS_DOC) == 0


def test_complete_writes_progress_record(store):
    with LessonsPanel(store, "u1", "Jane") as panel:
        panel.complete(LESSONS[0].id)
    record = store.get("u1", PROGRESS, PROGRESS_DOC)
    assert record["lastCompletedLessonId"] == LESSONS[0].id
    assert record["displayName"] == "Jane"
    assert record["completedAt"]


def test_complete_unknown_lesson(store):
    with LessonsPanel(store, "u1") as panel:
        with pytest.raises(KeyError):
            panel.complete("lesson-99")


def test_complete_write_failure_is_logged_only(failing_store):
    panel = LessonsPanel(failing_store, "u1")
    assert panel.complete(LESSONS[0].id) is False


def test_snapshot_when_all_lessons_done(store):
    store.set("u1", PROGRESS, PROGRESS_DOC, {"lastCompletedLessonId": LESSONS[-1].id})
    with LessonsPanel(store, "u1") as panel:
        snap = panel.snapshot()
    assert snap["progress"]["finished"]
    assert snap["next_lesson"] is None
    assert snap["message"]
    assert all(lesson["completed"] for lesson in snap["lessons"])
    assert not any(lesson["current"] for lesson in snap["lessons"])


def test_closed_panel_ignores_late_updates(store):
    panel = LessonsPanel(store, "u1").mount()
    panel.close()
    store.set("u1", PROGRESS, PROGRESS_DOC, {"lastCompletedLessonId": LESSONS[2].id})
    assert panel.progress.next_index == 0
    with pytest.raises(RuntimeError):
        panel.mount()


# ---------------------------
# Dictation
# ---------------------------

def test_dictation_check_correct_and_recorded(store):
    panel = DictationPanel(store, "u1", "Jane")
    result = panel.check(DICTATION_SENTENCES[0].upper().rstrip("."))
    assert result.is_correct
    assert result.saved
    rows = store.list_collection("u1", DICTATION_RESULTS)
    assert rows[0]["isCorrect"] is True
    assert rows[0]["sentence"] == DICTATION_SENTENCES[0]
    assert rows[0]["displayName"] == "Jane"


def test_dictation_check_incorrect_reveals_sentence(store):
    panel = DictationPanel(store, "u1", index=2)
    result = panel.check("something else")
    assert not result.is_correct
    assert DICTATION_SENTENCES[2] in result.message


def test_dictation_write_failure_still_returns_verdict(failing_store):
    result = DictationPanel(failing_store, "u1").check(DICTATION_SENTENCES[0])
    assert result.is_correct
    assert not result.saved


def test_dictation_next_wraps(store):
    panel = DictationPanel(store, "u1", sentences=["one.", "two."])
    assert panel.next() == "two."
    assert panel.next() == "one."


def test_dictation_play(store):
    speech = FakeSpeech()
    panel = DictationPanel(store, "u1", speech=speech, index=1)
    assert panel.play().startswith(b"ID3")
    assert speech.spoken == [DICTATION_SENTENCES[1]]
    assert not panel.is_playing


def test_dictation_play_failure(store):
    panel = DictationPanel(store, "u1", speech=FakeSpeech(fail=True))
    with pytest.raises(MediaError):
        panel.play()
    assert not panel.is_playing


def test_dictation_needs_sentences(store):
    with pytest.raises(ValueError):
        DictationPanel(store, "u1", sentences=[])


# ---------------------------
# Speaking
# ---------------------------

def _feedback(response=None, exc=None):
    return FeedbackClient("https://feedback.invalid", http=FakeHttp(response, exc))


def test_speaking_uses_placeholder_transcription(store):
    client = _feedback()
    panel = SpeakingPanel(store, "u1", "Jane", feedback=client)
    attempt = panel.submit(b"RIFF....audio")
    assert attempt.transcribed_text == PLACEHOLDER_TRANSCRIPTION
    assert attempt.feedback.ok
    assert attempt.saved
    sent = client.http.calls[0][1]["json"]["contents"][0]["parts"][0]["text"]
    assert PLACEHOLDER_TRANSCRIPTION in sent

    rows = store.list_collection("u1", SPEAKING_RESULTS)
    assert rows[0]["transcribedText"] == PLACEHOLDER_TRANSCRIPTION
    assert rows[0]["feedback"] == attempt.feedback.text


def test_speaking_empty_audio_is_media_error(store):
    panel = SpeakingPanel(store, "u1", feedback=_feedback())
    with pytest.raises(MediaError):
        panel.submit(b"")
    assert not panel.is_busy


def test_speaking_soft_failure_not_recorded(store):
    panel = SpeakingPanel(store, "u1", feedback=_feedback(FakeResponse({"candidates": []})))
    attempt = panel.submit(b"audio")
    assert not attempt.feedback.ok
    assert attempt.feedback.text == SOFT_FAILURE_MESSAGE
    assert not attempt.saved
    assert store.list_collection("u1", SPEAKING_RESULTS) == []


def test_speaking_overlap_prevented(store):
    panel = SpeakingPanel(store, "u1", feedback=_feedback())
    panel.start_recording()
    with pytest.raises(MediaError):
        panel.start_recording()


def test_speaking_feedback_needs_recording(store):
    with pytest.raises(MediaError):
        SpeakingPanel(store, "u1", feedback=_feedback()).request_feedback()


def test_speaking_write_failure_is_logged_only(failing_store):
    attempt = SpeakingPanel(failing_store, "u1", feedback=_feedback()).submit(b"audio")
    assert attempt.feedback.ok
    assert not attempt.saved


def test_speaking_close_drops_audio(store):
    panel = SpeakingPanel(store, "u1", feedback=_feedback())
    panel.start_recording()
    panel.stop_recording(b"audio")
    panel.close()
    assert panel.audio is None and panel.closed


# ---------------------------
# Vocabulary
# ---------------------------

def test_vocabulary_search(store):
    panel = VocabularyPanel(store, "u1")
    assert len(panel.search()) == len(panel.entries)
    assert [e.word for e in panel.search("FRUG")] == ["frugal"]
    assert [e.word for e in panel.search("sociable")] == ["gregarious"]
    assert panel.search("zzz") == []


def test_vocabulary_speak(store):
    speech = FakeSpeech()
    panel = VocabularyPanel(store, "u1", speech=speech)
    assert panel.speak("Candid")
    assert speech.spoken == ["candid"]
    with pytest.raises(KeyError):
        panel.speak("unknownword")
