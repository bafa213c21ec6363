import requests

from englishpath.feedback import (
    FeedbackClient, SOFT_FAILURE_MESSAGE, build_payload, build_prompt, extract_text,
)

from conftest import FakeHttp, FakeResponse, GOOD_FEEDBACK

URL = "https://feedback.invalid/generate"


def test_payload_shape():
    assert build_payload("hi") == {"contents": [{"role": "user", "parts": [{"text": "hi"}]}]}


def test_prompt_mentions_text_and_topic():
    prompt = build_prompt("I like tea", "What do you drink?")
    assert "I like tea" in prompt
    assert "What do you drink?" in prompt


def test_extract_text():
    assert extract_text(GOOD_FEEDBACK).startswith("Great job")
    assert extract_text({}) is None
    assert extract_text({"candidates": []}) is None
    assert extract_text({"candidates": [{"content": {"parts": [{}]}}]}) is None
    assert extract_text(None) is None


def test_successful_feedback_posts_payload():
    http = FakeHttp()
    result = FeedbackClient(URL, api_key="k", http=http).get_feedback("prompt text")
    assert result.ok
    assert result.text.startswith("Great job")

    url, kwargs = http.calls[0]
    assert url == URL
    assert kwargs["params"] == {"key": "k"}
    assert kwargs["json"] == build_payload("prompt text")
    assert kwargs["timeout"] == 20


def test_missing_text_is_soft_failure():
    http = FakeHttp(FakeResponse({"candidates": []}))
    result = FeedbackClient(URL, http=http).get_feedback("p")
    assert not result.ok
    assert result.text == SOFT_FAILURE_MESSAGE


def test_http_error_is_soft_failure():
    http = FakeHttp(FakeResponse({"error": "quota"}, status=429))
    result = FeedbackClient(URL, http=http).get_feedback("p")
    assert result.to_dict() == {"ok": False, "feedback": SOFT_FAILURE_MESSAGE}


def test_network_error_is_soft_failure():
    http = FakeHttp(exc=requests.ConnectionError("no route"))
    assert not FeedbackClient(URL, http=http).get_feedback("p").ok


def test_non_json_is_soft_failure(caplog):
    http = FakeHttp(FakeResponse(bad_json=True))
    with caplog.at_level("WARNING", logger="englishpath.feedback"):
        assert not FeedbackClient(URL, http=http).get_feedback("p").ok
    assert "non-JSON" in caplog.text
    assert "unreachable" not in caplog.text


def test_no_retry_on_failure():
    http = FakeHttp(exc=requests.Timeout("slow"))
    FeedbackClient(URL, http=http).get_feedback("p")
    assert len(http.calls) == 1
