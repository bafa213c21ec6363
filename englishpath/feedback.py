# englishpath/feedback.py
"""
Remote generative feedback (Gemini ``generateContent``).

Request body::

    {"contents": [{"role": "user", "parts": [{"text": prompt}]}]}

The reply text is read from ``candidates[0].content.parts[0].text``. Anything
else (HTTP error, network error, non-JSON, missing path) comes back as a soft
failure carrying ``SOFT_FAILURE_MESSAGE`` so the caller can show it as-is.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass

import requests

log = logging.getLogger(__name__)

SOFT_FAILURE_MESSAGE = "Sorry, we couldn't get feedback right now. Please try again later."


@dataclass(frozen=True)
class FeedbackResult:
    ok: bool
    text: str

    def to_dict(self) -> dict:
        return {"ok": self.ok, "feedback": self.text}


def build_prompt(transcribed_text: str, topic: str | None = None) -> str:
    lines = [
        "You are a friendly English teacher helping a language learner practise speaking.",
    ]
    if topic:
        lines.append(f'The learner was asked: "{topic}"')
    lines += [
        f'The learner said: "{transcribed_text}"',
        "Give short, encouraging feedback on grammar, vocabulary and fluency,"
        " and suggest one improved version of what they said.",
    ]
    return "\n".join(lines)


def build_payload(prompt: str) -> dict:
    return {"contents": [{"role": "user", "parts": [{"text": prompt}]}]}


def extract_text(body) -> str | None:
    try:
        text = body["candidates"][0]["content"]["parts"][0]["text"]
    except (KeyError, IndexError, TypeError):
        return None
    return text if isinstance(text, str) and text.strip() else None


class FeedbackClient:
    def __init__(self, api_url: str, api_key: str = "", timeout: float = 20,
                 http: requests.Session | None = None):
        self.api_url = api_url
        self.api_key = api_key
        self.timeout = timeout
        self.http = http or requests.Session()

    def get_feedback(self, prompt: str) -> FeedbackResult:
        params = {"key": self.api_key} if self.api_key else None
        try:
            r = self.http.post(self.api_url, params=params, json=build_payload(prompt), timeout=self.timeout)
            r.raise_for_status()
            body = r.json()
        except requests.HTTPError as e:
            status = getattr(e.response, "status_code", None)
            log.warning("Feedback endpoint HTTP error (status=%s): %s", status, e)
            return FeedbackResult(ok=False, text=SOFT_FAILURE_MESSAGE)
        except requests.JSONDecodeError as e:
            # subclass of RequestException, so it goes first
            log.warning("Feedback endpoint returned non-JSON: %s", e)
            return FeedbackResult(ok=False, text=SOFT_FAILURE_MESSAGE)
        except requests.RequestException as e:
            log.warning("Feedback endpoint unreachable: %s", e)
            return FeedbackResult(ok=False, text=SOFT_FAILURE_MESSAGE)

        text = extract_text(body)
        if text is None:
            log.warning("Feedback response missing candidates[0].content.parts[0].text")
            return FeedbackResult(ok=False, text=SOFT_FAILURE_MESSAGE)
        return FeedbackResult(ok=True, text=text.strip())

    def close(self) -> None:
        self.http.close()
