# englishpath/tts.py
from __future__ import annotations

import io
import logging
from xml.sax.saxutils import escape

import requests
from gtts import gTTS
from gtts.tts import gTTSError

log = logging.getLogger(__name__)

AZ_FORMAT = "audio-16khz-128kbitrate-mono-mp3"


class MediaError(Exception):
    """Speech playback or audio capture could not be completed."""


class SpeechSynthesizer:
    """
    Text-to-speech for literal strings, MP3 out.

    provider="azure" uses an Azure neural voice (key + region or endpoint);
    anything else uses gTTS.
    """

    def __init__(self, provider: str = "gtts", lang: str = "en", voice: str = "en-US-JennyNeural",
                 azure_key: str | None = None, azure_region: str | None = None,
                 azure_endpoint: str | None = None, http: requests.Session | None = None,
                 timeout: float = 20):
        self.provider = (provider or "gtts").lower()
        self.lang = lang
        self.voice = voice
        self.azure_key = azure_key
        self.azure_region = azure_region
        self.azure_endpoint = azure_endpoint
        self.http = http or requests.Session()
        self.timeout = timeout

    def synthesize(self, text: str) -> bytes:
        text = (text or "").strip()
        if not text:
            raise MediaError("nothing to say")
        if self.provider == "azure":
            return self._azure(text)
        return self._gtts(text)

    def _gtts(self, text: str) -> bytes:
        buf = io.BytesIO()
        try:
            gTTS(text=text, lang=self.lang, slow=False).write_to_fp(buf)
        except (gTTSError, AssertionError, ValueError) as e:
            log.warning("gTTS synthesis failed: %s", e)
            raise MediaError("speech playback is unavailable right now") from e
        return buf.getvalue()

    def _azure(self, text: str) -> bytes:
        if not (self.azure_key and (self.azure_region or self.azure_endpoint)):
            raise MediaError("azure_tts_misconfigured")

        url = (
            self.azure_endpoint.rstrip("/") + "/cognitiveservices/v1"
            if self.azure_endpoint
            else f"https://{self.azure_region}.tts.speech.microsoft.com/cognitiveservices/v1"
        )
        ssml = f"""<speak version='1.0' xml:lang='en-US'>
  <voice name='{self.voice}'>{escape(text)}</voice>
</speak>"""
        headers = {
            "Ocp-Apim-Subscription-Key": self.azure_key,
            "Content-Type": "application/ssml+xml",
            "X-Microsoft-OutputFormat": AZ_FORMAT,
            "User-Agent": "EnglishPath/1.0",
        }
        try:
            r = self.http.post(url, headers=headers, data=ssml.encode("utf-8"), timeout=self.timeout)
            r.raise_for_status()
        except requests.RequestException as e:
            log.warning("Azure TTS failed: %s", e)
            raise MediaError("speech playback is unavailable right now") from e
        return r.content

    def close(self) -> None:
        self.http.close()
