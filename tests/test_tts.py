import pytest
import requests

from englishpath import tts
from englishpath.tts import MediaError, SpeechSynthesizer

from conftest import FakeHttp, FakeResponse


class StubGTTS:
    calls = []

    def __init__(self, text, lang, slow):
        StubGTTS.calls.append((text, lang, slow))

    def write_to_fp(self, fp):
        fp.write(b"ID3-gtts")


class FailingGTTS(StubGTTS):
    def write_to_fp(self, fp):
        raise tts.gTTSError("429 Too Many Requests")


class AudioResponse(FakeResponse):
    content = b"ID3-azure"


def test_gtts_provider(monkeypatch):
    StubGTTS.calls = []
    monkeypatch.setattr(tts, "gTTS", StubGTTS)
    out = SpeechSynthesizer(lang="en").synthesize("  Hello there  ")
    assert out == b"ID3-gtts"
    assert StubGTTS.calls == [("Hello there", "en", False)]


def test_gtts_failure_is_media_error(monkeypatch):
    monkeypatch.setattr(tts, "gTTS", FailingGTTS)
    with pytest.raises(MediaError):
        SpeechSynthesizer().synthesize("hello")


def test_empty_text_is_media_error():
    with pytest.raises(MediaError):
        SpeechSynthesizer().synthesize("   ")


def test_azure_provider_posts_escaped_ssml():
    http = FakeHttp(AudioResponse())
    synth = SpeechSynthesizer(provider="azure", azure_key="k", azure_region="westeurope", http=http)
    assert synth.synthesize("Fish & chips") == b"ID3-azure"

    url, kwargs = http.calls[0]
    assert url == "https://westeurope.tts.speech.microsoft.com/cognitiveservices/v1"
    assert kwargs["headers"]["Ocp-Apim-Subscription-Key"] == "k"
    assert b"Fish &amp; chips" in kwargs["data"]


def test_azure_endpoint_override():
    http = FakeHttp(AudioResponse())
    synth = SpeechSynthesizer(provider="azure", azure_key="k", azure_endpoint="https://speech.example/", http=http)
    synth.synthesize("hi")
    assert http.calls[0][0] == "https://speech.example/cognitiveservices/v1"


def test_azure_misconfigured():
    with pytest.raises(MediaError, match="misconfigured"):
        SpeechSynthesizer(provider="azure").synthesize("hi")


def test_azure_http_failure():
    http = FakeHttp(exc=requests.ConnectionError("down"))
    synth = SpeechSynthesizer(provider="azure", azure_key="k", azure_region="r", http=http)
    with pytest.raises(MediaError):
        synth.synthesize("hi")
