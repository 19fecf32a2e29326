import json

import pytest
import requests

from recipe_utils.extraction.config import ExtractionConfig
from recipe_utils.extraction.keys import (
    SUPADATA_API_KEY,
    ApiKeyManager,
    EnvironmentKeyStore,
    MemoryKeyStore,
    validate_api_key,
)
from recipe_utils.extraction.platforms import (
    VideoPlatform,
    detect_platform,
    extract_youtube_video_id,
    is_video_url,
)
from recipe_utils.extraction.transcripts import (
    SupadataTranscriptProvider,
    TranscriptError,
    VideoTranscriptService,
    YouTubeTranscriptProvider,
    calculate_transcript_delay,
    get_transcript_provider,
    parse_caption_xml,
)

VALID_KEY = "sd_live_0123456789"
TIKTOK_URL = "https://www.tiktok.com/@chef/video/7300000000000000000"

CAPTION_XML = """<?xml version="1.0" encoding="utf-8" ?>
<transcript>
<text start="0.0" dur="2.1">Preheat the oven</text>
<text start="2.1" dur="3.0">to 350 degrees.
Then mix the flour</text>
<text start="5.1" dur="1.0">   </text>
<text start="6.1" dur="2.0">and sugar &amp; butter.</text>
</transcript>
"""


def watch_page(tracks):
    return f'<script>var ytInitialPlayerResponse = {{"captions": {{"captionTracks": {json.dumps(tracks)}, "x": 1}}}};</script>'


@pytest.fixture
def key_store():
    return MemoryKeyStore({SUPADATA_API_KEY: VALID_KEY})


# --- Platforms ---


@pytest.mark.parametrize(
    "url, platform",
    [
        ("https://www.youtube.com/watch?v=abc123", VideoPlatform.YOUTUBE),
        ("https://m.youtube.com/shorts/abc123", VideoPlatform.YOUTUBE),
        ("https://youtu.be/abc123", VideoPlatform.YOUTUBE),
        (TIKTOK_URL, VideoPlatform.TIKTOK),
        ("https://vm.tiktok.com/ZM123/", VideoPlatform.TIKTOK),
        ("https://www.instagram.com/reel/Cabc123/", VideoPlatform.INSTAGRAM),
        ("https://www.allrecipes.com/recipe/1/pancakes", VideoPlatform.UNKNOWN),
        ("not a url", VideoPlatform.UNKNOWN),
    ],
)
def test_detect_platform(url, platform):
    assert detect_platform(url) is platform
    assert is_video_url(url) is (platform is not VideoPlatform.UNKNOWN)


@pytest.mark.parametrize(
    "url, video_id",
    [
        ("https://www.youtube.com/watch?v=abc123", "abc123"),
        ("https://www.youtube.com/watch?feature=share&v=xyz789", "xyz789"),
        ("https://youtu.be/abc123?t=30", "abc123"),
        ("https://www.youtube.com/shorts/short42", "short42"),
        ("https://www.youtube.com/embed/emb99", "emb99"),
        ("https://www.youtube.com/channel/UC123", None),
        ("https://youtu.be/", None),
    ],
)
def test_extract_youtube_video_id(url, video_id):
    assert extract_youtube_video_id(url) == video_id


# --- Keys ---


@pytest.mark.parametrize(
    "api_key, valid",
    [(None, False), ("", False), ("short", False), ("  123456789  ", False), ("1234567890", True), (VALID_KEY, True)],
)
def test_validate_api_key(api_key, valid):
    assert validate_api_key(api_key) is valid


def test_api_key_manager():
    manager = ApiKeyManager(MemoryKeyStore())
    assert not manager.has_valid_key()

    manager.save(f"  {VALID_KEY}\n")
    assert manager.get() == VALID_KEY
    assert manager.has_valid_key()

    with pytest.raises(ValueError, match="Invalid API key format"):
        manager.save("abc")
    assert manager.get() == VALID_KEY

    manager.delete()
    assert manager.get() is None


def test_environment_key_store():
    store = EnvironmentKeyStore({"SUPADATA_API_KEY": VALID_KEY})
    assert store.get(SUPADATA_API_KEY) == VALID_KEY
    assert store.get("other_key") is None
    with pytest.raises(NotImplementedError):
        store.set(SUPADATA_API_KEY, VALID_KEY)


# --- Supadata ---


def supadata(session, key_store, sleeps=None, rng=None):
    return SupadataTranscriptProvider(
        VideoPlatform.TIKTOK,
        key_store=key_store,
        session=session,
        config=ExtractionConfig(),
        sleep=(sleeps.append if sleeps is not None else lambda delay: None),
        rng=rng,
    )


def test_supadata_segments(make_session, make_response, key_store):
    session = make_session(
        [make_response(200, {"transcript": [{"text": "Add the garlic"}, {"text": "then the oil"}]})]
    )
    assert supadata(session, key_store).get_transcript(TIKTOK_URL) == "Add the garlic then the oil"

    call = session.calls[0]
    assert call["method"] == "POST"
    assert call["url"] == ExtractionConfig().supadata_url
    assert call["headers"] == {"Authorization": f"Bearer {VALID_KEY}"}
    assert call["json"] == {"url": TIKTOK_URL}
    assert call["timeout"] == 20


def test_supadata_plain_text(make_session, make_response, key_store):
    session = make_session([make_response(200, {"text": "Whisk two eggs"})])
    assert supadata(session, key_store).get_transcript(TIKTOK_URL) == "Whisk two eggs"


@pytest.mark.parametrize("stored_key", [None, "short"])
def test_supadata_requires_key(make_session, stored_key):
    session = make_session([])
    store = MemoryKeyStore({SUPADATA_API_KEY: stored_key} if stored_key else {})

    with pytest.raises(TranscriptError, match="API key required") as exc_info:
        supadata(session, store).get_transcript(TIKTOK_URL)

    assert exc_info.value.retryable is False
    assert session.calls == []


@pytest.mark.parametrize(
    "status, retryable",
    [(401, False), (403, False), (404, False), (400, False), (429, True), (500, True), (503, True), (507, True)],
)
def test_supadata_status_errors(make_session, make_response, key_store, status, retryable):
    # Retryable statuses are retried up to three times before giving up
    attempts = 4 if retryable else 1
    session = make_session([make_response(status)] * attempts)
    sleeps = []

    with pytest.raises(TranscriptError) as exc_info:
        supadata(session, key_store, sleeps).get_transcript(TIKTOK_URL)

    assert exc_info.value.retryable is retryable
    assert len(session.calls) == attempts
    assert len(sleeps) == attempts - 1


def test_supadata_retry_then_success(make_session, make_response, key_store):
    session = make_session(
        [make_response(429), requests.exceptions.ConnectionError("reset"), make_response(200, {"text": "Stir"})]
    )
    sleeps = []

    provider = supadata(session, key_store, sleeps, rng=lambda: 0.999)
    assert provider.get_transcript(TIKTOK_URL) == "Stir"
    # Jitter adds up to one base delay, not a fraction of the exponential delay
    assert sleeps == pytest.approx([1.999, 2.999])


def test_supadata_timeout(make_session, key_store):
    session = make_session([requests.exceptions.Timeout()] * 4)

    with pytest.raises(TranscriptError, match="timed out"):
        supadata(session, key_store).get_transcript(TIKTOK_URL)
    assert len(session.calls) == 4


@pytest.mark.parametrize("body", [{"transcript": []}, {"text": "  "}])
def test_supadata_empty_transcript(make_session, make_response, key_store, body):
    session = make_session([make_response(200, body)])
    with pytest.raises(TranscriptError, match="No transcript content"):
        supadata(session, key_store).get_transcript(TIKTOK_URL)


def test_supadata_unexpected_body(make_session, make_response, key_store):
    session = make_session([make_response(200, {"segments": "?"})])
    with pytest.raises(TranscriptError, match="Failed to parse"):
        supadata(session, key_store).get_transcript(TIKTOK_URL)


@pytest.mark.parametrize(
    "outcome, expected",
    [
        (401, (False, "Invalid API key.")),
        (404, (True, None)),
        (200, (True, None)),
    ],
)
def test_supadata_test_api_key(make_session, make_response, outcome, expected):
    session = make_session([make_response(outcome)])
    provider = supadata(session, MemoryKeyStore())
    assert provider.test_api_key(VALID_KEY) == expected
    assert session.calls[0]["timeout"] == 10


def test_supadata_test_api_key_offline(make_session):
    provider = supadata(make_session([requests.exceptions.ConnectionError()]), MemoryKeyStore())
    valid, message = provider.test_api_key(VALID_KEY)
    assert valid is False
    assert "internet connection" in message


def test_supadata_test_api_key_too_short(make_session):
    session = make_session([])
    assert supadata(session, MemoryKeyStore()).test_api_key("abc")[0] is False
    assert session.calls == []


def test_supadata_rejects_youtube():
    with pytest.raises(ValueError):
        SupadataTranscriptProvider(VideoPlatform.YOUTUBE)


# --- YouTube ---


def youtube(session, sleeps=None):
    return YouTubeTranscriptProvider(
        session=session,
        config=ExtractionConfig(),
        sleep=(sleeps.append if sleeps is not None else lambda delay: None),
    )


def test_parse_caption_xml():
    assert parse_caption_xml(CAPTION_XML) == (
        "Preheat the oven to 350 degrees. Then mix the flour and sugar & butter."
    )


def test_youtube_prefers_english(make_session, make_response):
    tracks = [
        {"baseUrl": "https://youtube.test/captions?lang=es", "languageCode": "es"},
        {"baseUrl": "https://youtube.test/captions?lang=en", "languageCode": "en-US"},
    ]
    session = make_session([make_response(200, text=watch_page(tracks)), make_response(200, text=CAPTION_XML)])

    transcript = youtube(session).get_transcript("https://youtu.be/abc123")

    assert transcript.startswith("Preheat the oven")
    assert session.calls[0]["url"] == "https://www.youtube.com/watch?v=abc123"
    assert "User-Agent" in session.calls[0]["headers"]
    assert session.calls[0]["timeout"] == 15
    assert session.calls[1]["url"] == "https://youtube.test/captions?lang=en"


def test_youtube_falls_back_to_first_track(make_session, make_response):
    tracks = [
        {"baseUrl": "https://youtube.test/captions?lang=fr", "languageCode": "fr"},
        {"baseUrl": "https://youtube.test/captions?lang=de", "languageCode": "de"},
    ]
    session = make_session([make_response(200, text=watch_page(tracks)), make_response(200, text=CAPTION_XML)])

    youtube(session).get_transcript("https://www.youtube.com/watch?v=abc123")

    assert session.calls[1]["url"] == "https://youtube.test/captions?lang=fr"


@pytest.mark.parametrize("page", ["<html>no captions here</html>", watch_page([])])
def test_youtube_without_captions(make_session, make_response, page):
    session = make_session([make_response(200, text=page)])

    with pytest.raises(TranscriptError, match="No captions available") as exc_info:
        youtube(session).get_transcript("https://youtu.be/abc123")

    assert exc_info.value.retryable is False
    assert len(session.calls) == 1


def test_youtube_invalid_url(make_session):
    session = make_session([])
    with pytest.raises(TranscriptError, match="video ID"):
        youtube(session).get_transcript("https://www.youtube.com/channel/UC123")
    assert session.calls == []


def test_youtube_retries_server_errors(make_session, make_response):
    tracks = [{"baseUrl": "https://youtube.test/captions", "languageCode": "en"}]
    session = make_session(
        [make_response(503), make_response(200, text=watch_page(tracks)), make_response(200, text=CAPTION_XML)]
    )
    sleeps = []

    assert youtube(session, sleeps).get_transcript("https://youtu.be/abc123")
    assert len(sleeps) == 1


def test_youtube_client_error_not_retried(make_session, make_response):
    session = make_session([make_response(404)])
    with pytest.raises(TranscriptError, match="HTTP 404"):
        youtube(session).get_transcript("https://youtu.be/abc123")
    assert len(session.calls) == 1


# --- Dispatch ---


def test_get_transcript_provider():
    assert isinstance(get_transcript_provider(VideoPlatform.YOUTUBE), YouTubeTranscriptProvider)
    provider = get_transcript_provider(VideoPlatform.INSTAGRAM)
    assert isinstance(provider, SupadataTranscriptProvider)
    assert provider.platform is VideoPlatform.INSTAGRAM

    with pytest.raises(TranscriptError, match="Unsupported"):
        get_transcript_provider(VideoPlatform.UNKNOWN)


def test_transcript_service_dispatches_by_url(make_session, make_response, key_store):
    session = make_session([make_response(200, {"text": "Fold in the cheese"})])
    service = VideoTranscriptService(key_store=key_store, session=session, sleep=lambda delay: None)

    assert service.get_transcript(TIKTOK_URL) == "Fold in the cheese"
    assert session.calls[0]["method"] == "POST"


def test_transcript_service_uses_given_platform(make_session, make_response):
    tracks = [{"baseUrl": "https://youtube.test/captions", "languageCode": "en"}]
    session = make_session(
        [make_response(200, text=watch_page(tracks)), make_response(200, text=CAPTION_XML)]
    )
    service = VideoTranscriptService(session=session, sleep=lambda delay: None)

    transcript = service.get_transcript(
        "https://www.youtube-nocookie.com/watch?v=abc123", VideoPlatform.YOUTUBE
    )

    assert transcript.startswith("Preheat the oven")
    assert session.calls[0]["method"] == "GET"


def test_transcript_service_passes_rng(make_session, make_response, key_store):
    session = make_session([make_response(503), make_response(200, {"text": "Stir"})])
    sleeps = []
    service = VideoTranscriptService(
        key_store=key_store, session=session, sleep=sleeps.append, rng=lambda: 0.0
    )

    assert service.get_transcript(TIKTOK_URL) == "Stir"
    assert sleeps == [1.0]


@pytest.mark.parametrize(
    "attempt, jitter, expected",
    [(0, 0.0, 1.0), (0, 0.5, 1.5), (1, 0.0, 2.0), (2, 0.999, 4.999), (5, 0.0, 32.0)],
)
def test_calculate_transcript_delay(attempt, jitter, expected):
    # Uncapped, with jitter of up to one base delay
    assert calculate_transcript_delay(attempt, 1.0, rng=lambda: jitter) == pytest.approx(expected)
