import pytest

from media_resolver_api.errors import InvalidUrlError
from media_resolver_api.models import Platform
from media_resolver_api.services.url_router import (
    classify,
    clean_url,
    extract_identifier,
    extract_url,
    route_url,
    validate,
)


@pytest.mark.parametrize(
    "url",
    [
        "https://www.instagram.com/p/ABC123/",
        "https://instagram.com/p/Cx_9-Yz/?igsh=abc",
        "http://www.instagram.com/p/DEaDjHLtHwA",
    ],
)
def test_instagram_post_classifies_and_validates(url):
    assert classify(url) == Platform.INSTAGRAM
    assert validate(url, Platform.INSTAGRAM) is True


def test_classify_starmaker_domains():
    assert classify("https://m.starmakerstudios.com/d/playrecording?recordingId=987654") == Platform.STARMAKER
    assert classify("https://www.starmaker.co/share?recordingId=1") == Platform.STARMAKER


def test_classify_youtube_domains():
    assert classify("https://www.youtube.com/watch?v=dQw4w9WgXcQ") == Platform.YOUTUBE
    assert classify("https://youtu.be/dQw4w9WgXcQ") == Platform.YOUTUBE


@pytest.mark.parametrize(
    "url",
    ["https://www.example.com/video/123", "https://tiktok.com/@a/video/1", "", "not a url"],
)
def test_unknown_domain_classifies_none(url):
    assert classify(url) is None


def test_unknown_domain_routes_to_invalid_url():
    with pytest.raises(InvalidUrlError, match="Unsupported URL"):
        route_url("https://www.example.com/video/123")


def test_validate_instagram_rejects_profile_pages():
    assert validate("https://www.instagram.com/someuser/", Platform.INSTAGRAM) is False
    assert validate("https://www.instagram.com/reels/Cabc123/", Platform.INSTAGRAM) is True
    assert validate("https://www.instagram.com/stories/someuser/3141592653589793/", Platform.INSTAGRAM) is True


def test_validate_instagram_story_needs_numeric_id():
    assert validate("https://www.instagram.com/stories/someuser/", Platform.INSTAGRAM) is False
    assert validate("https://www.instagram.com/stories/someuser/highlights/", Platform.INSTAGRAM) is False


def test_validate_starmaker_requires_numeric_recording_id():
    assert validate("https://m.starmakerstudios.com/d/playrecording?recordingId=987654", Platform.STARMAKER)
    assert not validate("https://m.starmakerstudios.com/d/playrecording?recordingId=abc", Platform.STARMAKER)
    assert not validate("https://m.starmakerstudios.com/d/playrecording", Platform.STARMAKER)


def test_validate_youtube_needs_a_path():
    assert validate("https://www.youtube.com/watch?v=dQw4w9WgXcQ", Platform.YOUTUBE)
    assert validate("youtu.be/dQw4w9WgXcQ", Platform.YOUTUBE)
    assert not validate("https://www.youtube.com/", Platform.YOUTUBE)


def test_validate_never_raises_on_garbage():
    assert validate("http://[::1", Platform.STARMAKER) is False
    assert validate(None, Platform.INSTAGRAM) is False
    assert validate("https://www.instagram.com/p/abc/", None) is False


@pytest.mark.parametrize(
    "url,expected",
    [
        ("https://www.instagram.com/p/ABC123/", "ABC123"),
        ("https://www.instagram.com/reel/DEaDjHLtHwA/?utm_source=ig", "DEaDjHLtHwA"),
        ("https://www.instagram.com/reels/Cabc_-1/", "Cabc_-1"),
        ("https://www.instagram.com/stories/someuser/3141592653589793/", "3141592653589793"),
    ],
)
def test_extract_instagram_identifier(url, expected):
    assert extract_identifier(url, Platform.INSTAGRAM) == expected


def test_extract_identifier_is_idempotent():
    code = extract_identifier("https://www.instagram.com/reel/DEaDjHLtHwA/?igsh=x", Platform.INSTAGRAM)
    again = extract_identifier(f"https://www.instagram.com/p/{code}/", Platform.INSTAGRAM)
    assert again == code

    rec = extract_identifier("https://m.starmakerstudios.com/d/playrecording?app=sm&recordingId=987654", Platform.STARMAKER)
    assert extract_identifier(f"https://m.starmakerstudios.com/d/playrecording?recordingId={rec}", Platform.STARMAKER) == rec


def test_extract_starmaker_identifier():
    url = "https://m.starmakerstudios.com/d/playrecording?app=sm&recordingId=987654&is_convert=true"
    assert extract_identifier(url, Platform.STARMAKER) == "987654"


def test_extract_youtube_identifier_is_full_url():
    url = "https://www.youtube.com/watch?v=dQw4w9WgXcQ"
    assert extract_identifier(url, Platform.YOUTUBE) == url


def test_extract_identifier_returns_none_on_unmatched_shape():
    assert extract_identifier("https://www.instagram.com/stories/someuser/", Platform.INSTAGRAM) is None


def test_route_story_without_id_is_invalid():
    with pytest.raises(InvalidUrlError, match="valid Instagram"):
        route_url("https://www.instagram.com/stories/someuser/")


def test_route_url_extracts_from_pasted_text():
    result = route_url("Check this out! https://www.instagram.com/reel/DEaDjHLtHwA/ so good")
    assert result.platform == Platform.INSTAGRAM
    assert result.source_id == "DEaDjHLtHwA"
    assert result.url == "https://www.instagram.com/reel/DEaDjHLtHwA/"


def test_extract_url_falls_back_to_text():
    assert extract_url("  youtu.be/abc  ") == "youtu.be/abc"
    assert extract_url("") == ""


def test_clean_url_drops_query_and_fragment():
    assert clean_url("https://www.instagram.com/p/ABC123/?igsh=xyz#frag") == "https://www.instagram.com/p/ABC123/"
    assert clean_url("not a url") == "not a url"
