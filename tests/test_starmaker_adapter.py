import httpx
import pytest

from media_resolver_api.errors import ResourceUnavailableError
from media_resolver_api.models import MediaKind, Platform
from media_resolver_api.services.adapters import get_adapter
from media_resolver_api.services.adapters.starmaker_adapter import StarMakerAdapter
from media_resolver_api.services.starmaker_service import (
    PRIMARY_CDN,
    SECONDARY_CDN,
    default_title,
    recording_url,
)

SHARE_URL = "https://m.starmakerstudios.com/d/playrecording?app=sm&recordingId=987654"
SHARE_PREFIX = "https://m.starmakerstudios.com/d/playrecording"


def _status(code):
    return lambda request: httpx.Response(code)


def test_platform_name_and_registry():
    assert StarMakerAdapter.platform_name() == Platform.STARMAKER
    assert isinstance(get_adapter(Platform.STARMAKER), StarMakerAdapter)


def test_recording_url_template():
    assert recording_url(PRIMARY_CDN, "42") == (
        "https://static.starmakerstudios.com/production/uploading/recordings/42/master.mp4"
    )
    assert recording_url(SECONDARY_CDN + "/", "42").startswith("https://static.starmaker.co/production/")


@pytest.mark.asyncio
async def test_secondary_cdn_used_when_primary_missing(upstream):
    recorder, client = upstream({
        PRIMARY_CDN: _status(404),
        SECONDARY_CDN: _status(200),
    })

    media = await StarMakerAdapter().resolve(SHARE_URL, "987654", client)

    assert media.type == MediaKind.VIDEO
    assert media.url == recording_url(SECONDARY_CDN, "987654")
    assert media.title == "StarMaker Recording 987654"
    assert media.platform == Platform.STARMAKER
    cdn_methods = [r.method for r in recorder.calls if "master.mp4" in str(r.url)]
    assert cdn_methods == ["HEAD", "HEAD"]


@pytest.mark.asyncio
async def test_primary_cdn_success_skips_secondary(upstream):
    recorder, client = upstream({
        PRIMARY_CDN: _status(200),
        SECONDARY_CDN: _status(200),
    })

    media = await StarMakerAdapter(enrich=False).resolve(SHARE_URL, "987654", client)

    assert media.url == recording_url(PRIMARY_CDN, "987654")
    assert recorder.called(SECONDARY_CDN) == 0
    assert recorder.called(SHARE_PREFIX) == 0


@pytest.mark.asyncio
async def test_share_page_enriches_title_and_thumbnail(upstream):
    page = (
        '<html><head><meta property="og:title" content="Perfect - sung by Ana" />'
        '<meta property="og:image" content="https://static.starmakerstudios.com/cover/987654.jpg" />'
        "</head></html>"
    )
    _, client = upstream({
        PRIMARY_CDN: _status(200),
        SHARE_PREFIX: lambda request: httpx.Response(200, text=page),
    })

    media = await StarMakerAdapter().resolve(SHARE_URL, "987654", client)

    assert media.title == "Perfect - sung by Ana"
    assert media.thumbnail == "https://static.starmakerstudios.com/cover/987654.jpg"


@pytest.mark.asyncio
async def test_enrichment_failure_is_not_fatal(upstream):
    def broken(request):
        raise httpx.ReadTimeout("slow", request=request)

    _, client = upstream({
        PRIMARY_CDN: _status(200),
        SHARE_PREFIX: broken,
    })

    media = await StarMakerAdapter().resolve(SHARE_URL, "987654", client)

    assert media.title == default_title("987654")
    assert media.thumbnail is None


@pytest.mark.asyncio
async def test_both_cdns_missing_raises_unavailable(upstream):
    _, client = upstream({
        PRIMARY_CDN: _status(404),
        SECONDARY_CDN: _status(403),
    })

    with pytest.raises(ResourceUnavailableError, match="Recording unavailable"):
        await StarMakerAdapter().resolve(SHARE_URL, "987654", client)
