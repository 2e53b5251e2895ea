import pytest

from reprise.errors import InvalidArgumentError
from reprise.url_parser import BitriseUrl, UrlKind, parse_bitrise_url


def test_parse_app_url():
    url = parse_bitrise_url("https://app.bitrise.io/app/abc123")
    assert url == BitriseUrl.for_app("abc123")
    assert url.kind is UrlKind.APP
    assert url.app_slug == "abc123"
    assert url.build_slug is None
    assert url.pipeline_id is None
    assert url.description() == "app"


def test_parse_build_url():
    url = parse_bitrise_url("https://app.bitrise.io/build/xyz789")
    assert url == BitriseUrl.for_build("xyz789")
    assert url.app_slug is None
    assert url.build_slug == "xyz789"
    assert url.description() == "build"


def test_parse_pipeline_url():
    url = parse_bitrise_url("https://app.bitrise.io/app/abc123/pipelines/def456")
    assert url == BitriseUrl.for_pipeline("abc123", "def456")
    assert url.app_slug == "abc123"
    assert url.pipeline_id == "def456"
    assert url.build_slug is None
    assert url.description() == "pipeline"


def test_parse_uuid_style_urls():
    url = parse_bitrise_url(
        "https://app.bitrise.io/app/36f58731-9f78-4142-9479-866acc94e15a"
        "/pipelines/d7790456-f02a-4267-bcd5-09f394e2cd29"
    )
    assert url == BitriseUrl.for_pipeline(
        "36f58731-9f78-4142-9479-866acc94e15a",
        "d7790456-f02a-4267-bcd5-09f394e2cd29",
    )


def test_invalid_host():
    with pytest.raises(InvalidArgumentError, match="Not a Bitrise URL"):
        parse_bitrise_url("https://example.com/app/abc123")


def test_invalid_url():
    with pytest.raises(InvalidArgumentError, match="Invalid URL"):
        parse_bitrise_url("not-a-url")


def test_invalid_path():
    with pytest.raises(InvalidArgumentError, match="Unrecognized"):
        parse_bitrise_url("https://app.bitrise.io/unknown/path")


def test_empty_slug():
    with pytest.raises(InvalidArgumentError):
        parse_bitrise_url("https://app.bitrise.io/app/")


def test_empty_pipeline_id():
    with pytest.raises(InvalidArgumentError, match="Unrecognized"):
        parse_bitrise_url("https://app.bitrise.io/app/abc/pipelines/")


def test_root_path_is_unrecognized():
    with pytest.raises(InvalidArgumentError, match="Unrecognized"):
        parse_bitrise_url("https://app.bitrise.io")


def test_trailing_slash_is_unrecognized():
    with pytest.raises(InvalidArgumentError, match="Unrecognized"):
        parse_bitrise_url("https://app.bitrise.io/build/xyz/")


def test_query_and_fragment_are_ignored():
    url = parse_bitrise_url("https://app.bitrise.io/build/xyz?tab=log#top")
    assert url == BitriseUrl.for_build("xyz")


def test_host_is_case_insensitive():
    url = parse_bitrise_url("https://APP.Bitrise.io/app/abc")
    assert url.app_slug == "abc"


def test_error_has_usage_exit_code():
    with pytest.raises(InvalidArgumentError) as info:
        parse_bitrise_url("https://example.com/app/abc123")
    assert info.value.exit_code() == 64


def test_to_url():
    assert BitriseUrl.for_app("abc").to_url() == "https://app.bitrise.io/app/abc"
    assert BitriseUrl.for_build("xyz").to_url() == "https://app.bitrise.io/build/xyz"
    assert (
        BitriseUrl.for_pipeline("abc", "123").to_url()
        == "https://app.bitrise.io/app/abc/pipelines/123"
    )


@pytest.mark.parametrize(
    "url",
    [
        BitriseUrl.for_app("abc"),
        BitriseUrl.for_build("xyz"),
        BitriseUrl.for_pipeline("abc", "123"),
    ],
)
def test_round_trip(url):
    assert parse_bitrise_url(url.to_url()) == url
    assert str(url) == url.to_url()