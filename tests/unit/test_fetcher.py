from __future__ import annotations

from typing import Any, Callable

import httpx
import pytest

from src.services import fetcher
from src.services.errors import FetchFailedError, InvalidURLError, NetworkTimeoutError
from src.services.fetcher import fetch_page_text, find_og_image, html_to_text, validate_url

PAGE = """
<html>
  <head>
    <title>Best Pancakes</title>
    <meta property="og:image" content="https://img.test/pancakes.jpg?w=800&amp;h=600">
    <style>body { color: red; }</style>
    <script>var tracking = "ignore me";</script>
  </head>
  <body>
    <!-- ad slot -->
    <h1>Pancakes</h1>
    <ul><li>2 cups   flour</li><li>1 egg</li></ul>
    <p>Mix &amp; fry.</p>
  </body>
</html>
"""

_RealClient = httpx.Client


def _patch_transport(monkeypatch: pytest.MonkeyPatch, handler: Callable[[httpx.Request], httpx.Response]) -> None:
    def client_factory(**kwargs: Any) -> httpx.Client:
        return _RealClient(transport=httpx.MockTransport(handler), **kwargs)

    monkeypatch.setattr(fetcher.httpx, "Client", client_factory)


class TestValidateUrl:
    def test_accepts_http_and_https(self) -> None:
        assert validate_url(" https://recipes.test/pie ") == "https://recipes.test/pie"
        assert validate_url("http://recipes.test") == "http://recipes.test"

    @pytest.mark.parametrize("url", ["", "recipes.test/pie", "ftp://recipes.test/pie", "https://"])
    def test_rejects_others(self, url: str) -> None:
        with pytest.raises(InvalidURLError):
            validate_url(url)


class TestHtmlToText:
    def test_strips_markup_scripts_and_comments(self) -> None:
        text = html_to_text(PAGE)

        assert "Pancakes" in text
        assert "2 cups flour" in text
        assert "Mix & fry." in text
        assert "tracking" not in text
        assert "color: red" not in text
        assert "ad slot" not in text
        assert "<" not in text

    def test_empty_markup(self) -> None:
        assert html_to_text("<div>   </div>") == ""

    def test_blocks_on_separate_lines(self) -> None:
        assert html_to_text("<h1>Soup</h1><p>Boil <b>water</b></p>") == "Soup\nBoil\nwater"

    def test_angle_bracket_inside_attribute(self) -> None:
        text = html_to_text('<p title="a > b">Stir gently</p>')

        assert text == "Stir gently"


class TestFindOgImage:
    def test_finds_and_unescapes(self) -> None:
        assert find_og_image(PAGE) == "https://img.test/pancakes.jpg?w=800&h=600"

    def test_missing(self) -> None:
        assert find_og_image("<html><head></head></html>") is None

    def test_content_before_property(self) -> None:
        markup = '<meta content="https://img.test/x.jpg" property="og:image">'

        assert find_og_image(markup) == "https://img.test/x.jpg"

    def test_empty_content(self) -> None:
        assert find_og_image('<meta property="og:image" content="  ">') is None


class TestFetchPageText:
    def test_returns_text_and_image(self, monkeypatch: pytest.MonkeyPatch) -> None:
        _patch_transport(monkeypatch, lambda request: httpx.Response(200, text=PAGE))

        text, image = fetch_page_text("https://recipes.test/pancakes")

        assert "2 cups flour" in text
        assert image == "https://img.test/pancakes.jpg?w=800&h=600"

    def test_truncates_text(self, monkeypatch: pytest.MonkeyPatch) -> None:
        _patch_transport(monkeypatch, lambda request: httpx.Response(200, text="<p>" + "a" * 500 + "</p>"))

        text, _ = fetch_page_text("https://recipes.test/long", limit=100)

        assert len(text) == 100

    def test_http_error_status(self, monkeypatch: pytest.MonkeyPatch) -> None:
        _patch_transport(monkeypatch, lambda request: httpx.Response(404, text="gone"))

        with pytest.raises(FetchFailedError) as exc_info:
            fetch_page_text("https://recipes.test/missing")
        assert "404" in str(exc_info.value)

    def test_timeout(self, monkeypatch: pytest.MonkeyPatch) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ReadTimeout("too slow", request=request)

        _patch_transport(monkeypatch, handler)

        with pytest.raises(NetworkTimeoutError) as exc_info:
            fetch_page_text("https://recipes.test/slow", timeout=2.0)
        assert exc_info.value.timeout_seconds == 2.0

    def test_connection_error(self, monkeypatch: pytest.MonkeyPatch) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("refused", request=request)

        _patch_transport(monkeypatch, handler)

        with pytest.raises(FetchFailedError):
            fetch_page_text("https://recipes.test/down")

    def test_page_without_text(self, monkeypatch: pytest.MonkeyPatch) -> None:
        _patch_transport(monkeypatch, lambda request: httpx.Response(200, text="<html></html>"))

        with pytest.raises(FetchFailedError):
            fetch_page_text("https://recipes.test/blank")

    def test_invalid_url_never_fetched(self, monkeypatch: pytest.MonkeyPatch) -> None:
        requests: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            requests.append(request)
            return httpx.Response(200, text=PAGE)

        _patch_transport(monkeypatch, handler)

        with pytest.raises(InvalidURLError):
            fetch_page_text("not a url")
        assert requests == []
