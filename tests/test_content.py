"""Unit tests for image and link scanning."""

from __future__ import annotations

from web_reader_mcp.content import extract_images, extract_links, resolve_url, scan_images

from .conftest import PNG_BYTES, FakeResponse, FakeSession

BASE = "https://x.test/a"


class TestResolveUrl:
    def test_relative_path(self) -> None:
        assert resolve_url(BASE, "/b") == "https://x.test/b"

    def test_sibling_path(self) -> None:
        assert resolve_url("https://x.test/dir/page", "img.png") == "https://x.test/dir/img.png"

    def test_absolute_reference_kept(self) -> None:
        assert resolve_url(BASE, "https://cdn.test/i.png") == "https://cdn.test/i.png"

    def test_unparsable_reference(self) -> None:
        assert resolve_url(BASE, "http://[::1") is None


class TestImageScan:
    def test_attributes_extracted(self) -> None:
        html = '<p><img src="/img/cat.png" alt="A cat" width="640" height="480"></p>'

        images = scan_images(html, BASE)

        assert len(images) == 1
        image = images[0]
        assert image.original_url == "https://x.test/img/cat.png"
        assert image.alt_text == "A cat"
        assert image.width == 640
        assert image.height == 480
        assert image.encoded_data == ""
        assert image.size_bytes == 0

    def test_missing_hints_default_to_zero(self) -> None:
        images = scan_images("<img src='pic.jpg'>", BASE)

        assert images[0].original_url == "https://x.test/pic.jpg"
        assert images[0].alt_text == ""
        assert (images[0].width, images[0].height) == (0, 0)

    def test_data_and_missing_sources_skipped(self) -> None:
        html = (
            '<img src="data:image/png;base64,AAAA">'
            '<img alt="no source">'
            '<img src="">'
            '<img src="/ok.png">'
        )

        images = scan_images(html, BASE)

        assert [image.original_url for image in images] == ["https://x.test/ok.png"]

    def test_document_order_preserved(self) -> None:
        html = '<img src="/1.png"><img src="/2.png"><img src="/1.png">'

        urls = [image.original_url for image in scan_images(html, BASE)]

        assert urls == ["https://x.test/1.png", "https://x.test/2.png", "https://x.test/1.png"]

    def test_all_urls_absolute(self) -> None:
        html = '<img src="a.png"><img src="../b.png"><img src="//cdn.test/c.png">'

        for image in scan_images(html, "https://x.test/dir/page.html"):
            assert image.original_url.startswith(("http://", "https://"))

    def test_extract_without_download_makes_no_requests(self, config) -> None:
        session = FakeSession()

        images = extract_images('<img src="/a.png">', BASE, config, download=False, session=session)

        assert len(images) == 1
        assert session.calls == []

    def test_extract_with_download_encodes(self, config) -> None:
        session = FakeSession(
            get_routes={
                "https://x.test/a.png": FakeResponse(
                    content=PNG_BYTES, headers={"Content-Type": "image/png"}
                )
            }
        )

        images = extract_images('<img src="/a.png">', BASE, config, download=True, session=session)

        assert images[0].encoded_data.startswith("data:image/png;base64,")
        assert images[0].size_bytes == len(PNG_BYTES)


class TestLinkScan:
    def test_title_and_text(self) -> None:
        links = extract_links('<a href="/b" title="T">Go</a>', BASE)

        assert len(links) == 1
        assert links[0].url == "https://x.test/b"
        assert links[0].text == "Go"
        assert links[0].title == "T"

    def test_deduplicated_first_wins(self) -> None:
        html = '<a href="/b">First</a> <a href="https://x.test/b">Second</a> <a href="/c">C</a>'

        links = extract_links(html, BASE)

        assert [link.url for link in links] == ["https://x.test/b", "https://x.test/c"]
        assert links[0].text == "First"

    def test_excluded_schemes(self) -> None:
        html = (
            '<a href="javascript:void(0)">js</a>'
            '<a href="mailto:a@x.test">mail</a>'
            '<a href="tel:+100">call</a>'
            '<a href="#top">top</a>'
            '<a href="/kept">kept</a>'
        )

        links = extract_links(html, BASE)

        assert [link.url for link in links] == ["https://x.test/kept"]

    def test_excluded_schemes_are_case_sensitive(self) -> None:
        html = '<a href="JavaScript:void(0)">js</a><a href="javascript:void(0)">lower</a>'

        links = extract_links(html, BASE)

        assert [link.text for link in links] == ["js"]

    def test_nested_markup_stripped(self) -> None:
        links = extract_links('<a href="/d">  <b>Bold</b> words <i>here</i>  </a>', BASE)

        assert links[0].text == "Bold words here"
        assert links[0].title == ""

    def test_anchor_without_href_skipped(self) -> None:
        assert extract_links('<a name="anchor">nothing</a>', BASE) == []

    def test_unparsable_href_skipped(self) -> None:
        links = extract_links('<a href="http://[::1">bad</a><a href="/ok">ok</a>', BASE)

        assert [link.url for link in links] == ["https://x.test/ok"]
