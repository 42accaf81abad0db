import logging

import pytest

from infohub.tiles import default_registry
from infohub.tiles.accordion import AccordionTile
from infohub.tiles.base import Field, _check_field
from infohub.tiles.contact import ContactTile, decode_contact, encode_contact
from infohub.tiles.countdown import CountdownTile
from infohub.tiles.download import DownloadTile, file_icon
from infohub.tiles.iframe import IframeTile
from infohub.tiles.image import ImageTile
from infohub.tiles.infobox import InfoboxTile
from infohub.tiles.link import LinkTile, is_external_url, url_domain
from infohub.tiles.quote import QuoteTile
from infohub.tiles.separator import SeparatorTile


def test_required_fields_report_labels():
    errors = InfoboxTile().validate({})
    assert errors == ["Title is required"]

    errors = LinkTile().validate({"title": "  "})
    assert "Title is required" in errors
    assert "URL is required" in errors


def test_validate_rejects_non_object_data():
    assert ImageTile().validate(["not", "a", "dict"]) == ["Tile data must be an object"]


def test_text_length_limit():
    errors = InfoboxTile().validate({"title": "x" * 201})
    assert errors == ["Title must be at most 200 characters"]


def test_select_and_checkbox_checks():
    errors = InfoboxTile().validate({"title": "A", "format": "html", "showTitle": "yes"})
    assert "Invalid text format" in errors
    assert "Show title on page must be true or false" in errors


def test_number_field_bounds():
    field_def = Field("n", "number", "Amount", minimum=0, maximum=10)
    assert _check_field(field_def, 5) == []
    assert _check_field(field_def, "7") == []
    assert _check_field(field_def, 11) == ["Amount must be between 0 and 10"]
    assert _check_field(field_def, "abc") == ["Amount must be a number"]
    assert _check_field(field_def, True) == ["Amount must be a number"]


@pytest.mark.parametrize("tile_type", list(default_registry()), ids=lambda t: t.key)
def test_render_is_deterministic(tile_type):
    data = {
        "title": "Same",
        "description": "Line one\nLine two",
        "url": "https://example.org",
        "image": "/media/a.jpg",
        "file": "/files/a.pdf",
        "name": "Ann",
        "email": "ann@example.org",
        "targetDate": "2030-01-01",
        "quote": "Quote",
        "section1_heading": "Q",
        "section1_content": "A",
    }
    assert tile_type.render(data) == tile_type.render(dict(data))


def test_infobox_escapes_plain_text():
    html_out = InfoboxTile().render({"title": "<b>T</b>", "description": '<script>alert("x")</script>\nnext'})
    assert "<script>" not in html_out
    assert "&lt;script&gt;" in html_out
    assert "&lt;b&gt;T&lt;/b&gt;" in html_out
    assert "<br>" in html_out


def test_infobox_hides_title_when_disabled():
    html_out = InfoboxTile().render({"title": "Hidden", "showTitle": False, "description": "Body"})
    assert "Hidden" not in html_out
    assert "<p>Body</p>" in html_out


def test_image_modes():
    tile = ImageTile()
    lightbox = tile.render({"title": "Pic", "image": "/media/p.jpg"})
    assert 'data-lightbox-src="/media/p.jpg"' in lightbox
    assert "<h3>" not in lightbox

    linked = tile.render({"title": "Pic", "image": "/media/p.jpg", "lightbox": False, "link": "https://example.org"})
    assert '<a href="https://example.org"' in linked
    assert 'rel="noopener noreferrer"' in linked

    plain = tile.render({"title": "Pic", "image": "/media/p.jpg", "lightbox": False})
    assert "<a " not in plain
    assert "data-lightbox-src" not in plain


def test_image_rejects_wrong_extension():
    errors = ImageTile().validate({"title": "Pic", "image": "/media/p.svg"})
    assert errors == ["Invalid image format"]
    errors = ImageTile().validate({"title": "Pic", "image": "p.jpg"})
    assert errors == ["Invalid image path"]


def test_link_blocks_javascript_urls():
    tile = LinkTile()
    assert tile.validate({"title": "X", "url": "javascript:alert(1)"}) == ["Invalid url"]

    html_out = tile.render({"title": "X", "url": "javascript:alert(1)"})
    assert 'href="#"' in html_out
    assert "javascript" not in html_out


def test_link_external_detection():
    assert is_external_url("https://example.org")
    assert not is_external_url("/intern/page.html")
    assert url_domain("https://example.org/a") == "example.org"
    assert url_domain("/intern") == ""

    internal = LinkTile().render({"title": "In", "url": "/intern/page.html"})
    assert "target=" not in internal
    assert "Learn more" in internal

    forced = LinkTile().render({"title": "In", "url": "/intern/page.html", "external": True, "showDomain": False})
    assert 'target="_blank"' in forced
    assert "opens in a new tab" in forced


def test_download_icon_and_button():
    assert file_icon("/files/a.PDF") == file_icon("/files/b.pdf")
    html_out = DownloadTile().render({"title": "Form", "file": "/files/form.pdf"})
    assert 'href="/files/form.pdf"' in html_out
    assert "download>" in html_out
    assert "Download" in html_out
    assert DownloadTile().validate({"title": "Form", "file": "/files/form.exe"}) == ["Invalid file format"]


def test_iframe_requires_absolute_url():
    assert IframeTile().validate({"title": "Form", "url": "/local/form.html"}) == ["Invalid iframe url"]


def test_iframe_custom_height_bounds():
    data = {"title": "Form", "url": "https://forms.example.org", "aspectRatio": "custom", "customHeight": 50}
    assert IframeTile().validate(data) == ["Height must be between 100 and 2000 pixels"]
    data["customHeight"] = 800
    assert IframeTile().validate(data) == []
    assert "height: 800px" in IframeTile().render(data)


def test_iframe_modal_renders_trigger_without_iframe():
    html_out = IframeTile().render(
        {"title": "Form", "url": "https://forms.example.org/a?b=1&c=2", "displayMode": "modal"}
    )
    assert "<iframe" not in html_out
    assert 'data-iframe-url="https://forms.example.org/a?b=1&amp;c=2"' in html_out
    assert "onclick" not in html_out


def test_contact_values_are_not_in_plain_markup():
    data = {"title": "C", "name": "Ann", "email": "ann@example.org", "phone": "+49 123"}
    html_out = ContactTile().render(data)
    assert "ann@example.org" not in html_out
    assert "+49 123" not in html_out
    assert f'data-contact-value="{encode_contact("ann@example.org")}"' in html_out
    assert 'data-contact-type="phone"' in html_out


def test_contact_encoding_is_reversible_for_unicode():
    assert decode_contact(encode_contact("jürgen@example.org")) == "jürgen@example.org"


def test_contact_buttons_can_be_disabled():
    html_out = ContactTile().render(
        {"title": "C", "name": "Ann", "email": "ann@example.org", "showEmailButton": False}
    )
    assert "contact-reveal-btn" not in html_out


def test_countdown_target_and_attributes():
    tile = CountdownTile()
    assert tile.target({"targetDate": "2030-05-01"}) == "2030-05-01T00:00:00"
    html_out = tile.render(
        {"title": "Soon", "targetDate": "2030-05-01", "targetTime": "18:30", "expiredText": "<now>", "hideOnExpiry": True}
    )
    assert 'data-target="2030-05-01T18:30:00"' in html_out
    assert 'data-expired-text="&lt;now&gt;"' in html_out
    assert 'data-hide-on-expiry="true"' in html_out
    assert tile.validate({"title": "Soon", "targetDate": "01.05.2030"}) == [
        "Invalid date format for target date (YYYY-MM-DD expected)"
    ]


def test_quote_with_link_wraps_content():
    html_out = QuoteTile().render({"quote": "Be kind", "source": "Someone", "link": "https://example.org"})
    assert html_out.index('<a href="https://example.org"') < html_out.index("<blockquote")
    assert "<cite" in html_out
    assert QuoteTile().validate({}) == ["Quote is required"]


def test_accordion_section_rules():
    tile = AccordionTile()
    assert tile.validate({}) == ["At least one section with heading and content is required"]
    errors = tile.validate({"section1_heading": "Q", "section2_content": "A"})
    assert "Section 1: content is missing" in errors
    assert "Section 2: heading is missing" in errors


def test_accordion_default_open_counts_rendered_sections():
    data = {
        "section1_heading": "First",
        "section1_content": "One",
        "section3_heading": "Third",
        "section3_content": "Three",
        "defaultOpen": "1",
        "fullRow": True,
    }
    tile = AccordionTile()
    assert tile.validate(data) == []
    html_out = tile.render(data)
    assert html_out.count('class="accordion-item open"') == 1
    assert html_out.index("accordion-item open") > html_out.index("First")
    assert tile.wrapper_classes(data) == ["tile-full-row"]


def test_separator_forced_full_and_height():
    tile = SeparatorTile()
    assert tile.forced_size == "full"
    assert tile.validate({"height": 600}) == ["Height (px) must be between 0 and 500"]
    html_out = tile.render({"height": 20, "showLine": True, "lineStyle": "dashed"})
    assert 'style="height: 20px;"' in html_out
    assert "style-dashed" in html_out


def test_describe_exposes_field_metadata():
    described = LinkTile().describe()
    assert described["name"] == "Link"
    assert "url" in described["fields"]
    assert described["fieldMeta"]["url"]["required"] is True
    assert described["fieldMeta"]["title"]["maxLength"] == 200


def test_iframe_http_url_only_warns(caplog):
    with caplog.at_level(logging.WARNING, logger="infohub.tiles.iframe"):
        errors = IframeTile().validate({"title": "Form", "url": "http://forms.example.org"})
    assert errors == []
    assert "mixed content" in caplog.text


VALID_SAMPLES = {
    "infobox": {"title": "T"},
    "image": {"title": "T", "image": "/media/a.jpg"},
    "link": {"title": "T", "url": "https://example.org"},
    "download": {"title": "T", "file": "/files/a.pdf"},
    "iframe": {"title": "T", "url": "https://forms.example.org"},
    "contact": {"title": "T", "name": "Ann"},
    "countdown": {"title": "T", "targetDate": "2030-01-01"},
    "quote": {"quote": "Q"},
    "accordion": {"section1_heading": "Q", "section1_content": "A"},
    "separator": {},
}

INVALID_SAMPLE = {
    "title": 5,
    "showTitle": "yes",
    "url": "javascript:alert(1)",
    "image": "a.svg",
    "file": "a.exe",
    "email": "nope",
    "targetDate": "01.01.2030",
    "height": 9999,
    "section1_heading": "Q",
}


@pytest.mark.parametrize("tile_type", list(default_registry()), ids=lambda t: t.key)
def test_validate_is_idempotent(tile_type):
    valid = VALID_SAMPLES[tile_type.key]
    assert tile_type.validate(valid) == []
    assert tile_type.validate(valid) == []

    first = tile_type.validate(dict(INVALID_SAMPLE))
    second = tile_type.validate(dict(INVALID_SAMPLE))
    assert first
    assert first == second
