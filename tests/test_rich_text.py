from infohub.rich_text import render_body, render_markdown, sanitize_fragment


def test_plain_body_keeps_line_breaks():
    assert render_body("a\nb") == "<p>a<br>\nb</p>"
    assert render_body("") == ""


def test_markdown_renders_basic_syntax():
    html_out = render_body("**bold**\n\n- one\n- two", "markdown")
    assert "<strong>bold</strong>" in html_out
    assert "<li>one</li>" in html_out


def test_markdown_escapes_raw_html():
    html_out = render_markdown('<script>alert("x")</script>')
    assert "<script>" not in html_out
    assert "&lt;script&gt;" in html_out


def test_markdown_links_are_filtered():
    html_out = render_markdown("[bad](javascript:alert(1)) and [good](https://example.org)")
    assert "javascript:" not in html_out
    assert 'href="#"' in html_out
    assert 'href="https://example.org"' in html_out
    assert 'rel="noopener noreferrer"' in html_out


def test_sanitize_fragment_drops_unsafe_images():
    html_out = sanitize_fragment('<p><img src="data:image/png;base64,AAAA"><img src="/media/a.png"></p>')
    assert "data:image" not in html_out
    assert 'src="/media/a.png"' in html_out
    assert 'loading="lazy"' in html_out


def test_internal_links_stay_in_same_tab():
    html_out = sanitize_fragment('<a href="/intern/page.html">in</a>')
    assert "target" not in html_out


def test_markdown_blockquote():
    assert "<blockquote>" in render_markdown("> quoted")


def test_code_spans_are_escaped_once():
    assert "<code>a&lt;b</code>" in render_markdown("`a<b`")
    assert "<code>x &amp;&amp; y</code>" in render_markdown("`x && y`")


def test_inline_raw_html_is_text():
    html_out = render_markdown('Hi <img src=x onerror="alert(1)"> there <b>bold</b>')
    assert "<img" not in html_out
    assert "<b>" not in html_out
    assert "&lt;b&gt;bold&lt;/b&gt;" in html_out


def test_autolinks_still_work():
    html_out = render_markdown("See <https://example.org>")
    assert 'href="https://example.org"' in html_out
