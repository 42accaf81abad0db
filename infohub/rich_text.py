"""Markdown bodies for text blocks, rendered to a restricted HTML subset."""

from __future__ import annotations

import markdown
from bs4 import BeautifulSoup

from infohub.escaping import is_safe_href, is_valid_path, nl2br

MARKDOWN_EXTENSIONS = ["nl2br", "sane_lists"]


def _is_safe_image_src(src: str) -> bool:
    return is_valid_path(src) or (src.lower().startswith("https://") and is_safe_href(src))


def sanitize_fragment(fragment: str) -> str:
    soup = BeautifulSoup(fragment, "html.parser")

    for link in soup.find_all("a"):
        href = link.get("href", "")
        if not is_safe_href(href):
            link["href"] = "#"
        elif not href.startswith("/"):
            link["target"] = "_blank"
            link["rel"] = "noopener noreferrer"

    for img in soup.find_all("img"):
        if not _is_safe_image_src(img.get("src", "")):
            img.decompose()
        else:
            img["loading"] = "lazy"

    return str(soup)


def _markdown_converter() -> markdown.Markdown:
    md = markdown.Markdown(extensions=MARKDOWN_EXTENSIONS, output_format="html")
    # Raw HTML then reaches the serializer as plain text and is escaped once.
    md.preprocessors.deregister("html_block")
    md.inlinePatterns.deregister("html")
    return md


def render_markdown(text: str) -> str:
    return sanitize_fragment(_markdown_converter().convert(text))


def render_body(text: str, fmt: str = "plain") -> str:
    """HTML for a text body: ``plain`` keeps line breaks, ``markdown`` renders Markdown."""
    if not text:
        return ""
    if fmt == "markdown":
        return render_markdown(text)
    return f"<p>{nl2br(text)}</p>"
