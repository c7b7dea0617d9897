"""
Markdown to HTML rendering for post content.

Content is stored as raw markdown and rendered on read. The rendered HTML is
passed through bleach so user markup cannot inject scripts.
"""

import bleach
import markdown

ALLOWED_TAGS = [
    "p", "br", "strong", "em", "code", "pre", "h1", "h2", "h3", "h4", "h5", "h6",
    "ul", "ol", "li", "blockquote", "a", "img", "hr", "table", "thead", "tbody",
    "tr", "th", "td", "del",
]

ALLOWED_ATTRIBUTES = {
    "a": ["href", "title"],
    "img": ["src", "alt", "title"],
}

MARKDOWN_EXTENSIONS = ["fenced_code", "tables", "sane_lists"]


def render_markdown(raw: str) -> str:
    """Render markdown to sanitised HTML. Empty input renders to an empty string."""
    if not raw:
        return ""
    html = markdown.markdown(raw, extensions=MARKDOWN_EXTENSIONS)
    return bleach.clean(
        html,
        tags=ALLOWED_TAGS,
        attributes=ALLOWED_ATTRIBUTES,
        strip=True,
    )
