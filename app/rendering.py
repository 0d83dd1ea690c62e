"""
Markdown -> sanitized HTML.

Post content is stored as raw markdown; this module derives the HTML on
every read.  Rendering is pure and holds no state.
"""
import markdown as md
import nh3

_EXTENSIONS = ["fenced_code", "tables", "nl2br", "sane_lists"]

ALLOWED_TAGS: set[str] = set(nh3.ALLOWED_TAGS) | {
    "h1", "h2", "h3", "h4", "h5", "h6", "blockquote", "pre", "code",
}

ALLOWED_ATTRIBUTES: dict[str, set[str]] = {
    "*": {"class"},
    "a": {"href", "title"},
    "img": {"src", "alt", "title"},
    "th": {"align"},
    "td": {"align"},
}


def render_markdown(source: str) -> str:
    """Render *source* to HTML and strip anything outside the allow-list.

    ``<script>`` and ``<style>`` elements are dropped together with their
    content; event-handler attributes and ``javascript:`` URLs never survive.
    """
    if not source:
        return ""
    html = md.markdown(source, extensions=_EXTENSIONS)
    return nh3.clean(html, tags=ALLOWED_TAGS, attributes=ALLOWED_ATTRIBUTES)
