import html
import re
import textwrap
from html.entities import html5
from html.parser import HTMLParser

DEFAULT_WRAP_WIDTH = 80

BLOCK_TAGS = {
    "address",
    "article",
    "blockquote",
    "dd",
    "div",
    "dl",
    "dt",
    "figcaption",
    "figure",
    "footer",
    "h1",
    "h2",
    "h3",
    "h4",
    "h5",
    "h6",
    "header",
    "hr",
    "li",
    "ol",
    "p",
    "pre",
    "section",
    "table",
    "tr",
    "ul",
}
SKIPPED_TAGS = {"head", "script", "style", "title"}

WHITESPACE_RE = re.compile(r"\s+")
# Matches tags and the unterminated tag fragments the parser hands back as data
TAG_RE = re.compile(r"<[A-Za-z/!?][^<>]*>?")
BREAK_TAG_RE = re.compile(
    r"<\s*(br|/?(?:%s))\b[^>]*>" % "|".join(sorted(BLOCK_TAGS)), re.IGNORECASE
)


class NoteHTMLParser(HTMLParser):
    """Collects the text of an HTML note body as a list of lines.

    ``<br>`` ends the current line even when it is empty, so Notes.app's
    ``<div><br></div>`` blank lines survive. Block boundaries only end a
    line that has content.
    """

    def __init__(self):
        super().__init__(convert_charrefs=False)
        self.lines = []
        self._current = []
        self._skip_depth = 0

    def handle_starttag(self, tag, attrs):
        if tag in SKIPPED_TAGS:
            self._skip_depth += 1
        elif tag == "br":
            self._hard_break()
        elif tag in BLOCK_TAGS:
            self._soft_break()

    def handle_startendtag(self, tag, attrs):
        if tag == "br":
            self._hard_break()
        elif tag in BLOCK_TAGS:
            self._soft_break()

    def handle_endtag(self, tag):
        if tag in SKIPPED_TAGS:
            self._skip_depth = max(0, self._skip_depth - 1)
        elif tag in BLOCK_TAGS:
            self._soft_break()

    def handle_data(self, data):
        self._append(TAG_RE.sub("", data))

    def handle_entityref(self, name):
        # Bare ampersands ("AT&T") are reported as references too
        if f"{name};" in html5:
            self._append(html5[f"{name};"])
        else:
            self._append(f"&{name}")

    def handle_charref(self, name):
        self._append(html.unescape(f"&#{name};"))

    def close(self):
        super().close()
        self._soft_break()

    def _append(self, text):
        if text and not self._skip_depth:
            self._current.append(text)

    def _pending(self):
        return WHITESPACE_RE.sub(" ", "".join(self._current)).strip()

    def _soft_break(self):
        line = self._pending()
        if line:
            self.lines.append(line)
        self._current = []

    def _hard_break(self):
        self.lines.append(self._pending())
        self._current = []


def strip_tags(fragment):
    "Best-effort text for markup the parser could not handle"
    text = BREAK_TAG_RE.sub("\n", fragment)
    text = html.unescape(TAG_RE.sub("", text))
    lines = [WHITESPACE_RE.sub(" ", line).strip() for line in text.splitlines()]
    return [line for line in lines if line]


def html_to_lines(fragment):
    parser = NoteHTMLParser()
    try:
        parser.feed(fragment)
        parser.close()
    except (AssertionError, ValueError):
        return strip_tags(fragment)
    return parser.lines


def wrap_lines(lines, wrap_width):
    if not wrap_width:
        return list(lines)
    wrapped = []
    for line in lines:
        if not line:
            wrapped.append(line)
            continue
        wrapped.extend(
            textwrap.wrap(
                line,
                width=wrap_width,
                break_long_words=False,
                break_on_hyphens=False,
            )
        )
    return wrapped


def html_to_text(fragment, wrap_width=DEFAULT_WRAP_WIDTH):
    """
    Convert an HTML note body to plain text

    Tags are removed, block elements and ``<br>`` become line breaks,
    entities are decoded and whitespace is collapsed within each line.
    Lines longer than ``wrap_width`` are wrapped at word boundaries; a
    word longer than the width is kept whole on its own line. A width of
    0 or None disables wrapping.
    """
    if wrap_width is not None and wrap_width < 0:
        raise ValueError(f"wrap_width must be 0 or positive, got {wrap_width}")
    if not fragment:
        return ""
    lines = wrap_lines(html_to_lines(fragment), wrap_width)
    return "\n".join(lines).strip("\n")
