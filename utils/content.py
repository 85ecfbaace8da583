"""Post body normalisation."""

import re

_HTML_TAG = re.compile(r"<[a-z][\s\S]*>", re.IGNORECASE)
_PARAGRAPH_BREAK = re.compile(r"\n{2,}")


def newlines_to_html(text: str | None) -> str:
    """Convert plain text into ``<p>``/``<br>`` markup.

    Blank lines separate paragraphs and single newlines become line breaks.
    Text that already contains markup, such as the output of a rich text
    editor, is returned unchanged.
    """

    if not text:
        return ""

    if _HTML_TAG.search(text):
        return text

    text = text.replace("\r\n", "\n").strip()
    paragraphs = [p for p in _PARAGRAPH_BREAK.split(text) if p.strip()]

    return "".join(
        "<p>{}</p>".format(paragraph.replace("\n", "<br>").strip())
        for paragraph in paragraphs
    )
