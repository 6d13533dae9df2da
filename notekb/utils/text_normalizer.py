"""HTML-to-text normalization for OneNote page content.

OneNote returns each page as an XHTML document: a ``<head>`` with a title
and ``<meta>`` tags, and a ``<body>`` holding absolutely positioned
``<div>``/``<p>`` blocks.  Only the body text is worth embedding, so this
module strips the non-content elements with BeautifulSoup and normalizes
whitespace so that chunk boundaries depend on the words, not on the
page layout.
"""

import re

from bs4 import BeautifulSoup
from bs4.builder import ParserRejectedMarkup

from notekb.utils.errors import NormalizationError

# Elements that never carry readable page content.
_NON_CONTENT_TAGS = ["script", "style", "meta", "link"]

_MULTI_NEWLINE = re.compile(r"\n{3,}")

# Block elements whose boundaries must survive as line breaks in the text.
_BLOCK_TAGS = ["p", "div", "li", "tr", "h1", "h2", "h3", "h4", "h5", "h6", "table"]


def html_to_text(raw_markup: str | bytes) -> str:
    """Convert OneNote page markup into plain text.

    Removes scripts, styles and metadata tags, takes the text of
    ``<body>`` (or of the whole document when there is no body), trims
    every line, drops empty lines and collapses runs of three or more
    newlines to exactly two.

    Args:
        raw_markup: The page HTML as returned by the content source.

    Returns:
        The normalized text, possibly empty.  An empty page is not an
        error: it simply produces no chunks downstream.

    Raises:
        NormalizationError: If the input is not markup that can be parsed.
    """
    if isinstance(raw_markup, bytes):
        try:
            raw_markup = raw_markup.decode("utf-8")
        except UnicodeDecodeError as exc:
            raise NormalizationError(
                message=f"Page content is not valid UTF-8: {exc}",
            ) from exc
    if not isinstance(raw_markup, str):
        raise NormalizationError(
            message=f"Expected HTML text, got {type(raw_markup).__name__}",
        )

    try:
        soup = BeautifulSoup(raw_markup, "html.parser")
    except (ParserRejectedMarkup, AssertionError, ValueError) as exc:
        raise NormalizationError(message=f"Unparseable page markup: {exc}") from exc

    for element in soup(_NON_CONTENT_TAGS):
        element.decompose()
    for br in soup("br"):
        br.replace_with("\n")
    for block in soup(_BLOCK_TAGS):
        block.append("\n")

    body = soup.body
    text = body.get_text() if body is not None else soup.get_text()

    text = _MULTI_NEWLINE.sub("\n\n", text)
    lines = (line.strip() for line in text.split("\n"))
    text = "\n".join(line for line in lines if line)

    return text.strip()
