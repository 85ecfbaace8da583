"""Slug derivation for categories and posts."""

import re

_NON_SLUG_CHARS = re.compile(r"[^\w-]+", re.ASCII)


def slugify(text: str) -> str:
    """Lower-case ``text``, turn spaces into hyphens and drop anything else
    that is not an ASCII word character or a hyphen.

    >>> slugify("Hello World!")
    'hello-world'
    """

    return _NON_SLUG_CHARS.sub("", text.lower().replace(" ", "-"))
