"""Rewrite the ``const PROJECTS = [...]`` literal embedded in an HTML page.

Only the literal (and, on request, one background image reference and the
page title) is touched. Every other character of the document is carried
over unchanged, so the page can be hand-edited and editor-saved in turn.
"""

from __future__ import annotations

import json
import re
from dataclasses import dataclass
from typing import NamedTuple

from .errors import MarkerNotFound, OpenBracketNotFound, UnbalancedLiteral

QUOTES = {'"', "'", "`"}
TITLE_RE = re.compile(r"<title>.*?</title>")


class MarkerRegion(NamedTuple):
    start: int  # first character of the keyword
    open: int  # the opening "["
    close: int  # the matching "]"
    end: int  # one past the region, trailing ";" included


@dataclass(frozen=True)
class Settings:
    bg: str | None = None
    title: str | None = None


def find_anchor(html: str, keyword: str = "const", name: str = "PROJECTS") -> int:
    pattern = re.compile(rf"{re.escape(keyword)}\s+{re.escape(name)}\b")
    match = pattern.search(html)
    if match is None:
        raise MarkerNotFound(f'Could not find "{keyword} {name}" in the document.')
    return match.start()


def find_literal_end(html: str, open_index: int, string_aware: bool = True) -> int:
    """Return the index of the ``]`` matching the ``[`` at ``open_index``.

    With ``string_aware`` brackets inside quoted strings and inside ``//`` or
    ``/* */`` comments are not counted. Without it every bracket character
    counts, as older saves did.
    """
    depth = 0
    quote = None
    escaped = False
    index = open_index
    while index < len(html):
        ch = html[index]
        if quote:
            if escaped:
                escaped = False
            elif ch == "\\":
                escaped = True
            elif ch == quote:
                quote = None
            index += 1
            continue
        if string_aware and html.startswith("//", index):
            newline = html.find("\n", index)
            if newline == -1:
                break
            index = newline + 1
            continue
        if string_aware and html.startswith("/*", index):
            closing = html.find("*/", index + 2)
            if closing == -1:
                break
            index = closing + 2
            continue
        if string_aware and ch in QUOTES:
            quote = ch
        elif ch == "[":
            depth += 1
        elif ch == "]":
            depth -= 1
            if depth == 0:
                return index
        index += 1
    raise UnbalancedLiteral("Could not find the closing ] for the array.")


def find_marker_region(
    html: str,
    keyword: str = "const",
    name: str = "PROJECTS",
    string_aware: bool = True,
) -> MarkerRegion:
    start = find_anchor(html, keyword, name)
    open_index = html.find("[", start)
    if open_index == -1:
        raise OpenBracketNotFound(f"Could not find opening [ after {keyword} {name}.")
    close_index = find_literal_end(html, open_index, string_aware)
    end = close_index + 1
    if html[end:end + 1] == ";":
        end += 1
    return MarkerRegion(start, open_index, close_index, end)


def render_literal(projects: list) -> str:
    return json.dumps(projects, indent=2, ensure_ascii=False)


def read_literal(
    html: str,
    keyword: str = "const",
    name: str = "PROJECTS",
    string_aware: bool = True,
) -> list:
    """Parse the current literal back into Python data.

    Raises ``json.JSONDecodeError`` if the literal is JavaScript that is not
    also valid JSON (unquoted keys, trailing commas).
    """
    region = find_marker_region(html, keyword, name, string_aware)
    return json.loads(html[region.open:region.close + 1])


def background_pattern(image: str = "Desk_Image.png") -> re.Pattern:
    return re.compile(rf"""url\(['"]?{re.escape(image)}['"]?\)""")


def _sub_outside(pattern: re.Pattern, replacement: str, head: str, tail: str) -> tuple[str, str]:
    # first match wins, searching the text before the literal, then after it
    head, count = pattern.subn(lambda _: replacement, head, count=1)
    if not count:
        tail = pattern.sub(lambda _: replacement, tail, count=1)
    return head, tail


def patch_document(
    html: str,
    projects: list,
    settings: Settings | None = None,
    *,
    keyword: str = "const",
    name: str = "PROJECTS",
    background_image: str = "Desk_Image.png",
    string_aware: bool = True,
) -> str:
    region = find_marker_region(html, keyword, name, string_aware)
    head, tail = html[:region.start], html[region.end:]

    settings = settings or Settings()
    if settings.bg:
        head, tail = _sub_outside(
            background_pattern(background_image), f"url('{settings.bg}')", head, tail
        )
    if settings.title:
        head, tail = _sub_outside(TITLE_RE, f"<title>{settings.title}</title>", head, tail)

    return head + f"{keyword} {name} = {render_literal(projects)};" + tail
