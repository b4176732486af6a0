"""Deterministic script built locally from the document text.

Used whenever the text-generation service fails, so a run never stalls on
the generative step. The builder cannot fail and always returns at least two
scenes: an introduction, one scene per paragraph (capped), and a closing.
"""

import math
import re
from typing import List, Optional, Tuple

from ..models import Scene, Script

MAX_CONTENT_SCENES = 6
MAX_NARRATION_CHARS = 300
MAX_TITLE_CHARS = 50
MAX_HEADING_CHARS = 100

DEFAULT_TITLE = "Document Summary"

_PARAGRAPH_SPLIT_RE = re.compile(r"\n\s*\n")
_SENTENCE_RE = re.compile(r"[^.!?]+(?:[.!?]+|$)")


def _is_heading(block: str) -> bool:
    return (
        "\n" not in block
        and len(block) <= MAX_HEADING_CHARS
        and not block.endswith((".", "!", "?", ":", ";", ","))
    )


def split_paragraphs(content: str) -> List[Tuple[Optional[str], str]]:
    """Split text into ``(heading, body)`` pairs.

    Blocks are separated by blank lines. A lone short line without closing
    punctuation is a heading and is attached to the block after it.
    """
    blocks = [
        block.strip()
        for block in _PARAGRAPH_SPLIT_RE.split(content.replace("\r\n", "\n"))
        if block.strip()
    ]

    paragraphs: List[Tuple[Optional[str], str]] = []
    heading: Optional[str] = None
    for block in blocks:
        if _is_heading(block):
            if heading is not None:
                # two headings in a row: the first has no body of its own
                paragraphs.append((None, heading))
            heading = block
            continue
        lines = block.split("\n")
        if heading is None and len(lines) > 1 and _is_heading(lines[0].strip()):
            heading, block = lines[0].strip(), "\n".join(lines[1:])
        paragraphs.append((heading, " ".join(block.split())))
        heading = None

    if heading is not None:
        paragraphs.append((None, heading))
    return paragraphs


def find_title(content: str) -> str:
    """First line of the document when it is short enough to be a title."""
    first_line = content.strip().split("\n", 1)[0].strip()
    if first_line and len(first_line) < MAX_TITLE_CHARS:
        return first_line.rstrip(".:")
    return DEFAULT_TITLE


def summarize_paragraph(body: str, limit: int = MAX_NARRATION_CHARS) -> str:
    """Whole leading sentences of ``body`` up to ``limit`` characters.

    The first sentence is always kept entire, however long; narration
    chunking downstream deals with length.
    """
    sentences = [s.strip() for s in _SENTENCE_RE.findall(body) if s.strip()]
    if not sentences:
        return body.strip()

    narration = sentences[0]
    for sentence in sentences[1:]:
        if len(narration) + 1 + len(sentence) > limit:
            break
        narration = f"{narration} {sentence}"
    if narration[-1] not in ".!?":
        narration += "."
    return narration


def estimate_duration(narration: str) -> float:
    """Rough spoken length: 20 characters a second, clamped to 5-10s."""
    return float(min(10, max(5, math.ceil(len(narration) / 20))))


def build_fallback_script(content: str) -> Script:
    """Build a script from ``content`` without any external service."""
    paragraphs = split_paragraphs(content)[:MAX_CONTENT_SCENES]

    if not paragraphs:
        return Script(scenes=[
            Scene(
                id=1,
                visual_description="Title Card",
                text_overlay="Topic Overview",
                narration="Welcome to the summary.",
                target_duration=5,
            ),
            Scene(
                id=2,
                visual_description="Key Points",
                text_overlay="Main Idea",
                narration="Here are the main points discussed in the document.",
                target_duration=5,
            ),
        ])

    title = find_title(content)
    scenes = [
        Scene(
            id=1,
            visual_description="A clean, modern title card with the document title.",
            text_overlay=f"{title}\nOverview",
            narration=(
                f"Welcome to this overview of {title}. "
                "We'll cover the main concepts and key takeaways."
            ),
            target_duration=5,
        )
    ]

    for heading, body in paragraphs:
        narration = summarize_paragraph(body)
        scenes.append(Scene(
            id=len(scenes) + 1,
            visual_description="A visual representation of the concept with supporting text.",
            text_overlay=heading or "Key Concept",
            narration=narration,
            target_duration=estimate_duration(narration),
        ))

    scenes.append(Scene(
        id=len(scenes) + 1,
        visual_description="Closing Slide",
        text_overlay="Thanks for watching",
        narration="That concludes our summary. Thank you for watching.",
        target_duration=4,
    ))
    return Script(scenes=scenes)
