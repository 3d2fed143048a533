"""Deterministic flashcards built straight from transcript text.

The diagnostic front ends with a question mark so the card survives the
question filter and the fallback set collapses to one card after
deduplication instead of to none.
"""

import re

from cramfast.domain.flashcards import Flashcard, GenerationResult

FALLBACK_TOPIC = "Study Notes"
FALLBACK_FRONT = "Transcription unclear, re-upload a clearer image?"

_FRAGMENT_SPLIT = re.compile(r"\n+|(?<=[.!?])\s+")
_PAGE_MARKER = re.compile(r"^=== PAGE \d+ (START|END) ===$", re.MULTILINE)


def build_fallback_flashcards(
    notes_text: str, *, min_fragment_chars: int = 24, limit: int = 8
) -> GenerationResult:
    """Turn the first long transcript fragments into placeholder cards.

    Every card shares the same diagnostic question, so filtering collapses
    the set to a single card.
    """
    text = _PAGE_MARKER.sub("", notes_text)
    fragments = [fragment.strip() for fragment in _FRAGMENT_SPLIT.split(text)]
    kept = [fragment for fragment in fragments if len(fragment) > min_fragment_chars]
    return GenerationResult(
        topic=FALLBACK_TOPIC,
        flashcards=[
            Flashcard(front=FALLBACK_FRONT, back=fragment) for fragment in kept[:limit]
        ],
    )
