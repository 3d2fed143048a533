"""Flashcard normalization and quality filtering."""

from dataclasses import dataclass

from cramfast.domain.flashcards import Flashcard

BOILERPLATE_PREFIXES: tuple[str, ...] = (
    "what is key point",
    "what is the key point",
    "key concept",
    "key point",
    "main idea of the notes",
)


@dataclass(frozen=True)
class FilterRules:
    """Tunable thresholds for accepting a flashcard."""

    min_field_chars: int = 12
    boilerplate_prefixes: tuple[str, ...] = BOILERPLATE_PREFIXES


def normalize_and_filter(
    cards: list[Flashcard], rules: FilterRules | None = None
) -> list[Flashcard]:
    """Trim, validate and deduplicate candidate flashcards.

    Cards are kept in their original order. Duplicates are detected by a
    case-insensitive match on the question and the first occurrence wins.
    """
    resolved = rules or FilterRules()
    seen: set[str] = set()
    accepted: list[Flashcard] = []
    for card in cards:
        front = (card.front or "").strip()
        back = (card.back or "").strip()
        if len(front) < resolved.min_field_chars or len(back) < resolved.min_field_chars:
            continue
        if not front.endswith("?"):
            continue
        if _is_boilerplate(front, resolved.boilerplate_prefixes):
            continue
        key = front.lower()
        if key in seen:
            continue
        seen.add(key)
        accepted.append(Flashcard(front=front, back=back))
    return accepted


def _is_boilerplate(front: str, prefixes: tuple[str, ...]) -> bool:
    lowered = front.lower()
    return any(lowered.startswith(prefix) for prefix in prefixes)
