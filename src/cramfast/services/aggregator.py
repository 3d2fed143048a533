"""Combine page transcripts into one document."""

from cramfast.domain.flashcards import PageTranscript


def page_start_marker(page_number: int) -> str:
    return f"=== PAGE {page_number} START ==="


def page_end_marker(page_number: int) -> str:
    return f"=== PAGE {page_number} END ==="


def aggregate_transcripts(pages: list[PageTranscript]) -> str:
    """Join transcripts in page order, each wrapped in page boundary markers."""
    blocks = []
    for page in sorted(pages, key=lambda item: item.page_index):
        text = page.text.strip()
        if not text:
            continue
        number = page.page_index + 1
        blocks.append(
            f"{page_start_marker(number)}\n{text}\n{page_end_marker(number)}"
        )
    return "\n\n".join(blocks)


def transcript_body(pages: list[PageTranscript]) -> str:
    """Return the raw transcript text without page markers."""
    return "\n\n".join(page.text.strip() for page in pages if page.text.strip())


def truncate_document(document: str, max_chars: int) -> str:
    """Cut the document tail so the earliest content is kept."""
    if len(document) <= max_chars:
        return document
    return document[:max_chars]
