import re

_WHITESPACE = re.compile(r"\s+")


def split_text(text: str, chunk_size: int = 2000, overlap: int = 200) -> list[str]:
    """Split text into overlapping windows of at most chunk_size characters.

    A window is cut at the last whitespace inside it when there is one, so
    words are not broken across chunks. Consecutive chunks share up to
    ``overlap`` characters, starting on a word boundary.
    """
    if chunk_size < 1:
        raise ValueError("chunk_size must be positive")
    if not 0 <= overlap < chunk_size:
        raise ValueError("overlap must be between 0 and chunk_size - 1")

    text = text.strip()
    if not text:
        return []

    chunks: list[str] = []
    start = 0
    while start < len(text):
        end = min(start + chunk_size, len(text))
        if end < len(text) and not text[end].isspace():
            cut = max(text.rfind(" ", start, end), text.rfind("\n", start, end))
            if cut > start:
                end = cut

        chunk = text[start:end].strip()
        if chunk:
            chunks.append(chunk)
        if end >= len(text):
            break

        next_start = end - overlap
        if overlap and next_start > start and not text[next_start - 1].isspace():
            match = _WHITESPACE.search(text, next_start, end)
            next_start = match.end() if match else end
        start = next_start if next_start > start else end

    return chunks
