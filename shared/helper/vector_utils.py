"""Chunking, pooling and scoring helpers shared by ingestion and retrieval."""

import math

PREVIEW_MARKER = "..."


def split_text(text: str, chunk_size: int) -> list[str]:
    """Split text into contiguous, non-overlapping chunks of at most chunk_size characters.

    Splitting is positional only and may cut through words or sentences.
    Joining the chunks in order gives back the original text.

    Args:
        text (str): The text to split.
        chunk_size (int): Maximum characters per chunk, must be positive.

    Returns:
        list[str]: ceil(len(text) / chunk_size) chunks; empty for empty text.

    Raises:
        ValueError: If chunk_size is not positive.
    """
    if chunk_size <= 0:
        raise ValueError(f"chunk_size must be positive, got {chunk_size}.")
    return [text[start:start + chunk_size] for start in range(0, len(text), chunk_size)]


def mean_pool(vectors: list[list[float]]) -> list[float]:
    """Element-wise arithmetic mean of equally sized vectors.

    Args:
        vectors (list[list[float]]): At least one vector, all of the same length.

    Returns:
        list[float]: Position i holds the mean of position i across all vectors.

    Raises:
        ValueError: If no vectors are given or their lengths differ.
    """
    if not vectors:
        raise ValueError("Cannot pool an empty list of vectors.")
    dimension = len(vectors[0])
    for vector in vectors:
        if len(vector) != dimension:
            raise ValueError(f"Cannot pool vectors of different lengths ({dimension} and {len(vector)}).")
    # fsum keeps the result independent of vector order
    return [math.fsum(column) / len(vectors) for column in zip(*vectors)]


def make_preview(text: str, max_chars: int) -> str:
    """First max_chars characters of text, with PREVIEW_MARKER appended if anything was cut."""
    return text[:max_chars] + (PREVIEW_MARKER if len(text) > max_chars else "")


def distance_to_similarity(distance: float) -> float:
    """Convert a cosine distance in [0, 2] to the reported similarity 1 - distance.

    The result lies in [-1, 1] and is deliberately not clipped.
    """
    return 1.0 - distance


def clamp_pagination(limit: int | None, page: int | None, default_limit: int, max_limit: int = 100) -> tuple[int, int, int]:
    """Normalise pagination input.

    limit is clamped to [1, max_limit] (default_limit when missing), page to >= 1.

    Returns:
        tuple[int, int, int]: (limit, page, offset) with offset = (page - 1) * limit.
    """
    limit = default_limit if limit is None else min(max(int(limit), 1), max_limit)
    page = 1 if page is None else max(int(page), 1)
    return limit, page, (page - 1) * limit
