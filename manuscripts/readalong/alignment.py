"""
Alignment Module

Projects a word position in the verse being spoken onto the parallel
verse in the other language, for mirrored highlighting.

Parallel verses almost never have equal word counts and no word-level
alignment data exists, so positions are scaled proportionally. The
result is a best-effort heuristic: monotonic and always in range, but
not a translation alignment.
"""


def map_index(source_index: int, source_len: int, target_len: int) -> int:
    """
    Map a word index in one sequence to the proportional index in another.

    Args:
        source_index: Word index in the spoken sequence
        source_len: Number of words in the spoken sequence
        target_len: Number of words in the other sequence

    Returns:
        Index in [0, target_len - 1]

    Raises:
        ValueError: If either sequence is empty
    """
    if source_len <= 0 or target_len <= 0:
        raise ValueError(
            f"Cannot map between sequences of length {source_len} and {target_len}"
        )
    # round-half-up to match the reader's highlighting
    mapped = int(source_index * target_len / source_len + 0.5)
    return max(0, min(mapped, target_len - 1))
