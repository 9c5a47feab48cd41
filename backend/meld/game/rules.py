from __future__ import annotations

from collections.abc import Iterable, Sequence

from .models import WinCondition


ANONYMOUS_NAME = "Anonymous"


def normalize_name(raw: str, max_length: int = 20) -> str:
    n = raw.strip()[:max_length]
    return n or ANONYMOUS_NAME


def dedupe_name(name: str, taken: Iterable[str]) -> str:
    """Append " (n)" with the smallest n >= 2 when ``name`` is already taken."""
    taken_names = set(taken)
    if name not in taken_names:
        return name
    n = 2
    while f"{name} ({n})" in taken_names:
        n += 1
    return f"{name} ({n})"


def normalize_word(raw: str) -> str:
    return raw.strip().lower()


def resolve_win(words: Sequence[str], win_condition: WinCondition) -> str | None:
    """Returns the winning word if ``words`` satisfy the win condition, else None.

    Fewer than two submissions never win. In majority mode words are counted
    in submission order and the first word (by first appearance) reaching the
    highest count is the candidate; it wins only with a strict majority.
    """
    if len(words) < 2:
        return None

    if win_condition == "exact":
        first = words[0]
        return first if all(w == first for w in words) else None

    counts: dict[str, int] = {}
    for w in words:
        counts[w] = counts.get(w, 0) + 1

    winner: str | None = None
    max_count = 0
    for w, count in counts.items():
        if count > max_count:
            winner, max_count = w, count

    if max_count * 2 > len(words):
        return winner
    return None
