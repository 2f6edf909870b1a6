"""RoundRobinPolicy — load-balanced pick between the two least-loaded managers."""

from __future__ import annotations

from triage.domain.entities.manager import Manager


def top_two(candidates: list[Manager]) -> list[Manager]:
    """The two lowest-load managers, ordered by (current_load ASC, name ASC)."""
    ordered = sorted(candidates, key=lambda m: (m.current_load, m.name.casefold()))
    return ordered[:2]


def pick_next(candidates: list[Manager], counter: int) -> tuple[Manager, int]:
    """Deterministic pick from the two least-loaded candidates.

    1. Keep the two lowest-load candidates (ties by name).
    2. A single candidate is returned as-is; the counter is untouched.
    3. Two candidates with different loads → the lower load wins.
    4. Two candidates with equal load → *counter* parity picks
       (even → first by name, odd → second).
    5. With two candidates the counter always advances by one.

    Args:
        candidates: non-empty list of eligible managers.
        counter: current round-robin counter value for the office.

    Returns:
        (chosen_manager, new_counter)

    Raises:
        ValueError: if candidates list is empty.
    """
    if not candidates:
        raise ValueError("Cannot pick from an empty candidate list")

    pair = top_two(candidates)
    if len(pair) == 1:
        return pair[0], counter

    first, second = pair
    if first.current_load != second.current_load:
        chosen = first
    else:
        chosen = pair[counter % 2]

    return chosen, counter + 1
