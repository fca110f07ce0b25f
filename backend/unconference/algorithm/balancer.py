from __future__ import annotations


def balance_groups(groups: dict[str, list[str]], *, ideal_size: int, max_size: int) -> int:
    """
    Move members from groups above ``ideal_size`` into groups below it.

    Single pass over the groups in their current order; members are taken from
    the end of a large group and appended to the first small group still open.
    A small group leaves the candidate list once it reaches ``ideal_size`` and
    is never revisited. Groups are modified in place.

    Returns:
        number of members moved
    """
    members = list(groups.values())
    large = [m for m in members if len(m) > ideal_size]
    small = [m for m in members if len(m) < ideal_size and len(m) < max_size]

    moved = 0
    for large_group in large:
        while len(large_group) > ideal_size and small:
            target = small[0]
            if len(target) >= max_size:
                small.pop(0)
                continue

            target.append(large_group.pop())
            moved += 1

            if len(target) >= ideal_size:
                small.pop(0)

    return moved
