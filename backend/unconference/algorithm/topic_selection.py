from __future__ import annotations

from typing import Literal

from unconference.algorithm.preferences import TopicDemand
from unconference.models.topic import Topic

TopicStrategy = Literal["demand", "popularity"]

TOPIC_STRATEGIES: tuple[str, ...] = ("demand", "popularity")


def sort_by_popularity(topics: list[Topic], popularity: dict[str, int]) -> list[Topic]:
    # sorted() is stable: equal scores keep input order.
    return sorted(topics, key=lambda t: -popularity.get(t.id, 0))


def select_popular_topics(topics: list[Topic], popularity: dict[str, int], count: int) -> list[Topic]:
    """The same top-``count`` topics every round, regardless of history."""
    return sort_by_popularity(topics, popularity)[: min(count, len(topics))]


def build_demand_schedule(
    *,
    topics: list[Topic],
    demand: dict[str, TopicDemand],
    popularity: dict[str, int],
    number_of_rounds: int,
    discussions_per_round: int,
) -> dict[int, list[Topic]]:
    """
    Decide up front which topics run in which round.

    High-demand topics are repeated until they have been offered
    ``sessions_needed`` times, then the schedule moves on to the next topics in
    demand order. Once every topic has had its sessions, remaining slots are
    filled with any topic not already running in that round.

    Returns:
        round number -> topics offered that round, in scheduling order
    """
    ordered = sorted(
        topics,
        key=lambda t: (-demand[t.id].demand, -popularity.get(t.id, 0)),
    )
    scheduled_count = {t.id: 0 for t in ordered}
    schedule: dict[int, list[Topic]] = {}

    for round_number in range(1, number_of_rounds + 1):
        round_topics: list[Topic] = []
        in_round: set[str] = set()

        for _ in range(discussions_per_round):
            choice = next(
                (
                    t
                    for t in ordered
                    if t.id not in in_round and scheduled_count[t.id] < demand[t.id].sessions_needed
                ),
                None,
            )
            if choice is None:
                choice = next((t for t in ordered if t.id not in in_round), None)
            if choice is None:
                break

            round_topics.append(choice)
            in_round.add(choice.id)
            scheduled_count[choice.id] += 1

        schedule[round_number] = round_topics

    return schedule
