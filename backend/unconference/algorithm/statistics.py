"""
Coverage statistics for a generated schedule.
"""

from __future__ import annotations

from unconference.algorithm.preferences import PreferenceIndex, top_preferences
from unconference.models.assignment import Assignment
from unconference.models.event import Event
from unconference.models.participant import Participant
from unconference.models.ranking import TopicRanking
from unconference.models.statistics import (
    AssignmentStatistics,
    PreferredChoiceDistribution,
    RoundStatistics,
    SortedChoiceDistribution,
    TopicOccurrence,
    TopicOccurrenceDistribution,
)
from unconference.models.topic import Topic

DEFAULT_MIN_TOPICS_TO_RANK = 6


def _topics_by_participant(assignments: list[Assignment]) -> dict[str, list[str]]:
    by_participant: dict[str, list[str]] = {}
    for a in assignments:
        by_participant.setdefault(a.participant_id, []).append(a.topic_id)
    return by_participant


def calculate_preferred_choice_distribution(
    *,
    participants: list[Participant],
    assignments: list[Assignment],
    preferences: PreferenceIndex,
    number_of_rounds: int,
) -> PreferredChoiceDistribution:
    """How many of their top ``number_of_rounds`` choices each ranked participant received."""
    distribution = {count: 0 for count in range(number_of_rounds + 1)}
    assigned = _topics_by_participant(assignments)
    with_rankings = 0

    for participant in participants:
        prefs = preferences.get(participant.id)
        if not prefs:
            continue
        with_rankings += 1
        wanted = set(top_preferences(prefs, number_of_rounds))
        matches = sum(1 for topic_id in assigned.get(participant.id, []) if topic_id in wanted)
        distribution[matches] = distribution.get(matches, 0) + 1

    return PreferredChoiceDistribution(
        distribution=distribution,
        total_participants_with_rankings=with_rankings,
    )


def calculate_sorted_choice_distribution(
    *,
    participants: list[Participant],
    assignments: list[Assignment],
    rankings: list[TopicRanking],
    number_of_rounds: int,
    min_topics_to_rank: int | None = None,
) -> SortedChoiceDistribution:
    """Like the preferred-choice distribution, but against the first ``min_topics_to_rank`` raw ranked ids."""
    limit = min_topics_to_rank or DEFAULT_MIN_TOPICS_TO_RANK
    distribution = {count: 0 for count in range(number_of_rounds + 1)}
    assigned = _topics_by_participant(assignments)
    latest = {r.participant_id: r for r in rankings}
    with_rankings = 0

    for participant in participants:
        ranking = latest.get(participant.id)
        if ranking is None or not ranking.ranked_topic_ids:
            continue
        with_rankings += 1
        ranked = set(ranking.ranked_topic_ids[:limit])
        matches = sum(1 for topic_id in assigned.get(participant.id, []) if topic_id in ranked)
        distribution[matches] = distribution.get(matches, 0) + 1

    return SortedChoiceDistribution(
        distribution=distribution,
        total_participants_with_rankings=with_rankings,
        min_topics_to_rank=limit,
    )


def calculate_topic_occurrence_distribution(
    assignments: list[Assignment], topics: list[Topic]
) -> TopicOccurrenceDistribution:
    """Number of distinct (round, group) sessions each topic ran in."""
    titles = {t.id: t.title for t in topics}
    sessions: dict[str, set[tuple[int, int]]] = {}
    for a in assignments:
        sessions.setdefault(a.topic_id, set()).add((a.round_number, a.group_number))

    details = [
        TopicOccurrence(
            topic_id=topic_id,
            topic_title=titles.get(topic_id) or "Unknown Topic",
            occurrences=len(keys),
        )
        for topic_id, keys in sessions.items()
    ]
    details.sort(key=lambda d: -d.occurrences)

    return TopicOccurrenceDistribution(total_topics_planned=len(sessions), topic_details=details)


def calculate_statistics(
    *,
    event: Event,
    participants: list[Participant],
    assignments: list[Assignment],
    round_statistics: list[RoundStatistics],
    preferences: PreferenceIndex,
    rankings: list[TopicRanking],
    topics: list[Topic],
) -> AssignmentStatistics:
    counts: dict[str, int] = {}
    for a in assignments:
        counts[a.participant_id] = counts.get(a.participant_id, 0) + 1

    fully = partially = unassigned = 0
    for participant in participants:
        count = counts.get(participant.id, 0)
        if count == event.number_of_rounds:
            fully += 1
        elif count > 0:
            partially += 1
        else:
            unassigned += 1

    total = len(assignments)
    slots = event.number_of_rounds * event.discussions_per_round

    return AssignmentStatistics(
        total_participants=len(participants),
        total_assignments=total,
        participants_fully_assigned=fully,
        participants_partially_assigned=partially,
        participants_not_assigned=unassigned,
        topics_used=len({a.topic_id for a in assignments}),
        average_group_size=total / slots if total else 0.0,
        round_statistics=list(round_statistics),
        preferred_choice_distribution=calculate_preferred_choice_distribution(
            participants=participants,
            assignments=assignments,
            preferences=preferences,
            number_of_rounds=event.number_of_rounds,
        ),
        sorted_choice_distribution=calculate_sorted_choice_distribution(
            participants=participants,
            assignments=assignments,
            rankings=rankings,
            number_of_rounds=event.number_of_rounds,
            min_topics_to_rank=event.settings.min_topics_to_rank,
        ),
        topic_occurrence_distribution=calculate_topic_occurrence_distribution(assignments, topics),
    )
