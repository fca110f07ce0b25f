from __future__ import annotations

import logging
from dataclasses import dataclass, field

from unconference.algorithm.balancer import balance_groups
from unconference.algorithm.preferences import (
    PreferenceIndex,
    build_preference_index,
    calculate_topic_demand,
    calculate_topic_popularity,
)
from unconference.algorithm.statistics import calculate_statistics
from unconference.algorithm.topic_selection import (
    TOPIC_STRATEGIES,
    TopicStrategy,
    build_demand_schedule,
    select_popular_topics,
    sort_by_popularity,
)
from unconference.models.assignment import Assignment, AssignmentInput, AssignmentResult
from unconference.models.event import Event
from unconference.models.participant import Participant
from unconference.models.statistics import RoundStatistics
from unconference.models.topic import Topic

logger = logging.getLogger(__name__)

REPEAT_POOL_THRESHOLD = 0.8
EXCLUDED_USER_ROLES = frozenset({"Admin", "Organizer"})


class AssignmentInputError(ValueError):
    """Raised when the input cannot produce any schedule at all."""


@dataclass
class RoundOutcome:
    assignments: list[Assignment] = field(default_factory=list)
    statistics: RoundStatistics | None = None
    warnings: list[str] = field(default_factory=list)


def filter_schedulable_participants(data: AssignmentInput) -> list[Participant]:
    """Active participants who are neither organizers nor admin/organizer users."""
    schedulable: list[Participant] = []
    for p in data.participants:
        if not p.is_active:
            continue
        if p.id in data.organizer_ids:
            continue
        if p.user_id and data.user_roles.get(p.user_id) in EXCLUDED_USER_ROLES:
            continue
        schedulable.append(p)
    return schedulable


def _validate_group_sizes(event: Event) -> None:
    if not event.min_group_size <= event.ideal_group_size <= event.max_group_size:
        raise AssignmentInputError(
            "Cannot generate assignments: group sizes must satisfy "
            f"min ({event.min_group_size}) <= ideal ({event.ideal_group_size}) <= max ({event.max_group_size})"
        )


def schedule_round(
    *,
    event: Event,
    round_number: int,
    topics: list[Topic],
    participants: list[Participant],
    preferences: PreferenceIndex,
    history: dict[str, set[str]],
    repeat_pool_threshold: float = REPEAT_POOL_THRESHOLD,
) -> RoundOutcome:
    """
    Form this round's groups and record the resulting assignments in ``history``.

    ``topics`` must already be in group order. Participants are placed in two
    passes: first by their own ranking, then into the smallest open group they
    have not attended yet. Anyone left over is reported in the warnings.
    """
    outcome = RoundOutcome()
    warnings = outcome.warnings

    if len(topics) < event.discussions_per_round:
        warnings.append(
            f"Round {round_number}: Only {len(topics)} topics available, expected {event.discussions_per_round}"
        )

    groups: dict[str, list[str]] = {t.id: [] for t in topics}
    offered = set(groups)

    eligible = [p for p in participants if history.get(p.id, set()).isdisjoint(offered)]
    if len(eligible) < repeat_pool_threshold * len(participants):
        warnings.append(
            f"Round {round_number}: Only {len(eligible)} of {len(participants)} participants have not attended "
            "this round's topics yet. Allowing topic repeats for this round."
        )
        pool = list(participants)
    else:
        pool = eligible
        eligible_ids = {p.id for p in eligible}
        for p in participants:
            if p.id not in eligible_ids:
                warnings.append(
                    f"Round {round_number}: Participant {p.id} not assigned - already attended a topic offered this round"
                )

    placed: set[str] = set()
    for participant in pool:
        prefs = preferences.get(participant.id)
        if not prefs:
            continue
        attended = history.get(participant.id, set())
        candidates = sorted(
            ((topic_id, rank) for topic_id, rank in prefs.items() if topic_id in groups),
            key=lambda item: item[1],
        )
        for topic_id, _ in candidates:
            group = groups[topic_id]
            if topic_id not in attended and len(group) < event.max_group_size:
                group.append(participant.id)
                placed.add(participant.id)
                break

    for participant in pool:
        if participant.id in placed:
            continue
        attended = history.get(participant.id, set())
        open_topics = [
            topic_id
            for topic_id, group in groups.items()
            if topic_id not in attended and len(group) < event.max_group_size
        ]
        if open_topics:
            # min() keeps the first of equal sizes, i.e. the more popular topic.
            target = min(open_topics, key=lambda topic_id: len(groups[topic_id]))
            groups[target].append(participant.id)
            placed.add(participant.id)
        elif offered <= attended:
            warnings.append(
                f"Round {round_number}: Participant {participant.id} already attended all {len(offered)} topics offered this round"
            )
        else:
            warnings.append(
                f"Round {round_number}: Unable to assign participant {participant.id} - all groups are full"
            )

    moved = balance_groups(groups, ideal_size=event.ideal_group_size, max_size=event.max_group_size)

    group_sizes: list[int] = []
    for group_number, (topic_id, members) in enumerate(groups.items(), start=1):
        if len(members) < event.min_group_size:
            warnings.append(
                f"Round {round_number}, Group {group_number}: Group size {len(members)} is below minimum {event.min_group_size}"
            )
        group_sizes.append(len(members))

        for participant_id in members:
            outcome.assignments.append(
                Assignment(
                    participant_id=participant_id,
                    topic_id=topic_id,
                    event_id=event.id,
                    round_number=round_number,
                    group_number=group_number,
                )
            )
            history.setdefault(participant_id, set()).add(topic_id)

    outcome.statistics = RoundStatistics(
        round_number=round_number,
        topics_scheduled=len(topics),
        participants_assigned=len(outcome.assignments),
        group_sizes=group_sizes,
        average_group_size=sum(group_sizes) / len(group_sizes) if group_sizes else 0.0,
    )
    logger.debug(
        f"Round {round_number}: {len(outcome.assignments)} assigned across {len(groups)} groups "
        f"(pool={len(pool)}, balanced moves={moved})"
    )
    return outcome


def generate_assignments(
    data: AssignmentInput,
    *,
    topic_strategy: TopicStrategy = "demand",
    repeat_pool_threshold: float = REPEAT_POOL_THRESHOLD,
) -> AssignmentResult:
    """
    Build the full multi-round schedule for one event.

    Args:
        data: Event configuration plus participant, topic and ranking snapshots
        topic_strategy: "demand" plans repeats of in-demand topics across rounds;
            "popularity" offers the same most popular topics every round
        repeat_pool_threshold: Share of participants that must still be new to a
            round's topics before returning participants are held back

    Returns:
        AssignmentResult with unsaved assignments, statistics and warnings

    Raises:
        AssignmentInputError: If there is nobody or nothing to schedule
    """
    if topic_strategy not in TOPIC_STRATEGIES:
        raise ValueError(f"Unknown topic strategy: {topic_strategy}")

    event = data.event
    warnings: list[str] = []

    if not data.participants:
        raise AssignmentInputError("Cannot generate assignments: no participants")
    if not data.topics:
        raise AssignmentInputError("Cannot generate assignments: no topics")
    _validate_group_sizes(event)

    participants = filter_schedulable_participants(data)
    if not participants:
        raise AssignmentInputError(
            "Cannot generate assignments: no active participants (after filtering admins and organizers)"
        )

    approved = [t for t in data.topics if t.is_approved]
    if not approved:
        raise AssignmentInputError("Cannot generate assignments: no approved topics")

    if len(approved) < event.discussions_per_round:
        warnings.append(
            f"Only {len(approved)} approved topics available for {event.discussions_per_round} discussions per round. "
            "Some topics will be repeated."
        )

    preferences = build_preference_index(data.rankings, approved)
    popularity = calculate_topic_popularity(data.rankings, approved)

    if topic_strategy == "demand":
        demand = calculate_topic_demand(
            topics=approved,
            participants=participants,
            preferences=preferences,
            number_of_rounds=event.number_of_rounds,
            max_group_size=event.max_group_size,
        )
        schedule = build_demand_schedule(
            topics=approved,
            demand=demand,
            popularity=popularity,
            number_of_rounds=event.number_of_rounds,
            discussions_per_round=event.discussions_per_round,
        )
    else:
        popular = select_popular_topics(approved, popularity, event.discussions_per_round)
        schedule = {r: popular for r in range(1, event.number_of_rounds + 1)}

    assignments: list[Assignment] = []
    round_stats: list[RoundStatistics] = []
    history: dict[str, set[str]] = {}

    for round_number in range(1, event.number_of_rounds + 1):
        round_topics = sort_by_popularity(schedule.get(round_number, []), popularity)
        if not round_topics:
            warnings.append(f"Round {round_number}: No topics scheduled")
            continue

        outcome = schedule_round(
            event=event,
            round_number=round_number,
            topics=round_topics,
            participants=participants,
            preferences=preferences,
            history=history,
            repeat_pool_threshold=repeat_pool_threshold,
        )
        assignments.extend(outcome.assignments)
        round_stats.append(outcome.statistics)
        warnings.extend(outcome.warnings)

    statistics = calculate_statistics(
        event=event,
        participants=participants,
        assignments=assignments,
        round_statistics=round_stats,
        preferences=preferences,
        rankings=data.rankings,
        topics=data.topics,
    )
    logger.info(
        f"Generated {len(assignments)} assignments for event {event.id} "
        f"({statistics.participants_fully_assigned}/{len(participants)} fully assigned, {len(warnings)} warnings)"
    )
    return AssignmentResult(assignments=assignments, statistics=statistics, warnings=warnings)
