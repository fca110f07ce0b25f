from __future__ import annotations

from unconference.algorithm import generate_assignments
from unconference.algorithm.statistics import (
    calculate_sorted_choice_distribution,
    calculate_topic_occurrence_distribution,
)
from unconference.models.assignment import Assignment, AssignmentInput
from unconference.models.event import Event, EventSettings
from unconference.models.participant import Participant
from unconference.models.ranking import TopicRanking
from unconference.models.topic import Topic


def _golden_input(**event_overrides) -> AssignmentInput:
    fields = {
        "id": "event-1",
        "number_of_rounds": 3,
        "discussions_per_round": 2,
        "ideal_group_size": 4,
        "min_group_size": 3,
        "max_group_size": 6,
    }
    fields.update(event_overrides)
    topic_ids = [f"t{i}" for i in range(1, 7)]
    return AssignmentInput(
        event=Event(**fields),
        participants=[Participant(id=f"p{i}") for i in range(1, 13)],
        topics=[Topic(id=t, title=f"Title {t}", status="approved") for t in topic_ids],
        rankings=[TopicRanking(participant_id=f"p{i}", ranked_topic_ids=topic_ids) for i in range(1, 13)],
    )


def test_golden_statistics():
    stats = generate_assignments(_golden_input()).statistics

    assert stats.total_participants == 12
    assert stats.total_assignments == 36
    assert stats.topics_used == 4
    assert stats.average_group_size == 6.0
    assert [r.round_number for r in stats.round_statistics] == [1, 2, 3]
    assert all(r.group_sizes == [6, 6] for r in stats.round_statistics)
    assert all(r.topics_scheduled == 2 and r.participants_assigned == 12 for r in stats.round_statistics)
    assert stats.round_statistics[0].average_group_size == 6.0


def test_golden_choice_distributions():
    stats = generate_assignments(_golden_input()).statistics

    preferred = stats.preferred_choice_distribution
    # p1..p6 attend t1, t2, t3; p7..p12 attend t2, t1, t4.
    assert preferred.distribution == {0: 0, 1: 0, 2: 6, 3: 6}
    assert preferred.total_participants_with_rankings == 12

    sorted_choice = stats.sorted_choice_distribution
    assert sorted_choice.min_topics_to_rank == 6
    assert sorted_choice.distribution == {0: 0, 1: 0, 2: 0, 3: 12}


def test_sorted_choice_respects_event_setting():
    data = _golden_input(settings=EventSettings(min_topics_to_rank=2))
    sorted_choice = generate_assignments(data).statistics.sorted_choice_distribution

    assert sorted_choice.min_topics_to_rank == 2
    assert sorted_choice.distribution == {0: 0, 1: 0, 2: 12, 3: 0}


def test_topic_occurrences_count_sessions():
    occurrences = generate_assignments(_golden_input()).statistics.topic_occurrence_distribution

    assert occurrences.total_topics_planned == 4
    assert [(d.topic_id, d.occurrences) for d in occurrences.topic_details] == [
        ("t1", 2),
        ("t2", 2),
        ("t3", 1),
        ("t4", 1),
    ]
    assert occurrences.topic_details[0].topic_title == "Title t1"


def test_topic_occurrences_fall_back_to_unknown_title():
    assignments = [
        Assignment(participant_id="p1", topic_id="ghost", event_id="e", round_number=1, group_number=1),
        Assignment(participant_id="p2", topic_id="ghost", event_id="e", round_number=1, group_number=1),
    ]
    occurrences = calculate_topic_occurrence_distribution(assignments, [])
    assert occurrences.topic_details[0].topic_title == "Unknown Topic"
    assert occurrences.topic_details[0].occurrences == 1


def test_sorted_choice_skips_unranked_participants():
    participants = [Participant(id="p1"), Participant(id="p2")]
    rankings = [TopicRanking(participant_id="p1", ranked_topic_ids=["a"])]
    assignments = [Assignment(participant_id="p1", topic_id="a", event_id="e", round_number=1, group_number=1)]

    result = calculate_sorted_choice_distribution(
        participants=participants,
        assignments=assignments,
        rankings=rankings,
        number_of_rounds=1,
    )
    assert result.total_participants_with_rankings == 1
    assert result.distribution == {0: 0, 1: 1}


def test_coverage_classification_with_partial_assignments():
    data = AssignmentInput(
        event=Event(
            id="e",
            number_of_rounds=2,
            discussions_per_round=1,
            ideal_group_size=1,
            min_group_size=1,
            max_group_size=1,
        ),
        participants=[Participant(id=f"p{i}") for i in range(1, 4)],
        topics=[Topic(id="a", status="approved"), Topic(id="b", status="approved")],
    )
    stats = generate_assignments(data).statistics

    assert stats.total_assignments == 2
    assert stats.average_group_size == 1.0
    assert (
        stats.participants_fully_assigned
        + stats.participants_partially_assigned
        + stats.participants_not_assigned
    ) == 3
    assert stats.participants_fully_assigned == 1
    assert stats.participants_not_assigned == 2
