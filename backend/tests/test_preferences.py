from __future__ import annotations

from unconference.algorithm.preferences import (
    build_preference_index,
    calculate_topic_demand,
    calculate_topic_popularity,
)
from unconference.models.participant import Participant
from unconference.models.ranking import TopicRanking
from unconference.models.topic import Topic


def _topics(*ids: str) -> list[Topic]:
    return [Topic(id=i, title=i.upper(), status="approved") for i in ids]


def test_preference_index_uses_one_based_rank_positions():
    rankings = [TopicRanking(participant_id="p1", ranked_topic_ids=["t1", "t2", "t3"])]
    index = build_preference_index(rankings, _topics("t1", "t2", "t3"))
    assert index == {"p1": {"t1": 1, "t2": 2, "t3": 3}}


def test_preference_index_skips_unapproved_topics_but_keeps_positions():
    rankings = [TopicRanking(participant_id="p1", ranked_topic_ids=["gone", "t2"])]
    index = build_preference_index(rankings, _topics("t2"))
    assert index == {"p1": {"t2": 2}}


def test_preference_index_omits_participants_without_approved_topics():
    rankings = [
        TopicRanking(participant_id="p1", ranked_topic_ids=["gone"]),
        TopicRanking(participant_id="p2", ranked_topic_ids=[]),
    ]
    assert build_preference_index(rankings, _topics("t1")) == {}


def test_preference_index_later_ranking_and_later_position_win():
    rankings = [
        TopicRanking(participant_id="p1", ranked_topic_ids=["t1", "t2"]),
        TopicRanking(participant_id="p1", ranked_topic_ids=["t2", "t1"]),
        TopicRanking(participant_id="p2", ranked_topic_ids=["t1", "t2", "t1"]),
    ]
    index = build_preference_index(rankings, _topics("t1", "t2"))
    assert index == {"p1": {"t2": 1, "t1": 2}, "p2": {"t1": 3, "t2": 2}}


def test_popularity_weights_by_position_and_ignores_unapproved():
    rankings = [
        TopicRanking(participant_id="p1", ranked_topic_ids=["t1", "t2", "x"]),
        TopicRanking(participant_id="p2", ranked_topic_ids=["t2", "t1"]),
    ]
    popularity = calculate_topic_popularity(rankings, _topics("t1", "t2", "t3"))
    # p1: t1=3, t2=2 ; p2: t2=2, t1=1
    assert popularity == {"t1": 4, "t2": 4, "t3": 0}
    assert list(popularity) == ["t1", "t2", "t3"]


def test_topic_demand_counts_top_choices_per_round():
    topics = _topics("t1", "t2", "t3")
    participants = [Participant(id=f"p{i}") for i in range(5)]
    rankings = [TopicRanking(participant_id=f"p{i}", ranked_topic_ids=["t1", "t2", "t3"]) for i in range(5)]
    preferences = build_preference_index(rankings, topics)

    demand = calculate_topic_demand(
        topics=topics,
        participants=participants,
        preferences=preferences,
        number_of_rounds=2,
        max_group_size=3,
    )

    assert demand["t1"].demand == 5
    assert demand["t1"].sessions_needed == 2
    assert demand["t2"].demand == 5
    assert demand["t3"].demand == 0
    assert demand["t3"].sessions_needed == 1
