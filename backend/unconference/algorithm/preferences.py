"""
Preference and popularity indexes derived from participants' topic rankings.

All maps are plain dicts built in input order so that downstream iteration
(topic ordering, tie-breaks) is reproducible for identical input.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Iterable

from unconference.models.participant import Participant
from unconference.models.ranking import TopicRanking
from unconference.models.topic import Topic

PreferenceIndex = dict[str, dict[str, int]]


@dataclass(frozen=True)
class TopicDemand:
    demand: int
    sessions_needed: int


def build_preference_index(rankings: Iterable[TopicRanking], topics: list[Topic]) -> PreferenceIndex:
    """
    Map participant id -> (topic id -> 1-based rank), keeping approved topics only.

    Ranks keep their position in the submitted list, so a ranking of
    ``[rejected, t2]`` gives ``t2`` rank 2. Participants whose ranking holds no
    approved topic get no entry at all.
    """
    topic_ids = {t.id for t in topics}
    index: PreferenceIndex = {}

    for ranking in rankings:
        prefs: dict[str, int] = {}
        for position, topic_id in enumerate(ranking.ranked_topic_ids):
            if topic_id in topic_ids:
                prefs[topic_id] = position + 1
        if prefs:
            index[ranking.participant_id] = prefs

    return index


def calculate_topic_popularity(rankings: Iterable[TopicRanking], topics: list[Topic]) -> dict[str, int]:
    """
    Rank-weighted popularity: a topic at index i of a ranking of length n earns n - i.
    """
    popularity = {t.id: 0 for t in topics}

    for ranking in rankings:
        length = len(ranking.ranked_topic_ids)
        for position, topic_id in enumerate(ranking.ranked_topic_ids):
            if topic_id in popularity:
                popularity[topic_id] += length - position

    return popularity


def top_preferences(prefs: dict[str, int], count: int) -> list[str]:
    return [topic_id for topic_id, _ in sorted(prefs.items(), key=lambda item: item[1])[:count]]


def calculate_topic_demand(
    *,
    topics: list[Topic],
    participants: list[Participant],
    preferences: PreferenceIndex,
    number_of_rounds: int,
    max_group_size: int,
) -> dict[str, TopicDemand]:
    """
    Count, per topic, the participants holding it among their top ``number_of_rounds``
    choices and derive how many sessions would be needed to seat all of them.

    Topics nobody asked for still need one session so they remain schedulable.
    """
    counts = {t.id: 0 for t in topics}

    for participant in participants:
        prefs = preferences.get(participant.id)
        if not prefs:
            continue
        for topic_id in top_preferences(prefs, number_of_rounds):
            if topic_id in counts:
                counts[topic_id] += 1

    return {
        topic_id: TopicDemand(
            demand=demand,
            sessions_needed=max(1, math.ceil(demand / max_group_size)),
        )
        for topic_id, demand in counts.items()
    }
