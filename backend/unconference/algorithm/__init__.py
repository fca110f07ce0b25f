"""
Round-by-round assignment of unconference participants to discussion topics.
"""

from unconference.algorithm.balancer import balance_groups
from unconference.algorithm.preferences import (
    TopicDemand,
    build_preference_index,
    calculate_topic_demand,
    calculate_topic_popularity,
)
from unconference.algorithm.scheduler import (
    REPEAT_POOL_THRESHOLD,
    AssignmentInputError,
    generate_assignments,
    schedule_round,
)
from unconference.algorithm.statistics import calculate_statistics
from unconference.algorithm.topic_selection import TOPIC_STRATEGIES, TopicStrategy

__all__ = [
    "generate_assignments",
    "schedule_round",
    "AssignmentInputError",
    "REPEAT_POOL_THRESHOLD",
    "TOPIC_STRATEGIES",
    "TopicStrategy",
    "balance_groups",
    "build_preference_index",
    "calculate_topic_popularity",
    "calculate_topic_demand",
    "TopicDemand",
    "calculate_statistics",
]
