"""Recommendation domain entity."""

from dataclasses import dataclass


@dataclass(frozen=True)
class RecommendationEntity:
    """A scored recommendation with a human-readable reason."""

    anime_id: str
    anime_title: str
    score: float
    reason: str
