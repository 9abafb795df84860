"""Event rating domain modules."""

from domain.ratings.common import Match, RatingEstimate, TeamRating
from domain.ratings.protocol import DprPolicy, MatchClass

__all__ = ["DprPolicy", "Match", "MatchClass", "RatingEstimate", "TeamRating"]
