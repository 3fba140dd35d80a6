from ttleague.models.match import Match
from ttleague.models.player import Player
from ttleague.models.tournament_settings import TournamentSettings
from ttleague.models.weekly_recommendation import WeeklyRecommendation

__all__ = [
    "Player",
    "Match",
    "TournamentSettings",
    "WeeklyRecommendation",
]
