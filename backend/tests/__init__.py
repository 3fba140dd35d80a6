# Force SQLModel table registration at test discovery time
# This ensures all models are registered before any test database creation
from ttleague.models.match import Match  # noqa: F401
from ttleague.models.player import Player  # noqa: F401
from ttleague.models.tournament_settings import TournamentSettings  # noqa: F401
from ttleague.models.weekly_recommendation import WeeklyRecommendation  # noqa: F401
