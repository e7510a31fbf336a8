from padel_manager.models.category import TournamentCategory
from padel_manager.models.club import Club
from padel_manager.models.court import Court
from padel_manager.models.match import Match
from padel_manager.models.player import Player
from padel_manager.models.pool import Pool
from padel_manager.models.team import Team
from padel_manager.models.tournament import Tournament

__all__ = [
    "Club",
    "Court",
    "Player",
    "Tournament",
    "TournamentCategory",
    "Team",
    "Pool",
    "Match",
]
