from .auth import User, SessionToken
from .security import SecurityEvent
from .locations import Location
from .seasons import Season, GridCell
from .progress import SeasonProgress, CheckIn
from .rewards import RewardDefinition, IssuedReward, RaffleEntry

__all__ = [
    'User', 'SessionToken', 'SecurityEvent',
    'Location',
    'Season', 'GridCell',
    'SeasonProgress', 'CheckIn',
    'RewardDefinition', 'IssuedReward', 'RaffleEntry',
]
