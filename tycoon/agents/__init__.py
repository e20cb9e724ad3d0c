from tycoon.agents.base import Agent
from tycoon.agents.profiles import PROFILES, Difficulty, DifficultyProfile, get_profile
from tycoon.agents.bot import DecisionAgent

__all__ = [
    "Agent",
    "PROFILES",
    "Difficulty",
    "DifficultyProfile",
    "get_profile",
    "DecisionAgent",
]
