"""
Scrimmage Scheduler: round-robin pickup event scheduling.
Rotates teammates before repeating any pairing, keeps anyone from sitting out
twice running, and spreads sit-outs evenly across the event.
"""

from .models import ScrimmageConfig, Matchup, Round, ScoringWeights, SearchStats
from .generator import generate_schedule, ScheduleCancelled
from .validate import ConfigurationError, validate_config, validate_rounds
from .composer import SamplingComposer, CpSatComposer, TeamComposer

__version__ = "1.0.0"

__all__ = [
    "ScrimmageConfig", "Matchup", "Round", "ScoringWeights", "SearchStats",
    "generate_schedule", "ScheduleCancelled",
    "ConfigurationError", "validate_config", "validate_rounds",
    "SamplingComposer", "CpSatComposer", "TeamComposer",
]
