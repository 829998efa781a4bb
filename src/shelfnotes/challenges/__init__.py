"""Adaptive reading challenges module.

Provides functionality for:
- Generating weekly and monthly challenges from a rolling baseline
- Tracking progress from reading sessions and finished books
- Completing, rerolling and claiming challenges
- Storing challenge history in SQLite or in memory
"""

from .engine import ChallengeEngine, ChallengeNotFoundError, ChallengeSaveError
from .schemas import (
    BaselineStats,
    ChallengeKind,
    ChallengeMetric,
    ChallengeProgress,
    ChallengeRecord,
    ChallengeState,
    GeneratedChallenge,
)
from .store import (
    ChallengeStore,
    ChallengeStoreError,
    InMemoryChallengeStore,
    SqlChallengeStore,
)
from .targets import allowed_metrics, generate_challenge, pick_metric

__all__ = [
    "BaselineStats",
    "ChallengeEngine",
    "ChallengeKind",
    "ChallengeMetric",
    "ChallengeNotFoundError",
    "ChallengeProgress",
    "ChallengeRecord",
    "ChallengeSaveError",
    "ChallengeState",
    "ChallengeStore",
    "ChallengeStoreError",
    "GeneratedChallenge",
    "InMemoryChallengeStore",
    "SqlChallengeStore",
    "allowed_metrics",
    "generate_challenge",
    "pick_metric",
]
