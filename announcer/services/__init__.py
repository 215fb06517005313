"""
Services package for the CTFd announcer.

Stores persist announced state, reconcilers decide what to announce,
and the client and notifier talk to CTFd and Discord.
"""

from .base import BaseService
from .solve_store import SolveStore
from .leaderboard_store import LeaderboardStore
from .solve_reconciler import SolveReconciler
from .leaderboard_reconciler import LeaderboardReconciler, compute_overtakes

__all__ = [
    'BaseService',
    'SolveStore',
    'LeaderboardStore',
    'SolveReconciler',
    'LeaderboardReconciler',
    'compute_overtakes',
]
