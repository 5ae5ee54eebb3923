"""
Giveaway workflow: winner selection and the end-to-end orchestrator.
"""

from token_giveaway.giveaway.orchestrator import GiveawayOrchestrator, GiveawayResult, GiveawaySetup
from token_giveaway.giveaway.selection import generate_participants, select_winners

__all__ = [
    "GiveawayOrchestrator",
    "GiveawayResult",
    "GiveawaySetup",
    "generate_participants",
    "select_winners",
]
