"""
Phase and match status transitions.

All transitions are triggered by organizers; nothing here times out or
retries on its own.

Phase flow:  pending -> active -> completed, cancelled from pending/active
Match flow:  pending -> in_progress -> finished, error and
             needs_manual_review from any state but finished
"""
import logging
from datetime import datetime
from typing import Dict, Iterable, List, Optional

from .errors import InvalidTransitionError
from .models import Match, MatchStatus, Phase, PhaseStatus

logger = logging.getLogger(__name__)


PHASE_TRANSITIONS = {
    PhaseStatus.PENDING: [PhaseStatus.ACTIVE, PhaseStatus.CANCELLED],
    PhaseStatus.ACTIVE: [PhaseStatus.COMPLETED, PhaseStatus.CANCELLED],
    PhaseStatus.COMPLETED: [],
    PhaseStatus.CANCELLED: [],
}

MATCH_TRANSITIONS = {
    MatchStatus.PENDING: [MatchStatus.IN_PROGRESS, MatchStatus.ERROR, MatchStatus.NEEDS_MANUAL_REVIEW],
    MatchStatus.IN_PROGRESS: [MatchStatus.FINISHED, MatchStatus.ERROR, MatchStatus.NEEDS_MANUAL_REVIEW],
    # Failed result extraction; the organizer sorts it out by hand
    MatchStatus.ERROR: [MatchStatus.PENDING, MatchStatus.IN_PROGRESS, MatchStatus.FINISHED,
                        MatchStatus.NEEDS_MANUAL_REVIEW],
    MatchStatus.NEEDS_MANUAL_REVIEW: [MatchStatus.PENDING, MatchStatus.IN_PROGRESS, MatchStatus.FINISHED,
                                      MatchStatus.ERROR],
    MatchStatus.FINISHED: [],
}


def previous_phase(phase: Phase, phases: Iterable[Phase]) -> Optional[Phase]:
    """The championship phase with the largest ordinal below ``phase``."""
    earlier = [p for p in phases
               if p.championship_id == phase.championship_id and p.id != phase.id and p.ordinal < phase.ordinal]
    if not earlier:
        return None
    return max(earlier, key=lambda p: p.ordinal)


def can_start_phase(phase: Phase, phases: Iterable[Phase]) -> bool:
    """True if the first phase, or if the phase right before it is completed."""
    before = previous_phase(phase, phases)
    return before is None or before.status == PhaseStatus.COMPLETED


def transition_phase(phase: Phase, new_status: PhaseStatus, phases: Iterable[Phase],
                     now: Optional[datetime] = None) -> Phase:
    """Move ``phase`` to ``new_status`` in place, stamping start/finish times."""
    if new_status not in PHASE_TRANSITIONS[phase.status]:
        raise InvalidTransitionError('phase', phase.status.value, new_status.value)

    if new_status == PhaseStatus.ACTIVE and not can_start_phase(phase, phases):
        before = previous_phase(phase, phases)
        raise InvalidTransitionError(
            'phase', phase.status.value, new_status.value,
            reason=f"previous phase '{before.name}' is {before.status.value}, not completed")

    now = now or datetime.now()
    if new_status == PhaseStatus.ACTIVE:
        phase.started_at = now
    elif new_status == PhaseStatus.COMPLETED:
        phase.finished_at = now

    logger.info("Phase %s: %s -> %s", phase.id, phase.status.value, new_status.value)
    phase.status = new_status
    return phase


def can_transition_match(match: Match, new_status: MatchStatus) -> bool:
    return new_status in MATCH_TRANSITIONS[match.status]


def transition_match(match: Match, new_status: MatchStatus) -> Match:
    if not can_transition_match(match, new_status):
        raise InvalidTransitionError('match', match.status.value, new_status.value)
    logger.info("Match %s: %s -> %s", match.id, match.status.value, new_status.value)
    match.status = new_status
    return match


def phase_stats(matches: List[Match], teams: List) -> Dict:
    """Progress counters for one phase."""
    total = len(matches)
    completed = sum(1 for m in matches if m.status == MatchStatus.FINISHED)
    return {
        'total_matches': total,
        'completed_matches': completed,
        'pending_matches': total - completed,
        'total_teams': len(teams),
        'progress': (completed / total) * 100 if total else 0,
    }
