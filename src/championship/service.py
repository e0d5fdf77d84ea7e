"""
Scheduling service: runs the pure generators and hands the results to a
repository.
"""
import logging
from datetime import datetime
from typing import Dict, List, Optional, Sequence

from .elimination import (
    advance_winner,
    generate_bracket,
    get_bracket_display,
    winner_for_side,
)
from .errors import ValidationError
from .lifecycle import phase_stats, transition_match, transition_phase
from .models import Match, MatchSide, MatchStatus, PhaseStatus, PhaseType, parse_enum
from .repository import Repository, new_id
from .round_robin import count_round_robin_matches, generate_round_robin
from .settings import ScheduleConfig
from .slots import assign_slots, estimate_days

logger = logging.getLogger(__name__)


class ScheduleResult:
    def __init__(self, matches, skipped_groups):
        self.matches = matches
        self.skipped_groups = skipped_groups

    def __repr__(self):
        return f"ScheduleResult(matches={len(self.matches)}, skipped_groups={self.skipped_groups})"


def _slot_from_match(match: Match) -> Dict:
    return {
        'round': match.round,
        'position': match.position,
        'team1': match.team1_id,
        'team2': match.team2_id,
        'winner': match.winner_id,
        'is_bye': match.is_bye,
    }


def _positive_int(value, name):
    """Coerce ``value`` to an int >= 1, or raise ValidationError."""
    if isinstance(value, bool) or (isinstance(value, float) and not value.is_integer()):
        raise ValidationError(f"{name} must be a positive integer, got {value!r}")
    try:
        number = int(value)
    except (TypeError, ValueError):
        raise ValidationError(f"{name} must be a positive integer, got {value!r}")
    if number < 1:
        raise ValidationError(f"{name} must be a positive integer, got {value!r}")
    return number


class Scheduler:
    """Entry point for every scheduling operation, bound to one repository."""

    def __init__(self, repository: Repository):
        self.repository = repository

    def _group_pairings(self, group_ids: Sequence[str], double: bool):
        """Pairings for each group, in selection order, skipping groups under 2 teams."""
        pairings = []
        skipped = []
        for group_id in group_ids:
            group = self.repository.get_group(group_id)
            teams = self.repository.list_teams(group_id=group_id)
            for team in teams:
                if team.group_id != group.id:
                    logger.warning("Team %s is listed in group %s but its group_id is %s",
                                   team.name, group.name, team.group_id)
            team_ids = [team.id for team in teams]
            if len(team_ids) < 2:
                logger.warning("Group %s has fewer than 2 teams (%d found). Skipping match generation.",
                               group.name, len(team_ids))
                skipped.append(group_id)
                continue
            for home, away in generate_round_robin(team_ids, double=double):
                pairings.append((group, home, away))
        return pairings, skipped

    def preview(self, group_ids: Sequence[str], config: ScheduleConfig) -> Dict:
        """Match count and calendar days a scheduling run would need."""
        total = 0
        for group_id in group_ids:
            team_count = len(self.repository.list_teams(group_id=group_id))
            total += count_round_robin_matches(team_count, config.double_round_robin)
        return {
            'total_matches': total,
            'estimated_days': estimate_days(total, config.matches_per_day),
        }

    def schedule_groups(self, championship_id: str, group_ids: Sequence[str], config: ScheduleConfig,
                        phase_id: Optional[str] = None) -> ScheduleResult:
        """
        Generate, time and store round-robin matches for the selected groups.

        One clock and one per-day counter run across all groups, so the
        second group's matches continue where the first group's stopped.
        """
        if not championship_id:
            raise ValidationError("A championship is required")
        if not group_ids:
            raise ValidationError("Select at least one group")
        if phase_id:
            self.repository.get_phase(phase_id)

        pairings, skipped = self._group_pairings(group_ids, config.double_round_robin)
        slotted = assign_slots(pairings, config.start, config.matches_per_day, config.match_interval_minutes)

        matches = []
        for order, ((group, home, away), scheduled_at) in enumerate(slotted, start=1):
            matches.append(Match(
                id=new_id(),
                championship_id=championship_id,
                phase_id=phase_id,
                group_id=group.id,
                order=order,
                scheduled_at=scheduled_at,
                status=MatchStatus.PENDING,
                team1_id=home,
                team2_id=away,
            ))

        inserted = self.repository.insert_matches(matches)
        logger.info("Scheduled %d match(es) for %d group(s)", len(inserted), len(group_ids) - len(skipped))
        return ScheduleResult(inserted, skipped)

    def generate_bracket(self, championship_id: str, phase_id: str,
                         team_ids: Optional[Sequence[str]] = None) -> List[Match]:
        """Store every slot of a single elimination bracket for ``phase_id``."""
        if not championship_id or not phase_id:
            raise ValidationError("Select a championship and a phase")
        phase = self.repository.get_phase(phase_id)
        if phase.phase_type == PhaseType.GROUP_STAGE:
            raise ValidationError(f"Phase '{phase.name}' is a group stage, not a bracket phase")

        if team_ids is None:
            teams = sorted(self.repository.list_teams(championship_id=championship_id), key=lambda t: t.name)
            team_ids = [t.id for t in teams]
        else:
            if len(set(team_ids)) != len(team_ids):
                raise ValidationError("A team can only appear once in a bracket")
            for team_id in team_ids:
                self.repository.get_team(team_id)
        if len(team_ids) < 2:
            raise ValidationError("At least 2 teams are needed for a bracket")

        if self.repository.list_matches(phase_id=phase_id):
            raise ValidationError(f"Phase '{phase.name}' already has matches")

        matches = []
        for slot in generate_bracket(list(team_ids)):
            matches.append(Match(
                id=new_id(),
                championship_id=championship_id,
                phase_id=phase_id,
                status=MatchStatus.FINISHED if slot['is_bye'] else MatchStatus.PENDING,
                round=slot['round'],
                position=slot['position'],
                team1_id=slot['team1'],
                team2_id=slot['team2'],
                winner_id=slot['winner'],
                is_bye=slot['is_bye'],
            ))
        return self.repository.insert_matches(matches)

    def record_winner(self, match_id: str, side) -> List[Match]:
        """
        Set the winner of an elimination match and advance it.

        Recording a winner finishes the match. A recorded winner can be
        corrected until the next round's match has a result. Returns every
        match that changed.
        """
        side = parse_enum(MatchSide, side)
        match = self.repository.get_match(match_id)
        if not match.is_elimination:
            raise ValidationError("Winners are only recorded for elimination matches")

        by_position = self._bracket_by_position(match.phase_id)
        if by_position[(match.round, match.position)].id != match.id:
            raise ValidationError(f"Match {match.id} is not part of the bracket")
        slots = [_slot_from_match(m) for m in by_position.values()]
        slot = next(s for s in slots if (s['round'], s['position']) == (match.round, match.position))

        winner = winner_for_side(slot, side)
        touched = advance_winner(slots, match.round, match.position, winner)

        updated = []
        for changed in touched:
            target = by_position[(changed['round'], changed['position'])]
            target.team1_id = changed['team1']
            target.team2_id = changed['team2']
            target.winner_id = changed['winner']
            target.is_bye = changed['is_bye']
            if changed['winner'] is not None:
                target.status = MatchStatus.FINISHED
            updated.append(self.repository.save_match(target))
        return updated

    def _bracket_by_position(self, phase_id) -> Dict:
        """Elimination matches of a phase keyed by (round, position)."""
        by_position = {}
        for m in self.repository.list_matches(phase_id=phase_id):
            if not m.is_elimination:
                continue
            key = (m.round, m.position)
            if key in by_position:
                raise ValidationError(f"Phase {phase_id} has more than one match at round {m.round} "
                                      f"position {m.position}")
            by_position[key] = m
        return by_position

    def get_bracket(self, phase_id: str) -> Dict:
        self.repository.get_phase(phase_id)
        by_position = self._bracket_by_position(phase_id)
        display = get_bracket_display([_slot_from_match(m) for m in by_position.values()])
        for round_data in display['rounds']:
            round_data['matches'] = [by_position[(s['round'], s['position'])].to_dict()
                                     for s in round_data['matches']]
        return display

    def create_match(self, championship_id: Optional[str], phase_id: Optional[str], team1_id: Optional[str],
                     team2_id: Optional[str], round: Optional[int] = None, position: Optional[int] = None,
                     scheduled_at: Optional[datetime] = None, group_id: Optional[str] = None) -> Match:
        """Create one match chosen by hand. Required selections are checked first."""
        if not championship_id or not phase_id or not team1_id or not team2_id:
            raise ValidationError("Championship, phase and both teams are required")
        if team1_id == team2_id:
            raise ValidationError("A team cannot play against itself")
        if (round is None) != (position is None):
            raise ValidationError("Round and position must be given together")
        if round is not None:
            round = _positive_int(round, 'round')
            position = _positive_int(position, 'position')

        self.repository.get_phase(phase_id)
        self.repository.get_team(team1_id)
        self.repository.get_team(team2_id)
        if group_id:
            self.repository.get_group(group_id)
        if round is not None and (round, position) in self._bracket_by_position(phase_id):
            raise ValidationError(f"Round {round} position {position} is already taken in this phase")

        match = Match(
            id=new_id(),
            championship_id=championship_id,
            phase_id=phase_id,
            group_id=group_id,
            scheduled_at=scheduled_at,
            status=MatchStatus.PENDING,
            round=round,
            position=position,
            team1_id=team1_id,
            team2_id=team2_id,
        )
        return self.repository.save_match(match)

    def update_match_status(self, match_id: str, status) -> Match:
        match = self.repository.get_match(match_id)
        transition_match(match, parse_enum(MatchStatus, status))
        return self.repository.save_match(match)

    def update_phase_status(self, phase_id: str, status, now: Optional[datetime] = None):
        phase = self.repository.get_phase(phase_id)
        phases = self.repository.list_phases(phase.championship_id)
        transition_phase(phase, parse_enum(PhaseStatus, status), phases, now=now)
        return self.repository.save_phase(phase)

    def get_phase_stats(self, phase_id: str) -> Dict:
        phase = self.repository.get_phase(phase_id)
        matches = self.repository.list_matches(phase_id=phase_id)
        team_ids = set()
        for group in self.repository.list_groups(championship_id=phase.championship_id, phase_id=phase_id):
            team_ids.update(group.team_ids)
        for match in matches:
            team_ids.update(t for t in (match.team1_id, match.team2_id) if t)
        return phase_stats(matches, sorted(team_ids))
