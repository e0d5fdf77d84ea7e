"""
Single elimination bracket generation and winner advancement.

Teams are paired sequentially in input order. When the team count is odd the
trailing team gets a bye: it is recorded as the winner of a one-sided
first-round slot and moved straight into the next round. A later-round slot
that can only ever receive one team (its second feeder slot does not exist)
is treated the same way as soon as that team arrives.
"""
import logging
import math
from typing import Dict, List, Optional, Sequence

from .errors import ValidationError
from .models import MatchSide

logger = logging.getLogger(__name__)


def calculate_total_rounds(num_teams: int) -> int:
    """Number of rounds needed to reduce ``num_teams`` to a champion."""
    if num_teams < 2:
        return 0
    return math.ceil(math.log2(num_teams))


def calculate_first_round_matches(num_teams: int) -> int:
    """Number of first round slots, bye included."""
    if num_teams < 2:
        return 0
    return math.ceil(num_teams / 2)


def matches_in_round(first_round_matches: int, round_num: int) -> int:
    """Number of slots in ``round_num`` (1-based)."""
    if first_round_matches <= 0 or round_num < 1:
        return 0
    return math.ceil(first_round_matches / 2 ** (round_num - 1))


def get_round_name(round_num: int, total_rounds: int) -> str:
    """Display name of a round, counted back from the final."""
    rounds_from_end = total_rounds - round_num
    if rounds_from_end == 0:
        return "Final"
    elif rounds_from_end == 1:
        return "Semifinal"
    elif rounds_from_end == 2:
        return "Quarterfinal"
    else:
        return f"Round {round_num}"


def _new_slot(round_num, position, team1=None, team2=None):
    return {
        'round': round_num,
        'position': position,
        'team1': team1,
        'team2': team2,
        'winner': None,
        'is_bye': False,
    }


def find_slot(slots: List[Dict], round_num: int, position: int) -> Optional[Dict]:
    for slot in slots:
        if slot['round'] == round_num and slot['position'] == position:
            return slot
    return None


def _round_size(slots, round_num):
    return sum(1 for slot in slots if slot['round'] == round_num)


def generate_bracket(teams: Sequence) -> List[Dict]:
    """
    Build every slot of a single elimination bracket.

    Returns a list of slot dicts ordered by round then position, with:
    - round: 1-based round number
    - position: 1-based position within the round
    - team1, team2: teams, or None while undetermined
    - winner: the advancing team once known
    - is_bye: True for a slot decided without a match

    Fewer than 2 teams yields an empty list.
    """
    num_teams = len(teams)
    total_rounds = calculate_total_rounds(num_teams)
    first_round = calculate_first_round_matches(num_teams)
    slots = []
    if total_rounds == 0:
        return slots

    for i in range(first_round):
        team1 = teams[i * 2]
        team2 = teams[i * 2 + 1] if i * 2 + 1 < num_teams else None
        slots.append(_new_slot(1, i + 1, team1, team2))

    for round_num in range(2, total_rounds + 1):
        for position in range(1, matches_in_round(first_round, round_num) + 1):
            slots.append(_new_slot(round_num, position))

    for slot in [s for s in slots if s['round'] == 1 and s['team2'] is None]:
        logger.info("Team %s gets a first round bye", slot['team1'])
        _settle_bye(slots, slot)

    return slots


def _settle_bye(slots, slot):
    slot['is_bye'] = True
    slot['winner'] = slot['team1']
    return [slot] + _place_in_next_round(slots, slot)


def _place_in_next_round(slots, slot):
    """Move ``slot['winner']`` forward. Returns the slots that changed."""
    next_round = slot['round'] + 1
    next_position = (slot['position'] + 1) // 2
    target = find_slot(slots, next_round, next_position)
    if target is None:
        return []  # final

    side = 'team1' if slot['position'] % 2 == 1 else 'team2'
    target[side] = slot['winner']
    touched = [target]

    # Second feeder of the target slot; absent when the round has an odd count
    sibling = slot['position'] + 1 if side == 'team1' else slot['position'] - 1
    if sibling > _round_size(slots, slot['round']):
        logger.info("Team %s advances by bye to round %d", slot['winner'], next_round + 1)
        touched.extend(_settle_bye(slots, target)[1:])
    return touched


def winner_for_side(slot: Dict, side: MatchSide):
    """Team on the chosen side of a slot."""
    team = slot['team1'] if side == MatchSide.TEAM1 else slot['team2']
    if team is None:
        raise ValidationError(f"No team on side {side.value} of round {slot['round']} position {slot['position']}")
    return team


def advance_winner(slots: List[Dict], round_num: int, position: int, winner) -> List[Dict]:
    """
    Record ``winner`` for a slot and move it into the next round.

    Returns every slot that changed, starting with the decided one.
    Raises ValidationError if the slot is missing or undecidable, or if the
    next round slot already has a result.
    """
    slot = find_slot(slots, round_num, position)
    if slot is None:
        raise ValidationError(f"No bracket slot at round {round_num} position {position}")
    if slot['is_bye']:
        raise ValidationError(f"Round {round_num} position {position} is a bye")
    if slot['team1'] is None or slot['team2'] is None:
        raise ValidationError(f"Round {round_num} position {position} does not have both teams yet")
    if winner not in (slot['team1'], slot['team2']):
        raise ValidationError(f"{winner} does not play in round {round_num} position {position}")

    target = find_slot(slots, round_num + 1, (position + 1) // 2)
    if target is not None and target['winner'] is not None:
        raise ValidationError(f"Round {round_num + 1} position {target['position']} is already decided")

    slot['winner'] = winner
    return [slot] + _place_in_next_round(slots, slot)


def get_bracket_display(slots: List[Dict]) -> Dict:
    """Group slots by round for display, with round names and the champion."""
    if not slots:
        return {'rounds': [], 'total_rounds': 0, 'champion': None}

    total_rounds = max(slot['round'] for slot in slots)
    rounds = []
    for round_num in range(1, total_rounds + 1):
        round_slots = sorted((s for s in slots if s['round'] == round_num), key=lambda s: s['position'])
        rounds.append({
            'round': round_num,
            'name': get_round_name(round_num, total_rounds),
            'matches': round_slots,
        })
    final = find_slot(slots, total_rounds, 1)
    return {
        'rounds': rounds,
        'total_rounds': total_rounds,
        'champion': final['winner'] if final else None,
    }
