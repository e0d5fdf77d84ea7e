"""
Round-robin pairing generation for group play.
"""
from typing import List, Sequence, Tuple, TypeVar

T = TypeVar('T')


def generate_round_robin(teams: Sequence[T], double: bool = False) -> List[Tuple[T, T]]:
    """
    Pair every team with every other team.

    Returns a flat list of (home, away) tuples in nested-loop order
    (i over the teams, j over the teams after i). With ``double`` the
    reversed pairings follow the first leg in the same order.

    Odd team counts get no bye and pairings are not grouped into rounds.
    Fewer than 2 teams yields an empty list.
    """
    matches = []
    num_teams = len(teams)
    if num_teams < 2:
        return matches

    for i in range(num_teams):
        for j in range(i + 1, num_teams):
            matches.append((teams[i], teams[j]))

    if double:
        matches.extend([(away, home) for home, away in matches])

    return matches


def count_round_robin_matches(num_teams: int, double: bool = False) -> int:
    """Number of matches generate_round_robin would produce."""
    if num_teams < 2:
        return 0
    single = num_teams * (num_teams - 1) // 2
    return single * 2 if double else single
