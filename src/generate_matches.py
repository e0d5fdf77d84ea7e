#!/usr/bin/env python3
"""
Print a timed round-robin schedule for the groups in a YAML file.

The file maps group names to team names:

    Group A:
      - Lions
      - Tigers
      - Bears

Usage:
    python src/generate_matches.py data/teams.yaml
    python src/generate_matches.py data/teams.yaml --double --start-date 2025-02-01 --per-day 4
"""
import argparse
import logging
import os
import sys
from datetime import date

import yaml

from championship.errors import ValidationError
from championship.models import Team
from championship.round_robin import generate_round_robin
from championship.slots import assign_slots, parse_start
from championship.settings import get_default_settings


def load_teams(file_path):
    teams = []
    with open(file_path, mode='r', encoding='utf-8') as file:
        groups_data = yaml.safe_load(file) or {}
        for group_name, team_names in groups_data.items():
            for team_name in team_names or []:
                teams.append(Team(id=team_name, name=team_name, group_id=group_name))
    return teams


def generate_group_matches(teams, double=False):
    """Round-robin pairings per group, in file order."""
    groups = {}
    for team in teams:
        groups.setdefault(team.group_id, []).append(team.name)

    matches = []
    for group_name, team_names in groups.items():
        if len(team_names) < 2:
            logging.warning("%s has fewer than 2 teams (%d found). Skipping match generation.",
                            group_name, len(team_names))
            continue
        for home, away in generate_round_robin(team_names, double=double):
            matches.append({'teams': [home, away], 'group': group_name})
    return matches


def parse_args(argv=None):
    defaults = get_default_settings()
    script_dir = os.path.dirname(__file__)
    parser = argparse.ArgumentParser(description='Generate a timed round-robin schedule.')
    parser.add_argument('teams_file', nargs='?',
                        default=os.path.join(os.path.dirname(script_dir), 'data', 'teams.yaml'))
    parser.add_argument('--double', action='store_true', default=defaults['double_round_robin'],
                        help='Play every pairing twice with sides swapped')
    parser.add_argument('--start-date', default=date.today().isoformat(), help='YYYY-MM-DD')
    parser.add_argument('--start-time', default=defaults['start_time'], help='HH:MM')
    parser.add_argument('--interval', type=int, default=defaults['match_interval_minutes'],
                        help='Minutes between matches')
    parser.add_argument('--per-day', type=int, default=defaults['matches_per_day'],
                        help='Matches per day')
    return parser.parse_args(argv)


def main(argv=None):
    logging.basicConfig(level=logging.INFO, format='%(levelname)s: %(message)s')
    args = parse_args(argv)

    teams = load_teams(args.teams_file)
    if not teams:
        print(f"No teams loaded. Check {args.teams_file}", file=sys.stderr)
        return 1

    try:
        start = parse_start(args.start_date, args.start_time)
        slotted = assign_slots(generate_group_matches(teams, double=args.double),
                               start, args.per_day, args.interval)
    except ValidationError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 2

    current_group = None
    for match, scheduled_at in slotted:
        if match['group'] != current_group:
            if current_group is not None:
                print()
            print(f"# {match['group']}")
            current_group = match['group']
        team1, team2 = match['teams']
        print(f"{scheduled_at.strftime('%Y-%m-%d %H:%M')}  {team1} vs {team2}")
    return 0


if __name__ == '__main__':
    sys.exit(main())
