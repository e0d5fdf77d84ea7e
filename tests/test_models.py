"""
Unit tests for the record models.
"""
import pytest
import sys
import os
from datetime import datetime

sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'src'))

from championship.errors import ValidationError
from championship.models import (
    Group, Match, MatchSide, MatchStatus, Phase, PhaseStatus, PhaseType, Team, parse_enum
)


class TestParseEnum:

    def test_from_string(self):
        assert parse_enum(MatchStatus, "needs_manual_review") == MatchStatus.NEEDS_MANUAL_REVIEW
        assert parse_enum(MatchSide, "team2") == MatchSide.TEAM2

    def test_member_passthrough(self):
        assert parse_enum(PhaseStatus, PhaseStatus.ACTIVE) is PhaseStatus.ACTIVE

    def test_unknown_value(self):
        with pytest.raises(ValidationError) as exc_info:
            parse_enum(PhaseStatus, "ativa")
        assert "pending" in str(exc_info.value)


class TestTeam:

    def test_from_dict_defaults(self):
        team = Team.from_dict({'id': 't1', 'name': 'Lions'})
        assert team.tag is None
        assert team.group_id is None

    def test_repr(self):
        assert "Lions" in repr(Team(id='t1', name='Lions'))


class TestGroup:

    def test_keeps_team_order(self):
        group = Group.from_dict({'id': 'g1', 'name': 'A', 'championship_id': 'c1', 'team_ids': ['z', 'a', 'm']})
        assert group.team_ids == ['z', 'a', 'm']
        assert group.capacity == 4


class TestPhase:

    def test_from_dict(self):
        phase = Phase.from_dict({
            'id': 'p1', 'championship_id': 'c1', 'name': 'Playoffs', 'ordinal': '2',
            'phase_type': 'playoff', 'status': 'active', 'started_at': '2025-02-01T09:00:00',
        })
        assert phase.ordinal == 2
        assert phase.phase_type == PhaseType.PLAYOFF
        assert phase.status == PhaseStatus.ACTIVE
        assert phase.started_at == datetime(2025, 2, 1, 9, 0)
        assert phase.to_dict()['started_at'] == '2025-02-01T09:00:00'

    def test_invalid_status(self):
        with pytest.raises(ValidationError):
            Phase(id='p1', championship_id='c1', name='x', ordinal=1, status='done')


class TestMatch:

    def test_group_match_to_dict(self):
        match = Match(id='m1', championship_id='c1', group_id='g1', order=3,
                      scheduled_at=datetime(2025, 2, 1, 10, 30), team1_id='a', team2_id='b')
        data = match.to_dict()
        assert data['status'] == 'pending'
        assert data['scheduled_at'] == '2025-02-01T10:30:00'
        assert data['round'] is None
        assert not match.is_elimination

    def test_elimination_from_dict(self):
        match = Match.from_dict({
            'id': 'm2', 'championship_id': 'c1', 'phase_id': 'p2', 'round': 2, 'position': 1,
            'team1_id': 'a', 'status': 'in_progress',
        })
        assert match.is_elimination
        assert match.status == MatchStatus.IN_PROGRESS
        assert match.team2_id is None
        assert match.is_bye is False
