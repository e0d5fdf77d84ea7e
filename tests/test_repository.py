"""
Tests for the memory and YAML record stores.
"""
import pytest
import sys
import os
import yaml
from datetime import datetime

sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'src'))

from championship.errors import NotFoundError, PersistenceError
from championship.models import Match, MatchStatus, PhaseStatus
from championship.repository import MemoryRepository, YamlRepository
from conftest import CHAMPIONSHIP, build_records


class FailingRepository(MemoryRepository):
    """Fails on the Nth match write."""

    def __init__(self, fail_on, **kwargs):
        super().__init__(**kwargs)
        self.fail_on = fail_on
        self.match_writes = 0

    def _store(self, kind, records):
        if kind == 'matches':
            self.match_writes += 1
            if self.match_writes == self.fail_on:
                raise PersistenceError("connection reset")
        super()._store(kind, records)


def make_matches(n):
    return [Match(id=f"m{i}", championship_id=CHAMPIONSHIP, order=i, team1_id='lions', team2_id='tigers')
            for i in range(1, n + 1)]


class TestQueries:

    def test_list_teams_in_group_order(self, repository):
        teams = repository.list_teams(group_id='group-a')
        assert [t.name for t in teams] == ['Lions', 'Tigers', 'Bears', 'Wolves']

    def test_list_teams_by_championship(self, repository):
        assert len(repository.list_teams(championship_id=CHAMPIONSHIP)) == 8
        assert repository.list_teams(championship_id='other') == []

    def test_list_phases_sorted(self, repository):
        assert [p.ordinal for p in repository.list_phases(CHAMPIONSHIP)] == [1, 2, 3]

    def test_list_groups_by_phase(self, repository):
        assert len(repository.list_groups(phase_id='groups')) == 3
        assert repository.list_groups(phase_id='knockout') == []

    def test_not_found(self, repository):
        with pytest.raises(NotFoundError):
            repository.get_team('nobody')
        with pytest.raises(NotFoundError):
            repository.get_match('missing')

    def test_returns_copies(self, repository):
        phase = repository.get_phase('groups')
        phase.status = PhaseStatus.ACTIVE
        assert repository.get_phase('groups').status == PhaseStatus.PENDING


class TestInsertMatches:

    def test_insert_and_list(self, repository):
        repository.insert_matches(make_matches(3))
        assert [m.order for m in repository.list_matches(championship_id=CHAMPIONSHIP)] == [1, 2, 3]

    def test_assigns_missing_ids(self, repository):
        match = Match(id=None, championship_id=CHAMPIONSHIP)
        repository.insert_matches([match])
        assert match.id
        assert repository.get_match(match.id)

    def test_partial_failure_leaves_earlier_inserts(self):
        teams, groups, phases = build_records()
        repo = FailingRepository(fail_on=5, teams=teams, groups=groups, phases=phases)

        with pytest.raises(PersistenceError) as exc_info:
            repo.insert_matches(make_matches(12))

        assert [m.id for m in exc_info.value.inserted] == ['m1', 'm2', 'm3', 'm4']
        assert len(repo.list_matches()) == 4

    def test_delete_matches(self, repository):
        repository.insert_matches(make_matches(3))
        assert repository.delete_matches(['m1', 'm3', 'unknown']) == 2
        assert [m.id for m in repository.list_matches()] == ['m2']


class TestYamlRepository:

    def test_round_trip(self, tmp_path):
        repo = YamlRepository(str(tmp_path))
        teams, groups, phases = build_records()
        repo.save_records('teams', teams)
        repo.save_records('groups', groups)
        repo.save_records('phases', phases)

        match = Match(id='m1', championship_id=CHAMPIONSHIP, group_id='group-a', order=1,
                      scheduled_at=datetime(2025, 2, 1, 10, 0), team1_id='lions', team2_id='tigers')
        repo.insert_matches([match])

        reopened = YamlRepository(str(tmp_path))
        stored = reopened.get_match('m1')
        assert stored.scheduled_at == datetime(2025, 2, 1, 10, 0)
        assert stored.status == MatchStatus.PENDING
        assert [t.id for t in reopened.list_teams(group_id='group-b')] == ['eagles', 'hawks', 'owls']

    def test_file_layout(self, tmp_path):
        repo = YamlRepository(str(tmp_path))
        repo.insert_matches(make_matches(2))
        with open(tmp_path / 'matches.yaml', encoding='utf-8') as f:
            data = yaml.safe_load(f)
        assert [m['id'] for m in data['matches']] == ['m1', 'm2']
        assert data['matches'][0]['status'] == 'pending'

    def test_missing_files_are_empty(self, tmp_path):
        repo = YamlRepository(str(tmp_path / 'new'))
        assert repo.list_matches() == []
        assert repo.list_phases(CHAMPIONSHIP) == []

    def test_corrupt_file(self, tmp_path):
        (tmp_path / 'phases.yaml').write_text("phases: [unclosed", encoding='utf-8')
        repo = YamlRepository(str(tmp_path))
        with pytest.raises(PersistenceError):
            repo.list_phases(CHAMPIONSHIP)
