"""
Shared pytest fixtures for championship scheduler tests.

Running tests:
    pytest tests/
"""
import pytest
import sys
import os

# Add src directory to path for imports
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'src'))

from championship.models import Team, Group, Phase, PhaseType, PhaseStatus
from championship.repository import MemoryRepository, YamlRepository
from championship.service import Scheduler


CHAMPIONSHIP = 'champ1'


def build_records():
    """Two groups (4 and 3 teams), a lone-team group, and three phases."""
    teams = []
    groups = []
    layout = {
        'group-a': ['Lions', 'Tigers', 'Bears', 'Wolves'],
        'group-b': ['Eagles', 'Hawks', 'Owls'],
        'group-c': ['Sharks'],
    }
    for group_id, names in layout.items():
        team_ids = []
        for name in names:
            team_id = name.lower()
            teams.append(Team(id=team_id, name=name, championship_id=CHAMPIONSHIP, group_id=group_id))
            team_ids.append(team_id)
        groups.append(Group(id=group_id, name=group_id.upper(), championship_id=CHAMPIONSHIP,
                            capacity=4, team_ids=team_ids, phase_id='groups'))

    phases = [
        Phase(id='groups', championship_id=CHAMPIONSHIP, name='Group Stage', ordinal=1,
              phase_type=PhaseType.GROUP_STAGE, status=PhaseStatus.PENDING),
        Phase(id='knockout', championship_id=CHAMPIONSHIP, name='Knockout', ordinal=2,
              phase_type=PhaseType.ELIMINATION, status=PhaseStatus.PENDING),
        Phase(id='final', championship_id=CHAMPIONSHIP, name='Final', ordinal=3,
              phase_type=PhaseType.FINAL, status=PhaseStatus.PENDING),
    ]
    return teams, groups, phases


@pytest.fixture
def repository():
    """In-memory store seeded with one championship."""
    teams, groups, phases = build_records()
    return MemoryRepository(teams=teams, groups=groups, phases=phases)


@pytest.fixture
def scheduler(repository):
    return Scheduler(repository)


@pytest.fixture
def temp_data_dir(tmp_path, monkeypatch):
    """Temporary YAML data directory seeded with one championship."""
    import app as app_module

    repo = YamlRepository(str(tmp_path))
    teams, groups, phases = build_records()
    repo.save_records('teams', teams)
    repo.save_records('groups', groups)
    repo.save_records('phases', phases)

    monkeypatch.setattr(app_module, 'DATA_DIR', str(tmp_path))
    return str(tmp_path)


@pytest.fixture
def client(temp_data_dir):
    """Flask test client bound to the temporary data directory."""
    from app import app
    app.config['TESTING'] = True
    with app.test_client() as client:
        yield client
