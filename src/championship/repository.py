"""
Record stores used by the scheduler.

``Repository`` is the interface the scheduling service depends on.
``MemoryRepository`` keeps records in process; ``YamlRepository`` keeps one
YAML file per record type in a data directory, guarded by a file lock.

Matches are inserted one at a time with no transaction. If an insert fails
the records written before it stay in the store and are reported on the
raised PersistenceError.
"""
import copy
import logging
import os
import uuid
from typing import Dict, Iterable, List

import yaml
from filelock import FileLock, Timeout

from .errors import NotFoundError, PersistenceError
from .models import Group, Match, Phase, Team

logger = logging.getLogger(__name__)


def new_id() -> str:
    return uuid.uuid4().hex


def _match_sort_key(match):
    return (match.round or 0, match.position or 0, match.order or 0)


class Repository:
    """Store interface. Subclasses implement the ``_load``/``_store`` pair."""

    def _load(self, kind: str) -> Dict[str, object]:
        raise NotImplementedError

    def _store(self, kind: str, records: Dict[str, object]):
        raise NotImplementedError

    def _get(self, kind, record_id, label):
        record = self._load(kind).get(record_id)
        if record is None:
            raise NotFoundError(label, record_id)
        return record

    # Teams

    def list_teams(self, championship_id=None, group_id=None) -> List[Team]:
        teams = list(self._load('teams').values())
        if championship_id is not None:
            teams = [t for t in teams if t.championship_id == championship_id]
        if group_id is not None:
            # Keep the group's own ordering
            group = self.get_group(group_id)
            by_id = {t.id: t for t in teams}
            return [by_id[team_id] for team_id in group.team_ids if team_id in by_id]
        return teams

    def get_team(self, team_id) -> Team:
        return self._get('teams', team_id, 'Team')

    # Groups

    def list_groups(self, championship_id=None, phase_id=None) -> List[Group]:
        groups = list(self._load('groups').values())
        if championship_id is not None:
            groups = [g for g in groups if g.championship_id == championship_id]
        if phase_id is not None:
            groups = [g for g in groups if g.phase_id == phase_id]
        return groups

    def get_group(self, group_id) -> Group:
        return self._get('groups', group_id, 'Group')

    # Phases

    def list_phases(self, championship_id) -> List[Phase]:
        phases = [p for p in self._load('phases').values() if p.championship_id == championship_id]
        return sorted(phases, key=lambda p: p.ordinal)

    def get_phase(self, phase_id) -> Phase:
        return self._get('phases', phase_id, 'Phase')

    def save_phase(self, phase: Phase) -> Phase:
        phases = self._load('phases')
        if phase.id is None:
            phase.id = new_id()
        phases[phase.id] = phase
        self._store('phases', phases)
        return phase

    # Matches

    def list_matches(self, championship_id=None, phase_id=None, group_id=None) -> List[Match]:
        matches = list(self._load('matches').values())
        if championship_id is not None:
            matches = [m for m in matches if m.championship_id == championship_id]
        if phase_id is not None:
            matches = [m for m in matches if m.phase_id == phase_id]
        if group_id is not None:
            matches = [m for m in matches if m.group_id == group_id]
        return sorted(matches, key=_match_sort_key)

    def get_match(self, match_id) -> Match:
        return self._get('matches', match_id, 'Match')

    def save_match(self, match: Match) -> Match:
        matches = self._load('matches')
        if match.id is None:
            match.id = new_id()
        matches[match.id] = match
        self._store('matches', matches)
        return match

    def insert_matches(self, matches: Iterable[Match]) -> List[Match]:
        """Insert matches one by one. No rollback on failure."""
        inserted = []
        for match in matches:
            try:
                self.save_match(match)
            except PersistenceError as e:
                logger.error("Insert failed after %d match(es): %s", len(inserted), e)
                raise PersistenceError(str(e), inserted=inserted) from e
            inserted.append(match)
        logger.info("Inserted %d match(es)", len(inserted))
        return inserted

    def delete_matches(self, match_ids: Iterable[str]) -> int:
        matches = self._load('matches')
        removed = 0
        for match_id in match_ids:
            if matches.pop(match_id, None) is not None:
                removed += 1
        self._store('matches', matches)
        return removed


class MemoryRepository(Repository):
    """Records kept in dicts; returned objects are copies."""

    def __init__(self, teams=None, groups=None, phases=None, matches=None):
        self._records = {
            'teams': {t.id: t for t in teams or []},
            'groups': {g.id: g for g in groups or []},
            'phases': {p.id: p for p in phases or []},
            'matches': {m.id: m for m in matches or []},
        }

    def _load(self, kind):
        return copy.deepcopy(self._records[kind])

    def _store(self, kind, records):
        self._records[kind] = copy.deepcopy(records)


class YamlRepository(Repository):
    """One YAML file per record type: teams.yaml, groups.yaml, phases.yaml, matches.yaml."""

    MODELS = {
        'teams': Team,
        'groups': Group,
        'phases': Phase,
        'matches': Match,
    }

    def __init__(self, data_dir, lock_timeout=10):
        self.data_dir = data_dir
        os.makedirs(data_dir, exist_ok=True)
        self._lock = FileLock(os.path.join(data_dir, '.lock'), timeout=lock_timeout)

    def _path(self, kind):
        return os.path.join(self.data_dir, f'{kind}.yaml')

    def _load(self, kind):
        path = self._path(kind)
        if not os.path.exists(path):
            return {}
        model = self.MODELS[kind]
        try:
            with self._lock:
                with open(path, 'r', encoding='utf-8') as f:
                    data = yaml.safe_load(f)
        except (OSError, yaml.YAMLError, Timeout) as e:
            raise PersistenceError(f"Failed to read {path}: {e}") from e
        if not data:
            return {}
        records = {}
        for item in data.get(kind, []):
            record = model.from_dict(item)
            records[record.id] = record
        return records

    def _store(self, kind, records):
        path = self._path(kind)
        payload = {kind: [record.to_dict() for record in records.values()]}
        try:
            with self._lock:
                with open(path, 'w', encoding='utf-8') as f:
                    yaml.dump(payload, f, default_flow_style=False, sort_keys=False)
        except (OSError, yaml.YAMLError, Timeout) as e:
            raise PersistenceError(f"Failed to write {path}: {e}") from e

    def save_records(self, kind, records):
        """Replace every record of ``kind``. Used to seed a data directory."""
        self._store(kind, {r.id: r for r in records})
