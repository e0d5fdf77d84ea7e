from datetime import datetime
from enum import Enum

from .errors import ValidationError


class MatchStatus(Enum):
    PENDING = "pending"
    IN_PROGRESS = "in_progress"
    FINISHED = "finished"
    ERROR = "error"
    NEEDS_MANUAL_REVIEW = "needs_manual_review"


class PhaseStatus(Enum):
    PENDING = "pending"
    ACTIVE = "active"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class PhaseType(Enum):
    GROUP_STAGE = "group_stage"
    ELIMINATION = "elimination"
    FINAL = "final"
    PLAYOFF = "playoff"


class MatchSide(Enum):
    TEAM1 = "team1"
    TEAM2 = "team2"


def parse_enum(enum_cls, value):
    """Coerce a stored string (or member) into ``enum_cls``."""
    if isinstance(value, enum_cls):
        return value
    try:
        return enum_cls(value)
    except ValueError:
        allowed = ', '.join(member.value for member in enum_cls)
        raise ValidationError(f"Invalid {enum_cls.__name__} '{value}' (expected one of: {allowed})")


def _parse_datetime(value):
    if value is None or isinstance(value, datetime):
        return value
    return datetime.fromisoformat(str(value))


def _format_datetime(value):
    return value.isoformat() if value else None


class Team:
    def __init__(self, id, name, championship_id=None, tag=None, group_id=None):
        self.id = id
        self.name = name
        self.championship_id = championship_id
        self.tag = tag
        self.group_id = group_id  # Mirror of Group.team_ids, which decides membership

    def to_dict(self):
        return {
            'id': self.id,
            'name': self.name,
            'championship_id': self.championship_id,
            'tag': self.tag,
            'group_id': self.group_id,
        }

    @classmethod
    def from_dict(cls, data):
        return cls(
            id=data.get('id'),
            name=data['name'],
            championship_id=data.get('championship_id'),
            tag=data.get('tag'),
            group_id=data.get('group_id'),
        )

    def __repr__(self):
        return f"Team(id={self.id}, name={self.name}, group_id={self.group_id})"


class Group:
    def __init__(self, id, name, championship_id, capacity=4, team_ids=None, phase_id=None):
        self.id = id
        self.name = name
        self.championship_id = championship_id
        self.capacity = capacity
        self.team_ids = list(team_ids) if team_ids else []
        self.phase_id = phase_id

    def to_dict(self):
        return {
            'id': self.id,
            'name': self.name,
            'championship_id': self.championship_id,
            'capacity': self.capacity,
            'team_ids': list(self.team_ids),
            'phase_id': self.phase_id,
        }

    @classmethod
    def from_dict(cls, data):
        return cls(
            id=data.get('id'),
            name=data['name'],
            championship_id=data.get('championship_id'),
            capacity=data.get('capacity', 4),
            team_ids=data.get('team_ids') or [],
            phase_id=data.get('phase_id'),
        )

    def __repr__(self):
        return f"Group(id={self.id}, name={self.name}, teams={len(self.team_ids)}/{self.capacity})"


class Phase:
    def __init__(self, id, championship_id, name, ordinal, phase_type=PhaseType.GROUP_STAGE,
                 status=PhaseStatus.PENDING, started_at=None, finished_at=None):
        self.id = id
        self.championship_id = championship_id
        self.name = name
        self.ordinal = ordinal
        self.phase_type = parse_enum(PhaseType, phase_type)
        self.status = parse_enum(PhaseStatus, status)
        self.started_at = _parse_datetime(started_at)
        self.finished_at = _parse_datetime(finished_at)

    def to_dict(self):
        return {
            'id': self.id,
            'championship_id': self.championship_id,
            'name': self.name,
            'ordinal': self.ordinal,
            'phase_type': self.phase_type.value,
            'status': self.status.value,
            'started_at': _format_datetime(self.started_at),
            'finished_at': _format_datetime(self.finished_at),
        }

    @classmethod
    def from_dict(cls, data):
        return cls(
            id=data.get('id'),
            championship_id=data.get('championship_id'),
            name=data.get('name', ''),
            ordinal=int(data['ordinal']),
            phase_type=data.get('phase_type', PhaseType.GROUP_STAGE.value),
            status=data.get('status', PhaseStatus.PENDING.value),
            started_at=data.get('started_at'),
            finished_at=data.get('finished_at'),
        )

    def __repr__(self):
        return f"Phase(id={self.id}, ordinal={self.ordinal}, type={self.phase_type.value}, status={self.status.value})"


class Match:
    def __init__(self, id, championship_id, phase_id=None, group_id=None, order=None,
                 scheduled_at=None, status=MatchStatus.PENDING, round=None, position=None,
                 team1_id=None, team2_id=None, winner_id=None, is_bye=False):
        self.id = id
        self.championship_id = championship_id
        self.phase_id = phase_id
        self.group_id = group_id
        self.order = order
        self.scheduled_at = _parse_datetime(scheduled_at)
        self.status = parse_enum(MatchStatus, status)
        # Elimination-only fields
        self.round = round
        self.position = position
        self.team1_id = team1_id
        self.team2_id = team2_id
        self.winner_id = winner_id
        self.is_bye = is_bye

    @property
    def is_elimination(self):
        return self.round is not None

    def to_dict(self):
        return {
            'id': self.id,
            'championship_id': self.championship_id,
            'phase_id': self.phase_id,
            'group_id': self.group_id,
            'order': self.order,
            'scheduled_at': _format_datetime(self.scheduled_at),
            'status': self.status.value,
            'round': self.round,
            'position': self.position,
            'team1_id': self.team1_id,
            'team2_id': self.team2_id,
            'winner_id': self.winner_id,
            'is_bye': self.is_bye,
        }

    @classmethod
    def from_dict(cls, data):
        return cls(
            id=data.get('id'),
            championship_id=data.get('championship_id'),
            phase_id=data.get('phase_id'),
            group_id=data.get('group_id'),
            order=data.get('order'),
            scheduled_at=data.get('scheduled_at'),
            status=data.get('status', MatchStatus.PENDING.value),
            round=data.get('round'),
            position=data.get('position'),
            team1_id=data.get('team1_id'),
            team2_id=data.get('team2_id'),
            winner_id=data.get('winner_id'),
            is_bye=bool(data.get('is_bye', False)),
        )

    def __repr__(self):
        if self.is_elimination:
            return (f"Match(id={self.id}, round={self.round}, position={self.position}, "
                    f"teams=({self.team1_id}, {self.team2_id}), status={self.status.value})")
        return (f"Match(id={self.id}, order={self.order}, teams=({self.team1_id}, {self.team2_id}), "
                f"scheduled_at={self.scheduled_at}, status={self.status.value})")
