"""Domain entities for the meeting scheduler."""

import unicodedata
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Optional, Dict, List, Any


class EventType(Enum):
    """Calendar entry type."""
    MEETING = "meeting"
    SHARED = "shared"


class NotificationStatus(Enum):
    """Outcome of a webhook notification."""
    SENT = "sent"
    FAILED = "failed"
    ERROR = "error"
    NOT_CONFIGURED = "not-configured"


def name_sort_key(name: str) -> str:
    """Locale-insensitive collation key for display names.

    Full-width and half-width forms compare equal and case is folded, which
    keeps Japanese and Latin project names in a stable, readable order.
    """
    return unicodedata.normalize('NFKC', name or '').casefold()


def utc_now_iso() -> str:
    """Current UTC time as an ISO 8601 string with millisecond precision."""
    return datetime.now(timezone.utc).isoformat(timespec='milliseconds').replace('+00:00', 'Z')


@dataclass
class Member:
    """A project member."""

    id: str
    name: str

    def to_dict(self) -> Dict[str, Any]:
        return {'id': self.id, 'name': self.name}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Member':
        return cls(id=str(data['id']), name=data['name'])

    def copy(self) -> 'Member':
        return Member(id=self.id, name=self.name)


@dataclass
class Project:
    """Domain entity representing a project and its members."""

    id: str
    name: str
    members: List[Member] = field(default_factory=list)

    def find_member(self, member_id: str) -> Optional[Member]:
        """Look up a member by id."""
        for member in self.members:
            if member.id == member_id:
                return member
        return None

    def member_names(self) -> set:
        """Lower-cased member names, used for duplicate checks."""
        return {member.name.lower() for member in self.members}

    def to_dict(self) -> Dict[str, Any]:
        return {
            'id': self.id,
            'name': self.name,
            'members': [member.to_dict() for member in self.members]
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Project':
        """Create Project from a bundled or persisted JSON entry."""
        return cls(
            id=str(data['id']),
            name=data['name'],
            members=[Member.from_dict(member) for member in data.get('members') or []]
        )

    def copy(self) -> 'Project':
        return Project(id=self.id, name=self.name, members=[m.copy() for m in self.members])


@dataclass
class AgendaTemplate:
    """Read-only agenda template."""

    id: str
    name: str
    items: List[str] = field(default_factory=list)

    @property
    def body(self) -> str:
        """Items rendered as a bulleted block."""
        return '\n'.join(f'- {item}' for item in self.items)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'id': self.id,
            'name': self.name,
            'items': list(self.items),
            'body': self.body
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'AgendaTemplate':
        return cls(
            id=str(data['id']),
            name=data['name'],
            items=[str(item) for item in data.get('items') or []]
        )


@dataclass
class Event:
    """A scheduled meeting or shared event."""

    id: str
    project_id: str
    project_name: str
    date: str
    start_time: str
    agenda: str
    agenda_source: str = "custom"
    event_type: EventType = EventType.MEETING
    facilitator_id: str = ""
    facilitator_name: str = ""
    facilitator_mention: str = ""
    created_at: Optional[str] = None
    updated_at: Optional[str] = None

    @property
    def is_meeting(self) -> bool:
        return self.event_type == EventType.MEETING

    @property
    def year_month(self) -> tuple:
        """(year, month) parsed from the date field."""
        year, month = self.date.split('-')[:2]
        return int(year), int(month)

    @property
    def sort_key(self) -> tuple:
        return (self.date, self.start_time, name_sort_key(self.project_name))

    @property
    def title(self) -> str:
        if self.project_name:
            return self.project_name
        return 'ミーティング' if self.is_meeting else '共有イベント'

    def to_dict(self) -> Dict[str, Any]:
        return {
            'id': self.id,
            'eventType': self.event_type.value,
            'projectId': self.project_id,
            'projectName': self.project_name,
            'facilitatorId': self.facilitator_id,
            'facilitatorName': self.facilitator_name,
            'facilitatorMention': self.facilitator_mention,
            'date': self.date,
            'startTime': self.start_time,
            'agenda': self.agenda,
            'agendaSource': self.agenda_source,
            'createdAt': self.created_at,
            'updatedAt': self.updated_at
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Event':
        """Create Event from a persisted schedule entry, filling defaults."""
        try:
            event_type = EventType(data.get('eventType') or EventType.MEETING.value)
        except ValueError:
            event_type = EventType.MEETING

        return cls(
            id=str(data['id']),
            event_type=event_type,
            project_id=str(data.get('projectId') or ''),
            project_name=data.get('projectName') or '',
            facilitator_id=str(data.get('facilitatorId') or ''),
            facilitator_name=data.get('facilitatorName') or '',
            facilitator_mention=data.get('facilitatorMention') or '',
            date=data['date'],
            start_time=data['startTime'],
            agenda=data.get('agenda') or '',
            agenda_source=data.get('agendaSource') or 'custom',
            created_at=data.get('createdAt') or utc_now_iso(),
            updated_at=data.get('updatedAt')
        )


@dataclass
class Holiday:
    """A named non-working day shown on the calendar."""

    id: str
    date: str
    name: str

    @property
    def sort_key(self) -> tuple:
        return (self.date, name_sort_key(self.name))

    def to_dict(self) -> Dict[str, Any]:
        return {'id': self.id, 'date': self.date, 'name': self.name}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Holiday':
        return cls(id=str(data['id']), date=data['date'], name=data['name'])


@dataclass
class RemoteInfo:
    """State of the remote project source."""

    enabled: bool = False
    host: Optional[str] = None
    error: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {'enabled': self.enabled, 'host': self.host, 'error': self.error}


@dataclass
class ProjectMeta:
    """Where the current project list came from and what it contains."""

    source_type: str = "local"
    fetched_at: Optional[str] = None
    remote_info: RemoteInfo = field(default_factory=RemoteInfo)
    project_count: int = 0
    custom_project_count: int = 0
    custom_member_count: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            'sourceType': self.source_type,
            'fetchedAt': self.fetched_at,
            'remoteInfo': self.remote_info.to_dict(),
            'counts': {
                'projects': self.project_count,
                'customProjects': self.custom_project_count,
                'customMembers': self.custom_member_count
            }
        }
