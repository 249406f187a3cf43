"""Infrastructure implementations for the meeting scheduler."""

import requests
import logging
from pathlib import Path
from typing import List, Optional, Dict, Any

from domain import (
    Project, Member, AgendaTemplate, Event, Holiday, ProjectRepository
)
from domain.identifiers import new_custom_project_id, new_member_id
from monitoring import RemoteSourceError, ErrorCode
from .storage import JsonFileStore


class RedmineRepository(ProjectRepository):
    """Redmine REST API implementation of ProjectRepository."""

    def __init__(self, base_url: str, api_key: str = "", timeout: int = 30, page_size: int = 100):
        self.base_url = base_url.rstrip('/')
        self.timeout = timeout
        self.page_size = page_size
        self.session = requests.Session()
        self.logger = logging.getLogger(__name__)

        self.session.headers.update({'Accept': 'application/json'})
        if api_key:
            self.session.headers['X-Redmine-API-Key'] = api_key

    def _get_json(self, path: str, params: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        """GET a Redmine endpoint and decode the JSON body."""
        url = f"{self.base_url}{path}"
        try:
            response = self.session.get(url, params=params, timeout=self.timeout)
        except requests.Timeout as e:
            raise RemoteSourceError(
                f"Redmine request timed out: {url}",
                error_code=ErrorCode.REMOTE_TIMEOUT,
                cause=e
            )
        except requests.RequestException as e:
            raise RemoteSourceError(
                f"Redmine connection failed: {e}",
                error_code=ErrorCode.REMOTE_CONNECTION_ERROR,
                cause=e
            )

        if not response.ok:
            raise RemoteSourceError(
                f"Redmine API error ({response.status_code}): {response.text}",
                details={'url': url, 'status_code': response.status_code}
            )

        try:
            return response.json()
        except ValueError as e:
            raise RemoteSourceError(f"Redmine returned invalid JSON: {url}", cause=e)

    def fetch_project_list(self) -> List[Dict[str, Any]]:
        """Page through /projects.json and return raw {id, name} entries."""
        projects = []
        offset = 0
        total = None

        while total is None or offset < total:
            data = self._get_json('/projects.json', params={
                'limit': self.page_size,
                'offset': offset,
                'status': '*'
            })
            batch = data.get('projects') or []
            for project in batch:
                projects.append({'id': project.get('id'), 'name': project.get('name', '')})

            total_count = data.get('total_count')
            total = total_count if isinstance(total_count, int) else len(batch)
            offset += self.page_size
            if not batch:
                break

        self.logger.debug(f"Fetched {len(projects)} project entries from Redmine")
        return projects

    @staticmethod
    def _normalize_membership(membership: Dict[str, Any]) -> Optional[Member]:
        """Map a Redmine membership to a Member; groups get a prefixed id."""
        if not membership:
            return None
        user = membership.get('user')
        if user:
            return Member(id=str(user['id']), name=user.get('name', ''))
        group = membership.get('group')
        if group:
            return Member(id=f"group-{group['id']}", name=f"{group.get('name', '')} (グループ)")
        return None

    def fetch_project_members(self, project_id: str) -> List[Member]:
        """Fetch memberships of one project, de-duplicated by member id."""
        data = self._get_json(f'/projects/{project_id}.json', params={'include': 'memberships'})
        memberships = (data.get('project') or {}).get('memberships') or []

        members = {}
        for membership in memberships:
            member = self._normalize_membership(membership)
            if member and member.id not in members:
                members[member.id] = member
        return list(members.values())

    def get_all_projects(self) -> List[Project]:
        """Fetch all projects and their members from Redmine."""
        projects = []
        for entry in self.fetch_project_list():
            project_id = str(entry['id'])
            try:
                members = self.fetch_project_members(project_id)
            except RemoteSourceError as e:
                self.logger.error(f"Failed to fetch Redmine members for project {project_id}: {e}")
                members = []
            projects.append(Project(id=project_id, name=entry['name'], members=members))

        self.logger.info(f"Fetched {len(projects)} projects from Redmine")
        return projects


class LocalProjectRepository(ProjectRepository):
    """Bundled projects.json implementation of ProjectRepository."""

    def __init__(self, path: Path):
        self.logger = logging.getLogger(__name__)
        raw = JsonFileStore(path, default=[]).load()
        self._projects = [Project.from_dict(entry) for entry in raw]
        self.logger.info(f"Loaded {len(self._projects)} local projects from {path}")

    def get_all_projects(self) -> List[Project]:
        return [project.copy() for project in self._projects]


class AgendaTemplateRepository:
    """Read-only agenda templates loaded once from agenda_templates.json."""

    def __init__(self, path: Path):
        raw = JsonFileStore(path, default=[]).load()
        self._templates = [AgendaTemplate.from_dict(entry) for entry in raw]

    def get_all_templates(self) -> List[AgendaTemplate]:
        return list(self._templates)


def _normalize_members(raw_members: Any, project_id: str) -> List[Member]:
    """Drop nameless entries and fill in missing member ids."""
    if not isinstance(raw_members, list):
        return []
    members = []
    for raw in raw_members:
        if not isinstance(raw, dict):
            continue
        name = raw.get('name') if isinstance(raw.get('name'), str) else ''
        if not name:
            continue
        member_id = str(raw['id']) if raw.get('id') else new_member_id(project_id)
        members.append(Member(id=member_id, name=name))
    return members


class CustomDataRepository:
    """User-added projects and member overrides, kept in custom_data.json."""

    def __init__(self, store: JsonFileStore):
        self.store = store
        self.logger = logging.getLogger(__name__)
        self.projects: List[Project] = []
        self.member_overrides: Dict[str, List[Member]] = {}
        self._load()

    def _load(self) -> None:
        raw = self.store.load() or {}

        for entry in raw.get('projects') or []:
            if not isinstance(entry, dict):
                continue
            name = entry.get('name') if isinstance(entry.get('name'), str) else ''
            if not name:
                continue
            project_id = str(entry['id']) if entry.get('id') else new_custom_project_id()
            self.projects.append(Project(
                id=project_id,
                name=name,
                members=_normalize_members(entry.get('members'), project_id)
            ))

        overrides = raw.get('memberOverrides')
        if isinstance(overrides, dict):
            for project_id, members in overrides.items():
                self.member_overrides[str(project_id)] = _normalize_members(members, str(project_id))

        self.logger.info(
            f"Loaded {len(self.projects)} custom projects and "
            f"{len(self.member_overrides)} member overrides"
        )

    def find_project(self, project_id: str) -> Optional[Project]:
        for project in self.projects:
            if project.id == project_id:
                return project
        return None

    def count_custom_members(self) -> int:
        override_count = sum(len(members) for members in self.member_overrides.values())
        project_count = sum(len(project.members) for project in self.projects)
        return override_count + project_count

    def save(self) -> None:
        self.store.save({
            'projects': [project.to_dict() for project in self.projects],
            'memberOverrides': {
                project_id: [member.to_dict() for member in members]
                for project_id, members in self.member_overrides.items()
            }
        })


class ScheduleRepository:
    """Scheduled events, kept sorted in schedule.json."""

    def __init__(self, store: JsonFileStore):
        self.store = store
        self.logger = logging.getLogger(__name__)
        self.events: List[Event] = [Event.from_dict(entry) for entry in self.store.load() or []]
        self.sort()
        self.logger.info(f"Loaded {len(self.events)} scheduled events")

    def sort(self) -> None:
        self.events.sort(key=lambda event: event.sort_key)

    def find(self, event_id: str) -> Optional[Event]:
        for event in self.events:
            if event.id == event_id:
                return event
        return None

    def save(self) -> None:
        self.store.save([event.to_dict() for event in self.events])


class HolidayRepository:
    """Holiday list, kept sorted in holidays.json."""

    def __init__(self, store: JsonFileStore):
        self.store = store
        self.holidays: List[Holiday] = [Holiday.from_dict(entry) for entry in self.store.load() or []]
        self.sort()

    def sort(self) -> None:
        self.holidays.sort(key=lambda holiday: holiday.sort_key)

    def find(self, holiday_id: str) -> Optional[Holiday]:
        for holiday in self.holidays:
            if holiday.id == holiday_id:
                return holiday
        return None

    def save(self) -> None:
        self.store.save([holiday.to_dict() for holiday in self.holidays])
