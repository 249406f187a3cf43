"""Application services for the meeting scheduler."""

import logging
from typing import Any, Dict, List, Optional, Tuple

from domain import (
    Project, Member, AgendaTemplate, Event, Holiday, EventType,
    NotificationStatus, ProjectMeta, RemoteInfo, ProjectRepository,
    NotificationSink, CalendarRepository, utc_now_iso
)
from domain.identifiers import (
    new_custom_project_id, new_member_id, new_event_id, new_holiday_id
)
from monitoring import ValidationError, NotFoundError, PersistenceError, handle_exceptions
from .validation import (
    clean_string, sanitize_member_names, is_valid_date, is_valid_time,
    is_valid_year, is_valid_month
)


def merge_members(primary: List[Member], extra: List[Member]) -> List[Member]:
    """Id-keyed merge; members already present win over later ones."""
    merged = {}
    for member in list(primary) + list(extra):
        if member.id not in merged:
            merged[member.id] = member.copy()
    return list(merged.values())


class ProjectService:
    """Merges local/remote projects with user-added projects and members."""

    def __init__(
        self,
        local_repository: ProjectRepository,
        custom_repository,
        remote_repository: Optional[ProjectRepository] = None,
        remote_host: Optional[str] = None
    ):
        self.local_repository = local_repository
        self.custom_repository = custom_repository
        self.remote_repository = remote_repository
        self.remote_host = remote_host
        self.logger = logging.getLogger(__name__)
        self.last_meta = self._build_meta(
            source_type="local",
            fetched_at=None,
            error=None,
            project_count=len(local_repository.get_all_projects()) + len(custom_repository.projects)
        )

    @property
    def remote_enabled(self) -> bool:
        return self.remote_repository is not None

    def _build_meta(self, source_type: str, fetched_at: Optional[str],
                    error: Optional[str], project_count: int) -> ProjectMeta:
        return ProjectMeta(
            source_type=source_type,
            fetched_at=fetched_at,
            remote_info=RemoteInfo(
                enabled=self.remote_enabled,
                host=self.remote_host if self.remote_enabled else None,
                error=error
            ),
            project_count=project_count,
            custom_project_count=len(self.custom_repository.projects),
            custom_member_count=self.custom_repository.count_custom_members()
        )

    def _load_base_projects(self) -> Tuple[List[Project], str, Optional[str]]:
        """Remote projects when configured, local ones otherwise or on failure."""
        if not self.remote_enabled:
            return self.local_repository.get_all_projects(), "local", None

        try:
            return self.remote_repository.get_all_projects(), "remote", None
        except Exception as e:
            self.logger.error(f"Failed to fetch projects from remote source, using local list: {e}")
            return self.local_repository.get_all_projects(), "local", str(e)

    def _apply_customizations(self, base_projects: List[Project]) -> List[Project]:
        overrides = self.custom_repository.member_overrides
        combined = []
        for project in base_projects:
            combined.append(Project(
                id=project.id,
                name=project.name,
                members=merge_members(project.members, overrides.get(project.id, []))
            ))
        combined.extend(project.copy() for project in self.custom_repository.projects)
        return combined

    def get_projects(self) -> Tuple[List[Project], ProjectMeta]:
        """Resolve the combined project list and its source metadata."""
        fetched_at = utc_now_iso()
        base_projects, source_type, error = self._load_base_projects()
        projects = self._apply_customizations(base_projects)

        meta = self._build_meta(source_type, fetched_at, error, len(projects))
        self.last_meta = meta
        return projects, meta

    def get_project_map(self) -> Dict[str, Project]:
        projects, _ = self.get_projects()
        return {project.id: project for project in projects}

    @handle_exceptions(context="projects:add_project")
    def add_project(self, name: Any, member_names: Any) -> Project:
        """Create a custom project with the given members."""
        name = clean_string(name)
        names = sanitize_member_names(member_names)

        if not name:
            raise ValidationError("プロジェクト名を入力してください。")
        if not names:
            raise ValidationError("メンバーを 1 名以上入力してください。")

        project_id = new_custom_project_id()
        project = Project(
            id=project_id,
            name=name,
            members=[Member(id=new_member_id(project_id), name=member_name) for member_name in names]
        )
        self.custom_repository.projects.append(project)
        try:
            self.custom_repository.save()
        except PersistenceError:
            self.custom_repository.projects.remove(project)
            raise

        self.logger.info(f"Created custom project {project_id} with {len(names)} members")
        return project.copy()

    @handle_exceptions(context="projects:add_members")
    def add_members(self, project_id: Any, member_names: Any) -> Tuple[Project, List[Member]]:
        """
        Add members to any known project.

        Custom projects are extended in place; other projects get member
        overrides so their source data stays untouched.

        Returns:
            The updated project and only the newly added members.
        """
        project_id = clean_string(project_id)
        names = sanitize_member_names(member_names)

        if not project_id:
            raise ValidationError("プロジェクト ID が指定されていません。")
        if not names:
            raise ValidationError("メンバーを 1 名以上入力してください。")

        current = self.get_project_map().get(project_id)
        if current is None:
            raise NotFoundError("指定されたプロジェクトが見つかりません。")

        existing_names = current.member_names()
        added = []
        for name in names:
            if name.lower() in existing_names:
                continue
            existing_names.add(name.lower())
            added.append(Member(id=new_member_id(project_id), name=name))

        if not added:
            raise ValidationError("追加可能な新しいメンバーが見つかりませんでした。")

        overrides = self.custom_repository.member_overrides
        had_override = project_id in overrides
        custom_project = self.custom_repository.find_project(project_id)
        if custom_project is not None:
            target = custom_project.members
        else:
            target = overrides.setdefault(project_id, [])
        previous_count = len(target)
        target.extend(added)
        try:
            self.custom_repository.save()
        except PersistenceError:
            del target[previous_count:]
            if custom_project is None and not had_override:
                del overrides[project_id]
            raise

        self.logger.info(f"Added {len(added)} members to project {project_id}")
        project = self.get_project_map().get(project_id)
        if project is None:
            # Source changed between the two resolutions
            project = Project(id=current.id, name=current.name,
                              members=merge_members(current.members, added))
        return project, [member.copy() for member in added]


class AgendaTemplateCatalog:
    """Read-only catalog of agenda templates."""

    def __init__(self, repository):
        self._templates = repository.get_all_templates()

    def list_templates(self) -> List[AgendaTemplate]:
        return list(self._templates)

    def get_template(self, template_id: str) -> Optional[AgendaTemplate]:
        for template in self._templates:
            if template.id == template_id:
                return template
        return None


class ScheduleService:
    """Create, query, update and delete scheduled events."""

    def __init__(
        self,
        project_service: ProjectService,
        template_catalog: AgendaTemplateCatalog,
        schedule_repository,
        notifier: NotificationSink,
        calendar_repository: CalendarRepository
    ):
        self.project_service = project_service
        self.template_catalog = template_catalog
        self.schedule_repository = schedule_repository
        self.notifier = notifier
        self.calendar_repository = calendar_repository
        self.logger = logging.getLogger(__name__)

    def _events_for_month(self, year: int, month: int) -> List[Event]:
        return [event for event in self.schedule_repository.events if event.year_month == (year, month)]

    @handle_exceptions(context="schedule:list")
    def list_events(self, year: int, month: int) -> List[Event]:
        """Events in the given month, in schedule order."""
        if not is_valid_year(year) or not is_valid_month(month):
            raise ValidationError("year または month の値が不正です。")
        return self._events_for_month(year, month)

    def get_event(self, event_id: str) -> Event:
        event = self.schedule_repository.find(event_id)
        if event is None:
            raise NotFoundError("指定された予定が見つかりません。")
        return event

    def _resolve_fields(self, payload: Any) -> Dict[str, Any]:
        """Validate a create/update payload into Event field values."""
        if not isinstance(payload, dict):
            raise ValidationError("リクエストの形式が不正です。")

        raw_type = clean_string(payload.get('eventType')) or EventType.MEETING.value
        try:
            event_type = EventType(raw_type)
        except ValueError:
            raise ValidationError("イベント種別が不正です。")

        project_id = clean_string(payload.get('projectId'))
        facilitator_id = clean_string(payload.get('facilitatorId'))
        template_id = clean_string(payload.get('templateId'))
        custom_agenda = clean_string(payload.get('customAgenda'))
        date = clean_string(payload.get('date'))
        start_time = clean_string(payload.get('startTime'))

        project = None
        if project_id or event_type == EventType.MEETING:
            project = self.project_service.get_project_map().get(project_id)
            if project is None:
                raise ValidationError("指定されたプロジェクトが見つかりません。")

        facilitator = None
        if event_type == EventType.MEETING or (facilitator_id and project):
            facilitator = project.find_member(facilitator_id) if project else None
            if facilitator is None:
                raise ValidationError("ファシリテーターに選択されたメンバーがプロジェクトに存在しません。")

        project_name = project.name if project else clean_string(payload.get('projectName'))
        if not project_name:
            raise ValidationError("プロジェクトまたはイベント名を入力してください。")

        if not is_valid_date(date):
            raise ValidationError("日付を YYYY-MM-DD 形式で指定してください。")
        if not is_valid_time(start_time):
            raise ValidationError("開始時刻を HH:MM 形式で指定してください。")

        if custom_agenda:
            agenda, agenda_source = custom_agenda, "custom"
        else:
            template = self.template_catalog.get_template(template_id) if template_id else None
            if template is None:
                raise ValidationError("アジェンダを入力するかテンプレートを選択してください。")
            agenda, agenda_source = template.body, template.name

        return {
            'event_type': event_type,
            'project_id': project.id if project else '',
            'project_name': project_name,
            'facilitator_id': facilitator.id if facilitator else '',
            'facilitator_name': facilitator.name if facilitator else '',
            'facilitator_mention': clean_string(payload.get('facilitatorMention')),
            'date': date,
            'start_time': start_time,
            'agenda': agenda,
            'agenda_source': agenda_source
        }

    @handle_exceptions(context="schedule:create")
    def create_event(self, payload: Any) -> Tuple[Event, NotificationStatus]:
        """
        Validate and store a new event, then notify the webhook.

        The notification is best effort: its outcome is returned, never raised.
        """
        fields = self._resolve_fields(payload)
        event = Event(
            id=new_event_id(fields['date'], fields['start_time']),
            created_at=utc_now_iso(),
            **fields
        )

        self.schedule_repository.events.append(event)
        self.schedule_repository.sort()
        try:
            self.schedule_repository.save()
        except PersistenceError:
            self.schedule_repository.events.remove(event)
            raise
        self.logger.info(f"Scheduled {event.event_type.value} {event.id} on {event.date} {event.start_time}")

        try:
            status = self.notifier.notify(event)
        except Exception as e:
            self.logger.error(f"Notifier raised for event {event.id}: {e}")
            status = NotificationStatus.ERROR
        return event, status

    @handle_exceptions(context="schedule:update")
    def update_event(self, event_id: str, payload: Any) -> Event:
        """Replace an event's fields; id and creation time are kept."""
        event = self.get_event(event_id)
        fields = self._resolve_fields(payload)

        previous = {name: getattr(event, name) for name in fields}
        previous['updated_at'] = event.updated_at

        for name, value in fields.items():
            setattr(event, name, value)
        event.updated_at = utc_now_iso()

        self.schedule_repository.sort()
        try:
            self.schedule_repository.save()
        except PersistenceError:
            for name, value in previous.items():
                setattr(event, name, value)
            self.schedule_repository.sort()
            raise
        self.logger.info(f"Updated event {event.id}")
        return event

    @handle_exceptions(context="schedule:delete")
    def delete_event(self, event_id: str) -> None:
        event = self.get_event(event_id)
        events = self.schedule_repository.events
        index = events.index(event)
        del events[index]
        try:
            self.schedule_repository.save()
        except PersistenceError:
            events.insert(index, event)
            raise
        self.logger.info(f"Deleted event {event_id}")

    @handle_exceptions(context="schedule:export")
    def export_calendar(self, year: Optional[int] = None, month: Optional[int] = None) -> str:
        """iCalendar document of one month, or of the whole schedule."""
        if year is None or month is None:
            events = list(self.schedule_repository.events)
            name = None
        else:
            if not is_valid_year(year) or not is_valid_month(month):
                raise ValidationError("year または month の値が不正です。")
            events = self._events_for_month(year, month)
            name = f"ミーティング予定 {year}-{month:02d}"
        return self.calendar_repository.get_calendar_data(events, name=name)


class HolidayService:
    """Holiday list used to annotate the calendar."""

    def __init__(self, holiday_repository):
        self.holiday_repository = holiday_repository
        self.logger = logging.getLogger(__name__)

    def list_holidays(self) -> List[Holiday]:
        return list(self.holiday_repository.holidays)

    @handle_exceptions(context="holidays:add")
    def add_holiday(self, date: Any, name: Any) -> Holiday:
        date = clean_string(date)
        name = clean_string(name)
        if not date or not name:
            raise ValidationError("休日の日付と名称を入力してください。")
        if not is_valid_date(date):
            raise ValidationError("日付を YYYY-MM-DD 形式で指定してください。")

        holiday = Holiday(id=new_holiday_id(date), date=date, name=name)
        self.holiday_repository.holidays.append(holiday)
        self.holiday_repository.sort()
        try:
            self.holiday_repository.save()
        except PersistenceError:
            self.holiday_repository.holidays.remove(holiday)
            raise
        self.logger.info(f"Added holiday {holiday.id} ({date} {name})")
        return holiday

    @handle_exceptions(context="holidays:remove")
    def remove_holiday(self, holiday_id: str) -> None:
        holiday = self.holiday_repository.find(holiday_id)
        if holiday is None:
            raise NotFoundError("指定された休日が見つかりません。")
        holidays = self.holiday_repository.holidays
        index = holidays.index(holiday)
        del holidays[index]
        try:
            self.holiday_repository.save()
        except PersistenceError:
            holidays.insert(index, holiday)
            raise
        self.logger.info(f"Removed holiday {holiday_id}")
