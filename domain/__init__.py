"""Domain layer for the meeting scheduler."""

from .entities import (
    Member, Project, AgendaTemplate, Event, Holiday, EventType,
    NotificationStatus, ProjectMeta, RemoteInfo, name_sort_key, utc_now_iso
)
from .interfaces import ProjectRepository, NotificationSink, CalendarRepository

__all__ = [
    'Member', 'Project', 'AgendaTemplate', 'Event', 'Holiday', 'EventType',
    'NotificationStatus', 'ProjectMeta', 'RemoteInfo', 'name_sort_key', 'utc_now_iso',
    'ProjectRepository', 'NotificationSink', 'CalendarRepository'
]
