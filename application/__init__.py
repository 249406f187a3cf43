"""Application services for the meeting scheduler."""

from .services import (
    ProjectService, AgendaTemplateCatalog, ScheduleService, HolidayService, merge_members
)

__all__ = [
    'ProjectService', 'AgendaTemplateCatalog', 'ScheduleService', 'HolidayService',
    'merge_members'
]
