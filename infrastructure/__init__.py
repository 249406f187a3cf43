"""Infrastructure implementations for the meeting scheduler."""

from .storage import JsonFileStore
from .repositories import (
    RedmineRepository, LocalProjectRepository, AgendaTemplateRepository,
    CustomDataRepository, ScheduleRepository, HolidayRepository
)
from .notifier import SlackNotifier
from .ical import ICalendarRepository

__all__ = [
    'JsonFileStore', 'RedmineRepository', 'LocalProjectRepository',
    'AgendaTemplateRepository', 'CustomDataRepository', 'ScheduleRepository',
    'HolidayRepository', 'SlackNotifier', 'ICalendarRepository'
]
