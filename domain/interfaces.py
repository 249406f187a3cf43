"""Domain interfaces for the meeting scheduler."""

from abc import ABC, abstractmethod
from typing import List, Optional

from .entities import Project, Event, NotificationStatus


class ProjectRepository(ABC):
    """Abstract source of base (non-custom) projects."""

    @abstractmethod
    def get_all_projects(self) -> List[Project]:
        """Get all projects with their members."""
        pass


class NotificationSink(ABC):
    """Abstract destination for new-event notifications."""

    @abstractmethod
    def notify(self, event: Event) -> NotificationStatus:
        """Deliver a notification; must not raise."""
        pass


class CalendarRepository(ABC):
    """Abstract calendar document builder."""

    @abstractmethod
    def get_calendar_data(self, events: List[Event], name: Optional[str] = None) -> str:
        """Generate iCalendar data for a list of events."""
        pass
