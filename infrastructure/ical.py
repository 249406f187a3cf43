"""iCalendar export of the schedule."""

import logging
from datetime import datetime, timedelta, timezone
from typing import List, Optional

from icalendar import Calendar, Event as ICalEvent, Alarm

from domain import Event, CalendarRepository
from monitoring import CalendarGenerationError


PRODID = '-//Meeting Scheduler//meeting_scheduler//JA'
DEFAULT_DURATION = timedelta(hours=1)
REMINDER_MINUTES = 15


class ICalendarRepository(CalendarRepository):
    """iCalendar implementation of CalendarRepository."""

    def __init__(self, uid_domain: str = 'meeting-scheduler.local'):
        self.uid_domain = uid_domain
        self.logger = logging.getLogger(__name__)

    def _add_alarm(self, ical_event: ICalEvent, event: Event) -> None:
        alarm = Alarm()
        alarm.add('action', 'DISPLAY')
        alarm.add('description', f"リマインダー: {event.title}")
        alarm.add('trigger', timedelta(minutes=-REMINDER_MINUTES))
        ical_event.add_component(alarm)

    def _create_event(self, event: Event) -> ICalEvent:
        """Create iCalendar event from a scheduled event.

        Start times are floating local times, matching how they were entered.
        """
        start = datetime.strptime(f"{event.date} {event.start_time}", '%Y-%m-%d %H:%M')

        ical_event = ICalEvent()
        ical_event.add('uid', f'{event.id}@{self.uid_domain}')
        ical_event.add('summary', event.title)
        ical_event.add('dtstart', start)
        ical_event.add('dtend', start + DEFAULT_DURATION)
        ical_event.add('dtstamp', datetime.now(timezone.utc))
        ical_event.add('categories', [event.event_type.value])

        lines = []
        if event.facilitator_name:
            lines.append(f"ファシリテーター: {event.facilitator_name}")
        if event.agenda:
            lines.append(event.agenda)
        if lines:
            ical_event.add('description', '\n'.join(lines))

        ical_event.add('status', 'CONFIRMED')
        ical_event.add('transp', 'OPAQUE')
        self._add_alarm(ical_event, event)
        return ical_event

    def get_calendar_data(self, events: List[Event], name: Optional[str] = None) -> str:
        """Generate iCalendar data for a list of events."""
        try:
            cal = Calendar()
            cal.add('prodid', PRODID)
            cal.add('version', '2.0')
            cal.add('calscale', 'GREGORIAN')
            cal.add('method', 'PUBLISH')
            cal.add('x-wr-calname', name or 'ミーティング予定')

            for event in events:
                cal.add_component(self._create_event(event))

            return cal.to_ical().decode('utf-8')

        except (ValueError, TypeError) as e:
            self.logger.error(f"Failed to generate calendar: {e}")
            raise CalendarGenerationError(f"Failed to generate calendar: {e}", cause=e)
