"""
Appointment Service for the EHR Dashboard

Holds the appointment feed for the Appointments page, filters it by patient
name and status, and groups it into calendar days for the schedule view.
"""

import logging
from datetime import date, datetime
from typing import List, Optional, Tuple

import pandas as pd

from ehr_dashboard.models import Appointment
from ehr_dashboard.services.fhir_client import FhirClient
from ehr_dashboard.services.view_state import ViewState
from ehr_dashboard.utils.helpers import FILTER_SENTINEL_ALL, format_date, format_time

logger = logging.getLogger(__name__)

DATE_KEY_FORMAT = "%Y-%m-%d"
ABSOLUTE_DATE_FORMAT = "%B %d, %Y"

STATUS_LABELS = {
    'booked': 'Booked',
    'cancelled': 'Cancelled',
    'pending': 'Pending',
    'fulfilled': 'Completed',
    'arrived': 'Arrived',
    'noshow': 'No Show',
    'proposed': 'Proposed',
}

STATUS_COLORS = {
    'booked': '🟢',
    'cancelled': '⚪',
    'pending': '🟡',
    'fulfilled': '🔵',
    'arrived': '🔵',
    'noshow': '🔴',
    'proposed': '🟣',
}

DayGroup = Tuple[str, List[Appointment]]


def date_key(timestamp: datetime) -> str:
    """Calendar day of a timestamp, in the timestamp's own offset."""
    return timestamp.strftime(DATE_KEY_FORMAT)


def _as_utc(timestamp: datetime) -> pd.Timestamp:
    ts = pd.Timestamp(timestamp)
    return ts.tz_localize('UTC') if ts.tzinfo is None else ts.tz_convert('UTC')


def filter_appointments(appointments: List[Appointment], name: Optional[str] = None,
                        status: Optional[str] = FILTER_SENTINEL_ALL) -> List[Appointment]:
    """Case-insensitive patient-name substring match AND status equality ('all' matches any)."""
    needle = (name or "").strip().lower()
    return [
        a for a in appointments
        if (not needle or needle in a.patient_name.lower())
        and (not status or status == FILTER_SENTINEL_ALL or a.status == status)
    ]


def group_by_day(appointments: List[Appointment]) -> List[DayGroup]:
    """
    Group appointments by the calendar day of their start

    Groups come back in ascending date order and each group is sorted by
    start instant.

    Args:
        appointments: Appointments in any order

    Returns:
        List of (YYYY-MM-DD, appointments) pairs
    """
    if not appointments:
        return []

    frame = pd.DataFrame({
        'POSITION': range(len(appointments)),
        'DATE_KEY': [date_key(a.start) for a in appointments],
        'START_UTC': [_as_utc(a.start) for a in appointments],
    })
    frame = frame.sort_values(['DATE_KEY', 'START_UTC'], kind='mergesort')

    return [
        (key, [appointments[i] for i in day['POSITION']])
        for key, day in frame.groupby('DATE_KEY', sort=True)
    ]


def relative_day_label(key: str, today: Optional[date] = None) -> str:
    """
    Human label for a YYYY-MM-DD day relative to today

    Returns 'Today', 'Tomorrow' or 'Yesterday', otherwise the absolute date
    such as 'January 05, 2024'.
    """
    today = today or date.today()
    day = datetime.strptime(key, DATE_KEY_FORMAT).date()
    offset = (day - today).days

    if offset == 0:
        return "Today"
    if offset == 1:
        return "Tomorrow"
    if offset == -1:
        return "Yesterday"
    return format_date(day, ABSOLUTE_DATE_FORMAT)


def appointments_on(appointments: List[Appointment], day: date) -> List[Appointment]:
    return [a for a in appointments if a.start.date() == day]


def format_time_range(appointment: Appointment, use_24h: bool = False) -> str:
    return f"{format_time(appointment.start, use_24h)} - {format_time(appointment.end, use_24h)}"


def appointments_to_dataframe(appointments: List[Appointment], use_24h: bool = False) -> pd.DataFrame:
    rows = [
        {
            'APPOINTMENT_ID': a.id,
            'PATIENT': a.patient_name,
            'DATE': format_date(a.start, ABSOLUTE_DATE_FORMAT),
            'TIME': format_time_range(a, use_24h),
            'DURATION_MIN': a.minutes_duration,
            'STATUS': STATUS_LABELS.get(a.status, a.status),
            'PROVIDER': a.provider_name,
            'DESCRIPTION': a.description,
        }
        for a in appointments
    ]
    return pd.DataFrame(rows, columns=[
        'APPOINTMENT_ID', 'PATIENT', 'DATE', 'TIME', 'DURATION_MIN', 'STATUS', 'PROVIDER', 'DESCRIPTION'
    ])


class AppointmentListView(ViewState):
    """Appointments page state: the fetched feed plus name/status filters."""

    def __init__(self, client: FhirClient):
        super().__init__()
        self.client = client
        self.appointments: List[Appointment] = []
        self.name_filter = ""
        self.status_filter = FILTER_SENTINEL_ALL
        self.use_24h = False
        self.loaded = False

    async def load(self) -> None:
        ok, appointments = await self.track(self.client.list_appointments(), "appointments")
        if not ok:
            return
        self.appointments = appointments
        self.loaded = True
        logger.info(f"Loaded {len(appointments)} appointments")

    def set_filters(self, name: Optional[str] = None, status: Optional[str] = None) -> None:
        if name is not None:
            self.name_filter = name
        if status is not None:
            self.status_filter = status

    @property
    def filtered(self) -> List[Appointment]:
        return filter_appointments(self.appointments, self.name_filter, self.status_filter)

    def grouped(self) -> List[DayGroup]:
        return group_by_day(self.filtered)

    def use_demo_data(self, appointments: List[Appointment]) -> None:
        self.appointments = list(appointments)
        self.showing_demo_data = True
        self.loaded = True
