"""
Dashboard Service for the EHR Dashboard

Loads patients and appointments side by side and summarises them for the
home page: headline counts, today's schedule and recent activity.
"""

import asyncio
import logging
from datetime import date, datetime, timezone
from typing import Any, Dict, List, Optional

from ehr_dashboard.models import Appointment
from ehr_dashboard.services.appointment_service import appointments_on
from ehr_dashboard.services.fhir_client import FhirApiError, FhirClient, handle_api_error

logger = logging.getLogger(__name__)

COMPLETED_STATUSES = ('fulfilled',)
UPCOMING_STATUSES = ('proposed', 'pending', 'booked', 'arrived')


class DashboardView:
    """
    Home page state

    The two feeds live on different endpoints and fail independently, so
    each keeps its own error message; whatever loaded is still summarised.
    """

    def __init__(self, patient_client: FhirClient, appointment_client: FhirClient):
        self.patient_client = patient_client
        self.appointment_client = appointment_client
        self.total_patients: Optional[int] = None
        self.appointments: List[Appointment] = []
        self.errors: Dict[str, str] = {}
        self.loading = False
        self.loaded = False

    async def _load_patients(self) -> None:
        try:
            bundle = await self.patient_client.search_patients()
        except FhirApiError as e:
            logger.error(f"Error loading patient count: {e}")
            self.errors['patients'] = handle_api_error(e)
            return
        self.total_patients = bundle.total if bundle.total is not None else len(bundle.entry)

    async def _load_appointments(self) -> None:
        try:
            self.appointments = await self.appointment_client.list_appointments()
        except FhirApiError as e:
            logger.error(f"Error loading appointments for dashboard: {e}")
            self.errors['appointments'] = handle_api_error(e)

    async def load(self) -> None:
        self.loading = True
        self.errors = {}
        try:
            await asyncio.gather(self._load_patients(), self._load_appointments())
        finally:
            self.loading = False
        self.loaded = True

    def use_demo_data(self, patients: List[Any], appointments: List[Appointment]) -> None:
        self.total_patients = len(patients)
        self.appointments = list(appointments)
        self.loaded = True

    def stats(self, today: Optional[date] = None) -> Dict[str, Any]:
        """
        Headline counts for the stats cards

        Args:
            today: Reference day (default: today)

        Returns:
            Dictionary with total_patients, today_appointments,
            upcoming_today and completed_today
        """
        today = today or date.today()
        todays = appointments_on(self.appointments, today)
        return {
            'total_patients': self.total_patients or 0,
            'today_appointments': len(todays),
            'upcoming_today': sum(1 for a in todays if a.status in UPCOMING_STATUSES),
            'completed_today': sum(1 for a in todays if a.status in COMPLETED_STATUSES),
        }

    def todays_schedule(self, today: Optional[date] = None) -> List[Appointment]:
        today = today or date.today()
        return sorted(appointments_on(self.appointments, today), key=lambda a: _instant(a.start))

    def recent_activity(self, limit: int = 5, now: Optional[datetime] = None) -> List[Appointment]:
        """Appointments that have already started, most recent first."""
        now = now or datetime.now(timezone.utc)
        started = [a for a in self.appointments if _instant(a.start) <= _instant(now)]
        return sorted(started, key=lambda a: _instant(a.start), reverse=True)[:limit]


def _instant(timestamp: datetime) -> datetime:
    # naive timestamps are taken as UTC so they compare with aware ones
    return timestamp if timestamp.tzinfo else timestamp.replace(tzinfo=timezone.utc)
