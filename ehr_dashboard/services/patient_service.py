"""
Patient Service for the EHR Dashboard

Holds the fetched patient collection for the Patients page and derives the
filtered view from the current search filters.
"""

import logging
from typing import Any, Dict, List, Optional

import pandas as pd

from ehr_dashboard.models import Patient
from ehr_dashboard.services.fhir_client import FhirClient, patients_from_bundle
from ehr_dashboard.services.view_state import ViewState
from ehr_dashboard.utils.helpers import calculate_age, format_date, normalize_filters

logger = logging.getLogger(__name__)

PATIENT_COLUMNS = [
    'PATIENT_ID', 'NAME', 'IDENTIFIER', 'GENDER', 'BIRTH_DATE', 'AGE',
    'PHONE', 'EMAIL', 'ADDRESS', 'STATUS'
]


def _matches_identifier(patient: Patient, needle: str) -> bool:
    needle = needle.lower()
    if needle in (patient.id or "").lower():
        return True
    return any(needle in (i.value or "").lower() for i in patient.identifier)


def patient_matches(patient: Patient, filters: Dict[str, Any]) -> bool:
    """True when the patient satisfies every active filter."""
    name = filters.get('name')
    if name and str(name).lower() not in patient.display_name.lower():
        return False

    identifier = filters.get('identifier')
    if identifier and not _matches_identifier(patient, str(identifier)):
        return False

    birthdate = filters.get('birthdate')
    if birthdate:
        patient_birthdate = patient.birth_date.isoformat() if patient.birth_date else None
        if patient_birthdate != str(birthdate):
            return False

    gender = filters.get('gender')
    if gender and patient.gender != gender:
        return False

    if 'active' in filters and patient.active != filters['active']:
        return False

    return True


def filter_patients(patients: List[Patient], filters: Optional[Dict[str, Any]]) -> List[Patient]:
    """
    Conjunctive filter over the in-memory collection

    Args:
        patients: Full collection
        filters: Search filters; inactive values ('', None, 'all') are ignored

    Returns:
        Patients matching all active filters, in their original order
    """
    active = normalize_filters(filters)
    if not active:
        return list(patients)
    return [p for p in patients if patient_matches(p, active)]


def patients_to_dataframe(patients: List[Patient]) -> pd.DataFrame:
    """Tabular view of patients for the results table and CSV export"""
    rows = [
        {
            'PATIENT_ID': p.id,
            'NAME': p.display_name,
            'IDENTIFIER': p.preferred_identifier,
            'GENDER': p.gender,
            'BIRTH_DATE': format_date(p.birth_date) if p.birth_date else None,
            'AGE': calculate_age(p.birth_date),
            'PHONE': p.phone,
            'EMAIL': p.email,
            'ADDRESS': p.formatted_address,
            'STATUS': "Active" if p.active else "Inactive",
        }
        for p in patients
    ]
    return pd.DataFrame(rows, columns=PATIENT_COLUMNS)


class PatientListView(ViewState):
    """
    Patients page state

    In 'local' search mode the collection is fetched once and filters are
    applied in memory. In 'remote' mode each search is forwarded to the API
    as FHIR search parameters and the response is filtered again locally,
    since the mock server may ignore parameters it does not support.
    """

    def __init__(self, client: FhirClient, search_mode: str = 'local'):
        super().__init__()
        self.client = client
        self.search_mode = search_mode
        self.all_patients: List[Patient] = []
        self.filtered_patients: List[Patient] = []
        self.filters: Dict[str, Any] = {}
        self.total: Optional[int] = None
        self.loaded = False

    async def _fetch(self, params: Optional[Dict[str, Any]]):
        bundle = await self.client.search_patients(params)
        return bundle, patients_from_bundle(bundle)

    async def load(self, params: Optional[Dict[str, Any]] = None) -> None:
        """Fetch patients; the search filters in params only take effect once the response arrives."""
        ok, result = await self.track(self._fetch(params), "patients")
        if not ok:
            return

        bundle, patients = result
        if params is not None:
            self.filters = normalize_filters(params)
        self.all_patients = patients
        self.total = bundle.total if bundle.total is not None else len(patients)
        self.filtered_patients = filter_patients(patients, self.filters)
        self.loaded = True
        logger.info(f"Loaded {len(patients)} patients")

    async def search(self, filters: Dict[str, Any]) -> None:
        if self.search_mode == 'remote':
            await self.load(normalize_filters(filters))
        else:
            self.apply_filters(filters)

    async def reset(self) -> None:
        if self.search_mode == 'remote':
            await self.load({})
        else:
            self.clear_filters()

    def apply_filters(self, filters: Dict[str, Any]) -> None:
        self.filters = normalize_filters(filters)
        self.filtered_patients = filter_patients(self.all_patients, self.filters)
        logger.debug(f"{len(self.filtered_patients)} of {len(self.all_patients)} patients match {self.filters}")

    def clear_filters(self) -> None:
        self.filters = {}
        self.filtered_patients = list(self.all_patients)

    def use_demo_data(self, patients: List[Patient]) -> None:
        """Show demo records while the API is unreachable; the error stays visible."""
        self.all_patients = list(patients)
        self.total = len(patients)
        self.filtered_patients = filter_patients(self.all_patients, self.filters)
        self.showing_demo_data = True
        self.loaded = True
