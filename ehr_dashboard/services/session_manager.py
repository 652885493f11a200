"""
Session Manager for the EHR Dashboard

Owns the FHIR clients and the per-page view state. A page's state lives only
while the user stays on that page: navigating away tears it down, closing
any search panel it owned so no debounced search fires for a page that is
no longer shown.
"""

import logging
from typing import Any, Callable, Dict, MutableMapping, Optional

import streamlit as st

from ehr_dashboard.services.demo_data import demo_dataset
from ehr_dashboard.services.fhir_client import FhirClient
from ehr_dashboard.utils.config import get_api_config, get_app_config

logger = logging.getLogger(__name__)

PAGE_STATE_KEY = 'page_state'


class SessionManager:
    """Manages API clients and page state for one browser session"""

    def __init__(self, state: Optional[MutableMapping[str, Any]] = None):
        self._state = state
        self.app_config: Dict[str, Any] = {}
        self.features: Dict[str, bool] = {}
        self.patient_client: Optional[FhirClient] = None
        self.appointment_client: Optional[FhirClient] = None
        self._demo_data: Optional[Dict[str, list]] = None

    @property
    def state(self) -> MutableMapping[str, Any]:
        return self._state if self._state is not None else st.session_state

    @property
    def offline_mode(self) -> bool:
        return bool(self.app_config.get('offline_mode'))

    def initialize_services(self, config: Optional[Dict[str, Any]] = None) -> None:
        """Create the API clients from configuration"""
        config = config or {'app': get_app_config(), 'api': get_api_config()}
        self.app_config = config.get('app', {})
        self.features = config.get('features', {})
        api = config.get('api', {})

        self.patient_client = FhirClient(api.get('base_url', ''), timeout=api.get('timeout', 10.0))
        self.appointment_client = FhirClient(
            api.get('appointments_url') or api.get('base_url', ''),
            timeout=api.get('timeout', 10.0)
        )

        if self.offline_mode:
            logger.info("Offline mode enabled - pages will use demo data")
        else:
            logger.info(f"Services initialized for {self.patient_client.base_url or '<unset base URL>'}")

    def get_feature_flag(self, name: str, default: bool = True) -> bool:
        return self.features.get(name, default)

    def get_patient_client(self) -> FhirClient:
        if self.patient_client is None:
            self.initialize_services()
        return self.patient_client

    def get_appointment_client(self) -> FhirClient:
        if self.appointment_client is None:
            self.initialize_services()
        return self.appointment_client

    def demo_data(self) -> Dict[str, list]:
        if self._demo_data is None:
            self._demo_data = demo_dataset()
        return self._demo_data

    def _pages(self) -> Dict[str, Dict[str, Any]]:
        if PAGE_STATE_KEY not in self.state:
            self.state[PAGE_STATE_KEY] = {}
        return self.state[PAGE_STATE_KEY]

    def page_state(self, page: str, name: str, factory: Callable[[], Any]) -> Any:
        """Get or create an object scoped to a page"""
        scoped = self._pages().setdefault(page, {})
        if name not in scoped:
            scoped[name] = factory()
        return scoped[name]

    def teardown_page(self, page: str) -> None:
        """Discard a page's state, closing anything that holds a timer"""
        scoped = self._pages().pop(page, None)
        if not scoped:
            return
        for obj in scoped.values():
            close = getattr(obj, 'close', None)
            if callable(close):
                close()
        logger.debug(f"Tore down state for page '{page}'")
