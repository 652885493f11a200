"""
Shared request bookkeeping for the list views.

Each view tracks a loading flag, the last error message and a sequence
number per request, so only the newest request may update what is shown.
"""

import logging
from typing import Any, Awaitable, Optional, Tuple

from ehr_dashboard.services.fhir_client import FhirApiError, handle_api_error

logger = logging.getLogger(__name__)


class ViewState:
    def __init__(self):
        self.loading = False
        self.error: Optional[str] = None
        self.showing_demo_data = False
        self._sequence = 0

    async def track(self, request: Awaitable[Any], description: str) -> Tuple[bool, Any]:
        """
        Await a request on behalf of the view

        The loading flag goes up before the request and comes down once the
        newest request settles, success or not. Failures are logged and
        stored as a display message.

        Returns:
            (True, result) for the newest successful request, else (False, None)
        """
        self._sequence += 1
        sequence = self._sequence
        self.loading = True
        self.error = None

        try:
            result = await request
        except FhirApiError as e:
            logger.error(f"Error loading {description}: {e}")
            if sequence == self._sequence:
                self.error = handle_api_error(e)
            return False, None
        finally:
            if sequence == self._sequence:
                self.loading = False

        if sequence != self._sequence:
            logger.debug(f"Discarding stale {description} response #{sequence} (latest #{self._sequence})")
            return False, None

        self.showing_demo_data = False
        return True, result
