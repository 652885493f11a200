"""
FHIR API Client for the EHR Dashboard

Thin async client over httpx for the FHIR-style mock API. Every failure,
whether transport, HTTP status or malformed payload, surfaces as a
FhirApiError, and handle_api_error turns it into the message shown to users.
"""

import logging
from typing import Any, Dict, List, Optional

import httpx
from pydantic import ValidationError

from ehr_dashboard.models import Appointment, Bundle, Patient, appointment_from_resource
from ehr_dashboard.utils.config import DEFAULT_API_TIMEOUT
from ehr_dashboard.utils.helpers import build_query_string, encode_uri_component
from ehr_dashboard.utils.validators import validate_patient_id

logger = logging.getLogger(__name__)

FHIR_HEADERS = {
    "Content-Type": "application/fhir+json",
    "Accept": "application/fhir+json",
}

STATUS_MESSAGES = {
    400: "Invalid request. Please check your input.",
    401: "Authentication required.",
    403: "Access denied.",
    404: "Resource not found.",
    429: "Too many requests. Please try again later.",
}
SERVER_ERROR_MESSAGE = "Server error. Please try again."
NETWORK_ERROR_MESSAGE = "Network error occurred."
OUTCOME_FALLBACK_MESSAGE = "An error occurred"


class FhirApiError(Exception):
    """A failed request against the FHIR API."""

    def __init__(self, message: str, status_code: Optional[int] = None, body: Any = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.body = body


def _parse_body(response: httpx.Response) -> Any:
    try:
        return response.json()
    except ValueError:
        return response.text or None


def _outcome_message(body: Any) -> Optional[str]:
    """First issue text of an OperationOutcome body, None for anything else."""
    if not isinstance(body, dict) or body.get("resourceType") != "OperationOutcome":
        return None
    issues = body.get("issue")
    if not isinstance(issues, list) or not issues:
        return None
    first = issues[0] if isinstance(issues[0], dict) else {}
    details = first.get("details") if isinstance(first.get("details"), dict) else {}
    return details.get("text") or first.get("diagnostics") or OUTCOME_FALLBACK_MESSAGE


def handle_api_error(error: Exception) -> str:
    """
    Translate a failed request into a user-facing message

    A structured OperationOutcome in the response body takes precedence over
    the HTTP status; otherwise the status picks a generic message and
    transport failures keep their own message.

    Args:
        error: Exception raised by FhirClient

    Returns:
        Message suitable for an error banner
    """
    if isinstance(error, FhirApiError):
        outcome = _outcome_message(error.body)
        if outcome:
            return outcome

        status = error.status_code
        if status is not None:
            if status in STATUS_MESSAGES:
                return STATUS_MESSAGES[status]
            if status >= 500:
                return SERVER_ERROR_MESSAGE

    return str(error) or NETWORK_ERROR_MESSAGE


def _log_failure(url: str, status: int) -> None:
    if status == 429:
        logger.error(f"Rate limit exceeded for {url}. Please try again later.")
    elif status == 404:
        logger.error(f"Resource not found: {url}")
    elif status >= 500:
        logger.error(f"Server error ({status}) for {url}")
    else:
        logger.error(f"Request to {url} failed with HTTP {status}")


class FhirClient:
    """Read-only client for one FHIR base URL."""

    def __init__(self, base_url: str, timeout: float = DEFAULT_API_TIMEOUT):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout

    def _url(self, path: str, query: str = "") -> str:
        url = f"{self.base_url}/{path.lstrip('/')}"
        return f"{url}?{query}" if query else url

    async def get(self, path: str, query: str = "") -> Any:
        """
        GET a resource path and return the parsed JSON body

        Args:
            path: Resource path relative to the base URL, e.g. '/Patient'
            query: Already-encoded query string without the leading '?'

        Returns:
            Parsed response body

        Raises:
            FhirApiError: on transport failure, non-2xx status or a non-JSON body
        """
        url = self._url(path, query)
        logger.debug(f"FHIR API request: GET {url}")

        try:
            async with httpx.AsyncClient(timeout=self.timeout, headers=FHIR_HEADERS) as client:
                resp = await client.get(url)
                resp.raise_for_status()
        except httpx.HTTPStatusError as e:
            status = e.response.status_code
            _log_failure(url, status)
            raise FhirApiError(
                f"Request failed with status code {status}",
                status_code=status,
                body=_parse_body(e.response),
            ) from e
        except httpx.TimeoutException as e:
            logger.error(f"Request to {url} timed out after {self.timeout}s")
            raise FhirApiError(f"timeout of {int(self.timeout * 1000)}ms exceeded") from e
        except httpx.RequestError as e:
            logger.error(f"Network error for {url}: {e}")
            raise FhirApiError(str(e) or NETWORK_ERROR_MESSAGE) from e

        try:
            return resp.json()
        except ValueError as e:
            logger.error(f"Response from {url} is not valid JSON")
            raise FhirApiError("Invalid response from server", status_code=resp.status_code) from e

    async def get_bundle(self, path: str, query: str = "") -> Bundle:
        payload = await self.get(path, query)
        try:
            return Bundle.model_validate(payload)
        except ValidationError as e:
            logger.error(f"Unexpected bundle shape from {path}: {e}")
            raise FhirApiError("Unexpected response format from server") from e

    async def search_patients(self, params: Optional[Dict[str, Any]] = None) -> Bundle:
        """Search /Patient, forwarding the supported filters as FHIR search parameters."""
        query = build_query_string(params)
        logger.info(f"Searching patients{' with ' + query if query else ''}")
        return await self.get_bundle("/Patient", query)

    async def get_patient(self, patient_id: str) -> Patient:
        is_valid, message = validate_patient_id(patient_id)
        if not is_valid:
            raise ValueError(message)

        payload = await self.get(f"/Patient/{encode_uri_component(patient_id.strip())}")
        try:
            return Patient.model_validate(payload)
        except ValidationError as e:
            logger.error(f"Unexpected patient shape for {patient_id}: {e}")
            raise FhirApiError("Unexpected response format from server") from e

    async def list_appointments(self) -> List[Appointment]:
        """Fetch /Appointment without filters and adapt every entry to the canonical shape."""
        bundle = await self.get_bundle("/Appointment")
        try:
            return [appointment_from_resource(resource) for resource in bundle.resources()]
        except ValidationError as e:
            logger.error(f"Unexpected appointment shape: {e}")
            raise FhirApiError("Unexpected response format from server") from e


def patients_from_bundle(bundle: Bundle) -> List[Patient]:
    try:
        return [Patient.model_validate(resource) for resource in bundle.resources()]
    except ValidationError as e:
        logger.error(f"Unexpected patient shape in bundle: {e}")
        raise FhirApiError("Unexpected response format from server") from e
