"""
Input Validation Utilities for the EHR Dashboard

Validation functions for user inputs. Search filters are never blocked by
these checks; the search panel only surfaces the messages as hints.
"""

import re
from datetime import datetime
from typing import Dict, List, Any, Tuple
import logging

logger = logging.getLogger(__name__)

VALID_GENDERS = ('male', 'female', 'other', 'unknown')


def validate_patient_id(patient_id: str) -> Tuple[bool, str]:
    """
    Validate a patient id before it goes into a request path

    Ids are opaque server values; only a slash or whitespace is rejected.

    Args:
        patient_id: Patient ID to validate

    Returns:
        Tuple of (is_valid, error_message)
    """
    if patient_id is None:
        return False, "Patient ID is required"

    patient_id = str(patient_id).strip()

    if not patient_id:
        return False, "Patient ID is required"

    if re.search(r'[/\s]', patient_id):
        return False, "Patient ID cannot contain slashes or whitespace"

    return True, ""


def validate_search_criteria(criteria: Dict[str, Any]) -> Tuple[bool, List[str]]:
    """
    Validate patient search criteria

    Args:
        criteria: Normalized search criteria

    Returns:
        Tuple of (is_valid, list_of_errors)
    """
    errors = []

    birthdate = criteria.get('birthdate')
    if birthdate:
        try:
            datetime.strptime(str(birthdate), '%Y-%m-%d')
        except ValueError:
            errors.append("Birth date should use the YYYY-MM-DD format")

    gender = criteria.get('gender')
    if gender and gender not in VALID_GENDERS:
        errors.append(f"Invalid gender value: {gender}")

    active = criteria.get('active')
    if active is not None and not isinstance(active, bool):
        errors.append("Status must be Active or Inactive")

    if errors:
        logger.debug(f"Search criteria validation issues: {errors}")

    return len(errors) == 0, errors
