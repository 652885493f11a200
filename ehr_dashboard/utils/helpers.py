"""
Helper Utilities for the EHR Dashboard

Common utility functions for data formatting, date handling,
FHIR search query building and general application helpers.
"""

import pandas as pd
from datetime import datetime, date
from typing import Dict, List, Optional, Any, Union
from urllib.parse import quote
import re
import logging

logger = logging.getLogger(__name__)

# (filter key, FHIR search parameter, value prefix), emitted in this order
FHIR_SEARCH_PARAMS = [
    ('name', 'name', ''),
    ('birthdate', 'birthdate', ''),
    ('gender', 'gender', ''),
    ('identifier', 'identifier', ''),
    ('phone', 'telecom', 'phone|'),
    ('email', 'email', ''),
    ('address', 'address', ''),
]

# characters a browser's encodeURIComponent leaves alone, besides [A-Za-z0-9_.~-]
_URI_COMPONENT_SAFE = "!*'()"


FILTER_SENTINEL_ALL = "all"


def normalize_filters(filters: Optional[Dict[str, Any]]) -> Dict[str, Any]:
    """Drop keys whose value is None, an empty string or the 'all' sentinel"""
    if not filters:
        return {}
    return {
        key: value for key, value in filters.items()
        if value is not None and not (isinstance(value, str) and value in ("", FILTER_SENTINEL_ALL))
    }


def encode_uri_component(value: Any) -> str:
    """Percent-encode a value the way a browser encodes a URI component"""
    return quote(str(value), safe=_URI_COMPONENT_SAFE)


def build_query_string(params: Optional[Dict[str, Any]]) -> str:
    """
    Translate UI search parameters into a FHIR search query string

    Only the fields in FHIR_SEARCH_PARAMS are forwarded, in that order.
    Falsy values are skipped and values are passed through without
    validation.

    Args:
        params: Sparse mapping of filter key to value

    Returns:
        Query string without the leading '?', empty when nothing applies
    """
    if not params:
        return ""

    fhir_params = []
    for key, fhir_name, prefix in FHIR_SEARCH_PARAMS:
        value = params.get(key)
        if value:
            fhir_params.append(f"{fhir_name}={prefix}{encode_uri_component(value)}")

    return "&".join(fhir_params)


def parse_date(value: Union[datetime, date, str, None]) -> Optional[date]:
    """Parse a calendar date, returning None for blank or unparseable input"""
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    try:
        return pd.to_datetime(value).date()
    except (ValueError, TypeError):
        logger.debug(f"Unparseable date: {value!r}")
        return None


def format_date(date_value: Union[datetime, date, str, None], format_str: str = "%Y-%m-%d") -> str:
    """
    Format date values consistently

    Args:
        date_value: Date to format
        format_str: Format string

    Returns:
        Formatted date string
    """
    if date_value is None or (not isinstance(date_value, str) and pd.isna(date_value)):
        return "N/A"

    if isinstance(date_value, str):
        try:
            date_value = pd.to_datetime(date_value)
        except (ValueError, TypeError):
            return date_value  # Return original if can't parse

    if isinstance(date_value, (datetime, date)):
        return date_value.strftime(format_str)

    return str(date_value)


def format_time(value: Union[datetime, str], use_24h: bool = False) -> str:
    """Format the time-of-day part of a timestamp, 12h ('9:05 AM') or 24h ('09:05')"""
    timestamp = pd.Timestamp(value)
    if use_24h:
        return timestamp.strftime("%H:%M")
    return timestamp.strftime("%I:%M %p").lstrip("0")


def format_phone_number(phone: Optional[str]) -> str:
    """
    Format phone numbers consistently

    Args:
        phone: Phone number string

    Returns:
        Formatted phone number
    """
    if not phone:
        return "N/A"

    digits = re.sub(r'\D', '', str(phone))

    if len(digits) == 10:
        return f"({digits[:3]}) {digits[3:6]}-{digits[6:]}"
    elif len(digits) == 11 and digits[0] == '1':
        return f"({digits[1:4]}) {digits[4:7]}-{digits[7:]}"
    return phone


def calculate_age(birth_date: Union[datetime, date, str, None],
                  reference_date: Union[datetime, date, None] = None) -> Optional[int]:
    """
    Calculate age from birth date

    Args:
        birth_date: Date of birth
        reference_date: Reference date (default: today)

    Returns:
        Age in years, or None when the birth date is missing
    """
    birth = parse_date(birth_date)
    if birth is None:
        return None

    if reference_date is None:
        reference_date = date.today()
    elif isinstance(reference_date, datetime):
        reference_date = reference_date.date()

    age = reference_date.year - birth.year

    # Adjust if birthday hasn't occurred this year
    if (reference_date.month, reference_date.day) < (birth.month, birth.day):
        age -= 1

    return age


def get_initials(name: str) -> str:
    """Initials of a display name, e.g. 'John Smith' -> 'JS'"""
    return "".join(part[0] for part in name.split() if part).upper()


def truncate_text(text: Optional[str], max_length: int = 100, suffix: str = "...") -> str:
    """
    Truncate text to specified length

    Args:
        text: Text to truncate
        max_length: Maximum length
        suffix: Suffix to add if truncated

    Returns:
        Truncated text
    """
    if not text:
        return ""

    text = str(text)
    if len(text) <= max_length:
        return text

    return text[:max_length - len(suffix)] + suffix


def create_filter_summary(filters: Optional[Dict[str, Any]]) -> str:
    """
    Create a human-readable summary of applied filters

    Args:
        filters: Dictionary of filter values

    Returns:
        Filter summary string
    """
    if not filters:
        return "No filters applied"

    summary_parts = [f"{key}: {value}" for key, value in filters.items()]
    return " | ".join(summary_parts)


def join_or_na(values: Optional[List[str]]) -> str:
    """Comma-join a list of strings, 'N/A' when empty"""
    return ", ".join(values) if values else "N/A"
