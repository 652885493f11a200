"""
Utils Module for the EHR Dashboard

This module contains utility functions and helpers used throughout the application.
Includes data formatting, FHIR query building, validation and configuration management.

Modules:
- helpers: Common utility functions and data formatting helpers
- validators: Input validation functions
- config: Configuration management and environment setup
"""

from .helpers import (
    build_query_string, encode_uri_component, format_date, format_time,
    format_phone_number, calculate_age, parse_date, truncate_text,
    create_filter_summary
)

from .validators import (
    validate_patient_id, validate_search_criteria
)

from .config import (
    get_app_config, get_api_config, get_feature_flags,
    is_development, is_testing, get_log_level
)

__all__ = [
    # Helpers
    'build_query_string', 'encode_uri_component', 'format_date', 'format_time',
    'format_phone_number', 'calculate_age', 'parse_date', 'truncate_text',
    'create_filter_summary',

    # Validators
    'validate_patient_id', 'validate_search_criteria',

    # Config
    'get_app_config', 'get_api_config', 'get_feature_flags',
    'is_development', 'is_testing', 'get_log_level'
]
