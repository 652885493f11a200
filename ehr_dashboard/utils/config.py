"""
Configuration Management for the EHR Dashboard

Handles application configuration, environment variables,
and setup for different deployment environments.
"""

import os
import logging
from typing import Dict, Any
from pathlib import Path

logger = logging.getLogger(__name__)

DEFAULT_API_TIMEOUT = 10.0
DEFAULT_SEARCH_DEBOUNCE_MS = 800


def _env_flag(name: str, default: str) -> bool:
    return os.getenv(name, default).strip().lower() in ('1', 'true', 'yes')


def get_app_config() -> Dict[str, Any]:
    """
    Get application configuration settings

    Returns:
        Dictionary containing app configuration
    """
    try:
        search_mode = os.getenv('PATIENT_SEARCH_MODE', 'local').lower()
        if search_mode not in ('local', 'remote'):
            logger.warning(f"Unknown PATIENT_SEARCH_MODE '{search_mode}', using 'local'")
            search_mode = 'local'

        config = {
            'app_name': os.getenv('APP_NAME', 'HealthCare EHR'),
            'app_version': os.getenv('APP_VERSION', '1.0.0'),
            'environment': os.getenv('ENVIRONMENT', 'development'),
            'debug': _env_flag('DEBUG', 'true'),
            'log_level': get_log_level(),
            'search_debounce_ms': int(os.getenv('SEARCH_DEBOUNCE_MS', str(DEFAULT_SEARCH_DEBOUNCE_MS))),
            'patient_search_mode': search_mode,
            'offline_mode': _env_flag('OFFLINE_MODE', '0'),
            'recent_activity_limit': int(os.getenv('RECENT_ACTIVITY_LIMIT', '5')),
            'physician_name': os.getenv('PHYSICIAN_NAME', 'Dr. Sarah Wilson'),
        }

        return config

    except ValueError as e:
        logger.error(f"Error loading app configuration: {e}")
        return {
            'app_name': 'HealthCare EHR',
            'environment': 'development',
            'debug': True,
            'log_level': 'INFO',
            'search_debounce_ms': DEFAULT_SEARCH_DEBOUNCE_MS,
            'patient_search_mode': 'local',
            'offline_mode': False,
            'recent_activity_limit': 5,
            'physician_name': 'Dr. Sarah Wilson',
        }


def get_api_config() -> Dict[str, Any]:
    """
    Get FHIR API configuration settings

    The appointments endpoint is configured separately because the
    appointment feed is served by its own mock service; it falls back to
    the FHIR base URL when unset.

    Returns:
        Dictionary containing API configuration
    """
    base_url = os.getenv('FHIR_API_BASE_URL', '').rstrip('/')
    try:
        timeout = float(os.getenv('API_TIMEOUT_SECONDS', str(DEFAULT_API_TIMEOUT)))
    except ValueError:
        logger.error("API_TIMEOUT_SECONDS is not a number, using default")
        timeout = DEFAULT_API_TIMEOUT

    return {
        'base_url': base_url,
        'appointments_url': os.getenv('APPOINTMENTS_API_URL', base_url).rstrip('/'),
        'timeout': timeout,
    }


def get_feature_flags() -> Dict[str, bool]:
    """
    Get feature flag configuration

    Returns:
        Dictionary of feature flags
    """
    return {
        'enable_dashboard': _env_flag('FEATURE_DASHBOARD', 'true'),
        'enable_patients': _env_flag('FEATURE_PATIENTS', 'true'),
        'enable_appointments': _env_flag('FEATURE_APPOINTMENTS', 'true'),
        'enable_demo_fallback': _env_flag('FEATURE_DEMO_FALLBACK', 'true'),
    }


def is_development() -> bool:
    """Check if running in development environment"""
    return os.getenv('ENVIRONMENT', 'development').lower() == 'development'


def is_testing() -> bool:
    """Check if running in testing environment"""
    return os.getenv('ENVIRONMENT', 'development').lower() == 'testing'


def get_log_level() -> str:
    """Get configured log level"""
    level = os.getenv('LOG_LEVEL', 'INFO').upper()
    valid_levels = ['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL']
    return level if level in valid_levels else 'INFO'


def setup_logging() -> None:
    """Setup application logging configuration"""
    log_level = get_log_level()
    log_format = os.getenv('LOG_FORMAT', '%(asctime)s - %(name)s - %(levelname)s - %(message)s')

    # root logger is configured once per process
    if not logging.getLogger().handlers:
        handlers = [logging.StreamHandler()]
        if not is_development() and not is_testing():
            handlers.append(logging.FileHandler(os.getenv('LOG_FILE', 'ehr_dashboard.log')))

        logging.basicConfig(
            level=getattr(logging, log_level),
            format=log_format,
            handlers=handlers
        )

    # httpx logs every request at INFO
    logging.getLogger('httpx').setLevel(logging.WARNING)
    logging.getLogger('httpcore').setLevel(logging.WARNING)

    logger.info(f"Logging configured - Level: {log_level}, Environment: {os.getenv('ENVIRONMENT', 'development')}")


def validate_configuration() -> bool:
    """
    Validate that all required configuration is present

    Returns:
        True if configuration is valid
    """
    validation_errors = []

    app_config = get_app_config()
    api_config = get_api_config()

    if not app_config.get('offline_mode'):
        if not api_config.get('base_url'):
            validation_errors.append("Missing required API configuration: FHIR_API_BASE_URL")
        if not api_config.get('appointments_url'):
            validation_errors.append("Missing required API configuration: APPOINTMENTS_API_URL")

    if api_config.get('timeout', 0) <= 0:
        validation_errors.append("API_TIMEOUT_SECONDS must be positive")

    if app_config.get('search_debounce_ms', 0) < 0:
        validation_errors.append("SEARCH_DEBOUNCE_MS cannot be negative")

    if validation_errors:
        logger.error(f"Configuration validation failed: {validation_errors}")
        return False

    logger.info("Configuration validation successful")
    return True


def load_environment_file(env_file: str = '.env') -> bool:
    """
    Load environment variables from file

    Variables already present in the environment win over the file.

    Args:
        env_file: Path to environment file

    Returns:
        True if file was loaded successfully
    """
    env_path = Path(env_file)

    if not env_path.exists():
        logger.debug(f"Environment file not found: {env_file}")
        return False

    try:
        with open(env_path, 'r') as f:
            for line in f:
                line = line.strip()
                if not line or line.startswith('#') or '=' not in line:
                    continue
                key, value = line.split('=', 1)
                os.environ.setdefault(key.strip(), value.strip().strip('"').strip("'"))
    except OSError as e:
        logger.error(f"Error loading environment file: {e}")
        return False

    logger.info(f"Environment file loaded: {env_file}")
    return True


def load_app_config() -> Dict[str, Any]:
    """
    Load and initialize application configuration

    This function:
    - Loads environment variables in development
    - Sets up logging
    - Validates configuration
    - Returns the complete app configuration

    Returns:
        Dictionary containing application configuration
    """
    if is_development():
        load_environment_file()

    setup_logging()

    if not validate_configuration():
        logger.warning("Configuration validation failed, using defaults")

    config = {
        'app': get_app_config(),
        'api': get_api_config(),
        'features': get_feature_flags()
    }

    logger.info("Application configuration loaded successfully")
    return config
