import os
from dotenv import load_dotenv

from announcer.utils.exceptions import ConfigError

load_dotenv()

_TRUE_VALUES = ('true', '1', 'yes', 'on')
_FALSE_VALUES = ('false', '0', 'no', 'off')


def parse_bool(value, name: str = 'value') -> bool:
    """Parse a boolean setting from an env var or CLI string"""
    if isinstance(value, bool):
        return value
    normalized = str(value).strip().lower()
    if normalized in _TRUE_VALUES:
        return True
    if normalized in _FALSE_VALUES:
        return False
    raise ConfigError(name, f"expected a boolean, got '{value}'")


def _env_int(name: str, default: int):
    raw = os.getenv(name)
    if raw is None or raw.strip() == '':
        return default
    try:
        return int(raw)
    except ValueError:
        # Kept as the raw string so validate() can report it
        return raw


class Config:
    """Announcer configuration settings"""

    # Discord settings
    WEBHOOK_URL = os.getenv('WEBHOOK_URL')

    # CTFd settings
    CTFD_URL = (os.getenv('CTFD_URL') or '').rstrip('/') or None
    CTFD_API_KEY = os.getenv('CTFD_API_KEY')
    CTFD_ACCOUNT_TYPE = os.getenv('CTFD_ACCOUNT_TYPE', 'teams').lower()
    REQUEST_TIMEOUT_SECONDS = _env_int('REQUEST_TIMEOUT_SECONDS', 30)

    # Database settings
    DATABASE_URL = os.getenv('DATABASE_URL', 'sqlite:///ctfd_announcer.db')

    # Announcement settings
    ANNOUNCE_FIRST_BLOOD_ONLY = os.getenv('ANNOUNCE_FIRST_BLOOD_ONLY', 'true')
    SKIP_EXISTING_SOLVES_ON_STARTUP = os.getenv('SKIP_EXISTING_SOLVES_ON_STARTUP', 'true')
    ANNOUNCE_OVERTAKES = os.getenv('ANNOUNCE_OVERTAKES', 'true')
    REFRESH_INTERVAL_SECONDS = _env_int('REFRESH_INTERVAL_SECONDS', 5)
    TOP_N = _env_int('TOP_N', 10)

    # Logging
    DEBUG = os.getenv('DEBUG', 'False').lower() == 'true'
    LOG_DIR = os.getenv('LOG_DIR', 'logs')

    ACCOUNT_TYPES = ('teams', 'users')

    @classmethod
    def validate(cls):
        """Validate and normalize configuration, raising ConfigError on bad values"""
        if not cls.WEBHOOK_URL:
            raise ConfigError('WEBHOOK_URL', 'is required')
        if not cls.CTFD_URL:
            raise ConfigError('CTFD_URL', 'is required')
        if not cls.CTFD_API_KEY:
            raise ConfigError('CTFD_API_KEY', 'is required')

        cls.CTFD_URL = cls.CTFD_URL.rstrip('/')

        cls.ANNOUNCE_FIRST_BLOOD_ONLY = parse_bool(cls.ANNOUNCE_FIRST_BLOOD_ONLY, 'ANNOUNCE_FIRST_BLOOD_ONLY')
        cls.SKIP_EXISTING_SOLVES_ON_STARTUP = parse_bool(
            cls.SKIP_EXISTING_SOLVES_ON_STARTUP, 'SKIP_EXISTING_SOLVES_ON_STARTUP'
        )
        cls.ANNOUNCE_OVERTAKES = parse_bool(cls.ANNOUNCE_OVERTAKES, 'ANNOUNCE_OVERTAKES')

        for name in ('REFRESH_INTERVAL_SECONDS', 'TOP_N', 'REQUEST_TIMEOUT_SECONDS'):
            value = getattr(cls, name)
            if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
                raise ConfigError(name, f"must be a positive integer, got '{value}'")

        cls.CTFD_ACCOUNT_TYPE = str(cls.CTFD_ACCOUNT_TYPE).lower()
        if cls.CTFD_ACCOUNT_TYPE not in cls.ACCOUNT_TYPES:
            raise ConfigError(
                'CTFD_ACCOUNT_TYPE',
                f"must be one of {', '.join(cls.ACCOUNT_TYPES)}, got '{cls.CTFD_ACCOUNT_TYPE}'"
            )
