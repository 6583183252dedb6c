"""Configuration management for the ATM simulator."""
import os
from dataclasses import dataclass


def _int_env(name: str, default: int, minimum: int | None = None, maximum: int | None = None) -> int:
    value = os.getenv(name)
    if value is None or value.strip() == '':
        return default
    try:
        number = int(value)
    except ValueError:
        raise ValueError(f"{name} must be an integer, got {value!r}") from None
    if minimum is not None and number < minimum:
        raise ValueError(f"{name} must be at least {minimum}, got {number}")
    if maximum is not None and number > maximum:
        raise ValueError(f"{name} must be at most {maximum}, got {number}")
    return number


@dataclass
class Settings:
    """Configuration settings for the ATM simulator.

    Every value has a default, so a bare environment gives a working setup.
    """

    # Storage Configuration
    data_file: str = 'accounts.dat'
    backup_dir: str = 'backup'

    # Logging Configuration
    log_file: str = 'atm.log'
    log_level: str = 'INFO'

    # Business Rules
    max_accounts: int = 200
    first_account_no: int = 100100
    history_size: int = 10  # mini-statement length
    name_max_bytes: int = 63

    @classmethod
    def load(cls) -> 'Settings':
        """Load settings from environment variables.

        Returns:
            Settings: A Settings instance, environment values overriding defaults.

        Raises:
            ValueError: If an integer setting is not an integer or out of range.
        """
        defaults = cls()
        return cls(
            data_file=os.getenv('ATM_DATA_FILE', defaults.data_file),
            backup_dir=os.getenv('ATM_BACKUP_DIR', defaults.backup_dir),
            log_file=os.getenv('ATM_LOG_FILE', defaults.log_file),
            log_level=os.getenv('ATM_LOG_LEVEL', defaults.log_level).upper(),
            max_accounts=_int_env('ATM_MAX_ACCOUNTS', defaults.max_accounts),
            first_account_no=_int_env('ATM_FIRST_ACCOUNT_NO', defaults.first_account_no),
            history_size=_int_env('ATM_HISTORY_SIZE', defaults.history_size, minimum=1, maximum=65535),
        )
