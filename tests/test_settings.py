"""Tests for configuration management."""
import pytest
from config.settings import Settings

ENV_VARS = [
    'ATM_DATA_FILE',
    'ATM_BACKUP_DIR',
    'ATM_LOG_FILE',
    'ATM_LOG_LEVEL',
    'ATM_MAX_ACCOUNTS',
    'ATM_FIRST_ACCOUNT_NO',
    'ATM_HISTORY_SIZE',
]


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    """Start every test without ATM_* variables."""
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)


def test_settings_defaults():
    """Test that all default values are correctly set."""
    settings = Settings()

    # Storage defaults
    assert settings.data_file == 'accounts.dat'
    assert settings.backup_dir == 'backup'

    # Logging defaults
    assert settings.log_file == 'atm.log'
    assert settings.log_level == 'INFO'

    # Business rules defaults
    assert settings.max_accounts == 200
    assert settings.first_account_no == 100100
    assert settings.history_size == 10
    assert settings.name_max_bytes == 63


def test_settings_load_without_environment():
    assert Settings.load() == Settings()


def test_settings_load(monkeypatch):
    """Test loading Settings from environment variables."""
    monkeypatch.setenv('ATM_DATA_FILE', '/tmp/bank.dat')
    monkeypatch.setenv('ATM_BACKUP_DIR', '/tmp/bak')
    monkeypatch.setenv('ATM_LOG_FILE', '/tmp/atm.log')
    monkeypatch.setenv('ATM_LOG_LEVEL', 'debug')
    monkeypatch.setenv('ATM_MAX_ACCOUNTS', '5')
    monkeypatch.setenv('ATM_FIRST_ACCOUNT_NO', '700000')
    monkeypatch.setenv('ATM_HISTORY_SIZE', '3')

    settings = Settings.load()

    assert settings.data_file == '/tmp/bank.dat'
    assert settings.backup_dir == '/tmp/bak'
    assert settings.log_file == '/tmp/atm.log'
    assert settings.log_level == 'DEBUG'
    assert settings.max_accounts == 5
    assert settings.first_account_no == 700000
    assert settings.history_size == 3


def test_settings_load_blank_integer_uses_default(monkeypatch):
    monkeypatch.setenv('ATM_MAX_ACCOUNTS', '  ')

    assert Settings.load().max_accounts == 200


def test_settings_load_invalid_integer(monkeypatch):
    """Test that loading fails when an integer setting is malformed."""
    monkeypatch.setenv('ATM_HISTORY_SIZE', 'ten')

    with pytest.raises(ValueError, match="ATM_HISTORY_SIZE must be an integer"):
        Settings.load()


@pytest.mark.parametrize("value, message", [
    ('0', "ATM_HISTORY_SIZE must be at least 1"),
    ('-3', "ATM_HISTORY_SIZE must be at least 1"),
    ('70000', "ATM_HISTORY_SIZE must be at most 65535"),
])
def test_settings_load_history_size_out_of_range(monkeypatch, value, message):
    """Test that a history size the ledger cannot hold is refused at load."""
    monkeypatch.setenv('ATM_HISTORY_SIZE', value)

    with pytest.raises(ValueError, match=message):
        Settings.load()
