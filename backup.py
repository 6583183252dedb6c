import sys
from dotenv import load_dotenv
from config.settings import Settings
from atm.models.exceptions import StorageError
from atm.repositories.ledger_repo import LedgerRepository


def main():
    load_dotenv()
    settings = Settings.load()
    repo = LedgerRepository(settings.data_file)
    try:
        dest = repo.backup(settings.backup_dir)
    except StorageError as err:
        print(f"Backup failed: {err}", file=sys.stderr)
        return 1
    print(f"Backed up to {dest}")
    return 0


if __name__ == '__main__':
    sys.exit(main())
