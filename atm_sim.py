import logging
from dotenv import load_dotenv
from config.settings import Settings
from atm.repositories.ledger_repo import LedgerRepository
from atm.services.bank_service import BankService
from atm.shell import AtmShell


def setup_logging(settings: Settings) -> logging.Logger:
    logger = logging.getLogger('atm')
    logger.setLevel(getattr(logging, settings.log_level, logging.INFO))
    handler = logging.FileHandler(filename=settings.log_file, encoding='utf-8', mode='a')
    handler.setFormatter(logging.Formatter('%(asctime)s:%(levelname)s:%(name)s: %(message)s'))
    logger.addHandler(handler)
    return logger


def build_service(settings: Settings) -> BankService:
    repo = LedgerRepository(
        settings.data_file,
        max_accounts=settings.max_accounts,
        first_account_no=settings.first_account_no,
        history_size=settings.history_size,
    )
    return BankService.from_repository(repo, name_max_bytes=settings.name_max_bytes)


def main():
    load_dotenv()
    settings = Settings.load()
    logger = setup_logging(settings)
    logger.info('Starting ATM simulator with data file %s', settings.data_file)
    AtmShell(build_service(settings)).run()
    logger.info('ATM simulator stopped')


if __name__ == '__main__':
    main()
