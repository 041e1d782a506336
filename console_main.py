import logging
import sys
from typing import Tuple

from dotenv import load_dotenv

from application.services import load_lobby
from domain.errors import ParticipantError, StorageError
from domain.repositories import AccountRepository, MatchRepository
from infrastructure.config import Config, get_config
from infrastructure.db.account_repository_sqlite import SqliteAccountRepository
from infrastructure.db.match_repository_sqlite import SqliteMatchRepository
from infrastructure.storage.json_repository import JsonAccountRepository, JsonMatchRepository
from interfaces.console.handlers import create_console_app


load_dotenv()

logger = logging.getLogger(__name__)


def configure_logging(config: Config) -> None:
    options = {}
    if config.log_file:
        options["filename"] = config.log_file
    logging.basicConfig(
        level=getattr(logging, config.log_level, logging.WARNING),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        **options,
    )


def build_repositories(config: Config) -> Tuple[AccountRepository, MatchRepository]:
    if config.storage_backend == "sqlite":
        return SqliteAccountRepository(config.db_path), SqliteMatchRepository(config.db_path)
    return JsonAccountRepository(config.accounts_path), JsonMatchRepository(config.history_path)


def main() -> None:
    config = get_config()
    configure_logging(config)

    account_repo, match_repo = build_repositories(config)

    try:
        lobby = load_lobby(account_repo, match_repo)
        app = create_console_app(lobby, config, account_repo, match_repo)
        app.run()
    except (ParticipantError, StorageError) as exc:
        logger.critical("%s", exc)
        print(exc, file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
