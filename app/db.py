import sqlite3
from contextlib import contextmanager
from pathlib import Path

from .errors import StoreUnavailable
from .logging_utils import get_logger
from .models import Account
from .settings import Settings

LOGGER = get_logger(__name__)

_ACCOUNT_VALUES = ", ".join(f"'{account.value}'" for account in Account)


def connect(db_path: str | Path):
    conn = sqlite3.connect(str(db_path))
    conn.row_factory = sqlite3.Row
    return conn


@contextmanager
def session(db_path: str | Path):
    """Yield a connection that commits on success and is always closed.

    Any ``sqlite3.Error`` raised inside the block is rolled back and re-raised
    as ``StoreUnavailable``.
    """
    try:
        conn = connect(db_path)
    except sqlite3.Error as exc:
        LOGGER.exception("Could not open ledger database at %s", db_path)
        raise StoreUnavailable("store unavailable") from exc
    try:
        with conn:
            yield conn
    except sqlite3.Error as exc:
        LOGGER.exception("Ledger query failed")
        raise StoreUnavailable("store unavailable") from exc
    finally:
        conn.close()


def init_db(settings: Settings) -> None:
    settings.data_dir.mkdir(parents=True, exist_ok=True)
    settings.db_path.parent.mkdir(parents=True, exist_ok=True)
    with session(settings.db_path) as conn:
        conn.execute(
            f"""
            CREATE TABLE IF NOT EXISTS transactions (
              id INTEGER PRIMARY KEY AUTOINCREMENT,
              account TEXT NOT NULL CHECK(account IN ({_ACCOUNT_VALUES})),
              amount TEXT NOT NULL,
              reason TEXT,
              created_at TEXT NOT NULL DEFAULT (strftime('%Y-%m-%dT%H:%M:%f000Z', 'now'))
            );
            """
        )
        conn.execute(
            """
            CREATE INDEX IF NOT EXISTS idx_transactions_account_created
            ON transactions(account, created_at DESC, id DESC)
            """
        )
        conn.execute(
            """
            CREATE INDEX IF NOT EXISTS idx_transactions_created
            ON transactions(created_at DESC, id DESC)
            """
        )
    LOGGER.info("Ledger database ready at %s", settings.db_path)
