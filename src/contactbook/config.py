from pathlib import Path
from dotenv import load_dotenv
import logging
import os

load_dotenv()

BASE_DIR = Path(__file__).resolve().parents[2]
DB_PATH = os.getenv("DB_PATH", str(BASE_DIR / "data" / "database.sqlite"))

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
# echo every SQL statement through the sqlalchemy.engine logger
SQL_ECHO = os.getenv("SQL_ECHO", "").lower() in ("1", "true", "yes")

MAX_AVATAR_BYTES = int(os.getenv("MAX_AVATAR_BYTES", 1024 * 1024))

HOST = os.getenv("HOST", "127.0.0.1")
PORT = int(os.getenv("PORT", 8000))


def configure_logging(level: str = None):
    logging.basicConfig(
        level=(level or LOG_LEVEL).upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
