import logging
import os
from pathlib import Path

from dotenv import load_dotenv

load_dotenv()  # loads .env into environment

DB_PATH = Path(os.getenv("LOAN_DB_PATH", "data/loan.db"))
APP_PASSWORD_HASH = os.getenv("APP_PASSWORD_HASH")
LOG_LEVEL = os.getenv("LOAN_LOG_LEVEL", "WARNING")

# form defaults
DEFAULT_PRINCIPAL = float(os.getenv("LOAN_DEFAULT_PRINCIPAL", 1_000_000))
DEFAULT_RATE = float(os.getenv("LOAN_DEFAULT_RATE", 8.8))
DEFAULT_YEARS = int(os.getenv("LOAN_DEFAULT_YEARS", 20))

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def configure_logging(level=None):
    logging.basicConfig(level=(level or LOG_LEVEL).upper(), format=LOG_FORMAT)
