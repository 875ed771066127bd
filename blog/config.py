# blog/config.py
import os
from pathlib import Path

from dotenv import load_dotenv
load_dotenv()

_PACKAGE_DIR = Path(__file__).resolve().parent

DB_DSN = os.getenv("DATABASE_URL")
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
ROOT_PATH = os.getenv("ROOT_PATH", "")
CREATE_TABLES = os.getenv("CREATE_TABLES", "1").lower() not in {"0", "false", "no"}
TEMPLATES_DIR = os.getenv("TEMPLATES_DIR", str(_PACKAGE_DIR / "templates"))
STATIC_DIR = os.getenv("STATIC_DIR", str(_PACKAGE_DIR / "static"))
CSRF_COOKIE_SECURE = os.getenv("CSRF_COOKIE_SECURE", "0").lower() in {"1", "true", "yes"}
