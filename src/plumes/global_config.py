"""Global, project-wide configuration constants.

This module intentionally contains **no business logic** – only simple,
shared filesystem anchors that many modules can import.
"""

from pathlib import Path

# Core roots
PACKAGE_ROOT: Path = Path(__file__).resolve().parent
# From src/plumes/global_config.py, go up two levels: src/plumes -> src -> repo root
PROJECT_ROOT: Path = PACKAGE_ROOT.parent.parent

# Core Names
PROJECT_NAME = "plumes"
PACKAGE_NAME = "plumes"

# Database location
DB_DIR: Path = PROJECT_ROOT / "db"
DB_NAME = f"{PROJECT_NAME}.sqlite"
DEFAULT_DB_PATH: Path = DB_DIR / DB_NAME

# SQL shipped with the package (schema.sql)
SQL_DIR: Path = PACKAGE_ROOT / "sql"
