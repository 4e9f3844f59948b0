import os
from datetime import timedelta
from pathlib import Path

# Paths
BASE_DIR = Path(__file__).parent
DATA_PATH = Path(os.getenv("BLOG_DATA_PATH", BASE_DIR / "data" / "blog.json"))

# Site metadata
SITE_TITLE = "memoblog"

# Runtime
ENVIRONMENT = os.getenv("ENVIRONMENT", "development")
IS_PRODUCTION = ENVIRONMENT == "production"
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

# Auth / session
SECRET_KEY = os.getenv("SECRET_KEY", "dev-secret-change-me")
ADMIN_PASSWORD = os.getenv("ADMIN_PASSWORD", "")
SESSION_COOKIE_NAME = "admin_session"
SESSION_LIFETIME = timedelta(days=7)

# Quick memo listing
MEMO_LIMIT_DEFAULT = 10
MEMO_LIMIT_MIN = 1
MEMO_LIMIT_MAX = 50
