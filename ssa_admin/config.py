import os
from pathlib import Path
from dotenv import load_dotenv

load_dotenv()

REPO_ROOT = Path(__file__).resolve().parents[1]
DATA_DIR = Path(os.environ.get("SSA_DATA_DIR", REPO_ROOT / "data"))
EXPORT_DIR = DATA_DIR / "exports"
STATUS_PATH = DATA_DIR / "admin-status.json"
LOG_PATH = DATA_DIR / "admin-log.txt"

LOG_RETENTION_DAYS = 14

SUPABASE_URL = os.environ.get("SUPABASE_URL", "").rstrip("/")
SUPABASE_ANON_KEY = os.environ.get("SUPABASE_ANON_KEY")
SUPABASE_SERVICE_KEY = os.environ.get("SUPABASE_SERVICE_KEY")

REQUEST_TIMEOUT = int(os.environ.get("REQUEST_TIMEOUT", "30"))
MAX_RETRIES = int(os.environ.get("MAX_RETRIES", "3"))

EVENT_IMAGE_BUCKET = "event-images"
ROUTE_GPX_BUCKET = "routes"
UPLOAD_CACHE_CONTROL = "3600"

STATUSES = ["draft", "published", "archived"]
DEFAULT_STATUS = "draft"
DIFFICULTIES = ["easy", "moderate", "challenging"]
DEFAULT_DIFFICULTY = "moderate"

EMPTY_DISPLAY = "—"
