import os
import sys
import tempfile
from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

_TMP = tempfile.mkdtemp(prefix="skillpath-tests-")
os.environ["ANALYTICS_ENABLED"] = "0"
os.environ["LLM_ENABLED"] = "0"
os.environ["RATE_LIMIT_ENABLED"] = "0"
os.environ["SENTRY_DSN"] = ""
os.environ["PROFILE_DB_PATH"] = os.path.join(_TMP, "profiles.db")
os.environ["ADMIN_API_KEY"] = ""
