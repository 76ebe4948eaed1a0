import os
from pathlib import Path

from dotenv import load_dotenv

load_dotenv()

# Local device storage
DATA_DIR = Path(os.environ.get("CURALINK_DATA_DIR", Path.home() / ".curalink"))
PREFERENCES_FILE = "preferences.json"
SESSION_FILE = "session.json"

# Mock search latency, in seconds
SEARCH_DELAY = float(os.environ.get("CURALINK_SEARCH_DELAY", "0.5"))

# Assistant client. The URL points at the credential proxy, never at the provider.
ASSISTANT_URL = os.environ.get("CURALINK_ASSISTANT_URL", "http://localhost:8081/v1/chat/completions")
ASSISTANT_KEY = os.environ.get("CURALINK_ASSISTANT_KEY", "")
ASSISTANT_MODEL = os.environ.get("CURALINK_ASSISTANT_MODEL", "gemini-2.5-flash")
ASSISTANT_TIMEOUT = float(os.environ.get("CURALINK_ASSISTANT_TIMEOUT", "30"))

# Event webhook (optional)
WEBHOOK_URL = os.environ.get("CURALINK_WEBHOOK_URL", "")
WEBHOOK_TIMEOUT = float(os.environ.get("CURALINK_WEBHOOK_TIMEOUT", "5"))

# Credential proxy
PROXY_TOKEN = os.environ.get("CURALINK_PROXY_TOKEN", "")
GCP_PROJECT = os.environ.get("GCP_PROJECT", "local-test-project")
GCP_LOCATION = os.environ.get("GCP_LOCATION", "us-central1")
GEMINI_MODEL = os.environ.get("GEMINI_MODEL", "gemini-2.5-flash")
GOOGLE_API_KEY = os.environ.get("GOOGLE_API_KEY", "")
ROOT_PATH = os.environ.get("ROOT_PATH", "")

API_ALLOW_ORIGINS = [
    origin.strip()
    for origin in os.environ.get(
        "API_ALLOW_ORIGINS", "http://localhost:8080,http://0.0.0.0:8080,http://127.0.0.1:8080"
    ).split(",")
    if origin.strip()
]
