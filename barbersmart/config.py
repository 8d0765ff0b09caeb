import os
from pathlib import Path

from dotenv import load_dotenv

# Load .env from project root
env_path = Path(__file__).resolve().parent.parent / ".env"
load_dotenv(dotenv_path=env_path)

DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./barbersmart.db")

# Redis (conversation context store)
REDIS_URL = os.getenv("REDIS_URL")

# Timezone used to decide what "today" is for a barbershop
BUSINESS_TIMEZONE = os.getenv("BUSINESS_TIMEZONE", "America/Sao_Paulo")

# Slot grid - slot start times are always multiples of this step from opening time
SLOT_STEP_MINUTES = int(os.getenv("SLOT_STEP_MINUTES", "30"))

# Recurring booking availability probe
PROBE_BATCH_SIZE = int(os.getenv("PROBE_BATCH_SIZE", "5"))
# Per-check timeout in seconds, 0 disables the timeout
PROBE_CHECK_TIMEOUT_SECONDS = float(os.getenv("PROBE_CHECK_TIMEOUT_SECONDS", "10"))

# Conversation context lifetime (2 hours, same window a reschedule offer stays open)
CONVERSATION_TTL_SECONDS = int(os.getenv("CONVERSATION_TTL_SECONDS", "7200"))

# No-show recovery
NO_SHOW_SEARCH_DAYS = int(os.getenv("NO_SHOW_SEARCH_DAYS", "7"))
NO_SHOW_MAX_SUGGESTIONS = int(os.getenv("NO_SHOW_MAX_SUGGESTIONS", "3"))
NO_SHOW_BATCH_LIMIT = int(os.getenv("NO_SHOW_BATCH_LIMIT", "50"))

# Frontend base URL (CORS)
FRONTEND_URL = os.getenv("FRONTEND_URL", "http://localhost:5173")
