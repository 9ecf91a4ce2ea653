import os

from dotenv import load_dotenv

load_dotenv()

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
DEBUG = LOG_LEVEL == "DEBUG"

DRY_RUN = os.getenv("DRY_RUN", "false").lower() == "true"

DATABASE_URL = os.getenv("DATABASE_URL")
if not DATABASE_URL:
    raise ValueError("DATABASE_URL must be set in the environment")

SCHEMA = "channel_sync"

ALLOWED_ORIGINS_RAW = os.getenv("ALLOWED_ORIGINS")
if not ALLOWED_ORIGINS_RAW:
    raise ValueError("ALLOWED_ORIGINS must be set in the environment")

ALLOWED_ORIGINS: list[str] = [
    origin.strip() for origin in ALLOWED_ORIGINS_RAW.split(",")
]

# Applied to every outbound vendor call; none of the platforms bound their latency.
HTTP_TIMEOUT_SECONDS = float(os.getenv("HTTP_TIMEOUT_SECONDS", "15"))

CHANNEX_BASE_URL = os.getenv("CHANNEX_BASE_URL", "https://staging.channex.io/api/v1")

AIRBNB_CLIENT_ID = os.getenv("AIRBNB_CLIENT_ID")
AIRBNB_CLIENT_SECRET = os.getenv("AIRBNB_CLIENT_SECRET")

TUYA_DEFAULT_REGION = os.getenv("TUYA_DEFAULT_REGION", "us").lower()

LOCK_STATUS_DELAY_SECONDS = float(os.getenv("LOCK_STATUS_DELAY_SECONDS", "1.5"))
