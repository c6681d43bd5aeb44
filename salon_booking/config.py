# salon_booking/config.py

import os
from pathlib import Path

from dotenv import load_dotenv

# Load .env from project root
env_path = Path(__file__).resolve().parent.parent / ".env"
load_dotenv(dotenv_path=env_path)

DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./salon.db")
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

# Auth
SECRET_KEY = os.getenv("SECRET_KEY", "change-me-later")
ALGORITHM = os.getenv("ALGORITHM", "HS256")
ACCESS_TOKEN_EXPIRE_MINUTES = int(os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", "30"))

# Appointment policy
MODIFICATION_LEAD_TIME_HOURS = int(os.getenv("MODIFICATION_LEAD_TIME_HOURS", "24"))
MAX_ADVANCE_DAYS = int(os.getenv("MAX_ADVANCE_DAYS", "180"))
MAX_NOTES_LENGTH = int(os.getenv("MAX_NOTES_LENGTH", "500"))
MAX_REASON_LENGTH = int(os.getenv("MAX_REASON_LENGTH", "300"))

# Durations are in minutes
DURATION_INCREMENT_MINUTES = int(os.getenv("DURATION_INCREMENT_MINUTES", "15"))
MIN_DURATION_MINUTES = int(os.getenv("MIN_DURATION_MINUTES", "15"))
MAX_DURATION_MINUTES = int(os.getenv("MAX_DURATION_MINUTES", "480"))
