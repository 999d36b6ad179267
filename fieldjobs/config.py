import os
from pathlib import Path

from dotenv import load_dotenv

# Load .env from project root
env_path = Path(__file__).resolve().parent.parent / ".env"
load_dotenv(dotenv_path=env_path)

DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./fieldjobs.db")

# Pool sizing is ignored for SQLite; a threshold of 0 disables slow-query warnings
DB_POOL_SIZE = int(os.getenv("DB_POOL_SIZE", "20"))
DB_MAX_OVERFLOW = int(os.getenv("DB_MAX_OVERFLOW", "30"))
DB_SLOW_QUERY_THRESHOLD = float(os.getenv("DB_SLOW_QUERY_THRESHOLD", "1.0"))

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

# Starting point for route optimization when the caller supplies none
ROUTE_ORIGIN_LATITUDE = float(os.getenv("ROUTE_ORIGIN_LATITUDE", "40.7128"))
ROUTE_ORIGIN_LONGITUDE = float(os.getenv("ROUTE_ORIGIN_LONGITUDE", "-74.0060"))
ROUTE_ORIGIN_ADDRESS = os.getenv("ROUTE_ORIGIN_ADDRESS", "Office")

# Constant average-speed and flat per-stop service assumptions
ROUTE_AVERAGE_SPEED_MPH = float(os.getenv("ROUTE_AVERAGE_SPEED_MPH", "30"))
ROUTE_SERVICE_MINUTES = int(os.getenv("ROUTE_SERVICE_MINUTES", "30"))

# Upper bound on instances created by a single recurring series request
RECURRING_MAX_OCCURRENCES = int(os.getenv("RECURRING_MAX_OCCURRENCES", "12"))

# Slot suggestion search window and result size
SUGGESTION_HORIZON_DAYS = int(os.getenv("SUGGESTION_HORIZON_DAYS", "30"))
SUGGESTION_LIMIT = int(os.getenv("SUGGESTION_LIMIT", "5"))

# Frontend origins allowed by CORS
ALLOWED_ORIGINS = os.getenv(
    "ALLOWED_ORIGINS", "http://localhost:5173,http://localhost:3000"
).split(",")
