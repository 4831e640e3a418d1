"""
Server settings read once from the environment (and a local .env file).
"""

import os

from dotenv import load_dotenv

load_dotenv()

SCHOOL_NAME = os.getenv("SCHOOL_NAME", "My School")
PASS_MARK = int(os.getenv("PASS_MARK", "50"))
CURRENCY = os.getenv("CURRENCY", "KES")
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
# Comma-separated allowed origins, e.g. http://localhost:5173,https://app.example.com
raw_origins = os.getenv("CORS_ORIGINS", "http://localhost:5173,http://localhost:3000")
ALLOWED_ORIGINS = [o.strip() for o in raw_origins.split(",") if o.strip()]
