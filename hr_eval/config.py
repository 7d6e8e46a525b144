import os
from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()

DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./hr_eval.db")
SQL_ECHO = os.getenv("SQL_ECHO", "false").lower() == "true"

# Page size used by the records listing when the client doesn't send one
RECORDS_PER_PAGE = int(os.getenv("RECORDS_PER_PAGE", "10"))

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

CORS_ORIGINS = [
    origin.strip()
    for origin in os.getenv("CORS_ORIGINS", "*").split(",")
    if origin.strip()
]
