import os
from dotenv import load_dotenv

load_dotenv()

ENVIRONMENT = os.getenv("ENVIRONMENT", "development")
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

# Database
DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./entreprenapp.db")

# JWT
JWT_SECRET_KEY = os.getenv("JWT_SECRET_KEY", "dev-secret-key-change-in-production")
JWT_ALGORITHM = "HS256"
ACCESS_TOKEN_EXPIRE_MINUTES = int(os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", 60 * 24))
REFRESH_TOKEN_EXPIRE_DAYS = int(os.getenv("REFRESH_TOKEN_EXPIRE_DAYS", 7))
ACCESS_TOKEN_COOKIE = "access_token"

# Account verification
VERIFICATION_CODE_TTL_MINUTES = int(os.getenv("VERIFICATION_CODE_TTL_MINUTES", 10))

# Notifications
NOTIFICATION_TTL_DAYS = int(os.getenv("NOTIFICATION_TTL_DAYS", 30))
NOTIFICATION_PURGE_INTERVAL_SECONDS = int(os.getenv("NOTIFICATION_PURGE_INTERVAL_SECONDS", 60 * 60))

# Stored media
UPLOADS_DIR = os.getenv(
    "UPLOADS_DIR",
    os.path.abspath(os.path.join(os.path.dirname(__file__), "..", "uploads")),
)

# Frontend URL for CORS and links
FRONTEND_URL = os.getenv("FRONTEND_URL", "http://localhost:5173")
BACKEND_URL = os.getenv("BACKEND_URL", "http://localhost:8000")
