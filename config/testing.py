import os

SECRET_KEY = "test-secret"

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "hr_attendance_test"),
}

JWT_SECRET = "test-jwt-secret"
JWT_ALGORITHM = "HS256"
JWT_EXPIRES_HOURS = 1

TIMEZONE = ""

LOG_LEVEL = "WARNING"
LOG_DIR = None

DEBUG = False
TESTING = True

AUTO_INIT_DB = False
AUTO_SEED_DB = False
