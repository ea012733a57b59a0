import os

SECRET_KEY = os.getenv("SECRET_KEY", "dev-secret-key")

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "hr_performance_db"),
}

DEBUG = True
LOG_LEVEL = os.getenv("LOG_LEVEL", "DEBUG")

# If enabled, app will apply schema.sql on startup (idempotent: CREATE IF NOT EXISTS)
AUTO_INIT_DB = bool(int(os.getenv("AUTO_INIT_DB", "1")))

# Shared secret sent by the external scheduler in the X-Job-Token header
JOB_TOKEN = os.getenv("JOB_TOKEN", "dev-job-token")

AUTO_CLOCKOUT_REMINDER_WINDOW_MINUTES = int(os.getenv("AUTO_CLOCKOUT_REMINDER_WINDOW_MINUTES", "1"))
AUTO_CLOCKOUT_CLOSE_WINDOW_MINUTES = int(os.getenv("AUTO_CLOCKOUT_CLOSE_WINDOW_MINUTES", "5"))
MAX_REPORTED_ERRORS = int(os.getenv("MAX_REPORTED_ERRORS", "50"))
SKIP_WEEKENDS = bool(int(os.getenv("SKIP_WEEKENDS", "1")))
CURRENCY_SYMBOL = os.getenv("CURRENCY_SYMBOL", "₦")
