import os

SECRET_KEY = "test-secret"

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "hr_performance_test"),
}

DEBUG = False
TESTING = True
LOG_LEVEL = os.getenv("LOG_LEVEL", "WARNING")

AUTO_INIT_DB = bool(int(os.getenv("AUTO_INIT_DB", "0")))

JOB_TOKEN = "test-job-token"

AUTO_CLOCKOUT_REMINDER_WINDOW_MINUTES = 1
AUTO_CLOCKOUT_CLOSE_WINDOW_MINUTES = 5
MAX_REPORTED_ERRORS = 50
SKIP_WEEKENDS = True
CURRENCY_SYMBOL = "₦"
