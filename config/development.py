import os

from config import env_int_list, leave_policy_from_env, smtp_from_env

SECRET_KEY = os.getenv("SECRET_KEY", "dev-secret-key")

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "hr_operations"),
}

DEBUG = True
LOG_LEVEL = os.getenv("LOG_LEVEL", "DEBUG")

# If enabled, app will apply schema.sql on startup (idempotent: CREATE IF NOT EXISTS)
AUTO_INIT_DB = bool(int(os.getenv("AUTO_INIT_DB", "1")))
# Optional: also seed demo data on startup
AUTO_SEED_DB = bool(int(os.getenv("AUTO_SEED_DB", "0")))

# Fallbacks when the company_settings row does not define them
WORKING_DAYS = env_int_list("WORKING_DAYS", "1,2,3,4,5")
LEAVE_POLICY = leave_policy_from_env()

SMTP = smtp_from_env()
PAYROLL_WORKERS = int(os.getenv("PAYROLL_WORKERS", "4"))
