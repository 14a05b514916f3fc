import os

SECRET_KEY = os.getenv("SECRET_KEY", "dev-secret-key")

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "hrm_db"),
}

DEBUG = True
LOG_LEVEL = os.getenv("LOG_LEVEL", "DEBUG")

# "reopen" resumes a closed day on a second check-in, "reject" refuses it.
CHECKIN_REPEAT_POLICY = os.getenv("CHECKIN_REPEAT_POLICY", "reopen")
ALLOW_SELF_APPROVAL = bool(int(os.getenv("ALLOW_SELF_APPROVAL", "0")))

# If enabled, app will apply schema.sql on startup (idempotent: CREATE IF NOT EXISTS)
AUTO_INIT_DB = bool(int(os.getenv("AUTO_INIT_DB", "1")))
# Optional: also create the demo admin account on startup
AUTO_SEED_DB = bool(int(os.getenv("AUTO_SEED_DB", "0")))
