import os

SECRET_KEY = "test-secret"

STORE_BACKEND = "memory"

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "geo_dateam_test"),
}

DEBUG = False
TESTING = True
LOG_LEVEL = "WARNING"

AUTO_INIT_DB = False

UPLOAD_DIR = os.getenv("UPLOAD_DIR", "var/test-uploads")

SMTP_HOST = ""
SMTP_PORT = 587
SMTP_USERNAME = ""
SMTP_PASSWORD = ""
SMTP_USE_TLS = False
MAIL_FROM = "noreply@geodateam.com"

SEED_ADMIN_EMAIL = ""
SEED_ADMIN_PASSWORD = ""

ALLOW_ADMIN_SIGNUP = False
