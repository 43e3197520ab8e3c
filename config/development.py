import os

SECRET_KEY = os.getenv("SECRET_KEY", "dev-secret-key")

# "memory" keeps everything in process; "mysql" uses DB_CONFIG.
STORE_BACKEND = os.getenv("STORE_BACKEND", "memory")

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "geo_dateam"),
}

DEBUG = True
LOG_LEVEL = os.getenv("LOG_LEVEL", "DEBUG")

# If enabled with the mysql backend, schema.sql is applied on startup (CREATE IF NOT EXISTS)
AUTO_INIT_DB = bool(int(os.getenv("AUTO_INIT_DB", "1")))

UPLOAD_DIR = os.getenv("UPLOAD_DIR", "var/uploads")

# Without SMTP_HOST reminders are only logged.
SMTP_HOST = os.getenv("SMTP_HOST", "")
SMTP_PORT = int(os.getenv("SMTP_PORT", "587"))
SMTP_USERNAME = os.getenv("SMTP_USERNAME", "")
SMTP_PASSWORD = os.getenv("SMTP_PASSWORD", "")
SMTP_USE_TLS = bool(int(os.getenv("SMTP_USE_TLS", "1")))
MAIL_FROM = os.getenv("MAIL_FROM", "noreply@geodateam.com")

SEED_ADMIN_EMAIL = os.getenv("SEED_ADMIN_EMAIL", "admin@geodateam.com")
SEED_ADMIN_PASSWORD = os.getenv("SEED_ADMIN_PASSWORD", "admin123")

ALLOW_ADMIN_SIGNUP = bool(int(os.getenv("ALLOW_ADMIN_SIGNUP", "0")))
