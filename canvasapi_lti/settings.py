import os
from pathlib import Path

from dotenv import load_dotenv

from installer.secrets import database_settings

BASE_DIR = Path(__file__).resolve().parent.parent

load_dotenv(BASE_DIR / ".env")

SECRET_KEY = os.getenv("DJANGO_SECRET_KEY", "django-insecure-change-me")
DEBUG = os.getenv("DJANGO_DEBUG", "False").lower() in ("1", "true", "yes")
ALLOWED_HOSTS = [h.strip() for h in os.getenv("DJANGO_ALLOWED_HOSTS", "localhost,127.0.0.1").split(",") if h.strip()]

INSTALLED_APPS = [
    "django.contrib.staticfiles",
    "installer",
]

MIDDLEWARE = [
    "django.middleware.security.SecurityMiddleware",
    "django.contrib.sessions.middleware.SessionMiddleware",
    "django.middleware.common.CommonMiddleware",
    "django.middleware.csrf.CsrfViewMiddleware",
    "django.middleware.clickjacking.XFrameOptionsMiddleware",
]

ROOT_URLCONF = "canvasapi_lti.urls"
WSGI_APPLICATION = "canvasapi_lti.wsgi.application"

TEMPLATES = [
    {
        "BACKEND": "django.template.backends.django.DjangoTemplates",
        "DIRS": [],
        "APP_DIRS": True,
        "OPTIONS": {
            "context_processors": [
                "django.template.context_processors.request",
            ],
        },
    },
]

# ------------------------------------------------------------
# Installer
# ------------------------------------------------------------
SECRETS_FILE = Path(os.getenv("SECRETS_FILE", BASE_DIR / "secrets.xml"))
LTI_SCHEMA_FILE = Path(os.getenv("LTI_SCHEMA_FILE", BASE_DIR / "installer" / "sql" / "lti-tables.sql"))
SCHEMA_FILE = Path(os.getenv("SCHEMA_FILE", BASE_DIR / "installer" / "sql" / "schema.sql"))
INSTALLER_DATABASE = os.getenv("INSTALLER_DATABASE", "default")
CANVAS_INSTANCE_URL_PLACEHOLDER = os.getenv("CANVAS_INSTANCE_URL_PLACEHOLDER", "https://canvas.instructure.com")
OAUTH_TIMEOUT = int(os.getenv("OAUTH_TIMEOUT", "30"))

# The database credentials live in the secrets file written by the installer
DATABASES = {
    "default": database_settings(SECRETS_FILE),
}

# No database is available before installation, so keep sessions in cookies.
# Signed cookies are readable by the browser: the admin Canvas token sits in
# the cookie between the OAuth callback and the step=3 request that moves it
# into app metadata and clears it from the session.
SESSION_ENGINE = "django.contrib.sessions.backends.signed_cookies"

LOGGING = {
    "version": 1,
    "disable_existing_loggers": False,
    "formatters": {
        "simple": {"format": "%(asctime)s %(levelname)s %(name)s: %(message)s"},
    },
    "handlers": {
        "console": {"class": "logging.StreamHandler", "formatter": "simple"},
    },
    "root": {
        "handlers": ["console"],
        "level": os.getenv("DJANGO_LOG_LEVEL", "INFO"),
    },
}

LANGUAGE_CODE = "en-us"
TIME_ZONE = "UTC"
USE_I18N = True
USE_TZ = True

STATIC_URL = "static/"
DEFAULT_AUTO_FIELD = "django.db.models.BigAutoField"
