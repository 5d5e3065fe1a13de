from .settings import *  # noqa: F401,F403
from .settings import BASE_DIR

DEBUG = True

DATABASES = {
    "default": {
        "ENGINE": "django.db.backends.sqlite3",
        "NAME": BASE_DIR / "testdb.sqlite",
    }
}

ALLOWED_HOSTS = ["testserver", "localhost"]
