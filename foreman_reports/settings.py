import os
from pathlib import Path

BASE_DIR = Path(__file__).resolve().parent.parent


def env_bool(name, default=False):
    return os.environ.get(name, str(default)).lower() in ("1", "true", "yes", "on")


SECRET_KEY = os.environ.get("DJANGO_SECRET_KEY", "dev-only-secret-key-change-me")
DEBUG = env_bool("DJANGO_DEBUG", True)
ALLOWED_HOSTS = [h for h in os.environ.get("DJANGO_ALLOWED_HOSTS", "localhost,127.0.0.1").split(",") if h]

INSTALLED_APPS = [
    "django.contrib.admin",
    "django.contrib.auth",
    "django.contrib.contenttypes",
    "django.contrib.sessions",
    "django.contrib.messages",
    "django.contrib.staticfiles",
    "dailyreports",
]

MIDDLEWARE = [
    "django.middleware.security.SecurityMiddleware",
    "django.contrib.sessions.middleware.SessionMiddleware",
    "django.middleware.common.CommonMiddleware",
    "django.middleware.csrf.CsrfViewMiddleware",
    "django.contrib.auth.middleware.AuthenticationMiddleware",
    "django.contrib.messages.middleware.MessageMiddleware",
    "django.middleware.clickjacking.XFrameOptionsMiddleware",
]

ROOT_URLCONF = "foreman_reports.urls"

TEMPLATES = [
    {
        "BACKEND": "django.template.backends.django.DjangoTemplates",
        "DIRS": [],
        "APP_DIRS": True,
        "OPTIONS": {
            "context_processors": [
                "django.template.context_processors.request",
                "django.contrib.auth.context_processors.auth",
                "django.contrib.messages.context_processors.messages",
                "dailyreports.context_processors.report_defaults",
            ],
        },
    },
]

WSGI_APPLICATION = "foreman_reports.wsgi.application"

# Database: sqlite by default, any Django backend through DB_* variables
DB_ENGINE = os.environ.get("DB_ENGINE", "django.db.backends.sqlite3")
if DB_ENGINE.endswith("sqlite3"):
    DATABASES = {
        "default": {
            "ENGINE": DB_ENGINE,
            "NAME": os.environ.get("DB_NAME", str(BASE_DIR / "db.sqlite3")),
        }
    }
else:
    DATABASES = {
        "default": {
            "ENGINE": DB_ENGINE,
            "NAME": os.environ.get("DB_NAME", "foreman_reports"),
            "USER": os.environ.get("DB_USER", ""),
            "PASSWORD": os.environ.get("DB_PASSWORD", ""),
            "HOST": os.environ.get("DB_HOST", ""),
            "PORT": os.environ.get("DB_PORT", ""),
        }
    }

DEFAULT_AUTO_FIELD = "django.db.models.BigAutoField"

LANGUAGE_CODE = "en-us"
TIME_ZONE = os.environ.get("DJANGO_TIME_ZONE", "Asia/Kuala_Lumpur")
USE_I18N = True
USE_TZ = True

STATIC_URL = "static/"
MEDIA_URL = "/media/"
MEDIA_ROOT = Path(os.environ.get("DJANGO_MEDIA_ROOT", BASE_DIR / "media"))

# Uploaded photos are read into memory and re-encoded as data URLs
DATA_UPLOAD_MAX_MEMORY_SIZE = 50 * 1024 * 1024

# ---------------- Daily reports ----------------
DAILYREPORTS_DEFAULT_SITE = os.environ.get("DAILYREPORTS_DEFAULT_SITE", "Prime 11 Unit 213")
DAILYREPORTS_STORE = os.environ.get("DAILYREPORTS_STORE", "database")
DAILYREPORTS_LOCAL_STORE_PATH = Path(
    os.environ.get("DAILYREPORTS_LOCAL_STORE_PATH", BASE_DIR / "data" / "entries.json")
)
DAILYREPORTS_PHOTO_DIR = os.environ.get("DAILYREPORTS_PHOTO_DIR", "entry_photos")
DAILYREPORTS_PHOTO_TIMEOUT = int(os.environ.get("DAILYREPORTS_PHOTO_TIMEOUT", "10"))
DAILYREPORTS_WEATHER_URL = os.environ.get(
    "DAILYREPORTS_WEATHER_URL", "https://api.open-meteo.com/v1/forecast"
)
DAILYREPORTS_WEATHER_TIMEOUT = int(os.environ.get("DAILYREPORTS_WEATHER_TIMEOUT", "10"))

LOGGING = {
    "version": 1,
    "disable_existing_loggers": False,
    "formatters": {
        "simple": {"format": "%(asctime)s %(levelname)s %(name)s: %(message)s"},
    },
    "handlers": {
        "console": {"class": "logging.StreamHandler", "formatter": "simple"},
    },
    "loggers": {
        "dailyreports": {
            "handlers": ["console"],
            "level": os.environ.get("DAILYREPORTS_LOG_LEVEL", "INFO"),
        },
    },
}
