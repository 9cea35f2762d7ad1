import os
from pathlib import Path

BASE_DIR = Path(__file__).resolve().parent.parent


def env_bool(name, default=False):
    value = os.environ.get(name)
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


SECRET_KEY = os.environ.get("DJANGO_SECRET_KEY", "django-insecure-portfolio-development-key")
DEBUG = env_bool("DJANGO_DEBUG", True)
ALLOWED_HOSTS = [host for host in os.environ.get("DJANGO_ALLOWED_HOSTS", "localhost,127.0.0.1,testserver").split(",") if host]

INSTALLED_APPS = [
    "django.contrib.admin",
    "django.contrib.auth",
    "django.contrib.contenttypes",
    "django.contrib.sessions",
    "django.contrib.messages",
    "django.contrib.staticfiles",
    "simple_history",
    "portfolio",
]

MIDDLEWARE = [
    "django.middleware.security.SecurityMiddleware",
    "django.contrib.sessions.middleware.SessionMiddleware",
    "django.middleware.common.CommonMiddleware",
    "django.middleware.csrf.CsrfViewMiddleware",
    "django.contrib.auth.middleware.AuthenticationMiddleware",
    "django.contrib.messages.middleware.MessageMiddleware",
    "django.middleware.clickjacking.XFrameOptionsMiddleware",
    "simple_history.middleware.HistoryRequestMiddleware",
]

ROOT_URLCONF = "config.urls"

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
            ],
        },
    },
]

WSGI_APPLICATION = "config.wsgi.application"

DATABASES = {
    "default": {
        "ENGINE": os.environ.get("PORTFOLIO_DB_ENGINE", "django.db.backends.sqlite3"),
        "NAME": os.environ.get("PORTFOLIO_DB_NAME", str(BASE_DIR / "db.sqlite3")),
        "USER": os.environ.get("PORTFOLIO_DB_USER", ""),
        "PASSWORD": os.environ.get("PORTFOLIO_DB_PASSWORD", ""),
        "HOST": os.environ.get("PORTFOLIO_DB_HOST", ""),
        "PORT": os.environ.get("PORTFOLIO_DB_PORT", ""),
    }
}

AUTH_USER_MODEL = "portfolio.User"

AUTH_PASSWORD_VALIDATORS = [
    {"NAME": "django.contrib.auth.password_validation.UserAttributeSimilarityValidator"},
    {"NAME": "django.contrib.auth.password_validation.MinimumLengthValidator"},
    {"NAME": "django.contrib.auth.password_validation.CommonPasswordValidator"},
    {"NAME": "django.contrib.auth.password_validation.NumericPasswordValidator"},
]

LANGUAGE_CODE = "en-us"
TIME_ZONE = os.environ.get("DJANGO_TIME_ZONE", "Africa/Cairo")
USE_I18N = True
USE_TZ = True

STATIC_URL = "static/"
STATIC_ROOT = BASE_DIR / "staticfiles"

DEFAULT_AUTO_FIELD = "django.db.models.BigAutoField"

# Portfolio engine
PORTFOLIO_REJECT_OVERLAPPING_BOOKINGS = env_bool("PORTFOLIO_REJECT_OVERLAPPING_BOOKINGS", False)
PORTFOLIO_METER_MAX_VALUE = os.environ.get("PORTFOLIO_METER_MAX_VALUE", "999999")
PORTFOLIO_UTILITY_CURRENCY = os.environ.get("PORTFOLIO_UTILITY_CURRENCY", "EGP")
PORTFOLIO_SUMMARY_UTILITY_PAYERS = ("owner",)
# Seconds before a bill report is abandoned; 0 disables the limit.
PORTFOLIO_REPORT_TIMEOUT = float(os.environ.get("PORTFOLIO_REPORT_TIMEOUT", "0"))

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
        "portfolio": {
            "handlers": ["console"],
            "level": os.environ.get("PORTFOLIO_LOG_LEVEL", "INFO"),
            "propagate": False,
        },
    },
}
