# lammah/settings/base.py
import os
from pathlib import Path
from dotenv import load_dotenv
import dj_database_url

# Load environment variables from .env if present
BASE_DIR = Path(__file__).resolve().parent.parent.parent
load_dotenv(BASE_DIR / ".env")

# SECURITY WARNING: keep the secret key secret!
SECRET_KEY = os.getenv("SECRET_KEY", "django-insecure-default-key")

# Debug toggle (default to False in prod)
DEBUG = os.getenv("DEBUG", "False").lower() in ("1", "true", "yes")

ALLOWED_HOSTS = os.getenv("ALLOWED_HOSTS", "127.0.0.1,localhost").split(",")

# Application definition
INSTALLED_APPS = [
    # Django apps
    "django.contrib.admin",
    "django.contrib.auth",
    "django.contrib.contenttypes",
    "django.contrib.sessions",
    "django.contrib.messages",
    "django.contrib.staticfiles",

    # Project apps
    "core.apps.CoreConfig",
    "materials.apps.MaterialsConfig",
    "quiz.apps.QuizConfig",
    "chatbot.apps.ChatbotConfig",
]

MIDDLEWARE = [
    "django.middleware.security.SecurityMiddleware",
    "whitenoise.middleware.WhiteNoiseMiddleware",
    "django.contrib.sessions.middleware.SessionMiddleware",
    "django.middleware.common.CommonMiddleware",
    "django.middleware.csrf.CsrfViewMiddleware",
    "django.contrib.auth.middleware.AuthenticationMiddleware",
    "django.contrib.messages.middleware.MessageMiddleware",
    "django.middleware.clickjacking.XFrameOptionsMiddleware",
]

ROOT_URLCONF = "lammah.urls"
WSGI_APPLICATION = "lammah.wsgi.application"
ASGI_APPLICATION = "lammah.asgi.application"

# Database (SQLite default, Postgres if DATABASE_URL provided)
if os.getenv("DATABASE_URL"):
    DATABASES = {
        "default": dj_database_url.config(
            default=os.getenv("DATABASE_URL"),
            conn_max_age=600
        )
    }
else:
    DATABASES = {
        "default": {
            "ENGINE": "django.db.backends.sqlite3",
            "NAME": BASE_DIR / "db.sqlite3",
        }
    }

DEFAULT_AUTO_FIELD = "django.db.models.BigAutoField"

# Templates (admin only; the API renders JSON)
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

LANGUAGE_CODE = "ar"
TIME_ZONE = "UTC"
USE_I18N = True
USE_TZ = True

# Static & Media
STATIC_URL = "/static/"
STATIC_ROOT = BASE_DIR / "staticfiles"

MEDIA_URL = "/media/"
MEDIA_ROOT = BASE_DIR / "media"

STORAGES = {
    "default": {"BACKEND": "django.core.files.storage.FileSystemStorage"},
    "staticfiles": {"BACKEND": "django.contrib.staticfiles.storage.StaticFilesStorage"},
}

# Uploads
MAX_UPLOAD_SIZE = int(os.getenv("MAX_UPLOAD_SIZE", 10 * 1024 * 1024))  # 10MB
DATA_UPLOAD_MAX_MEMORY_SIZE = MAX_UPLOAD_SIZE + 1024 * 1024
ALLOWED_UPLOAD_TYPES = [
    "application/pdf",
    "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
    "application/vnd.openxmlformats-officedocument.presentationml.presentation",
    "text/plain",
    "text/markdown",
    "application/json",
]

# === Generation API ===
LLM_API_KEY = os.getenv("LLM_API_KEY")
LLM_API_URL = os.getenv("LLM_API_URL", "https://openrouter.ai/api/v1/chat/completions")
LLM_MODEL = os.getenv("LLM_MODEL", "mistralai/mixtral-8x7b-instruct")
LLM_TIMEOUT = float(os.getenv("LLM_TIMEOUT", 60))
LLM_MAX_RETRIES = int(os.getenv("LLM_MAX_RETRIES", 2))

# Attribution headers sent with every generation request
APP_URL = os.getenv("APP_URL", "http://localhost:8000")
APP_NAME = os.getenv("APP_NAME", "Lammah AI")

# === Auth provider / hosted database ===
AUTH_API_URL = os.getenv("AUTH_API_URL")
DATABASE_SERVICE_KEY = os.getenv("DATABASE_SERVICE_KEY")
AUTH_TIMEOUT = float(os.getenv("AUTH_TIMEOUT", 10))

# === Extraction ===
FETCH_TIMEOUT = float(os.getenv("FETCH_TIMEOUT", 30))
# Hosts a caller-supplied fileUrl may point at besides the document's own storage URL
FETCH_ALLOWED_HOSTS = [h.strip().lower() for h in os.getenv("FETCH_ALLOWED_HOSTS", "").split(",") if h.strip()]
OCR_LANGUAGES = os.getenv("OCR_LANGUAGES", "ara+eng")
OCR_PAGE_TIMEOUT = float(os.getenv("OCR_PAGE_TIMEOUT", 60))
OCR_TIMEOUT = float(os.getenv("OCR_TIMEOUT", 300))
OCR_DPI = int(os.getenv("OCR_DPI", 200))
REQUIRE_ARABIC_CONTENT = os.getenv("REQUIRE_ARABIC_CONTENT", "True").lower() in ("1", "true", "yes")

# === Generation ===
QUESTIONS_PER_DIFFICULTY = {"easy": 10, "medium": 10, "hard": 10}
MAX_PROMPT_CHARS = int(os.getenv("MAX_PROMPT_CHARS", 12000))

# Logging
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

LOGGING = {
    "version": 1,
    "disable_existing_loggers": False,
    "formatters": {
        "verbose": {
            "format": "{asctime} {levelname} {name}: {message}",
            "style": "{",
        },
    },
    "handlers": {
        "console": {
            "class": "logging.StreamHandler",
            "formatter": "verbose",
        },
    },
    "root": {
        "handlers": ["console"],
        "level": LOG_LEVEL,
    },
    "loggers": {
        "django": {
            "handlers": ["console"],
            "level": os.getenv("DJANGO_LOG_LEVEL", "INFO"),
            "propagate": False,
        },
    },
}
