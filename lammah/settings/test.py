# lammah/settings/test.py
from .base import *
import tempfile
from pathlib import Path

DEBUG = False
SECRET_KEY = 'test-secret-key'
ALLOWED_HOSTS = ['testserver', 'localhost']

DATABASES = {
    'default': {
        'ENGINE': 'django.db.backends.sqlite3',
        'NAME': ':memory:',
    }
}

MEDIA_ROOT = Path(tempfile.mkdtemp(prefix='lammah-test-media-'))

LLM_API_KEY = 'test-llm-key'
LLM_API_URL = 'https://llm.test/v1/chat/completions'
LLM_MODEL = 'test-model'
LLM_TIMEOUT = 5
LLM_MAX_RETRIES = 2
AUTH_API_URL = 'https://auth.test/auth/v1'
DATABASE_SERVICE_KEY = 'test-service-key'
AUTH_TIMEOUT = 2
FETCH_TIMEOUT = 2
FETCH_ALLOWED_HOSTS = ['files.test']
OCR_PAGE_TIMEOUT = 5
OCR_TIMEOUT = 10
REQUIRE_ARABIC_CONTENT = True

LOGGING['root']['level'] = 'WARNING'
