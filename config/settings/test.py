"""Test settings.

File-backed SQLite (threads need a shared database), eager Celery and
a fast password hasher so the test suite runs without external services.
"""

import tempfile
from pathlib import Path

from .base import *  # noqa: F401,F403
from .base import SQLITE_OPTIONS

DEBUG = False

SECRET_KEY = 'test-secret-key'

DATABASES = {
    'default': {
        'ENGINE': 'django.db.backends.sqlite3',
        'NAME': Path(tempfile.gettempdir()) / 'staybook.sqlite3',
        'OPTIONS': SQLITE_OPTIONS,
        'TEST': {
            'NAME': str(Path(tempfile.gettempdir()) / 'staybook_test.sqlite3'),
        },
    }
}

PASSWORD_HASHERS = ['django.contrib.auth.hashers.MD5PasswordHasher']

CELERY_TASK_ALWAYS_EAGER = True
CELERY_TASK_EAGER_PROPAGATES = True
CELERY_BROKER_URL = 'memory://'
CELERY_RESULT_BACKEND = 'cache+memory://'

BOOKING_ENGINE = {
    'CANCELLATION_LEAD_TIME_HOURS': 0,
    'PROPERTY_LOCK_TIMEOUT_SECONDS': 5.0,
}
