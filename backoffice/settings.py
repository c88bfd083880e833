# backoffice/settings.py

"""
Django settings for the backoffice project.

Values that differ between deployments are read from the environment;
everything else has a development default.
"""

import os
import sys
from pathlib import Path

BASE_DIR = Path(__file__).resolve().parent.parent

# Apps live under apps/ and are imported by their bare name (fees, finance, ...)
APPS_DIR = BASE_DIR / 'apps'
if str(APPS_DIR) not in sys.path:
    sys.path.insert(0, str(APPS_DIR))


def env_bool(name, default=False):
    value = os.environ.get(name)
    if value is None:
        return default
    return value.strip().lower() in ('1', 'true', 'yes', 'on')


SECRET_KEY = os.environ.get('DJANGO_SECRET_KEY', 'django-insecure-backoffice-development-key')

DEBUG = env_bool('DJANGO_DEBUG', True)

ALLOWED_HOSTS = [
    host.strip()
    for host in os.environ.get('DJANGO_ALLOWED_HOSTS', 'localhost,127.0.0.1,testserver').split(',')
    if host.strip()
]


# =============================================================================
# APPLICATIONS
# =============================================================================

INSTALLED_APPS = [
    'django.contrib.admin',
    'django.contrib.auth',
    'django.contrib.contenttypes',
    'django.contrib.sessions',
    'django.contrib.messages',
    'django.contrib.staticfiles',

    'utils.apps.UtilsConfig',
    'accounts.apps.AccountsConfig',
    'admissions.apps.AdmissionsConfig',
    'fees.apps.FeesConfig',
    'finance.apps.FinanceConfig',
]

MIDDLEWARE = [
    'django.middleware.security.SecurityMiddleware',
    'django.contrib.sessions.middleware.SessionMiddleware',
    'django.middleware.common.CommonMiddleware',
    'django.middleware.csrf.CsrfViewMiddleware',
    'django.contrib.auth.middleware.AuthenticationMiddleware',
    'django.contrib.messages.middleware.MessageMiddleware',
    'django.middleware.clickjacking.XFrameOptionsMiddleware',
    'utils.middleware.AuditContextMiddleware',
]

ROOT_URLCONF = 'backoffice.urls'

TEMPLATES = [
    {
        'BACKEND': 'django.template.backends.django.DjangoTemplates',
        'DIRS': [],
        'APP_DIRS': True,
        'OPTIONS': {
            'context_processors': [
                'django.template.context_processors.request',
                'django.contrib.auth.context_processors.auth',
                'django.contrib.messages.context_processors.messages',
            ],
        },
    },
]

WSGI_APPLICATION = 'backoffice.wsgi.application'


# =============================================================================
# DATABASE
# =============================================================================

DB_ENGINE = os.environ.get('DB_ENGINE', 'sqlite3')

if DB_ENGINE == 'postgresql':
    DATABASES = {
        'default': {
            'ENGINE': 'django.db.backends.postgresql',
            'NAME': os.environ.get('DB_NAME', 'backoffice'),
            'USER': os.environ.get('DB_USER', 'backoffice'),
            'PASSWORD': os.environ.get('DB_PASSWORD', ''),
            'HOST': os.environ.get('DB_HOST', 'localhost'),
            'PORT': os.environ.get('DB_PORT', '5432'),
            'ATOMIC_REQUESTS': False,
        }
    }
else:
    DATABASES = {
        'default': {
            'ENGINE': 'django.db.backends.sqlite3',
            'NAME': os.environ.get('DB_NAME', str(BASE_DIR / 'db.sqlite3')),
            'OPTIONS': {
                # Busy timeout: concurrent writers wait instead of failing at once
                'timeout': 20,
            },
        }
    }

DEFAULT_AUTO_FIELD = 'django.db.models.BigAutoField'


# =============================================================================
# AUTH
# =============================================================================

AUTH_PASSWORD_VALIDATORS = [
    {'NAME': 'django.contrib.auth.password_validation.UserAttributeSimilarityValidator'},
    {'NAME': 'django.contrib.auth.password_validation.MinimumLengthValidator'},
    {'NAME': 'django.contrib.auth.password_validation.CommonPasswordValidator'},
    {'NAME': 'django.contrib.auth.password_validation.NumericPasswordValidator'},
]


# =============================================================================
# I18N / STATIC
# =============================================================================

LANGUAGE_CODE = 'en-us'
TIME_ZONE = os.environ.get('DJANGO_TIME_ZONE', 'Asia/Dhaka')
USE_I18N = True
USE_TZ = True

STATIC_URL = 'static/'
STATIC_ROOT = BASE_DIR / 'staticfiles'


# =============================================================================
# DOMAIN SETTINGS
# =============================================================================

SEQUENCER = {
    'LEAD_PREFIX': 'LEAD',
    'DEFAULT_CATEGORY_KEY': 'GEN',
    'PAD_WIDTH': 5,
    'RETRY_ATTEMPTS': int(os.environ.get('SEQUENCER_RETRY_ATTEMPTS', 3)),
    'RETRY_BACKOFF': float(os.environ.get('SEQUENCER_RETRY_BACKOFF', 0.05)),
    # Seconds to keep waiting out lock contention before it counts as a failure
    'LOCK_WAIT': float(os.environ.get('SEQUENCER_LOCK_WAIT', 10)),
}

LEDGER = {
    'CURRENCY': os.environ.get('LEDGER_CURRENCY', 'BDT'),
    'CURRENCY_SYMBOL': os.environ.get('LEDGER_CURRENCY_SYMBOL', '৳'),
    'PETTY_CASH_LABEL': 'Petty Cash',
    'OTHER_LABEL': 'Others',
    'TRANSACTION_HISTORY_LIMIT': 100,
}

LEADS = {
    'DUPLICATE_WINDOW_DAYS': 180,
    'BULK_ERROR_LIMIT': 10,
}


# =============================================================================
# LOGGING
# =============================================================================

LOG_LEVEL = os.environ.get('DJANGO_LOG_LEVEL', 'INFO')

LOGGING = {
    'version': 1,
    'disable_existing_loggers': False,
    'formatters': {
        'verbose': {
            'format': '{asctime} {levelname} {name} {message}',
            'style': '{',
        },
        'simple': {
            'format': '{levelname} {message}',
            'style': '{',
        },
    },
    'handlers': {
        'console': {
            'class': 'logging.StreamHandler',
            'formatter': 'verbose',
        },
    },
    'root': {
        'handlers': ['console'],
        'level': 'WARNING',
    },
    'loggers': {
        'django': {
            'handlers': ['console'],
            'level': 'WARNING',
            'propagate': False,
        },
        'accounts': {'level': LOG_LEVEL},
        'admissions': {'level': LOG_LEVEL},
        'admissions.sequencer': {'level': 'INFO'},
        'fees': {'level': LOG_LEVEL},
        'finance': {'level': LOG_LEVEL},
        'utils': {'level': LOG_LEVEL},
        'activity_audit': {'level': 'INFO'},
    },
}
