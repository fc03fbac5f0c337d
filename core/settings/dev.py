from .base import *  # noqa
from decouple import config, Csv

DEBUG = config("DEBUG", cast=bool, default=False)
SECRET_KEY = config("SECRET_KEY")
ALLOWED_HOSTS = config("DJANGO_ALLOWED_HOSTS", cast=Csv(), default="dev.backoffice.agency,*.run.app")

CORS_ALLOWED_ORIGINS = config("CORS_ALLOWED_ORIGINS", cast=Csv(), default="https://dev-admin.backoffice.agency")
CORS_ALLOW_CREDENTIALS = True

# Cloud SQL (dev instance)
DATABASES = {
    "default": {
        "ENGINE": "django.db.backends.mysql",
        "NAME": config("DB_NAME"),
        "USER": config("DB_USER"),
        "PASSWORD": config("DB_PASSWORD"),
        "HOST": config("DB_HOST"),
        "PORT": config("DB_PORT", default="3306"),
        "OPTIONS": {"charset": "utf8mb4"},
    }
}

REDIS_URL = f"redis://{config('REDIS_HOST')}:6379"

CELERY_BROKER_URL = f"{REDIS_URL}/{config('CELERY_BROKER_DB', cast=int, default=0)}"
CELERY_RESULT_BACKEND = f"{REDIS_URL}/{config('CELERY_RESULT_DB', cast=int, default=1)}"

# Shared by web and workers: debounce tokens, sync status, campaign reads, analytics fallback
CACHES = {
    "default": {
        "BACKEND": "django_redis.cache.RedisCache",
        "LOCATION": f"{REDIS_URL}/{config('DJANGO_CACHE_DB', cast=int, default=2)}",
        "OPTIONS": {"CLIENT_CLASS": "django_redis.client.DefaultClient"},
        "KEY_PREFIX": "backoffice-dev",
        "TIMEOUT": config("DJANGO_CACHE_TIMEOUT", cast=int, default=300),
    }
}

ANALYTICS_FALLBACK_TTL = config("ANALYTICS_FALLBACK_TTL", cast=int, default=600)

LOGGING = {
    'version': 1,
    'disable_existing_loggers': False,
    'handlers': {
        'stackdriver': {
            'class': 'google.cloud.logging.handlers.CloudLoggingHandler',
        },
    },
    'loggers': {
        'django': {'handlers': ['stackdriver'], 'level': 'INFO'},
        'apps': {'handlers': ['stackdriver'], 'level': 'INFO'},
        'apps.campaigns.sync': {'handlers': ['stackdriver'], 'level': 'DEBUG', 'propagate': False},
        'tasks': {'handlers': ['stackdriver'], 'level': 'INFO'},
    },
}
