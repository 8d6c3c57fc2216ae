import os
from pathlib import Path

import dj_database_url

from .config import *

BASE_DIR = str(Path(os.path.abspath(__file__)).parents[2])
SECRET_KEY = os.getenv('SECRET_KEY')
DEBUG = os.getenv('DEBUG', '0') == '1'

# Application definition

INSTALLED_APPS = [
    'core.apps.CoreConfig',
    'bot.apps.BotConfig',
]

# Database
# https://docs.djangoproject.com/en/4.2/ref/settings/#databases

DATABASE_URL = os.getenv('DATABASE_URL')
DATABASE_CONN_MAX_AGE = 600
DATABASES = {
    'default': dj_database_url.parse(
        DATABASE_URL or f"sqlite:///{os.path.join(BASE_DIR, 'db.sqlite3')}",
        conn_max_age=DATABASE_CONN_MAX_AGE,
    ),
}
DEFAULT_AUTO_FIELD = 'django.db.models.BigAutoField'

# Internationalization
# https://docs.djangoproject.com/en/4.2/topics/i18n/

LANGUAGE_CODE = 'en-us'

TIME_ZONE = 'UTC'

USE_I18N = False

USE_TZ = True
