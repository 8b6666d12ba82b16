"""
Application settings read from the environment.
"""
import os


def _split_origins(value: str):
    return [o.strip() for o in value.split(',') if o.strip()]


class Config:
    APP_NAME = os.environ.get('COLOR_RULES_APP_NAME', 'default')
    STORE_BACKEND = os.environ.get('COLOR_RULES_STORE', 'sqlite')
    DB_PATH = os.environ.get('COLOR_RULES_DB_PATH', 'color_rules.db')
    ALLOWED_ORIGINS = _split_origins(os.environ.get(
        'COLOR_RULES_ALLOWED_ORIGINS', 'http://localhost:3000'
    ))
    LOG_LEVEL = os.environ.get('LOG_LEVEL', 'INFO').upper()
    PORT = int(os.environ.get('PORT', 5000))
    MAX_CONTENT_LENGTH = 50 * 1024 * 1024  # 50 MB upload limit
