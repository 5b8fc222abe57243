# erp_client/config.py
import os

from .constants import API_BASE_URL_ENV, DEFAULT_API_BASE_URL

# Only the backend base URL is environment driven.
API_BASE_URL = (os.environ.get(API_BASE_URL_ENV) or DEFAULT_API_BASE_URL).rstrip("/")

# Seconds
REQUEST_TIMEOUT = 15.0

# Store action log length
ACTION_LOG_LIMIT = 500

# Notifier history length
NOTIFICATION_HISTORY_LIMIT = 100
