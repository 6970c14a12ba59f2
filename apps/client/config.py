"""
Client defaults, read from the environment (or a .env file) via decouple.

Every value can be overridden per client through constructor arguments.
"""

from decouple import config

API_BASE_URL = config('KMJ_API_BASE_URL', default='http://localhost:8000/api')
API_TIMEOUT = config('KMJ_API_TIMEOUT', default=30.0, cast=float)

LOGIN_PATH = config('KMJ_LOGIN_PATH', default='/auth/login')
LOGOUT_PATH = config('KMJ_LOGOUT_PATH', default='/auth/logout')
REFRESH_PATH = config('KMJ_REFRESH_PATH', default='/auth/refresh-token')
