from datetime import timedelta
from pathlib import Path

from config.secrets import get_secret

BASE_DIR = Path(__file__).resolve().parent.parent

SECRET_KEY = get_secret("DJANGO_SECRET_KEY", "django-insecure-gamestore-dev-key")

DEBUG = str(get_secret("DJANGO_DEBUG", "false")).lower() in ("1", "true", "yes")

ALLOWED_HOSTS = [
    host.strip()
    for host in str(get_secret("DJANGO_ALLOWED_HOSTS", "localhost,127.0.0.1")).split(",")
    if host.strip()
]

INSTALLED_APPS = [
    "django.contrib.auth",
    "django.contrib.contenttypes",
    "django.contrib.staticfiles",
    "rest_framework",
    "drf_yasg",
    "accounts",
    "catalog",
    "purchases",
    "topups",
]

MIDDLEWARE = [
    "django.middleware.security.SecurityMiddleware",
    "django.middleware.common.CommonMiddleware",
    "django.middleware.clickjacking.XFrameOptionsMiddleware",
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
            ],
        },
    },
]

WSGI_APPLICATION = "config.wsgi.application"

# sqlite for local runs, MySQL (RDS) when DB_NAME is configured
DB_NAME = get_secret("DB_NAME", "")
if DB_NAME:
    DATABASES = {
        "default": {
            "ENGINE": "django.db.backends.mysql",
            "NAME": DB_NAME,
            "USER": get_secret("DB_USER"),
            "PASSWORD": get_secret("DB_PASSWORD"),
            "HOST": get_secret("DB_HOST", "127.0.0.1"),
            "PORT": get_secret("DB_PORT", "3306"),
            "OPTIONS": {"charset": "utf8mb4"},
        }
    }
else:
    DATABASES = {
        "default": {
            "ENGINE": "django.db.backends.sqlite3",
            "NAME": BASE_DIR / "db.sqlite3",
            # writers queue on the database lock instead of failing
            "OPTIONS": {"timeout": 20, "transaction_mode": "IMMEDIATE"},
            # a file, so concurrent connections share one database
            "TEST": {"NAME": BASE_DIR / "test_db.sqlite3"},
        }
    }

AUTH_USER_MODEL = "accounts.User"

AUTH_PASSWORD_VALIDATORS = [
    {
        "NAME": "django.contrib.auth.password_validation.MinimumLengthValidator",
        "OPTIONS": {"min_length": 6},
    },
]

LANGUAGE_CODE = "en-us"
TIME_ZONE = "Asia/Bangkok"
USE_I18N = True
USE_TZ = True

STATIC_URL = "static/"
STATIC_ROOT = BASE_DIR / "staticfiles"

DEFAULT_AUTO_FIELD = "django.db.models.BigAutoField"

REST_FRAMEWORK = {
    "DEFAULT_AUTHENTICATION_CLASSES": [
        "rest_framework_simplejwt.authentication.JWTAuthentication",
    ],
    "DEFAULT_PERMISSION_CLASSES": [
        "rest_framework.permissions.AllowAny",
    ],
    "EXCEPTION_HANDLER": "config.exceptions.api_exception_handler",
}

SIMPLE_JWT = {
    "ACCESS_TOKEN_LIFETIME": timedelta(hours=1),
    "REFRESH_TOKEN_LIFETIME": timedelta(days=1),
    "USER_ID_FIELD": "id",
    "USER_ID_CLAIM": "id",
    "SIGNING_KEY": SECRET_KEY,
    "AUTH_HEADER_TYPES": ("Bearer",),
}

SWAGGER_SETTINGS = {
    "SECURITY_DEFINITIONS": {
        "Bearer": {"type": "apiKey", "name": "Authorization", "in": "header"},
    },
    "USE_SESSION_AUTH": False,
}

# ---- login guard / registration limiter ----
LOGIN_BAN_THRESHOLD = 20
REGISTER_WINDOW_SECONDS = 15 * 60
REGISTER_WINDOW_LIMIT = 5
REGISTER_BAN_THRESHOLD = 25
# X-Forwarded-For is only honoured behind a known proxy
TRUST_X_FORWARDED_FOR = str(get_secret("TRUST_X_FORWARDED_FOR", "false")).lower() in ("1", "true", "yes")

# ---- reCAPTCHA (login) ----
RECAPTCHA_SECRET = get_secret("RECAPTCHA_SECRET", "")
RECAPTCHA_VERIFY_URL = "https://www.google.com/recaptcha/api/siteverify"

# ---- byShop payment API ----
BYSHOP_API_KEY = get_secret("BYSHOP_API_KEY", "")
BYSHOP_PHONE = get_secret("BYSHOP_PHONE", "")
BYSHOP_CHECK_SLIP_URL = "https://byshop.me/api/check_slip"
BYSHOP_TRUEWALLET_URL = "https://byshop.me/api/truewallet"
BYSHOP_TIMEOUT = 10
SLIP_MAX_AGE_SECONDS = 5 * 60
GIFT_LINK_PREFIX = "https://gift.truemoney.com/"

# ---- Cloudinary ----
CLOUDINARY = {
    "cloud_name": get_secret("CLOUDINARY_CLOUD_NAME", ""),
    "api_key": get_secret("CLOUDINARY_API_KEY", ""),
    "api_secret": get_secret("CLOUDINARY_API_SECRET", ""),
}
CLOUDINARY_PRODUCT_FOLDER = "game-id-store"
CLOUDINARY_CATEGORY_FOLDER = "categories"
