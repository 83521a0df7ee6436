"""
Django settings for config project.
"""
import os
from pathlib import Path

# Build paths inside the project like this: BASE_DIR / 'subdir'.
BASE_DIR = Path(__file__).resolve().parent.parent

# ==========================================
# 1. CORE SETTINGS
# ==========================================

# Lit la clé secrète dans l'environnement, clé non sûre uniquement en dev
SECRET_KEY = os.environ.get('SECRET_KEY', 'django-insecure-dev-key-change-in-prod')

# DEBUG n'est actif que si la variable vaut 'True'
DEBUG = os.environ.get('DEBUG', 'True') == 'True'

# Hôtes autorisés séparés par des virgules
ALLOWED_HOSTS = os.environ.get('ALLOWED_HOSTS', 'localhost,127.0.0.1,0.0.0.0').split(',')


# ==========================================
# 2. INSTALLED APPS
# ==========================================
INSTALLED_APPS = [
    "unfold",  # Admin moderne
    "django.contrib.admin",
    "django.contrib.auth",
    "django.contrib.contenttypes",
    "django.contrib.sessions",
    "django.contrib.messages",
    "django.contrib.staticfiles",

    # Applications locales
    "users",
    "inventory",
    "sales",
    "finance",
]

# Modèle utilisateur personnalisé
AUTH_USER_MODEL = 'users.User'


# ==========================================
# 3. MIDDLEWARE
# ==========================================
MIDDLEWARE = [
    'django.middleware.security.SecurityMiddleware',
    "whitenoise.middleware.WhiteNoiseMiddleware",  # <--- Whitenoise ici
    'django.contrib.sessions.middleware.SessionMiddleware',
    'django.middleware.common.CommonMiddleware',
    'django.middleware.csrf.CsrfViewMiddleware',
    'django.contrib.auth.middleware.AuthenticationMiddleware',
    'django.contrib.messages.middleware.MessageMiddleware',
    'django.middleware.clickjacking.XFrameOptionsMiddleware',
]

ROOT_URLCONF = 'config.urls'

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

WSGI_APPLICATION = 'config.wsgi.application'


# ==========================================
# 4. DATABASE (PostgreSQL)
# ==========================================
DATABASES = {
    'default': {
        'ENGINE': 'django.db.backends.postgresql',
        'NAME': os.environ.get('POSTGRES_DB', 'lotissements_db'),
        'USER': os.environ.get('POSTGRES_USER', 'admin'),
        'PASSWORD': os.environ.get('POSTGRES_PASSWORD', 'admin'),
        'HOST': os.environ.get('DB_HOST', 'db'),
        'PORT': os.environ.get('DB_PORT', '5432'),
    }
}


# ==========================================
# 5. PASSWORD VALIDATION
# ==========================================
AUTH_PASSWORD_VALIDATORS = [
    { 'NAME': 'django.contrib.auth.password_validation.UserAttributeSimilarityValidator', },
    { 'NAME': 'django.contrib.auth.password_validation.MinimumLengthValidator', },
    { 'NAME': 'django.contrib.auth.password_validation.CommonPasswordValidator', },
    { 'NAME': 'django.contrib.auth.password_validation.NumericPasswordValidator', },
]


# ==========================================
# 6. LOCALIZATION
# ==========================================
LANGUAGE_CODE = 'fr'
TIME_ZONE = 'Africa/Abidjan'
USE_I18N = True
USE_TZ = True


# ==========================================
# 7. STATIC FILES (Whitenoise)
# ==========================================
STATIC_URL = 'static/'
STATIC_ROOT = BASE_DIR / 'staticfiles'

STORAGES = {
    "default": {
        "BACKEND": "django.core.files.storage.FileSystemStorage",
    },
    # Fichiers statiques (CSS, JS de l'admin) -> Whitenoise
    "staticfiles": {
        "BACKEND": "whitenoise.storage.CompressedManifestStaticFilesStorage",
    },
}


# ==========================================
# 8. UNFOLD ADMIN UI
# ==========================================
UNFOLD = {
    "SITE_TITLE": "Lotissements",
    "SITE_HEADER": "Gestion des lotissements",
    "SITE_URL": "/",
}

DEFAULT_AUTO_FIELD = 'django.db.models.BigAutoField'


# ==========================================
# 9. LOGGING
# ==========================================
LOG_LEVEL = os.environ.get('LOG_LEVEL', 'INFO')

LOGGING = {
    'version': 1,
    'disable_existing_loggers': False,
    'formatters': {
        'verbose': {
            'format': '{asctime} {levelname} {name} {message}',
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
        'inventory': {'handlers': ['console'], 'level': LOG_LEVEL, 'propagate': False},
        'sales': {'handlers': ['console'], 'level': LOG_LEVEL, 'propagate': False},
        'finance': {'handlers': ['console'], 'level': LOG_LEVEL, 'propagate': False},
    },
}


# ==========================================
# 10. RÈGLES MÉTIER / API
# ==========================================
# Jeton de l'API JSON (vide = pas de contrôle, l'authentification est externe)
LOTISSEMENTS_API_TOKEN = os.environ.get("LOTISSEMENTS_API_TOKEN", "")

# Durée de validité d'une réservation quand la saisie est illisible
RESERVATION_DEFAULT_VALIDITY_DAYS = int(os.environ.get("RESERVATION_DEFAULT_VALIDITY_DAYS", "30"))

# Nombre d'échéances par défaut d'une vente échelonnée
SALE_DEFAULT_INSTALLMENTS = int(os.environ.get("SALE_DEFAULT_INSTALLMENTS", "12"))
