import os, json
from pathlib import Path
from django.core.exceptions import ImproperlyConfigured

BASE_DIR = Path(__file__).resolve().parent.parent

secret_file = os.getenv("GAMESTORE_SECRETS_FILE", os.path.join(BASE_DIR, "secrets.json"))

if os.path.exists(secret_file):
    with open(secret_file, encoding="utf-8") as f:
        secrets = json.loads(f.read())
else:
    secrets = {}

_MISSING = object()


def get_secret(setting, default=_MISSING, secrets=secrets):
    # secrets.json first, then the environment
    try:
        return secrets[setting]
    except KeyError:
        pass
    value = os.getenv(setting)
    if value is not None:
        return value
    if default is not _MISSING:
        return default
    error_msg = "Set the {} environment variable".format(setting)
    raise ImproperlyConfigured(error_msg)
