import requests
from django.conf import settings
from rest_framework_simplejwt.settings import api_settings
from rest_framework_simplejwt.tokens import RefreshToken

from logger import get_logger

logger = get_logger("gamestore.auth")


def issue_tokens(user):
    """Access/refresh pair whose payload carries ``{id, username, role}``."""
    refresh = RefreshToken.for_user(user)
    # the id claim is a string whatever simplejwt version wrote it
    refresh[api_settings.USER_ID_CLAIM] = str(user.id)
    refresh["username"] = user.username
    refresh["role"] = user.role
    access = refresh.access_token
    return str(access), str(refresh)


# skipped when no secret is configured
def verify_recaptcha(token, remote_ip=None):
    if not settings.RECAPTCHA_SECRET:
        return True
    if not token:
        return False

    try:
        response = requests.post(
            settings.RECAPTCHA_VERIFY_URL,
            data={
                "secret": settings.RECAPTCHA_SECRET,
                "response": token,
                "remoteip": remote_ip or "",
            },
            timeout=5,
        )
        response.raise_for_status()
        return bool(response.json().get("success"))
    except (requests.RequestException, ValueError) as e:
        logger.error(f"reCAPTCHA verification failed : {e}")
        return False
