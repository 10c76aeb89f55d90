import requests
from decimal import Decimal, InvalidOperation
from django.conf import settings

from config.exceptions import ExternalServiceError

# logging
from logger import get_logger

logger = get_logger("gamestore.byshop")


def _post_form(url, form):
    # payment calls are sent once, never retried
    try:
        response = requests.post(url, data=form, timeout=settings.BYSHOP_TIMEOUT)
        response.raise_for_status()
        return response.json()
    except requests.RequestException as e:
        logger.error(f"byShop request failed ({url}) : {e}")
        raise ExternalServiceError()
    except ValueError:
        logger.error(f"byShop returned a non-JSON body ({url})")
        raise ExternalServiceError()


# slip QR payload -> {status, check_slip, amount, slip_time, slip_ref, sender, receiver}
def check_slip(qrcode_text):
    form = {
        "qrcode_text": qrcode_text,
        "keyapi": settings.BYSHOP_API_KEY,
    }
    data = _post_form(settings.BYSHOP_CHECK_SLIP_URL, form)
    if not isinstance(data, dict):
        logger.error(f"byShop check_slip returned unexpected payload: {data!r}")
        raise ExternalServiceError()
    return data


# gift link -> {amount, status, message}
def redeem_gift_link(link):
    form = {
        "keyapi": settings.BYSHOP_API_KEY,
        "phone": settings.BYSHOP_PHONE,
        "gift_link": link,
    }
    data = _post_form(settings.BYSHOP_TRUEWALLET_URL, form)
    if not isinstance(data, dict):
        logger.error(f"byShop truewallet returned unexpected payload: {data!r}")
        raise ExternalServiceError()
    return data


# DecimalField(max_digits=12, decimal_places=2)
MAX_AMOUNT = Decimal("9999999999.99")


def parse_amount(value):
    """Positive Decimal from a provider amount, or None."""
    if value is None or isinstance(value, bool):
        return None
    try:
        amount = Decimal(str(value).strip())
        if not amount.is_finite():
            return None
        amount = amount.quantize(Decimal("0.01"))
    except (InvalidOperation, ValueError):
        return None
    if amount <= 0 or amount > MAX_AMOUNT:
        return None
    return amount
