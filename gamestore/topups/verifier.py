"""
Topup verifier.

Both paths credit points with an ``F()`` update and record the topup inside
one transaction. Replays are stopped by unique columns: the slip reference on
``TopupRecord.transaction_id`` and the link on ``RedeemedLink.link``. When
the outcome of a provider call is unknown the request fails and the claim
stays used.
"""
from datetime import timedelta

from django.conf import settings
from django.db import IntegrityError, transaction
from django.db.models import F
from django.utils import timezone
from django.utils.dateparse import parse_datetime

from accounts.models import User
from config import byshop
from config.exceptions import (
    AlreadyUsed,
    ExternalServiceError,
    InvalidLink,
    InvalidSlip,
    SlipExpired,
)

from .models import TopupRecord, RedeemedLink

# logging
from logger import get_logger

logger = get_logger("gamestore.topups")

SLIP_USED = "This slip has already been used."
LINK_USED = "This gift link has already been used."


def _flag(value):
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


def _parse_slip_time(value):
    if not value or not isinstance(value, str):
        return None
    try:
        parsed = parse_datetime(value.strip())
    except ValueError:
        return None
    if parsed is None:
        return None
    if timezone.is_naive(parsed):
        # provider times are local to the store
        parsed = timezone.make_aware(parsed)
    return parsed


def _credit(user, amount):
    User.objects.filter(id=user.id).update(point=F("point") + amount)


# ----------------------------
# bank slip
# ----------------------------
def verify_slip(user, qrcode_text):
    """Credit ``user`` with the amount of a bank transfer slip.

    Raises ``AlreadyUsed``, ``InvalidSlip``, ``SlipExpired`` or
    ``ExternalServiceError``.
    """
    data = byshop.check_slip(qrcode_text)

    if _flag(data.get("check_slip")) == 1:
        raise AlreadyUsed(SLIP_USED)
    if _flag(data.get("status")) != 1:
        logger.info(f"slip rejected by provider for {user.username} : {data.get('message')}")
        raise InvalidSlip()

    slip_ref = str(data.get("slip_ref") or "").strip()
    amount = byshop.parse_amount(data.get("amount"))
    slip_time = _parse_slip_time(data.get("slip_time"))
    if not slip_ref or amount is None or slip_time is None:
        logger.warning(f"slip payload incomplete for {user.username} : {data!r}")
        raise InvalidSlip()

    if TopupRecord.objects.filter(transaction_id=slip_ref).exists():
        raise AlreadyUsed(SLIP_USED)

    if timezone.now() - slip_time > timedelta(seconds=settings.SLIP_MAX_AGE_SECONDS):
        raise SlipExpired()

    try:
        with transaction.atomic():
            record = TopupRecord.objects.create(
                user=user,
                amount=amount,
                method="bank",
                transaction_id=slip_ref,
                slip_time=slip_time,
                sender=data.get("sender"),
                receiver=data.get("receiver"),
                note="Bank transfer slip",
            )
            _credit(user, amount)
    except IntegrityError:
        # another request recorded the same slip first
        raise AlreadyUsed(SLIP_USED)

    user.refresh_from_db(fields=["point"])
    logger.info(f"slip topup {slip_ref} : +{amount} for {user.username}")
    return record


# ----------------------------
# TrueMoney gift link
# ----------------------------
def _fail(claim, message):
    claim.status = "fail"
    claim.message = (message or "")[:255]
    claim.save(update_fields=["status", "message", "updated_at"])


def redeem_link(user, link):
    """Credit ``user`` with the value of a TrueMoney gift link.

    Raises ``AlreadyUsed``, ``InvalidLink`` or ``ExternalServiceError``.
    """
    link = link.strip()
    if RedeemedLink.objects.filter(link=link).exists():
        raise AlreadyUsed(LINK_USED)

    try:
        with transaction.atomic():
            claim = RedeemedLink.objects.create(link=link, user=user, status="pending")
    except IntegrityError:
        raise AlreadyUsed(LINK_USED)

    try:
        data = byshop.redeem_gift_link(link)
    except ExternalServiceError:
        # the provider may have paid out, the link stays claimed
        _fail(claim, "Payment provider unreachable")
        raise

    message = str(data.get("message") or "")
    amount = byshop.parse_amount(data.get("amount"))
    if amount is None:
        _fail(claim, message)
        logger.info(f"gift link rejected for {user.username} : {message}")
        raise InvalidLink(message or None)

    with transaction.atomic():
        _credit(user, amount)
        record = TopupRecord.objects.create(
            user=user, amount=amount, method="gift", note="TrueMoney gift link"
        )
        claim.status = "success"
        claim.amount = amount
        claim.message = message[:255]
        claim.save(update_fields=["status", "amount", "message", "updated_at"])

    user.refresh_from_db(fields=["point"])
    logger.info(f"gift link topup : +{amount} for {user.username}")
    return record
