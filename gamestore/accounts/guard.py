"""
Login guard and registration limiter.

Both keep their counters in the database, keyed by client IP, so they survive
restarts and are shared by every worker. A failed-login counter moves an IP
from clean to warned, and once it reaches ``LOGIN_BAN_THRESHOLD`` the IP gets
a permanent ``BannedIP`` row. A successful login deletes the counter.
"""
import ipaddress
from datetime import timedelta

from django.conf import settings
from django.db import IntegrityError, transaction
from django.db.models import F
from django.utils import timezone

from accounts.models import BannedIP, LoginAttempt, RegisterAttempt
from config.exceptions import RegisterBanned, TooManyRegistrations

# logging
from logger import get_logger

logger = get_logger("gamestore.accounts")

UNKNOWN_IP = "0.0.0.0"


def _is_ip(value):
    try:
        ipaddress.ip_address(value)
    except ValueError:
        return False
    return True


def get_client_ip(request):
    if settings.TRUST_X_FORWARDED_FOR:
        forwarded = request.META.get("HTTP_X_FORWARDED_FOR", "")
        if forwarded:
            candidate = forwarded.split(",")[0].strip()
            if _is_ip(candidate):
                return candidate
    remote = request.META.get("REMOTE_ADDR", "")
    return remote if _is_ip(remote) else UNKNOWN_IP


def is_banned(ip):
    return BannedIP.objects.filter(ip=ip).exists()


def ban(ip, reason):
    banned, created = BannedIP.objects.get_or_create(ip=ip, defaults={"reason": reason})
    if created:
        logger.warning(f"IP {ip} banned : {reason}")
    return banned


# ----------------------------
# login guard
# ----------------------------
def record_failure(ip):
    """Count one failed login for ``ip`` and ban it at the threshold.

    Returns the failure count after this attempt.
    """
    now = timezone.now()
    with transaction.atomic():
        updated = LoginAttempt.objects.filter(ip=ip).update(
            count=F("count") + 1, last_attempt=now
        )
        if not updated:
            try:
                with transaction.atomic():
                    LoginAttempt.objects.create(ip=ip, count=1, last_attempt=now)
            except IntegrityError:
                # another request created the row first
                LoginAttempt.objects.filter(ip=ip).update(
                    count=F("count") + 1, last_attempt=now
                )
        count = LoginAttempt.objects.filter(ip=ip).values_list("count", flat=True).first() or 1

    if count >= settings.LOGIN_BAN_THRESHOLD:
        ban(ip, "Too many login attempts")
    else:
        logger.info(f"failed login from {ip} ({count}/{settings.LOGIN_BAN_THRESHOLD})")
    return count


def record_success(ip):
    LoginAttempt.objects.filter(ip=ip).delete()


def lift_ban(banned):
    LoginAttempt.objects.filter(ip=banned.ip).delete()
    RegisterAttempt.objects.filter(ip=banned.ip).delete()
    banned.delete()
    logger.info(f"ban lifted for {banned.ip}")


# ----------------------------
# registration limiter
# ----------------------------
def check_registration(ip):
    """Count one registration request from ``ip``.

    Raises ``RegisterBanned`` for banned IPs (banning the IP once its lifetime
    count passes ``REGISTER_BAN_THRESHOLD``) and ``TooManyRegistrations`` when
    the current window is used up.
    """
    if is_banned(ip):
        raise RegisterBanned()

    now = timezone.now()
    window = timedelta(seconds=settings.REGISTER_WINDOW_SECONDS)

    with transaction.atomic():
        attempt, _ = RegisterAttempt.objects.select_for_update().get_or_create(
            ip=ip, defaults={"window_started": now}
        )
        if now - attempt.window_started >= window:
            attempt.window_started = now
            attempt.window_count = 0
        attempt.count += 1
        attempt.window_count += 1
        attempt.save(update_fields=["count", "window_count", "window_started"])
        lifetime, in_window = attempt.count, attempt.window_count

    if lifetime > settings.REGISTER_BAN_THRESHOLD:
        ban(ip, "Too many registrations")
        RegisterAttempt.objects.filter(ip=ip).delete()
        raise RegisterBanned()

    if in_window > settings.REGISTER_WINDOW_LIMIT:
        raise TooManyRegistrations()
