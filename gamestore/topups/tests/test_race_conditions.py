import time
from decimal import Decimal

import pytest

from accounts.models import User
from config.exceptions import AlreadyUsed
from topups import verifier
from topups.models import RedeemedLink, TopupRecord

from .test_verifier import LINK, slip_payload

pytestmark = pytest.mark.django_db(transaction=True)

REQUESTS = 6


def test_same_link_submitted_at_once_credits_once(make_user, run_concurrently, mocker):
    def slow_provider(link):
        time.sleep(0.05)
        return {"status": "success", "amount": "150", "message": "ok"}

    redeem = mocker.patch("config.byshop.redeem_gift_link", side_effect=slow_provider)
    user_ids = [make_user(f"user{i}").id for i in range(REQUESTS)]

    outcomes = run_concurrently(
        lambda user_id: verifier.redeem_link(User.objects.get(id=user_id), LINK), user_ids
    )

    credited = [record for record, error in outcomes if error is None]
    errors = [error for _, error in outcomes if error is not None]
    assert len(credited) == 1
    assert all(isinstance(error, AlreadyUsed) for error in errors)

    assert redeem.call_count == 1
    assert TopupRecord.objects.filter(method="gift").count() == 1
    assert RedeemedLink.objects.get(link=LINK).status == "success"
    points = sorted(User.objects.filter(id__in=user_ids).values_list("point", flat=True))
    assert points == [Decimal("0")] * (REQUESTS - 1) + [Decimal("150")]


def test_same_slip_submitted_at_once_credits_once(make_user, run_concurrently, mocker):
    mocker.patch("config.byshop.check_slip", return_value=slip_payload())
    user = make_user()

    outcomes = run_concurrently(
        lambda _: verifier.verify_slip(User.objects.get(id=user.id), "qr-data"), range(REQUESTS)
    )

    assert sum(1 for _, error in outcomes if error is None) == 1
    assert all(isinstance(error, AlreadyUsed) for _, error in outcomes if error is not None)
    user.refresh_from_db()
    assert user.point == Decimal("300")
    assert TopupRecord.objects.count() == 1
