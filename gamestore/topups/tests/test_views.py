from decimal import Decimal

import pytest

from config.exceptions import ExternalServiceError
from topups.models import RedeemedLink, TopupRecord

from .test_verifier import LINK, slip_payload

pytestmark = pytest.mark.django_db


class TestRedeemEndpoint:
    def test_redeem(self, auth_client, make_user, mocker):
        mocker.patch("config.byshop.redeem_gift_link", return_value={"amount": "99.50"})
        user = make_user(point="0.50")

        response = auth_client(user).post("/api/topup/redeem/", {"link": LINK}, format="json")

        assert response.status_code == 200
        assert response.data["amount"] == "99.50"
        assert response.data["point"] == "100.00"

    def test_link_must_be_truemoney(self, auth_client, user, mocker):
        redeem = mocker.patch("config.byshop.redeem_gift_link")

        response = auth_client(user).post(
            "/api/topup/redeem/", {"link": "https://example.com/gift"}, format="json"
        )

        assert response.status_code == 400
        assert "link" in response.data["error"]
        redeem.assert_not_called()
        assert not RedeemedLink.objects.exists()

    def test_reused_link_is_conflict(self, auth_client, user, mocker):
        mocker.patch("config.byshop.redeem_gift_link", return_value={"amount": "10"})
        client = auth_client(user)
        client.post("/api/topup/redeem/", {"link": LINK}, format="json")

        response = client.post("/api/topup/redeem/", {"link": LINK}, format="json")

        assert response.status_code == 409
        assert response.data["code"] == "already_used"

    def test_provider_down(self, auth_client, user, mocker):
        mocker.patch("config.byshop.redeem_gift_link", side_effect=ExternalServiceError())
        response = auth_client(user).post("/api/topup/redeem/", {"link": LINK}, format="json")
        assert response.status_code == 502

    def test_unexpected_error_is_generic(self, auth_client, user, mocker):
        mocker.patch("config.byshop.redeem_gift_link", side_effect=KeyError("secret detail"))

        response = auth_client(user).post("/api/topup/redeem/", {"link": LINK}, format="json")

        assert response.status_code == 500
        assert "secret detail" not in response.data["error"]

    def test_requires_login(self, api_client, db):
        assert api_client.post("/api/topup/redeem/", {"link": LINK}, format="json").status_code == 401


class TestSlipEndpoint:
    def test_verify(self, auth_client, user, mocker):
        mocker.patch("config.byshop.check_slip", return_value=slip_payload())

        response = auth_client(user).post(
            "/api/topup/slip/verify/", {"qrcode_text": "qr-data"}, format="json"
        )

        assert response.status_code == 200
        assert response.data["transaction_id"] == "2024052213000123"
        assert response.data["point"] == "300.00"

    def test_missing_qrcode(self, auth_client, user):
        response = auth_client(user).post("/api/topup/slip/verify/", {}, format="json")
        assert response.status_code == 400

    def test_expired(self, auth_client, user, mocker):
        mocker.patch("config.byshop.check_slip", return_value=slip_payload(minutes_ago=6))

        response = auth_client(user).post(
            "/api/topup/slip/verify/", {"qrcode_text": "qr-data"}, format="json"
        )

        assert response.status_code == 400
        assert response.data["code"] == "slip_expired"


def test_history(auth_client, make_user, mocker):
    mocker.patch("config.byshop.check_slip", return_value=slip_payload())
    mocker.patch("config.byshop.redeem_gift_link", return_value={"amount": "20"})
    user = make_user()
    client = auth_client(user)
    client.post("/api/topup/slip/verify/", {"qrcode_text": "qr-data"}, format="json")
    client.post("/api/topup/redeem/", {"link": LINK}, format="json")
    TopupRecord.objects.create(user=make_user("other"), amount=Decimal("1"), method="gift")

    response = client.get("/api/topup/history/")

    assert response.status_code == 200
    assert sorted(row["method"] for row in response.data["history"]) == ["bank", "gift"]
