from decimal import Decimal
from unittest import mock

import pytest
import requests

from config import byshop
from config.exceptions import ExternalServiceError


def fake_response(payload=None, status_code=200, json_error=False):
    response = mock.Mock()
    response.status_code = status_code
    if status_code >= 400:
        response.raise_for_status.side_effect = requests.HTTPError(f"{status_code} error")
    if json_error:
        response.json.side_effect = ValueError("no json")
    else:
        response.json.return_value = payload
    return response


class TestCheckSlip:
    def test_posts_form_with_key(self, settings):
        settings.BYSHOP_API_KEY = "api-key"
        payload = {"status": 1, "check_slip": 0, "amount": "100"}
        with mock.patch("config.byshop.requests.post", return_value=fake_response(payload)) as post:
            assert byshop.check_slip("qr-data") == payload

        post.assert_called_once_with(
            settings.BYSHOP_CHECK_SLIP_URL,
            data={"qrcode_text": "qr-data", "keyapi": "api-key"},
            timeout=settings.BYSHOP_TIMEOUT,
        )

    def test_timeout(self):
        with mock.patch("config.byshop.requests.post", side_effect=requests.Timeout("slow")):
            with pytest.raises(ExternalServiceError):
                byshop.check_slip("qr-data")

    def test_http_error(self):
        with mock.patch("config.byshop.requests.post", return_value=fake_response(status_code=503)):
            with pytest.raises(ExternalServiceError):
                byshop.check_slip("qr-data")

    def test_non_json_body(self):
        with mock.patch("config.byshop.requests.post", return_value=fake_response(json_error=True)):
            with pytest.raises(ExternalServiceError):
                byshop.check_slip("qr-data")

    def test_unexpected_payload(self):
        with mock.patch("config.byshop.requests.post", return_value=fake_response(["nope"])):
            with pytest.raises(ExternalServiceError):
                byshop.check_slip("qr-data")


def test_redeem_gift_link_form(settings):
    settings.BYSHOP_API_KEY = "api-key"
    settings.BYSHOP_PHONE = "0812345678"
    link = "https://gift.truemoney.com/campaign/?v=abc"
    with mock.patch(
        "config.byshop.requests.post", return_value=fake_response({"amount": "50"})
    ) as post:
        byshop.redeem_gift_link(link)

    assert post.call_args.kwargs["data"] == {
        "keyapi": "api-key",
        "phone": "0812345678",
        "gift_link": link,
    }


@pytest.mark.parametrize(
    "value, expected",
    [
        ("100", Decimal("100.00")),
        (49.5, Decimal("49.50")),
        (" 20.129 ", Decimal("20.13")),
        (0, None),
        ("-5", None),
        ("abc", None),
        ("NaN", None),
        (None, None),
        (True, None),
        ("1e30", None),
        ("9999999999.99", Decimal("9999999999.99")),
        ("10000000000", None),
        ("0.001", None),
        ("9999999999.999", None),
    ],
)
def test_parse_amount(value, expected):
    assert byshop.parse_amount(value) == expected
