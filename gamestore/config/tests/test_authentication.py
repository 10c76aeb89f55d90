from unittest import mock

import pytest
import requests
from rest_framework_simplejwt.tokens import AccessToken, RefreshToken

from config.authentication import issue_tokens, verify_recaptcha


def test_skipped_without_secret(settings):
    settings.RECAPTCHA_SECRET = ""
    with mock.patch("config.authentication.requests.post") as post:
        assert verify_recaptcha(None) is True
    post.assert_not_called()


def test_missing_token(settings):
    settings.RECAPTCHA_SECRET = "secret"
    assert verify_recaptcha("") is False


def test_google_answer_is_used(settings):
    settings.RECAPTCHA_SECRET = "secret"
    response = mock.Mock()
    response.json.return_value = {"success": True}
    with mock.patch("config.authentication.requests.post", return_value=response) as post:
        assert verify_recaptcha("token", "127.0.0.1") is True
    assert post.call_args.kwargs["data"]["response"] == "token"


def test_network_error_fails_closed(settings):
    settings.RECAPTCHA_SECRET = "secret"
    with mock.patch(
        "config.authentication.requests.post", side_effect=requests.ConnectionError("down")
    ):
        assert verify_recaptcha("token") is False


@pytest.mark.django_db
def test_tokens_carry_string_id(user):
    access, refresh = issue_tokens(user)

    for token in (AccessToken(access), RefreshToken(refresh)):
        assert token["id"] == str(user.id)
        assert token["username"] == user.username
        assert token["role"] == user.role
