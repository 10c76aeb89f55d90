import threading
from decimal import Decimal

import pytest
from django.db import connection
from rest_framework.test import APIClient

from accounts.models import User
from catalog.models import Category, Product, StockEntry
from config.authentication import issue_tokens


@pytest.fixture(autouse=True)
def _test_settings(settings):
    settings.PASSWORD_HASHERS = ["django.contrib.auth.hashers.MD5PasswordHasher"]
    settings.RECAPTCHA_SECRET = ""
    settings.TRUST_X_FORWARDED_FOR = False
    settings.CLOUDINARY = {"cloud_name": "test", "api_key": "key", "api_secret": "secret"}


@pytest.fixture
def api_client():
    return APIClient()


@pytest.fixture
def make_user(db):
    def _make(username="buyer", password="secret123", point="0", role="user"):
        return User.objects.create_user(username, password, point=Decimal(point), role=role)

    return _make


@pytest.fixture
def user(make_user):
    return make_user()


@pytest.fixture
def admin(make_user):
    return make_user("admin", role="admin")


@pytest.fixture
def auth_client():
    """APIClient carrying a bearer token for the given user."""

    def _client(user):
        access, _ = issue_tokens(user)
        client = APIClient()
        client.credentials(HTTP_AUTHORIZATION=f"Bearer {access}")
        return client

    return _client


@pytest.fixture
def category(db):
    return Category.objects.create(name="Valorant")


@pytest.fixture
def make_product(category):
    def _make(price="100", units=1, name="Valorant Account", **kwargs):
        product = Product.objects.create(
            name=name, price=Decimal(price), category=category, **kwargs
        )
        StockEntry.objects.bulk_create(
            [
                StockEntry(product=product, username=f"{name[:3].lower()}{i}", password=f"pw{i}")
                for i in range(units)
            ]
        )
        return product

    return _make


@pytest.fixture
def run_concurrently():
    """Run ``func(arg)`` for every arg on its own thread, released together.

    Returns one ``(result, exception)`` pair per arg, in order. Each thread
    closes its own database connection.
    """

    def _run(func, args):
        barrier = threading.Barrier(len(args))
        outcomes = [None] * len(args)

        def worker(index, arg):
            try:
                barrier.wait()
                outcomes[index] = (func(arg), None)
            except Exception as e:
                outcomes[index] = (None, e)
            finally:
                connection.close()

        threads = [
            threading.Thread(target=worker, args=(index, arg)) for index, arg in enumerate(args)
        ]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join(timeout=60)
        return outcomes

    return _run
