import pytest


@pytest.mark.django_db
def test_openapi_schema_lists_api_routes(api_client):
    response = api_client.get("/swagger/?format=openapi")

    assert response.status_code == 200
    paths = list(response.json()["paths"])
    for route in ("/login/", "/purchase/{product_id}/", "/topup/slip/verify/"):
        assert any(path.endswith(route) for path in paths)
