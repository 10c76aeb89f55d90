from rest_framework import status
from rest_framework.exceptions import APIException, ValidationError
from rest_framework.views import exception_handler


# ----------------------------
# store errors (balance / stock / topup)
# ----------------------------
class StoreError(APIException):
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = "Request could not be completed."
    default_code = "store_error"


class ProductNotFound(StoreError):
    status_code = status.HTTP_404_NOT_FOUND
    default_detail = "Product not found."
    default_code = "product_not_found"


class OutOfStock(StoreError):
    default_detail = "This product is out of stock."
    default_code = "out_of_stock"


class InsufficientBalance(StoreError):
    default_detail = "Not enough points to buy this product."
    default_code = "insufficient_balance"


class AlreadyUsed(StoreError):
    status_code = status.HTTP_409_CONFLICT
    default_detail = "This payment has already been used."
    default_code = "already_used"


class SlipExpired(StoreError):
    default_detail = "Slip expired. Please transfer again and verify within 5 minutes."
    default_code = "slip_expired"


class InvalidSlip(StoreError):
    default_detail = "Slip data is invalid."
    default_code = "invalid_slip"


class InvalidLink(StoreError):
    default_detail = "Gift link is invalid or has expired."
    default_code = "invalid_link"


class ExternalServiceError(StoreError):
    status_code = status.HTTP_502_BAD_GATEWAY
    default_detail = "Payment provider could not be reached. Please try again later."
    default_code = "external_service_error"


# ----------------------------
# login guard / registration limiter
# ----------------------------
class LoginBanned(APIException):
    status_code = status.HTTP_429_TOO_MANY_REQUESTS
    default_detail = (
        "You have been permanently banned after too many failed login attempts. "
        "Please contact an administrator."
    )
    default_code = "banned"


class RegisterBanned(APIException):
    status_code = status.HTTP_403_FORBIDDEN
    default_detail = "Your IP address has been permanently banned. Please contact an administrator."
    default_code = "banned"


class TooManyRegistrations(APIException):
    status_code = status.HTTP_429_TOO_MANY_REQUESTS
    default_detail = "Too many registrations. Please try again in 15 minutes."
    default_code = "too_many_requests"


def api_exception_handler(exc, context):
    """Render every API error as ``{"error": ..., "code": ...}``."""
    response = exception_handler(exc, context)
    if response is None:
        return None

    if isinstance(exc, ValidationError):
        response.data = {"error": exc.detail, "code": "invalid"}
        return response

    # Http404 / PermissionDenied arrive here already wrapped as {"detail": ...}
    detail = response.data.get("detail", "") if isinstance(response.data, dict) else response.data
    code = getattr(detail, "code", None) or getattr(exc, "default_code", "error")
    response.data = {"error": str(detail), "code": code}
    return response
