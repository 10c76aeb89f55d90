import cloudinary
import cloudinary.exceptions
import cloudinary.uploader
from django.conf import settings

from config.exceptions import ExternalServiceError
from logger import get_logger

logger = get_logger("gamestore.storage")

_configured = False


def _ensure_configured():
    global _configured
    if not _configured:
        cloudinary.config(secure=True, **settings.CLOUDINARY)
        _configured = True


# returns (url, public_id)
def upload_image(image_file, folder):
    _ensure_configured()
    try:
        result = cloudinary.uploader.upload(
            image_file,
            folder=folder,
            allowed_formats=["jpg", "jpeg", "png", "webp"],
        )
    except cloudinary.exceptions.Error as e:
        logger.error(f"Cloudinary upload failed ({folder}) : {e}")
        raise ExternalServiceError("Image upload failed.")
    return result["secure_url"], result["public_id"]


def delete_image(public_id):
    if not public_id:
        return
    _ensure_configured()
    try:
        cloudinary.uploader.destroy(public_id)
    except cloudinary.exceptions.Error as e:
        # the row is already gone, a leftover asset is only logged
        logger.error(f"Cloudinary destroy failed ({public_id}) : {e}")
