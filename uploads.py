# Image blob storage on the local filesystem
import os
import uuid

from flask import current_app, send_from_directory
from werkzeug.utils import secure_filename

from errors import ValidationError

URL_PREFIX = '/uploads/'


def allowed_image(filename):
    ext = os.path.splitext(filename)[1].lower().lstrip('.')
    return ext in current_app.config['ALLOWED_IMAGE_EXTENSIONS']


def save_image(file_storage):
    """Store an uploaded image under a generated name and return its reference.

    Returns None when no file was sent.
    """
    if file_storage is None or not file_storage.filename:
        return None

    original = secure_filename(file_storage.filename)
    if not original or not allowed_image(original):
        raise ValidationError("Unsupported image type")

    ext = os.path.splitext(original)[1].lower()
    filename = f"{uuid.uuid4().hex}{ext}"
    folder = current_app.config['UPLOAD_FOLDER']
    os.makedirs(folder, exist_ok=True)
    file_storage.save(os.path.join(folder, filename))
    return URL_PREFIX + filename


def delete_image(ref):
    """Remove a stored image; failures are logged, never raised."""
    if not ref:
        return False
    filename = secure_filename(os.path.basename(ref))
    path = os.path.join(current_app.config['UPLOAD_FOLDER'], filename)
    try:
        os.remove(path)
        return True
    except OSError as e:
        current_app.logger.warning(f"Could not delete image {ref}: {e}")
        return False


def serve_image(filename):
    return send_from_directory(current_app.config['UPLOAD_FOLDER'], filename)
