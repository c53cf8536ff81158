# LarpManager - https://larpmanager.com
# Copyright (C) 2025 Scanagatta Mauro
#
# This file is part of LarpManager and is dual-licensed:
#
# 1. Under the terms of the GNU Affero General Public License (AGPL) version 3,
#    as published by the Free Software Foundation. You may use, modify, and
#    distribute this file under those terms.
#
# 2. Under a commercial license, allowing use in closed-source or proprietary
#    environments without the obligations of the AGPL.
#
# If you have obtained this file under the AGPL, and you make it available over
# a network, you must also make the complete source code available under the same license.
#
# For more information or to purchase a commercial license, contact:
# commercial@larpmanager.com
#
# SPDX-License-Identifier: AGPL-3.0-or-later OR Proprietary

import logging
import os
import secrets
import time
from typing import Any

from django.conf import settings as conf_settings
from django.core.files.storage import default_storage
from django.core.files.uploadedfile import UploadedFile

from felicity.utils.exceptions import ValidationError

logger = logging.getLogger(__name__)


class StoredUpload:
    """A file received with a request and already written to storage."""

    def __init__(self, field: str, path: str, original_name: str, mime_type: str, size: int) -> None:
        self.field = field
        self.path = path
        self.original_name = original_name
        self.mime_type = mime_type
        self.size = size

    @property
    def filename(self) -> str:
        return os.path.basename(self.path)

    def as_response(self) -> dict[str, Any]:
        return {
            "filename": self.filename,
            "originalName": self.original_name,
            "mimeType": self.mime_type,
            "size": self.size,
        }


def upload_name(original_name: str) -> str:
    """Build the stored name, a millisecond timestamp plus a random part, keeping the extension."""
    _root, ext = os.path.splitext(original_name or "")
    return f"{int(time.time() * 1000)}-{secrets.token_hex(6)}{ext[:20]}"


def store_upload(field: str, uploaded: UploadedFile) -> StoredUpload:
    if uploaded.size > conf_settings.FELICITY_MAX_UPLOAD_SIZE:
        raise ValidationError(f"File for field {field} is too large")

    n_path = os.path.join(conf_settings.FELICITY_UPLOAD_DIR, upload_name(uploaded.name))
    path = default_storage.save(n_path, uploaded)
    return StoredUpload(field, path, uploaded.name, uploaded.content_type or "application/octet-stream", uploaded.size)


def store_uploads(files) -> list[StoredUpload]:
    """Write every uploaded file of the request to storage.

    Files already written are removed whenever storing fails.

    Args:
        files: The request MultiValueDict of uploaded files

    Returns:
        list[StoredUpload]: One entry per file, several entries can share a field

    Raises:
        ValidationError: If there are too many files or one is too large
    """
    pairs = [(field, uploaded) for field, file_list in files.lists() for uploaded in file_list]
    if len(pairs) > conf_settings.FELICITY_MAX_UPLOAD_FILES:
        raise ValidationError("Too many files uploaded")

    stored = []
    try:
        for field, uploaded in pairs:
            stored.append(store_upload(field, uploaded))
    except Exception:
        cleanup_uploads(stored)
        raise
    return stored


def cleanup_uploads(uploads: list[StoredUpload]) -> None:
    """Remove stored files of a rejected request."""
    for upload in uploads:
        default_storage.delete(upload.path)
        logger.debug("Removed upload %s", upload.path)
