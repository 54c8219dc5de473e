"""The generation pipeline: upload files, encode, save the record."""

import logging
from contextlib import contextmanager

from database import QR_TYPES, QRCodeStore, new_record
from errors import ValidationError
from expiry import utcnow
from storage import StorageGateway, validate_content_file
from utils.qr_generator import encode


logger = logging.getLogger(__name__)


@contextmanager
def uploaded_files(storage, files, owner_id):
    """Upload *files* and yield their public URLs.

    The files are removed again if the block exits with an error, so a failed
    generation never leaves stored files without a record.
    """
    urls = storage.upload_many(files, owner_id) if files else []
    try:
        yield urls
    except BaseException:
        if urls:
            logger.warning("Generation failed, removing %d uploaded file(s)", len(urls))
            storage.remove(urls)
        raise


def generate_qr_code(client, owner_id, qr_type, text="", files=None, notes="", now=None):
    """Create and store a QR code for *text* or for uploaded *files*.

    When files are given the encoded content is their public URLs, one per
    line. Returns the stored record.
    """
    files = list(files or [])
    text = (text or "").strip()
    if qr_type not in QR_TYPES:
        raise ValidationError(f"Unknown QR type {qr_type!r}")
    if not text and not files:
        raise ValidationError("Please enter some text or select files")
    for uploaded_file in files:
        validate_content_file(uploaded_file)

    storage = StorageGateway(client)
    store = QRCodeStore(client)

    with uploaded_files(storage, files, owner_id) as urls:
        content = "\n".join(urls) if urls else text
        qr_url = encode(content)
        record = new_record(owner_id, content, qr_type, qr_url, files=urls, notes=notes, created_at=now)
        saved = store.insert(record)

    logger.info("Generated %s QR code %s for %s", qr_type, record["id"], owner_id)
    return saved
