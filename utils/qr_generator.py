import base64
import io

import qrcode
from qrcode.exceptions import DataOverflowError
from PIL import Image

from errors import EncodingFailed, ValidationError


QR_SIZE = 400
QR_BORDER = 2
DARK_COLOR = "#4F46E5"
LIGHT_COLOR = "#FFFFFF"
DATA_URL_PREFIX = "data:image/png;base64,"


def render_qr(data: str) -> Image.Image:
    """Render *data* as a square QR image of ``QR_SIZE`` pixels.

    Raises ``EncodingFailed`` when *data* does not fit in the largest QR
    version.
    """
    qr = qrcode.QRCode(
        error_correction=qrcode.constants.ERROR_CORRECT_M,
        box_size=10,
        border=QR_BORDER,
    )
    qr.add_data(data)
    try:
        qr.make(fit=True)
    except (DataOverflowError, ValueError) as exc:
        raise EncodingFailed(f"Content does not fit in a QR code ({len(data)} chars)") from exc

    qr_img = qr.make_image(fill_color=DARK_COLOR, back_color=LIGHT_COLOR).convert("RGB")
    # Nearest neighbour keeps module edges sharp and the output stable.
    return qr_img.resize((QR_SIZE, QR_SIZE), Image.NEAREST)


def encode(content: str) -> str:
    """Encode *content* and return the QR image as a PNG data URL."""
    if not content or not content.strip():
        raise ValidationError("Please enter some text or select files")

    buffer = io.BytesIO()
    render_qr(content).save(buffer, format="PNG")
    return DATA_URL_PREFIX + base64.b64encode(buffer.getvalue()).decode("ascii")


def decode_data_url(payload: str) -> bytes:
    """Return the PNG bytes held in a data URL produced by :func:`encode`."""
    if not payload or not payload.startswith(DATA_URL_PREFIX):
        raise ValueError("Not a PNG data URL.")
    png = base64.b64decode(payload[len(DATA_URL_PREFIX):], validate=True)
    if not png:
        raise ValueError("Empty PNG data URL.")
    return png
