"""Desktop renderer: default browser for URLs, a PNG image for QR codes."""

import logging
import webbrowser
from pathlib import Path

import qrcode
import qrcode.constants

from payment_initiation.interaction.base import ScaRenderer

logger = logging.getLogger("payment_initiation.renderer")

QR_CODE_IMAGE_FILENAME = "QRCode.png"


class DesktopRenderer(ScaRenderer):
    def __init__(self, image_path: str = QR_CODE_IMAGE_FILENAME, box_size: int = 20):
        self._image_path = Path(image_path)
        self._box_size = box_size

    def open_url(self, url: str) -> None:
        logger.info("URL: %s", url)
        if not webbrowser.open(url):
            logger.warning("No browser available; open the URL manually")

    def show_qr(self, data: str) -> None:
        qr = qrcode.QRCode(
            error_correction=qrcode.constants.ERROR_CORRECT_Q,
            box_size=self._box_size,
        )
        qr.add_data(data)
        qr.make(fit=True)
        qr.make_image().save(str(self._image_path))
        logger.info("QR code written to %s", self._image_path.resolve())
        self.open_url(self._image_path.resolve().as_uri())
