"""Compositing module for the demo try-on preview."""

import logging
from typing import Optional, Tuple

import cv2
import numpy as np

from utils.image_io import load_image, load_image_with_alpha, image_to_bytes

logger = logging.getLogger(__name__)

OUTPUT_FORMAT = "JPEG"
OUTPUT_MEDIA_TYPE = "image/jpeg"


class Compositor:
    """
    Compositor for the local demo preview.

    Layers, in order:
    - Garment scaled into the center of the photo at partial opacity
    - Radial vignette darkening the edges
    - Fixed-position "DEMO" badge

    Photos larger than max_size are downscaled first, so the preview is at
    most max_size pixels on its longest side. The result is always encoded
    as JPEG at a fixed quality.
    """

    def __init__(
        self,
        max_garment_ratio: float = 0.6,
        garment_opacity: float = 0.55,
        vignette_strength: float = 0.45,
        vignette_start: float = 0.45,
        badge_text: str = "DEMO",
        jpeg_quality: int = 90,
        max_size: int = 1024,
    ):
        """
        Initialize compositor.

        Args:
            max_garment_ratio: Garment is fit inside this fraction of the photo's width and height
            garment_opacity: Opacity of the garment layer [0, 1]
            vignette_strength: Darkening at the corners [0, 1]
            vignette_start: Normalized radius where darkening begins
            badge_text: Text drawn in the badge
            jpeg_quality: Output JPEG quality
            max_size: Longest side of the decoded photo and garment
        """
        self.max_garment_ratio = max_garment_ratio
        self.garment_opacity = garment_opacity
        self.vignette_strength = vignette_strength
        self.vignette_start = vignette_start
        self.badge_text = badge_text
        self.jpeg_quality = jpeg_quality
        self.max_size = max_size

    def render_overlay(self, person_bytes: bytes, garment_bytes: bytes) -> bytes:
        """
        Decode both images, compose the preview and encode it.

        Raises:
            ValueError: if either image cannot be decoded or has too many pixels
        """
        person_img = load_image(person_bytes, max_size=self.max_size)
        garment_img, garment_alpha = load_image_with_alpha(garment_bytes, max_size=self.max_size)

        result = self.compose(person_img, garment_img, garment_alpha)
        return image_to_bytes(result, format=OUTPUT_FORMAT, quality=self.jpeg_quality)

    def compose(
        self,
        person_img: np.ndarray,
        garment_img: np.ndarray,
        garment_alpha: Optional[np.ndarray] = None,
    ) -> np.ndarray:
        """
        Compose the preview.

        Args:
            person_img: RGB person image (H, W, 3)
            garment_img: RGB garment image (h, w, 3)
            garment_alpha: Optional garment alpha channel (h, w)

        Returns:
            Composed RGB image (H, W, 3), same size as person_img
        """
        output = person_img.astype(np.float32)
        output = self._overlay_garment(output, garment_img, garment_alpha)
        output = self._apply_vignette(output)
        output = np.clip(output, 0, 255).astype(np.uint8)
        return self._draw_badge(output)

    def fit_size(self, garment_shape: Tuple[int, int], person_shape: Tuple[int, int]) -> Tuple[int, int]:
        """Return (width, height) of the garment after fitting it inside the photo."""
        gh, gw = garment_shape[:2]
        ph, pw = person_shape[:2]
        scale = min(
            self.max_garment_ratio * pw / gw,
            self.max_garment_ratio * ph / gh,
        )
        return max(1, int(gw * scale)), max(1, int(gh * scale))

    def _overlay_garment(
        self,
        output: np.ndarray,
        garment_img: np.ndarray,
        garment_alpha: Optional[np.ndarray],
    ) -> np.ndarray:
        h, w = output.shape[:2]
        new_w, new_h = self.fit_size(garment_img.shape, output.shape)

        interp = cv2.INTER_AREA if new_w < garment_img.shape[1] else cv2.INTER_LINEAR
        garment = cv2.resize(garment_img, (new_w, new_h), interpolation=interp)

        if garment_alpha is not None:
            alpha = cv2.resize(garment_alpha, (new_w, new_h), interpolation=interp)
            alpha = alpha.astype(np.float32) / 255.0
        else:
            alpha = np.ones((new_h, new_w), dtype=np.float32)

        alpha = (alpha * self.garment_opacity)[:, :, np.newaxis]

        x0 = (w - new_w) // 2
        y0 = (h - new_h) // 2
        region = output[y0:y0 + new_h, x0:x0 + new_w]

        # output = garment * alpha + person * (1 - alpha)
        output[y0:y0 + new_h, x0:x0 + new_w] = \
            garment.astype(np.float32) * alpha + region * (1 - alpha)

        return output

    def _apply_vignette(self, output: np.ndarray) -> np.ndarray:
        h, w = output.shape[:2]
        cy = max((h - 1) / 2.0, 1.0)
        cx = max((w - 1) / 2.0, 1.0)

        yy = np.arange(h, dtype=np.float32)[:, np.newaxis]
        xx = np.arange(w, dtype=np.float32)[np.newaxis, :]
        # 0 at the center, 1 at the corners
        dist = np.sqrt(((xx - cx) / cx) ** 2 + ((yy - cy) / cy) ** 2) / np.sqrt(2.0)

        falloff = np.clip((dist - self.vignette_start) / (1.0 - self.vignette_start), 0.0, 1.0)
        factor = 1.0 - self.vignette_strength * falloff ** 2

        return output * factor[:, :, np.newaxis]

    def _draw_badge(self, image: np.ndarray) -> np.ndarray:
        font = cv2.FONT_HERSHEY_SIMPLEX
        font_scale = 0.6
        thickness = 2
        margin = 12
        padding = 8

        (text_w, text_h), baseline = cv2.getTextSize(self.badge_text, font, font_scale, thickness)
        x1, y1 = margin, margin
        x2 = x1 + text_w + 2 * padding
        y2 = y1 + text_h + baseline + 2 * padding

        overlay = image.copy()
        cv2.rectangle(overlay, (x1, y1), (x2, y2), (37, 99, 235), thickness=-1)
        badged = cv2.addWeighted(overlay, 0.85, image, 0.15, 0)

        cv2.putText(
            badged, self.badge_text,
            (x1 + padding, y1 + padding + text_h),
            font, font_scale, (255, 255, 255), thickness, cv2.LINE_AA,
        )
        return badged
