"""AI-powered dress try-on using the OpenAI image edit API."""

import base64
import binascii
import logging
from typing import Optional, Tuple

import openai

from tryon.errors import ErrorCode, GenerationError
from tryon.types import GarmentFile, UploadedImage

logger = logging.getLogger(__name__)

TRYON_PROMPT = (
    "Dress the person in the first image in the garment shown in the second image. "
    "Preserve the person's identity: face, hairstyle, skin tone, body shape, pose and "
    "background must stay the same. Replace only the clothing with the garment, keeping "
    "its cut, color, pattern and embroidery faithful to the reference. Make the fit "
    "realistic with natural fabric drape, folds and lighting. Keep hands and accessories "
    "intact. Do not change facial features."
)

EXTENSIONS = {
    "image/jpeg": "jpg",
    "image/png": "png",
    "image/webp": "webp",
}


class AITryOn:
    """
    AI-powered try-on using OpenAI image edits.

    Single-shot: the SDK client is built with retries disabled and an
    explicit timeout. Every failure is raised as GenerationError.
    """

    def __init__(
        self,
        api_key: Optional[str],
        model: str = "gpt-image-1.5",
        timeout_s: float = 120.0,
        size: str = "auto",
        client=None,
    ):
        """
        Initialize AI Try-On.

        Args:
            api_key: OpenAI API key. Without one the client is unavailable.
            model: Image model name
            timeout_s: Upper bound for the whole request
            size: Output size passed to the API
            client: Pre-built OpenAI client (tests)
        """
        self.api_key = api_key
        self.model = model
        self.timeout_s = timeout_s
        self.size = size
        self._client = client

        if not self.api_key and client is None:
            logger.warning("No OpenAI API key provided; real try-on disabled.")

    @property
    def available(self) -> bool:
        return bool(self.api_key) or self._client is not None

    @property
    def client(self) -> openai.OpenAI:
        if self._client is None:
            self._client = openai.OpenAI(
                api_key=self.api_key,
                timeout=self.timeout_s,
                max_retries=0,
            )
        return self._client

    def run(
        self,
        user_image: UploadedImage,
        garment: GarmentFile,
        request_id: Optional[str] = None,
    ) -> Tuple[bytes, str]:
        """
        Run AI try-on.

        Args:
            user_image: Validated user photo
            garment: Resolved, non-empty garment file
            request_id: Used to prefix log lines

        Returns:
            (image bytes, media type)

        Raises:
            GenerationError: openai_error on any API failure, no_image when
                the response holds no image
        """
        logger.info(f"[{request_id}] Sending images to OpenAI ({self.model})...")

        images = [
            self._as_file("user", user_image.data, user_image.content_type),
            self._as_file(garment.dress_id, garment.data, garment.media_type),
        ]

        try:
            result = self.client.images.edit(
                model=self.model,
                image=images,
                prompt=TRYON_PROMPT,
                size=self.size,
                n=1,
            )
        except openai.APIStatusError as e:
            upstream_code = getattr(e, "code", None)
            logger.error(
                f"[{request_id}] OpenAI API error: status={e.status_code} "
                f"code={upstream_code} request_id={e.request_id} message={e.message}"
            )
            raise GenerationError(upstream_code=upstream_code) from e
        except openai.APITimeoutError as e:
            logger.error(f"[{request_id}] OpenAI request timed out after {self.timeout_s}s")
            raise GenerationError(upstream_code="timeout") from e
        except openai.APIConnectionError as e:
            logger.error(f"[{request_id}] OpenAI connection error: {e}")
            raise GenerationError(upstream_code="connection_error") from e
        except openai.OpenAIError as e:
            logger.error(f"[{request_id}] OpenAI error: {e}")
            raise GenerationError() from e

        return self._extract_image(result, request_id)

    def _extract_image(self, result, request_id: Optional[str]) -> Tuple[bytes, str]:
        data = getattr(result, "data", None) or []
        b64 = data[0].b64_json if data else None
        if not b64:
            logger.error(f"[{request_id}] OpenAI response contained no image")
            raise GenerationError(ErrorCode.NO_IMAGE)

        try:
            image_bytes = base64.b64decode(b64)
        except (binascii.Error, ValueError) as e:
            logger.error(f"[{request_id}] OpenAI returned undecodable image data: {e}")
            raise GenerationError(ErrorCode.NO_IMAGE) from e

        if not image_bytes:
            raise GenerationError(ErrorCode.NO_IMAGE)

        output_format = getattr(result, "output_format", None) or "png"
        media_type = "image/jpeg" if output_format == "jpeg" else f"image/{output_format}"

        logger.info(f"[{request_id}] OpenAI returned {len(image_bytes)} bytes ({media_type})")
        return image_bytes, media_type

    @staticmethod
    def _as_file(name: str, data: bytes, media_type: str) -> Tuple[str, bytes, str]:
        ext = EXTENSIONS.get(media_type, "png")
        return (f"{name}.{ext}", data, media_type)
