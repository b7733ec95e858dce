"""Main orchestrator for the Dress Try-On pipeline."""

import logging
from pathlib import Path
from typing import Optional, Union

from tryon.ai_tryon import AITryOn
from tryon.composite import Compositor, OUTPUT_MEDIA_TYPE
from tryon.errors import GenerationUnavailableError
from tryon.garment.resolver import DEFAULT_URL_PREFIX, resolve_garment
from tryon.types import (
    GarmentFile,
    TryOnMode,
    TryOnRequest,
    TryOnResult,
    TryOnStatus,
)
from utils.image_io import to_data_uri
from utils.timing import Timer

logger = logging.getLogger(__name__)

OVERLAY_FAILED_WARNING = "Overlay rendering failed; the original photo was returned."


def select_mode(
    demo_mode: bool,
    demo_overlay: bool,
    generation_available: bool,
    fallback_to_demo: bool = False,
) -> TryOnMode:
    """
    Pick the branch for a request.

    Demo mode always wins. Real mode needs a configured generator; when it
    is missing the request is either refused (UNAVAILABLE) or, with
    ``fallback_to_demo``, served by the demo renderer.
    """
    demo = TryOnMode.DEMO_OVERLAY if demo_overlay else TryOnMode.DEMO_ECHO

    if demo_mode:
        return demo
    if generation_available:
        return TryOnMode.REAL
    if fallback_to_demo:
        return demo
    return TryOnMode.UNAVAILABLE


class TryOnPipeline:
    """
    Orchestrates a single try-on request.

    Pipeline steps:
    1. Resolve the garment inside the trusted directory
    2. Select the mode
    3. Render the demo preview or call the generator
    4. Build the result

    The upload must already be validated. The pipeline holds no
    per-request state, so one instance serves concurrent requests.
    """

    def __init__(
        self,
        dresses_dir: Union[str, Path],
        generator: Optional[AITryOn] = None,
        compositor: Optional[Compositor] = None,
        url_prefix: str = DEFAULT_URL_PREFIX,
        fallback_to_demo: bool = False,
    ):
        self.dresses_dir = Path(dresses_dir)
        self.generator = generator
        self.compositor = compositor or Compositor()
        self.url_prefix = url_prefix
        self.fallback_to_demo = fallback_to_demo

        logger.info(
            f"TryOnPipeline initialized (dresses_dir={self.dresses_dir}, "
            f"generation={self.generation_available})"
        )

    @property
    def generation_available(self) -> bool:
        return self.generator is not None and self.generator.available

    def run(
        self,
        request: TryOnRequest,
        timer: Optional[Timer] = None,
    ) -> TryOnResult:
        """
        Run the try-on pipeline.

        Args:
            request: Request with a validated upload
            timer: Optional Timer for tracking step durations

        Returns:
            TryOnResult holding exactly one image

        Raises:
            GarmentResolutionError: garment reference could not be resolved
            GenerationUnavailableError: real mode without a configured generator
            GenerationError: external generation failed
        """
        if timer is None:
            timer = Timer()
        request_id = timer.request_id

        # Step 1: Resolve garment
        with timer.measure("resolve"):
            garment = resolve_garment(
                self.dresses_dir,
                dress_id=request.dress_id,
                dress_src=request.dress_src,
                url_prefix=self.url_prefix,
            )

        # Step 2: Select mode
        mode = select_mode(
            request.demo_mode,
            request.demo_overlay,
            self.generation_available,
            self.fallback_to_demo,
        )
        logger.info(f"[{request_id}] Garment={garment.dress_id}, mode={mode.value}")

        # Step 3: Dispatch
        if mode == TryOnMode.UNAVAILABLE:
            raise GenerationUnavailableError()

        if mode == TryOnMode.REAL:
            with timer.measure("generate"):
                image_bytes, media_type = self.generator.run(
                    request.upload, garment, request_id=request_id
                )
            return self._result(request, garment, TryOnStatus.GENERATED,
                                to_data_uri(image_bytes, media_type))

        if mode == TryOnMode.DEMO_OVERLAY:
            with timer.measure("overlay"):
                return self._run_overlay(request, garment, request_id)

        return self._echo(request, garment, TryOnStatus.DEMO_ORIGINAL)

    def _run_overlay(
        self,
        request: TryOnRequest,
        garment: GarmentFile,
        request_id: Optional[str],
    ) -> TryOnResult:
        """Compose the demo preview; any failure degrades to the original photo."""
        try:
            image_bytes = self.compositor.render_overlay(request.upload.data, garment.data)
        except Exception as e:
            logger.warning(f"[{request_id}] Overlay failed, returning original: {e}")
            return self._echo(request, garment, TryOnStatus.DEMO_FALLBACK,
                              warning=OVERLAY_FAILED_WARNING)

        return self._result(request, garment, TryOnStatus.DEMO_OVERLAY,
                            to_data_uri(image_bytes, OUTPUT_MEDIA_TYPE))

    def _echo(
        self,
        request: TryOnRequest,
        garment: GarmentFile,
        status: TryOnStatus,
        warning: Optional[str] = None,
    ) -> TryOnResult:
        upload = request.upload
        return self._result(request, garment, status,
                            to_data_uri(upload.data, upload.content_type), warning)

    def _result(
        self,
        request: TryOnRequest,
        garment: GarmentFile,
        status: TryOnStatus,
        image: str,
        warning: Optional[str] = None,
    ) -> TryOnResult:
        return TryOnResult(
            status=status,
            image=image,
            dress_id=request.dress_id or garment.dress_id,
            dress_src=request.dress_src or None,
            warning=warning,
        )
