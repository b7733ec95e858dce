# Compositing Module
from .compositor import Compositor, OUTPUT_MEDIA_TYPE

__all__ = ["Compositor", "OUTPUT_MEDIA_TYPE"]
