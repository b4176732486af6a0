"""Service layer: the single entry point callers use to get a video."""

import logging
from typing import Optional

from .cache import ResultCache
from .config import config
from .models import FinalVideo
from .pipeline import VideoPipeline, build_pipeline

logger = logging.getLogger(__name__)


class VideoService:
    """Fronts the pipeline with a content-keyed cache of finished videos."""

    def __init__(
        self,
        pipeline: Optional[VideoPipeline] = None,
        cache: Optional[ResultCache[FinalVideo]] = None,
    ) -> None:
        self._pipeline = pipeline or build_pipeline()
        self._cache = cache if cache is not None else ResultCache(ttl=config.cache_ttl)

    @property
    def cache(self) -> ResultCache[FinalVideo]:
        return self._cache

    def synthesize_video(self, content: str) -> str:
        """Return a public reference to a narrated video of ``content``.

        Identical content within the cache TTL reuses the earlier video as
        long as its file still exists.

        Raises:
            ValueError: If content is blank.
            PipelineError: If the run fails.
        """
        if not content or not content.strip():
            raise ValueError("Content is required")

        key = ResultCache.key_for(content)
        cached = self._cache.get(key)
        if cached is not None:
            if cached.path.exists():
                logger.info(f"Cache hit for {key[:8]}: {cached.url}")
                return cached.url
            logger.info(f"Cached video for {key[:8]} is gone; regenerating")
            self._cache.invalidate(key)

        final = self._pipeline.run(content)
        self._cache.set(key, final)
        return final.url
