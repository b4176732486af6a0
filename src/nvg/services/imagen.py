"""Google Imagen API client wrapper via Vertex AI (slide backgrounds)."""

import base64
import logging
import threading
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Optional

import google.auth
import google.auth.exceptions
import google.auth.transport.requests
import requests

from ..config import config

logger = logging.getLogger(__name__)

CLOUD_PLATFORM_SCOPE = "https://www.googleapis.com/auth/cloud-platform"


@dataclass
class ImageResult:
    """Result of an Imagen generation operation."""

    prompt: str
    local_path: Optional[Path] = None
    error_message: Optional[str] = None
    created_at: Optional[datetime] = None
    metadata: dict = field(default_factory=dict)


class ImagenClient:
    """Generates one background image per request through Vertex AI Imagen.

    Credentials are refreshed lazily and shared between threads, so one
    client can serve every slide of a run.
    """

    DEFAULT_LOCATION = "us-central1"
    SUPPORTED_ASPECT_RATIOS = ("1:1", "16:9", "9:16", "4:3", "3:4")

    def __init__(
        self,
        project_id: Optional[str] = None,
        location: str = DEFAULT_LOCATION,
        model: Optional[str] = None,
        timeout: float = 120.0,
    ) -> None:
        """Initialize the Imagen client.

        Args:
            project_id: Google Cloud project ID.
            location: GCP region for Vertex AI.
            model: Imagen model name.
            timeout: HTTP timeout in seconds.
        """
        self._project_id = project_id or config.google_cloud_project
        self._location = location
        self._model = model or config.imagen_model
        self._timeout = timeout
        self._credentials = None
        self._lock = threading.Lock()

        if not self._project_id:
            raise ValueError("GOOGLE_CLOUD_PROJECT not set")

    @property
    def project_id(self) -> str:
        return self._project_id

    @property
    def model(self) -> str:
        return self._model

    @property
    def endpoint(self) -> str:
        return (
            f"https://{self._location}-aiplatform.googleapis.com/v1/"
            f"projects/{self._project_id}/locations/{self._location}/"
            f"publishers/google/models/{self._model}:predict"
        )

    @classmethod
    def closest_aspect_ratio(cls, width: int, height: int) -> str:
        """Pick the supported aspect ratio nearest to width:height."""
        target = width / height

        def distance(ratio: str) -> float:
            w, h = ratio.split(":")
            return abs(int(w) / int(h) - target)

        return min(cls.SUPPORTED_ASPECT_RATIOS, key=distance)

    def _access_token(self) -> str:
        with self._lock:
            if self._credentials is None:
                self._credentials, _ = google.auth.default(scopes=[CLOUD_PLATFORM_SCOPE])
            if not self._credentials.valid:
                self._credentials.refresh(google.auth.transport.requests.Request())
            return self._credentials.token

    def generate_image(
        self,
        prompt: str,
        output_path: Path,
        aspect_ratio: str = "16:9",
        negative_prompt: Optional[str] = None,
    ) -> ImageResult:
        """Generate an image from a text prompt.

        Args:
            prompt: Text description of the image to generate.
            output_path: Local path to save the generated image.
            aspect_ratio: One of SUPPORTED_ASPECT_RATIOS.
            negative_prompt: Things to avoid in the image.

        Returns:
            ImageResult; ``error_message`` is set instead of raising.
        """
        result = ImageResult(
            prompt=prompt,
            created_at=datetime.now(),
            metadata={"aspect_ratio": aspect_ratio, "model": self._model},
        )

        parameters = {"sampleCount": 1, "aspectRatio": aspect_ratio}
        if negative_prompt:
            parameters["negativePrompt"] = negative_prompt

        try:
            logger.info(f"Generating slide background with Imagen: {prompt[:50]}...")
            response = requests.post(
                self.endpoint,
                json={"instances": [{"prompt": prompt}], "parameters": parameters},
                headers={"Authorization": f"Bearer {self._access_token()}"},
                timeout=self._timeout,
            )
            if response.status_code != 200:
                result.error_message = f"{response.status_code}: {response.text[:500]}"
                logger.error(f"Imagen API error: {result.error_message}")
                return result

            image_data = self._first_image(response.json())
            if image_data is None:
                result.error_message = "No image data in response"
                return result

            output_path.parent.mkdir(parents=True, exist_ok=True)
            output_path.write_bytes(base64.b64decode(image_data))
        except (google.auth.exceptions.GoogleAuthError, requests.RequestException, OSError, ValueError) as e:
            logger.error(f"Image generation failed: {e}")
            result.error_message = str(e)
            return result

        result.local_path = output_path
        logger.debug(f"Saved Imagen background to {output_path}")
        return result

    @staticmethod
    def _first_image(data: dict) -> Optional[str]:
        predictions = data.get("predictions") or []
        if not predictions:
            return None
        return predictions[0].get("bytesBase64Encoded") or None
