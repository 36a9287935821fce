"""
Replicate prediction provider.

One provider instance per model; an input builder maps the provider-neutral
request onto the model's input schema.
"""
import asyncio
from typing import Any, Callable, Dict, Optional

import replicate
from replicate.exceptions import ReplicateError

from shared.config import settings
from shared.errors import ConfigError, GenerationError, JobCreationFailed, RetryableError
from shared.logging import get_logger
from shared.models.job import (
    BackgroundRemovalRequest,
    ImageRequest,
    JobSnapshot,
    JobStatus,
    SpeechRequest,
)
from shared.retry import retry_with_backoff
from modules.job_client.base import JobProvider
from modules.job_client.config import (
    LOWER_THIRD_ASPECT_RATIO,
    LOWER_THIRD_STYLE_TYPE,
    REPLICATE_STATUS_MAP,
    STATUS_RETRY_ATTEMPTS,
    STATUS_RETRY_DELAY_SECONDS,
    TTS_DEFAULTS,
)

logger = get_logger("job_client.replicate")

InputBuilder = Callable[[Any], Dict[str, Any]]


def speech_input(request: SpeechRequest) -> Dict[str, Any]:
    """Chatterbox: text spoken in the reference voice."""
    data = {**TTS_DEFAULTS, **request.parameters}
    data["prompt"] = request.text
    data["audio_prompt"] = request.reference_voice_url
    if request.seed is not None:
        data["seed"] = request.seed
    return data


def lower_third_input(request: ImageRequest) -> Dict[str, Any]:
    """Ideogram: typographic design render."""
    data = {
        "prompt": request.prompt,
        "style_type": LOWER_THIRD_STYLE_TYPE,
        "aspect_ratio": request.aspect_ratio or LOWER_THIRD_ASPECT_RATIO,
    }
    data.update(request.parameters)
    return data


def preview_image_input(request: ImageRequest) -> Dict[str, Any]:
    """Image model that accepts reference images."""
    data: Dict[str, Any] = {"prompt": request.prompt, "output_format": "png"}
    if request.reference_image_urls:
        data["image_input"] = list(request.reference_image_urls)
    if request.aspect_ratio:
        data["aspect_ratio"] = request.aspect_ratio
    data.update(request.parameters)
    return data


def background_removal_input(request: BackgroundRemovalRequest) -> Dict[str, Any]:
    return {"image": request.image_url}


def output_url(output: Any) -> Optional[str]:
    """
    Normalise a prediction output to a single URL.

    Outputs may be a string, a FileOutput (has .url), or a list of either.
    """
    if isinstance(output, (list, tuple)):
        output = output[0] if output else None
    if output is None:
        return None
    if hasattr(output, "url"):
        return str(output.url)
    return str(output)


class ReplicateProvider(JobProvider):
    """Async predictions on a single Replicate model."""

    def __init__(
        self,
        model: str,
        build_input: InputBuilder,
        name: Optional[str] = None,
        client: Optional[Any] = None
    ):
        self.model = model
        self.build_input = build_input
        self.name = name or model
        if client is None:
            if not settings.replicate_api_token:
                raise ConfigError("REPLICATE_API_TOKEN is required for Replicate jobs")
            client = replicate.Client(api_token=settings.replicate_api_token)
        self.client = client

    def _snapshot(self, prediction: Any) -> JobSnapshot:
        raw_status = getattr(prediction, "status", None) or "starting"
        status = REPLICATE_STATUS_MAP.get(raw_status, JobStatus.FAILED)
        error = getattr(prediction, "error", None)
        if status == JobStatus.FAILED and not error:
            error = f"status={raw_status}"
        return JobSnapshot(
            job_id=prediction.id,
            status=status,
            error=str(error) if error else None,
            output=getattr(prediction, "output", None)
        )

    @retry_with_backoff(max_attempts=2, base_delay=2, retryable_exceptions=(RetryableError,))
    async def create(self, request: Any) -> JobSnapshot:
        input_data = self.build_input(request)
        try:
            prediction = await asyncio.to_thread(
                self.client.predictions.create,
                model=self.model,
                input=input_data
            )
        except ReplicateError as e:
            status_code = getattr(e, "status", None) or 500
            logger.error(
                f"Replicate rejected prediction for {self.model}",
                extra={"model": self.model, "status_code": status_code, "error": str(e)}
            )
            raise JobCreationFailed(status_code, str(e), provider=self.name) from e
        except (ConnectionError, TimeoutError) as e:
            raise RetryableError(f"Replicate connection error: {e}") from e

        logger.info(
            "Replicate prediction created",
            extra={"job_id": prediction.id, "model": self.model, "input_keys": list(input_data.keys())}
        )
        return self._snapshot(prediction)

    @retry_with_backoff(
        max_attempts=STATUS_RETRY_ATTEMPTS,
        base_delay=STATUS_RETRY_DELAY_SECONDS,
        retryable_exceptions=(RetryableError,)
    )
    async def status(self, job_id: str) -> JobSnapshot:
        try:
            prediction = await asyncio.to_thread(self.client.predictions.get, job_id)
        except ReplicateError as e:
            status_code = getattr(e, "status", None) or 500
            if status_code == 429 or status_code >= 500:
                raise RetryableError(f"Status check for {job_id} failed ({status_code}): {e}") from e
            raise GenerationError(f"Status check for {job_id} failed ({status_code}): {e}") from e
        except (ConnectionError, TimeoutError) as e:
            raise RetryableError(f"Replicate connection error: {e}") from e
        return self._snapshot(prediction)

    async def fetch(self, snapshot: JobSnapshot) -> str:
        url = output_url(snapshot.output)
        if not url:
            raise GenerationError(f"No output returned by {self.name} for job {snapshot.job_id}")
        return url


def speech_provider(client: Optional[Any] = None) -> ReplicateProvider:
    return ReplicateProvider(settings.tts_model, speech_input, name="tts", client=client)


def lower_third_provider(client: Optional[Any] = None) -> ReplicateProvider:
    return ReplicateProvider(settings.lower_third_model, lower_third_input, name="lower_third", client=client)


def background_removal_provider(client: Optional[Any] = None) -> ReplicateProvider:
    return ReplicateProvider(
        settings.background_removal_model, background_removal_input, name="background_removal", client=client
    )


def preview_image_provider(client: Optional[Any] = None) -> ReplicateProvider:
    return ReplicateProvider(settings.preview_image_model, preview_image_input, name="preview_image", client=client)
