"""
Unit tests for Replicate input builders and the prediction provider.
"""
from types import SimpleNamespace

import pytest
from unittest.mock import MagicMock
from replicate.exceptions import ReplicateError

from modules.job_client.config import TTS_DEFAULTS
from modules.job_client.replicate_provider import (
    ReplicateProvider,
    lower_third_input,
    output_url,
    preview_image_input,
    speech_input,
    speech_provider,
)
from shared.config import settings
from shared.errors import ConfigError, GenerationError, JobCreationFailed
from shared.models.job import ImageRequest, JobSnapshot, JobStatus, SpeechRequest


def prediction(status="starting", output=None, error=None, id="pred-1"):
    return SimpleNamespace(id=id, status=status, output=output, error=error)


class TestInputBuilders:

    def test_speech_input(self):
        data = speech_input(SpeechRequest(
            text="Good evening.", reference_voice_url="http://voices/female-anchor.wav", seed=7
        ))

        assert data["prompt"] == "Good evening."
        assert data["audio_prompt"] == "http://voices/female-anchor.wav"
        assert data["seed"] == 7
        assert data["temperature"] == TTS_DEFAULTS["temperature"]

    def test_speech_input_without_seed(self):
        data = speech_input(SpeechRequest(text="Hi", reference_voice_url="http://v/a.wav"))

        assert "seed" not in data

    def test_lower_third_defaults(self):
        data = lower_third_input(ImageRequest(prompt="BREAKING NEWS banner"))

        assert data["aspect_ratio"] == "3:1"
        assert data["style_type"] == "Design"

    def test_preview_image_with_references(self):
        data = preview_image_input(ImageRequest(
            prompt="Anchor at desk", reference_image_urls=["https://cdn/dana.png"], aspect_ratio="16:9"
        ))

        assert data["image_input"] == ["https://cdn/dana.png"]
        assert data["aspect_ratio"] == "16:9"


class TestOutputUrl:

    def test_plain_string(self):
        assert output_url("https://replicate.delivery/a.wav") == "https://replicate.delivery/a.wav"

    def test_list_takes_first(self):
        assert output_url(["https://r/1.png", "https://r/2.png"]) == "https://r/1.png"

    def test_file_output(self):
        assert output_url(SimpleNamespace(url="https://r/file.png")) == "https://r/file.png"

    def test_empty(self):
        assert output_url([]) is None
        assert output_url(None) is None


class TestReplicateProvider:

    @pytest.mark.asyncio
    async def test_create_builds_model_input(self):
        client = MagicMock()
        client.predictions.create.return_value = prediction()
        provider = ReplicateProvider("owner/model", lower_third_input, client=client)

        snapshot = await provider.create(ImageRequest(prompt="banner"))

        assert snapshot.job_id == "pred-1"
        assert snapshot.status == JobStatus.QUEUED
        kwargs = client.predictions.create.call_args.kwargs
        assert kwargs["model"] == "owner/model"
        assert kwargs["input"]["prompt"] == "banner"

    @pytest.mark.asyncio
    async def test_rejection_raises_creation_failed(self):
        client = MagicMock()
        client.predictions.create.side_effect = ReplicateError(status=422, detail="invalid input")
        provider = ReplicateProvider("owner/model", lower_third_input, name="lower_third", client=client)

        with pytest.raises(JobCreationFailed) as exc_info:
            await provider.create(ImageRequest(prompt="banner"))

        assert exc_info.value.status_code == 422
        assert exc_info.value.provider == "lower_third"

    @pytest.mark.asyncio
    async def test_status_maps_succeeded(self):
        client = MagicMock()
        client.predictions.get.return_value = prediction("succeeded", output=["https://r/out.png"])
        provider = ReplicateProvider("owner/model", lower_third_input, client=client)

        snapshot = await provider.status("pred-1")

        assert snapshot.status == JobStatus.COMPLETED
        assert await provider.fetch(snapshot) == "https://r/out.png"

    @pytest.mark.asyncio
    async def test_canceled_prediction_is_failure(self):
        client = MagicMock()
        client.predictions.get.return_value = prediction("canceled")
        provider = ReplicateProvider("owner/model", lower_third_input, client=client)

        snapshot = await provider.status("pred-1")

        assert snapshot.status == JobStatus.FAILED
        assert snapshot.error == "status=canceled"

    @pytest.mark.asyncio
    async def test_fetch_without_output(self):
        provider = ReplicateProvider("owner/model", lower_third_input, client=MagicMock())

        with pytest.raises(GenerationError):
            await provider.fetch(JobSnapshot(job_id="pred-1", status=JobStatus.COMPLETED, output=None))

    def test_missing_token(self, monkeypatch):
        monkeypatch.setattr(settings, "replicate_api_token", None)

        with pytest.raises(ConfigError):
            speech_provider()
