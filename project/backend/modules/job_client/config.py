"""
Job client configuration.

Provider status vocabularies, model input defaults and HTTP timeouts.
"""
from shared.models.job import JobStatus

# Status vocabulary of the OpenAI videos endpoint
SORA_STATUS_MAP = {
    "queued": JobStatus.QUEUED,
    "in_progress": JobStatus.IN_PROGRESS,
    "completed": JobStatus.COMPLETED,
    "failed": JobStatus.FAILED,
}

# Status vocabulary of Replicate predictions
REPLICATE_STATUS_MAP = {
    "starting": JobStatus.QUEUED,
    "processing": JobStatus.IN_PROGRESS,
    "succeeded": JobStatus.COMPLETED,
    "failed": JobStatus.FAILED,
    "canceled": JobStatus.FAILED,
}

HTTP_TIMEOUT_SECONDS = 60.0
DOWNLOAD_TIMEOUT_SECONDS = 300.0

# Transient status-poll failures retried before the poll loop gives up on a check
STATUS_RETRY_ATTEMPTS = 3
STATUS_RETRY_DELAY_SECONDS = 1

# Chatterbox speech defaults
TTS_DEFAULTS = {
    "exaggeration": 0.5,
    "temperature": 0.8,
    "cfg_weight": 0.5,
    "min_p": 0.05,
    "top_p": 1,
    "repetition_penalty": 1.2,
}

# Ideogram lower-third graphic defaults
LOWER_THIRD_STYLE_TYPE = "Design"
LOWER_THIRD_ASPECT_RATIO = "3:1"

