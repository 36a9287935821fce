"""
Video Generator configuration.

Segment grouping, durable-storage layout and asset kinds.
"""
from shared.models.story import SegmentType

# Primary assets are generated in two passes, each in story order
ON_CAMERA_TYPES = (SegmentType.ON_CAMERA,)
B_ROLL_TYPES = (SegmentType.B_ROLL, SegmentType.VOICEOVER)

# Durable storage object names: {story_id}/{segment_id}{suffix}.{ext}
ASSET_EXTENSIONS = {
    "video": "mp4",
    "audio": "wav",
    "image": "png",
}
ASSET_CONTENT_TYPES = {
    "video": "video/mp4",
    "audio": "audio/wav",
    "image": "image/png",
}
