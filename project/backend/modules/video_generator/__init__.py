"""
Video Generator module.

Per-segment primary asset generation (on-camera and b-roll video, voiceover
audio) with poster frames and optional durable copies.
"""

from modules.video_generator.asset_store import AssetPersister
from modules.video_generator.generator import SegmentGenerator
from modules.video_generator.thumbnail_generator import generate_poster_frame

__all__ = ["SegmentGenerator", "AssetPersister", "generate_poster_frame"]
