"""
Composer module.

Final stage of the broadcast pipeline. Muxes separately generated audio onto
segment clips, extracts poster frames, and concatenates all clips in story
order into the final MP4.
"""

from modules.composer.concatenator import concat_assets
from modules.composer.downloader import MediaFetcher
from modules.composer.muxer import mux_assets
from modules.composer.process import process
from modules.composer.snapshot import snapshot_asset

__all__ = ["process", "MediaFetcher", "mux_assets", "snapshot_asset", "concat_assets"]
