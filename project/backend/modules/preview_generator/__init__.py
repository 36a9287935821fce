"""
Preview Generator module.

Still previews per segment, generated as a detached background task.
"""

from modules.preview_generator.process import generate_previews, start_preview_task

__all__ = ["generate_previews", "start_preview_task"]
