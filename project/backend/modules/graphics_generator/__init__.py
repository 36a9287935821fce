"""
Graphics Generator module.

Lower-third overlay graphics per segment.
"""

from modules.graphics_generator.process import process

__all__ = ["process"]
