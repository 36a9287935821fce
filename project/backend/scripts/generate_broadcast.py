#!/usr/bin/env python3
"""
Generate a broadcast for a story file without the API server.

Usage:
    python scripts/generate_broadcast.py --story ./story.json
    python scripts/generate_broadcast.py --story ./story.json --output ./state.json --no-previews
"""
import argparse
import asyncio
import json
import sys
from pathlib import Path

# Load environment variables from .env file
from dotenv import load_dotenv
load_dotenv()

from shared.errors import PipelineFatal
from shared.logging import get_logger
from shared.models.story import Story
from shared.models.video import VideoGenerationProgress
from shared.persistence import JsonFileSink
from api_gateway.dependencies import build_directory
from api_gateway.orchestrator import VideoGenerationService

logger = get_logger("generate_broadcast")


def print_progress(update: VideoGenerationProgress) -> None:
    print(f"[{update.progress:3d}%] {update.current_step}")


async def generate(story_path: Path, output_path: Path, state_dir: Path, previews: bool) -> int:
    story = Story(**json.loads(story_path.read_text()))
    service = VideoGenerationService(
        directory=build_directory(),
        sink=JsonFileSink(state_dir),
        previews=previews
    )

    try:
        video = await service.generate_video(story, progress_callback=print_progress)
    except PipelineFatal as e:
        print(f"ERROR: generation failed: {e}")
        return 1
    await service.wait_for_background()

    output_path.write_text(json.dumps(video.model_dump(mode="json"), indent=2))
    failed = [s.id for s in video.segments if s.error]
    print(f"Final video: {video.final_video_url or '(none)'}")
    if failed:
        print(f"Failed segments: {', '.join(failed)}")
    print(f"State written to {output_path}")
    return 0


def main() -> int:
    parser = argparse.ArgumentParser(description="Generate a satirical news broadcast from a story JSON file")
    parser.add_argument("--story", required=True, type=Path, help="Story JSON file")
    parser.add_argument("--output", type=Path, default=None, help="Where to write the final state (default: <story>.video.json)")
    parser.add_argument("--state-dir", type=Path, default=Path("state"), help="Directory for per-segment state snapshots")
    parser.add_argument("--no-previews", action="store_true", help="Skip preview stills")
    args = parser.parse_args()

    if not args.story.exists():
        print(f"ERROR: story file not found: {args.story}")
        return 1
    output = args.output or args.story.with_suffix(".video.json")
    return asyncio.run(generate(args.story, output, args.state_dir, previews=not args.no_previews))


if __name__ == "__main__":
    sys.exit(main())
