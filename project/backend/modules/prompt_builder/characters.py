"""
Character directory.

Read-only lookup of the news team (name, @tag, reference image, reference
voice). Built once by the caller and passed to the prompt builders; nothing
here is module-global state.
"""

from __future__ import annotations

import json
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Tuple

from shared.errors import ConfigError
from shared.logging import get_logger

logger = get_logger("prompt_builder.characters")

TAG_PATTERN = re.compile(r"@(\w+)")

DEFAULT_VOICE_FILE = "female-reporter.wav"


@dataclass(frozen=True)
class Character:
    id: str
    name: str
    tag: str
    role: str
    image_url: Optional[str] = None
    voice_file: Optional[str] = None


DEFAULT_CHARACTERS: Tuple[Character, ...] = (
    Character(id="dana-kingsley", name="Dana Kingsley", tag="@anchor1", role="Lead News Anchor",
              voice_file="female-anchor.wav"),
    Character(id="ron-tate", name="Ron Tate", tag="@anchor2", role="Co-Anchor",
              voice_file="male-anchor.wav"),
    Character(id="max-fields", name="Max Fields", tag="@reporter", role="Field Reporter",
              voice_file="male-reporter.wav"),
)


@dataclass(frozen=True)
class TaggedPrompt:
    prompt: str
    reference_image_urls: List[str]


class CharacterDirectory:
    """Immutable name/tag index over a set of characters."""

    def __init__(self, characters: Iterable[Character] = DEFAULT_CHARACTERS):
        self._characters: Tuple[Character, ...] = tuple(characters)
        self._by_name: Dict[str, Character] = {c.name.lower(): c for c in self._characters}
        self._by_tag: Dict[str, Character] = {c.tag.lower(): c for c in self._characters}

    @classmethod
    def from_json(cls, path: Path) -> "CharacterDirectory":
        """
        Load characters from a JSON list.

        Entries that omit the voice fall back to the default team's voice for
        the same tag. Accepts `image_url` or `imageUrl`.

        Raises:
            ConfigError: If the file is unreadable or an entry lacks name/tag
        """
        try:
            raw = json.loads(Path(path).read_text())
        except (OSError, json.JSONDecodeError) as e:
            raise ConfigError(f"Cannot load character directory {path}: {e}") from e
        if not isinstance(raw, list):
            raise ConfigError(f"Character directory {path} must be a JSON list")

        defaults = {c.tag: c for c in DEFAULT_CHARACTERS}
        characters = []
        for entry in raw:
            try:
                name, tag = entry["name"], entry["tag"]
            except (KeyError, TypeError) as e:
                raise ConfigError(f"Character entry missing name/tag: {entry!r}") from e
            fallback = defaults.get(tag)
            characters.append(Character(
                id=entry.get("id") or name.lower().replace(" ", "-"),
                name=name,
                tag=tag,
                role=entry.get("role", fallback.role if fallback else ""),
                image_url=entry.get("image_url") or entry.get("imageUrl"),
                voice_file=entry.get("voice_file") or (fallback.voice_file if fallback else None),
            ))
        logger.info(f"Loaded {len(characters)} characters", extra={"path": str(path)})
        return cls(characters)

    def __iter__(self):
        return iter(self._characters)

    def __len__(self) -> int:
        return len(self._characters)

    def by_name(self, name: Optional[str]) -> Optional[Character]:
        if not name:
            return None
        return self._by_name.get(name.strip().lower()) or self._by_tag.get(name.strip().lower())

    def by_tag(self, tag: str) -> Optional[Character]:
        if not tag.startswith("@"):
            tag = f"@{tag}"
        return self._by_tag.get(tag.lower())

    def resolve_image(self, name: Optional[str]) -> Optional[str]:
        """Reference image for a character name or tag; None when unknown."""
        character = self.by_name(name)
        return character.image_url if character else None

    def voice_file(self, name: Optional[str]) -> str:
        character = self.by_name(name)
        if character and character.voice_file:
            return character.voice_file
        return DEFAULT_VOICE_FILE

    def expand_tags(self, prompt: str) -> TaggedPrompt:
        """
        Annotate @tags with character names and collect their reference images.

        "@anchor1 reads" becomes "@anchor1 (Dana Kingsley) reads". Unknown tags
        are left untouched. Images are de-duplicated in first-mention order.
        """
        reference_images: List[str] = []

        def _replace(match: re.Match) -> str:
            tag = match.group(0)
            character = self.by_tag(tag)
            if character is None:
                logger.debug(f"Character not found for tag: {tag}")
                return tag
            if character.image_url and character.image_url not in reference_images:
                reference_images.append(character.image_url)
            return f"{tag} ({character.name})"

        return TaggedPrompt(prompt=TAG_PATTERN.sub(_replace, prompt), reference_image_urls=reference_images)

    def with_images(self, images: Dict[str, str]) -> "CharacterDirectory":
        """Copy of this directory with image URLs set by character name or tag."""
        updated = []
        for character in self._characters:
            url = images.get(character.name) or images.get(character.tag)
            updated.append(Character(
                id=character.id,
                name=character.name,
                tag=character.tag,
                role=character.role,
                image_url=url or character.image_url,
                voice_file=character.voice_file,
            ))
        return CharacterDirectory(updated)
