"""
StoryBook - prompt suggestions grouped into short stories.

Each story has a start prompt (submitted at frame 0 to begin the session)
followed by follow-up prompts to schedule as the generation advances.
Stories are loaded from JSON:

    [{"id": "...", "title": "...", "description": "...", "theme": "...",
      "startPrompt": {"id": "...", "title": "...", "prompt": "..."},
      "followUps": [{"id": "...", "title": "...", "prompt": "..."}]}]

snake_case keys (``start_prompt``, ``follow_ups``) are accepted too.
"""

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class StoryPrompt:
    id: str
    title: str
    prompt: str

    @classmethod
    def from_dict(cls, data: dict) -> "StoryPrompt":
        return cls(
            id=str(data["id"]), title=data.get("title", ""), prompt=data["prompt"]
        )


@dataclass(frozen=True)
class Story:
    id: str
    title: str
    start_prompt: StoryPrompt
    description: str = ""
    theme: str = ""
    follow_ups: tuple[StoryPrompt, ...] = ()

    @classmethod
    def from_dict(cls, data: dict) -> "Story":
        start = data.get("startPrompt", data.get("start_prompt"))
        if start is None:
            raise KeyError(f"Story {data.get('id')!r} has no start prompt")
        follow_ups = data.get("followUps", data.get("follow_ups", []))
        return cls(
            id=str(data["id"]),
            title=data.get("title", ""),
            description=data.get("description", ""),
            theme=data.get("theme", ""),
            start_prompt=StoryPrompt.from_dict(start),
            follow_ups=tuple(StoryPrompt.from_dict(p) for p in follow_ups),
        )

    def prompts(self) -> list[StoryPrompt]:
        """Start prompt followed by the follow-ups, in submission order."""
        return [self.start_prompt, *self.follow_ups]

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "title": self.title,
            "description": self.description,
            "theme": self.theme,
            "start_prompt": vars(self.start_prompt),
            "follow_ups": [vars(p) for p in self.follow_ups],
        }


@dataclass
class StoryBook:
    """Stories indexed by id, in file order."""

    stories: dict[str, Story] = field(default_factory=dict)
    source_file: str = ""

    @classmethod
    def from_file(cls, path: str | Path) -> "StoryBook":
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"Story file not found: {path}")

        data = json.loads(path.read_text())
        book = cls.from_list(data)
        book.source_file = str(path)
        logger.info(f"Loaded {len(book)} stories from {path.name}")
        return book

    @classmethod
    def from_list(cls, data: list[dict]) -> "StoryBook":
        stories = [Story.from_dict(item) for item in data]
        return cls(stories={story.id: story for story in stories})

    def get(self, story_id: str) -> Story:
        try:
            return self.stories[story_id]
        except KeyError:
            raise KeyError(f"Unknown story: {story_id}") from None

    def prompts(self, story_id: str) -> list[StoryPrompt]:
        return self.get(story_id).prompts()

    def __len__(self) -> int:
        return len(self.stories)

    def __iter__(self):
        return iter(self.stories.values())


_DEFAULT_STORIES = [
    {
        "id": "fantasy-quest",
        "title": "Epic Fantasy Quest",
        "description": "Journey through magical realms",
        "startPrompt": {
            "id": "fantasy-1",
            "title": "Misty Temple",
            "prompt": (
                "Ancient stone temple entrance with towering archway covered in "
                "moss, morning mist swirling around crumbling pillars, golden "
                "sunlight filtering through, camera slowly moving forward"
            ),
        },
        "followUps": [
            {
                "id": "fantasy-2",
                "title": "Crystal Cavern",
                "prompt": (
                    "Vast underground cavern lit by glowing blue crystals, "
                    "reflections dancing across a still underground lake"
                ),
            },
            {
                "id": "fantasy-3",
                "title": "Dragon's Peak",
                "prompt": (
                    "Snow-capped mountain summit at dusk, a dragon circling "
                    "overhead, wind carrying snow across the ridge"
                ),
            },
        ],
    },
    {
        "id": "ocean-voyage",
        "title": "Ocean Voyage",
        "description": "From the harbor to the open sea",
        "startPrompt": {
            "id": "ocean-1",
            "title": "Harbor at Dawn",
            "prompt": (
                "Wooden sailing ship leaving a quiet harbor at dawn, gulls "
                "overhead, soft orange light on calm water"
            ),
        },
        "followUps": [
            {
                "id": "ocean-2",
                "title": "Storm Front",
                "prompt": (
                    "Dark storm clouds rolling over the open ocean, waves "
                    "crashing against the hull, lightning on the horizon"
                ),
            },
        ],
    },
]


def default_story_book() -> StoryBook:
    """Built-in suggestions used when no story file is configured."""
    return StoryBook.from_list(_DEFAULT_STORIES)
