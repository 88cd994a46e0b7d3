"""
Local content store (CDV stub): a JSON array of signed posts.
"""

from __future__ import annotations

import json
from pathlib import Path

from racli.common.exceptions import FileSystemError, ValidationError
from racli.common.models import PostRecord, parse_document
from racli.store.fs import read_json


class PostStore:
    """Append-only list of PostRecord kept in a single JSON file."""

    def __init__(self, path: Path):
        self.path = path

    def load(self) -> list[PostRecord]:
        """Load all posts; raises on anything that is not an array of posts."""
        if not self.path.exists():
            return []
        try:
            data = read_json(self.path)
        except OSError as e:
            msg = f"Failed to read posts file {self.path}: {e.strerror or e}"
            raise FileSystemError(msg) from e
        except ValueError as e:
            # undecodable bytes or malformed JSON
            msg = f"Invalid posts file format at {self.path}"
            raise ValidationError(msg, "INVALID_POSTS_FILE") from e

        if not isinstance(data, list):
            msg = f"Invalid posts file format at {self.path}"
            raise ValidationError(msg, "INVALID_POSTS_FILE")

        posts: list[PostRecord] = []
        for item in data:
            result = parse_document(PostRecord, item)
            if result.value is None:
                msg = f"Invalid post entry in {self.path}"
                raise ValidationError(msg, "INVALID_POST_ENTRY")
            posts.append(result.value)
        return posts

    def save(self, posts: list[PostRecord]) -> None:
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with self.path.open("w", encoding="utf-8") as f:
                json.dump([p.to_wire() for p in posts], f, indent=2)
        except OSError as e:
            msg = f"Failed to write posts file {self.path}: {e.strerror or e}"
            raise FileSystemError(msg) from e

    def append(self, record: PostRecord) -> None:
        posts = self.load()
        posts.append(record)
        self.save(posts)
