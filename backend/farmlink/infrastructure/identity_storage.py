"""Identity Storage — durable local copy of the cached profile.

Invariants:
    - One file per storage directory, named after the fixed storage key
    - Holds the profile only: no credentials, no tokens, no authenticated flag
    - Unreadable or malformed files load as "no identity", never as an error

Design Decisions:
    - Write to a temp file then os.replace: a crash mid-write never leaves half a JSON document
"""

import json
import logging
import os
from pathlib import Path

from pydantic import ValidationError as SchemaValidationError

from farmlink.schemas.marketplace import Profile

logger = logging.getLogger(__name__)

STORAGE_KEY = "auth-storage"


class JsonFileIdentityStorage:
    """IdentityStorage writing `<directory>/auth-storage.json`."""

    def __init__(self, directory: Path | str):
        self.path = Path(directory).expanduser() / f"{STORAGE_KEY}.json"

    def load(self) -> Profile | None:
        if not self.path.is_file():
            return None
        try:
            payload = json.loads(self.path.read_text(encoding="utf-8"))
            user = payload.get("user") if isinstance(payload, dict) else None
            return Profile.model_validate(user) if user else None
        except (OSError, ValueError, SchemaValidationError) as e:
            logger.warning(f"Ignoring unreadable identity storage {self.path}: {e}")
            return None

    def save(self, profile: Profile | None) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        document = {"user": profile.model_dump(mode="json") if profile else None}
        tmp = self.path.with_suffix(".tmp")
        tmp.write_text(json.dumps(document, ensure_ascii=False), encoding="utf-8")
        os.replace(tmp, self.path)
