import json

from .config import RESULT_FILE
from .errors import PersistenceError
from .models import ProfileRecord


class ResultStore:
    """Keeps the most recent scrape result on disk.

    Each save overwrites the file; it is not an archive.
    """

    def __init__(self, path: str = RESULT_FILE):
        self.path = path

    def save(self, record: ProfileRecord) -> str:
        try:
            with open(self.path, "w", encoding="utf-8") as f:
                json.dump(record.to_json_dict(), f, indent=2, ensure_ascii=False)
        except OSError as e:
            raise PersistenceError(f"Failed to write scraped data to {self.path}: {e}") from e
        return self.path
