from __future__ import annotations
import json, logging, os, threading
from pathlib import Path

from ..errors import StorageError, ValidationError
from ..schemas import Message
from .csvlog import append_row

log = logging.getLogger("message_store")

CSV_FIELDS = ["id", "created_at", "author", "message"]


class MessageStore:
    """
    Message board persisted as one JSON array (rewritten on every append)
    plus an append-only CSV mirror.
    """

    def __init__(self, json_path: Path, csv_path: Path):
        self.json_path = Path(json_path)
        self.csv_path = Path(csv_path)
        self._lock = threading.Lock()

    def load_all(self) -> list[dict]:
        if not self.json_path.exists():
            return []
        try:
            data = json.loads(self.json_path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as e:
            log.error("Error reading messages JSON %s: %s", self.json_path, e)
            return []
        if not isinstance(data, list):
            log.error("Messages JSON %s is not an array, ignoring it", self.json_path)
            return []
        return data

    def append(self, author, message) -> Message:
        if not isinstance(message, str) or not message.strip():
            raise ValidationError("Message is required")
        if not isinstance(author, str) or not author.strip():
            author = "Anonymous"

        with self._lock:
            msg = Message.create(author=author.strip(), message=message.strip())
            messages = self.load_all()
            messages.append(msg.to_json())
            self._save(messages)
            self._mirror(msg)
        return msg

    def _save(self, messages: list[dict]):
        tmp = self.json_path.with_name(self.json_path.name + ".tmp")
        try:
            self.json_path.parent.mkdir(parents=True, exist_ok=True)
            tmp.write_text(json.dumps(messages, indent=2, ensure_ascii=False), encoding="utf-8")
            # readers see either the previous document or the new one, never a partial write
            os.replace(tmp, self.json_path)
        except OSError as e:
            if tmp.exists():
                tmp.unlink()
            log.error("Error saving messages JSON %s: %s", self.json_path, e)
            raise StorageError("Failed to save message") from e

    def _mirror(self, msg: Message):
        row = {"id": msg.id, "created_at": msg.created_at, "author": msg.author, "message": msg.message}
        try:
            append_row(self.csv_path, CSV_FIELDS, row)
        except OSError as e:
            # JSON is the source of truth; the mirror may lag behind
            log.error("Error writing message CSV %s: %s", self.csv_path, e)
