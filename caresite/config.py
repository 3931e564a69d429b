from __future__ import annotations
import os
from dataclasses import dataclass, field
from pathlib import Path
from dotenv import load_dotenv

load_dotenv()


def _env_bool(name: str, default: bool = False) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "on"}


@dataclass
class Settings:
    host: str = field(default_factory=lambda: os.getenv("HOST", "0.0.0.0"))
    port: int = field(default_factory=lambda: int(os.getenv("PORT", "3000")))
    log_level: str = field(default_factory=lambda: os.getenv("LOG_LEVEL", "INFO").upper())

    data_dir: Path = field(default_factory=lambda: Path(os.getenv("DATA_DIR", ".")))
    public_dir: Path = field(default_factory=lambda: Path(os.getenv("PUBLIC_DIR", "./public")))

    email_user: str = field(default_factory=lambda: os.getenv("EMAIL_USER", "").strip())
    email_password: str = field(default_factory=lambda: os.getenv("EMAIL_PASSWORD", "").strip())
    contact_to: str = field(default_factory=lambda: os.getenv("CONTACT_TO", "").strip())
    smtp_host: str = field(default_factory=lambda: os.getenv("SMTP_HOST", "smtp.gmail.com"))
    smtp_port: int = field(default_factory=lambda: int(os.getenv("SMTP_PORT", "587")))
    smtp_ssl: bool = field(default_factory=lambda: _env_bool("SMTP_SSL"))
    smtp_timeout: float = field(default_factory=lambda: float(os.getenv("SMTP_TIMEOUT", "10")))

    site_name: str = field(default_factory=lambda: os.getenv("SITE_NAME", "Your Site"))
    site_owner: str = field(default_factory=lambda: os.getenv("SITE_OWNER", "Your Name"))

    def __post_init__(self):
        self.data_dir = Path(self.data_dir)
        self.public_dir = Path(self.public_dir)

    @property
    def messages_json(self) -> Path:
        return self.data_dir / "message_board.json"

    @property
    def messages_csv(self) -> Path:
        return self.data_dir / "message_board.csv"

    @property
    def quiz_csv(self) -> Path:
        return self.data_dir / "quiz_responses.csv"

    @property
    def operator_address(self) -> str:
        return self.contact_to or self.email_user
