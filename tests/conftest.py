from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

from caresite.config import Settings
from caresite.errors import MailError
from caresite.main import create_app


class FakeMailer:
    def __init__(self, fail: bool = False):
        self.fail = fail
        self.sent = []

    def send_contact(self, name, email, message):
        if self.fail:
            raise MailError("smtp down")
        self.sent.append((name, email, message))


@pytest.fixture
def settings(tmp_path):
    public = tmp_path / "public"
    public.mkdir()
    (public / "index.html").write_text("<h1>home</h1>", encoding="utf-8")
    return Settings(
        data_dir=tmp_path / "data",
        public_dir=public,
        email_user="site@example.com",
        email_password="secret",
        site_name="Caring Together",
        site_owner="Sam",
    )


@pytest.fixture
def mailer():
    return FakeMailer()


@pytest.fixture
def client(settings, mailer):
    with TestClient(create_app(settings, mailer=mailer)) as c:
        yield c
