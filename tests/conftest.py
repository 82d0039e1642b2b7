"""Shared fixtures for the EULA gate tests."""
from typing import List, Optional

import pytest

from acceptance_store import AcceptanceStore
from config import Settings
from models import ProjectIdentity, PromptRequest, PromptResponse
from prompts import HostPrompt

SECRET = "Key"


class ScriptedPrompt(HostPrompt):
    """Prompt that replays canned answers and records what it was shown."""

    def __init__(self, codes: Optional[List[Optional[str]]] = None, confirm: bool = True):
        self.codes = list(codes or [])
        self.confirm_answer = confirm
        self.requests: List[PromptRequest] = []
        self.notifications: List[tuple] = []
        self.confirmations: List[tuple] = []

    def request_code(self, request: PromptRequest) -> PromptResponse:
        self.requests.append(request)
        if not self.codes:
            return PromptResponse.cancel()
        code = self.codes.pop(0)
        if code is None:
            return PromptResponse.cancel()
        return PromptResponse.submit(code)

    def notify(self, title: str, message: str) -> None:
        self.notifications.append((title, message))

    def confirm(self, title: str, message: str) -> bool:
        self.confirmations.append((title, message))
        return self.confirm_answer


@pytest.fixture
def config(tmp_path):
    (tmp_path / "app").mkdir()
    return Settings(
        _env_file=None,
        DATA_DIR=tmp_path / "data",
        FALLBACK_DIR=tmp_path / "home",
        APP_DIR=tmp_path / "app",
    )


@pytest.fixture
def identity():
    return ProjectIdentity(name="Proj", version="1.0.0")


@pytest.fixture
def store(config, identity):
    return AcceptanceStore.load(identity.name, config)


@pytest.fixture
def unwritable_store(tmp_path):
    """Store whose parent directory path is blocked by a regular file."""
    blocker = tmp_path / "blocker"
    blocker.write_text("not a directory")
    return AcceptanceStore(
        blocker / "Proj" / "EulaConfig.json",
        fallback_path=tmp_path / "home" / ".maas-proj-eula",
    )
