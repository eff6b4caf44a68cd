import os
import sys
import tempfile
import threading
from pathlib import Path

import pytest

os.environ.setdefault("ENABLE_FILE_LOGS", "0")

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from agents.evaluation_engine import EvaluationEngine
from agents.question_generator import QuestionGenerator
from config.registry import clear_models
from config.settings import settings
from interview_session.lifecycle import SessionLifecycle
from storage.memory import InMemorySessionRepository
from storage.migrate import migrate


FEEDBACK_72 = """```json
{
  "overallScore": 72,
  "strengths": ["Clear structure", "Good grasp of hooks"],
  "improvements": ["Discuss trade-offs"],
  "detailedFeedback": "Solid fundamentals with room to go deeper.",
  "questionFeedback": [
    {"questionIndex": 0, "score": 7, "feedback": "Accurate and concise."}
  ]
}
```"""


class FakeProvider:
    """Scripted TextProvider; replies are consumed in order and the last one repeats."""

    model = "fake-model"

    def __init__(self, *replies, gate=None, timeout_s=None):
        self._replies = list(replies)
        self._lock = threading.Lock()
        self.prompts = []
        self.entered = threading.Event()
        self.gate = gate
        if timeout_s is not None:
            self.timeout_s = timeout_s

    @property
    def calls(self):
        return len(self.prompts)

    def generate_text(self, prompt):
        with self._lock:
            self.prompts.append(prompt)
            reply = self._replies.pop(0) if len(self._replies) > 1 else self._replies[0]
        self.entered.set()
        if self.gate is not None:
            self.gate.wait(timeout=5)
        if isinstance(reply, Exception):
            raise reply
        return reply


@pytest.fixture(autouse=True)
def tmp_db(monkeypatch):
    td = tempfile.TemporaryDirectory()
    db_path = os.path.join(td.name, "test.db")
    monkeypatch.setattr(settings, "DB_PATH", db_path, raising=False)
    migrate(db_path)
    try:
        yield db_path
    finally:
        td.cleanup()


@pytest.fixture(autouse=True)
def reset_registry():
    clear_models()
    yield
    clear_models()


@pytest.fixture
def make_provider():
    return FakeProvider


@pytest.fixture
def feedback_reply():
    return FEEDBACK_72


@pytest.fixture
def repository():
    return InMemorySessionRepository()


@pytest.fixture
def build_lifecycle(repository):
    def _build(question_provider, evaluation_provider=None, *, repo=None, **kwargs):
        return SessionLifecycle(
            repo if repo is not None else repository,
            QuestionGenerator(question_provider),
            EvaluationEngine(evaluation_provider or FakeProvider(FEEDBACK_72)),
            **kwargs,
        )

    return _build
