"""
Shared test fixtures

- Environment is pinned before any bidguard module is imported: no LLM
  keys (nothing can reach a provider), local job backend, zero backoff.
- Every test gets a fresh in-memory MongoDB (mongomock) wired into the
  connection module, so the real repositories run unchanged.
- ScriptedLLM stands in for the Perplexity/Gemini chain.
"""
import json
import os
import sys
import threading
from pathlib import Path

# Add parent directory to path to enable imports
sys.path.insert(0, str(Path(__file__).parent.parent))

for key in ("PERPLEXITY_API_KEY", "ERA_API_KEY", "GEMINI_API_KEY", "GOOGLE_API_KEY"):
    os.environ[key] = ""
os.environ["JOB_BACKEND"] = "local"
os.environ["JOB_RETRY_BACKOFF_SECONDS"] = "0"
os.environ["JOB_MAX_RETRIES"] = "2"
os.environ["MAX_REVISION_ROUNDS"] = "1"
os.environ["ADMIN_API_KEY"] = "test-admin-key"

import mongomock
import pytest

from bidguard.infra.mongodb import connection
from bidguard import jobs


class ScriptedLLM:
    """
    Fake LLM returning scripted responses.

    `script` is either a list (consumed in order, last item repeats) or a
    callable taking the prompt. Exceptions in the script are raised.
    """

    def __init__(self, script, model: str = "scripted"):
        self.script = script
        self.model = model
        self.prompts = []
        self._lock = threading.Lock()

    def generate_text(self, prompt, system_message=None, **kwargs):
        with self._lock:
            self.prompts.append(prompt)
            index = len(self.prompts) - 1
        if callable(self.script):
            response = self.script(prompt)
        else:
            response = self.script[min(index, len(self.script) - 1)]
        if isinstance(response, BaseException):
            raise response
        if isinstance(response, dict):
            return json.dumps(response)
        return response

    @property
    def calls(self) -> int:
        return len(self.prompts)


@pytest.fixture(autouse=True)
def mongo_db():
    """Fresh in-memory database for every test."""
    client = mongomock.MongoClient()
    db = client["bidguard_test"]
    connection._client = client
    connection._database = db
    yield db
    connection._client = None
    connection._database = None


@pytest.fixture(autouse=True)
def reset_job_backend():
    jobs.set_backend(None)
    yield
    jobs.set_backend(None)


@pytest.fixture
def scripted_llm():
    return ScriptedLLM


@pytest.fixture
def account():
    """A company account with credits. Returns (profile, raw_api_key)."""
    from bidguard.infra.mongodb.repositories.profile_repo import ProfileRepository

    repo = ProfileRepository()
    profile, api_key = repo.create_user("Acme Digital Ltd", "bids@acme.example", credits=3)
    repo.update_profile(profile["user_id"], {
        "business_description": "Cloud and cyber security services for central government.",
        "sectors": ["technology", "defence"],
        "iso_certs": ["ISO 27001", "Cyber Essentials Plus"],
        "company_size": "51-200",
    })
    return profile, api_key
