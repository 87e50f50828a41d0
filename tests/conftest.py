"""
Shared fixtures for the PR Reviewer tests.

Provides in-memory stand-ins for the two external services: a model
backend that returns a canned object and a platform adapter that records
every write.
"""

import io
import sys
from pathlib import Path

import pytest

# Add src to path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from pr_reviewer.adapters.base_adapter import BaseAdapter, PRInfo, PRSummary
from pr_reviewer.providers import BackendResponse, ModelBackend, ModelFamily, ModelHandle
from pr_reviewer.transcript import Console

SAMPLE_DIFF = """diff --git a/example.py b/example.py
index 1234567..abcdefg 100644
--- a/example.py
+++ b/example.py
@@ -1,4 +1,6 @@
 def hello_world():
-    print("Hello")
+    print("Hello, World!")
+    return "greeting"
+
 def main():
     hello_world()
"""

SAMPLE_REVIEW = {
    "summary": "Small, focused change.",
    "feedback": [
        {
            "file_path": "example.py",
            "line_number": 3,
            "severity": "warning",
            "category": "maintainability",
            "title": "Unused return value",
            "message": "The greeting returned here is never used by main().",
            "suggestion": "Drop the return or use it in main().",
            "confidence": 0.9,
        },
        {
            "file_path": None,
            "line_number": None,
            "severity": "info",
            "category": "testing",
            "title": "No tests",
            "message": "Consider adding a test for hello_world().",
            "confidence": 0.6,
        },
    ],
    "score": {"overall": 85, "security": 100, "maintainability": 80},
}


class FakeModelHandle(ModelHandle):
    def __init__(self, backend, model_name):
        super().__init__(model_name)
        self.backend = backend

    async def generate_object(self, prompt, system, temperature, json_schema):
        self.backend.calls.append(
            {
                "model": self.model_name,
                "prompt": prompt,
                "system": system,
                "temperature": temperature,
                "json_schema": json_schema,
            }
        )
        return BackendResponse(object=self.backend.payload, usage=dict(self.backend.usage))


class FakeBackend(ModelBackend):
    family = ModelFamily.GEMINI

    def __init__(self, payload, usage=None):
        super().__init__("test-key")
        self.payload = payload
        self.usage = usage or {"prompt_tokens": 10, "completion_tokens": 5, "total_tokens": 15}
        self.calls = []

    def model(self, model_name):
        return FakeModelHandle(self, model_name)


class FakeAdapter(BaseAdapter):
    """Platform adapter that serves canned data and records writes."""

    def __init__(self, pulls=None, diff=SAMPLE_DIFF, token="test-token", api_url=None):
        super().__init__(token, api_url)
        self.pulls = pulls or []
        self.diff = diff
        self.writes = []

    def list_pull_requests(self, owner, repo, state="open", limit=10):
        return [p for p in self.pulls][:limit]

    def get_pr_info(self, owner, repo, pr_number):
        return PRInfo(
            number=pr_number,
            title="Improve greeting",
            description="Makes the greeting friendlier.",
            source_branch="feature/greeting",
            target_branch="main",
            author="octocat",
            state="open",
            head_sha="abc123",
            html_url=f"https://github.com/{owner}/{repo}/pull/{pr_number}",
        )

    def get_pr_diff(self, owner, repo, pr_number):
        return self.diff

    def post_review_comment(self, owner, repo, pr_number, body):
        self.writes.append(("comment", owner, repo, pr_number, body))
        return {"id": 1}

    def create_pull_request_review(
        self, owner, repo, pr_number, body, event="COMMENT", comments=None, commit_id=None
    ):
        self.writes.append(("review", owner, repo, pr_number, body, comments, commit_id))
        return {"id": 2}


def make_pulls(count):
    return [PRSummary(number=n, title=f"Change {n}", author=f"dev{n}") for n in range(1, count + 1)]


@pytest.fixture
def console():
    return Console(stdout=io.StringIO(), stderr=io.StringIO())


@pytest.fixture
def fake_backend():
    return FakeBackend


@pytest.fixture
def fake_adapter():
    return FakeAdapter()
