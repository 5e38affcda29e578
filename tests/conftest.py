"""Shared test fixtures and configuration."""

import json
import tempfile
from pathlib import Path

import pytest

from diffscribe.settings import ProviderSettings


@pytest.fixture
def temp_dir():
    """Create a temporary directory for tests."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def config_dir(temp_dir, mocker):
    """Point ~/.diffscribe at a temporary directory."""
    config_dir = temp_dir / ".diffscribe"
    mocker.patch("diffscribe.global_config._CONFIG_DIR", config_dir)
    return config_dir


@pytest.fixture
def clean_env(monkeypatch):
    """Remove API key and log level variables from the environment."""
    for name in (
        "OPENAI_API_KEY",
        "ANTHROPIC_API_KEY",
        "GOOGLE_API_KEY",
        "OPENROUTER_API_KEY",
        "GROQ_API_KEY",
        "MISTRAL_API_KEY",
        "DIFFSCRIBE_API_KEY",
        "DIFFSCRIBE_LOG_LEVEL",
    ):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def provider_settings():
    """Complete settings for an OpenAI-compatible endpoint."""
    return ProviderSettings(
        api_key="sk-test-123456789",
        base_url="https://api.example.com/v1",
        model="test-model",
        temperature=0.2,
        max_tokens=100,
    )


@pytest.fixture
def sample_diff():
    """Sample two-file unified diff."""
    return """diff --git a/src/auth/login.py b/src/auth/login.py
index 1234567..abcdefg 100644
--- a/src/auth/login.py
+++ b/src/auth/login.py
@@ -1,5 +1,9 @@
 import os
+import hashlib
 
 def login(user):
-    return check(user)
+    return check(hash_user(user))
+
+def hash_user(user):
+    return hashlib.sha256(user.encode()).hexdigest()
diff --git a/README.md b/README.md
index 1111111..2222222 100644
--- a/README.md
+++ b/README.md
@@ -1,2 +1,3 @@
 # Project
+Login now hashes user names.
"""


@pytest.fixture
def sse_frame():
    """Build one chat-completions SSE frame carrying content."""

    def build(content: str) -> str:
        payload = {"choices": [{"delta": {"content": content}}]}
        return f"data: {json.dumps(payload)}\n\n"

    return build
