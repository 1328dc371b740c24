"""Pytest configuration and fixtures."""

import os

import pytest

os.environ.setdefault("SUPABASE_URL", "https://test.supabase.co")
os.environ.setdefault("SUPABASE_KEY", "test-key")
os.environ.setdefault("OPENAI_API_KEY", "test-openai-key")
os.environ.setdefault("GAP_ENGINE_ENV", "test")

from tests.fakes.fake_answers import make_answers  # noqa: E402


@pytest.fixture(scope="session", autouse=True)
def setup_test_env():
    """Set up test environment variables."""
    os.environ["SUPABASE_URL"] = "https://test.supabase.co"
    os.environ["SUPABASE_KEY"] = "test-key"
    os.environ["OPENAI_API_KEY"] = "test-openai-key"
    os.environ["GAP_ENGINE_ENV"] = "test"


@pytest.fixture
def all_fives() -> dict[str, int]:
    return make_answers(5)


@pytest.fixture
def all_ones() -> dict[str, int]:
    return make_answers(1)
