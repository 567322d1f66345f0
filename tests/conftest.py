import pytest

from job_labeler.settings import Settings

@pytest.fixture
def settings():
    return Settings(api_key="sk-test", since_last_days=60, max_runtime_seconds=300)
