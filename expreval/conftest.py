
import pytest

from expreval.config import ENV_MAX_DEPTH, ENV_MAX_NAME_LENGTH


@pytest.fixture(autouse=True)
def clean_config_env(monkeypatch):
    monkeypatch.delenv(ENV_MAX_NAME_LENGTH, raising=False)
    monkeypatch.delenv(ENV_MAX_DEPTH, raising=False)


@pytest.hookimpl(hookwrapper=True)
def pytest_runtest_makereport(item, call):
    outcome = yield
    report = outcome.get_result()
    if report.when == "call":
        print(f"TEST: {item.name} - {'PASSED' if report.passed else 'FAILED'}")
