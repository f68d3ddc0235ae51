import pytest

from scr.diagnostics import Diagnostics
from scr.session import Session


@pytest.fixture
def diagnostics():
    return Diagnostics()


@pytest.fixture
def session():
    return Session()


@pytest.hookimpl(hookwrapper=True)
def pytest_runtest_makereport(item, call):
    outcome = yield
    report = outcome.get_result()
    if report.when == "call":
        print(f"TEST: {item.name} - {'PASSED' if report.passed else 'FAILED'}")
