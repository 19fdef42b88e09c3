import warnings

import pytest

from weakid import get_config


def pytest_collection_modifyitems(items):
    # first check if warnings are already turned into errors
    for wf in warnings.filters:
        if wf == ("error", None, Warning, None, 0):
            return
    # Turn warnings into errors for all tests, this is needed
    # as running tests through pyargs will not use settings
    # defined in the project configuration
    for item in items:
        item.add_marker(pytest.mark.filterwarnings("error"), False)


@pytest.fixture(autouse=True)
def _reset_config():
    yield
    get_config().reset()
