import pytest

from monobuild.utils.settings import Settings


@pytest.fixture(autouse=True)
def reset_settings():
    Settings().reset()
    yield
    Settings().reset()
