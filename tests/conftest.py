"""Pytest configuration and shared fixtures."""
import pytest

from reactivemodel import DataModel
import reactivemodel.config as config_module


class ProfileModel(DataModel):
    """Test model with scalar, nested and immutable fields."""
    FIELDS = {
        'count': 0,
        'tags': ['a'],
        'profile': {
            'name': 'x',
            'age': 1,
            'address': {'city': 'Paris', 'zip': '75000'},
        },
    }
    IMMUTABLE_FIELDS = {
        'kind': 'profile',
        'limits': {'max': 10},
    }


class SumModel(DataModel):
    """Test model for computed fields."""
    FIELDS = {'a': 0, 'b': 0}
    OPTIONS = {'name': 'SumModel'}


@pytest.fixture(autouse=True)
def reset_default_options():
    """Restore module-level option defaults after each test."""
    original = config_module._default_options

    yield

    config_module._default_options = original


@pytest.fixture
def profile_model():
    return ProfileModel()


@pytest.fixture
def sum_model():
    return SumModel()
