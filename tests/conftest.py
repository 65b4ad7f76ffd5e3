"""
This file contains shared fixtures for all tests.
"""
from unittest.mock import MagicMock

import pytest

from appcontroller.crds.app import App
from appcontroller.crds.base import NamespacedName
from tests.helpers import FakeCluster

TEST_NAMESPACE = "default"
TEST_APP_NAME = "web"


@pytest.fixture
def cluster() -> FakeCluster:
    """An empty in-memory cluster."""
    return FakeCluster()


@pytest.fixture
def store(cluster: FakeCluster):
    return cluster.store()


@pytest.fixture
def app_key() -> NamespacedName:
    return NamespacedName(TEST_NAMESPACE, TEST_APP_NAME)


@pytest.fixture
def app(cluster: FakeCluster) -> App:
    """The App 'default/web' (nginx:1.0, 3 replicas, port 8080), stored in the cluster."""
    return App.from_dict(cluster.add_app(TEST_APP_NAME))


@pytest.fixture
def logger() -> MagicMock:
    return MagicMock()
