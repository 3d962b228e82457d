# tests/conftest.py
import os
import sys

import pytest
import trimesh

# add the project root (one level up) onto sys.path
PROJECT_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if PROJECT_ROOT not in sys.path:
    sys.path.insert(0, PROJECT_ROOT)

from design_api.services.rules import Module


@pytest.fixture
def unit_cube():
    # unit cube centered on the origin
    return trimesh.creation.box(extents=(1.0, 1.0, 1.0))


@pytest.fixture
def modules_ab():
    # A carries "t1" on +X, B carries "t1" on -X; every other face is indifferent
    a = Module.from_connector_types("A", (1, 1, 1), ["t1", "INDIFFERENT", "INDIFFERENT", "INDIFFERENT", "INDIFFERENT", "INDIFFERENT"])
    b = Module.from_connector_types("B", (1, 1, 1), ["INDIFFERENT", "INDIFFERENT", "INDIFFERENT", "t1", "INDIFFERENT", "INDIFFERENT"])
    return [a, b]


@pytest.fixture
def client():
    """FastAPI test client for the design API."""
    from fastapi.testclient import TestClient
    from design_api.main import app

    return TestClient(app)
