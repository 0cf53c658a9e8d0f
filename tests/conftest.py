"""
Shared fixtures for volume seeder tests.

Every test gets a scratch app root and snapshot root under tmp_path, and no
SEEDER_* variables leak in from the outer environment.
"""
import os
from pathlib import Path

import pytest

from helpers import write_tree
from volume_seeder.directories import EmptinessTest, ManagedDirectory


@pytest.fixture(autouse=True)
def clean_seeder_env(monkeypatch):
    for key in list(os.environ):
        if key.startswith("SEEDER_"):
            monkeypatch.delenv(key)


@pytest.fixture
def app_root(tmp_path) -> Path:
    root = tmp_path / "app"
    root.mkdir()
    return root


@pytest.fixture
def snapshot_root(tmp_path) -> Path:
    root = tmp_path / "defaults"
    write_tree(root, {
        "models/checkpoints/sdxl.safetensors": b"\x00weights\x01",
        "models/vae/put_vae_here": "",
        "models/.gitkeep": "",
        "custom_nodes/example_node.py.example": "# example node\n",
        "input/example.png": b"\x89PNG",
        "input/3d/cube.glb": b"glTF",
    })
    return root


@pytest.fixture
def managed(app_root, snapshot_root):
    """The standard three managed directories, keyed by name."""
    return {
        "models": ManagedDirectory("models", app_root / "models", snapshot_root / "models"),
        "custom_nodes": ManagedDirectory("custom_nodes", app_root / "custom_nodes", snapshot_root / "custom_nodes"),
        "input": ManagedDirectory("input", app_root / "input", snapshot_root / "input",
                                  EmptinessTest.path_missing("3d")),
    }
