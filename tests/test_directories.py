"""
Tests for managed directory emptiness tests and seeding decisions.
"""
import os

import pytest

from volume_seeder.directories import (
    EmptinessTest,
    EmptinessTestKind,
    ManagedDirectory,
    SeedDecision,
    validate_subpath,
)


def test_is_empty_true_for_missing_path(tmp_path):
    assert EmptinessTest.is_empty().is_unseeded(tmp_path / "missing")


def test_is_empty_true_for_empty_directory(tmp_path):
    assert EmptinessTest.is_empty().is_unseeded(tmp_path)


def test_is_empty_counts_hidden_entries(tmp_path):
    (tmp_path / ".cache").mkdir()
    assert not EmptinessTest.is_empty().is_unseeded(tmp_path)


def test_path_missing_ignores_unrelated_content(tmp_path):
    (tmp_path / "foo.png").write_bytes(b"png")
    test = EmptinessTest.path_missing("3d")

    assert test.is_unseeded(tmp_path)
    (tmp_path / "3d").mkdir()
    assert not test.is_unseeded(tmp_path)


def test_path_missing_treats_dangling_symlink_as_present(tmp_path):
    os.symlink(tmp_path / "nowhere", tmp_path / "3d")
    assert not EmptinessTest.path_missing("3d").is_unseeded(tmp_path)


def test_path_missing_true_when_live_path_missing(tmp_path):
    assert EmptinessTest.path_missing("3d").is_unseeded(tmp_path / "input")


def test_target_is_fallback_structure(tmp_path):
    assert EmptinessTest.is_empty().target(tmp_path) == tmp_path
    assert EmptinessTest.path_missing("3d/meshes").target(tmp_path) == tmp_path / "3d" / "meshes"


@pytest.mark.parametrize("kind, subpath", [
    (EmptinessTestKind.PATH_MISSING, None),
    (EmptinessTestKind.PATH_MISSING, ""),
    (EmptinessTestKind.PATH_MISSING, "../outside"),
    (EmptinessTestKind.PATH_MISSING, "/abs"),
    (EmptinessTestKind.IS_EMPTY, "3d"),
])
def test_invalid_tests_rejected(kind, subpath):
    with pytest.raises(ValueError):
        EmptinessTest(kind, subpath)


def test_validate_subpath_accepts_nested():
    assert validate_subpath("3d/meshes") == "3d/meshes"


def test_str_names_the_test():
    assert str(EmptinessTest.is_empty()) == "is_empty"
    assert str(EmptinessTest.path_missing("3d")) == "path_missing(3d)"


def test_decide(tmp_path):
    directory = ManagedDirectory("models", tmp_path / "models", tmp_path / "defaults" / "models")
    assert directory.decide() is SeedDecision.SEED

    (tmp_path / "models").mkdir()
    (tmp_path / "models" / "ckpt").write_bytes(b"")
    assert directory.decide() is SeedDecision.SKIP


def test_decision_never_writes(tmp_path):
    directory = ManagedDirectory("input", tmp_path / "input", tmp_path / "defaults",
                                 EmptinessTest.path_missing("3d"))
    directory.decide()
    assert not (tmp_path / "input").exists()
