"""Tests for hermes_tooling.release.version."""

from pathlib import Path

import pytest

CMAKE_LISTS = (
    "cmake_minimum_required(VERSION 3.13.0)\n"
    "project(Hermes\n"
    "  VERSION 0.12.0\n"
    "  LANGUAGES C CXX)\n"
)
PACKAGE_JSON = '{\n  "name": "hermes-windows",\n  "version": "0.0.0",\n  "private": false\n}\n'


@pytest.fixture
def versioned_tree(source_root: Path) -> Path:
    (source_root / "CMakeLists.txt").write_text(CMAKE_LISTS)
    (source_root / "npm").mkdir()
    (source_root / "npm" / "package.json").write_text(PACKAGE_JSON)
    return source_root


class TestStampVersion:
    def test_developer_build_changes_nothing(self, versioned_tree: Path) -> None:
        from hermes_tooling.release import stamp_version

        assert stamp_version(versioned_tree, "0.12.1", "0.0.0.0") is False
        assert (versioned_tree / "CMakeLists.txt").read_text() == CMAKE_LISTS
        assert (versioned_tree / "npm" / "package.json").read_text() == PACKAGE_JSON

    def test_release_build_stamps_both_files(self, versioned_tree: Path, capsys) -> None:
        from hermes_tooling.release import stamp_version

        assert stamp_version(versioned_tree, "0.12.1", "0.12.1.4") is True
        assert "  VERSION 0.12.1\n" in (versioned_tree / "CMakeLists.txt").read_text()
        assert '"version": "0.12.1",' in (versioned_tree / "npm" / "package.json").read_text()
        out = capsys.readouterr().out
        assert "Semantic version set to 0.12.1" in out
        assert "Hermes version set to 0.12.1" in out

    def test_placeholder_semantic_uses_file_version(self, versioned_tree: Path) -> None:
        from hermes_tooling.release import stamp_version

        stamp_version(versioned_tree, "0.0.0-ci.20240101", "0.12.1.4")
        assert "VERSION 0.12.1.4" in (versioned_tree / "CMakeLists.txt").read_text()
        package_json = (versioned_tree / "npm" / "package.json").read_text()
        assert '"version": "0.0.0-ci.20240101",' in package_json

    def test_empty_semantic_version_changes_nothing(self, versioned_tree: Path) -> None:
        from hermes_tooling.release import stamp_version

        assert stamp_version(versioned_tree, "", "0.12.1.4") is False


class TestGovernanceFiles:
    def test_removed_for_release_builds(self, source_root: Path) -> None:
        from hermes_tooling.release.version import remove_governance_files

        juno = source_root / "unsupported" / "juno"
        juno.mkdir(parents=True)
        (juno / "parser.cpp").write_text("")
        assert remove_governance_files(source_root, "0.12.1.4") == [juno]
        assert not juno.exists()

    def test_kept_for_developer_builds(self, source_root: Path) -> None:
        from hermes_tooling.release.version import remove_governance_files

        juno = source_root / "unsupported" / "juno"
        juno.mkdir(parents=True)
        assert remove_governance_files(source_root, "0.0.0.0") == []
        assert juno.is_dir()


class TestRun:
    def test_missing_files_return_1(self, source_root: Path, capsys) -> None:
        from hermes_tooling.release import run_stamp_version

        assert run_stamp_version(source_root, "0.12.1", "0.12.1.4") == 1
        assert "Version stamping failed" in capsys.readouterr().err

    def test_success_returns_0(self, versioned_tree: Path) -> None:
        from hermes_tooling.release import run_stamp_version

        assert run_stamp_version(versioned_tree, "0.12.1", "0.12.1.4") == 0
