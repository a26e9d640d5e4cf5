# ABOUTME: Unit tests for the repository filesystem wrapper
# ABOUTME: Tests path confinement, chroot, YAML helpers and removal

from pathlib import Path

import pytest

from autopilot_mcp.utils.repofs import PathOutsideRootError, RepoFS, dump_yamls


@pytest.mark.unit
class TestPaths:
    """Tests for path handling."""

    def test_join(self):
        assert RepoFS.join("apps", "app", "base") == "apps/app/base"

    def test_leading_slash_is_root(self, repofs: RepoFS):
        assert repofs.abs_path("/apps/app") == repofs.abs_path("apps/app")

    def test_escape_rejected(self, repofs: RepoFS):
        with pytest.raises(PathOutsideRootError):
            repofs.abs_path("../outside")

    def test_inner_parent_allowed(self, repofs: RepoFS):
        assert repofs.abs_path("apps/a/../b") == repofs.root / "apps" / "b"

    def test_chroot(self, repofs: RepoFS, write_tree):
        write_tree("apps/app/base/kustomization.yaml")

        sub = repofs.chroot("apps")

        assert sub.root == repofs.root / "apps"
        assert sub.exists("app/base/kustomization.yaml")
        with pytest.raises(PathOutsideRootError):
            sub.abs_path("../other")


@pytest.mark.unit
class TestReadWrite:
    """Tests for file operations."""

    def test_write_creates_parents(self, repofs: RepoFS, repo_root: Path):
        repofs.write_file("a/b/c.txt", b"x")

        assert (repo_root / "a" / "b" / "c.txt").read_bytes() == b"x"

    def test_check_exists_or_write(self, repofs: RepoFS):
        assert repofs.check_exists_or_write("f", b"one") is False
        assert repofs.check_exists_or_write("f", b"two") is True
        assert repofs.read_file("f") == b"one"

    def test_read_dir_sorted(self, repofs: RepoFS, write_tree):
        write_tree("d/b", "d/a", "d/c/")

        assert repofs.read_dir("d") == ["a", "b", "c"]

    def test_yaml_roundtrip_keeps_key_order(self, repofs: RepoFS):
        repofs.write_yamls("k.yaml", {"kind": "Kustomization", "apiVersion": "v1", "resources": ["a"]})

        assert repofs.read_file("k.yaml").decode().splitlines()[0] == "kind: Kustomization"
        assert repofs.read_yaml("k.yaml") == {
            "kind": "Kustomization",
            "apiVersion": "v1",
            "resources": ["a"],
        }

    def test_dump_multiple_documents(self):
        out = dump_yamls({"a": 1}, {"b": 2}).decode()

        assert out == "a: 1\n---\nb: 2\n"


@pytest.mark.unit
class TestRemoveAll:
    """Tests for remove_all."""

    def test_remove_directory(self, repofs: RepoFS, write_tree):
        write_tree("apps/app/base/kustomization.yaml")

        assert repofs.remove_all("apps/app") is True
        assert not repofs.exists("apps/app")
        assert repofs.exists("apps")

    def test_remove_file(self, repofs: RepoFS, write_tree):
        write_tree("f")

        assert repofs.remove_all("f") is True
        assert not repofs.exists("f")

    def test_remove_missing(self, repofs: RepoFS):
        assert repofs.remove_all("missing") is False

    def test_root_cannot_be_removed(self, repofs: RepoFS):
        with pytest.raises(PathOutsideRootError):
            repofs.remove_all("/")
