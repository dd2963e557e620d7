import os
import pytest
from pathlib import Path
from treecopy.core.tree_scanner import TreeScanner, scan_tree
from treecopy.core.exceptions import ScanError
from treecopy.core.interfaces.types import PathKind


def test_scan_sample_tree(sample_tree):
    plan = scan_tree(sample_tree)
    assert plan.root == sample_tree
    assert [e.relative_path for e in plan.entries] == [Path("a.txt"), Path("sub"), Path("sub/b.txt")]
    assert plan.total_bytes == 15
    assert plan.total_entries == 3
    assert len(plan.files) == 2
    assert len(plan.directories) == 1

def test_parents_come_before_children(deep_tree):
    plan = scan_tree(deep_tree)
    seen = set()
    for entry in plan.entries:
        parent = entry.relative_path.parent
        if parent != Path("."):
            assert parent in seen
        seen.add(entry.relative_path)
    assert plan.total_bytes == 3 + 7 + 11 + 13

def test_depth_of_entries(deep_tree):
    depths = {e.relative_path.as_posix(): e.depth for e in scan_tree(deep_tree).entries}
    assert depths["top.bin"] == 0
    assert depths["l0"] == 0
    assert depths["l0/l1"] == 1
    assert depths["l0/l1/l2/f2.bin"] == 3

def test_max_depth_records_directory_without_entering(deep_tree):
    plan = TreeScanner(max_depth=1).scan(deep_tree)
    paths = [e.relative_path.as_posix() for e in plan.entries]
    assert "l0/l1" in paths
    assert "l0/l1/f1.bin" not in paths
    assert plan.total_bytes == 3 + 7

def test_negative_max_depth_is_rejected():
    with pytest.raises(ValueError):
        TreeScanner(max_depth=-1)

def test_symlinks_are_not_followed(symlink_tree):
    plan = scan_tree(symlink_tree)
    kinds = {e.relative_path.as_posix(): e.kind for e in plan.entries}
    assert kinds["link_to_dir"] == PathKind.SYMLINK_DIRECTORY
    assert kinds["link_to_file"] == PathKind.SYMLINK_FILE
    assert kinds["dangling"] == PathKind.SYMLINK_FILE
    assert not any(p.startswith("link_to_dir/") for p in kinds)
    assert len(plan.symlinks) == 3
    # Links contribute no bytes
    assert plan.total_bytes == len(b"inner") + len(b"file")

def test_empty_directory(tmp_path):
    plan = scan_tree(tmp_path)
    assert plan.entries == ()
    assert plan.total_bytes == 0

def test_unreadable_directory_raises_scan_error(sample_tree, mocker):
    real_scandir = os.scandir

    def failing_scandir(path):
        if Path(path).name == "sub":
            raise PermissionError(13, "Permission denied")
        return real_scandir(path)

    mocker.patch("treecopy.core.tree_scanner.os.scandir", side_effect=failing_scandir)
    with pytest.raises(ScanError) as exc_info:
        scan_tree(sample_tree)
    assert exc_info.value.path == sample_tree / "sub"

def test_missing_root_raises_scan_error(tmp_path):
    with pytest.raises(ScanError):
        scan_tree(tmp_path / "missing")
