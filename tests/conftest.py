# tests/conftest.py
"""
Pytest configuration for treecopy tests.
Defines fixtures used across multiple test modules.
"""
from pathlib import Path
from typing import Iterator, List
import os
import shutil
import tempfile
import logging
import yaml
import pytest

from treecopy.core.transfer_engine import TransferEngine
from treecopy.core.interfaces.types import ProgressReport


def _snapshot_tree(root: Path) -> dict:
    """
    Map every entry below ``root`` to its content (files), link text (symlinks)
    or None (directories), keyed by relative POSIX path.
    """
    result = {}
    for dirpath, dirnames, filenames in os.walk(root):
        base = Path(dirpath)
        for name in dirnames + filenames:
            path = base / name
            rel = path.relative_to(root).as_posix()
            if path.is_symlink():
                result[rel] = ("link", os.readlink(path))
            elif path.is_dir():
                result[rel] = None
            else:
                result[rel] = path.read_bytes()
    return result


@pytest.fixture
def snapshot_tree():
    """Function mapping a tree to comparable contents."""
    return _snapshot_tree


@pytest.fixture
def sample_tree(tmp_path: Path) -> Path:
    """
    Source tree ``root/{a.txt (5 bytes), sub/b.txt (10 bytes)}``.

    Returns:
        Path: The ``root`` directory
    """
    root = tmp_path / "root"
    (root / "sub").mkdir(parents=True)
    (root / "a.txt").write_bytes(b"hello")
    (root / "sub" / "b.txt").write_bytes(b"0123456789")
    return root


@pytest.fixture
def deep_tree(tmp_path: Path) -> Path:
    """Three levels of nesting with a file on every level."""
    root = tmp_path / "deep"
    (root / "l0" / "l1" / "l2").mkdir(parents=True)
    (root / "top.bin").write_bytes(b"t" * 3)
    (root / "l0" / "f0.bin").write_bytes(b"0" * 7)
    (root / "l0" / "l1" / "f1.bin").write_bytes(b"1" * 11)
    (root / "l0" / "l1" / "l2" / "f2.bin").write_bytes(b"2" * 13)
    return root


@pytest.fixture
def symlink_tree(tmp_path: Path) -> Path:
    """Tree holding a link to a file, a link to a directory and a dangling link."""
    if not hasattr(os, "symlink"):
        pytest.skip("symlinks not supported")
    root = tmp_path / "links"
    (root / "real_dir").mkdir(parents=True)
    (root / "real_dir" / "inner.txt").write_bytes(b"inner")
    (root / "file.txt").write_bytes(b"file")
    try:
        os.symlink("file.txt", root / "link_to_file")
        os.symlink("real_dir", root / "link_to_dir", target_is_directory=True)
        os.symlink("missing.txt", root / "dangling")
    except (OSError, NotImplementedError):
        pytest.skip("symlinks not permitted")
    return root


@pytest.fixture
def destination(tmp_path: Path) -> Path:
    return tmp_path / "dest"


@pytest.fixture
def engine() -> TransferEngine:
    return TransferEngine()


@pytest.fixture
def progress_reports() -> List[ProgressReport]:
    """List that collects reports when its ``append`` is used as on_progress."""
    return []


@pytest.fixture
def temp_config_dir() -> Iterator[Path]:
    """
    Create a temporary directory for test configuration files.

    Yields:
        Path: Path to the temporary directory.
    """
    temp_dir = Path(tempfile.mkdtemp())
    try:
        yield temp_dir
    finally:
        shutil.rmtree(temp_dir, ignore_errors=True)


@pytest.fixture
def valid_config_file(temp_config_dir: Path) -> Iterator[Path]:
    """
    Create a temporary valid configuration file with all fields from TransferConfig.

    Yields:
        Path: Path to the valid configuration file.
    """
    from treecopy import __version__

    config_path = temp_config_dir / "config.yml"
    config_data = {
        "version": __version__,
        "default_policy": "skip",
        "max_depth": 2,
        "preserve_metadata": True,
        "verify_transfers": True,
        "progress_byte_interval": 65536,
        "log_level": "DEBUG",
        "log_file_rotation": 3,
        "log_file_max_size": 20,
    }
    with open(config_path, 'w') as f:
        yaml.dump(config_data, f)

    yield config_path


@pytest.fixture
def invalid_config_file(temp_config_dir: Path) -> Iterator[Path]:
    """
    Create a temporary configuration file with invalid YAML syntax.

    Yields:
        Path: Path to the invalid configuration file.
    """
    config_path = temp_config_dir / "invalid_config.yml"
    with open(config_path, 'w') as f:
        # Unclosed flow sequence
        f.write("default_policy: skip\nverify_transfers: [yes\n")
    yield config_path


@pytest.fixture
def mocked_logging() -> Iterator[None]:
    """Fixture to silence logging for a test."""
    original_level = logging.getLogger().level
    logging.getLogger().setLevel(logging.CRITICAL)
    yield
    logging.getLogger().setLevel(original_level)


@pytest.fixture
def restore_root_logger() -> Iterator[None]:
    """Put the root logger's handlers and level back after setup_logging tests."""
    root = logging.getLogger()
    handlers = list(root.handlers)
    level = root.level
    yield
    for handler in root.handlers:
        if handler not in handlers:
            handler.close()
    root.handlers[:] = handlers
    root.setLevel(level)
