# treecopy/core/checksum.py

import logging
from pathlib import Path

import xxhash

from .exceptions import ChecksumError
from .file_context import io_errors

logger = logging.getLogger(__name__)

READ_SIZE = 4 * 1024 * 1024


class ChecksumCalculator:
    """XXH64 checksums for post-copy verification"""

    def create_hash(self) -> xxhash.xxh64:
        """Create a new xxhash object for checksum calculation."""
        return xxhash.xxh64()

    def calculate_file_checksum(self, file_path: Path) -> str:
        """
        Calculate the XXH64 checksum of a file.

        Raises:
            TransferIOError: If the file cannot be read
        """
        hash_obj = self.create_hash()
        with io_errors(file_path, "Checksum"):
            with open(file_path, 'rb') as f:
                while True:
                    chunk = f.read(READ_SIZE)
                    if not chunk:
                        break
                    hash_obj.update(chunk)
        checksum = hash_obj.hexdigest()
        logger.debug(f"Checksum calculated for {file_path}: {checksum}")
        return checksum

    def verify_checksum(self, file_path: Path, expected_checksum: str) -> str:
        """
        Check a file against an expected checksum.

        Returns:
            str: The checksum that was computed

        Raises:
            ChecksumError: If the checksums differ
        """
        actual_checksum = self.calculate_file_checksum(file_path)
        if actual_checksum.lower() != expected_checksum.lower():
            logger.error(f"Checksum verification failed for {file_path}. "
                         f"Expected: {expected_checksum}, Got: {actual_checksum}")
            raise ChecksumError(f"Checksum mismatch for {file_path}", path=file_path,
                                expected=expected_checksum, actual=actual_checksum)
        logger.info(f"Checksum verification successful: {file_path}")
        return actual_checksum
