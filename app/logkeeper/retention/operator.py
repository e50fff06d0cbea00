"""Retention file operator.

Performs the two filesystem transitions of the lifecycle, compression
and deletion, on files of the managed directory. Failures are isolated
per file and returned as results rather than raised.
"""

import gzip
import logging
import os
import shutil
from pathlib import Path
from typing import BinaryIO

from logkeeper.retention.errors import CompressionError, DeletionError
from logkeeper.retention.models import GZIP_SUFFIX, ActionResult, RetentionAction

logger = logging.getLogger(__name__)


class RetentionOperator:
    """Compresses and deletes files inside one managed directory.

    Attributes:
        _directory: Directory holding the managed files.
        _dry_run: If True, report what would happen without touching files.
        _append: If True, compress into an existing artifact by appending a
            new gzip member instead of refusing it.
    """

    def __init__(self, directory: Path, *, dry_run: bool = False, append: bool = False) -> None:
        """Initialize the RetentionOperator.

        Args:
            directory: Directory holding the managed files.
            dry_run: If True, report what would happen without touching files.
            append: If True, allow appending to an existing ``.gz`` artifact.
        """
        self._directory = directory
        self._dry_run = dry_run
        self._append = append

    @staticmethod
    def artifact_name(name: str) -> str:
        """Name of the compressed artifact produced for a file."""
        return name + GZIP_SUFFIX

    def compress(self, name: str) -> ActionResult:
        """Compress a file into ``<name>.gz`` and remove the original.

        The original is removed only once the artifact has been fully
        written and closed. On any failure it is left untouched.

        Args:
            name: Base name of the file to compress.

        Returns:
            ActionResult describing the outcome.
        """
        artifact = self.artifact_name(name)

        if self._dry_run:
            logger.info("Dry-run: would compress %s to %s", name, artifact)
            return ActionResult(
                name=name,
                action=RetentionAction.COMPRESS,
                success=True,
                dry_run=True,
                artifact=artifact,
            )

        try:
            self._write_gzip(name, artifact)
        except CompressionError as e:
            return ActionResult(
                name=name,
                action=RetentionAction.COMPRESS,
                success=False,
                error=str(e),
                artifact=artifact,
            )

        try:
            self._unlink(name)
        except DeletionError as e:
            return ActionResult(
                name=name,
                action=RetentionAction.COMPRESS,
                success=False,
                error=f"Compressed to {artifact} but original was kept: {e}",
                artifact=artifact,
            )

        return ActionResult(
            name=name,
            action=RetentionAction.COMPRESS,
            success=True,
            artifact=artifact,
        )

    def delete(self, name: str) -> ActionResult:
        """Remove a file from the managed directory.

        Args:
            name: Base name of the file to remove.

        Returns:
            ActionResult describing the outcome.
        """
        if self._dry_run:
            logger.info("Dry-run: would delete %s", name)
            return ActionResult(
                name=name,
                action=RetentionAction.DELETE,
                success=True,
                dry_run=True,
            )

        try:
            self._unlink(name)
        except DeletionError as e:
            return ActionResult(
                name=name,
                action=RetentionAction.DELETE,
                success=False,
                error=str(e),
            )

        return ActionResult(name=name, action=RetentionAction.DELETE, success=True)

    def _write_gzip(self, name: str, artifact: str) -> None:
        """Stream a source file into a gzip artifact.

        A destination created by this call is removed again if writing
        fails. An existing destination in append mode is cut back to its
        previous length, so no truncated member is left behind.

        Args:
            name: Base name of the source file.
            artifact: Base name of the destination file.

        Raises:
            CompressionError: If the destination already exists (outside
                append mode) or any open, read, write or close fails.
        """
        source = self._directory / name
        destination = self._directory / artifact
        mode = "ab" if self._append else "xb"
        existed = destination.exists()
        created = False

        try:
            with source.open("rb") as src:
                with destination.open(mode) as dst:
                    created = not existed
                    offset = dst.seek(0, os.SEEK_END)
                    try:
                        with gzip.GzipFile(filename=name, mode="wb", fileobj=dst) as gz:
                            shutil.copyfileobj(src, gz)
                    except OSError:
                        if not created:
                            self._rollback_append(dst, offset, destination)
                        raise
        except FileExistsError as e:
            raise CompressionError(f"Compressed artifact already exists: {destination}") from e
        except OSError as e:
            if created:
                self._discard_partial(destination)
            raise CompressionError(f"Cannot compress {source}: {e}") from e

    @staticmethod
    def _rollback_append(dst: BinaryIO, offset: int, destination: Path) -> None:
        """Cut an existing artifact back to its length before a failed append."""
        try:
            dst.truncate(offset)
        except OSError as e:
            logger.warning("Cannot roll back partial append to %s: %s", destination, e)

    @staticmethod
    def _discard_partial(destination: Path) -> None:
        """Remove a partially written artifact, logging if that fails too."""
        try:
            destination.unlink(missing_ok=True)
        except OSError as e:
            logger.warning("Cannot remove partial artifact %s: %s", destination, e)

    def _unlink(self, name: str) -> None:
        """Remove a file.

        Args:
            name: Base name of the file to remove.

        Raises:
            DeletionError: If the file cannot be removed.
        """
        target = self._directory / name
        try:
            target.unlink()
        except OSError as e:
            raise DeletionError(f"Cannot remove {target}: {e}") from e
