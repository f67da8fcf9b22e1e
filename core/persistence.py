"""
Workspace file I/O for .theorie format.

File format:
- MessagePack binary format (fast, compact)
- Contains: Workspace model (instrument instances and their selections)
- Auto-save to ~/.theorie/autosave
"""
import logging
from pathlib import Path
from typing import Union

import msgpack

from core.models import Workspace

logger = logging.getLogger(__name__)

FILE_EXTENSION = ".theorie"


class WorkspaceFile:
    """Handles .theorie workspace file I/O."""

    @staticmethod
    def save(workspace: Workspace, path: Union[str, Path]) -> Path:
        """
        Save workspace to .theorie file.

        Args:
            workspace: Workspace to save
            path: Destination file path

        Returns:
            Path actually written (extension normalised)

        Raises:
            IOError: If save fails
        """
        path = Path(path)
        if path.suffix != FILE_EXTENSION:
            path = path.with_suffix(FILE_EXTENSION)

        try:
            path.parent.mkdir(parents=True, exist_ok=True)

            packed_data = msgpack.packb(workspace.to_dict(), use_bin_type=True)

            with open(path, "wb") as f:
                f.write(packed_data)

        except (OSError, TypeError, ValueError) as e:
            raise IOError(f"Failed to save workspace to {path}: {e}") from e

        logger.info("Saved workspace %r to %s", workspace.name, path)
        return path

    @staticmethod
    def load(path: Union[str, Path]) -> Workspace:
        """
        Load workspace from .theorie file.

        Args:
            path: Source file path

        Returns:
            Loaded workspace, with file_path set to path

        Raises:
            IOError: If the file is missing, unreadable or malformed
            ValueError: If the file was written by an incompatible version
        """
        path = Path(path)
        if not path.exists():
            raise IOError(f"Workspace file not found: {path}")

        try:
            with open(path, "rb") as f:
                data = msgpack.unpackb(f.read(), raw=False)
        except (OSError, ValueError, msgpack.exceptions.UnpackException) as e:
            raise IOError(f"Failed to load workspace from {path}: {e}") from e

        if not isinstance(data, dict):
            raise IOError(f"Invalid {FILE_EXTENSION} file format: {path}")

        version = str(data.get("version", "unknown"))
        if not version.startswith("1."):
            raise ValueError(f"Incompatible workspace version: {version}. Expected 1.x")

        try:
            workspace = Workspace.from_dict(data)
        except (KeyError, TypeError, ValueError) as e:
            raise IOError(f"Corrupt workspace file {path}: {e}") from e

        logger.info("Loaded workspace %r from %s", workspace.name, path)
        return Workspace(name=workspace.name, instances=workspace.instances, file_path=str(path))

    @staticmethod
    def auto_save(workspace: Workspace, root: Union[str, Path, None] = None) -> bool:
        """
        Auto-save workspace to the autosave folder.

        Failures are logged, not raised. Returns True on success.
        """
        try:
            WorkspaceFile.save(workspace, WorkspaceFile.get_auto_save_path(workspace.name, root))
        except IOError as e:
            logger.warning("Auto-save failed: %s", e)
            return False
        return True

    @staticmethod
    def get_auto_save_path(workspace_name: str, root: Union[str, Path, None] = None) -> Path:
        """
        Get path to auto-save file for a workspace.

        Args:
            workspace_name: Workspace name
            root: Settings directory (default ~/.theorie)
        """
        base = Path(root) if root is not None else Path.home() / ".theorie"
        auto_save_dir = base / "autosave"

        # Sanitize workspace name for file system
        safe_name = "".join(c for c in workspace_name if c.isalnum() or c in (' ', '-', '_')).strip()
        if not safe_name:
            safe_name = "untitled"

        return auto_save_dir / f"{safe_name}{FILE_EXTENSION}"

    @staticmethod
    def has_auto_save(workspace_name: str, root: Union[str, Path, None] = None) -> bool:
        return WorkspaceFile.get_auto_save_path(workspace_name, root).exists()
