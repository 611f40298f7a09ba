"""Folder tagging adapters used to mark newly provisioned folders."""

from __future__ import annotations

import logging
import subprocess
import sys
from pathlib import Path
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from monday_provisioner.config import AppConfig

logger = logging.getLogger(__name__)

FINDER_GREEN_LABEL = 6

# The folder path is passed as an argument so it never has to be quoted into the script.
_FINDER_LABEL_SCRIPT = """on run argv
  tell application "Finder"
    set theFolder to POSIX file (item 1 of argv) as alias
    set label index of theFolder to {label_index}
  end tell
end run"""


class FolderTagger:
    """Tags a folder for visual identification. The base class does nothing."""

    def tag(self, folder: Path) -> None:
        logger.debug("[tag] folder tagging disabled; folder:%s", folder)


class FinderLabelTagger(FolderTagger):
    """Applies a macOS Finder color label via osascript."""

    def __init__(self, label_index: int = FINDER_GREEN_LABEL) -> None:
        self._label_index = label_index

    def tag(self, folder: Path) -> None:
        """Set the Finder label of a folder.

        Failures are logged and never raised.

        Args:
            folder: Absolute path of the folder to tag.
        """
        script = _FINDER_LABEL_SCRIPT.format(label_index=self._label_index)
        try:
            result = subprocess.run(
                ["osascript", "-e", script, str(folder)],
                capture_output=True,
                text=True,
                check=False,
            )
        except OSError:
            logger.error("[tag] failed to run osascript; folder:%s", folder, exc_info=True)
            return

        if result.returncode != 0:
            logger.error(
                "[tag] osascript failed; folder:%s;returncode:%d;stderr:%s",
                folder,
                result.returncode,
                result.stderr.strip(),
            )
            return
        if result.stderr:
            logger.error(
                "[tag] AppleScript error; folder:%s;stderr:%s", folder, result.stderr.strip()
            )
            return
        logger.info(
            "[tag] applied Finder label; folder:%s;label_index:%d", folder, self._label_index
        )


def folder_tagger_from_config(config: AppConfig) -> FolderTagger:
    """Select a folder tagger from application configuration.

    ``finder`` always uses Finder labels, ``none`` disables tagging and
    ``auto`` uses Finder labels only when running on macOS.

    Args:
        config: Application configuration instance.

    Returns:
        FolderTagger instance.

    Raises:
        ValueError: If folder_tagger is not a recognised mode.
    """
    mode = config.folder_tagger.lower()
    if mode == "auto":
        mode = "finder" if sys.platform == "darwin" else "none"
    if mode == "finder":
        return FinderLabelTagger(label_index=config.finder_label_index)
    if mode == "none":
        return FolderTagger()
    raise ValueError(f"Unknown folder tagger: {config.folder_tagger}")
