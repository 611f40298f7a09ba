"""Template copying and attachment downloads for a provisioned folder."""

from __future__ import annotations

import logging
import re
import shutil
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from http.client import HTTPException
from pathlib import Path, PurePosixPath
from typing import TYPE_CHECKING
from urllib import request as urllib_request
from urllib.error import HTTPError
from urllib.parse import unquote, urlparse

from monday_provisioner.monday.client import MondayClient
from monday_provisioner.provisioning.tagging import FolderTagger

if TYPE_CHECKING:
    from monday_provisioner.config import AppConfig

logger = logging.getLogger(__name__)

DEFAULT_ATTACHMENTS_DIRNAME = "Attachments"
DEFAULT_USER_AGENT = "Mozilla/5.0"
DEFAULT_MAX_DOWNLOAD_WORKERS = 4

_NON_PRINTABLE_ASCII = re.compile(r"[^\x20-\x7E]")
_BMP_MAX = 0xFFFF
_PATH_SEPARATORS = re.compile(r"[/\\]")


@dataclass
class ProvisionResult:
    """Outcome of provisioning a single item.

    Attributes:
        destination: Absolute path of the provisioned folder.
        downloaded: File names written to the attachments directory.
        failed: Asset IDs whose download was abandoned.
    """

    destination: Path
    downloaded: list[str] = field(default_factory=list)
    failed: list[int] = field(default_factory=list)


def _underscores(match: re.Match[str]) -> str:
    return "__" if ord(match.group()) > _BMP_MAX else "_"


def safe_filename(url: str, fallback: str = "attachment") -> str:
    """Derive an ASCII-safe file name from a download URL.

    The last path segment is URL-decoded and every character outside
    printable ASCII is replaced with one underscore per UTF-16 code unit,
    so characters beyond the Basic Multilingual Plane become two
    underscores. The extension is kept.

    Args:
        url: Public download URL.
        fallback: Name used when the URL has no path segment.

    Returns:
        Sanitized file name.
    """
    decoded = unquote(PurePosixPath(urlparse(url).path).name)
    name = _PATH_SEPARATORS.sub("_", _NON_PRINTABLE_ASCII.sub(_underscores, decoded))
    return name if name not in ("", ".", "..") else fallback


class Provisioner:
    """Copies the template tree and fills the attachments folder."""

    def __init__(
        self,
        monday_client: MondayClient,
        destination_root: str | Path,
        tagger: FolderTagger | None = None,
        attachments_dirname: str = DEFAULT_ATTACHMENTS_DIRNAME,
        user_agent: str = DEFAULT_USER_AGENT,
        max_download_workers: int = DEFAULT_MAX_DOWNLOAD_WORKERS,
    ) -> None:
        """Initialise the provisioner.

        Args:
            monday_client: Client used to resolve asset IDs to download URLs.
            destination_root: Root directory under which destination trees live.
            tagger: Folder tagger applied to each new folder (no-op if omitted).
            attachments_dirname: Name of the attachments subdirectory.
            user_agent: User-Agent header sent with attachment downloads.
            max_download_workers: Maximum concurrent downloads per item.
        """
        self._monday = monday_client
        self._destination_root = Path(destination_root)
        self._tagger = tagger or FolderTagger()
        self._attachments_dirname = attachments_dirname
        self._user_agent = user_agent
        self._max_download_workers = max_download_workers

    def provision(
        self,
        source_dir: str | Path,
        relative_path: str | Path,
        asset_ids: list[int] | None = None,
    ) -> ProvisionResult:
        """Copy the template to the destination and download attachments.

        Steps:
            1. Copy source_dir recursively to destination_root/relative_path.
            2. Ensure the attachments subdirectory exists.
            3. Tag the destination folder (failures are non-fatal).
            4. Download all attachments concurrently and wait for them.

        Copy errors propagate. Download errors are logged per asset and
        reported in the result.

        Args:
            source_dir: Template directory to duplicate.
            relative_path: Destination path relative to destination_root.
            asset_ids: Asset IDs to download into the attachments folder.

        Returns:
            ProvisionResult summarising the downloads.
        """
        destination = self._destination_root / relative_path
        attachments_dir = destination / self._attachments_dirname

        shutil.copytree(source_dir, destination, dirs_exist_ok=True)
        attachments_dir.mkdir(parents=True, exist_ok=True)
        logger.info(
            "[provision] copied template; source:%s;destination:%s", source_dir, destination
        )

        try:
            self._tagger.tag(destination)
        except Exception:
            logger.error(
                "[provision] folder tagging failed; destination:%s", destination, exc_info=True
            )

        result = ProvisionResult(destination=destination)
        asset_ids = asset_ids or []
        if not asset_ids:
            return result

        with ThreadPoolExecutor(max_workers=self._max_download_workers) as pool:
            futures = [
                (asset_id, pool.submit(self.download_attachment, asset_id, attachments_dir))
                for asset_id in asset_ids
            ]
        for asset_id, future in futures:
            filename = future.result()
            if filename is None:
                result.failed.append(asset_id)
            else:
                result.downloaded.append(filename)

        logger.info(
            "[provision] attachments complete; destination:%s;downloaded:%d;failed:%d",
            destination,
            len(result.downloaded),
            len(result.failed),
        )
        return result

    def download_attachment(self, asset_id: int, attachments_dir: Path) -> str | None:
        """Download a single asset into the attachments directory.

        Args:
            asset_id: monday.com asset ID.
            attachments_dir: Directory receiving the file.

        Returns:
            The written file name, or None if the download was abandoned.
        """
        url = self._monday.fetch_asset_url(asset_id)
        if not url:
            logger.warning("[download_attachment] no URL for asset; asset_id:%s", asset_id)
            return None

        filename = safe_filename(url, fallback=f"asset_{asset_id}")
        dest_path = attachments_dir / filename
        req = urllib_request.Request(url, headers={"User-Agent": self._user_agent})
        try:
            with urllib_request.urlopen(req) as resp:
                if resp.status != 200:
                    logger.error(
                        "[download_attachment] download failed; file:%s;status:%d",
                        filename,
                        resp.status,
                    )
                    return None
                with open(dest_path, "wb") as out:
                    shutil.copyfileobj(resp, out)
        except HTTPError as exc:
            logger.error(
                "[download_attachment] download failed; file:%s;status:%d", filename, exc.code
            )
            return None
        except (OSError, HTTPException):
            dest_path.unlink(missing_ok=True)
            logger.error("[download_attachment] download error; file:%s", filename, exc_info=True)
            return None

        logger.info("[download_attachment] downloaded; file:%s;asset_id:%s", filename, asset_id)
        return filename


def provisioner_from_config(
    monday_client: MondayClient, tagger: FolderTagger, config: AppConfig
) -> Provisioner:
    """Construct a Provisioner from application configuration.

    Args:
        monday_client: Client used to resolve asset URLs.
        tagger: Folder tagger for new folders.
        config: Application configuration instance.

    Returns:
        Configured Provisioner instance.
    """
    return Provisioner(
        monday_client=monday_client,
        destination_root=config.destination_folder_path,
        tagger=tagger,
        attachments_dirname=config.attachments_dirname,
        user_agent=config.download_user_agent,
        max_download_workers=config.max_download_workers,
    )
