"""Application configuration loaded from environment variables."""

import os
from dataclasses import dataclass


@dataclass(frozen=True)
class AppConfig:
    """Centralized application configuration.

    Required fields have no defaults and will cause a KeyError at startup
    if the corresponding environment variable is missing. Domain constants
    have sensible defaults but can be overridden via environment variables.
    """

    # Required, no defaults; fail at startup if missing
    monday_api_token: str
    source_folder_path: str
    destination_folder_path: str

    # Domain constants with defaults, overridable via env
    port: int = 80
    monday_api_url: str = "https://api.monday.com/v2"
    attachments_dirname: str = "Attachments"
    download_user_agent: str = "Mozilla/5.0"
    folder_tagger: str = "auto"
    finder_label_index: int = 6
    max_download_workers: int = 4


def load_config() -> AppConfig:
    """Construct an AppConfig from environment variables.

    Required environment variables:
        MONDAY_API_TOKEN: monday.com API token sent as the Authorization header.
        SOURCE_FOLDER_PATH: Template directory copied for every new item.
        DESTINATION_FOLDER_PATH: Root under which provisioned trees are created.

    Optional environment variables (with defaults):
        PORT: Port the local Functions host listens on (default: 80).
        MP_MONDAY_API_URL: monday.com GraphQL endpoint.
        MP_ATTACHMENTS_DIRNAME: Subdirectory receiving downloaded attachments.
        MP_DOWNLOAD_USER_AGENT: User-Agent header for attachment downloads.
        MP_FOLDER_TAGGER: One of "auto", "finder" or "none" (default: auto).
        MP_FINDER_LABEL_INDEX: Finder label index applied to new folders (default: 6, green).
        MP_MAX_DOWNLOAD_WORKERS: Concurrent attachment downloads per item (default: 4).

    Returns:
        Configured AppConfig instance.
    """
    return AppConfig(
        monday_api_token=os.environ["MONDAY_API_TOKEN"],
        source_folder_path=os.environ["SOURCE_FOLDER_PATH"],
        destination_folder_path=os.environ["DESTINATION_FOLDER_PATH"],
        port=int(os.environ.get("PORT", "80")),
        monday_api_url=os.environ.get("MP_MONDAY_API_URL", "https://api.monday.com/v2"),
        attachments_dirname=os.environ.get("MP_ATTACHMENTS_DIRNAME", "Attachments"),
        download_user_agent=os.environ.get("MP_DOWNLOAD_USER_AGENT", "Mozilla/5.0"),
        folder_tagger=os.environ.get("MP_FOLDER_TAGGER", "auto"),
        finder_label_index=int(os.environ.get("MP_FINDER_LABEL_INDEX", "6")),
        max_download_workers=int(os.environ.get("MP_MAX_DOWNLOAD_WORKERS", "4")),
    )
