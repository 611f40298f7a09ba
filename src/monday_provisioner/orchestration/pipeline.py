"""Provisioning pipeline: item metadata to a populated destination folder."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import TYPE_CHECKING

from monday_provisioner.monday.client import MondayClient, monday_client_from_config
from monday_provisioner.monday.labels import resolve_item
from monday_provisioner.monday.models import ResolvedFields, items_from_response
from monday_provisioner.provisioning.provisioner import (
    ProvisionResult,
    Provisioner,
    provisioner_from_config,
)
from monday_provisioner.provisioning.sequencer import claim_destination
from monday_provisioner.provisioning.tagging import folder_tagger_from_config

if TYPE_CHECKING:
    from monday_provisioner.config import AppConfig

logger = logging.getLogger(__name__)


class ProvisioningPipeline:
    """Drives the fetch, resolve, sequence and provision steps for one item."""

    def __init__(
        self,
        monday_client: MondayClient,
        provisioner: Provisioner,
        source_folder_path: str | Path,
        destination_folder_path: str | Path,
    ) -> None:
        """Initialise the pipeline.

        Args:
            monday_client: Client used to fetch item metadata.
            provisioner: Provisioner that copies the template and downloads attachments.
            source_folder_path: Template directory duplicated for each item.
            destination_folder_path: Root under which destination trees are created.
        """
        self._monday = monday_client
        self._provisioner = provisioner
        self._source_folder_path = Path(source_folder_path)
        self._destination_folder_path = Path(destination_folder_path)

    def resolve(self, item_id: int | str) -> ResolvedFields:
        """Fetch an item and resolve its columns of interest.

        A missing payload or an empty item list yields empty ResolvedFields,
        so the destination falls back to placeholder folder names.
        """
        items = items_from_response(self._monday.fetch_item(item_id))
        if not items:
            logger.warning("[resolve] no item data returned; item_id:%s", item_id)
            return ResolvedFields()
        return resolve_item(items[0])

    def provision_item(self, item_id: int | str, item_name: str) -> ProvisionResult:
        """Run the full pipeline for one item.

        Args:
            item_id: monday.com item (pulse) ID.
            item_name: Sanitized item name used in the folder name.

        Returns:
            ProvisionResult for the new folder.
        """
        logger.info("[provision_item] starting; item_id:%s;item_name:%s", item_id, item_name)
        fields = self.resolve(item_id)
        destination = claim_destination(fields, item_name, self._destination_folder_path)
        result = self._provisioner.provision(
            self._source_folder_path,
            destination.relative_path,
            destination.attachment_ids,
        )
        logger.info(
            "[provision_item] complete; item_id:%s;destination:%s", item_id, result.destination
        )
        return result


def provisioning_pipeline_from_config(config: AppConfig) -> ProvisioningPipeline:
    """Construct a ProvisioningPipeline from application configuration.

    Creates a MondayClient, FolderTagger and Provisioner from the config,
    then wires them into a ProvisioningPipeline.

    Args:
        config: Application configuration instance.

    Returns:
        Configured ProvisioningPipeline instance.
    """
    client = monday_client_from_config(config)
    tagger = folder_tagger_from_config(config)
    return ProvisioningPipeline(
        monday_client=client,
        provisioner=provisioner_from_config(client, tagger, config),
        source_folder_path=config.source_folder_path,
        destination_folder_path=config.destination_folder_path,
    )
