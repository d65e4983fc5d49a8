"""AWS boto3 client for instance lookup, lifecycle actions and tagging."""

from __future__ import annotations

import asyncio
import logging
from typing import Any

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from ..config import AWSConfig
from ..exceptions import ConfigError, LifecycleError, QueryError, TagError
from .models import Ec2Filter, InstanceStateChange

logger = logging.getLogger(__name__)

# action -> (client method, response key holding the state changes)
_STATE_CHANGE_CALLS: dict[str, tuple[str, str]] = {
    "start": ("start_instances", "StartingInstances"),
    "stop": ("stop_instances", "StoppingInstances"),
    "terminate": ("terminate_instances", "TerminatingInstances"),
}


class EC2Client:
    """Thin async facade over a boto3 EC2 client.

    boto3 is blocking, so every remote call runs in a worker thread via
    ``asyncio.to_thread``. The underlying client is thread-safe and shared by
    all concurrent lookups.
    """

    def __init__(self, aws_config: AWSConfig):
        session_kwargs: dict[str, Any] = {}
        if aws_config.region:
            session_kwargs["region_name"] = aws_config.region
        if aws_config.credential_profile:
            session_kwargs["profile_name"] = aws_config.credential_profile

        try:
            session = boto3.Session(**session_kwargs)
            self._ec2 = session.client("ec2")
        except BotoCoreError as exc:
            raise ConfigError(f"Unable to create EC2 client: {exc}") from exc

    # ── Lookup ───────────────────────────────────────────────────────

    async def instance_ids_by_filter(self, ec2_filter: Ec2Filter) -> set[str]:
        """Return the IDs of every instance matching the filter, across all pages."""
        return await asyncio.to_thread(self._instance_ids_by_filter, ec2_filter)

    def _instance_ids_by_filter(self, ec2_filter: Ec2Filter) -> set[str]:
        logger.debug("Describing instances with filter %s=%s", ec2_filter.name, ec2_filter.value)
        instance_ids: set[str] = set()

        paginator = self._ec2.get_paginator("describe_instances")
        try:
            for page in paginator.paginate(Filters=[ec2_filter.to_boto()]):
                for reservation in page.get("Reservations", []):
                    logger.debug("Found reservation %s", reservation.get("ReservationId"))
                    for raw in reservation.get("Instances", []):
                        iid = raw.get("InstanceId")
                        if iid:
                            instance_ids.add(iid)
        except (BotoCoreError, ClientError) as exc:
            raise QueryError(f"Failed to describe instances: {exc}") from exc

        logger.debug(
            "Filter %s=%s matched %d instances",
            ec2_filter.name, ec2_filter.value, len(instance_ids),
            extra={"filter_name": ec2_filter.name, "instance_count": len(instance_ids)},
        )
        return instance_ids

    # ── Lifecycle ────────────────────────────────────────────────────

    async def change_instance_state(self, action: str, instance_ids: list[str]) -> list[InstanceStateChange]:
        """Start, stop or terminate instances; return the reported state transitions."""
        return await asyncio.to_thread(self._change_instance_state, action, instance_ids)

    def _change_instance_state(self, action: str, instance_ids: list[str]) -> list[InstanceStateChange]:
        method_name, response_key = _STATE_CHANGE_CALLS[action]
        try:
            response = getattr(self._ec2, method_name)(InstanceIds=instance_ids)
        except (BotoCoreError, ClientError) as exc:
            raise LifecycleError(f"Failed to {action} instances: {exc}", action=action) from exc
        return [InstanceStateChange.from_boto(raw) for raw in response.get(response_key, [])]

    async def reboot_instances(self, instance_ids: list[str]) -> None:
        await asyncio.to_thread(self._reboot_instances, instance_ids)

    def _reboot_instances(self, instance_ids: list[str]) -> None:
        try:
            self._ec2.reboot_instances(InstanceIds=instance_ids)
        except (BotoCoreError, ClientError) as exc:
            raise LifecycleError(f"Failed to reboot instances: {exc}", action="reboot") from exc

    # ── Tagging ──────────────────────────────────────────────────────

    async def create_tag(self, instance_ids: list[str], key: str, value: str) -> None:
        """Set one tag on every instance in a single batched call."""
        await asyncio.to_thread(self._create_tag, instance_ids, key, value)

    def _create_tag(self, instance_ids: list[str], key: str, value: str) -> None:
        try:
            self._ec2.create_tags(Resources=instance_ids, Tags=[{"Key": key, "Value": value}])
        except (BotoCoreError, ClientError) as exc:
            raise TagError(f"Failed to create tags: {exc}") from exc
