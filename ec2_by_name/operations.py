"""Actions applied to the resolved instance IDs."""

from __future__ import annotations

import logging

from .discovery import Operation
from .discovery.ec2_client import EC2Client

logger = logging.getLogger(__name__)

NO_STOP_BEFORE_TAG = "NoStopBefore"


class PrintInstances:
    """Print the instance IDs on one line, space separated."""

    async def apply(self, instance_ids: list[str]) -> None:
        print(" ".join(instance_ids))


class RebootInstances:
    def __init__(self, ec2: EC2Client):
        self._ec2 = ec2

    async def apply(self, instance_ids: list[str]) -> None:
        logger.info("Rebooting %d instances", len(instance_ids), extra={"operation": "reboot"})
        joined = " ".join(instance_ids)
        print(f"Rebooting instances: {joined}")
        await self._ec2.reboot_instances(instance_ids)
        print(f"Rebooted instances: {joined}")


class ChangeInstanceState:
    """Start, stop or terminate instances and print each reported transition."""

    _VERBS = {"start": "Starting", "stop": "Stopping", "terminate": "Terminating"}

    def __init__(self, ec2: EC2Client, action: str):
        if action not in self._VERBS:
            raise ValueError(f"Unsupported state change: {action}")
        self._ec2 = ec2
        self._action = action

    async def apply(self, instance_ids: list[str]) -> None:
        logger.info("Applying %s to %d instances", self._action, len(instance_ids),
                    extra={"operation": self._action})
        print(f"{self._VERBS[self._action]} instances: {' '.join(instance_ids)}")
        changes = await self._ec2.change_instance_state(self._action, instance_ids)
        # Instances missing from the response are not reported
        for change in changes:
            print(change)


class SetNoStopBefore:
    """Tag every instance with NoStopBefore=<timestamp> in one call."""

    def __init__(self, ec2: EC2Client, timestamp: str):
        self._ec2 = ec2
        self._timestamp = timestamp

    async def apply(self, instance_ids: list[str]) -> None:
        logger.info("Tagging %d instances", len(instance_ids), extra={"operation": "set-no-stop-before"})
        joined = " ".join(instance_ids)
        print(f"Setting {NO_STOP_BEFORE_TAG} for instances: {joined}")
        await self._ec2.create_tag(instance_ids, NO_STOP_BEFORE_TAG, self._timestamp)
        print(f"Set {NO_STOP_BEFORE_TAG} to {self._timestamp} for instances: {joined}")


def build_operation(name: str, ec2: EC2Client, timestamp: str | None = None) -> Operation:
    """Instantiate the operation named on the command line."""
    if name == "print":
        return PrintInstances()
    if name == "reboot":
        return RebootInstances(ec2)
    if name in ("start", "stop", "terminate"):
        return ChangeInstanceState(ec2, name)
    if name == "set-no-stop-before":
        if timestamp is None:
            raise ValueError("set-no-stop-before requires a timestamp")
        return SetNoStopBefore(ec2, timestamp)
    raise ValueError(f"Unknown operation {name}")
