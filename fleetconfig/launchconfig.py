"""Launch configurations as the scaling configuration of a scaling group."""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Iterable, Protocol

from .configuration import (
    AwsError,
    CreateConfigurationInput,
    DeleteConfigurationInput,
    DiscoverConfigurationInput,
    ScalingConfiguration,
)
from .models import (
    BlockDevice,
    LaunchConfigurationRecord,
    NodeVolume,
    block_device_from_volume,
    scaling_config_name,
)

log = logging.getLogger(__name__)

DEFAULT_CONFIG_VERSION_RETENTION = 2
LAUNCH_CONFIGURATION_NOT_FOUND_MESSAGE = "Launch configuration name not found"


class _AutoScalingClient(Protocol):
    def describe_launch_configurations(self) -> list[LaunchConfigurationRecord]: ...

    def create_launch_configuration(self, record: LaunchConfigurationRecord) -> None: ...

    def delete_launch_configuration(self, name: str) -> None: ...


class LaunchConfiguration(ScalingConfiguration):
    """A launch configuration, discovered and managed through an auto scaling client."""

    def __init__(
        self,
        client: _AutoScalingClient,
        owner_name: str = "",
        target_resource: LaunchConfigurationRecord | None = None,
        resource_list: list[LaunchConfigurationRecord] | None = None,
    ) -> None:
        self.client = client
        self.owner_name = owner_name
        self.target_resource = target_resource
        self.resource_list: list[LaunchConfigurationRecord] = list(resource_list or [])

    def discover(self, request: DiscoverConfigurationInput) -> None:
        """Load all launch configurations and pick the one the request points at."""
        try:
            configurations = list(self.client.describe_launch_configurations())
        except Exception as err:
            raise RuntimeError(
                "failed to describe autoscaling launch configurations"
            ) from err
        self.resource_list = configurations

        if request.target_config_name:
            target_name = request.target_config_name
        elif request.scaling_group is not None:
            target_name = scaling_config_name(request.scaling_group)
        else:
            return

        wanted = target_name.casefold()
        for config in configurations:
            if (config.name or "").casefold() == wanted:
                self.target_resource = config

    def create(self, request: CreateConfigurationInput) -> None:
        """Create a launch configuration with the requested settings."""
        tenancy = request.placement.tenancy if request.placement is not None else ""
        record = LaunchConfigurationRecord(
            name=request.name,
            image_id=request.image_id,
            instance_type=request.instance_type,
            iam_instance_profile=request.iam_instance_profile_arn,
            security_groups=list(request.security_groups),
            spot_price=request.spot_price or None,
            key_name=request.key_name,
            user_data=request.user_data,
            placement_tenancy=tenancy or None,
            block_devices=self._block_devices(request.volumes),
            metadata_options=request.metadata_options,
        )
        self.client.create_launch_configuration(record)

    def delete(self, request: DeleteConfigurationInput) -> None:
        """Delete old launch configurations under a prefix, keeping the newest ones.

        With delete_all every prefixed configuration is removed, including the
        named one; otherwise the named configuration is always kept.
        """
        retain = request.retain_versions or DEFAULT_CONFIG_VERSION_RETENTION
        prefixed = sort_configurations(
            prefixed_configurations(self.resource_list, request.prefix)
        )

        if request.delete_all:
            deletable = prefixed
        elif len(prefixed) > retain:
            deletable = prefixed[: len(prefixed) - retain]
        else:
            deletable = []

        for config in deletable:
            name = config.name or ""
            if not request.delete_all and name.casefold() == request.name.casefold():
                continue

            log.info("deleting launch configuration instancegroup=%s name=%s", self.owner_name, name)
            try:
                self.client.delete_launch_configuration(name)
            except AwsError as err:
                if LAUNCH_CONFIGURATION_NOT_FOUND_MESSAGE.casefold() in err.message.casefold():
                    log.info(
                        "launch configuration not found instancegroup=%s name=%s",
                        self.owner_name,
                        name,
                    )
                    continue
                raise RuntimeError("failed to delete launch configuration") from err
            except Exception as err:
                raise RuntimeError("failed to delete launch configuration") from err

    def drifted(self, request: CreateConfigurationInput) -> bool:
        """Whether the discovered launch configuration differs from the request."""
        existing = self.target_resource
        if existing is None:
            log.info(
                "detected drift reason=%s instancegroup=%s",
                "launchconfig does not exist",
                self.owner_name,
            )
            return True

        desired_tenancy = request.placement.tenancy if request.placement is not None else ""
        checks = [
            ("image-id has changed", existing.image_id or "", request.image_id),
            ("instance-type has changed", existing.instance_type or "", request.instance_type),
            (
                "instance-profile has changed",
                existing.iam_instance_profile or "",
                request.iam_instance_profile_arn,
            ),
            (
                "security-groups has changed",
                sorted(existing.security_groups),
                sorted(request.security_groups),
            ),
            ("spot-price has changed", existing.spot_price or "", request.spot_price),
            ("key-pair has changed", existing.key_name or "", request.key_name),
            ("user-data has changed", existing.user_data or "", request.user_data),
            (
                "placement tenancy has changed",
                existing.placement_tenancy or "",
                desired_tenancy,
            ),
            (
                "volumes have changed",
                sort_devices(existing.block_devices),
                self._block_devices(request.volumes),
            ),
            (
                "metadata options have changed",
                existing.metadata_options,
                request.metadata_options,
            ),
        ]

        drift = False
        for reason, previous, new in checks:
            if previous != new:
                log.info(
                    "detected drift reason=%s instancegroup=%s previousValue=%r newValue=%r",
                    reason,
                    self.owner_name,
                    previous,
                    new,
                )
                drift = True

        if not drift:
            log.info("drift not detected instancegroup=%s", self.owner_name)
        return drift

    def provisioned(self) -> bool:
        return self.target_resource is not None

    def resource(self) -> LaunchConfigurationRecord | None:
        return self.target_resource

    def name(self) -> str:
        if self.target_resource is None:
            return ""
        return self.target_resource.name or ""

    def rotation_needed(self, request: DiscoverConfigurationInput) -> bool:
        """Whether any instance of the group runs from another launch configuration."""
        group = request.scaling_group
        if group is None or not group.instances:
            return False
        config_name = self.name()
        return any(
            (instance.launch_configuration_name or "") != config_name
            for instance in group.instances
        )

    @staticmethod
    def _block_devices(volumes: Iterable[NodeVolume]) -> list[BlockDevice]:
        return sort_devices(block_device_from_volume(volume) for volume in volumes)


def prefixed_configurations(
    configs: Iterable[LaunchConfigurationRecord], prefix: str
) -> list[LaunchConfigurationRecord]:
    """The configurations whose name starts with prefix."""
    return [config for config in configs if (config.name or "").startswith(prefix)]


def sort_devices(devices: Iterable[BlockDevice]) -> list[BlockDevice]:
    """Block devices ordered by device name."""
    return sorted(devices, key=lambda device: device.device_name or "")


def _created_key(config: LaunchConfigurationRecord) -> tuple[bool, float]:
    created: datetime | None = config.created_time
    if created is None:
        return (True, 0.0)
    return (False, created.timestamp())


def sort_configurations(
    configs: Iterable[LaunchConfigurationRecord],
) -> list[LaunchConfigurationRecord]:
    """Configurations ordered oldest first; those without a creation time come last."""
    return sorted(configs, key=_created_key)