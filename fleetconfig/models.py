"""Records describing scaling groups, launch configurations and launch templates."""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any


class ReconcileState(str, enum.Enum):
    """Lifecycle state of an instance group during reconciliation."""

    INIT = "Init"
    INIT_CREATE = "InitCreate"
    INIT_UPDATE = "InitUpdate"
    INIT_DELETE = "InitDelete"
    INIT_UPGRADE = "InitUpgrade"
    MODIFYING = "Modifying"
    MODIFIED = "Modified"
    DELETING = "Deleting"
    DELETED = "Deleted"
    ERROR = "Error"


@dataclass(frozen=True)
class NodeVolume:
    """A volume requested for every node of an instance group."""

    name: str
    volume_type: str = ""
    size: int = 0
    iops: int = 0
    throughput: int = 0
    snapshot_id: str = ""
    delete_on_termination: bool | None = None
    encrypted: bool | None = None


@dataclass(frozen=True)
class PlacementSpec:
    """Placement settings for launched instances."""

    availability_zone: str = ""
    host_resource_group_arn: str = ""
    tenancy: str = ""


@dataclass(frozen=True)
class MetadataOptions:
    """Instance metadata service settings."""

    http_endpoint: str = ""
    http_put_hop_limit: int = 0
    http_tokens: str = ""


@dataclass(frozen=True)
class BlockDevice:
    """A block device mapping as stored on a launch configuration or template."""

    device_name: str
    volume_type: str | None = None
    volume_size: int | None = None
    iops: int | None = None
    throughput: int | None = None
    snapshot_id: str | None = None
    delete_on_termination: bool | None = None
    encrypted: bool | None = None


@dataclass(frozen=True)
class TemplateSpec:
    """Reference to a launch template and one of its versions."""

    name: str | None = None
    version: str | None = None
    template_id: str | None = None


@dataclass(frozen=True)
class ScalingInstance:
    """An instance that belongs to a scaling group or its warm pool."""

    instance_id: str
    launch_configuration_name: str | None = None
    launch_template: TemplateSpec | None = None


@dataclass(frozen=True)
class Tag:
    """A key/value tag of a scaling group."""

    key: str
    value: str = ""


@dataclass
class ScalingGroup:
    """The observed state of an auto scaling group."""

    name: str = ""
    status: str | None = None
    launch_configuration_name: str | None = None
    launch_template: TemplateSpec | None = None
    mixed_instances_template: TemplateSpec | None = None
    mixed_instances_policy: dict[str, Any] | None = None
    min_size: int = 0
    max_size: int = 0
    desired_capacity: int = 0
    vpc_zone_identifier: str = ""
    instances: list[ScalingInstance] = field(default_factory=list)
    tags: list[Tag] = field(default_factory=list)
    warm_pool_status: str | None = None


@dataclass
class LaunchConfigurationRecord:
    """An existing launch configuration."""

    name: str | None = None
    image_id: str | None = None
    instance_type: str | None = None
    iam_instance_profile: str | None = None
    security_groups: list[str] = field(default_factory=list)
    spot_price: str | None = None
    key_name: str | None = None
    user_data: str | None = None
    placement_tenancy: str | None = None
    block_devices: list[BlockDevice] = field(default_factory=list)
    metadata_options: MetadataOptions | None = None
    created_time: datetime | None = None


@dataclass
class LaunchTemplateRecord:
    """An existing launch template."""

    name: str | None = None
    latest_version_number: int | None = None
    default_version_number: int | None = None


@dataclass(frozen=True)
class LicenseConfiguration:
    """A license configuration attached to a launch template."""

    arn: str | None = None


@dataclass
class TemplateData:
    """The launch data carried by one launch template version."""

    image_id: str | None = None
    instance_type: str | None = None
    iam_instance_profile_arn: str | None = None
    security_group_ids: list[str] = field(default_factory=list)
    key_name: str | None = None
    user_data: str | None = None
    block_devices: list[BlockDevice] = field(default_factory=list)
    license_specifications: list[LicenseConfiguration] = field(default_factory=list)
    placement: PlacementSpec | None = None
    metadata_options: MetadataOptions | None = None


@dataclass
class TemplateVersion:
    """One version of a launch template."""

    template_name: str | None = None
    version_number: int | None = None
    create_time: datetime | None = None
    data: TemplateData | None = None


def scaling_config_name(group: ScalingGroup) -> str:
    """Name of the launch configuration or template a scaling group uses, or ''."""
    if group.launch_configuration_name is not None:
        return group.launch_configuration_name
    if group.launch_template is not None:
        return group.launch_template.name or ""
    if group.mixed_instances_template is not None:
        return group.mixed_instances_template.name or ""
    return ""


def block_device_from_volume(volume: NodeVolume) -> BlockDevice:
    """Build the block device mapping for a requested volume.

    Unset numeric and text settings are left out; volumes are deleted on
    termination unless the volume says otherwise.
    """
    delete = True if volume.delete_on_termination is None else volume.delete_on_termination
    return BlockDevice(
        device_name=volume.name,
        volume_type=volume.volume_type or None,
        volume_size=volume.size or None,
        iops=volume.iops or None,
        throughput=volume.throughput or None,
        snapshot_id=volume.snapshot_id or None,
        delete_on_termination=delete,
        encrypted=volume.encrypted,
    )