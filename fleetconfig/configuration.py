"""Requests and the common interface of scaling configurations."""

from __future__ import annotations

import abc
from dataclasses import dataclass, field
from typing import Any

from .models import (
    LaunchConfigurationRecord,
    LaunchTemplateRecord,
    MetadataOptions,
    NodeVolume,
    PlacementSpec,
    ScalingGroup,
)


class AwsError(Exception):
    """An error reported by the cloud API, carrying its error code."""

    def __init__(self, code: str, message: str = "") -> None:
        super().__init__(f"{code}: {message}" if message else code)
        self.code = code
        self.message = message


@dataclass
class CreateConfigurationInput:
    """The desired settings of a launch configuration or template."""

    name: str = ""
    iam_instance_profile_arn: str = ""
    image_id: str = ""
    instance_type: str = ""
    key_name: str = ""
    security_groups: list[str] = field(default_factory=list)
    volumes: list[NodeVolume] = field(default_factory=list)
    user_data: str = ""
    spot_price: str = ""
    license_specifications: list[str] = field(default_factory=list)
    placement: PlacementSpec | None = None
    metadata_options: MetadataOptions | None = None


@dataclass
class DeleteConfigurationInput:
    """What to remove: old versions by retention, or everything under a prefix."""

    name: str = ""
    prefix: str = ""
    delete_all: bool = False
    retain_versions: int = 0


@dataclass
class DiscoverConfigurationInput:
    """How to find the configuration in use: by explicit name or by scaling group."""

    scaling_group: ScalingGroup | None = None
    target_config_name: str = ""


class ScalingConfiguration(abc.ABC):
    """A launch configuration or launch template backing a scaling group."""

    @abc.abstractmethod
    def name(self) -> str:
        """Name of the discovered configuration, or '' when none was found."""

    @abc.abstractmethod
    def resource(self) -> Any:
        """The discovered configuration record, or None."""

    @abc.abstractmethod
    def create(self, request: CreateConfigurationInput) -> None:
        """Create the configuration, or a new version of it."""

    @abc.abstractmethod
    def delete(self, request: DeleteConfigurationInput) -> None:
        """Remove stale configurations or versions."""

    @abc.abstractmethod
    def discover(self, request: DiscoverConfigurationInput) -> None:
        """Look up existing configurations and the one in use."""

    @abc.abstractmethod
    def drifted(self, request: CreateConfigurationInput) -> bool:
        """Whether the existing configuration differs from the desired one."""

    @abc.abstractmethod
    def rotation_needed(self, request: DiscoverConfigurationInput) -> bool:
        """Whether any instance runs from something other than the current configuration."""

    @abc.abstractmethod
    def provisioned(self) -> bool:
        """Whether the configuration exists."""


def as_launch_template(resource: Any) -> LaunchTemplateRecord:
    """Return resource if it is a launch template, otherwise an empty one."""
    if isinstance(resource, LaunchTemplateRecord):
        return resource
    return LaunchTemplateRecord()


def as_launch_configuration(resource: Any) -> LaunchConfigurationRecord:
    """Return resource if it is a launch configuration, otherwise an empty one."""
    if isinstance(resource, LaunchConfigurationRecord):
        return resource
    return LaunchConfigurationRecord()