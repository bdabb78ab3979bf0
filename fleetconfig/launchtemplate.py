"""Launch templates as the scaling configuration of a scaling group."""

from __future__ import annotations

import logging
from typing import Iterable, Protocol

from .configuration import (
    AwsError,
    CreateConfigurationInput,
    DeleteConfigurationInput,
    DiscoverConfigurationInput,
    ScalingConfiguration,
)
from .launchconfig import DEFAULT_CONFIG_VERSION_RETENTION
from .models import (
    BlockDevice,
    LaunchTemplateRecord,
    LicenseConfiguration,
    NodeVolume,
    PlacementSpec,
    TemplateData,
    TemplateVersion,
    block_device_from_volume,
    scaling_config_name,
)

log = logging.getLogger(__name__)

DEFAULT_TEMPLATE_VERSION_RETENTION = 10
LAUNCH_TEMPLATE_NAME_DOES_NOT_EXIST = "InvalidLaunchTemplateName.NotFoundException"


class _Ec2Client(Protocol):
    def describe_launch_templates(self) -> list[LaunchTemplateRecord]: ...

    def describe_launch_template_versions(self, name: str) -> list[TemplateVersion]: ...

    def create_launch_template(self, name: str, data: TemplateData) -> None: ...

    def create_launch_template_version(self, name: str, data: TemplateData) -> TemplateVersion: ...

    def update_launch_template_default_version(
        self, name: str, version: str
    ) -> LaunchTemplateRecord: ...

    def delete_launch_template(self, name: str) -> None: ...

    def delete_launch_template_versions(self, name: str, versions: list[str]) -> None: ...


class LaunchTemplate(ScalingConfiguration):
    """A launch template, discovered and managed through an EC2 client."""

    def __init__(
        self,
        client: _Ec2Client,
        owner_name: str = "",
        target_resource: LaunchTemplateRecord | None = None,
        target_versions: list[TemplateVersion] | None = None,
        latest_version: TemplateVersion | None = None,
        resource_list: list[LaunchTemplateRecord] | None = None,
    ) -> None:
        self.client = client
        self.owner_name = owner_name
        self.target_resource = target_resource
        self.target_versions: list[TemplateVersion] = list(target_versions or [])
        self.latest_version = latest_version
        self.resource_list: list[LaunchTemplateRecord] = list(resource_list or [])

    def discover(self, request: DiscoverConfigurationInput) -> None:
        """Load all launch templates, pick the target and load its versions."""
        try:
            templates = list(self.client.describe_launch_templates())
        except Exception as err:
            raise RuntimeError("failed to describe autoscaling launch templates") from err
        self.resource_list = templates

        if request.target_config_name:
            target_name = request.target_config_name
        elif request.scaling_group is not None:
            target_name = scaling_config_name(request.scaling_group)
        else:
            return

        wanted = target_name.casefold()
        for template in templates:
            name = template.name or ""
            if name.casefold() != wanted:
                continue
            self.target_resource = template
            latest = template.latest_version_number or 0
            try:
                versions = list(self.client.describe_launch_template_versions(name))
            except Exception as err:
                log.info(
                    "failed to describe launch template versions instancegroup=%s error=%s",
                    self.owner_name,
                    err,
                )
                versions = []
            self.target_versions = versions
            self.latest_version = self._version(latest)

    def create(self, request: CreateConfigurationInput) -> None:
        """Create the template, or a new default version of it when it has drifted."""
        data = TemplateData(
            image_id=request.image_id,
            instance_type=request.instance_type,
            iam_instance_profile_arn=request.iam_instance_profile_arn,
            security_group_ids=list(request.security_groups),
            key_name=request.key_name,
            user_data=request.user_data,
            block_devices=self._block_devices(request.volumes),
            license_specifications=_licenses(request.license_specifications),
            placement=placement(request.placement),
            metadata_options=request.metadata_options,
        )

        if not self.provisioned():
            self.client.create_launch_template(request.name, data)
        elif self.drifted(request):
            created = self.client.create_launch_template_version(request.name, data)
            self.target_versions.append(created)
            number = created.version_number or 0
            modified = self.client.update_launch_template_default_version(
                request.name, str(number)
            )
            self.target_resource = modified
            self.latest_version = self._version(number)

    def delete(self, request: DeleteConfigurationInput) -> None:
        """Delete the whole template, or its oldest versions beyond the retention."""
        retain = request.retain_versions or DEFAULT_CONFIG_VERSION_RETENTION

        if request.delete_all:
            try:
                self.client.delete_launch_template(self.name())
            except AwsError as err:
                if err.code != LAUNCH_TEMPLATE_NAME_DOES_NOT_EXIST:
                    raise
            except Exception as err:
                log.info(
                    "ignoring launch template deletion error instancegroup=%s error=%s",
                    self.owner_name,
                    err,
                )
            return

        ordered = sort_versions(self.target_versions)
        deletable = ordered[: len(ordered) - retain] if len(ordered) > retain else []
        versions = [str(version.version_number or 0) for version in deletable]
        if not versions:
            return

        log.info(
            "deleting launch template versions instancegroup=%s versions=%s",
            self.owner_name,
            versions,
        )
        try:
            self.client.delete_launch_template_versions(request.name, versions)
        except Exception as err:
            raise RuntimeError("failed to delete launch template versions") from err

    def drifted(self, request: CreateConfigurationInput) -> bool:
        """Whether the latest template version differs from the request."""
        latest = self.latest_version
        if latest is None:
            log.info(
                "detected drift reason=%s instancegroup=%s",
                "launchtemplate does not exist",
                self.owner_name,
            )
            return True

        data = latest.data or TemplateData()
        checks = [
            ("image-id has changed", data.image_id or "", request.image_id),
            ("instance-type has changed", data.instance_type or "", request.instance_type),
            (
                "instance-profile has changed",
                data.iam_instance_profile_arn or "",
                request.iam_instance_profile_arn,
            ),
            (
                "security-groups has changed",
                sorted(data.security_group_ids),
                sorted(request.security_groups),
            ),
            ("key-pair has changed", data.key_name or "", request.key_name),
            ("user-data has changed", data.user_data or "", request.user_data),
            (
                "volumes have changed",
                _sort_devices(data.block_devices),
                self._block_devices(request.volumes),
            ),
            (
                "LicenseSpecifications has changed",
                sort_license_specifications(data.license_specifications),
                sort_license_specifications(_licenses(request.license_specifications)),
            ),
            (
                "placement configuration has changed",
                data.placement if data.placement is not None else PlacementSpec(),
                placement(request.placement),
            ),
            (
                "metadata options have changed",
                data.metadata_options,
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

    def resource(self) -> LaunchTemplateRecord | None:
        return self.target_resource

    def name(self) -> str:
        if self.target_resource is None:
            return ""
        return self.target_resource.name or ""

    def rotation_needed(self, request: DiscoverConfigurationInput) -> bool:
        """Whether any instance runs from another template or an older version."""
        group = request.scaling_group
        if group is None or not group.instances:
            return False
        if self.latest_version is None:
            return True

        latest = str(self.latest_version.version_number or 0)
        config_name = self.name()
        for instance in group.instances:
            spec = instance.launch_template
            if spec is None:
                return True
            if (spec.name or "") != config_name:
                return True
            if (spec.version or "") != latest:
                return True
        return False

    def _version(self, number: int) -> TemplateVersion | None:
        return next(
            (v for v in self.target_versions if (v.version_number or 0) == number),
            None,
        )

    @staticmethod
    def _block_devices(volumes: Iterable[NodeVolume]) -> list[BlockDevice]:
        return _sort_devices(block_device_from_volume(volume) for volume in volumes)


def _licenses(arns: Iterable[str]) -> list[LicenseConfiguration]:
    return [LicenseConfiguration(arn=arn) for arn in arns]


def _sort_devices(devices: Iterable[BlockDevice]) -> list[BlockDevice]:
    return sorted(devices, key=lambda device: device.device_name or "")


def placement(spec: PlacementSpec | None) -> PlacementSpec:
    """The placement a template version carries for spec; empty when spec is None."""
    if spec is None:
        return PlacementSpec()
    return PlacementSpec(
        availability_zone=spec.availability_zone,
        host_resource_group_arn=spec.host_resource_group_arn,
        tenancy=spec.tenancy,
    )


def placement_request(spec: PlacementSpec | None) -> dict[str, str]:
    """The placement fields to send when creating a template; empty when spec is None."""
    if spec is None:
        return {}
    fields = {
        "AvailabilityZone": spec.availability_zone,
        "HostResourceGroupArn": spec.host_resource_group_arn,
        "Tenancy": spec.tenancy,
    }
    return {key: value for key, value in fields.items() if value}


def sort_versions(versions: Iterable[TemplateVersion]) -> list[TemplateVersion]:
    """Versions ordered oldest first; those without a creation time come last."""
    return sorted(
        versions,
        key=lambda v: (True, 0.0) if v.create_time is None else (False, v.create_time.timestamp()),
    )


def sort_license_specifications(
    licenses: Iterable[LicenseConfiguration],
) -> list[LicenseConfiguration]:
    """License configurations ordered by ARN."""
    return sorted(licenses, key=lambda lic: lic.arn or "")