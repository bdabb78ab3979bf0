"""Decisions taken while updating and upgrading a scaling group."""

from __future__ import annotations

from typing import Any, Iterable

from .models import ScalingGroup, ScalingInstance, Tag

_TEMPLATE_ID_KEY = "LaunchTemplateId"


def _same(left: str | None, right: str | None) -> bool:
    return (left or "").casefold() == (right or "").casefold()


def drifted_instances(
    group: ScalingGroup,
    instances: Iterable[ScalingInstance],
    latest_version: int | None,
) -> list[str]:
    """Ids of instances not running the group's current configuration.

    latest_version is the latest version number of the launch template in use;
    it is ignored for groups that use a launch configuration.
    """
    active_version = str(latest_version or 0)
    drifted: list[str] = []

    for instance in instances:
        if group.launch_configuration_name is not None:
            if instance.launch_configuration_name is None:
                drifted.append(instance.instance_id)
                continue
            if not _same(instance.launch_configuration_name, group.launch_configuration_name):
                drifted.append(instance.instance_id)

        for active in (group.launch_template, group.mixed_instances_template):
            if active is None:
                continue
            spec = instance.launch_template
            if spec is None:
                drifted.append(instance.instance_id)
                break
            if not _same(spec.name, active.name) or not _same(spec.version, active_version):
                drifted.append(instance.instance_id)

    return drifted


def max_unavailable(value: int | str, total: int) -> int:
    """How many instances may be unavailable at once during a rolling update.

    A string is read as a percentage of total and rounded up; an unreadable
    string counts as zero. The result is never zero: zero becomes one.
    """
    if isinstance(value, str):
        text = value.strip()
        count = 0
        if text.endswith("%"):
            try:
                percent = int(text[:-1])
            except ValueError:
                percent = 0
            count = -(-percent * total // 100)
    else:
        count = int(value)
    return count or 1


def tags_update_needed(
    group: ScalingGroup, added: Iterable[Tag], removed: Iterable[Any]
) -> bool:
    """Whether tags must be removed from the group or any desired tag is missing."""
    if list(removed):
        return True
    existing = {(tag.key, tag.value) for tag in group.tags}
    return any((tag.key, tag.value) not in existing for tag in added)


def _without_template_id(value: Any) -> Any:
    if isinstance(value, dict):
        return {
            key: _without_template_id(item)
            for key, item in value.items()
            if key != _TEMPLATE_ID_KEY
        }
    if isinstance(value, list):
        return [_without_template_id(item) for item in value]
    return value


def _subnets_equal(left: Iterable[str], right: Iterable[str]) -> bool:
    return sorted(s.casefold() for s in left) == sorted(s.casefold() for s in right)


def scaling_group_update_needed(
    group: ScalingGroup,
    config_name: str,
    uses_launch_template: bool,
    min_size: int,
    max_size: int,
    subnets: Iterable[str],
    desired_policy: dict[str, Any] | None,
) -> bool:
    """Whether the scaling group differs from the desired settings."""
    name = ""
    if group.launch_configuration_name is not None:
        name = group.launch_configuration_name
        if uses_launch_template or desired_policy is not None:
            return True
    elif group.launch_template is not None:
        name = group.launch_template.name or ""
        if not uses_launch_template or desired_policy is not None:
            return True
    elif group.mixed_instances_policy is not None or group.mixed_instances_template is not None:
        if group.mixed_instances_template is not None:
            name = group.mixed_instances_template.name or ""
        if desired_policy is None:
            return True
        if _without_template_id(group.mixed_instances_policy) != _without_template_id(
            desired_policy
        ):
            return True

    if not _same(config_name, name):
        return True
    if min_size != group.min_size or max_size != group.max_size:
        return True
    return not _subnets_equal(subnets, group.vpc_zone_identifier.split(","))


def managed_policy_changes(
    desired: Iterable[str], attached: Iterable[str]
) -> tuple[list[str], list[str]]:
    """Policies to attach to and detach from a role, as (attach, detach)."""
    wanted = list(desired)
    present = list(attached)
    if not present:
        return wanted, []
    attach = [policy for policy in wanted if policy not in present]
    detach = [policy for policy in present if policy not in wanted]
    return attach, detach