# fleetconfig

`fleetconfig` decides what to do with the scaling configuration behind a fleet of worker nodes. It does four things:

- It compares the launch configuration or launch template you want with the one that is deployed.
- It prunes old launch configurations and old template versions.
- It works out which running instances must be rotated.
- It decides whether the scaling group itself needs updating.

The package contains no cloud SDK. A client object that you supply does the describing, creating and deleting. That object can wrap a real API client, or it can be an in-memory fake in tests.

## Install

```
pip install fleetconfig
pip install "fleetconfig[test]"   # adds pytest for the test suite
```

## Modules

### `fleetconfig.models`

Plain data records:

- `ScalingGroup`, `ScalingInstance`, `Tag` and `TemplateSpec`
- `LaunchConfigurationRecord`, `LaunchTemplateRecord`, `TemplateVersion` and `TemplateData`
- `NodeVolume`, `PlacementSpec`, `MetadataOptions`, `BlockDevice` and `LicenseConfiguration`
- the `ReconcileState` enum

It also has two helpers:

- `scaling_config_name(group)` returns the name of the launch configuration, launch template or mixed-instances template that a group uses, or `""` if it uses none.
- `block_device_from_volume(volume)` turns a `NodeVolume` into a `BlockDevice`. Unset settings are left out. `delete_on_termination` defaults to `True`.

### `fleetconfig.configuration`

- The request types `CreateConfigurationInput`, `DeleteConfigurationInput` and `DiscoverConfigurationInput`.
- The abstract `ScalingConfiguration` interface, with these methods:
  - `name()`
  - `resource()`
  - `create()`
  - `delete()`
  - `discover()`
  - `drifted()`
  - `rotation_needed()`
  - `provisioned()`
- `AwsError`, which carries a `code` and a `message`.
- `as_launch_template(resource)` and `as_launch_configuration(resource)`. Each returns the resource if it has the right type, and an empty record otherwise.

### `fleetconfig.launchconfig`

`LaunchConfiguration(client, owner_name="", target_resource=None, resource_list=None)` works with launch configurations. The client must provide these methods:

- `describe_launch_configurations()`
- `create_launch_configuration(record)`
- `delete_launch_configuration(name)`

The module also has `prefixed_configurations()`, `sort_devices()` and `sort_configurations()`. `sort_configurations()` puts the oldest first, and records with no creation time go last.

### `fleetconfig.launchtemplate`

`LaunchTemplate(client, owner_name="", target_resource=None, target_versions=None, latest_version=None, resource_list=None)` works with launch templates and their versions. The client must provide these methods:

- `describe_launch_templates()`
- `describe_launch_template_versions(name)`
- `create_launch_template(name, data)`
- `create_launch_template_version(name, data)`
- `update_launch_template_default_version(name, version)`
- `delete_launch_template(name)`
- `delete_launch_template_versions(name, versions)`

The module also has these helpers:

- `placement()`
- `placement_request()`
- `sort_versions()`
- `sort_license_specifications()`

### `fleetconfig.state`

- `discover_state(current, deleting, provisioned, group_status=None)` picks the state at the start of a reconcile. Any state other than `ReconcileState.INIT` is returned unchanged.
- `is_ready(state)` is true only for `ReconcileState.MODIFIED`.

### `fleetconfig.rollout`

- `drifted_instances(group, instances, latest_version)` returns the ids of instances that are not on the group's current configuration.
- `max_unavailable(value, total)` reads an integer or a percentage string. Percentages are rounded up. The result is never zero.
- `tags_update_needed(group, added, removed)`.
- `scaling_group_update_needed(group, config_name, uses_launch_template, min_size, max_size, subnets, desired_policy)`.
- `managed_policy_changes(desired, attached)` returns `(attach, detach)`.

## Example

```python
from fleetconfig.configuration import CreateConfigurationInput, DiscoverConfigurationInput
from fleetconfig.launchconfig import LaunchConfiguration
from fleetconfig.models import ScalingGroup

group = ScalingGroup(name="my-asg", launch_configuration_name="my-launch-config")
config = LaunchConfiguration(client, owner_name="my-group")
config.discover(DiscoverConfigurationInput(scaling_group=group))

wanted = CreateConfigurationInput(
    name="my-launch-config-2", image_id="ami-12345678", instance_type="m5.large"
)
if config.drifted(wanted):
    config.create(wanted)
```

To prune old launch configurations, call `delete`. It keeps the newest ones under a prefix, two unless `retain_versions` says otherwise, and it never deletes the named configuration unless `delete_all` is set:

```python
from fleetconfig.configuration import DeleteConfigurationInput

config.delete(DeleteConfigurationInput(name="prefix-current", prefix="prefix-", retain_versions=2))
```

## Errors

- Describe failures in `discover()` are raised as `RuntimeError`. The client's error is the cause.
- Delete failures of launch configurations are also raised as `RuntimeError`, with one exception. An `AwsError` whose message says the launch configuration name was not found is skipped.
- When a whole launch template is deleted, an `AwsError` with the code `InvalidLaunchTemplateName.NotFoundException` is ignored.

## What it does not do

The package does not talk to any cloud API itself, and it has no controller loop, command-line tool or storage. It only makes decisions and calls the client you pass in. Applying the resulting updates is up to the caller. That means updating scaling groups, draining and terminating instances, and attaching policies.

## Tests

```
pytest
```