import dataclasses

import pytest

from fleetconfig.models import (
    BlockDevice,
    NodeVolume,
    ReconcileState,
    ScalingGroup,
    ScalingInstance,
    TemplateSpec,
    block_device_from_volume,
    scaling_config_name,
)


def test_scaling_config_name_launch_configuration():
    group = ScalingGroup(name="my-asg", launch_configuration_name="my-launch-config")
    assert scaling_config_name(group) == "my-launch-config"


def test_scaling_config_name_launch_template():
    group = ScalingGroup(
        name="my-asg", launch_template=TemplateSpec(name="my-launch-template")
    )
    assert scaling_config_name(group) == "my-launch-template"


def test_scaling_config_name_mixed_instances():
    group = ScalingGroup(
        name="my-asg", mixed_instances_template=TemplateSpec(name="some-launch-template")
    )
    assert scaling_config_name(group) == "some-launch-template"


def test_scaling_config_name_prefers_launch_configuration():
    group = ScalingGroup(
        launch_configuration_name="some-launch-config",
        launch_template=TemplateSpec(name="some-launch-template"),
    )
    assert scaling_config_name(group) == "some-launch-config"


def test_scaling_config_name_empty_group():
    assert scaling_config_name(ScalingGroup()) == ""


def test_block_device_carries_volume_settings():
    volume = NodeVolume(
        name="/dev/xvda", volume_type="gp2", size=40, iops=100, throughput=200
    )
    device = block_device_from_volume(volume)
    assert device.device_name == "/dev/xvda"
    assert device.volume_type == "gp2"
    assert device.volume_size == 40
    assert device.iops == 100
    assert device.throughput == 200


def test_block_device_leaves_out_unset_values():
    device = block_device_from_volume(NodeVolume(name="/dev/xvda1", volume_type="gp2", size=30))
    assert device.iops is None
    assert device.throughput is None
    assert device.snapshot_id is None


def test_block_device_deletes_on_termination_by_default():
    device = block_device_from_volume(NodeVolume(name="/dev/xvda"))
    assert device.delete_on_termination is True


def test_block_device_keeps_explicit_flags():
    volume = NodeVolume(name="/dev/xvdb", delete_on_termination=False, encrypted=True)
    device = block_device_from_volume(volume)
    assert device.delete_on_termination is False
    assert device.encrypted is True


def test_block_devices_from_equal_volumes_collapse_in_a_set():
    volume = NodeVolume(name="/dev/xvda", volume_type="gp2", size=32)
    devices = {block_device_from_volume(volume), block_device_from_volume(volume)}
    assert len(devices) == 1
    (device,) = devices
    assert device.device_name == "/dev/xvda"
    assert device.volume_size == 32


def test_block_device_is_immutable():
    device = BlockDevice(device_name="/dev/xvda")
    with pytest.raises(dataclasses.FrozenInstanceError):
        device.device_name = "/dev/xvdb"
    assert device.device_name == "/dev/xvda"


def test_reconcile_state_round_trips_through_value():
    for state in ReconcileState:
        assert ReconcileState(state.value) is state


def test_scaling_group_lists_are_independent():
    first = ScalingGroup()
    second = ScalingGroup()
    first.instances.append(ScalingInstance(instance_id="i-1234"))
    assert second.instances == []