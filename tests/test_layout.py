import json

import pytest

from sap_landscape_sizing.interface import Caching
from sap_landscape_sizing.interface import CapacitySource
from sap_landscape_sizing.interface import DiskType
from sap_landscape_sizing.interface import SizingPolicy
from sap_landscape_sizing.interface import StorageRole
from sap_landscape_sizing.interface import SystemRole
from sap_landscape_sizing.models.common import size_database
from sap_landscape_sizing.models.layout import application_layout
from sap_landscape_sizing.models.layout import assemble


@pytest.fixture
def db_config():
    sizing = size_database("Standard_M64s", 1024)
    return assemble(SystemRole.db, "Standard_M64s", sizing=sizing)


def test_database_roles_in_order(db_config):
    assert [g.name for g in db_config.storage] == [
        StorageRole.os,
        StorageRole.data,
        StorageRole.log,
        StorageRole.shared,
        StorageRole.sap,
        StorageRole.backup,
    ]


@pytest.mark.parametrize(
    "role", [SystemRole.app, SystemRole.scs, SystemRole.scsha, SystemRole.web]
)
def test_application_roles_in_order(role):
    config = assemble(role, "Standard_E16ds_v5")
    assert [g.name for g in config.storage] == [StorageRole.os, StorageRole.sap]
    assert config.storage[1].lun_start == 0
    assert config.storage[0].lun_start is None
    assert config.compute.vm_size == "Standard_E16ds_v5"
    assert config.compute.accelerated_networking is True
    assert config.capacity_source is None


def test_database_layout(db_config):
    os_disk, data, log, shared, sap, backup = db_config.storage

    assert (os_disk.count, os_disk.size_gb) == (1, 256)
    assert os_disk.caching == Caching.read_write
    assert os_disk.lun_start is None

    assert (data.count, data.size_gb, data.lun_start) == (2, 614, 0)
    assert data.disk_type == DiskType.premium_ssd_v2
    assert data.caching == Caching.none
    assert (data.disk_iops_read_write, data.disk_mbps_read_write) == (3000, 150)

    assert (log.count, log.size_gb, log.lun_start) == (2, 256, 10)
    assert log.disk_type == DiskType.premium_ssd_v2
    assert (log.disk_iops_read_write, log.disk_mbps_read_write) == (3000, 150)

    assert (shared.count, shared.size_gb, shared.lun_start) == (1, 1024, 20)
    assert (sap.count, sap.size_gb, sap.lun_start) == (1, 128, 30)

    assert (backup.count, backup.size_gb, backup.lun_start) == (4, 614, 40)
    assert backup.disk_type == DiskType.premium_zrs
    assert backup.disk_type not in (data.disk_type, log.disk_type)

    for group in db_config.storage:
        assert group.write_accelerator is False
        if group.name not in (StorageRole.data, StorageRole.log):
            assert group.disk_iops_read_write is None
            assert group.disk_mbps_read_write is None
            assert group.caching in (Caching.none, Caching.read_write)

    assert db_config.capacity_source == CapacitySource.memory_formula


def test_serialized_field_order(db_config):
    doc = json.loads(db_config.model_dump_json())
    assert list(doc.keys()) == ["compute", "storage"]
    assert doc["compute"] == {
        "vm_size": "Standard_M64s",
        "accelerated_networking": True,
    }
    assert doc["storage"][0] == {
        "name": "os",
        "fullname": "",
        "count": 1,
        "disk_type": "Premium_LRS",
        "size_gb": 256,
        "caching": "ReadWrite",
        "write_accelerator": False,
    }
    assert list(doc["storage"][1].keys()) == [
        "name",
        "fullname",
        "count",
        "disk_type",
        "size_gb",
        "caching",
        "write_accelerator",
        "lun_start",
        "disk_iops_read_write",
        "disk_mbps_read_write",
    ]
    assert doc["storage"][1]["caching"] == "None"
    assert "capacity_source" not in doc


def test_fullname_left_for_deployment(db_config):
    # Deployment tooling derives disk names itself, the key is always emitted
    for config in (db_config, application_layout("Standard_E16ds_v5")):
        doc = json.loads(config.model_dump_json())
        assert [disk["fullname"] for disk in doc["storage"]] == [""] * len(
            config.storage
        )


def test_policy_shapes_layout():
    policy = SizingPolicy(
        os_size_gb=128,
        sap_size_gb=64,
        accelerated_networking=False,
        volume_disk_type=DiskType.premium_ssd,
    )
    sizing = size_database("Standard_E32ds_v5", 256, policy=policy)
    config = assemble(SystemRole.db, "Standard_E32ds_v5", sizing=sizing, policy=policy)

    assert config.compute.accelerated_networking is False
    assert config.disk_group(StorageRole.os).size_gb == 128
    assert config.disk_group(StorageRole.sap).size_gb == 64
    # Premium SSD v1 has no provisioned performance
    data = config.disk_group(StorageRole.data)
    assert data.disk_type == DiskType.premium_ssd
    assert data.disk_iops_read_write is None

    app = application_layout("Standard_E4ds_v5", policy=policy)
    assert app.storage[0].size_gb == 128


def test_database_requires_sizing():
    with pytest.raises(ValueError):
        assemble(SystemRole.db, "Standard_M64s")
