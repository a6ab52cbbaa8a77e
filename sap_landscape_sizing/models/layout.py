from typing import List
from typing import Optional

from sap_landscape_sizing.interface import Caching
from sap_landscape_sizing.interface import ComputeProfile
from sap_landscape_sizing.interface import DatabaseSizing
from sap_landscape_sizing.interface import default_policy
from sap_landscape_sizing.interface import DiskGroup
from sap_landscape_sizing.interface import SizingPolicy
from sap_landscape_sizing.interface import StorageRole
from sap_landscape_sizing.interface import SystemConfiguration
from sap_landscape_sizing.interface import SystemRole
from sap_landscape_sizing.interface import VolumeLayout


def _compute(sku: str, policy: SizingPolicy) -> ComputeProfile:
    return ComputeProfile(
        vm_size=sku, accelerated_networking=policy.accelerated_networking
    )


def _os_disk(policy: SizingPolicy) -> DiskGroup:
    return DiskGroup(
        name=StorageRole.os,
        count=1,
        disk_type=policy.os_disk_type,
        size_gb=policy.os_size_gb,
        caching=Caching.read_write,
    )


def _sap_disk(policy: SizingPolicy, lun_start: int) -> DiskGroup:
    return DiskGroup(
        name=StorageRole.sap,
        count=1,
        disk_type=policy.sap_disk_type,
        size_gb=policy.sap_size_gb,
        lun_start=lun_start,
    )


def _volume(
    role: StorageRole, layout: VolumeLayout, lun_start: int, policy: SizingPolicy
) -> DiskGroup:
    group = DiskGroup(
        name=role,
        count=layout.count,
        disk_type=policy.volume_disk_type,
        size_gb=layout.size_gb,
        lun_start=lun_start,
    )
    if group.disk_type.performance_configurable:
        group.disk_iops_read_write = layout.iops
        group.disk_mbps_read_write = layout.mbps
    return group


def database_layout(
    sku: str, sizing: DatabaseSizing, policy: SizingPolicy = default_policy
) -> SystemConfiguration:
    storage: List[DiskGroup] = [
        _os_disk(policy),
        _volume(StorageRole.data, sizing.data, policy.data_lun_start, policy),
        _volume(StorageRole.log, sizing.log, policy.log_lun_start, policy),
        DiskGroup(
            name=StorageRole.shared,
            count=1,
            disk_type=policy.shared_disk_type,
            size_gb=sizing.shared_size_gb,
            lun_start=policy.shared_lun_start,
        ),
        _sap_disk(policy, policy.sap_lun_start),
        DiskGroup(
            name=StorageRole.backup,
            count=sizing.backup.count,
            disk_type=policy.backup_disk_type,
            size_gb=sizing.backup.size_gb,
            lun_start=policy.backup_lun_start,
        ),
    ]
    return SystemConfiguration(
        compute=_compute(sku, policy),
        storage=storage,
        capacity_source=sizing.capacity.source,
    )


def application_layout(
    sku: str, policy: SizingPolicy = default_policy
) -> SystemConfiguration:
    """OS disk plus binaries, shared by every tier that is not the database"""
    return SystemConfiguration(
        compute=_compute(sku, policy),
        storage=[_os_disk(policy), _sap_disk(policy, lun_start=0)],
    )


def assemble(
    role: SystemRole,
    sku: str,
    sizing: Optional[DatabaseSizing] = None,
    policy: SizingPolicy = default_policy,
) -> SystemConfiguration:
    if role == SystemRole.db:
        if sizing is None:
            raise ValueError(f"Database server {sku} needs a DatabaseSizing")
        return database_layout(sku, sizing, policy=policy)
    return application_layout(sku, policy=policy)
