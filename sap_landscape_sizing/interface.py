from __future__ import annotations

from enum import Enum
from typing import Dict
from typing import List
from typing import Optional

from pydantic import BaseModel
from pydantic import ConfigDict
from pydantic import Field


class ExcludeNoneModel(BaseModel):
    """Drops unset optional fields (e.g. lun_start) from serialized output

    The deployment tooling treats a present-but-null key differently from an
    absent key, so optional fields are left out entirely when not populated.
    """

    def model_dump(self, *args, **kwargs):
        if "exclude_none" not in kwargs:
            kwargs["exclude_none"] = True
        return super().model_dump(*args, **kwargs)

    def model_dump_json(self, *args, **kwargs):
        if "exclude_none" not in kwargs:
            kwargs["exclude_none"] = True
        return super().model_dump_json(*args, **kwargs)


###############################################################################
#              Models (structs) for how we describe VM shapes                 #
###############################################################################


class VMMemoryFact(BaseModel):
    sku: str
    memory_gib: int
    model_config = ConfigDict(frozen=True)


class SystemRole(str, Enum):
    """The tier of an SAP system a VM serves

    Each role is a top level bucket of the generated catalog.
    """

    def __str__(self):
        return str(self.value)

    # Database (HANA) server
    db = "db"
    # Application server
    app = "app"
    # Central services (ASCS)
    scs = "scs"
    # Central services, highly available pair
    scsha = "scsha"
    # Web dispatcher
    web = "web"


class StorageRole(str, Enum):
    """The purpose of a group of attached disks

    Names are used verbatim as the ``name`` field of a storage entry and as the
    role token of storage override keys, so they must never contain ``_``.
    """

    def __str__(self):
        return str(self.value)

    os = "os"
    data = "data"
    log = "log"
    shared = "shared"
    # /usr/sap application binaries
    sap = "sap"
    backup = "backup"


class DiskType(str, Enum):
    """Azure managed disk SKUs we know how to lay out"""

    def __str__(self):
        return str(self.value)

    premium_ssd = "Premium_LRS"
    # The only type with independently provisioned IOPS and throughput
    premium_ssd_v2 = "PremiumV2_LRS"
    premium_zrs = "Premium_ZRS"
    standard_hdd = "Standard_LRS"

    @property
    def performance_configurable(self) -> bool:
        return self is DiskType.premium_ssd_v2


class Caching(str, Enum):
    def __str__(self):
        return str(self.value)

    none = "None"
    read_only = "ReadOnly"
    read_write = "ReadWrite"


class CapacitySource(str, Enum):
    """Where the total data and log capacity of a system came from"""

    def __str__(self):
        return str(self.value)

    # Disk counts and sizes published in the reference sizing catalog
    official_catalog = "official-catalog"
    # Derived from the VM memory with the sizing formula
    memory_formula = "memory-formula"


###############################################################################
#              Models (structs) for sizing decisions                          #
###############################################################################


class PerformanceTarget(BaseModel):
    """Aggregate IOPS and throughput a HANA volume must deliver"""

    data_mbps: int
    data_iops: int
    log_mbps: int
    log_iops: int
    model_config = ConfigDict(frozen=True)


class CapacityPlan(BaseModel):
    total_data_gib: float
    total_log_gib: float
    source: CapacitySource
    model_config = ConfigDict(frozen=True)


class VolumeLayout(BaseModel):
    """How one striped volume is split across identical disks"""

    count: int
    size_gb: int
    iops: Optional[int] = None
    mbps: Optional[int] = None
    model_config = ConfigDict(frozen=True)


class DatabaseSizing(BaseModel):
    """Everything the layout assembler needs for a database server"""

    memory_gib: int
    capacity: CapacityPlan
    target: PerformanceTarget
    data: VolumeLayout
    log: VolumeLayout
    shared_size_gb: int
    backup: VolumeLayout
    model_config = ConfigDict(frozen=True)


###############################################################################
#              Models (structs) for the generated configuration               #
###############################################################################


class DiskGroup(ExcludeNoneModel):
    """A set of identical disks serving one storage role

    Field order is the serialization contract with the deployment tooling.
    """

    name: StorageRole
    fullname: str = ""
    count: int = Field(ge=1)
    disk_type: DiskType
    size_gb: int
    caching: Caching = Caching.none
    write_accelerator: bool = False
    lun_start: Optional[int] = None
    disk_iops_read_write: Optional[int] = None
    disk_mbps_read_write: Optional[int] = None
    model_config = ConfigDict(validate_assignment=True)


class ComputeProfile(ExcludeNoneModel):
    vm_size: str
    accelerated_networking: bool = True
    model_config = ConfigDict(validate_assignment=True)


class SystemConfiguration(ExcludeNoneModel):
    compute: ComputeProfile
    storage: List[DiskGroup]
    # Provenance of the data/log capacity, kept for auditing but never written
    # to the generated artifact
    capacity_source: Optional[CapacitySource] = Field(default=None, exclude=True)

    def disk_group(self, role: StorageRole) -> Optional[DiskGroup]:
        for group in self.storage:
            if group.name == role:
                return group
        return None


class MasterCatalog(ExcludeNoneModel):
    # Declared in key order so the serialized document is sorted at both levels
    app: Dict[str, SystemConfiguration] = {}
    db: Dict[str, SystemConfiguration] = {}
    scs: Dict[str, SystemConfiguration] = {}
    scsha: Dict[str, SystemConfiguration] = {}
    web: Dict[str, SystemConfiguration] = {}

    def bucket(self, role: SystemRole) -> Dict[str, SystemConfiguration]:
        return getattr(self, role.value)


###############################################################################
#              Models (structs) for inputs                                    #
###############################################################################


class CandidateSystem(BaseModel):
    """One SAP system to size: a moniker plus the SKU chosen for each tier"""

    moniker: str
    environment: str = ""
    skus: Dict[SystemRole, str]


class CatalogDisk(BaseModel):
    name: str
    count: int = Field(ge=0)
    size_gb: int = Field(ge=0)
    # The reference catalog carries many more fields we do not need
    model_config = ConfigDict(extra="ignore")


class CatalogEntry(BaseModel):
    role: Optional[str] = None
    storage: List[CatalogDisk] = []
    model_config = ConfigDict(extra="ignore")

    def disk(self, name: str) -> Optional[CatalogDisk]:
        for disk in self.storage:
            if disk.name == name:
                return disk
        return None


class OverrideSection(str, Enum):
    def __str__(self):
        return str(self.value)

    compute = "compute"
    storage = "storage"


class OverrideDirective(BaseModel):
    section: OverrideSection
    storage_role: Optional[StorageRole] = None
    property: str
    raw_value: str
    model_config = ConfigDict(frozen=True)

    @property
    def key(self) -> str:
        if self.storage_role is None:
            return f"{self.section}_{self.property}"
        return f"{self.section}_{self.storage_role}_{self.property}"


###############################################################################
#              Tunables                                                       #
###############################################################################


class SizingPolicy(BaseModel):
    """Every constant the sizing engine uses, in one place

    Defaults reproduce the published SAP on Azure storage guidance. A JSON file
    with any subset of these fields may be supplied to tune a run.
    """

    os_size_gb: int = 256
    sap_size_gb: int = 128
    shared_max_gb: int = 1024

    data_memory_factor: float = 1.2
    log_memory_factor: float = 0.5
    # Above this much memory the log volume is a fixed size
    log_fixed_above_gib: int = 1024
    log_fixed_gb: int = 500

    backup_multiplier: float = 2.0
    backup_disk_count: int = Field(default=4, ge=1)

    min_disk_iops: int = 3000
    min_disk_mbps: int = 125

    data_lun_start: int = 0
    log_lun_start: int = 10
    shared_lun_start: int = 20
    sap_lun_start: int = 30
    backup_lun_start: int = 40

    os_disk_type: DiskType = DiskType.premium_ssd
    volume_disk_type: DiskType = DiskType.premium_ssd_v2
    shared_disk_type: DiskType = DiskType.premium_ssd
    sap_disk_type: DiskType = DiskType.premium_ssd
    backup_disk_type: DiskType = DiskType.premium_zrs

    accelerated_networking: bool = True
    model_config = ConfigDict(frozen=True, extra="forbid")


default_policy = SizingPolicy()
