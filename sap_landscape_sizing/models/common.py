import logging
from types import MappingProxyType
from typing import Mapping
from typing import Optional
from typing import Tuple

import numpy as np

from sap_landscape_sizing.interface import CapacityPlan
from sap_landscape_sizing.interface import CapacitySource
from sap_landscape_sizing.interface import CatalogEntry
from sap_landscape_sizing.interface import DatabaseSizing
from sap_landscape_sizing.interface import default_policy
from sap_landscape_sizing.interface import PerformanceTarget
from sap_landscape_sizing.interface import SizingPolicy
from sap_landscape_sizing.interface import VolumeLayout
from sap_landscape_sizing.models.utils import ceil_div
from sap_landscape_sizing.models.utils import round_half_up

logger = logging.getLogger(__name__)


def _target(data_mbps: int, data_iops: int, log_mbps: int, log_iops: int):
    return PerformanceTarget(
        data_mbps=data_mbps, data_iops=data_iops, log_mbps=log_mbps, log_iops=log_iops
    )


###############################################################################
#              Published HANA storage performance guidance                    #
###############################################################################

# Exclusive upper memory edges (GiB) of the regular tiers and their targets
_TIER_EDGES_GIB = np.array([1024, 2048, 4096, 8192])
_TIER_TARGETS: Tuple[PerformanceTarget, ...] = (
    _target(425, 3000, 275, 3000),
    _target(600, 5000, 300, 4000),
    _target(800, 12000, 300, 4000),
    _target(1200, 20000, 400, 5000),
)

# The very large Mv2/Mv3 shapes have individually published targets
ULTRA_LARGE_TARGETS: Mapping[int, PerformanceTarget] = MappingProxyType(
    {
        # M416ms_v2, M624ds_12_v3, M832ds_12_v3, M832ixs_v2
        11400: _target(1500, 25000, 500, 6000),
        # M832ixs
        14902: _target(2000, 40000, 600, 8000),
        # M832ids_16_v3, M832is_16_v3
        15200: _target(2000, 60000, 600, 10000),
        # M896ixds_24_v3
        23088: _target(2000, 70000, 600, 10000),
        # M896ixds_32_v3, M1792ixds_32_v3
        30400: _target(2000, 80000, 600, 10000),
    }
)
# Inclusive lower edges for ultra large memory that matched no published shape
_ULTRA_LARGE_BANDS: Tuple[Tuple[int, PerformanceTarget], ...] = (
    (30400, _target(2000, 80000, 600, 10000)),
    (15200, _target(2000, 60000, 600, 10000)),
)
_ULTRA_LARGE_DEFAULT = _target(1200, 20000, 400, 5000)

# Exclusive upper data capacity edges (GiB) for striping across 2, 4, 8 disks
_DATA_STRIPE_EDGES_GIB = np.array([2048, 8192])
_DATA_STRIPE_COUNTS: Tuple[int, ...] = (2, 4, 8)
LOG_STRIPE_COUNT = 2


def performance_target(memory_gib: float) -> PerformanceTarget:
    """Returns the aggregate data/log performance a HANA system needs

    Below 8 TiB the guidance is a small set of memory tiers. Above that the
    guidance is published per VM shape, so exact memory matches win and only
    unknown ultra large sizes fall back to coarse bands.
    """
    tier = int(np.searchsorted(_TIER_EDGES_GIB, memory_gib, side="right"))
    if tier < len(_TIER_TARGETS):
        return _TIER_TARGETS[tier]

    if float(memory_gib).is_integer() and int(memory_gib) in ULTRA_LARGE_TARGETS:
        return ULTRA_LARGE_TARGETS[int(memory_gib)]

    for lower_edge, target in _ULTRA_LARGE_BANDS:
        if memory_gib >= lower_edge:
            return target
    return _ULTRA_LARGE_DEFAULT


###############################################################################
#              Capacity                                                       #
###############################################################################


def _catalog_capacity(entry: Optional[CatalogEntry]) -> Optional[Tuple[int, int]]:
    if entry is None:
        return None
    data, log = entry.disk("data"), entry.disk("log")
    if data is None or log is None:
        return None
    total_data, total_log = data.count * data.size_gb, log.count * log.size_gb
    # A zero sized definition is a placeholder, not a published size
    if total_data <= 0 or total_log <= 0:
        return None
    return total_data, total_log


def plan_capacity(
    sku: str,
    memory_gib: float,
    catalog: Optional[Mapping[str, CatalogEntry]] = None,
    policy: SizingPolicy = default_policy,
) -> CapacityPlan:
    """Determines total data and log capacity for a database server

    The reference sizing catalog is authoritative when it describes both the
    data and log volumes of the SKU, otherwise capacity is derived from memory.
    The fixed log size for large memory only applies to the memory formula.
    """
    entry = catalog.get(sku) if catalog is not None else None
    published = _catalog_capacity(entry)
    if published is not None:
        total_data, total_log = published
        return CapacityPlan(
            total_data_gib=total_data,
            total_log_gib=total_log,
            source=CapacitySource.official_catalog,
        )
    if entry is not None:
        logger.debug("Catalog entry for %s lacks data or log storage", sku)

    total_data_gib = memory_gib * policy.data_memory_factor
    if memory_gib > policy.log_fixed_above_gib:
        total_log_gib = float(policy.log_fixed_gb)
    else:
        total_log_gib = memory_gib * policy.log_memory_factor

    return CapacityPlan(
        total_data_gib=total_data_gib,
        total_log_gib=total_log_gib,
        source=CapacitySource.memory_formula,
    )


def data_stripe_count(total_data_gib: float) -> int:
    """How many disks to stripe the data volume across

    Every disk brings a free baseline of IOPS and throughput, so larger
    volumes are spread wider to collect more of it.
    """
    idx = int(np.searchsorted(_DATA_STRIPE_EDGES_GIB, total_data_gib, side="right"))
    return _DATA_STRIPE_COUNTS[idx]


def distribute(
    total_gib: float,
    count: int,
    target_iops: int,
    target_mbps: int,
    policy: SizingPolicy = default_policy,
) -> VolumeLayout:
    # Performance is rounded up so the stripe as a whole never falls short
    # of the target, and never below what a single disk must be given
    return VolumeLayout(
        count=count,
        size_gb=round_half_up(total_gib / count),
        iops=max(ceil_div(target_iops, count), policy.min_disk_iops),
        mbps=max(ceil_div(target_mbps, count), policy.min_disk_mbps),
    )


def shared_size_gib(memory_gib: float, policy: SizingPolicy = default_policy) -> int:
    if memory_gib <= policy.shared_max_gb:
        return round_half_up(memory_gib)
    return policy.shared_max_gb


def backup_layout(
    total_data_gib: float, policy: SizingPolicy = default_policy
) -> VolumeLayout:
    count = policy.backup_disk_count
    return VolumeLayout(
        count=count,
        size_gb=round_half_up(total_data_gib * policy.backup_multiplier / count),
    )


def size_database(
    sku: str,
    memory_gib: int,
    catalog: Optional[Mapping[str, CatalogEntry]] = None,
    policy: SizingPolicy = default_policy,
) -> DatabaseSizing:
    capacity = plan_capacity(sku, memory_gib, catalog=catalog, policy=policy)
    target = performance_target(memory_gib)
    logger.debug(
        "Sized %s (%d GiB) from %s: data=%.1f GiB log=%.1f GiB",
        sku,
        memory_gib,
        capacity.source,
        capacity.total_data_gib,
        capacity.total_log_gib,
    )

    return DatabaseSizing(
        memory_gib=memory_gib,
        capacity=capacity,
        target=target,
        data=distribute(
            capacity.total_data_gib,
            data_stripe_count(capacity.total_data_gib),
            target.data_iops,
            target.data_mbps,
            policy=policy,
        ),
        log=distribute(
            capacity.total_log_gib,
            LOG_STRIPE_COUNT,
            target.log_iops,
            target.log_mbps,
            policy=policy,
        ),
        shared_size_gb=shared_size_gib(memory_gib, policy=policy),
        backup=backup_layout(capacity.total_data_gib, policy=policy),
    )
