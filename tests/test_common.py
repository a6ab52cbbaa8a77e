import pytest

from sap_landscape_sizing.interface import CapacitySource
from sap_landscape_sizing.interface import PerformanceTarget
from sap_landscape_sizing.interface import SizingPolicy
from sap_landscape_sizing.models.common import backup_layout
from sap_landscape_sizing.models.common import data_stripe_count
from sap_landscape_sizing.models.common import distribute
from sap_landscape_sizing.models.common import LOG_STRIPE_COUNT
from sap_landscape_sizing.models.common import performance_target
from sap_landscape_sizing.models.common import plan_capacity
from sap_landscape_sizing.models.common import shared_size_gib
from sap_landscape_sizing.models.common import size_database
from sap_landscape_sizing.models.utils import ceil_div
from sap_landscape_sizing.models.utils import round_half_up


def _t(data_mbps, data_iops, log_mbps, log_iops):
    return PerformanceTarget(
        data_mbps=data_mbps, data_iops=data_iops, log_mbps=log_mbps, log_iops=log_iops
    )


@pytest.mark.parametrize(
    "memory_gib, expected",
    [
        (32, _t(425, 3000, 275, 3000)),
        (1023, _t(425, 3000, 275, 3000)),
        (1024, _t(600, 5000, 300, 4000)),
        (2047, _t(600, 5000, 300, 4000)),
        (2048, _t(800, 12000, 300, 4000)),
        (4095, _t(800, 12000, 300, 4000)),
        (4096, _t(1200, 20000, 400, 5000)),
        (8191, _t(1200, 20000, 400, 5000)),
        (8192, _t(1200, 20000, 400, 5000)),
        (12000, _t(1200, 20000, 400, 5000)),
        (16000, _t(2000, 60000, 600, 10000)),
        (25000, _t(2000, 60000, 600, 10000)),
        (40000, _t(2000, 80000, 600, 10000)),
    ],
)
def test_performance_tiers(memory_gib, expected):
    assert performance_target(memory_gib) == expected


@pytest.mark.parametrize(
    "memory_gib, expected",
    [
        (11400, _t(1500, 25000, 500, 6000)),
        (14902, _t(2000, 40000, 600, 8000)),
        (15200, _t(2000, 60000, 600, 10000)),
        (23088, _t(2000, 70000, 600, 10000)),
        (30400, _t(2000, 80000, 600, 10000)),
    ],
)
def test_ultra_large_exact_targets(memory_gib, expected):
    assert performance_target(memory_gib) == expected
    assert performance_target(float(memory_gib)) == expected


def test_ultra_large_near_miss_uses_bands():
    # One GiB off a published shape is not that shape
    assert performance_target(11401) == _t(1200, 20000, 400, 5000)
    assert performance_target(23089) == _t(2000, 60000, 600, 10000)


def test_performance_target_is_pure():
    for memory_gib in (512, 1024, 5700, 11400, 20000):
        assert performance_target(memory_gib) == performance_target(memory_gib)
        assert performance_target(memory_gib) is performance_target(memory_gib)


def test_memory_formula_capacity():
    plan = plan_capacity("Standard_M64s", 1024)
    assert plan.source == CapacitySource.memory_formula
    assert plan.total_data_gib == pytest.approx(1228.8)
    # 1024 is not more than 1024, so still half of memory
    assert plan.total_log_gib == 512

    plan = plan_capacity("Standard_M64ms", 1792)
    assert plan.total_data_gib == pytest.approx(2150.4)
    assert plan.total_log_gib == 500

    plan = plan_capacity("Standard_E32ds_v5", 256)
    assert plan.total_log_gib == 128


def test_catalog_capacity_preferred(reference_catalog):
    plan = plan_capacity("Standard_M128s", 2048, catalog=reference_catalog)
    assert plan.source == CapacitySource.official_catalog
    assert plan.total_data_gib == 4 * 600
    assert plan.total_log_gib == 2 * 256


def test_catalog_log_is_not_fixed(reference_catalog):
    plan = plan_capacity("Standard_M416ms_v2", 11400, catalog=reference_catalog)
    assert plan.source == CapacitySource.official_catalog
    assert plan.total_log_gib == 2048


def test_incomplete_catalog_entry_uses_formula(reference_catalog):
    plan = plan_capacity("Standard_M64ms", 1792, catalog=reference_catalog)
    assert plan.source == CapacitySource.memory_formula
    assert plan.total_data_gib == pytest.approx(1792 * 1.2)

    plan = plan_capacity("Standard_M32ts", 192, catalog=reference_catalog)
    assert plan.source == CapacitySource.memory_formula


@pytest.mark.parametrize(
    "total_gib, expected",
    [(1, 2), (2047.9, 2), (2048, 4), (8191, 4), (8192, 8), (100_000, 8)],
)
def test_data_stripe_count(total_gib, expected):
    assert data_stripe_count(total_gib) == expected


def test_stripe_counts_are_bounded(reference_catalog):
    for memory_gib in range(64, 40_000, 97):
        sizing = size_database("Standard_Test", memory_gib, catalog=reference_catalog)
        assert sizing.data.count in (2, 4, 8)
        assert sizing.log.count == LOG_STRIPE_COUNT == 2


def test_distribute_rounds_size_and_ceils_performance():
    layout = distribute(1228.8, 2, 5000, 300)
    assert layout.count == 2
    assert layout.size_gb == 614
    assert layout.iops == 3000
    assert layout.mbps == 150

    layout = distribute(14400, 8, 25001, 2001)
    assert layout.size_gb == 1800
    assert layout.iops == 3126
    assert layout.mbps == 251


def test_distribute_half_rounds_up():
    assert distribute(1025, 2, 0, 0).size_gb == 513
    assert distribute(1027, 2, 0, 0).size_gb == 514


@pytest.mark.parametrize(
    "target_iops, target_mbps, count",
    [(3000, 125, 2), (5000, 300, 2), (20000, 400, 4), (80000, 2000, 8), (7, 3, 8)],
)
def test_distribution_meets_targets_and_floors(target_iops, target_mbps, count):
    layout = distribute(1000, count, target_iops, target_mbps)
    assert layout.iops is not None and layout.mbps is not None
    assert layout.iops * count >= target_iops
    assert layout.mbps * count >= target_mbps
    assert layout.iops >= 3000
    assert layout.mbps >= 125


def test_policy_floors():
    policy = SizingPolicy(min_disk_iops=1000, min_disk_mbps=50)
    layout = distribute(1000, 4, 2000, 100, policy=policy)
    assert layout.iops == 1000
    assert layout.mbps == 50


def test_shared_size():
    assert shared_size_gib(512) == 512
    assert shared_size_gib(1024) == 1024
    assert shared_size_gib(1792) == 1024
    assert shared_size_gib(30400) == 1024


def test_backup_layout():
    layout = backup_layout(12000)
    assert layout.count == 4
    assert layout.size_gb == 6000
    assert layout.iops is None

    layout = backup_layout(1228.8, policy=SizingPolicy(backup_disk_count=2))
    assert layout.count == 2
    assert layout.size_gb == 1229


def test_scenario_exact_memory_no_catalog():
    sizing = size_database("Standard_M64s", 1024)
    assert sizing.capacity.source == CapacitySource.memory_formula
    assert round_half_up(sizing.capacity.total_data_gib) == 1229
    assert sizing.data.count == 2
    assert sizing.data.size_gb == 614
    assert sizing.log.count == 2
    assert sizing.log.size_gb == 256
    assert sizing.capacity.total_log_gib == 512
    assert sizing.shared_size_gb == 1024
    assert sizing.target == _t(600, 5000, 300, 4000)


def test_scenario_ultra_large_memory_no_catalog():
    sizing = size_database("Standard_M_custom", 12000)
    assert sizing.capacity.total_log_gib == 500
    assert sizing.capacity.total_data_gib == pytest.approx(14400)
    assert sizing.data.count == 8
    assert sizing.data.size_gb == 1800
    assert sizing.target == _t(1200, 20000, 400, 5000)
    assert sizing.data.iops == 3000
    assert sizing.data.mbps == 150
    assert sizing.log.iops == 3000
    assert sizing.log.mbps == 200


def test_scenario_catalog_sizing(reference_catalog):
    sizing = size_database("Standard_M128s", 2048, catalog=reference_catalog)
    assert sizing.capacity.source == CapacitySource.official_catalog
    assert (sizing.data.count, sizing.data.size_gb) == (4, 600)
    assert (sizing.log.count, sizing.log.size_gb) == (2, 256)
    assert sizing.data.iops == 3000
    assert sizing.data.mbps == 200
    assert sizing.backup.size_gb == 1200


def test_utils():
    assert round_half_up(0.5) == 1
    assert round_half_up(2.5) == 3
    assert round_half_up(2.49) == 2
    assert ceil_div(5000, 2) == 2500
    assert ceil_div(5001, 2) == 2501
