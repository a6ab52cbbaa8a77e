# -*- coding: utf-8 -*-
import logging
import threading
from concurrent.futures import ThreadPoolExecutor
from typing import Dict
from typing import Iterable
from typing import List
from typing import Mapping
from typing import Optional
from typing import Sequence
from typing import Tuple

from sap_landscape_sizing.hardware import shapes
from sap_landscape_sizing.hardware import VmShapes
from sap_landscape_sizing.interface import CandidateSystem
from sap_landscape_sizing.interface import CatalogEntry
from sap_landscape_sizing.interface import DatabaseSizing
from sap_landscape_sizing.interface import default_policy
from sap_landscape_sizing.interface import MasterCatalog
from sap_landscape_sizing.interface import SizingPolicy
from sap_landscape_sizing.interface import SystemConfiguration
from sap_landscape_sizing.interface import SystemRole
from sap_landscape_sizing.models.common import size_database
from sap_landscape_sizing.models.layout import assemble
from sap_landscape_sizing.models.overrides import apply_raw_overrides

logger = logging.getLogger(__name__)

RawOverrides = Mapping[str, Mapping[str, Optional[str]]]
SizedSystem = Tuple[SystemRole, str, SystemConfiguration]


class CatalogAggregator:
    """Collects sized systems into one catalog, one entry per SKU and role

    The first configuration added for a (role, SKU) wins, later ones are
    dropped. Safe to add from several threads, although callers that need a
    deterministic winner should add in a deterministic order.
    """

    def __init__(self):
        self._lock = threading.Lock()
        self._buckets: Dict[SystemRole, Dict[str, SystemConfiguration]] = {
            role: {} for role in SystemRole
        }
        self._finalized = False

    def add(self, role: SystemRole, sku: str, config: SystemConfiguration) -> bool:
        with self._lock:
            if self._finalized:
                raise RuntimeError("Cannot add to a finalized catalog")
            bucket = self._buckets[role]
            if sku in bucket:
                logger.debug("%s %s already in catalog, keeping the first", role, sku)
                return False
            bucket[sku] = config
            return True

    def extend(self, systems: Iterable[SizedSystem]) -> None:
        for role, sku, config in systems:
            self.add(role, sku, config)

    def finalize(self) -> MasterCatalog:
        with self._lock:
            self._finalized = True
            return MasterCatalog(
                **{
                    role.value: dict(sorted(bucket.items()))
                    for role, bucket in self._buckets.items()
                }
            )


class SizingPlanner:
    def __init__(
        self, policy: SizingPolicy = default_policy, vm_shapes: VmShapes = shapes
    ):
        self._policy = policy
        self._shapes = vm_shapes

    @property
    def policy(self) -> SizingPolicy:
        return self._policy

    def size_database(
        self, sku: str, catalog: Optional[Mapping[str, CatalogEntry]] = None
    ) -> DatabaseSizing:
        memory_gib = self._shapes.memory_gib(sku)
        return size_database(sku, memory_gib, catalog=catalog, policy=self._policy)

    def plan_system(
        self,
        role: SystemRole,
        sku: str,
        catalog: Optional[Mapping[str, CatalogEntry]] = None,
        overrides: Sequence[Mapping[str, Optional[str]]] = (),
    ) -> SystemConfiguration:
        """Sizes one VM of one tier and applies each override set in order"""
        sizing = None
        if role == SystemRole.db:
            sizing = self.size_database(sku, catalog=catalog)
            logger.info(
                "%s capacity for %s from %s", role, sku, sizing.capacity.source
            )
        config = assemble(role, sku, sizing=sizing, policy=self._policy)
        for raw in overrides:
            apply_raw_overrides(config, raw)
        return config

    def plan_candidate(
        self,
        candidate: CandidateSystem,
        catalog: Optional[Mapping[str, CatalogEntry]] = None,
        overrides: Optional[RawOverrides] = None,
    ) -> List[SizedSystem]:
        """Sizes every tier of a candidate system

        Overrides keyed by the bare moniker apply to every tier, overrides
        keyed by ``<moniker>:<role>`` apply to that tier only, afterwards.
        """
        overrides = overrides or {}
        system_wide = overrides.get(candidate.moniker)

        sized: List[SizedSystem] = []
        for role in SystemRole:
            sku = candidate.skus.get(role)
            if not sku:
                continue
            sets = [
                raw
                for raw in (system_wide, overrides.get(f"{candidate.moniker}:{role}"))
                if raw
            ]
            config = self.plan_system(role, sku, catalog=catalog, overrides=sets)
            sized.append((role, sku, config))
        return sized

    def plan_landscape(
        self,
        candidates: Sequence[CandidateSystem],
        catalog: Optional[Mapping[str, CatalogEntry]] = None,
        overrides: Optional[RawOverrides] = None,
        max_workers: int = 1,
    ) -> MasterCatalog:
        """Sizes all candidates and merges them into one catalog

        Systems are sized in parallel when max_workers > 1 but always merged
        in candidate order, so the same SKU resolves to the same configuration
        no matter how the work was scheduled.
        """
        aggregator = CatalogAggregator()

        def plan(candidate: CandidateSystem) -> List[SizedSystem]:
            return self.plan_candidate(candidate, catalog=catalog, overrides=overrides)

        if max_workers > 1:
            with ThreadPoolExecutor(max_workers=max_workers) as executor:
                results = list(executor.map(plan, candidates))
        else:
            results = [plan(candidate) for candidate in candidates]

        for sized in results:
            aggregator.extend(sized)
        return aggregator.finalize()


planner = SizingPlanner()
