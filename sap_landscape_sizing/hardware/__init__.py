# pylint: disable=cyclic-import
# in VmShapes.facts it imports from hardware.profiles dynamically
import json
import logging
import os
import re
from functools import reduce
from pathlib import Path
from types import MappingProxyType
from typing import Dict
from typing import List
from typing import Mapping
from typing import Optional
from typing import Union

from sap_landscape_sizing.interface import VMMemoryFact

logger = logging.getLogger(__name__)

# GiB of memory per vCPU for the families we can estimate
MEMORY_GIB_PER_CORE: Mapping[str, int] = MappingProxyType({"M": 20, "E": 8})
FALLBACK_MEMORY_GIB = 256

# Standard_M208ms_v2 -> family M, 208 cores
_SKU_CORES = re.compile(r"^(?:Standard_)?(?P<family>[A-Za-z])(?P<cores>\d+)")


def load_memory_facts(facts: Dict) -> Dict[str, VMMemoryFact]:
    return {
        sku: VMMemoryFact(sku=sku, memory_gib=shape["memory_gib"])
        for sku, shape in facts.get("instances", {}).items()
    }


def merge_memory_facts(
    existing: Dict[str, VMMemoryFact], override: Dict[str, VMMemoryFact]
) -> Dict[str, VMMemoryFact]:
    """Merge two fact tables, a SKU may only be described by one file"""
    duplicates = existing.keys() & override.keys()
    if duplicates:
        raise ValueError(
            f"Duplicate SKUs {sorted(duplicates)}! Only one file should contain a SKU"
        )
    merged = dict(existing)
    merged.update(override)
    return merged


def load_memory_facts_from_disk(
    fact_paths: Union[List[Path], Optional[str]] = os.environ.get("SAP_VM_MEMORY"),
) -> Dict[str, VMMemoryFact]:
    if isinstance(fact_paths, str):
        fact_paths = [Path(p) for p in fact_paths.split(os.pathsep) if p]
    if fact_paths is None:
        fact_paths = []

    tables: List[Dict[str, VMMemoryFact]] = [{}]
    for path in fact_paths:
        logger.debug("Loading VM memory facts from: %s", path)
        with open(path, encoding="utf-8") as fd:
            tables.append(load_memory_facts(json.load(fd)))

    return reduce(merge_memory_facts, tables)


def estimate_memory_gib(sku: str) -> Optional[int]:
    """Estimates memory from the vCPU count embedded in the SKU name

    Only the memory optimized M and E families have a stable GiB per core
    ratio, anything else returns None.
    """
    match = _SKU_CORES.match(sku)
    if match is None:
        return None
    per_core = MEMORY_GIB_PER_CORE.get(match.group("family").upper())
    if per_core is None:
        return None
    return int(match.group("cores")) * per_core


class VmShapes:
    def __init__(self):
        self._facts: Optional[Mapping[str, VMMemoryFact]] = None

    def load(self, new_facts: Mapping[str, VMMemoryFact]) -> None:
        self._facts = MappingProxyType(dict(new_facts))

    @property
    def facts(self) -> Mapping[str, VMMemoryFact]:
        if self._facts is None:
            from sap_landscape_sizing.hardware.profiles import common_memory_facts

            extra_facts = load_memory_facts_from_disk()
            self.load(merge_memory_facts(common_memory_facts, extra_facts))
        assert self._facts is not None
        return self._facts

    def memory_gib(self, sku: str) -> int:
        """Resolves the memory of a SKU, never failing for unknown SKUs

        Exact facts win, then the per-family estimate, then a fixed fallback.
        """
        fact = self.facts.get(sku)
        if fact is not None:
            return fact.memory_gib

        estimate = estimate_memory_gib(sku)
        if estimate is not None:
            logger.debug("Estimated %s at %d GiB from its core count", sku, estimate)
            return estimate

        logger.warning(
            "Unknown SKU %s, assuming %d GiB of memory", sku, FALLBACK_MEMORY_GIB
        )
        return FALLBACK_MEMORY_GIB


shapes: VmShapes = VmShapes()
