import logging
from importlib import resources
from typing import Dict

from sap_landscape_sizing.hardware import load_memory_facts_from_disk
from sap_landscape_sizing.interface import VMMemoryFact

logger = logging.getLogger(__name__)

with resources.as_file(resources.files(__name__) / "vm_memory.json") as fact_file:
    logger.info("Loading VM memory facts from %s", fact_file)
    common_memory_facts: Dict[str, VMMemoryFact] = load_memory_facts_from_disk(
        fact_paths=[fact_file]
    )
