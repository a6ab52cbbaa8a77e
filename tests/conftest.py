from typing import Dict

import pytest

from sap_landscape_sizing.interface import CatalogEntry
from sap_landscape_sizing.sizing_planner import SizingPlanner


@pytest.fixture
def reference_catalog() -> Dict[str, CatalogEntry]:
    """A small slice of the published sizing catalog

    Standard_M128s is fully described, Standard_M64ms only has a log volume
    so it must fall back to the memory formula.
    """
    return {
        "Standard_M128s": CatalogEntry.model_validate(
            {
                "role": "db",
                "storage": [
                    {"name": "os", "count": 1, "size_gb": 64},
                    {"name": "data", "count": 4, "size_gb": 600},
                    {"name": "log", "count": 2, "size_gb": 256},
                ],
            }
        ),
        "Standard_M416ms_v2": CatalogEntry.model_validate(
            {
                "role": "db",
                "storage": [
                    {"name": "data", "count": 8, "size_gb": 2048},
                    {"name": "log", "count": 2, "size_gb": 1024},
                ],
            }
        ),
        "Standard_M64ms": CatalogEntry.model_validate(
            {"storage": [{"name": "log", "count": 2, "size_gb": 512}]}
        ),
    }


@pytest.fixture
def sizing_planner() -> SizingPlanner:
    return SizingPlanner()
