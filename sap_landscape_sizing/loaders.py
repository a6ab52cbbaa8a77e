import csv
import json
import logging
import os
from pathlib import Path
from typing import Any
from typing import Dict
from typing import List
from typing import Optional
from typing import Union

from pydantic import TypeAdapter
from pydantic import ValidationError

from sap_landscape_sizing.interface import CandidateSystem
from sap_landscape_sizing.interface import CatalogEntry
from sap_landscape_sizing.interface import default_policy
from sap_landscape_sizing.interface import MasterCatalog
from sap_landscape_sizing.interface import SizingPolicy
from sap_landscape_sizing.models.overrides import OVERRIDE_SUFFIX

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]

SYSTEM_COLUMN = "system"

_candidate_list: TypeAdapter[List[CandidateSystem]] = TypeAdapter(
    List[CandidateSystem]
)


def load_policy(
    path: Optional[PathLike] = os.environ.get("SAP_SIZING_POLICY"),
) -> SizingPolicy:
    if not path:
        return default_policy
    logger.debug("Loading sizing policy from: %s", path)
    with open(path, encoding="utf-8") as fd:
        return SizingPolicy(**json.load(fd))


def parse_sizing_catalog(data: Any) -> Dict[str, CatalogEntry]:
    """Parses the reference sizing catalog into entries keyed by SKU

    Accepts either a flat ``{sku: entry}`` document or one bucketed by tier
    like the generated catalog (``{"db": {sku: entry}}``), in which case only
    the database bucket carries capacity and is used.
    """
    if not isinstance(data, dict):
        raise ValueError(
            f"sizing catalog must be a JSON object, got {type(data).__name__}"
        )
    if isinstance(data.get("db"), dict) and "storage" not in data["db"]:
        data = data["db"]

    catalog: Dict[str, CatalogEntry] = {}
    for sku, raw in data.items():
        try:
            catalog[sku] = CatalogEntry.model_validate(raw)
        except ValidationError as exp:
            logger.warning("Skipping malformed catalog entry %s: %s", sku, exp)
    logger.info("Loaded %d sizing catalog entries", len(catalog))
    return catalog


def load_sizing_catalog(path: PathLike) -> Dict[str, CatalogEntry]:
    with open(path, encoding="utf-8") as fd:
        return parse_sizing_catalog(json.load(fd))


def load_candidates(path: PathLike) -> List[CandidateSystem]:
    with open(path, encoding="utf-8") as fd:
        return _candidate_list.validate_python(json.load(fd))


def load_overrides(path: PathLike) -> Dict[str, Dict[str, str]]:
    """Reads override directives from a CSV with one row per system

    Only ``*_override`` columns are directives. Cells are kept verbatim,
    including blanks, the override engine decides what a blank means.
    """
    overrides: Dict[str, Dict[str, str]] = {}
    with open(path, encoding="utf-8", newline="") as fd:
        reader = csv.DictReader(fd)
        if reader.fieldnames is None or SYSTEM_COLUMN not in reader.fieldnames:
            raise ValueError(f"{path} has no '{SYSTEM_COLUMN}' column")
        for row in reader:
            system = (row.get(SYSTEM_COLUMN) or "").strip()
            if not system:
                continue
            directives = overrides.setdefault(system, {})
            for column, value in row.items():
                if not column or not column.strip().endswith(OVERRIDE_SUFFIX):
                    continue
                # A blank cell in a repeated system row keeps the earlier value
                if value or column.strip() not in directives:
                    directives[column.strip()] = value or ""
    return overrides


def master_catalog_document(catalog: MasterCatalog) -> Dict[str, Any]:
    return catalog.model_dump(mode="json")


def write_master_catalog(catalog: MasterCatalog, path: PathLike) -> None:
    with open(path, "wt", encoding="utf-8") as fd:
        json.dump(master_catalog_document(catalog), fd, indent=2)
        fd.write("\n")
