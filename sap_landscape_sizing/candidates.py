from types import MappingProxyType
from typing import Iterable
from typing import List
from typing import Mapping
from typing import Optional
from typing import Sequence

from sap_landscape_sizing.interface import CandidateSystem
from sap_landscape_sizing.interface import CatalogEntry
from sap_landscape_sizing.interface import SystemRole

DEFAULT_ENVIRONMENTS = ("DEV", "QAS", "PRD")

# Application tier shapes paired with every database SKU
DEFAULT_APP_TIER: Mapping[SystemRole, str] = MappingProxyType(
    {
        SystemRole.app: "Standard_E16ds_v5",
        SystemRole.scs: "Standard_E4ds_v5",
        SystemRole.scsha: "Standard_E4ds_v5",
        SystemRole.web: "Standard_E4ds_v5",
    }
)


def moniker(environment: str, sid_prefix: str, index: int) -> str:
    return f"{environment}-{sid_prefix}{index:02d}"


def generate_candidates(
    db_skus: Sequence[str],
    environments: Sequence[str] = DEFAULT_ENVIRONMENTS,
    app_tier: Mapping[SystemRole, str] = DEFAULT_APP_TIER,
    sid_prefix: str = "X",
) -> List[CandidateSystem]:
    """One candidate system per environment and database SKU

    e.g. DEV-X01 with the first database SKU, DEV-X02 with the second, ...
    """
    candidates = []
    for environment in environments:
        for index, db_sku in enumerate(db_skus, start=1):
            skus = {SystemRole.db: db_sku}
            skus.update(app_tier)
            candidates.append(
                CandidateSystem(
                    moniker=moniker(environment, sid_prefix, index),
                    environment=environment,
                    skus=skus,
                )
            )
    return candidates


def database_skus(
    catalog: Mapping[str, CatalogEntry], roles: Optional[Iterable[str]] = None
) -> List[str]:
    """Database SKUs published in a reference catalog, in sorted order

    Entries without a role are assumed to describe database servers.
    """
    wanted = set(roles) if roles is not None else {"db", "hana"}
    return sorted(
        sku
        for sku, entry in catalog.items()
        if entry.role is None or entry.role.lower() in wanted
    )
