from sap_landscape_sizing.models.common import performance_target
from sap_landscape_sizing.models.common import plan_capacity
from sap_landscape_sizing.models.common import size_database
from sap_landscape_sizing.models.layout import assemble
from sap_landscape_sizing.models.overrides import apply_overrides
from sap_landscape_sizing.models.overrides import apply_raw_overrides
from sap_landscape_sizing.models.overrides import parse_directives

__all__ = [
    "apply_overrides",
    "apply_raw_overrides",
    "assemble",
    "parse_directives",
    "performance_target",
    "plan_capacity",
    "size_database",
]
