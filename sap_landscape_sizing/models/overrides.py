"""Apply user supplied overrides on top of a computed configuration

Override keys look like ``storage_data_count_override`` or
``compute_vm_size_override``: a section, for storage a disk role, and a
property. Every directive is independent, a bad one is logged and skipped and
never stops the rest from applying.
"""

import logging
from enum import Enum
from types import MappingProxyType
from typing import Callable
from typing import Iterable
from typing import List
from typing import Mapping
from typing import Optional
from typing import Type
from typing import TypeVar

from pydantic import PositiveInt
from pydantic import TypeAdapter
from pydantic import ValidationError

from sap_landscape_sizing.interface import Caching
from sap_landscape_sizing.interface import ComputeProfile
from sap_landscape_sizing.interface import DiskGroup
from sap_landscape_sizing.interface import DiskType
from sap_landscape_sizing.interface import OverrideDirective
from sap_landscape_sizing.interface import OverrideSection
from sap_landscape_sizing.interface import StorageRole
from sap_landscape_sizing.interface import SystemConfiguration

logger = logging.getLogger(__name__)

OVERRIDE_SUFFIX = "_override"

E = TypeVar("E", bound=Enum)


class OverrideError(ValueError):
    """An override value that cannot be applied, the baseline is kept"""


_positive_int: TypeAdapter[int] = TypeAdapter(PositiveInt)


def _parse_bool(raw: str) -> bool:
    value = raw.strip().lower()
    if value == "true":
        return True
    if value == "false":
        return False
    raise OverrideError(f"{raw!r} is not true or false")


def _parse_positive_int(raw: str) -> int:
    try:
        return _positive_int.validate_python(raw.strip())
    except ValidationError as exp:
        raise OverrideError(f"{raw!r} is not a positive integer") from exp


def _parse_enum(enum: Type[E], raw: str) -> E:
    value = raw.strip().lower()
    for member in enum:
        if str(member.value).lower() == value:
            return member
    choices = ", ".join(str(m.value) for m in enum)
    raise OverrideError(f"{raw!r} is not one of {choices}")


###############################################################################
#              Setters                                                        #
###############################################################################


def _set_vm_size(compute: ComputeProfile, raw: str) -> None:
    compute.vm_size = raw.strip()


def _set_accelerated_networking(compute: ComputeProfile, raw: str) -> None:
    compute.accelerated_networking = _parse_bool(raw)


def _set_disk_type(group: DiskGroup, raw: str) -> None:
    disk_type = _parse_enum(DiskType, raw)
    group.disk_type = disk_type
    if not disk_type.performance_configurable:
        group.disk_iops_read_write = None
        group.disk_mbps_read_write = None


def _set_count(group: DiskGroup, raw: str) -> None:
    # size_gb is per disk and stays as is
    group.count = _parse_positive_int(raw)


def _set_size_gb(group: DiskGroup, raw: str) -> None:
    group.size_gb = _parse_positive_int(raw)


def _set_caching(group: DiskGroup, raw: str) -> None:
    group.caching = _parse_enum(Caching, raw)


def _require_configurable(group: DiskGroup) -> None:
    if not group.disk_type.performance_configurable:
        raise OverrideError(
            f"{group.name} disks are {group.disk_type}, "
            "which has no configurable performance"
        )


def _set_iops(group: DiskGroup, raw: str) -> None:
    _require_configurable(group)
    group.disk_iops_read_write = _parse_positive_int(raw)


def _set_throughput(group: DiskGroup, raw: str) -> None:
    _require_configurable(group)
    group.disk_mbps_read_write = _parse_positive_int(raw)


COMPUTE_SETTERS: Mapping[str, Callable[[ComputeProfile, str], None]] = (
    MappingProxyType(
        {
            "vm_size": _set_vm_size,
            "accelerated_networking": _set_accelerated_networking,
        }
    )
)

STORAGE_SETTERS: Mapping[str, Callable[[DiskGroup, str], None]] = MappingProxyType(
    {
        "disk_type": _set_disk_type,
        "count": _set_count,
        "size_gb": _set_size_gb,
        "caching": _set_caching,
        "iops": _set_iops,
        "throughput": _set_throughput,
    }
)


###############################################################################
#              Parsing                                                        #
###############################################################################


def _is_blank(raw: Optional[str]) -> bool:
    return raw is None or not str(raw).strip()


def parse_directive(key: str, raw_value: str) -> Optional[OverrideDirective]:
    """Parses one override, returning None (with a warning) for unknown keys"""
    name = key.strip()
    if name.endswith(OVERRIDE_SUFFIX):
        name = name[: -len(OVERRIDE_SUFFIX)]

    section_name, _, remainder = name.partition("_")
    try:
        section = OverrideSection(section_name)
    except ValueError:
        logger.warning("Unknown override section in %s, skipping", key)
        return None

    if section == OverrideSection.compute:
        if remainder not in COMPUTE_SETTERS:
            logger.warning("Unknown compute override %s, skipping", key)
            return None
        return OverrideDirective(
            section=section, property=remainder, raw_value=raw_value
        )

    role_name, _, prop = remainder.partition("_")
    try:
        role = StorageRole(role_name)
    except ValueError:
        logger.warning("Unknown storage role %r in %s, skipping", role_name, key)
        return None
    if prop not in STORAGE_SETTERS:
        logger.warning("Unknown storage property %r in %s, skipping", prop, key)
        return None

    return OverrideDirective(
        section=section, storage_role=role, property=prop, raw_value=raw_value
    )


def parse_directives(raw: Mapping[str, Optional[str]]) -> List[OverrideDirective]:
    directives = []
    for key, value in raw.items():
        # An empty cell means "no override", not zero
        if _is_blank(value):
            continue
        directive = parse_directive(key, str(value))
        if directive is not None:
            directives.append(directive)
    return directives


###############################################################################
#              Applying                                                       #
###############################################################################


def _apply_one(config: SystemConfiguration, directive: OverrideDirective) -> None:
    if directive.section == OverrideSection.compute:
        COMPUTE_SETTERS[directive.property](config.compute, directive.raw_value)
        return

    assert directive.storage_role is not None
    group = config.disk_group(directive.storage_role)
    if group is None:
        raise OverrideError(
            f"{config.compute.vm_size} has no {directive.storage_role} storage"
        )
    STORAGE_SETTERS[directive.property](group, directive.raw_value)


def apply_overrides(
    config: SystemConfiguration, directives: Iterable[OverrideDirective]
) -> SystemConfiguration:
    """Applies directives in order to config, in place

    Count and size are independent: overriding the count of a 2 x 1000 GiB
    group to 4 yields 4 x 1000 GiB. Keeping the total constant requires a
    matching size_gb override.
    """
    for directive in directives:
        if _is_blank(directive.raw_value):
            continue
        try:
            _apply_one(config, directive)
        except (OverrideError, ValidationError) as exp:
            logger.warning(
                "Ignoring override %s=%r: %s", directive.key, directive.raw_value, exp
            )
    return config


def apply_raw_overrides(
    config: SystemConfiguration, raw: Mapping[str, Optional[str]]
) -> SystemConfiguration:
    return apply_overrides(config, parse_directives(raw))
