import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Dict
from typing import List
from typing import Optional
from typing import Sequence

from pydantic import ValidationError

from sap_landscape_sizing.candidates import database_skus
from sap_landscape_sizing.candidates import DEFAULT_ENVIRONMENTS
from sap_landscape_sizing.candidates import generate_candidates
from sap_landscape_sizing.hardware import shapes
from sap_landscape_sizing.interface import CandidateSystem
from sap_landscape_sizing.interface import CatalogEntry
from sap_landscape_sizing.interface import SystemRole
from sap_landscape_sizing.loaders import load_candidates
from sap_landscape_sizing.loaders import load_overrides
from sap_landscape_sizing.loaders import load_policy
from sap_landscape_sizing.loaders import load_sizing_catalog
from sap_landscape_sizing.loaders import master_catalog_document
from sap_landscape_sizing.loaders import write_master_catalog
from sap_landscape_sizing.sizing_planner import SizingPlanner


def _parse_environments(value: str) -> List[str]:
    return [env.strip().upper() for env in value.split(",") if env.strip()]


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="sap-sizing",
        description=(
            "Generate per VM compute and storage configuration for SAP landscapes"
        ),
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
    )
    parser.add_argument(
        "--candidates",
        type=Path,
        help=(
            "JSON list of candidate systems ({moniker, environment, skus}). If not "
            "given one system per environment is generated for each database SKU "
            "in --catalog and every --db-sku"
        ),
    )
    parser.add_argument(
        "--db-sku",
        action="append",
        default=[],
        help="Database SKU to generate candidates for, may be repeated",
    )
    parser.add_argument(
        "--environments",
        type=_parse_environments,
        default=list(DEFAULT_ENVIRONMENTS),
        help="Comma separated environments to generate candidates for",
    )
    parser.add_argument(
        "--catalog",
        type=Path,
        help="Reference sizing catalog JSON, authoritative for data/log capacity",
    )
    parser.add_argument(
        "--overrides",
        type=Path,
        help="CSV of per system overrides: a 'system' column and *_override columns",
    )
    parser.add_argument(
        "--policy",
        type=Path,
        help="JSON file overriding sizing policy constants (or SAP_SIZING_POLICY)",
    )
    parser.add_argument(
        "--output-path",
        type=Path,
        help="Write the catalog here, if not given only stdout will occur",
    )
    parser.add_argument("--max-workers", type=int, default=1)
    parser.add_argument("--debug", action="store_true", help="Show verbose output")
    return parser


def _candidates(
    args: argparse.Namespace, catalog: Dict[str, CatalogEntry]
) -> List[CandidateSystem]:
    if args.candidates is not None:
        return load_candidates(args.candidates)
    db_skus = database_skus(catalog) + [
        sku for sku in args.db_sku if sku not in catalog
    ]
    return generate_candidates(db_skus, environments=args.environments)


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.debug else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    try:
        policy = load_policy(args.policy) if args.policy else load_policy()
        catalog = load_sizing_catalog(args.catalog) if args.catalog else {}
        overrides = load_overrides(args.overrides) if args.overrides else {}
        candidates = _candidates(args, catalog)
        # Fact files named by SAP_VM_MEMORY load lazily, surface their errors here
        known_skus = len(shapes.facts)
    except (OSError, ValueError, ValidationError) as exp:
        # json.JSONDecodeError is a ValueError
        print(f"Unable to load inputs: {exp}", file=sys.stderr)
        return 1

    if not candidates:
        print("No candidate systems to size", file=sys.stderr)
        return 1

    print(
        f"Sizing {len(candidates)} candidate systems ({known_skus} known VM SKUs)",
        file=sys.stderr,
    )
    master = SizingPlanner(policy=policy, vm_shapes=shapes).plan_landscape(
        candidates,
        catalog=catalog,
        overrides=overrides,
        max_workers=args.max_workers,
    )
    for role in SystemRole:
        print(f"[{role}] {len(master.bucket(role))} SKUs", file=sys.stderr)
    for sku, config in master.db.items():
        print(f"[db] {sku}: {config.capacity_source}", file=sys.stderr)

    if args.output_path is not None:
        write_master_catalog(master, args.output_path)
    else:
        print(json.dumps(master_catalog_document(master), indent=2))
    return 0


if __name__ == "__main__":
    sys.exit(main())
