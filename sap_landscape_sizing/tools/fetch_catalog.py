import argparse
import json
import sys
from pathlib import Path
from typing import Any
from typing import Dict
from typing import Optional
from typing import Sequence

import requests

from sap_landscape_sizing.loaders import parse_sizing_catalog


def fetch_sizing_catalog(url: str, timeout_s: float = 60) -> Dict[str, Any]:
    response = requests.get(url, timeout=timeout_s)
    response.raise_for_status()
    return response.json()


def main(argv: Optional[Sequence[str]] = None) -> int:
    parser = argparse.ArgumentParser(
        prog="fetch-sizing-catalog",
        description="Download the reference SAP sizing catalog JSON",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
    )
    parser.add_argument("url", help="HTTP(S) location of the sizing catalog JSON")
    parser.add_argument("--output-path", type=Path, required=True)
    parser.add_argument("--timeout", type=float, default=60)
    args = parser.parse_args(argv)

    try:
        data = fetch_sizing_catalog(args.url, timeout_s=args.timeout)
    except requests.RequestException as exp:
        print(f"Unable to fetch {args.url}: {exp}", file=sys.stderr)
        return 1

    # Parse before writing so an unusable document is reported now
    try:
        entries = parse_sizing_catalog(data)
    except ValueError as exp:
        print(f"Unusable catalog from {args.url}: {exp}", file=sys.stderr)
        return 1
    print(f"Fetched {len(entries)} catalog entries", file=sys.stderr)

    with open(args.output_path, "wt", encoding="utf-8") as fd:
        json.dump(data, fd, indent=2)
        fd.write("\n")
    return 0


if __name__ == "__main__":
    sys.exit(main())
