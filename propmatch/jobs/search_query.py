from __future__ import annotations

import argparse
import json
import logging
import os
from pathlib import Path

from propmatch.core.catalog import load_projects
from propmatch.core.search import search


logging.basicConfig(
    level=os.environ.get("LOG_LEVEL", "INFO").upper(),
    format="%(asctime)s %(levelname)s %(message)s",
)


def main(argv: list[str] | None = None) -> dict:
    parser = argparse.ArgumentParser(description="Rank catalog projects against a free-text query.")
    parser.add_argument("prompt", help="Natural-language property query.")
    parser.add_argument("--top", type=int, default=None, help="Print only the first N results.")
    parser.add_argument("--catalog", type=Path, default=None, help="Catalog JSON file to rank instead of the default.")
    args = parser.parse_args(argv)

    projects = load_projects(args.catalog) if args.catalog else None
    payload = search(args.prompt, projects=projects).to_dict()
    if args.top is not None:
        payload["results"] = payload["results"][: max(0, args.top)]
    print(json.dumps(payload, indent=2, ensure_ascii=False))
    return payload


if __name__ == "__main__":
    main()
