"""issuestore admin entry point.

Usage: issuestore [-c config.yaml] check | list [filters] | delete-project ID.
"""

import argparse
import logging
import sys
from pathlib import Path

import yaml

from issuestore.config import load_config
from issuestore.errors import ConfigError, IssueStoreError
from issuestore.logging import setup_logging
from issuestore.schemas import IssueRecord
from issuestore.store import IssueStore, open_store

LOG = logging.getLogger("issuestore.main")


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse CLI: global --config, then one subcommand."""
    parser = argparse.ArgumentParser(
        prog="issuestore",
        description="Inspect and maintain the issue record store",
    )
    parser.add_argument(
        "--config",
        "-c",
        type=Path,
        default=Path("config.yaml"),
        help="Path to YAML config file",
    )
    sub = parser.add_subparsers(dest="subcommand", required=True)

    sub.add_parser("check", help="Load config, open the store and print counts")

    list_parser = sub.add_parser("list", help="Print matching issue records as YAML")
    list_parser.add_argument("--project", help="Project id")
    group = list_parser.add_mutually_exclusive_group()
    group.add_argument("--iri", help="Entity IRI")
    group.add_argument("--obo-id", dest="obo_id", help="Entity OBO id, e.g. GO:0008150")

    delete_parser = sub.add_parser("delete-project", help="Delete every issue record of a project")
    delete_parser.add_argument("project", help="Project id")

    return parser.parse_args(argv)


def _find(store: IssueStore, args: argparse.Namespace) -> list[IssueRecord]:
    """Pick the finder matching the given filters."""
    if args.project and args.iri:
        return store.find_all_by_project_id_and_iris(args.project, args.iri)
    if args.project and args.obo_id:
        return store.find_all_by_project_id_and_obo_ids(args.project, args.obo_id)
    if args.project:
        return store.find_all_by_project_id(args.project)
    if args.iri:
        return store.find_all_by_iris(args.iri)
    if args.obo_id:
        return store.find_all_by_obo_ids(args.obo_id)
    return store.find_all()


def _dump(records: list[IssueRecord]) -> str:
    payload = [r.model_dump(mode="json", exclude_none=True) for r in records]
    return yaml.dump(payload, default_flow_style=False, allow_unicode=True, sort_keys=False, width=1000)


def main(argv: list[str] | None = None) -> int:
    """Entry point: dispatch subcommand against the configured store."""
    args = parse_args(argv)
    try:
        config = load_config(args.config)
    except ConfigError as e:
        logging.basicConfig(level=logging.INFO)
        LOG.error("%s", e)
        return 1
    setup_logging(config.logging)

    try:
        with open_store(config.store) as store:
            if args.subcommand == "check":
                stats = store.stats()
                print(
                    f"Store OK: {stats['records']} records, {stats['projects']} projects, "
                    f"{stats['iris']} IRIs, {stats['obo_ids']} OBO ids"
                )
            elif args.subcommand == "list":
                records = _find(store, args)
                if records:
                    print(_dump(records), end="")
            elif args.subcommand == "delete-project":
                removed = store.delete_all_by_project_id(args.project)
                print(f"Deleted {removed} issue records of project {args.project}")
    except IssueStoreError as e:
        LOG.error("%s: %s", type(e).__name__, e)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
