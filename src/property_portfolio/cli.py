"""Command-line interface for Property Portfolio."""

import argparse
import sys
from decimal import Decimal
from pathlib import Path
from uuid import UUID

from property_portfolio import __version__
from property_portfolio.config import get_settings
from property_portfolio.container import ServiceRegistry
from property_portfolio.domain.organizations import Organization
from property_portfolio.logging_config import LogContext, configure_logging, get_logger
from property_portfolio.repositories.sqlite import SQLiteDatabase

logger = get_logger(__name__)


def get_db_path(args: argparse.Namespace) -> Path:
    """Database path from --database, falling back to the configured one."""
    if args.database:
        return Path(args.database)
    return Path(get_settings().sqlite_path)


def open_registry(db_path: Path) -> ServiceRegistry:
    db = SQLiteDatabase(str(db_path))
    db.initialize()
    return ServiceRegistry(db)


def cmd_init(args: argparse.Namespace) -> int:
    """Initialize a new database."""
    db_path = get_db_path(args)

    if db_path.exists() and not args.force:
        print(f"Database already exists at {db_path}")
        print("Use --force to reinitialize (WARNING: will delete existing data)")
        return 1

    if db_path.exists() and args.force:
        db_path.unlink()

    db_path.parent.mkdir(parents=True, exist_ok=True)
    db = SQLiteDatabase(str(db_path))
    db.initialize()
    db.close()

    print(f"Initialized database at {db_path}")
    return 0


def cmd_status(args: argparse.Namespace) -> int:
    """Show database status per organization."""
    db_path = get_db_path(args)

    if not db_path.exists():
        print(f"No database found at {db_path}")
        print("Run 'pp init' to create a new database")
        return 1

    services = open_registry(db_path)
    organizations = list(services.organizations.list_all())
    print(f"Database: {db_path}")
    print(f"Organizations: {len(organizations)}")

    for org in organizations:
        companies = list(services.companies.list_by_organization(org.id))
        relations = list(services.relations.list_by_organization(org.id))
        properties = list(services.properties.list_by_organization(org.id))
        leases = list(services.leases.list_by_organization(org.id))
        tenants = list(services.tenants.list_by_organization(org.id))
        users = list(services.users.list_by_organization(org.id))
        print(
            f"  - {org.name}: {len(companies)} companies, {len(relations)} relations, "
            f"{len(properties)} properties, {len(leases)} leases, "
            f"{len(tenants)} tenants, {len(users)} users"
        )

    services.database.close()
    return 0


def cmd_version(args: argparse.Namespace) -> int:
    """Show version information."""
    print(f"{get_settings().app_name} v{__version__}")
    return 0


def cmd_serve(args: argparse.Namespace) -> int:
    """Run the HTTP API with uvicorn."""
    import uvicorn

    settings = get_settings()
    uvicorn.run(
        "property_portfolio.api.app:app",
        host=args.host or settings.api_host,
        port=int(args.port or settings.api_port),
        reload=args.reload or settings.api_reload,
    )
    return 0


def cmd_weights(args: argparse.Namespace) -> int:
    """Print every company reachable from a root company with its effective share."""
    db_path = get_db_path(args)
    if not db_path.exists():
        print(f"No database found at {db_path}")
        return 1

    try:
        organization_id = UUID(args.organization)
        root_company_id = UUID(args.company)
    except ValueError:
        print("Error: organization and company must be UUIDs")
        return 1

    services = open_registry(db_path)
    companies = {
        c.id: c for c in services.companies.list_by_organization(organization_id)
    }
    if root_company_id not in companies:
        print(f"Error: company {root_company_id} not found in organization")
        services.database.close()
        return 1

    graph = services.ownership_graph
    adjacency = graph.build_adjacency_map(organization_id)
    reachable = graph.reachable_with_weight(
        organization_id, root_company_id, adjacency=adjacency
    )

    print(f"{'Company':<40} {'First path':>12} {'All paths':>12}")
    print("-" * 66)
    for company_id, first_path_weight in reachable.items():
        total = graph.weight_from_root_to(
            organization_id, root_company_id, company_id, adjacency=adjacency
        )
        name = companies[company_id].name if company_id in companies else str(company_id)
        print(
            f"{name:<40} {_percent(first_path_weight):>12} {_percent(total):>12}"
        )

    services.database.close()
    return 0


def cmd_verify(args: argparse.Namespace) -> int:
    """Check the stored ownership graphs for cycles and over-allocated companies."""
    db_path = get_db_path(args)
    if not db_path.exists():
        print(f"No database found at {db_path}")
        return 1

    services = open_registry(db_path)
    problems = 0
    for org in services.organizations.list_all():
        with LogContext(organization_id=str(org.id)):
            problems += _verify_organization(services, org)

    services.database.close()
    if problems:
        print(f"{problems} problem(s) found")
        return 1
    print("Ownership graphs are consistent")
    return 0


def _verify_organization(services: ServiceRegistry, org: Organization) -> int:
    problems = 0
    adjacency = services.ownership_graph.build_adjacency_map(org.id)
    cycle = services.ownership_graph.detect_cycle(adjacency)
    if cycle:
        problems += 1
        logger.warning("ownership_cycle_found", cycle=[str(c) for c in cycle])
        print(f"{org.name}: cycle {' -> '.join(str(c) for c in cycle)}")

    incoming: dict[UUID, Decimal] = {}
    for relation in services.relations.list_by_organization(org.id):
        incoming[relation.child_company_id] = (
            incoming.get(relation.child_company_id, Decimal("0"))
            + relation.ownership_percentage
        )
    for company_id, total in incoming.items():
        if total > Decimal("100"):
            problems += 1
            logger.warning(
                "ownership_over_allocated", company_id=str(company_id), total=str(total)
            )
            print(f"{org.name}: company {company_id} is {total}% owned")
    return problems


def _percent(fraction: Decimal) -> str:
    return f"{fraction * 100:.2f}%"


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(
        prog="pp",
        description="Property Portfolio - ownership-aware property management",
    )
    parser.add_argument(
        "--database",
        "-d",
        help="Path to SQLite database file",
        default=None,
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # init command
    init_parser = subparsers.add_parser("init", help="Initialize a new database")
    init_parser.add_argument(
        "--force",
        "-f",
        action="store_true",
        help="Force reinitialization (deletes existing data)",
    )
    init_parser.set_defaults(func=cmd_init)

    # status command
    status_parser = subparsers.add_parser("status", help="Show database status")
    status_parser.set_defaults(func=cmd_status)

    # version command
    version_parser = subparsers.add_parser("version", help="Show version")
    version_parser.set_defaults(func=cmd_version)

    # serve command
    serve_parser = subparsers.add_parser("serve", help="Run the HTTP API")
    serve_parser.add_argument("--host", default=None, help="Bind address")
    serve_parser.add_argument("--port", default=None, help="Port to listen on")
    serve_parser.add_argument(
        "--reload", action="store_true", help="Reload on code changes"
    )
    serve_parser.set_defaults(func=cmd_serve)

    # weights command
    weights_parser = subparsers.add_parser(
        "weights", help="Show effective ownership from a company"
    )
    weights_parser.add_argument("--organization", "-o", required=True)
    weights_parser.add_argument("--company", "-c", required=True)
    weights_parser.set_defaults(func=cmd_weights)

    # verify command
    verify_parser = subparsers.add_parser(
        "verify", help="Check ownership graphs for cycles and over-allocation"
    )
    verify_parser.set_defaults(func=cmd_verify)

    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        return 0

    configure_logging()
    result: int = args.func(args)
    return result


if __name__ == "__main__":
    sys.exit(main())
