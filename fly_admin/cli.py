"""
fly-admin CLI - Command-line interface over the SDK layer.

This layer provides the user-facing CLI commands, using the SDK layer
for all operations. It handles:
- Argument parsing
- TTY detection for human vs machine output
- JSON output for piping/automation
"""

import argparse
import dataclasses
import json
import logging
import sys
from typing import Any

from fly_admin.core.errors import FlyError
from fly_admin.core.result import APIResponse
from fly_admin.sdk import FlyClient

# =============================================================================
# Output Helpers
# =============================================================================


def is_tty() -> bool:
    """Check if stdout is a TTY (human) or pipe (machine)."""
    return sys.stdout.isatty()


def to_jsonable(data: Any) -> Any:
    """Convert dataclasses (and lists of them) to plain JSON values."""
    if dataclasses.is_dataclass(data) and not isinstance(data, type):
        return dataclasses.asdict(data)
    if isinstance(data, list):
        return [to_jsonable(item) for item in data]
    return data


def json_output(data: Any, pretty: bool = False) -> None:
    """Print JSON output."""
    indent = 2 if pretty or is_tty() else None
    print(json.dumps(data, indent=indent, default=str))


def error_output(error: dict[str, Any]) -> None:
    """Print error and exit."""
    json_output(error)
    sys.exit(1)


def response_output(response: APIResponse) -> None:
    """Print the data of a successful response, or its error and exit."""
    if response.error is not None:
        error_output({"error": response.error.message, "status": response.error.status})
    json_output(to_jsonable(response.data) if response.data is not None else {"success": True})


def parse_json_arg(value: str, name: str) -> Any:
    """Parse a JSON argument, reading stdin when the value is '-'."""
    raw = sys.stdin.read() if value == "-" else value
    try:
        return json.loads(raw)
    except json.JSONDecodeError as e:
        error_output({"error": f"Invalid JSON for {name}: {e}"})


# =============================================================================
# CLI Commands
# =============================================================================


def cmd_apps_list(client: FlyClient, args: argparse.Namespace) -> None:
    """List apps in an organization."""
    if args.detailed:
        response_output(client.apps.list_detailed(args.org))
    else:
        response_output(client.apps.list(args.org))


def cmd_apps_get(client: FlyClient, args: argparse.Namespace) -> None:
    """Get app details."""
    if args.detailed:
        response_output(client.apps.get_detailed(args.app))
    else:
        response_output(client.apps.get(args.app))


def cmd_apps_create(client: FlyClient, args: argparse.Namespace) -> None:
    response_output(client.apps.create(args.org, args.app, network=args.network))


def cmd_apps_delete(client: FlyClient, args: argparse.Namespace) -> None:
    response_output(client.apps.delete(args.app))


def cmd_machines_list(client: FlyClient, args: argparse.Namespace) -> None:
    """List machines of an app."""
    response = client.machines.list(args.app)
    if is_tty() and response.ok:
        for machine in response.data or []:
            print(f"{machine.id}  {machine.state or '-':<10}  {machine.region or '-':<6}  {machine.name or ''}")
        return
    response_output(response)


def cmd_machines_get(client: FlyClient, args: argparse.Namespace) -> None:
    response_output(client.machines.get(args.app, args.machine_id))


def cmd_machines_create(client: FlyClient, args: argparse.Namespace) -> None:
    """Create a machine from a JSON config."""
    config = parse_json_arg(args.config, "--config")
    response_output(client.machines.create(args.app, config, name=args.name, region=args.region))


def cmd_machines_start(client: FlyClient, args: argparse.Namespace) -> None:
    response_output(client.machines.start(args.app, args.machine_id))


def cmd_machines_stop(client: FlyClient, args: argparse.Namespace) -> None:
    response_output(client.machines.stop(args.app, args.machine_id, signal=args.signal, timeout=args.timeout))


def cmd_machines_restart(client: FlyClient, args: argparse.Namespace) -> None:
    response_output(client.machines.restart(args.app, args.machine_id, signal=args.signal, timeout=args.timeout))


def cmd_machines_delete(client: FlyClient, args: argparse.Namespace) -> None:
    response_output(client.machines.delete(args.app, args.machine_id, force=args.force))


def cmd_machines_events(client: FlyClient, args: argparse.Namespace) -> None:
    response_output(client.machines.list_events(args.app, args.machine_id))


def cmd_volumes_list(client: FlyClient, args: argparse.Namespace) -> None:
    response_output(client.volumes.list(args.app))


def cmd_volumes_get(client: FlyClient, args: argparse.Namespace) -> None:
    response_output(client.volumes.get(args.app, args.volume_id))


def cmd_volumes_create(client: FlyClient, args: argparse.Namespace) -> None:
    """Create a volume."""
    options: dict[str, Any] = {}
    if args.encrypted is not None:
        options["encrypted"] = args.encrypted
    response_output(client.volumes.create(args.app, args.name, args.region, size_gb=args.size, **options))


def cmd_volumes_delete(client: FlyClient, args: argparse.Namespace) -> None:
    response_output(client.volumes.delete(args.app, args.volume_id))


def cmd_volumes_extend(client: FlyClient, args: argparse.Namespace) -> None:
    response_output(client.volumes.extend(args.app, args.volume_id, args.size))


def cmd_volumes_snapshots(client: FlyClient, args: argparse.Namespace) -> None:
    response_output(client.volumes.list_snapshots(args.app, args.volume_id))


def cmd_secrets_set(client: FlyClient, args: argparse.Namespace) -> None:
    """Set secrets given as KEY=VALUE pairs."""
    secrets: dict[str, str] = {}
    for pair in args.pairs:
        key, sep, value = pair.partition("=")
        if not sep or not key:
            error_output({"error": f"Expected KEY=VALUE, got: {pair}"})
        secrets[key] = value
    response_output(client.secrets.set(args.app, secrets, replace_all=args.replace_all))


def cmd_secrets_unset(client: FlyClient, args: argparse.Namespace) -> None:
    response_output(client.secrets.unset(args.app, args.keys))


def cmd_org_get(client: FlyClient, args: argparse.Namespace) -> None:
    response_output(client.organizations.get(args.slug))


def cmd_regions(client: FlyClient, args: argparse.Namespace) -> None:
    """List platform regions."""
    response = client.regions.get()
    if is_tty() and response.ok:
        data = response.data
        print(f"Nearest region: {data.request_region or '-'}\n")
        for region in data.regions:
            print(f"{region.code:<6}  {region.name}")
        return
    response_output(response)


def cmd_ips_allocate(client: FlyClient, args: argparse.Namespace) -> None:
    response_output(client.networks.allocate_ip_address(args.app, ip_type=args.type, region=args.region))


def cmd_ips_release(client: FlyClient, args: argparse.Namespace) -> None:
    response_output(client.networks.release_ip_address(args.app, ip=args.ip))


# =============================================================================
# Argument Parser
# =============================================================================


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser."""
    parser = argparse.ArgumentParser(
        prog="fly-admin",
        description="Manage Fly.io apps, machines, volumes and secrets",
    )
    parser.add_argument("--token", help="Fly API token (default: FLY_API_TOKEN env var)")
    parser.add_argument("--verbose", "-v", action="store_true", help="Log HTTP requests to stderr")

    subparsers = parser.add_subparsers(dest="command")

    # ========== Apps ==========
    apps = subparsers.add_parser("apps", help="Manage apps")
    apps.set_defaults(func=lambda _c, _a: apps.print_help())
    apps_sub = apps.add_subparsers(dest="subcommand")

    a_list = apps_sub.add_parser("list", help="List apps in an organization")
    a_list.add_argument("org", help="Organization slug")
    a_list.add_argument("--detailed", "-d", action="store_true", help="Include machines and IP addresses")
    a_list.set_defaults(func=cmd_apps_list)

    a_get = apps_sub.add_parser("get", help="Get app details")
    a_get.add_argument("app", help="App name")
    a_get.add_argument("--detailed", "-d", action="store_true", help="Include machines and IP addresses")
    a_get.set_defaults(func=cmd_apps_get)

    a_create = apps_sub.add_parser("create", help="Create an app")
    a_create.add_argument("org", help="Organization slug")
    a_create.add_argument("app", help="App name")
    a_create.add_argument("--network", help="Custom private network name")
    a_create.set_defaults(func=cmd_apps_create)

    a_delete = apps_sub.add_parser("delete", help="Delete an app")
    a_delete.add_argument("app", help="App name")
    a_delete.set_defaults(func=cmd_apps_delete)

    # ========== Machines ==========
    machines = subparsers.add_parser("machines", help="Manage machines")
    machines.set_defaults(func=lambda _c, _a: machines.print_help())
    machines_sub = machines.add_subparsers(dest="subcommand")

    m_list = machines_sub.add_parser("list", help="List machines")
    m_list.add_argument("app", help="App name")
    m_list.set_defaults(func=cmd_machines_list)

    m_create = machines_sub.add_parser("create", help="Create a machine")
    m_create.add_argument("app", help="App name")
    m_create.add_argument("--config", "-c", required=True, help="Machine config JSON (or - for stdin)")
    m_create.add_argument("--name", help="Machine name")
    m_create.add_argument("--region", "-r", help="Region code")
    m_create.set_defaults(func=cmd_machines_create)

    for name, func, help_text in (
        ("get", cmd_machines_get, "Get machine details"),
        ("start", cmd_machines_start, "Start a machine"),
        ("events", cmd_machines_events, "List machine events"),
    ):
        sub = machines_sub.add_parser(name, help=help_text)
        sub.add_argument("app", help="App name")
        sub.add_argument("machine_id", help="Machine ID")
        sub.set_defaults(func=func)

    for name, func, help_text in (
        ("stop", cmd_machines_stop, "Stop a machine"),
        ("restart", cmd_machines_restart, "Restart a machine"),
    ):
        sub = machines_sub.add_parser(name, help=help_text)
        sub.add_argument("app", help="App name")
        sub.add_argument("machine_id", help="Machine ID")
        sub.add_argument("--signal", "-s", help="Signal to send (e.g. SIGINT)")
        sub.add_argument("--timeout", "-t", help="Grace period (e.g. 30s)")
        sub.set_defaults(func=func)

    m_delete = machines_sub.add_parser("delete", help="Destroy a machine")
    m_delete.add_argument("app", help="App name")
    m_delete.add_argument("machine_id", help="Machine ID")
    m_delete.add_argument("--force", "-f", action="store_true", help="Kill the machine if it is running")
    m_delete.set_defaults(func=cmd_machines_delete)

    # ========== Volumes ==========
    volumes = subparsers.add_parser("volumes", help="Manage volumes")
    volumes.set_defaults(func=lambda _c, _a: volumes.print_help())
    volumes_sub = volumes.add_subparsers(dest="subcommand")

    v_list = volumes_sub.add_parser("list", help="List volumes")
    v_list.add_argument("app", help="App name")
    v_list.set_defaults(func=cmd_volumes_list)

    for name, func, help_text in (
        ("get", cmd_volumes_get, "Get volume details"),
        ("delete", cmd_volumes_delete, "Delete a volume"),
        ("snapshots", cmd_volumes_snapshots, "List volume snapshots"),
    ):
        sub = volumes_sub.add_parser(name, help=help_text)
        sub.add_argument("app", help="App name")
        sub.add_argument("volume_id", help="Volume ID")
        sub.set_defaults(func=func)

    v_create = volumes_sub.add_parser("create", help="Create a volume")
    v_create.add_argument("app", help="App name")
    v_create.add_argument("name", help="Volume name")
    v_create.add_argument("--region", "-r", required=True, help="Region code")
    v_create.add_argument("--size", "-s", type=int, help="Size in GB")
    v_create.add_argument(
        "--encrypted",
        action=argparse.BooleanOptionalAction,
        default=None,
        help="Encrypt the volume",
    )
    v_create.set_defaults(func=cmd_volumes_create)

    v_extend = volumes_sub.add_parser("extend", help="Grow a volume")
    v_extend.add_argument("app", help="App name")
    v_extend.add_argument("volume_id", help="Volume ID")
    v_extend.add_argument("size", type=int, help="New size in GB")
    v_extend.set_defaults(func=cmd_volumes_extend)

    # ========== Secrets ==========
    secrets = subparsers.add_parser("secrets", help="Manage app secrets")
    secrets.set_defaults(func=lambda _c, _a: secrets.print_help())
    secrets_sub = secrets.add_subparsers(dest="subcommand")

    s_set = secrets_sub.add_parser("set", help="Set secrets")
    s_set.add_argument("app", help="App name")
    s_set.add_argument("pairs", nargs="+", metavar="KEY=VALUE", help="Secrets to set")
    s_set.add_argument("--replace-all", action="store_true", help="Remove secrets not listed")
    s_set.set_defaults(func=cmd_secrets_set)

    s_unset = secrets_sub.add_parser("unset", help="Unset secrets")
    s_unset.add_argument("app", help="App name")
    s_unset.add_argument("keys", nargs="+", metavar="KEY", help="Secret names to remove")
    s_unset.set_defaults(func=cmd_secrets_unset)

    # ========== Organizations ==========
    org = subparsers.add_parser("org", help="Read organizations")
    org.set_defaults(func=lambda _c, _a: org.print_help())
    org_sub = org.add_subparsers(dest="subcommand")

    o_get = org_sub.add_parser("get", help="Get organization details")
    o_get.add_argument("slug", help="Organization slug")
    o_get.set_defaults(func=cmd_org_get)

    # ========== Regions ==========
    regions = subparsers.add_parser("regions", help="List platform regions")
    regions.set_defaults(func=cmd_regions)

    # ========== IP addresses ==========
    ips = subparsers.add_parser("ips", help="Manage app IP addresses")
    ips.set_defaults(func=lambda _c, _a: ips.print_help())
    ips_sub = ips.add_subparsers(dest="subcommand")

    i_alloc = ips_sub.add_parser("allocate", help="Allocate an IP address")
    i_alloc.add_argument("app", help="App name")
    i_alloc.add_argument(
        "--type",
        "-t",
        default="v6",
        choices=["v4", "v6", "private_v6", "shared_v4"],
        help="Address type",
    )
    i_alloc.add_argument("--region", "-r", help="Region code")
    i_alloc.set_defaults(func=cmd_ips_allocate)

    i_release = ips_sub.add_parser("release", help="Release an IP address")
    i_release.add_argument("app", help="App name")
    i_release.add_argument("ip", help="IP address")
    i_release.set_defaults(func=cmd_ips_release)

    return parser


def main(argv: list[str] | None = None) -> None:
    """Main CLI entry point."""
    parser = create_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        sys.exit(0)

    if args.verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")

    try:
        client = FlyClient(api_key=args.token)
    except FlyError as e:
        error_output(e.to_dict())

    # Run command (all subparsers have default funcs that print help)
    args.func(client, args)


if __name__ == "__main__":
    main()
