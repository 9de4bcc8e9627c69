import argparse
import os
from functools import lru_cache
from pathlib import Path


@lru_cache
def get_cli_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="ringctl",
        description=(
            "Discover the hash ring of a storage cluster from one daemon and\n"
            "check that every other daemon agrees with it."
        ),
        formatter_class=argparse.RawTextHelpFormatter
    )

    parser.add_argument(
        "-c", "--config",
        type=str,
        help="Path to a ringwatch configuration file"
    )

    parser.add_argument(
        "-s", "--seed",
        type=str,
        help="Seed daemon (host:port) to discover the cluster from"
    )

    parser.add_argument(
        "-o", "--output",
        type=str,
        default="yaml",
        choices=["yaml", "json"],
        help="Output format"
    )

    parser.add_argument(
        "-l", "--log-level",
        type=str,
        default="WARNING",
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        help=(
            "Logging verbosity.\n"
            "DEBUG    → every probe and its answer.\n"
            "INFO     → discovery progress.\n"
            "WARNING  → unreachable peers and inconsistencies (default).\n"
        ),
    )

    sub = parser.add_subparsers(dest="command", required=True)
    sub.add_parser("servers", help="List the daemons of the cluster")
    sub.add_parser("health", help="Check that every daemon agrees on the ring")
    sub.add_parser("ring", help="Show the ring as declared by the seed")
    locate = sub.add_parser("locate", help="Show the node owning a key")
    locate.add_argument("key")

    return parser.parse_args()


@lru_cache
def get_configfile() -> Path | None:
    args = get_cli_args()

    # Priority: CLI > ENV > default file in current working directory
    raw = args.config or os.getenv("RINGWATCHCONFIG")

    if raw is None:
        file = Path.cwd() / "ringwatch.yaml"
        return file if file.is_file() else None

    file = Path(raw)
    if not file.is_file():
        raise SystemExit(
            f"[config] Configuration file not found: '{file}'.\n"
            "  - Use --config <file.yaml>\n"
            "  - Or set the RINGWATCHCONFIG environment variable\n"
            "  - Or place a 'ringwatch.yaml' file in the current working directory."
        )

    return file
