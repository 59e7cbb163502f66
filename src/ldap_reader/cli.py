# # Copyright (c) 2024 LDAP Reader
# # SPDX-License-Identifier: MIT
# #
# # LDAP Reader
# # Paged search client for LDAP directory services

"""Command line reader printing the entries of a paged search."""

import argparse
import os
import sys

from .config.loader import CONFIG_ENV_VAR, load_config, validate_config
from .config.models import Config, LDAPConfig, LoggingConfig, PagingConfig, SearchConfig
from .core.exceptions import LDAPReaderError
from .core.logging import get_logger, setup_logging
from .reader import LDAPReader

logger = get_logger(__name__)

SEPARATOR = "-" * 57


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Paged LDAP search reader")
    parser.add_argument("--config", help=f"Configuration file (default: ${CONFIG_ENV_VAR})")
    parser.add_argument("--server", help="LDAP server URI")
    parser.add_argument("--bind-dn", help="Full DN of the bind user")
    parser.add_argument("--password", help="Password of the bind user")
    parser.add_argument("--base", help="Search base DN")
    parser.add_argument("--filter", help="LDAP search filter")
    parser.add_argument(
        "--attribute",
        "-a",
        action="append",
        dest="attributes",
        help="Attribute to print, repeatable",
    )
    parser.add_argument("--page-size", type=int, help="Entries per page")
    parser.add_argument("--limit", type=int, default=0, help="Stop after N entries (0 = all)")
    parser.add_argument("--log-level", help="Logging level")
    return parser


def resolve_config(args: argparse.Namespace) -> Config:
    """Merge the configuration file (if any) with command line overrides."""
    config_path = args.config or os.getenv(CONFIG_ENV_VAR)
    if config_path:
        config = load_config(config_path)
    elif args.server and args.base:
        config = Config(ldap=LDAPConfig(server=args.server), search=SearchConfig(base=args.base))
    else:
        raise ValueError(
            f"Provide --config, set {CONFIG_ENV_VAR}, or pass both --server and --base"
        )

    ldap_overrides = {
        key: value
        for key, value in {
            "server": args.server,
            "bind_dn": args.bind_dn,
            "password": args.password,
        }.items()
        if value is not None
    }
    if ldap_overrides:
        config.ldap = LDAPConfig(**{**config.ldap.model_dump(), **ldap_overrides})

    search = config.search or SearchConfig(base=args.base or "")
    search_overrides = {
        key: value
        for key, value in {
            "base": args.base,
            "filter": args.filter,
            "attributes": args.attributes,
        }.items()
        if value is not None
    }
    config.search = SearchConfig(**{**search.model_dump(), **search_overrides})
    if not config.search.base:
        raise ValueError("Search base is required")

    if args.page_size is not None:
        config.paging = PagingConfig(
            **{**config.paging.model_dump(), "page_size": args.page_size}
        )
    if args.log_level:
        config.logging = LoggingConfig(
            level=args.log_level, format=config.logging.format, file=config.logging.file
        )

    return config


def print_entries(reader: LDAPReader, attributes: list[str], limit: int = 0, out=None) -> int:
    """
    Print the DN and attribute values of each entry.

    Args:
        reader: Reader positioned before the first entry of a query
        attributes: Attributes to print, empty for every returned attribute
        limit: Stop after this many entries, 0 for no limit
        out: Output stream, stdout by default

    Returns:
        Number of entries printed
    """
    out = out or sys.stdout
    printed = 0

    while reader.fetch():
        print(SEPARATOR, file=out)
        print(reader.current_dn, file=out)
        # all attributes were requested, print whatever the server returned
        names = attributes or list(reader.cursor.current_entry.get("raw_attributes") or {})
        for name in names:
            with reader.get_attribute(name) as values:
                for value in values.decode():
                    print(f"{name}: {value}", file=out)
        print(SEPARATOR, file=out)

        printed += 1
        if limit and printed >= limit:
            break

    return printed


def main(argv: list[str] | None = None) -> int:
    """Run a paged search and print the results."""
    args = build_parser().parse_args(argv)

    try:
        config = resolve_config(args)
        validate_config(config)
    except (OSError, ValueError) as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        return 2

    setup_logging(config.logging)

    try:
        with LDAPReader.from_config(config) as reader:
            if not reader.session.is_bound:
                reader.bind("", "")
            reader.query(config.search.filter, config.search.base, config.search.attributes)
            count = print_entries(reader, config.search.attributes, args.limit)
    except LDAPReaderError as e:
        logger.error(f"LDAP error: {e}")
        print(e, file=sys.stderr)
        return 1

    logger.info(f"Printed {count} entries")
    return 0


if __name__ == "__main__":
    sys.exit(main())
