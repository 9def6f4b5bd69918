# src/maa_installer/cli.py

import argparse
import sys
from pathlib import Path
from typing import List, Optional

from maa_installer import log_utils
from maa_installer.config import Channel, InstallerConfig, load_config
from maa_installer.core.maa_core import MaaCoreInstaller
from maa_installer.dirs import Dirs
from maa_installer.exceptions import MaaInstallerError


def _positive_int(value: str) -> int:
    try:
        parsed = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"not an integer: {value!r}") from None
    if parsed <= 0:
        raise argparse.ArgumentTypeError(f"must be positive: {value!r}")
    return parsed


def _add_common_install_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--channel",
        "-c",
        choices=[c.value for c in Channel],
        type=str.lower,
        help="Release channel to install from (default: configured channel)",
    )
    parser.add_argument(
        "--no-resource",
        action="store_true",
        help="Do not install resource files, only the MaaCore libraries",
    )
    parser.add_argument(
        "--timeout",
        "-t",
        type=_positive_int,
        metavar="SECONDS",
        help="Connect timeout for downloads in seconds",
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="maa-installer",
        description="maa-installer - install and update prebuilt MaaCore packages",
    )
    parser.add_argument(
        "--config",
        type=Path,
        metavar="FILE",
        help="Configuration file to use instead of the default location",
    )
    parser.add_argument(
        "--log-level",
        metavar="LEVEL",
        help="Console log level (debug, info, warning, error)",
    )
    parser.add_argument(
        "--log-file",
        action="store_true",
        help="Also write a rotating log file to the user log directory",
    )
    subparsers = parser.add_subparsers(dest="command")

    install_parser = subparsers.add_parser("install", help="Install MaaCore")
    install_parser.add_argument(
        "--force",
        "-f",
        action="store_true",
        help="Reinstall even if MaaCore is already installed",
    )
    _add_common_install_arguments(install_parser)

    update_parser = subparsers.add_parser(
        "update", help="Update MaaCore to the latest version of its channel"
    )
    _add_common_install_arguments(update_parser)

    subparsers.add_parser("version", help="Display the installed MaaCore version")

    endpoints_parser = subparsers.add_parser(
        "endpoints", help="Show the manifest and download URLs in use"
    )
    endpoints_parser.add_argument(
        "--channel",
        "-c",
        choices=[c.value for c in Channel],
        type=str.lower,
        help="Release channel to resolve (default: configured channel)",
    )

    return parser


def _resolve_config(args: argparse.Namespace) -> InstallerConfig:
    config = load_config(args.config)
    if getattr(args, "channel", None):
        config = config.with_channel(args.channel)
    if getattr(args, "timeout", None):
        config = config.with_connect_timeout(args.timeout)
    return config


def _log_endpoints(config: InstallerConfig) -> None:
    logger = log_utils.logger
    logger.info(f"Channel: {config.channel}")
    logger.info(f"MaaCore manifest: {config.core_api_url()}")
    logger.info(f"maa-cli manifest: {config.cli_api_url()}")
    download_template = config.cli_download_url("{tag}", "{name}")
    logger.info(f"maa-cli downloads: {download_template}")


def run(args: argparse.Namespace) -> int:
    """
    Execute the parsed command.

    Returns:
        int: Process exit code; 0 on success, 1 on any maa-installer failure.
    """
    dirs = Dirs()
    if args.log_level:
        log_utils.set_log_level(args.log_level)
    if args.log_file:
        log_utils.add_file_logging(dirs.log())

    try:
        config = _resolve_config(args)
        if args.command == "endpoints":
            _log_endpoints(config)
            return 0

        installer = MaaCoreInstaller(config, dirs)

        if args.command == "install":
            installer.install(force=args.force, no_resource=args.no_resource)
        elif args.command == "update":
            installer.update(no_resource=args.no_resource)
        elif args.command == "version":
            log_utils.logger.info(f"MaaCore v{installer.installed_version()}")
    except MaaInstallerError as e:
        log_utils.logger.error(str(e))
        return 1

    return 0


def main(argv: Optional[List[str]] = None) -> None:
    """
    Entry point for the maa-installer command-line interface.

    Parses arguments, runs the selected command and exits with the resulting
    status code. Without a command the help text is printed.
    """
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        sys.exit(0)

    sys.exit(run(args))


if __name__ == "__main__":
    main()
