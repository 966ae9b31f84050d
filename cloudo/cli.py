"""
cloudo command line

Usage:
    cloudo version
    cloudo aws [--region R] [--profile P] create [--vpc-cidr C] [--instances N] ...
"""

import argparse
import logging
import signal
import sys
import threading
from typing import List, Optional

from . import __version__
from .aws_profiles import create_ec2_client, create_session, get_current_profile, validate_credentials
from .config import (
    ANYWHERE_CIDR,
    DEFAULT_CALL_TIMEOUT,
    DEFAULT_INSTANCE_COUNT,
    DEFAULT_MAX_RETRIES,
    DEFAULT_PROFILE,
    DEFAULT_REGION,
    DEFAULT_VPC_CIDR,
    ProvisionRequest,
)
from .errors import AuthenticationFailure, ProvisioningCancelled
from .provisioner import NetworkProvisioner
from .utils.ip import format_cidr_from_ip, get_local_public_ip

module_logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_FAILURE = 1
EXIT_USAGE = 2
EXIT_CANCELLED = 130

LOG_FORMAT = "%(asctime)s %(levelname)s %(message)s"

def configure_logging(debug: bool = False) -> None:
    """Send progress lines to stderr; --debug also shows botocore's logs."""
    logging.basicConfig(level=logging.DEBUG if debug else logging.INFO, format=LOG_FORMAT)
    if not debug:
        for name in ("botocore", "boto3", "urllib3"):
            logging.getLogger(name).setLevel(logging.WARNING)

def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser."""
    parser = argparse.ArgumentParser(
        prog="cloudo",
        description="Cloud fast provisioning script",
    )
    parser.add_argument("--debug", action="store_true", help="Debug mode")

    subparsers = parser.add_subparsers(dest="command", help="Command to run")

    version_parser = subparsers.add_parser("version", help="cloudo version")
    version_parser.set_defaults(func=handle_version)

    # AWS provider group
    aws_parser = subparsers.add_parser("aws", help="Amazon Web Services")
    aws_parser.add_argument("--region", default=DEFAULT_REGION, help=f"AWS Region (default: {DEFAULT_REGION})")
    aws_parser.add_argument("--profile", default=DEFAULT_PROFILE,
                            help="AWS Profile (default: boto3 credential chain)")
    aws_subparsers = aws_parser.add_subparsers(dest="aws_command", help="AWS command to run")
    aws_subparsers.required = True

    create_parser = aws_subparsers.add_parser(
        "create",
        help="Provision a VPC, Subnet, Security group with open ssh access and attached IG",
    )
    create_parser.add_argument("--vpc-cidr", default=DEFAULT_VPC_CIDR,
                               help=f"CIDR block for the VPC (default: {DEFAULT_VPC_CIDR})")
    create_parser.add_argument("--instances", type=int, default=DEFAULT_INSTANCE_COUNT,
                               help="Number of instances (reserved, not launched yet)")
    create_parser.add_argument("--timeout", type=float, default=DEFAULT_CALL_TIMEOUT,
                               help=f"Timeout in seconds for each API call (default: {DEFAULT_CALL_TIMEOUT:g})")
    create_parser.add_argument("--max-retries", type=int, default=DEFAULT_MAX_RETRIES,
                               help=f"Retries for throttled or unavailable calls (default: {DEFAULT_MAX_RETRIES})")
    create_parser.add_argument("--teardown-on-failure", action="store_true",
                               help="Delete already created resources if a step fails")
    ssh_group = create_parser.add_mutually_exclusive_group()
    ssh_group.add_argument("--ssh-cidr", default=ANYWHERE_CIDR,
                           help=f"Sources allowed to SSH in (default: {ANYWHERE_CIDR})")
    ssh_group.add_argument("--ssh-from-my-ip", action="store_true",
                           help="Only allow SSH from this machine's public IP")
    create_parser.set_defaults(func=handle_create)

    return parser

def handle_version(args) -> int:
    """Handle the version command."""
    print(f"Current version: {__version__}")
    return EXIT_OK

def _resolve_ssh_cidr(args) -> Optional[str]:
    if not args.ssh_from_my_ip:
        return args.ssh_cidr
    ip = get_local_public_ip()
    if not ip:
        return None
    cidr = format_cidr_from_ip(ip)
    module_logger.info(f"Restricting SSH access to {cidr}")
    return cidr

def handle_create(args) -> int:
    """Handle the aws create command."""
    ssh_cidr = _resolve_ssh_cidr(args)
    if ssh_cidr is None:
        print("Error: Could not determine current IP address", file=sys.stderr)
        return EXIT_FAILURE

    try:
        request = ProvisionRequest(
            vpc_cidr=args.vpc_cidr,
            instance_count=args.instances,
            region=args.region,
            profile=args.profile,
            call_timeout=args.timeout,
            max_retries=args.max_retries,
            teardown_on_failure=args.teardown_on_failure,
            ssh_cidr=ssh_cidr,
        ).validate()
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        return EXIT_USAGE

    module_logger.info(f"Using profile {request.profile or get_current_profile() or 'default'} in {request.region}")
    try:
        session = create_session(request.profile, request.region)
        validate_credentials(session, request.call_timeout)
        ec2_client = create_ec2_client(session, request.call_timeout)
    except AuthenticationFailure as e:
        print(f"Error: {e}", file=sys.stderr)
        return EXIT_FAILURE

    cancel_event = threading.Event()

    def _cancel(signum, frame):
        if request.teardown_on_failure:
            module_logger.warning("Cancelling after the current request; created resources will be torn down")
        else:
            module_logger.warning("Cancelling after the current request; created resources stay in place")
        cancel_event.set()

    previous_handler = signal.signal(signal.SIGINT, _cancel)
    try:
        state, error = NetworkProvisioner(ec2_client).provision(request, cancel_event)
    finally:
        signal.signal(signal.SIGINT, previous_handler)

    if error is not None:
        print(f"Error: {error}", file=sys.stderr)
        return EXIT_CANCELLED if isinstance(error, ProvisioningCancelled) else EXIT_FAILURE

    for name, value in state.as_dict().items():
        module_logger.info(f"{name}: {value}")
    return EXIT_OK

def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return EXIT_USAGE
    configure_logging(args.debug)
    return args.func(args)

if __name__ == "__main__":
    sys.exit(main())
