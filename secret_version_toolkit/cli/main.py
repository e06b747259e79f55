"""CLI entrypoint for secret-version-toolkit."""
import sys
import json
import argparse
import logging
from pathlib import Path

from .validators import validate_secret_id, validate_selector

VERSION = "0.1.0"

# Configure logging to stderr
logging.basicConfig(
    level=logging.WARNING,
    format="%(message)s",
    stream=sys.stderr
)
logger = logging.getLogger(__name__)


def cmd_version(args):
    """Show version information."""
    print(f"secret-version-toolkit {VERSION}")


def cmd_config_set_path(args):
    """Set config file path preference."""
    from secret_version_toolkit.secrets.domains.preferences import set_preference

    config_path = Path(args.path).resolve()

    if not config_path.exists():
        print(f"Error: Config file does not exist: {config_path}", file=sys.stderr)
        sys.exit(1)

    if not config_path.is_file():
        print(f"Error: Path is not a file: {config_path}", file=sys.stderr)
        sys.exit(1)

    set_preference("config_path", str(config_path))
    print(f"Config path set to: {config_path}")


def cmd_config_show(args):
    """Show current config file path."""
    from secret_version_toolkit.secrets.domains.config_loader import default_config_path
    from secret_version_toolkit.secrets.domains.preferences import get_preference

    config_path_pref = get_preference("config_path")

    if config_path_pref:
        config_path = Path(config_path_pref)
        if config_path.exists():
            print(f"Config path: {config_path}")
        else:
            print(f"Config path (from preference, but file not found): {config_path}")
        print("Source: preference")
    else:
        default_config = default_config_path()
        print(f"Config path: {default_config}")
        if default_config.exists():
            print("Source: default")
        else:
            print("Source: default (file not found)")


def cmd_config_clear(args):
    """Clear config path preference."""
    from secret_version_toolkit.secrets.domains.config_loader import default_config_path
    from secret_version_toolkit.secrets.domains.preferences import clear_preference

    clear_preference("config_path")
    print(f"Config path preference cleared. Will use default: {default_config_path()}")


def _write_payload(store):
    secret_string = store.get("secret_string")
    if secret_string:
        print(secret_string)
        return
    # Binary payloads are written back as the original bytes
    binary = store.get("secret_binary").encode("utf-8", errors="surrogateescape")
    sys.stdout.flush()
    sys.stdout.buffer.write(binary)
    sys.stdout.buffer.flush()


def cmd_secrets_get_version(args):
    """Resolve one version of a secret."""
    from secret_version_toolkit.secrets.domains.config_loader import ConfigError
    from secret_version_toolkit.secrets.domains.errors import AttributeAssignmentError, SecretLookupError
    from secret_version_toolkit.secrets.workflows.secret_operations import get_secret_version

    validate_secret_id(args.secret_id)
    if args.version_id is not None:
        validate_selector("--version-id", args.version_id)
    if args.version_stage is not None:
        validate_selector("--version-stage", args.version_stage)

    try:
        store = get_secret_version(
            args.secret_id,
            version_id=args.version_id,
            version_stage=args.version_stage,
            backend=args.backend,
        )
    except (SecretLookupError, AttributeAssignmentError, ConfigError) as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)

    if args.quiet:
        _write_payload(store)
        sys.exit(0)

    attributes = store.as_dict() if args.show_secret else store.redacted()
    print(json.dumps({"id": store.id, "attributes": attributes}, indent=2))
    sys.exit(0)


def build_parser():
    parser = argparse.ArgumentParser(
        prog="secretver",
        description="secret-version-toolkit CLI - look up one version of a secret in AWS Secrets Manager or GCP Secret Manager",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Exit codes:
  0 - Success
  1 - Runtime error (secret not found, store error, configuration error)
  2 - Usage error (invalid arguments, invalid secret id format)

Environment variables:
  SECRET_STORE_BACKEND - aws or gcp (overrides config file)
  AWS_REGION, AWS_DEFAULT_REGION, AWS_PROFILE - AWS settings (override config file)
  GCP_PROJECT - GCP project ID (overrides config file)

Configuration:
  Default location: ~/.config/secret-version-toolkit/config.yml
  Custom path: Set with 'secretver config set-path <path>'
  View current: Run 'secretver config show'
        """
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Enable debug logging on stderr"
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    subparsers.add_parser(
        "version",
        help="Show version information",
        description="Display the current version of secret-version-toolkit"
    )

    config_parser = subparsers.add_parser(
        "config",
        help="Configuration management",
        description="Manage secret-version-toolkit configuration"
    )
    config_subparsers = config_parser.add_subparsers(dest="config_command")

    config_set_path_parser = config_subparsers.add_parser(
        "set-path",
        help="Set config file path",
        description="Store the absolute path to your config file in ~/.config/secret-version-toolkit/preferences.json"
    )
    config_set_path_parser.add_argument("path", help="Path to config file")

    config_subparsers.add_parser(
        "show",
        help="Show current config path",
        description="Display the current configuration file path and whether it comes from a preference or the default location"
    )
    config_subparsers.add_parser(
        "clear",
        help="Clear config path preference",
        description="Remove the config path preference and fall back to the default location"
    )

    secrets_parser = subparsers.add_parser(
        "secrets",
        help="Secret lookup operations",
        description="Read secrets from the configured secret store"
    )
    secrets_subparsers = secrets_parser.add_subparsers(dest="secrets_command")

    get_version_parser = secrets_subparsers.add_parser(
        "get-version",
        help="Get one version of a secret",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        description="""
Resolve exactly one version of a secret.

Without --version-id or --version-stage the current version (AWSCURRENT) is
returned. Output is a JSON document with the id "<secret_id>|<version>" and the
secret's attributes; secret values are masked unless --show-secret is given.

Exit codes:
  0 - Secret version found
  1 - Secret or version not found, store or configuration error
  2 - Invalid arguments
        """
    )
    get_version_parser.add_argument(
        "secret_id",
        help="Secret name, ARN, or GCP resource name"
    )
    selector = get_version_parser.add_mutually_exclusive_group()
    selector.add_argument("--version-id", help="Concrete version to fetch")
    selector.add_argument("--version-stage", help="Stage label (or GCP alias) to fetch, default AWSCURRENT")
    get_version_parser.add_argument(
        "--backend",
        choices=["aws", "gcp"],
        help="Secret store to query (default from SECRET_STORE_BACKEND or config file)"
    )
    get_version_parser.add_argument(
        "--show-secret",
        action="store_true",
        help="Include secret_string and secret_binary in the JSON output"
    )
    get_version_parser.add_argument(
        "-q", "--quiet",
        action="store_true",
        help="Output only the secret payload, useful for scripts"
    )

    return parser, {"config": config_parser, "secrets": secrets_parser}


def main(argv=None):
    """Main CLI entrypoint.

    Exit codes:
        0 - Success
        1 - Runtime errors (secret not found, store errors, configuration)
        2 - Usage errors (invalid arguments, invalid secret id format, etc.)
    """
    parser, group_parsers = build_parser()
    args = parser.parse_args(argv)

    if args.verbose:
        logging.getLogger().setLevel(logging.DEBUG)

    if not args.command:
        parser.print_help()
        sys.exit(2)

    try:
        if args.command == "version":
            cmd_version(args)
        elif args.command == "config":
            if args.config_command == "set-path":
                cmd_config_set_path(args)
            elif args.config_command == "show":
                cmd_config_show(args)
            elif args.config_command == "clear":
                cmd_config_clear(args)
            else:
                group_parsers["config"].print_help()
                sys.exit(2)
        elif args.command == "secrets":
            if args.secrets_command == "get-version":
                cmd_secrets_get_version(args)
            else:
                group_parsers["secrets"].print_help()
                sys.exit(2)
        else:
            parser.print_help()
            sys.exit(2)
    except KeyboardInterrupt:
        print("\nInterrupted", file=sys.stderr)
        sys.exit(1)
    except Exception as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
