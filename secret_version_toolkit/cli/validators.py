"""Input validation for CLI arguments."""
import re
import sys

# Union of AWS secret name/ARN characters and GCP resource name characters
SECRET_ID_PATTERN = re.compile(r'^[A-Za-z0-9/_+=.@:-]+$')
MAX_SECRET_ID_LENGTH = 2048
MAX_SELECTOR_LENGTH = 256


def validate_secret_id(secret_id: str) -> None:
    """
    Validate a secret name, ARN, or GCP resource name.

    Raises:
        SystemExit with code 2 if validation fails
    """
    if not secret_id:
        print("Error: Secret id cannot be empty", file=sys.stderr)
        sys.exit(2)

    if len(secret_id) > MAX_SECRET_ID_LENGTH:
        print(f"Error: Secret id is longer than {MAX_SECRET_ID_LENGTH} characters", file=sys.stderr)
        sys.exit(2)

    if not SECRET_ID_PATTERN.match(secret_id):
        print(f"Error: Invalid secret id '{secret_id}'", file=sys.stderr)
        print("\nAllowed characters: letters, numbers and / _ + = . @ : -", file=sys.stderr)
        print("\nExamples of valid ids:", file=sys.stderr)
        print("  ✓ db/prod", file=sys.stderr)
        print("  ✓ arn:aws:secretsmanager:us-east-1:123456789012:secret:db/prod-AbCdEf", file=sys.stderr)
        print("  ✓ projects/my-project/secrets/DB_PASSWORD", file=sys.stderr)
        sys.exit(2)


def validate_selector(kind: str, value: str) -> None:
    """
    Validate a --version-id or --version-stage value.

    Args:
        kind: Option name used in the error message
        value: Value given on the command line

    Raises:
        SystemExit with code 2 if validation fails
    """
    if not value or value.strip() != value:
        print(f"Error: {kind} cannot be empty or padded with whitespace", file=sys.stderr)
        sys.exit(2)

    if len(value) > MAX_SELECTOR_LENGTH:
        print(f"Error: {kind} is longer than {MAX_SELECTOR_LENGTH} characters", file=sys.stderr)
        sys.exit(2)
