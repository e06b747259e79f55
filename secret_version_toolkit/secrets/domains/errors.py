"""Exceptions raised by secret version lookups."""


class SecretLookupError(Exception):
    """Base class for failed secret version lookups."""
    pass


class SecretVersionNotFoundError(SecretLookupError):
    """The secret, the requested version, or the stage does not exist.

    Also raised when the secret has been deleted.
    """

    def __init__(self, secret_id: str, version: str):
        self.secret_id = secret_id
        self.version = version
        super().__init__(f'Secret "{secret_id}" version "{version}" not found')


class UpstreamLookupError(SecretLookupError):
    """Any other failure reported by the secret store.

    ``message`` keeps the store's error text unmodified.
    """

    def __init__(self, message: str):
        self.message = message
        super().__init__(f"reading secret version: {message}")


class AttributeAssignmentError(Exception):
    """A resolved value could not be stored in an attribute slot."""

    def __init__(self, attribute: str, reason: str):
        self.attribute = attribute
        self.reason = reason
        super().__init__(f"setting {attribute}: {reason}")
