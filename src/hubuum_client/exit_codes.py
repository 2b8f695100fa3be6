"""Numeric process exit codes used by the ``hubuum-client`` command line.

Each constant maps to a specific error category and is referenced by the
corresponding :class:`~hubuum_client.exceptions.HubuumError` subclass.
Shell wrappers can inspect the exit code to decide whether to
re-authenticate, retry, or abort without parsing stderr.

Example::

    $ hubuum-client find classes --filter name=router --single
    $ echo $?
    8   # EXIT_AMBIGUOUS_RESULT -- more than one class matched
"""

EXIT_SUCCESS = 0
"""The command completed successfully."""

EXIT_GENERIC_FAILURE = 1
"""An unclassified error occurred."""

EXIT_INVALID_USAGE = 2
"""The command was invoked with invalid arguments or an illegal client state."""

EXIT_AUTH_FAILURE = 3
"""Login failed, or the server rejected the token on a later call."""

EXIT_NOT_FOUND = 4
"""The requested resource was not found."""

EXIT_SERVER_ERROR = 5
"""The remote API returned an HTTP 5xx server error."""

EXIT_CONNECTION_ERROR = 6
"""A network-level error occurred (timeout, DNS failure, connection refused)."""

EXIT_VALIDATION_ERROR = 7
"""The server rejected a payload or filter, or a response could not be decoded."""

EXIT_AMBIGUOUS_RESULT = 8
"""A single-result query matched more than one resource."""
