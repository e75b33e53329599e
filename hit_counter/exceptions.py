"""
Error taxonomy for the hit services.

- HitValidationError: bad client input, answered with a 400
- StorageConnectError: raised only while selecting a backend at startup,
  turned into an in-memory fallback by the factory
- StorageOperationError: a backend call failed while serving a request,
  answered with a 500 and never retried
"""


class HitCounterError(Exception):
    """Base class for all hit service errors"""


class HitValidationError(HitCounterError):
    """Missing or malformed hit input"""


class StorageConnectError(HitCounterError):
    """Durable store could not be reached or bootstrapped at startup"""


class StorageOperationError(HitCounterError):
    """A storage call failed after the backend was selected"""
