"""Application error types."""


class EstimatorError(RuntimeError):
    """Permanent failure reported by, or while talking to, the estimator."""


class TransientEstimatorError(EstimatorError):
    """Estimator is rate limited or overloaded; the call may be retried."""


class MalformedResponseError(EstimatorError):
    """Estimator response was not JSON or did not match the expected shape."""


class EntryNotFoundError(LookupError):
    """No log entry exists with the requested id."""


class BackupImportError(ValueError):
    """Backup document is not a recognizable profile/logs export."""
