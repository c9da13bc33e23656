from core.exceptions import DomainError


class ValidationRejected(DomainError, ValueError):
    """The file never entered the upload pipeline."""

    status_code = 400


class TransferFailed(DomainError, RuntimeError):
    """The storage transfer of an accepted file broke off."""

    status_code = 502


class TransferCancelled(Exception):
    """Raised inside a running transfer once its unit has been removed."""


class FinalizeIncomplete(DomainError):
    status_code = 409

    def __init__(self, pending=(), failed=(), missing_platforms=()):
        self.pending = list(pending)
        self.failed = list(failed)
        self.missing_platforms = list(missing_platforms)
        parts = []
        if self.pending:
            parts.append(f"{len(self.pending)} upload(s) still in progress")
        if self.failed:
            parts.append(f"{len(self.failed)} upload(s) failed")
        if self.missing_platforms:
            parts.append("no completed build for " + ", ".join(p.value for p in self.missing_platforms))
        super().__init__("; ".join(parts) or "Uploads are incomplete")

    def to_dict(self):
        data = super().to_dict()
        data.update(
            {
                "pending": [unit.id for unit in self.pending],
                "failed": [unit.id for unit in self.failed],
                "missing_platforms": [p.value for p in self.missing_platforms],
            }
        )
        return data
