class BatchJobError(Exception):
    """Base class for batch job lifecycle errors."""


class BatchJobNotFoundError(BatchJobError):
    pass


class InvalidTransitionError(BatchJobError):
    def __init__(self, current: str, target: str) -> None:
        super().__init__(f"Cannot move batch job from {current!r} to {target!r}")
        self.current = current
        self.target = target


class BatchJobSetupError(BatchJobError):
    """Raised when a run fails before any garment was attempted."""


class CheckpointWriteError(BatchJobError):
    """Raised when a progress snapshot could not be persisted after every attempt."""
