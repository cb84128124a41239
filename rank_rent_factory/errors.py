"""Error taxonomy for the plan pipeline."""


class PlanFactoryError(Exception):
    """Base class for every error raised by the pipeline."""


class ConfigurationError(PlanFactoryError):
    """The provider credential is missing or unusable."""


class SynthesisFailure(PlanFactoryError):
    """The synthesis call failed or returned nothing usable."""


class SchemaViolation(SynthesisFailure):
    """The synthesis payload did not match the plan schema.

    ``errors`` holds ``(field_path, message)`` pairs, one per offending field.
    """

    def __init__(self, message: str, errors: list[tuple[str, str]] | None = None):
        self.errors = errors or []
        if self.errors:
            details = "; ".join(f"{path}: {msg}" for path, msg in self.errors[:10])
            message = f"{message} ({details})"
        super().__init__(message)


class StateTransitionError(PlanFactoryError):
    """A session operation was invoked from a step that does not allow it."""
