"""Error taxonomy for the tournament engine.

Every error carries a human-readable reason and the HTTP status the API
layer answers with. Services raise; the app factory turns them into JSON.
"""


class EngineError(Exception):
    """Base class for all engine failures."""

    status_code = 400

    def __init__(self, message):
        super().__init__(message)
        self.message = message


class NotFound(EngineError):
    """Unknown match, team, form or league."""

    status_code = 404


class AlreadyFinished(EngineError):
    """A result was submitted for a match that is already finished."""

    status_code = 409


class InconsistentGroupState(EngineError):
    """Teams are not in the same group, or standing rows are missing."""

    status_code = 409


class MalformedCode(EngineError):
    """A slot code does not match any known format."""

    status_code = 400


class UnresolvedDependency(EngineError):
    """A third-place code has no assignment for its match."""

    status_code = 409


class NotYetComputed(EngineError):
    """Third-place qualification has not run yet."""

    status_code = 409


class NoAssignmentForCombination(EngineError):
    """The static third-place table is missing or incomplete."""

    status_code = 500


class InvalidResult(EngineError):
    """Negative or implausible scores, or a knockout draw without a valid winner."""

    status_code = 400
