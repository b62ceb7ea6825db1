"""Domain exceptions raised by services, agents and the job runner."""


class BidGuardError(Exception):
    """Base class for all application errors."""


class AgentError(BidGuardError):
    """An LLM agent could not produce usable output."""


class LLMUnavailableError(BidGuardError):
    """No LLM provider is configured, or every configured provider failed."""


class InvalidTransitionError(BidGuardError):
    """A proposal status change that the state machine does not allow."""

    def __init__(self, proposal_id: str, target: str, current: str = None):
        self.proposal_id = proposal_id
        self.target = target
        self.current = current
        super().__init__(
            f"Cannot move proposal {proposal_id} from {current or 'unknown'} to {target}"
        )


class NonRetriableError(BidGuardError):
    """Raised inside a job handler to fail the run without further retries."""


class InsufficientCreditsError(BidGuardError):
    """The user has no generation credits remaining."""


class NotFoundError(BidGuardError):
    """A requested record does not exist (or is not visible to the caller)."""
