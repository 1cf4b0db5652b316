class CompanionGateError(Exception):
    """Base class for every error raised by the metering and routing services."""


class QuotaExceeded(CompanionGateError):
    """The tier forbids the action, or the daily limit is reached and the grace reply is spent."""

    def __init__(self, user_id: str, action: str, message: str | None = None):
        self.user_id = user_id
        self.action = action
        super().__init__(message or f"Daily quota exceeded for {user_id} on action {action}")


class AccountUnavailable(CompanionGateError):
    """The credit ledger could not be read or written in time."""


class UpstreamRateLimited(CompanionGateError):
    """The generation service answered 429."""


class UpstreamPaymentRequired(CompanionGateError):
    """The generation service answered 402."""


class GenerationFailed(CompanionGateError):
    """Any other generation service failure."""


class UnknownDomain(CompanionGateError):
    def __init__(self, domain_id: str):
        self.domain_id = domain_id
        super().__init__(f"Unknown domain '{domain_id}'")


class UnknownAction(CompanionGateError):
    def __init__(self, domain_id: str, action: str):
        self.domain_id = domain_id
        self.action = action
        super().__init__(f"Domain '{domain_id}' does not offer action '{action}'")


class InvalidActionParameters(CompanionGateError):
    def __init__(self, action: str, missing: list[str]):
        self.action = action
        self.missing = missing
        super().__init__(f"Action '{action}' is missing required parameters: {', '.join(missing)}")
