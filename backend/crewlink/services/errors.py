"""
Domain errors raised by the listing and application services.
The API layer maps each one to an HTTP status (see crewlink.main).
"""


class CrewLinkError(Exception):
    """Base class for domain errors"""
    pass


class NotFoundError(CrewLinkError):
    """Referenced posting, application, employer or notification is absent"""
    pass


class InvalidTransitionError(CrewLinkError):
    """Raised when an invalid state transition is attempted"""
    pass


class ConflictError(CrewLinkError):
    """Candidate edit attempted after the application left pending"""
    pass


class ValidationError(CrewLinkError):
    """Mandatory input missing (e.g. decision reason)"""
    pass


class UpstreamReadError(CrewLinkError):
    """A store call failed or timed out"""
    pass
