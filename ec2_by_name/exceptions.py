"""Custom exception hierarchy for ec2-by-name."""


class Ec2ByNameError(Exception):
    """Base exception for all ec2-by-name errors."""


class ConfigError(Ec2ByNameError):
    """Invalid or missing configuration."""


class UsageError(Ec2ByNameError):
    """The command line was syntactically valid but semantically incomplete."""


class TimeSpecError(Ec2ByNameError, ValueError):
    """A --duration or --time argument could not be parsed."""


class ResolveError(Ec2ByNameError):
    """DNS resolution of a host name failed."""

    def __init__(self, message: str, host_name: str | None = None):
        super().__init__(message)
        self.host_name = host_name


class QueryError(Ec2ByNameError):
    """A describe_instances page could not be fetched."""


class LifecycleError(Ec2ByNameError):
    """A start/stop/reboot/terminate call failed."""

    def __init__(self, message: str, action: str | None = None):
        super().__init__(message)
        self.action = action


class TagError(Ec2ByNameError):
    """A create_tags call failed."""
