class ConfigurationError(ValueError):
    """
    Raised when a deployment parameter cannot be resolved.

    Carries the parameter name, the value that was received and the values
    that would have been accepted so the operator gets a precise message.
    """

    def __init__(self, parameter, value, accepted=None, message=None):
        self.parameter = parameter
        self.value = value
        self.accepted = tuple(accepted) if accepted else ()
        if message is None:
            message = f"Invalid value for {parameter}: {value!r}"
            if self.accepted:
                message += f" (expected one of: {', '.join(self.accepted)})"
        super().__init__(message)


class InvalidAccessType(ConfigurationError):
    pass


class MissingAccessValue(ConfigurationError):
    def __init__(self, parameter="restrictServerAccessTo", value=None):
        super().__init__(
            parameter,
            value,
            message=(
                f"{parameter} should be specified, "
                "eg: serverAccessType=ipv4 restrictServerAccessTo=10.10.10.10/32"
            ),
        )


class InvalidAuthType(ConfigurationError):
    pass


class InvalidDeploymentType(ConfigurationError):
    pass


class InvalidFlag(ConfigurationError):
    """A bool-as-string parameter that is not literally `true` or `false`."""

    def __init__(self, parameter, value):
        super().__init__(
            parameter,
            value,
            accepted=("true", "false"),
            message=f"{parameter} parameter is required to be set as - true or false (got {value!r})",
        )


class InvalidSslFlag(InvalidFlag):
    def __init__(self, value, parameter="useSsl"):
        super().__init__(parameter, value)
