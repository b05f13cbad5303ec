class DetectionFailedError(Exception):
    """
    A single probe could not produce a value.

    Never escapes SystemService.probe_hardware(): the prober replaces the
    failed component with its default.
    """

    def __init__(self, component: str, message: str, details: str = ""):
        self.component = component
        self.message = message
        self.details = details
        super().__init__(f"{component}: {message}" + (f" ({details})" if details else ""))
