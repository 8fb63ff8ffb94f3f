class InvalidArgument(ValueError):
    """Raised when a caller supplies an argument that cannot be processed.

    Mapped to HTTP 400 by the application's exception handler.
    """

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message
