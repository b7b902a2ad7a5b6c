class LoginRequired(Exception):
    """Raised by protected routes when the request has no authenticated user."""

    def __init__(self, redirect_to: str = "/login"):
        super().__init__(redirect_to)
        self.redirect_to = redirect_to
