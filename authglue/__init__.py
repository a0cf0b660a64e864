"""OAuth2 login glue: Google and GitHub sign-in with stateless signed sessions."""

__version__ = "1.0.0"
