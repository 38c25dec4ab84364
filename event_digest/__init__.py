"""Daily and weekly email digests of upcoming Prismic calendar events."""

__all__ = [
    "config",
    "models",
    "prismic_client",
    "mailer",
    "email_formatter",
    "scheduler",
]
