"""Payment failure monitor: Stripe webhook alerts to email and Airtable."""

__version__ = "1.0.0"
