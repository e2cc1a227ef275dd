"""formwizard — configurable multi-step onboarding form."""

__version__ = "0.1.0"
