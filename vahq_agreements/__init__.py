"""VAHQ agreement engine: workflow templates, per-client customization and sign-off"""

__version__ = "0.1.0"
