"""Observable lazy streams built from chains of one-shot settlements."""

__version__ = "0.1.0"
