"""Early PDP-11 UNIX tools: hardware models, a.out loading and classic commands."""

__version__ = "0.1.0"