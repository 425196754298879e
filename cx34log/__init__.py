"""Read CX34 heat pump registers, summarise runs and post status lines to a web logger."""

__version__ = "0.1.0"