"""skusync - keeps specification tables and SKU sheets in sync."""

__version__ = "0.1.0"
