"""Price driven on/off scheduling of electrical devices."""

__version__ = "0.1.0"
