"""Resolve host names to EC2 instances and act on them."""

__version__ = "0.1.0"
