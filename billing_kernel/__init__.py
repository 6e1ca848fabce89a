"""
Billing Kernel - value objects, exceptions, logging and persistence base.

The kernel is the lowest layer.  Engines, modules and services import from
it; it imports from none of them.
"""

__version__ = "0.1.0"
