"""Concrete implementations of the interfaces in :mod:`docprocessor.interfaces`."""
