"""Concrete adapters for the interfaces in :mod:`notekb.interfaces`."""
