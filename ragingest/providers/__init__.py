"""Concrete adapters for the contracts in :mod:`ragingest.interfaces`."""
