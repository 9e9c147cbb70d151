"""
Exception types for the manuscripts reader.

Nothing here is fatal to a host application: engine and storage failures
are absorbed by the components that meet them and only degrade a feature.
"""


class ManuscriptsError(Exception):
    """Base class for reader errors."""


class CorpusError(ManuscriptsError):
    """The verse dataset could not be read."""


class EngineUnavailableError(ManuscriptsError):
    """A speech engine could not be loaded on this system."""
