"""Exception hierarchy shared by the model and controller layers."""


class NotegraphError(Exception):
    """Base class for all errors raised by notegraph."""


class NoteFetchError(NotegraphError):
    """The note source could not deliver the note set."""
