"""Exceptions raised by the query builder."""


class InvalidConfigurationError(ValueError):
    """A builder call was given arguments that cannot produce a usable clause.

    Raised at the call site, before anything is rendered.
    """
