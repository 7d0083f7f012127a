# Copyright 2018 Brian T. Park
#
# MIT License

"""
Exceptions raised while compiling TZ Database files. The extractor raises
TzdbSyntaxError and ModelError, which abort the whole compilation because the
database is not valid if any line fails. The remaining errors are scoped to a
single zone or a single encode/decode call.
"""


class TzdbError(Exception):
    """Base class of all errors raised by tzdbtools."""
    pass


class TzdbSyntaxError(TzdbError):
    """Malformed year, month, day, time or weekday field."""
    pass


class ModelError(TzdbError):
    """Structurally invalid record, e.g. TO year before FROM year."""
    pass


class UnresolvedReferenceError(TzdbError):
    """A Zone refers to a RuleSet which does not exist."""
    pass


class VerificationFailure(TzdbError):
    """A compiled zone failed the transition sanity checks."""
    pass


class CapacityError(TzdbError):
    """Too many entries for a uint16 count in the alias index."""
    pass


class CorruptDataError(TzdbError):
    """Binary data could not be decoded."""
    pass
