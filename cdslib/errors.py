"""Exception types raised by the CDS pricing kernel."""


class CdsLibError(Exception):
    """Base class for all kernel errors."""


class InvalidArgument(CdsLibError, ValueError):
    """Raised when an input is null, out of range or inconsistent.

    Examples are a recovery rate outside [0, 1], mismatched array lengths,
    non-ascending pillars or a bump amount that is too small.
    """


class InvalidCurveInput(InvalidArgument):
    """Raised when curve knots or rates cannot form a valid curve."""


class UnsupportedQuoteType(CdsLibError, TypeError):
    """Raised when a quote convention is not handled by an operation."""


class NumericDegeneracy(CdsLibError, RuntimeError):
    """Raised when a numerical routine hits a state that indicates a logic error.

    Root finders that fail to converge and accrued-interest lookups outside
    the schedule both end up here.
    """
