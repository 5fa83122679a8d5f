"""Pool engine error classes.

Every failure raised by an operation derives from PoolError, so callers can
catch the whole family at the dispatch boundary. Nothing is retried and no
state is written when one of these is raised.
"""


class PoolError(Exception):
    """Base error for pool operations."""

    pass


class ArithmeticOverflow(PoolError, ArithmeticError):
    """A value could not be represented exactly in its integer width."""

    pass


class Underflow(ArithmeticOverflow):
    """Subtraction would produce a negative result."""

    pass


class DivisionByZero(ArithmeticOverflow):
    """Division or modulo by zero."""

    pass


class WidthOverflow(ArithmeticOverflow):
    """Value exceeds the wide (u128) or native (u64) width."""

    pass


class SlippageExceeded(PoolError):
    """A computed amount violates the caller's bound.

    Attributes:
        asset: Which leg the bound applies to ("a", "b", "in")
        computed: The amount the engine computed
        bound: The caller-supplied bound
        kind: "max" if computed must not exceed bound, "min" if it must reach it
    """

    def __init__(self, asset: str, computed: int, bound: int, kind: str) -> None:
        self.asset = asset
        self.computed = computed
        self.bound = bound
        self.kind = kind
        relation = "above maximum" if kind == "max" else "below minimum"
        super().__init__(f"Token {asset} amount {computed} {relation} {bound}")


class InsufficientLiquidity(PoolError):
    """The pool cannot supply the requested amount."""

    pass


class ExternalLedgerFailure(PoolError):
    """The token ledger rejected a batch of fund movements."""

    pass


class InvalidAmount(PoolError, ValueError):
    """An operation amount is zero or otherwise unusable."""

    pass


class InvalidFeeRate(PoolError, ValueError):
    """Fee rate outside the range allowed at pool creation."""

    pass


class InvalidPoolAssets(PoolError, ValueError):
    """The two pool assets are identical."""

    pass


class InvalidPubkey(PoolError, ValueError):
    """A key is not a 32-byte hex public key."""

    pass


class InvalidAuthoritySeeds(PoolError, ValueError):
    """Seeds and bump do not reproduce a valid derived address."""

    pass


class PoolAlreadyExists(PoolError):
    """A pool for this (asset_a, asset_b, fee) triple is already registered."""

    pass


class PoolNotFound(PoolError, LookupError):
    """No pool is registered under the requested identity."""

    pass


class UnknownOperation(PoolError, LookupError):
    """Dispatcher received an operation name it does not serve."""

    pass
