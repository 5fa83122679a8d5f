"""Protocol constants for the constant-product pool engine.

Centralizes integer widths, fixed-point scales and derivation seeds.
"""

# Native amount width: every balance, reserve and LP supply is a u64
U64_MAX = 2**64 - 1

# Wide width: every product is formed here before any division
U128_MAX = 2**128 - 1

# Fee rates are expressed in basis points (30 = 0.3%)
BPS_DENOMINATOR = 10_000

# Highest fee a pool may be created with (100%)
MAX_FEE_BPS = BPS_DENOMINATOR

# Fee rates are encoded as a u16 seed when deriving the pool address
FEE_SEED_BYTES = 2

# Fixed-point scale for deposit/withdraw ratios (six decimal places)
RATIO_SCALE = 1_000_000

# Derived address seeds
POOL_SEED = b"pool"
LP_MINT_SEED = b"lp"

# Derived address rules (matching the Solana runtime)
MAX_SEEDS = 16
MAX_SEED_LEN = 32
PDA_MARKER = b"ProgramDerivedAddress"

# Public identities are 32-byte ed25519-sized keys
PUBKEY_BYTES = 32
