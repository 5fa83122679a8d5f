"""Operation dispatcher: logical operation name plus typed arguments.

The outer environment (an instruction processor, a test harness, a script)
calls dispatch() with one of "initialize", "deposit", "withdraw", "swap" and
the raw arguments. Arguments are validated by the pydantic request models
before the engine sees them.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from typing import Any

import structlog
from pydantic import BaseModel

from cpamm.amm.base import DepositQuote, SwapQuote, WithdrawQuote
from cpamm.engine import PoolEngine
from cpamm.errors import PoolError, UnknownOperation
from cpamm.models.requests import (
    DepositRequest,
    InitializeRequest,
    SwapRequest,
    WithdrawRequest,
)
from cpamm.pool import PoolRecord

logger = structlog.get_logger()

OperationResult = PoolRecord | DepositQuote | WithdrawQuote | SwapQuote


def _initialize(engine: PoolEngine, req: InitializeRequest) -> PoolRecord:
    return engine.initialize(req.asset_a, req.asset_b, req.fee_bps, req.bump, req.lp_bump)


def _deposit(engine: PoolEngine, req: DepositRequest) -> DepositQuote:
    return engine.deposit(req.pool, req.depositor, req.lp_amount, req.max_token_a, req.max_token_b)


def _withdraw(engine: PoolEngine, req: WithdrawRequest) -> WithdrawQuote:
    return engine.withdraw(
        req.pool, req.withdrawer, req.lp_amount, req.min_token_a, req.min_token_b
    )


def _swap(engine: PoolEngine, req: SwapRequest) -> SwapQuote:
    return engine.swap(req.pool, req.trader, req.amount_out, req.max_amount_in, req.direction)


OPERATIONS: dict[str, tuple[type[BaseModel], Callable[[PoolEngine, Any], OperationResult]]] = {
    "initialize": (InitializeRequest, _initialize),
    "deposit": (DepositRequest, _deposit),
    "withdraw": (WithdrawRequest, _withdraw),
    "swap": (SwapRequest, _swap),
}


def dispatch(
    engine: PoolEngine,
    operation: str,
    arguments: Mapping[str, Any] | BaseModel,
) -> OperationResult:
    """Run one named operation.

    Args:
        engine: The engine to run against
        operation: "initialize", "deposit", "withdraw" or "swap"
        arguments: Raw mapping (camelCase or snake_case keys) or a request model

    Returns:
        PoolRecord for initialize, otherwise the executed quote

    Raises:
        UnknownOperation: If operation is not one of the four names
        pydantic.ValidationError: If arguments do not match the request model
        PoolError: Any failure raised by the operation itself
    """
    try:
        model, handler = OPERATIONS[operation]
    except KeyError as err:
        raise UnknownOperation(
            f"Unknown operation '{operation}', expected one of {sorted(OPERATIONS)}"
        ) from err

    request = arguments if isinstance(arguments, model) else model.model_validate(arguments)

    try:
        return handler(engine, request)
    except PoolError as err:
        logger.warning("operation_failed", operation=operation, error_type=type(err).__name__, error=str(err))
        raise
