"""
Strategy registry initialization.

Builds a registry holding the built-in submission strategies.
"""

import logging

from jobrelay.v1.core.registries import StrategyRegistry
from jobrelay.v1.queue.strategies import (
    DirectInsertSubmissionStrategy,
    RpcSubmissionStrategy,
)

logger = logging.getLogger(__name__)


def create_strategy_registry() -> StrategyRegistry:
    """Create a registry with the rpc and direct_insert strategies."""
    registry = StrategyRegistry()

    registry.register(
        RpcSubmissionStrategy.name,
        lambda backend, settings: RpcSubmissionStrategy(
            backend, settings.queue_rpc_function
        ),
    )
    registry.register(
        DirectInsertSubmissionStrategy.name,
        lambda backend, settings: DirectInsertSubmissionStrategy(
            backend, settings.queue_table
        ),
    )

    logger.debug(
        "Submission strategies registered",
        extra={"registered_strategies": registry.list()},
    )
    return registry
