"""
Fee negotiation for contract writes.

The target chain enforces a non-zero minimum gas price, and estimation may be
unavailable on some nodes, so quoting falls back through three tiers and the
last one never fails:

1. dynamic (EIP-1559) estimate, raised to the floor
2. legacy gas price, floored or buffered by 20%, used for both fields
3. the floor for both fields
"""
import logging
from typing import Any, Optional, Sequence

from ._rate_limited_log import rate_limited_log
from .models import GasQuote
from .rpc import ContractBackend

logger = logging.getLogger(__name__)

GWEI = 10 ** 9
DEFAULT_FEE_FLOOR_WEI = 100 * GWEI
BUFFER_PERCENT = 120


def _buffered(amount: int) -> int:
    return amount * BUFFER_PERCENT // 100


class FeeNegotiator:
    """Computes gas quotes and gas limits for pending writes"""

    def __init__(
        self,
        backend: ContractBackend,
        floor_wei: int = DEFAULT_FEE_FLOOR_WEI,
        logger: Optional[logging.Logger] = None,
    ):
        if floor_wei < 0:
            raise ValueError("floor_wei must be non-negative")
        self.backend = backend
        self.floor_wei = floor_wei
        self.logger = logger or logging.getLogger(__name__)

    async def quote(self) -> GasQuote:
        """
        Produce a fee quote for a write about to be submitted.

        Returns:
            GasQuote satisfying max_fee >= max_priority_fee >= floor
        """
        try:
            estimate = await self.backend.estimate_fees_per_gas()
            max_fee = estimate.max_fee_per_gas
            priority = estimate.max_priority_fee_per_gas
            if max_fee is not None and priority is not None:
                priority = max(priority, self.floor_wei)
                max_fee = max(max_fee, self.floor_wei, priority)
                self.logger.debug(f"Dynamic fee quote: maxFee={max_fee} priority={priority}")
                return GasQuote(max_fee_per_gas=max_fee, max_priority_fee_per_gas=priority)
            rate_limited_log("Dynamic fee estimate incomplete, trying legacy gas price",
                             logger_instance=self.logger)
        except Exception as e:
            rate_limited_log(f"Dynamic fee estimation failed, trying legacy gas price: {e}",
                             logger_instance=self.logger)

        try:
            gas_price = await self.backend.gas_price()
            if gas_price < self.floor_wei:
                price = self.floor_wei
            else:
                price = _buffered(gas_price)
            self.logger.debug(f"Legacy fee quote: gasPrice={price}")
            return GasQuote(max_fee_per_gas=price, max_priority_fee_per_gas=price)
        except Exception as e:
            rate_limited_log(f"Legacy gas price unavailable, using floor {self.floor_wei}: {e}",
                             logger_instance=self.logger)

        return GasQuote(max_fee_per_gas=self.floor_wei, max_priority_fee_per_gas=self.floor_wei)

    async def estimate_gas_limit(
        self,
        function_name: str,
        args: Sequence[Any],
        sender: Optional[str] = None,
        value: Optional[int] = None,
        quote: Optional[GasQuote] = None,
    ) -> Optional[int]:
        """
        Estimate a gas limit for the exact call with a 20% buffer.

        Returns:
            Buffered gas limit, or None to let the execution layer pick its own
        """
        try:
            estimated = await self.backend.estimate_gas(
                function_name, args, sender=sender, value=value, quote=quote
            )
        except Exception as e:
            rate_limited_log(f"Gas estimation failed for {function_name}, using default: {e}",
                             logger_instance=self.logger)
            return None
        limit = _buffered(estimated)
        self.logger.debug(f"Estimated gas limit for {function_name}: {limit}")
        return limit
