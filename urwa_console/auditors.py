"""
Auditor permission management.
"""
import json
import logging
from typing import Iterable, List, Optional

from .console import ContractConsole
from .exceptions import InvalidAddressError, InvalidParameterError
from .marshal import is_address, normalize_address
from .models import AuditorPermission, TxReceipt

logger = logging.getLogger(__name__)

DEFAULT_GRANT_DURATION = 3600


def _require_address(address: str, label: str) -> str:
    address = (address or "").strip()
    if not is_address(address):
        raise InvalidAddressError(f"Invalid {label}: {address}")
    return address


class AuditorPermissions:
    """Grant, revoke and inspect time-bounded auditor permissions"""

    def __init__(self, console: ContractConsole, logger: Optional[logging.Logger] = None):
        self.console = console
        self.logger = logger or logging.getLogger(__name__)

    async def grant(
        self,
        auditor: str,
        duration_seconds: int = DEFAULT_GRANT_DURATION,
        full_access: bool = False,
        allowed_addresses: Iterable[str] = (),
    ) -> TxReceipt:
        """
        Grant an auditor permission to decrypt transactions.

        Args:
            auditor: Auditor address
            duration_seconds: Lifetime of the grant
            full_access: Allow decrypting any transaction
            allowed_addresses: Addresses the auditor may decrypt for; ignored
                for full-access grants

        Raises:
            InvalidAddressError: If any address is malformed
            InvalidParameterError: If the duration is not positive
        """
        auditor = _require_address(auditor, "auditor address")
        if duration_seconds <= 0:
            raise InvalidParameterError("duration_seconds must be positive")

        addresses: List[str] = []
        if not full_access:
            addresses = [
                normalize_address(_require_address(a, "address in list"))
                for a in allowed_addresses if a.strip()
            ]

        self.logger.info(
            f"Granting auditor {auditor} for {duration_seconds}s "
            f"({'full access' if full_access else f'{len(addresses)} addresses'})"
        )
        return await self.console.write(
            "grantAuditorPermission",
            [auditor, str(duration_seconds), "true" if full_access else "false", json.dumps(addresses)],
        )

    async def revoke(self, auditor: str) -> TxReceipt:
        auditor = _require_address(auditor, "auditor address")
        self.logger.info(f"Revoking auditor {auditor}")
        return await self.console.write("revokeAuditorPermission", [auditor])

    async def check(self, auditor: str, target: str) -> bool:
        """Whether `auditor` may currently decrypt transactions of `target`"""
        auditor = _require_address(auditor, "auditor address")
        target = _require_address(target, "target address")
        return bool(await self.console.read("checkAuditorPermission", [auditor, target]))

    async def details(self, auditor: str) -> AuditorPermission:
        auditor = _require_address(auditor, "auditor address")
        result = await self.console.read("auditorPermissions", [auditor])
        return AuditorPermission.from_call_result(result)
