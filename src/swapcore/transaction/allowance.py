from eth_typing import ChecksumAddress
from hexbytes import HexBytes
from web3 import AsyncBaseProvider, AsyncWeb3
from web3.exceptions import TimeExhausted, Web3Exception
from web3.types import TxParams

from swapcore.checksum_cache import get_checksum_address
from swapcore.erc20.erc20 import approve_calldata, get_allowance
from swapcore.erc20.token import Token
from swapcore.exceptions import ApprovalFailed, ApprovalRejected, NetworkError
from swapcore.functions import is_user_rejection
from swapcore.logging import logger


class AllowanceManager:
    """
    Makes sure a spender may move the input token before a swap. Approvals are bounded to the
    amount being swapped, and are only requested when the current allowance is too small.
    """

    def __init__(
        self,
        w3: AsyncWeb3[AsyncBaseProvider],
        *,
        receipt_timeout: float = 120.0,
        read_retry_attempts: int = 3,
    ) -> None:
        self.w3 = w3
        self.receipt_timeout = receipt_timeout
        self.read_retry_attempts = read_retry_attempts

    async def ensure_approved(
        self,
        token: Token,
        owner: str,
        amount: int,
        spender: str,
    ) -> bool:
        """
        Check the allowance granted by `owner` to `spender`, and submit an approval for exactly
        `amount` if it does not cover the swap. The native currency needs no approval.

        Returns True once the spender may move `amount`. Raises `ApprovalRejected` if the user
        declined the approval, or `ApprovalFailed` if it could not be read, submitted or confirmed.
        """

        if token.is_native:
            return True

        token_address = get_checksum_address(token.address)
        owner = get_checksum_address(owner)
        spender = get_checksum_address(spender)

        try:
            allowance = await get_allowance(
                self.w3,
                token_address,
                owner,
                spender,
                max_attempts=self.read_retry_attempts,
            )
        except NetworkError as exc:
            raise ApprovalFailed(symbol=token.symbol, reason=exc.message or str(exc)) from exc

        if allowance >= amount:
            logger.debug(f"Allowance of {allowance} {token} for {spender} covers {amount}")
            return True

        logger.info(f"Requesting approval of {amount} {token} for {spender}")
        tx_hash = await self._submit_approval(token, token_address, owner, spender, amount)
        await self._wait_for_approval(token, tx_hash)

        logger.info(f"Approval {tx_hash.to_0x_hex()} confirmed")
        return True

    async def _submit_approval(
        self,
        token: Token,
        token_address: ChecksumAddress,
        owner: ChecksumAddress,
        spender: ChecksumAddress,
        amount: int,
    ) -> HexBytes:
        try:
            return HexBytes(
                await self.w3.eth.send_transaction(
                    TxParams(
                        {
                            "from": owner,
                            "to": token_address,
                            "data": HexBytes(approve_calldata(spender, amount)),
                            "value": 0,
                        }
                    )
                )
            )
        except (Web3Exception, ValueError, OSError) as exc:
            if is_user_rejection(exc):
                logger.warning(f"Approval of {token} rejected by the user")
                raise ApprovalRejected(symbol=token.symbol) from exc
            logger.warning(f"Approval of {token} could not be submitted: {exc}")
            raise ApprovalFailed(symbol=token.symbol, reason=str(exc)) from exc

    async def _wait_for_approval(self, token: Token, tx_hash: HexBytes) -> None:
        try:
            receipt = await self.w3.eth.wait_for_transaction_receipt(
                tx_hash, timeout=self.receipt_timeout
            )
        except TimeExhausted as exc:
            raise ApprovalFailed(
                symbol=token.symbol,
                reason=f"no receipt after {self.receipt_timeout} seconds",
                tx_hash=tx_hash,
            ) from exc
        except (Web3Exception, OSError) as exc:
            raise ApprovalFailed(symbol=token.symbol, reason=str(exc), tx_hash=tx_hash) from exc

        if receipt["status"] == 0:
            logger.warning(f"Approval {tx_hash.to_0x_hex()} reverted")
            raise ApprovalFailed(
                symbol=token.symbol, reason="approval transaction reverted", tx_hash=tx_hash
            )
