"""
Paginated historical event queries.

Providers cap both the block span and the number of results of a single
``eth_getLogs``. The fetcher splits a range into pages of at most
``max_page_size`` blocks, retries failing pages, and when a provider
rejects a page for returning too many results it resplits the whole window
into smaller pages and starts over.

Example:
    >>> fetcher = PaginatedLogFetcher(chain, RelayCoreConfig(max_page_size=10_000))
    >>> events = await fetcher.fetch_events(hub, ["TransactionRelayed"], from_block=17_000_000)
    >>> latest = get_latest_event(events)
"""

from __future__ import annotations

import asyncio
import math
import re
from dataclasses import dataclass, replace
from enum import Enum
from typing import (
    Any,
    Awaitable,
    Callable,
    Dict,
    List,
    Mapping,
    Optional,
    Sequence,
    Tuple,
    Union,
)

from relaycore.chain.contracts import ContractRef
from relaycore.chain.interface import ChainQuery
from relaycore.config.settings import RelayCoreConfig
from relaycore.constants import CAPACITY_ERROR_PATTERNS
from relaycore.errors import (
    InvalidRangeError,
    PageBudgetExceededError,
    QueryWindowTooLargeError,
    ValidationError,
)
from relaycore.utils.helpers import to_int
from relaycore.utils.logging import get_logger
from relaycore.utils.retry import RetryConfig, retry_async

_logger = get_logger(__name__)

BlockBound = Union[int, str]
HeadLookup = Callable[[], Awaitable[int]]
Sleep = Callable[[float], Awaitable[Any]]


def split_range(from_block: int, to_block: int, parts: int) -> List[Tuple[int, int]]:
    """
    Split ``[from_block, to_block]`` into contiguous inclusive sub-ranges.

    Every sub-range but the last has ``ceil(size / parts)`` blocks.

    >>> split_range(1, 10, 3)
    [(1, 4), (5, 8), (9, 10)]
    """
    if parts < 1:
        raise ValidationError("parts must be at least 1", field="parts", value=parts)
    if from_block > to_block:
        raise InvalidRangeError(from_block, to_block)
    if parts == 1:
        return [(from_block, to_block)]
    page = math.ceil((to_block - from_block + 1) / parts)
    return [
        (start, min(to_block, start + page - 1))
        for start in range(from_block, to_block + 1, page)
    ]


def pages_for_range(from_block: int, to_block: int, max_page_size: Optional[int]) -> int:
    """Number of pages of at most ``max_page_size`` blocks covering the range."""
    if max_page_size is None:
        return 1
    return max(math.ceil((to_block - from_block + 1) / max_page_size), 1)


def is_capacity_error(error: BaseException) -> bool:
    """True if a provider rejected a query for returning too many results."""
    message = str(error)
    return any(re.search(pattern, message) for pattern in CAPACITY_ERROR_PATTERNS)


@dataclass(frozen=True)
class LogQueryWindow:
    """
    A block range and how finely it is currently split.

    Attributes:
        from_block: First block, inclusive
        to_block: Last block, inclusive ("latest" only for an unsplit window)
        pages: Page count from ``max_page_size`` sizing
        split_factor: Multiplier applied after capacity errors
    """

    from_block: int
    to_block: BlockBound
    pages: int = 1
    split_factor: int = 1

    @property
    def parts(self) -> int:
        """Number of sub-ranges queried in one round."""
        return self.pages * self.split_factor

    def resplit(self, multiplier: int) -> "LogQueryWindow":
        return replace(self, split_factor=self.split_factor * multiplier)

    def sub_ranges(self) -> List[Tuple[int, BlockBound]]:
        if self.parts == 1 or isinstance(self.to_block, str):
            return [(self.from_block, self.to_block)]
        return list(split_range(self.from_block, self.to_block, self.parts))


class FetchState(Enum):
    SIZING = "sizing"
    FETCHING = "fetching"
    RESPLITTING = "resplitting"
    DONE = "done"
    FAILED = "failed"


class PaginatedLogFetcher:
    """
    Fetches contract events over a block range through a ChainQuery.

    Args:
        chain: Chain-query collaborator
        config: Page size, page budget, retry and resplit settings
        head_lookup: Returns the current head block (default: ``chain.get_block_number``)
        sleep: Awaitable sleep used between page retries

    Attributes:
        state: Final state of the most recently settled fetch
        last_attempts: Windows the most recently settled fetch queried, in order
    """

    def __init__(
        self,
        chain: ChainQuery,
        config: Optional[RelayCoreConfig] = None,
        head_lookup: Optional[HeadLookup] = None,
        sleep: Sleep = asyncio.sleep,
    ) -> None:
        self._chain = chain
        self._config = config or RelayCoreConfig()
        self._head_lookup = head_lookup or chain.get_block_number
        self._sleep = sleep
        self.state = FetchState.DONE
        self.last_attempts: List[LogQueryWindow] = []

    async def fetch_events(
        self,
        contract: ContractRef,
        event_names: Sequence[str],
        extra_topics: Sequence[str] = (),
        from_block: int = 1,
        to_block: Optional[BlockBound] = None,
    ) -> List[Dict[str, Any]]:
        """
        Fetch the events ``event_names`` of ``contract`` in ``[from_block, to_block]``.

        Events are not ordered across pages; use ``sort_events`` when order
        matters.

        Raises:
            InvalidRangeError: from_block > to_block
            PageBudgetExceededError: The range needs more pages than ``max_page_count``
            QueryWindowTooLargeError: Capacity errors persist at the maximum split factor
        """
        if contract.address is None:
            raise ValidationError(f"{contract.name} is not bound to an address", field="contract")
        topics = self._topics(contract, event_names, extra_topics)
        state = FetchState.SIZING
        attempts: List[LogQueryWindow] = []
        window: Optional[LogQueryWindow] = None
        logs: List[Mapping[str, Any]] = []

        try:
            while state is not FetchState.DONE:
                if state is FetchState.SIZING:
                    window = await self._size(from_block, to_block)
                    state = FetchState.FETCHING
                elif state is FetchState.FETCHING:
                    attempts.append(window)
                    try:
                        logs = await self._fetch_window(contract, topics, window)
                    except Exception as e:
                        if not is_capacity_error(e):
                            raise
                        _logger.warning(
                            "Provider returned too many results, splitting the request into smaller pages",
                            extra={"split_factor": window.split_factor, "parts": window.parts, "error": str(e)},
                        )
                        state = FetchState.RESPLITTING
                    else:
                        state = FetchState.DONE
                elif state is FetchState.RESPLITTING:
                    next_factor = window.split_factor * self._config.split_multiplier
                    if next_factor > self._config.max_split_factor:
                        raise QueryWindowTooLargeError(window.split_factor, window.from_block, window.to_block)
                    if isinstance(window.to_block, str):
                        head = await self._head_lookup()
                        window = replace(window, to_block=max(head, window.from_block))
                    window = window.resplit(self._config.split_multiplier)
                    state = FetchState.FETCHING
        except BaseException:
            state = FetchState.FAILED
            raise
        finally:
            # published once the call settles
            self.state = state
            self.last_attempts = attempts

        return [self._decode(contract, log) for log in logs]

    async def _size(self, from_block: int, to_block: Optional[BlockBound]) -> LogQueryWindow:
        if to_block is None or to_block == "latest":
            if not self._config.paginated:
                return LogQueryWindow(from_block, "latest")
            head = await self._head_lookup()
            to_block = max(head, from_block)
        to_block = to_int(to_block, "to_block")
        if from_block > to_block:
            _logger.error("Invalid block range", extra={"from_block": from_block, "to_block": to_block})
            raise InvalidRangeError(from_block, to_block)

        pages = pages_for_range(from_block, to_block, self._config.max_page_size)
        allowed = self._config.max_page_count
        if allowed is not None and pages > allowed:
            raise PageBudgetExceededError(pages, allowed, from_block, to_block)
        if pages > 1:
            _logger.info(
                "Splitting log request into pages",
                extra={"blocks": to_block - from_block + 1, "pages": pages},
            )
        return LogQueryWindow(from_block, to_block, pages)

    async def _fetch_window(
        self,
        contract: ContractRef,
        topics: List[List[str]],
        window: LogQueryWindow,
    ) -> List[Mapping[str, Any]]:
        tasks = [
            asyncio.ensure_future(self._fetch_page(contract, topics, start, end))
            for start, end in window.sub_ranges()
        ]
        try:
            pages = await asyncio.gather(*tasks)
        except BaseException:
            for task in tasks:
                task.cancel()
            raise
        return [log for page in pages for log in page]

    async def _fetch_page(
        self,
        contract: ContractRef,
        topics: List[List[str]],
        from_block: int,
        to_block: BlockBound,
    ) -> List[Mapping[str, Any]]:
        log_filter = {
            "address": contract.address,
            "fromBlock": from_block,
            "toBlock": to_block,
            "topics": topics,
        }
        retry = RetryConfig(
            max_attempts=self._config.page_retry_attempts,
            base_delay_ms=self._config.page_retry_delay_ms,
            exponential_base=1.0,
            jitter=False,
            give_up_on=is_capacity_error,
        )

        def on_retry(attempt: int, error: Exception) -> None:
            _logger.error(
                "Log page query failed",
                extra={
                    "from_block": from_block,
                    "to_block": to_block,
                    "attempt": attempt,
                    "max_attempts": retry.max_attempts,
                    "error": str(error),
                },
            )

        return await retry_async(
            lambda: self._chain.get_logs(log_filter),
            retry,
            on_retry=on_retry,
            sleep=self._sleep,
        )

    @staticmethod
    def _topics(
        contract: ContractRef,
        event_names: Sequence[str],
        extra_topics: Sequence[str],
    ) -> List[List[str]]:
        if not event_names:
            raise ValidationError("At least one event name is required", field="event_names")
        topics = [[contract.event_topic(name) for name in event_names]]
        if extra_topics:
            topics.append(list(extra_topics))
        return topics

    @staticmethod
    def _decode(contract: ContractRef, log: Mapping[str, Any]) -> Dict[str, Any]:
        event = dict(log)
        decoded = contract.decode_log(log)
        if decoded is not None:
            event.update(decoded)
        return event


def _event_position(event: Mapping[str, Any]) -> Tuple[int, int, int]:
    return (
        to_int(event.get("blockNumber", 0), "blockNumber"),
        to_int(event.get("transactionIndex", 0), "transactionIndex"),
        to_int(event.get("logIndex", 0), "logIndex"),
    )


def sort_events(events: Sequence[Mapping[str, Any]]) -> List[Mapping[str, Any]]:
    """Order events chronologically by block, transaction and log index."""
    return sorted(events, key=_event_position)


def get_latest_event(events: Sequence[Mapping[str, Any]]) -> Optional[Mapping[str, Any]]:
    """Most recent event, or None if there are none."""
    if not events:
        return None
    return max(events, key=_event_position)
