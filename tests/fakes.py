import asyncio
from typing import Dict, List, Optional, Union

from pipeline.resolver import ResolutionError, Resolver


class FakeResolver(Resolver):
    """In-memory resolver; map values may be exceptions to raise."""

    def __init__(
        self,
        forward: Optional[Dict[str, Union[List[str], Exception]]] = None,
        reverse: Optional[Dict[str, Union[str, Exception, None]]] = None,
        delay: float = 0.0,
    ):
        self.forward_map = forward or {}
        self.reverse_map = reverse or {}
        self.delay = delay
        self.forward_calls: List[str] = []
        self.reverse_calls: List[str] = []

    async def forward(self, hostname: str) -> List[str]:
        self.forward_calls.append(hostname)
        if self.delay:
            await asyncio.sleep(self.delay)
        result = self.forward_map.get(hostname, ResolutionError(f"NXDOMAIN {hostname}"))
        if isinstance(result, Exception):
            raise result
        return list(result)

    async def reverse(self, address: str) -> Optional[str]:
        self.reverse_calls.append(address)
        if self.delay:
            await asyncio.sleep(self.delay)
        result = self.reverse_map.get(address)
        if isinstance(result, Exception):
            raise result
        return result
