"""
Lookup engines for PTRLens
"""

from ..models import RunConfig
from .base import BaseLookup
from .connect import EndpointProbe
from .direct import DirectLookup
from .system import SystemLookup


def create_lookup(config: RunConfig) -> BaseLookup:
    """Lookup strategy matching the configured mode"""
    if config.lookup_mode == 'probe':
        return SystemLookup(protocol=config.protocol, timeout=config.timeout,
                            max_workers=config.threads)
    return DirectLookup(protocol=config.protocol, timeout=config.timeout)


__all__ = ['BaseLookup', 'EndpointProbe', 'DirectLookup', 'SystemLookup', 'create_lookup']
