"""
Resolver list assembly
"""

from pathlib import Path
from typing import Optional, Union

from .models import ResolverSet, ResolverFileError


def read_resolvers_file(path: Union[str, Path]) -> list[str]:
    """
    Read resolver endpoints from a file, one per line.

    Lines are trimmed and blank lines skipped.

    Raises:
        ResolverFileError: if the file cannot be opened or read
    """
    path = Path(path)
    endpoints = []

    try:
        with open(path, 'r', encoding='utf-8') as f:
            for line in f:
                resolver = line.strip()
                if resolver:
                    endpoints.append(resolver)
    except FileNotFoundError as e:
        raise ResolverFileError(f"Failed to open resolvers file: {e}") from e
    except (OSError, UnicodeDecodeError) as e:
        raise ResolverFileError(f"Failed to read resolvers file: {e}") from e

    return endpoints


def build_resolver_set(single_endpoint: Optional[str] = None,
                       resolvers_file: Optional[Union[str, Path]] = None) -> ResolverSet:
    """
    Build the ordered resolver list for a run.

    The single endpoint (if any) comes first, followed by the
    file entries in file order.

    Args:
        single_endpoint: "host:port" of an explicitly chosen resolver
        resolvers_file: Path to a newline-delimited list of endpoints

    Returns:
        ResolverSet (possibly empty)

    Raises:
        ResolverFileError: file could not be opened or read; nothing
            from the file is kept
    """
    endpoints = []

    if single_endpoint:
        endpoints.append(single_endpoint)

    if resolvers_file:
        endpoints.extend(read_resolvers_file(resolvers_file))

    return ResolverSet(tuple(endpoints))
