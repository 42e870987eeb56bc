"""
PTR lookup sent through the resolver endpoint itself
"""

import time

import dns.exception
import dns.flags
import dns.message
import dns.query
import dns.rcode
import dns.rdatatype
import dns.reversename

from ..models import EndpointError, PTRLookupError
from .base import BaseLookup


class DirectLookup(BaseLookup):
    """
    Queries the resolver endpoint for PTR records.

    A socket is opened to the endpoint with the configured transport
    and the PTR query travels over that socket. A truncated UDP answer
    is asked again over TCP.
    """

    def _exchange(self, query: dns.message.Message, endpoint: str,
                  stream: bool, started: float) -> dns.message.Message:
        probe = self.probe
        if stream != probe.stream:
            probe = probe.with_protocol('tcp' + self.protocol[3:])

        with probe.connect(endpoint) as sock:
            peer = sock.getpeername()
            timeout = self._remaining(started)
            if stream:
                return dns.query.tcp(query, peer[0], timeout=timeout,
                                     port=peer[1], sock=sock)
            return dns.query.udp(query, peer[0], timeout=timeout,
                                 port=peer[1], sock=sock)

    def _query(self, ip: str, endpoint: str) -> dns.message.Message:
        try:
            rev_name = dns.reversename.from_address(ip)
        except (dns.exception.SyntaxError, ValueError) as e:
            raise PTRLookupError(f"Not an IP address: {ip!r}") from e

        query = dns.message.make_query(rev_name, dns.rdatatype.PTR)
        started = time.monotonic()

        try:
            response = self._exchange(query, endpoint, self.probe.stream, started)
            if not self.probe.stream and response.flags & dns.flags.TC:
                response = self._exchange(query, endpoint, True, started)
        except dns.exception.Timeout as e:
            raise EndpointError(f"{endpoint} timed out") from e
        except EOFError as e:
            raise EndpointError(f"{endpoint} closed the connection") from e
        except OSError as e:
            raise EndpointError(f"{endpoint}: {e}") from e
        except dns.exception.DNSException as e:
            raise PTRLookupError(f"Bad response from {endpoint}: {e}") from e

        return response

    def lookup(self, ip: str, endpoint: str) -> list[str]:
        response = self._query(ip, endpoint)

        rcode = response.rcode()
        if rcode != dns.rcode.NOERROR:
            raise PTRLookupError(f"{ip}: {dns.rcode.to_text(rcode)} from {endpoint}")

        hostnames = [
            rdata.target.to_text()
            for rrset in response.answer
            if rrset.rdtype == dns.rdatatype.PTR
            for rdata in rrset
        ]
        if not hostnames:
            raise PTRLookupError(f"{ip}: no PTR record from {endpoint}")
        return hostnames
