"""Error taxonomy for pooldns resolutions.

Brief:
  Every resolution failure is one of three kinds:
    - TransportError: timeout, socket failure or undecodable reply. Retryable
      against another resolver.
    - ProtocolStatusError: a well-formed reply whose rcode is not NOERROR.
      Terminal; retrying elsewhere will not change the answer.
    - ExhaustedError: every attempt ended in a TransportError.
"""

from __future__ import annotations

from typing import Any, Optional


class ResolutionError(Exception):
    """Brief: Base class for every error raised or returned by pooldns.Client."""

    # Partial result attached by entry points that keep diagnostics on failure.
    result: Any = None


class TransportError(ResolutionError):
    """
    Brief: Network, timeout or malformed-wire failure talking to one resolver.

    Inputs:
      - message: Description of the failure.
      - resolver: Resolver address the attempt was sent to, when known.
      - response: Parsed reply received before the failure (a truncated UDP
        reply whose TCP retry failed, or a reply with the wrong id), if any.

    Outputs:
      - Exception instance
    """

    def __init__(
        self,
        message: str,
        resolver: Optional[str] = None,
        response: Any = None,
    ) -> None:
        self.resolver = resolver
        self.response = response
        super().__init__(message)


class ProtocolStatusError(ResolutionError):
    """
    Brief: Resolver answered with a non-success status code.

    Inputs:
      - status: Textual rcode such as "NXDOMAIN" or "SERVFAIL".
      - rcode: Numeric rcode from the reply header.
      - resolver: Resolver that produced the reply.
      - response: The parsed dnslib.DNSRecord reply.

    Outputs:
      - Exception instance whose str() is the status text.
    """

    def __init__(
        self,
        status: str,
        rcode: int,
        resolver: Optional[str] = None,
        response: Any = None,
    ) -> None:
        self.status = status
        self.rcode = rcode
        self.resolver = resolver
        self.response = response
        super().__init__(status)


class ExhaustedError(ResolutionError):
    """
    Brief: All attempts failed at the transport level.

    Inputs:
      - attempts: Number of exchanges performed.
      - last_error: The TransportError from the final attempt.

    Outputs:
      - Exception instance
    """

    def __init__(self, attempts: int, last_error: Optional[TransportError]) -> None:
        self.attempts = attempts
        self.last_error = last_error
        super().__init__(f"all {attempts} attempt(s) failed: {last_error}")
