"""RPC engine: selector, accumulator, dispatcher, router and presenters.

This package turns directives into batched JSON-RPC requests and prints the
daemon's answers.
"""

from __future__ import annotations

from trctl.rpc.accumulator import CommandAccumulator
from trctl.rpc.dispatcher import RequestDispatcher
from trctl.rpc.protocol import ResponseTag, TaggedResponse, decode_response
from trctl.rpc.request import PendingRequest, RequestKind
from trctl.rpc.router import ResponseRouter
from trctl.rpc.selector import IdsResolution, resolve_ids
from trctl.rpc.session import Endpoint, SessionContext, build_rpc_url, parse_host_argument

__all__ = [
    # Accumulation
    "CommandAccumulator",
    "PendingRequest",
    "RequestKind",
    # Transport
    "Endpoint",
    "RequestDispatcher",
    "SessionContext",
    "build_rpc_url",
    "parse_host_argument",
    # Responses
    "ResponseRouter",
    "ResponseTag",
    "TaggedResponse",
    "decode_response",
    # Selection
    "IdsResolution",
    "resolve_ids",
]
