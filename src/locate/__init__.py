"""Call-site matching and argument extraction."""

from locate.arguments import ArgIndex, ArgumentSlot, extract_args
from locate.call_site import CallRef, CallSite, find_calls, match_call

__all__ = [
    "ArgIndex",
    "ArgumentSlot",
    "CallRef",
    "CallSite",
    "extract_args",
    "find_calls",
    "match_call",
]
