"""Entry point tying the source cache, call-site matcher and data-flow scan together."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence
from typing import TYPE_CHECKING

from contract.models import CallSpan, Diagnostic
from dataflow.assignments import backward_scan
from dataflow.expansion import expand, merge_related
from dataflow.related import find_related
from diagnose.exclusions import ExclusionSet
from frontend.source_cache import SourceCache
from locate.arguments import extract_args
from locate.call_site import match_call

if TYPE_CHECKING:
    from locate.arguments import ArgIndex, ArgumentSlot
    from locate.call_site import CallRef, CallSite

logger = logging.getLogger(__name__)


def _span(site: CallSite) -> CallSpan:
    call = site.call
    return CallSpan(
        start_line=call.lineno,
        start_col=call.col_offset,
        end_line=call.end_lineno or call.lineno,
        end_col=call.end_col_offset or call.col_offset,
    )


class Resolver:
    """Build diagnostics for calls found on the live stack.

    A resolver owns a :class:`SourceCache` and an :class:`ExclusionSet`; both
    are safe to share between threads. Hard failures raise
    :class:`contract.errors.ResolveError` subclasses, while lookups that find
    nothing produce empty fields.
    """

    def __init__(
        self,
        cache: SourceCache | None = None,
        exclusions: ExclusionSet | None = None,
    ) -> None:
        self.cache = cache or SourceCache()
        self.exclusions = exclusions if exclusions is not None else ExclusionSet()

    def resolve(
        self,
        function_name: str,
        skip: int,
        arg_indices: Sequence[ArgIndex],
        exclusions: Iterable[CallRef] = (),
    ) -> Diagnostic:
        """Diagnose the call to ``function_name`` made ``skip`` frames up.

        ``skip=0`` selects the frame that called ``resolve``. Assertion helpers
        pass ``1`` to reach the test code that called them.
        """
        filename, line = self.cache.frontend.caller(skip + 1)
        return self.resolve_at(filename, line, function_name, arg_indices, exclusions)

    def resolve_at(
        self,
        filename: str,
        line: int,
        function_name: str,
        arg_indices: Sequence[ArgIndex],
        exclusions: Iterable[CallRef] = (),
    ) -> Diagnostic:
        """Diagnose the call to ``function_name`` covering ``filename:line``."""
        source = self.cache.parse(filename)
        site = match_call(source, function_name, line)
        if site is None:
            logger.debug(
                "no call to %s found at %s:%d", function_name, source.filename, line
            )
            return Diagnostic(
                filename=source.basename,
                path=source.filename,
                line=line,
                args=["" for _ in arg_indices],
                assignments=[[] for _ in arg_indices],
            )

        excluded = self.exclusions.snapshot() | frozenset(exclusions)
        args: list[str] = []
        assignments: list[list[str]] = []
        groups: list[set[str]] = []

        for slot in extract_args(site.call, arg_indices):
            records = backward_scan(
                source, site.function, line, find_related(slot.expr), excluded
            )
            args.append(source.segment(slot.expr))
            assignments.append([record.render(source) for record in records])
            groups.append(expand(slot.expr, records))

        return Diagnostic(
            filename=source.basename,
            path=source.filename,
            line=line,
            source=site.text,
            function=site.function.name if site.function is not None else None,
            span=_span(site),
            args=args,
            assignments=assignments,
            related_vars=merge_related(groups),
        )

    def locate(
        self,
        function_name: str,
        skip: int,
        arg_indices: Sequence[ArgIndex],
    ) -> tuple[CallSite | None, list[ArgumentSlot]]:
        """Matched call site and argument slots for the call ``skip`` frames up."""
        filename, line = self.cache.frontend.caller(skip + 1)
        source = self.cache.parse(filename)
        site = match_call(source, function_name, line)
        if site is None:
            logger.debug(
                "no call to %s found at %s:%d", function_name, source.filename, line
            )
        return site, extract_args(site.call if site else None, arg_indices)

    def add_excluded(self, call: CallSite | CallRef) -> None:
        """Never treat ``call`` as a binding when scanning for assignments."""
        self.exclusions.add(call)


__all__ = ["Resolver"]
