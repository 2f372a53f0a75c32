"""Waits for readiness on file descriptors and runs the matching callbacks."""

from __future__ import annotations

import select
from dataclasses import dataclass
from enum import Enum, IntEnum
from typing import Callable, Optional

from spongetcp.file_descriptor import FileDescriptor
from spongetcp.util import UnixError

Callback = Callable[[], None]
Interest = Callable[[], bool]


class Direction(IntEnum):
    """Whether a rule waits for a descriptor to become readable or writable."""

    In = select.POLLIN
    Out = select.POLLOUT


class Result(Enum):
    """Outcome of one call to EventLoop.wait_next_event."""

    Success = "success"
    Timeout = "timeout"
    Exit = "exit"


def _always_interested() -> bool:
    return True


def _do_nothing() -> None:
    return None


@dataclass(eq=False)
class _Rule:
    fd: FileDescriptor
    direction: Direction
    callback: Callback
    interest: Interest
    cancel: Callback

    def service_count(self) -> int:
        """How often the descriptor was read or written, matching the direction."""
        if self.direction is Direction.In:
            return self.fd.read_count()
        return self.fd.write_count()


class EventLoop:
    """Holds rules and polls their descriptors, calling back the ready ones.

    A rule is polled whenever its interest callback returns True. It is
    cancelled (its cancel callback runs and it is dropped) when its
    descriptor is closed, reaches EOF while reading, or hangs up.
    """

    def __init__(self) -> None:
        self._rules: list[_Rule] = []

    def add_rule(
        self,
        fd: FileDescriptor,
        direction: Direction,
        callback: Callback,
        interest: Optional[Interest] = None,
        cancel: Optional[Callback] = None,
    ) -> None:
        """Call ``callback`` whenever ``fd`` is ready in ``direction``."""
        self._rules.append(
            _Rule(
                fd.duplicate(),
                Direction(direction),
                callback,
                interest if interest is not None else _always_interested,
                cancel if cancel is not None else _do_nothing,
            )
        )

    def _drop(self, rule: _Rule) -> None:
        rule.cancel()
        self._rules.remove(rule)

    def wait_next_event(self, timeout_ms: int) -> Result:
        """Poll once and run the callbacks of the rules that became ready.

        Raises RuntimeError on an error condition of a polled descriptor, or
        when a callback neither read nor wrote its descriptor but is still
        interested (which would otherwise spin forever).
        """
        polled: list[tuple[_Rule, int]] = []
        for rule in list(self._rules):
            if rule.direction is Direction.In and rule.fd.eof():
                self._drop(rule)
                continue
            if rule.fd.closed():
                self._drop(rule)
                continue
            events = int(rule.direction) if rule.interest() else 0
            polled.append((rule, events))

        if not any(events for _rule, events in polled):
            return Result.Exit

        masks: dict[int, int] = {}
        for rule, events in polled:
            number = rule.fd.fd_num()
            masks[number] = masks.get(number, 0) | events

        poller = select.poll()
        for number, mask in masks.items():
            poller.register(number, mask)

        try:
            ready = poller.poll(timeout_ms)
        except InterruptedError:
            return Result.Exit
        except OSError as exc:
            raise UnixError("poll", exc.errno) from exc

        if not ready:
            return Result.Timeout

        revents_by_fd = dict(ready)
        for rule, events in polled:
            revents = revents_by_fd.get(rule.fd.fd_num(), 0)
            if revents & (select.POLLERR | select.POLLNVAL):
                raise RuntimeError("EventLoop: error on polled file descriptor")

            is_ready = bool(revents & events)
            hung_up = bool(revents & select.POLLHUP)
            if hung_up and events and not is_ready:
                # The only condition was a hangup: this descriptor is defunct.
                self._drop(rule)
                continue

            if is_ready:
                count_before = rule.service_count()
                rule.callback()
                if count_before == rule.service_count() and rule.interest():
                    raise RuntimeError(
                        "EventLoop: busy wait detected: callback did not read/write fd "
                        "and is still interested"
                    )

        return Result.Success