"""Messages passed between proxy components: timers, records and commands."""

from __future__ import annotations

import socket
import time
from collections.abc import Iterable
from datetime import timedelta
from enum import Enum, IntEnum, auto
from typing import Any, Optional

from mcproxy.definitions import (
    GroupMemProtocol,
    McastAddrRecordType,
    format_source_list,
)
from mcproxy.timers_values import TimersValues


class MessageType(Enum):
    """Kind of a proxy message."""

    INIT_MSG = auto()
    TEST_MSG = auto()
    EXIT_MSG = auto()
    FILTER_TIMER_MSG = auto()
    SOURCE_TIMER_MSG = auto()
    NEW_SOURCE_MSG = auto()
    NEW_SOURCE_TIMER_MSG = auto()
    RET_GROUP_TIMER_MSG = auto()
    RET_SOURCE_TIMER_MSG = auto()
    OLDER_HOST_PRESENT_TIMER_MSG = auto()
    GENERAL_QUERY_TIMER_MSG = auto()
    CONFIG_MSG = auto()
    GROUP_RECORD_MSG = auto()
    DEBUG_MSG = auto()


class MessagePriority(IntEnum):
    """Processing priority; a lower value is processed first."""

    USER_INPUT = 1
    SYSTEMIC = 10
    LOSEABLE = 100


class ProxyMsg:
    """Base of all messages; ordered by priority."""

    def __init__(
        self,
        msg_type: MessageType = MessageType.INIT_MSG,
        priority: MessagePriority = MessagePriority.SYSTEMIC,
    ) -> None:
        self._msg_type = msg_type
        self._priority = priority

    @property
    def msg_type(self) -> MessageType:
        return self._msg_type

    @property
    def priority(self) -> MessagePriority:
        return self._priority

    def __lt__(self, other: "ProxyMsg") -> bool:
        return self._priority < other._priority

    def __gt__(self, other: "ProxyMsg") -> bool:
        return self._priority > other._priority

    def __call__(self) -> None:
        """Run the message's action; the base message does nothing."""

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self._msg_type.name}, {self._priority.name})"


class TestMsg(ProxyMsg):
    """Message carrying a number, printed when it is run."""

    __test__ = False

    def __init__(self, value: int, priority: MessagePriority) -> None:
        super().__init__(MessageType.TEST_MSG, priority)
        self.value = value

    def __call__(self) -> None:
        print(f"Test Message value: {self.value} prio: {self.priority.name}")


class TimerMsg(ProxyMsg):
    """Message that becomes due after a duration."""

    def __init__(
        self,
        msg_type: MessageType,
        if_index: int,
        gaddr: Any,
        duration: timedelta,
    ) -> None:
        super().__init__(msg_type, MessagePriority.SYSTEMIC)
        self.if_index = if_index
        self.gaddr = gaddr
        self._end_time = time.monotonic() + duration.total_seconds()

    def is_remaining_time_greater_than(self, comp_time: timedelta) -> bool:
        """Return True if at least ``comp_time`` is left before the timer expires."""
        return time.monotonic() + comp_time.total_seconds() <= self._end_time

    def remaining_time_text(self) -> str:
        """Remaining time in whole seconds, e.g. "12sec"; "0sec" once expired."""
        remaining = int(self._end_time - time.monotonic())
        return f"{max(remaining, 0)}sec"


class FilterTimerMsg(TimerMsg):
    """Filter timer of a group; may also serve as a source timer."""

    def __init__(self, if_index: int, gaddr: Any, duration: timedelta) -> None:
        super().__init__(MessageType.FILTER_TIMER_MSG, if_index, gaddr, duration)
        self.is_used_as_source_timer = False

    def set_as_source_timer(self) -> None:
        """Mark this filter timer as being used as a source timer."""
        self.is_used_as_source_timer = True


class SourceTimerMsg(TimerMsg):
    def __init__(self, if_index: int, gaddr: Any, duration: timedelta) -> None:
        super().__init__(MessageType.SOURCE_TIMER_MSG, if_index, gaddr, duration)


class RetransmitGroupTimerMsg(TimerMsg):
    def __init__(self, if_index: int, gaddr: Any, duration: timedelta) -> None:
        super().__init__(MessageType.RET_GROUP_TIMER_MSG, if_index, gaddr, duration)


class RetransmitSourceTimerMsg(TimerMsg):
    def __init__(self, if_index: int, gaddr: Any, duration: timedelta) -> None:
        super().__init__(MessageType.RET_SOURCE_TIMER_MSG, if_index, gaddr, duration)


class OlderHostPresentTimerMsg(TimerMsg):
    def __init__(self, if_index: int, gaddr: Any, duration: timedelta) -> None:
        super().__init__(
            MessageType.OLDER_HOST_PRESENT_TIMER_MSG, if_index, gaddr, duration
        )


class GeneralQueryTimerMsg(TimerMsg):
    """General query timer of an interface; it has no group address."""

    def __init__(self, if_index: int, duration: timedelta) -> None:
        super().__init__(MessageType.GENERAL_QUERY_TIMER_MSG, if_index, None, duration)


class NewSourceTimerMsg(TimerMsg):
    def __init__(
        self, if_index: int, gaddr: Any, saddr: Any, duration: timedelta
    ) -> None:
        super().__init__(MessageType.NEW_SOURCE_TIMER_MSG, if_index, gaddr, duration)
        self.saddr = saddr


class DebugMsg(ProxyMsg):
    def __init__(self) -> None:
        super().__init__(MessageType.DEBUG_MSG, MessagePriority.USER_INPUT)


class Source:
    """A multicast source; equal, ordered and hashed by its address alone."""

    def __init__(
        self,
        saddr: Any,
        shared_source_timer: Optional[TimerMsg] = None,
        retransmission_count: int = -1,
    ) -> None:
        self.saddr = saddr
        self.shared_source_timer = shared_source_timer
        # -1 means the source is not in a retransmission state
        self.retransmission_count = retransmission_count

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Source):
            return NotImplemented
        return self.saddr == other.saddr

    def __lt__(self, other: "Source") -> bool:
        return self.saddr < other.saddr

    def __hash__(self) -> int:
        return hash(self.saddr)

    def __str__(self) -> str:
        timer = self.shared_source_timer
        count = self.retransmission_count
        if timer is not None and count >= 0:
            return f"{self.saddr}({timer.remaining_time_text()},{count}x)"
        if timer is not None:
            return f"{self.saddr}({timer.remaining_time_text()})"
        if count >= 0:
            return f"{self.saddr}({count}x)"
        return str(self.saddr)

    def __repr__(self) -> str:
        return f"Source({self.saddr!r})"


def _interface_name(if_index: int) -> str:
    try:
        return socket.if_indextoname(if_index)
    except (OSError, ValueError, OverflowError):
        return str(if_index)


class GroupRecordMsg(ProxyMsg):
    """A received group record of a membership report."""

    def __init__(
        self,
        if_index: int,
        record_type: McastAddrRecordType,
        gaddr: Any,
        slist: Iterable[Source],
        grp_mem_proto: GroupMemProtocol,
    ) -> None:
        super().__init__(MessageType.GROUP_RECORD_MSG, MessagePriority.LOSEABLE)
        self.if_index = if_index
        self.record_type = record_type
        self.gaddr = gaddr
        self.slist: set[Source] = set(slist)
        self.grp_mem_proto = grp_mem_proto

    def __str__(self) -> str:
        return "\n".join(
            [
                f"interface: {_interface_name(self.if_index)}",
                f"record_type: {self.record_type.name}",
                f"group address: {self.gaddr}",
                f"source list: {format_source_list(self.slist)}",
                f"report version: {self.grp_mem_proto.name}",
            ]
        )


class NewSourceMsg(ProxyMsg):
    """Announces traffic from a source not yet known for a group."""

    def __init__(self, if_index: int, gaddr: Any, saddr: Any) -> None:
        super().__init__(MessageType.NEW_SOURCE_MSG, MessagePriority.LOSEABLE)
        self.if_index = if_index
        self.gaddr = gaddr
        self.saddr = saddr


class ConfigInstruction(Enum):
    ADD_DOWNSTREAM = auto()
    DEL_DOWNSTREAM = auto()
    ADD_UPSTREAM = auto()
    DEL_UPSTREAM = auto()
    SET_GLOBAL_RULE_BINDING = auto()


_NO_TIMERS_NEEDED = frozenset(
    {
        ConfigInstruction.DEL_DOWNSTREAM,
        ConfigInstruction.ADD_UPSTREAM,
        ConfigInstruction.DEL_UPSTREAM,
    }
)


class ConfigMsg(ProxyMsg):
    """Instruction to change the interfaces or rules of a proxy instance."""

    def __init__(
        self,
        instruction: ConfigInstruction,
        *,
        if_index: int = 0,
        upstream_priority: int = 0,
        interface: Any = None,
        timers_values: Optional[TimersValues] = None,
        rule_binding: Any = None,
    ) -> None:
        if (
            timers_values is None
            and rule_binding is None
            and instruction not in _NO_TIMERS_NEEDED
        ):
            raise ValueError("config_msg is incomplet, missing parameter timer_values")
        super().__init__(MessageType.CONFIG_MSG, MessagePriority.SYSTEMIC)
        self.instruction = instruction
        self.if_index = if_index
        self.upstream_priority = upstream_priority
        self.interface = interface
        self.timers_values = timers_values if timers_values is not None else TimersValues()
        self.rule_binding = rule_binding


class ExitCmd(ProxyMsg):
    def __init__(self) -> None:
        super().__init__(MessageType.EXIT_MSG, MessagePriority.USER_INPUT)