"""Querier timers and counters (RFC 3376 / RFC 3810) with code conversions."""

from __future__ import annotations

import copy
import dataclasses
from dataclasses import dataclass, field
from datetime import timedelta
from typing import Any, Optional

_MSEC = timedelta(milliseconds=1)
_SEC = timedelta(seconds=1)


def _whole_seconds(value: timedelta) -> int:
    return value // _SEC


def _whole_msec(value: timedelta) -> int:
    return value // _MSEC


def _format_seconds(value: timedelta) -> str:
    return f"{_whole_seconds(value)}sec"


def _format_msec(value: timedelta) -> str:
    return f"{_whole_msec(value)}msec"


@dataclass
class _Tank:
    robustness_variable: int = 2
    query_interval: timedelta = timedelta(seconds=125)
    query_response_interval: timedelta = timedelta(milliseconds=10000)
    startup_query_interval: timedelta = field(
        default_factory=lambda: timedelta(seconds=125 // 4)
    )
    startup_query_count: int = 2
    last_listener_query_interval: timedelta = timedelta(milliseconds=1000)
    last_listener_query_count: int = 2
    unsolicited_report_interval: timedelta = timedelta(milliseconds=1000)


_DEFAULT_TANK = _Tank()


class _TankField:
    """A value read from the shared defaults until it is first assigned."""

    def __set_name__(self, owner: type, name: str) -> None:
        self._name = name

    def __get__(self, instance: Optional["TimersValues"], owner: type) -> Any:
        if instance is None:
            return self
        return getattr(instance._current_tank, self._name)

    def __set__(self, instance: "TimersValues", value: Any) -> None:
        setattr(instance._own_tank(), self._name, value)


class TimersValues:
    """Timer and counter values of a querier, sharing defaults until changed."""

    robustness_variable = _TankField()
    query_interval = _TankField()
    query_response_interval = _TankField()
    startup_query_interval = _TankField()
    startup_query_count = _TankField()
    last_listener_query_interval = _TankField()
    last_listener_query_count = _TankField()
    unsolicited_report_interval = _TankField()

    def __init__(self) -> None:
        self._tank: Optional[_Tank] = None

    @property
    def _current_tank(self) -> _Tank:
        return self._tank if self._tank is not None else _DEFAULT_TANK

    def _own_tank(self) -> _Tank:
        if self._tank is None:
            self._tank = _Tank()
        return self._tank

    def is_default(self) -> bool:
        """Return True while no value has been changed from the defaults."""
        return self._tank is None

    def reset_to_default(self) -> None:
        """Drop all changed values and use the shared defaults again."""
        self._tank = None

    def __copy__(self) -> "TimersValues":
        duplicate = TimersValues()
        if self._tank is not None:
            duplicate._tank = dataclasses.replace(self._tank)
        return duplicate

    def __deepcopy__(self, memo: dict) -> "TimersValues":
        return copy.copy(self)

    # -- derived values ------------------------------------------------
    @property
    def multicast_address_listening_interval(self) -> timedelta:
        return self.robustness_variable * self.query_interval + self.query_response_interval

    @property
    def other_querier_present_interval(self) -> timedelta:
        half = timedelta(milliseconds=_whole_msec(self.query_response_interval) // 2)
        return self.robustness_variable * self.query_interval + half

    @property
    def last_listener_query_time(self) -> timedelta:
        return self.last_listener_query_interval * self.last_listener_query_count

    @property
    def older_host_present_interval(self) -> timedelta:
        return self.robustness_variable * self.query_interval + self.query_response_interval

    # -- querier's query interval code ---------------------------------
    def qqic_parts_to_qqi(self, first_bit: bool, exp: int, mant: int) -> timedelta:
        """Decode a QQIC given as its flag bit, exponent and mantissa."""
        exp &= 0x7
        mant &= 0xF
        if not first_bit:
            return timedelta(seconds=(exp << 4) | mant)
        return timedelta(seconds=(mant | 0x10) << (exp + 3))

    def qqic_to_qqi(self, qqic: int) -> timedelta:
        """Decode an 8-bit QQIC into the querier's query interval."""
        qqic &= 0xFF
        if qqic & 0x80:
            return self.qqic_parts_to_qqi(True, (qqic & 0x70) >> 4, qqic & 0xF)
        return timedelta(seconds=qqic)

    def qqi_to_qqic(self, seconds: timedelta) -> int:
        """Encode a query interval as an 8-bit QQIC."""
        value = _whole_seconds(seconds)
        if value < 0:
            raise ValueError(f"negative qqi: {_format_seconds(seconds)}")
        if value < 128:
            return value
        pos = next((p for p in range(15, 6, -1) if value & (1 << p)), None)
        if pos is None:
            raise ValueError(f"unknown qqic sec: {_format_seconds(seconds)}")
        exp = pos - 5 + 1
        mant = (value & (0xF << exp)) >> exp
        exp -= 3
        return ((1 << 7) | (exp << 4) | mant) & 0xFF

    # -- IGMPv3 maximum response code ----------------------------------
    def maxrespc_igmpv3_parts_to_maxrespi(
        self, first_bit: bool, exp: int, mant: int
    ) -> timedelta:
        """Decode an IGMPv3 max response code given as flag, exponent and mantissa."""
        seconds = _whole_seconds(self.qqic_parts_to_qqi(first_bit, exp, mant))
        return timedelta(milliseconds=seconds * 100)

    def maxrespc_igmpv3_to_maxrespi(self, max_resp_code: int) -> timedelta:
        """Decode an 8-bit IGMPv3 max response code (units of 100 ms)."""
        seconds = _whole_seconds(self.qqic_to_qqi(max_resp_code))
        return timedelta(milliseconds=seconds * 100)

    def maxrespi_to_maxrespc_igmpv3(self, msec: timedelta) -> int:
        """Encode a maximum response time as an 8-bit IGMPv3 code."""
        return self.qqi_to_qqic(timedelta(seconds=_whole_msec(msec) // 100))

    # -- MLDv2 maximum response code -----------------------------------
    def maxrespc_mldv2_parts_to_maxrespi(
        self, first_bit: bool, exp: int, mant: int
    ) -> timedelta:
        """Decode an MLDv2 max response code given as flag, exponent and mantissa."""
        exp &= 0x7
        mant &= 0xFFF
        if not first_bit:
            return timedelta(milliseconds=(exp << 12) | mant)
        return timedelta(milliseconds=(mant | 0x1000) << (exp + 3))

    def maxrespc_mldv2_to_maxrespi(self, max_resp_code: int) -> timedelta:
        """Decode a 16-bit MLDv2 max response code into milliseconds."""
        max_resp_code &= 0xFFFF
        if max_resp_code & 0x8000:
            return self.maxrespc_mldv2_parts_to_maxrespi(
                True, (max_resp_code & 0x7000) >> 12, max_resp_code & 0xFFF
            )
        return timedelta(milliseconds=max_resp_code)

    def maxrespi_to_maxrespc_mldv2(self, msec: timedelta) -> int:
        """Encode a maximum response delay as a 16-bit MLDv2 code."""
        value = _whole_msec(msec)
        if value < 0:
            raise ValueError(f"negative max response delay: {_format_msec(msec)}")
        if value < 32767:
            return value
        pos = next((p for p in range(31, 14, -1) if value & (1 << p)), None)
        if pos is None:
            raise ValueError(f"unknown max response code: {_format_msec(msec)}")
        exp = pos - 12
        mant = (value & (0xFFF << exp)) >> exp
        exp -= 3
        return ((1 << 15) | (exp << 12) | mant) & 0xFFFF

    def __str__(self) -> str:
        lines = [
            f"is_default_timers_values_tank: {'true' if self.is_default() else 'false'}",
            f"Robustness Variable: {self.robustness_variable}",
            f"Query Interval: {_format_seconds(self.query_interval)}",
            f"Query Response Interval: {_format_msec(self.query_response_interval)}",
            "Multicast Address Listining Interval: "
            f"{_format_msec(self.multicast_address_listening_interval)}",
            "Other Querier Present Interval: "
            f"{_format_msec(self.other_querier_present_interval)}",
            f"Startup Query Interval: {_format_seconds(self.startup_query_interval)}",
            f"Startup Query Count: {self.startup_query_count}",
            "Last Listener Query Interval: "
            f"{_format_msec(self.last_listener_query_interval)}",
            f"Last Listener Query Count: {self.last_listener_query_count}",
            f"Last Listener Query Time: {_format_msec(self.last_listener_query_time)}",
            "Unsolicited Report Interval: "
            f"{_format_msec(self.unsolicited_report_interval)}",
            "Older Host Present Interval: "
            f"{_format_msec(self.older_host_present_interval)}",
        ]
        return "\n".join(lines) + "\n"