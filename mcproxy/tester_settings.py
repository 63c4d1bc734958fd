"""Settings of one tester task, read and validated from a configuration map."""

from __future__ import annotations

import ipaddress
import re
import socket
from dataclasses import dataclass
from datetime import timedelta
from typing import Optional, Union

from mcproxy.config_map import ConfigMap
from mcproxy.definitions import McFilter

IpAddress = Union[ipaddress.IPv4Address, ipaddress.IPv6Address]

DEFAULT_MESSAGE = "this is a test message"
DEFAULT_FILE_NAME = "delay_measurment_file"
FILE_OPERATION_MODES = ("override", "append")

_INT_PREFIX_RX = re.compile(r"\s*([+-]?\d+)")
_INT32_RANGE = (-(2**31), 2**31 - 1)
_INT64_RANGE = (-(2**63), 2**63 - 1)


class TesterError(RuntimeError):
    """Raised when a tester task is missing or badly configured."""


@dataclass(frozen=True)
class TaskSettings:
    """Everything a tester task needs to send or receive."""

    to_do: str
    if_name: str
    if_index: int
    gaddr: IpAddress
    max_count: int
    sources: tuple[IpAddress, ...]
    action: str
    filter_mode: McFilter
    ttl: int
    port: int
    busy_waiting_counter: int
    msg: str
    send_interval: timedelta
    print_status_msg: bool
    save_to_file: bool
    file_name: str
    include_file_header: bool
    include_data: bool
    include_summary: bool
    ignore_duplicated_packets: bool
    parse_time_stamp: bool
    include_time_stamp: bool
    file_operation_mode: str
    lifetime: timedelta
    to_do_next: Optional[str]

    @property
    def addr_family(self) -> int:
        """The socket address family of the group address."""
        return socket.AF_INET if self.gaddr.version == 4 else socket.AF_INET6


def _parse_int(text: str, limits: tuple[int, int]) -> int:
    """Parse a leading decimal integer the way the C library does; raise ValueError."""
    match = _INT_PREFIX_RX.match(text)
    if match is None:
        raise ValueError(f"no number in {text!r}")
    value = int(match.group(1))
    low, high = limits
    if not low <= value <= high:
        raise ValueError(f"{value} out of range")
    return value


def _parse_address(text: str) -> Optional[IpAddress]:
    try:
        return ipaddress.ip_address(text)
    except ValueError:
        return None


class _TaskReader:
    def __init__(self, config: ConfigMap, to_do: str) -> None:
        self._config = config
        self._to_do = to_do

    def value(self, key: str) -> str:
        return self._config.get(self._to_do, key)

    def if_name(self) -> tuple[str, int]:
        name = self.value("interface")
        if not name:
            raise TesterError("no interface found")
        try:
            index = socket.if_nametoindex(name)
        except OSError:
            index = 0
        if index == 0:
            raise TesterError(f"interface {name} not found")
        return name, index

    def gaddr(self) -> IpAddress:
        text = self.value("group")
        if not text:
            raise TesterError("no group found, in unicast mode: need to select IP version")
        addr = _parse_address(text)
        if addr is None:
            raise TesterError(f"group {text} is not an ipaddress")
        return addr

    def max_count(self) -> int:
        text = self.value("max_count")
        if not text:
            return 0  # no limit
        try:
            return _parse_int(text, _INT64_RANGE)
        except ValueError as exc:
            raise TesterError("failed to parse max_count") from exc

    def sources(self, version: int) -> tuple[IpAddress, ...]:
        found = []
        for i in range(len(self._config_keys()) + 1):
            key = f"src_{i}"
            text = self.value(key)
            if not text:
                break
            addr = _parse_address(text)
            if addr is None or addr.version != version:
                raise TesterError(
                    f"{key} is not an ip address or has the wrong ip version"
                )
            found.append(addr)
        return tuple(found)

    def _config_keys(self) -> list[str]:
        # Upper bound for the number of src_<n> entries: every key of the section.
        keys = []
        i = 0
        while self.value(f"src_{i}"):
            keys.append(f"src_{i}")
            i += 1
        return keys

    def action(self) -> str:
        action = self.value("action")
        if not action:
            raise TesterError("no action found")
        return action

    def filter_mode(self) -> McFilter:
        text = self.value("filter_mode")
        if not text or text == "include":
            return McFilter.INCLUDE_MODE
        if text == "exclude":
            return McFilter.EXCLUDE_MODE
        raise TesterError(f"{text} is not filter_mode")

    def integer(self, key: str, default: int, label: Optional[str] = None) -> int:
        text = self.value(key)
        if not text:
            return default
        try:
            return _parse_int(text, _INT32_RANGE)
        except ValueError as exc:
            raise TesterError(f"failed to parse {label or key}") from exc

    def boolean(self, key: str, default: bool) -> bool:
        text = self.value(key)
        if not text:
            return default
        if text == "true":
            return True
        if text == "false":
            return False
        raise TesterError(f"failed to parse {key}")

    def msg(self, proposal: str) -> str:
        if proposal:
            return proposal
        return self.value("msg") or DEFAULT_MESSAGE

    def file_name(self, proposal: str) -> str:
        if proposal:
            return proposal
        return self.value("file_name") or DEFAULT_FILE_NAME

    def file_operation_mode(self) -> str:
        mode = self.value("file_operation_mode")
        if not mode:
            return "override"
        if mode not in FILE_OPERATION_MODES:
            raise TesterError("failed to file_operation_mode")
        return mode

    def to_do_next(self) -> Optional[str]:
        name = self.value("to_do_next") or "null"
        if name == "null":
            return None
        if not self._config.has_group(name):
            raise TesterError(f"to_do_next {name} not found")
        return name


def load_task_settings(
    config: ConfigMap,
    to_do: str,
    output_file: str = "",
    message: str = "",
) -> TaskSettings:
    """Read the settings of task ``to_do``; raise TesterError on a bad configuration.

    A non-empty ``output_file`` overrides the configured file name and a
    non-empty ``message`` overrides the configured message.
    """
    if not config.has_group(to_do):
        raise TesterError(f"to_do {to_do} not found")

    reader = _TaskReader(config, to_do)
    if_name, if_index = reader.if_name()
    gaddr = reader.gaddr()
    max_count = reader.max_count()
    sources = reader.sources(gaddr.version)
    action = reader.action()
    filter_mode = reader.filter_mode()
    ttl = reader.integer("ttl", 10)
    port = reader.integer("port", 1234)
    busy_waiting_counter = reader.integer("busy_waiting_counter", 0)
    msg = reader.msg(message)
    send_interval = reader.integer("send_interval", 1000, label="interval")
    print_status_msg = reader.boolean("print_status_msg", False)
    save_to_file = reader.boolean("save_to_file", False)
    file_name = reader.file_name(output_file)
    include_file_header = reader.boolean("include_file_header", True)
    include_data = reader.boolean("include_data", True)
    include_summary = reader.boolean("include_summary", True)
    ignore_duplicated_packets = reader.boolean("ignore_duplicated_packets", False)
    parse_time_stamp = reader.boolean("parse_time_stamp", True)
    include_time_stamp = reader.boolean("include_time_stamp", True)
    file_operation_mode = reader.file_operation_mode()
    lifetime = reader.integer("lifetime", 0)
    to_do_next = reader.to_do_next()

    return TaskSettings(
        to_do=to_do,
        if_name=if_name,
        if_index=if_index,
        gaddr=gaddr,
        max_count=max_count,
        sources=sources,
        action=action,
        filter_mode=filter_mode,
        ttl=ttl,
        port=port,
        busy_waiting_counter=busy_waiting_counter,
        msg=msg,
        send_interval=timedelta(milliseconds=send_interval),
        print_status_msg=print_status_msg,
        save_to_file=save_to_file,
        file_name=file_name,
        include_file_header=include_file_header,
        include_data=include_data,
        include_summary=include_summary,
        ignore_duplicated_packets=ignore_duplicated_packets,
        parse_time_stamp=parse_time_stamp,
        include_time_stamp=include_time_stamp,
        file_operation_mode=file_operation_mode,
        lifetime=timedelta(milliseconds=lifetime),
        to_do_next=to_do_next,
    )