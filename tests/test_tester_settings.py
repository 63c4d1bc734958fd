import ipaddress
import socket
from datetime import timedelta

import pytest

from mcproxy.config_map import ConfigMap
from mcproxy.definitions import McFilter
from mcproxy.tester_settings import TesterError, load_task_settings

IF_NAME = socket.if_nameindex()[0][1]


def make_config(*extra_lines, group="239.99.99.99", interface=IF_NAME, section="send"):
    lines = [f"[{section}]", "action = send"]
    if interface is not None:
        lines.append(f"interface = {interface}")
    if group is not None:
        lines.append(f'group = "{group}"')
    lines.extend(extra_lines)
    config = ConfigMap()
    config.parse_lines(lines)
    return config


def test_defaults():
    s = load_task_settings(make_config(), "send")
    assert s.if_name == IF_NAME
    assert s.if_index == socket.if_nametoindex(IF_NAME)
    assert s.gaddr == ipaddress.ip_address("239.99.99.99")
    assert s.addr_family == socket.AF_INET
    assert s.max_count == 0
    assert s.sources == ()
    assert s.action == "send"
    assert s.filter_mode is McFilter.INCLUDE_MODE
    assert s.ttl == 10
    assert s.port == 1234
    assert s.busy_waiting_counter == 0
    assert s.msg == "this is a test message"
    assert s.send_interval == timedelta(milliseconds=1000)
    assert s.print_status_msg is False
    assert s.save_to_file is False
    assert s.file_name == "delay_measurment_file"
    assert s.include_file_header is True
    assert s.include_data is True
    assert s.include_summary is True
    assert s.ignore_duplicated_packets is False
    assert s.parse_time_stamp is True
    assert s.include_time_stamp is True
    assert s.file_operation_mode == "override"
    assert s.lifetime == timedelta(0)
    assert s.to_do_next is None


def test_configured_values_are_used():
    config = make_config(
        "ttl = 3",
        "port = 5000",
        "max_count = 20",
        "send_interval = 250",
        "lifetime = 700",
        "print_status_msg = true",
        "include_data = false",
        "file_operation_mode = append",
        'msg = "hello world"',
        "file_name = out.txt",
    )
    s = load_task_settings(config, "send")
    assert (s.ttl, s.port, s.max_count) == (3, 5000, 20)
    assert s.send_interval == timedelta(milliseconds=250)
    assert s.lifetime == timedelta(milliseconds=700)
    assert s.print_status_msg is True
    assert s.include_data is False
    assert s.file_operation_mode == "append"
    assert s.msg == "hello world"
    assert s.file_name == "out.txt"


def test_overrides_take_precedence():
    config = make_config('msg = "configured"', "file_name = configured.txt")
    s = load_task_settings(config, "send", output_file="given.txt", message="given")
    assert s.msg == "given"
    assert s.file_name == "given.txt"


def test_source_list_in_order():
    config = make_config('src_0 = "10.0.0.1"', 'src_1 = "10.0.0.2"', 'src_3 = "10.0.0.4"')
    s = load_task_settings(config, "send")
    assert s.sources == (
        ipaddress.ip_address("10.0.0.1"),
        ipaddress.ip_address("10.0.0.2"),
    )


def test_source_with_wrong_family_rejected():
    config = make_config('src_0 = "fe80::1"')
    with pytest.raises(TesterError, match="src_0 is not an ip address"):
        load_task_settings(config, "send")


def test_ipv6_group():
    s = load_task_settings(make_config(group="ff05::1"), "send")
    assert s.addr_family == socket.AF_INET6


def test_exclude_filter_mode():
    s = load_task_settings(make_config("filter_mode = exclude"), "send")
    assert s.filter_mode is McFilter.EXCLUDE_MODE


@pytest.mark.parametrize(
    "line, message",
    [
        ("filter_mode = both", "both is not filter_mode"),
        ("ttl = abc", "failed to parse ttl"),
        ("send_interval = x", "failed to parse interval"),
        ("lifetime = x", "failed to parse lifetime"),
        ("max_count = x", "failed to parse max_count"),
        ("save_to_file = yes", "failed to parse save_to_file"),
        ("file_operation_mode = delete", "failed to file_operation_mode"),
        ("to_do_next = missing", "to_do_next missing not found"),
    ],
)
def test_bad_values(line, message):
    with pytest.raises(TesterError, match=message):
        load_task_settings(make_config(line), "send")


def test_unknown_task():
    with pytest.raises(TesterError, match="to_do other not found"):
        load_task_settings(make_config(), "other")


def test_missing_interface_and_group():
    with pytest.raises(TesterError, match="no interface found"):
        load_task_settings(make_config(interface=None), "send")
    with pytest.raises(TesterError, match="no group found"):
        load_task_settings(make_config(group=None), "send")


def test_invalid_group():
    with pytest.raises(TesterError, match="is not an ipaddress"):
        load_task_settings(make_config(group="not_an_address"), "send")


def test_unknown_interface():
    with pytest.raises(TesterError, match="interface nosuchif0 not found"):
        load_task_settings(make_config(interface="nosuchif0"), "send")


def test_to_do_next_found():
    config = make_config("to_do_next = other")
    config.parse_lines(["[other]", "action = receive"])
    assert load_task_settings(config, "send").to_do_next == "other"


def test_settings_are_immutable():
    s = load_task_settings(make_config(), "send")
    with pytest.raises(AttributeError):
        s.ttl = 1
    assert s.ttl == 10