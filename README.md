# mcproxy

Building blocks of a multicast proxy for IGMP and MLD networks: the
querier's timer set with its wire-format code conversions, the messages
exchanged inside a proxy instance, and the configuration reader and
settings loader for multicast test tasks.

## What is inside

- `mcproxy.timers_values` – `TimersValues`, the timers and counters of a
  querier (robustness variable, query interval, query response interval,
  startup query interval and count, last listener query interval and
  count, unsolicited report interval) plus derived values such as
  `multicast_address_listening_interval` and `older_host_present_interval`.
  All instances share the defaults until a value is assigned;
  `is_default()` and `reset_to_default()` report and undo that. It also
  encodes and decodes the QQIC field (`qqi_to_qqic`, `qqic_to_qqi`) and the
  IGMPv3 and MLDv2 Max Resp Code fields. Durations are `datetime.timedelta`.
- `mcproxy.messages` – the messages of a proxy instance: `ProxyMsg` and its
  subclasses (`TestMsg`, the timer messages such as `FilterTimerMsg` and
  `GeneralQueryTimerMsg`, `GroupRecordMsg`, `NewSourceMsg`, `ConfigMsg`,
  `DebugMsg`, `ExitCmd`), ordered by `MessagePriority`, and `Source`, an
  entry of a source list that compares by its address alone.
- `mcproxy.definitions` – `McFilter`, `GroupMemProtocol`,
  `McastAddrRecordType` and `format_source_list`.
- `mcproxy.config_map` – `ConfigMap`, a strict INI reader, and `ConfigError`.
- `mcproxy.tester_settings` – `load_task_settings`, which reads one task
  section of a `ConfigMap` into a frozen `TaskSettings`, raising
  `TesterError` on anything missing or malformed.

## Installing

```
pip install .
```

Tests run with `pip install .[test]` followed by `pytest`.

## Timer codes

```python
from datetime import timedelta
from mcproxy.timers_values import TimersValues

tv = TimersValues()
code = tv.qqi_to_qqic(timedelta(seconds=125))   # 125 fits directly
interval = tv.qqic_to_qqi(0xFF)                 # exponent/mantissa form

tv.query_interval = timedelta(seconds=60)       # this instance now has its own values
assert not tv.is_default()
print(tv)
```

Values that cannot be encoded (negative durations, or ones too large for
the field) raise `ValueError`.

## Messages

```python
from datetime import timedelta
from mcproxy.messages import FilterTimerMsg, Source, ExitCmd

timer = FilterTimerMsg(2, "239.1.1.1", timedelta(seconds=10))
print(timer.remaining_time_text())        # e.g. "9sec"
assert ExitCmd() < timer                  # USER_INPUT before SYSTEMIC

src = Source("10.0.0.1", shared_source_timer=timer)
print(src)
```

`ConfigMsg` requires `timers_values` for `ADD_DOWNSTREAM` and a
`rule_binding` for `SET_GLOBAL_RULE_BINDING`; without them it raises
`ValueError`.

## Tester configuration

```python
from mcproxy.config_map import ConfigMap
from mcproxy.tester_settings import load_task_settings

config = ConfigMap()
config.read_ini("tester.ini")
settings = load_task_settings(config, "send")
print(settings.gaddr, settings.port, settings.send_interval)
```

The INI format is strict: section names and keys consist of letters,
digits, `.` and `_`; values are either bare words (letters, digits, `.`,
`_`, `/`) or double-quoted strings; `;` starts a comment. A section or key
defined twice raises `ConfigError`, as does a key outside any section, or
a file that cannot be opened. Lines that match none of these forms are
reported on standard error and skipped.

```ini
[send]
interface = eth0
group = 239.99.99.99
action = send
port = 1234
send_interval = 1000
max_count = 20
to_do_next = recv

[recv]
interface = eth0
group = 239.99.99.99
action = receive
save_to_file = true
file_name = delays.txt
```

Keys read by `load_task_settings`:

| key | meaning | default |
| --- | --- | --- |
| `interface` | network interface; must exist on this host (required) | |
| `group` | IP address (required) | |
| `action` | task action (required) | |
| `src_0`, `src_1`, … | source addresses of the group's IP version | none |
| `filter_mode` | `include` or `exclude` | `include` |
| `max_count` | number of packets, 0 for no limit | 0 |
| `ttl` | time to live | 10 |
| `port` | UDP port | 1234 |
| `busy_waiting_counter` | extra busy wait between packets | 0 |
| `msg` | payload text | `this is a test message` |
| `send_interval` | milliseconds between packets | 1000 |
| `print_status_msg` | `true`/`false` | false |
| `save_to_file` | `true`/`false` | false |
| `file_name` | output file | `delay_measurment_file` |
| `file_operation_mode` | `override` or `append` | `override` |
| `include_file_header` | `true`/`false` | true |
| `include_data` | `true`/`false` | true |
| `include_summary` | `true`/`false` | true |
| `ignore_duplicated_packets` | `true`/`false` | false |
| `parse_time_stamp` | `true`/`false` | true |
| `include_time_stamp` | `true`/`false` | true |
| `lifetime` | milliseconds, 0 for none | 0 |
| `to_do_next` | another section, or `null` | `null` |

Non-empty `output_file` and `message` arguments to `load_task_settings`
take precedence over `file_name` and `msg`.

## What this package does not do

It has no command to run and sends or receives no traffic: there is no
tester program that acts on a `TaskSettings`, and no job queue, worker
thread or timer thread that delivers the messages in `mcproxy.messages`.
It provides the data, conversions and configuration handling such a proxy
or tester would be built on.