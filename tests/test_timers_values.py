import copy
from datetime import timedelta

import pytest

from mcproxy.timers_values import TimersValues


@pytest.fixture
def tv():
    return TimersValues()


def test_small_qqic_is_plain_seconds(tv):
    assert tv.qqic_to_qqi(1) == timedelta(seconds=1)
    assert tv.qqic_to_qqi(127) == timedelta(seconds=127)


def test_largest_qqic(tv):
    assert tv.qqic_to_qqi(0xFF) == timedelta(seconds=31744)
    assert tv.qqi_to_qqic(timedelta(seconds=31744)) == 0xFF


def test_qqic_parts_match_packed_form(tv):
    assert tv.qqic_parts_to_qqi(True, 7, 15) == tv.qqic_to_qqi(0xFF)
    assert tv.qqic_parts_to_qqi(False, 0, 7) == timedelta(seconds=7)
    assert tv.qqic_parts_to_qqi(True, 1, 1) == tv.qqic_to_qqi(0x91)


def test_qqic_parts_mask_out_of_range(tv):
    assert tv.qqic_parts_to_qqi(False, 0, 16) == tv.qqic_parts_to_qqi(False, 0, 0)
    assert tv.qqic_parts_to_qqi(False, 8, 0) == tv.qqic_parts_to_qqi(False, 0, 0)


def test_qqi_to_qqic_below_threshold(tv):
    assert tv.qqi_to_qqic(timedelta(seconds=7)) == 7
    assert tv.qqi_to_qqic(timedelta(seconds=127)) == 127


@pytest.mark.parametrize("code", range(100, 0x100, 7))
def test_qqic_round_trip(tv, code):
    assert tv.qqi_to_qqic(tv.qqic_to_qqi(code)) == code


def test_qqi_too_large_raises(tv):
    with pytest.raises(ValueError):
        tv.qqi_to_qqic(timedelta(seconds=65536))


def test_igmpv3_max_response(tv):
    assert tv.maxrespc_igmpv3_to_maxrespi(0xFF) == timedelta(milliseconds=3174400)
    assert tv.maxrespi_to_maxrespc_igmpv3(timedelta(milliseconds=3174400)) == 0xFF
    assert tv.maxrespc_igmpv3_parts_to_maxrespi(True, 1, 1) == tv.maxrespc_igmpv3_to_maxrespi(0x91)


@pytest.mark.parametrize("code", range(100, 0x100, 7))
def test_igmpv3_round_trip(tv, code):
    assert tv.maxrespi_to_maxrespc_igmpv3(tv.maxrespc_igmpv3_to_maxrespi(code)) == code


def test_mldv2_decoding(tv):
    assert tv.maxrespc_mldv2_parts_to_maxrespi(False, 0, 0) == tv.maxrespc_mldv2_to_maxrespi(0)
    assert tv.maxrespc_mldv2_parts_to_maxrespi(True, 0, 0) == tv.maxrespc_mldv2_to_maxrespi(0x8000)
    assert tv.maxrespc_mldv2_parts_to_maxrespi(True, 0, 1) == tv.maxrespc_mldv2_to_maxrespi(0x8001)
    assert tv.maxrespc_mldv2_parts_to_maxrespi(True, 1, 1) == tv.maxrespc_mldv2_to_maxrespi(0x9001)
    assert tv.maxrespc_mldv2_to_maxrespi(0x8000) == timedelta(milliseconds=32768)


def test_mldv2_small_values_pass_through(tv):
    assert tv.maxrespc_mldv2_to_maxrespi(5274) == timedelta(milliseconds=5274)
    assert tv.maxrespi_to_maxrespc_mldv2(timedelta(milliseconds=5274)) == 5274


@pytest.mark.parametrize("code", range(1000, 0x10000, 2137))
def test_mldv2_round_trip(tv, code):
    assert tv.maxrespi_to_maxrespc_mldv2(tv.maxrespc_mldv2_to_maxrespi(code)) == code


def test_mldv2_too_large_raises(tv):
    with pytest.raises(ValueError):
        tv.maxrespi_to_maxrespc_mldv2(timedelta(milliseconds=2**32))


def test_derived_intervals_relations(tv):
    assert tv.older_host_present_interval == tv.multicast_address_listening_interval
    assert (
        tv.multicast_address_listening_interval - tv.other_querier_present_interval
        == tv.query_response_interval / 2
    )
    assert tv.last_listener_query_time == tv.last_listener_query_interval * tv.last_listener_query_count


def test_setting_leaves_other_instances_default(tv):
    other = TimersValues()
    tv.robustness_variable = 99
    assert not tv.is_default()
    assert tv.robustness_variable == 99
    assert other.is_default()
    assert other.robustness_variable == 2


def test_reset_to_default(tv):
    tv.query_interval = timedelta(seconds=100)
    tv.reset_to_default()
    assert tv.is_default()
    assert tv.query_interval == timedelta(seconds=125)


def test_copy_is_independent(tv):
    tv.robustness_variable = 99
    tv.query_interval = timedelta(seconds=100)
    tv.query_response_interval = timedelta(milliseconds=101)
    tv.startup_query_interval = timedelta(seconds=102)
    tv.startup_query_count = 103
    tv.last_listener_query_interval = timedelta(milliseconds=104)
    tv.last_listener_query_count = 105
    tv.unsolicited_report_interval = timedelta(milliseconds=106)

    duplicate = copy.copy(tv)
    assert str(duplicate) == str(tv)
    assert duplicate.last_listener_query_count == 105

    duplicate.robustness_variable = 1
    assert tv.robustness_variable == 99
    assert str(duplicate) != str(tv)


def test_copy_of_default_stays_default(tv):
    duplicate = copy.deepcopy(tv)
    assert duplicate.is_default()
    assert duplicate.query_interval == tv.query_interval


def test_str_reports_default_state(tv):
    text = str(tv)
    assert text.startswith("is_default_timers_values_tank: true\n")
    tv.startup_query_count = 103
    text = str(tv)
    assert "is_default_timers_values_tank: false" in text
    assert "Startup Query Count: 103" in text