"""Tests for the ctypes ``pdh.dll`` binding against an in-process fake library.

The fake writes into the same ctypes structures ``pdh.dll`` fills, so the
buffer protocol and struct decoding are exercised on any platform.
"""

from __future__ import annotations

import ctypes
import sys
from types import SimpleNamespace

import pytest

from winpdh_exporter.base.errors import CollectorError, ErrorCode, PdhError
from winpdh_exporter.base.models import ReadStatus
from winpdh_exporter.base.pdh_status import (
    ERROR_SUCCESS,
    PDH_CSTATUS_BAD_COUNTERNAME,
    PDH_CSTATUS_INVALID_DATA,
    PDH_MORE_DATA,
)
from winpdh_exporter.pdh.client import PDH_FMT_COUNTERVALUE_ITEM_W, PdhCounterProvider

ITEMS = [("C:", 1.5), ("HarddiskVolume1", 250.0)]
NEEDED = ctypes.sizeof(PDH_FMT_COUNTERVALUE_ITEM_W) * len(ITEMS) + 64


def _fake_pdh(read_status: int = ERROR_SUCCESS) -> SimpleNamespace:
    keep = []

    def open_query(source, user, query_ref):
        query_ref._obj.value = 0x10
        return ERROR_SUCCESS

    def validate(path):
        return PDH_CSTATUS_BAD_COUNTERNAME if "Bad" in path else ERROR_SUCCESS

    def add_counter(query, path, user, counter_ref):
        counter_ref._obj.value = 0x20
        return ERROR_SUCCESS

    def collect(query):
        return ERROR_SUCCESS

    def read_array(counter, fmt, size_ref, count_ref, buf):
        if read_status != ERROR_SUCCESS:
            return read_status
        if buf is None or size_ref._obj.value < NEEDED:
            size_ref._obj.value = NEEDED
            return PDH_MORE_DATA
        array = (PDH_FMT_COUNTERVALUE_ITEM_W * len(ITEMS)).from_buffer(buf)
        for slot, (name, value) in zip(array, ITEMS):
            slot.szName = name
            slot.FmtValue.doubleValue = value
        keep.append(array)
        count_ref._obj.value = len(ITEMS)
        return ERROR_SUCCESS

    def close(query):
        return ERROR_SUCCESS

    return SimpleNamespace(
        PdhOpenQueryW=open_query,
        PdhValidatePathW=validate,
        PdhAddEnglishCounterW=add_counter,
        PdhCollectQueryData=collect,
        PdhGetFormattedCounterArrayW=read_array,
        PdhCloseQuery=close,
    )


def test_probe_and_decode_items() -> None:
    provider = PdhCounterProvider(_fake_pdh())
    query = provider.open_query("localhost")
    counter = provider.add_counter(query, r"\\localhost\LogicalDisk(*)\Free Megabytes")
    provider.collect(query)

    probe = provider.read_formatted_array(counter, 0)
    assert probe.status is ReadStatus.MORE_DATA
    assert probe.required == NEEDED

    result = provider.read_formatted_array(counter, probe.required)
    assert result.status is ReadStatus.OK
    assert [(i.instance, i.value) for i in result.items] == ITEMS
    provider.close_query(query)


def test_invalid_data_maps_to_no_data() -> None:
    provider = PdhCounterProvider(_fake_pdh(PDH_CSTATUS_INVALID_DATA))
    result = provider.read_formatted_array(object(), 0)
    assert result.status is ReadStatus.NO_DATA
    assert result.code == PDH_CSTATUS_INVALID_DATA


def test_unknown_read_status_is_an_error() -> None:
    provider = PdhCounterProvider(_fake_pdh(0xC0000BBC))
    assert provider.read_formatted_array(object(), 0).status is ReadStatus.ERROR


def test_validate_failure_raises_pdh_error() -> None:
    provider = PdhCounterProvider(_fake_pdh())
    with pytest.raises(PdhError) as info:
        provider.validate_path(r"\\h\Bad\Counter")
    assert info.value.code is ErrorCode.BAD_PATH


@pytest.mark.skipif(sys.platform == "win32", reason="pdh.dll is present on Windows")
def test_unavailable_off_windows() -> None:
    with pytest.raises(CollectorError) as info:
        PdhCounterProvider()
    assert info.value.code is ErrorCode.UNAVAILABLE
