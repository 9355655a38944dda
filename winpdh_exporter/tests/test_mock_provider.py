"""Unit tests for the scripted mock counter provider."""

from __future__ import annotations

import pytest

from winpdh_exporter.base.errors import ErrorCode, PdhError
from winpdh_exporter.base.interfaces import CounterProvider
from winpdh_exporter.base.models import ReadStatus
from winpdh_exporter.base.pdh_status import PDH_CSTATUS_BAD_COUNTERNAME, PDH_CSTATUS_NO_OBJECT
from winpdh_exporter.mock import MockCounterProvider, load_fixture_catalog
from winpdh_exporter.mock.client import required_size

CPU = r"\Processor(*)\% Processor Time"


def test_satisfies_provider_contract() -> None:
    assert isinstance(MockCounterProvider(), CounterProvider)


def test_probe_then_sized_read() -> None:
    provider = MockCounterProvider({CPU: {"_Total": 5.0, "0": 4.0}})
    query = provider.open_query("localhost")
    counter = provider.add_counter(query, r"\\localhost" + CPU)
    provider.collect(query)

    probe = provider.read_formatted_array(counter, 0)
    assert probe.status is ReadStatus.MORE_DATA
    assert probe.required == required_size(["_Total", "0"])

    result = provider.read_formatted_array(counter, probe.required)
    assert result.status is ReadStatus.OK
    assert [(i.instance, i.value) for i in result.items] == [("_Total", 5.0), ("0", 4.0)]


def test_list_values_advance_per_collect() -> None:
    provider = MockCounterProvider({CPU: {"_Total": [1, 2]}})
    query = provider.open_query("h")
    counter = provider.add_counter(query, CPU)
    seen = []
    for _ in range(3):
        provider.collect(query)
        seen.append(provider.read_formatted_array(counter, 4096).items[0].value)
    assert seen == [1.0, 2.0, 1.0]


def test_scripted_failures() -> None:
    provider = MockCounterProvider({CPU: {"_Total": 1}})
    provider.reject_path(r"\Bad\Path")
    provider.missing_object(r"\Gone\Counter")
    query = provider.open_query("h")

    with pytest.raises(PdhError) as bad:
        provider.validate_path(r"\\h\Bad\Path")
    assert bad.value.status == PDH_CSTATUS_BAD_COUNTERNAME
    assert bad.value.code is ErrorCode.BAD_PATH

    with pytest.raises(PdhError) as gone:
        provider.add_counter(query, r"\\h\Gone\Counter")
    assert gone.value.status == PDH_CSTATUS_NO_OBJECT

    with pytest.raises(PdhError):
        provider.add_counter(query, r"\Never\Configured")


def test_queued_read_failures_apply_to_probes_only() -> None:
    provider = MockCounterProvider({CPU: {"_Total": 1}})
    provider.fail_reads(CPU, 1)
    query = provider.open_query("h")
    counter = provider.add_counter(query, CPU)
    assert provider.read_formatted_array(counter, 4096).status is ReadStatus.OK
    assert provider.read_formatted_array(counter, 0).status is ReadStatus.NO_DATA
    assert provider.read_formatted_array(counter, 0).status is ReadStatus.MORE_DATA


def test_closed_query_invalidates_counters() -> None:
    provider = MockCounterProvider({CPU: {"_Total": 1}})
    query = provider.open_query("h")
    counter = provider.add_counter(query, CPU)
    provider.close_query(query)
    assert provider.closed_queries == [query]
    assert provider.read_formatted_array(counter, 0).status is ReadStatus.ERROR
    with pytest.raises(PdhError):
        provider.collect(query)


def test_bundled_fixture_catalog() -> None:
    catalog = load_fixture_catalog()
    assert CPU in catalog["counters"]

    provider = MockCounterProvider.from_fixture()
    query = provider.open_query("localhost")
    provider.collect(query)
    counter = provider.add_counter(query, r"\\localhost\LogicalDisk(*)\Free Megabytes")
    items = provider.read_formatted_array(counter, 4096).items
    assert {i.instance for i in items} == {"C:", "D:", "HarddiskVolume1"}
    with pytest.raises(PdhError):
        provider.add_counter(query, r"\\localhost\MSSQL$SQLEXPRESS:Buffer Manager\Page life expectancy")
