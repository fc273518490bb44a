from __future__ import annotations

import pytest

from pyjagalari._constants import OFFLINE_COLOR, ONLINE_COLOR
from pyjagalari.engine.classify import (
    DeviceCategory,
    classify,
    is_online,
    marker_icon,
    marker_label,
    summarize_fleet,
)
from pyjagalari.models.device import Device


@pytest.mark.parametrize(
    ("name", "expected"),
    [
        ("Ambulance 1", DeviceCategory.AMBULANCE),
        ("AMBULANCE-07", DeviceCategory.AMBULANCE),
        ("Motor Mobile Unit", DeviceCategory.MOTORBIKE),
        ("motor 3", DeviceCategory.MOTORBIKE),
        ("Truck 9", DeviceCategory.GENERIC),
        ("", DeviceCategory.GENERIC),
    ],
)
def test_classify_by_name(name: str, expected: DeviceCategory) -> None:
    assert classify(name) == expected


def test_ambulance_rule_wins_over_motor() -> None:
    assert classify("Ambulance Motor 1") == DeviceCategory.AMBULANCE


def test_online_is_literal_equality() -> None:
    assert is_online("online")
    assert not is_online("Online")
    assert not is_online("unknown")
    assert not is_online("offline")


def test_marker_icon_color_follows_online_flag() -> None:
    assert marker_icon(DeviceCategory.AMBULANCE, True).color == ONLINE_COLOR
    assert marker_icon(DeviceCategory.AMBULANCE, False).color == OFFLINE_COLOR
    assert marker_icon(DeviceCategory.AMBULANCE, True).glyph != marker_icon(DeviceCategory.GENERIC, True).glyph


def test_marker_label_truncates_long_names() -> None:
    assert marker_label("Ambulance 1") == "Ambulance 1"
    assert marker_label("Ambulance Central 12") == "Ambulance Ce..."


def test_summarize_fleet_counts() -> None:
    devices = [
        Device(id=1, name="Ambulance 1", status="online"),
        Device(id=2, name="Motor 2", status="offline"),
        Device(id=3, name="Truck", status="unknown"),
        Device(id=4, name="Ambulance Motor", status="online"),
    ]

    summary = summarize_fleet(devices)

    assert summary.total == 4
    assert summary.ambulance == 2
    # Keyword tallies overlap: "Ambulance Motor" counts under both.
    assert summary.motorbike == 2
    assert summary.online == 2
    # "unknown" is neither online nor offline.
    assert summary.offline == 1


def test_summary_counts_keywords_independently_of_marker_category() -> None:
    device = Device(id=1, name="Ambulance Motor 1", status="online")

    summary = summarize_fleet([device])

    assert classify(device.name) == DeviceCategory.AMBULANCE
    assert (summary.ambulance, summary.motorbike) == (1, 1)
