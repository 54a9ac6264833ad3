"""Tests for InstanceInfo / InstanceIndex."""

import json
import uuid

import pytest

from instance_catalog.types import InstanceIndex, InstanceInfo

ID_A = uuid.UUID("6f1c3f0e-8a44-4a4e-9d37-2a3f2f5b0c11")
ID_B = uuid.UUID("0b7e0c7a-1f0d-4c55-8e0f-5d3a9d1f6a22")


class TestInstanceIndexJsonRoundtrip:
    @pytest.mark.parametrize(
        "instances",
        [
            [],
            [InstanceInfo(id=ID_A, name="Main", order_index=0)],
            [InstanceInfo(id=ID_A, name="Main", order_index=3), InstanceInfo(id=ID_B, name="Tav ünïcode", order_index=-1)],
        ],
    )
    def test_roundtrip(self, instances):
        index = InstanceIndex(instances=instances)
        assert InstanceIndex.from_json(index.to_json()) == index

    def test_wire_format(self):
        index = InstanceIndex(instances=[InstanceInfo(id=ID_A, name="Main", order_index=2)])
        assert json.loads(index.to_json()) == {
            "instances": [{"id": str(ID_A), "name": "Main", "order_index": 2}]
        }

    def test_pretty_printed(self):
        index = InstanceIndex(instances=[InstanceInfo(id=ID_A, name="Main")])
        assert "\n  " in index.to_json()

    def test_preserves_order(self):
        index = InstanceIndex(instances=[InstanceInfo(id=ID_B, name="b"), InstanceInfo(id=ID_A, name="a")])
        assert InstanceIndex.from_json(index.to_json()).ids() == [ID_B, ID_A]


class TestInstanceIndexFromDict:
    @pytest.mark.parametrize(
        "data",
        [
            [],
            {},
            {"instances": {}},
            {"instances": [{"id": "not-a-uuid", "name": "x", "order_index": 0}]},
            {"instances": [{"id": str(ID_A), "order_index": 0}]},
            {"instances": [{"id": str(ID_A), "name": "x", "order_index": "0"}]},
            {"instances": [{"id": str(ID_A), "name": 5, "order_index": 0}]},
            {"instances": ["oops"]},
            {"instances": [{"id": 123, "name": "x", "order_index": 0}]},
            {"instances": [{"id": ["a"], "name": "x", "order_index": 0}]},
            {"instances": [{"id": {"hex": "00"}, "name": "x", "order_index": 0}]},
        ],
    )
    def test_rejects_malformed(self, data):
        with pytest.raises((ValueError, KeyError, TypeError)):
            InstanceIndex.from_dict(data)


class TestInstanceIndexHelpers:
    def test_find(self):
        index = InstanceIndex(instances=[InstanceInfo(id=ID_A, name="a")])
        assert index.find(ID_A).name == "a"
        assert index.find(ID_B) is None

    def test_copy_is_independent(self):
        index = InstanceIndex(instances=[InstanceInfo(id=ID_A, name="a")])
        copied = index.copy()
        copied.instances[0].order_index = 9
        copied.instances.append(InstanceInfo(id=ID_B, name="b"))
        assert index.instances == [InstanceInfo(id=ID_A, name="a", order_index=0)]
