"""Property-based tests for the layer fold used by role expansion."""

from hypothesis import given, strategies as st

from stemcell_core.metadata import DEFAULT_OPTIONS, merge_layers, resolve_backing_store, substitute_availability_zone

keys = st.sampled_from(["backing_store", "region", "image_id", "count", "option"])
values = st.one_of(st.none(), st.integers(), st.text(max_size=8))
layers = st.lists(st.dictionaries(keys, values, max_size=5), max_size=6)


class TestMergeLayersProperties:
    @given(layers=layers)
    def test_result_keys_are_union_of_layer_keys(self, layers):
        merged = merge_layers(layers)
        expected = set()
        for layer in layers:
            expected |= set(layer)
        assert set(merged) == expected

    @given(layers=layers)
    def test_last_layer_defining_a_key_wins(self, layers):
        merged = merge_layers(layers)
        for key, value in merged.items():
            last = [layer[key] for layer in layers if key in layer][-1]
            assert value == last

    @given(layers=layers)
    def test_inputs_are_not_mutated(self, layers):
        snapshot = [dict(layer) for layer in layers]
        merge_layers(layers)
        assert layers == snapshot


class TestResolveBackingStoreProperties:
    @given(sources=st.lists(st.dictionaries(st.just("backing_store"), values), max_size=4))
    def test_first_non_null_wins(self, sources):
        resolved = resolve_backing_store(*sources)
        candidates = [s["backing_store"] for s in sources if s.get("backing_store") is not None]
        if candidates:
            assert resolved == candidates[0]
        else:
            assert resolved == DEFAULT_OPTIONS["backing_store"]


class TestAvailabilityZoneProperties:
    @given(zone=st.text(min_size=1, max_size=10))
    def test_explicit_zone_never_replaced(self, zone):
        metadata = {"region": "us-east-1", "availability_zone": zone}
        result = substitute_availability_zone(metadata, {"us-east-1": ["us-east-1a"]})
        assert result["availability_zone"] == zone

    @given(zones=st.lists(st.text(min_size=1, max_size=10), min_size=1, max_size=5))
    def test_first_configured_zone_is_used(self, zones):
        result = substitute_availability_zone({"region": "r"}, {"r": zones})
        assert result["availability_zone"] == zones[0]
