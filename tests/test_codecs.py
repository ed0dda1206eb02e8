from __future__ import annotations

import math

import pytest

from flatstore import codecs
from flatstore.codecs import JsonCodec, YamlCodec, available_formats, format_for_path, get_codec, register_codec
from flatstore.errors import DecodeError, EncodeError, UnsupportedFormat


SAMPLE = {
    "a": 1,
    "b": ["x", "y"],
    "nested": {"flag": True, "ratio": 0.5, "none": None, "items": [{"id": 1}, {"id": 2}]},
    "unicode": "café ☕",
}


@pytest.mark.parametrize("codec", [JsonCodec(), YamlCodec()], ids=["json", "yaml"])
def test_roundtrip_preserves_mapping(codec):
    assert codec.decode(codec.encode(SAMPLE)) == SAMPLE


@pytest.mark.parametrize("raw", [b"", b"   \n", b"{}"])
def test_json_empty_input_is_empty_mapping(raw):
    assert JsonCodec().decode(raw) == {}


@pytest.mark.parametrize("raw", [b"", b"\n", b"~\n", b"{}\n"])
def test_yaml_empty_input_is_empty_mapping(raw):
    assert YamlCodec().decode(raw) == {}


def test_json_output_is_tab_indented():
    assert JsonCodec().encode({"a": 1}) == b'{\n\t"a": 1\n}\n'


def test_json_indent_is_configurable():
    assert JsonCodec(indent=2).encode({"a": 1}) == b'{\n  "a": 1\n}\n'


def test_json_keys_sorted_by_default():
    out = JsonCodec().encode({"b": 1, "a": 2}).decode("utf-8")
    assert out.index('"a"') < out.index('"b"')


def test_yaml_output_is_block_style():
    assert YamlCodec().encode({"b": ["x", "y"], "a": 1}) == b"a: 1\nb:\n- x\n- y\n"


@pytest.mark.parametrize(
    "raw",
    [b"{not json", b'["a", "b"]', b"42", b"\xff\xfe{}", b'{"a": NaN}', b'{"a": [-Infinity]}'],
    ids=["malformed", "top-level-list", "scalar", "not-utf8", "nan", "infinity"],
)
def test_json_decode_errors(raw):
    with pytest.raises(DecodeError) as ei:
        JsonCodec().decode(raw, store_name="s.json")
    assert ei.value.store_name == "s.json"
    assert ei.value.fmt == "json"
    assert "s.json" in str(ei.value)


@pytest.mark.parametrize(
    "raw",
    [b"a: [1, 2", b"- a\n- b\n", b"1: one\n", b"a: 1\n---\nb: 2\n"],
    ids=["malformed", "top-level-list", "int-key", "multi-document"],
)
def test_yaml_decode_errors(raw):
    with pytest.raises(DecodeError):
        YamlCodec().decode(raw)


@pytest.mark.parametrize("value", [object(), {1, 2}, math.nan])
def test_json_encode_rejects_unrepresentable_values(value):
    with pytest.raises(EncodeError) as ei:
        JsonCodec().encode({"bad": value}, store_name="s.json")
    assert ei.value.fmt == "json"
    assert ei.value.__cause__ is not None


@pytest.mark.parametrize("value", [{1: "x"}, [{"ok": {None: 1}}], {"nested": {True: 1}}])
def test_json_encode_rejects_non_string_keys(value):
    with pytest.raises(EncodeError) as ei:
        JsonCodec().encode({"a": value})
    assert "not a string" in str(ei.value)


def test_json_encode_rejects_circular_structures():
    loop: list = []
    loop.append(loop)
    with pytest.raises(EncodeError):
        JsonCodec().encode({"loop": loop})


def test_yaml_encode_rejects_arbitrary_objects():
    with pytest.raises(EncodeError):
        YamlCodec().encode({"bad": object()})


def test_get_codec_is_case_insensitive_and_knows_yml():
    assert isinstance(get_codec("JSON"), JsonCodec)
    assert isinstance(get_codec(" yaml "), YamlCodec)
    assert isinstance(get_codec("yml"), YamlCodec)


def test_get_codec_passes_formatting_options():
    codec = get_codec("json", indent=4, sort_keys=False)
    assert codec.indent == 4
    assert codec.sort_keys is False


@pytest.mark.parametrize("fmt", ["toml", "", 3, None])
def test_get_codec_unknown_format(fmt):
    with pytest.raises(UnsupportedFormat) as ei:
        get_codec(fmt)
    assert "json" in ei.value.available


def test_register_codec_makes_format_available(monkeypatch):
    monkeypatch.setattr(codecs, "_REGISTRY", dict(codecs._REGISTRY))

    register_codec("Compact-JSON", lambda **opts: JsonCodec(indent=None, sort_keys=opts.get("sort_keys", True)))

    assert "compact-json" in available_formats()
    assert get_codec("compact-json").encode({"a": 1}) == b'{"a": 1}\n'


def test_format_for_path():
    assert format_for_path("data/store.yaml") == "yaml"
    assert format_for_path("store.YML") == "yaml"
    assert format_for_path("store.json") == "json"
    assert format_for_path("store") == "json"
