"""Tests for the layered LLM JSON repair."""

from huluhulu_ai.utils.json_repair import extract_outermost, safe_parse_json, strip_code_fence


def test_plain_json_parses_directly():
    assert safe_parse_json('{"items": ["国风"]}') == {"items": ["国风"]}


def test_code_fence_is_stripped():
    text = '```json\n{"titles": ["复古港风", "赛博朋克"]}\n```'
    assert safe_parse_json(text) == {"titles": ["复古港风", "赛博朋克"]}


def test_surrounding_prose_is_cut_to_outermost_object():
    text = '好的，以下是结果：{"items": [{"title": "国风"}]} 希望对你有帮助'
    assert safe_parse_json(text) == {"items": [{"title": "国风"}]}


def test_array_before_object_is_extracted_as_array():
    text = 'result: [{"title": "a"}, {"title": "b"}] done'
    assert safe_parse_json(text) == [{"title": "a"}, {"title": "b"}]


def test_trailing_commas_are_removed_last():
    text = '```\n{"items": ["a", "b",],}\n```'
    assert safe_parse_json(text) == {"items": ["a", "b"]}


def test_unrepairable_text_yields_none():
    assert safe_parse_json("模型今天不想输出 JSON") is None
    assert safe_parse_json('{"items": [') is None


def test_empty_input_yields_none():
    assert safe_parse_json("") is None
    assert safe_parse_json(None) is None


def test_helpers():
    assert strip_code_fence("```json\n[1]\n```") == "[1]"
    assert extract_outermost("no brackets here") is None
    assert extract_outermost("x {\"a\": [1]} y") == '{"a": [1]}'
