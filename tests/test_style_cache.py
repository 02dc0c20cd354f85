"""Tests for the in-process style catalogue cache."""

from huluhulu_ai.cache.style_cache import DEFAULT_STYLES, StyleCache
from huluhulu_ai.models.style import Style

TTL = 1800


def test_get_respects_ttl_boundary(cache, clock):
    cache.set("photography", [Style(title="国风", prompt="p")])

    clock.advance(TTL - 0.001)
    assert [s.title for s in cache.get("photography")] == ["国风"]

    clock.advance(0.002)
    assert cache.get("photography") is None
    assert [s.title for s in cache.get_stale("photography")] == ["国风"]


def test_ttl_is_per_catalogue(cache, clock):
    cache.set("photography", [Style(title="a")])
    cache.set("compliment", [Style(title="b")])

    clock.advance(TTL + 1)
    assert cache.get("photography") is None
    assert cache.get("compliment") is not None


def test_missing_key_returns_none(cache):
    assert cache.get("photography") is None
    assert cache.get_stale("photography") is None


def test_upsert_one_is_idempotent(cache):
    cache.set("photography", [Style(title="T", prompt="")])

    cache.upsert_one("photography", Style(title="T", prompt="X"))
    cache.upsert_one("photography", Style(title="T", prompt="X"))

    styles = cache.get("photography")
    assert len(styles) == 1
    assert styles[0].prompt == "X"


def test_upsert_one_does_not_refresh_timestamp(cache, clock):
    cache.set("photography", [Style(title="T")])
    clock.advance(TTL - 10)

    cache.upsert_one("photography", Style(title="T", prompt="X"))
    cache.upsert_one("photography", Style(title="U", prompt="Y"))
    clock.advance(20)

    assert cache.get("photography") is None
    assert [s.title for s in cache.get_stale("photography")] == ["T", "U"]


def test_upsert_one_matches_decorated_title_and_keeps_stored_one(cache):
    cache.set("photography", [Style(title="🔥 国风", prompt="", source=["国风热搜"])])

    cache.upsert_one("photography", Style(title="国风", prompt="国风提示词"))

    styles = cache.get("photography")
    assert len(styles) == 1
    assert styles[0].title == "🔥 国风"
    assert styles[0].prompt == "国风提示词"
    assert styles[0].source == ["国风热搜"]


def test_upsert_one_into_missing_entry_is_lookup_only(cache):
    cache.upsert_one("compliment", Style(title="国风", prompt="p"))

    assert cache.get("compliment") is None
    assert cache.get_prompt_for("compliment", "国风") == "p"
    assert [s.title for s in cache.get_stale("compliment")] == ["国风"]


def test_fuzzy_lookup_both_ways(cache):
    cache.set("photography", [Style(title="国风", prompt="国风提示词")])

    assert cache.get_prompt_for("photography", "🔥 国风") == "国风提示词"
    assert cache.get_prompt_for("photography", "国风") == "国风提示词"
    assert cache.normalize_title("🔥 国风 ") == cache.normalize_title("国风")


def test_default_presets_take_precedence(cache):
    cache.set("photography", [Style(title="动漫风格", prompt="cached")])

    assert cache.get_prompt_for("photography", "动漫风格") == DEFAULT_STYLES["动漫风格"]
    assert cache.get_prompt_for("photography", "🔥 一键美化") == DEFAULT_STYLES["一键美化"]


def test_prompt_lookup_ignores_ttl_and_pending_prompts(cache, clock):
    cache.set("photography", [Style(title="国风", prompt="p"), Style(title="赛博朋克", prompt="")])
    clock.advance(TTL * 10)

    assert cache.get_prompt_for("photography", "国风") == "p"
    assert cache.get_prompt_for("photography", "赛博朋克") is None
    assert cache.get_prompt_for("photography", "不存在") is None


def test_readers_get_copies(cache):
    cache.set("photography", [Style(title="国风", prompt="p")])

    styles = cache.get("photography")
    styles[0].prompt = "mutated"
    styles.append(Style(title="extra"))

    assert [(s.title, s.prompt) for s in cache.get("photography")] == [("国风", "p")]


def test_custom_prefix():
    cache = StyleCache(decorative_prefix="⭐", default_styles={})
    cache.set("k", [Style(title="国风", prompt="p")])
    assert cache.get_prompt_for("k", "⭐国风") == "p"
    assert cache.get_prompt_for("k", "🔥 国风") is None
