"""
Tests for per-domain policy resolution.
"""

import logging
import re

import pytest

from product_crawler.policies.base import DEFAULT_CONFIG, DomainConfig, merge_config, validate_override
from product_crawler.policies.registry import PolicyRegistry
from product_crawler.policies.sites import DOMAIN_OVERRIDES, DOMAINS


class TestMergeConfig:

    def test_empty_override_returns_base(self):
        assert merge_config(DEFAULT_CONFIG, {}) is DEFAULT_CONFIG
        assert merge_config(DEFAULT_CONFIG, None) is DEFAULT_CONFIG

    def test_scalar_override(self):
        merged = merge_config(DEFAULT_CONFIG, {"max_depth": 3})
        assert merged.max_depth == 3
        assert merged.concurrency_limit == DEFAULT_CONFIG.concurrency_limit

    def test_lists_are_replaced_not_merged(self):
        merged = merge_config(DEFAULT_CONFIG, {"product_patterns": [r"/dp/"], "block_resources": ["image"]})
        assert [p.pattern for p in merged.product_patterns] == ["/dp/"]
        assert merged.block_resources == ("image",)

    def test_bare_string_block_resources(self):
        merged = merge_config(DEFAULT_CONFIG, {"block_resources": "image"})
        assert merged.block_resources == ("image",)

    def test_string_patterns_are_compiled(self):
        merged = merge_config(DEFAULT_CONFIG, {"exclude_url_patterns": ["/apps/buy/"]})
        assert all(isinstance(p, re.Pattern) for p in merged.exclude_url_patterns)
        assert merged.is_excluded("https://www.westside.com/apps/buy/now")

    def test_unknown_field_rejected(self):
        with pytest.raises(ValueError, match="retry_attempts"):
            merge_config(DEFAULT_CONFIG, {"retry_attempts": 3})

    def test_base_is_not_mutated(self):
        merge_config(DEFAULT_CONFIG, {"max_depth": 1, "product_patterns": []})
        assert DEFAULT_CONFIG.max_depth == 20
        assert len(DEFAULT_CONFIG.product_patterns) == 6

    def test_validate_override(self):
        validate_override({"max_depth": 1})
        with pytest.raises(ValueError):
            validate_override({"concurrency_limit": 0})
        with pytest.raises(ValueError):
            validate_override({"max_depth": 0})


class TestDefaults:

    def test_default_product_patterns(self):
        cfg = DomainConfig()
        assert cfg.is_product_url("https://shop.test/products/blue-shirt")
        assert cfg.is_product_url("https://shop.test/men/p-mp000123")
        assert not cfg.is_product_url("https://shop.test/men/shirts")

    def test_to_dict_round_trips_through_merge(self):
        data = DEFAULT_CONFIG.to_dict()
        assert data["product_patterns"][1] == "/p/"
        assert merge_config(DomainConfig(max_depth=2), data) == DEFAULT_CONFIG


class TestRegistry:

    def test_builtin_overrides(self):
        registry = PolicyRegistry()
        tata = registry.resolve("https://www.tatacliq.com/")
        assert tata.concurrency_limit == 50
        assert tata.headful_fallback is True
        assert tata.max_depth == DEFAULT_CONFIG.max_depth

        westside = registry.resolve("https://www.westside.com/")
        assert westside.max_depth == 10
        assert [p.pattern for p in westside.exclude_url_patterns] == ["/apps/buy/"]

    def test_builtin_table_covers_builtin_domains(self):
        registry = PolicyRegistry()
        for domain in DOMAINS:
            assert registry.resolve(domain) != DEFAULT_CONFIG
        assert len(DOMAIN_OVERRIDES) == len(DOMAINS)

    def test_unknown_host_gets_default(self):
        assert PolicyRegistry().resolve("https://shop.test/") == DEFAULT_CONFIG

    def test_malformed_domain_falls_back_to_default(self, caplog):
        registry = PolicyRegistry(overrides={"shop.test": {"max_depth": 2}})
        with caplog.at_level(logging.ERROR):
            assert registry.resolve("shop.test") == DEFAULT_CONFIG
        assert "Invalid domain URL" in caplog.text

    def test_custom_default_sits_below_overrides(self):
        registry = PolicyRegistry(
            default=merge_config(DEFAULT_CONFIG, {"max_depth": 4, "headful_fallback": True}),
            overrides={"shop.test": {"max_depth": 2}},
        )
        cfg = registry.resolve("https://shop.test/")
        assert cfg.max_depth == 2
        assert cfg.headful_fallback is True
        assert registry.resolve("https://other.test/").max_depth == 4

    def test_register_validates_fields(self):
        registry = PolicyRegistry(overrides={})
        with pytest.raises(ValueError):
            registry.register("shop.test", {"maxDepth": 3})
        registry.register("Shop.Test", {"max_depth": 3})
        assert registry.resolve("https://shop.test/").max_depth == 3
