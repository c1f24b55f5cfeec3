"""Tests for identifier sanitization and allocation."""

import pytest

from archforge.iac.sanitizer import (
    ARM_RULES,
    CLOUDFORMATION_RULES,
    COMPOSE_RULES,
    KUBERNETES_RULES,
    TERRAFORM_RULES,
    IdentifierAllocator,
    sanitize,
    shorten,
)


class TestSanitize:
    """Per-format identifier alphabets."""

    @pytest.mark.parametrize(
        "rules,expected",
        [
            (TERRAFORM_RULES, "web_api_v2"),
            (CLOUDFORMATION_RULES, "WebAPIv2"),
            (ARM_RULES, "webapiv2"),
            (KUBERNETES_RULES, "web-api-v2"),
            (COMPOSE_RULES, "web-api-v2"),
        ],
    )
    def test_free_form_name(self, rules, expected):
        assert sanitize("Web API (v2)", rules) == expected

    def test_separators_collapse_and_trim(self):
        assert sanitize("  --Main   DB--  ", TERRAFORM_RULES) == "main_db"
        assert sanitize("__Main__DB__", KUBERNETES_RULES) == "main-db"

    def test_leading_digit_is_prefixed(self):
        assert sanitize("3 Tier App", TERRAFORM_RULES) == "r_3_tier_app"
        assert sanitize("3 Tier App", KUBERNETES_RULES) == "app-3-tier-app"

    @pytest.mark.parametrize(
        "rules,fallback",
        [
            (TERRAFORM_RULES, "resource"),
            (CLOUDFORMATION_RULES, "Resource"),
            (KUBERNETES_RULES, "app"),
            (COMPOSE_RULES, "service"),
        ],
    )
    def test_empty_result_uses_fallback(self, rules, fallback):
        assert sanitize("!!!", rules) == fallback
        assert sanitize("", rules) == fallback
        assert sanitize(None, rules) == fallback

    def test_non_ascii_is_total(self):
        assert sanitize("Données ✓ 数据库", TERRAFORM_RULES) == "donn_es"
        assert sanitize("✓✓✓", ARM_RULES) == "resource"

    def test_kubernetes_names_are_truncated(self):
        result = sanitize("a" * 80, KUBERNETES_RULES)
        assert result == "a" * 50

    def test_truncation_does_not_leave_trailing_separator(self):
        name = "a" * 49 + " tail"
        assert sanitize(name, KUBERNETES_RULES) == "a" * 49

    def test_deterministic(self):
        name = "Payments Service #1"
        assert sanitize(name, TERRAFORM_RULES) == sanitize(name, TERRAFORM_RULES)


class TestShorten:
    def test_short_text_unchanged(self):
        assert shorten("assets", 17) == "assets"

    def test_keeps_tail(self):
        text = "verylongcomponentname2"
        result = shorten(text, 17)
        assert len(result) == 17
        assert result.endswith("name2")
        assert result.startswith("verylongcom")


class TestIdentifierAllocator:
    """Unique identifiers within one document."""

    def test_first_name_keeps_base(self):
        allocator = IdentifierAllocator(TERRAFORM_RULES)
        assert allocator.allocate("Web API") == "web_api"
        assert allocator.renames == []

    def test_colliding_names_get_stable_suffixes(self):
        allocator = IdentifierAllocator(TERRAFORM_RULES)
        assert allocator.allocate("web api") == "web_api"
        assert allocator.allocate("web-api") == "web_api_2"
        assert allocator.allocate("Web API!") == "web_api_3"
        assert allocator.renames == [
            ("web-api", "web_api", "web_api_2"),
            ("Web API!", "web_api", "web_api_3"),
        ]

    @pytest.mark.parametrize(
        "rules,second",
        [
            (KUBERNETES_RULES, "db-2"),
            (ARM_RULES, "db2"),
            (CLOUDFORMATION_RULES, "DB2"),
        ],
    )
    def test_suffix_separator_per_format(self, rules, second):
        allocator = IdentifierAllocator(rules)
        allocator.allocate("DB")
        assert allocator.allocate("DB!") == second

    def test_suffix_respects_max_length(self):
        allocator = IdentifierAllocator(KUBERNETES_RULES)
        first = allocator.allocate("a" * 60)
        second = allocator.allocate("a" * 70)
        assert first == "a" * 50
        assert second == "a" * 48 + "-2"
        assert len(second) <= KUBERNETES_RULES.max_length

    def test_candidates_in_preference_order(self):
        allocator = IdentifierAllocator(COMPOSE_RULES)
        candidates = allocator.candidates("api")
        assert [next(candidates) for _ in range(3)] == ["api", "api-2", "api-3"]
