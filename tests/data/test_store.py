"""Tests for the fixture response store."""

import json
import logging
import random

import pytest

from mockstage.config import TestScenario as Scenario
from mockstage.data import (
    CacheStats,
    FixtureError,
    FixtureValidationError,
    ResponseStore,
    ScenarioNotFoundError,
)
from mockstage.models import MockResponse, ResponseType


def success_document(variant):
    """Wrap a single variant into a fixture document."""
    return {"scenarios": {"success": [variant]}}


class TestGetResponse:
    """Tests for cached scenario lookup."""

    def test_returns_first_variant(self, store, analyzer_fixture):
        """Test the first success variant is served."""
        response = store.get_response(ResponseType.ANALYZER, Scenario.SUCCESS)

        expected = analyzer_fixture["scenarios"]["success"][0]
        assert isinstance(response, MockResponse)
        assert response.status_code == 200
        assert response.data == expected["data"]

    def test_accepts_plain_strings(self, store):
        """Test type and scenario can be given as strings."""
        response = store.get_response("frankenstein", "rate_limit")

        assert response.is_error
        assert response.status_code == 429
        assert response.data["error"] == "RATE_LIMIT"

    def test_error_variant_delay(self, store):
        """Test per-variant delays are carried through."""
        response = store.get_response(ResponseType.ANALYZER, Scenario.TIMEOUT)

        assert response.status_code == 408
        assert response.delay == 30000

    def test_repeated_calls_hit_cache(self, store):
        """Test ten identical calls give one miss and nine hits."""
        for _ in range(10):
            store.get_response(ResponseType.ANALYZER, Scenario.SUCCESS)

        stats = store.get_cache_stats()
        assert stats.misses == 1
        assert stats.hits == 9
        assert stats.hit_rate == 90.0
        assert stats.responses_cached == 1
        assert stats.data_files_cached == 1

    def test_returns_independent_copies(self, store):
        """Test mutating a returned response does not leak into the cache."""
        first = store.get_response(ResponseType.FRANKENSTEIN)
        first.data["idea_title"] = "Mutated"
        first.data["metrics"]["wow_factor"] = 0

        second = store.get_response(ResponseType.FRANKENSTEIN)
        assert second.data["idea_title"] != "Mutated"
        assert second.data["metrics"]["wow_factor"] != 0

    def test_deterministic_across_stores(self, clock):
        """Test two stores over the same data serve the same first variant."""
        first = ResponseStore(clock=clock).get_response(ResponseType.HACKATHON)
        second = ResponseStore(clock=clock).get_response(ResponseType.HACKATHON)

        assert first == second

    def test_missing_scenario_lists_available(self, data_dir, fixture_writer, analyzer_fixture):
        """Test a missing scenario names the ones that exist."""
        document = {"scenarios": {"success": analyzer_fixture["scenarios"]["success"], "timeout": []}}
        fixture_writer(data_dir, "analyzer-mocks.json", document)
        store = ResponseStore(data_dir, validate_on_load=False)

        with pytest.raises(ScenarioNotFoundError) as exc_info:
            store.get_response(ResponseType.ANALYZER, Scenario.TIMEOUT)

        error = exc_info.value
        assert error.scenario == "timeout"
        assert error.available == ["success"]
        assert "Available scenarios: success" in str(error)
        assert error.response_type is ResponseType.ANALYZER

    def test_unknown_scenario_name(self, store):
        """Test a scenario absent from the file raises."""
        with pytest.raises(ScenarioNotFoundError, match="haunted"):
            store.get_response(ResponseType.HACKATHON, "haunted")

    def test_missing_file(self, tmp_path):
        """Test a missing fixture file raises FixtureError."""
        store = ResponseStore(tmp_path)

        with pytest.raises(FixtureError, match="not found") as exc_info:
            store.get_response(ResponseType.ANALYZER)
        assert exc_info.value.path == tmp_path / "analyzer-mocks.json"

    def test_malformed_json(self, data_dir):
        """Test malformed JSON raises FixtureError."""
        (data_dir / "hackathon-mocks.json").write_text("{not json", encoding="utf-8")
        store = ResponseStore(data_dir)

        with pytest.raises(FixtureError, match="Malformed"):
            store.get_response(ResponseType.HACKATHON)

    def test_missing_scenarios_mapping(self, data_dir, fixture_writer):
        """Test a document without scenarios raises FixtureError."""
        fixture_writer(data_dir, "hackathon-mocks.json", {"variants": []})
        store = ResponseStore(data_dir)

        with pytest.raises(FixtureError, match="scenarios"):
            store.get_response(ResponseType.HACKATHON)

    def test_malformed_variant(self, data_dir, fixture_writer):
        """Test a variant without a data object raises FixtureError."""
        fixture_writer(data_dir, "hackathon-mocks.json", success_document({"statusCode": 200}))
        store = ResponseStore(data_dir, validate_on_load=False)

        with pytest.raises(FixtureError, match="Malformed variant"):
            store.get_response(ResponseType.HACKATHON)

    def test_negative_ttl_rejected(self):
        """Test the TTL must be non-negative."""
        with pytest.raises(ValueError):
            ResponseStore(cache_ttl=-1)


class TestCacheExpiry:
    """Tests for TTL-based cache expiry."""

    def test_entry_expires_after_ttl(self, clock):
        """Test hits within the TTL and a miss after it."""
        store = ResponseStore(cache_ttl=0.1, clock=clock)

        store.get_response(ResponseType.ANALYZER)
        clock.advance(0.05)
        store.get_response(ResponseType.ANALYZER)
        assert store.get_cache_stats().hits == 1

        clock.advance(0.1)
        store.get_response(ResponseType.ANALYZER)
        stats = store.get_cache_stats()
        assert stats.hits == 1
        assert stats.misses == 2

    def test_invalidate_expired(self, clock):
        """Test expired entries are removed and counted."""
        store = ResponseStore(cache_ttl=0.1, clock=clock)
        store.get_response(ResponseType.ANALYZER)
        clock.advance(0.05)
        store.get_response(ResponseType.FRANKENSTEIN)

        clock.advance(0.06)
        assert store.invalidate_expired_cache() == 1
        assert store.get_cache_stats().responses_cached == 1

        clock.advance(0.1)
        assert store.invalidate_expired_cache() == 1
        assert store.get_cache_stats().responses_cached == 0

    def test_zero_ttl_never_expires(self, store, clock):
        """Test TTL 0 keeps entries forever."""
        store.get_response(ResponseType.ANALYZER)
        clock.advance(10_000)

        assert store.invalidate_expired_cache() == 0
        store.get_response(ResponseType.ANALYZER)
        assert store.get_cache_stats().hits == 1

    def test_clear_cache(self, store):
        """Test clear_cache drops entries, data and counters."""
        store.get_response(ResponseType.ANALYZER)
        store.get_response(ResponseType.ANALYZER)

        store.clear_cache()

        assert store.get_cache_stats() == CacheStats()

    def test_reset_stats_keeps_entries(self, store):
        """Test resetting stats leaves the cache populated."""
        store.get_response(ResponseType.ANALYZER)
        store.reset_cache_stats()

        stats = store.get_cache_stats()
        assert (stats.hits, stats.misses) == (0, 0)
        assert stats.hit_rate == 0.0
        assert stats.responses_cached == 1

    def test_stats_to_dict(self, store):
        """Test stats serialize with all counters."""
        store.get_response(ResponseType.ANALYZER)
        store.get_response(ResponseType.ANALYZER)
        store.get_response(ResponseType.ANALYZER)

        assert store.get_cache_stats().to_dict() == {
            "hits": 2,
            "misses": 1,
            "hit_rate": 66.67,
            "responses_cached": 1,
            "data_files_cached": 1,
        }


class TestRandomVariant:
    """Tests for random variant selection."""

    def test_does_not_touch_counters(self, store):
        """Test random picks bypass the cache statistics."""
        for _ in range(5):
            store.get_random_variant(ResponseType.ANALYZER)

        stats = store.get_cache_stats()
        assert (stats.hits, stats.misses) == (0, 0)
        assert stats.responses_cached == 0

    def test_covers_all_variants(self, analyzer_fixture):
        """Test every variant can be picked."""
        store = ResponseStore(rng=random.Random(7))
        expected = {v["data"]["finalScore"] for v in analyzer_fixture["scenarios"]["success"]}

        seen = {store.get_random_variant(ResponseType.ANALYZER).data["finalScore"] for _ in range(50)}
        assert seen == expected

    def test_seeded_rng_is_repeatable(self):
        """Test equal seeds give equal sequences."""
        first = ResponseStore(rng=random.Random(3))
        second = ResponseStore(rng=random.Random(3))

        picks_a = [first.get_random_variant("frankenstein").data["idea_title"] for _ in range(10)]
        picks_b = [second.get_random_variant("frankenstein").data["idea_title"] for _ in range(10)]
        assert picks_a == picks_b

    def test_missing_scenario(self, store):
        """Test random lookup of a missing scenario raises."""
        with pytest.raises(ScenarioNotFoundError):
            store.get_random_variant(ResponseType.ANALYZER, "haunted")


class TestAvailableScenarios:
    """Tests for scenario discovery."""

    def test_bundled_scenarios(self, store):
        """Test the bundled fixtures define all six scenarios."""
        for response_type in ResponseType:
            assert sorted(store.get_available_scenarios(response_type)) == sorted(
                s.value for s in Scenario
            )

    def test_empty_scenarios_hidden(self, data_dir, fixture_writer, frankenstein_success):
        """Test scenarios without variants are not listed."""
        document = {"scenarios": {"success": [frankenstein_success], "timeout": []}}
        fixture_writer(data_dir, "frankenstein-mocks.json", document)
        store = ResponseStore(data_dir, validate_on_load=False)

        assert store.get_available_scenarios(ResponseType.FRANKENSTEIN) == ["success"]


class TestLoadValidation:
    """Tests for validation on first load."""

    @pytest.fixture
    def broken_dir(self, data_dir, fixture_writer, frankenstein_success):
        """Fixture directory whose frankenstein success variant is invalid."""
        frankenstein_success["data"]["metrics"]["wow_factor"] = 150
        del frankenstein_success["data"]["idea_title"]
        fixture_writer(data_dir, "frankenstein-mocks.json", success_document(frankenstein_success))
        return data_dir

    def test_lenient_mode_warns(self, broken_dir, caplog):
        """Test invalid variants are logged but still served."""
        store = ResponseStore(broken_dir, validate_on_load=True)

        with caplog.at_level(logging.WARNING, logger="mockstage.data.store"):
            response = store.get_response(ResponseType.FRANKENSTEIN)

        assert response.data["metrics"]["wow_factor"] == 150
        assert "[frankenstein/success/variant-1]" in caplog.text
        assert "idea_title" in caplog.text

    def test_strict_mode_raises(self, broken_dir):
        """Test strict mode raises with every itemized error."""
        store = ResponseStore(broken_dir, strict=True, validate_on_load=True)

        with pytest.raises(FixtureValidationError) as exc_info:
            store.get_response(ResponseType.FRANKENSTEIN)

        errors = exc_info.value.errors
        assert len(errors) == 2
        assert all(e.startswith("[frankenstein/success/variant-1]") for e in errors)

    def test_validation_disabled(self, broken_dir, caplog):
        """Test no validation runs when disabled."""
        store = ResponseStore(broken_dir, strict=True, validate_on_load=False)

        with caplog.at_level(logging.WARNING):
            store.get_response(ResponseType.FRANKENSTEIN)
        assert caplog.text == ""

    def test_production_skips_validation_by_default(self, broken_dir, monkeypatch):
        """Test production defaults validate_on_load to False."""
        monkeypatch.setenv("MOCKSTAGE_ENV", "production")
        store = ResponseStore(broken_dir, strict=True)

        assert store.validate_on_load is False
        store.get_response(ResponseType.FRANKENSTEIN)

    def test_bundled_fixtures_are_valid(self, store):
        """Test every bundled variant passes validation."""
        for response_type in ResponseType:
            results = store.validate_all_responses(response_type)
            for scenario, scenario_results in results.items():
                for result in scenario_results:
                    assert result.valid, f"{response_type.value}/{scenario}: {result.errors}"


class TestCustomTestData:
    """Tests for loading custom fixture files."""

    def test_replaces_type_data(self, store, tmp_path, fixture_writer, frankenstein_success):
        """Test a custom file replaces one type and invalidates only its entries."""
        store.get_response(ResponseType.FRANKENSTEIN)
        store.get_response(ResponseType.ANALYZER)

        frankenstein_success["data"]["idea_title"] = "Custom Mashup"
        path = fixture_writer(
            tmp_path, "custom-frankenstein-mocks.json", success_document(frankenstein_success)
        )

        assert store.load_custom_test_data(path) is ResponseType.FRANKENSTEIN
        assert store.get_cache_stats().responses_cached == 1

        response = store.get_response(ResponseType.FRANKENSTEIN)
        assert response.data["idea_title"] == "Custom Mashup"

        store.get_response(ResponseType.ANALYZER)
        stats = store.get_cache_stats()
        assert stats.hits == 1
        assert stats.misses == 3

    def test_yaml_custom_file(self, store, tmp_path, frankenstein_success):
        """Test YAML custom files are accepted."""
        import yaml

        frankenstein_success["data"]["idea_title"] = "From YAML"
        path = tmp_path / "frankenstein-overrides.yaml"
        path.write_text(yaml.safe_dump(success_document(frankenstein_success)), encoding="utf-8")

        store.load_custom_test_data(path)
        assert store.get_response(ResponseType.FRANKENSTEIN).data["idea_title"] == "From YAML"

    def test_bundled_test_fixture(self, store, fixtures_dir):
        """Test the custom analyzer fixture shipped with the tests."""
        store.load_custom_test_data(fixtures_dir / "custom-analyzer-mocks.json")

        response = store.get_response(ResponseType.ANALYZER)
        assert response.data["finalScore"] == 93

    @pytest.mark.parametrize(
        "name",
        ["custom-mocks.json", "analyzer-vs-hackathon.json"],
    )
    def test_ambiguous_filename(self, store, tmp_path, name):
        """Test filenames naming zero or several types are rejected."""
        path = tmp_path / name
        path.write_text(json.dumps({"scenarios": {}}), encoding="utf-8")

        with pytest.raises(FixtureError, match="Cannot determine response type"):
            store.load_custom_test_data(path)

    def test_missing_custom_file(self, store, tmp_path):
        """Test a missing custom file raises FixtureError."""
        with pytest.raises(FixtureError, match="not found"):
            store.load_custom_test_data(tmp_path / "hackathon-custom.json")

    def test_strict_custom_file(self, clock, tmp_path, fixture_writer, frankenstein_success):
        """Test strict mode rejects an invalid custom file and keeps the old data."""
        store = ResponseStore(strict=True, validate_on_load=True, clock=clock)
        original = store.get_response(ResponseType.FRANKENSTEIN)

        frankenstein_success["data"]["language"] = "fr"
        path = fixture_writer(
            tmp_path, "frankenstein-bad.json", success_document(frankenstein_success)
        )
        with pytest.raises(FixtureValidationError):
            store.load_custom_test_data(path)

        assert store.get_response(ResponseType.FRANKENSTEIN) == original


class TestCustomizeDelegation:
    """Tests for customize_mock_response."""

    def test_delegates_to_customizer(self, store):
        """Test the store forwards to its customizer."""
        response = store.get_response(ResponseType.FRANKENSTEIN)

        customized = store.customize_mock_response(
            response, ResponseType.FRANKENSTEIN, locale="es"
        )

        assert customized.data["language"] == "es"
        assert response.data["language"] == "en"
