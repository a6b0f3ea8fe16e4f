"""Tests for Ollama provider provisioning."""

import copy

import pytest

from clawprep.provisioner import (
    ProvisionStatus,
    add_model,
    build_model_entry,
    build_provider_entry,
    provision_provider,
)

BASE_URL = "http://172.17.0.1:11434/v1"
API_KEY = "ollama-local"


def _provision(tree, model_id=None, context_window=32768):
    return provision_provider(
        tree,
        base_url=BASE_URL,
        api_key=API_KEY,
        model_id=model_id,
        context_window=context_window,
    )


class TestDecisionTable:
    """Tests for which inputs enable provisioning."""

    @pytest.mark.parametrize(
        ("base_url", "api_key", "status"),
        [
            (BASE_URL, None, ProvisionStatus.MISSING_API_KEY),
            (None, API_KEY, ProvisionStatus.MISSING_BASE_URL),
            (None, None, ProvisionStatus.NOT_CONFIGURED),
            ("", "", ProvisionStatus.NOT_CONFIGURED),
        ],
    )
    def test_incomplete_inputs_skip(self, base_url, api_key, status):
        """Without both URL and key nothing is written."""
        tree = {"gateway": {"mode": "local"}}
        result = provision_provider(tree, base_url, api_key, model_id="llama3")
        assert result.status is status
        assert not result.provisioned
        assert tree == {"gateway": {"mode": "local"}}

    def test_partial_keeps_stale_provider(self):
        """A provider from an earlier full run is left as it was."""
        tree = {}
        _provision(tree, model_id="llama3")
        before = copy.deepcopy(tree)
        result = provision_provider(tree, BASE_URL, None, model_id="other")
        assert result.status is ProvisionStatus.MISSING_API_KEY
        assert tree == before

    def test_both_present_provisions(self):
        """URL and key together register the provider."""
        tree = {}
        result = _provision(tree)
        assert result.status is ProvisionStatus.PROVISIONED
        assert result.provisioned
        assert result.provider == "ollama"
        assert tree == {
            "models": {
                "providers": {
                    "ollama": {
                        "baseUrl": BASE_URL,
                        "apiKey": API_KEY,
                        "api": "openai-completions",
                        "authHeader": False,
                    }
                }
            }
        }


class TestProviderEntry:
    """Tests for building the provider entry."""

    def test_required_fields_reasserted(self):
        """Hand edits to the required fields are undone."""
        existing = {
            "baseUrl": "http://old:11434/v1",
            "apiKey": "old",
            "api": "openai-responses",
            "authHeader": True,
        }
        entry = build_provider_entry(existing, BASE_URL, API_KEY)
        assert entry == {
            "baseUrl": BASE_URL,
            "apiKey": API_KEY,
            "api": "openai-completions",
            "authHeader": False,
        }

    def test_custom_fields_preserved(self):
        """Other keys on the existing entry are carried over in order."""
        existing = {
            "api": "openai-responses",
            "headers": {"X-Trace": "1"},
            "models": [{"id": "llama3"}],
        }
        entry = build_provider_entry(existing, BASE_URL, API_KEY)
        assert list(entry) == ["baseUrl", "apiKey", "api", "authHeader", "headers", "models"]
        assert entry["headers"] == {"X-Trace": "1"}
        assert entry["models"] == [{"id": "llama3"}]
        assert entry["api"] == "openai-completions"

    def test_non_mapping_existing_discarded(self):
        """An existing entry that is not a mapping is replaced."""
        entry = build_provider_entry("broken", BASE_URL, API_KEY)
        assert set(entry) == {"baseUrl", "apiKey", "api", "authHeader"}

    def test_provision_keeps_other_providers(self):
        """Sibling providers survive provisioning."""
        tree = {"models": {"providers": {"openai": {"apiKey": "sk"}}, "mode": "merge"}}
        _provision(tree)
        assert tree["models"]["providers"]["openai"] == {"apiKey": "sk"}
        assert tree["models"]["mode"] == "merge"
        assert list(tree["models"]["providers"]) == ["openai", "ollama"]


class TestModels:
    """Tests for model entries."""

    def test_model_entry(self):
        """A new model gets a display name, zero cost and derived max tokens."""
        assert build_model_entry("qwen2.5-coder:32b", 32768) == {
            "id": "qwen2.5-coder:32b",
            "name": "Ollama - qwen2.5-coder:32b",
            "reasoning": False,
            "input": ["text"],
            "cost": {"input": 0, "output": 0},
            "contextWindow": 32768,
            "maxTokens": 8192,
        }

    def test_small_context_window(self):
        """Max tokens is a quarter of a small window."""
        tree = {}
        _provision(tree, model_id="phi3", context_window=4096)
        (model,) = tree["models"]["providers"]["ollama"]["models"]
        assert model["contextWindow"] == 4096
        assert model["maxTokens"] == 1024

    def test_model_not_duplicated(self):
        """Provisioning twice lists the model once."""
        tree = {}
        first = _provision(tree, model_id="llama3")
        second = _provision(tree, model_id="llama3")
        ids = [m["id"] for m in tree["models"]["providers"]["ollama"]["models"]]
        assert ids == ["llama3"]
        assert first.model_added is True
        assert second.model_added is False

    def test_existing_models_untouched(self):
        """Existing entries are neither changed nor removed."""
        custom = {"id": "llama3", "name": "My Llama", "contextWindow": 8192}
        other = {"id": "mistral", "name": "Mistral"}
        entry = {"models": [custom, other]}
        assert add_model(entry, "llama3", 32768) is False
        assert entry["models"] == [custom, other]
        assert add_model(entry, "phi3", 32768) is True
        assert entry["models"][:2] == [custom, other]
        assert entry["models"][2]["id"] == "phi3"

    def test_non_list_models_reset(self):
        """A models value that is not a list is replaced by a fresh list."""
        entry = {"models": {"id": "llama3"}}
        assert add_model(entry, "llama3", 32768) is True
        assert [m["id"] for m in entry["models"]] == ["llama3"]


class TestDefaultModel:
    """Tests for the default model selector."""

    def test_sets_selector(self):
        """A requested model becomes the default."""
        tree = {}
        result = _provision(tree, model_id="qwen2.5-coder:32b")
        assert tree["agents"]["defaults"]["model"] == {"primary": "ollama/qwen2.5-coder:32b"}
        assert result.default_model == "ollama/qwen2.5-coder:32b"
        assert result.previous_model is None
        assert result.default_model_changed is True

    def test_env_model_wins(self):
        """A persisted default is replaced by the requested model."""
        tree = {"agents": {"defaults": {"model": {"primary": "ollama/modelA"}}}}
        result = _provision(tree, model_id="modelB")
        assert tree["agents"]["defaults"]["model"]["primary"] == "ollama/modelB"
        assert result.previous_model == "ollama/modelA"
        assert result.default_model_changed is True

    def test_same_model_unchanged(self):
        """A matching selector is left alone."""
        tree = {"agents": {"defaults": {"model": {"primary": "ollama/llama3"}}}}
        result = _provision(tree, model_id="llama3")
        assert result.default_model_changed is False
        assert result.previous_model == "ollama/llama3"

    def test_selector_siblings_kept(self):
        """Other selector keys survive a change of primary model."""
        tree = {"agents": {"defaults": {"model": {"primary": "openai/gpt", "fallbacks": ["x/y"]}}}}
        _provision(tree, model_id="llama3")
        assert tree["agents"]["defaults"]["model"] == {
            "primary": "ollama/llama3",
            "fallbacks": ["x/y"],
        }

    def test_string_selector_replaced(self):
        """A selector that is not a mapping is replaced."""
        tree = {"agents": {"defaults": {"model": "ollama/llama3"}}}
        result = _provision(tree, model_id="llama3")
        assert tree["agents"]["defaults"]["model"] == {"primary": "ollama/llama3"}
        assert result.previous_model is None

    def test_no_model_leaves_selector(self):
        """Without a model id the existing default is kept."""
        tree = {"agents": {"defaults": {"model": {"primary": "openai/gpt"}}}}
        result = _provision(tree)
        assert tree["agents"]["defaults"]["model"] == {"primary": "openai/gpt"}
        assert "models" not in tree["models"]["providers"]["ollama"]
        assert result.default_model is None
        assert result.model_added is False
