"""Tests for settings and workflow configuration validation."""

import pytest

from core.config import Settings, WorkflowConfig, require_generation_key
from core.llm_config import LLMConfig
from utils.exceptions import ConfigurationError


def _settings(**overrides):
    values = dict(
        github_token="ghp_test",
        github_owner="acme",
        github_repo="shop",
        openai_api_key="sk-test",
    )
    values.update(overrides)
    return Settings(_env_file=None, **values)


class TestWorkflowConfig:

    def test_builds_from_complete_settings(self):
        config = WorkflowConfig.from_settings(_settings(workspace_root="/srv/ws"))
        assert config.workspace_root == "/srv/ws"
        assert config.github_owner == "acme"
        assert config.openai_api_key == "sk-test"

    def test_workspace_root_defaults(self, monkeypatch):
        monkeypatch.delenv("WORKSPACE_ROOT", raising=False)
        config = WorkflowConfig.from_settings(_settings())
        assert config.workspace_root == "/tmp/workspace"

    def test_reports_every_missing_variable(self):
        with pytest.raises(ConfigurationError) as exc_info:
            WorkflowConfig.from_settings(_settings(github_token=None, github_repo=None, openai_api_key=None))

        assert exc_info.value.details == {"missing": ["GITHUB_TOKEN", "GITHUB_REPO", "OPENAI_API_KEY"]}
        assert "GITHUB_TOKEN, GITHUB_REPO, OPENAI_API_KEY" in exc_info.value.message

    def test_blank_values_count_as_missing(self):
        with pytest.raises(ConfigurationError) as exc_info:
            WorkflowConfig.from_settings(_settings(github_owner="   "))
        assert exc_info.value.details == {"missing": ["GITHUB_OWNER"]}

    def test_is_immutable(self):
        config = WorkflowConfig.from_settings(_settings())
        with pytest.raises(Exception):
            config.github_repo = "other"


class TestGenerationKey:

    def test_returns_key(self):
        assert require_generation_key(_settings()) == "sk-test"

    def test_missing_key_raises(self):
        with pytest.raises(ConfigurationError, match="OPENAI_API_KEY"):
            require_generation_key(_settings(openai_api_key=""))


class TestLLMConfig:

    def test_story_generation_task_settings(self):
        task = LLMConfig().get("story_test_generation")
        assert task.model == "gpt-4-turbo"
        assert task.temperature == 0.3
        assert task.max_tokens == 2000
        assert task.timeout == 180

    def test_unknown_task_uses_defaults(self, tmp_path):
        path = tmp_path / "llm.yml"
        path.write_text("defaults:\n  model: small-model\n", encoding="utf-8")
        task = LLMConfig(str(path)).get("anything")
        assert task.model == "small-model"
        assert task.max_tokens == 2000

    def test_missing_file_uses_builtin_defaults(self, tmp_path):
        config = LLMConfig(str(tmp_path / "absent.yml"))
        assert config.list_tasks() == []
        assert config.get("x").model == "gpt-4-turbo"
