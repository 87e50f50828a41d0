"""
Tests for configuration management.
"""

from pr_reviewer.config import ConfigManager, DEFAULT_REPOSITORY


def test_config_manager_defaults():
    """Test default values with an empty environment."""
    config_manager = ConfigManager(load_env=False, environ={})
    config = config_manager.get_config()

    assert config.llm.family == "gemini"
    assert config.llm.model_name == "gemini-1.5-flash"
    assert config.llm.temperature == 0.0
    assert config.github.api_url == "https://api.github.com"
    assert config.default_repository == DEFAULT_REPOSITORY
    assert config.default_owner_and_repo == ("shawnd", "pr-reviewer")

    # Should have errors since no API keys are set
    errors = config_manager.validate_config()
    assert any("LLM_API_KEY" in error for error in errors)


def test_environment_overrides():
    environ = {
        "GITHUB_TOKEN": "ghp_x",
        "GITHUB_API_URL": "https://github.example.com/api/v3",
        "GITHUB_REPOSITORY": "acme/widgets",
        "LLM_PROVIDER": "OpenAI",
        "LLM_MODEL": "gpt-4o",
        "LLM_API_KEY": "sk-test",
        "LLM_TEMPERATURE": "0.3",
        "DEBUG": "true",
    }
    config_manager = ConfigManager(load_env=False, environ=environ)
    config = config_manager.get_config()

    assert config.github.api_url == "https://github.example.com/api/v3"
    assert config.default_owner_and_repo == ("acme", "widgets")
    assert config.llm.family == "openai"
    assert config.llm.model_name == "gpt-4o"
    assert config.llm.api_key == "sk-test"
    assert config.llm.temperature == 0.3
    assert config.debug is True
    assert config_manager.validate_config() == []


def test_family_specific_api_key_fallback():
    config = ConfigManager(
        load_env=False, environ={"GEMINI_API_KEY": "gem-key"}
    ).get_config()
    assert config.llm.api_key == "gem-key"

    config = ConfigManager(
        load_env=False, environ={"LLM_PROVIDER": "openai", "GEMINI_API_KEY": "gem-key"}
    ).get_config()
    assert config.llm.api_key is None


def test_invalid_values_reported():
    environ = {"LLM_PROVIDER": "mystery", "LLM_API_KEY": "k", "LLM_TEMPERATURE": "hot"}
    config_manager = ConfigManager(load_env=False, environ=environ)

    errors = config_manager.validate_config()

    assert any("Unknown LLM provider 'mystery'" in error for error in errors)
    assert config_manager.get_config().llm.temperature == 0.0


def test_yaml_file_loaded_and_environment_wins(tmp_path):
    config_file = tmp_path / "reviewer.yaml"
    config_file.write_text(
        "llm:\n"
        "  family: openai\n"
        "  model: gpt-4o\n"
        "  temperature: 0.2\n"
        "default_repository: acme/tools\n"
    )

    config = ConfigManager(
        config_file=str(config_file), load_env=False, environ={"LLM_MODEL": "gpt-4.1"}
    ).get_config()

    assert config.llm.family == "openai"
    assert config.llm.model == "gpt-4.1"
    assert config.llm.temperature == 0.2
    assert config.default_repository == "acme/tools"


def test_broken_yaml_falls_back_to_defaults(tmp_path):
    config_file = tmp_path / "broken.yaml"
    config_file.write_text("llm: [unclosed\n")

    config = ConfigManager(config_file=str(config_file), load_env=False, environ={}).get_config()

    assert config.llm.family == "gemini"
