"""Tests for diffnote.cli module."""

import pytest
from typer.testing import CliRunner

from diffnote.cli import app
from diffnote.formatters import CommitMessageJSON
from diffnote.git import GitError, NoStagedChangesError
from diffnote.global_config import get_credential, load_global_config
from diffnote.llm import LLMError, LLMResult
from diffnote.pipeline import PreparedContext
from diffnote.tokens import TokenizerError

runner = CliRunner()


@pytest.fixture
def prepared():
    return PreparedContext(
        diff_tokens=120,
        budget=3000,
        bounded_diff="diff --git a/a.py\n+x\n",
        context_bundle="[STAGED_DIFF]\ndiff --git a/a.py\n+x\n",
    )


@pytest.fixture
def llm_result():
    return LLMResult(
        commit_json=CommitMessageJSON(title="Add a.py", body_bullets=["Add x"]),
        model="test-model",
        input_tokens=50,
        output_tokens=10,
    )


@pytest.fixture
def cli_env(mocker, estimator, prepared, llm_result):
    """Patch the pipeline so the main command runs without git or network."""
    mocker.patch("diffnote.cli.main.setup_logging")
    mocker.patch("diffnote.config.load_config")
    mocker.patch("diffnote.config.MAX_INPUT_TOKENS", 4096)
    mocks = {
        "load_estimator": mocker.patch("diffnote.cli.main.load_estimator", return_value=estimator),
        "prepare_context": mocker.patch("diffnote.cli.main.prepare_context", return_value=prepared),
        "generate_message": mocker.patch(
            "diffnote.cli.main.generate_message",
            new=mocker.AsyncMock(return_value=llm_result),
        ),
        "commit_with_message": mocker.patch("diffnote.cli.main.commit_with_message", return_value="[main 1a2b3c] Add a.py"),
    }
    return mocks


class TestMainCommand:
    """Tests for the default diffnote command."""

    def test_prints_rendered_message(self, cli_env, estimator):
        result = runner.invoke(app, [])

        assert result.exit_code == 0
        assert "Add a.py\n\n- Add x" in result.output
        cli_env["prepare_context"].assert_called_once_with(estimator, 4096, user_context=None)
        cli_env["commit_with_message"].assert_not_called()

    def test_max_input_tokens_option(self, cli_env, estimator):
        result = runner.invoke(app, ["--max-input-tokens", "9000"])

        assert result.exit_code == 0
        cli_env["prepare_context"].assert_called_once_with(estimator, 9000, user_context=None)

    def test_reports_splitting(self, cli_env, prepared):
        prepared.diff_tokens = 5000

        result = runner.invoke(app, [])

        assert result.exit_code == 0
        assert "The diff is too large (5000 tokens). Splitting into chunks..." in result.output

    def test_show_prompt_skips_llm(self, cli_env):
        result = runner.invoke(app, ["--show-prompt"])

        assert result.exit_code == 0
        assert "[SYSTEM]" in result.output
        assert "[STAGED_DIFF]\ndiff --git a/a.py" in result.output
        cli_env["generate_message"].assert_not_called()

    def test_context_option(self, cli_env, estimator):
        result = runner.invoke(app, ["-c", "Part of the login rework"])

        assert result.exit_code == 0
        cli_env["prepare_context"].assert_called_once_with(
            estimator, 4096, user_context="Part of the login rework"
        )
        cli_env["commit_with_message"].assert_not_called()

    def test_show_prompt_includes_context(self, cli_env, prepared):
        prepared.user_context = "Part of the login rework"

        result = runner.invoke(app, ["--show-prompt", "--context", "Part of the login rework"])

        assert result.exit_code == 0
        assert "Additional context from the author: Part of the login rework" in result.output

    def test_commit_option(self, cli_env):
        result = runner.invoke(app, ["--commit"])

        assert result.exit_code == 0
        cli_env["commit_with_message"].assert_called_once_with("Add a.py\n\n- Add x")

    @pytest.mark.parametrize(
        "error",
        [
            NoStagedChangesError("No staged changes found."),
            GitError("Not in a git repository."),
        ],
    )
    def test_git_errors_exit_1(self, cli_env, error):
        cli_env["prepare_context"].side_effect = error

        result = runner.invoke(app, [])

        assert result.exit_code == 1
        assert f"Error: {error}" in result.output

    def test_llm_error_exit_1(self, cli_env):
        cli_env["generate_message"].side_effect = LLMError("OpenAI API call failed: 401 invalid_api_key")

        result = runner.invoke(app, [])

        assert result.exit_code == 1
        assert "Error: OpenAI API call failed: 401 invalid_api_key" in result.output

    def test_tokenizer_error_exit_1(self, cli_env):
        cli_env["load_estimator"].side_effect = TokenizerError("Failed to initialize tokenizer")

        result = runner.invoke(app, [])

        assert result.exit_code == 1
        assert "Error: Failed to initialize tokenizer" in result.output
        cli_env["prepare_context"].assert_not_called()

    def test_bad_config_exit_1(self, mocker):
        mocker.patch("diffnote.cli.main.setup_logging")
        mocker.patch("diffnote.config.load_config", side_effect=ValueError("DIFFNOTE_MAX_INPUT_TOKENS must be an integer"))

        result = runner.invoke(app, [])

        assert result.exit_code == 1
        assert "DIFFNOTE_MAX_INPUT_TOKENS must be an integer" in result.output


class TestInitCommand:
    """Tests for diffnote init."""

    def test_writes_default_config(self, config_dir):
        result = runner.invoke(app, ["init"])

        assert result.exit_code == 0
        assert (config_dir / "config.yaml").exists()
        assert load_global_config()["max_input_tokens"] == 4096

    def test_existing_config_kept(self, config_dir):
        config_dir.mkdir(parents=True)
        (config_dir / "config.yaml").write_text("provider: groq\n")

        result = runner.invoke(app, ["init"])

        assert result.exit_code == 0
        assert "already exists" in result.output
        assert load_global_config() == {"provider": "groq"}


class TestConfigCommands:
    """Tests for diffnote config subcommands."""

    def test_show_unconfigured(self, config_dir):
        result = runner.invoke(app, ["config", "show"])

        assert result.exit_code == 0
        assert "No configuration found" in result.output

    def test_show_configured(self, config_dir):
        runner.invoke(app, ["init"])

        result = runner.invoke(app, ["config", "show"])

        assert result.exit_code == 0
        assert "Provider: anthropic" in result.output
        assert "Max Input Tokens: 4096" in result.output
        assert "Commit Style: plain" in result.output
        assert "API Key (ANTHROPIC_API_KEY): not set" in result.output

    def test_set_key(self, config_dir):
        result = runner.invoke(app, ["config", "set-key", "openai"], input="sk-test-123\n")

        assert result.exit_code == 0
        assert get_credential("OPENAI_API_KEY") == "sk-test-123"

    def test_set_key_invalid_provider(self, config_dir):
        result = runner.invoke(app, ["config", "set-key", "carrier-pigeon"])

        assert result.exit_code == 1
        assert "Invalid provider" in result.output

    def test_set_provider_with_model(self, config_dir):
        result = runner.invoke(app, ["config", "set-provider", "groq", "--model", "llama-3.1-8b-instant"])

        assert result.exit_code == 0
        config = load_global_config()
        assert config["provider"] == "groq"
        assert config["model"] == "llama-3.1-8b-instant"

    def test_set_provider_prompts_for_model(self, config_dir):
        result = runner.invoke(app, ["config", "set-provider", "cohere"], input="2\n")

        assert result.exit_code == 0
        assert load_global_config()["model"] == "command-r"

    def test_set_provider_unknown_model_declined(self, config_dir):
        result = runner.invoke(app, ["config", "set-provider", "openai", "--model", "gpt-99"], input="n\n")

        assert result.exit_code == 0
        assert load_global_config() == {}

    def test_set_max_input_tokens(self, config_dir):
        result = runner.invoke(app, ["config", "set-max-input-tokens", "8192"])

        assert result.exit_code == 0
        assert load_global_config()["max_input_tokens"] == 8192

    def test_set_max_input_tokens_rejects_zero(self, config_dir):
        result = runner.invoke(app, ["config", "set-max-input-tokens", "0"])

        assert result.exit_code == 1
        assert "positive integer" in result.output

    def test_set_commit_style(self, config_dir):
        result = runner.invoke(app, ["config", "set-commit-style", "Conventional"])

        assert result.exit_code == 0
        assert load_global_config()["commit_style"] == "conventional"

    def test_set_commit_style_rejects_unknown(self, config_dir):
        result = runner.invoke(app, ["config", "set-commit-style", "haiku"])

        assert result.exit_code == 1
        assert "Invalid commit style: haiku" in result.output
        assert load_global_config() == {}

    def test_list_providers(self):
        result = runner.invoke(app, ["config", "list-providers"])

        assert result.exit_code == 0
        for name in ("anthropic", "openai", "google", "cohere", "groq", "openrouter"):
            assert name in result.output

    def test_list_models_for_provider(self):
        result = runner.invoke(app, ["config", "list-models", "openai"])

        assert result.exit_code == 0
        assert "gpt-4o-mini" in result.output
        assert "claude" not in result.output
