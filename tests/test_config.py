"""Tests for environment and .env configuration."""
import pytest

from kmp_impact.config import Config, get_config, reset_config
from kmp_impact.utils.file_utils import EXCLUDED_DIRS


class TestDefaults:
    def test_defaults(self, clean_env, tmp_path):
        config = Config(env_path=tmp_path / ".env")

        assert config.output_format == "table"
        assert config.top_n == 10
        assert config.max_depth == 5
        assert config.excluded_dirs == EXCLUDED_DIRS


class TestEnvironment:
    def test_values_from_environment(self, clean_env, tmp_path):
        clean_env.setenv("KMP_IMPACT_FORMAT", " Markdown ")
        clean_env.setenv("KMP_IMPACT_TOP_N", "3")
        clean_env.setenv("KMP_IMPACT_MAX_DEPTH", "8")

        config = Config(env_path=tmp_path / ".env")

        assert config.output_format == "markdown"
        assert config.top_n == 3
        assert config.max_depth == 8

    def test_extra_excluded_dirs(self, clean_env, tmp_path):
        clean_env.setenv("KMP_IMPACT_EXCLUDED_DIRS", "generated, third_party ,,")

        excluded = Config(env_path=tmp_path / ".env").excluded_dirs

        assert {"generated", "third_party"} <= excluded
        assert EXCLUDED_DIRS <= excluded
        assert "" not in excluded

    @pytest.mark.parametrize("value", ["abc", "0", "-2"])
    def test_invalid_integers(self, clean_env, tmp_path, value):
        clean_env.setenv("KMP_IMPACT_TOP_N", value)

        with pytest.raises(ValueError, match="KMP_IMPACT_TOP_N"):
            Config(env_path=tmp_path / ".env").top_n

    def test_dotenv_file(self, clean_env, tmp_path):
        env_file = tmp_path / ".env"
        env_file.write_text("KMP_IMPACT_TOP_N=4\nKMP_IMPACT_FORMAT=json\n", encoding='utf-8')

        config = Config(env_path=env_file)

        assert config.top_n == 4
        assert config.output_format == "json"

    def test_environment_wins_over_dotenv(self, clean_env, tmp_path):
        clean_env.setenv("KMP_IMPACT_TOP_N", "7")
        env_file = tmp_path / ".env"
        env_file.write_text("KMP_IMPACT_TOP_N=4\n", encoding='utf-8')

        assert Config(env_path=env_file).top_n == 7


class TestSingleton:
    def test_get_config_is_cached(self):
        reset_config()
        try:
            assert get_config() is get_config()
        finally:
            reset_config()
