"""The installed plugin must not disturb pytest sessions that never use it.

Each test runs a separate pytest process against a throwaway test file, with
the plugin loaded through its pytest11 entry point.
"""

import pytest

pytestmark = pytest.mark.integration

UNRELATED_TEST = """
def test_unrelated():
    assert 1 + 1 == 2
"""

MIXED_TESTS = """
def test_unrelated():
    assert True


def test_uses_helpers(config_provider):
    assert config_provider.available()
"""


class TestPluginIsolation:
    @pytest.mark.parametrize(
        "env_vars",
        [
            {"DEBUG": "*"},
            {"LOG_LEVEL": "warn"},
            {"DEBUG": "*", "LOG_LEVEL": "verbose"},
        ],
    )
    def test_foreign_env_values_do_not_break_unrelated_runs(
        self, pytester, monkeypatch, env_vars
    ) -> None:
        """
        Given: DEBUG / LOG_LEVEL set by another tool to values apiharness cannot parse
        When: A suite that never uses the helpers is run
        Then: The run completes and its test passes
        """
        for key, value in env_vars.items():
            monkeypatch.setenv(key, value)
        pytester.makepyfile(test_unrelated=UNRELATED_TEST)

        result = pytester.runpytest_subprocess()

        result.assert_outcomes(passed=1)
        assert "INTERNALERROR" not in result.stdout.str()

    def test_invalid_settings_only_fail_tests_using_helpers(self, pytester, monkeypatch) -> None:
        """
        Given: An invalid API_DEBUG value
        When: A suite mixing plain tests and helper-backed tests is run
        Then: Only the helper-backed test errors at setup
        """
        monkeypatch.setenv("API_DEBUG", "*")
        pytester.makepyfile(test_mixed=MIXED_TESTS)

        result = pytester.runpytest_subprocess()

        result.assert_outcomes(passed=1, errors=1)
        result.stdout.fnmatch_lines(["*ConfigurationError*Invalid apiharness settings*"])

    def test_helpers_available_with_valid_settings(self, pytester) -> None:
        pytester.makepyfile(test_mixed=MIXED_TESTS)

        result = pytester.runpytest_subprocess()

        result.assert_outcomes(passed=2)
