"""
Tests for validation utilities.
"""

import pytest

from ssvalidity.core import StudyConfig
from ssvalidity.errors import ConfigurationError


class TestValidationResult:
    def test_raise_if_invalid(self):
        from ssvalidity.utils.validators import _ValidationResult

        result = _ValidationResult(False, ["bad thing"], [])
        with pytest.raises(ConfigurationError, match="bad thing"):
            result.raise_if_invalid()

    def test_valid_does_not_raise(self):
        from ssvalidity.utils.validators import _ValidationResult

        _ValidationResult(True, [], ["just a warning"]).raise_if_invalid()

    def test_merge(self):
        from ssvalidity.utils.validators import _ValidationResult

        merged = _ValidationResult(True, [], ["w1"]).merge(_ValidationResult(False, ["e1"], ["w2"]))
        assert not merged.is_valid
        assert merged.errors == ["e1"]
        assert merged.warnings == ["w1", "w2"]


class TestValidateNumericParameter:
    def test_bool_rejected(self):
        from ssvalidity.utils.validators import _validate_numeric_parameter

        assert not _validate_numeric_parameter(True, "x").is_valid

    def test_string_rejected(self):
        from ssvalidity.utils.validators import _validate_numeric_parameter

        result = _validate_numeric_parameter("5", "x")
        assert not result.is_valid
        assert "x must be" in result.errors[0]

    def test_exclusive_minimum(self):
        from ssvalidity.utils.validators import _validate_numeric_parameter

        assert not _validate_numeric_parameter(0.0, "rel", min_val=0.0, min_exclusive=True).is_valid
        assert _validate_numeric_parameter(0.01, "rel", min_val=0.0, min_exclusive=True).is_valid


class TestValidateStudyConfig:
    def test_default_config_valid(self):
        from ssvalidity.utils.validators import _validate_study_config

        assert _validate_study_config(StudyConfig()).is_valid

    def test_unlabeled_zero_allowed(self):
        from ssvalidity.utils.validators import _validate_study_config

        assert _validate_study_config(StudyConfig(unlabeled_sizes=[0])).is_valid

    def test_labeled_zero_rejected(self):
        from ssvalidity.utils.validators import _validate_study_config

        assert not _validate_study_config(StudyConfig(labeled_sizes=[0, 20])).is_valid

    def test_empty_grid_rejected(self):
        from ssvalidity.utils.validators import _validate_study_config

        result = _validate_study_config(StudyConfig(population_validities=[]))
        assert not result.is_valid
        assert "population_validities" in result.errors[0]

    def test_validity_out_of_range(self):
        from ssvalidity.utils.validators import _validate_study_config

        assert not _validate_study_config(StudyConfig(population_validities=[-1.2])).is_valid
        assert _validate_study_config(StudyConfig(population_validities=[-1.0, 1.0])).is_valid

    def test_reliability_bounds(self):
        from ssvalidity.utils.validators import _validate_study_config

        assert _validate_study_config(StudyConfig(criterion_reliability=1.0)).is_valid
        assert not _validate_study_config(StudyConfig(criterion_reliability=1.1)).is_valid

    def test_nmatch_must_be_below_labeled_sizes(self):
        from ssvalidity.utils.validators import _validate_study_config

        result = _validate_study_config(StudyConfig(labeled_sizes=[5, 50], nmatch=5))
        assert not result.is_valid
        assert "offending sizes: [5]" in result.errors[0]

    def test_duplicate_sizes_warn(self):
        from ssvalidity.utils.validators import _validate_study_config

        result = _validate_study_config(StudyConfig(labeled_sizes=[20, 20]))
        assert result.is_valid
        assert any("duplicate" in w for w in result.warnings)


class TestValidateRunnerSettings:
    def test_failure_policy(self):
        from ssvalidity.utils.validators import _validate_failure_policy

        assert _validate_failure_policy("skip", 0.1).is_valid
        assert not _validate_failure_policy("retry", 0.1).is_valid
        assert not _validate_failure_policy("skip", 1.5).is_valid

    def test_parallel_defaults_cores(self):
        from ssvalidity.utils.validators import _validate_parallel_settings

        (enabled, n_cores), result = _validate_parallel_settings(True, None)
        assert result.is_valid
        assert enabled is True
        assert n_cores >= 1

    def test_parallel_bad_cores(self):
        from ssvalidity.utils.validators import _validate_parallel_settings

        _, result = _validate_parallel_settings(True, 0)
        assert not result.is_valid
