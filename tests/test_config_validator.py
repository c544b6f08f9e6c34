"""
Tests for configuration validation.
"""

import pytest
import yaml

from clonalsim.config_validator import ConfigValidator, validate_config_file
from clonalsim.exceptions import ConfigurationError


class TestConfigValidator:
    """Test configuration validation."""

    def setup_method(self):
        """Setup test fixtures."""
        self.validator = ConfigValidator()
        self.valid_config = {
            'subclone_freqs': [0.2, 0.3, 0.4],
            'n_mut_per_clone': [10, 12, 8],
            'n_mut_founder': 5,
            'n_mut_shared': {'2 3': 6},
            'biological_noise': {'enabled': True, 'concentration': 50},
            'sequencing_noise': {
                'enabled': True,
                'mean_depth': 100,
                'depth_variation': 'negative_binomial',
                'depth_dispersion': 20,
                'error_rate': 0.001,
            },
            'germline_variants': {'enabled': False},
            'seed': 42,
        }

    def test_valid_config(self):
        """Test validation of a valid configuration."""
        is_valid, errors, warnings = self.validator.validate_config(self.valid_config)
        assert is_valid
        assert errors == []
        assert warnings == []

    def test_empty_config_is_valid(self):
        """Every key has a default."""
        is_valid, errors, _ = self.validator.validate_config({})
        assert is_valid
        assert errors == []

    def test_schema_errors(self):
        """Type and range problems are reported with their location."""
        config = dict(self.valid_config)
        config['subclone_freqs'] = [0.2, 1.4]
        config['sequencing_noise'] = {'depth_variation': 'gamma', 'error_rate': -1}
        is_valid, errors, _ = self.validator.validate_config(config)

        assert not is_valid
        assert any(error.startswith('subclone_freqs.1') for error in errors)
        assert any('depth_variation' in error for error in errors)
        assert any('error_rate' in error for error in errors)

    def test_unknown_key(self):
        config = dict(self.valid_config, purity=0.5)
        is_valid, errors, _ = self.validator.validate_config(config)
        assert not is_valid
        assert any('purity' in error for error in errors)

    def test_frequency_sum(self):
        config = dict(self.valid_config, subclone_freqs=[0.5, 0.4, 0.3])
        is_valid, errors, _ = self.validator.validate_config(config)
        assert not is_valid
        assert any('cannot exceed 1' in error for error in errors)

    def test_count_length_mismatch(self):
        config = dict(self.valid_config, n_mut_per_clone=[1, 2])
        is_valid, errors, _ = self.validator.validate_config(config)
        assert not is_valid
        assert any('n_mut_per_clone has 2 entries' in error for error in errors)

    def test_malformed_shared_label(self):
        config = dict(self.valid_config, n_mut_shared={'2,3': 4})
        is_valid, errors, _ = self.validator.validate_config(config)
        assert not is_valid
        assert any('n_mut_shared' in error for error in errors)

    def test_disabled_stage_values_are_not_checked(self):
        config = dict(self.valid_config)
        config['biological_noise'] = {'enabled': False, 'concentration': 0}
        config['sequencing_noise'] = {'enabled': False, 'mean_depth': 0, 'error_rate': 2}
        is_valid, errors, _ = self.validator.validate_config(config)
        assert is_valid, errors

    def test_dispersion_only_checked_for_negative_binomial(self):
        config = dict(self.valid_config)
        config['sequencing_noise'] = {'depth_variation': 'poisson', 'depth_dispersion': 0}
        assert self.validator.validate_config(config)[0]

        config['sequencing_noise'] = {'depth_dispersion': 0}
        is_valid, errors, _ = self.validator.validate_config(config)
        assert not is_valid
        assert any(error.startswith('sequencing_noise.depth_dispersion') for error in errors)

    def test_zero_index_shared_label_warns(self):
        config = dict(self.valid_config, n_mut_shared={'0 1': 4})
        is_valid, _, warnings = self.validator.validate_config(config)
        assert is_valid
        assert any("'0 1'" in warning for warning in warnings)

    def test_warnings(self):
        """Legal but suspicious settings produce warnings, not errors."""
        config = dict(self.valid_config)
        config['subclone_freqs'] = [0.05, 0.05, 0.05]
        config['n_mut_shared'] = {'3 4': 2}
        config['biological_noise'] = {'concentration': 2}
        config['sequencing_noise'] = {'mean_depth': 15}
        is_valid, errors, warnings = self.validator.validate_config(config)

        assert is_valid
        assert errors == []
        assert any('tumor purity' in warning for warning in warnings)
        assert any("'3 4'" in warning for warning in warnings)
        assert any('concentration' in warning for warning in warnings)
        assert any('mean_depth' in warning for warning in warnings)

    def test_validator_resets_between_calls(self):
        self.validator.validate_config({'seed': 'abc'})
        is_valid, errors, _ = self.validator.validate_config(self.valid_config)
        assert is_valid
        assert errors == []


class TestConfigFile:
    """Validation of YAML files."""

    def test_valid_file(self, temp_dir):
        path = temp_dir / 'config.yaml'
        path.write_text(yaml.safe_dump({'n_mut_founder': 3}), encoding='utf-8')
        is_valid, errors, _ = validate_config_file(path)
        assert is_valid
        assert errors == []

    def test_missing_file(self, temp_dir):
        with pytest.raises(ConfigurationError, match='not found'):
            validate_config_file(temp_dir / 'nope.yaml')

    def test_invalid_yaml(self, temp_dir):
        path = temp_dir / 'bad.yaml'
        path.write_text('a: [1, 2\n', encoding='utf-8')
        with pytest.raises(ConfigurationError, match='Invalid YAML'):
            validate_config_file(path)

    def test_non_mapping(self, temp_dir):
        path = temp_dir / 'list.yaml'
        path.write_text('- 1\n', encoding='utf-8')
        with pytest.raises(ConfigurationError, match='dictionary'):
            validate_config_file(path)
