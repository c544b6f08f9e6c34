"""
End-to-end tests for tumor simulation.
"""

import numpy as np
import pandas as pd
import pytest

from clonalsim import __version__
from clonalsim.config import SimulationConfig
from clonalsim.exceptions import InvalidParameterError, SkippedGroupWarning
from clonalsim.result import MUTATION_COLUMNS, SimulationResult
from clonalsim.simulate import (
    CHROMOSOMES,
    POSITION_RANGE,
    attach_coordinates,
    simulate_replicates,
    simulate_tumor,
)


def _germline_config(purity, seed):
    return SimulationConfig.from_dict({
        "subclone_freqs": [purity],
        "n_mut_per_clone": [10],
        "n_mut_founder": 5,
        "n_mut_shared": {},
        "germline_variants": {"enabled": True, "n_variants": 100, "vaf_expected": 0.5},
        "seed": seed,
    })


class TestScenarios:
    """Concrete scenarios with known outcomes."""

    def test_three_clone_scenario(self):
        result = simulate_tumor(
            subclone_freqs=[0.3, 0.4, 0.3],
            n_mut_per_clone=[20, 25, 15],
            n_mut_shared={},
            seed=123,
        )

        assert isinstance(result, SimulationResult)
        assert len(result.mutations) == 10 + 20 + 25 + 15
        assert set(result.mutations["Type"]) == {"founder", "private"}
        assert result.tumor_purity == pytest.approx(1.0)
        assert result.metadata["tumor_purity"] == pytest.approx(1.0)

    def test_germline_only_clone(self):
        result = simulate_tumor(_germline_config(0.7, seed=11))
        germline = result.mutations[result.mutations["Type"] == "germline"]

        assert len(germline) == 100
        assert 0.4 <= germline["VAF"].mean() <= 0.6
        assert (germline["Clone_IDs"] == "germline").all()
        assert (germline["Clone"] == "Germline").all()

    def test_germline_vaf_independent_of_purity(self):
        low = simulate_tumor(_germline_config(0.3, seed=2024))
        high = simulate_tumor(_germline_config(0.9, seed=2024))

        low_mean = low.mutations.loc[low.mutations["Type"] == "germline", "VAF"].mean()
        high_mean = high.mutations.loc[high.mutations["Type"] == "germline", "VAF"].mean()

        assert 0.4 <= low_mean <= 0.6
        assert 0.4 <= high_mean <= 0.6
        assert abs(low_mean - high_mean) < 0.1

    def test_skipped_group_keeps_other_groups(self):
        with pytest.warns(SkippedGroupWarning, match="'2'"):
            result = simulate_tumor(
                subclone_freqs=[0.6],
                n_mut_per_clone=[12],
                n_mut_founder=4,
                n_mut_shared={"2": 9},
                seed=5,
            )

        mutations = result.mutations
        assert len(mutations) == 16
        assert "shared" not in set(mutations["Type"])
        assert (mutations["Type"] == "founder").sum() == 4
        assert (mutations["Type"] == "private").sum() == 12
        assert result.metadata["skipped_groups"] == ["2"]

    def test_zero_index_group_is_skipped(self):
        with pytest.warns(SkippedGroupWarning, match="'0 1'") as record:
            result = simulate_tumor(
                subclone_freqs=[0.5], n_mut_per_clone=[3], n_mut_shared={"0 1": 4}, seed=1
            )

        assert len(result.mutations) == 3 + result.params["n_mut_founder"]
        assert result.metadata["skipped_groups"] == ["0 1"]
        # attributed to the line calling simulate_tumor
        assert record[0].filename == __file__


class TestInvariants:
    """Properties that hold for every record."""

    def test_read_counts(self, default_config):
        mutations = simulate_tumor(default_config).mutations
        ref_reads = mutations["Depth"] - mutations["Alt_reads"]

        assert (mutations["Alt_reads"] >= 0).all()
        assert (mutations["Alt_reads"] <= mutations["Depth"]).all()
        assert (mutations["Alt_reads"] + ref_reads == mutations["Depth"]).all()
        assert (mutations["Depth"] >= 10).all()

    def test_true_vaf_bounds_with_bio_noise(self, default_config):
        mutations = simulate_tumor(default_config).mutations
        assert mutations["True_VAF"].between(0.01, 0.99).all()
        assert mutations["VAF"].between(0.0, 1.0).all()

    def test_true_vaf_equals_base_without_bio_noise(self, noiseless_config):
        mutations = simulate_tumor(noiseless_config).mutations
        founder = mutations[mutations["Type"] == "founder"]
        assert founder["True_VAF"].to_numpy() == pytest.approx([0.8] * 3)
        clone1 = mutations[mutations["Clone"] == "Clone1"]
        clone2 = mutations[mutations["Clone"] == "Clone2"]
        assert (clone1["True_VAF"] == 0.3).all()
        assert (clone2["True_VAF"] == 0.5).all()

    def test_disabled_noise_is_deterministic(self, noiseless_config):
        mutations = simulate_tumor(noiseless_config).mutations

        assert (mutations["VAF"] == mutations["True_VAF"]).all()
        np.testing.assert_array_equal(
            mutations["Alt_reads"].to_numpy(),
            np.round(mutations["True_VAF"].to_numpy() * mutations["Depth"].to_numpy()),
        )

    def test_column_order_and_group_order(self, small_result):
        mutations = small_result.mutations
        assert list(mutations.columns) == MUTATION_COLUMNS

        types = mutations["Type"].tolist()
        order = {"founder": 0, "shared": 1, "private": 2, "germline": 3}
        assert types == sorted(types, key=order.__getitem__)
        assert mutations["Mutation"].is_unique

    def test_input_config_not_mutated(self, small_config):
        before = small_config.to_dict()
        simulate_tumor(small_config, germline_variants={"enabled": True, "n_variants": 3})
        assert small_config.to_dict() == before

    def test_sum_of_frequencies_preserved(self, small_result):
        assert sum(small_result.subclone_freqs) <= 1.0
        assert small_result.clonal_structure["Frequency"].tolist() == [0.2, 0.3, 0.4]


class TestReproducibility:
    """Seeded runs are identical; different seeds differ."""

    def test_same_seed_identical(self, default_config):
        first = simulate_tumor(default_config).mutations
        second = simulate_tumor(default_config).mutations

        for column in ["True_VAF", "VAF", "Depth", "Alt_reads", "Chromosome", "Position", "Ref", "Alt"]:
            np.testing.assert_array_equal(first[column].to_numpy(), second[column].to_numpy())

    def test_seed_keyword_overrides_config(self, default_config):
        first = simulate_tumor(default_config, seed=99)
        second = simulate_tumor(SimulationConfig(), seed=99)
        pd.testing.assert_frame_equal(first.mutations, second.mutations)
        assert first.metadata["seed"] == 99

    def test_different_seed_differs(self):
        first = simulate_tumor(seed=1).mutations
        second = simulate_tumor(seed=2).mutations
        assert not np.array_equal(first["VAF"].to_numpy(), second["VAF"].to_numpy())

    def test_explicit_generator(self):
        first = simulate_tumor(rng=np.random.default_rng(8))
        second = simulate_tumor(rng=np.random.default_rng(8))
        pd.testing.assert_frame_equal(first.mutations, second.mutations)

    def test_concentration_monotonicity(self):
        base = {
            "subclone_freqs": [0.4],
            "n_mut_per_clone": [2000],
            "n_mut_founder": 0,
            "n_mut_shared": {},
            "sequencing_noise": {"enabled": False},
        }
        loose = simulate_tumor(SimulationConfig.from_dict({**base, "biological_noise": {"concentration": 10}}), seed=3)
        tight = simulate_tumor(SimulationConfig.from_dict({**base, "biological_noise": {"concentration": 200}}), seed=3)
        assert loose.mutations["True_VAF"].std() > tight.mutations["True_VAF"].std()

    def test_replicates_are_independent_and_reproducible(self, small_config):
        first = simulate_replicates(small_config, seed=10, n_replicates=3)
        second = simulate_replicates(small_config, seed=10, n_replicates=3)

        assert len(first) == 3
        for a, b in zip(first, second):
            pd.testing.assert_frame_equal(a.mutations, b.mutations)
        assert not np.array_equal(first[0].mutations["VAF"], first[1].mutations["VAF"])

    def test_replicates_require_positive_count(self):
        with pytest.raises(InvalidParameterError, match="n_replicates"):
            simulate_replicates(n_replicates=0)


class TestValidationFailures:
    """Invalid input raises before anything is drawn."""

    @pytest.mark.parametrize(
        "overrides, parameter",
        [
            ({"subclone_freqs": [0.7, 0.6], "n_mut_per_clone": [1, 1]}, "subclone_freqs"),
            ({"subclone_freqs": [0.3, 1.3], "n_mut_per_clone": [1, 1]}, "subclone_freqs"),
            ({"n_mut_per_clone": [1, 2]}, "n_mut_per_clone"),
            ({"biological_noise": {"concentration": 0}}, "biological_noise.concentration"),
            ({"sequencing_noise": {"mean_depth": -5}}, "sequencing_noise.mean_depth"),
            ({"sequencing_noise": {"depth_dispersion": 0}}, "sequencing_noise.depth_dispersion"),
            ({"sequencing_noise": {"error_rate": 1.5}}, "sequencing_noise.error_rate"),
            ({"sequencing_noise": {"depth_variation": "gamma"}}, "distribution"),
            ({"biological_noise": {"concentration": float("nan")}}, "biological_noise.concentration"),
            ({"sequencing_noise": {"mean_depth": float("nan")}}, "sequencing_noise.mean_depth"),
            ({"sequencing_noise": {"depth_dispersion": float("nan")}}, "sequencing_noise.depth_dispersion"),
        ],
    )
    def test_invalid_parameters(self, overrides, parameter):
        with pytest.raises(InvalidParameterError) as exc_info:
            simulate_tumor(seed=1, **overrides)
        assert exc_info.value.details["parameter"] == parameter

    def test_no_draw_on_failure(self):
        rng = np.random.default_rng(4)
        with pytest.raises(InvalidParameterError):
            simulate_tumor(rng=rng, subclone_freqs=[0.9, 0.9], n_mut_per_clone=[1, 1])
        assert rng.random() == np.random.default_rng(4).random()

    def test_disabled_stage_parameters_not_checked(self):
        result = simulate_tumor(
            seed=1,
            sequencing_noise={"enabled": False, "mean_depth": 0},
            biological_noise={"enabled": False, "concentration": 0},
        )
        assert (result.mutations["Depth"] == 100).all()


class TestOutputStructure:
    """Coordinates, parameters, clonal structure and metadata."""

    def test_coordinates(self, small_result):
        mutations = small_result.mutations
        low, high = POSITION_RANGE

        assert set(mutations["Chromosome"]) <= set(CHROMOSOMES)
        assert mutations["Position"].between(low, high).all()
        assert set(mutations["Ref"]) <= set("ATCG")
        assert set(mutations["Alt"]) <= set("ATCG")

    def test_attach_coordinates_preserves_rows(self, rng):
        frame = pd.DataFrame({"Mutation": ["a", "b", "c"]})
        with_coords = attach_coordinates(frame, rng)
        assert list(with_coords["Mutation"]) == ["a", "b", "c"]
        assert "Chromosome" not in frame.columns

    def test_params_echo_defaults(self, small_result):
        params = small_result.params
        assert params["subclone_freqs"] == [0.2, 0.3, 0.4]
        assert params["clone_names"] == ["Clone1", "Clone2", "Clone3"]
        assert params["biological_noise"]["concentration"] == 50.0
        assert params["sequencing_noise"]["depth_variation"] == "negative_binomial"

    def test_clonal_structure_table(self, small_result):
        structure = small_result.clonal_structure
        assert list(structure.columns) == ["Clone", "Frequency", "N_private_mutations"]
        assert structure["N_private_mutations"].tolist() == [5, 6, 7]

    def test_metadata(self, small_result, small_config):
        metadata = small_result.metadata
        assert metadata["version"] == __version__
        assert metadata["seed"] == 42
        assert metadata["config_hash"] == small_config.config_hash()
        assert metadata["skipped_groups"] == []
        assert pd.Timestamp(metadata["date"]).tzinfo is not None

    def test_all_groups_empty(self):
        result = simulate_tumor(
            subclone_freqs=[0.5], n_mut_per_clone=[0], n_mut_founder=0, n_mut_shared={}, seed=1
        )
        assert len(result.mutations) == 0
        assert list(result.mutations.columns) == MUTATION_COLUMNS
