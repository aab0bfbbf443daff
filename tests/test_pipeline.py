import polars as pl

from neurocohort import build_labeled_cohort
from neurocohort.pipeline import run_pipeline
from neurocohort.routing import Bucket


def test_run_pipeline_outputs(config, study_dir):
    result = run_pipeline(config)

    out = study_dir / "out"
    assert result.cohort.height == 60
    assert len(result.routes) == 60
    assert result.copy_counts["copied"] == 60
    assert len(list((out / "neuropathy").iterdir())) == 24
    assert len(list((out / "healthy").iterdir())) == 36

    plan = pl.read_csv(out / "routing_plan.csv")
    assert plan.height == 60
    assert plan.filter(pl.col("bucket") == "neuropathy").height == 24


def test_run_pipeline_dry_run_copies_nothing(config, study_dir):
    result = run_pipeline(config, copy_files=False)

    assert len(result.routes) == 60
    assert result.copy_counts == {}
    assert not (study_dir / "out" / "healthy").exists()
    assert (study_dir / "out" / "routing_plan.csv").exists()


def test_run_pipeline_idempotent(config, study_dir):
    cohort_path = study_dir / "out" / "cohort.csv"

    first = run_pipeline(config)
    first_bytes = cohort_path.read_bytes()
    second = run_pipeline(config)

    assert cohort_path.read_bytes() == first_bytes
    assert second.routes == first.routes
    assert second.copy_counts == {"copied": 0, "unchanged": 60, "replaced": 0}


def test_build_labeled_cohort_from_file(config_file, study_dir):
    result = build_labeled_cohort(str(config_file), copy_files=False)

    assert result.cohort.height == 60
    assert result.exclusion_stats["final_neuropathy"] == 24
    assert result.overlap.height == 1
    assert set(result.routes.values()) == {Bucket.HEALTHY, Bucket.NEUROPATHY}
