import re

from click.testing import CliRunner

from neurocohort import __version__
from neurocohort.cli import cli


def test_version():
    result = CliRunner().invoke(cli, ["version"])

    assert result.exit_code == 0
    assert __version__ in result.output


def test_init_writes_config(tmp_path):
    output = tmp_path / "neurocohort.yaml"

    result = CliRunner().invoke(cli, ["init", "-o", str(output)])

    assert result.exit_code == 0, result.output
    assert output.exists()


def test_build_cohort(config_file, study_dir):
    result = CliRunner().invoke(cli, ["-c", str(config_file), "build-cohort"])

    assert result.exit_code == 0, result.output
    m = re.search(r"Total subjects: (\d+)", result.output)
    assert m and int(m.group(1)) == 60
    assert "Neuropathy: 24" in result.output
    assert (study_dir / "out" / "cohort.csv").exists()


def test_route_dry_run_after_build(config_file, study_dir):
    runner = CliRunner()
    runner.invoke(cli, ["-c", str(config_file), "build-cohort"])

    result = runner.invoke(cli, ["-c", str(config_file), "route", "--dry-run"])

    assert result.exit_code == 0, result.output
    assert "Routed 60 files" in result.output
    assert "neuropathy: 24" in result.output
    assert not (study_dir / "out" / "neuropathy").exists()


def test_route_without_cohort_fails(config_file):
    result = CliRunner().invoke(cli, ["-c", str(config_file), "route"])

    assert result.exit_code == 1
    assert "Cohort file not found" in result.output


def test_run(config_file, study_dir):
    result = CliRunner().invoke(cli, ["-c", str(config_file), "run"])

    assert result.exit_code == 0, result.output
    assert "Cohort: 60 subjects" in result.output
    assert len(list((study_dir / "out" / "healthy").iterdir())) == 36


def test_overlap(config_file):
    result = CliRunner().invoke(cli, ["-c", str(config_file), "overlap"])

    assert result.exit_code == 0, result.output
    assert "n_shared=7" in result.output
    assert "dataset=total  n_subjects=60" in result.output


def test_missing_config(tmp_path):
    result = CliRunner().invoke(cli, ["-c", str(tmp_path / "nope.yaml"), "run"])

    assert result.exit_code == 1
    assert "Configuration file not found" in result.output
