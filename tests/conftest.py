import polars as pl
import pytest

from neurocohort.config.schema import NeuroCohortConfig


def _cded_rows():
    rows = []
    # 22 qualifying baseline-visit subjects, CD0001-CD0007 with neuropathy
    for i in range(1, 23):
        if i <= 7:
            symptoms = ["YES", "no", "N/A"]
        elif i == 8:
            symptoms = ["no", "N/A", "N/A"]
        else:
            symptoms = ["No", "N/A", "no"]
        rows.append([f"CD{i:04d}", "1", "Yes", "yes"] + symptoms)

    # follow-up visits of qualifying subjects
    for i in range(1, 6):
        rows.append([f"CD{i:04d}", "2", "Yes", "yes", "yes", "yes", "yes"])

    rows += [
        ["CD0023", "1", "No", "yes", "yes", "no", "no"],
        ["CD0024", "1", "yes", "no", "yes", "no", "no"],
        ["CD0025", "1", "yes", "yes", "N/A", "N/A", "N/A"],
        ["CD0026", "1", "N/A", "yes", "yes", "no", "no"],
        ["CD0027", "1", "yes", "yes", "maybe", "N/A", "N/A"],
        ["CD0028", "3", "yes", "yes", "yes", "no", "no"],
    ]
    return rows


def _cpd_rows():
    rows = []
    # CDED subjects also enrolled in CPD, with the opposite label
    for i in range(1, 8):
        rows.append([f"cd{i:04d}", "Yes", "Yes", "No", "No"])

    # 38 CPD-only qualifying subjects, CP0001-CP0017 with neuropathy
    for i in range(1, 39):
        symptoms = ["Yes", "N/A"] if i <= 17 else ["No", "No"]
        rows.append([f"CP{i:04d}", "Yes", "Yes"] + symptoms)

    rows += [
        ["CP0039", "no", "yes", "yes", "yes"],
        ["CP0040", "yes", "N/A", "yes", "yes"],
        ["CP0041", "yes", "yes", "N/A", "N/A"],
        ["CP0042", "yes", "Y", "yes", "no"],
    ]
    return rows


@pytest.fixture
def cded_raw() -> pl.DataFrame:
    columns = [
        "subject_id",
        "visit",
        "diabetes",
        "ecg_recorded",
        "symptom_numbness",
        "symptom_tingling",
        "symptom_pain",
    ]
    return pl.DataFrame(_cded_rows(), schema=columns, orient="row")


@pytest.fixture
def cpd_raw() -> pl.DataFrame:
    columns = ["PatientID", "Diabetes", "ECG", "Neuropathic_Pain", "Foot_Numbness"]
    return pl.DataFrame(_cpd_rows(), schema=columns, orient="row")


@pytest.fixture
def cohort_ids():
    """Identifiers of the 60 subjects expected in the merged cohort."""
    return [f"CD{i:04d}" for i in range(1, 23)] + [f"CP{i:04d}" for i in range(1, 39)]


@pytest.fixture
def study_dir(tmp_path, cded_raw, cpd_raw, cohort_ids):
    """
    A study folder with both exports and one ECG file per cohort subject,
    plus three files that belong to no cohort subject.
    """
    data = tmp_path / "data"
    signals = data / "ecg"
    signals.mkdir(parents=True)

    cded_raw.write_csv(data / "cded.csv")
    cpd_raw.write_csv(data / "cpd.csv")

    for subject_id in cohort_ids:
        (signals / f"ecg_{subject_id}_rest.xml").write_text(f"<ecg subject='{subject_id}'/>")
    (signals / "ecg_CP0099_rest.xml").write_text("<ecg subject='CP0099'/>")
    (signals / "ecg_ZZ0001_rest.xml").write_text("<ecg subject='ZZ0001'/>")
    (signals / "notes.txt").write_text("acquisition notes")

    return tmp_path


@pytest.fixture
def config(study_dir) -> NeuroCohortConfig:
    out = study_dir / "out"
    return NeuroCohortConfig(
        **{
            "cded": {
                "path": str(study_dir / "data" / "cded.csv"),
                "id_column": "subject_id",
                "diabetes_column": "diabetes",
                "ecg_column": "ecg_recorded",
                "symptom_columns": ["symptom_numbness", "symptom_tingling", "symptom_pain"],
                "visit_column": "visit",
                "visit_value": "1",
            },
            "cpd": {
                "path": str(study_dir / "data" / "cpd.csv"),
                "id_column": "PatientID",
                "diabetes_column": "Diabetes",
                "ecg_column": "ECG",
                "symptom_columns": ["Neuropathic_Pain", "Foot_Numbness"],
            },
            "routing": {"signals_dir": str(study_dir / "data" / "ecg")},
            "output": {
                "cohort_path": str(out / "cohort.csv"),
                "routes_path": str(out / "routing_plan.csv"),
                "healthy_dir": str(out / "healthy"),
                "neuropathy_dir": str(out / "neuropathy"),
            },
        }
    )


@pytest.fixture
def config_file(study_dir, config):
    import yaml

    path = study_dir / "neurocohort.yaml"
    with open(path, "w") as f:
        yaml.dump(config.model_dump(), f, sort_keys=False)
    return path
