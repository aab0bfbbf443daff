"""
Pydantic configuration schema for neurocohort.

Defines the structure and validation rules for neurocohort.yaml.
"""

from pydantic import BaseModel, Field, field_validator, model_validator
from typing import Dict, List, Optional
from pathlib import Path

from neurocohort.datasets import CDED_SCHEMA, CPD_SCHEMA, DatasetSchema, DatasetTag
from neurocohort.routing.router import Bucket, IdWindow


class DatasetConfig(BaseModel):
    """Location and column layout of one source export."""

    path: str = Field(..., description="Path to the dataset CSV export")
    id_column: str = Field(..., description="Subject identifier column")
    diabetes_column: str = Field(..., description="Diabetes status column (yes/no/N/A)")
    ecg_column: str = Field(..., description="ECG availability column (yes/no/N/A)")
    symptom_columns: List[str] = Field(
        ..., description="Neuropathy symptom columns (yes/no/N/A)"
    )
    visit_column: Optional[str] = Field(
        default=None, description="Visit marker column, for datasets with repeated visits"
    )
    visit_value: Optional[str] = Field(
        default=None, description="Visit marker value of the qualifying visit"
    )

    @field_validator("symptom_columns")
    @classmethod
    def validate_symptom_columns(cls, v: List[str]) -> List[str]:
        if not 1 <= len(v) <= 3:
            raise ValueError(f"Expected 1 to 3 symptom columns, got {len(v)}")
        return v

    @model_validator(mode="after")
    def validate_visit(self) -> "DatasetConfig":
        if self.visit_column and self.visit_value is None:
            raise ValueError(f"visit_value is required with visit_column '{self.visit_column}'")
        return self

    def to_schema(self, tag: DatasetTag) -> DatasetSchema:
        """Build the typed dataset schema for this export."""
        return DatasetSchema(
            tag=tag,
            id_column=self.id_column,
            diabetes_column=self.diabetes_column,
            ecg_column=self.ecg_column,
            symptom_columns=tuple(self.symptom_columns),
            visit_column=self.visit_column,
            visit_value=self.visit_value,
        )

    @classmethod
    def from_schema(cls, schema: DatasetSchema, path: str) -> "DatasetConfig":
        return cls(
            path=path,
            id_column=schema.id_column,
            diabetes_column=schema.diabetes_column,
            ecg_column=schema.ecg_column,
            symptom_columns=list(schema.symptom_columns),
            visit_column=schema.visit_column,
            visit_value=schema.visit_value,
        )


class RoutingConfig(BaseModel):
    """Signal file routing configuration."""

    signals_dir: str = Field(default="data/ecg", description="Directory of raw signal files")
    pattern: str = Field(default="*", description="Glob selecting signal files")
    id_end_offset: int = Field(
        default=5, ge=0, description="Characters between the identifier and the end of the stem"
    )
    id_length: int = Field(default=6, ge=1, description="Identifier length in characters")
    overwrite: bool = Field(
        default=False, description="Replace differing destination files instead of failing"
    )

    @property
    def window(self) -> IdWindow:
        return IdWindow(end_offset=self.id_end_offset, length=self.id_length)


class OutputConfig(BaseModel):
    """Output paths configuration."""

    cohort_path: str = Field(
        default="neurocohort_output/cohort.csv", description="Merged cohort CSV"
    )
    routes_path: str = Field(
        default="neurocohort_output/routing_plan.csv", description="Routing plan CSV"
    )
    healthy_dir: str = Field(
        default="neurocohort_output/healthy", description="Destination for healthy subjects"
    )
    neuropathy_dir: str = Field(
        default="neurocohort_output/neuropathy",
        description="Destination for neuropathy subjects",
    )

    @property
    def destinations(self) -> Dict[Bucket, Path]:
        return {
            Bucket.HEALTHY: Path(self.healthy_dir),
            Bucket.NEUROPATHY: Path(self.neuropathy_dir),
        }


class NeuroCohortConfig(BaseModel):
    """Main neurocohort configuration."""

    cded: DatasetConfig = Field(
        default_factory=lambda: DatasetConfig.from_schema(CDED_SCHEMA, "data/cded.csv")
    )
    cpd: DatasetConfig = Field(
        default_factory=lambda: DatasetConfig.from_schema(CPD_SCHEMA, "data/cpd.csv")
    )
    routing: RoutingConfig = Field(default_factory=RoutingConfig)
    output: OutputConfig = Field(default_factory=OutputConfig)

    def validate_paths(self) -> List[str]:
        """Validate that required input paths exist."""
        errors = []

        for name in ("cded", "cpd"):
            path = Path(getattr(self, name).path)
            if not path.exists():
                errors.append(f"{name.upper()} table not found: {path}")

        if not Path(self.routing.signals_dir).is_dir():
            errors.append(f"Signal directory not found: {self.routing.signals_dir}")

        return errors
