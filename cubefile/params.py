from dataclasses import dataclass, field
from pathlib import Path

DIFF_NAME = 'diff.cube'
POSITIVE_NAME = 'diff_positive.cube'
NEGATIVE_NAME = 'diff_negative.cube'

@dataclass
class DiffParams:
    separate: bool = False  # Also write the sign-filtered copies
    strict: bool = True     # Refuse grids that do not line up instead of truncating
    output_dir: Path = field(default_factory=Path)

    def diff_path(self) -> Path:
        return self.output_dir / DIFF_NAME

    def positive_path(self) -> Path:
        return self.output_dir / POSITIVE_NAME

    def negative_path(self) -> Path:
        return self.output_dir / NEGATIVE_NAME
