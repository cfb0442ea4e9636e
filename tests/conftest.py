import numpy as np
import pytest

from pathlib import Path

FIRST = [0.5, 1.25, -0.75, 2.0, 0.0, 3.5, -1.5, 0.25, 4.0, -2.0, 1.0, 0.125]
SECOND = [1.0, 1.25, -1.75, 0.5, 0.5, 3.0, -0.5, 0.75, 1.0, -2.5, 2.0, 0.0]


def write_cube(path: Path, values, natom: int = 2, shape=(2, 2, 3), per_line: int = 6) -> Path:
    """Write a small cube file, values wrapped at `per_line` per line."""
    lines = ['Test density\n', 'Generated for tests\n',
             f'{natom:5d}{0.0:12.6f}{0.0:12.6f}{0.0:12.6f}\n']
    for i, n in enumerate(shape):
        step = np.zeros(3)
        step[i] = 0.2
        lines.append(f'{n:5d}' + ''.join(f'{s:12.6f}' for s in step) + '\n')
    for i in range(abs(natom)):
        lines.append(f'{1:5d}{1.0:12.6f}{0.0:12.6f}{0.0:12.6f}{1.4 * i:12.6f}\n')

    values = list(values)
    for i in range(0, len(values), per_line):
        lines.append(''.join(f'{v:13.5E}' for v in values[i:i + per_line]) + '\n')

    path.write_text(''.join(lines))
    return path


def read_data(path: Path, nhead: int):
    """Fixed width values of every data line of a written cube file."""
    lines = path.read_text().splitlines()[nhead:]
    return [[float(line[i:i + 17]) for i in range(0, len(line), 17)] for line in lines]


@pytest.fixture
def make_cube(tmp_path):
    def _make(name: str, values, **kwargs) -> Path:
        return write_cube(tmp_path / name, values, **kwargs)
    return _make


@pytest.fixture
def cube_pair(make_cube):
    """Two compatible cubes with 2 atoms and a 2x2x3 grid."""
    return make_cube('first.cube', FIRST), make_cube('second.cube', SECOND)
