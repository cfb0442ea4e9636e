import numpy as np
from dataclasses import dataclass
from io import TextIOWrapper
from itertools import islice
from pathlib import Path
from typing import Iterable, List, Tuple

VALUE_FORMAT = '%17.9E'
HEADER_BASE_LINES = 6  # title, comment, natom/origin and the three grid lines
ENCODING = 'latin-1'   # every byte maps to one character, headers round trip unchanged

@dataclass
class CubeHeader:
    """ Metadata held in the fixed part of a cube file header

    Parameters
    ----------

        title: str
            first line of the file.
        comment: str
            second line of the file.
        natom: int
            atom count as written on line 3, sign included.
        origin: np.ndarray (3,)
            origin of the grid.
        shape: np.ndarray (3,)
            number of grid points along each axis as written on lines 4-6.
        axes: np.ndarray (3,3)
            step vector of each axis.

    """
    title: str
    comment: str
    natom: int
    origin: np.ndarray
    shape: np.ndarray
    axes: np.ndarray

    @property
    def header_length(self) -> int:
        return HEADER_BASE_LINES + abs(self.natom)

def open_cube(cube_path: Path, mode: str = 'r') -> TextIOWrapper:
    # newline='' keeps CRLF line endings of copied header lines
    return open(cube_path, mode, encoding=ENCODING, newline='')

def get_header_length(cube_path: Path) -> int:
    # A negative atom count is a format flag, only the magnitude counts atom lines
    with open_cube(cube_path) as fd:
        lines = list(islice(fd, 3))

    words = lines[2].split() if len(lines) == 3 else []
    try:
        natom = int(words[0])
    except (IndexError, ValueError):
        raise ValueError(f'Could not determine header length from {cube_path}.') from None

    return HEADER_BASE_LINES + abs(natom)

# Adapted from the deformation density reader, stops before the atom lines
def read_cube_header(f: TextIOWrapper) -> CubeHeader:
    title = f.readline().strip()
    comment = f.readline().strip()

    def read_grid_line(line: str) -> Tuple[int, np.ndarray]:
        """Read a count and a vector from one of lines 3-6"""
        words = line.split()
        if len(words) < 4:
            raise ValueError(f'Malformed cube header line: {line.strip()!r}')
        return (
            int(words[0]),
            np.array([float(words[1]), float(words[2]), float(words[3])], float)
        )

    natom, origin = read_grid_line(f.readline())
    shape0, axis0 = read_grid_line(f.readline())
    shape1, axis1 = read_grid_line(f.readline())
    shape2, axis2 = read_grid_line(f.readline())

    return CubeHeader(title=title, comment=comment, natom=natom, origin=origin,
                      shape=np.array([shape0, shape1, shape2], int),
                      axes=np.array([axis0, axis1, axis2]))

def get_cube_header(cube_path: Path) -> CubeHeader:
    with open_cube(cube_path) as fd:
        return read_cube_header(fd)

def read_header_lines(f: TextIOWrapper, nhead: int) -> List[str]:
    return list(islice(f, nhead))

def parse_values(line: str) -> np.ndarray:
    return np.array(line.split(), dtype=float)

def format_value(value: float) -> str:
    return VALUE_FORMAT % value

def format_line(values: Iterable[float]) -> str:
    return ''.join(format_value(v) for v in values) + '\n'

def keep_sign(values: np.ndarray, positive: bool) -> np.ndarray:
    """
    Zero every value not strictly of the requested sign

    Parameters
    ----------

        values: np.ndarray
            grid values of one data line.
        positive: bool
            keep values > 0 when True, values < 0 otherwise.

    Returns
    -------

        np.ndarray of the same shape, excluded values replaced by 0.0
    """
    mask = values > 0 if positive else values < 0
    return np.where(mask, values, 0.0)
