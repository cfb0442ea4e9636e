from cubefile.cube import get_header_length, get_cube_header, read_header_lines, open_cube
from cubefile.cube import parse_values, format_line, keep_sign
from cubefile.params import DiffParams

import numpy as np

import argparse
import sys
from itertools import zip_longest
from pathlib import Path
from typing import Iterator, List, Tuple

HELP_EPILOG = '''Output:
  diff.cube          Contains the header (from file1.cube) and grid differences computed as:
                        (value from file2.cube) - (value from file1.cube)
  diff_positive.cube (if --separate is used): Only positive grid values remain; negative ones set to 0.
  diff_negative.cube (if --separate is used): Only negative grid values remain; positive ones set to 0.
'''

def check_compatible(file1: Path, file2: Path):
    header1, header2 = get_cube_header(file1), get_cube_header(file2)

    if header1.header_length != header2.header_length:
        raise ValueError(f'{file1} has {abs(header1.natom)} atoms but {file2} has {abs(header2.natom)}.')
    if not np.array_equal(header1.shape, header2.shape):
        raise ValueError(f'Grid shapes differ: {tuple(header1.shape)} in {file1}, {tuple(header2.shape)} in {file2}.')

def paired_data_lines(lines1: Iterator[str], lines2: Iterator[str], nhead: int,
                      strict: bool = True) -> Iterator[Tuple[int, np.ndarray, np.ndarray]]:
    """
    Pair the data regions of two cube files line by line

    Yields the line number within the file followed by the parsed values of
    each file. In strict mode mismatched data raises a ValueError, otherwise
    both streams are truncated to the shorter one.
    """
    if not strict:
        for lineno, (line1, line2) in enumerate(zip(lines1, lines2), start=nhead+1):
            values1, values2 = parse_values(line1), parse_values(line2)
            n = min(len(values1), len(values2))
            yield lineno, values1[:n], values2[:n]
        return

    for lineno, (line1, line2) in enumerate(zip_longest(lines1, lines2), start=nhead+1):
        if line1 is None or line2 is None:
            shorter = 'first' if line1 is None else 'second'
            raise ValueError(f'Data of the {shorter} file ends before line {lineno}.')

        values1, values2 = parse_values(line1), parse_values(line2)
        if len(values1) != len(values2):
            raise ValueError(f'Line {lineno} holds {len(values1)} values in the first file '
                             f'but {len(values2)} in the second.')
        yield lineno, values1, values2

def check_outputs(inputs: List[Path], params: DiffParams):
    outputs = [params.diff_path()]
    if params.separate:
        outputs += [params.positive_path(), params.negative_path()]

    resolved = {path.resolve(): path for path in inputs}
    for out_path in outputs:
        if out_path.resolve() in resolved:
            raise ValueError(f'Output {out_path} would overwrite input {resolved[out_path.resolve()]}.')

def cube_difference(file1: Path, file2: Path, params: DiffParams) -> Tuple[Path, int]:
    nhead = get_header_length(file1)
    check_outputs([file1, file2], params)
    if params.strict:
        check_compatible(file1, file2)

    params.output_dir.mkdir(parents=True, exist_ok=True)
    diff_path = params.diff_path()

    with open_cube(file1) as fd1, open_cube(file2) as fd2, open_cube(diff_path, 'w') as out:
        out.writelines(read_header_lines(fd1, nhead))
        read_header_lines(fd2, nhead)

        for _, values1, values2 in paired_data_lines(fd1, fd2, nhead, strict=params.strict):
            out.write(format_line(values2 - values1))

    print(f'Output written to {diff_path}')
    return diff_path, nhead

def _write_sign(diff_path: Path, nhead: int, out_path: Path, positive: bool):
    with open_cube(diff_path) as fd, open_cube(out_path, 'w') as out:
        out.writelines(read_header_lines(fd, nhead))
        for line in fd:
            out.write(format_line(keep_sign(parse_values(line), positive)))

def separate_cube_signs(diff_path: Path, nhead: int, params: DiffParams) -> Tuple[Path, Path]:
    positive_path, negative_path = params.positive_path(), params.negative_path()

    _write_sign(diff_path, nhead, positive_path, positive=True)
    _write_sign(diff_path, nhead, negative_path, positive=False)

    print(f'Additional files written to {positive_path} and {negative_path}')
    return positive_path, negative_path

def run(file1: Path, file2: Path, params: DiffParams) -> List[Path]:
    diff_path, nhead = cube_difference(file1, file2, params)
    if not params.separate:
        return [diff_path]

    positive_path, negative_path = separate_cube_signs(diff_path, nhead, params)
    return [diff_path, positive_path, negative_path]

class _ArgumentParser(argparse.ArgumentParser):
    def hint(self) -> str:
        return f"Try '{self.prog} --help' for more information."

    def error(self, message: str):
        print(f'Error: {message}', file=sys.stderr)
        print(self.hint(), file=sys.stderr)
        sys.exit(1)

def build_parser() -> _ArgumentParser:
    parser = _ArgumentParser(allow_abbrev=False, description='Compute the difference between the volumetric data of two cube files.',
                             epilog=HELP_EPILOG, formatter_class=argparse.RawDescriptionHelpFormatter)
    parser.add_argument('files', nargs='*', metavar='file.cube',
                        help='file1.cube (header and subtrahend) followed by file2.cube (minuend)')
    parser.add_argument('--separate', action='store_true',
                        help='Create two additional cube files: one with positive data (negative set to 0) and one with negative data (positive set to 0).')
    parser.add_argument('--truncate', action='store_true',
                        help='Do not check that the grids line up, truncate to the shorter data instead')
    parser.add_argument('--output-dir', type=str, default='.', help='Directory to write the output files to')
    return parser

def main(argv: List[str] | None = None) -> int:
    parser = build_parser()
    args, extras = parser.parse_known_args(argv)

    for arg in extras:
        if arg.startswith('-'):
            print(f'Unknown option: {arg}', file=sys.stderr)
            print(parser.hint(), file=sys.stderr)
            return 1

    files = args.files + extras
    if len(files) != 2:
        print('Error: Two cube files must be provided.', file=sys.stderr)
        print(parser.hint(), file=sys.stderr)
        return 1

    params = DiffParams(separate=args.separate, strict=not args.truncate, output_dir=Path(args.output_dir))
    try:
        run(Path(files[0]), Path(files[1]), params)
    except (ValueError, OSError) as e:
        print(f'Error: {e}', file=sys.stderr)
        return 1

    return 0

if __name__ == '__main__':
    sys.exit(main())
