#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
pwvariants: Near-miss Password Candidate Generator

Features:
- Every candidate within N edits (substitution, deletion, insertion) of a password
- Adjacent and near character transpositions (offsets 1-3)
- Single password (-p) or line-delimited passwords on stdin (--stdin)
- Candidate count mode for sizing a hashcat/JtR run before generating it
- Output sorted by number of typeable characters

Output grows roughly as (len * 94) ** max_distance. Distances above 2 are
impractical for anything but very short passwords; nothing here caps them.
"""
import argparse
import logging
import os
import signal
import sys
from pathlib import Path
from typing import Iterable, List, Optional, Set, TextIO

from tqdm import tqdm as _tqdm

# =============================================
# PROGRESS BAR
# =============================================
def progress(it, **kw):
    # stdout is reserved for candidates
    return _tqdm(it, file=sys.stderr, **kw) if sys.stderr.isatty() else it

# =============================================
# CONFIGURATION
# =============================================
# Printable ASCII from '!' (0x21) to '~' (0x7E) inclusive: 94 characters
ALPHABET = "".join(chr(c) for c in range(0x21, 0x7F))

# Transposition offsets never exceed this, whatever the transposition distance
MAX_TRANSPOSITION_OFFSET = 3

# Default distances (overridden by PWVARIANTS_* environment variables, then the command line)
DEFAULT_MAX_DISTANCE = 2
DEFAULT_TRANSPOSITION_DISTANCE = 0

# Above this edit distance the candidate set explodes; warn but never cap
DISTANCE_WARN_THRESHOLD = 2

# Characters counted as typeable for output ordering
TYPEABLE_SYMBOLS = "!\"#$%&'()*+,-./:;<=>?@[\\]^_`{|}~"

# =============================================
# Logging
# =============================================
logging.basicConfig(
    level=logging.INFO,
    format="[%(asctime)s] %(message)s",
    datefmt="%H:%M:%S"
)
log = logging.getLogger(__name__)

def sigint_handler(signum, frame):
    log.warning("\nInterrupted by user, exiting cleanly")
    sys.exit(0)


class InputError(Exception):
    """No usable password source (missing option or unreadable stdin)."""


# =============================================
# DISTANCE-1 EXPANSION
# =============================================
def expand(password: str) -> Set[str]:
    """
    Return every string exactly one edit away from password.

    Edits are substitution with any other ALPHABET character, deletion of
    one character, and insertion of any ALPHABET character at any of the
    len + 1 insertion points. An empty password yields the 94 single
    characters.
    """
    variations = set()
    length = len(password)

    # 1. Substitutions
    for i in range(length):
        head, current, tail = password[:i], password[i], password[i + 1:]
        for c in ALPHABET:
            if c != current:
                variations.add(head + c + tail)

    # 2. Deletions
    for i in range(length):
        variations.add(password[:i] + password[i + 1:])

    # 3. Insertions (before each character and after the last)
    for i in range(length + 1):
        head, tail = password[:i], password[i:]
        for c in ALPHABET:
            variations.add(head + c + tail)

    return variations

# =============================================
# TRANSPOSITIONS
# =============================================
def transpose(password: str, offset: int) -> List[str]:
    """
    Swap every pair of characters that are offset positions apart.

    Returns len - offset variants, one per starting index, or an empty list
    when offset >= len. offset must be at least 1.
    """
    variants = []
    for i in range(len(password) - offset):
        j = i + offset
        variants.append(
            password[:i] + password[j] + password[i + 1:j] + password[i] + password[j + 1:]
        )
    return variants

# =============================================
# VARIATION GENERATOR
# =============================================
def generate(password: str, max_distance: int = DEFAULT_MAX_DISTANCE,
             transposition_distance: int = DEFAULT_TRANSPOSITION_DISTANCE) -> Set[str]:
    """
    Build the full candidate set for one password.

    Edit levels are expanded breadth-first: each level runs expand() over the
    previous level's frontier only. Transpositions are then applied to a
    snapshot of the edit candidates, so a transposed string is never
    transposed again.

    The result always contains the original password.
    """
    variations = {password}
    frontier = {password}

    for _ in range(max_distance):
        next_frontier = set()
        for candidate in frontier:
            next_frontier.update(expand(candidate))
        frontier = next_frontier
        variations.update(frontier)

    snapshot = list(variations)
    for level in range(1, transposition_distance + 1):
        max_offset = min(level, MAX_TRANSPOSITION_OFFSET)
        for offset in range(1, max_offset + 1):
            for candidate in snapshot:
                if len(candidate) > offset:
                    variations.update(transpose(candidate, offset))

    return variations

# =============================================
# OUTPUT HELPERS
# =============================================
def count_typeable_chars(text: str) -> int:
    """Count ASCII alphanumerics and common symbols in text"""
    return sum(
        1 for c in text
        if (c.isascii() and c.isalnum()) or c in TYPEABLE_SYMBOLS
    )

def collect_candidates(passwords: Iterable[str], max_distance: int,
                       transposition_distance: int,
                       include_original: bool = False) -> List[str]:
    """
    Generate candidates for every password, ordered by typeable character count.

    Candidates are not deduplicated across passwords. Within a password the
    set is sorted first so ties come out in a stable order.
    """
    candidates: List[str] = []
    for pwd in progress(passwords, desc="passwords", leave=False):
        if include_original:
            candidates.append(pwd)
        candidates.extend(sorted(generate(pwd, max_distance, transposition_distance)))
    candidates.sort(key=count_typeable_chars)
    return candidates

def count_candidates(passwords: Iterable[str], max_distance: int,
                     transposition_distance: int,
                     include_original: bool = False) -> int:
    """Sum candidate set sizes over every password, plus one per original when included"""
    total = 0
    for pwd in progress(passwords, desc="passwords", leave=False):
        if include_original:
            total += 1
        total += len(generate(pwd, max_distance, transposition_distance))
    return total

# =============================================
# INPUT
# =============================================
def read_passwords(stream: TextIO) -> List[str]:
    """Read one password per line, trimming whitespace and skipping blank lines"""
    passwords = []
    try:
        for line in stream:
            pwd = line.strip()
            if pwd:
                passwords.append(pwd)
    except (OSError, UnicodeDecodeError) as e:
        raise InputError(f"Error reading from stdin: {e}") from e
    return passwords

def resolve_passwords(password: Optional[str], use_stdin: bool,
                      stream: Optional[TextIO] = None) -> List[str]:
    if password is not None:
        return [password]
    if use_stdin:
        return read_passwords(stream if stream is not None else sys.stdin)
    raise InputError("No password provided. Use -p or --stdin")

# =============================================
# CLI
# =============================================
def non_negative_int(value: str) -> int:
    number = int(value)
    if number < 0:
        raise argparse.ArgumentTypeError(f"must be >= 0, got {number}")
    return number

def build_parser() -> argparse.ArgumentParser:
    # string defaults so argparse runs non_negative_int on environment values too
    max_distance = os.environ.get("PWVARIANTS_MAX_DISTANCE", str(DEFAULT_MAX_DISTANCE))
    transposition_distance = os.environ.get("PWVARIANTS_TRANSPOSITION_DISTANCE",
                                            str(DEFAULT_TRANSPOSITION_DISTANCE))
    parser = argparse.ArgumentParser(
        description="pwvariants: near-miss password candidates for hashcat/JtR"
    )
    parser.add_argument("-p", "--password", help="Input password to generate variations from")
    parser.add_argument("--stdin", action="store_true", help="Read passwords from stdin, one per line")
    parser.add_argument("-m", "--max-distance", type=non_negative_int, default=max_distance,
                        help=f"Maximum edit distance (default: {max_distance})")
    parser.add_argument("-t", "--transposition-distance", type=non_negative_int,
                        default=transposition_distance,
                        help=f"Transposition distance, offsets up to {MAX_TRANSPOSITION_OFFSET} "
                             f"(default: {transposition_distance})")
    parser.add_argument("-i", "--include-original", action="store_true",
                        help="Include the original password in the output")
    parser.add_argument("-c", "--count", action="store_true",
                        help="Print only the number of candidates")
    parser.add_argument("-o", "--output", type=Path, default=None,
                        help="Write candidates to a file instead of stdout")
    parser.add_argument("-q", "--quiet", action="store_true", help="Only log warnings and errors")
    return parser

def main(argv: Optional[List[str]] = None) -> int:
    signal.signal(signal.SIGINT, sigint_handler)
    args = build_parser().parse_args(argv)
    if args.quiet:
        log.setLevel(logging.WARNING)

    try:
        passwords = resolve_passwords(args.password, args.stdin)
    except InputError as e:
        log.error(f"Error: {e}")
        sys.exit(1)

    log.info(f"Loaded {len(passwords):,} password(s)")
    if args.max_distance > DISTANCE_WARN_THRESHOLD:
        log.warning(f"Edit distance {args.max_distance} grows combinatorially; "
                    f"expect a very large candidate set")

    if args.count:
        total = count_candidates(passwords, args.max_distance,
                                 args.transposition_distance, args.include_original)
        print(total)
        return 0

    candidates = collect_candidates(passwords, args.max_distance,
                                    args.transposition_distance, args.include_original)
    if args.output is not None:
        try:
            args.output.write_text("".join(f"{c}\n" for c in candidates), encoding="utf-8")
        except OSError as e:
            log.error(f"Could not write {args.output}: {e}")
            sys.exit(1)
        log.info(f" → {args.output.name} ({len(candidates):,} lines)")
    else:
        out = sys.stdout
        for candidate in candidates:
            out.write(f"{candidate}\n")
        out.flush()
        log.info(f"Wrote {len(candidates):,} candidates")
    return 0

if __name__ == "__main__":
    sys.exit(main())
