#!/usr/bin/env python
"""
Wordle solver, by information theory.

By the wordle-solver authors, from 2026-10-19.

Each round, every dictionary word is scored by the entropy of the feedback
("match pattern") it would provoke across the words still possible, weighted
by a prior that prefers common words. Either the most informative word is
proposed (``MaximizeEntropy``), or the word minimizing the expected number of
guesses to finish (``MinimizeScore``), the latter using a calibration curve
learned from simulated games.

The word list should contain five-letter words, one per line, ordered from
most to least common. Make one from an OS dictionary with:

.. code-block:: bash

    ./wordle_solver.py make_wordlist --source_dict /usr/share/dict/words

Run self-tests with:

.. code-block:: bash

    pip install pytest
    pytest wordle_solver.py

Generate calibration data (one CSV shard per worker, in ``train/``), then
evaluate the calibrated policy (shards in ``test/``):

.. code-block:: bash

    ./wordle_solver.py train --nproc 8
    ./wordle_solver.py merge --kind train
    ./wordle_solver.py curve --output train/bucketed_entropy.csv
    ./wordle_solver.py test --nproc 8

Then play, entering the game's feedback for each suggested guess as five
characters: ``M`` (match), ``P`` (present elsewhere), ``N`` (no match).

.. code-block:: bash

    ./wordle_solver.py play

Feedback rules, for words with repeated letters: exact matches use up their
letter first; remaining copies of a letter are then marked "present elsewhere",
left to right, only while the target still has unused copies of it.

"""  # noqa

# =============================================================================
# Imports
# =============================================================================

import argparse
from collections import defaultdict
from concurrent.futures import ProcessPoolExecutor, as_completed
from contextlib import contextmanager
import csv
from enum import Enum
import glob
import logging
import math
from multiprocessing import cpu_count
import os
import re
from statistics import median, mean
import sys
import tempfile
from timeit import default_timer as timer
from typing import (
    Dict, Generator, Iterable, Iterator, List, NamedTuple, Optional, Sequence,
    Set, Tuple
)
import unittest
from unittest import mock

from colors import color  # pip install ansicolors
from cardinal_pythonlib.logs import (
    configure_logger_for_colour,
    main_only_quicksetup_rootlogger,
)
from cardinal_pythonlib.maths_py import round_sf
import numpy as np
import ray
from ray.exceptions import RayError

rootlog = logging.getLogger(__name__)


# =============================================================================
# Constants
# =============================================================================

# Paths
THIS_DIR = os.path.dirname(os.path.abspath(__file__))
DEFAULT_OS_DICT = "/usr/share/dict/words"
DEFAULT_WORDLIST = os.path.join(THIS_DIR, "words_5_letters.txt")

# Defining the game
WORDLEN = 5
N_LETTERS = 26
N_OUTCOMES = 3  # absent, present elsewhere, exact
N_PATTERNS = N_OUTCOMES ** WORDLEN  # 243
N_GUESSES = 6
PLACE_VALUES = tuple(N_OUTCOMES ** pos for pos in range(WORDLEN))

# Regular expressions to read from files or the user
WORD_REGEX = re.compile(rf"[A-Z]{{{WORDLEN}}}", re.IGNORECASE | re.ASCII)
CHAR_EXACT = "M"
CHAR_PRESENT_ELSEWHERE = "P"
CHAR_ABSENT = "N"
FEEDBACK_REGEX = re.compile(
    rf"[{CHAR_EXACT}{CHAR_PRESENT_ELSEWHERE}{CHAR_ABSENT}]{{{WORDLEN}}}",
    re.IGNORECASE
)

# Colours and styles for displaying feedback, via the ansicolors package
COLOUR_ABSENT = dict(fg="white", bg="black", style="bold")
COLOUR_PRESENT_ELSEWHERE = dict(fg="white", bg="yellow", style="bold")
COLOUR_EXACT = dict(fg="white", bg="green", style="bold")

# Prior: logistic in dictionary rank
DEFAULT_PRIOR_MIDPOINT = 1500.0
DEFAULT_PRIOR_STEEPNESS = 0.05

# Calibration curve
DEFAULT_BUCKET_WIDTH = 0.2

# Simulation
DEFAULT_MAX_SECRETS = 1500
DEFAULT_NPROC = cpu_count()
SHARD_HEADER = ["secret_idx", "entropy", "moves_remaining"]
OUTCOME_HEADER = ["secret_idx", "n_guesses", "solved"]
CURVE_HEADER = ["entropy_bucket_centre", "avg_moves_remaining"]

# Display
DEFAULT_SHOW_THRESHOLD = 20
DEFAULT_SIG_FIGURES = 3

EXIT_FAILURE = 1


# =============================================================================
# Enums
# =============================================================================

class CharFeedback(Enum):
    """
    Possible types of feedback about each character. The values are the
    base-3 digits used to number match patterns.
    """
    ABSENT = 0
    PRESENT_ELSEWHERE = 1
    EXACT = 2

    @property
    def plain_str(self) -> str:
        """
        Plain string representation.
        """
        if self == CharFeedback.ABSENT:
            return CHAR_ABSENT
        elif self == CharFeedback.PRESENT_ELSEWHERE:
            return CHAR_PRESENT_ELSEWHERE
        elif self == CharFeedback.EXACT:
            return CHAR_EXACT
        else:
            raise AssertionError("bug")

    @classmethod
    def from_char(cls, f_char: str) -> "CharFeedback":
        """
        Inverse of :attr:`plain_str`.
        """
        f_char = f_char.upper()
        if f_char == CHAR_ABSENT:
            return cls.ABSENT
        elif f_char == CHAR_PRESENT_ELSEWHERE:
            return cls.PRESENT_ELSEWHERE
        elif f_char == CHAR_EXACT:
            return cls.EXACT
        raise InvalidFeedbackFormat(
            f"Invalid feedback character {f_char!r}. Use only "
            f"{CHAR_EXACT}, {CHAR_PRESENT_ELSEWHERE}, {CHAR_ABSENT}."
        )


class Policy(Enum):
    """
    How to choose the next guess.
    """
    MAXIMIZE_ENTROPY = "MaximizeEntropy"
    MINIMIZE_SCORE = "MinimizeScore"


class SessionStatus(Enum):
    """
    Where a solver session stands.

    - FRESH: nothing guessed yet.
    - PROPOSING: feedback applied; the next guess has yet to be chosen.
    - AWAITING_FEEDBACK: a guess has been proposed.
    - SOLVED: a single candidate remains.
    - EXHAUSTED: the session's guess limit is used up, with several
      candidates still standing.
    """
    FRESH = "fresh"
    PROPOSING = "proposing"
    AWAITING_FEEDBACK = "awaiting_feedback"
    SOLVED = "solved"
    EXHAUSTED = "exhausted"


class RunKind(Enum):
    """
    Types of simulation run, which differ in policy and in where their output
    goes.
    """
    TRAIN = "train"
    TEST = "test"

    @property
    def file_prefix(self) -> str:
        if self == RunKind.TRAIN:
            return "training"
        elif self == RunKind.TEST:
            return "testing"
        else:
            raise AssertionError("bug")

    def shard_filename(self, directory: str, worker_id: int) -> str:
        """
        The CSV file owned by a single worker.
        """
        return os.path.join(directory,
                            f"{self.file_prefix}_data.{worker_id}.csv")

    def shard_glob(self, directory: str) -> str:
        """
        Matches all worker shards in the directory, but not the merged file.
        """
        return os.path.join(directory, f"{self.file_prefix}_data.*.csv")

    def merged_filename(self, directory: str) -> str:
        return os.path.join(directory, f"{self.file_prefix}_data.csv")

    def outcome_filename(self, directory: str, worker_id: int) -> str:
        """
        One row per game played by a single worker: guesses taken, and
        whether the secret was found.
        """
        return os.path.join(directory,
                            f"{self.file_prefix}_outcomes.{worker_id}.csv")

    def outcome_glob(self, directory: str) -> str:
        return os.path.join(directory, f"{self.file_prefix}_outcomes.*.csv")


DEFAULT_TRAINING_GLOB = RunKind.TRAIN.shard_glob(RunKind.TRAIN.value)


# =============================================================================
# Exceptions
# =============================================================================

class WordleSolverError(Exception):
    """
    Base class for errors reported to the operator.
    """
    pass


class DictionaryLoadError(WordleSolverError):
    """
    The word list could not be read.
    """
    pass


class InvalidWordLength(WordleSolverError, ValueError):
    """
    Not a word of exactly WORDLEN letters.
    """
    pass


class InvalidFeedbackFormat(WordleSolverError, ValueError):
    """
    Feedback that is not WORDLEN characters of the feedback alphabet.
    """
    pass


class EmptyOrZeroWeightCandidateSet(WordleSolverError):
    """
    A match-pattern distribution was requested over no candidates, or over
    candidates whose weights sum to zero.
    """
    pass


class NoConsistentCandidate(WordleSolverError):
    """
    Feedback that no remaining candidate could have produced.
    """
    pass


class CalibrationCurveUnavailable(WordleSolverError):
    """
    There is no (usable) training data for the calibration curve.
    """
    pass


class NoGuessAvailable(WordleSolverError):
    """
    Every dictionary word has already been guessed.
    """
    pass


class WorkerBatchError(WordleSolverError):
    """
    One or more simulation workers failed.
    """
    pass


# =============================================================================
# Helper functions
# =============================================================================

# -----------------------------------------------------------------------------
# Formatting
# -----------------------------------------------------------------------------

def colourful_char(x: str, feedback: CharFeedback) -> str:
    """
    Returns a string with ANSI codes to colour the character according to the
    feedback (and then reset afterwards).
    """
    if feedback == CharFeedback.ABSENT:
        colour_params = COLOUR_ABSENT
    elif feedback == CharFeedback.PRESENT_ELSEWHERE:
        colour_params = COLOUR_PRESENT_ELSEWHERE
    elif feedback == CharFeedback.EXACT:
        colour_params = COLOUR_EXACT
    else:
        raise AssertionError("bug")
    return color(x, **colour_params)


def colourful_match(word: str, match: Sequence[CharFeedback]) -> str:
    return "".join(colourful_char(c, f) for c, f in zip(word, match))


def prettylist(words: Iterable[object]) -> str:
    """
    Formats a wordlist.
    """
    return ", ".join(str(x) for x in words)


def convert_sf(x: Optional[float],
               sig_fig: int = DEFAULT_SIG_FIGURES) -> Optional[float]:
    """
    Formats things to a certain number of significant figures.
    """
    if x is None or not math.isfinite(x):
        return x
    return round_sf(x, sig_fig)


# -----------------------------------------------------------------------------
# Timing
# -----------------------------------------------------------------------------

@contextmanager
def time_section(name: str,
                 loglevel: int = logging.DEBUG) -> Generator[None, None, None]:
    start = timer()
    try:
        yield
    finally:
        end = timer()
        rootlog.log(loglevel, f"{name} took {end - start} s")


# =============================================================================
# Words
# =============================================================================

def letter_index(letter: str) -> int:
    """
    A -> 0, B -> 1, ... Z -> 25.
    """
    return ord(letter) - ord("A")


class WordEncoding:
    """
    A word as its letters by position, plus a count of each letter.
    Immutable; equal to another encoding if the letters are the same.
    """
    __slots__ = ("positions", "frequencies")

    def __init__(self, word: str) -> None:
        """
        Args:
            word: a word of WORDLEN letters, in any case
        """
        if not isinstance(word, str) or not WORD_REGEX.fullmatch(word):
            raise InvalidWordLength(
                f"Not a {WORDLEN}-letter word: {word!r}"
            )
        positions = tuple(word.upper())
        frequencies = [0] * N_LETTERS
        for letter in positions:
            frequencies[letter_index(letter)] += 1
        self.positions = positions  # type: Tuple[str, ...]
        self.frequencies = tuple(frequencies)  # type: Tuple[int, ...]

    @property
    def word(self) -> str:
        return "".join(self.positions)

    def __str__(self) -> str:
        return self.word

    def __repr__(self) -> str:
        return f"WordEncoding({self.word!r})"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, WordEncoding):
            return NotImplemented
        return self.positions == other.positions

    def __hash__(self) -> int:
        return hash(self.positions)


def encode(word: str) -> WordEncoding:
    """
    Encodes a word. Raises :exc:`InvalidWordLength` for anything other than
    WORDLEN letters.
    """
    return WordEncoding(word)


def decode(encoding: WordEncoding) -> str:
    return encoding.word


# -----------------------------------------------------------------------------
# Reading word lists
# -----------------------------------------------------------------------------

def make_wordlist(from_filename: str,
                  to_filename: str) -> None:
    """
    Reads a dictionary file and creates a list of 5-letter words, keeping
    the source's order (which should be most common first).
    """
    rootlog.info(f"Reading from {from_filename}")
    rootlog.info(f"Writing to {to_filename}")
    n_read = 0
    n_written = 0
    seen = set()  # type: Set[str]
    try:
        with open(from_filename, "rt") as f, open(to_filename, "wt") as t:
            for line in f:
                n_read += 1
                word = line.strip()
                if WORD_REGEX.fullmatch(word):
                    uppercase_word = word.upper()
                    if uppercase_word not in seen:
                        t.write(uppercase_word + "\n")
                        seen.add(uppercase_word)
                        n_written += 1
    except (OSError, UnicodeDecodeError) as e:
        raise DictionaryLoadError(
            f"Cannot make word list from {from_filename!r}: {e}") from e
    rootlog.info(f"Read {n_read} words from {from_filename}")
    rootlog.info(f"Wrote {n_written} ({WORDLEN}-letter) words to "
                 f"{to_filename}")


def read_words(wordlist_filename: str,
               max_n: int = None) -> List[str]:
    """
    Read all words from our pre-filtered wordlist, in file order.
    Blank lines are ignored.
    """
    words = []  # type: List[str]
    try:
        with open(wordlist_filename) as f:
            for line in f:
                word = line.strip()
                if not word:
                    continue
                words.append(word)
                if max_n is not None and len(words) >= max_n:
                    rootlog.warning(f"Reading only {len(words)} words")
                    break
    except (OSError, UnicodeDecodeError) as e:
        raise DictionaryLoadError(
            f"Error opening dictionary {wordlist_filename!r}: {e}") from e
    if not words:
        raise DictionaryLoadError(f"No words in {wordlist_filename!r}")
    return words


class Dictionary:
    """
    All words in the game, most common first. A word's index is its rank.

    Alongside the encodings we keep numpy arrays of letter codes (n, WORDLEN)
    and letter counts (n, N_LETTERS), for computing feedback in bulk.
    """
    def __init__(self, words: Iterable[str]) -> None:
        encodings = []  # type: List[WordEncoding]
        seen = set()  # type: Set[WordEncoding]
        for word in words:
            encoding = encode(word)
            if encoding in seen:
                rootlog.warning(f"Ignoring duplicate word {encoding}")
                continue
            seen.add(encoding)
            encodings.append(encoding)
        self.encodings = tuple(encodings)
        self.letters = np.array(
            [[letter_index(c) for c in e.positions] for e in encodings],
            dtype=np.uint8
        ).reshape(-1, WORDLEN)
        self.frequencies = np.array(
            [e.frequencies for e in encodings],
            dtype=np.uint8
        ).reshape(-1, N_LETTERS)
        self._index = {
            e: i for i, e in enumerate(encodings)
        }  # type: Dict[WordEncoding, int]

    @classmethod
    def from_file(cls, wordlist_filename: str,
                  max_n: int = None) -> "Dictionary":
        dictionary = cls(read_words(wordlist_filename, max_n=max_n))
        rootlog.info(f"Loaded dictionary with {len(dictionary)} words")
        return dictionary

    def __len__(self) -> int:
        return len(self.encodings)

    def __getitem__(self, index: int) -> WordEncoding:
        return self.encodings[index]

    def __iter__(self) -> Iterator[WordEncoding]:
        return iter(self.encodings)

    def index_of(self, word: str) -> Optional[int]:
        return self._index.get(encode(word))

    def pattern_matrix(self) -> np.ndarray:
        """
        Returns an (n, n) array whose element [g, s] is the pattern index of
        the feedback for guess g against secret s.
        """
        n = len(self)
        matrix = np.empty((n, n), dtype=np.uint8)
        with time_section(f"Pattern matrix for {n} words"):
            for g in range(n):
                matrix[g] = pattern_codes(self.letters[g], self.letters,
                                          self.frequencies)
        return matrix


# =============================================================================
# Match patterns
# =============================================================================

MATCH_RESULT_TYPE = Tuple[CharFeedback, ...]


def match_result(guess: WordEncoding,
                 secret: WordEncoding) -> MATCH_RESULT_TYPE:
    """
    The feedback given for a guess, if this is the secret.

    Exact matches are marked first, each using up one copy of its letter from
    the secret. Then, working from the left, a letter in the wrong place is
    marked "present elsewhere" only if the secret has a copy of it left over;
    otherwise it is "absent". For example, guessing AABCC against AEXXA gives
    exact, present elsewhere, absent, absent, absent.
    """
    result = [CharFeedback.ABSENT] * WORDLEN
    remaining = list(secret.frequencies)
    for pos in range(WORDLEN):
        if guess.positions[pos] == secret.positions[pos]:
            result[pos] = CharFeedback.EXACT
            remaining[letter_index(guess.positions[pos])] -= 1
    for pos in range(WORDLEN):
        if result[pos] == CharFeedback.EXACT:
            continue
        idx = letter_index(guess.positions[pos])
        if remaining[idx] > 0:
            result[pos] = CharFeedback.PRESENT_ELSEWHERE
            remaining[idx] -= 1
    return tuple(result)


def pattern_codes(guess_letters: np.ndarray,
                  letters: np.ndarray,
                  frequencies: np.ndarray) -> np.ndarray:
    """
    As for :func:`match_result`, but for one guess against many secrets at
    once, returning pattern indices (see :func:`pattern_index`).

    Args:
        guess_letters: letter codes of the guess, shape (WORDLEN,)
        letters: letter codes of the secrets, shape (n, WORDLEN)
        frequencies: letter counts of the secrets, shape (n, N_LETTERS)
    """
    remaining = frequencies.astype(np.int16)  # copies
    exact = letters == guess_letters
    for pos in range(WORDLEN):
        remaining[exact[:, pos], guess_letters[pos]] -= 1
    codes = np.zeros(letters.shape[0], dtype=np.int16)
    for pos in range(WORDLEN):
        letter = guess_letters[pos]
        elsewhere = ~exact[:, pos] & (remaining[:, letter] > 0)
        remaining[elsewhere, letter] -= 1
        codes += PLACE_VALUES[pos] * (
            CharFeedback.EXACT.value * exact[:, pos] +
            CharFeedback.PRESENT_ELSEWHERE.value * elsewhere
        ).astype(np.int16)
    return codes.astype(np.uint8)


def pattern_index(match: Sequence[CharFeedback]) -> int:
    """
    Numbers a match pattern in [0, N_PATTERNS): the feedback values are
    base-3 digits, least significant first.
    """
    if len(match) != WORDLEN:
        raise InvalidFeedbackFormat(
            f"Match pattern must have {WORDLEN} elements, not {len(match)}")
    return sum(f.value * p for f, p in zip(match, PLACE_VALUES))


def match_from_index(index: int) -> MATCH_RESULT_TYPE:
    if not 0 <= index < N_PATTERNS:
        raise ValueError(f"Pattern index out of range: {index}")
    return tuple(
        CharFeedback((index // p) % N_OUTCOMES) for p in PLACE_VALUES
    )


def feedback_from_str(feedback_str: str) -> MATCH_RESULT_TYPE:
    """
    Create coded feedback from a string such as "MPNPN".
    """
    feedback_str = feedback_str.strip().upper()
    if not FEEDBACK_REGEX.fullmatch(feedback_str):
        raise InvalidFeedbackFormat(
            f"Feedback must be exactly {WORDLEN} characters "
            f"({CHAR_EXACT}/{CHAR_PRESENT_ELSEWHERE}/{CHAR_ABSENT}). "
            f"Got: {feedback_str!r}"
        )
    return tuple(CharFeedback.from_char(c) for c in feedback_str)


def feedback_to_str(match: Sequence[CharFeedback]) -> str:
    return "".join(f.plain_str for f in match)


# =============================================================================
# Distributions and entropy
# =============================================================================

def distribution_from_codes(codes: np.ndarray,
                            weights: np.ndarray) -> np.ndarray:
    """
    Sums candidate weights by pattern index and normalizes, giving the
    probability of each of the N_PATTERNS possible feedbacks.
    """
    if len(codes) == 0:
        raise EmptyOrZeroWeightCandidateSet("No candidates")
    distribution = np.bincount(codes, weights=weights,
                               minlength=N_PATTERNS)
    total = distribution.sum()
    if not total > 0:
        raise EmptyOrZeroWeightCandidateSet(
            f"Candidate weights sum to {total}")
    return distribution / total


def pattern_distribution(
        guess: WordEncoding,
        candidates: Iterable[Tuple[WordEncoding, float]]) -> np.ndarray:
    """
    The match-pattern distribution for a guess, over weighted candidate
    secrets.
    """
    codes = []  # type: List[int]
    weights = []  # type: List[float]
    for candidate, weight in candidates:
        if weight < 0:
            raise ValueError(f"Negative weight {weight} for {candidate}")
        codes.append(pattern_index(match_result(guess, candidate)))
        weights.append(weight)
    return distribution_from_codes(np.array(codes, dtype=np.intp),
                                   np.array(weights, dtype=float))


def entropy(distribution: np.ndarray) -> float:
    """
    Shannon entropy, in bits. Zero-probability buckets contribute nothing.
    """
    p = distribution[distribution > 0]
    return float(-np.sum(p * np.log2(p)))


# =============================================================================
# Calibration curve
# =============================================================================

class Bucket(NamedTuple):
    centre: float  # bucket midpoint (entropy)
    avg_moves: float  # average moves remaining for entropies in this bucket


def load_observations(glob_pattern: str) -> List[Tuple[float, float]]:
    """
    Reads (entropy, moves_remaining) pairs from every CSV shard matching the
    pattern. Each shard has a header row, then rows of
    ``secret_idx, entropy, moves_remaining``.
    """
    filenames = sorted(f for f in glob.glob(glob_pattern)
                       if os.path.isfile(f))
    if not filenames:
        raise CalibrationCurveUnavailable(
            f"No training data matches {glob_pattern!r}")
    observations = []  # type: List[Tuple[float, float]]
    for filename in filenames:
        try:
            with open(filename, newline="") as f:
                reader = csv.reader(f)
                next(reader, None)  # header
                for row in reader:
                    if not row:
                        continue
                    _, entropy_str, moves_str = row
                    e = float(entropy_str)
                    moves = float(moves_str)
                    if not (math.isfinite(e) and math.isfinite(moves)):
                        raise ValueError(f"non-finite value in {row!r}")
                    observations.append((e, moves))
        except (OSError, ValueError) as e:
            raise CalibrationCurveUnavailable(
                f"Unusable training data in {filename!r}: {e}") from e
    rootlog.debug(f"Read {len(observations)} observations from "
                  f"{len(filenames)} files")
    return observations


class CalibrationCurve:
    """
    Maps "entropy still to be removed" (bits) to the expected number of
    further moves, by piecewise-linear interpolation between bucket averages.
    """
    def __init__(self, buckets: Iterable[Bucket]) -> None:
        self.buckets = tuple(sorted(buckets, key=lambda b: b.centre))
        self._centres = np.array([b.centre for b in self.buckets],
                                 dtype=float)
        self._values = np.array([b.avg_moves for b in self.buckets],
                                dtype=float)

    @classmethod
    def build(cls,
              observations: Iterable[Tuple[float, float]],
              bucket_width: float = DEFAULT_BUCKET_WIDTH) \
            -> "CalibrationCurve":
        """
        Buckets (entropy, moves_remaining) observations by
        ``floor(entropy / bucket_width)`` and averages moves_remaining within
        each bucket. No observations gives an empty curve.
        """
        if not bucket_width > 0:
            raise ValueError(f"Bucket width must be positive: {bucket_width}")
        sum_moves = defaultdict(float)  # type: Dict[int, float]
        counts = defaultdict(int)  # type: Dict[int, int]
        for e, moves in observations:
            idx = math.floor(e / bucket_width)
            sum_moves[idx] += moves
            counts[idx] += 1
        return cls(
            Bucket(centre=(idx + 0.5) * bucket_width,
                   avg_moves=total / counts[idx])
            for idx, total in sum_moves.items()
        )

    @classmethod
    def from_training_data(cls,
                           glob_pattern: str = DEFAULT_TRAINING_GLOB,
                           bucket_width: float = DEFAULT_BUCKET_WIDTH) \
            -> "CalibrationCurve":
        curve = cls.build(load_observations(glob_pattern), bucket_width)
        if curve.empty:
            raise CalibrationCurveUnavailable(
                f"Training data matching {glob_pattern!r} has no rows")
        rootlog.info(f"Loaded expected-moves curve with {len(curve)} "
                     f"buckets from {glob_pattern}")
        return curve

    def __len__(self) -> int:
        return len(self.buckets)

    def __str__(self) -> str:
        return prettylist(
            f"{convert_sf(b.centre)}: {convert_sf(b.avg_moves)}"
            for b in self.buckets
        )

    @property
    def empty(self) -> bool:
        return not self.buckets

    def interpolate(self, entropy_remaining: float) -> float:
        """
        Linear interpolation between bucket centres; flat beyond the first
        and last buckets.
        """
        if self.empty:
            raise CalibrationCurveUnavailable("Calibration curve is empty")
        return float(np.interp(entropy_remaining,
                               self._centres, self._values))

    def write_csv(self, filename: str) -> None:
        with open(filename, "wt", newline="") as f:
            writer = csv.writer(f)
            writer.writerow(CURVE_HEADER)
            for b in self.buckets:
                writer.writerow([f"{b.centre:.4f}", f"{b.avg_moves:.4f}"])
        rootlog.info(f"Wrote {len(self)} buckets to {filename}")


def choose_policy(
        requested: Optional[Policy],
        training_glob: str = DEFAULT_TRAINING_GLOB,
        bucket_width: float = DEFAULT_BUCKET_WIDTH) \
        -> Tuple[Policy, Optional[CalibrationCurve]]:
    """
    Picks a policy and, if needed, loads its calibration curve.

    Args:
        requested: a policy, or ``None`` to use
            :attr:`Policy.MINIMIZE_SCORE` whenever training data allows
        training_glob: where to find training data
        bucket_width: calibration curve bucket width

    Without usable training data, we fall back to
    :attr:`Policy.MAXIMIZE_ENTROPY`.
    """
    if requested == Policy.MAXIMIZE_ENTROPY:
        return requested, None
    try:
        curve = CalibrationCurve.from_training_data(training_glob,
                                                    bucket_width)
    except CalibrationCurveUnavailable as e:
        rootlog.warning(f"{e}; using the {Policy.MAXIMIZE_ENTROPY.value} "
                        f"policy")
        return Policy.MAXIMIZE_ENTROPY, None
    return Policy.MINIMIZE_SCORE, curve


# =============================================================================
# Solving
# =============================================================================

class SolverSession:
    """
    Holds what we know in one game, and chooses guesses.

    Typical round: :meth:`step` proposes a guess, then
    :meth:`apply_feedback` narrows the possibilities using the game's
    response.
    """
    def __init__(self,
                 dictionary: Dictionary,
                 policy: Policy = Policy.MAXIMIZE_ENTROPY,
                 curve: Optional[CalibrationCurve] = None,
                 max_guesses: Optional[int] = None,
                 prior_midpoint: float = DEFAULT_PRIOR_MIDPOINT,
                 prior_steepness: float = DEFAULT_PRIOR_STEEPNESS,
                 pattern_matrix: Optional[np.ndarray] = None) -> None:
        """
        Args:
            dictionary: all words, most common first
            policy: how to choose guesses
            curve: calibration curve, needed for
                :attr:`Policy.MINIMIZE_SCORE`
            max_guesses: guess limit, after which the session is
                EXHAUSTED; ``None`` for no limit
            prior_midpoint: rank at which the prior weight halves
            prior_steepness: how sharply the prior weight falls with rank
            pattern_matrix: precomputed result of
                :meth:`Dictionary.pattern_matrix`, if available
        """
        if policy == Policy.MINIMIZE_SCORE and (curve is None or curve.empty):
            rootlog.warning(
                f"No calibration curve; using the "
                f"{Policy.MAXIMIZE_ENTROPY.value} policy instead")
            policy = Policy.MAXIMIZE_ENTROPY
        self.dictionary = dictionary
        self.policy = policy
        self.curve = curve
        self.max_guesses = max_guesses
        if pattern_matrix is None:
            pattern_matrix = dictionary.pattern_matrix()
        self.pattern_matrix = pattern_matrix

        # Log of 1 / (1 + exp(steepness * (rank - midpoint))), which is
        # decreasing in rank. Kept in log space so that a session whose
        # candidates are all rare words still has a usable prior.
        ranks = np.arange(len(dictionary), dtype=float)
        self._log_rank_weights = -np.logaddexp(
            0.0, prior_steepness * (ranks - prior_midpoint))

        # State
        self.prior = np.zeros(len(dictionary))
        self.possibilities = np.arange(len(dictionary), dtype=np.intp)
        self.previous_guesses = []  # type: List[WordEncoding]
        self._guessed = set()  # type: Set[WordEncoding]
        self.status = SessionStatus.FRESH

        # Derived from the state, by step()
        self.current_guess = None  # type: Optional[int]
        self.current_guess_entropy = 0.0
        self.current_expected_score = None  # type: Optional[float]

        self.reset()

    # -------------------------------------------------------------------------
    # State changes
    # -------------------------------------------------------------------------

    def reset(self) -> None:
        """
        Start a new game with the same dictionary.
        """
        self.possibilities = np.arange(len(self.dictionary), dtype=np.intp)
        self.previous_guesses.clear()
        self._guessed.clear()
        self._clear_proposal()
        self.update_prior()
        self._update_status()

    def update_prior(self) -> None:
        """
        Recomputes the prior: a logistic function of rank over the current
        possibilities, zero elsewhere, summing to 1.
        """
        prior = np.zeros(len(self.dictionary))
        if len(self.possibilities) > 0:
            log_weights = self._log_rank_weights[self.possibilities]
            weights = np.exp(log_weights - log_weights.max())
            prior[self.possibilities] = weights / weights.sum()
        self.prior = prior

    def step(self) -> int:
        """
        Chooses the next guess from all words not yet guessed, and returns
        its dictionary index.

        For each word, we compute the distribution of feedback over the
        current possibilities (weighted by the prior) and its entropy. Then:

        - MaximizeEntropy: the highest entropy wins; the earliest (most
          common) word wins ties.
        - MinimizeScore: the lowest expected score wins, where

          .. code-block:: none

            expected score = 1 + (1 - prior) * expected further moves

          and the expected further moves come from the calibration curve at
          the entropy left after this guess. If this word is the answer we
          finish now (the 1); the (1 - prior) factor means implausible words
          have to offer a lot of information to be chosen.
        """
        self._clear_proposal()
        possibilities = self.possibilities
        weights = self.prior[possibilities]
        log2_n_possible = math.log2(len(possibilities))
        best_index = None  # type: Optional[int]
        best_entropy = 0.0
        best_score = math.inf
        with time_section("Choosing guess"):
            for i, encoding in enumerate(self.dictionary):
                if encoding in self._guessed:
                    continue
                codes = self.pattern_matrix[i, possibilities]
                h = entropy(distribution_from_codes(codes, weights))
                if self.policy == Policy.MAXIMIZE_ENTROPY:
                    if best_index is None or h > best_entropy:
                        best_index = i
                        best_entropy = h
                elif self.policy == Policy.MINIMIZE_SCORE:
                    score = 1.0 + (1.0 - self.prior[i]) * \
                        self.curve.interpolate(log2_n_possible - h)
                    if best_index is None or score < best_score:
                        best_index = i
                        best_entropy = h
                        best_score = score
                else:
                    raise AssertionError("bug")
        if best_index is None:
            raise NoGuessAvailable("Every word has been guessed already")
        self.current_guess = best_index
        self.current_guess_entropy = best_entropy
        if self.policy == Policy.MINIMIZE_SCORE:
            self.current_expected_score = best_score
        self.status = SessionStatus.AWAITING_FEEDBACK
        return best_index

    def consistent_with(self, guess_index: int,
                        observed: Sequence[CharFeedback]) -> np.ndarray:
        """
        The current possibilities that would give this feedback to this
        guess.
        """
        codes = self.pattern_matrix[guess_index, self.possibilities]
        return self.possibilities[codes == pattern_index(observed)]

    def apply_feedback(self, observed: Sequence[CharFeedback]) -> None:
        """
        Narrows the possibilities using the feedback for the proposed guess.
        If nothing is consistent with it, raises
        :exc:`NoConsistentCandidate` and leaves the session as it was.
        """
        if self.current_guess is None:
            raise ValueError("No guess has been proposed; call step() first")
        remaining = self.consistent_with(self.current_guess, observed)
        if len(remaining) == 0:
            raise NoConsistentCandidate(
                f"No remaining word gives the feedback "
                f"{feedback_to_str(observed)} for {self.proposed_word}")
        guess = self.dictionary[self.current_guess]
        self.previous_guesses.append(guess)
        self._guessed.add(guess)
        self.possibilities = remaining
        self.update_prior()
        self._clear_proposal()
        self._update_status()

    def _clear_proposal(self) -> None:
        self.current_guess = None
        self.current_guess_entropy = 0.0
        self.current_expected_score = None

    def _update_status(self) -> None:
        if len(self.possibilities) == 1:
            self.status = SessionStatus.SOLVED
        elif (self.max_guesses is not None and
                len(self.previous_guesses) >= self.max_guesses):
            self.status = SessionStatus.EXHAUSTED
        elif not self.previous_guesses:
            self.status = SessionStatus.FRESH
        else:
            self.status = SessionStatus.PROPOSING

    # -------------------------------------------------------------------------
    # Info
    # -------------------------------------------------------------------------

    @property
    def n_possible(self) -> int:
        return len(self.possibilities)

    @property
    def possible_words(self) -> List[str]:
        return [self.dictionary[i].word for i in self.possibilities]

    @property
    def proposed_word(self) -> Optional[str]:
        if self.current_guess is None:
            return None
        return self.dictionary[self.current_guess].word

    @property
    def solution(self) -> Optional[str]:
        """
        The answer, once only one possibility is left.
        """
        if self.status != SessionStatus.SOLVED:
            return None
        return self.dictionary[self.possibilities[0]].word

    def __str__(self) -> str:
        return "\n".join([
            f"- Policy: {self.policy.value}. Status: {self.status.value}.",
            f"- Number of possible words: {self.n_possible}.",
            f"- Guesses so far: {prettylist(self.previous_guesses) or '-'}",
        ])


# -----------------------------------------------------------------------------
# Interactive solver
# -----------------------------------------------------------------------------

def read_feedback_from_user() -> MATCH_RESULT_TYPE:
    """
    Reads one line of feedback. Malformed feedback is not retried.
    """
    feedback_str = input(
        f"Enter the feedback ({CHAR_EXACT!r} match, "
        f"{CHAR_PRESENT_ELSEWHERE!r} present elsewhere, "
        f"{CHAR_ABSENT!r} no match; e.g. MPNPN): "
    )
    return feedback_from_str(feedback_str)


def solve_interactive(
        wordlist_filename: str = DEFAULT_WORDLIST,
        policy: Optional[Policy] = None,
        training_glob: str = DEFAULT_TRAINING_GLOB,
        bucket_width: float = DEFAULT_BUCKET_WIDTH,
        show_threshold: int = DEFAULT_SHOW_THRESHOLD,
        debug_nwords: int = None) -> str:
    """
    Suggest guesses, read the game's feedback, and repeat until only one word
    is possible. Returns that word.
    """
    rootlog.info("Wordle solver.")
    policy, curve = choose_policy(policy, training_glob, bucket_width)
    dictionary = Dictionary.from_file(wordlist_filename, max_n=debug_nwords)
    session = SolverSession(dictionary, policy=policy, curve=curve)
    while session.status != SessionStatus.SOLVED:
        n_before = session.n_possible
        session.step()
        rootlog.info(
            f"Guess: {session.proposed_word}. "
            f"Expected #guesses: "
            f"{convert_sf(session.current_expected_score)}. "
            f"Expected entropy reduction: "
            f"{convert_sf(session.current_guess_entropy)} bits. "
            f"Remaining possibilities: {n_before}."
        )
        observed = read_feedback_from_user()
        guess = session.proposed_word
        session.apply_feedback(observed)
        actual_reduction = math.log2(n_before) - math.log2(session.n_possible)
        rootlog.info(
            f"Clue: {colourful_match(guess, observed)}. "
            f"New remaining possibilities: {session.n_possible}. "
            f"Actual entropy reduction: {convert_sf(actual_reduction)} bits."
        )
        if 1 < session.n_possible <= show_threshold:
            rootlog.info(
                f"Possibilities: {prettylist(session.possible_words)}")
    solution = session.solution
    rootlog.info(f"Solution found: {solution}")
    return solution


# =============================================================================
# Simulation: generating calibration data
# =============================================================================

def worker_secret_indices(worker_id: int, n_workers: int,
                          n_secrets: int) -> List[int]:
    """
    The secrets a worker is responsible for: secret i belongs to worker
    ``i % n_workers``.
    """
    if n_workers < 1:
        raise ValueError(f"Need at least one worker, not {n_workers}")
    if not 0 <= worker_id < n_workers:
        raise ValueError(f"Bad worker ID {worker_id} for {n_workers} workers")
    return list(range(worker_id, n_secrets, n_workers))


def autosolve(
        session: SolverSession,
        secret_index: int,
        log: logging.Logger = None) -> Tuple[List[float], SessionStatus]:
    """
    Plays one game against a known secret, until solved or out of guesses.

    Returns the entropy (log2 of the number of possibilities) before each
    guess, whose length is the number of guesses made, and the final status
    (``SOLVED`` or ``EXHAUSTED``).
    """
    log = log or rootlog
    secret = session.dictionary[secret_index]
    session.reset()
    entropies = []  # type: List[float]
    while True:
        entropies.append(math.log2(session.n_possible))
        guess_index = session.step()
        session.apply_feedback(
            match_result(session.dictionary[guess_index], secret))
        if session.status in (SessionStatus.SOLVED, SessionStatus.EXHAUSTED):
            break
    log.debug(f"Word {secret}: {session.status.value} after "
              f"{len(entropies)} guesses: "
              f"{prettylist(session.previous_guesses)}")
    return entropies, session.status


def guesses_to_win(session: SolverSession, secret_index: int) -> int:
    """
    Guesses needed to win a finished game: those made, plus one if the secret
    is known but has not been played yet.
    """
    n_guesses = len(session.previous_guesses)
    if (session.status == SessionStatus.SOLVED and
            session.previous_guesses[-1] != session.dictionary[secret_index]):
        n_guesses += 1
    return n_guesses


def run_worker(kind: RunKind,
               worker_id: int,
               n_workers: int,
               wordlist_filename: str = DEFAULT_WORDLIST,
               output_dir: str = None,
               max_secrets: int = DEFAULT_MAX_SECRETS,
               max_guesses: int = N_GUESSES,
               training_glob: str = DEFAULT_TRAINING_GLOB,
               bucket_width: float = DEFAULT_BUCKET_WIDTH,
               log: logging.Logger = None) -> str:
    """
    Simulates games for this worker's share of the secrets, appending
    ``secret_idx, entropy, moves_remaining`` rows to its own CSV shard.
    Returns the shard filename.

    Training runs use the pure entropy policy; test runs use the calibrated
    policy, built from the training shards, if they can.
    """
    log = log or rootlog
    output_dir = output_dir or kind.value
    os.makedirs(output_dir, exist_ok=True)
    shard_filename = kind.shard_filename(output_dir, worker_id)
    if kind == RunKind.TRAIN:
        policy, curve = Policy.MAXIMIZE_ENTROPY, None
    elif kind == RunKind.TEST:
        policy, curve = choose_policy(None, training_glob, bucket_width)
    else:
        raise AssertionError("bug")
    dictionary = Dictionary.from_file(wordlist_filename)
    session = SolverSession(dictionary, policy=policy, curve=curve,
                            max_guesses=max_guesses)
    secrets = worker_secret_indices(worker_id, n_workers,
                                    min(max_secrets, len(dictionary)))
    log.info(f"Worker {worker_id} of {n_workers}: {len(secrets)} secrets, "
             f"policy {policy.value}, writing to {shard_filename}")
    outcome_filename = kind.outcome_filename(output_dir, worker_id)
    n_solved = 0
    with open(shard_filename, "a", newline="") as f, \
            open(outcome_filename, "a", newline="") as outcome_f:
        writer = csv.writer(f)
        if f.tell() == 0:
            writer.writerow(SHARD_HEADER)
        outcome_writer = csv.writer(outcome_f)
        if outcome_f.tell() == 0:
            outcome_writer.writerow(OUTCOME_HEADER)
        for secret_index in secrets:
            entropies, status = autosolve(session, secret_index, log=log)
            n_guesses = len(entropies)
            for step, e in enumerate(entropies):
                writer.writerow([secret_index, e, n_guesses - step])
            solved = status == SessionStatus.SOLVED
            n_solved += solved
            outcome_writer.writerow([
                secret_index, guesses_to_win(session, secret_index),
                int(solved)
            ])
            f.flush()  # bounds the loss if we are killed
            outcome_f.flush()
    log.info(f"Worker {worker_id} of {n_workers}: solved {n_solved} of "
             f"{len(secrets)} secrets")
    return shard_filename


@ray.remote
def run_worker_ray(kind: RunKind,
                   worker_id: int,
                   n_workers: int,
                   loglevel: int = logging.INFO,
                   **kwargs) -> str:
    """
    Ray version of :func:`run_worker`.
    """
    raylog = logging.getLogger(__name__)
    configure_logger_for_colour(raylog, level=loglevel)
    return run_worker(kind, worker_id, n_workers, log=raylog, **kwargs)


def run_batch(kind: RunKind,
              nproc: int = DEFAULT_NPROC,
              use_ray: bool = True,
              loglevel: int = logging.INFO,
              **worker_kwargs) -> List[str]:
    """
    Runs one worker per process (at most one per CPU) and waits for them all.
    Returns the shard filenames.

    If any worker fails, raises :exc:`WorkerBatchError` once the others have
    finished; their shards are left in place.
    """
    n_cpus = cpu_count()
    n_workers = n_cpus if nproc < 1 else min(nproc, n_cpus)
    rootlog.info(f"Spawning {n_workers} {kind.value} workers")
    shards = []  # type: List[str]
    failed = []  # type: List[int]
    if use_ray:
        rootlog.info("Starting Ray")
        ray.init(num_cpus=n_workers)
        try:
            job_workers = {
                run_worker_ray.remote(kind, worker_id, n_workers,
                                      loglevel=loglevel, **worker_kwargs):
                    worker_id
                for worker_id in range(n_workers)
            }
            pending_jobs = list(job_workers.keys())
            while len(pending_jobs):
                rootlog.debug(f"Waiting for a worker to complete "
                              f"({len(pending_jobs)} running)...")
                done_jobs, pending_jobs = ray.wait(pending_jobs)
                for done_job in done_jobs:
                    worker_id = job_workers[done_job]
                    try:
                        shards.append(ray.get(done_job))
                    except RayError as e:
                        rootlog.error(f"Worker {worker_id} failed: {e}")
                        failed.append(worker_id)
        finally:
            ray.shutdown()
    else:
        with ProcessPoolExecutor(n_workers) as executor:
            future_workers = {
                executor.submit(run_worker, kind, worker_id, n_workers,
                                **worker_kwargs): worker_id
                for worker_id in range(n_workers)
            }
            for future in as_completed(future_workers):
                worker_id = future_workers[future]
                try:
                    shards.append(future.result())
                except Exception as e:  # re-raised below, for the batch
                    rootlog.error(f"Worker {worker_id} failed: {e!r}")
                    failed.append(worker_id)
    if failed:
        raise WorkerBatchError(
            f"{len(failed)} of {n_workers} {kind.value} workers failed "
            f"(IDs {prettylist(sorted(failed))}); completed shards: "
            f"{prettylist(sorted(shards)) or 'none'}")
    return sorted(shards)


# -----------------------------------------------------------------------------
# Shard files
# -----------------------------------------------------------------------------

class GameOutcome(NamedTuple):
    n_guesses: int  # guesses needed to win, or made before giving up
    solved: bool


class PerformanceSummary(NamedTuple):
    n_games: int
    min: int
    median: float
    mean: float
    max: int
    prop_success: float  # won within N_GUESSES


def read_outcomes(glob_pattern: str) -> Dict[int, GameOutcome]:
    """
    Reads the outcome of each game from the outcome files; if a secret was
    played more than once, the last game counts.
    """
    outcomes = {}  # type: Dict[int, GameOutcome]
    for filename in sorted(glob.glob(glob_pattern)):
        try:
            with open(filename, newline="") as f:
                for row in csv.DictReader(f):
                    outcomes[int(row["secret_idx"])] = GameOutcome(
                        n_guesses=int(row["n_guesses"]),
                        solved=bool(int(row["solved"])),
                    )
        except (OSError, KeyError, ValueError) as e:
            raise WordleSolverError(
                f"Unusable game outcomes in {filename!r}: {e!r}") from e
    return outcomes


def summarise_shards(glob_pattern: str) -> Optional[PerformanceSummary]:
    """
    Reports performance statistics across all games in the outcome files.
    """
    outcomes = list(read_outcomes(glob_pattern).values())
    if not outcomes:
        rootlog.warning(f"No results in {glob_pattern}")
        return None
    guess_counts = [o.n_guesses for o in outcomes]
    n_success = sum(
        1 for o in outcomes if o.solved and o.n_guesses <= N_GUESSES
    )
    summary = PerformanceSummary(
        n_games=len(outcomes),
        min=min(guess_counts),
        median=median(guess_counts),
        mean=mean(guess_counts),
        max=max(guess_counts),
        prop_success=n_success / len(outcomes),
    )
    rootlog.info(
        f"Across {summary.n_games} words: "
        f"min {summary.min}, "
        f"median {summary.median}, "
        f"mean {convert_sf(summary.mean)}, "
        f"max {summary.max} guesses; "
        f"solved within {N_GUESSES}: {n_success} "
        f"({convert_sf(100 * summary.prop_success)}%)"
    )
    return summary


def merge_shards(glob_pattern: str, output_filename: str) -> int:
    """
    Concatenates shards into one CSV file with a single header row.
    Returns the number of data rows written.
    """
    output_abspath = os.path.abspath(output_filename)
    filenames = [
        f for f in sorted(glob.glob(glob_pattern))
        if os.path.abspath(f) != output_abspath
    ]
    if not filenames:
        raise WordleSolverError(f"No shard files match {glob_pattern!r}")
    n_rows = 0
    with open(output_filename, "wt", newline="") as out:
        writer = csv.writer(out)
        writer.writerow(SHARD_HEADER)
        for filename in filenames:
            with open(filename, newline="") as f:
                reader = csv.reader(f)
                next(reader, None)  # header
                for row in reader:
                    if row:
                        writer.writerow(row)
                        n_rows += 1
    rootlog.info(f"Merged {len(filenames)} shards into {output_filename}: "
                 f"{n_rows} data rows")
    return n_rows


# =============================================================================
# Self-testing
# =============================================================================

TOY_WORDS = ["CRANE", "SLATE", "TRACE", "CRATE", "GRATE"]
ATCH_WORDS = ["BATCH", "CATCH", "HATCH", "LATCH", "MATCH", "PATCH", "WATCH"]
PAIR_WORDS = [
    "CRANE", "SLATE", "SPEED", "ERASE", "HONOR", "HUMOR", "EERIE", "PAUSE",
    "LEPER", "AABCC", "AEXXA", "GEESE", "LLAMA", "ALLOT",
]


def _write_wordlist(directory: str, words: Iterable[str],
                    name: str = "words.txt") -> str:
    filename = os.path.join(directory, name)
    with open(filename, "wt") as f:
        for word in words:
            f.write(word + "\n")
    return filename


def _play(session: SolverSession, secret: str) -> List[str]:
    """
    Plays to the end against a known secret; returns the guesses made.
    """
    target = encode(secret)
    while session.status not in (SessionStatus.SOLVED,
                                 SessionStatus.EXHAUSTED):
        guess_index = session.step()
        session.apply_feedback(
            match_result(session.dictionary[guess_index], target))
    return [g.word for g in session.previous_guesses]


class TestWordEncoding(unittest.TestCase):
    def test_encode(self) -> None:
        e = encode("geese")
        self.assertEqual(e.positions, ("G", "E", "E", "S", "E"))
        self.assertEqual(e.frequencies[letter_index("E")], 3)
        self.assertEqual(e.frequencies[letter_index("G")], 1)
        self.assertEqual(sum(e.frequencies), WORDLEN)
        self.assertEqual(decode(e), "GEESE")

    def test_equality(self) -> None:
        self.assertEqual(encode("crane"), encode("CRANE"))
        self.assertEqual(hash(encode("crane")), hash(encode("CRANE")))
        self.assertNotEqual(encode("CRANE"), encode("CRATE"))

    def test_invalid(self) -> None:
        for bad in ["CRAN", "CRANES", "CR4NE", "", "CRANE\n"]:
            with self.assertRaises(InvalidWordLength):
                encode(bad)


class TestMatchResult(unittest.TestCase):
    def _check(self, guess: str, secret: str, expected: str) -> None:
        ours = feedback_to_str(match_result(encode(guess), encode(secret)))
        assert ours == expected, (
            f"For secret {secret} and guess {guess}, our code produces "
            f"{ours}, but the correct feedback is {expected}."
        )

    def test_duplicate_letters(self) -> None:
        # The first A uses up one of the secret's two As; the second A takes
        # the other, so there is none left for anything else.
        self._check(guess="AABCC", secret="AEXXA", expected="MPNNN")
        # Two Es in the guess, two in the secret, neither in place.
        self._check(guess="SPEED", secret="ERASE", expected="PNPPN")
        # The first O is "no", not "somewhere else".
        self._check(guess="HONOR", secret="HUMOR", expected="MNNMM")
        # Three Es; the one in place uses the only E.
        self._check(guess="EERIE", secret="PAUSE", expected="NNNNM")
        # Only the first E gets "elsewhere".
        self._check(guess="LEPER", secret="PAUSE", expected="NPPNN")

    def test_exact_count(self) -> None:
        for g in PAIR_WORDS:
            for s in PAIR_WORDS:
                match = match_result(encode(g), encode(s))
                n_exact = sum(1 for f in match if f == CharFeedback.EXACT)
                n_same = sum(1 for a, b in zip(g, s) if a == b)
                self.assertEqual(n_exact, n_same, f"{g} vs {s}")

    def test_bulk_agrees(self) -> None:
        d = Dictionary(PAIR_WORDS)
        matrix = d.pattern_matrix()
        for g in range(len(d)):
            for s in range(len(d)):
                self.assertEqual(
                    int(matrix[g, s]),
                    pattern_index(match_result(d[g], d[s])),
                    f"{d[g]} vs {d[s]}"
                )

    def test_pattern_index(self) -> None:
        self.assertEqual(pattern_index(feedback_from_str("NNNNN")), 0)
        self.assertEqual(pattern_index(feedback_from_str("MMMMM")),
                         N_PATTERNS - 1)
        self.assertEqual(pattern_index(feedback_from_str("PNNNN")), 1)
        self.assertEqual(pattern_index(feedback_from_str("NMNNN")), 6)
        self.assertEqual(feedback_to_str(match_from_index(6)), "NMNNN")
        with self.assertRaises(InvalidFeedbackFormat):
            pattern_index((CharFeedback.EXACT, ) * (WORDLEN + 1))

    def test_feedback_parsing(self) -> None:
        self.assertEqual(
            feedback_from_str(" mpnpn "),
            (CharFeedback.EXACT, CharFeedback.PRESENT_ELSEWHERE,
             CharFeedback.ABSENT, CharFeedback.PRESENT_ELSEWHERE,
             CharFeedback.ABSENT)
        )
        for bad in ["MPNP", "MPNPNM", "MPNPX", "=-_-_"]:
            with self.assertRaises(InvalidFeedbackFormat):
                feedback_from_str(bad)


class TestDistribution(unittest.TestCase):
    def test_sums_to_one(self) -> None:
        guess = encode("CRANE")
        candidates = [(encode(w), 1.0 / (i + 1))
                      for i, w in enumerate(PAIR_WORDS)]
        d = pattern_distribution(guess, candidates)
        self.assertEqual(len(d), N_PATTERNS)
        self.assertAlmostEqual(float(d.sum()), 1.0)
        self.assertGreaterEqual(entropy(d), 0.0)

    def test_entropy_values(self) -> None:
        # Both candidates give the same feedback: nothing learned.
        d = pattern_distribution(encode("ZZZZZ"),
                                 [(encode("CRANE"), 0.3),
                                  (encode("SLATE"), 0.7)])
        self.assertEqual(entropy(d), 0.0)
        # Two equiprobable, distinguishable candidates: one bit.
        d = pattern_distribution(encode("CRANE"),
                                 [(encode("CRANE"), 2.0),
                                  (encode("SLATE"), 2.0)])
        self.assertAlmostEqual(entropy(d), 1.0)
        uniform = np.full(N_PATTERNS, 1.0 / N_PATTERNS)
        self.assertAlmostEqual(entropy(uniform), math.log2(N_PATTERNS))

    def test_empty_or_zero_weight(self) -> None:
        with self.assertRaises(EmptyOrZeroWeightCandidateSet):
            pattern_distribution(encode("CRANE"), [])
        with self.assertRaises(EmptyOrZeroWeightCandidateSet):
            pattern_distribution(encode("CRANE"),
                                 [(encode("SLATE"), 0.0),
                                  (encode("TRACE"), 0.0)])


class TestCalibrationCurve(unittest.TestCase):
    OBSERVATIONS = [(3.9, 1), (0.2, 4), (1.5, 3), (0.7, 2)]

    def test_build(self) -> None:
        curve = CalibrationCurve.build(self.OBSERVATIONS, bucket_width=1.0)
        self.assertEqual(curve.buckets, (
            Bucket(0.5, 3.0), Bucket(1.5, 3.0), Bucket(3.5, 1.0)
        ))
        self.assertTrue(CalibrationCurve.build([]).empty)
        with self.assertRaises(ValueError):
            CalibrationCurve.build(self.OBSERVATIONS, bucket_width=0)

    def test_interpolate(self) -> None:
        curve = CalibrationCurve.build(self.OBSERVATIONS, bucket_width=1.0)
        self.assertEqual(curve.interpolate(0.5), 3.0)
        self.assertEqual(curve.interpolate(3.5), 1.0)
        self.assertEqual(curve.interpolate(-10.0), 3.0)
        self.assertEqual(curve.interpolate(100.0), 1.0)
        self.assertAlmostEqual(curve.interpolate(2.5), 2.0)
        self.assertAlmostEqual(curve.interpolate(3.0), 1.5)

    def test_single_and_empty(self) -> None:
        curve = CalibrationCurve.build([(2.2, 4)], bucket_width=1.0)
        self.assertEqual(curve.interpolate(0.0), 4.0)
        self.assertEqual(curve.interpolate(99.0), 4.0)
        with self.assertRaises(CalibrationCurveUnavailable):
            CalibrationCurve([]).interpolate(1.0)

    def test_training_data(self) -> None:
        with tempfile.TemporaryDirectory() as tmpdir:
            pattern = os.path.join(tmpdir, "training_data.*.csv")
            with self.assertRaises(CalibrationCurveUnavailable):
                CalibrationCurve.from_training_data(pattern)
            for i, rows in enumerate([[(0, 0.2, 4), (0, 1.5, 3)],
                                      [(1, 0.7, 2)]]):
                with open(os.path.join(tmpdir, f"training_data.{i}.csv"),
                          "wt", newline="") as f:
                    writer = csv.writer(f)
                    writer.writerow(SHARD_HEADER)
                    writer.writerows(rows)
            curve = CalibrationCurve.from_training_data(pattern, 1.0)
            self.assertEqual(curve.buckets,
                             (Bucket(0.5, 3.0), Bucket(1.5, 3.0)))
            curve_filename = os.path.join(tmpdir, "bucketed.csv")
            curve.write_csv(curve_filename)
            with open(curve_filename, newline="") as f:
                rows = list(csv.reader(f))
            self.assertEqual(rows[0], CURVE_HEADER)
            self.assertEqual(rows[1], ["0.5000", "3.0000"])
            with open(os.path.join(tmpdir, "training_data.2.csv"), "wt") as f:
                f.write("secret_idx,entropy,moves_remaining\n0,oops\n")
            with self.assertRaises(CalibrationCurveUnavailable):
                CalibrationCurve.from_training_data(pattern)
            policy, curve = choose_policy(None, pattern)
            self.assertEqual(policy, Policy.MAXIMIZE_ENTROPY)
            self.assertIsNone(curve)


class TestSolverSession(unittest.TestCase):
    def test_prior(self) -> None:
        session = SolverSession(Dictionary(ATCH_WORDS),
                                prior_midpoint=3, prior_steepness=1.0)
        prior = session.prior
        self.assertAlmostEqual(float(prior.sum()), 1.0)
        self.assertTrue(all(prior[i] > prior[i + 1]
                            for i in range(len(prior) - 1)))
        session.step()
        session.apply_feedback(
            match_result(session.dictionary[session.current_guess],
                         encode("MATCH")))
        outside = [i for i in range(len(prior))
                   if i not in set(session.possibilities)]
        self.assertTrue(outside)
        self.assertTrue(all(session.prior[i] == 0 for i in outside))
        self.assertAlmostEqual(float(session.prior.sum()), 1.0)

    def test_prior_for_rare_words(self) -> None:
        # Every weight underflows if computed directly.
        session = SolverSession(Dictionary(TOY_WORDS),
                                prior_midpoint=0, prior_steepness=1000.0)
        self.assertFalse(np.isnan(session.prior).any())
        self.assertAlmostEqual(float(session.prior.sum()), 1.0)

    def test_converges(self) -> None:
        for words in (TOY_WORDS, ATCH_WORDS):
            d = Dictionary(words)
            matrix = d.pattern_matrix()
            for secret in words:
                session = SolverSession(d, pattern_matrix=matrix)
                guesses = _play(session, secret)
                self.assertEqual(session.status, SessionStatus.SOLVED)
                self.assertEqual(session.solution, secret)
                self.assertLessEqual(len(guesses), len(words))
                self.assertEqual(len(guesses), len(set(guesses)))

    def test_first_guess(self) -> None:
        # CRANE separates all five; the most common of the best wins.
        session = SolverSession(Dictionary(TOY_WORDS))
        self.assertEqual(session.status, SessionStatus.FRESH)
        session.step()
        self.assertEqual(session.proposed_word, "CRANE")
        self.assertEqual(session.status, SessionStatus.AWAITING_FEEDBACK)
        self.assertAlmostEqual(session.current_guess_entropy,
                               math.log2(len(TOY_WORDS)))

    def test_idempotent_filter(self) -> None:
        session = SolverSession(Dictionary(ATCH_WORDS))
        guess_index = session.step()
        observed = match_result(session.dictionary[guess_index],
                                encode("WATCH"))
        session.apply_feedback(observed)
        self.assertEqual(session.status, SessionStatus.PROPOSING)
        before = list(session.possibilities)
        self.assertEqual(list(session.consistent_with(guess_index, observed)),
                         before)

    def test_no_consistent_candidate(self) -> None:
        session = SolverSession(Dictionary(TOY_WORDS))
        guess_index = session.step()
        seen = set(int(c) for c in
                   session.pattern_matrix[guess_index, session.possibilities])
        impossible = next(i for i in range(N_PATTERNS) if i not in seen)
        with self.assertRaises(NoConsistentCandidate):
            session.apply_feedback(match_from_index(impossible))
        self.assertEqual(session.n_possible, len(TOY_WORDS))
        self.assertEqual(session.status, SessionStatus.AWAITING_FEEDBACK)

    def test_apply_without_step(self) -> None:
        session = SolverSession(Dictionary(TOY_WORDS))
        with self.assertRaises(ValueError):
            session.apply_feedback(feedback_from_str("MMMMM"))

    def test_apply_wrong_length_feedback(self) -> None:
        session = SolverSession(Dictionary(TOY_WORDS))
        session.step()
        with self.assertRaises(InvalidFeedbackFormat):
            session.apply_feedback(feedback_from_str("MMMMM")[:3])
        self.assertEqual(session.status, SessionStatus.AWAITING_FEEDBACK)
        self.assertEqual(session.n_possible, len(TOY_WORDS))

    def test_exhausted_and_reset(self) -> None:
        session = SolverSession(Dictionary(ATCH_WORDS), max_guesses=1)
        _play(session, "MATCH")
        self.assertEqual(session.status, SessionStatus.EXHAUSTED)
        self.assertIsNone(session.solution)
        self.assertGreater(session.n_possible, 1)
        session.reset()
        self.assertEqual(session.status, SessionStatus.FRESH)
        self.assertEqual(session.n_possible, len(ATCH_WORDS))
        self.assertEqual(session.previous_guesses, [])

    def test_no_guess_available(self) -> None:
        session = SolverSession(Dictionary(["CRANE"]))
        self.assertEqual(session.status, SessionStatus.SOLVED)
        session.step()
        session.apply_feedback(feedback_from_str("MMMMM"))
        with self.assertRaises(NoGuessAvailable):
            session.step()

    def test_secret_outside_dictionary(self) -> None:
        # DITCH gives NNMMM to every word here, which no candidate would.
        session = SolverSession(Dictionary(ATCH_WORDS))
        guess_index = session.step()
        with self.assertRaises(NoConsistentCandidate):
            session.apply_feedback(
                match_result(session.dictionary[guess_index],
                             encode("DITCH")))

    def test_minimize_score(self) -> None:
        d = Dictionary(ATCH_WORDS)
        curve = CalibrationCurve.build([(0.5, 1), (1.5, 2), (2.5, 3)], 1.0)
        session = SolverSession(d, policy=Policy.MINIMIZE_SCORE, curve=curve)
        self.assertEqual(session.policy, Policy.MINIMIZE_SCORE)
        g = session.step()
        expected = 1.0 + (1.0 - session.prior[g]) * curve.interpolate(
            math.log2(session.n_possible) - session.current_guess_entropy)
        self.assertAlmostEqual(session.current_expected_score, expected)
        _play(session, "PATCH")
        self.assertEqual(session.solution, "PATCH")

    def test_minimize_score_fallback(self) -> None:
        session = SolverSession(Dictionary(TOY_WORDS),
                                policy=Policy.MINIMIZE_SCORE, curve=None)
        self.assertEqual(session.policy, Policy.MAXIMIZE_ENTROPY)


class TestDictionary(unittest.TestCase):
    def test_load(self) -> None:
        with tempfile.TemporaryDirectory() as tmpdir:
            filename = _write_wordlist(
                tmpdir, ["crane", "", "SLATE", "Crane", "trace"])
            d = Dictionary.from_file(filename)
            self.assertEqual([e.word for e in d], ["CRANE", "SLATE", "TRACE"])
            self.assertEqual(d.index_of("trace"), 2)
            self.assertIsNone(d.index_of("GRATE"))
            with self.assertRaises(DictionaryLoadError):
                Dictionary.from_file(os.path.join(tmpdir, "missing.txt"))
            with self.assertRaises(InvalidWordLength):
                Dictionary.from_file(_write_wordlist(tmpdir, ["CRANES"],
                                                     name="bad.txt"))

    def test_make_wordlist(self) -> None:
        with tempfile.TemporaryDirectory() as tmpdir:
            source = _write_wordlist(
                tmpdir, ["crane", "it's", "Crane", "bananas", "apple"],
                name="source.txt")
            target = os.path.join(tmpdir, "target.txt")
            make_wordlist(source, target)
            self.assertEqual(read_words(target), ["CRANE", "APPLE"])


class TestWorkers(unittest.TestCase):
    def test_partition(self) -> None:
        for n_secrets in (1, 7, 20):
            for n_workers in range(1, n_secrets + 1):
                assigned = []  # type: List[int]
                for worker_id in range(n_workers):
                    assigned.extend(worker_secret_indices(
                        worker_id, n_workers, n_secrets))
                self.assertEqual(sorted(assigned), list(range(n_secrets)))
        with self.assertRaises(ValueError):
            worker_secret_indices(3, 3, 10)
        with self.assertRaises(ValueError):
            worker_secret_indices(0, 0, 10)

    def test_run_worker(self) -> None:
        with tempfile.TemporaryDirectory() as tmpdir:
            wordlist = _write_wordlist(tmpdir, ATCH_WORDS)
            train_dir = os.path.join(tmpdir, "train")
            for _ in range(2):  # second run appends
                shard = run_worker(RunKind.TRAIN, 0, 2,
                                   wordlist_filename=wordlist,
                                   output_dir=train_dir)
            self.assertEqual(shard, RunKind.TRAIN.shard_filename(train_dir, 0))
            with open(shard, newline="") as f:
                rows = list(csv.reader(f))
            self.assertEqual(rows[0], SHARD_HEADER)
            self.assertNotIn(SHARD_HEADER, rows[1:])
            secrets = set(int(r[0]) for r in rows[1:])
            self.assertEqual(secrets, {0, 2, 4, 6})
            outcomes = read_outcomes(RunKind.TRAIN.outcome_glob(train_dir))
            self.assertEqual(set(outcomes.keys()), {0, 2, 4, 6})
            # Seven near-identical words: each guess rules out only itself
            self.assertTrue(all(o.solved for o in outcomes.values()))
            self.assertTrue(all(1 <= o.n_guesses <= len(ATCH_WORDS)
                                for o in outcomes.values()))
            curve = CalibrationCurve.from_training_data(
                RunKind.TRAIN.shard_glob(train_dir))
            self.assertFalse(curve.empty)
            summary = summarise_shards(RunKind.TRAIN.outcome_glob(train_dir))
            self.assertEqual(summary.n_games, 4)

            # A test run uses the training data
            test_dir = os.path.join(tmpdir, "test")
            run_worker(RunKind.TEST, 0, 1,
                       wordlist_filename=wordlist,
                       output_dir=test_dir,
                       training_glob=RunKind.TRAIN.shard_glob(train_dir))
            self.assertEqual(
                set(read_outcomes(RunKind.TEST.outcome_glob(test_dir))),
                set(range(len(ATCH_WORDS))))

            merged = RunKind.TRAIN.merged_filename(train_dir)
            n_rows = merge_shards(RunKind.TRAIN.shard_glob(train_dir), merged)
            self.assertEqual(n_rows, len(rows) - 1)
            with self.assertRaises(WordleSolverError):
                merge_shards(os.path.join(tmpdir, "nothing.*.csv"), merged)

    def test_unsolved_games_are_not_successes(self) -> None:
        with tempfile.TemporaryDirectory() as tmpdir:
            wordlist = _write_wordlist(tmpdir, ATCH_WORDS)
            train_dir = os.path.join(tmpdir, "train")
            run_worker(RunKind.TRAIN, 0, 1,
                       wordlist_filename=wordlist,
                       output_dir=train_dir,
                       max_guesses=1)
            first_guess = SolverSession(Dictionary(ATCH_WORDS)).step()
            outcomes = read_outcomes(RunKind.TRAIN.outcome_glob(train_dir))
            self.assertEqual(len(outcomes), len(ATCH_WORDS))
            for secret_index, outcome in outcomes.items():
                if secret_index == first_guess:
                    self.assertEqual(outcome, GameOutcome(1, True))
                else:
                    self.assertEqual(outcome, GameOutcome(1, False))
            summary = summarise_shards(RunKind.TRAIN.outcome_glob(train_dir))
            self.assertEqual(summary.n_games, len(ATCH_WORDS))
            self.assertEqual(summary.max, 1)
            self.assertAlmostEqual(summary.prop_success, 1 / len(ATCH_WORDS))

    def test_malformed_outcomes(self) -> None:
        with tempfile.TemporaryDirectory() as tmpdir:
            filename = RunKind.TEST.outcome_filename(tmpdir, 0)
            with open(filename, "wt", newline="") as f:
                writer = csv.writer(f)
                writer.writerow(OUTCOME_HEADER)
                writer.writerow([0, "many", 1])
            with self.assertRaises(WordleSolverError):
                summarise_shards(RunKind.TEST.outcome_glob(tmpdir))
            with open(filename, "wt", newline="") as f:
                f.write("secret_idx,entropy\n0,1.5\n")
            with self.assertRaises(WordleSolverError):
                read_outcomes(RunKind.TEST.outcome_glob(tmpdir))
        self.assertIsNone(summarise_shards(os.path.join(tmpdir, "*.csv")))

    def test_batch_without_ray(self) -> None:
        with tempfile.TemporaryDirectory() as tmpdir:
            wordlist = _write_wordlist(tmpdir, TOY_WORDS)
            shards = run_batch(RunKind.TRAIN, nproc=2, use_ray=False,
                               wordlist_filename=wordlist,
                               output_dir=os.path.join(tmpdir, "train"))
            self.assertEqual(len(shards), min(2, cpu_count()))
            with self.assertRaises(WorkerBatchError):
                run_batch(RunKind.TRAIN, nproc=1, use_ray=False,
                          wordlist_filename=os.path.join(tmpdir, "missing"),
                          output_dir=os.path.join(tmpdir, "train"))


class TestInteractive(unittest.TestCase):
    def _solve(self, *feedback: str) -> str:
        with tempfile.TemporaryDirectory() as tmpdir:
            wordlist = _write_wordlist(tmpdir, TOY_WORDS)
            with mock.patch("builtins.input", side_effect=list(feedback)):
                return solve_interactive(
                    wordlist_filename=wordlist,
                    training_glob=os.path.join(tmpdir, "none.*.csv"))

    def test_solves(self) -> None:
        self.assertEqual(self._solve("MMMMM"), "CRANE")
        # CRANE against GRATE
        self.assertEqual(self._solve("NMMNM"), "GRATE")

    def test_bad_feedback(self) -> None:
        with self.assertRaises(InvalidFeedbackFormat):
            self._solve("MMX")

    def test_contradictory_feedback(self) -> None:
        with self.assertRaises(NoConsistentCandidate):
            self._solve("PPPPP")


# =============================================================================
# Command-line entry point
# =============================================================================

def main() -> None:
    # -------------------------------------------------------------------------
    # Arguments
    # -------------------------------------------------------------------------
    parser = argparse.ArgumentParser(
        "Wordle solver, by information theory.",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter
    )
    parser.add_argument(
        "--wordlist_filename", default=DEFAULT_WORDLIST,
        help=f"File containing {WORDLEN}-letter words, most common first"
    )
    parser.add_argument(
        "--verbose", "-v", action="store_true",
        help="Be verbose"
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    def add_curve_args(p: argparse.ArgumentParser) -> None:
        p.add_argument(
            "--training_glob", default=DEFAULT_TRAINING_GLOB,
            help="Training data files for the calibration curve"
        )
        p.add_argument(
            "--bucket_width", type=float, default=DEFAULT_BUCKET_WIDTH,
            help="Calibration curve bucket width (bits)"
        )

    def add_simulation_args(p: argparse.ArgumentParser) -> None:
        p.add_argument(
            "--output_dir", type=str, default=None,
            help="Directory for CSV shards (default: named after the run "
                 "kind)"
        )
        p.add_argument(
            "--max_secrets", type=int, default=DEFAULT_MAX_SECRETS,
            help="Simulate games for this many of the most common words"
        )
        p.add_argument(
            "--max_guesses", type=int, default=N_GUESSES,
            help="Give up a simulated game after this many guesses"
        )
        add_curve_args(p)

    cmd_make = "make_wordlist"
    parser_make = subparsers.add_parser(
        cmd_make,
        help="Make a word list from a dictionary file",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter
    )
    parser_make.add_argument(
        "--source_dict", default=DEFAULT_OS_DICT,
        help="File of all dictionary words, most common first"
    )

    cmd_play = "play"
    parser_play = subparsers.add_parser(
        cmd_play,
        help="Solve interactively",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter
    )
    parser_play.add_argument(
        "--policy", type=str, default="auto",
        choices=["auto"] + [p.value for p in Policy],
        help=f"Guess policy ('auto': {Policy.MINIMIZE_SCORE.value} if there "
             f"is training data, else {Policy.MAXIMIZE_ENTROPY.value})"
    )
    parser_play.add_argument(
        "--show_threshold", type=int, default=DEFAULT_SHOW_THRESHOLD,
        help="Show all possibilities when there are this many or fewer left"
    )
    parser_play.add_argument(
        "--debug_nwords", type=int,
        help="Number of words to load (debugging only)"
    )
    add_curve_args(parser_play)

    cmd_train = RunKind.TRAIN.value
    cmd_test = RunKind.TEST.value
    for cmd, description in (
            (cmd_train, "Generate training data in parallel"),
            (cmd_test, "Evaluate the calibrated policy in parallel")):
        parser_batch = subparsers.add_parser(
            cmd,
            help=description,
            formatter_class=argparse.ArgumentDefaultsHelpFormatter
        )
        parser_batch.add_argument(
            "--nproc", type=int, default=DEFAULT_NPROC,
            help="Number of parallel workers (0 for one per CPU)"
        )
        parser_batch.add_argument(
            "--no_ray", action="store_true",
            help="Use a local process pool rather than Ray"
        )
        add_simulation_args(parser_batch)

    cmd_worker = "worker"
    parser_worker = subparsers.add_parser(
        cmd_worker,
        help="Run a single simulation worker",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter
    )
    parser_worker.add_argument(
        "--kind", type=str, choices=[k.value for k in RunKind],
        default=RunKind.TRAIN.value,
        help="Type of run"
    )
    parser_worker.add_argument(
        "worker_id", type=int,
        help="This worker's ID, from 0"
    )
    parser_worker.add_argument(
        "n_workers", type=int,
        help="Total number of workers"
    )
    add_simulation_args(parser_worker)

    cmd_merge = "merge"
    parser_merge = subparsers.add_parser(
        cmd_merge,
        help="Merge worker shards into one CSV file",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter
    )
    parser_merge.add_argument(
        "--kind", type=str, choices=[k.value for k in RunKind],
        default=RunKind.TRAIN.value,
        help="Type of run"
    )
    parser_merge.add_argument(
        "--output_dir", type=str, default=None,
        help="Directory holding the shards (default: named after the run "
             "kind)"
    )

    cmd_curve = "curve"
    parser_curve = subparsers.add_parser(
        cmd_curve,
        help="Export the calibration curve as CSV",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter
    )
    parser_curve.add_argument(
        "--output", type=str,
        default=os.path.join(RunKind.TRAIN.value, "bucketed_entropy.csv"),
        help="CSV file for (bucket centre, average moves remaining)"
    )
    add_curve_args(parser_curve)

    args = parser.parse_args()

    # -------------------------------------------------------------------------
    # Logging
    # -------------------------------------------------------------------------
    loglevel = logging.DEBUG if args.verbose else logging.INFO
    main_only_quicksetup_rootlogger(level=loglevel)

    # -------------------------------------------------------------------------
    # Act
    # -------------------------------------------------------------------------
    try:
        if args.command == cmd_make:
            make_wordlist(args.source_dict, args.wordlist_filename)
        elif args.command == cmd_play:
            solve_interactive(
                wordlist_filename=args.wordlist_filename,
                policy=None if args.policy == "auto" else Policy(args.policy),
                training_glob=args.training_glob,
                bucket_width=args.bucket_width,
                show_threshold=args.show_threshold,
                debug_nwords=args.debug_nwords,
            )
        elif args.command in (cmd_train, cmd_test, cmd_worker):
            kind = RunKind(args.kind if args.command == cmd_worker
                           else args.command)
            output_dir = args.output_dir or kind.value
            worker_kwargs = dict(
                wordlist_filename=args.wordlist_filename,
                output_dir=output_dir,
                max_secrets=args.max_secrets,
                max_guesses=args.max_guesses,
                training_glob=args.training_glob,
                bucket_width=args.bucket_width,
            )
            if args.command == cmd_worker:
                run_worker(kind, args.worker_id, args.n_workers,
                           **worker_kwargs)
            else:
                run_batch(kind, nproc=args.nproc, use_ray=not args.no_ray,
                          loglevel=loglevel, **worker_kwargs)
                summarise_shards(kind.outcome_glob(output_dir))
        elif args.command == cmd_merge:
            kind = RunKind(args.kind)
            output_dir = args.output_dir or kind.value
            merge_shards(kind.shard_glob(output_dir),
                         kind.merged_filename(output_dir))
        elif args.command == cmd_curve:
            curve = CalibrationCurve.from_training_data(args.training_glob,
                                                        args.bucket_width)
            rootlog.info(f"Curve: {curve}")
            curve.write_csv(args.output)
        else:
            raise AssertionError("argument-parsing bug")
    except WordleSolverError as e:
        rootlog.critical(str(e))
        sys.exit(EXIT_FAILURE)


if __name__ == '__main__':
    main()
