"""motionpass -- movement-driven password generation.

Core pieces for turning a stream of pointer-movement ticks into a password,
with live entropy and crack-time estimates: the character pool, random
sources, the estimators, and the generator engine that ties them together.
"""

from __future__ import annotations

import enum
import logging
import math
import random
import secrets
import string
import threading
from dataclasses import dataclass
from typing import Callable, Iterable


logger = logging.getLogger(__name__)

__all__ = [
    "Authorization",
    "CharacterClass",
    "CharacterPool",
    "CopyIndicator",
    "CryptoRandomSource",
    "DEFAULT_CONFIG",
    "DEFAULT_POOL",
    "EngineState",
    "GeneratorConfig",
    "GeneratorEngine",
    "GeneratorState",
    "MovementFeed",
    "PseudoRandomSource",
    "RandomSource",
    "UnknownCharacter",
    "estimate_crack_seconds",
    "estimate_entropy",
    "humanize_seconds",
]


# ── Configuration ──────────────────────────────────────────────────────────


@dataclass(frozen=True)
class GeneratorConfig:
    # Longest password kept; older characters fall off the front.
    max_length: int = 64

    # Attacker guess rate used for crack-time estimates (large cluster).
    guesses_per_second: float = 1e9

    # Seconds the "copied" indicator stays up after a copy.
    copy_reset_delay: float = 2.0


DEFAULT_CONFIG = GeneratorConfig()


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


# ── Character pool ─────────────────────────────────────────────────────────


class UnknownCharacter(ValueError):
    """Raised when a character is not part of the generation alphabet."""


class CharacterClass(enum.Enum):
    LOWER = "lower"
    UPPER = "upper"
    DIGIT = "digits"
    SYMBOL = "symbols"


SYMBOLS = "!@#$%^&*()-_=+[]{};:,.<>?"


class CharacterPool:
    """Disjoint per-class alphabets used for sampling and classification.

    The generation alphabet is the concatenation of the class alphabets in
    declaration order (lower, upper, digits, symbols).
    """

    def __init__(
        self,
        lower: str = string.ascii_lowercase,
        upper: str = string.ascii_uppercase,
        digits: str = string.digits,
        symbols: str = SYMBOLS,
    ) -> None:
        self.alphabets: dict[CharacterClass, str] = {
            CharacterClass.LOWER: lower,
            CharacterClass.UPPER: upper,
            CharacterClass.DIGIT: digits,
            CharacterClass.SYMBOL: symbols,
        }

        self._index: dict[str, CharacterClass] = {}
        for cls, alphabet in self.alphabets.items():
            if not alphabet:
                raise ValueError(f"Alphabet for {cls.value} must not be empty")
            for ch in alphabet:
                if ch in self._index:
                    raise ValueError(
                        f"Character {ch!r} appears in both "
                        f"{self._index[ch].value} and {cls.value}"
                    )
                self._index[ch] = cls

        self.alphabet = "".join(self.alphabets.values())

    def __len__(self) -> int:
        return len(self.alphabet)

    def __contains__(self, char: str) -> bool:
        return char in self._index

    def classify(self, char: str) -> CharacterClass:
        try:
            return self._index[char]
        except KeyError:
            raise UnknownCharacter(f"{char!r} is not in the generation alphabet") from None

    def alphabet_size(self, classes: Iterable[CharacterClass]) -> int:
        """Sum of the alphabet sizes of *classes* (each counted once)."""
        return sum(len(self.alphabets[cls]) for cls in set(classes))

    def sample_char(self, u: float) -> str:
        """Map a uniform sample *u* in [0, 1) onto the generation alphabet."""
        total = len(self.alphabet)
        idx = min(max(math.floor(u * total), 0), total - 1)
        return self.alphabet[idx]


DEFAULT_POOL = CharacterPool()


# ── Random sources ─────────────────────────────────────────────────────────


class RandomSource:
    """Supplies one uniform sample in [0, 1) per call."""

    def sample(self) -> float:
        raise NotImplementedError


class CryptoRandomSource(RandomSource):
    """32-bit draws from the OS CSPRNG, normalised by 2**32.

    If the OS source is unavailable the call quietly falls back to a
    non-cryptographic generator; the caller never sees an error.
    """

    _SCALE = 0xFFFFFFFF + 1

    def __init__(self, fallback: random.Random | None = None) -> None:
        self._fallback = fallback or random.Random()

    def sample(self) -> float:
        try:
            return secrets.randbits(32) / self._SCALE
        except NotImplementedError:
            logger.debug("OS random source unavailable; using fallback generator")
            return self._fallback.random()


class PseudoRandomSource(RandomSource):
    """Seedable non-cryptographic source, for reproducible runs."""

    def __init__(self, seed: int | None = None) -> None:
        self._rng = random.Random(seed)

    def sample(self) -> float:
        return self._rng.random()


# ── Entropy estimate ───────────────────────────────────────────────────────


def estimate_entropy(password: str, pool: CharacterPool = DEFAULT_POOL) -> float:
    """Return the entropy of *password* in bits.

    The pool size counts only the classes that actually appear, i.e. the
    attacker is assumed to know which classes were used.  Characters the
    pool does not know are counted as symbols.
    """
    if not password:
        return 0.0

    used: set[CharacterClass] = set()
    for ch in password:
        try:
            used.add(pool.classify(ch))
        except UnknownCharacter:
            used.add(CharacterClass.SYMBOL)

    size = pool.alphabet_size(used)
    if size == 0:
        return 0.0
    return math.log2(size) * len(password)


# ── Crack-time estimate ────────────────────────────────────────────────────

_UNIT_STEPS = [60, 60, 24, 365]
_UNIT_LABELS = ["s", "m", "h", "d", "y"]

INFINITE_LABEL = "∞"


def estimate_crack_seconds(bits: float, guesses_per_second: float = 1e9) -> float:
    """Seconds needed to exhaust 2**bits guesses at *guesses_per_second*."""
    if guesses_per_second <= 0:
        raise ValueError("guesses_per_second must be positive")
    try:
        combos = 2.0 ** bits
    except OverflowError:
        return math.inf
    return combos / guesses_per_second


def humanize_seconds(seconds: float) -> str:
    """Render *seconds* as a short label such as ``"3.20 h"`` or ``"12 ms"``."""
    if not math.isfinite(seconds):
        return INFINITE_LABEL
    if seconds < 1:
        return f"{_round_half_up(seconds * 1000)} ms"

    value = seconds
    i = 0
    while i < len(_UNIT_STEPS) and value >= _UNIT_STEPS[i]:
        value /= _UNIT_STEPS[i]
        i += 1
    return f"{value:.2f} {_UNIT_LABELS[i]}"


# ── Collaborator boundaries ────────────────────────────────────────────────


@dataclass(frozen=True)
class Authorization:
    """Wallet connection fact handed to the engine by the wallet layer."""

    connected: bool = False
    address: str | None = None

    def __bool__(self) -> bool:
        return self.connected

    @property
    def label(self) -> str:
        if not self.connected:
            return "Wallet required"
        if not self.address:
            return "Wallet connected"
        return f"{self.address[:6]}..."


class MovementFeed:
    """Synchronous fan-out of movement ticks from the host UI."""

    def __init__(self) -> None:
        self._handlers: list[Callable[[], None]] = []

    def subscribe(self, handler: Callable[[], None]) -> None:
        if handler not in self._handlers:
            self._handlers.append(handler)

    def unsubscribe(self, handler: Callable[[], None]) -> None:
        if handler in self._handlers:
            self._handlers.remove(handler)

    @property
    def subscribers(self) -> int:
        return len(self._handlers)

    def emit(self, count: int = 1) -> None:
        """Deliver *count* movement ticks to every current subscriber."""
        for _ in range(count):
            for handler in list(self._handlers):
                handler()


class CopyIndicator:
    """Transient "copied" flag that clears itself after *delay* seconds.

    A new copy replaces any pending clear, so at most one timer is alive.
    """

    def __init__(self, delay: float = 2.0, timer_factory=threading.Timer) -> None:
        self.delay = delay
        self.copied = False
        self._timer_factory = timer_factory
        self._timer = None

    @property
    def pending(self) -> bool:
        return self._timer is not None

    def mark_copied(self) -> None:
        self._cancel()
        self.copied = True

        def expire() -> None:
            self._expire(timer)

        timer = self._timer_factory(self.delay, expire)
        timer.daemon = True
        self._timer = timer
        timer.start()

    def reset(self) -> None:
        self._cancel()
        self.copied = False

    def _expire(self, timer) -> None:
        # A timer already firing when it was replaced must not clear the new copy.
        if timer is not self._timer:
            return
        self.copied = False
        self._timer = None

    def _cancel(self) -> None:
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None


# ── Generator engine ───────────────────────────────────────────────────────


class EngineState(enum.Enum):
    IDLE = "idle"
    RUNNING = "running"


@dataclass(frozen=True)
class GeneratorState:
    """Observable output published after every state change."""

    password: str = ""
    entropy_bits: float = 0.0
    crack_time_label: str = ""
    running: bool = False

    @property
    def length(self) -> int:
        return len(self.password)

    @property
    def rounded_bits(self) -> int:
        return _round_half_up(self.entropy_bits)


Listener = Callable[[GeneratorState], None]


class GeneratorEngine:
    """Builds a password one character per movement tick while running.

    The engine only runs while authorized.  It listens to the movement feed
    only in the RUNNING state; leaving RUNNING unsubscribes, so no tick can
    arrive after a stop.
    """

    def __init__(
        self,
        random_source: RandomSource | None = None,
        pool: CharacterPool | None = None,
        config: GeneratorConfig | None = None,
        feed: MovementFeed | None = None,
    ) -> None:
        self.random_source = random_source or CryptoRandomSource()
        self.pool = pool or DEFAULT_POOL
        self.config = config or DEFAULT_CONFIG
        self.feed = feed or MovementFeed()

        if self.config.max_length < 1:
            raise ValueError("max_length must be at least 1")
        if self.config.guesses_per_second <= 0:
            raise ValueError("guesses_per_second must be positive")

        self._state = EngineState.IDLE
        self._authorization: Authorization | None = None
        self._password = ""
        self._entropy_bits = 0.0
        self._crack_time_label = ""
        self._listeners: list[Listener] = []

    # --- observable state ---

    @property
    def state(self) -> EngineState:
        return self._state

    @property
    def running(self) -> bool:
        return self._state is EngineState.RUNNING

    @property
    def authorized(self) -> bool:
        return bool(self._authorization)

    @property
    def authorization(self) -> Authorization | None:
        return self._authorization

    @property
    def password(self) -> str:
        return self._password

    @property
    def entropy_bits(self) -> float:
        return self._entropy_bits

    @property
    def crack_time_label(self) -> str:
        return self._crack_time_label

    def snapshot(self) -> GeneratorState:
        return GeneratorState(
            password=self._password,
            entropy_bits=self._entropy_bits,
            crack_time_label=self._crack_time_label,
            running=self.running,
        )

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register *listener* for state updates; returns an unsubscribe hook."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def copy_text(self) -> str:
        """Current password, for the clipboard collaborator."""
        return self._password

    # --- transitions ---

    def set_authorization(self, authorization: Authorization | None) -> None:
        """Record the wallet signal; losing it forces IDLE and a full reset."""
        self._authorization = authorization
        if authorization:
            logger.info("Generator authorized")
            return

        logger.info("Authorization lost; stopping and resetting generator")
        self._stop()
        self._reset()
        self._publish()

    def toggle(self) -> EngineState:
        if not self.authorized:
            logger.debug("Toggle ignored: not authorized")
            return self._state

        if self.running:
            self._stop()
        else:
            self._state = EngineState.RUNNING
            self.feed.subscribe(self.on_tick)
            logger.info("Generator started")
        return self._state

    def on_tick(self) -> None:
        if not self.running:
            return

        ch = self.pool.sample_char(self.random_source.sample())
        password = self._password + ch
        if len(password) > self.config.max_length:
            password = password[-self.config.max_length:]

        self._recompute(password)
        logger.debug("Tick: length=%d bits=%.1f", len(password), self._entropy_bits)
        self._publish()

    def clear(self) -> None:
        self._reset()
        self._publish()

    # --- internals ---

    def _stop(self) -> None:
        self.feed.unsubscribe(self.on_tick)
        if self.running:
            logger.info("Generator stopped")
        self._state = EngineState.IDLE

    def _reset(self) -> None:
        self._password = ""
        self._entropy_bits = 0.0
        self._crack_time_label = ""

    def _recompute(self, password: str) -> None:
        bits = estimate_entropy(password, self.pool)
        label = humanize_seconds(estimate_crack_seconds(bits, self.config.guesses_per_second))
        self._password = password
        self._entropy_bits = bits
        self._crack_time_label = label

    def _publish(self) -> None:
        state = self.snapshot()
        for listener in list(self._listeners):
            listener(state)
