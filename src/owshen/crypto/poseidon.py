"""Poseidon hash over the BN254 scalar field.

The withdrawal circuit recomputes every tree node and the nullifier with
Poseidon, so the out-of-circuit hash here has to agree with the circuit bit
for bit. The permutation is parameterised by a versioned ``PoseidonParams``
value; round constants and the MDS matrix are derived from the parameters
with the Grain LFSR procedure of the Poseidon reference generator, so no
constant tables are shipped.

Default parameters (``POSEIDON_T3``) follow circomlib's two-input Poseidon:

    - Width t = 3 (one capacity element, two inputs)
    - 8 full rounds, 57 partial rounds
    - S-box x^5
    - State layout [0, a, b], output is state[0]

Example:
    >>> from owshen.crypto.poseidon import poseidon
    >>> poseidon([1, 2]) == poseidon([1, 2])
    True
"""

from collections import deque
from dataclasses import dataclass
from functools import lru_cache
from typing import Iterator, List, Sequence, Tuple

from owshen.crypto.field import FIELD_MODULUS


@dataclass(frozen=True)
class PoseidonParams:
    """A complete, versioned description of one Poseidon instance."""

    version: str
    t: int
    full_rounds: int
    partial_rounds: int
    alpha: int = 5
    modulus: int = FIELD_MODULUS
    field_bits: int = 254

    @property
    def num_inputs(self) -> int:
        return self.t - 1


POSEIDON_T3 = PoseidonParams(
    version="circomlib-bn254-x5-3",
    t=3,
    full_rounds=8,
    partial_rounds=57,
)


def _bits(value: int, width: int) -> List[int]:
    return [int(b) for b in format(value, f"0{width}b")]


def _grain_stream(params: PoseidonParams) -> Iterator[int]:
    """Self-shrinking Grain LFSR seeded from the parameter set."""
    state = deque(
        _bits(1, 2)  # prime field
        + _bits(0, 4)  # x^alpha s-box
        + _bits(params.field_bits, 12)
        + _bits(params.t, 12)
        + _bits(params.full_rounds, 10)
        + _bits(params.partial_rounds, 10)
        + [1] * 30,
        maxlen=80,
    )

    def clock() -> int:
        bit = state[62] ^ state[51] ^ state[38] ^ state[23] ^ state[13] ^ state[0]
        state.append(bit)
        return bit

    for _ in range(160):
        clock()

    while True:
        select = clock()
        output = clock()
        if select:
            yield output


def _take_int(stream: Iterator[int], num_bits: int) -> int:
    value = 0
    for _ in range(num_bits):
        value = (value << 1) | next(stream)
    return value


@lru_cache(maxsize=None)
def generate_constants(params: PoseidonParams) -> Tuple[Tuple[int, ...], Tuple[Tuple[int, ...], ...]]:
    """
    Derive (round_constants, mds_matrix) for a parameter set.

    Round constants are drawn first by rejection sampling, then the
    Cauchy matrix M[i][j] = 1 / (x_i + y_j) from the same stream.

    Returns:
        Tuple of the flat round constant list ((R_F + R_P) * t entries)
        and the t x t MDS matrix
    """
    p = params.modulus
    n = params.field_bits
    t = params.t
    stream = _grain_stream(params)

    round_constants = []
    for _ in range((params.full_rounds + params.partial_rounds) * t):
        value = _take_int(stream, n)
        while value >= p:
            value = _take_int(stream, n)
        round_constants.append(value)

    while True:
        candidates = [_take_int(stream, n) % p for _ in range(2 * t)]
        while len(set(candidates)) != len(candidates):
            candidates = [_take_int(stream, n) % p for _ in range(2 * t)]
        xs, ys = candidates[:t], candidates[t:]
        if any((x + y) % p == 0 for x in xs for y in ys):
            continue
        mds = tuple(tuple(pow(x + y, -1, p) for y in ys) for x in xs)
        return tuple(round_constants), mds


def permute(state: Sequence[int], params: PoseidonParams = POSEIDON_T3) -> List[int]:
    """Apply the Poseidon permutation to a full-width state."""
    if len(state) != params.t:
        raise ValueError(f"State must have exactly {params.t} elements")

    p = params.modulus
    t = params.t
    alpha = params.alpha
    round_constants, mds = generate_constants(params)
    half_full = params.full_rounds // 2
    total_rounds = params.full_rounds + params.partial_rounds

    state = [s % p for s in state]
    for r in range(total_rounds):
        state = [(s + round_constants[r * t + i]) % p for i, s in enumerate(state)]

        if r < half_full or r >= half_full + params.partial_rounds:
            state = [pow(s, alpha, p) for s in state]
        else:
            state[0] = pow(state[0], alpha, p)

        state = [sum(row[j] * state[j] for j in range(t)) % p for row in mds]

    return state


def poseidon(inputs: Sequence[int], params: PoseidonParams = POSEIDON_T3) -> int:
    """Hash exactly ``params.num_inputs`` integers to one field integer."""
    if len(inputs) != params.num_inputs:
        raise ValueError(f"Poseidon instance {params.version} takes {params.num_inputs} inputs")
    return permute([0, *inputs], params)[0]
