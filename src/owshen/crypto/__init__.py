"""Cryptographic primitives module"""

from owshen.crypto.field import FIELD_MODULUS, FieldElement, to_field

from owshen.crypto.poseidon import (
    POSEIDON_T3,
    PoseidonParams,
    generate_constants,
    permute,
    poseidon,
)

from owshen.crypto.babyjubjub import (
    BASE_POINT,
    IDENTITY,
    SUBGROUP_ORDER,
    Point,
    scalar_mul,
)

__all__ = [
    'FIELD_MODULUS',
    'FieldElement',
    'to_field',
    'POSEIDON_T3',
    'PoseidonParams',
    'generate_constants',
    'permute',
    'poseidon',
    'BASE_POINT',
    'IDENTITY',
    'SUBGROUP_ORDER',
    'Point',
    'scalar_mul',
]
