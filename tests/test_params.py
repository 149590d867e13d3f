"""
Test Suite for Scheme Parameters
================================

Covers gen_time_params, the time-parameter proof, validation, and the JSON
parameter file round trip.
"""

import dataclasses
import json

import pytest

import sys
import os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

from fkps import params as params_module
from fkps.config import config
from fkps.errors import MalformedInputError
from fkps.groups import op, power, setup, square_repeatedly
from fkps.params import (
    dump_scheme_params, gen_time_params, get_scheme_params, load_scheme_params, validate_params,
)
from fkps.verify import verify_time_params


@pytest.fixture(scope="module")
def generated(time_params):
    return time_params


def test_time_relation(generated):
    pp, proof = generated
    assert pp.t == 40
    assert pp.challenge_bits == 277
    assert pp.z == square_repeatedly(pp.h, 40, pp.group)
    assert verify_time_params(pp, proof)


def test_time_proof_rejects_other_z(generated):
    pp, proof = generated
    bad = dataclasses.replace(pp, z=op(pp.z, 2, pp.group))
    assert not verify_time_params(bad, proof)


def test_gen_rejects_zero_delay():
    with pytest.raises(MalformedInputError):
        gen_time_params(setup(), t=0)


def test_gen_rejects_short_challenges():
    with pytest.raises(MalformedInputError):
        gen_time_params(setup(), t=40, challenge_bits=64)


def test_validate_params(generated):
    pp, _ = generated
    assert validate_params(pp)
    m = pp.group.modulus
    assert not validate_params(dataclasses.replace(pp, h=m - pp.h))
    assert not validate_params(dataclasses.replace(pp, z=0))
    assert not validate_params(dataclasses.replace(pp, t=0))
    assert not validate_params(dataclasses.replace(pp, challenge_bits=1))
    assert not validate_params(dataclasses.replace(pp, challenge_bits=255))
    assert validate_params(dataclasses.replace(pp, challenge_bits=256))


# ============================================================================
# Parameter files
# ============================================================================

def test_dump_load_roundtrip(generated, tmp_path):
    pp, _ = generated
    path = str(tmp_path / "params.json")
    dump_scheme_params(pp, path)
    assert load_scheme_params(path) == pp


def _write(tmp_path, content):
    path = tmp_path / "params.json"
    path.write_text(content)
    return str(path)


def test_load_rejects_invalid_json(tmp_path):
    with pytest.raises(MalformedInputError):
        load_scheme_params(_write(tmp_path, "{not json"))


def test_load_rejects_non_object(tmp_path):
    with pytest.raises(MalformedInputError):
        load_scheme_params(_write(tmp_path, "[1, 2, 3]"))


def test_load_rejects_missing_field(generated, tmp_path):
    pp, _ = generated
    path = str(tmp_path / "params.json")
    dump_scheme_params(pp, path)
    with open(path) as fh:
        data = json.load(fh)
    del data['z']
    with pytest.raises(MalformedInputError):
        load_scheme_params(_write(tmp_path, json.dumps(data)))


def test_load_rejects_bad_hex(generated, tmp_path):
    pp, _ = generated
    path = str(tmp_path / "params.json")
    dump_scheme_params(pp, path)
    with open(path) as fh:
        data = json.load(fh)
    data['h'] = "not-hex"
    with pytest.raises(MalformedInputError):
        load_scheme_params(_write(tmp_path, json.dumps(data)))


def test_load_rejects_non_canonical_base(generated, tmp_path):
    pp, _ = generated
    path = str(tmp_path / "params.json")
    dump_scheme_params(dataclasses.replace(pp, h=pp.group.modulus - pp.h), path)
    with pytest.raises(MalformedInputError):
        load_scheme_params(path)


def test_load_rejects_short_challenges(generated, tmp_path):
    pp, _ = generated
    path = str(tmp_path / "params.json")
    dump_scheme_params(dataclasses.replace(pp, challenge_bits=64), path)
    with pytest.raises(MalformedInputError):
        load_scheme_params(path)


def test_get_scheme_params_from_config(generated, tmp_path, monkeypatch):
    pp, _ = generated
    path = str(tmp_path / "params.json")
    dump_scheme_params(pp, path)

    monkeypatch.setattr(config, 'params_file', path)
    params_module.get_scheme_params.cache_clear()
    try:
        assert get_scheme_params() == pp
        assert get_scheme_params() is get_scheme_params()
    finally:
        params_module.get_scheme_params.cache_clear()


def test_get_scheme_params_requires_file(monkeypatch):
    monkeypatch.setattr(config, 'params_file', '')
    params_module.get_scheme_params.cache_clear()
    try:
        with pytest.raises(MalformedInputError):
            get_scheme_params()
    finally:
        params_module.get_scheme_params.cache_clear()


@pytest.mark.slow
def test_random_base_is_a_power_of_the_generator():
    group = setup(modulus=23 * 29, generator=2)
    pp, proof = gen_time_params(group, t=3)
    assert pp.h in {min(e, group.modulus - e) for e in (power(2, k, group) for k in range(group.modulus))}
    assert verify_time_params(pp, proof)
