"""
Shared fixtures
===============

Building a PoE proof with 277-bit challenges means searching nonces until a
challenge can be certified prime, which takes a while. The parameters every
suite checks against are therefore built once per session.
"""

import pytest

import sys
import os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

from fkps.groups import power, setup
from fkps.params import gen_time_params


@pytest.fixture(scope="session")
def time_params():
    """(pp, proof) with T = 40, 277-bit challenges and a fixed base h."""
    group = setup()
    return gen_time_params(group, t=40, h=power(group.generator, 987654321, group))
