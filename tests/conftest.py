"""Shared fixtures for the WakeBot test suite.

scripted_rng
    Factory for a random source whose ``randint`` returns the given values
    in order and records every call, so tests can assert exact rolls and
    that no dice were rolled at all.
"""

import os
import random

import pytest

# 測試時不寫入日誌文件
os.environ["LOG_FILE"] = ""


class ScriptedRandom(random.Random):
    def __init__(self, values):
        super().__init__(0)
        self.values = list(values)
        self.calls = []

    def randint(self, a, b):
        self.calls.append((a, b))
        if not self.values:
            raise AssertionError(f"Unexpected roll of 1d{b}")
        return self.values.pop(0)


@pytest.fixture
def scripted_rng():
    return ScriptedRandom
