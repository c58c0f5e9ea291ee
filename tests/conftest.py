"""
Shared test fixtures and utilities for pyassist tests.

This module provides a controllable clock for TTL tests, a small on-disk
TypeScript/Python project, and scripted completion backends.
"""

from __future__ import annotations

import asyncio
from pathlib import Path

import pytest

from pyassist import AssistConfig, CacheStore, CompletionCache, LocalWorkspace

SAMPLE_APP_TS = """import { formatName } from './utils';
import { Logger } from '../lib/logger';
import React from 'react';

export function greet(name: string) {
    // TODO: localize the greeting
    return `Hello, ${formatName(name)}`;
}
"""

SAMPLE_UTILS_TS = """export function formatName(name: string): string {
    return name.trim();
}

export const DEFAULT_NAME = 'world';
"""

SAMPLE_LOGGER_TS = """export class Logger {
    log(message: string) {
        console.log(message);
    }
}
"""

SAMPLE_PYTHON = """import os
from .helpers import load


def process(items):
    # FIXME: handle empty input
    return [load(i) for i in items]


class Processor:
    def run(self):
        return process([])
"""


class FakeClock:
    """Millisecond clock advanced by hand."""

    def __init__(self, start: float = 1_000_000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, ms: float) -> None:
        self.now += ms


class ScriptedBackend:
    """
    A completion backend returning canned responses.

    When ``gate`` is set, every call waits for it, which keeps a request in
    flight for as long as the test needs.
    """

    def __init__(self, response: str = "return a + b;", error: Exception | None = None) -> None:
        self.response = response
        self.error = error
        self.prompts: list[str] = []
        self.gate: asyncio.Event | None = None

    @property
    def calls(self) -> int:
        return len(self.prompts)

    async def complete(self, prompt: str) -> str:
        self.prompts.append(prompt)
        if self.gate is not None:
            await self.gate.wait()
        if self.error is not None:
            raise self.error
        return self.response


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def store(clock: FakeClock) -> CacheStore:
    return CacheStore(max_size=100, clock=clock)


@pytest.fixture
def completion_cache(store: CacheStore) -> CompletionCache:
    return CompletionCache(store, AssistConfig())


@pytest.fixture
def sample_project(tmp_path: Path) -> Path:
    """A small node project with imports, siblings and TODO markers."""
    root = tmp_path / "project"
    (root / "src").mkdir(parents=True)
    (root / "lib").mkdir()
    (root / "py").mkdir()
    (root / "node_modules" / "left-pad").mkdir(parents=True)

    (root / "package.json").write_text('{"name": "sample"}\n')
    (root / "src" / "app.ts").write_text(SAMPLE_APP_TS)
    (root / "src" / "utils.ts").write_text(SAMPLE_UTILS_TS)
    (root / "src" / "notes.md").write_text("# Notes\n")
    (root / "lib" / "logger.ts").write_text(SAMPLE_LOGGER_TS)
    (root / "lib" / "app.test.ts").write_text("import { greet } from '../src/app';\n")
    (root / "py" / "worker.py").write_text(SAMPLE_PYTHON)
    (root / "node_modules" / "left-pad" / "app.js").write_text("// TODO: never seen\n")
    return root


@pytest.fixture
def workspace(sample_project: Path) -> LocalWorkspace:
    return LocalWorkspace([sample_project])


@pytest.fixture
def backend() -> ScriptedBackend:
    return ScriptedBackend()


def pytest_configure(config):
    """Configure pytest with custom markers."""
    config.addinivalue_line("markers", "unit: Unit tests")
    config.addinivalue_line("markers", "integration: Integration tests")
    config.addinivalue_line("markers", "cache: Cache-related tests")
