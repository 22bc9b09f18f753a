#!/usr/bin/env python3
"""Base fuzzing framework for rill.

This module provides a base class for fuzz tests and a runner to execute them.

Usage:
    python -m tests.fuzzing.fuzz [--examples N] [--steps N] [--seed N] [pattern...]

Example:
    python -m tests.fuzzing.fuzz                    # Run all fuzz tests
    python -m tests.fuzzing.fuzz pmap               # Run tests matching 'pmap'
    python -m tests.fuzzing.fuzz --examples 5000    # Run with custom params
"""

import abc
import argparse
import gc
import importlib
import random
import sys
import time
import weakref
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional


def random_key(rng: random.Random, span: int = 50) -> int:
    """Generate a small integer key, so that collisions are frequent."""
    return rng.randint(0, span - 1)


def random_value(rng: random.Random) -> Any:
    """Generate a random hashable value."""
    choice = rng.randint(0, 4)
    if choice == 0:
        return rng.randint(-10000, 10000)
    elif choice == 1:
        return "".join(rng.choices("abcdefghij", k=rng.randint(0, 8)))
    elif choice == 2:
        return None
    elif choice == 3:
        return rng.choice([True, False])
    else:
        return (rng.randint(0, 100), rng.randint(0, 100))


class Fuzzer(abc.ABC):
    """Base class for fuzz tests.

    Subclasses must implement:
        - name: class attribute with the fuzzer name
        - reset(): reset state for a new example
        - do_random_operation(): perform one random operation
        - check_invariants(): verify state is correct

    Optionally override:
        - setup(): called once before running
        - teardown(): called once after running
        - get_stats(): return dict of stats to display
        - release_all(): drop every reference held for the current example

    Objects passed to track() must be garbage once release_all() has run;
    the runner reports the ones that survive as leaks.
    """

    name: str = "unnamed"

    def __init__(self):
        self.rng = random.Random()
        self.operations = 0
        self.op_counts: dict[str, int] = {}
        self._tracked: list[weakref.ref] = []

    def record_op(self, name: str):
        """Record that an operation was performed."""
        self.operations += 1
        self.op_counts[name] = self.op_counts.get(name, 0) + 1

    def track(self, obj: Any) -> Any:
        """Watch obj for leaks. Returns obj."""
        self._tracked.append(weakref.ref(obj))
        return obj

    def survivors(self) -> list[Any]:
        """Tracked objects that are still alive."""
        alive = [ref() for ref in self._tracked]
        return [obj for obj in alive if obj is not None]

    def setup(self):
        """Called once before running. Override if needed."""
        pass

    def teardown(self):
        """Called once after running. Override if needed."""
        pass

    def release_all(self):
        """Release all references to allow GC. Default calls reset()."""
        self.reset()

    @abc.abstractmethod
    def reset(self):
        """Reset state for a new example."""
        pass

    @abc.abstractmethod
    def do_random_operation(self):
        """Perform one random operation."""
        pass

    @abc.abstractmethod
    def check_invariants(self):
        """Verify that the current state is correct.

        Should raise AssertionError if invariants are violated.
        """
        pass

    def get_stats(self) -> dict[str, Any]:
        """Return additional stats to display. Override if needed."""
        return {}


@dataclass
class FuzzResult:
    """Outcome of running one fuzzer."""

    name: str
    passed: bool
    examples: int = 0
    operations: int = 0
    elapsed: float = 0.0
    error: Optional[str] = None
    leaks: list[str] = field(default_factory=list)


class FuzzRunner:
    """Runs fuzz tests and reports results."""

    def __init__(
        self,
        examples: int = 1000,
        steps: int = 200,
        seed: Optional[int] = None,
        leak_check_interval: int = 100,
        verbose: bool = True,
    ):
        self.examples = examples
        self.steps = steps
        self.leak_check_interval = leak_check_interval
        self.verbose = verbose

        if seed is not None:
            self.seed = seed
        else:
            self.seed = random.randint(0, 2**32)

    def _print(self, *args):
        if self.verbose:
            print(*args)

    def _leak_check(self, fuzzer: Fuzzer) -> list[str]:
        fuzzer.release_all()
        gc.collect()
        leaks = [repr(obj) for obj in fuzzer.survivors()]
        fuzzer._tracked.clear()
        return leaks

    def run(self, fuzzer: Fuzzer) -> FuzzResult:
        """Run a fuzzer and return its result."""
        self._print(f"Fuzz: {fuzzer.name}")
        self._print(f"  Examples: {self.examples:,}")
        self._print(f"  Steps per example: {self.steps}")
        self._print(f"  Seed: {self.seed}")
        self._print()

        fuzzer.rng.seed(self.seed)
        result = FuzzResult(name=fuzzer.name, passed=False)
        start_time = time.time()
        last_print = start_time
        example = 0
        step = 0

        fuzzer.setup()

        try:
            for example in range(self.examples):
                fuzzer.reset()

                for step in range(self.steps):
                    fuzzer.do_random_operation()
                    fuzzer.check_invariants()

                if (
                    self.leak_check_interval > 0
                    and (example + 1) % self.leak_check_interval == 0
                ):
                    result.leaks.extend(self._leak_check(fuzzer))

                now = time.time()
                if now - last_print >= 1.0:
                    elapsed = now - start_time
                    rate = (example + 1) / elapsed
                    self._print(
                        f"[{elapsed:6.1f}s] "
                        f"ex:{example + 1:>6,} | "
                        f"ops:{fuzzer.operations:>8,} | "
                        f"{rate:>5.1f}/s"
                    )
                    last_print = now

            result.leaks.extend(self._leak_check(fuzzer))

        except AssertionError as e:
            result.error = f"example {example + 1}, step {step + 1}: {e}"
            self._print()
            self._print(f"FAILED at example {example + 1}, step {step + 1}!")
            self._print(f"  Seed: {self.seed}")
            self._print(f"  Error: {e}")
            return result

        except KeyboardInterrupt:
            result.error = f"interrupted at example {example + 1}"
            self._print()
            self._print(f"Interrupted at example {example + 1}")
            return result

        finally:
            fuzzer.teardown()
            result.examples = example + 1
            result.operations = fuzzer.operations
            result.elapsed = time.time() - start_time

        self._print()
        self._print(
            f"Completed {result.examples:,} examples, "
            f"{result.operations:,} operations in {result.elapsed:.1f}s"
        )
        self._print(f"  Operations: {fuzzer.op_counts}")
        for key, value in fuzzer.get_stats().items():
            self._print(f"  {key}: {value}")

        if result.leaks:
            self._print()
            self._print(f"  FAILED - {len(result.leaks)} object(s) survived release:")
            for leak in result.leaks[:10]:
                self._print(f"    - {leak}")
            return result

        result.passed = True
        self._print()
        self._print("  PASSED")
        return result


def discover_fuzzers() -> list[type[Fuzzer]]:
    """Discover all Fuzzer subclasses in the fuzzing package."""
    fuzzers = []

    fuzzing_dir = Path(__file__).parent

    for path in sorted(fuzzing_dir.glob("fuzz_*.py")):
        module_name = path.stem
        module = importlib.import_module(f".{module_name}", __package__)

        for attr_name in dir(module):
            attr = getattr(module, attr_name)
            if (
                isinstance(attr, type)
                and issubclass(attr, Fuzzer)
                and attr is not Fuzzer
                and attr.__module__ == module.__name__
            ):
                fuzzers.append(attr)

    return fuzzers


def run_suite(
    examples: int = 1000,
    steps: int = 200,
    seed: Optional[int] = None,
    patterns: Optional[list[str]] = None,
    verbose: bool = True,
) -> int:
    """Run the fuzz test suite.

    Args:
        examples: Number of examples per fuzzer
        steps: Steps per example
        seed: Random seed (None for random)
        patterns: Optional list of patterns to filter fuzzers by name
        verbose: Print progress and results

    Returns:
        Exit code (0 for success, 1 for failure)
    """
    fuzzers = discover_fuzzers()

    if patterns:
        fuzzers = [
            cls
            for cls in fuzzers
            if any(p.lower() in cls.name.lower() for p in patterns)
        ]

    if not fuzzers:
        print("No fuzzers matched!")
        return 1

    runner = FuzzRunner(examples=examples, steps=steps, seed=seed, verbose=verbose)
    results = []
    for fuzzer_cls in fuzzers:
        results.append(runner.run(fuzzer_cls()))
        runner._print()
        runner._print("=" * 60)
        runner._print()
        gc.collect()

    failed = [r for r in results if not r.passed]
    if verbose:
        print("Summary")
        print("-" * 40)
        for r in results:
            print(f"  {r.name}: {'PASSED' if r.passed else 'FAILED'}")
        print()
        print(f"Passed: {len(results) - len(failed)}, Failed: {len(failed)}")

    return 0 if not failed else 1


def main():
    parser = argparse.ArgumentParser(description="Run fuzz test suite")
    parser.add_argument(
        "--examples",
        "-n",
        type=int,
        default=1000,
        help="Number of examples per fuzzer (default: 1000)",
    )
    parser.add_argument(
        "--steps",
        "-s",
        type=int,
        default=200,
        help="Steps per example (default: 200)",
    )
    parser.add_argument(
        "--seed",
        type=int,
        default=None,
        help="Random seed for reproducibility",
    )
    parser.add_argument(
        "patterns",
        nargs="*",
        help="Optional patterns to filter fuzzers by name",
    )
    args = parser.parse_args()

    sys.exit(
        run_suite(
            examples=args.examples,
            steps=args.steps,
            seed=args.seed,
            patterns=args.patterns or None,
        )
    )


if __name__ == "__main__":
    # Fuzzers subclass the package module's Fuzzer, not this __main__ copy
    importlib.import_module("tests.fuzzing.fuzz").main()
