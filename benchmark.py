#!/usr/bin/env python3
"""
benchmark.py — Performance benchmark for the Tab Out decision path

Every Tab press lexes the document and asks ``should_jump_over`` for one
position.  This measures that cost on generated Python and C++ buffers,
plus CPU time and memory (tracemalloc, RSS) for each run.

Usage:
    python3 benchmark.py              # Run all benchmarks
    python3 benchmark.py --json       # Output raw JSON results
    python3 benchmark.py --help       # Show help
"""

import gc
import json
import os
import resource
import sys
import time
import tracemalloc

# ── Optional deps ────────────────────────────────────────────────────
try:
    import psutil
    _PSUTIL = True
except ImportError:
    _PSUTIL = False

# ── Paths ────────────────────────────────────────────────────────────
PROJECT_DIR = os.path.dirname(os.path.abspath(__file__))
sys.path.insert(0, PROJECT_DIR)

from jump_over import should_jump_over  # noqa: E402
from syntax_context import PygmentsSyntaxContext, get_lexer, syntax_context_for  # noqa: E402

# ── Helpers ──────────────────────────────────────────────────────────

def _fmt_bytes(n):
    """Human-readable byte size."""
    for unit in ('B', 'KB', 'MB', 'GB'):
        if abs(n) < 1024:
            return f"{n:.1f} {unit}"
        n /= 1024
    return f"{n:.1f} TB"


def _fmt_time(s):
    if s < 0.001:
        return f"{s * 1_000_000:.0f} µs"
    if s < 1:
        return f"{s * 1_000:.2f} ms"
    return f"{s:.3f} s"


def _rss_bytes():
    """Current RSS via psutil, falling back to getrusage."""
    if _PSUTIL:
        return psutil.Process().memory_info().rss
    return resource.getrusage(resource.RUSAGE_SELF).ru_maxrss * 1024


# ── Generate test data ───────────────────────────────────────────────

def _generate_python_code(lines=1000):
    """Generate a Python source file of roughly the given line count."""
    chunks = ['import os\nimport sys\n\n']
    func_count = 0
    i = 3
    while i < lines:
        func_count += 1
        body = [
            f'def function_{func_count}(x, y):',
            f'    # compute result for function {func_count}, it\'s "quoted"',
            f'    msg = "hello from function_{func_count}"',
            f"    data = [1, 2, 3, {{'k': x}}]",
            f'    if x > y:',
            f'        return f"{{msg}}: {{data[0]}}"',
            f'    return (x, y)',
            f'',
        ]
        chunks.append('\n'.join(body) + '\n')
        i += len(body)
    return ''.join(chunks)


def _generate_cpp_code(lines=1000):
    """Generate a C++ source file of roughly the given line count."""
    chunks = ['#include <iostream>\n#include "local.h"\nusing namespace std;\n\n']
    func_count = 0
    i = 4
    while i < lines:
        func_count += 1
        body = [
            f'int function_{func_count}(int x, double y) {{',
            f'    // compute result for function {func_count}, it\'s fine',
            f'    string msg = "hello from function_{func_count}";',
            f"    char c = 'x';",
            f'    /* multi-line',
            f'       "comment" block */',
            f'    return x > 0 ? (int)y : x;',
            f'}}',
            f'',
        ]
        chunks.append('\n'.join(body) + '\n')
        i += len(body)
    return ''.join(chunks)


def _tab_positions(code, limit=500):
    """Offsets in front of characters a user would plausibly Tab over."""
    positions = [i for i, ch in enumerate(code) if ch in ')]}>:;`\'"']
    step = max(1, len(positions) // limit)
    return positions[::step][:limit]


# ── Benchmark functions ──────────────────────────────────────────────

class BenchmarkResult:
    __slots__ = ('name', 'cpu_time', 'wall_time', 'mem_before', 'mem_after',
                 'tracemalloc_peak', 'extra')

    def __init__(self, name):
        self.name = name
        self.cpu_time = 0.0
        self.wall_time = 0.0
        self.mem_before = 0
        self.mem_after = 0
        self.tracemalloc_peak = 0
        self.extra = {}

    def to_dict(self):
        d = {
            'name': self.name,
            'cpu_time_s': round(self.cpu_time, 6),
            'wall_time_s': round(self.wall_time, 6),
            'mem_before_bytes': self.mem_before,
            'mem_after_bytes': self.mem_after,
            'mem_delta_bytes': self.mem_after - self.mem_before,
            'tracemalloc_peak_bytes': self.tracemalloc_peak,
        }
        if self.extra:
            d['extra'] = self.extra
        return d


def _run_bench(name, func, *args, **kwargs):
    """Run a benchmark function with full instrumentation."""
    gc.collect()

    r = BenchmarkResult(name)
    r.mem_before = _rss_bytes()

    tracemalloc.start()
    t0_cpu = time.process_time()
    t0_wall = time.perf_counter()

    result = func(*args, **kwargs)

    t1_cpu = time.process_time()
    t1_wall = time.perf_counter()
    _, peak = tracemalloc.get_traced_memory()
    tracemalloc.stop()

    r.cpu_time = t1_cpu - t0_cpu
    r.wall_time = t1_wall - t0_wall
    r.mem_after = _rss_bytes()
    r.tracemalloc_peak = peak

    if isinstance(result, dict):
        r.extra = result

    return r


# ── Individual benchmarks ────────────────────────────────────────────

def bench_lexer_cache():
    """Measure cold vs warm lexer lookup."""
    get_lexer.cache_clear()

    def _do():
        t0 = time.perf_counter()
        get_lexer('python')
        cold = time.perf_counter() - t0
        t0 = time.perf_counter()
        for _ in range(1000):
            get_lexer('python')
        warm = time.perf_counter() - t0
        return {'cold_ms': round(cold * 1000, 3), 'warm_1000x_ms': round(warm * 1000, 3)}

    return _run_bench("1. Lexer Cache (cold vs warm)", _do)


def _bench_scan(label, code, language):
    def _do():
        ctx = PygmentsSyntaxContext(code, language)
        ctx.string_depth(0)
        return {
            'lines': code.count('\n'),
            'chars': len(code),
            'string_spans': len(ctx._string_spans),
            'comment_spans': len(ctx._comment_spans),
        }

    return _run_bench(label, _do)


def bench_scan_python():
    return _bench_scan("2. Context Scan (Python, 1000 lines)", _generate_python_code(1000), 'python')


def bench_scan_cpp_large():
    return _bench_scan("3. Context Scan (C++, 10,000 lines)", _generate_cpp_code(10_000), 'cpp')


def _bench_tab_presses(label, code, language):
    """One fresh context per press, as the editor does."""
    positions = _tab_positions(code)

    def _do():
        jumps = 0
        worst = 0.0
        for pos in positions:
            t0 = time.perf_counter()
            ctx = syntax_context_for(code, language)
            if should_jump_over(code[pos], pos, ctx):
                jumps += 1
            worst = max(worst, time.perf_counter() - t0)
        return {
            'presses': len(positions),
            'jumps': jumps,
            'worst_press_ms': round(worst * 1000, 3),
        }

    return _run_bench(label, _do)


def bench_tab_python():
    return _bench_tab_presses("4. Tab Presses (Python, 1000 lines)", _generate_python_code(1000), 'python')


def bench_tab_cpp():
    return _bench_tab_presses("5. Tab Presses (C++, 1000 lines)", _generate_cpp_code(1000), 'cpp')


def bench_tab_plain_text():
    return _bench_tab_presses("6. Tab Presses (plain text)", _generate_python_code(1000), 'text')


# ── Report ───────────────────────────────────────────────────────────

_DIVIDER = "═" * 72
_THIN_DIV = "─" * 70


def print_report(results):
    print()
    print(_DIVIDER)
    print("  Tabjump — Tab Out Benchmark Report")
    print(_DIVIDER)
    print()

    for r in results:
        print(f"  ▸ {r.name}")
        print(f"    {'CPU time:':<22} {_fmt_time(r.cpu_time):<16} {'Wall time:':<14} {_fmt_time(r.wall_time)}")

        mem_delta = r.mem_after - r.mem_before
        line = f"    {'Memory (RSS):':<22} {_fmt_bytes(r.mem_after):<16}"
        if mem_delta != 0:
            sign = '+' if mem_delta > 0 else ''
            line += f" {'Δ RSS:':<14} {sign}{_fmt_bytes(mem_delta)}"
        print(line)

        if r.tracemalloc_peak > 0:
            print(f"    {'tracemalloc peak:':<22} {_fmt_bytes(r.tracemalloc_peak)}")

        if r.extra:
            print(f"    {'Details:':<22}")
            for k, v in r.extra.items():
                print(f"      {k}: {v}")

        print(f"  {_THIN_DIV}")

    print()
    print(_DIVIDER)
    print("  Benchmark complete")
    print(_DIVIDER)
    print()


# ── Main ─────────────────────────────────────────────────────────────

def main():
    json_mode = '--json' in sys.argv
    if '--help' in sys.argv:
        print(__doc__)
        return

    benchmarks = [
        bench_lexer_cache,
        bench_scan_python,
        bench_scan_cpp_large,
        bench_tab_python,
        bench_tab_cpp,
        bench_tab_plain_text,
    ]

    if not json_mode:
        print("\n  ⏳ Running Tab Out benchmarks...\n")

    results = []
    for fn in benchmarks:
        try:
            r = fn()
            results.append(r)
            if not json_mode:
                print(f"  ✓ {r.name}")
        except Exception as e:
            print(f"  ✗ {fn.__name__}: {e}", file=sys.stderr)

    if json_mode:
        print(json.dumps([r.to_dict() for r in results], indent=2))
    else:
        print_report(results)


if __name__ == '__main__':
    main()
