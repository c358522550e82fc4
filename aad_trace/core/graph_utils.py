"""
Trace utilities.
Print and analyse the structure of a recorded trace.
"""

import numpy as np
from typing import Dict, List
from collections import Counter

from ..config import ADConfig


def _fan_outs(entries) -> List[int]:
    fan_outs = [0] * len(entries)
    for entry in entries:
        for slot in entry.operand_slots:
            fan_outs[slot] += 1
    return fan_outs


def get_trace_stats(trace) -> Dict:
    """
    Collect trace statistics (nothing is printed).

    Works on a closed Trace as well as on an open Recording.

    Returns:
        dict with entry/edge counts, fan-in/fan-out figures and an
        operation-kind histogram
    """
    entries = trace.entries
    if not entries:
        return {
            'entries': 0,
            'edges': 0,
            'independents': 0,
            'dependents': 0,
            'max_fan_in': 0,
            'avg_fan_in': 0.0,
            'max_fan_out': 0,
            'avg_fan_out': 0.0,
            'operations': {}
        }

    fan_ins = [len(e.operand_slots) for e in entries]
    fan_outs = _fan_outs(entries)

    return {
        'entries': len(entries),
        'edges': sum(fan_ins),
        'independents': len(trace.independents),
        'dependents': len(trace.dependents),
        'max_fan_in': max(fan_ins),
        'avg_fan_in': float(np.mean(fan_ins)),
        'max_fan_out': max(fan_outs),
        'avg_fan_out': float(np.mean(fan_outs)),
        'operations': dict(Counter(e.kind for e in entries))
    }


def print_trace_summary(trace, detailed: bool = False) -> Dict:
    """
    Print a summary of the trace.

    Args:
        trace: Trace or Recording
        detailed: also list the individual entries (small traces only)

    Returns:
        the get_trace_stats dictionary
    """
    stats = get_trace_stats(trace)
    if stats['entries'] == 0:
        print("Empty trace")
        return stats

    n_entries = stats['entries']
    print("\n" + "="*70)
    print("TRACE SUMMARY")
    print("="*70)
    print(f"Total entries:      {n_entries:,}")
    print(f"Total edges:        {stats['edges']:,}")
    print(f"Independents:       {stats['independents']}")
    print(f"Dependents:         {stats['dependents']}")
    print(f"Max fan-in:         {stats['max_fan_in']}")
    print(f"Avg fan-in:         {stats['avg_fan_in']:.2f}")
    print(f"Max fan-out:        {stats['max_fan_out']}")
    print(f"Avg fan-out:        {stats['avg_fan_out']:.2f}")
    print()
    print("Operation breakdown:")
    for kind, count in Counter(stats['operations']).most_common(10):
        pct = 100.0 * count / n_entries
        print(f"  {kind:12s}: {count:6,} ({pct:5.1f}%)")

    if detailed and n_entries <= ADConfig.DETAIL_LIMIT:
        print()
        print("="*70)
        print("DETAILED ENTRY LIST")
        print("="*70)
        for i, entry in enumerate(trace.entries):
            operand_info = ", ".join(f"Entry{s}" for s in entry.operand_slots)
            print(f"Entry {i:3d}: {entry.kind:12s} <- [{operand_info}]")

    print("="*70 + "\n")
    return stats


def print_trace_graph(trace, max_entries: int = ADConfig.MAX_PRINTED_ENTRIES) -> None:
    """
    Print the trace entry by entry with payloads and local partials.

    Args:
        trace: Trace or Recording
        max_entries: print at most this many entries
    """
    print("\n" + "="*70)
    print("TRACE STRUCTURE")
    print("="*70)

    entries = trace.entries
    if not entries:
        print("Empty trace")
        return

    independents = set(trace.independents)
    dependents = set(trace.dependents)
    for i, entry in enumerate(entries[:max_entries]):
        if entry.operand_slots:
            operand_info = ", ".join(
                f"Entry{s}*{d:.6g}" for s, d in zip(entry.operand_slots, entry.local_partials)
            )
            tag = " [dependent]" if i in dependents else ""
            print(f"Entry {i:4d}: {entry.kind:12s} ({entry.value:10.6f}) <- [{operand_info}]{tag}")
        else:
            tag = "[independent]" if i in independents else "[leaf]"
            print(f"Entry {i:4d}: {entry.kind:12s} ({entry.value:10.6f}) {tag}")

    if len(entries) > max_entries:
        print(f"... ({len(entries) - max_entries} more entries)")

    print("="*70 + "\n")


def analyze_trace_complexity(trace) -> str:
    """
    Text report on the size and shape of the trace.
    """
    stats = get_trace_stats(trace)

    if stats['entries'] == 0:
        return "Empty trace"

    report = []
    report.append("Trace Complexity Analysis:")
    report.append(f"  Total operations: {stats['entries']:,}")
    report.append(f"  Total connections: {stats['edges']:,}")
    report.append(f"  Average branching: {stats['avg_fan_out']:.2f}")

    if stats['entries'] < 1000:
        complexity = "Low"
    elif stats['entries'] < 10000:
        complexity = "Medium"
    else:
        complexity = "High"
    report.append(f"  Complexity level: {complexity}")

    top_ops = sorted(stats['operations'].items(), key=lambda x: x[1], reverse=True)[:3]
    report.append("  Top operations:")
    for op, count in top_ops:
        pct = 100.0 * count / stats['entries']
        report.append(f"    - {op}: {pct:.1f}%")

    return "\n".join(report)
